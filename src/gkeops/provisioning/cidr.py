"""
Lowest-address-first allocation of fixed-size blocks inside a parent range.

The parent is split into 2 ** (block_prefix - parent.prefixlen) equal blocks,
indexed from the parent's base address. A used range marks every block it
overlaps; a range that does not start on a block boundary counts for the
block its base address falls into. Ranges outside the parent are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from ipaddress import IPv4Network

from ..core import MASTER_CIDR_PARENT, MASTER_CIDR_PREFIX

CidrBlock = IPv4Network


def _as_block(value: str | IPv4Network) -> IPv4Network:
    if isinstance(value, IPv4Network):
        return value
    return IPv4Network(value, strict=False)


def next_available_block(
    used_ranges: Iterable[str | IPv4Network],
    parent: str | IPv4Network = MASTER_CIDR_PARENT,
    block_prefix: int = MASTER_CIDR_PREFIX,
) -> CidrBlock | None:
    """Return the first unused ``/block_prefix`` inside ``parent``, or None."""
    parent_net = _as_block(parent)
    if block_prefix < parent_net.prefixlen or block_prefix > 32:
        raise ValueError(
            f"/{block_prefix} blocks do not fit inside {parent_net.with_prefixlen}"
        )

    slots = 2 ** (block_prefix - parent_net.prefixlen)
    block_size = 2 ** (32 - block_prefix)
    base = int(parent_net.network_address)
    available = [True] * slots

    for used in used_ranges:
        net = _as_block(used)
        # Offsets in block units; floor division truncates misaligned bases
        first = (int(net.network_address) - base) // block_size
        last = (int(net.broadcast_address) - base) // block_size
        if last < 0 or first >= slots:
            continue
        for index in range(max(first, 0), min(last, slots - 1) + 1):
            available[index] = False

    for index, free in enumerate(available):
        if free:
            return IPv4Network((base + index * block_size, block_prefix))
    return None
