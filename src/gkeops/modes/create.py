import argparse
import re
import threading
from ipaddress import IPv4Network
from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

from .. import reporter
from ..core import (
    ACCESS_LEVELS,
    CUSTOM_ACCESS_SCOPES,
    DEFAULT_ACCESS_SCOPES,
    DEFAULT_MASTER_CIDR,
    FULL_ACCESS_SCOPES,
)
from ..errors import ProvisionError, ResourceConflict
from ..gateway.base import ResourceGateway
from ..logger import logger
from ..names import network_name, subnetwork_name
from ..provisioning.cidr import next_available_block
from ..provisioning.create import ProvisioningOrchestrator
from ..provisioning.poller import OperationPoller
from ..schemas.cluster import ClusterSpec, WorkerGroupSpec
from ..walkers import compute, network
from .prompts import choose, choose_many, prompt_until_valid

CLUSTER_NAME_RE = re.compile(r"^[a-z]([-a-z0-9]{0,30}[a-z0-9])?$")

DEFAULT_NETWORK = "Use the default network"
EXISTING_NETWORK = "Select an existing network"
CREATE_NETWORK = "Create a new network"


def _valid_master_cidr(value: str, used: list[str]) -> bool:
    try:
        block = IPv4Network(value, strict=True)
    except ValueError:
        return False
    if block.prefixlen != 28 or not block.is_private:
        return False
    return not any(block.overlaps(IPv4Network(u, strict=False)) for u in used)


def configure_master_cidr(project_id: str, console: Console) -> str:
    """Pick a free /28 for the private master, asking only when none is left."""
    used = network.used_master_ranges(project_id)
    block = next_available_block(used)
    if block is not None:
        logger.info(f"Using master IPv4 CIDR range {block}")
        return str(block)

    if used:
        console.print("Master CIDR ranges already in use:")
        for r in used:
            console.print(f"  ∙ {r}")
    console.print(
        "The master range must be a valid, non-overlapping private /28 block (RFC 1918)."
    )
    return prompt_until_valid(
        lambda: Prompt.ask("IPv4 CIDR block for the master(s)", console=console),
        lambda value: _valid_master_cidr(value, used),
        console,
        "Needs to be a valid, non-overlapping CIDR range!",
    )


def configure_access_scopes(console: Console) -> tuple[str, ...]:
    level = ACCESS_LEVELS[
        choose(console, "Access scopes for the worker nodes", list(ACCESS_LEVELS))
    ]
    if level == "all":
        return tuple(FULL_ACCESS_SCOPES.values())

    console.print("The GKE recommended scopes are always enabled:")
    for label in DEFAULT_ACCESS_SCOPES:
        console.print(f"  • {label}")
    scopes = list(DEFAULT_ACCESS_SCOPES.values())
    if level == "custom":
        picked = choose_many(console, "Additional scopes", list(CUSTOM_ACCESS_SCOPES))
        scopes = [CUSTOM_ACCESS_SCOPES[label] for label in picked] + scopes
    return tuple(scopes)


def configure_worker_group(machine_types: list[str], console: Console) -> WorkerGroupSpec:
    machine_type = choose(
        console, "Machine type for this group", machine_types, default=machine_types[0]
    )
    if machine_type == "f1-micro":
        console.print(
            "[yellow]f1-micro clusters must contain at least 3 nodes.[/yellow]"
        )

    if Confirm.ask("Enable autoscaling for this group?", console=console, default=False):
        min_size = IntPrompt.ask("Minimum number of nodes per zone", console=console, default=1)
        max_size = prompt_until_valid(
            lambda: IntPrompt.ask("Maximum number of nodes per zone", console=console, default=2),
            lambda value: value >= max(min_size, 1),
            console,
            "The maximum must be at least the minimum and at least 1!",
        )
        sizes = {
            "autoscaling": True,
            "desired_capacity": min_size,
            "min_size": min_size,
            "max_size": max_size,
        }
    else:
        desired = prompt_until_valid(
            lambda: IntPrompt.ask("Number of nodes per zone", console=console, default=1),
            lambda value: value > 0,
            console,
            "Number must be at least 1!",
        )
        sizes = {"autoscaling": False, "desired_capacity": desired}

    return WorkerGroupSpec(
        machine_type=machine_type,
        oauth_scopes=configure_access_scopes(console),
        **sizes,
    )


def configure_workers(project_id: str, region: str, console: Console) -> list[WorkerGroupSpec]:
    console.print("\n[bold]Let's configure your worker group(s)![/bold]")
    machine_types = compute.list_machine_types(project_id, region)
    workers = [configure_worker_group(machine_types, console)]
    while Confirm.ask("Create another worker group?", console=console, default=False):
        workers.append(configure_worker_group(machine_types, console))
    return workers


def configure_network(
    project_id: str, region: str, cluster: str, console: Console
) -> dict[str, object]:
    mode = choose(
        console,
        "Cluster network",
        [DEFAULT_NETWORK, EXISTING_NETWORK, CREATE_NETWORK],
        default=CREATE_NETWORK,
    )
    if mode == CREATE_NETWORK:
        return {
            "custom_network": True,
            "network": network_name(cluster),
            "subnetwork": subnetwork_name(cluster),
        }
    if mode == DEFAULT_NETWORK:
        return {"custom_network": False, "network": "default", "subnetwork": "default"}

    console.print(
        "[yellow]Warning:[/yellow] existing networks other than the default one "
        "might not be configured correctly for GKE."
    )
    networks = network.list_networks(project_id, region)
    net = choose(console, "Network", [n.name for n in networks] or ["default"])
    subnets = [s.name for s in network.list_subnetworks(project_id, region) if s.network == net]
    subnet = choose(console, "Subnetwork", subnets or ["default"])
    return {"custom_network": False, "network": net, "subnetwork": subnet}


def gather_cluster_spec(
    project_id: str, region: str, existing: list[str], console: Console
) -> ClusterSpec:
    name = prompt_until_valid(
        lambda: Prompt.ask("Cluster name", console=console),
        lambda n: bool(CLUSTER_NAME_RE.match(n)) and n not in existing,
        console,
        "That name is invalid or already used! Please try a different name!",
    )
    net = configure_network(project_id, region, name, console)

    private = Confirm.ask(
        "Should nodes have internal IP addresses only? (private cluster)",
        console=console,
        default=True,
    )
    master_cidr = configure_master_cidr(project_id, console) if private else DEFAULT_MASTER_CIDR
    stackdriver = Confirm.ask(
        "Enable Cloud Operations (Stackdriver) logging and monitoring?",
        console=console,
        default=False,
    )
    workers = configure_workers(project_id, region, console)

    return ClusterSpec(
        name=name,
        project_id=project_id,
        region=region,
        enable_private_nodes=private,
        master_ipv4_cidr_block=master_cidr,
        enable_stackdriver=stackdriver,
        workers=workers,
        **net,
    )


def load_cluster_spec(path: str) -> ClusterSpec:
    return ClusterSpec.model_validate_json(Path(path).read_text())


def ensure_name_available(spec: ClusterSpec, existing: list[str]) -> None:
    if spec.name in existing:
        raise ResourceConflict(f"A cluster named {spec.name} already exists in {spec.region}")


def run_create(
    args: argparse.Namespace,
    gateway: ResourceGateway,
    console: Console,
    cancel: threading.Event | None = None,
) -> int:
    parent = f"projects/{args.project_id}/locations/{args.region}"
    existing = gateway.list_cluster_names(parent)
    reporter.print_cluster_list(existing, args.region, console)

    if args.config:
        spec = load_cluster_spec(args.config)
    else:
        spec = gather_cluster_spec(args.project_id, args.region, existing, console)
    ensure_name_available(spec, existing)

    reporter.print_settings(spec, console)
    reporter.print_quotas(compute.get_quotas(spec.project_id, spec.region), spec.region, console)
    console.print("[bold]Note:[/bold] this will take about 5 minutes")

    if not args.yes and not Confirm.ask("Create the cluster?", console=console, default=False):
        console.print("[yellow]Aborting...[/yellow]")
        return 0

    def confirm_rollback(err: ProvisionError) -> bool:
        reporter.print_provision_failure(err, console)
        if args.yes:
            return True
        return Confirm.ask(
            "Clean up the resources already created?", console=console, default=True
        )

    poller = OperationPoller(
        gateway, interval=args.poll_interval, timeout=args.timeout, cancel=cancel
    )
    orchestrator = ProvisioningOrchestrator(gateway, poller, confirm_rollback=confirm_rollback)
    try:
        result = orchestrator.create(spec)
    except ProvisionError as err:
        if err.rollback is not None:
            reporter.print_teardown_report(err.rollback, console, "Rollback")
        return 1

    reporter.print_access_instructions(result, console)
    return 0
