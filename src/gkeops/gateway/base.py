"""
Provider interface consumed by the orchestrators.

Compute calls block until their own zonal/regional/global operation is done,
so they return the finished resource. Cluster calls return an
OperationHandle that the OperationPoller follows.

Existence checks return False for a missing resource; they never raise
NotFound. SDK-backed delete calls on a missing resource raise
``google.api_core.exceptions.NotFound``.
"""

from __future__ import annotations

from typing import Protocol

from ..schemas.cluster import ClusterSpec
from ..schemas.resources import (
    InstanceInfo,
    OperationHandle,
    OperationState,
)


class ResourceGateway(Protocol):
    project_id: str

    # Networks
    def create_network(self, name: str) -> None:
        """Create a custom-mode VPC with regional routing."""

    def delete_network(self, name: str) -> None: ...

    def network_exists(self, name: str) -> bool: ...

    # Subnetworks
    def create_subnetwork(
        self, network: str, name: str, region: str, cidr: str
    ) -> None:
        """Create a subnetwork with Private Google Access enabled."""

    def delete_subnetwork(self, region: str, name: str) -> None: ...

    def subnetwork_exists(self, region: str, name: str) -> bool: ...

    # Bastion instance
    def create_bastion(self, spec: ClusterSpec, name: str) -> InstanceInfo:
        """Create the bastion VM on the cluster's subnetwork. Returns its name and zone."""

    def describe_instance(self, zone: str, name: str) -> InstanceInfo:
        """Read an instance's private and public addresses."""

    def delete_instance(self, zone: str, name: str) -> None: ...

    def list_instances(self, name: str) -> list[InstanceInfo]:
        """Every instance in the project whose name matches ``name`` (a regex)."""

    # Firewall rules
    def create_firewall_rule(self, name: str, network: str, target_tag: str) -> None:
        """Allow SSH from anywhere to instances carrying ``target_tag``."""

    def delete_firewall_rule(self, name: str) -> None: ...

    def firewall_exists(self, name: str) -> bool: ...

    # gcloud CLI backed operations
    def authenticate_cli(self) -> None: ...

    def create_router(self, name: str, network: str, region: str) -> None: ...

    def delete_router(self, name: str, region: str) -> None: ...

    def router_exists(self, name: str, region: str) -> bool: ...

    def create_nat(self, name: str, router: str, region: str) -> None: ...

    def delete_nat(self, name: str, router: str, region: str) -> None: ...

    def nat_exists(self, name: str, router: str, region: str) -> bool: ...

    # Clusters
    def create_cluster(self, request: object) -> OperationHandle:
        """Submit a CreateClusterRequest. Raises ValidationError if rejected."""

    def delete_cluster(self, path: str) -> OperationHandle: ...

    def list_cluster_names(self, parent: str) -> list[str]: ...

    def get_operation(self, path: str) -> OperationState: ...
