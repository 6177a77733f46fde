"""
Builds the GKE CreateClusterRequest from a ClusterSpec.

Optional blocks (node pool autoscaling, private cluster config) are only
passed to the message constructors when they apply, so an unset block stays
unset on the wire.
"""

from __future__ import annotations

from google.cloud import container_v1

from ..core import CLUSTER_VERSION, LOGGING_SERVICE, MONITORING_SERVICE
from ..names import node_pool_name
from ..schemas.cluster import (
    AuthorizedNetwork,
    ClusterSpec,
    MasterAuthorizedNetworks,
    WorkerGroupSpec,
)


def with_bastion_access(spec: ClusterSpec, bastion_ip: str) -> ClusterSpec:
    """Authorize only the bastion's private address to reach the master."""
    authorized = MasterAuthorizedNetworks(
        enabled=True,
        cidr_blocks=(
            AuthorizedNetwork(display_name="bastion", cidr_block=f"{bastion_ip}/32"),
        ),
    )
    return spec.model_copy(update={"master_authorized_networks": authorized})


def build_node_pool(
    cluster: str, index: int, worker: WorkerGroupSpec
) -> container_v1.NodePool:
    fields = {
        "name": node_pool_name(cluster, index),
        "initial_node_count": worker.desired_capacity,
        "config": container_v1.NodeConfig(
            machine_type=worker.machine_type,
            oauth_scopes=list(worker.oauth_scopes),
        ),
        "management": container_v1.NodeManagement(auto_upgrade=True, auto_repair=True),
    }
    if worker.autoscaling:
        fields["autoscaling"] = container_v1.NodePoolAutoscaling(
            enabled=True,
            min_node_count=worker.min_size,
            max_node_count=worker.max_size,
        )
    return container_v1.NodePool(**fields)


def build_master_authorized_networks(
    config: MasterAuthorizedNetworks,
) -> container_v1.MasterAuthorizedNetworksConfig:
    return container_v1.MasterAuthorizedNetworksConfig(
        enabled=config.enabled,
        cidr_blocks=[
            container_v1.MasterAuthorizedNetworksConfig.CidrBlock(
                display_name=block.display_name, cidr_block=block.cidr_block
            )
            for block in config.cidr_blocks
        ],
    )


def build_create_request(spec: ClusterSpec) -> container_v1.CreateClusterRequest:
    project = spec.project_id
    fields = {
        "name": spec.name,
        "initial_cluster_version": CLUSTER_VERSION,
        "ip_allocation_policy": container_v1.IPAllocationPolicy(
            use_ip_aliases=True, create_subnetwork=False
        ),
        "logging_service": LOGGING_SERVICE if spec.enable_stackdriver else "none",
        "monitoring_service": MONITORING_SERVICE if spec.enable_stackdriver else "none",
        "network": f"projects/{project}/global/networks/{spec.network}",
        "subnetwork": f"projects/{project}/regions/{spec.region}/subnetworks/{spec.subnetwork}",
        "node_pools": [
            build_node_pool(spec.name, index, worker)
            for index, worker in enumerate(spec.workers)
        ],
        "master_authorized_networks_config": build_master_authorized_networks(
            spec.master_authorized_networks
        ),
    }
    if spec.enable_private_nodes:
        fields["private_cluster_config"] = container_v1.PrivateClusterConfig(
            enable_private_nodes=True,
            enable_private_endpoint=True,
            master_ipv4_cidr_block=spec.master_ipv4_cidr_block,
        )

    return container_v1.CreateClusterRequest(
        parent=spec.parent, cluster=container_v1.Cluster(**fields)
    )
