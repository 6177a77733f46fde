from __future__ import annotations

from functools import lru_cache
from typing import Any

from google.cloud import compute_v1, container_v1

# Shared Client Registry (Lazy-loaded and cached)
# Used by the read-only walkers and as the defaults of GcpGateway.


@lru_cache(maxsize=1)
def get_networks_client() -> Any:
    return compute_v1.NetworksClient()


@lru_cache(maxsize=1)
def get_subnetworks_client() -> Any:
    return compute_v1.SubnetworksClient()


@lru_cache(maxsize=1)
def get_firewalls_client() -> Any:
    return compute_v1.FirewallsClient()


@lru_cache(maxsize=1)
def get_compute_instances_client() -> Any:
    return compute_v1.InstancesClient()


@lru_cache(maxsize=1)
def get_zones_client() -> Any:
    return compute_v1.ZonesClient()


@lru_cache(maxsize=1)
def get_regions_client() -> Any:
    return compute_v1.RegionsClient()


@lru_cache(maxsize=1)
def get_projects_client() -> Any:
    return compute_v1.ProjectsClient()


@lru_cache(maxsize=1)
def get_machine_types_client() -> Any:
    return compute_v1.MachineTypesClient()


@lru_cache(maxsize=1)
def get_gke_client() -> Any:
    return container_v1.ClusterManagerClient()
