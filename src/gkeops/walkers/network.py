from google.cloud import compute_v1
from tenacity import retry

from ..clients import get_firewalls_client, get_networks_client, get_subnetworks_client
from ..core import RETRY_CONFIG
from ..logger import logger
from ..schemas.compute import GCPNetwork, GCPSubnetwork


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def list_networks(project_id: str, region: str) -> list[GCPNetwork]:
    """VPCs that have at least one subnetwork in the region."""
    client = get_networks_client()
    results = []
    for net in client.list(project=project_id):
        subnets = list(net.subnetworks) if net.subnetworks else []
        if not any(f"regions/{region}/" in s for s in subnets):
            continue
        results.append(GCPNetwork(name=net.name, id=str(net.id), subnetworks=subnets))
    return sorted(results, key=lambda n: n.name)


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def list_subnetworks(project_id: str, region: str) -> list[GCPSubnetwork]:
    client = get_subnetworks_client()
    results = [
        GCPSubnetwork(
            name=sn.name,
            id=str(sn.id),
            region=region,
            cidr_range=sn.ip_cidr_range,
            network=sn.network.split("/")[-1],
        )
        for sn in client.list(project=project_id, region=region)
    ]
    return sorted(results, key=lambda s: s.name)


def used_master_ranges(project_id: str) -> list[str]:
    """
    Master CIDR ranges of existing private GKE clusters, read from the
    ``gke-<cluster>-<id>-master`` firewall rules GKE creates. Clusters
    created without those rules are not detected.
    """
    ranges: list[str] = []
    try:
        client = get_firewalls_client()
        request = compute_v1.ListFirewallsRequest(
            project=project_id, filter="name eq gke-.*-.*-master"
        )
        for fw in client.list(request=request):
            if fw.disabled or fw.direction != "INGRESS":
                continue
            ranges.extend(fw.source_ranges)
    except Exception as e:
        logger.warning(f"Failed to list master firewall rules for {project_id}: {e}")

    return sorted(ranges)
