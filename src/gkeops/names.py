"""Names of the ancillary resources created for a cluster."""

PREFIX = "gke-ops"


def network_name(cluster: str) -> str:
    return f"{PREFIX}-{cluster}-network"


def subnetwork_name(cluster: str) -> str:
    return f"{PREFIX}-{cluster}-network-private-subnet"


def bastion_name(cluster: str) -> str:
    return f"{PREFIX}-{cluster}-bastion"


def firewall_rule_name(cluster: str) -> str:
    return f"{PREFIX}-{cluster}-bastion-allow-ssh"


def router_name(cluster: str) -> str:
    return f"{PREFIX}-{cluster}-cloud-router"


def nat_name(cluster: str) -> str:
    return f"{PREFIX}-{cluster}-cloud-nat"


def node_pool_name(cluster: str, index: int) -> str:
    return f"{cluster}-np-{index}"
