from __future__ import annotations

from ..errors import DestroyError
from ..gateway.base import ResourceGateway
from ..logger import logger
from ..names import (
    bastion_name,
    firewall_rule_name,
    nat_name,
    network_name,
    router_name,
    subnetwork_name,
)
from .poller import OperationPoller
from .teardown import BastionChooser, Teardown, TeardownReport


class DestructionOrchestrator:
    """
    Deletes a cluster, then every ancillary resource it may have.

    Each step runs whatever happened before it. Resources that do not exist
    are skipped. Failures are collected and raised together as DestroyError
    once every step has been attempted.
    """

    def __init__(
        self,
        gateway: ResourceGateway,
        poller: OperationPoller | None = None,
        choose_bastion: BastionChooser | None = None,
    ):
        self.gateway = gateway
        self.poller = poller or OperationPoller(gateway)
        self.teardown = Teardown(self.gateway, self.poller, choose_bastion)

    def destroy(self, cluster: str, region: str) -> TeardownReport:
        td = self.teardown
        report = TeardownReport()

        report.add(td.cluster(region, cluster))
        report.add(td.bastion(bastion_name(cluster)))
        report.add(td.firewall_rule(firewall_rule_name(cluster)))
        report.add(td.authenticate())
        report.add(td.nat(nat_name(cluster), router_name(cluster), region))
        report.add(td.router(router_name(cluster), region))
        report.add(td.subnetwork(region, subnetwork_name(cluster)))
        report.add(td.network(network_name(cluster)))

        if not report.ok:
            raise DestroyError(report)
        logger.info(f"Cluster [bold]{cluster}[/bold] and its resources are gone")
        return report
