"""
Absence-tolerant teardown steps shared by rollback and cluster destruction.

Every step checks for the resource first and reports ``absent`` when it is
already gone. A step that fails is recorded in the report and never stops
the steps after it.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from google.api_core.exceptions import NotFound
from pydantic import BaseModel, Field

from ..errors import AmbiguousResource
from ..gateway.base import ResourceGateway
from ..logger import logger
from ..schemas.resources import InstanceInfo, ProvisionedResource, ResourceKind
from .poller import OperationPoller

BastionChooser = Callable[[list[InstanceInfo]], InstanceInfo]

CLI_AUTH = "cli-auth"


class StepStatus(str, Enum):
    DELETED = "deleted"
    ABSENT = "absent"
    COMPLETED = "completed"
    FAILED = "failed"


class StepOutcome(BaseModel):
    kind: str
    name: str
    status: StepStatus
    error: str = ""


class TeardownReport(BaseModel):
    outcomes: list[StepOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> list[StepOutcome]:
        return [o for o in self.outcomes if o.status is StepStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failures

    def add(self, outcome: StepOutcome) -> StepOutcome:
        self.outcomes.append(outcome)
        return outcome


class Teardown:
    def __init__(
        self,
        gateway: ResourceGateway,
        poller: OperationPoller,
        choose_bastion: BastionChooser | None = None,
    ):
        self.gateway = gateway
        self.poller = poller
        self.choose_bastion = choose_bastion

    def _step(
        self,
        kind: str,
        name: str,
        action: Callable[[], bool],
        done: StepStatus = StepStatus.DELETED,
    ) -> StepOutcome:
        logger.info(f"Tearing down {kind} [bold]{name}[/bold]")
        try:
            removed = action()
        except NotFound:
            removed = False
        except Exception as e:
            logger.error(f"Failed to tear down {kind} {name}: {e}")
            return StepOutcome(kind=kind, name=name, status=StepStatus.FAILED, error=str(e))

        if not removed:
            logger.info(f"{kind} {name} does not exist, skipping")
            return StepOutcome(kind=kind, name=name, status=StepStatus.ABSENT)
        return StepOutcome(kind=kind, name=name, status=done)

    # Individual steps

    def cluster(self, region: str, name: str) -> StepOutcome:
        path = f"projects/{self.gateway.project_id}/locations/{region}/clusters/{name}"

        def delete() -> bool:
            handle = self.gateway.delete_cluster(path)
            self.poller.wait(handle)
            return True

        return self._step(ResourceKind.CLUSTER.value, name, delete)

    def bastion(self, name: str, zone: str | None = None) -> StepOutcome:
        def delete() -> bool:
            found = self.gateway.list_instances(name)
            if zone is not None:
                found = [i for i in found if i.zone == zone]
            if not found:
                return False
            if len(found) == 1:
                target = found[0]
            elif self.choose_bastion is not None:
                target = self.choose_bastion(found)
            else:
                raise AmbiguousResource(
                    "bastion", [f"{i.name} ({i.zone})" for i in found]
                )
            self.gateway.delete_instance(target.zone, target.name)
            return True

        return self._step(ResourceKind.BASTION.value, name, delete)

    def firewall_rule(self, name: str) -> StepOutcome:
        def delete() -> bool:
            if not self.gateway.firewall_exists(name):
                return False
            self.gateway.delete_firewall_rule(name)
            return True

        return self._step(ResourceKind.FIREWALL_RULE.value, name, delete)

    def authenticate(self) -> StepOutcome:
        def auth() -> bool:
            self.gateway.authenticate_cli()
            return True

        return self._step(
            CLI_AUTH, self.gateway.project_id, auth, done=StepStatus.COMPLETED
        )

    def nat(self, name: str, router: str, region: str) -> StepOutcome:
        def delete() -> bool:
            if not self.gateway.nat_exists(name, router, region):
                return False
            self.gateway.delete_nat(name, router, region)
            return True

        return self._step(ResourceKind.NAT.value, name, delete)

    def router(self, name: str, region: str) -> StepOutcome:
        def delete() -> bool:
            if not self.gateway.router_exists(name, region):
                return False
            self.gateway.delete_router(name, region)
            return True

        return self._step(ResourceKind.ROUTER.value, name, delete)

    def subnetwork(self, region: str, name: str) -> StepOutcome:
        def delete() -> bool:
            if not self.gateway.subnetwork_exists(region, name):
                return False
            self.gateway.delete_subnetwork(region, name)
            return True

        return self._step(ResourceKind.SUBNETWORK.value, name, delete)

    def network(self, name: str) -> StepOutcome:
        def delete() -> bool:
            if not self.gateway.network_exists(name):
                return False
            self.gateway.delete_network(name)
            return True

        return self._step(ResourceKind.NETWORK.value, name, delete)

    def remove(self, resource: ProvisionedResource) -> StepOutcome:
        """Tear down one entry of a creation log."""
        kind = resource.kind
        region = resource.region or ""
        if kind is ResourceKind.CLUSTER:
            return self.cluster(region, resource.name)
        if kind is ResourceKind.NAT:
            return self.nat(resource.name, resource.parent or "", region)
        if kind is ResourceKind.ROUTER:
            return self.router(resource.name, region)
        if kind is ResourceKind.FIREWALL_RULE:
            return self.firewall_rule(resource.name)
        if kind is ResourceKind.BASTION:
            return self.bastion(resource.name, resource.zone)
        if kind is ResourceKind.SUBNETWORK:
            return self.subnetwork(region, resource.name)
        return self.network(resource.name)
