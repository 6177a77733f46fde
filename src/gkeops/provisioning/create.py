from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum

from pydantic import BaseModel

from ..core import DEFAULT_PRIVATE_SUBNET_RANGE
from ..errors import GatewayError, ProvisionError, ResourceConflict
from ..gateway.base import ResourceGateway
from ..logger import logger
from ..names import bastion_name, firewall_rule_name, nat_name, router_name
from ..schemas.cluster import ClusterSpec
from ..schemas.resources import BastionInfo, ProvisionedResource, ResourceKind
from .poller import OperationPoller
from .requests import build_create_request, with_bastion_access
from .teardown import Teardown, TeardownReport


class ProvisionStep(str, Enum):
    NETWORK = "network"
    SUBNETWORK = "subnetwork"
    BASTION = "bastion"
    FIREWALL_RULE = "firewall-rule"
    CLI_AUTH = "cli-auth"
    ROUTER = "router"
    NAT = "nat"
    VALIDATION = "validation"
    OPERATION = "operation"


class ResourceLog:
    """Append-only record of what one provisioning attempt created."""

    def __init__(self) -> None:
        self._entries: list[ProvisionedResource] = []

    def record(self, kind: ResourceKind, name: str, **where: str) -> ProvisionedResource:
        entry = ProvisionedResource(kind=kind, name=name, order=len(self._entries), **where)
        self._entries.append(entry)
        return entry

    def snapshot(self) -> tuple[ProvisionedResource, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class ProvisionResult(BaseModel):
    spec: ClusterSpec
    status: str
    bastion: BastionInfo | None = None
    resources: tuple[ProvisionedResource, ...] = ()


RollbackConfirm = Callable[[ProvisionError], bool]


class ProvisioningOrchestrator:
    """
    Creates a cluster and its supporting resources in dependency order.

    custom network -> private subnetwork -> bastion -> SSH firewall rule
    -> gcloud auth -> cloud router -> cloud NAT -> cluster

    The first failing step stops the sequence. ``confirm_rollback`` is then
    asked whether to tear down what the attempt created; without it nothing is
    rolled back.
    """

    def __init__(
        self,
        gateway: ResourceGateway,
        poller: OperationPoller | None = None,
        confirm_rollback: RollbackConfirm | None = None,
        subnet_range: str = DEFAULT_PRIVATE_SUBNET_RANGE,
    ):
        self.gateway = gateway
        self.poller = poller or OperationPoller(gateway)
        self.confirm_rollback = confirm_rollback
        self.subnet_range = subnet_range

    def create(self, spec: ClusterSpec) -> ProvisionResult:
        log = ResourceLog()
        try:
            return self._provision(spec, log)
        except ProvisionError as err:
            logger.error(f"Cluster creation failed: {err}")
            if self.confirm_rollback is not None and self.confirm_rollback(err):
                err.rollback = self.rollback(err.resources)
            raise

    def rollback(self, resources: tuple[ProvisionedResource, ...]) -> TeardownReport:
        """Tear down logged resources, newest first, continuing past failures."""
        teardown = Teardown(self.gateway, self.poller)
        report = TeardownReport()
        cli_ready = False
        for resource in reversed(resources):
            if resource.kind in (ResourceKind.NAT, ResourceKind.ROUTER) and not cli_ready:
                report.add(teardown.authenticate())
                cli_ready = True
            report.add(teardown.remove(resource))

        if report.ok:
            logger.info(f"Rolled back {len(resources)} resources")
        else:
            logger.error(f"Rollback left {len(report.failures)} resources behind")
        return report

    @contextmanager
    def _step(self, step: ProvisionStep, resource: str, log: ResourceLog) -> Iterator[None]:
        logger.info(f"[{step.value}] {resource}")
        try:
            yield
        except ProvisionError:
            raise
        except Exception as e:
            raise ProvisionError(step.value, resource, e, log.snapshot()) from e

    def _provision(self, spec: ClusterSpec, log: ResourceLog) -> ProvisionResult:
        gw = self.gateway

        if spec.custom_network:
            with self._step(ProvisionStep.NETWORK, spec.network, log):
                gw.create_network(spec.network)
            log.record(ResourceKind.NETWORK, spec.network)

            with self._step(ProvisionStep.SUBNETWORK, spec.subnetwork, log):
                gw.create_subnetwork(
                    spec.network, spec.subnetwork, spec.region, self.subnet_range
                )
            log.record(ResourceKind.SUBNETWORK, spec.subnetwork, region=spec.region)

        bastion = None
        if spec.enable_private_nodes:
            spec, bastion = self._provision_private_access(spec, log)

        with self._step(ProvisionStep.VALIDATION, spec.name, log):
            handle = gw.create_cluster(build_create_request(spec))
        log.record(ResourceKind.CLUSTER, spec.name, region=spec.region)

        with self._step(ProvisionStep.OPERATION, spec.name, log):
            status = self.poller.wait(handle)

        logger.info(f"Cluster [bold]{spec.name}[/bold] created")
        return ProvisionResult(
            spec=spec, status=status, bastion=bastion, resources=log.snapshot()
        )

    def _provision_private_access(
        self, spec: ClusterSpec, log: ResourceLog
    ) -> tuple[ClusterSpec, BastionInfo]:
        gw = self.gateway

        name = bastion_name(spec.name)
        try:
            with self._step(ProvisionStep.BASTION, name, log):
                created = gw.create_bastion(spec, name)
        except ProvisionError as err:
            if not isinstance(err.cause, ResourceConflict):
                self._record_stray_bastion(name, log)
                err.resources = log.snapshot()
            raise
        log.record(ResourceKind.BASTION, created.name, zone=created.zone)

        with self._step(ProvisionStep.BASTION, name, log):
            described = gw.describe_instance(created.zone, created.name)
            if not described.internal_ip:
                raise GatewayError("read bastion address", "no internal IP assigned")
            bastion = BastionInfo(**described.model_dump(), tag=name)
            spec = with_bastion_access(spec, described.internal_ip)

        firewall = firewall_rule_name(spec.name)
        with self._step(ProvisionStep.FIREWALL_RULE, firewall, log):
            gw.create_firewall_rule(firewall, spec.network, bastion.tag)
        log.record(ResourceKind.FIREWALL_RULE, firewall)

        with self._step(ProvisionStep.CLI_AUTH, spec.project_id, log):
            gw.authenticate_cli()

        router = router_name(spec.name)
        with self._step(ProvisionStep.ROUTER, router, log):
            gw.create_router(router, spec.network, spec.region)
        log.record(ResourceKind.ROUTER, router, region=spec.region)

        nat = nat_name(spec.name)
        with self._step(ProvisionStep.NAT, nat, log):
            gw.create_nat(nat, router, spec.region)
        log.record(ResourceKind.NAT, nat, region=spec.region, parent=router)

        return spec, bastion

    def _record_stray_bastion(self, name: str, log: ResourceLog) -> None:
        """An insert whose wait failed can still leave the VM behind."""
        try:
            found = self.gateway.list_instances(name)
        except Exception as e:
            logger.warning(f"Could not check for a partially created bastion {name}: {e}")
            return
        for instance in found:
            log.record(ResourceKind.BASTION, instance.name, zone=instance.zone)
