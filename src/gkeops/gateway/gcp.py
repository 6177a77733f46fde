from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from google.api_core.exceptions import (
    AlreadyExists,
    BadRequest,
    FailedPrecondition,
    GoogleAPICallError,
    InvalidArgument,
    NotFound,
)
from google.cloud import compute_v1, container_v1
from tenacity import retry

from ..clients import (
    get_compute_instances_client,
    get_firewalls_client,
    get_gke_client,
    get_networks_client,
    get_subnetworks_client,
    get_zones_client,
)
from ..core import (
    BASTION_DISK_SIZE_GB,
    BASTION_IMAGE,
    BASTION_MACHINE_TYPE,
    BASTION_STARTUP_SCRIPT,
    CLOUD_PLATFORM_SCOPE,
    RETRY_CONFIG,
)
from ..errors import GatewayError, ResourceConflict, ValidationError
from ..logger import logger
from ..schemas.cluster import ClusterSpec
from ..schemas.resources import (
    InstanceInfo,
    OperationHandle,
    OperationState,
)
from .gcloud import GcloudCli


@contextmanager
def _provider_call(action: str) -> Iterator[None]:
    """Wraps SDK errors into GatewayError. NotFound passes through for teardown."""
    try:
        yield
    except NotFound:
        raise
    except AlreadyExists as e:
        raise ResourceConflict(f"{action} failed: {e.message}") from e
    except GoogleAPICallError as e:
        raise GatewayError(action, e.message) from e


def _location_of(path: str) -> str:
    # projects/{project}/locations/{location}/...
    parts = path.split("/")
    return parts[3] if len(parts) > 3 else ""


class GcpGateway:
    """ResourceGateway backed by the Compute Engine and GKE client libraries."""

    def __init__(
        self,
        project_id: str,
        *,
        key_file: str | None = None,
        service_account: str | None = None,
        cli: GcloudCli | None = None,
        networks: Any = None,
        subnetworks: Any = None,
        instances: Any = None,
        firewalls: Any = None,
        zones: Any = None,
        clusters: Any = None,
    ):
        self.project_id = project_id
        self.key_file = key_file
        self.service_account = service_account or "default"
        self.cli = cli or GcloudCli()
        self.networks = networks or get_networks_client()
        self.subnetworks = subnetworks or get_subnetworks_client()
        self.instances = instances or get_compute_instances_client()
        self.firewalls = firewalls or get_firewalls_client()
        self.zones = zones or get_zones_client()
        self.clusters = clusters or get_gke_client()

    # Networks

    def create_network(self, name: str) -> None:
        network = compute_v1.Network(
            name=name,
            auto_create_subnetworks=False,
            routing_config=compute_v1.NetworkRoutingConfig(routing_mode="REGIONAL"),
        )
        with _provider_call(f"create network {name}"):
            self.networks.insert(
                project=self.project_id, network_resource=network
            ).result()

    def delete_network(self, name: str) -> None:
        with _provider_call(f"delete network {name}"):
            self.networks.delete(project=self.project_id, network=name).result()

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def network_exists(self, name: str) -> bool:
        try:
            self.networks.get(project=self.project_id, network=name)
        except NotFound:
            return False
        return True

    # Subnetworks

    def create_subnetwork(
        self, network: str, name: str, region: str, cidr: str
    ) -> None:
        subnetwork = compute_v1.Subnetwork(
            name=name,
            network=f"projects/{self.project_id}/global/networks/{network}",
            region=region,
            ip_cidr_range=cidr,
            private_ip_google_access=True,
        )
        with _provider_call(f"create subnetwork {name}"):
            self.subnetworks.insert(
                project=self.project_id,
                region=region,
                subnetwork_resource=subnetwork,
            ).result()

    def delete_subnetwork(self, region: str, name: str) -> None:
        with _provider_call(f"delete subnetwork {name}"):
            self.subnetworks.delete(
                project=self.project_id, region=region, subnetwork=name
            ).result()

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def subnetwork_exists(self, region: str, name: str) -> bool:
        try:
            self.subnetworks.get(
                project=self.project_id, region=region, subnetwork=name
            )
        except NotFound:
            return False
        return True

    # Bastion

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def first_zone(self, region: str) -> str:
        request = compute_v1.ListZonesRequest(
            project=self.project_id, filter=f"name eq {region}-.*"
        )
        zones = sorted(z.name for z in self.zones.list(request=request))
        if not zones:
            raise GatewayError("find zone", f"no zones in region {region}")
        return zones[0]

    def _bastion_resource(self, spec: ClusterSpec, name: str, zone: str) -> Any:
        startup = BASTION_STARTUP_SCRIPT.format(
            project=spec.project_id, cluster=spec.name, region=spec.region
        )
        return compute_v1.Instance(
            name=name,
            description=f"Bastion host for GKE cluster {spec.name}",
            machine_type=f"zones/{zone}/machineTypes/{BASTION_MACHINE_TYPE}",
            tags=compute_v1.Tags(items=[name]),
            metadata=compute_v1.Metadata(
                items=[compute_v1.Items(key="startup-script", value=startup)]
            ),
            disks=[
                compute_v1.AttachedDisk(
                    boot=True,
                    auto_delete=True,
                    mode="READ_WRITE",
                    type_="PERSISTENT",
                    device_name=name,
                    initialize_params=compute_v1.AttachedDiskInitializeParams(
                        source_image=BASTION_IMAGE,
                        disk_type=f"zones/{zone}/diskTypes/pd-standard",
                        disk_size_gb=BASTION_DISK_SIZE_GB,
                    ),
                )
            ],
            network_interfaces=[
                compute_v1.NetworkInterface(
                    subnetwork=(
                        f"projects/{spec.project_id}/regions/{spec.region}"
                        f"/subnetworks/{spec.subnetwork}"
                    ),
                    access_configs=[
                        compute_v1.AccessConfig(
                            name="External NAT",
                            type_="ONE_TO_ONE_NAT",
                            network_tier="PREMIUM",
                        )
                    ],
                )
            ],
            service_accounts=[
                compute_v1.ServiceAccount(
                    email=self.service_account, scopes=[CLOUD_PLATFORM_SCOPE]
                )
            ],
        )

    def create_bastion(self, spec: ClusterSpec, name: str) -> InstanceInfo:
        zone = self.first_zone(spec.region)
        instance = self._bastion_resource(spec, name, zone)
        with _provider_call(f"create bastion {name}"):
            self.instances.insert(
                project=self.project_id, zone=zone, instance_resource=instance
            ).result()
        return InstanceInfo(name=name, zone=zone)

    def describe_instance(self, zone: str, name: str) -> InstanceInfo:
        with _provider_call(f"read instance {name}"):
            created = self.instances.get(
                project=self.project_id, zone=zone, instance=name
            )

        nic = created.network_interfaces[0] if created.network_interfaces else None
        external_ip = None
        if nic is not None and nic.access_configs:
            external_ip = nic.access_configs[0].nat_i_p or None
        return InstanceInfo(
            name=created.name,
            zone=zone,
            internal_ip=nic.network_i_p if nic is not None else None,
            external_ip=external_ip,
        )

    def delete_instance(self, zone: str, name: str) -> None:
        with _provider_call(f"delete instance {name}"):
            self.instances.delete(
                project=self.project_id, zone=zone, instance=name
            ).result()

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def list_instances(self, name: str) -> list[InstanceInfo]:
        request = compute_v1.AggregatedListInstancesRequest(
            project=self.project_id, filter=f"name eq {name}"
        )
        found = []
        for zone, scoped in self.instances.aggregated_list(request=request):
            if not scoped.instances:
                continue
            for inst in scoped.instances:
                nic = inst.network_interfaces[0] if inst.network_interfaces else None
                found.append(
                    InstanceInfo(
                        name=inst.name,
                        zone=zone.split("/")[-1],
                        internal_ip=nic.network_i_p if nic is not None else None,
                    )
                )
        return found

    # Firewall rules

    def create_firewall_rule(self, name: str, network: str, target_tag: str) -> None:
        firewall = compute_v1.Firewall(
            name=name,
            network=f"projects/{self.project_id}/global/networks/{network}",
            direction="INGRESS",
            allowed=[compute_v1.Allowed(I_p_protocol="tcp", ports=["22"])],
            source_ranges=["0.0.0.0/0"],
            target_tags=[target_tag],
        )
        with _provider_call(f"create firewall rule {name}"):
            self.firewalls.insert(
                project=self.project_id, firewall_resource=firewall
            ).result()

    def delete_firewall_rule(self, name: str) -> None:
        with _provider_call(f"delete firewall rule {name}"):
            self.firewalls.delete(project=self.project_id, firewall=name).result()

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def firewall_exists(self, name: str) -> bool:
        try:
            self.firewalls.get(project=self.project_id, firewall=name)
        except NotFound:
            return False
        return True

    # gcloud CLI

    def authenticate_cli(self) -> None:
        if self.key_file:
            self.cli.activate_service_account(self.key_file)
        self.cli.set_project(self.project_id)

    def create_router(self, name: str, network: str, region: str) -> None:
        self.cli.create_router(name, network, region)

    def delete_router(self, name: str, region: str) -> None:
        self.cli.delete_router(name, region)

    def router_exists(self, name: str, region: str) -> bool:
        return self.cli.router_exists(name, region)

    def create_nat(self, name: str, router: str, region: str) -> None:
        self.cli.create_nat(name, router, region)

    def delete_nat(self, name: str, router: str, region: str) -> None:
        self.cli.delete_nat(name, router, region)

    def nat_exists(self, name: str, router: str, region: str) -> bool:
        return self.cli.nat_exists(name, router, region)

    # Clusters

    def create_cluster(
        self, request: container_v1.CreateClusterRequest
    ) -> OperationHandle:
        try:
            operation = self.clusters.create_cluster(request=request)
        except (InvalidArgument, FailedPrecondition, BadRequest, AlreadyExists) as e:
            raise ValidationError("create cluster", e.message) from e
        except GoogleAPICallError as e:
            raise GatewayError("create cluster", e.message) from e
        return OperationHandle(
            name=operation.name,
            project_id=self.project_id,
            location=_location_of(request.parent),
        )

    def delete_cluster(self, path: str) -> OperationHandle:
        with _provider_call(f"delete cluster {path}"):
            operation = self.clusters.delete_cluster(name=path)
        return OperationHandle(
            name=operation.name,
            project_id=self.project_id,
            location=_location_of(path),
        )

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def list_cluster_names(self, parent: str) -> list[str]:
        request = container_v1.ListClustersRequest(parent=parent)
        response = self.clusters.list_clusters(request=request)
        names = sorted(c.name for c in response.clusters)
        logger.debug(f"Found {len(names)} clusters under {parent}")
        return names

    @retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
    def get_operation(self, path: str) -> OperationState:
        operation = self.clusters.get_operation(name=path)
        return OperationState(
            name=operation.name,
            status=operation.status.name,
            error=operation.error.message or operation.status_message,
        )
