from ipaddress import IPv4Network
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core import DEFAULT_ACCESS_SCOPES, DEFAULT_MASTER_CIDR
from ..names import network_name, subnetwork_name


class WorkerGroupSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    machine_type: str
    desired_capacity: int = Field(default=1, ge=0)
    min_size: int | None = Field(default=None, ge=0)
    max_size: int | None = Field(default=None, ge=1)
    autoscaling: bool = False
    oauth_scopes: tuple[str, ...] = tuple(DEFAULT_ACCESS_SCOPES.values())

    @model_validator(mode="after")
    def _check_sizes(self) -> "WorkerGroupSpec":
        if self.autoscaling:
            if self.min_size is None or self.max_size is None:
                raise ValueError("autoscaling requires min_size and max_size")
            if self.min_size > self.max_size:
                raise ValueError("min_size must not exceed max_size")
        elif self.desired_capacity < 1:
            raise ValueError("desired_capacity must be at least 1")
        return self


class AuthorizedNetwork(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: str
    cidr_block: str


class MasterAuthorizedNetworks(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    cidr_blocks: tuple[AuthorizedNetwork, ...] = ()


class ClusterSpec(BaseModel):
    """
    Everything needed to create one cluster.

    Frozen: the only change made during provisioning is the bastion's
    authorized network, applied with ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=r"^[a-z]([-a-z0-9]{0,30}[a-z0-9])?$")
    project_id: str
    region: str
    custom_network: bool = False
    network: str = "default"
    subnetwork: str = "default"
    enable_private_nodes: bool = False
    master_ipv4_cidr_block: str = DEFAULT_MASTER_CIDR
    enable_stackdriver: bool = False
    workers: tuple[WorkerGroupSpec, ...] = Field(min_length=1)
    master_authorized_networks: MasterAuthorizedNetworks = MasterAuthorizedNetworks()

    @model_validator(mode="before")
    @classmethod
    def _name_custom_network(cls, data: Any) -> Any:
        # A custom network always uses the names derived from the cluster name
        if isinstance(data, dict) and data.get("custom_network") and "name" in data:
            data = {
                **data,
                "network": network_name(data["name"]),
                "subnetwork": subnetwork_name(data["name"]),
            }
        return data

    @field_validator("master_ipv4_cidr_block")
    @classmethod
    def _check_master_cidr(cls, value: str) -> str:
        block = IPv4Network(value, strict=False)
        if block.prefixlen != 28:
            raise ValueError("the master range must be a /28 block")
        return str(block)

    @property
    def parent(self) -> str:
        return f"projects/{self.project_id}/locations/{self.region}"

    @property
    def path(self) -> str:
        return f"{self.parent}/clusters/{self.name}"
