from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(str, Enum):
    NETWORK = "network"
    SUBNETWORK = "subnetwork"
    BASTION = "bastion"
    FIREWALL_RULE = "firewall-rule"
    ROUTER = "router"
    NAT = "nat"
    CLUSTER = "cluster"


class ProvisionedResource(BaseModel):
    """One entry of the creation log, enough to tear the resource down again."""

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    name: str
    order: int
    region: str | None = None
    zone: str | None = None
    parent: str | None = Field(default=None, description="Router of a NAT")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class OperationHandle(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    project_id: str
    location: str

    @property
    def path(self) -> str:
        return f"projects/{self.project_id}/locations/{self.location}/operations/{self.name}"


class OperationState(BaseModel):
    name: str
    status: str = Field(description="container_v1.Operation.Status name")
    error: str = ""


class InstanceInfo(BaseModel):
    name: str
    zone: str
    internal_ip: str | None = None
    external_ip: str | None = None


class BastionInfo(InstanceInfo):
    tag: str
