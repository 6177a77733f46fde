from pydantic import BaseModel, Field


class GCPNetwork(BaseModel):
    name: str
    id: str
    subnetworks: list[str] = Field(default_factory=list)


class GCPSubnetwork(BaseModel):
    name: str
    id: str
    region: str
    cidr_range: str
    network: str


class QuotaMetric(BaseModel):
    metric: str
    limit: float
    usage: float


class GCPQuotaReport(BaseModel):
    project: dict[str, QuotaMetric] = Field(default_factory=dict)
    region: dict[str, QuotaMetric] = Field(default_factory=dict)
