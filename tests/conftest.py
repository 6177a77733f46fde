import pytest
from google.api_core.exceptions import NotFound

from gkeops.provisioning.poller import OperationPoller
from gkeops.schemas.cluster import ClusterSpec, WorkerGroupSpec
from gkeops.schemas.resources import (
    InstanceInfo,
    OperationHandle,
    OperationState,
)


class FakeGateway:
    """In-memory ResourceGateway that records every call in order."""

    project_id = "test-project"

    def __init__(self, statuses=None, fail=None, existing=None, clusters=None):
        self.calls = []
        self.statuses = list(statuses or ["DONE"])
        self.fail = dict(fail or {})
        self.existing = set(existing or ())
        self.clusters = set(clusters or ())
        self.instances = []
        self.requests = []

    def _call(self, method, *args):
        self.calls.append((method, *args))
        if method in self.fail:
            raise self.fail[method]

    def called(self):
        return [c[0] for c in self.calls]

    # Networks
    def create_network(self, name):
        self._call("create_network", name)
        self.existing.add(name)

    def delete_network(self, name):
        self._call("delete_network", name)
        self.existing.discard(name)

    def network_exists(self, name):
        self._call("network_exists", name)
        return name in self.existing

    def create_subnetwork(self, network, name, region, cidr):
        self._call("create_subnetwork", network, name, region, cidr)
        self.existing.add(name)

    def delete_subnetwork(self, region, name):
        self._call("delete_subnetwork", region, name)
        self.existing.discard(name)

    def subnetwork_exists(self, region, name):
        self._call("subnetwork_exists", region, name)
        return name in self.existing

    # Bastion
    def create_bastion(self, spec, name):
        self._call("create_bastion", name)
        zone = f"{spec.region}-a"
        self.instances.append(InstanceInfo(name=name, zone=zone, internal_ip="10.0.0.2"))
        return InstanceInfo(name=name, zone=zone)

    def describe_instance(self, zone, name):
        self._call("describe_instance", zone, name)
        for instance in self.instances:
            if instance.zone == zone and instance.name == name:
                return instance
        raise NotFound(f"instance {name} not found")

    def delete_instance(self, zone, name):
        self._call("delete_instance", zone, name)
        self.instances = [
            i for i in self.instances if not (i.zone == zone and i.name == name)
        ]

    def list_instances(self, name):
        self._call("list_instances", name)
        return [i for i in self.instances if i.name == name]

    # Firewall
    def create_firewall_rule(self, name, network, target_tag):
        self._call("create_firewall_rule", name, network, target_tag)
        self.existing.add(name)

    def delete_firewall_rule(self, name):
        self._call("delete_firewall_rule", name)
        self.existing.discard(name)

    def firewall_exists(self, name):
        self._call("firewall_exists", name)
        return name in self.existing

    # CLI
    def authenticate_cli(self):
        self._call("authenticate_cli")

    def create_router(self, name, network, region):
        self._call("create_router", name, network, region)
        self.existing.add(name)

    def delete_router(self, name, region):
        self._call("delete_router", name, region)
        self.existing.discard(name)

    def router_exists(self, name, region):
        self._call("router_exists", name, region)
        return name in self.existing

    def create_nat(self, name, router, region):
        self._call("create_nat", name, router, region)
        self.existing.add(name)

    def delete_nat(self, name, router, region):
        self._call("delete_nat", name, router, region)
        self.existing.discard(name)

    def nat_exists(self, name, router, region):
        self._call("nat_exists", name, router, region)
        return name in self.existing

    # Clusters
    def create_cluster(self, request):
        self._call("create_cluster", request.cluster.name)
        self.requests.append(request)
        self.clusters.add(request.cluster.name)
        return OperationHandle(
            name="op-create", project_id=self.project_id, location="us-central1"
        )

    def delete_cluster(self, path):
        self._call("delete_cluster", path)
        name = path.split("/")[-1]
        if name not in self.clusters:
            raise NotFound(f"cluster {name} not found")
        self.clusters.discard(name)
        return OperationHandle(
            name="op-delete", project_id=self.project_id, location=path.split("/")[3]
        )

    def list_cluster_names(self, parent):
        self._call("list_cluster_names", parent)
        return sorted(self.clusters)

    def get_operation(self, path):
        self._call("get_operation", path)
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return OperationState(name=path.split("/")[-1], status=status)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def poller_for():
    def make(gw):
        return OperationPoller(gw, interval=0, sleep=lambda _: None)

    return make


@pytest.fixture
def worker():
    return WorkerGroupSpec(machine_type="e2-standard-4", desired_capacity=2)


@pytest.fixture
def make_spec(worker):
    def make(**overrides):
        fields = {
            "name": "demo",
            "project_id": "test-project",
            "region": "us-central1",
            "workers": [worker],
        }
        fields.update(overrides)
        return ClusterSpec(**fields)

    return make
