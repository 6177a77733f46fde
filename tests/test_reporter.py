from rich.console import Console

from gkeops.errors import GatewayError, ProvisionError
from gkeops.provisioning.create import ProvisionResult
from gkeops.provisioning.teardown import StepOutcome, StepStatus, TeardownReport
from gkeops.reporter import (
    print_access_instructions,
    print_provision_failure,
    print_quotas,
    print_settings,
    print_teardown_report,
)
from gkeops.schemas.compute import GCPQuotaReport, QuotaMetric
from gkeops.schemas.resources import BastionInfo, ProvisionedResource, ResourceKind


def record():
    return Console(record=True, width=200)


def test_print_settings(make_spec):
    console = record()
    print_settings(make_spec(enable_private_nodes=True), console)

    text = console.export_text()
    assert "Private, master 172.16.0.0/28" in text
    assert "e2-standard-4" in text
    assert "Logging - Write" in text


def test_print_quotas():
    console = record()
    quotas = GCPQuotaReport(
        project={"NETWORKS": QuotaMetric(metric="NETWORKS", limit=15, usage=4)},
        region={"CPUS": QuotaMetric(metric="CPUS", limit=24, usage=8)},
    )
    print_quotas(quotas, "us-central1", console)

    text = console.export_text()
    assert "VPC networks" in text
    assert "us-central1" in text
    assert "24" in text


def test_print_teardown_report_flags_failures():
    console = record()
    report = TeardownReport(
        outcomes=[
            StepOutcome(kind="router", name="r", status=StepStatus.FAILED, error="[403] denied"),
            StepOutcome(kind="network", name="n", status=StepStatus.ABSENT),
        ]
    )
    print_teardown_report(report, console, "Rollback")

    text = console.export_text()
    assert "[403] denied" in text
    assert "absent" in text
    assert "clean them up manually" in text


def test_print_provision_failure():
    console = record()
    err = ProvisionError(
        "bastion",
        "gke-ops-demo-bastion",
        GatewayError("create bastion", "quota [CPUS] exceeded"),
        (ProvisionedResource(kind=ResourceKind.NETWORK, name="gke-ops-demo-network", order=0),),
    )
    print_provision_failure(err, console)

    text = console.export_text()
    assert "step 'bastion'" in text
    assert "quota [CPUS] exceeded" in text
    assert "network gke-ops-demo-network" in text


def test_access_instructions_private(make_spec):
    console = record()
    spec = make_spec(enable_private_nodes=True)
    bastion = BastionInfo(
        name="gke-ops-demo-bastion", zone="us-central1-a", internal_ip="10.0.0.2", tag="t"
    )
    print_access_instructions(ProvisionResult(spec=spec, status="DONE", bastion=bastion), console)

    text = console.export_text()
    assert "--zone=us-central1-a gke-ops-demo-bastion" in text
    assert "[Optional]" in text


def test_access_instructions_public(make_spec):
    console = record()
    print_access_instructions(ProvisionResult(spec=make_spec(), status="DONE"), console)

    assert "get-credentials demo --region=us-central1" in console.export_text()
