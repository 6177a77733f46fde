import pytest

from gkeops.gateway.gcloud import GcloudCli
from gkeops.gateway.gcp import GcpGateway
from gkeops.provisioning.teardown import StepStatus, Teardown

DENIED = (
    "ERROR: (gcloud.compute.routers.describe) Could not fetch resource:\n"
    " - Required 'compute.routers.get' permission for "
    "'projects/test-project/regions/us-central1/routers/router'\n"
)
MISSING = (
    "ERROR: (gcloud.compute.routers.describe) Could not fetch resource:\n"
    " - The resource 'projects/test-project/regions/us-central1/routers/router'"
    " was not found\n"
)


@pytest.fixture
def teardown(mocker):
    gateway = GcpGateway(
        "test-project",
        cli=GcloudCli(),
        networks=mocker.Mock(),
        subnetworks=mocker.Mock(),
        instances=mocker.Mock(),
        firewalls=mocker.Mock(),
        zones=mocker.Mock(),
        clusters=mocker.Mock(),
    )
    return Teardown(gateway, mocker.Mock())


def gcloud_exits(mocker, returncode, stderr=""):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = returncode
    mock_run.return_value.stderr = stderr
    return mock_run


def test_denied_router_lookup_is_a_failure(mocker, teardown):
    gcloud_exits(mocker, 1, DENIED)

    outcome = teardown.router("router", "us-central1")

    assert outcome.status is StepStatus.FAILED
    assert "compute.routers.get" in outcome.error


def test_denied_nat_lookup_is_a_failure(mocker, teardown):
    gcloud_exits(mocker, 1, DENIED)

    outcome = teardown.nat("nat", "router", "us-central1")

    assert outcome.status is StepStatus.FAILED


def test_missing_router_is_absent(mocker, teardown):
    mock_run = gcloud_exits(mocker, 1, MISSING)

    outcome = teardown.router("router", "us-central1")

    assert outcome.status is StepStatus.ABSENT
    assert mock_run.call_count == 1


def test_existing_router_is_deleted(mocker, teardown):
    mock_run = gcloud_exits(mocker, 0)

    outcome = teardown.router("router", "us-central1")

    assert outcome.status is StepStatus.DELETED
    assert mock_run.call_args[0][0][:4] == ["gcloud", "compute", "routers", "delete"]


def test_missing_gcloud_is_a_failure(mocker, teardown):
    mocker.patch("subprocess.run", side_effect=FileNotFoundError("gcloud"))

    assert teardown.router("router", "us-central1").status is StepStatus.FAILED
