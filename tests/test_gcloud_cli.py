import pytest

from gkeops.errors import CliCommandError
from gkeops.gateway.gcloud import GcloudCli


def test_create_nat_command(mocker):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = 0

    GcloudCli().create_nat("nat", "router", "us-central1")

    cmd = mock_run.call_args[0][0]
    assert cmd[:5] == ["gcloud", "compute", "routers", "nats", "create"]
    assert "nat" in cmd
    assert cmd[cmd.index("--router") + 1] == "router"
    assert "--auto-allocate-nat-external-ips" in cmd
    assert "--nat-all-subnet-ip-ranges" in cmd


def test_delete_router_is_quiet(mocker):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = 0

    GcloudCli().delete_router("router", "us-central1")

    cmd = mock_run.call_args[0][0]
    assert cmd == [
        "gcloud", "compute", "routers", "delete", "router",
        "--region", "us-central1", "--quiet",
    ]


def test_failed_command_raises(mocker):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = 1
    mock_run.return_value.stderr = "WARNING: x\nERROR: router already exists\n"

    with pytest.raises(CliCommandError) as exc:
        GcloudCli().create_router("router", "net", "us-central1")

    assert exc.value.returncode == 1
    assert "router already exists" in str(exc.value)


def test_missing_executable_raises(mocker):
    mocker.patch("subprocess.run", side_effect=FileNotFoundError("gcloud"))

    with pytest.raises(CliCommandError) as exc:
        GcloudCli().set_project("p")
    assert exc.value.returncode == -1


def test_missing_router_is_absent(mocker):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = 1
    mock_run.return_value.stderr = (
        "ERROR: (gcloud.compute.routers.describe) Could not fetch resource:\n"
        " - The resource 'projects/p/regions/us-central1/routers/router' was not found\n"
    )

    assert GcloudCli().router_exists("router", "us-central1") is False


def test_missing_nat_is_absent(mocker):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = 1
    mock_run.return_value.stderr = (
        "ERROR: (gcloud.compute.routers.nats.describe) NAT `nat` not found\n"
    )

    assert GcloudCli().nat_exists("nat", "router", "us-central1") is False


def test_denied_describe_raises(mocker):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = 1
    mock_run.return_value.stderr = (
        "ERROR: (gcloud.compute.routers.describe) Could not fetch resource:\n"
        " - Required 'compute.routers.get' permission for 'projects/p/regions/us-central1/routers/router'\n"
    )

    with pytest.raises(CliCommandError, match="compute.routers.get"):
        GcloudCli().router_exists("router", "us-central1")


def test_describe_without_gcloud_raises(mocker):
    mocker.patch("subprocess.run", side_effect=FileNotFoundError("gcloud"))

    with pytest.raises(CliCommandError):
        GcloudCli().nat_exists("nat", "router", "us-central1")


def test_activate_service_account(mocker):
    mock_run = mocker.patch("subprocess.run")
    mock_run.return_value.returncode = 0

    GcloudCli("/opt/gcloud").activate_service_account("/keys/sa.json")

    assert mock_run.call_args[0][0] == [
        "/opt/gcloud", "auth", "activate-service-account", "--key-file=/keys/sa.json",
    ]
