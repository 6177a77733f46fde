import subprocess

from ..errors import CliCommandError
from ..logger import logger

# gcloud prints one of these when the described resource does not exist
NOT_FOUND_MARKERS = ("not found", "notfound")


def is_not_found(err: CliCommandError) -> bool:
    stderr = err.stderr.lower()
    return any(marker in stderr for marker in NOT_FOUND_MARKERS)


class GcloudCli:
    """Runs ``gcloud`` for the operations the SDK clients do not cover well."""

    def __init__(self, executable: str = "gcloud"):
        self.executable = executable

    def run(self, *args: str) -> str:
        cmd = [self.executable, *args]
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            res = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise CliCommandError(cmd, -1, str(e)) from e
        if res.returncode != 0:
            raise CliCommandError(cmd, res.returncode, res.stderr or "")
        return res.stdout

    def describes(self, *args: str) -> bool:
        """
        Run a ``describe`` command. False only when gcloud reports the resource
        missing; any other failure raises CliCommandError.
        """
        try:
            self.run(*args)
        except CliCommandError as e:
            if is_not_found(e):
                return False
            raise
        return True

    # Auth

    def activate_service_account(self, key_file: str) -> None:
        self.run("auth", "activate-service-account", f"--key-file={key_file}")

    def set_project(self, project_id: str) -> None:
        self.run("config", "set", "project", project_id)

    # Cloud Router

    def create_router(self, name: str, network: str, region: str) -> None:
        self.run(
            "compute", "routers", "create", name,
            "--network", network,
            "--region", region,
        )

    def delete_router(self, name: str, region: str) -> None:
        self.run("compute", "routers", "delete", name, "--region", region, "--quiet")

    def router_exists(self, name: str, region: str) -> bool:
        return self.describes("compute", "routers", "describe", name, "--region", region)

    # Cloud NAT

    def create_nat(self, name: str, router: str, region: str) -> None:
        self.run(
            "compute", "routers", "nats", "create", name,
            "--router-region", region,
            "--router", router,
            "--auto-allocate-nat-external-ips",
            "--nat-all-subnet-ip-ranges",
        )

    def delete_nat(self, name: str, router: str, region: str) -> None:
        self.run(
            "compute", "routers", "nats", "delete", name,
            "--router", router,
            "--region", region,
            "--quiet",
        )

    def nat_exists(self, name: str, router: str, region: str) -> bool:
        return self.describes(
            "compute", "routers", "nats", "describe", name,
            "--router", router,
            "--region", region,
        )
