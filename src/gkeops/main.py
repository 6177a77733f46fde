import argparse
import os
import signal
import sys
import threading
from importlib.metadata import version

from rich.console import Console

from .core import DEFAULT_POLL_INTERVAL
from .errors import GkeOpsError
from .gateway.gcp import GcpGateway
from .logger import level_for, logger, setup_logger
from .modes import create, destroy
from .modes.prompts import choose
from .walkers import compute

ACTIONS = ["create", "destroy"]


def resolve_project(explicit: str | None) -> str | None:
    if explicit:
        return explicit
    for var in ("GOOGLE_CLOUD_PROJECT", "CLOUDSDK_CORE_PROJECT"):
        if os.environ.get(var):
            return os.environ[var]
    try:
        import google.auth

        _, project = google.auth.default()
        return project
    except Exception as e:
        logger.debug(f"No default project from application credentials: {e}")
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="gkeops: create and destroy GKE clusters with their network, bastion and NAT",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive creation
  gkeops create --project-id my-project --region us-central1

  # Create from a saved configuration without questions
  gkeops create --project-id my-project --region us-central1 --config cluster.json --yes

  # Destroy a cluster and every resource created for it
  gkeops destroy --project-id my-project --region us-central1 --cluster my-cluster
""",
    )
    try:
        ver = version("gkeops")
    except Exception:
        ver = "unknown"
    parser.add_argument("--version", action="version", version=f"gkeops v{ver}")

    parser.add_argument("action", nargs="?", choices=ACTIONS, help="What to do")
    parser.add_argument("--project-id", help="GCP Project ID (default: from environment)")
    parser.add_argument("--region", help="Region to operate on (prompted when omitted)")
    parser.add_argument(
        "--key-file",
        default=os.environ.get("GOOGLE_APPLICATION_CREDENTIALS"),
        help="Service account key used to authenticate the gcloud CLI",
    )
    parser.add_argument(
        "--service-account",
        help="Service account email for the bastion (default: compute default)",
    )
    parser.add_argument("--config", help="Cluster settings as JSON (create only)")
    parser.add_argument("--cluster", help="Cluster to destroy (destroy only)")
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between operation status checks (default: {DEFAULT_POLL_INTERVAL:g})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up waiting for a cluster operation after this many seconds",
    )
    parser.add_argument(
        "--yes", action="store_true", help="Answer yes to every confirmation"
    )
    parser.add_argument("--verbose", action="store_true", help="Log each step")
    parser.add_argument("--debug", action="store_true", help="Log provider calls too")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    setup_logger(level=level_for(args.verbose, args.debug))

    console = Console()
    console.print("[bold green]gkeops[/bold green] GKE cluster operations")

    args.project_id = resolve_project(args.project_id)
    if not args.project_id:
        parser.error("no project found, pass --project-id or set GOOGLE_CLOUD_PROJECT")

    action = args.action or choose(console, "What would you like to do?", ACTIONS)
    if not args.region:
        args.region = choose(
            console, "Region to operate on", compute.list_regions(args.project_id)
        )

    gateway = GcpGateway(
        args.project_id, key_file=args.key_file, service_account=args.service_account
    )

    # SIGTERM stops any operation wait; creation then offers its rollback
    cancel = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: cancel.set())

    # Dispatch to Modes
    try:
        if action == "create":
            code = create.run_create(args, gateway, console, cancel=cancel)
        else:
            code = destroy.run_destroy(args, gateway, console, cancel=cancel)
    except (GkeOpsError, ValueError, OSError) as e:
        logger.error(f"{action.capitalize()} failed: {e}")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        sys.exit(130)
