import argparse
import threading

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .. import reporter
from ..errors import DestroyError
from ..gateway.base import ResourceGateway
from ..provisioning.destroy import DestructionOrchestrator
from ..provisioning.poller import OperationPoller
from ..schemas.resources import InstanceInfo
from .prompts import choose, prompt_until_valid


def bastion_chooser(console: Console):
    """Ask which of several matching bastions to delete."""

    def pick(found: list[InstanceInfo]) -> InstanceInfo:
        labels = [f"{i.name} ({i.zone})" for i in found]
        answer = choose(
            console, "Multiple possible bastions detected! Select the one to delete", labels
        )
        return found[labels.index(answer)]

    return pick


def run_destroy(
    args: argparse.Namespace,
    gateway: ResourceGateway,
    console: Console,
    cancel: threading.Event | None = None,
) -> int:
    console.print(
        "\n[bold white on red]Destroying a cluster is irreversible! "
        "Please proceed with caution![/bold white on red]"
    )
    parent = f"projects/{args.project_id}/locations/{args.region}"
    clusters = gateway.list_cluster_names(parent)
    if not clusters:
        console.print("No clusters detected in this region!")
        return 0
    reporter.print_cluster_list(clusters, args.region, console)

    if args.cluster:
        if args.cluster not in clusters:
            console.print(f"[red]Cluster {args.cluster} does not exist in {args.region}[/red]")
            return 1
        cluster = args.cluster
    else:
        cluster = prompt_until_valid(
            lambda: Prompt.ask("Name of the cluster to destroy", console=console),
            lambda name: name in clusters,
            console,
            "That cluster does not exist!",
        )

    console.print("[bold]Note:[/bold] cluster destruction will take about 5 minutes")
    if not args.yes and not Confirm.ask(
        f"Destroy [bold]{cluster}[/bold] and its resources?", console=console, default=False
    ):
        console.print("[yellow]Aborting...[/yellow]")
        return 0

    poller = OperationPoller(
        gateway, interval=args.poll_interval, timeout=args.timeout, cancel=cancel
    )
    orchestrator = DestructionOrchestrator(
        gateway, poller, choose_bastion=bastion_chooser(console)
    )
    try:
        report = orchestrator.destroy(cluster, args.region)
    except DestroyError as err:
        reporter.print_teardown_report(err.report, console, f"Destroy {cluster}")
        return 1

    reporter.print_teardown_report(report, console, f"Destroy {cluster}")
    console.print(f"Cluster [magenta]{cluster}[/magenta] deleted [green]successfully[/green]!")
    return 0
