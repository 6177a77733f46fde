from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core import ALL_ACCESS_SCOPES
from .errors import ProvisionError
from .names import bastion_name
from .provisioning.create import ProvisionResult
from .provisioning.teardown import StepStatus, TeardownReport
from .schemas.cluster import ClusterSpec
from .schemas.compute import GCPQuotaReport

STATUS_STYLES = {
    StepStatus.DELETED: "green",
    StepStatus.COMPLETED: "green",
    StepStatus.ABSENT: "dim",
    StepStatus.FAILED: "bold red",
}

PROJECT_QUOTAS = {
    "CPUS_ALL_REGIONS": "CPUs (all regions)",
    "NETWORKS": "VPC networks",
    "FIREWALLS": "Firewall rules",
}

REGION_QUOTAS = {
    "CPUS": "CPUs",
    "DISKS_TOTAL_GB": "Disk (GB)",
    "STATIC_ADDRESSES": "Static IP addresses",
    "INSTANCES": "Instances",
}


def print_cluster_list(clusters: list[str], region: str, console: Console) -> None:
    if not clusters:
        return
    console.print(f"\nClusters in [bold green]{region}[/bold green]:")
    for name in clusters:
        console.print(f"  ∙ {name}")


def _scope_labels(scopes: tuple[str, ...]) -> list[str]:
    labels = [label for label, url in ALL_ACCESS_SCOPES.items() if url in scopes]
    return labels or list(scopes)


def print_settings(spec: ClusterSpec, console: Console) -> None:
    """Summary shown before the operator confirms creation."""
    table = Table(title=f"Cluster {spec.name}", show_header=False)
    table.add_column("Setting", style="magenta")
    table.add_column("Value", style="green")
    table.add_row("Project ID", spec.project_id)
    table.add_row("Region", spec.region)
    table.add_row("Network", spec.network + (" (new)" if spec.custom_network else ""))
    table.add_row("Subnetwork", spec.subnetwork)
    topology = (
        f"Private, master {spec.master_ipv4_cidr_block}"
        if spec.enable_private_nodes
        else "Public"
    )
    table.add_row("Topology", topology)
    table.add_row("Stackdriver", "enabled" if spec.enable_stackdriver else "disabled")
    console.print(table)

    workers = Table(title="Worker groups")
    workers.add_column("#")
    workers.add_column("Machine type", style="green")
    workers.add_column("Nodes per zone")
    workers.add_column("Access scopes")
    for i, w in enumerate(spec.workers):
        if w.autoscaling:
            nodes = f"{w.min_size}-{w.max_size} (autoscaling)"
        else:
            nodes = str(w.desired_capacity)
        scopes = "\n".join(_scope_labels(w.oauth_scopes))
        workers.add_row(str(i), w.machine_type, nodes, scopes)
    console.print(workers)


def print_quotas(quotas: GCPQuotaReport, region: str, console: Console) -> None:
    table = Table(title="Quota usage")
    table.add_column("Scope", style="cyan")
    table.add_column("Quota")
    table.add_column("Used", justify="right")
    table.add_column("Limit", justify="right")

    for scope, metrics, labels in (
        ("project", quotas.project, PROJECT_QUOTAS),
        (region, quotas.region, REGION_QUOTAS),
    ):
        for key, label in labels.items():
            if key in metrics:
                q = metrics[key]
                table.add_row(scope, label, f"{q.usage:g}", f"{q.limit:g}")

    if table.row_count:
        console.print(table)


def print_teardown_report(report: TeardownReport, console: Console, title: str) -> None:
    table = Table(title=title)
    table.add_column("Resource")
    table.add_column("Name")
    table.add_column("Result")
    table.add_column("Error", style="red")
    for o in report.outcomes:
        style = STATUS_STYLES[o.status]
        table.add_row(o.kind, o.name, f"[{style}]{o.status.value}[/{style}]", escape(o.error))
    console.print(table)
    if not report.ok:
        console.print(
            "[bold red]Some resources could not be removed. "
            "Please check and clean them up manually![/bold red]"
        )


def print_provision_failure(err: ProvisionError, console: Console) -> None:
    console.print(
        f"\n[bold red]Cluster creation failed at step '{err.step}' "
        f"({err.resource}):[/bold red] {escape(str(err.cause))}"
    )
    if err.resources:
        created = ", ".join(f"{r.kind.value} {r.name}" for r in err.resources)
        console.print(f"Resources created before the failure: {escape(created)}")
    if err.rollback is not None:
        print_teardown_report(err.rollback, console, "Rollback")


def print_access_instructions(result: ProvisionResult, console: Console) -> None:
    spec = result.spec
    console.print(f"\n[bold green]Cluster {spec.name} successfully created![/bold green]")
    lines = [
        "1. Make sure [magenta]gcloud[/magenta] is installed and authenticated with an "
        "account that has access to the project.",
        "2. Verify the cluster with [magenta]gcloud container clusters list[/magenta]",
    ]
    if spec.enable_private_nodes and result.bastion is not None:
        bastion = bastion_name(spec.name)
        zone = result.bastion.zone
        lines += [
            "3. Enter the bastion with [magenta]gcloud compute ssh "
            f"--project {spec.project_id} --zone={zone} {bastion}[/magenta]",
            "4. From the bastion, check the nodes with [magenta]kubectl get nodes[/magenta]",
            "5. \\[Optional] Run [magenta]gcloud compute config-ssh[/magenta] and connect with "
            f"[magenta]ssh {bastion}.{zone}.{spec.project_id}[/magenta]",
        ]
    else:
        kubeconfig = f"$HOME/.kube/config_gke_{spec.name}_{spec.region}"
        lines += [
            "3. Make sure [magenta]kubectl[/magenta] is installed: "
            "https://kubernetes.io/docs/tasks/tools/",
            f"4. Fetch credentials with [magenta]KUBECONFIG={kubeconfig} gcloud container "
            f"clusters get-credentials {spec.name} --region={spec.region}[/magenta]",
            "5. Check the nodes with [magenta]kubectl get nodes[/magenta]",
        ]
    for line in lines:
        console.print(line)
