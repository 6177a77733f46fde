from google.cloud import compute_v1
from tenacity import retry

from ..clients import (
    get_machine_types_client,
    get_projects_client,
    get_regions_client,
    get_zones_client,
)
from ..core import RETRY_CONFIG
from ..logger import logger
from ..schemas.compute import GCPQuotaReport, QuotaMetric


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def list_regions(project_id: str) -> list[str]:
    client = get_regions_client()
    return sorted(r.name for r in client.list(project=project_id))


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def list_zones(project_id: str, region: str) -> list[str]:
    client = get_zones_client()
    request = compute_v1.ListZonesRequest(
        project=project_id, filter=f"name eq {region}-.*"
    )
    return sorted(z.name for z in client.list(request=request))


def _machine_type_sort_key(name: str) -> tuple[str, str, int]:
    # generation-family-cores, e.g. n2-standard-8
    parts = name.split("-")
    generation = parts[0]
    family = parts[1] if len(parts) > 1 else ""
    try:
        cores = int(parts[2])
    except (IndexError, ValueError):
        cores = 0
    return (generation, family, cores)


@retry(**RETRY_CONFIG)  # type: ignore[call-overload, untyped-decorator]
def list_machine_types(project_id: str, region: str) -> list[str]:
    """
    Machine types offered in every zone of the region, so a regional node pool
    can be scheduled anywhere.
    """
    client = get_machine_types_client()
    common: set[str] | None = None
    for zone in list_zones(project_id, region):
        names = {mt.name for mt in client.list(project=project_id, zone=zone)}
        common = names if common is None else common & names

    return sorted(common or set(), key=_machine_type_sort_key)


def get_quotas(project_id: str, region: str) -> GCPQuotaReport:
    """Project-wide and regional quota usage, keyed by metric name."""
    report = GCPQuotaReport()

    try:
        project = get_projects_client().get(project=project_id)
        for q in project.quotas:
            report.project[q.metric] = QuotaMetric(
                metric=q.metric, limit=q.limit, usage=q.usage
            )
    except Exception as e:
        logger.warning(f"Failed to read project quotas for {project_id}: {e}")

    try:
        reg = get_regions_client().get(project=project_id, region=region)
        for q in reg.quotas:
            report.region[q.metric] = QuotaMetric(
                metric=q.metric, limit=q.limit, usage=q.usage
            )
    except Exception as e:
        logger.warning(f"Failed to read quotas for {region}: {e}")

    return report
