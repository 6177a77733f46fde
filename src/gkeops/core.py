from tenacity import stop_after_attempt, wait_exponential

# Shared retry configuration for read-only SDK calls
# usage: @retry(**RETRY_CONFIG)
RETRY_CONFIG = {
    "stop": stop_after_attempt(3),
    "wait": wait_exponential(multiplier=1, min=4, max=10),
    "reraise": True,
}

# Long-running cluster operations (container_v1.Operation.Status names)
OPERATION_PENDING_STATUSES = frozenset({"STATUS_UNSPECIFIED", "PENDING", "RUNNING"})
OPERATION_SUCCESS_STATUSES = frozenset({"DONE"})
OPERATION_FAILURE_STATUSES = frozenset({"ABORTING"})
DEFAULT_POLL_INTERVAL = 5.0  # seconds

# Private masters get a /28 out of 172.16.0.0/12 (RFC 1918)
MASTER_CIDR_PARENT = "172.16.0.0/12"
MASTER_CIDR_PREFIX = 28
DEFAULT_MASTER_CIDR = "172.16.0.0/28"

# see https://cloud.google.com/kubernetes-engine/docs/how-to/alias-ips#cluster_sizing_primary_range
DEFAULT_PRIVATE_SUBNET_RANGE = "10.0.0.0/24"

LOGGING_SERVICE = "logging.googleapis.com/kubernetes"
MONITORING_SERVICE = "monitoring.googleapis.com/kubernetes"
CLUSTER_VERSION = "latest"

# Bastion host
BASTION_MACHINE_TYPE = "e2-small"
BASTION_IMAGE = "projects/debian-cloud/global/images/family/debian-12"
BASTION_DISK_SIZE_GB = 10
BASTION_STARTUP_SCRIPT = (
    "#! /bin/bash\n"
    "apt-get update && apt-get -y install kubectl google-cloud-cli-gke-gcloud-auth-plugin"
    " && apt-get -y autoremove && apt-get -y autoclean\n"
    "echo 'gcloud container --project {project} clusters get-credentials {cluster}"
    " --region={region}' > /etc/profile.d/gkeops-{cluster}.sh"
)
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

# Worker node access scopes, keyed by the label shown to the operator
ACCESS_LEVELS = {
    "Default GKE": "default",
    "Custom": "custom",
    "All Cloud APIs": "all",
}

FULL_ACCESS_SCOPES = {
    "All Cloud APIs": CLOUD_PLATFORM_SCOPE,
}

DEFAULT_ACCESS_SCOPES = {
    "Storage - Read Only": "https://www.googleapis.com/auth/devstorage.read_only",
    "Logging - Write": "https://www.googleapis.com/auth/logging.write",
    "Monitoring": "https://www.googleapis.com/auth/monitoring",
    "Service Control": "https://www.googleapis.com/auth/servicecontrol",
    "Service Management - Read Only": "https://www.googleapis.com/auth/service.management.readonly",
    "Stackdriver Trace - Write Only": "https://www.googleapis.com/auth/trace.append",
}

CUSTOM_ACCESS_SCOPES = {
    "User Info": "https://www.googleapis.com/auth/userinfo.email",
    "Compute Engine - Read Only": "https://www.googleapis.com/auth/compute.readonly",
    "Compute Engine - Read Write": "https://www.googleapis.com/auth/compute",
    "Storage - Write Only": "https://www.googleapis.com/auth/devstorage.write_only",
    "Storage - Read Write": "https://www.googleapis.com/auth/devstorage.read_write",
    "Storage - Full": "https://www.googleapis.com/auth/devstorage.full_control",
    "Task Queue": "https://www.googleapis.com/auth/taskqueue",
    "BigQuery": "https://www.googleapis.com/auth/bigquery",
    "Cloud SQL": "https://www.googleapis.com/auth/sqlservice.admin",
    "Cloud Datastore": "https://www.googleapis.com/auth/datastore",
    "Logging - Read": "https://www.googleapis.com/auth/logging.read",
    "Logging - Full": "https://www.googleapis.com/auth/logging.admin",
    "Bigtable Data - Read Only": "https://www.googleapis.com/auth/bigtable.data.readonly",
    "Bigtable Data - Read Write": "https://www.googleapis.com/auth/bigtable.data",
    "Bigtable Admin - Tables Only": "https://www.googleapis.com/auth/bigtable.admin.table",
    "Bigtable Admin - Full": "https://www.googleapis.com/auth/bigtable.admin",
    "Cloud Pub/Sub": "https://www.googleapis.com/auth/pubsub",
    "Service Management - Read Write": "https://www.googleapis.com/auth/service.management",
    "Stackdriver Trace - Read Only": "https://www.googleapis.com/auth/trace.readonly",
    "Cloud Source Repositories - Read Only": "https://www.googleapis.com/auth/source.read_only",
    "Cloud Source Repositories - Read Write": "https://www.googleapis.com/auth/source.read_write",
    "Cloud Source Repositories - Full Control": "https://www.googleapis.com/auth/source.full_control",
    "Cloud Debugger": "https://www.googleapis.com/auth/cloud_debugger",
}

ALL_ACCESS_SCOPES = {
    **FULL_ACCESS_SCOPES,
    **DEFAULT_ACCESS_SCOPES,
    **CUSTOM_ACCESS_SCOPES,
}
