import warnings

# compute_v1 and container_v1 warn about interpreter support on import; the
# warnings would land in the middle of the cluster questions.
for _module in ("google.api_core", "google.cloud", "google.auth"):
    warnings.filterwarnings("ignore", category=FutureWarning, module=_module)
