import json
import os

from jobpvc.configs.constants import VolumeStoreBackend
from jobpvc.utils.logger import setup_logger

logger = setup_logger()

# ============================================================================
# Volume Store Configuration
# ============================================================================

# "kubernetes" = real cluster (production)
# "memory" = in-process claims, nothing survives a restart (development)
VOLUME_STORE_BACKEND = VolumeStoreBackend(
    os.environ.get("VOLUME_STORE_BACKEND", "kubernetes")
)

# Namespace used when the caller does not pass one explicitly (CLI, listeners)
PVC_NAMESPACE = os.environ.get("PVC_NAMESPACE", "default")

# Timeout applied to every single call against the cluster API
PVC_API_REQUEST_TIMEOUT_SECONDS = float(
    os.environ.get("PVC_API_REQUEST_TIMEOUT_SECONDS") or 30
)

# Page size used when listing claims, listing always walks every page
PVC_LIST_PAGE_SIZE = int(os.environ.get("PVC_LIST_PAGE_SIZE") or 500)

# Kubernetes deletes are async - a claim still mounted by a pod stays in
# Terminating until the pvc-protection finalizer is released
PVC_DELETION_TIMEOUT_SECONDS = float(
    os.environ.get("PVC_DELETION_TIMEOUT_SECONDS") or 30
)
PVC_DELETION_POLL_INTERVAL_SECONDS = float(
    os.environ.get("PVC_DELETION_POLL_INTERVAL_SECONDS") or 0.5
)

# Labels stamped on every created claim, used by cleanup tooling to discover
# them. The keys are agreed with whoever operates the cluster.
# Example: {"jenkins": "slave", "team": "ci"}
_DEFAULT_PVC_LABELS = {"jenkins": "slave"}


def parse_pvc_labels(raw: str | None) -> dict[str, str]:
    """Parse a JSON object of string labels, falling back to the defaults."""
    if not raw:
        return dict(_DEFAULT_PVC_LABELS)
    try:
        labels = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"PVC_DEFAULT_LABELS is not valid JSON ({e}), using defaults")
        return dict(_DEFAULT_PVC_LABELS)
    if not isinstance(labels, dict) or not all(
        isinstance(key, str) and isinstance(value, str)
        for key, value in labels.items()
    ):
        logger.warning(
            f"PVC_DEFAULT_LABELS must map strings to strings, got {raw!r}, "
            "using defaults"
        )
        return dict(_DEFAULT_PVC_LABELS)
    return labels


PVC_DEFAULT_LABELS = parse_pvc_labels(os.environ.get("PVC_DEFAULT_LABELS"))
