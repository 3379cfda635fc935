from enum import Enum

# Prefix applied to every claim name derived from a job identity, keeps the
# per-job claims apart from unrelated claims living in the same namespace
PVC_NAME_PREFIX = "pvc-"

# Key of the storage request inside a claim's resources.requests map
STORAGE_RESOURCE_KEY = "storage"

DEFAULT_REQUESTS_SIZE = "10Gi"


class AccessMode(str, Enum):
    """Access modes a per-job claim can be requested with."""

    READ_WRITE_ONCE = "ReadWriteOnce"
    READ_ONLY_MANY = "ReadOnlyMany"
    READ_WRITE_MANY = "ReadWriteMany"


DEFAULT_ACCESS_MODE = AccessMode.READ_WRITE_ONCE

# Display order used by anything presenting the access mode choice to a user
ACCESS_MODE_OPTIONS: list[AccessMode] = [
    AccessMode.READ_WRITE_ONCE,
    AccessMode.READ_ONLY_MANY,
    AccessMode.READ_WRITE_MANY,
]


class VolumeStoreBackend(str, Enum):
    """Backend used to reach the cluster's claims.

    KUBERNETES: Production mode - talks to the cluster API
    MEMORY: Development/test mode - claims live in process memory
    """

    KUBERNETES = "kubernetes"
    MEMORY = "memory"
