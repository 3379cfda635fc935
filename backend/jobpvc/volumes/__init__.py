"""
Per-job PersistentVolumeClaim lifecycle.

Every job gets one claim, named after the job, that survives between builds.
The claim is created on the first build, recreated when its requested size
changes and deleted with the job.

Usage:
    from jobpvc.volumes import PVCReconciler, PVCSpec, get_volume_store

    reconciler = PVCReconciler(get_volume_store())
    claim = reconciler.ensure_for_identity("team/my-job", "ci", PVCSpec(requested_size="20Gi"))

Module structure:
    - naming.py: job identity -> claim name
    - models.py: PVCSpec and claim Pydantic models
    - reconciler.py: PVCReconciler (ensure / remove)
    - listener.py: job delete/rename hooks
    - workspace_volume.py: pod-building side (claim + pod volume entry)
    - store/: ClusterVolumeStore ABC, Kubernetes and in-memory implementations
"""

from jobpvc.volumes.exceptions import ClaimConflictError
from jobpvc.volumes.exceptions import ClaimDeleteFailedError
from jobpvc.volumes.exceptions import ClaimValidationError
from jobpvc.volumes.exceptions import PartialReconciliationError
from jobpvc.volumes.exceptions import ReconciliationCancelledError
from jobpvc.volumes.exceptions import StoreUnavailableError
from jobpvc.volumes.exceptions import VolumeClaimError
from jobpvc.volumes.listener import ClaimTarget
from jobpvc.volumes.listener import JobLifecycleListener
from jobpvc.volumes.models import ClaimDescriptor
from jobpvc.volumes.models import ClaimRecord
from jobpvc.volumes.models import PVCSpec
from jobpvc.volumes.naming import normalize
from jobpvc.volumes.reconciler import PVCReconciler
from jobpvc.volumes.store.base import ClusterVolumeStore
from jobpvc.volumes.store.base import get_volume_store
from jobpvc.volumes.workspace_volume import JobPVCWorkspaceVolume

__all__ = [
    # Factory function (preferred)
    "get_volume_store",
    # Core
    "normalize",
    "PVCReconciler",
    "JobLifecycleListener",
    "ClaimTarget",
    "JobPVCWorkspaceVolume",
    # Interface
    "ClusterVolumeStore",
    # Models
    "PVCSpec",
    "ClaimDescriptor",
    "ClaimRecord",
    # Errors
    "VolumeClaimError",
    "ClaimValidationError",
    "StoreUnavailableError",
    "ClaimConflictError",
    "ClaimDeleteFailedError",
    "PartialReconciliationError",
    "ReconciliationCancelledError",
]
