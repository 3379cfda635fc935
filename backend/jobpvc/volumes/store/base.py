"""Abstract base class and factory for cluster claim access.

ClusterVolumeStore is the only way the reconciler sees or changes claims.
Use get_volume_store() to get the implementation selected by
VOLUME_STORE_BACKEND, or construct one explicitly and hand it to the
reconciler.

IMPORTANT: Stores must not cache claims between calls. The cluster is the
only source of truth and every call has to reflect its current state.
"""

import threading
from abc import ABC
from abc import abstractmethod

from jobpvc.configs.app_configs import VOLUME_STORE_BACKEND
from jobpvc.configs.constants import VolumeStoreBackend
from jobpvc.utils.logger import setup_logger
from jobpvc.volumes.models import ClaimDescriptor
from jobpvc.volumes.models import ClaimRecord

logger = setup_logger()


class ClusterVolumeStore(ABC):
    """Abstract interface for listing, creating and deleting claims.

    Implementations translate their backend's failures into the exceptions of
    jobpvc.volumes.exceptions:
    - ClaimConflictError when a claim with the same name already exists
    - ClaimValidationError when the cluster rejects the claim itself
    - StoreUnavailableError for connectivity, auth or server errors
    """

    @abstractmethod
    def list_claims(self, namespace: str) -> list[ClaimRecord]:
        """List every claim in a namespace.

        Args:
            namespace: Namespace to list

        Returns:
            All claims of the namespace, unfiltered

        Raises:
            StoreUnavailableError: If the listing fails
        """
        ...

    @abstractmethod
    def create_claim(self, namespace: str, descriptor: ClaimDescriptor) -> ClaimRecord:
        """Create a claim.

        Args:
            namespace: Namespace to create the claim in
            descriptor: The claim to create

        Returns:
            ClaimRecord of the created claim

        Raises:
            ClaimConflictError: If a claim with the same name already exists
            ClaimValidationError: If the cluster rejects the claim
            StoreUnavailableError: For any other failure
        """
        ...

    @abstractmethod
    def delete_claim(self, record: ClaimRecord) -> bool:
        """Delete a claim.

        Args:
            record: The claim to delete

        Returns:
            True if a claim was deleted, False if it no longer existed

        Raises:
            StoreUnavailableError: If the delete call fails
        """
        ...

    def find_claim(self, namespace: str, name: str) -> ClaimRecord | None:
        """Find a claim by name from a fresh listing of the namespace."""
        for record in self.list_claims(namespace):
            if record.name == name:
                return record
        return None


# Singleton instance cache for the factory
_volume_store_instance: ClusterVolumeStore | None = None
_volume_store_lock = threading.Lock()


def get_volume_store() -> ClusterVolumeStore:
    """Get the ClusterVolumeStore implementation selected by VOLUME_STORE_BACKEND.

    Returns:
        ClusterVolumeStore instance:
        - KubernetesVolumeStore for kubernetes backend (production)
        - InMemoryVolumeStore for memory backend (development)
    """
    global _volume_store_instance

    if _volume_store_instance is None:
        with _volume_store_lock:
            if _volume_store_instance is None:
                if VOLUME_STORE_BACKEND == VolumeStoreBackend.KUBERNETES:
                    from jobpvc.volumes.store.kubernetes.kubernetes_volume_store import (
                        KubernetesVolumeStore,
                    )

                    _volume_store_instance = KubernetesVolumeStore()
                    logger.info("Using KubernetesVolumeStore for claim operations")
                elif VOLUME_STORE_BACKEND == VolumeStoreBackend.MEMORY:
                    from jobpvc.volumes.store.memory.in_memory_volume_store import (
                        InMemoryVolumeStore,
                    )

                    _volume_store_instance = InMemoryVolumeStore()
                    logger.info("Using InMemoryVolumeStore for claim operations")
                else:
                    raise ValueError(
                        f"Unknown volume store backend: {VOLUME_STORE_BACKEND}"
                    )

    return _volume_store_instance
