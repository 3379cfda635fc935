"""Fixtures for per-job claim unit tests."""

import pytest

from jobpvc.volumes.reconciler import PVCReconciler
from jobpvc.volumes.store.memory.in_memory_volume_store import InMemoryVolumeStore
from tests.unit.jobpvc.volumes.claim_utils import TEST_LABELS


@pytest.fixture
def store() -> InMemoryVolumeStore:
    """Empty in-memory claim store."""
    return InMemoryVolumeStore()


@pytest.fixture
def reconciler(store: InMemoryVolumeStore) -> PVCReconciler:
    """Reconciler over the in-memory store, never sleeps while waiting."""
    return PVCReconciler(
        store,
        labels=TEST_LABELS,
        deletion_timeout=0,
        deletion_poll_interval=0,
    )
