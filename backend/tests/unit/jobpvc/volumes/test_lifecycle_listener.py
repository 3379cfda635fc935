"""Unit tests for the job delete/rename hooks."""

import pytest

from jobpvc.volumes.exceptions import ClaimDeleteFailedError
from jobpvc.volumes.listener import ClaimTarget
from jobpvc.volumes.listener import JobLifecycleListener
from jobpvc.volumes.reconciler import PVCReconciler
from jobpvc.volumes.store.memory.in_memory_volume_store import InMemoryVolumeStore
from tests.unit.jobpvc.volumes.claim_utils import make_claim
from tests.unit.jobpvc.volumes.claim_utils import TEST_LABELS


@pytest.fixture
def stores() -> list[InMemoryVolumeStore]:
    """Two clusters, both holding a claim for "team/job1"."""
    return [
        InMemoryVolumeStore(
            [make_claim("pvc-team-job1", namespace="ci"), make_claim("pvc-other")]
        ),
        InMemoryVolumeStore([make_claim("pvc-team-job1", namespace="builds")]),
    ]


@pytest.fixture
def listener(stores: list[InMemoryVolumeStore]) -> JobLifecycleListener:
    return JobLifecycleListener(
        [
            ClaimTarget(PVCReconciler(stores[0], labels=TEST_LABELS), "ci"),
            ClaimTarget(PVCReconciler(stores[1], labels=TEST_LABELS), "builds"),
        ]
    )


def test_on_deleted_removes_claim_everywhere(
    stores: list[InMemoryVolumeStore], listener: JobLifecycleListener
) -> None:
    listener.on_deleted("team/job1")

    assert stores[0].get("ci", "pvc-team-job1") is None
    assert stores[1].get("builds", "pvc-team-job1") is None
    # unrelated claims stay
    assert stores[0].get("ci", "pvc-other") is not None


def test_on_deleted_without_claim_is_noop(
    stores: list[InMemoryVolumeStore], listener: JobLifecycleListener
) -> None:
    listener.on_deleted("never-built")

    assert stores[0].mutating_calls == []
    assert stores[1].mutating_calls == []


def test_on_renamed_only_removes_old_claim(
    stores: list[InMemoryVolumeStore], listener: JobLifecycleListener
) -> None:
    """Test a rename deletes the old claim and does not create the new one."""
    listener.on_renamed("team/job1", "team/job2")

    for store in stores:
        assert len(store.calls_for("delete")) == 1
        assert store.calls_for("create") == []
    assert stores[0].get("ci", "pvc-team-job2") is None


def test_on_location_changed_behaves_like_rename(
    stores: list[InMemoryVolumeStore], listener: JobLifecycleListener
) -> None:
    listener.on_location_changed("team/job1", "archive/job1")

    assert stores[0].get("ci", "pvc-team-job1") is None
    assert stores[1].get("builds", "pvc-team-job1") is None
    assert stores[0].calls_for("create") == []


def test_single_failure_still_processes_other_targets(
    stores: list[InMemoryVolumeStore], listener: JobLifecycleListener
) -> None:
    stores[0].fail_next("delete")

    with pytest.raises(ClaimDeleteFailedError) as excinfo:
        listener.on_deleted("team/job1")

    assert excinfo.value.namespace == "ci"
    assert excinfo.value.identity == "team/job1"
    assert stores[0].get("ci", "pvc-team-job1") is not None
    assert stores[1].get("builds", "pvc-team-job1") is None


def test_multiple_failures_are_grouped(
    stores: list[InMemoryVolumeStore], listener: JobLifecycleListener
) -> None:
    stores[0].fail_next("delete")
    stores[1].fail_next("list")

    with pytest.raises(ExceptionGroup) as excinfo:
        listener.on_deleted("team/job1")

    assert len(excinfo.value.exceptions) == 2
    assert isinstance(excinfo.value.exceptions[0], ClaimDeleteFailedError)
