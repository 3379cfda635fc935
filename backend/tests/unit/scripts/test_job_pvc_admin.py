"""Unit tests for the per-job PVC admin script."""

import pytest

from jobpvc.volumes.models import ClaimRecord
from jobpvc.volumes.store.memory.in_memory_volume_store import InMemoryVolumeStore
from scripts.job_pvc_admin import build_parser
from scripts.job_pvc_admin import run


def _run(argv: list[str], store: InMemoryVolumeStore | None = None) -> int:
    return run(build_parser().parse_args(argv), store)


def test_normalize(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["normalize", "MY projects/cli"]) == 0
    assert capsys.readouterr().out.strip() == "pvc-my-projects-cli"


def test_normalize_warns_on_invalid_name(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["normalize", "$$$"]) == 1
    assert "not a valid PVC name" in capsys.readouterr().err


def test_ensure_then_list(capsys: pytest.CaptureFixture[str]) -> None:
    store = InMemoryVolumeStore()

    ensure_args = ["ensure", "team/job1", "--namespace", "ci", "--size", "2Gi"]
    assert _run(ensure_args, store) == 0
    assert _run(["list", "--namespace", "ci", "--managed-only"], store) == 0

    out = capsys.readouterr().out
    assert "ci/pvc-team-job1  size=2Gi" in out
    assert "1 PVC(s)" in out


def test_list_skips_foreign_claims(capsys: pytest.CaptureFixture[str]) -> None:
    store = InMemoryVolumeStore(
        [
            ClaimRecord(name="data-postgres-0", namespace="ci"),
            ClaimRecord(name="pvc-job1", namespace="ci", requested_storage="1Gi"),
        ]
    )

    assert _run(["list", "--namespace", "ci"], store) == 0

    out = capsys.readouterr().out
    assert "data-postgres-0" not in out
    assert "1 PVC(s)" in out


def test_remove(capsys: pytest.CaptureFixture[str]) -> None:
    store = InMemoryVolumeStore([ClaimRecord(name="pvc-job1", namespace="ci")])

    assert _run(["remove", "job1", "--namespace", "ci"], store) == 0
    assert _run(["remove", "job1", "--namespace", "ci"], store) == 0

    out = capsys.readouterr().out
    assert "Removed PVC ci/pvc-job1" in out
    assert "No PVC ci/pvc-job1 found" in out


def test_errors_exit_non_zero(capsys: pytest.CaptureFixture[str]) -> None:
    store = InMemoryVolumeStore()
    store.fail_next("list")

    assert _run(["remove", "job1", "--namespace", "ci"], store) == 1
    assert "ERROR" in capsys.readouterr().err


def test_invalid_size_exits_non_zero(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["ensure", "job1", "--size", "lots"], InMemoryVolumeStore()) == 1
    assert "ERROR" in capsys.readouterr().err
