"""Unit tests for environment-driven configuration parsing."""

import logging

import pytest

from jobpvc.configs.app_configs import parse_pvc_labels


def test_unset_labels_use_defaults() -> None:
    assert parse_pvc_labels(None) == {"jenkins": "slave"}
    assert parse_pvc_labels("") == {"jenkins": "slave"}


def test_valid_labels() -> None:
    assert parse_pvc_labels('{"team": "ci", "tier": "build"}') == {
        "team": "ci",
        "tier": "build",
    }


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[1]",
        '"slave"',
        '{"replicas": 3}',
    ],
)
def test_unusable_labels_fall_back_with_warning(
    raw: str, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        labels = parse_pvc_labels(raw)

    assert labels == {"jenkins": "slave"}
    assert "PVC_DEFAULT_LABELS" in caplog.text
