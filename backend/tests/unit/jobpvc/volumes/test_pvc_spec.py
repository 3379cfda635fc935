"""Unit tests for PVCSpec defaults, validation and quantity comparison."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from jobpvc.configs.constants import ACCESS_MODE_OPTIONS
from jobpvc.configs.constants import AccessMode
from jobpvc.volumes.exceptions import ClaimValidationError
from jobpvc.volumes.models import PVCSpec
from jobpvc.volumes.quantity import parse_requested_size
from jobpvc.volumes.quantity import parse_storage_quantity
from jobpvc.volumes.quantity import quantities_equal


class TestPVCSpecDefaults:
    def test_empty_spec_uses_defaults(self) -> None:
        spec = PVCSpec()
        assert spec.requested_size_or_default() == "10Gi"
        assert spec.access_modes_or_default() == ["ReadWriteOnce"]
        assert spec.storage_class_or_default() is None
        assert spec.resource_request_map() == {"storage": "10Gi"}

    def test_explicit_values_win(self) -> None:
        spec = PVCSpec(
            requested_size="20Gi",
            access_modes=[AccessMode.READ_WRITE_MANY],
            storage_class_name="nfs-client",
        )
        assert spec.requested_size_or_default() == "20Gi"
        assert spec.access_modes_or_default() == ["ReadWriteMany"]
        assert spec.storage_class_or_default() == "nfs-client"
        assert spec.resource_request_map() == {"storage": "20Gi"}

    def test_blank_form_values_are_unset(self) -> None:
        """Test empty strings coming from a form fall back to the defaults."""
        spec = PVCSpec(requested_size="  ", access_modes="", storage_class_name="")
        assert spec.requested_size is None
        assert spec.access_modes is None
        assert spec.storage_class_name is None
        assert spec.requested_size_or_default() == "10Gi"
        assert spec.access_modes_or_default() == ["ReadWriteOnce"]

    def test_single_access_mode_string(self) -> None:
        spec = PVCSpec(access_modes="ReadOnlyMany")
        assert spec.access_modes == (AccessMode.READ_ONLY_MANY,)
        assert spec.access_modes_or_default() == ["ReadOnlyMany"]


class TestPVCSpecValidation:
    def test_invalid_size_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PVCSpec(requested_size="ten gigs")

    @pytest.mark.parametrize("size", ["0", "0Gi", "-5Gi"])
    def test_non_positive_size_is_rejected(self, size: str) -> None:
        with pytest.raises(ValidationError):
            PVCSpec(requested_size=size)

    def test_unknown_access_mode_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PVCSpec(access_modes=["ReadWriteSometimes"])

    def test_spec_is_immutable(self) -> None:
        spec = PVCSpec(requested_size="1Gi")
        with pytest.raises(ValidationError):
            spec.requested_size = "2Gi"  # type: ignore[misc]


class TestPVCSpecEquality:
    def test_equal_specs(self) -> None:
        assert PVCSpec(requested_size="5Gi", storage_class_name="fast") == PVCSpec(
            requested_size="5Gi", storage_class_name="fast"
        )
        assert hash(PVCSpec(requested_size="5Gi")) == hash(
            PVCSpec(requested_size="5Gi")
        )

    @pytest.mark.parametrize(
        "other",
        [
            PVCSpec(requested_size="6Gi", storage_class_name="fast"),
            PVCSpec(requested_size="5Gi", storage_class_name="slow"),
            PVCSpec(
                requested_size="5Gi",
                storage_class_name="fast",
                access_modes="ReadWriteMany",
            ),
        ],
    )
    def test_any_field_difference_breaks_equality(self, other: PVCSpec) -> None:
        assert PVCSpec(requested_size="5Gi", storage_class_name="fast") != other


def test_access_mode_options_order() -> None:
    assert [mode.value for mode in ACCESS_MODE_OPTIONS] == [
        "ReadWriteOnce",
        "ReadOnlyMany",
        "ReadWriteMany",
    ]


class TestQuantity:
    def test_binary_units(self) -> None:
        assert parse_storage_quantity("1Gi") == Decimal(1024**3)
        assert parse_storage_quantity("1Gi") == parse_storage_quantity("1024Mi")

    def test_decimal_and_binary_units_differ(self) -> None:
        assert parse_storage_quantity("1G") != parse_storage_quantity("1Gi")

    def test_invalid_quantity(self) -> None:
        with pytest.raises(ClaimValidationError):
            parse_storage_quantity("lots")

    def test_requested_size_must_be_positive(self) -> None:
        assert parse_requested_size("1Mi") == Decimal(1024**2)
        for size in ["0", "-5Gi", "lots"]:
            with pytest.raises(ClaimValidationError):
                parse_requested_size(size)

    @pytest.mark.parametrize(
        "actual,desired,expected",
        [
            ("1Gi", "1024Mi", True),
            ("10Gi", "10Gi", True),
            ("1Gi", "2Gi", False),
            (None, "10Gi", False),
        ],
    )
    def test_quantities_equal(
        self, actual: str | None, desired: str, expected: bool
    ) -> None:
        assert quantities_equal(actual, desired) is expected
