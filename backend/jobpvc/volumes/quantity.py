from decimal import Decimal

from kubernetes.utils import parse_quantity  # type: ignore[import-untyped]

from jobpvc.volumes.exceptions import ClaimValidationError


def parse_storage_quantity(quantity: str | int | float) -> Decimal:
    """Parse a Kubernetes quantity ("10Gi", "1024Mi", "5G") into bytes.

    Uses the same parser as the Kubernetes client so "1Gi" and "1024Mi"
    compare equal.

    Raises:
        ClaimValidationError: If the quantity is not a valid Kubernetes quantity
    """
    try:
        return parse_quantity(quantity)
    except (ValueError, TypeError) as e:
        raise ClaimValidationError(
            f"Invalid storage quantity {quantity!r}: {e}"
        ) from e


def parse_requested_size(quantity: str | int | float) -> Decimal:
    """Parse a size a claim may request.

    The API server refuses claims requesting zero or a negative amount of
    storage, so those are rejected here as well.

    Raises:
        ClaimValidationError: If the quantity is invalid or not positive
    """
    value = parse_storage_quantity(quantity)
    if value <= 0:
        raise ClaimValidationError(
            f"Requested storage must be greater than zero, got {quantity!r}"
        )
    return value


def quantities_equal(actual: str | None, desired: str) -> bool:
    """Semantic comparison of two storage quantities.

    A missing actual quantity never equals a desired one.
    """
    if actual is None:
        return False
    return parse_storage_quantity(actual) == parse_storage_quantity(desired)
