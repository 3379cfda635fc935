"""Exceptions raised by claim reconciliation and the volume stores.

Every exception carries enough context (namespace, claim name, identity,
attempted operation) for the caller to log it and decide whether to retry.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jobpvc.volumes.models import PVCSpec


class VolumeClaimError(Exception):
    """Base exception for per-job claim errors."""

    def __init__(
        self,
        message: str,
        namespace: str | None = None,
        claim_name: str | None = None,
        identity: str | None = None,
        operation: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.namespace = namespace
        self.claim_name = claim_name
        self.identity = identity
        self.operation = operation


class ClaimValidationError(VolumeClaimError):
    """The desired spec, identity or derived claim name is not acceptable.

    Raised before any network call for local checks, or by the store when the
    cluster rejects the claim at creation time.
    """


class StoreUnavailableError(VolumeClaimError):
    """The cluster could not be reached or refused the request (auth, 5xx)."""

    def __init__(
        self,
        message: str,
        namespace: str | None = None,
        claim_name: str | None = None,
        identity: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(
            message,
            namespace=namespace,
            claim_name=claim_name,
            identity=identity,
            operation=operation,
        )
        self.status_code = status_code


class ClaimConflictError(VolumeClaimError):
    """A claim with the same name already exists.

    Recoverable: another actor created the claim first. The caller may list
    again and treat the existing claim as the result.
    """


class ClaimDeleteFailedError(VolumeClaimError):
    """Deleting a claim failed. No retry is attempted; the claim may be orphaned."""


class PartialReconciliationError(VolumeClaimError):
    """The drifted claim was deleted but its replacement was not created.

    The identity is left without a claim. Calling ensure_for_identity() again
    is safe and will create the claim.
    """

    def __init__(
        self,
        message: str,
        namespace: str | None = None,
        claim_name: str | None = None,
        identity: str | None = None,
        operation: str | None = None,
        desired_spec: "PVCSpec | None" = None,
    ):
        super().__init__(
            message,
            namespace=namespace,
            claim_name=claim_name,
            identity=identity,
            operation=operation,
        )
        self.desired_spec = desired_spec


class ReconciliationCancelledError(VolumeClaimError):
    """The caller cancelled the reconciliation before anything was changed."""
