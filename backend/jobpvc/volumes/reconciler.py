"""Per-job claim reconciliation.

PVCReconciler converges the claims of a namespace towards what the jobs
need. Per identity+namespace there are two states:

    Absent  --ensure(spec)-->                     Present(spec.size)
    Present(S) --ensure(spec), S == spec.size-->  Present(S)         (no-op)
    Present(S) --ensure(spec), S != spec.size-->  Absent -> Present(spec.size)
    Present(S) --remove-->                        Absent
    Absent  --remove-->                           Absent             (no-op)

A claim is never patched in place: a size change deletes the claim and
creates a new one, so ensure_for_identity() must only be called before the
pod consuming the claim is scheduled.

IMPORTANT: No locking happens here. Calls for different identities are
independent, calls for the same identity+namespace must be serialized by the
caller. Two concurrent creates of the same claim are resolved by the API
server, the loser gets a ClaimConflictError.
"""

import threading
import time

from jobpvc.configs.app_configs import PVC_DEFAULT_LABELS
from jobpvc.configs.app_configs import PVC_DELETION_POLL_INTERVAL_SECONDS
from jobpvc.configs.app_configs import PVC_DELETION_TIMEOUT_SECONDS
from jobpvc.utils.logger import setup_logger
from jobpvc.volumes.exceptions import ClaimDeleteFailedError
from jobpvc.volumes.exceptions import ClaimValidationError
from jobpvc.volumes.exceptions import PartialReconciliationError
from jobpvc.volumes.exceptions import ReconciliationCancelledError
from jobpvc.volumes.exceptions import VolumeClaimError
from jobpvc.volumes.models import ClaimDescriptor
from jobpvc.volumes.models import ClaimRecord
from jobpvc.volumes.models import PVCSpec
from jobpvc.volumes.naming import normalize
from jobpvc.volumes.quantity import parse_requested_size
from jobpvc.volumes.quantity import quantities_equal
from jobpvc.volumes.store.base import ClusterVolumeStore

logger = setup_logger()


class PVCReconciler:
    """Creates, replaces and deletes the claim belonging to a job identity.

    Args:
        store: Store used for every claim read and write
        labels: Labels stamped on created claims, PVC_DEFAULT_LABELS if omitted
        wait_for_deletion: After deleting a drifted claim, wait until it is
            gone before creating the replacement
        deletion_timeout: Maximum seconds to wait for a deleted claim to vanish
        deletion_poll_interval: Seconds between two checks while waiting
    """

    def __init__(
        self,
        store: ClusterVolumeStore,
        labels: dict[str, str] | None = None,
        wait_for_deletion: bool = True,
        deletion_timeout: float = PVC_DELETION_TIMEOUT_SECONDS,
        deletion_poll_interval: float = PVC_DELETION_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._store = store
        self._labels = dict(PVC_DEFAULT_LABELS if labels is None else labels)
        self._wait_for_deletion = wait_for_deletion
        self._deletion_timeout = deletion_timeout
        self._deletion_poll_interval = deletion_poll_interval

    @property
    def store(self) -> ClusterVolumeStore:
        return self._store

    def ensure_for_identity(
        self,
        identity: str,
        namespace: str,
        spec: PVCSpec,
        cancel_event: threading.Event | None = None,
    ) -> ClaimRecord:
        """Make sure the claim of `identity` exists with the size of `spec`.

        Args:
            identity: Job identity the claim belongs to
            namespace: Namespace of the claim
            spec: Desired claim properties
            cancel_event: Set by the caller to abort the reconciliation

        Returns:
            The existing claim if it already matches, else the newly created one

        Raises:
            ClaimValidationError: Invalid identity, namespace or size, raised
                before the store is called; or the cluster rejected the claim
            StoreUnavailableError: The store could not list or create
            ClaimConflictError: Another actor created the claim concurrently
            ClaimDeleteFailedError: The drifted claim could not be deleted,
                nothing was created
            PartialReconciliationError: The drifted claim was deleted but the
                replacement was not created, retrying is safe
            ReconciliationCancelledError: Cancelled before any change was made
        """
        _validate_target(identity, namespace)
        desired_size = spec.requested_size_or_default()
        try:
            parse_requested_size(desired_size)
        except ClaimValidationError as e:
            e.namespace = namespace
            e.identity = identity
            raise

        name = normalize(identity)
        _check_cancelled(cancel_event, identity, namespace, name)

        logger.debug(f"Looking up PVC {namespace}/{name} for {identity}")
        existing = self._store.find_claim(namespace, name)

        if existing is not None:
            if quantities_equal(existing.requested_storage, desired_size):
                logger.debug(f"PVC {existing.key} already requests {desired_size}")
                return existing

            logger.info(
                f"PVC request is different than actual storage, from "
                f"{existing.requested_storage} to {desired_size}. Request new one"
            )
            _check_cancelled(cancel_event, identity, namespace, name)
            self._delete(existing, identity)
            logger.info(f"Removed PVC: {existing.key}")

            try:
                if self._wait_for_deletion:
                    self._wait_for_claim_deletion(namespace, name, cancel_event)
                _check_cancelled(cancel_event, identity, namespace, name, "create")
                return self._create(identity, namespace, name, spec)
            except Exception as e:
                logger.error(
                    f"PVC {namespace}/{name} was removed but could not be "
                    f"recreated: {e}"
                )
                raise PartialReconciliationError(
                    f"PVC {namespace}/{name} was deleted because its size drifted "
                    f"but the replacement requesting {desired_size} was not "
                    f"created: {e}",
                    namespace=namespace,
                    claim_name=name,
                    identity=identity,
                    operation="replace",
                    desired_spec=spec,
                ) from e

        return self._create(identity, namespace, name, spec)

    def remove_for_identity(self, identity: str, namespace: str) -> bool:
        """Delete the claim of `identity`, if there is one.

        Removing a claim that does not exist is a silent success.

        Returns:
            True if a claim was deleted, False if there was nothing to delete

        Raises:
            ClaimValidationError: Invalid identity or namespace
            StoreUnavailableError: The namespace could not be listed
            ClaimDeleteFailedError: The delete call failed, it is not retried
        """
        _validate_target(identity, namespace)
        name = normalize(identity)

        existing = self._store.find_claim(namespace, name)
        if existing is None:
            logger.debug(f"No PVC {namespace}/{name} to remove for {identity}")
            return False

        # rename of a claim is not supported, the old one is simply removed
        deleted = self._delete(existing, identity)
        if deleted:
            logger.info(f"Removed PVC: {existing.key} ({identity})")
        return deleted

    def build_descriptor(
        self, namespace: str, name: str, spec: PVCSpec
    ) -> ClaimDescriptor:
        return ClaimDescriptor(
            name=name,
            namespace=namespace,
            access_modes=spec.access_modes_or_default(),
            resource_requests=spec.resource_request_map(),
            storage_class_name=spec.storage_class_or_default(),
            labels=self._labels,
        )

    def _create(
        self, identity: str, namespace: str, name: str, spec: PVCSpec
    ) -> ClaimRecord:
        descriptor = self.build_descriptor(namespace, name, spec)
        try:
            record = self._store.create_claim(namespace, descriptor)
        except VolumeClaimError as e:
            e.identity = e.identity or identity
            raise
        logger.info(f"Created PVC: {namespace}/{name}")
        return record

    def _delete(self, record: ClaimRecord, identity: str) -> bool:
        try:
            return self._store.delete_claim(record)
        except VolumeClaimError as e:
            logger.error(f"Can not remove PVC: {record.key}: {e}")
            raise ClaimDeleteFailedError(
                f"Failed to delete PVC {record.key}: {e}",
                namespace=record.namespace,
                claim_name=record.name,
                identity=identity,
                operation="delete",
            ) from e

    def _wait_for_claim_deletion(
        self,
        namespace: str,
        name: str,
        cancel_event: threading.Event | None = None,
    ) -> bool:
        """Poll until the claim is no longer listed.

        Deletes are asynchronous, a claim still used by a pod stays
        Terminating until the pod is gone. Setting `cancel_event` stops the
        wait early.

        Returns:
            True if the claim is gone, False on timeout or cancellation
        """
        start_time = time.monotonic()

        while True:
            if self._store.find_claim(namespace, name) is None:
                logger.debug(f"PVC {namespace}/{name} fully deleted")
                return True
            if time.monotonic() - start_time >= self._deletion_timeout:
                break
            logger.debug(f"Waiting for PVC {namespace}/{name} to be deleted...")
            if cancel_event is None:
                time.sleep(self._deletion_poll_interval)
            elif cancel_event.wait(self._deletion_poll_interval):
                logger.info(f"Stopped waiting for PVC {namespace}/{name}: cancelled")
                return False

        logger.warning(
            f"Timeout waiting for PVC {namespace}/{name} to be deleted "
            f"after {self._deletion_timeout}s"
        )
        return False


def _validate_target(identity: str, namespace: str) -> None:
    if not identity or not identity.strip():
        raise ClaimValidationError(
            "Job identity must not be empty", namespace=namespace, identity=identity
        )
    if not namespace or not namespace.strip():
        raise ClaimValidationError(
            f"Namespace must not be empty for {identity}", identity=identity
        )


def _check_cancelled(
    cancel_event: threading.Event | None,
    identity: str,
    namespace: str,
    name: str,
    operation: str = "ensure",
) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ReconciliationCancelledError(
            f"Reconciliation of PVC {namespace}/{name} cancelled",
            namespace=namespace,
            claim_name=name,
            identity=identity,
            operation=operation,
        )
