"""Process-local claim store for development and tests.

InMemoryVolumeStore keeps claims in a dict keyed by namespace/name and
behaves like the API server where it matters to the reconciler: names are
unique per namespace (ClaimConflictError) and deleting a missing claim
reports False. Every call is recorded in `calls` so tests can assert on the
exact sequence of cluster operations.
"""

import threading
import uuid
from dataclasses import dataclass

from jobpvc.configs.constants import STORAGE_RESOURCE_KEY
from jobpvc.utils.logger import setup_logger
from jobpvc.volumes.exceptions import ClaimConflictError
from jobpvc.volumes.exceptions import StoreUnavailableError
from jobpvc.volumes.models import ClaimDescriptor
from jobpvc.volumes.models import ClaimRecord
from jobpvc.volumes.store.base import ClusterVolumeStore

logger = setup_logger()


@dataclass(frozen=True)
class StoreCall:
    """One call made against the store."""

    operation: str  # "list", "create" or "delete"
    namespace: str
    name: str | None = None


class InMemoryVolumeStore(ClusterVolumeStore):
    """Dict-backed claim store.

    Failures can be injected per operation with fail_next(), the injected
    exception is raised once on the next matching call.
    """

    def __init__(self, claims: list[ClaimRecord] | None = None) -> None:
        self._claims: dict[str, ClaimRecord] = {}
        self._lock = threading.Lock()
        self._failures: dict[str, list[Exception]] = {}
        self.calls: list[StoreCall] = []

        for claim in claims or []:
            self._claims[claim.key] = claim

    def fail_next(self, operation: str, error: Exception | None = None) -> None:
        """Make the next call of `operation` raise `error`.

        Defaults to a StoreUnavailableError.
        """
        if error is None:
            error = StoreUnavailableError(
                f"Injected {operation} failure", operation=operation
            )
        with self._lock:
            self._failures.setdefault(operation, []).append(error)

    def _raise_injected(self, operation: str) -> None:
        failures = self._failures.get(operation)
        if failures:
            raise failures.pop(0)

    def calls_for(self, operation: str) -> list[StoreCall]:
        return [call for call in self.calls if call.operation == operation]

    @property
    def mutating_calls(self) -> list[StoreCall]:
        return [call for call in self.calls if call.operation != "list"]

    def list_claims(self, namespace: str) -> list[ClaimRecord]:
        with self._lock:
            self.calls.append(StoreCall("list", namespace))
            self._raise_injected("list")
            return [
                claim for claim in self._claims.values() if claim.namespace == namespace
            ]

    def create_claim(self, namespace: str, descriptor: ClaimDescriptor) -> ClaimRecord:
        key = f"{namespace}/{descriptor.name}"
        with self._lock:
            self.calls.append(StoreCall("create", namespace, descriptor.name))
            self._raise_injected("create")
            if key in self._claims:
                raise ClaimConflictError(
                    f"PVC {key} already exists",
                    namespace=namespace,
                    claim_name=descriptor.name,
                    operation="create",
                )

            record = ClaimRecord(
                name=descriptor.name,
                namespace=namespace,
                requested_storage=descriptor.resource_requests.get(
                    STORAGE_RESOURCE_KEY
                ),
                access_modes=list(descriptor.access_modes),
                storage_class_name=descriptor.storage_class_name,
                labels=dict(descriptor.labels),
                uid=str(uuid.uuid4()),
                phase="Pending",
            )
            self._claims[key] = record

        logger.debug(f"Stored PVC {key}")
        return record

    def delete_claim(self, record: ClaimRecord) -> bool:
        with self._lock:
            self.calls.append(StoreCall("delete", record.namespace, record.name))
            self._raise_injected("delete")
            return self._claims.pop(record.key, None) is not None

    def get(self, namespace: str, name: str) -> ClaimRecord | None:
        """Direct read for assertions, not recorded as a call."""
        with self._lock:
            return self._claims.get(f"{namespace}/{name}")
