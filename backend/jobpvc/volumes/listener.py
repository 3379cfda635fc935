"""Job lifecycle hooks that clean up per-job claims.

The job host calls these when a job is deleted, renamed or moved. A claim
cannot be renamed, so in every case the claim of the old identity is
removed; the new identity gets its claim lazily on its next build.
"""

from dataclasses import dataclass

from jobpvc.utils.logger import setup_logger
from jobpvc.volumes.exceptions import VolumeClaimError
from jobpvc.volumes.reconciler import PVCReconciler

logger = setup_logger()


@dataclass(frozen=True)
class ClaimTarget:
    """A cluster namespace where per-job claims may live."""

    reconciler: PVCReconciler
    namespace: str


class JobLifecycleListener:
    """Removes the claim of a job from every configured target.

    Every target is attempted even if one fails. Failures are raised once all
    targets were processed: a single failure as itself, several as an
    ExceptionGroup. Nothing is retried.
    """

    def __init__(self, targets: list[ClaimTarget]) -> None:
        self._targets = list(targets)

    def on_deleted(self, identity: str) -> None:
        self._remove_claims(identity)

    def on_renamed(self, old_identity: str, new_identity: str) -> None:
        logger.debug(f"Job {old_identity} renamed to {new_identity}")
        self._remove_claims(old_identity)

    def on_location_changed(self, old_full_name: str, new_full_name: str) -> None:
        self.on_renamed(old_full_name, new_full_name)

    def _remove_claims(self, identity: str) -> None:
        failures: list[VolumeClaimError] = []

        for target in self._targets:
            try:
                target.reconciler.remove_for_identity(identity, target.namespace)
            except VolumeClaimError as e:
                logger.error(
                    f"Can not remove PVC for {identity} in namespace "
                    f"{target.namespace}: {e}"
                )
                failures.append(e)

        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise ExceptionGroup(f"Can not remove PVCs for {identity}", failures)
