from kubernetes import client  # type: ignore

from jobpvc.utils.logger import setup_logger
from jobpvc.volumes.models import ClaimRecord
from jobpvc.volumes.models import PVCSpec
from jobpvc.volumes.naming import normalize
from jobpvc.volumes.reconciler import PVCReconciler

logger = setup_logger()


class JobPVCWorkspaceVolume:
    """Workspace volume backed by one claim per job.

    Used by whatever builds the agent pod: create_volume() must run before the
    pod is submitted, build_volume() gives the volume entry of the pod spec.
    Two workspace volumes are equal when their specs are, whatever the job.

    Args:
        claim_name: Job identity the claim is derived from
        spec: Desired claim properties
    """

    def __init__(self, claim_name: str, spec: PVCSpec | None = None) -> None:
        self.claim_name = claim_name
        self.spec = spec or PVCSpec()

    def get_pvc_name(self) -> str:
        return normalize(self.claim_name)

    def create_volume(self, reconciler: PVCReconciler, namespace: str) -> ClaimRecord:
        """Ensure the job's claim exists in `namespace` and return it."""
        logger.debug(
            f"Adding workspace volume {self.get_pvc_name()} in namespace {namespace}"
        )
        return reconciler.ensure_for_identity(self.claim_name, namespace, self.spec)

    def build_volume(
        self, volume_name: str, read_only: bool = False
    ) -> client.V1Volume:
        return client.V1Volume(
            name=volume_name,
            persistent_volume_claim=client.V1PersistentVolumeClaimVolumeSource(
                claim_name=self.get_pvc_name(),
                read_only=read_only,
            ),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JobPVCWorkspaceVolume):
            return NotImplemented
        return self.spec == other.spec

    def __hash__(self) -> int:
        return hash(self.spec)
