"""Kubernetes-backed claim store for production deployments.

KubernetesVolumeStore reads and writes PersistentVolumeClaims through the
CoreV1 API. It holds no state besides the API client: every listing goes to
the API server.

Error mapping (ApiException.status):
- 409 -> ClaimConflictError (claim name already taken)
- 400, 422 -> ClaimValidationError (API server rejected the claim)
- 404 on delete -> delete_claim() returns False
- anything else, and transport failures -> StoreUnavailableError
"""

from kubernetes import client  # type: ignore
from kubernetes import config
from kubernetes.client.rest import ApiException  # type: ignore
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from jobpvc.configs.app_configs import PVC_API_REQUEST_TIMEOUT_SECONDS
from jobpvc.configs.app_configs import PVC_LIST_PAGE_SIZE
from jobpvc.configs.constants import STORAGE_RESOURCE_KEY
from jobpvc.utils.logger import setup_logger
from jobpvc.volumes.exceptions import ClaimConflictError
from jobpvc.volumes.exceptions import ClaimValidationError
from jobpvc.volumes.exceptions import StoreUnavailableError
from jobpvc.volumes.models import ClaimDescriptor
from jobpvc.volumes.models import ClaimRecord
from jobpvc.volumes.store.base import ClusterVolumeStore

logger = setup_logger()


def _load_core_api() -> client.CoreV1Api:
    """Build a CoreV1Api from in-cluster config, falling back to kubeconfig."""
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logger.info("Loaded kubeconfig from default location")
        except config.ConfigException as e:
            raise StoreUnavailableError(
                f"Failed to load Kubernetes configuration: {e}"
            ) from e
    return client.CoreV1Api()


def to_claim_record(pvc: client.V1PersistentVolumeClaim) -> ClaimRecord:
    """Convert an API claim object into a ClaimRecord."""
    metadata = pvc.metadata
    spec = pvc.spec

    requests = (spec.resources.requests if spec and spec.resources else None) or {}
    requested_storage = requests.get(STORAGE_RESOURCE_KEY)

    return ClaimRecord(
        name=metadata.name,
        namespace=metadata.namespace,
        requested_storage=str(requested_storage) if requested_storage else None,
        access_modes=list(spec.access_modes or []) if spec else [],
        storage_class_name=spec.storage_class_name if spec else None,
        labels=dict(metadata.labels or {}),
        uid=metadata.uid,
        phase=pvc.status.phase if pvc.status else None,
        volume_name=spec.volume_name if spec else None,
    )


def build_claim_body(descriptor: ClaimDescriptor) -> client.V1PersistentVolumeClaim:
    """Build the API claim object for a descriptor."""
    return client.V1PersistentVolumeClaim(
        api_version="v1",
        kind="PersistentVolumeClaim",
        metadata=client.V1ObjectMeta(
            name=descriptor.name,
            namespace=descriptor.namespace,
            labels=dict(descriptor.labels) or None,
        ),
        spec=client.V1PersistentVolumeClaimSpec(
            access_modes=list(descriptor.access_modes),
            resources=client.V1VolumeResourceRequirements(
                requests=dict(descriptor.resource_requests),
            ),
            storage_class_name=descriptor.storage_class_name,
        ),
    )


class KubernetesVolumeStore(ClusterVolumeStore):
    """Claim store backed by the Kubernetes CoreV1 API.

    Args:
        core_api: API client to use, loaded from in-cluster config or
            kubeconfig when omitted
        request_timeout: Timeout in seconds applied to every API call
        page_size: Number of claims fetched per list call
    """

    def __init__(
        self,
        core_api: client.CoreV1Api | None = None,
        request_timeout: float = PVC_API_REQUEST_TIMEOUT_SECONDS,
        page_size: int = PVC_LIST_PAGE_SIZE,
    ) -> None:
        self._core_api = core_api or _load_core_api()
        self._request_timeout = request_timeout
        self._page_size = page_size

    def list_claims(self, namespace: str) -> list[ClaimRecord]:
        records: list[ClaimRecord] = []
        continue_token: str | None = None

        while True:
            try:
                response = self._core_api.list_namespaced_persistent_volume_claim(
                    namespace=namespace,
                    limit=self._page_size,
                    _continue=continue_token,
                    _request_timeout=self._request_timeout,
                )
            except ApiException as e:
                raise StoreUnavailableError(
                    f"Failed to list PVCs in namespace {namespace}: {e.reason}",
                    namespace=namespace,
                    operation="list",
                    status_code=e.status,
                ) from e
            except Urllib3HTTPError as e:
                raise StoreUnavailableError(
                    f"Failed to list PVCs in namespace {namespace}: {e}",
                    namespace=namespace,
                    operation="list",
                ) from e

            records.extend(to_claim_record(pvc) for pvc in response.items or [])

            continue_token = response.metadata._continue if response.metadata else None
            if not continue_token:
                break

        logger.debug(f"Listed {len(records)} PVCs in namespace {namespace}")
        return records

    def create_claim(self, namespace: str, descriptor: ClaimDescriptor) -> ClaimRecord:
        body = build_claim_body(descriptor)
        try:
            created = self._core_api.create_namespaced_persistent_volume_claim(
                namespace=namespace,
                body=body,
                _request_timeout=self._request_timeout,
            )
        except ApiException as e:
            if e.status == 409:
                raise ClaimConflictError(
                    f"PVC {namespace}/{descriptor.name} already exists",
                    namespace=namespace,
                    claim_name=descriptor.name,
                    operation="create",
                ) from e
            if e.status in (400, 422):
                raise ClaimValidationError(
                    f"PVC {namespace}/{descriptor.name} rejected by the API server: "
                    f"{e.reason}",
                    namespace=namespace,
                    claim_name=descriptor.name,
                    operation="create",
                ) from e
            raise StoreUnavailableError(
                f"Failed to create PVC {namespace}/{descriptor.name}: {e.reason}",
                namespace=namespace,
                claim_name=descriptor.name,
                operation="create",
                status_code=e.status,
            ) from e
        except Urllib3HTTPError as e:
            raise StoreUnavailableError(
                f"Failed to create PVC {namespace}/{descriptor.name}: {e}",
                namespace=namespace,
                claim_name=descriptor.name,
                operation="create",
            ) from e

        return to_claim_record(created)

    def delete_claim(self, record: ClaimRecord) -> bool:
        try:
            self._core_api.delete_namespaced_persistent_volume_claim(
                name=record.name,
                namespace=record.namespace,
                _request_timeout=self._request_timeout,
            )
        except ApiException as e:
            if e.status == 404:
                # Already deleted
                logger.debug(f"PVC {record.key} already deleted")
                return False
            raise StoreUnavailableError(
                f"Failed to delete PVC {record.key}: {e.reason}",
                namespace=record.namespace,
                claim_name=record.name,
                operation="delete",
                status_code=e.status,
            ) from e
        except Urllib3HTTPError as e:
            raise StoreUnavailableError(
                f"Failed to delete PVC {record.key}: {e}",
                namespace=record.namespace,
                claim_name=record.name,
                operation="delete",
            ) from e

        return True
