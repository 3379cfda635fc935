"""Pydantic models for per-job claims."""

from kubernetes.utils import parse_quantity  # type: ignore[import-untyped]
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from jobpvc.configs.constants import AccessMode
from jobpvc.configs.constants import DEFAULT_ACCESS_MODE
from jobpvc.configs.constants import DEFAULT_REQUESTS_SIZE
from jobpvc.configs.constants import STORAGE_RESOURCE_KEY


class PVCSpec(BaseModel):
    """Desired properties of a job's claim.

    Every field is optional, the *_or_default() accessors resolve the
    effective value. Equality covers the three fields only, the claim name is
    derived from the job identity and is not part of the spec.
    """

    model_config = ConfigDict(frozen=True)

    requested_size: str | None = None
    access_modes: tuple[AccessMode, ...] | None = None
    # None lets the cluster pick its default storage class
    storage_class_name: str | None = None

    @field_validator("requested_size", "storage_class_name", mode="before")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        """Treat empty form values as unset."""
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("requested_size")
    @classmethod
    def validate_requested_size(cls, value: str | None) -> str | None:
        # parse_quantity raises ValueError for malformed quantities
        if value is not None and parse_quantity(value) <= 0:
            raise ValueError(f"Requested storage must be greater than zero: {value}")
        return value

    @field_validator("access_modes", mode="before")
    @classmethod
    def normalize_access_modes(
        cls, value: str | AccessMode | list | tuple | None
    ) -> tuple | None:
        """Accept a single mode as well as a collection of modes."""
        if value is None:
            return None
        if isinstance(value, str):
            value = value.strip()
            return (value,) if value else None
        value = tuple(value)
        return value or None

    def requested_size_or_default(self) -> str:
        return self.requested_size or DEFAULT_REQUESTS_SIZE

    def access_modes_or_default(self) -> list[str]:
        if self.access_modes:
            return [mode.value for mode in self.access_modes]
        return [DEFAULT_ACCESS_MODE.value]

    def storage_class_or_default(self) -> str | None:
        return self.storage_class_name

    def resource_request_map(self) -> dict[str, str]:
        """Requests map of the claim, {"storage": <size>}."""
        return {STORAGE_RESOURCE_KEY: self.requested_size_or_default()}


class ClaimDescriptor(BaseModel):
    """Claim the reconciler asks a store to create."""

    name: str
    namespace: str
    access_modes: list[str]
    resource_requests: dict[str, str]
    storage_class_name: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)


class ClaimRecord(BaseModel):
    """A claim as observed in the cluster.

    Returned by ClusterVolumeStore.list_claims() and create_claim().
    """

    name: str
    namespace: str
    # Raw "storage" request ("10Gi"), None if the claim requests nothing
    requested_storage: str | None = None
    access_modes: list[str] = Field(default_factory=list)
    storage_class_name: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    uid: str | None = None
    phase: str | None = None  # Pending, Bound, Lost
    volume_name: str | None = None  # Bound PV, None until bound

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
