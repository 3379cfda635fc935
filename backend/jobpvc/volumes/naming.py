"""Derives cluster claim names from job identities."""

import re
from urllib.parse import unquote_plus

from jobpvc.configs.constants import PVC_NAME_PREFIX

# Characters kept in a claim name, everything else is dropped
_DISALLOWED_CHARS_RE = re.compile(r"[^0-9a-z\-._]")

# DNS-1123 subdomain, the grammar the API server enforces on claim names
CLAIM_NAME_RE = re.compile(
    r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*"
)

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def normalize(identity: str) -> str:
    """Map a job identity to the name of its claim.

    The identity is form-decoded ("%2f" -> "/", "+" -> " "), trimmed, spaces
    and slashes become dashes, ASCII letters are lowercased, the "pvc-" prefix
    is added and every remaining character outside [0-9a-z-._] is dropped.

    Example:
        "MY projects/cm.images-docker-image%2fcli"
        -> "pvc-my-projects-cm.images-docker-image-cli"

    NOTE: this is a sanitizer, not a validator. Identities made only of
    symbols, or ending in a separator, still produce names the API server
    rejects ("pvc-", "pvc-job-"); that rejection surfaces as a
    ClaimValidationError when the claim is created.
    """
    # unquote_plus leaves malformed escapes such as "%zz" untouched
    decoded = unquote_plus(identity, errors="replace")
    # only ASCII letters are folded, str.lower() would also map non-ASCII
    # letters (e.g. "İ" -> "i̇") depending on their Unicode case rules
    cleaned = (
        decoded.strip().replace(" ", "-").replace("/", "-").translate(_ASCII_LOWER)
    )
    return _DISALLOWED_CHARS_RE.sub("", f"{PVC_NAME_PREFIX}{cleaned}")


def is_valid_claim_name(name: str) -> bool:
    """Whether the API server would accept the name of a claim."""
    return len(name) <= 253 and CLAIM_NAME_RE.fullmatch(name) is not None
