"""SHA-256 digest of canonical sign strings"""

import hashlib

from ..exceptions import ValidationError
from .types import Digest


def compute_digest(canonical: str) -> Digest:
    """
    Hash a canonical string with a single SHA-256 pass over its UTF-8 bytes.

    Args:
        canonical: Canonical sign string

    Returns:
        Digest: Raw and hex digest forms
    """
    if not isinstance(canonical, str):
        raise ValidationError("Canonical string must be str", "INVALID_CANONICAL_STRING")

    return Digest(raw=hashlib.sha256(canonical.encode("utf-8")).digest())
