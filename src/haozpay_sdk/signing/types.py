"""
Type definitions for request signing functionality

This module provides the signature scheme selector, the digest value object and
the type aliases shared by the signing and verification packages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union

from ..exceptions import ValidationError

# Name of the field that carries the signature in requests and callbacks
SIGN_FIELD = "sign"

SHA256_DIGEST_LENGTH = 32
SHA256_HEX_LENGTH = 64


class SignatureScheme(str, Enum):
    """
    RSA signature schemes understood by the HaozPay platform

    STANDARD: RSASSA-PKCS1-v1_5 with SHA-256 over the raw digest bytes.
    RAW_EXPONENTIATION: PKCS#1 v1.5 block type 1 padding of the hex digest
        text followed by m^d mod n, as produced by Hutool's
        ``encryptBase64(data, KeyType.PrivateKey)``.
    """
    STANDARD = "standard"
    RAW_EXPONENTIATION = "raw_exponentiation"

    @classmethod
    def from_value(cls, value: Union[str, "SignatureScheme"]) -> "SignatureScheme":
        """
        Resolve a scheme from an enum member or its string value.

        Raises:
            ValidationError: If the value names no known scheme
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown signature scheme: {value}",
                "UNKNOWN_SIGNATURE_SCHEME",
                {"available_schemes": [s.value for s in cls]}
            ) from None


DEFAULT_SIGNATURE_SCHEME = SignatureScheme.RAW_EXPONENTIATION


@dataclass(frozen=True)
class Digest:
    """
    SHA-256 digest of a canonical string

    Attributes:
        raw: 32 digest bytes, consumed by the standard scheme
        hex: 64-character lowercase hex rendering, whose ASCII bytes are
            consumed by the raw exponentiation scheme
    """
    raw: bytes
    hex: str = field(init=False)

    def __post_init__(self):
        if not isinstance(self.raw, bytes) or len(self.raw) != SHA256_DIGEST_LENGTH:
            raise ValidationError(
                f"Digest must be exactly {SHA256_DIGEST_LENGTH} bytes",
                "INVALID_DIGEST"
            )
        object.__setattr__(self, "hex", self.raw.hex())

    @property
    def hex_bytes(self) -> bytes:
        """ASCII encoding of the hex digest text."""
        return self.hex.encode("ascii")


# Type aliases for convenience
ParameterSet = Mapping[str, Any]
