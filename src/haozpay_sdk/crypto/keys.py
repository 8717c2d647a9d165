"""
RSA key material loading for HaozPay Python SDK

This module turns caller-supplied key text into `cryptography` RSA key objects.
Merchant private keys are often distributed as a bare base64 body without PEM
armor, so the loader normalizes the text into valid PEM before decoding it.
Keys are parsed on every call and never cached or logged.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import List, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..exceptions import KeyFormatError, ValidationError

PKCS1_PRIVATE_LABEL = "RSA PRIVATE KEY"
PKCS8_PRIVATE_LABEL = "PRIVATE KEY"
PUBLIC_KEY_LABEL = "PUBLIC KEY"

PEM_LINE_LENGTH = 64
DEFAULT_KEY_SIZE = 2048
MIN_KEY_SIZE = 1024

_PEM_BLOCK_PATTERN = re.compile(
    r"-----BEGIN ([A-Z0-9 ]+)-----(.*?)-----END \1-----",
    re.DOTALL
)
_WHITESPACE_PATTERN = re.compile(r"\s+")

PrivateKeyInput = Union[str, bytes, rsa.RSAPrivateKey]
PublicKeyInput = Union[str, bytes, rsa.RSAPublicKey]


@dataclass
class RSAKeyPair:
    """
    PEM-encoded RSA key pair.

    Attributes:
        private_key: Private key PEM (PKCS#1 or PKCS#8)
        public_key: Public key PEM (SubjectPublicKeyInfo)
    """
    private_key: str
    public_key: str

    def __repr__(self) -> str:
        return f"RSAKeyPair(private_key='***', public_key='{self._public_key_summary()}')"

    def _public_key_summary(self) -> str:
        body = strip_pem_armor(self.public_key)
        return f"{body[:16]}..." if len(body) > 16 else body


def _begin_marker(label: str) -> str:
    return f"-----BEGIN {label}-----"


def _end_marker(label: str) -> str:
    return f"-----END {label}-----"


def _has_block(text: str, label: str) -> bool:
    return _begin_marker(label) in text and _end_marker(label) in text


def _wrap_pem(body: str, label: str) -> str:
    lines = [body[i:i + PEM_LINE_LENGTH] for i in range(0, len(body), PEM_LINE_LENGTH)]
    return "\n".join([_begin_marker(label)] + lines + [_end_marker(label)])


def _normalize_pem(key_text: str, accepted_labels: List[str], default_label: str) -> str:
    """
    Normalize key text into a PEM block.

    Text that already carries a matching BEGIN/END pair for one of the accepted
    labels is returned unchanged. Otherwise any partial markers are removed,
    all whitespace is dropped and the base64 body is re-wrapped at 64
    characters under the default label.
    """
    key_text = key_text.strip()

    for label in accepted_labels:
        if _has_block(key_text, label):
            return key_text

    for label in accepted_labels:
        key_text = key_text.replace(_begin_marker(label), "")
        key_text = key_text.replace(_end_marker(label), "")

    body = _WHITESPACE_PATTERN.sub("", key_text)
    return _wrap_pem(body, default_label)


def normalize_private_key_pem(key_text: str) -> str:
    """
    Normalize private key text into PEM, synthesizing PKCS#1 armor if needed.

    Args:
        key_text: Private key as full PEM, partial PEM or bare base64 body

    Returns:
        str: PEM text
    """
    return _normalize_pem(
        key_text,
        [PKCS1_PRIVATE_LABEL, PKCS8_PRIVATE_LABEL],
        PKCS1_PRIVATE_LABEL
    )


def normalize_public_key_pem(key_text: str) -> str:
    """
    Normalize public key text into PEM, synthesizing PUBLIC KEY armor if needed.

    Args:
        key_text: Public key as full PEM, partial PEM or bare base64 body

    Returns:
        str: PEM text
    """
    return _normalize_pem(key_text, [PUBLIC_KEY_LABEL], PUBLIC_KEY_LABEL)


def strip_pem_armor(pem_text: str) -> str:
    """
    Return the base64 body of a PEM block on a single line.

    Args:
        pem_text: PEM text

    Returns:
        str: Bare base64 body
    """
    body = re.sub(r"-----(BEGIN|END) [A-Z0-9 ]+-----", "", pem_text)
    return _WHITESPACE_PATTERN.sub("", body)


def _decode_pem_block(pem_text: str) -> bytes:
    """
    Decode the first PEM block into DER bytes.

    The label-checking PEM loaders are not used because a PKCS#8 body can sit
    under synthesized ``RSA PRIVATE KEY`` armor; the DER loader accepts either
    encoding once the armor is removed.

    Raises:
        KeyFormatError: If no PEM block is found or its body is not valid base64
    """
    match = _PEM_BLOCK_PATTERN.search(pem_text)
    if match is None:
        raise KeyFormatError("Failed to decode PEM block", "PEM_DECODE_FAILED")

    body = _WHITESPACE_PATTERN.sub("", match.group(2))
    if not body:
        raise KeyFormatError("PEM block has an empty body", "PEM_DECODE_FAILED")

    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        raise KeyFormatError("PEM block body is not valid base64", "PEM_DECODE_FAILED") from None


def _coerce_text(key_data: Union[str, bytes]) -> str:
    if isinstance(key_data, bytes):
        try:
            return key_data.decode("ascii")
        except UnicodeDecodeError:
            raise KeyFormatError("Key data must be ASCII text", "INVALID_KEY_ENCODING") from None
    if not isinstance(key_data, str):
        raise KeyFormatError(
            f"Unsupported key input type: {type(key_data).__name__}",
            "INVALID_KEY_TYPE"
        )
    return key_data


def load_private_key(key_data: PrivateKeyInput) -> rsa.RSAPrivateKey:
    """
    Parse an RSA private key from PEM or bare base64 text.

    The DER body is accepted in PKCS#1 (RSAPrivateKey) or PKCS#8
    (PrivateKeyInfo) encoding regardless of which armor surrounds it. An
    already-parsed RSAPrivateKey is returned as-is so callers can reuse a
    parsed key across calls.

    Args:
        key_data: Private key text, bytes or RSAPrivateKey object

    Returns:
        RSAPrivateKey: Parsed private key

    Raises:
        KeyFormatError: If the key cannot be decoded or is not an RSA key
    """
    if isinstance(key_data, rsa.RSAPrivateKey):
        return key_data

    pem_text = normalize_private_key_pem(_coerce_text(key_data))
    der_bytes = _decode_pem_block(pem_text)

    try:
        private_key = serialization.load_der_private_key(der_bytes, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm):
        raise KeyFormatError(
            "Unsupported private key format: expected PKCS#1 or PKCS#8",
            "PRIVATE_KEY_PARSE_FAILED"
        ) from None

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyFormatError(
            f"Not an RSA private key: {type(private_key).__name__}",
            "NOT_RSA_KEY"
        )

    return private_key


def load_public_key(key_data: PublicKeyInput) -> rsa.RSAPublicKey:
    """
    Parse an RSA public key from SubjectPublicKeyInfo PEM or bare base64 text.

    Args:
        key_data: Public key text, bytes or RSAPublicKey object

    Returns:
        RSAPublicKey: Parsed public key

    Raises:
        KeyFormatError: If the key cannot be decoded or is not an RSA key
    """
    if isinstance(key_data, rsa.RSAPublicKey):
        return key_data

    pem_text = normalize_public_key_pem(_coerce_text(key_data))
    der_bytes = _decode_pem_block(pem_text)

    try:
        public_key = serialization.load_der_public_key(der_bytes)
    except (ValueError, TypeError, UnsupportedAlgorithm):
        raise KeyFormatError(
            "Unsupported public key format: expected SubjectPublicKeyInfo",
            "PUBLIC_KEY_PARSE_FAILED"
        ) from None

    if not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyFormatError(
            f"Not an RSA public key: {type(public_key).__name__}",
            "NOT_RSA_KEY"
        )

    return public_key


def modulus_byte_length(key: Union[rsa.RSAPrivateKey, rsa.RSAPublicKey]) -> int:
    """Return k, the modulus size in bytes."""
    return (key.key_size + 7) // 8


def public_key_to_pem(key: Union[rsa.RSAPrivateKey, rsa.RSAPublicKey]) -> str:
    """
    Export the public half of a key as SubjectPublicKeyInfo PEM.

    Args:
        key: RSA private or public key

    Returns:
        str: Public key PEM
    """
    if isinstance(key, rsa.RSAPrivateKey):
        key = key.public_key()

    return key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii")


def private_key_to_pem(key: rsa.RSAPrivateKey, private_format: str = "pkcs1") -> str:
    """
    Export a private key as unencrypted PEM.

    Args:
        key: RSA private key
        private_format: 'pkcs1' (RSA PRIVATE KEY) or 'pkcs8' (PRIVATE KEY)

    Returns:
        str: Private key PEM

    Raises:
        ValidationError: If the format is unsupported
    """
    if private_format == "pkcs1":
        key_format = serialization.PrivateFormat.TraditionalOpenSSL
    elif private_format == "pkcs8":
        key_format = serialization.PrivateFormat.PKCS8
    else:
        raise ValidationError(f"Unsupported private key format: {private_format}", "UNSUPPORTED_FORMAT")

    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=key_format,
        encryption_algorithm=serialization.NoEncryption()
    ).decode("ascii")


def generate_key_pair(key_size: int = DEFAULT_KEY_SIZE, private_format: str = "pkcs1") -> RSAKeyPair:
    """
    Generate a new RSA key pair for merchant signing.

    Args:
        key_size: Modulus size in bits (at least 1024)
        private_format: 'pkcs1' or 'pkcs8' armor for the private key

    Returns:
        RSAKeyPair: PEM-encoded key pair

    Raises:
        ValidationError: If the key size or format is invalid
    """
    if not isinstance(key_size, int) or key_size < MIN_KEY_SIZE:
        raise ValidationError(f"Key size must be an integer of at least {MIN_KEY_SIZE} bits", "INVALID_KEY_SIZE")

    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)

    return RSAKeyPair(
        private_key=private_key_to_pem(private_key, private_format),
        public_key=public_key_to_pem(private_key)
    )
