"""
Signature verification for HaozPay callbacks and responses

The verifier never trusts a caller-supplied digest: it rebuilds the canonical
sign string and SHA-256 digest from the received parameters, then checks the
signature with the strategy matching the configured scheme. Every mismatch
raises the same ``SignatureError`` so failures do not reveal where the
signature diverged.
"""

import base64
import binascii
import logging
from typing import Union

from ..crypto.keys import PublicKeyInput, load_public_key, modulus_byte_length
from ..exceptions import SignatureError, SignatureFormatError, ValidationError
from ..signing.canonical import build_sign_string
from ..signing.digest import compute_digest
from ..signing.strategies import get_signing_strategy
from ..signing.types import DEFAULT_SIGNATURE_SCHEME, ParameterSet, SignatureScheme

logger = logging.getLogger(__name__)


def decode_signature(signature: Union[str, bytes], expected_length: int) -> bytes:
    """
    Strictly base64-decode a signature and check its length.

    Args:
        signature: Base64 signature text
        expected_length: Modulus length k in bytes

    Returns:
        bytes: Decoded signature

    Raises:
        SignatureFormatError: If the signature is empty, not valid base64 or
            not exactly k bytes long
    """
    if signature is None:
        raise SignatureFormatError("Signature is missing")

    if isinstance(signature, str):
        signature = signature.strip()
        try:
            signature = signature.encode("ascii")
        except UnicodeEncodeError:
            raise SignatureFormatError("Signature is not valid base64") from None
    elif not isinstance(signature, bytes):
        raise SignatureFormatError(f"Signature must be str or bytes, got {type(signature).__name__}")

    if not signature:
        raise SignatureFormatError("Signature is empty")

    try:
        decoded = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        raise SignatureFormatError("Signature is not valid base64") from None

    if len(decoded) != expected_length:
        raise SignatureFormatError(
            f"Signature must be {expected_length} bytes, got {len(decoded)}",
            {"expected_length": expected_length, "actual_length": len(decoded)}
        )

    return decoded


class SignatureVerifier:
    """
    Verifies HaozPay signatures with the platform public key.

    The key input is kept as supplied and parsed on every call.
    """

    def __init__(
        self,
        public_key: PublicKeyInput,
        scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
    ):
        """
        Initialize the verifier.

        Args:
            public_key: Public key text (PEM or bare base64) or RSAPublicKey
            scheme: Scheme the signatures were produced with

        Raises:
            ValidationError: If the key is empty or the scheme is unknown
        """
        if public_key is None or (isinstance(public_key, (str, bytes)) and not public_key.strip()):
            raise ValidationError("Public key is required", "MISSING_PUBLIC_KEY")

        self._public_key = public_key
        self.scheme = SignatureScheme.from_value(scheme)
        self._strategy = get_signing_strategy(self.scheme)

    def __repr__(self) -> str:
        return f"SignatureVerifier(scheme='{self.scheme.value}')"

    def verify(self, params: ParameterSet, signature: Union[str, bytes]) -> None:
        """
        Verify a signature over a parameter set.

        Args:
            params: Received parameters; a ``sign`` entry is ignored
            signature: Base64 signature to check

        Raises:
            KeyFormatError: If the public key cannot be parsed
            SignatureFormatError: If the signature is malformed
            SignatureError: If the signature does not match the parameters
        """
        public_key = load_public_key(self._public_key)
        signature_bytes = decode_signature(signature, modulus_byte_length(public_key))

        digest = compute_digest(build_sign_string(params))

        try:
            self._strategy.verify(digest, signature_bytes, public_key)
        except SignatureError:
            logger.warning(f"Signature verification failed ({self.scheme.value} scheme)")
            raise

        logger.debug(f"Signature verified ({self.scheme.value} scheme)")

    def is_valid(self, params: ParameterSet, signature: Union[str, bytes]) -> bool:
        """
        Check a signature without raising on mismatch.

        Returns:
            bool: True if the signature is valid; False on mismatch or
                malformed signature. Key errors still raise.
        """
        try:
            self.verify(params, signature)
            return True
        except SignatureError:
            return False


def create_verifier(
    public_key: PublicKeyInput,
    scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
) -> SignatureVerifier:
    """
    Create a new verifier.

    Args:
        public_key: Public key text or RSAPublicKey
        scheme: Signature scheme

    Returns:
        SignatureVerifier: Configured verifier
    """
    return SignatureVerifier(public_key, scheme)


def verify_sign(
    params: ParameterSet,
    signature: Union[str, bytes],
    public_key: PublicKeyInput,
    scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
) -> None:
    """
    Verify a signature over a parameter set.

    Args:
        params: Received parameters
        signature: Base64 signature
        public_key: Public key text or RSAPublicKey
        scheme: Scheme the signature was produced with

    Raises:
        KeyFormatError: If the public key cannot be parsed
        SignatureFormatError: If the signature is malformed
        SignatureError: If the signature does not match
    """
    create_verifier(public_key, scheme).verify(params, signature)


def is_valid_sign(
    params: ParameterSet,
    signature: Union[str, bytes],
    public_key: PublicKeyInput,
    scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
) -> bool:
    """Boolean form of ``verify_sign``."""
    return create_verifier(public_key, scheme).is_valid(params, signature)
