"""
Request signer for the HaozPay platform

Signing pipeline: canonical sign string -> SHA-256 digest -> signing strategy
selected by ``SignatureScheme`` -> base64 signature. The private key is parsed
on every call; callers that sign at high volume can pass an already-loaded
``RSAPrivateKey`` instead of key text.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Union

from ..crypto.keys import PrivateKeyInput, load_private_key
from ..exceptions import ValidationError
from .canonical import build_sign_string
from .digest import compute_digest
from .strategies import get_signing_strategy
from .types import DEFAULT_SIGNATURE_SCHEME, SIGN_FIELD, ParameterSet, SignatureScheme

logger = logging.getLogger(__name__)


@dataclass
class SignatureResult:
    """
    Signing result with the intermediate values, for debugging

    Attributes:
        canonical_string: Canonical sign string that was digested
        digest_hex: Lowercase hex SHA-256 digest
        signature: Base64-encoded signature
        scheme: Scheme that produced the signature
    """
    canonical_string: str
    digest_hex: str
    signature: str
    scheme: SignatureScheme


class HaozPaySigner:
    """
    Signs parameter sets with a merchant private key.

    The signer holds the key input as supplied and never caches a parsed copy.
    """

    def __init__(
        self,
        private_key: PrivateKeyInput,
        scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
    ):
        """
        Initialize the signer.

        Args:
            private_key: Private key text (PEM or bare base64) or RSAPrivateKey
            scheme: Signature scheme to use

        Raises:
            ValidationError: If the key is empty or the scheme is unknown
        """
        if private_key is None or (isinstance(private_key, (str, bytes)) and not private_key.strip()):
            raise ValidationError("Private key is required", "MISSING_PRIVATE_KEY")

        self._private_key = private_key
        self.scheme = SignatureScheme.from_value(scheme)
        self._strategy = get_signing_strategy(self.scheme)

    def __repr__(self) -> str:
        return f"HaozPaySigner(scheme='{self.scheme.value}', private_key='***')"

    def sign_detailed(self, params: ParameterSet) -> SignatureResult:
        """
        Sign a parameter set and return the intermediate values.

        Args:
            params: Parameters to sign; a ``sign`` entry is ignored

        Returns:
            SignatureResult: Canonical string, digest and signature

        Raises:
            KeyFormatError: If the private key cannot be parsed
            MessageTooLongError: If the digest input exceeds the key capacity
            PaddingTooShortError: If the key leaves under 8 bytes of padding
        """
        start = time.perf_counter()

        canonical_string = build_sign_string(params)
        digest = compute_digest(canonical_string)
        private_key = load_private_key(self._private_key)
        signature = self._strategy.sign(digest, private_key)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Signed {len(canonical_string)}-character sign string with "
            f"{self.scheme.value} scheme in {elapsed_ms:.2f}ms"
        )

        return SignatureResult(
            canonical_string=canonical_string,
            digest_hex=digest.hex,
            signature=signature,
            scheme=self.scheme
        )

    def sign(self, params: ParameterSet) -> str:
        """
        Sign a parameter set.

        Args:
            params: Parameters to sign; a ``sign`` entry is ignored

        Returns:
            str: Base64-encoded signature
        """
        return self.sign_detailed(params).signature


def create_signer(
    private_key: PrivateKeyInput,
    scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
) -> HaozPaySigner:
    """
    Create a new signer.

    Args:
        private_key: Private key text or RSAPrivateKey
        scheme: Signature scheme

    Returns:
        HaozPaySigner: Configured signer
    """
    return HaozPaySigner(private_key, scheme)


def sign(
    params: ParameterSet,
    private_key: PrivateKeyInput,
    scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
) -> str:
    """
    Sign a parameter set with the given private key.

    Args:
        params: Parameters to sign
        private_key: Private key text or RSAPrivateKey
        scheme: Signature scheme, raw exponentiation by default

    Returns:
        str: Base64-encoded signature, to be sent as the ``sign`` field
    """
    return create_signer(private_key, scheme).sign(params)


def sign_params(
    params: ParameterSet,
    private_key: PrivateKeyInput,
    scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
) -> Dict[str, Any]:
    """
    Return a copy of params with the signature attached as ``sign``.

    Args:
        params: Parameters to sign
        private_key: Private key text or RSAPrivateKey
        scheme: Signature scheme

    Returns:
        dict: Parameters plus the signature field
    """
    signed = dict(params)
    signed[SIGN_FIELD] = sign(params, private_key, scheme)
    return signed
