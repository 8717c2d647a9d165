"""
RSA signing strategies for HaozPay request signatures

Two strategies are available and are always selected explicitly through
``SignatureScheme``:

* ``StandardStrategy`` signs the raw SHA-256 digest with RSASSA-PKCS1-v1_5.
* ``RawExponentiationStrategy`` reproduces Java Hutool's private-key
  "encryption": the lowercase hex digest text is padded into a PKCS#1 v1.5
  block type 1 buffer (``00 01 FF..FF 00 data``) and transformed with the
  private exponent directly, ``c = m^d mod n``. The platform recovers the
  hex text with the public key, so this output must stay bit-for-bit stable.
"""

import base64
import hmac
from abc import ABC, abstractmethod
from typing import Dict

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from ..crypto.keys import modulus_byte_length
from ..exceptions import (
    MessageTooLongError,
    PaddingTooShortError,
    SignatureError,
    SigningError,
)
from .types import Digest, SignatureScheme

# PKCS#1 v1.5: 0x00 || block type || PS (>= 8 bytes) || 0x00 || data
PKCS1_OVERHEAD = 11
MIN_PADDING_LENGTH = 8
BLOCK_TYPE_1 = 0x01
PADDING_BYTE = 0xFF


def encode_block_type_1(data: bytes, k: int) -> bytes:
    """
    Build a PKCS#1 v1.5 block type 1 encoded message.

    Args:
        data: Message bytes
        k: Modulus length in bytes

    Returns:
        bytes: Exactly k bytes, ``00 01 FF..FF 00 data``

    Raises:
        PaddingTooShortError: If fewer than 8 padding bytes fit
    """
    padding_length = k - 3 - len(data)
    if padding_length < MIN_PADDING_LENGTH:
        raise PaddingTooShortError(max(padding_length, 0), MIN_PADDING_LENGTH)

    return b"\x00" + bytes([BLOCK_TYPE_1]) + bytes([PADDING_BYTE]) * padding_length + b"\x00" + data


def private_key_encrypt_raw(private_key: rsa.RSAPrivateKey, data: bytes) -> bytes:
    """
    Apply the private-key transform to block type 1 padded data.

    This is the signature-shaped "private key encrypt" primitive used by the
    platform's Java SDK: no DigestInfo wrapping, no library sign call, just
    modular exponentiation with the private exponent.

    Args:
        private_key: RSA private key
        data: Message bytes (the hex digest text for HaozPay)

    Returns:
        bytes: Big-endian result left-padded to the modulus length

    Raises:
        MessageTooLongError: If data is longer than k - 11 bytes
        PaddingTooShortError: If the padding string would be under 8 bytes
    """
    k = modulus_byte_length(private_key)
    max_length = k - PKCS1_OVERHEAD
    if len(data) > max_length:
        raise MessageTooLongError(len(data), max_length)

    encoded = encode_block_type_1(data, k)

    numbers = private_key.private_numbers()
    m = int.from_bytes(encoded, "big")
    c = pow(m, numbers.d, numbers.public_numbers.n)

    return c.to_bytes(k, "big")


def public_key_decrypt_raw(public_key: rsa.RSAPublicKey, signature: bytes) -> bytes:
    """
    Recover the encoded message from a raw exponentiation signature.

    Args:
        public_key: RSA public key
        signature: Signature bytes, exactly k long

    Returns:
        bytes: Encoded message left-padded to the modulus length

    Raises:
        SignatureError: If the signature value is out of range for the modulus
    """
    k = modulus_byte_length(public_key)
    numbers = public_key.public_numbers()

    c = int.from_bytes(signature, "big")
    if c >= numbers.n:
        raise SignatureError()

    m = pow(c, numbers.e, numbers.n)
    return m.to_bytes(k, "big")


class SigningStrategy(ABC):
    """Abstract signing strategy over a precomputed digest"""

    scheme: SignatureScheme

    @abstractmethod
    def sign(self, digest: Digest, private_key: rsa.RSAPrivateKey) -> str:
        """
        Sign a digest.

        Returns:
            str: Base64-encoded signature
        """

    @abstractmethod
    def verify(self, digest: Digest, signature: bytes, public_key: rsa.RSAPublicKey) -> None:
        """
        Check decoded signature bytes against a digest.

        Raises:
            SignatureError: If the signature does not match
        """


class StandardStrategy(SigningStrategy):
    """RSASSA-PKCS1-v1_5 with SHA-256 over the raw digest"""

    scheme = SignatureScheme.STANDARD

    def sign(self, digest: Digest, private_key: rsa.RSAPrivateKey) -> str:
        try:
            signature = private_key.sign(
                digest.raw,
                padding.PKCS1v15(),
                Prehashed(hashes.SHA256())
            )
        except ValueError as e:
            raise SigningError(f"RSA PKCS#1 v1.5 signing failed: {e}") from e

        return base64.b64encode(signature).decode("ascii")

    def verify(self, digest: Digest, signature: bytes, public_key: rsa.RSAPublicKey) -> None:
        try:
            public_key.verify(
                signature,
                digest.raw,
                padding.PKCS1v15(),
                Prehashed(hashes.SHA256())
            )
        except InvalidSignature:
            raise SignatureError() from None


class RawExponentiationStrategy(SigningStrategy):
    """Hutool-compatible private-key transform over the hex digest text"""

    scheme = SignatureScheme.RAW_EXPONENTIATION

    def sign(self, digest: Digest, private_key: rsa.RSAPrivateKey) -> str:
        signature = private_key_encrypt_raw(private_key, digest.hex_bytes)
        return base64.b64encode(signature).decode("ascii")

    def verify(self, digest: Digest, signature: bytes, public_key: rsa.RSAPublicKey) -> None:
        k = modulus_byte_length(public_key)
        recovered = public_key_decrypt_raw(public_key, signature)

        # Compare whole encoded messages
        try:
            expected = encode_block_type_1(digest.hex_bytes, k)
        except PaddingTooShortError:
            raise SignatureError() from None

        if not hmac.compare_digest(recovered, expected):
            raise SignatureError()


_STRATEGIES: Dict[SignatureScheme, SigningStrategy] = {
    SignatureScheme.STANDARD: StandardStrategy(),
    SignatureScheme.RAW_EXPONENTIATION: RawExponentiationStrategy(),
}


def get_signing_strategy(scheme) -> SigningStrategy:
    """
    Look up the strategy for a scheme.

    Args:
        scheme: SignatureScheme member or its string value

    Returns:
        SigningStrategy: Stateless strategy instance

    Raises:
        ValidationError: If the scheme is unknown
    """
    return _STRATEGIES[SignatureScheme.from_value(scheme)]
