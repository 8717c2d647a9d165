"""
HaozPay Python SDK - Request Signing Module

Canonical sign strings, SHA-256 digests and the two RSA signing schemes
accepted by the HaozPay platform.
"""

from .types import (
    SignatureScheme,
    Digest,
    ParameterSet,
    SIGN_FIELD,
    DEFAULT_SIGNATURE_SCHEME,
)

from .canonical import (
    build_sign_string,
    format_value,
)

from .digest import compute_digest

from .strategies import (
    SigningStrategy,
    StandardStrategy,
    RawExponentiationStrategy,
    get_signing_strategy,
    encode_block_type_1,
    private_key_encrypt_raw,
    public_key_decrypt_raw,
)

from .signer import (
    HaozPaySigner,
    SignatureResult,
    create_signer,
    sign,
    sign_params,
)

# Public API exports
__all__ = [
    # Types
    'SignatureScheme',
    'Digest',
    'ParameterSet',
    'SIGN_FIELD',
    'DEFAULT_SIGNATURE_SCHEME',
    # Canonicalization and digest
    'build_sign_string',
    'format_value',
    'compute_digest',
    # Strategies
    'SigningStrategy',
    'StandardStrategy',
    'RawExponentiationStrategy',
    'get_signing_strategy',
    'encode_block_type_1',
    'private_key_encrypt_raw',
    'public_key_decrypt_raw',
    # Signer
    'HaozPaySigner',
    'SignatureResult',
    'create_signer',
    'sign',
    'sign_params',
]
