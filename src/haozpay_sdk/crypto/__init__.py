"""
Cryptographic key handling for HaozPay Python SDK
"""

from .keys import (
    RSAKeyPair,
    generate_key_pair,
    load_private_key,
    load_public_key,
    normalize_private_key_pem,
    normalize_public_key_pem,
    strip_pem_armor,
    modulus_byte_length,
    public_key_to_pem,
    private_key_to_pem,
)

__all__ = [
    'RSAKeyPair',
    'generate_key_pair',
    'load_private_key',
    'load_public_key',
    'normalize_private_key_pem',
    'normalize_public_key_pem',
    'strip_pem_armor',
    'modulus_byte_length',
    'public_key_to_pem',
    'private_key_to_pem',
]
