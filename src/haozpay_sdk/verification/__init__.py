"""
Signature verification module for HaozPay Python SDK

Verifies signatures over parameter sets and inbound platform callbacks.
"""

from .verifier import (
    SignatureVerifier,
    create_verifier,
    decode_signature,
    verify_sign,
    is_valid_sign,
)

from .callback import (
    CallbackNotification,
    verify_callback,
)

__all__ = [
    'SignatureVerifier',
    'create_verifier',
    'decode_signature',
    'verify_sign',
    'is_valid_sign',
    'CallbackNotification',
    'verify_callback',
]
