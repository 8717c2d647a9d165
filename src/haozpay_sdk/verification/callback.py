"""
Inbound callback verification

Payment and refund notifications from the HaozPay platform carry the same
envelope as outbound requests (``merchantNo``, ``timestamp``, ``bizBody``,
``sign``). A callback must be rejected unless its signature verifies.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from ..crypto.keys import PublicKeyInput
from ..exceptions import SignatureFormatError, ValidationError
from ..signing.types import DEFAULT_SIGNATURE_SCHEME, SIGN_FIELD, SignatureScheme
from .verifier import create_verifier

logger = logging.getLogger(__name__)

CallbackPayload = Union[str, bytes, Mapping[str, Any]]


@dataclass
class CallbackNotification:
    """
    Verified callback contents

    Attributes:
        merchant_no: Merchant number the notification is addressed to
        timestamp: Platform timestamp in epoch milliseconds
        biz_body: Raw business payload text
        data: Parsed business payload when it is a JSON object
        params: All received fields except the signature
    """
    merchant_no: Optional[str]
    timestamp: Optional[int]
    biz_body: Optional[str]
    data: Optional[Dict[str, Any]] = None
    params: Dict[str, Any] = field(default_factory=dict)


def _load_payload(payload: CallbackPayload) -> Dict[str, Any]:
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            raise ValidationError("Callback body must be UTF-8 text", "INVALID_CALLBACK") from None

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Callback body is not valid JSON: {e}", "INVALID_CALLBACK") from None

    if not isinstance(payload, Mapping):
        raise ValidationError("Callback payload must be a JSON object", "INVALID_CALLBACK")

    return dict(payload)


def _parse_timestamp(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_biz_body(biz_body: Optional[str]) -> Optional[Dict[str, Any]]:
    if not biz_body:
        return None
    try:
        data = json.loads(biz_body)
    except json.JSONDecodeError:
        logger.debug("Callback bizBody is not JSON; returning raw text only")
        return None
    return data if isinstance(data, dict) else None


def verify_callback(
    payload: CallbackPayload,
    public_key: PublicKeyInput,
    scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME
) -> CallbackNotification:
    """
    Verify a callback and return its contents.

    Args:
        payload: Callback body as dict, JSON text or bytes
        public_key: Platform public key text or RSAPublicKey
        scheme: Scheme the platform signs callbacks with

    Returns:
        CallbackNotification: Verified notification

    Raises:
        ValidationError: If the payload is not a JSON object
        SignatureFormatError: If the signature is missing or malformed
        SignatureError: If the signature does not match
        KeyFormatError: If the public key cannot be parsed
    """
    params = _load_payload(payload)

    signature = params.pop(SIGN_FIELD, None)
    if not isinstance(signature, str) or not signature.strip():
        raise SignatureFormatError("Callback is missing the sign field")

    create_verifier(public_key, scheme).verify(params, signature)

    biz_body = params.get("bizBody")
    if biz_body is not None and not isinstance(biz_body, str):
        biz_body = json.dumps(biz_body, ensure_ascii=False, separators=(",", ":"))

    merchant_no = params.get("merchantNo")
    notification = CallbackNotification(
        merchant_no=str(merchant_no) if merchant_no is not None else None,
        timestamp=_parse_timestamp(params.get("timestamp")),
        biz_body=biz_body,
        data=_parse_biz_body(biz_body),
        params=params
    )

    logger.info(f"Verified callback for merchant {notification.merchant_no}")
    return notification
