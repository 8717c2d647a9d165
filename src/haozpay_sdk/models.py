"""
Request and response models for the HaozPay payment API

Request models serialize to the camelCase JSON carried in the ``bizBody``
field of the signed envelope; optional fields are omitted when empty.
Response models are built from the ``data`` object of the platform response
and ignore fields they do not know.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .exceptions import ValidationError


def to_biz_body(payload: Mapping[str, Any]) -> str:
    """Render a business payload as compact JSON text."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _put_optional(data: Dict[str, Any], key: str, value: Optional[str]) -> None:
    if value:
        data[key] = value


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{name} is required", "MISSING_FIELD", {"field": name})


def _require_amount(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number", "INVALID_AMOUNT", {"field": name})
    if value <= 0:
        raise ValidationError(f"{name} must be positive", "INVALID_AMOUNT", {"field": name})


@dataclass
class HaozPayRequest:
    """
    Signed request envelope

    Attributes:
        merchant_no: Merchant number
        timestamp: Epoch milliseconds
        biz_body: Compact JSON text of the business payload
        sign: Base64 signature over the other three fields
    """
    merchant_no: str
    timestamp: int
    biz_body: str
    sign: str = ""

    def sign_params(self) -> Dict[str, Any]:
        """Parameters covered by the signature."""
        return {
            'merchantNo': self.merchant_no,
            'timestamp': self.timestamp,
            'bizBody': self.biz_body,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON request body."""
        data = self.sign_params()
        data['sign'] = self.sign
        return data


@dataclass
class ApiResponse:
    """
    Platform response envelope

    Attributes:
        code: 0 on success, a platform error code otherwise
        message: Platform message
        data: Business payload, if any
        request_id: Platform request identifier
        timestamp: Platform timestamp
    """
    code: int
    message: str = ""
    data: Any = None
    request_id: Optional[str] = None
    timestamp: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.code == 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ApiResponse':
        """Create from the decoded response body"""
        code = data.get('code', 0)
        try:
            code = int(code)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid response code: {code!r}", "INVALID_RESPONSE") from None

        return cls(
            code=code,
            message=data.get('message') or "",
            data=data.get('data'),
            request_id=data.get('request_id') or data.get('requestId'),
            timestamp=data.get('timestamp')
        )


@dataclass
class CreatePaymentOrderRequest:
    """Unified order creation request"""
    order_title: str
    order_amount: float
    pay_type: int
    notify_url: str
    use_haoz_pay_cashier: bool = False

    def __post_init__(self):
        _require(self.order_title, 'order_title')
        _require_amount(self.order_amount, 'order_amount')
        _require(self.notify_url, 'notify_url')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'orderTitle': self.order_title,
            'orderAmount': self.order_amount,
            'payType': self.pay_type,
            'useHaozPayCashier': self.use_haoz_pay_cashier,
            'notifyUrl': self.notify_url,
        }


@dataclass
class PaymentOrderResponse:
    """Created payment order"""
    merchant_no: str = ""
    channel_type: str = ""
    seq_id: str = ""
    pay_type: int = 0
    order_title: str = ""
    order_amount: float = 0.0
    pay_info: str = ""
    merchant_order_no: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PaymentOrderResponse':
        return cls(
            merchant_no=data.get('merchantNo', ""),
            channel_type=data.get('channelType', ""),
            seq_id=data.get('seqId', ""),
            pay_type=data.get('payType', 0),
            order_title=data.get('orderTitle', ""),
            order_amount=data.get('orderAmount', 0.0),
            pay_info=data.get('payInfo', ""),
            merchant_order_no=data.get('merchantOrderNo', ""),
        )


@dataclass
class CancelPaymentOrderRequest:
    """Order cancellation request"""
    order_no: str
    cancel_reason: Optional[str] = None

    def __post_init__(self):
        _require(self.order_no, 'order_no')

    def to_dict(self) -> Dict[str, Any]:
        data = {'orderNo': self.order_no}
        _put_optional(data, 'cancelReason', self.cancel_reason)
        return data


@dataclass
class CreateRefundRequest:
    """Refund request against a paid order"""
    req_seq_id: str
    refund_amount: float
    refund_reason: Optional[str] = None
    remark: Optional[str] = None
    notify_url: Optional[str] = None

    def __post_init__(self):
        _require(self.req_seq_id, 'req_seq_id')
        _require_amount(self.refund_amount, 'refund_amount')

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'reqSeqId': self.req_seq_id,
            'refundAmount': self.refund_amount,
        }
        _put_optional(data, 'refundReason', self.refund_reason)
        _put_optional(data, 'remark', self.remark)
        _put_optional(data, 'notifyUrl', self.notify_url)
        return data


@dataclass
class RefundResponse:
    """Accepted refund"""
    merchant_no: str = ""
    order_no: str = ""
    seq_id: str = ""
    req_date: str = ""
    pay_seq_id: str = ""
    pay_req_date: str = ""
    pay_unique_id: str = ""
    refund_start_date: str = ""
    refund_start_time: Optional[str] = None
    refund_finish_time: Optional[str] = None
    refund_status: int = 0
    refund_amount: float = 0.0
    real_refund_amount: float = 0.0
    total_ref_amount: str = ""
    total_ref_fee_amount: str = ""
    ref_count: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'RefundResponse':
        return cls(
            merchant_no=data.get('merchantNo', ""),
            order_no=data.get('orderNo', ""),
            seq_id=data.get('seqId', ""),
            req_date=data.get('reqDate', ""),
            pay_seq_id=data.get('paySeqId', ""),
            pay_req_date=data.get('payReqDate', ""),
            pay_unique_id=data.get('payUniqueId', ""),
            refund_start_date=data.get('refundStartDate', ""),
            refund_start_time=data.get('refundStartTime'),
            refund_finish_time=data.get('refundFinishTime'),
            refund_status=data.get('refundStatus', 0),
            refund_amount=data.get('refundAmount', 0.0),
            real_refund_amount=data.get('realRefundAmount', 0.0),
            total_ref_amount=data.get('totalRefAmount', ""),
            total_ref_fee_amount=data.get('totalRefFeeAmount', ""),
            ref_count=data.get('refCount', ""),
        )


@dataclass
class QueryRefundRequest:
    """Refund status query"""
    order_no: str

    def __post_init__(self):
        _require(self.order_no, 'order_no')

    def to_dict(self) -> Dict[str, Any]:
        return {'orderNo': self.order_no}


@dataclass
class QueryRefundResponse:
    """Refund status"""
    merchant_no: str = ""
    order_no: str = ""
    refund_seq_id: str = ""
    pay_seq_id: str = ""
    pay_req_date: str = ""
    refund_amount: float = 0.0
    actual_refund_amount: float = 0.0
    refund_status: int = 0
    refund_status_desc: str = ""
    trans_finish_time: str = ""
    fee_amount: float = 0.0
    acct_split_bunch: str = ""
    unconfirm_amount: float = 0.0
    confirmed_amount: float = 0.0
    pay_channel: str = ""
    remark: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'QueryRefundResponse':
        return cls(
            merchant_no=data.get('merchantNo', ""),
            order_no=data.get('orderNo', ""),
            refund_seq_id=data.get('refundSeqId', ""),
            pay_seq_id=data.get('paySeqId', ""),
            pay_req_date=data.get('payReqDate', ""),
            refund_amount=data.get('refundAmount', 0.0),
            actual_refund_amount=data.get('actualRefundAmount', 0.0),
            refund_status=data.get('refundStatus', 0),
            refund_status_desc=data.get('refundStatusDesc', ""),
            trans_finish_time=data.get('transFinishTime', ""),
            fee_amount=data.get('feeAmount', 0.0),
            acct_split_bunch=data.get('acctSplitBunch', ""),
            unconfirm_amount=data.get('unconfirmAmount', 0.0),
            confirmed_amount=data.get('confirmedAmount', 0.0),
            pay_channel=data.get('payChannel', ""),
            remark=data.get('remark', ""),
        )


@dataclass
class CreateWithdrawRequest:
    """Account withdrawal request"""
    pay_channel: str
    withdraw_amount: float
    req_seq_id: str
    remark: Optional[str] = None
    notify_url: Optional[str] = None

    def __post_init__(self):
        _require(self.pay_channel, 'pay_channel')
        _require_amount(self.withdraw_amount, 'withdraw_amount')
        _require(self.req_seq_id, 'req_seq_id')

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'payChannel': self.pay_channel,
            'withdrawAmount': self.withdraw_amount,
            'reqSeqId': self.req_seq_id,
        }
        _put_optional(data, 'remark', self.remark)
        _put_optional(data, 'notifyUrl', self.notify_url)
        return data
