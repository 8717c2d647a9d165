"""
Tests for payment operations and request/response models
"""

import json
from unittest.mock import Mock, patch

import pytest

from haozpay_sdk.config import ClientConfig
from haozpay_sdk.exceptions import APIError, ValidationError
from haozpay_sdk.http_client import HaozPayClient
from haozpay_sdk.models import (
    ApiResponse,
    CancelPaymentOrderRequest,
    CreatePaymentOrderRequest,
    CreateRefundRequest,
    CreateWithdrawRequest,
    PaymentOrderResponse,
    QueryRefundRequest,
    QueryRefundResponse,
    RefundResponse,
)
from haozpay_sdk.payment import ENDPOINTS, PaymentService


class TestModels:
    """Test request serialization and response parsing"""

    def test_order_request_serialization(self):
        request = CreatePaymentOrderRequest(
            order_title="Test order",
            order_amount=99.9,
            pay_type=1,
            notify_url="https://merchant.example.com/notify",
            use_haoz_pay_cashier=True,
        )
        assert request.to_dict() == {
            "orderTitle": "Test order",
            "orderAmount": 99.9,
            "payType": 1,
            "useHaozPayCashier": True,
            "notifyUrl": "https://merchant.example.com/notify",
        }

    def test_optional_fields_omitted(self):
        assert CancelPaymentOrderRequest(order_no="O1").to_dict() == {"orderNo": "O1"}
        assert CreateRefundRequest(req_seq_id="R1", refund_amount=5).to_dict() == {
            "reqSeqId": "R1",
            "refundAmount": 5,
        }
        assert CreateWithdrawRequest(pay_channel="ALIPAY", withdraw_amount=10, req_seq_id="W1", remark="").to_dict() == {
            "payChannel": "ALIPAY",
            "withdrawAmount": 10,
            "reqSeqId": "W1",
        }

    def test_optional_fields_included(self):
        data = CreateRefundRequest(
            req_seq_id="R1",
            refund_amount=5,
            refund_reason="damaged",
            remark="r",
            notify_url="https://merchant.example.com/refund",
        ).to_dict()
        assert data["refundReason"] == "damaged"
        assert data["remark"] == "r"
        assert data["notifyUrl"] == "https://merchant.example.com/refund"

    @pytest.mark.parametrize("factory", [
        lambda: CreatePaymentOrderRequest(order_title="", order_amount=1, pay_type=1, notify_url="u"),
        lambda: CreatePaymentOrderRequest(order_title="t", order_amount=0, pay_type=1, notify_url="u"),
        lambda: CreatePaymentOrderRequest(order_title="t", order_amount="1", pay_type=1, notify_url="u"),
        lambda: CancelPaymentOrderRequest(order_no=" "),
        lambda: CreateRefundRequest(req_seq_id="R1", refund_amount=-1),
        lambda: QueryRefundRequest(order_no=""),
        lambda: CreateWithdrawRequest(pay_channel="", withdraw_amount=1, req_seq_id="W1"),
    ])
    def test_request_validation(self, factory):
        with pytest.raises(ValidationError):
            factory()

    def test_response_ignores_unknown_fields(self):
        order = PaymentOrderResponse.from_dict({
            "merchantNo": "HZ1",
            "seqId": "S1",
            "orderAmount": 12.5,
            "payInfo": "weixin://pay",
            "somethingNew": "ignored",
        })
        assert order.merchant_no == "HZ1"
        assert order.seq_id == "S1"
        assert order.order_amount == 12.5
        assert order.pay_info == "weixin://pay"
        assert order.channel_type == ""

    def test_api_response(self):
        response = ApiResponse.from_dict({"code": "0", "message": "ok", "requestId": "R9"})
        assert response.success
        assert response.request_id == "R9"

        with pytest.raises(ValidationError):
            ApiResponse.from_dict({"code": "abc"})


class TestPaymentService:
    """Test payment operations with a stubbed client"""

    def setup_method(self):
        self.client = Mock()
        self.service = PaymentService(self.client)

    def test_create_order(self):
        self.client.post.return_value = ApiResponse(code=0, data={
            "merchantNo": "HZ1",
            "channelType": "WECHAT",
            "seqId": "S1",
            "payType": 1,
            "orderTitle": "T",
            "orderAmount": 10.0,
            "payInfo": "info",
            "merchantOrderNo": "M1",
        })
        request = CreatePaymentOrderRequest(order_title="T", order_amount=10.0, pay_type=1, notify_url="https://n")

        order = self.service.create_order(request)

        self.client.post.assert_called_once_with("/pay-core/payment/order", request.to_dict())
        assert order == PaymentOrderResponse(
            merchant_no="HZ1",
            channel_type="WECHAT",
            seq_id="S1",
            pay_type=1,
            order_title="T",
            order_amount=10.0,
            pay_info="info",
            merchant_order_no="M1",
        )

    def test_create_order_without_data(self):
        self.client.post.return_value = ApiResponse(code=0)
        request = CreatePaymentOrderRequest(order_title="T", order_amount=1, pay_type=1, notify_url="https://n")
        assert self.service.create_order(request) is None

    def test_cancel_order(self):
        self.client.post.return_value = ApiResponse(code=0)
        assert self.service.cancel_order(CancelPaymentOrderRequest(order_no="O1", cancel_reason="user")) is None
        self.client.post.assert_called_once_with(
            "/pay-core/payment/cancel", {"orderNo": "O1", "cancelReason": "user"}
        )

    def test_create_refund(self):
        self.client.post.return_value = ApiResponse(code=0, data={
            "orderNo": "O1",
            "refundStatus": 1,
            "refundAmount": 5.0,
            "refundStartTime": "2024-01-01T10:00:00+08:00",
        })
        refund = self.service.create_refund(CreateRefundRequest(req_seq_id="R1", refund_amount=5.0))

        assert self.client.post.call_args[0][0] == ENDPOINTS["create_refund"]
        assert isinstance(refund, RefundResponse)
        assert refund.refund_status == 1
        assert refund.refund_start_time == "2024-01-01T10:00:00+08:00"
        assert refund.refund_finish_time is None

    def test_query_refund(self):
        self.client.post.return_value = ApiResponse(code=0, data={
            "orderNo": "O1",
            "refundStatusDesc": "SUCCESS",
            "actualRefundAmount": 4.5,
        })
        result = self.service.query_refund(QueryRefundRequest(order_no="O1"))

        self.client.post.assert_called_once_with("/pay-core/payment/refund/query", {"orderNo": "O1"})
        assert isinstance(result, QueryRefundResponse)
        assert result.refund_status_desc == "SUCCESS"
        assert result.actual_refund_amount == 4.5

    def test_create_withdraw(self):
        self.client.post.return_value = ApiResponse(code=0)
        request = CreateWithdrawRequest(pay_channel="BANK", withdraw_amount=100, req_seq_id="W1", notify_url="https://n")

        assert self.service.create_withdraw(request) is None
        self.client.post.assert_called_once_with(
            "/pay-core/account/withdraw",
            {"payChannel": "BANK", "withdrawAmount": 100, "reqSeqId": "W1", "notifyUrl": "https://n"}
        )

    def test_wrong_request_type(self):
        with pytest.raises(ValidationError):
            self.service.cancel_order(QueryRefundRequest(order_no="O1"))
        self.client.post.assert_not_called()

    def test_api_error_propagates(self):
        self.client.post.side_effect = APIError(1001, "order not found")

        with pytest.raises(APIError):
            self.service.query_refund(QueryRefundRequest(order_no="O1"))


class TestPaymentEndToEnd:
    """Test payment calls through a real client with a patched session"""

    def test_create_order_sends_signed_biz_body(self, private_pem_pkcs1, public_pem):
        from haozpay_sdk.verification import verify_sign

        config = ClientConfig(base_url="https://gate.haozpay.com", merchant_no="HZ1", private_key=private_pem_pkcs1)
        client = HaozPayClient(config)

        response = Mock(status_code=200, text="{}")
        response.json.return_value = {"code": 0, "message": "success", "data": {"seqId": "S1"}}

        with patch.object(client.session, "request", return_value=response) as mock_request:
            order = client.payment.create_order(CreatePaymentOrderRequest(
                order_title="测试订单",
                order_amount=0.01,
                pay_type=2,
                notify_url="https://merchant.example.com/notify",
            ))

        assert order.seq_id == "S1"
        sent = mock_request.call_args[1]["json"]
        assert json.loads(sent["bizBody"]) == {
            "orderTitle": "测试订单",
            "orderAmount": 0.01,
            "payType": 2,
            "useHaozPayCashier": False,
            "notifyUrl": "https://merchant.example.com/notify",
        }
        verify_sign({k: v for k, v in sent.items() if k != "sign"}, sent["sign"], public_pem)
