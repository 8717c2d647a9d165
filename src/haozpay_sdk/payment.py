"""
Payment operations on the HaozPay gateway

Order creation, cancellation, refunds, refund queries and account
withdrawals. Each operation serializes its request model into the signed
envelope's ``bizBody`` and parses the ``data`` object of the response.
"""

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .models import (
    CancelPaymentOrderRequest,
    CreatePaymentOrderRequest,
    CreateRefundRequest,
    CreateWithdrawRequest,
    PaymentOrderResponse,
    QueryRefundRequest,
    QueryRefundResponse,
    RefundResponse,
)
from .exceptions import ValidationError

if TYPE_CHECKING:
    from .http_client import HaozPayClient

logger = logging.getLogger(__name__)

# API endpoints
ENDPOINTS = {
    'create_order': '/pay-core/payment/order',
    'cancel_order': '/pay-core/payment/cancel',
    'create_refund': '/pay-core/payment/refund',
    'query_refund': '/pay-core/payment/refund/query',
    'create_withdraw': '/pay-core/account/withdraw',
}


def _check_request(request: Any, expected: type) -> None:
    if not isinstance(request, expected):
        raise ValidationError(
            f"request must be a {expected.__name__} instance",
            "INVALID_REQUEST",
            {"type": type(request).__name__}
        )


def _data_object(data: Any) -> Optional[Mapping[str, Any]]:
    return data if isinstance(data, Mapping) else None


class PaymentService:
    """
    Payment API operations.

    Obtained as ``HaozPayClient.payment``; all requests are signed by the
    owning client.
    """

    def __init__(self, client: 'HaozPayClient'):
        self.client = client

    def create_order(self, request: CreatePaymentOrderRequest) -> Optional[PaymentOrderResponse]:
        """
        Create a payment order.

        Args:
            request: Order details

        Returns:
            PaymentOrderResponse: Created order, or None if the platform
                returned no data

        Raises:
            APIError: If the platform rejects the order
            ServerCommunicationError: On HTTP or network errors
        """
        _check_request(request, CreatePaymentOrderRequest)
        logger.info(f"Creating payment order '{request.order_title}'")

        response = self.client.post(ENDPOINTS['create_order'], request.to_dict())
        data = _data_object(response.data)
        if data is None:
            return None

        order = PaymentOrderResponse.from_dict(data)
        logger.info(f"Payment order created: {order.seq_id}")
        return order

    def cancel_order(self, request: CancelPaymentOrderRequest) -> None:
        """
        Cancel an unpaid order.

        Raises:
            APIError: If the platform refuses the cancellation
            ServerCommunicationError: On HTTP or network errors
        """
        _check_request(request, CancelPaymentOrderRequest)
        logger.info(f"Cancelling payment order {request.order_no}")

        self.client.post(ENDPOINTS['cancel_order'], request.to_dict())

    def create_refund(self, request: CreateRefundRequest) -> Optional[RefundResponse]:
        """
        Refund a paid order, fully or partially.

        Args:
            request: Refund details

        Returns:
            RefundResponse: Accepted refund, or None if the platform returned
                no data
        """
        _check_request(request, CreateRefundRequest)
        logger.info(f"Creating refund {request.req_seq_id}")

        response = self.client.post(ENDPOINTS['create_refund'], request.to_dict())
        data = _data_object(response.data)
        return RefundResponse.from_dict(data) if data is not None else None

    def query_refund(self, request: QueryRefundRequest) -> Optional[QueryRefundResponse]:
        """Query the refund status of an order."""
        _check_request(request, QueryRefundRequest)
        logger.debug(f"Querying refund for order {request.order_no}")

        response = self.client.post(ENDPOINTS['query_refund'], request.to_dict())
        data = _data_object(response.data)
        return QueryRefundResponse.from_dict(data) if data is not None else None

    def create_withdraw(self, request: CreateWithdrawRequest) -> None:
        """
        Withdraw funds from the merchant account.

        Raises:
            APIError: If the platform refuses the withdrawal
            ServerCommunicationError: On HTTP or network errors
        """
        _check_request(request, CreateWithdrawRequest)
        logger.info(f"Creating withdrawal {request.req_seq_id} via {request.pay_channel}")

        self.client.post(ENDPOINTS['create_withdraw'], request.to_dict())
