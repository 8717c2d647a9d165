"""
HTTP client for the HaozPay gateway

Every request is wrapped in a signed ``HaozPayRequest`` envelope before it is
sent. Transient failures are retried by the urllib3 retry policy mounted on the
session; signing and verification errors are never retried.
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import ClientConfig
from .exceptions import APIError, ConfigurationError, ServerCommunicationError, ValidationError
from .models import ApiResponse, HaozPayRequest, to_biz_body
from .payment import PaymentService
from .signing.signer import HaozPaySigner
from .verification.callback import CallbackNotification, CallbackPayload, verify_callback
from .version import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"haozPay/{__version__}"
RETRY_STATUS_CODES = [429, 500, 502, 503, 504]

BizPayload = Union[None, str, Mapping[str, Any]]


def current_timestamp_millis() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class HaozPayClient:
    """
    HTTP client for communicating with the HaozPay gateway.

    Payment operations are available through ``client.payment``.

    POST requests are retried on 5xx responses with the same signed envelope,
    so a retried create call is only idempotent when the platform deduplicates
    on ``reqSeqId``.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            config: Client configuration
            session: Optional pre-built session; the retry adapter and default
                headers are mounted on it

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if not isinstance(config, ClientConfig):
            raise ConfigurationError("config", "config must be a ClientConfig instance")
        config.validate()

        self.config = config
        self.signer = HaozPaySigner(config.private_key, config.signature_scheme)
        self.session = self._create_session(session)

        self.payment = PaymentService(self)

        logger.info(
            f"Initialized HaozPay client for {config.base_url} "
            f"(merchant {config.merchant_no}, {config.signature_scheme.value} scheme)"
        )

    def __repr__(self) -> str:
        return f"HaozPayClient(base_url='{self.config.base_url}', merchant_no='{self.config.merchant_no}')"

    def __enter__(self) -> 'HaozPayClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _create_session(self, session: Optional[requests.Session] = None) -> requests.Session:
        """Create HTTP session with retry logic."""
        session = session or requests.Session()

        retry_strategy = Retry(
            total=self.config.retry_count,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=frozenset(["GET", "POST"]),
            backoff_factor=self.config.retry_wait_time,
            backoff_max=self.config.retry_max_wait,
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': USER_AGENT
        })

        return session

    def build_request(self, biz_payload: BizPayload = None) -> HaozPayRequest:
        """
        Wrap a business payload in a signed envelope.

        Args:
            biz_payload: Business payload as a mapping, pre-rendered JSON text
                or None for an empty body

        Returns:
            HaozPayRequest: Envelope with ``sign`` set

        Raises:
            ValidationError: If the payload type is unsupported
            KeyFormatError: If the private key cannot be parsed
            SigningError: If the signature cannot be produced
        """
        if biz_payload is None:
            biz_body = ""
        elif isinstance(biz_payload, str):
            biz_body = biz_payload
        elif isinstance(biz_payload, Mapping):
            biz_body = to_biz_body(biz_payload)
        else:
            raise ValidationError(
                f"Unsupported business payload type: {type(biz_payload).__name__}",
                "INVALID_BIZ_BODY"
            )

        request = HaozPayRequest(
            merchant_no=self.config.merchant_no,
            timestamp=current_timestamp_millis(),
            biz_body=biz_body
        )
        request.sign = self.signer.sign(request.sign_params())
        return request

    def post(self, endpoint: str, biz_payload: BizPayload = None) -> ApiResponse:
        """
        Sign and send a business payload.

        Args:
            endpoint: API path, e.g. ``/pay-core/payment/order``
            biz_payload: Business payload

        Returns:
            ApiResponse: Successful response envelope

        Raises:
            APIError: If the platform reports a business error
            ServerCommunicationError: On HTTP or network errors
        """
        request = self.build_request(biz_payload)
        status, body = self._make_request('POST', endpoint, request)

        try:
            response = ApiResponse.from_dict(body)
        except ValidationError as e:
            raise ServerCommunicationError(e.message, "INVALID_RESPONSE", status) from None

        if not response.success:
            logger.warning(f"HaozPay API error on {endpoint}: [{response.code}] {response.message}")
            raise APIError(response.code, response.message, status, response.request_id)

        return response

    def _make_request(self, method: str, endpoint: str, request: HaozPayRequest) -> Tuple[int, Dict[str, Any]]:
        """
        Make HTTP request with error handling.

        Returns:
            tuple: HTTP status code and response JSON data

        Raises:
            APIError: If an HTTP error response carries a platform error envelope
            ServerCommunicationError: On other HTTP or network errors
        """
        url = urljoin(self.config.base_url + '/', endpoint.lstrip('/'))

        logger.debug(f"Making {method} request to {url}")
        if self.config.debug:
            logger.debug(
                f"Request envelope: merchantNo={request.merchant_no} "
                f"timestamp={request.timestamp} bizBody={request.biz_body}"
            )

        start = time.perf_counter()
        try:
            response = self.session.request(
                method,
                url,
                json=request.to_dict(),
                timeout=self.config.timeout
            )
        except requests.exceptions.Timeout:
            raise ServerCommunicationError(
                f"Request timeout after {self.config.timeout} seconds", "TIMEOUT"
            ) from None
        except requests.exceptions.ConnectionError as e:
            raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR") from e
        except requests.exceptions.RequestException as e:
            raise ServerCommunicationError(f"Request failed: {e}", "REQUEST_FAILED") from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Received HTTP {response.status_code} from {url} in {elapsed_ms:.0f}ms")
        if self.config.debug:
            logger.debug(f"Response body: {response.text}")

        if response.status_code >= 400:
            self._raise_for_error_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise ServerCommunicationError(
                f"Invalid JSON response: {e}", "INVALID_RESPONSE", response.status_code
            ) from None

        if not isinstance(data, dict):
            raise ServerCommunicationError(
                "Response body is not a JSON object", "INVALID_RESPONSE", response.status_code
            )

        return response.status_code, data

    @staticmethod
    def _raise_for_error_response(response: requests.Response) -> None:
        try:
            error_data = response.json()
        except ValueError:
            error_data = None

        if not isinstance(error_data, dict):
            raise ServerCommunicationError(
                f"HTTP {response.status_code}: failed to parse error response",
                "HTTP_ERROR",
                response.status_code
            )

        try:
            code = int(error_data.get('code', 0))
        except (TypeError, ValueError):
            code = 0

        raise APIError(
            code,
            error_data.get('message') or response.reason or f"HTTP {response.status_code}",
            response.status_code,
            error_data.get('request_id') or error_data.get('requestId')
        )

    def verify_callback(self, payload: CallbackPayload) -> CallbackNotification:
        """
        Verify a platform callback with the configured platform public key.

        Args:
            payload: Callback body as dict, JSON text or bytes

        Returns:
            CallbackNotification: Verified notification

        Raises:
            ConfigurationError: If no platform public key is configured
            SignatureError: If the signature does not match
        """
        if not self.config.platform_public_key:
            raise ConfigurationError("platform_public_key", "platform_public_key is required to verify callbacks")

        return verify_callback(payload, self.config.platform_public_key, self.config.signature_scheme)

    def close(self) -> None:
        """Close the HTTP session."""
        if hasattr(self, 'session'):
            self.session.close()
            logger.debug("HTTP session closed")


def create_client(config: ClientConfig) -> HaozPayClient:
    """
    Create a HaozPay client.

    Args:
        config: Client configuration

    Returns:
        HaozPayClient: Configured client
    """
    return HaozPayClient(config)
