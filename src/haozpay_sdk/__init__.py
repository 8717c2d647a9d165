"""
HaozPay Python SDK
Request signing, callback verification and payment API client
"""

from .version import __version__
from .crypto.keys import (
    RSAKeyPair,
    generate_key_pair,
    load_private_key,
    load_public_key,
    public_key_to_pem,
    private_key_to_pem,
)
from .exceptions import (
    HaozPaySDKError,
    ValidationError,
    ConfigurationError,
    KeyFormatError,
    SigningError,
    MessageTooLongError,
    PaddingTooShortError,
    SignatureError,
    SignatureFormatError,
    ServerCommunicationError,
    APIError,
)
from .signing import (
    # Core signing functionality
    SignatureScheme,
    DEFAULT_SIGNATURE_SCHEME,
    SIGN_FIELD,
    Digest,
    build_sign_string,
    compute_digest,
    HaozPaySigner,
    SignatureResult,
    create_signer,
    sign,
    sign_params,
)
from .verification import (
    SignatureVerifier,
    create_verifier,
    verify_sign,
    is_valid_sign,
    CallbackNotification,
    verify_callback,
)
from .config import (
    ClientConfig,
    ClientConfigBuilder,
    create_client_config,
    load_config_from_env,
    load_config_from_dict,
    load_config_from_json,
    load_config_from_file,
)
from .models import (
    HaozPayRequest,
    ApiResponse,
    CreatePaymentOrderRequest,
    PaymentOrderResponse,
    CancelPaymentOrderRequest,
    CreateRefundRequest,
    RefundResponse,
    QueryRefundRequest,
    QueryRefundResponse,
    CreateWithdrawRequest,
)
from .http_client import HaozPayClient, create_client
from .payment import PaymentService

__all__ = [
    '__version__',
    # Keys
    'RSAKeyPair',
    'generate_key_pair',
    'load_private_key',
    'load_public_key',
    'public_key_to_pem',
    'private_key_to_pem',
    # Exceptions
    'HaozPaySDKError',
    'ValidationError',
    'ConfigurationError',
    'KeyFormatError',
    'SigningError',
    'MessageTooLongError',
    'PaddingTooShortError',
    'SignatureError',
    'SignatureFormatError',
    'ServerCommunicationError',
    'APIError',
    # Signing
    'SignatureScheme',
    'DEFAULT_SIGNATURE_SCHEME',
    'SIGN_FIELD',
    'Digest',
    'build_sign_string',
    'compute_digest',
    'HaozPaySigner',
    'SignatureResult',
    'create_signer',
    'sign',
    'sign_params',
    # Verification
    'SignatureVerifier',
    'create_verifier',
    'verify_sign',
    'is_valid_sign',
    'CallbackNotification',
    'verify_callback',
    # Configuration
    'ClientConfig',
    'ClientConfigBuilder',
    'create_client_config',
    'load_config_from_env',
    'load_config_from_dict',
    'load_config_from_json',
    'load_config_from_file',
    # Models
    'HaozPayRequest',
    'ApiResponse',
    'CreatePaymentOrderRequest',
    'PaymentOrderResponse',
    'CancelPaymentOrderRequest',
    'CreateRefundRequest',
    'RefundResponse',
    'QueryRefundRequest',
    'QueryRefundResponse',
    'CreateWithdrawRequest',
    # HTTP client
    'HaozPayClient',
    'create_client',
    'PaymentService',
]
