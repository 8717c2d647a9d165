"""
Client configuration for HaozPay Python SDK

Configuration can be built directly, through ``ClientConfigBuilder``, or loaded
from environment variables, a dict, a JSON string or a JSON file. Key material
may be supplied inline or as a path to a key file.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from .exceptions import ConfigurationError, HaozPaySDKError
from .signing.types import DEFAULT_SIGNATURE_SCHEME, SignatureScheme

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRY_COUNT = 3
DEFAULT_RETRY_WAIT_TIME = 1.0
DEFAULT_RETRY_MAX_WAIT = 5.0
DEFAULT_ENV_PREFIX = "HAOZPAY_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass
class ClientConfig:
    """
    Configuration for a HaozPay API client.

    Attributes:
        base_url: Gateway base URL, e.g. ``https://gate.haozpay.com``
        merchant_no: Merchant number assigned by the platform
        private_key: Merchant RSA private key (PEM or bare base64)
        platform_public_key: Platform public key for callback verification
        timeout: Per-request timeout in seconds
        retry_count: Retries for transient failures
        retry_wait_time: Backoff factor between retries in seconds
        retry_max_wait: Upper bound for a single backoff in seconds
        debug: Log request and response bodies
        signature_scheme: Scheme used to sign requests and verify callbacks
    """
    base_url: str
    merchant_no: str
    private_key: str
    platform_public_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    retry_count: int = DEFAULT_RETRY_COUNT
    retry_wait_time: float = DEFAULT_RETRY_WAIT_TIME
    retry_max_wait: float = DEFAULT_RETRY_MAX_WAIT
    debug: bool = False
    signature_scheme: SignatureScheme = DEFAULT_SIGNATURE_SCHEME

    def __post_init__(self):
        """Normalize and validate configuration."""
        try:
            self.signature_scheme = SignatureScheme.from_value(self.signature_scheme)
        except HaozPaySDKError as e:
            raise ConfigurationError("signature_scheme", e.message) from None

        if isinstance(self.base_url, str):
            self.base_url = self.base_url.strip().rstrip("/")

        self.validate()

    def validate(self) -> None:
        """
        Check required fields and numeric ranges.

        Raises:
            ConfigurationError: On the first invalid field
        """
        if not self.base_url or not isinstance(self.base_url, str):
            raise ConfigurationError("base_url", "base_url is required")

        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError("base_url", f"invalid URL format: {self.base_url}")

        if not self.merchant_no or not isinstance(self.merchant_no, str) or not self.merchant_no.strip():
            raise ConfigurationError("merchant_no", "merchant_no is required")

        if not self.private_key or not isinstance(self.private_key, str) or not self.private_key.strip():
            raise ConfigurationError("private_key", "private_key is required")

        if self.platform_public_key is not None and not isinstance(self.platform_public_key, str):
            raise ConfigurationError("platform_public_key", "platform_public_key must be a string")

        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ConfigurationError("timeout", "timeout must be a positive number of seconds")

        if isinstance(self.retry_count, bool) or not isinstance(self.retry_count, int) or self.retry_count < 0:
            raise ConfigurationError("retry_count", "retry_count must be a non-negative integer")

        for name in ("retry_wait_time", "retry_max_wait"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(name, f"{name} must be a non-negative number of seconds")

        if self.retry_max_wait < self.retry_wait_time:
            raise ConfigurationError("retry_max_wait", "retry_max_wait must not be less than retry_wait_time")

    def __repr__(self) -> str:
        public_key = "'***'" if self.platform_public_key else "None"
        return (
            f"ClientConfig(base_url='{self.base_url}', merchant_no='{self.merchant_no}', "
            f"private_key='***', platform_public_key={public_key}, timeout={self.timeout}, "
            f"retry_count={self.retry_count}, retry_wait_time={self.retry_wait_time}, "
            f"retry_max_wait={self.retry_max_wait}, debug={self.debug}, "
            f"signature_scheme='{self.signature_scheme.value}')"
        )


class ClientConfigBuilder:
    """
    Builder for creating client configurations with fluent API
    """

    def __init__(self):
        self._base_url: Optional[str] = None
        self._merchant_no: Optional[str] = None
        self._private_key: Optional[str] = None
        self._platform_public_key: Optional[str] = None
        self._timeout: float = DEFAULT_TIMEOUT
        self._retry_count: int = DEFAULT_RETRY_COUNT
        self._retry_wait_time: float = DEFAULT_RETRY_WAIT_TIME
        self._retry_max_wait: float = DEFAULT_RETRY_MAX_WAIT
        self._debug: bool = False
        self._signature_scheme: Union[str, SignatureScheme] = DEFAULT_SIGNATURE_SCHEME

    def with_base_url(self, base_url: str) -> 'ClientConfigBuilder':
        """
        Set gateway base URL.

        Args:
            base_url: Base URL, e.g. ``https://gate.haozpay.com``

        Returns:
            ClientConfigBuilder: Self for method chaining
        """
        self._base_url = base_url
        return self

    def with_merchant_no(self, merchant_no: str) -> 'ClientConfigBuilder':
        """
        Set merchant number.

        Args:
            merchant_no: Merchant number assigned by the platform

        Returns:
            ClientConfigBuilder: Self for method chaining
        """
        self._merchant_no = merchant_no
        return self

    def with_private_key(self, private_key: str) -> 'ClientConfigBuilder':
        """
        Set merchant private key.

        Args:
            private_key: PKCS#1 or PKCS#8 key as PEM or bare base64

        Returns:
            ClientConfigBuilder: Self for method chaining
        """
        self._private_key = private_key
        return self

    def with_private_key_file(self, path: Union[str, Path]) -> 'ClientConfigBuilder':
        """Read the merchant private key from a file."""
        self._private_key = _read_key_file("private_key", path)
        return self

    def with_platform_public_key(self, public_key: str) -> 'ClientConfigBuilder':
        """
        Set platform public key used to verify callbacks.

        Args:
            public_key: SubjectPublicKeyInfo key as PEM or bare base64

        Returns:
            ClientConfigBuilder: Self for method chaining
        """
        self._platform_public_key = public_key
        return self

    def with_platform_public_key_file(self, path: Union[str, Path]) -> 'ClientConfigBuilder':
        """Read the platform public key from a file."""
        self._platform_public_key = _read_key_file("platform_public_key", path)
        return self

    def with_timeout(self, timeout: float) -> 'ClientConfigBuilder':
        """Set per-request timeout in seconds."""
        self._timeout = timeout
        return self

    def with_retry(self, count: int, wait_time: float, max_wait: float) -> 'ClientConfigBuilder':
        """
        Set retry policy.

        Args:
            count: Number of retries
            wait_time: Backoff factor in seconds
            max_wait: Maximum single backoff in seconds

        Returns:
            ClientConfigBuilder: Self for method chaining
        """
        self._retry_count = count
        self._retry_wait_time = wait_time
        self._retry_max_wait = max_wait
        return self

    def with_debug(self, debug: bool = True) -> 'ClientConfigBuilder':
        """Enable or disable request and response body logging."""
        self._debug = debug
        return self

    def with_signature_scheme(self, scheme: Union[str, SignatureScheme]) -> 'ClientConfigBuilder':
        """Set the signature scheme."""
        self._signature_scheme = scheme
        return self

    def build(self) -> ClientConfig:
        """
        Build the client configuration.

        Returns:
            ClientConfig: Validated configuration

        Raises:
            ConfigurationError: If a field is missing or invalid
        """
        return ClientConfig(
            base_url=self._base_url,
            merchant_no=self._merchant_no,
            private_key=self._private_key,
            platform_public_key=self._platform_public_key,
            timeout=self._timeout,
            retry_count=self._retry_count,
            retry_wait_time=self._retry_wait_time,
            retry_max_wait=self._retry_max_wait,
            debug=self._debug,
            signature_scheme=self._signature_scheme
        )


def create_client_config(
    base_url: str,
    merchant_no: str,
    private_key: str,
    platform_public_key: Optional[str] = None,
    **kwargs
) -> ClientConfig:
    """
    Create a client configuration with defaults for the remaining fields.

    Args:
        base_url: Gateway base URL
        merchant_no: Merchant number
        private_key: Merchant private key text
        platform_public_key: Optional platform public key text
        **kwargs: Any other ``ClientConfig`` field

    Returns:
        ClientConfig: Validated configuration
    """
    return ClientConfig(
        base_url=base_url,
        merchant_no=merchant_no,
        private_key=private_key,
        platform_public_key=platform_public_key,
        **kwargs
    )


def _read_key_file(field_name: str, path: Union[str, Path]) -> str:
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise ConfigurationError(field_name, f"failed to read key file {path}: {e.strerror}") from None


def _parse_bool(field_name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(field_name, f"invalid boolean value: {value}")


def _parse_number(field_name: str, value: Any, number_type: type) -> Any:
    if isinstance(value, bool):
        raise ConfigurationError(field_name, f"invalid numeric value: {value}")
    if isinstance(value, (int, float)) and number_type is float:
        return float(value)
    try:
        return number_type(str(value).strip())
    except ValueError:
        raise ConfigurationError(field_name, f"invalid numeric value: {value}") from None


_FIELD_PARSERS = {
    "timeout": lambda v: _parse_number("timeout", v, float),
    "retry_count": lambda v: _parse_number("retry_count", v, int),
    "retry_wait_time": lambda v: _parse_number("retry_wait_time", v, float),
    "retry_max_wait": lambda v: _parse_number("retry_max_wait", v, float),
    "debug": lambda v: _parse_bool("debug", v),
}

_KEY_FILE_FIELDS = {
    "private_key_file": "private_key",
    "platform_public_key_file": "platform_public_key",
}


def load_config_from_dict(data: Mapping[str, Any]) -> ClientConfig:
    """
    Load configuration from a dictionary of ``ClientConfig`` field names.

    ``private_key_file`` and ``platform_public_key_file`` may be given instead
    of the inline key fields.

    Args:
        data: Configuration values

    Returns:
        ClientConfig: Validated configuration

    Raises:
        ConfigurationError: On unknown fields, unreadable key files or
            invalid values
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("config", "configuration must be a mapping")

    known_fields = {f.name for f in fields(ClientConfig)}
    values: Dict[str, Any] = {}

    for name, value in data.items():
        if name in _KEY_FILE_FIELDS:
            target = _KEY_FILE_FIELDS[name]
            if target not in data:
                values[target] = _read_key_file(target, value)
            continue
        if name not in known_fields:
            raise ConfigurationError(name, "unknown configuration field")
        if value is None:
            continue
        parser = _FIELD_PARSERS.get(name)
        values[name] = parser(value) if parser else value

    for required in ("base_url", "merchant_no", "private_key"):
        if required not in values:
            raise ConfigurationError(required, f"{required} is required")

    return ClientConfig(**values)


def load_config_from_json(json_string: str) -> ClientConfig:
    """
    Load configuration from a JSON object string.

    Raises:
        ConfigurationError: If the JSON is invalid or describes an invalid
            configuration
    """
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ConfigurationError("config", f"failed to parse configuration JSON: {e}") from None
    return load_config_from_dict(data)


def load_config_from_file(file_path: Union[str, Path]) -> ClientConfig:
    """
    Load configuration from a JSON file.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    try:
        with open(Path(file_path), "r", encoding="utf-8") as f:
            json_string = f.read()
    except OSError as e:
        raise ConfigurationError("config", f"failed to read configuration file: {e}") from None

    logger.debug(f"Loaded configuration file {file_path}")
    return load_config_from_json(json_string)


def load_config_from_env(prefix: str = DEFAULT_ENV_PREFIX, environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
    """
    Load configuration from environment variables.

    Each ``ClientConfig`` field maps to ``<prefix><FIELD NAME IN UPPER CASE>``,
    e.g. ``HAOZPAY_BASE_URL`` or ``HAOZPAY_RETRY_COUNT``. Keys may also be
    given as files through ``HAOZPAY_PRIVATE_KEY_FILE`` and
    ``HAOZPAY_PLATFORM_PUBLIC_KEY_FILE``.

    Args:
        prefix: Variable name prefix
        environ: Mapping to read instead of ``os.environ``

    Returns:
        ClientConfig: Validated configuration
    """
    environ = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    names = [f.name for f in fields(ClientConfig)] + list(_KEY_FILE_FIELDS)
    for name in names:
        value = environ.get(f"{prefix}{name.upper()}")
        if value is not None and value != "":
            data[name] = value

    return load_config_from_dict(data)
