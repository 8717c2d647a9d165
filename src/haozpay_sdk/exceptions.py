"""
Exception classes for HaozPay Python SDK

Error messages never include key material. Crypto errors are terminal for the
operation that raised them and are never retried by the SDK.
"""

from typing import Optional, Dict, Any


class HaozPaySDKError(Exception):
    """Base exception for all HaozPay SDK errors"""
    
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class ValidationError(HaozPaySDKError):
    """Exception raised for invalid arguments"""
    
    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ConfigurationError(HaozPaySDKError):
    """Exception raised when the client configuration is invalid"""
    
    def __init__(self, field: str, message: str):
        super().__init__(f"config error: {field} - {message}", "INVALID_CONFIG", {"field": field})
        self.field = field


class KeyFormatError(HaozPaySDKError):
    """Exception raised when key material cannot be parsed or is not an RSA key"""
    
    def __init__(self, message: str, error_code: str = "INVALID_KEY_FORMAT", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class SigningError(HaozPaySDKError):
    """Exception raised when a signature cannot be produced"""
    
    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class MessageTooLongError(SigningError):
    """Exception raised when the signing input exceeds the RSA block capacity"""
    
    def __init__(self, message_length: int, max_length: int):
        super().__init__(
            f"Message of {message_length} bytes exceeds RSA limit of {max_length} bytes",
            "MESSAGE_TOO_LONG",
            {"message_length": message_length, "max_length": max_length}
        )


class PaddingTooShortError(SigningError):
    """Exception raised when the PKCS#1 v1.5 padding string would be under 8 bytes"""
    
    def __init__(self, padding_length: int, min_length: int):
        super().__init__(
            f"Padding string of {padding_length} bytes is shorter than the required {min_length} bytes",
            "PADDING_TOO_SHORT",
            {"padding_length": padding_length, "min_length": min_length}
        )


class SignatureError(HaozPaySDKError):
    """Exception raised when a signature does not match the signed parameters"""
    
    def __init__(self, message: str = "Signature verification failed", error_code: str = "SIGNATURE_VERIFICATION_FAILED",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class SignatureFormatError(SignatureError):
    """Exception raised for malformed base64 or wrong-length signatures"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_SIGNATURE_FORMAT", details)


class ServerCommunicationError(HaozPaySDKError):
    """Exception raised for server communication errors"""
    
    def __init__(self, message: str, error_code: str = "SERVER_ERROR", 
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class APIError(ServerCommunicationError):
    """Business error reported by the HaozPay platform (non-zero response code)"""
    
    def __init__(self, code: int, message: str, http_status: int = 0, request_id: Optional[str] = None):
        if request_id:
            text = f"[{code}] {message} (RequestID: {request_id}, StatusCode: {http_status})"
        else:
            text = f"[{code}] {message} (StatusCode: {http_status})"
        super().__init__(text, "API_ERROR", http_status, {"code": code, "request_id": request_id})
        self.code = code
        self.api_message = message
        self.request_id = request_id
    
    def __str__(self) -> str:
        return self.message
