"""
Test suite for signature verification
"""

import base64
import logging

import pytest

from haozpay_sdk.crypto.keys import strip_pem_armor
from haozpay_sdk.exceptions import KeyFormatError, SignatureError, SignatureFormatError, ValidationError
from haozpay_sdk.signing import SignatureScheme, sign
from haozpay_sdk.verification import (
    SignatureVerifier,
    create_verifier,
    decode_signature,
    is_valid_sign,
    verify_sign,
)


class TestVerifySign:
    """Test verification for both schemes"""

    def setup_method(self):
        self.params = {
            "merchantNo": "HZ1",
            "timestamp": 1700000000000,
            "bizBody": '{"orderTitle":"测试","orderAmount":10.5}',
        }

    @pytest.mark.parametrize("scheme", list(SignatureScheme))
    def test_round_trip(self, scheme, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1, scheme)
        verify_sign(self.params, signature, public_pem, scheme)

    @pytest.mark.parametrize("scheme", list(SignatureScheme))
    def test_tampered_params(self, scheme, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1, scheme)
        tampered = dict(self.params, timestamp=1700000000001)

        with pytest.raises(SignatureError) as exc_info:
            verify_sign(tampered, signature, public_pem, scheme)
        assert exc_info.value.message == "Signature verification failed"
        assert not isinstance(exc_info.value, SignatureFormatError)

    @pytest.mark.parametrize("scheme", list(SignatureScheme))
    def test_wrong_public_key(self, scheme, private_pem_pkcs1, other_public_pem):
        signature = sign(self.params, private_pem_pkcs1, scheme)

        with pytest.raises(SignatureError):
            verify_sign(self.params, signature, other_public_pem, scheme)

    def test_raw_signature_rejected_by_standard(self, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1, SignatureScheme.RAW_EXPONENTIATION)

        with pytest.raises(SignatureError):
            verify_sign(self.params, signature, public_pem, SignatureScheme.STANDARD)

    def test_standard_signature_rejected_by_raw(self, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1, SignatureScheme.STANDARD)

        with pytest.raises(SignatureError):
            verify_sign(self.params, signature, public_pem, SignatureScheme.RAW_EXPONENTIATION)

    def test_sign_field_in_params_ignored(self, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1)
        verify_sign(dict(self.params, sign=signature), signature, public_pem)

    def test_reordered_params(self, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1)
        reordered = dict(reversed(list(self.params.items())))
        verify_sign(reordered, signature, public_pem)

    def test_bare_base64_public_key(self, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1)
        verify_sign(self.params, signature, strip_pem_armor(public_pem))

    def test_signature_value_out_of_range(self, public_pem):
        """Test a signature numerically >= n is a mismatch, not a crash"""
        signature = base64.b64encode(b"\xff" * 256).decode()

        for scheme in SignatureScheme:
            with pytest.raises(SignatureError):
                verify_sign(self.params, signature, public_pem, scheme)

    @pytest.mark.parametrize("scheme", list(SignatureScheme))
    def test_single_bit_flip_rejected(self, scheme, private_pem_pkcs1, public_pem):
        raw = base64.b64decode(sign(self.params, private_pem_pkcs1, scheme))

        for offset in (0, len(raw) // 2, len(raw) - 1):
            for bit in (0, 7):
                flipped = bytearray(raw)
                flipped[offset] ^= 1 << bit
                signature = base64.b64encode(bytes(flipped)).decode()

                with pytest.raises(SignatureError):
                    verify_sign(self.params, signature, public_pem, scheme)

    def test_invalid_public_key(self, private_pem_pkcs1):
        signature = sign(self.params, private_pem_pkcs1)

        with pytest.raises(KeyFormatError):
            verify_sign(self.params, signature, "not a key")


class TestSignatureFormat:
    """Test strict signature decoding"""

    def test_malformed_base64(self, public_pem):
        with pytest.raises(SignatureFormatError):
            verify_sign({"a": "1"}, "not*base64", public_pem)

    def test_wrong_length(self, public_pem):
        with pytest.raises(SignatureFormatError) as exc_info:
            verify_sign({"a": "1"}, base64.b64encode(b"x" * 10).decode(), public_pem)
        assert exc_info.value.details == {"expected_length": 256, "actual_length": 10}

    def test_empty_signature(self, public_pem):
        for empty in ("", "   ", None):
            with pytest.raises(SignatureFormatError):
                verify_sign({"a": "1"}, empty, public_pem)

    def test_surrounding_whitespace_allowed(self):
        encoded = base64.b64encode(b"s" * 128).decode()
        assert decode_signature(f"  {encoded}\n", 128) == b"s" * 128

    def test_bytes_signature(self):
        encoded = base64.b64encode(b"s" * 128)
        assert decode_signature(encoded, 128) == b"s" * 128

    def test_format_error_is_signature_error(self):
        assert issubclass(SignatureFormatError, SignatureError)


class TestSignatureVerifier:
    """Test the verifier class and boolean helpers"""

    def setup_method(self):
        self.params = {"merchantNo": "HZ1", "timestamp": 1700000000000}

    def test_is_valid(self, private_pem_pkcs1, public_pem):
        verifier = SignatureVerifier(public_pem)
        signature = sign(self.params, private_pem_pkcs1)

        assert verifier.is_valid(self.params, signature) is True
        assert verifier.is_valid(dict(self.params, merchantNo="HZ2"), signature) is False
        assert verifier.is_valid(self.params, "garbage!") is False

    def test_is_valid_sign(self, private_pem_pkcs1, public_pem):
        signature = sign(self.params, private_pem_pkcs1, "standard")

        assert is_valid_sign(self.params, signature, public_pem, "standard") is True
        assert is_valid_sign(self.params, signature, public_pem, "raw_exponentiation") is False

    def test_is_valid_sign_propagates_key_errors(self, private_pem_pkcs1):
        signature = sign(self.params, private_pem_pkcs1)

        with pytest.raises(KeyFormatError):
            is_valid_sign(self.params, signature, "bad key")

    def test_missing_public_key(self):
        with pytest.raises(ValidationError) as exc_info:
            SignatureVerifier("")
        assert exc_info.value.error_code == "MISSING_PUBLIC_KEY"

    def test_create_verifier(self, public_pem):
        verifier = create_verifier(public_pem, "standard")
        assert verifier.scheme is SignatureScheme.STANDARD
        assert "standard" in repr(verifier)

    def test_failure_is_logged(self, private_pem_pkcs1, public_pem, caplog):
        signature = sign(self.params, private_pem_pkcs1)
        with caplog.at_level(logging.WARNING, logger="haozpay_sdk.verification.verifier"):
            assert not is_valid_sign(dict(self.params, merchantNo="X"), signature, public_pem)

        assert "Signature verification failed" in caplog.text
        assert signature not in caplog.text
