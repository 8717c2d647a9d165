"""
Shared fixtures for the HaozPay SDK test suite

RSA key generation is slow, so keys are generated once per session.
"""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _private_pem(key, key_format):
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=key_format,
        encryption_algorithm=serialization.NoEncryption()
    ).decode("ascii")


def _public_pem(key):
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii")


@pytest.fixture(scope="session")
def rsa_private_key():
    """2048-bit merchant key"""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key():
    """Unrelated 2048-bit key"""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def small_private_key():
    """1024-bit key, k = 128 bytes"""
    return rsa.generate_private_key(public_exponent=65537, key_size=1024)


@pytest.fixture(scope="session")
def private_pem_pkcs1(rsa_private_key):
    return _private_pem(rsa_private_key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture(scope="session")
def private_pem_pkcs8(rsa_private_key):
    return _private_pem(rsa_private_key, serialization.PrivateFormat.PKCS8)


@pytest.fixture(scope="session")
def public_pem(rsa_private_key):
    return _public_pem(rsa_private_key)


@pytest.fixture(scope="session")
def other_public_pem(other_private_key):
    return _public_pem(other_private_key)


@pytest.fixture
def sample_params():
    return {
        "merchantNo": "HZ1",
        "timestamp": 1700000000000,
        "bizBody": '{"a":1}',
    }
