"""Shared fixtures for gmail-mailer tests."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from gmail_mailer.mailer import GmailMailer
from helpers import DummyTransport


@pytest.fixture
def transport():
    return DummyTransport()


@pytest.fixture
def mailer(transport):
    return GmailMailer(transport=transport, sender_email="sender@example.com")


@pytest.fixture(scope="session")
def rsa_key_pair():
    """PEM-encoded (private, public) RSA key pair for signing tests."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")
    return private_pem, public_pem


@pytest.fixture
def service_account_data(rsa_key_pair):
    private_pem, _ = rsa_key_pair
    return {
        "type": "service_account",
        "project_id": "mailer-project",
        "private_key_id": "key-123",
        "private_key": private_pem,
        "client_email": "mailer@mailer-project.iam.gserviceaccount.com",
        "token_uri": "https://oauth2.googleapis.com/token",
    }


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host configuration out of the tests."""
    for var in (
        "GMAIL_USER",
        "GMAIL_MAILER_SERVICE_ACCOUNT_PATH",
        "GMAIL_MAILER_SERVICE_ACCOUNT",
        "GMAIL_MAILER_API_BASE_URL",
        "GMAIL_MAILER_TOKEN_URI",
        "GMAIL_MAILER_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
