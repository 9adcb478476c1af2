from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from app.core.config import Settings


@pytest.fixture(scope="session")
def rsa_keys() -> dict:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return {"private": private_pem, "public": public_pem}


@pytest.fixture
def settings(rsa_keys) -> Settings:
    """Fully configured settings, independent of the machine's environment"""
    s = Settings()
    s.AZURE_OPENAI_ENDPOINT = "https://openai.test"
    s.AZURE_OPENAI_API_KEY = "test-key"
    s.AZURE_OPENAI_DEPLOYMENT_NAME = "gpt-4o"
    s.AZURE_OPENAI_API_VERSION = "2024-02-01"
    s.LLM_MAX_ATTEMPTS = 3
    s.SNOWFLAKE_ACCOUNT = "myorg-acct.us-east-1"
    s.SNOWFLAKE_USER = "alice"
    s.SNOWFLAKE_PRIVATE_KEY = rsa_keys["private"]
    s.SNOWFLAKE_PUBLIC_KEY = ""
    s.SNOWFLAKE_PASSWORD = ""
    s.SNOWFLAKE_WAREHOUSE = "COMPUTE_WH"
    s.SNOWFLAKE_DATABASE = "FINANCIAL_DEMO"
    s.SNOWFLAKE_SCHEMA = "PUBLIC"
    s.SNOWFLAKE_ROLE = ""
    s.SNOWFLAKE_HOST = "https://acct.snowflake.test"
    s.SNOWFLAKE_POLL_INTERVAL_SECONDS = 1.0
    s.SNOWFLAKE_POLL_MAX_ATTEMPTS = 3
    s.SNOWFLAKE_STATEMENT_TIMEOUT = 60
    s.DEFAULT_ROW_LIMIT = 100
    return s


@pytest.fixture
def sleeps() -> list:
    """Pass `sleeps.append` wherever a sleep function is injected"""
    return []
