"""Shared fixtures for all tests."""

import base64
import json
import time
from collections.abc import Generator

import pytest

from azstore.auth import TokenCache

# base64 of b"0123456789abcdef0123456789abcdef"
ACCOUNT_KEY = base64.b64encode(b"0123456789abcdef0123456789abcdef").decode()
ACCOUNT_NAME = "testaccount"
API_URL = f"https://{ACCOUNT_NAME}.blob.core.windows.net"
AUTH_URL = "https://login.example.com"


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear all Azure-related environment variables for testing.

    This ensures tests don't accidentally use real credentials from the environment.
    """
    env_vars_to_clear = [
        # Storage account
        "AZURE_STORAGE_CONNECTION_STRING",
        "AZURE_STORAGE_ACCOUNT_NAME",
        "AZURE_STORAGE_ACCOUNT_KEY",
        "AZURE_STORAGE_CONTAINER",
        "AZURE_STORAGE_API_URL",
        # Service principal
        "AZURE_AUTH_URL",
        "AZURE_CLIENT_ID",
        "AZURE_CLIENT_SECRET",
        "AZURE_TENANT_ID",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def account_name() -> str:
    return ACCOUNT_NAME


@pytest.fixture
def account_key() -> str:
    return ACCOUNT_KEY


@pytest.fixture
def token_cache() -> TokenCache:
    """A cache private to one test, so tests never share tokens."""
    return TokenCache()


def make_token(exp: int) -> str:
    """Two-segment token whose payload carries ``exp``, like the identity platform's."""
    payload = base64.b64encode(json.dumps({"exp": exp}).encode()).decode()
    return f"a.{payload}"


@pytest.fixture
def valid_token() -> str:
    """Token that expires in 100 seconds."""
    return make_token(int(time.time()) + 100)


@pytest.fixture
def expired_token() -> str:
    """Token that expired 100 seconds ago."""
    return make_token(int(time.time()) - 100)


@pytest.fixture
def token_factory():
    """Build a token for an arbitrary ``exp``."""
    return make_token
