"""Connection settings for a storage account.

Values are resolved from explicit keyword arguments first, then from a
connection string (``AccountName=...;AccountKey=...``), then from the
environment:

    AZURE_STORAGE_CONNECTION_STRING
    AZURE_STORAGE_ACCOUNT_NAME / AZURE_STORAGE_ACCOUNT_KEY
    AZURE_STORAGE_CONTAINER
    AZURE_STORAGE_API_URL
    AZURE_AUTH_URL
    AZURE_CLIENT_ID / AZURE_CLIENT_SECRET / AZURE_TENANT_ID
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from ._http import DEFAULT_AUTH_URL, DEFAULT_ENDPOINT_SUFFIX
from .auth import (
    AsyncServicePrincipalAuthorizer,
    Authorizer,
    ServicePrincipalAuth,
    ServicePrincipalAuthorizer,
    ServicePrincipalCredential,
    SharedKeyAuth,
    SharedKeyCredential,
    TokenCache,
)
from .auth.service_principal import FailureObserver

_ENV = {
    "connection_string": "AZURE_STORAGE_CONNECTION_STRING",
    "account_name": "AZURE_STORAGE_ACCOUNT_NAME",
    "account_key": "AZURE_STORAGE_ACCOUNT_KEY",
    "container": "AZURE_STORAGE_CONTAINER",
    "api_url": "AZURE_STORAGE_API_URL",
    "auth_url": "AZURE_AUTH_URL",
    "client_id": "AZURE_CLIENT_ID",
    "client_secret": "AZURE_CLIENT_SECRET",
    "tenant_id": "AZURE_TENANT_ID",
}


class ConfigError(Exception):
    pass


def parse_connection_string(connection_string: str) -> dict[str, str]:
    """Split ``Key=Value;Key=Value`` into a dict. Values may themselves contain ``=``."""
    parts: dict[str, str] = {}
    for segment in connection_string.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        key, sep, value = segment.partition("=")
        if not sep:
            raise ConfigError(f"Invalid connection string segment: {segment!r}")
        parts[key.strip()] = value.strip()
    return parts


def _default_api_url(account_name: str, settings: dict[str, str]) -> str:
    if settings.get("BlobEndpoint"):
        return settings["BlobEndpoint"].rstrip("/")
    protocol = settings.get("DefaultEndpointsProtocol", "https")
    suffix = settings.get("EndpointSuffix", DEFAULT_ENDPOINT_SUFFIX)
    return f"{protocol}://{account_name}.blob.{suffix}"


@dataclass(frozen=True)
class StorageConfig:
    account_name: str | None = None
    account_key: str | None = None
    container: str | None = None
    api_url: str | None = None
    auth_url: str = DEFAULT_AUTH_URL
    client_id: str | None = None
    client_secret: str | None = None
    tenant_id: str | None = None
    timeout: float | None = None

    @classmethod
    def from_env(cls, **overrides: str | float | None) -> StorageConfig:
        def pick(name: str) -> str | None:
            value = overrides.get(name)
            if value is None:
                value = os.getenv(_ENV[name])
            return value or None  # type: ignore[return-value]

        unknown = set(overrides) - set(_ENV) - {"timeout"}
        if unknown:
            raise ConfigError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

        connection_string = pick("connection_string")
        settings = parse_connection_string(connection_string) if connection_string else {}

        account_name = overrides.get("account_name") or settings.get("AccountName") or pick("account_name")
        account_key = overrides.get("account_key") or settings.get("AccountKey") or pick("account_key")
        api_url = pick("api_url")
        if api_url is None and account_name:
            api_url = _default_api_url(str(account_name), settings)

        timeout = overrides.get("timeout")
        return cls(
            account_name=account_name,  # type: ignore[arg-type]
            account_key=account_key,  # type: ignore[arg-type]
            container=pick("container"),
            api_url=api_url.rstrip("/") if api_url else None,
            auth_url=pick("auth_url") or DEFAULT_AUTH_URL,
            client_id=pick("client_id"),
            client_secret=pick("client_secret"),
            tenant_id=pick("tenant_id"),
            timeout=float(timeout) if timeout is not None else None,
        )

    @property
    def has_service_principal(self) -> bool:
        return bool(self.client_id and self.client_secret and self.tenant_id)

    @property
    def has_shared_key(self) -> bool:
        return bool(self.account_name and self.account_key)

    def require_api_url(self) -> str:
        if not self.api_url:
            raise ConfigError(
                "Missing storage API URL. Pass api_url=..., account_name=..., "
                "or set AZURE_STORAGE_API_URL."
            )
        return self.api_url

    def require_container(self, container: str | None = None) -> str:
        resolved = container or self.container
        if not resolved:
            raise ConfigError("Missing container. Pass container=... or set AZURE_STORAGE_CONTAINER.")
        return resolved

    def authorizer(
        self,
        *,
        cache: TokenCache | None = None,
        on_failure: FailureObserver | None = None,
        use_async: bool = False,
    ) -> Authorizer:
        """Pick the authorization scheme these settings allow.

        A complete service principal triple wins over an account key.

        Raises:
            ConfigError: If neither scheme is fully configured.
        """
        if self.has_service_principal:
            authorizer_cls = (
                AsyncServicePrincipalAuthorizer if use_async else ServicePrincipalAuthorizer
            )
            return ServicePrincipalAuth(
                credential=ServicePrincipalCredential(
                    self.client_id,  # type: ignore[arg-type]
                    self.client_secret,  # type: ignore[arg-type]
                    self.tenant_id,  # type: ignore[arg-type]
                ),
                authorizer=authorizer_cls(
                    self.auth_url, cache=cache, on_failure=on_failure, timeout=self.timeout
                ),
            )
        if self.has_shared_key:
            return SharedKeyAuth(
                SharedKeyCredential(self.account_name, self.account_key)  # type: ignore[arg-type]
            )
        raise ConfigError(
            "Missing credentials. Configure AZURE_STORAGE_ACCOUNT_NAME and "
            "AZURE_STORAGE_ACCOUNT_KEY, a connection string, or AZURE_CLIENT_ID, "
            "AZURE_CLIENT_SECRET and AZURE_TENANT_ID."
        )

    def __repr__(self) -> str:
        return (
            f"StorageConfig(account_name={self.account_name!r}, container={self.container!r}, "
            f"api_url={self.api_url!r}, client_id={self.client_id!r}, tenant_id={self.tenant_id!r})"
        )


__all__ = ["StorageConfig", "ConfigError", "parse_connection_string"]
