"""Bearer token authorization with an OAuth2 client-credentials service principal."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from .._http import (
    DEFAULT_AUTH_URL,
    AsyncTransport,
    BaseTransport,
    BlockingTransport,
    RequestDescriptor,
    create_base_async_client,
    create_base_client,
    iter_coroutine,
)
from .cache import ServicePrincipalCredential, TokenCache, default_token_cache
from .errors import TokenDecodeError
from .token import CachedToken

logger = logging.getLogger(__name__)

STORAGE_SCOPE = "https://storage.azure.com/.default"
NO_TOKEN = "No token"


@dataclass(frozen=True, slots=True)
class TokenFetchFailure:
    credential: ServicePrincipalCredential
    status_code: int | None
    reason: str
    detail: str = ""


FailureObserver = Callable[[TokenFetchFailure], None]


def log_token_failure(failure: TokenFetchFailure) -> None:
    status = failure.status_code if failure.status_code is not None else "transport error"
    logger.error(
        "Failed to fetch bearer token. Reason: %s: %s %s",
        status,
        failure.reason,
        failure.detail,
    )


class _BaseServicePrincipalAuthorizer:
    """Base class for service principal authorizers with shared async implementation.

    A failed token fetch never raises. The failure goes to ``on_failure``, the
    cache is left as it was, and the request gets ``Bearer No token`` so that
    the storage service itself answers with its usual 401/403.
    """

    _transport: BaseTransport

    def __init__(
        self,
        auth_url: str = DEFAULT_AUTH_URL,
        *,
        cache: TokenCache | None = None,
        on_failure: FailureObserver | None = None,
        scope: str = STORAGE_SCOPE,
    ) -> None:
        self._auth_url = auth_url.rstrip("/")
        self._cache = cache if cache is not None else default_token_cache()
        self._on_failure = on_failure or log_token_failure
        self._scope = scope

    @property
    def cache(self) -> TokenCache:
        return self._cache

    def token_url(self, tenant_id: str) -> str:
        return f"{self._auth_url}/{tenant_id}/oauth2/v2.0/token"

    async def _fetch_token(self, credential: ServicePrincipalCredential) -> CachedToken | None:
        form = urlencode(
            {
                "grant_type": "client_credentials",
                "client_id": credential.client_id,
                "client_secret": credential.client_secret,
                "scope": self._scope,
            }
        )
        request = RequestDescriptor.build(
            "POST",
            self.token_url(credential.tenant_id),
            headers={
                "content-type": "application/x-www-form-urlencoded",
                "accept": "application/json",
            },
            body=form,
        )

        try:
            resp = await self._transport.send(request)
        except httpx.RequestError as e:
            self._on_failure(TokenFetchFailure(credential, None, type(e).__name__, str(e)))
            return None

        if resp.status_code != 200:
            self._on_failure(
                TokenFetchFailure(credential, resp.status_code, resp.reason_phrase, resp.text)
            )
            return None

        try:
            data = resp.json()
            access_token = data.get("access_token") if isinstance(data, dict) else None
            if not isinstance(access_token, str):
                raise TokenDecodeError("Expected a string-valued access_token property")
            return CachedToken.from_access_token(access_token)
        except (ValueError, TokenDecodeError) as e:
            self._on_failure(
                TokenFetchFailure(credential, resp.status_code, "invalid token response", str(e))
            )
            return None

    async def _get_token(self, credential: ServicePrincipalCredential) -> str | None:
        cached = self._cache.get_valid(credential)
        if cached is not None:
            logger.debug("Using cached bearer token for client %s", credential.client_id)
            return cached.access_token

        logger.debug("Fetching bearer token for client %s", credential.client_id)
        fresh = await self._fetch_token(credential)
        if fresh is None:
            return None
        self._cache.put(credential, fresh)
        return fresh.access_token

    async def _add_bearer_token(
        self,
        request: RequestDescriptor,
        client_id: str,
        client_secret: str,
        tenant_id: str,
    ) -> RequestDescriptor:
        credential = ServicePrincipalCredential(client_id, client_secret, tenant_id)
        token = await self._get_token(credential)
        return request.with_header("authorization", f"Bearer {token or NO_TOKEN}")


class ServicePrincipalAuthorizer(_BaseServicePrincipalAuthorizer):
    def __init__(
        self,
        auth_url: str = DEFAULT_AUTH_URL,
        *,
        cache: TokenCache | None = None,
        on_failure: FailureObserver | None = None,
        scope: str = STORAGE_SCOPE,
        timeout: float | None = None,
    ) -> None:
        super().__init__(auth_url, cache=cache, on_failure=on_failure, scope=scope)
        self._transport = BlockingTransport(create_base_client(timeout=timeout))

    def add_bearer_token(
        self,
        request: RequestDescriptor,
        client_id: str,
        client_secret: str,
        tenant_id: str,
    ) -> RequestDescriptor:
        """Attach ``Authorization: Bearer <token>``, fetching a token if none is cached."""
        return iter_coroutine(
            self._add_bearer_token(request, client_id, client_secret, tenant_id)
        )

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> ServicePrincipalAuthorizer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AsyncServicePrincipalAuthorizer(_BaseServicePrincipalAuthorizer):
    def __init__(
        self,
        auth_url: str = DEFAULT_AUTH_URL,
        *,
        cache: TokenCache | None = None,
        on_failure: FailureObserver | None = None,
        scope: str = STORAGE_SCOPE,
        timeout: float | None = None,
    ) -> None:
        super().__init__(auth_url, cache=cache, on_failure=on_failure, scope=scope)
        self._transport = AsyncTransport(create_base_async_client(timeout=timeout))

    async def add_bearer_token(
        self,
        request: RequestDescriptor,
        client_id: str,
        client_secret: str,
        tenant_id: str,
    ) -> RequestDescriptor:
        return await self._add_bearer_token(request, client_id, client_secret, tenant_id)

    async def aclose(self) -> None:
        await self._transport.aclose()  # type: ignore[attr-defined]

    async def __aenter__(self) -> AsyncServicePrincipalAuthorizer:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


__all__ = [
    "NO_TOKEN",
    "STORAGE_SCOPE",
    "TokenFetchFailure",
    "FailureObserver",
    "log_token_failure",
    "ServicePrincipalAuthorizer",
    "AsyncServicePrincipalAuthorizer",
]
