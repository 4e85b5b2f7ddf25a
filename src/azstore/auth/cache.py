"""In-memory bearer token cache shared by service principal authorizers."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .token import CachedToken


@dataclass(frozen=True, slots=True)
class ServicePrincipalCredential:
    client_id: str
    client_secret: str
    tenant_id: str

    def __repr__(self) -> str:
        return (
            f"ServicePrincipalCredential(client_id={self.client_id!r}, "
            f"tenant_id={self.tenant_id!r})"
        )


class TokenCache:
    """One token slot per credential triple.

    The lock only guards the dictionary itself and is never held while a
    token is being fetched, so a slow refresh for one credential does not
    stall lookups for another. Entries are replaced when they expire and are
    otherwise kept for the lifetime of the cache.
    """

    def __init__(self) -> None:
        self._tokens: dict[ServicePrincipalCredential, CachedToken] = {}
        self._lock = threading.Lock()

    def get(self, credential: ServicePrincipalCredential) -> CachedToken | None:
        with self._lock:
            return self._tokens.get(credential)

    def get_valid(
        self, credential: ServicePrincipalCredential, now: float | None = None
    ) -> CachedToken | None:
        """Return the cached token for ``credential`` unless it is missing or expired."""
        entry = self.get(credential)
        if entry is None or entry.is_expired(now):
            return None
        return entry

    def put(self, credential: ServicePrincipalCredential, token: CachedToken) -> None:
        with self._lock:
            self._tokens[credential] = token

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def __contains__(self, credential: object) -> bool:
        with self._lock:
            return credential in self._tokens


_default_cache = TokenCache()


def default_token_cache() -> TokenCache:
    """The process-wide cache used when an authorizer is not given its own."""
    return _default_cache


__all__ = ["ServicePrincipalCredential", "TokenCache", "default_token_cache"]
