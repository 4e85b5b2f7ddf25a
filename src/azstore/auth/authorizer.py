"""The two ways a request can be authorized, chosen once per configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .._http import RequestDescriptor
from .cache import ServicePrincipalCredential
from .service_principal import AsyncServicePrincipalAuthorizer, ServicePrincipalAuthorizer
from .shared_key import SharedKeyCredential, sign


@dataclass(frozen=True, slots=True)
class SharedKeyAuth:
    credential: SharedKeyCredential

    async def authorize(
        self, request: RequestDescriptor, *, content_type: str | None = None
    ) -> RequestDescriptor:
        return sign(
            request,
            self.credential.account_name,
            self.credential.account_key,
            content_type,
        )


@dataclass(frozen=True, slots=True)
class ServicePrincipalAuth:
    """Bearer authorization.

    ``authorizer`` decides the flavour: a ``ServicePrincipalAuthorizer`` never
    suspends and is what the blocking blob client needs, an
    ``AsyncServicePrincipalAuthorizer`` requires an event loop.
    """

    credential: ServicePrincipalCredential
    authorizer: ServicePrincipalAuthorizer | AsyncServicePrincipalAuthorizer

    async def authorize(
        self, request: RequestDescriptor, *, content_type: str | None = None
    ) -> RequestDescriptor:
        # Bearer tokens do not cover the body; content_type is sent as given.
        if content_type and request.header("content-type") is None:
            request = request.with_header("content-type", content_type)
        return await self.authorizer._add_bearer_token(
            request,
            self.credential.client_id,
            self.credential.client_secret,
            self.credential.tenant_id,
        )


Authorizer = SharedKeyAuth | ServicePrincipalAuth


__all__ = ["Authorizer", "SharedKeyAuth", "ServicePrincipalAuth"]
