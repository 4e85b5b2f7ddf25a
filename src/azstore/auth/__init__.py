from .._http import RequestDescriptor, StreamBody
from .authorizer import Authorizer, ServicePrincipalAuth, SharedKeyAuth
from .cache import ServicePrincipalCredential, TokenCache, default_token_cache
from .errors import AuthorizationError, MalformedCredentialError, TokenDecodeError
from .service_principal import (
    NO_TOKEN,
    AsyncServicePrincipalAuthorizer,
    ServicePrincipalAuthorizer,
    TokenFetchFailure,
    log_token_failure,
)
from .shared_key import API_VERSION, SharedKeyCredential, sign
from .token import CachedToken, get_token_payload

__all__ = [
    "RequestDescriptor",
    "StreamBody",
    "Authorizer",
    "SharedKeyAuth",
    "ServicePrincipalAuth",
    "SharedKeyCredential",
    "ServicePrincipalCredential",
    "TokenCache",
    "default_token_cache",
    "CachedToken",
    "get_token_payload",
    "AuthorizationError",
    "MalformedCredentialError",
    "TokenDecodeError",
    "NO_TOKEN",
    "API_VERSION",
    "ServicePrincipalAuthorizer",
    "AsyncServicePrincipalAuthorizer",
    "TokenFetchFailure",
    "log_token_failure",
    "sign",
]
