"""Client for the Azure Blob Storage REST API."""

from .auth import (
    AsyncServicePrincipalAuthorizer,
    Authorizer,
    RequestDescriptor,
    ServicePrincipalAuth,
    ServicePrincipalAuthorizer,
    SharedKeyAuth,
    StreamBody,
    TokenCache,
)
from .blob import AsyncBlobClient, BlobClient
from .config import ConfigError, StorageConfig

__version__ = "0.1.0"

__all__ = [
    "AsyncBlobClient",
    "BlobClient",
    "StorageConfig",
    "ConfigError",
    "Authorizer",
    "SharedKeyAuth",
    "ServicePrincipalAuth",
    "ServicePrincipalAuthorizer",
    "AsyncServicePrincipalAuthorizer",
    "TokenCache",
    "RequestDescriptor",
    "StreamBody",
]
