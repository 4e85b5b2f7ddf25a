from ._core import BLOCK_LIST_CONTENT_TYPE, DEFAULT_CONTENT_TYPE, build_block_list, make_block_id
from .client import DEFAULT_BLOCK_SIZE, MAX_CONCURRENCY, AsyncBlobClient, BlobClient
from .errors import BlobError, BlobNotFoundError, BlobRequestError, ContainerAlreadyExistsError

__all__ = [
    "BlobClient",
    "AsyncBlobClient",
    "BlobError",
    "BlobNotFoundError",
    "BlobRequestError",
    "ContainerAlreadyExistsError",
    "DEFAULT_CONTENT_TYPE",
    "BLOCK_LIST_CONTENT_TYPE",
    "DEFAULT_BLOCK_SIZE",
    "MAX_CONCURRENCY",
    "build_block_list",
    "make_block_id",
]
