from __future__ import annotations

import httpx


class BlobError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(f"azstore: {message}")


class BlobNotFoundError(BlobError):
    def __init__(self, name: str = "") -> None:
        super().__init__(f"The requested resource does not exist{f': {name}' if name else ''}")
        self.name = name


class ContainerAlreadyExistsError(BlobError):
    def __init__(self, container: str) -> None:
        super().__init__(f"Container already exists: {container}")
        self.container = container


class BlobRequestError(BlobError):
    """The service answered with a status the operation does not expect."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(
            f"Unexpected response: {response.status_code} {response.reason_phrase}"
        )
        self.response = response
        self.status_code = response.status_code
        self.reason = response.reason_phrase
        self.body = response.content


__all__ = [
    "BlobError",
    "BlobNotFoundError",
    "ContainerAlreadyExistsError",
    "BlobRequestError",
]
