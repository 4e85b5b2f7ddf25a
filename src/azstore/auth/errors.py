from __future__ import annotations


class AuthorizationError(Exception):
    def __init__(self, message: str, cause: Exception | None = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class MalformedCredentialError(AuthorizationError):
    """The account key is not valid base64."""


class TokenDecodeError(AuthorizationError):
    """An access token payload could not be decoded into an ``exp`` claim."""


__all__ = ["AuthorizationError", "MalformedCredentialError", "TokenDecodeError"]
