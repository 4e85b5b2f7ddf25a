"""HTTP configuration for storage API clients."""

from __future__ import annotations

DEFAULT_TIMEOUT = 60.0
DEFAULT_AUTH_URL = "https://login.microsoftonline.com"
DEFAULT_ENDPOINT_SUFFIX = "core.windows.net"


__all__ = ["DEFAULT_TIMEOUT", "DEFAULT_AUTH_URL", "DEFAULT_ENDPOINT_SUFFIX"]
