"""
This module resolves connection settings for the assistant endpoint.
Values passed explicitly win over environment variables, which win over defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

ENV_BASE_URL = "BRAIN_BASE_URL"
ENV_API_KEY = "BRAIN_API_KEY"
ENV_HTTP_DEBUG = "BRAIN_HTTP_DEBUG"

DEFAULT_BASE_URL = "http://localhost:3000"

_TRUTHY = {"1", "true", "yes", "on"}


def http_debug_enabled() -> bool:
    """True when BRAIN_HTTP_DEBUG asks for request/response logging."""
    return os.getenv(ENV_HTTP_DEBUG, "").lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class ClientSettings:
    """
    Connection settings for the assistant API.
    The API key is optional: same-origin deployments accept anonymous requests.
    """

    base_url: str
    api_key: str | None = None

    @staticmethod
    def from_env_or_values(base_url: str | None = None, api_key: str | None = None) -> ClientSettings:
        """
        Create a ClientSettings instance from provided values or environment variables.

        Args:
            base_url: Optional server root, e.g. "https://brain.example.com".
            api_key: Optional bearer token.

        Returns:
            An initialized ClientSettings with the base URL stripped of any trailing slash.

        Raises:
            ValueError: If the resolved base URL is empty.
        """
        url = base_url or os.getenv(ENV_BASE_URL) or DEFAULT_BASE_URL
        url = url.strip().rstrip("/")
        if not url:
            raise ValueError(
                "Base URL missing. Define BRAIN_BASE_URL in environment or pass base_url value"
            )

        key = api_key or os.getenv(ENV_API_KEY) or None
        return ClientSettings(base_url=url, api_key=key)
