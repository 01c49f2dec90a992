"""Error taxonomy shared by both transports."""
from __future__ import annotations

from typing import Optional


class OpenRouterSearchError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(OpenRouterSearchError, RuntimeError):
    """Startup configuration is missing or malformed. Fatal."""


class ValidationError(OpenRouterSearchError):
    """Search arguments do not have the required shape."""


class UpstreamError(OpenRouterSearchError):
    """The completion endpoint failed or reported an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return f"OpenRouter API error: {self.message}"


class UnknownOperationError(OpenRouterSearchError):
    """A tool call named a tool this server does not expose."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class NotFoundError(OpenRouterSearchError):
    """No HTTP route matches the request."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message)
