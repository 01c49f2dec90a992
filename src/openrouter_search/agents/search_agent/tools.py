from __future__ import annotations

from typing import Any, Optional, Protocol

from openrouter_search.clients.openrouter_client import OpenRouterClient
from openrouter_search.utils.config import Settings
from openrouter_search.utils.errors import ValidationError
from openrouter_search.utils.logger import get_logger

from .models import SearchRequest, SearchResult
from .validation import Invalid, validate_search_args


class CompletionClient(Protocol):
    async def complete(self, model: str, query: str) -> str: ...


class SearchTools:
    """Core search operation shared by the MCP and HTTP transports.

    Every search goes through here, so validation, model resolution and
    upstream error semantics are identical whichever transport received it.
    """

    def __init__(self, settings: Settings, client: Optional[CompletionClient] = None):
        self.settings = settings
        self.logger = get_logger("search_tools")
        self.client = client or OpenRouterClient.from_settings(settings)

    def resolve_model(self, request: SearchRequest) -> str:
        return request.model or self.settings.default_model

    async def search(self, request: SearchRequest) -> SearchResult:
        """Run one upstream completion. Raises UpstreamError on failure."""
        model = self.resolve_model(request)
        self.logger.info(f"Searching with model: {model}")
        text = await self.client.complete(model, request.query)
        self.logger.debug(f"Upstream returned {len(text)} characters")
        return SearchResult(text=text)

    async def run(self, raw: Any) -> SearchResult:
        """Validate an untrusted payload, then search. Raises ValidationError first."""
        outcome = validate_search_args(raw)
        if isinstance(outcome, Invalid):
            raise ValidationError(outcome.reason)
        return await self.search(outcome.request)
