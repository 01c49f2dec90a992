"""Async client for the OpenRouter chat completion endpoint.

One request per call, no retries. Failures surface immediately as
:class:`UpstreamError` carrying the upstream's own message when it sent one.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from openrouter_search.utils.config import Settings
from openrouter_search.utils.errors import UpstreamError
from openrouter_search.utils.logger import get_logger


class OpenRouterClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: Optional[float] = None,
        referer: Optional[str] = None,
        title: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("openrouter_client")
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if referer:
            self.headers["HTTP-Referer"] = referer
        if title:
            self.headers["X-Title"] = title

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "OpenRouterClient":
        return cls(
            api_key=settings.openrouter_api_key,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            referer=settings.http_referer,
            title=settings.app_title,
            transport=transport,
        )

    async def complete(self, model: str, query: str) -> str:
        """Send ``query`` as a single user message and return the first choice's text."""
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": query}],
        }
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        ) as client:
            try:
                resp = await client.post("/chat/completions", json=payload)
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                message = _error_message(_safe_json(e.response)) or str(e)
                self.logger.warning(f"OpenRouter returned HTTP {status} for model {model}: {message}")
                raise UpstreamError(message, status_code=status) from e
            except httpx.HTTPError as e:
                self.logger.warning(f"OpenRouter request failed: {e!r}")
                raise UpstreamError(str(e) or e.__class__.__name__) from e

        data = _safe_json(resp)
        if data is None:
            raise UpstreamError("Upstream returned a non-JSON response", status_code=resp.status_code)

        # Some providers report failures inside a 2xx body
        message = _error_message(data)
        if message and not data.get("choices"):
            raise UpstreamError(message, status_code=resp.status_code)

        return _first_choice_content(data)


def _safe_json(resp: httpx.Response) -> Optional[dict]:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _error_message(data: Optional[dict]) -> Optional[str]:
    if not data:
        return None
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, str) and error:
        return error
    return None


def _first_choice_content(data: dict) -> str:
    """Missing choices, message or content all collapse to an empty answer."""
    choices: Any = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""
