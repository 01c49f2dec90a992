import os
from dataclasses import dataclass
from typing import Literal, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import get_logger

Mode = Literal["auto", "mcp", "web"]

DEFAULT_MODEL = "openai/gpt-4o:online"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass(frozen=True)
class Settings:
    openrouter_api_key: str
    default_model: str = DEFAULT_MODEL
    host: str = "0.0.0.0"
    port: int = 3000
    mode: Mode = "auto"
    base_url: str = DEFAULT_BASE_URL
    request_timeout: Optional[float] = None
    max_body_bytes: int = 1024 * 1024
    http_referer: str = "https://openrouter-search-mcp.onrender.com"
    app_title: str = "MCP OpenRouter Search"


def _parse_number(env: Mapping[str, str], name: str, default: str, kind: type):
    raw = env.get(name, default).strip()
    try:
        value = kind(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build the process-wide settings once at startup.

    When ``environ`` is given it is used as-is and ``.env`` is not loaded.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    api_key = environ.get("OPENROUTER_API_KEY", "").strip()
    if not api_key:
        raise ConfigurationError("OPENROUTER_API_KEY environment variable is required")

    default_model = environ.get("DEFAULT_MODEL", "").strip() or DEFAULT_MODEL
    mode = environ.get("MODE", "auto").strip().lower() or "auto"
    if mode not in {"auto", "mcp", "web"}:
        get_logger("config").warning(f"Invalid MODE '{mode}', defaulting to auto")
        mode = "auto"

    port = _parse_number(environ, "PORT", "3000", int)
    max_body_bytes = _parse_number(environ, "MAX_BODY_BYTES", str(1024 * 1024), int)
    # Unset means no client-side timeout
    request_timeout = None
    if environ.get("REQUEST_TIMEOUT", "").strip():
        request_timeout = _parse_number(environ, "REQUEST_TIMEOUT", "0", float)

    return Settings(
        openrouter_api_key=api_key,
        default_model=default_model,
        host=environ.get("HOST", "0.0.0.0").strip() or "0.0.0.0",
        port=port,
        mode=mode,  # type: ignore
        base_url=(environ.get("OPENROUTER_BASE_URL", "").strip() or DEFAULT_BASE_URL).rstrip("/"),
        request_timeout=request_timeout,
        max_body_bytes=max_body_bytes,
        http_referer=environ.get("OPENROUTER_REFERER", Settings.http_referer),
        app_title=environ.get("OPENROUTER_TITLE", Settings.app_title),
    )
