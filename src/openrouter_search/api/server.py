from __future__ import annotations

import json
from datetime import datetime, timezone
from html import escape
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from openrouter_search.agents.search_agent.tools import SearchTools
from openrouter_search.utils.config import Settings
from openrouter_search.utils.errors import NotFoundError, UpstreamError, ValidationError
from openrouter_search.utils.logger import get_logger


logger = get_logger("api_server")

CORS_HEADERS = {
  "Access-Control-Allow-Origin": "*",
  "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
  "Access-Control-Allow-Headers": "Content-Type",
}


class TextContent(BaseModel):
  type: str = "text"
  text: str


class SearchResponse(BaseModel):
  content: list[TextContent]


class HealthResponse(BaseModel):
  status: str
  timestamp: str


def _error(status_code: int, message: str) -> JSONResponse:
  return JSONResponse(status_code=status_code, content={"error": message}, headers=CORS_HEADERS)


async def read_body(request: Request, limit: int) -> bytes:
  """Buffer the whole request body, refusing anything over ``limit`` bytes."""
  chunks: list[bytes] = []
  size = 0
  async for chunk in request.stream():
    size += len(chunk)
    if size > limit:
      raise ValidationError(f"Request body exceeds {limit} bytes")
    chunks.append(chunk)
  return b"".join(chunks)


def parse_json_body(body: bytes) -> Any:
  try:
    return json.loads(body.decode("utf-8"))
  except (UnicodeDecodeError, ValueError) as e:
    raise ValidationError(f"Invalid JSON body: {e}") from e


def render_docs_page(settings: Settings) -> str:
  default_model = escape(settings.default_model)
  return f"""<!DOCTYPE html>
<html>
<head>
  <title>OpenRouter Search MCP Server</title>
  <style>
    body {{ font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; padding: 20px; }}
    .endpoint {{ background: #f5f5f5; padding: 10px; margin: 10px 0; border-radius: 5px; }}
    code {{ background: #e0e0e0; padding: 2px 4px; border-radius: 3px; }}
  </style>
</head>
<body>
  <h1>OpenRouter Search MCP Server</h1>
  <p>This server is running and ready to accept requests.</p>

  <h2>Available Endpoints:</h2>

  <div class="endpoint">
    <h3>POST /search</h3>
    <p>Perform a web search using OpenRouter models</p>
    <p><strong>Body:</strong> <code>{{"query": "your search query", "model": "optional-model-name"}}</code></p>
  </div>

  <div class="endpoint">
    <h3>GET /health</h3>
    <p>Health check endpoint</p>
  </div>

  <h2>Usage as MCP Server:</h2>
  <p>To use this as an MCP server locally, run: <code>openrouter-search --mode mcp</code></p>

  <h2>Environment Variables:</h2>
  <ul>
    <li><code>OPENROUTER_API_KEY</code> - Required</li>
    <li><code>DEFAULT_MODEL</code> - Optional (current: {default_model})</li>
    <li><code>PORT</code> - Optional (default: 3000)</li>
    <li><code>MODE</code> - Optional: 'mcp', 'web', or 'auto' (default: auto)</li>
  </ul>
</body>
</html>
"""


def create_app(settings: Settings, tools: Optional[SearchTools] = None) -> FastAPI:
  app = FastAPI(
    title="OpenRouter Search",
    version="0.1.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
  )
  search_tools = tools or SearchTools(settings)
  docs_page = render_docs_page(settings)

  @app.middleware("http")
  async def cors(request: Request, call_next):
    # Pre-flight for any path
    if request.method == "OPTIONS":
      return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    for key, value in CORS_HEADERS.items():
      response.headers.setdefault(key, value)
    return response

  @app.exception_handler(StarletteHTTPException)
  async def http_exception(request: Request, exc: StarletteHTTPException):
    # Unknown paths and wrong methods on known paths are both "not found"
    if exc.status_code in (404, 405):
      return _error(404, str(NotFoundError()))
    return _error(exc.status_code, str(exc.detail))

  @app.get("/", response_class=HTMLResponse)
  def index():
    return HTMLResponse(content=docs_page, headers=CORS_HEADERS)

  @app.get("/health", response_model=HealthResponse)
  def health():
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return HealthResponse(status="ok", timestamp=now)

  @app.post("/search", response_model=SearchResponse)
  async def search(request: Request):
    try:
      payload = parse_json_body(await read_body(request, settings.max_body_bytes))
      result = await search_tools.run(payload)
    except ValidationError as e:
      return _error(400, str(e))
    except UpstreamError as e:
      logger.error(f"Search error (upstream status {e.status_code}): {e}")
      return _error(500, str(e))
    except Exception as e:
      logger.exception("Search error")
      return _error(500, str(e) or "Internal server error")
    return result.as_dict()

  return app
