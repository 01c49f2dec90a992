"""MCP Search Agent server.

Exposes :class:`SearchTools` as a single ``web_search`` tool over stdio.
Failures are answered with JSON-RPC error objects (method not found, invalid
params, internal error) rather than tool results flagged as errors.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from openrouter_search.utils.config import Settings, load_settings
from openrouter_search.utils.errors import UnknownOperationError, UpstreamError, ValidationError
from openrouter_search.utils.logger import get_logger

from .tools import SearchTools

SERVER_NAME = "openrouter-search"
SERVER_VERSION = "0.1.0"
TOOL_NAME = "web_search"


class ConnectionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    CLOSED = "closed"


def _error(code: int, message: str) -> McpError:
    return McpError(types.ErrorData(code=code, message=message))


class SearchMCPServer:
    def __init__(self, settings: Settings | None = None, tools: SearchTools | None = None):
        self.settings = settings or load_settings()
        self.tools = tools or SearchTools(self.settings)
        self.logger = get_logger("search_mcp")
        self.state = ConnectionState.UNINITIALIZED
        self.server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

        @self.server.list_tools()
        async def _list_tools() -> list[types.Tool]:
            return self.list_tools()

        # Registered directly so McpError reaches the client as a JSON-RPC error
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool
        self.server.notification_handlers[types.InitializedNotification] = self._handle_initialized

    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query",
                },
                "model": {
                    "type": "string",
                    "description": "OpenRouter model to use (optional)",
                    "default": self.settings.default_model,
                },
            },
            "required": ["query"],
        }

    def list_tools(self) -> list[types.Tool]:
        return [
            types.Tool(
                name=TOOL_NAME,
                description="Search the web using OpenRouter online models",
                inputSchema=self.input_schema(),
            )
        ]

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]]) -> types.CallToolResult:
        """Dispatch one tool invocation, mapping failures to MCP error codes."""
        if self.state is ConnectionState.CLOSED:
            raise _error(types.INTERNAL_ERROR, "Server is closed")
        try:
            if name != TOOL_NAME:
                raise UnknownOperationError(name)
            result = await self.tools.run(arguments)
        except UnknownOperationError as e:
            raise _error(types.METHOD_NOT_FOUND, str(e)) from e
        except ValidationError as e:
            raise _error(types.INVALID_PARAMS, str(e)) from e
        except UpstreamError as e:
            self.logger.error(f"[MCP Error] {e}")
            raise _error(types.INTERNAL_ERROR, str(e)) from e
        except Exception as e:
            self.logger.exception(f"[MCP Error] unexpected failure in {name}")
            raise _error(types.INTERNAL_ERROR, f"Internal error: {e}") from e

        return types.CallToolResult(content=[types.TextContent(**block) for block in result.as_content()])

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        result = await self.call_tool(req.params.name, req.params.arguments)
        return types.ServerResult(result)

    async def _handle_initialized(self, notification: types.InitializedNotification) -> None:
        # Handshake complete: the host has acknowledged our initialize response
        if self.state is ConnectionState.UNINITIALIZED:
            self.state = ConnectionState.CONNECTED
            self.logger.info("MCP client connected")

    def close(self) -> None:
        if self.state is not ConnectionState.CLOSED:
            self.logger.info("OpenRouter Search MCP server closed")
        self.state = ConnectionState.CLOSED

    async def serve(self, read_stream, write_stream) -> None:
        """Serve MCP over an already-open stream pair until it ends or is cancelled."""
        try:
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
        finally:
            self.close()

    async def run(self) -> None:
        """Serve MCP over stdio until the host disconnects or the task is interrupted."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                self.logger.info("OpenRouter Search MCP server running on stdio")
                await self.serve(read_stream, write_stream)
        finally:
            self.close()
