"""OpenRouter Search - process entrypoint.

Runs either the stdio MCP server or the HTTP server, chosen once at startup.
"""
from __future__ import annotations

import argparse
import dataclasses
import os
import signal
import sys
from typing import Optional, Sequence

import anyio
import uvicorn

from openrouter_search.agents.search_agent.server import SearchMCPServer
from openrouter_search.agents.search_agent.tools import SearchTools
from openrouter_search.api.server import create_app
from openrouter_search.orchestrator.router import ModeSignals, select_mode
from openrouter_search.utils.config import Settings, load_settings
from openrouter_search.utils.errors import ConfigurationError
from openrouter_search.utils.logger import get_logger


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Web search through OpenRouter online models, over MCP stdio or HTTP",
        epilog="Configuration comes from the environment (.env supported); flags override it.",
    )
    p.add_argument("--mode", choices=["auto", "mcp", "web"], default=None, help="Transport to run (default: MODE env or auto)")
    p.add_argument("--port", type=int, default=None, help="HTTP listen port (implies web mode under auto)")
    return p.parse_args(argv)


def run_mcp(settings: Settings, tools: SearchTools) -> None:
    logger = get_logger("main")
    server = SearchMCPServer(settings, tools)
    # SIGTERM stops the stdio server the same way Ctrl+C does
    signal.signal(signal.SIGTERM, signal.default_int_handler)
    try:
        anyio.run(server.run)
    except KeyboardInterrupt:
        logger.info("Received termination signal, shutting down")
    finally:
        server.close()


def run_web(settings: Settings, tools: SearchTools) -> None:
    logger = get_logger("main")
    app = create_app(settings, tools)
    logger.info(f"OpenRouter Search web server running on port {settings.port}")
    logger.info(f"Visit http://localhost:{settings.port} for documentation")
    # uvicorn closes the listener on SIGTERM and lets in-flight responses finish
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


def main(argv: Optional[Sequence[str]] = None) -> int:
    logger = get_logger("main")
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    overrides = {}
    if args.mode:
        overrides["mode"] = args.mode
    if args.port is not None:
        overrides["port"] = args.port
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    signals = ModeSignals.from_environ(os.environ, settings, port_override=args.port is not None)
    mode = select_mode(signals)
    logger.info(f"Starting in {mode} mode (configured: {settings.mode})")

    tools = SearchTools(settings)
    if mode == "web":
        run_web(settings, tools)
    else:
        run_mcp(settings, tools)
    return 0


if __name__ == "__main__":
    sys.exit(main())
