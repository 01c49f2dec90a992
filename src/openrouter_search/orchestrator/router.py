"""Transport selection, made once at startup."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Tuple

from openrouter_search.utils.config import Mode, Settings

Transport = Literal["mcp", "web"]

# Env vars whose presence means we are running on a hosting platform
PLATFORM_MARKERS = ("RENDER", "HEROKU_APP_NAME", "DYNO")
PRODUCTION_ENV_VARS = ("NODE_ENV", "APP_ENV")


@dataclass(frozen=True)
class ModeSignals:
    configured_mode: Mode = "auto"
    port_assigned: bool = False
    platform_markers: Tuple[str, ...] = ()

    @property
    def is_deployment(self) -> bool:
        return self.port_assigned or bool(self.platform_markers)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str], settings: Settings, port_override: bool = False) -> "ModeSignals":
        markers = [name for name in PLATFORM_MARKERS if environ.get(name)]
        markers += [
            name for name in PRODUCTION_ENV_VARS
            if environ.get(name, "").strip().lower() == "production"
        ]
        return cls(
            configured_mode=settings.mode,
            port_assigned=port_override or bool(environ.get("PORT")),
            platform_markers=tuple(markers),
        )


def select_mode(signals: ModeSignals) -> Transport:
    """Explicit mode wins; ``auto`` picks the web server on deployment platforms."""
    if signals.configured_mode == "mcp":
        return "mcp"
    if signals.configured_mode == "web":
        return "web"
    return "web" if signals.is_deployment else "mcp"
