from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SearchRequest:
    query: str
    model: Optional[str] = None


@dataclass(frozen=True)
class SearchResult:
    """Raw text answer from the upstream model. No structure is imposed on it."""

    text: str

    def as_content(self) -> List[Dict[str, Any]]:
        return [{"type": "text", "text": self.text}]

    def as_dict(self) -> Dict[str, Any]:
        """Result envelope shared by the HTTP and tool transports."""
        return {"content": self.as_content()}
