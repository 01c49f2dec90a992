"""Shape checks for raw search arguments.

Both transports hand their untrusted payload to :func:`validate_search_args`
and branch on the tagged outcome instead of probing attributes later on.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from .models import SearchRequest


@dataclass(frozen=True)
class Valid:
    request: SearchRequest


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationOutcome = Union[Valid, Invalid]


def validate_search_args(raw: Any) -> ValidationOutcome:
    if not isinstance(raw, Mapping):
        return Invalid("Invalid input: arguments must be an object.")

    query = raw.get("query")
    if not isinstance(query, str):
        return Invalid("Invalid input: query parameter is missing or not a string.")

    # null is treated the same as an absent model
    model = raw.get("model")
    if model is not None and not isinstance(model, str):
        return Invalid("Invalid input: model parameter must be a string.")

    return Valid(SearchRequest(query=query, model=model))
