"""Mapping of upstream completion data onto the unified finish summary."""

from __future__ import annotations

from typing import Any, Optional

from .core.types import FinishReason, InputTokens, OutputTokens, Usage


def map_finish_reason(subtype: Optional[str]) -> FinishReason:
    """Map an upstream result subtype to a unified finish reason."""
    if subtype == "success":
        return FinishReason(unified="stop", raw=subtype)
    if subtype == "error_max_turns":
        return FinishReason(unified="length", raw=subtype)
    if subtype == "error_during_execution":
        return FinishReason(unified="error", raw=subtype)
    if subtype is None:
        return FinishReason(unified="stop", raw=None)
    return FinishReason(unified="other", raw=subtype)


def convert_usage(usage: Optional[dict[str, Any]]) -> Usage:
    """Convert upstream usage counters.

    The input total includes cache reads and cache writes; ``no_cache``
    is the uncached input alone.
    """
    if not usage:
        return Usage()
    input_tokens = usage.get("input_tokens") or 0
    output_tokens = usage.get("output_tokens") or 0
    cache_write = usage.get("cache_creation_input_tokens") or 0
    cache_read = usage.get("cache_read_input_tokens") or 0
    return Usage(
        input_tokens=InputTokens(
            total=input_tokens + cache_write + cache_read,
            no_cache=input_tokens,
            cache_read=cache_read,
            cache_write=cache_write,
        ),
        output_tokens=OutputTokens(total=output_tokens),
        raw=usage,
    )
