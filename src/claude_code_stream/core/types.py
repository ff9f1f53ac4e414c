"""
This module contains the shared value types of the Claude Code stream translation engine.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConfiguredBaseModel(BaseModel):
    """
    A configurable base model.
    """
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


UnifiedFinishReason = Literal["stop", "length", "tool-calls", "error", "other"]


class CallWarning(ConfiguredBaseModel):
    """
    A non-fatal anomaly reported alongside a generation.
    """
    type: Literal["unsupported", "other"]
    feature: Optional[str] = None
    details: Optional[str] = None
    message: Optional[str] = None


class FinishReason(ConfiguredBaseModel):
    """
    Unified finish reason plus the raw upstream reason string.
    """
    unified: UnifiedFinishReason
    raw: Optional[str] = None


class InputTokens(ConfiguredBaseModel):
    """
    Input token breakdown.
    """
    total: int = 0
    no_cache: int = 0
    cache_read: int = 0
    cache_write: int = 0


class OutputTokens(ConfiguredBaseModel):
    """
    Output token breakdown.
    """
    total: int = 0


class Usage(ConfiguredBaseModel):
    """
    Token usage for a single request.
    """
    input_tokens: InputTokens = Field(default_factory=InputTokens)
    output_tokens: OutputTokens = Field(default_factory=OutputTokens)
    raw: Optional[dict[str, Any]] = None


class FinishSummary(ConfiguredBaseModel):
    """
    Everything the engine knows about a request once it has finished.
    """
    finish_reason: FinishReason
    usage: Usage = Field(default_factory=Usage)
    session_id: Optional[str] = None
    cost_usd: Optional[float] = None
    duration_ms: Optional[int] = None
    truncated: bool = False
    warnings: list[CallWarning] = Field(default_factory=list)
