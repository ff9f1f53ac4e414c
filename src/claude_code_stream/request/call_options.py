"""Per-call generation options."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import Field

from ..core.types import ConfiguredBaseModel


class ResponseFormat(ConfiguredBaseModel):
    """
    Requested response format. JSON output needs a schema to be honored.
    """
    type: Literal["text", "json"] = "text"
    json_schema: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    name: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_structured(self) -> bool:
        return self.type == "json" and bool(self.json_schema)


class CallOptions(ConfiguredBaseModel):
    """
    Options for a single generation call.

    Sampling parameters are accepted for interface compatibility; the
    Claude Code CLI ignores them and each one produces a warning.
    """
    response_format: Optional[ResponseFormat] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    stop_sequences: Optional[list[str]] = None
    seed: Optional[int] = None
    sdk_options: Optional[dict[str, Any]] = None
