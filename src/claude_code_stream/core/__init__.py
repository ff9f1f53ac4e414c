"""
This module contains the core types and events of the Claude Code stream translation engine.
"""

from .events import (
    PROVIDER_METADATA_KEY,
    BaseEvent,
    ErrorEvent,
    Event,
    EventType,
    FinishEvent,
    ResponseMetadataEvent,
    StreamStartEvent,
    TextDeltaEvent,
    TextEndEvent,
    TextStartEvent,
    ToolCallEvent,
    ToolErrorEvent,
    ToolInputDeltaEvent,
    ToolInputEndEvent,
    ToolInputStartEvent,
    ToolResultEvent,
)
from .types import (
    CallWarning,
    ConfiguredBaseModel,
    FinishReason,
    FinishSummary,
    InputTokens,
    OutputTokens,
    UnifiedFinishReason,
    Usage,
)

__all__ = [
    # Events
    "PROVIDER_METADATA_KEY",
    "BaseEvent",
    "ErrorEvent",
    "Event",
    "EventType",
    "FinishEvent",
    "ResponseMetadataEvent",
    "StreamStartEvent",
    "TextDeltaEvent",
    "TextEndEvent",
    "TextStartEvent",
    "ToolCallEvent",
    "ToolErrorEvent",
    "ToolInputDeltaEvent",
    "ToolInputEndEvent",
    "ToolInputStartEvent",
    "ToolResultEvent",
    # Types
    "CallWarning",
    "ConfiguredBaseModel",
    "FinishReason",
    "FinishSummary",
    "InputTokens",
    "OutputTokens",
    "UnifiedFinishReason",
    "Usage",
]
