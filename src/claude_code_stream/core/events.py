"""
This module contains the downstream event types produced by the stream translation engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field

from .types import CallWarning, ConfiguredBaseModel, FinishReason, FinishSummary

PROVIDER_METADATA_KEY = "claude-code"


class EventType(str, Enum):
    """
    The type of event.
    """
    STREAM_START = "stream-start"
    TEXT_START = "text-start"
    TEXT_DELTA = "text-delta"
    TEXT_END = "text-end"
    TOOL_INPUT_START = "tool-input-start"
    TOOL_INPUT_DELTA = "tool-input-delta"
    TOOL_INPUT_END = "tool-input-end"
    TOOL_CALL = "tool-call"
    TOOL_RESULT = "tool-result"
    TOOL_ERROR = "tool-error"
    FINISH = "finish"
    ERROR = "error"
    RESPONSE_METADATA = "response-metadata"


class BaseEvent(ConfiguredBaseModel):
    """
    Base event for all downstream events.
    """
    type: EventType


class StreamStartEvent(BaseEvent):
    """
    First event of every streamed request.
    """
    type: Literal[EventType.STREAM_START] = EventType.STREAM_START  # pyright: ignore[reportIncompatibleVariableOverride]
    warnings: list[CallWarning] = Field(default_factory=list)


class ResponseMetadataEvent(BaseEvent):
    """
    Event carrying the upstream session identifier.
    """
    type: Literal[EventType.RESPONSE_METADATA] = EventType.RESPONSE_METADATA  # pyright: ignore[reportIncompatibleVariableOverride]
    id: str
    timestamp: int
    model_id: str


class TextStartEvent(BaseEvent):
    """
    Event indicating the start of a text segment.
    """
    type: Literal[EventType.TEXT_START] = EventType.TEXT_START  # pyright: ignore[reportIncompatibleVariableOverride]
    id: str


class TextDeltaEvent(BaseEvent):
    """
    Event containing a piece of text segment content.
    """
    type: Literal[EventType.TEXT_DELTA] = EventType.TEXT_DELTA  # pyright: ignore[reportIncompatibleVariableOverride]
    id: str
    delta: str = Field(min_length=1)


class TextEndEvent(BaseEvent):
    """
    Event indicating the end of a text segment.
    """
    type: Literal[EventType.TEXT_END] = EventType.TEXT_END  # pyright: ignore[reportIncompatibleVariableOverride]
    id: str


class ToolInputStartEvent(BaseEvent):
    """
    Event indicating the start of a tool invocation's input.
    """
    type: Literal[EventType.TOOL_INPUT_START] = EventType.TOOL_INPUT_START  # pyright: ignore[reportIncompatibleVariableOverride]
    id: str
    tool_name: str
    provider_executed: bool = True
    dynamic: bool = True


class ToolInputDeltaEvent(BaseEvent):
    """
    Event containing a piece of serialized tool input.
    """
    type: Literal[EventType.TOOL_INPUT_DELTA] = EventType.TOOL_INPUT_DELTA  # pyright: ignore[reportIncompatibleVariableOverride]
    id: str
    delta: str = Field(min_length=1)


class ToolInputEndEvent(BaseEvent):
    """
    Event indicating the end of a tool invocation's input.
    """
    type: Literal[EventType.TOOL_INPUT_END] = EventType.TOOL_INPUT_END  # pyright: ignore[reportIncompatibleVariableOverride]
    id: str


class ToolCallEvent(BaseEvent):
    """
    Event containing a complete tool call.
    """
    type: Literal[EventType.TOOL_CALL] = EventType.TOOL_CALL  # pyright: ignore[reportIncompatibleVariableOverride]
    tool_call_id: str
    tool_name: str
    input: str
    provider_executed: bool = True
    dynamic: bool = True
    provider_metadata: Optional[dict[str, Any]] = None


class ToolResultEvent(BaseEvent):
    """
    Event containing the result of a tool call.
    """
    type: Literal[EventType.TOOL_RESULT] = EventType.TOOL_RESULT  # pyright: ignore[reportIncompatibleVariableOverride]
    tool_call_id: str
    tool_name: str
    result: Any = None
    is_error: bool = False
    provider_executed: bool = True
    dynamic: bool = True
    provider_metadata: Optional[dict[str, Any]] = None


class ToolErrorEvent(BaseEvent):
    """
    Event containing the failure of a tool call.
    """
    type: Literal[EventType.TOOL_ERROR] = EventType.TOOL_ERROR  # pyright: ignore[reportIncompatibleVariableOverride]
    tool_call_id: str
    tool_name: str
    error: str
    provider_executed: bool = True
    dynamic: bool = True
    provider_metadata: Optional[dict[str, Any]] = None


class FinishEvent(BaseEvent):
    """
    Event indicating that the request finished.
    """
    type: Literal[EventType.FINISH] = EventType.FINISH  # pyright: ignore[reportIncompatibleVariableOverride]
    summary: FinishSummary

    @property
    def finish_reason(self) -> FinishReason:
        return self.summary.finish_reason


class ErrorEvent(BaseEvent):
    """
    Event indicating that the request failed.
    """
    type: Literal[EventType.ERROR] = EventType.ERROR  # pyright: ignore[reportIncompatibleVariableOverride]
    message: str
    code: Optional[str] = None
    error: Any = Field(default=None, exclude=True)


Event = Annotated[
    Union[
        StreamStartEvent,
        ResponseMetadataEvent,
        TextStartEvent,
        TextDeltaEvent,
        TextEndEvent,
        ToolInputStartEvent,
        ToolInputDeltaEvent,
        ToolInputEndEvent,
        ToolCallEvent,
        ToolResultEvent,
        ToolErrorEvent,
        FinishEvent,
        ErrorEvent,
    ],
    Field(discriminator="type")
]
