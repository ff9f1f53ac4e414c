"""Adapts Claude Agent SDK messages into upstream events."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterable, AsyncIterator

from claude_agent_sdk import (
    AssistantMessage,
    ResultMessage,
    SystemMessage,
    TextBlock as SdkTextBlock,
    ToolResultBlock as SdkToolResultBlock,
    ToolUseBlock as SdkToolUseBlock,
    UserMessage,
)
from claude_agent_sdk.types import StreamEvent

from . import upstream
from .types import DeltaKind

logger = logging.getLogger(__name__)


def _from_stream_event(message: StreamEvent) -> list[upstream.UpstreamEvent]:
    event_data = message.event or {}
    if event_data.get("type") != "content_block_delta":
        return []

    delta_data = event_data.get("delta", {}) or {}
    delta_type = delta_data.get("type", "")
    index = event_data.get("index", 0) or 0

    if delta_type == "text_delta":
        text_chunk = delta_data.get("text", "")
        if text_chunk:
            return [upstream.AssistantDeltaEvent(kind=DeltaKind.TEXT, text=text_chunk, index=index)]
    elif delta_type == "input_json_delta":
        partial_json = delta_data.get("partial_json", "")
        if partial_json:
            return [upstream.AssistantDeltaEvent(kind=DeltaKind.STRUCTURED, text=partial_json, index=index)]
    return []


def _from_assistant_message(message: AssistantMessage) -> list[upstream.UpstreamEvent]:
    content = getattr(message, "content", None)
    if not content:
        logger.warning("Unexpected assistant message structure: missing content")
        return []

    blocks: list[upstream.ContentBlock] = []
    for block in content:
        if isinstance(block, SdkTextBlock):
            blocks.append(upstream.TextBlock(text=block.text))
        elif isinstance(block, SdkToolUseBlock):
            blocks.append(upstream.ToolUseBlock(id=block.id, name=block.name, input=block.input))
    return [upstream.AssistantSnapshotEvent(blocks=blocks)]


def _from_user_message(message: UserMessage) -> list[upstream.UpstreamEvent]:
    content = getattr(message, "content", None)
    if not isinstance(content, list):
        return []

    events: list[upstream.UpstreamEvent] = []
    for block in content:
        if isinstance(block, SdkToolResultBlock):
            events.append(
                upstream.ToolResultEvent(
                    tool_use_id=block.tool_use_id,
                    content=block.content,
                    is_error=bool(block.is_error),
                )
            )
        elif isinstance(block, dict) and block.get("type") == "tool_result":
            events.append(
                upstream.ToolResultEvent(
                    tool_use_id=block.get("tool_use_id"),
                    content=block.get("content"),
                    name=block.get("name"),
                    is_error=bool(block.get("is_error")),
                )
            )
        elif isinstance(block, dict) and block.get("type") == "tool_error":
            events.append(
                upstream.ToolErrorEvent(
                    tool_use_id=block.get("tool_use_id"),
                    error=block.get("error"),
                    name=block.get("name"),
                )
            )
    return events


def from_sdk_message(message: Any) -> list[upstream.UpstreamEvent]:
    """Convert one SDK message into zero or more upstream events.

    Args:
        message: A message yielded by ``claude_agent_sdk.query``.

    Returns:
        The upstream events the message carries (may be empty).
    """
    if isinstance(message, StreamEvent):
        return _from_stream_event(message)

    if isinstance(message, AssistantMessage):
        return _from_assistant_message(message)

    if isinstance(message, UserMessage):
        return _from_user_message(message)

    if isinstance(message, SystemMessage):
        data = getattr(message, "data", {}) or {}
        if message.subtype == "init" and data.get("session_id"):
            return [upstream.InitEvent(session_id=data["session_id"])]
        logger.debug(f"Skipping system message with subtype: {message.subtype}")
        return []

    if isinstance(message, ResultMessage):
        return [
            upstream.TerminalEvent(
                subtype=message.subtype,
                session_id=message.session_id,
                structured_output=getattr(message, "structured_output", None),
                usage=message.usage,
                total_cost_usd=message.total_cost_usd,
                duration_ms=message.duration_ms,
                is_error=bool(message.is_error),
                result=message.result,
            )
        ]

    logger.warning(f"Skipping unrecognized SDK message: {type(message).__name__}")
    return []


async def adapt_sdk_stream(messages: AsyncIterable[Any]) -> AsyncIterator[upstream.UpstreamEvent]:
    """Yield upstream events for an SDK message stream, closing it when done."""
    message_count = 0
    try:
        async for message in messages:
            message_count += 1
            logger.debug(f"[Message #{message_count}]: {type(message).__name__}")
            for event in from_sdk_message(message):
                yield event
    finally:
        aclose = getattr(messages, "aclose", None)
        if aclose is not None:
            await aclose()
