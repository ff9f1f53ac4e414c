"""Pytest configuration and shared helpers for Claude Code stream tests."""

from typing import Any, AsyncIterator, Iterable

import pytest
from claude_agent_sdk import (
    AssistantMessage,
    ResultMessage,
    SystemMessage,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)
from claude_agent_sdk.types import StreamEvent

from claude_code_stream.core.events import BaseEvent


async def async_source(events: Iterable[Any]) -> AsyncIterator[Any]:
    """Yield the given events as an async upstream source."""
    for event in events:
        yield event


async def collect(events: AsyncIterator[BaseEvent]) -> list[BaseEvent]:
    return [event async for event in events]


def event_types(events: list[BaseEvent]) -> list[str]:
    return [event.type.value for event in events]


# SDK message factories

def init_message(session_id: str = "session-1") -> SystemMessage:
    return SystemMessage(subtype="init", data={"session_id": session_id})


def text_delta(text: str, index: int = 0) -> StreamEvent:
    return StreamEvent(
        uuid="evt",
        session_id="session-1",
        event={"type": "content_block_delta", "index": index, "delta": {"type": "text_delta", "text": text}},
    )


def json_delta(partial_json: str, index: int = 0) -> StreamEvent:
    return StreamEvent(
        uuid="evt",
        session_id="session-1",
        event={
            "type": "content_block_delta",
            "index": index,
            "delta": {"type": "input_json_delta", "partial_json": partial_json},
        },
    )


def assistant_text(text: str) -> AssistantMessage:
    return AssistantMessage(content=[TextBlock(text=text)], model="claude-sonnet-4-5")


def assistant_tool_use(text: str, tool_id: str, name: str, tool_input: dict) -> AssistantMessage:
    return AssistantMessage(
        content=[TextBlock(text=text), ToolUseBlock(id=tool_id, name=name, input=tool_input)],
        model="claude-sonnet-4-5",
    )


def tool_result(tool_id: str, content: Any) -> UserMessage:
    return UserMessage(content=[ToolResultBlock(tool_use_id=tool_id, content=content, is_error=False)])


def result_message(session_id: str = "session-1", **overrides: Any) -> ResultMessage:
    fields = dict(
        subtype="success",
        duration_ms=1000,
        duration_api_ms=800,
        is_error=False,
        num_turns=1,
        session_id=session_id,
        total_cost_usd=0.001,
        usage={"input_tokens": 12, "output_tokens": 3},
        result="",
    )
    fields.update(overrides)
    return ResultMessage(**fields)


class FakeQuery:
    """Stands in for ``claude_agent_sdk.query`` and records each call."""

    def __init__(self) -> None:
        self.script: list[Any] = []
        self.error: BaseException | None = None
        self.calls: list[dict[str, Any]] = []

    def __call__(self, *, prompt: Any, options: Any = None, **kwargs: Any) -> AsyncIterator[Any]:
        self.calls.append({"prompt": prompt, "options": options})
        return self._messages(options)

    async def _messages(self, options: Any) -> AsyncIterator[Any]:
        for message in self.script:
            yield message
        if self.error is not None:
            if options is not None and options.stderr is not None:
                options.stderr("fatal: cli crashed")
            raise self.error


@pytest.fixture
def fake_query(monkeypatch):
    """Replace the SDK query used by the model with a scripted fake."""
    fake = FakeQuery()
    monkeypatch.setattr("claude_code_stream.model.query", fake)
    return fake


@pytest.fixture
def long_text():
    """Buffered text above the truncation threshold."""
    return "x" * 600
