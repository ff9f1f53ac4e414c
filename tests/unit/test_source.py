"""Unit tests for adapting Claude Agent SDK messages to upstream events."""

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

from claude_code_stream import upstream
from claude_code_stream.source import adapt_sdk_stream, from_sdk_message
from claude_code_stream.types import DeltaKind

from conftest import collect


def _stream_event(event):
    return StreamEvent(uuid="evt-1", session_id="s1", event=event)


def _result(**overrides):
    fields = dict(
        subtype="success",
        duration_ms=1500,
        duration_api_ms=1200,
        is_error=False,
        num_turns=1,
        session_id="s1",
        total_cost_usd=0.02,
        usage={"input_tokens": 10, "output_tokens": 4},
        result="Done",
    )
    fields.update(overrides)
    return ResultMessage(**fields)


class TestFromSdkMessage:
    """Tests for from_sdk_message."""

    def test_text_delta(self):
        [event] = from_sdk_message(
            _stream_event(
                {"type": "content_block_delta", "index": 2, "delta": {"type": "text_delta", "text": "Hi"}}
            )
        )
        assert event == upstream.AssistantDeltaEvent(kind=DeltaKind.TEXT, text="Hi", index=2)

    def test_input_json_delta_is_structured(self):
        [event] = from_sdk_message(
            _stream_event(
                {
                    "type": "content_block_delta",
                    "index": 0,
                    "delta": {"type": "input_json_delta", "partial_json": '{"a":'},
                }
            )
        )
        assert event.kind == DeltaKind.STRUCTURED
        assert event.text == '{"a":'

    def test_other_stream_events_are_skipped(self):
        assert from_sdk_message(_stream_event({"type": "message_start"})) == []
        assert from_sdk_message(
            _stream_event({"type": "content_block_delta", "delta": {"type": "text_delta", "text": ""}})
        ) == []

    def test_assistant_snapshot(self):
        message = AssistantMessage(
            content=[
                TextBlock(text="Reading."),
                ToolUseBlock(id="t1", name="Read", input={"path": "a.txt"}),
            ],
            model="claude-sonnet-4-5",
        )
        [event] = from_sdk_message(message)
        assert isinstance(event, upstream.AssistantSnapshotEvent)
        assert event.text == "Reading."
        assert event.tool_uses == [upstream.ToolUseBlock(id="t1", name="Read", input={"path": "a.txt"})]

    def test_tool_result_blocks(self):
        message = UserMessage(
            content=[
                ToolResultBlock(tool_use_id="t1", content="file body", is_error=False),
                {"type": "tool_error", "tool_use_id": "t2", "error": "denied", "name": "Bash"},
            ]
        )
        result, error = from_sdk_message(message)
        assert result == upstream.ToolResultEvent(tool_use_id="t1", content="file body")
        assert error == upstream.ToolErrorEvent(tool_use_id="t2", error="denied", name="Bash")

    def test_user_text_message_is_skipped(self):
        assert from_sdk_message(UserMessage(content="hello")) == []

    def test_init_system_message(self):
        [event] = from_sdk_message(SystemMessage(subtype="init", data={"session_id": "s1"}))
        assert event == upstream.InitEvent(session_id="s1")

    def test_other_system_message_is_skipped(self):
        assert from_sdk_message(SystemMessage(subtype="compact_boundary", data={})) == []

    def test_result_message(self):
        [event] = from_sdk_message(_result())
        assert isinstance(event, upstream.TerminalEvent)
        assert event.subtype == "success"
        assert event.session_id == "s1"
        assert event.usage == {"input_tokens": 10, "output_tokens": 4}
        assert event.total_cost_usd == 0.02
        assert event.duration_ms == 1500
        assert not event.is_error

    def test_error_result_message(self):
        [event] = from_sdk_message(_result(subtype="error_during_execution", is_error=True, result="boom"))
        assert event.is_error
        assert event.result == "boom"

    def test_unknown_message_is_skipped(self):
        assert from_sdk_message(object()) == []


class TestAdaptSdkStream:
    """Tests for adapt_sdk_stream."""

    @pytest.mark.asyncio
    async def test_flattens_and_closes(self):
        closed = []

        async def messages():
            try:
                yield SystemMessage(subtype="init", data={"session_id": "s1"})
                yield AssistantMessage(content=[TextBlock(text="Hi")], model="claude-sonnet-4-5")
                yield _result()
            finally:
                closed.append(True)

        events = await collect(adapt_sdk_stream(messages()))
        assert [type(event).__name__ for event in events] == [
            "InitEvent",
            "AssistantSnapshotEvent",
            "TerminalEvent",
        ]
        assert closed == [True]
