"""Unit tests for the tool lifecycle tracker."""

import pytest

from claude_code_stream.config import MAX_DELTA_CALC_SIZE, MAX_TOOL_INPUT_SIZE, UNKNOWN_TOOL_NAME
from claude_code_stream.core.events import EventType
from claude_code_stream.errors import OversizedInputError
from claude_code_stream.response.tool_call_handler import (
    ToolCallHandler,
    normalize_tool_result,
    serialize_tool_input,
)

from conftest import event_types


@pytest.fixture
def handler():
    return ToolCallHandler()


class TestSerializeToolInput:
    """Tests for serialize_tool_input."""

    def test_dict_is_compact_json(self):
        assert serialize_tool_input({"x": 1}) == '{"x":1}'

    def test_string_passes_through(self):
        assert serialize_tool_input("raw input") == "raw input"

    def test_none_is_empty(self):
        assert serialize_tool_input(None) == ""

    def test_unserializable_falls_back_to_str(self):
        value = object()
        assert serialize_tool_input({value}) == str({value})

    def test_oversized_input_is_rejected(self):
        with pytest.raises(OversizedInputError, match="exceeds maximum size"):
            serialize_tool_input("a" * (MAX_TOOL_INPUT_SIZE + 1))


class TestNormalizeToolResult:
    """Tests for normalize_tool_result."""

    def test_json_string_is_parsed(self):
        assert normalize_tool_result('{"ok": true}') == {"ok": True}

    def test_plain_string_passes_through(self):
        assert normalize_tool_result("ok") == "ok"

    def test_non_string_passes_through(self):
        payload = [{"type": "text", "text": "hi"}]
        assert normalize_tool_result(payload) is payload


class TestOnInvocation:
    """Tests for invocation tracking and input deltas."""

    def test_first_sighting_emits_start_and_full_delta(self, handler):
        events = handler.on_invocation("tool-1", "Read", {"x": 1})
        assert event_types(events) == ["tool-input-start", "tool-input-delta"]
        assert events[0].tool_name == "Read"
        assert events[1].delta == '{"x":1}'

    def test_repeated_identical_input_emits_nothing(self, handler):
        handler.on_invocation("tool-1", "Read", {"x": 1})
        assert handler.on_invocation("tool-1", "Read", {"x": 1}) == []

    def test_prefix_extension_emits_suffix_only(self, handler):
        handler.on_invocation("tool-1", "Write", '{"path":"a')
        events = handler.on_invocation("tool-1", "Write", '{"path":"abc"}')
        assert event_types(events) == ["tool-input-delta"]
        assert events[0].delta == 'bc"}'

    def test_non_prefix_update_emits_no_delta(self, handler):
        handler.on_invocation("tool-1", "Write", {"a": 1})
        events = handler.on_invocation("tool-1", "Write", {"b": 2})
        assert events == []
        assert handler.get_state("tool-1").last_serialized_input == '{"b":2}'

    def test_large_input_skips_delta_computation(self, handler):
        big = "a" * (MAX_DELTA_CALC_SIZE + 1)
        events = handler.on_invocation("tool-1", "Write", big)
        assert event_types(events) == ["tool-input-start"]
        assert handler.on_invocation("tool-1", "Write", big + "b") == []
        assert handler.get_state("tool-1").last_serialized_input == big + "b"

    def test_name_filled_in_later(self, handler):
        handler.on_invocation("tool-1", None, {})
        assert handler.get_state("tool-1").name == UNKNOWN_TOOL_NAME
        handler.on_invocation("tool-1", "Bash", {})
        assert handler.get_state("tool-1").name == "Bash"
        handler.on_invocation("tool-1", None, {})
        assert handler.get_state("tool-1").name == "Bash"

    def test_missing_id_is_generated(self, handler):
        events = handler.on_invocation(None, "Bash", {})
        assert events[0].id

    def test_oversized_input_creates_no_state(self, handler):
        with pytest.raises(OversizedInputError):
            handler.on_invocation("tool-1", "Write", "a" * (MAX_TOOL_INPUT_SIZE + 1))
        assert handler.get_state("tool-1") is None
        assert handler.finalize_all() == []


class TestResultsAndErrors:
    """Tests for results, errors and orphan recovery."""

    def test_result_after_invocation(self, handler):
        handler.on_invocation("tool-1", "Read", {"x": 1})
        events = handler.on_result("tool-1", None, "ok")
        assert event_types(events) == ["tool-input-end", "tool-call", "tool-result"]
        assert events[1].input == '{"x":1}'
        assert events[1].provider_metadata == {"claude-code": {"raw_input": '{"x":1}'}}
        assert events[2].tool_name == "Read"
        assert events[2].result == "ok"
        assert events[2].provider_metadata == {"claude-code": {"raw_result": "ok"}}

    def test_orphan_result_synthesizes_lifecycle(self, handler):
        events = handler.on_result("orphan", None, '{"n": 2}')
        assert event_types(events) == [
            "tool-input-start",
            "tool-input-end",
            "tool-call",
            "tool-result",
        ]
        assert events[0].tool_name == UNKNOWN_TOOL_NAME
        assert events[2].input == ""
        assert events[3].result == {"n": 2}

    def test_orphan_error_synthesizes_lifecycle(self, handler):
        events = handler.on_error("orphan", "Bash", {"reason": "denied"})
        assert event_types(events) == [
            "tool-input-start",
            "tool-input-end",
            "tool-call",
            "tool-error",
        ]
        assert events[3].error == '{"reason":"denied"}'
        assert events[3].provider_metadata == {"claude-code": {"raw_error": '{"reason":"denied"}'}}

    def test_call_emitted_once_for_multiple_results(self, handler):
        handler.on_invocation("tool-1", "Read", {})
        first = handler.on_result("tool-1", None, "part 1")
        second = handler.on_result("tool-1", None, "part 2")
        error = handler.on_error("tool-1", None, "boom")
        all_events = first + second + error
        assert event_types(all_events).count("tool-call") == 1
        assert event_types(second) == ["tool-result"]
        assert event_types(error) == ["tool-error"]

    def test_result_flags_error(self, handler):
        events = handler.on_result("tool-1", "Bash", "failed", is_error=True)
        assert events[-1].is_error is True

    def test_result_name_overrides_state(self, handler):
        handler.on_invocation("tool-1", None, {})
        events = handler.on_result("tool-1", "Grep", "ok")
        assert events[-1].tool_name == "Grep"

    def test_input_update_after_call_is_not_emitted(self, handler):
        handler.on_invocation("tool-1", "Write", '{"a"')
        handler.on_result("tool-1", None, "ok")
        assert handler.on_invocation("tool-1", "Write", '{"a":1}') == []


class TestFinalizeAll:
    """Tests for finalize_all."""

    def test_pending_calls_reach_tool_call(self, handler):
        handler.on_invocation("tool-1", "Read", {"a": 1})
        handler.on_invocation("tool-2", "Bash", {"cmd": "ls"})
        assert handler.has_pending_calls()
        events = handler.finalize_all()
        assert event_types(events) == ["tool-input-end", "tool-call", "tool-input-end", "tool-call"]
        assert not handler.has_pending_calls()

    def test_completed_calls_not_repeated(self, handler):
        handler.on_invocation("tool-1", "Read", {})
        handler.on_result("tool-1", None, "ok")
        assert handler.finalize_all() == []

    def test_state_is_cleared(self, handler):
        handler.on_invocation("tool-1", "Read", {})
        handler.finalize_all()
        assert handler.get_state("tool-1") is None
        assert handler.finalize_all() == []

    def test_flags_are_monotonic(self, handler):
        handler.on_invocation("tool-1", "Read", {})
        handler.on_result("tool-1", None, "ok")
        state = handler.get_state("tool-1")
        assert state.input_started and state.input_closed and state.call_emitted
        handler.on_invocation("tool-1", "Read", {"more": True})
        assert state.input_started and state.input_closed and state.call_emitted

    def test_event_type_values(self, handler):
        events = handler.on_invocation("tool-1", "Read", {})
        assert events[0].type == EventType.TOOL_INPUT_START
