"""Tracks the lifecycle of every tool invocation seen during one request."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from ..config import (
    MAX_DELTA_CALC_SIZE,
    MAX_TOOL_INPUT_SIZE,
    MAX_TOOL_INPUT_WARN,
    UNKNOWN_TOOL_NAME,
)
from ..core.events import (
    PROVIDER_METADATA_KEY,
    BaseEvent,
    ToolCallEvent,
    ToolErrorEvent,
    ToolInputDeltaEvent,
    ToolInputEndEvent,
    ToolInputStartEvent,
    ToolResultEvent,
)
from ..errors import OversizedInputError
from ..types import ToolInvocationState

logger = logging.getLogger(__name__)


def _check_input_size(serialized: str) -> str:
    length = len(serialized)
    if length > MAX_TOOL_INPUT_SIZE:
        raise OversizedInputError(
            f"Tool input exceeds maximum size of {MAX_TOOL_INPUT_SIZE} bytes (got {length} bytes). "
            "This may indicate a malformed request or an attempt to process excessively large data."
        )
    if length > MAX_TOOL_INPUT_WARN:
        logger.warning(
            f"Large tool input detected: {length} bytes. Performance may be impacted."
        )
    return serialized


def serialize_tool_input(tool_input: Any) -> str:
    """Serialize tool input to the compact string form sent downstream.

    Strings pass through, None becomes an empty string and everything else
    is encoded as compact JSON, falling back to ``str()``.

    Raises:
        OversizedInputError: If the result exceeds ``MAX_TOOL_INPUT_SIZE``.
    """
    if isinstance(tool_input, str):
        return _check_input_size(tool_input)
    if tool_input is None:
        return ""
    try:
        serialized = json.dumps(tool_input, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        serialized = str(tool_input)
    return _check_input_size(serialized)


def stringify_payload(payload: Any) -> str:
    """Raw string form of a tool result or error payload."""
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return str(payload)


def normalize_tool_result(result: Any) -> Any:
    """Best-effort JSON decode of string results; other values pass through."""
    if isinstance(result, str):
        try:
            return json.loads(result)
        except ValueError:
            return result
    return result


class ToolCallHandler:
    """Maps tool usage onto ``start -> input-delta* -> input-end -> call -> result|error``.

    One handler belongs to one request. Every method returns the events it
    produced, in order.
    """

    def __init__(self) -> None:
        """Initialize the handler with empty state."""
        self._states: dict[str, ToolInvocationState] = {}

    def on_invocation(self, call_id: Optional[str], name: Optional[str], tool_input: Any) -> list[BaseEvent]:
        """Record a (possibly repeated) sighting of a tool invocation.

        Args:
            call_id: Invocation id; a fresh id is generated when missing.
            name: Tool name; ``unknown-tool`` when missing.
            tool_input: Current input of the invocation.

        Returns:
            tool-input-start on first sighting, then a tool-input-delta when
            the serialized input grew.

        Raises:
            OversizedInputError: If the serialized input exceeds the ceiling.
        """
        call_id = call_id or str(uuid.uuid4())
        serialized = serialize_tool_input(tool_input)

        events: list[BaseEvent] = []
        state = self._states.get(call_id)
        if state is None:
            state = ToolInvocationState(name=name or UNKNOWN_TOOL_NAME)
            self._states[call_id] = state
            logger.debug(f"New tool use detected - Tool: {state.name}, ID: {call_id}")
        elif name:
            state.name = name

        if not state.input_started:
            events.append(ToolInputStartEvent(id=call_id, tool_name=state.name))
            state.input_started = True

        if serialized:
            delta = self._input_delta(state.last_serialized_input, serialized)
            if delta and not state.input_closed:
                events.append(ToolInputDeltaEvent(id=call_id, delta=delta))
            elif delta:
                logger.debug(f"Dropping input update for closed tool input {call_id}")
            state.last_serialized_input = serialized

        return events

    @staticmethod
    def _input_delta(previous: Optional[str], current: str) -> str:
        if previous is None:
            return current if len(current) <= MAX_DELTA_CALC_SIZE else ""
        if (
            len(current) <= MAX_DELTA_CALC_SIZE
            and len(previous) <= MAX_DELTA_CALC_SIZE
            and current.startswith(previous)
        ):
            return current[len(previous):]
        return ""

    def on_result(
        self,
        call_id: Optional[str],
        name: Optional[str],
        payload: Any,
        is_error: bool = False,
    ) -> list[BaseEvent]:
        """Record a tool result, synthesizing the invocation if it was never seen.

        Args:
            call_id: Id of the invocation the result belongs to.
            name: Tool name if the result carries one.
            payload: Result content as delivered upstream.
            is_error: Whether the tool reported failure.

        Returns:
            Any synthesized lifecycle events, the tool-call (once), then tool-result.
        """
        call_id, state, events = self._resolve(call_id, name, "result")
        raw_result = stringify_payload(payload)
        events.extend(self.emit_call(call_id))
        events.append(
            ToolResultEvent(
                tool_call_id=call_id,
                tool_name=state.name,
                result=normalize_tool_result(payload),
                is_error=is_error,
                provider_metadata={PROVIDER_METADATA_KEY: {"raw_result": raw_result}},
            )
        )
        return events

    def on_error(self, call_id: Optional[str], name: Optional[str], payload: Any) -> list[BaseEvent]:
        """Record a tool error, synthesizing the invocation if it was never seen.

        Returns:
            Any synthesized lifecycle events, the tool-call (once), then tool-error.
        """
        call_id, state, events = self._resolve(call_id, name, "error")
        raw_error = stringify_payload(payload)
        events.extend(self.emit_call(call_id))
        events.append(
            ToolErrorEvent(
                tool_call_id=call_id,
                tool_name=state.name,
                error=raw_error,
                provider_metadata={PROVIDER_METADATA_KEY: {"raw_error": raw_error}},
            )
        )
        return events

    def _resolve(
        self, call_id: Optional[str], name: Optional[str], kind: str
    ) -> tuple[str, ToolInvocationState, list[BaseEvent]]:
        call_id = call_id or str(uuid.uuid4())
        events: list[BaseEvent] = []
        state = self._states.get(call_id)
        tool_name = name or (state.name if state else None) or UNKNOWN_TOOL_NAME
        logger.debug(f"Tool {kind} received - Tool: {tool_name}, ID: {call_id}")

        if state is None:
            logger.warning(f"Received tool {kind} for unknown tool ID: {call_id}")
            state = ToolInvocationState(name=tool_name)
            self._states[call_id] = state
            events.append(ToolInputStartEvent(id=call_id, tool_name=tool_name))
            state.input_started = True
            events.append(ToolInputEndEvent(id=call_id))
            state.input_closed = True

        state.name = tool_name
        return call_id, state, events

    def close_input(self, call_id: str) -> list[BaseEvent]:
        state = self._states.get(call_id)
        if state is None or state.input_closed or not state.input_started:
            return []
        state.input_closed = True
        return [ToolInputEndEvent(id=call_id)]

    def emit_call(self, call_id: str) -> list[BaseEvent]:
        """Emit tool-call for an id exactly once, closing its input first."""
        state = self._states.get(call_id)
        if state is None or state.call_emitted:
            return []
        events = self.close_input(call_id)
        raw_input = state.last_serialized_input or ""
        events.append(
            ToolCallEvent(
                tool_call_id=call_id,
                tool_name=state.name,
                input=raw_input,
                provider_metadata={PROVIDER_METADATA_KEY: {"raw_input": raw_input}},
            )
        )
        state.call_emitted = True
        return events

    def finalize_all(self) -> list[BaseEvent]:
        """Bring every tracked invocation to at least tool-call and forget them."""
        events: list[BaseEvent] = []
        for call_id in list(self._states):
            events.extend(self.emit_call(call_id))
        self._states.clear()
        return events

    def get_state(self, call_id: str) -> Optional[ToolInvocationState]:
        return self._states.get(call_id)

    def has_pending_calls(self) -> bool:
        """Check if any tracked invocation has not reached tool-call yet.

        Returns:
            True if there are pending calls, False otherwise.
        """
        return any(not state.call_emitted for state in self._states.values())
