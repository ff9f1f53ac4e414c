"""Translates upstream agent events to downstream generation events."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from .. import upstream
from ..config import STRUCTURED_RETRIES_MESSAGE, UPSTREAM_ERROR_FALLBACK_MESSAGE
from ..core.events import BaseEvent, FinishEvent, ResponseMetadataEvent
from ..core.types import CallWarning, FinishSummary
from ..errors import StructuredOutputError, UpstreamResultError
from ..finish_reason import convert_usage, map_finish_reason
from ..types import DeltaKind, RequestStreamState
from .structured_output import StructuredOutputHandler
from .text_reconciler import TextReconciler
from .tool_call_handler import ToolCallHandler
from .truncation import TruncationRecoverer

logger = logging.getLogger(__name__)


class EventTranslator:
    """Translates upstream events to downstream events for one request.

    Key patterns:
    - At most one open text segment; tool blocks close it first
    - Every tool id walks start -> input-end -> call exactly once
    - Nothing is translated after the terminal event
    """

    def __init__(
        self,
        model_id: str,
        json_mode: bool = False,
        streaming: bool = True,
        on_terminal: Optional[Callable[[], Any]] = None,
    ) -> None:
        """Initialize the translator.

        Args:
            model_id: Model id reported in response metadata.
            json_mode: Schema-constrained output was requested.
            streaming: Emit response metadata for the init event.
            on_terminal: Called once when the terminal event arrives or the
                request ends early.
        """
        self.model_id = model_id
        self.json_mode = json_mode
        self.streaming = streaming
        self.state = RequestStreamState()
        self.tools = ToolCallHandler()
        self.text = TextReconciler(self.state, buffer_text=json_mode)
        self.structured = StructuredOutputHandler(self.state, self.text, enabled=json_mode)
        self.truncation = TruncationRecoverer(self.state, self.text, self.tools)
        self.warnings: list[CallWarning] = []
        self.summary: Optional[FinishSummary] = None
        self.structured_output: Any = None
        self._on_terminal = on_terminal
        self._terminal_signalled = False

    @property
    def finished(self) -> bool:
        return self.state.finished

    def translate(self, event: upstream.UpstreamEvent) -> list[BaseEvent]:
        """Translate one upstream event.

        May return multiple events for a single upstream event.

        Args:
            event: The upstream event to translate.

        Returns:
            List of downstream events (may be empty).
        """
        if self.state.finished:
            logger.debug(f"Dropping {type(event).__name__} received after terminal event")
            return []

        if isinstance(event, upstream.InitEvent):
            return self._on_init(event)

        if isinstance(event, upstream.AssistantDeltaEvent):
            if event.kind == DeltaKind.STRUCTURED:
                return self.structured.on_fragment(event.text, event.index)
            return self.text.on_delta(event.text, event.index)

        if isinstance(event, upstream.AssistantSnapshotEvent):
            return self._on_snapshot(event)

        if isinstance(event, upstream.ToolResultEvent):
            return self.tools.on_result(event.tool_use_id, event.name, event.content, event.is_error)

        if isinstance(event, upstream.ToolErrorEvent):
            return self.tools.on_error(event.tool_use_id, event.name, event.error)

        if isinstance(event, upstream.TerminalEvent):
            return self._on_terminal_event(event)

        logger.warning(f"Skipping unrecognized upstream event: {type(event).__name__}")
        return []

    def _on_init(self, event: upstream.InitEvent) -> list[BaseEvent]:
        self.state.session_id = event.session_id
        logger.info(f"Stream session initialized: {event.session_id}")
        if not self.streaming:
            return []
        return [
            ResponseMetadataEvent(
                id=event.session_id,
                timestamp=int(time.time() * 1000),
                model_id=self.model_id,
            )
        ]

    def _on_snapshot(self, event: upstream.AssistantSnapshotEvent) -> list[BaseEvent]:
        events: list[BaseEvent] = []
        tool_uses = event.tool_uses
        if tool_uses:
            events.extend(self.text.close_segment())
        for block in tool_uses:
            events.extend(self.tools.on_invocation(block.id, block.name, block.input))
        events.extend(self.text.on_snapshot(event.text))
        return events

    def signal_terminal(self) -> None:
        """Fire the terminal callback exactly once."""
        if self._terminal_signalled:
            return
        self._terminal_signalled = True
        if self._on_terminal is not None:
            self._on_terminal()

    def _on_terminal_event(self, event: upstream.TerminalEvent) -> list[BaseEvent]:
        self.state.finished = True
        self.signal_terminal()
        if event.session_id:
            self.state.session_id = event.session_id

        if event.is_error:
            message = event.result if isinstance(event.result, str) and event.result else UPSTREAM_ERROR_FALLBACK_MESSAGE
            raise UpstreamResultError(message, exit_code=1)
        if event.subtype == "error_max_structured_output_retries":
            raise StructuredOutputError(STRUCTURED_RETRIES_MESSAGE)

        cost = f"${event.total_cost_usd:.4f}" if event.total_cost_usd is not None else "N/A"
        duration = f"{event.duration_ms}ms" if event.duration_ms is not None else "N/A"
        logger.info(f"Stream completed - Session: {self.state.session_id}, Cost: {cost}, Duration: {duration}")

        usage = convert_usage(event.usage)
        finish_reason = map_finish_reason(event.subtype)
        logger.debug(
            f"Token usage - Input: {usage.input_tokens.total}, Output: {usage.output_tokens.total}, "
            f"finish reason: {finish_reason.unified}"
        )

        if self.json_mode:
            events, warnings = self.structured.finish(event.structured_output)
            self.warnings.extend(warnings)
        else:
            events = self.text.close_segment()
        events.extend(self.tools.finalize_all())

        self.structured_output = event.structured_output
        self.summary = FinishSummary(
            finish_reason=finish_reason,
            usage=usage,
            session_id=self.state.session_id,
            cost_usd=event.total_cost_usd,
            duration_ms=event.duration_ms,
            warnings=list(self.warnings),
        )
        events.append(FinishEvent(summary=self.summary))
        return events

    def can_recover(self, error: BaseException) -> bool:
        return self.truncation.can_recover(error)

    def recover_truncation(self) -> list[BaseEvent]:
        """Finish the request as truncated using buffered content."""
        self.signal_terminal()
        events = self.truncation.recover(self.warnings)
        finish = events[-1]
        if isinstance(finish, FinishEvent):
            self.summary = finish.summary
        return events

    def finalize(self) -> list[BaseEvent]:
        """Close anything still open without emitting a finish.

        Used when the upstream ends without a terminal event and before an
        error event.
        """
        self.signal_terminal()
        events = self.text.close_segment()
        events.extend(self.tools.finalize_all())
        return events
