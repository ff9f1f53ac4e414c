"""Recovery for upstream streams that were cut off mid-payload."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import TRUNCATION_WARNING
from ..core.events import BaseEvent, FinishEvent
from ..core.types import CallWarning, FinishReason, FinishSummary, Usage
from ..errors import is_truncation_error
from ..types import RequestStreamState
from .text_reconciler import TextReconciler
from .tool_call_handler import ToolCallHandler

logger = logging.getLogger(__name__)


class TruncationRecoverer:
    """Turns a truncation-shaped failure into a warned ``length`` finish.

    Only failures that ``is_truncation_error`` accepts are recovered; every
    other failure must propagate.
    """

    def __init__(self, state: RequestStreamState, text: TextReconciler, tools: ToolCallHandler) -> None:
        self._state = state
        self._text = text
        self._tools = tools

    def can_recover(self, error: BaseException) -> bool:
        return is_truncation_error(error, self._state.full_text)

    def recover(self, warnings: Optional[list[CallWarning]] = None) -> list[BaseEvent]:
        """Close out the request using buffered content.

        Args:
            warnings: Warnings already collected for the request.

        Returns:
            Closing text events, finalized tool calls, and the finish event.
        """
        buffered = self._state.full_text
        logger.warning(
            f"Detected truncated stream response, returning {len(buffered)} characters of buffered text"
        )
        if self._state.text_segment_id is not None:
            events = self._text.close_segment()
        elif buffered:
            events = self._text.emit_complete(buffered)
        else:
            events = []
        events.extend(self._tools.finalize_all())
        self._state.finished = True

        summary = FinishSummary(
            finish_reason=FinishReason(unified="length", raw="truncation"),
            usage=Usage(),
            session_id=self._state.session_id,
            truncated=True,
            warnings=[*(warnings or []), CallWarning(type="other", message=TRUNCATION_WARNING)],
        )
        events.append(FinishEvent(summary=summary))
        return events
