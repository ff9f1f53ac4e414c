"""Streaming of schema-constrained (JSON) output."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..config import STRUCTURED_FALLBACK_WARNING
from ..core.events import BaseEvent
from ..core.types import CallWarning
from ..types import RequestStreamState
from .text_reconciler import TextReconciler

logger = logging.getLogger(__name__)


class StructuredOutputHandler:
    """Decides how structured output reaches the caller.

    Structured fragments stream live as text. At the end of the request the
    authoritative payload is emitted only when nothing was streamed, and
    buffered prose is surfaced with a warning when the schema was not honored.
    """

    def __init__(self, state: RequestStreamState, text: TextReconciler, enabled: bool) -> None:
        self._state = state
        self._text = text
        self.enabled = enabled

    def on_fragment(self, fragment: str, block_index: int = 0) -> list[BaseEvent]:
        """Stream one structured-output fragment.

        Args:
            fragment: Partial JSON text.
            block_index: Content-block index the fragment belongs to.

        Returns:
            Text events for the fragment; empty outside structured mode.
        """
        if not self.enabled:
            logger.debug(f"Ignoring structured fragment for block {block_index} outside JSON mode")
            return []
        if not fragment:
            return []
        self._text.accumulate(fragment)
        self._state.delta_channel_used = True
        self._state.structured_streamed = True
        return self._text.emit(fragment)

    def finish(self, structured_output: Any) -> tuple[list[BaseEvent], list[CallWarning]]:
        """Emit whatever structured output the caller has not seen yet.

        Args:
            structured_output: The authoritative payload from the terminal
                event, or None when there is none.

        Returns:
            The events to emit and any warnings raised along the way.
        """
        if self._state.structured_streamed:
            return self._text.close_segment(), []

        events = self._text.close_segment()
        if structured_output is not None:
            serialized = json.dumps(structured_output, separators=(",", ":"), ensure_ascii=False)
            events.extend(self._text.emit_complete(serialized))
            return events, []

        if self._state.full_text:
            logger.warning(
                f"Structured output requested but none returned; "
                f"falling back to {len(self._state.full_text)} characters of text"
            )
            events.extend(self._text.emit_complete(self._state.full_text))
            return events, [CallWarning(type="other", message=STRUCTURED_FALLBACK_WARNING)]

        return events, []
