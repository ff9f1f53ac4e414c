"""Merges the incremental and snapshot text channels into one delta stream."""

from __future__ import annotations

import logging
import uuid

from ..config import MAX_ACCUMULATED_TEXT_SIZE
from ..core.events import BaseEvent, TextDeltaEvent, TextEndEvent, TextStartEvent
from ..errors import OversizedInputError
from ..types import RequestStreamState

logger = logging.getLogger(__name__)


class TextReconciler:
    """Turns upstream text deltas and snapshots into non-duplicated text events.

    Owns the open text segment of the request. While ``buffer_text`` is set
    (schema-constrained output), plain text is accumulated but not emitted.
    """

    def __init__(self, state: RequestStreamState, buffer_text: bool = False) -> None:
        self._state = state
        self._buffer_text = buffer_text

    # ── Segments ─────────────────────────────────────────────────────────

    def open_segment(self) -> list[BaseEvent]:
        if self._state.text_segment_id is not None:
            return []
        self._state.text_segment_id = str(uuid.uuid4())
        return [TextStartEvent(id=self._state.text_segment_id)]

    def close_segment(self) -> list[BaseEvent]:
        segment_id = self._state.text_segment_id
        if segment_id is None:
            return []
        self._state.text_segment_id = None
        return [TextEndEvent(id=segment_id)]

    def emit(self, text: str) -> list[BaseEvent]:
        """Emit text into the open segment, opening one if needed."""
        if not text:
            return []
        events = self.open_segment()
        events.append(TextDeltaEvent(id=self._state.text_segment_id, delta=text))
        return events

    @staticmethod
    def emit_complete(text: str) -> list[BaseEvent]:
        """Emit text as its own start/delta/end triplet."""
        segment_id = str(uuid.uuid4())
        return [
            TextStartEvent(id=segment_id),
            TextDeltaEvent(id=segment_id, delta=text),
            TextEndEvent(id=segment_id),
        ]

    # ── Channels ─────────────────────────────────────────────────────────

    @staticmethod
    def _check_size(text: str) -> str:
        if len(text) > MAX_ACCUMULATED_TEXT_SIZE:
            raise OversizedInputError(
                f"Accumulated response text exceeds maximum size of {MAX_ACCUMULATED_TEXT_SIZE} "
                f"characters (got {len(text)})"
            )
        return text

    def _set_accumulated(self, text: str) -> None:
        self._state.accumulated_text = self._check_size(text)

    def _record(self, text: str) -> None:
        self._state.full_text = self._check_size(self._state.full_text + text)

    def accumulate(self, text: str) -> None:
        """Append streamed text to the request buffers."""
        self._set_accumulated(self._state.accumulated_text + text)
        self._record(text)
        self._state.emitted_length += len(text)

    def on_delta(self, text: str, block_index: int = 0) -> list[BaseEvent]:
        """Handle one fragment from the incremental channel."""
        if not text:
            return []
        logger.debug(f"Text delta for block {block_index}: {len(text)} chars")
        self.accumulate(text)
        self._state.delta_channel_used = True
        if self._buffer_text:
            return []
        return self.emit(text)

    def on_snapshot(self, full_text: str) -> list[BaseEvent]:
        """Handle the cumulative text of an assistant snapshot.

        Once the incremental channel has fired only the part of the snapshot
        beyond what was already emitted goes out; otherwise the whole
        snapshot text is new.
        """
        if not full_text:
            return []
        if self._state.delta_channel_used:
            new_tail = full_text[self._state.emitted_length:]
            self._set_accumulated(full_text)
        else:
            new_tail = full_text
            self._set_accumulated(self._state.accumulated_text + full_text)
        self._record(new_tail)
        self._state.emitted_length = len(full_text)

        if self._buffer_text or not new_tail:
            return []
        return self.emit(new_tail)
