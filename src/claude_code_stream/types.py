"""Per-request state types for the Claude Code stream translation engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class DeltaKind(str, Enum):
    """Sub-kind of an incremental assistant fragment."""

    TEXT = "text"
    STRUCTURED = "structured"


class StreamingInputMode(str, Enum):
    """When the prompt is sent as a streaming input channel."""

    ALWAYS = "always"
    AUTO = "auto"
    OFF = "off"


# ─────────────────────────────────────────────────────────────────────────────
# Tool State
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ToolInvocationState:
    """Lifecycle state of one tool invocation.

    The three flags only ever go from False to True, and
    ``call_emitted`` implies ``input_closed`` implies ``input_started``.

    Attributes:
        name: Tool name; a later event may fill in a name omitted earlier.
        last_serialized_input: Last serialized input seen for this id.
        input_started: tool-input-start has been emitted.
        input_closed: tool-input-end has been emitted.
        call_emitted: tool-call has been emitted.
    """

    name: str
    last_serialized_input: Optional[str] = None
    input_started: bool = False
    input_closed: bool = False
    call_emitted: bool = False


# ─────────────────────────────────────────────────────────────────────────────
# Request State
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class RequestStreamState:
    """Mutable state for a single in-flight request.

    Attributes:
        accumulated_text: Text that snapshots are diffed against; replaced by
            the latest snapshot once the incremental channel is in use.
        emitted_length: Characters of ``accumulated_text`` already emitted.
        full_text: Every piece of text emitted or buffered this request,
            across all assistant messages.
        delta_channel_used: The incremental channel produced text this request.
        structured_streamed: A structured-output fragment was streamed live.
        text_segment_id: Id of the open text segment, None when closed.
        session_id: Upstream session id, once known.
        finished: A terminal event has been processed.
    """

    accumulated_text: str = ""
    emitted_length: int = 0
    full_text: str = ""
    delta_channel_used: bool = False
    structured_streamed: bool = False
    text_segment_id: Optional[str] = None
    session_id: Optional[str] = None
    finished: bool = False
