"""Upstream event model: the closed set of messages the agent runtime produces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .types import DeltaKind


# ─────────────────────────────────────────────────────────────────────────────
# Content Blocks
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TextBlock:
    """A text block inside an assistant snapshot."""

    text: str


@dataclass(frozen=True)
class ToolUseBlock:
    """A tool invocation block inside an assistant snapshot."""

    id: Optional[str]
    name: Optional[str]
    input: Any = None


ContentBlock = Union[TextBlock, ToolUseBlock]


# ─────────────────────────────────────────────────────────────────────────────
# Events
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InitEvent:
    """Session initialization."""

    session_id: str


@dataclass(frozen=True)
class AssistantDeltaEvent:
    """Incremental assistant fragment.

    Attributes:
        kind: Whether the fragment is plain text or structured output.
        text: The fragment itself.
        index: Zero-based content-block index.
    """

    kind: DeltaKind
    text: str
    index: int = 0


@dataclass(frozen=True)
class AssistantSnapshotEvent:
    """Cumulative list of content blocks produced so far in one assistant turn."""

    blocks: list[ContentBlock] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(block.text for block in self.blocks if isinstance(block, TextBlock))

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.blocks if isinstance(block, ToolUseBlock)]


@dataclass(frozen=True)
class ToolResultEvent:
    """A tool finished and returned content."""

    tool_use_id: Optional[str]
    content: Any = None
    name: Optional[str] = None
    is_error: bool = False


@dataclass(frozen=True)
class ToolErrorEvent:
    """A tool failed before producing a result."""

    tool_use_id: Optional[str]
    error: Any = None
    name: Optional[str] = None


@dataclass(frozen=True)
class TerminalEvent:
    """Completion of the request.

    Attributes:
        subtype: Upstream completion subtype, e.g. ``success`` or ``error_max_turns``.
        session_id: Upstream session id.
        structured_output: Authoritative structured payload, when one was requested.
        usage: Raw upstream usage counters.
        total_cost_usd: Cost reported by the upstream.
        duration_ms: Wall-clock duration reported by the upstream.
        is_error: Upstream flagged the request as failed.
        result: Upstream result text, used as the error message on failure.
    """

    subtype: Optional[str] = "success"
    session_id: Optional[str] = None
    structured_output: Any = None
    usage: Optional[dict[str, Any]] = None
    total_cost_usd: Optional[float] = None
    duration_ms: Optional[int] = None
    is_error: bool = False
    result: Optional[str] = None


UpstreamEvent = Union[
    InitEvent,
    AssistantDeltaEvent,
    AssistantSnapshotEvent,
    ToolResultEvent,
    ToolErrorEvent,
    TerminalEvent,
]
