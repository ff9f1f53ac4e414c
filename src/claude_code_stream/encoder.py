"""Server-Sent Events encoding of downstream events."""

from __future__ import annotations

from .core.events import BaseEvent


class EventEncoder:
    """
    Encodes downstream events as Server-Sent Events.
    """

    def __init__(self, accept: str | None = None):
        self.accept = accept

    def get_content_type(self) -> str:
        return "text/event-stream"

    def encode(self, event: BaseEvent) -> str:
        return f"data: {event.model_dump_json(by_alias=True, exclude_none=True)}\n\n"
