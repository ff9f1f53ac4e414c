"""Streaming-input prompt with mid-stream message injection."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Optional, Union

from .config import INJECTION_QUEUE_SIZE

logger = logging.getLogger(__name__)

DeliveryCallback = Callable[[bool], Any]
MessageContent = Union[str, list[dict[str, Any]]]


def build_user_message(content: MessageContent, session_id: str = "") -> dict[str, Any]:
    """Build the SDK user-message envelope for streaming input."""
    if isinstance(content, str):
        content = [{"type": "text", "text": content}]
    return {
        "type": "user",
        "message": {"role": "user", "content": content},
        "parent_tool_use_id": None,
        "session_id": session_id,
    }


def _notify(on_result: Optional[DeliveryCallback], delivered: bool) -> None:
    if on_result is None:
        return
    try:
        on_result(delivered)
    except Exception as e:
        logger.warning(f"Injection delivery callback failed: {e}")


class MessageInjector:
    """Bounded channel from the caller into an open streaming-input session.

    ``inject`` queues a user message for the running session. Each queued
    message gets exactly one delivery callback: True once it is handed to
    the SDK, False if the injector was closed, the queue was full or the
    session ended first. Messages injected after the session ended are
    dropped, not kept for a later turn.
    """

    def __init__(self, session_id: str = "", maxsize: int = INJECTION_QUEUE_SIZE) -> None:
        self.session_id = session_id
        self._queue: asyncio.Queue[tuple[dict[str, Any], Optional[DeliveryCallback]]] = asyncio.Queue(maxsize)
        self._wakeup = asyncio.Event()
        self._session_ended = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def session_ended(self) -> bool:
        return self._session_ended.is_set()

    def inject(self, content: MessageContent, on_result: Optional[DeliveryCallback] = None) -> bool:
        """Queue a user message for the running session.

        Args:
            content: Message text or a list of content blocks.
            on_result: Called with True once delivered, False if dropped.

        Returns:
            Whether the message was queued.
        """
        if self._closed or self.session_ended:
            logger.debug("Dropping injected message: injector is closed")
            _notify(on_result, False)
            return False
        try:
            self._queue.put_nowait((build_user_message(content, self.session_id), on_result))
        except asyncio.QueueFull:
            logger.warning("Dropping injected message: injection queue is full")
            _notify(on_result, False)
            return False
        self._wakeup.set()
        return True

    def close(self) -> None:
        """Stop accepting messages; already queued messages are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._wakeup.set()

    def end_session(self) -> None:
        """Mark the session finished and reject everything still queued."""
        if self.session_ended:
            return
        self._closed = True
        self._session_ended.set()
        self._wakeup.set()
        self._reject_pending()

    def _reject_pending(self) -> None:
        while not self._queue.empty():
            _, on_result = self._queue.get_nowait()
            _notify(on_result, False)

    async def prompt_stream(
        self,
        prompt: MessageContent,
        on_stream_start: Optional[Callable[["MessageInjector"], Any]] = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Prompt iterable handed to the SDK when streaming input is on.

        Yields the initial user message, then injected messages as they
        arrive, and keeps the input open until the session ends.
        """
        yield build_user_message(prompt, self.session_id)
        if on_stream_start is not None:
            on_stream_start(self)

        in_flight: Optional[DeliveryCallback] = None
        try:
            while True:
                while not self._queue.empty() and not self.session_ended:
                    message, in_flight = self._queue.get_nowait()
                    yield message
                    _notify(in_flight, True)
                    in_flight = None
                if self._closed or self.session_ended:
                    break
                self._wakeup.clear()
                await self._wakeup.wait()
            await self._session_ended.wait()
        finally:
            if in_flight is not None:
                _notify(in_flight, False)
            self._reject_pending()
