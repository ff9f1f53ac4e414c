"""Cooperative cancellation for in-flight requests."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from .errors import AbortError


class AbortSignal:
    """Read side of an ``AbortController``."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._listeners: list[Callable[[BaseException], None]] = []
        self.reason: Optional[BaseException] = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> BaseException:
        """Wait until the signal fires and return the abort reason."""
        await self._event.wait()
        return self.reason

    def add_listener(self, callback: Callable[[BaseException], None]) -> None:
        """Call ``callback(reason)`` on abort, immediately if already aborted."""
        if self.aborted:
            callback(self.reason)
        else:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[BaseException], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def throw_if_aborted(self) -> None:
        if self.aborted:
            raise self.reason

    def _fire(self, reason: BaseException) -> None:
        if self.aborted:
            return
        self.reason = reason
        self._event.set()
        listeners, self._listeners = self._listeners, []
        for callback in listeners:
            callback(reason)


class AbortController:
    """Lets a caller abort a request it started.

    Example:
        ```python
        controller = AbortController()
        task = asyncio.create_task(consume(model.stream("hi", abort_signal=controller.signal)))
        controller.abort()
        ```
    """

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: Optional[BaseException] = None) -> None:
        self.signal._fire(reason if reason is not None else AbortError())
