"""Drives an ``EventTranslator`` from an asynchronous upstream source."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterable, AsyncIterator, Callable, Optional

from ..cancellation import AbortSignal
from ..core.events import BaseEvent, ErrorEvent, StreamStartEvent
from ..core.types import CallWarning
from ..errors import is_abort_error
from ..upstream import UpstreamEvent
from .event_translator import EventTranslator

logger = logging.getLogger(__name__)


async def _close(iterator: AsyncIterator[Any]) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()


async def _pump(iterator: AsyncIterator[Any], queue: asyncio.Queue) -> None:
    """Feed upstream events into ``queue``.

    The upstream iterator is advanced and closed from this one task only;
    the SDK keeps task-bound state open across iterations.
    """
    try:
        while True:
            try:
                event = await iterator.__anext__()
            except StopAsyncIteration:
                return
            await queue.put(event)
    finally:
        await _close(iterator)


async def _next_event(queue: asyncio.Queue, pump: asyncio.Future, abort_signal: AbortSignal) -> Any:
    """Wait for the next upstream event or the abort signal, whichever comes first.

    Raises:
        StopAsyncIteration: The upstream is exhausted.
    """
    abort_signal.throw_if_aborted()

    get_task = asyncio.ensure_future(queue.get())
    abort_task = asyncio.ensure_future(abort_signal.wait())
    try:
        await asyncio.wait({get_task, abort_task, pump}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        abort_task.cancel()
        if not get_task.done():
            get_task.cancel()

    if get_task.done() and not get_task.cancelled():
        return get_task.result()
    abort_signal.throw_if_aborted()
    if not queue.empty():
        return queue.get_nowait()
    # Re-raises the upstream failure, if any
    pump.result()
    raise StopAsyncIteration


async def _stop(pump: asyncio.Future, iterator: AsyncIterator[Any]) -> None:
    if not pump.done():
        pump.cancel()
    await asyncio.gather(pump, return_exceptions=True)
    # No-op unless the pump was cancelled before it started
    await _close(iterator)


async def process_stream(
    source: AsyncIterable[UpstreamEvent],
    translator: EventTranslator,
    *,
    warnings: Optional[list[CallWarning]] = None,
    abort_signal: Optional[AbortSignal] = None,
    error_handler: Optional[Callable[[BaseException], BaseException]] = None,
) -> AsyncIterator[BaseEvent]:
    """Translate an upstream source into downstream events.

    Emits ``stream-start`` first and at most one ``finish`` or ``error``
    last. Truncation-shaped failures are recovered as a ``length`` finish.
    Cancellation and the caller's abort reason are raised unchanged.

    Args:
        source: Async iterable of upstream events.
        translator: Translator owning the request state.
        warnings: Warnings to report on ``stream-start``.
        abort_signal: Optional signal that aborts the request.
        error_handler: Maps hard failures onto the error carried by the
            ``error`` event.

    Yields:
        Downstream events, one at a time.
    """
    yield StreamStartEvent(warnings=list(warnings or []))

    iterator = source.__aiter__()
    queue: asyncio.Queue = asyncio.Queue(maxsize=1)
    pump: Optional[asyncio.Future] = None
    if abort_signal is not None:
        pump = asyncio.ensure_future(_pump(iterator, queue))
    try:
        while True:
            try:
                if pump is None:
                    event = await iterator.__anext__()
                else:
                    event = await _next_event(queue, pump, abort_signal)
            except StopAsyncIteration:
                break
            for out in translator.translate(event):
                yield out

        if not translator.finished:
            logger.warning("Upstream ended without a terminal event")
            for out in translator.finalize():
                yield out

    except asyncio.CancelledError:
        raise
    except Exception as e:
        if abort_signal is not None and abort_signal.aborted:
            translator.signal_terminal()
            if e is abort_signal.reason:
                raise
            raise abort_signal.reason
        if is_abort_error(e):
            translator.signal_terminal()
            raise
        if translator.summary is not None:
            logger.warning(f"Ignoring upstream failure after finish: {e}")
            return

        logger.debug(f"Error during stream: {e}")
        if translator.can_recover(e):
            for out in translator.recover_truncation():
                yield out
            return

        error = error_handler(e) if error_handler is not None else e
        for out in translator.finalize():
            yield out
        code = getattr(error, "code", None)
        logger.error(f"Stream failed: {error}")
        yield ErrorEvent(
            message=str(error) or type(error).__name__,
            code=code if isinstance(code, str) else None,
            error=error,
        )
    finally:
        if pump is None:
            await _close(iterator)
        else:
            await _stop(pump, iterator)
