"""Unit tests for AbortController and AbortSignal."""

import asyncio

import pytest

from claude_code_stream.cancellation import AbortController
from claude_code_stream.errors import AbortError


@pytest.fixture
def controller():
    return AbortController()


class TestAbortSignal:
    """Tests for the read side of the controller."""

    def test_not_aborted_initially(self, controller):
        assert not controller.signal.aborted
        assert controller.signal.reason is None
        controller.signal.throw_if_aborted()

    def test_default_reason_is_abort_error(self, controller):
        controller.abort()
        assert isinstance(controller.signal.reason, AbortError)
        with pytest.raises(AbortError):
            controller.signal.throw_if_aborted()

    def test_first_reason_wins(self, controller):
        first = ValueError("first")
        controller.abort(first)
        controller.abort(ValueError("second"))
        assert controller.signal.reason is first

    @pytest.mark.asyncio
    async def test_wait_returns_reason(self, controller):
        reason = ValueError("user cancelled")
        asyncio.get_running_loop().call_later(0.01, controller.abort, reason)
        assert await controller.signal.wait() is reason

    @pytest.mark.asyncio
    async def test_wait_after_abort_returns_immediately(self, controller):
        controller.abort()
        assert isinstance(await controller.signal.wait(), AbortError)

    def test_listener_called_once(self, controller):
        seen = []
        controller.signal.add_listener(seen.append)
        controller.abort()
        controller.abort()
        assert len(seen) == 1
        assert isinstance(seen[0], AbortError)

    def test_listener_added_after_abort_runs_immediately(self, controller):
        reason = ValueError("late")
        controller.abort(reason)
        seen = []
        controller.signal.add_listener(seen.append)
        assert seen == [reason]

    def test_removed_listener_not_called(self, controller):
        seen = []
        controller.signal.add_listener(seen.append)
        controller.signal.remove_listener(seen.append)
        controller.abort()
        assert seen == []
