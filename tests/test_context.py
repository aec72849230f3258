"""Tests for the call context."""
import pytest

from ecomm.storer.context import CallContext
from ecomm.storer.errors import DeadlineExceeded, OperationCancelled


def test_background_context_never_expires():
    ctx = CallContext.background()

    assert ctx.remaining() is None
    assert not ctx.expired
    assert not ctx.cancelled
    ctx.raise_if_done("noop")


def test_cancel_raises_operation_cancelled():
    ctx = CallContext(timeout=60)
    ctx.cancel()

    with pytest.raises(OperationCancelled) as exc_info:
        ctx.raise_if_done("get product")

    assert not isinstance(exc_info.value, DeadlineExceeded)
    assert str(exc_info.value) == "get product: call was cancelled"


def test_zero_timeout_is_already_expired():
    ctx = CallContext(timeout=0)

    assert ctx.expired
    assert ctx.remaining() == 0.0
    with pytest.raises(DeadlineExceeded):
        ctx.raise_if_done("list orders")


def test_remaining_counts_down():
    ctx = CallContext(timeout=60)

    remaining = ctx.remaining()

    assert 0 < remaining <= 60
    assert not ctx.expired


def test_cancel_runs_callbacks_once():
    ctx = CallContext()
    calls = []
    ctx.add_cancel_callback(lambda: calls.append("abort"))

    ctx.cancel()
    ctx.cancel()

    assert calls == ["abort"]


def test_removed_callback_does_not_run():
    ctx = CallContext()
    calls = []

    def abort():
        calls.append("abort")

    ctx.add_cancel_callback(abort)
    ctx.remove_cancel_callback(abort)
    ctx.cancel()

    assert calls == []
    # Removing twice is harmless
    ctx.remove_cancel_callback(abort)


def test_callback_added_after_cancel_runs_immediately():
    ctx = CallContext()
    ctx.cancel()
    calls = []

    ctx.add_cancel_callback(lambda: calls.append("abort"))

    assert calls == ["abort"]
