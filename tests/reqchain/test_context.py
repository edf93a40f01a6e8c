"""Tests for the execution context."""

import time

import pytest

from reqchain.common.exceptions import (
    DeadlineExceededError,
    RequestCancelledError,
)
from reqchain.context import Context


class TestContext:
    def test_default_context_is_live(self) -> None:
        """A new context shall have no deadline and not be cancelled."""
        ctx = Context()

        assert ctx.deadline is None
        assert ctx.remaining() is None
        assert not ctx.cancelled
        assert not ctx.expired
        ctx.raise_if_done()

    def test_with_timeout_sets_deadline(self) -> None:
        ctx = Context.with_timeout(60)

        remaining = ctx.remaining()
        assert remaining is not None
        assert 0 < remaining <= 60

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ValueError):
            Context.with_timeout(-1)

    def test_expired_deadline_raises(self) -> None:
        """raise_if_done() shall raise DeadlineExceededError past the deadline."""
        ctx = Context(deadline=time.monotonic() - 1)

        assert ctx.expired
        assert ctx.remaining() == 0.0
        with pytest.raises(DeadlineExceededError) as exc_info:
            ctx.raise_if_done("https://example.test/")
        assert exc_info.value.url == "https://example.test/"

    def test_cancel_raises(self) -> None:
        """raise_if_done() shall raise RequestCancelledError once cancelled."""
        ctx = Context()

        ctx.cancel()

        assert ctx.cancelled
        with pytest.raises(RequestCancelledError):
            ctx.raise_if_done()

    def test_with_value_shares_cancellation(self) -> None:
        """A derived context shall carry new values and share cancellation."""
        ctx = Context(values={"tenant": "a"})

        derived = ctx.with_value("trace_id", "123")
        ctx.cancel()

        assert derived.value("trace_id") == "123"
        assert derived.value("tenant") == "a"
        assert ctx.value("trace_id") is None
        assert ctx.value("missing", "default") == "default"
        assert derived.cancelled

    def test_values_are_read_only(self) -> None:
        ctx = Context(values={"tenant": "a"})

        with pytest.raises(TypeError):
            ctx.values["tenant"] = "b"  # type: ignore[index]
