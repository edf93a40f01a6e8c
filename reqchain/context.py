"""Execution context passed through every stage of a chain.

The chain itself never constructs or inspects a Context. It is created by
the caller and handed, unchanged, to each middleware and finally to the
terminal handler, which may honour its cancellation flag and deadline.

Example:
    ctx = Context.with_timeout(5.0)
    handler = chain.compile(HttpxSender())
    response = handler.handle(ctx, httpx.Request("GET", url))
"""

from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from reqchain.common.exceptions import (
    DeadlineExceededError,
    RequestCancelledError,
)


@dataclass(frozen=True, eq=False)
class Context:
    """Cancellation and deadline carrier for a single invocation.

    Attributes:
        deadline: Absolute deadline on the time.monotonic() clock, or None
            for no deadline.
        values: Read-only mapping of request-scoped values.
    """

    deadline: float | None = None
    values: Mapping[str, Any] = field(default_factory=dict)
    _cancel_event: threading.Event = field(
        default_factory=threading.Event, repr=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def with_timeout(
        cls, seconds: float, values: Mapping[str, Any] | None = None
    ) -> Context:
        """Create a context whose deadline is ``seconds`` from now.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"timeout must be non-negative, got {seconds}")
        return cls(deadline=time.monotonic() + seconds, values=values or {})

    def cancel(self) -> None:
        """Mark this context (and every context derived from it) cancelled."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left until the deadline, floored at zero, or None."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def with_value(self, key: str, value: Any) -> Context:
        """Return a new context with ``key`` set.

        The new context shares this context's deadline and cancellation
        flag, so cancelling either cancels both.
        """
        return replace(self, values={**self.values, key: value})

    def raise_if_done(self, url: str = "") -> None:
        """Raise if the context is cancelled or its deadline has passed.

        Raises:
            RequestCancelledError: If cancel() was called.
            DeadlineExceededError: If the deadline has passed.
        """
        if self.cancelled:
            raise RequestCancelledError(url)
        if self.expired:
            raise DeadlineExceededError(url)
