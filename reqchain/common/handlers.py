"""Handler and middleware protocols.

A Handler performs one request/response exchange. A Middleware decorates a
Handler, returning a new Handler that runs extra logic around the one it
wraps. Chains are built by folding middleware around a terminal handler.

Key behaviors:
- handle() returns a response on success and raises on failure
- wrap() receives the next stage and returns the stage that replaces it
- A middleware that never calls the next handler short-circuits the chain
- The execution context is forwarded unchanged to every stage
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from reqchain.common.exceptions import ChainConfigurationError
from reqchain.context import Context

HandlerCallable = Callable[[Context | None, httpx.Request], httpx.Response | None]
AsyncHandlerCallable = Callable[
    [Context | None, httpx.Request], Awaitable[httpx.Response | None]
]


@runtime_checkable
class Handler(Protocol):
    """Protocol for synchronous handlers.

    Implementations may be a terminal sender that talks to the network or a
    stage produced by a middleware's wrap().
    """

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        """Process a request.

        Args:
            ctx: Execution context, forwarded as-is.
            request: The request to process.

        Returns:
            The response. May be None when a handler has nothing to return.

        Raises:
            Exception: Any failure. Errors travel back through the chain as
                exceptions.
        """
        ...


@runtime_checkable
class AsyncHandler(Protocol):
    """Protocol for asynchronous handlers."""

    async def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        """Process a request. See Handler.handle()."""
        ...


class Middleware(Protocol):
    """Protocol for synchronous middleware."""

    def wrap(self, next_handler: Handler) -> Handler:
        """Decorate ``next_handler``.

        Args:
            next_handler: The next stage in the chain.

        Returns:
            A handler that, unless it deliberately short-circuits, calls
            next_handler.handle() with the context and a request.
        """
        ...


class AsyncMiddleware(Protocol):
    """Protocol for asynchronous middleware.

    wrap() itself is synchronous; only the handler it returns is async.
    """

    def wrap(self, next_handler: AsyncHandler) -> AsyncHandler:
        ...


MiddlewareCallable = Callable[[Handler], Handler | HandlerCallable | None]
AsyncMiddlewareCallable = Callable[
    [AsyncHandler], AsyncHandler | AsyncHandlerCallable | None
]


@dataclass(frozen=True)
class HandlerFunc:
    """Adapts a plain function to the Handler protocol."""

    func: HandlerCallable

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        return self.func(ctx, request)


@dataclass(frozen=True)
class AsyncHandlerFunc:
    """Adapts a coroutine function to the AsyncHandler protocol."""

    func: AsyncHandlerCallable

    async def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        return await self.func(ctx, request)


def as_handler(value: Any) -> Handler:
    """Coerce ``value`` to a Handler.

    Objects with a handle() method are returned unchanged; other callables
    are wrapped in HandlerFunc.

    Raises:
        ChainConfigurationError: If value is None, not handler-shaped, or
            asynchronous (a coroutine handle() or coroutine function).
    """
    if value is None:
        raise ChainConfigurationError("Handler is None")
    handle = getattr(value, "handle", None)
    if callable(handle):
        if inspect.iscoroutinefunction(handle):
            raise ChainConfigurationError(
                f"{type(value).__name__}.handle() is async; use AsyncChain"
            )
        return value
    if callable(value):
        if inspect.iscoroutinefunction(value):
            raise ChainConfigurationError(
                f"{getattr(value, '__name__', type(value).__name__)} is a "
                "coroutine function; use AsyncChain"
            )
        return HandlerFunc(value)
    raise ChainConfigurationError(
        f"Expected a handler or callable, got {type(value).__name__}"
    )


def as_async_handler(value: Any) -> AsyncHandler:
    """Coerce ``value`` to an AsyncHandler. See as_handler().

    A handle() method defined with a plain ``def`` is rejected. Bare
    callables are accepted as long as they return an awaitable.
    """
    if value is None:
        raise ChainConfigurationError("Handler is None")
    handle = getattr(value, "handle", None)
    if callable(handle):
        if inspect.ismethod(handle) and not inspect.iscoroutinefunction(handle):
            raise ChainConfigurationError(
                f"{type(value).__name__}.handle() is synchronous; use Chain"
            )
        return value
    if callable(value):
        return AsyncHandlerFunc(value)
    raise ChainConfigurationError(
        f"Expected an async handler or coroutine function, got {type(value).__name__}"
    )


@dataclass(frozen=True)
class MiddlewareFunc:
    """Adapts a plain function ``func(next_handler) -> handler`` to Middleware.

    The function may return a Handler or a plain function, which is wrapped
    in HandlerFunc. Returning None is reported when the chain is compiled.
    """

    func: MiddlewareCallable

    def wrap(self, next_handler: Handler) -> Handler:
        wrapped = self.func(next_handler)
        if wrapped is None:
            return None  # type: ignore[return-value]
        return as_handler(wrapped)


@dataclass(frozen=True)
class AsyncMiddlewareFunc:
    """Adapts a plain function ``func(next_handler) -> async handler``."""

    func: AsyncMiddlewareCallable

    def wrap(self, next_handler: AsyncHandler) -> AsyncHandler:
        wrapped = self.func(next_handler)
        if wrapped is None:
            return None  # type: ignore[return-value]
        return as_async_handler(wrapped)
