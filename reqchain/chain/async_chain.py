"""Asynchronous chain implementation.

AsyncChain closely mirrors Chain. The differences:
1. Handlers are coroutines (``async def handle``)
2. Processor functions may be plain functions or coroutine functions
3. Its parent, if any, must also be an AsyncChain
"""

from __future__ import annotations

from reqchain.chain.base import BaseChain
from reqchain.common.exceptions import ChainConfigurationError
from reqchain.common.handlers import (
    AsyncHandler,
    AsyncHandlerCallable,
    AsyncMiddleware,
    AsyncMiddlewareCallable,
    AsyncMiddlewareFunc,
    as_async_handler,
)
from reqchain.common.processors import (
    AsyncRequestFunc,
    AsyncRequestProcessor,
    AsyncResponseFunc,
    AsyncResponseProcessor,
)


class AsyncChain(BaseChain[AsyncMiddleware]):
    """Ordered middleware around an asynchronous terminal handler.

    Example usage:
        chain = AsyncChain()
        chain.append_response_func(check_status)
        async with AsyncHttpxSender() as sender:
            response = await chain.compile(sender).handle(ctx, request)
    """

    def append_func(self, func: AsyncMiddlewareCallable) -> None:
        """Append ``func(next_handler) -> async handler`` as a middleware."""
        self.append(AsyncMiddlewareFunc(func))

    def append_request_func(self, func: AsyncRequestFunc) -> None:
        """Append ``func(request)`` as an AsyncRequestProcessor.

        func may be a plain function or a coroutine function.
        """
        self.append(AsyncRequestProcessor(func))

    def append_response_func(self, func: AsyncResponseFunc) -> None:
        """Append ``func(response, error)`` as an AsyncResponseProcessor."""
        self.append(AsyncResponseProcessor(func))

    def compile(
        self, terminal: AsyncHandler | AsyncHandlerCallable
    ) -> AsyncHandler:
        """Fold the effective middleware around ``terminal``.

        See Chain.compile(). Only the returned handler is async; folding
        happens immediately. A terminal whose handle() is a plain ``def``
        raises ChainConfigurationError.
        """
        if terminal is None:
            raise ChainConfigurationError(
                "Cannot compile a chain without a terminal handler"
            )
        handler = as_async_handler(terminal)
        for middleware in reversed(self.effective_middleware()):
            wrapped = middleware.wrap(handler)
            if wrapped is None:
                raise ChainConfigurationError(
                    f"{type(middleware).__name__}.wrap() returned None"
                )
            handler = as_async_handler(wrapped)
        return handler
