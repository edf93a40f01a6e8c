"""Synchronous chain implementation.

Chain folds its effective middleware around a terminal Handler. With
effective middleware [M1, M2, ..., Mn] the compiled handler is

    M1.wrap(M2.wrap(... Mn.wrap(terminal) ...))

so M1 runs first on the way in and last on the way out.
"""

from __future__ import annotations

from reqchain.chain.base import BaseChain
from reqchain.common.exceptions import ChainConfigurationError
from reqchain.common.handlers import (
    Handler,
    HandlerCallable,
    Middleware,
    MiddlewareCallable,
    MiddlewareFunc,
    as_handler,
)
from reqchain.common.processors import (
    RequestFunc,
    RequestProcessor,
    ResponseFunc,
    ResponseProcessor,
)


class Chain(BaseChain[Middleware]):
    """Ordered middleware around a synchronous terminal handler.

    Example usage:
        chain = Chain(LoggingMiddleware())
        chain.append_request_func(require_auth)

        api_chain = chain.derive_child(HeaderMiddleware({"Accept": "application/json"}))
        with HttpxSender() as sender:
            response = api_chain.compile(sender).handle(ctx, request)
    """

    def append_func(self, func: MiddlewareCallable) -> None:
        """Append ``func(next_handler) -> handler`` as a middleware."""
        self.append(MiddlewareFunc(func))

    def append_request_func(self, func: RequestFunc) -> None:
        """Append ``func(request) -> exception | None`` as a RequestProcessor."""
        self.append(RequestProcessor(func))

    def append_response_func(self, func: ResponseFunc) -> None:
        """Append ``func(response, error) -> exception | None`` as a ResponseProcessor."""
        self.append(ResponseProcessor(func))

    def compile(self, terminal: Handler | HandlerCallable) -> Handler:
        """Fold the effective middleware around ``terminal``.

        Compilation does not modify the chain and nothing is cached; each
        call builds a fresh handler from the chain's current middleware.

        Args:
            terminal: The innermost handler, or a plain function with the
                handler signature.

        Returns:
            A handler running every middleware, outermost first, then
            terminal.

        Raises:
            ChainConfigurationError: If terminal is missing or asynchronous,
                or a middleware returns no handler from wrap().
        """
        if terminal is None:
            raise ChainConfigurationError(
                "Cannot compile a chain without a terminal handler"
            )
        handler = as_handler(terminal)
        for middleware in reversed(self.effective_middleware()):
            wrapped = middleware.wrap(handler)
            if wrapped is None:
                raise ChainConfigurationError(
                    f"{type(middleware).__name__}.wrap() returned None"
                )
            handler = as_handler(wrapped)
        return handler
