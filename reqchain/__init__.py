"""Composable middleware chains for HTTP clients.

A Chain holds an ordered list of middleware and compiles it, together with
a terminal handler such as HttpxSender, into a single handler.
"""

from reqchain.chain import AsyncChain, Chain
from reqchain.common.exceptions import (
    ChainConfigurationError,
    DeadlineExceededError,
    ReqchainError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseStatusError,
    TransientException,
    TransportError,
)
from reqchain.common.handlers import (
    AsyncHandler,
    AsyncHandlerFunc,
    AsyncMiddleware,
    AsyncMiddlewareFunc,
    Handler,
    HandlerFunc,
    Middleware,
    MiddlewareFunc,
)
from reqchain.common.processors import (
    AsyncRequestProcessor,
    AsyncResponseProcessor,
    RequestProcessor,
    ResponseProcessor,
)
from reqchain.context import Context
from reqchain.transport import AsyncHttpxSender, HttpxSender, SenderConfig

__all__ = [
    "AsyncChain",
    "AsyncHandler",
    "AsyncHandlerFunc",
    "AsyncHttpxSender",
    "AsyncMiddleware",
    "AsyncMiddlewareFunc",
    "AsyncRequestProcessor",
    "AsyncResponseProcessor",
    "Chain",
    "ChainConfigurationError",
    "Context",
    "DeadlineExceededError",
    "Handler",
    "HandlerFunc",
    "HttpxSender",
    "Middleware",
    "MiddlewareFunc",
    "ReqchainError",
    "RequestCancelledError",
    "RequestProcessor",
    "RequestTimeoutError",
    "ResponseProcessor",
    "ResponseStatusError",
    "SenderConfig",
    "TransientException",
    "TransportError",
]
