"""Request and response processors.

Processors are restricted middleware shapes for the two most common cases:

- RequestProcessor: inspect or mutate the request before it is sent, and
  optionally reject it. A rejection skips every inner stage, including the
  terminal handler.
- ResponseProcessor: observe the outcome of everything downstream (a
  response or an exception) and optionally replace the error.

Processor functions report errors by returning an exception instance;
raising one has the same effect.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from reqchain.common.exceptions import ReqchainError
from reqchain.common.handlers import AsyncHandler, Handler
from reqchain.context import Context

RequestFunc = Callable[[httpx.Request], BaseException | None]
ResponseFunc = Callable[
    [httpx.Response | None, BaseException | None], BaseException | None
]
AsyncRequestFunc = Callable[
    [httpx.Request], BaseException | None | Awaitable[BaseException | None]
]
AsyncResponseFunc = Callable[
    [httpx.Response | None, BaseException | None],
    BaseException | None | Awaitable[BaseException | None],
]


def _finish(
    response: httpx.Response | None,
    error: Exception | None,
    replacement: BaseException | None,
) -> httpx.Response | None:
    """Reproduce the downstream outcome, or raise the replacement error.

    A ReqchainError replacement without a response is raised as a copy
    carrying the downstream response. The processor's own instance is never
    modified, so a module-level error reused across calls stays clean.
    """
    if replacement is not None:
        if (
            isinstance(replacement, ReqchainError)
            and replacement.response is None
            and response is not None
        ):
            replacement = replacement.with_response(response)
        if replacement is error:
            raise replacement
        raise replacement from error
    if error is not None:
        raise error
    return response


@dataclass(frozen=True)
class _RequestProcessorHandler:
    func: RequestFunc
    next_handler: Handler

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        error = self.func(request)
        if error is not None:
            raise error
        return self.next_handler.handle(ctx, request)


@dataclass(frozen=True)
class RequestProcessor:
    """Middleware that runs ``func(request)`` before delegating.

    If func returns an exception it is raised and the next handler is never
    called. Otherwise the next handler receives the (possibly mutated)
    request and its result is returned unmodified.

    Example:
        def require_auth(request: httpx.Request) -> Exception | None:
            if "Authorization" not in request.headers:
                return MissingFieldError("Authorization")
            return None

        chain.append(RequestProcessor(require_auth))
    """

    func: RequestFunc

    def wrap(self, next_handler: Handler) -> Handler:
        return _RequestProcessorHandler(self.func, next_handler)


@dataclass(frozen=True)
class _ResponseProcessorHandler:
    func: ResponseFunc
    next_handler: Handler

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        response: httpx.Response | None = None
        error: Exception | None = None
        try:
            response = self.next_handler.handle(ctx, request)
        except Exception as e:
            error = e
        replacement: BaseException | None
        try:
            replacement = self.func(response, error)
        except Exception as e:
            replacement = e
        return _finish(response, error, replacement)


@dataclass(frozen=True)
class ResponseProcessor:
    """Middleware that runs ``func(response, error)`` after delegating.

    The next handler is always called. func then sees its response (None on
    failure) and the exception it raised (None on success).

    - func returns None: the original response is returned, or the original
      exception re-raised.
    - func returns or raises an exception: it is raised in place of the
      original, chained from it. A ReqchainError without a response is
      raised as a copy that carries the downstream response.
    """

    func: ResponseFunc

    def wrap(self, next_handler: Handler) -> Handler:
        return _ResponseProcessorHandler(self.func, next_handler)


async def _maybe_await(
    result: BaseException | None | Awaitable[BaseException | None],
) -> BaseException | None:
    if inspect.isawaitable(result):
        return await result
    return result


@dataclass(frozen=True)
class _AsyncRequestProcessorHandler:
    func: AsyncRequestFunc
    next_handler: AsyncHandler

    async def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        error = await _maybe_await(self.func(request))
        if error is not None:
            raise error
        return await self.next_handler.handle(ctx, request)


@dataclass(frozen=True)
class AsyncRequestProcessor:
    """Async counterpart of RequestProcessor.

    func may be a plain function or a coroutine function.
    """

    func: AsyncRequestFunc

    def wrap(self, next_handler: AsyncHandler) -> AsyncHandler:
        return _AsyncRequestProcessorHandler(self.func, next_handler)


@dataclass(frozen=True)
class _AsyncResponseProcessorHandler:
    func: AsyncResponseFunc
    next_handler: AsyncHandler

    async def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        response: httpx.Response | None = None
        error: Exception | None = None
        try:
            response = await self.next_handler.handle(ctx, request)
        except Exception as e:
            error = e
        replacement: BaseException | None
        try:
            replacement = await _maybe_await(self.func(response, error))
        except Exception as e:
            replacement = e
        return _finish(response, error, replacement)


@dataclass(frozen=True)
class AsyncResponseProcessor:
    """Async counterpart of ResponseProcessor.

    func may be a plain function or a coroutine function.
    """

    func: AsyncResponseFunc

    def wrap(self, next_handler: AsyncHandler) -> AsyncHandler:
        return _AsyncResponseProcessorHandler(self.func, next_handler)
