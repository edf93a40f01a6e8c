"""Shared helpers for reqchain tests."""

import httpx

from reqchain.common.handlers import (
    AsyncHandler,
    AsyncHandlerFunc,
    Handler,
    HandlerFunc,
)
from reqchain.context import Context


class MissingFieldError(Exception):
    """Raised by request processors when a required header is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class RecordingMiddleware:
    """Middleware that appends ``<name>-pre`` and ``<name>-post`` to a log."""

    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log
        self.wrap_count = 0

    def wrap(self, next_handler: Handler) -> Handler:
        self.wrap_count += 1

        def handle(
            ctx: Context | None, request: httpx.Request
        ) -> httpx.Response | None:
            self.log.append(f"{self.name}-pre")
            try:
                return next_handler.handle(ctx, request)
            finally:
                self.log.append(f"{self.name}-post")

        return HandlerFunc(handle)


class AsyncRecordingMiddleware:
    """Async counterpart of RecordingMiddleware."""

    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log

    def wrap(self, next_handler: AsyncHandler) -> AsyncHandler:
        async def handle(
            ctx: Context | None, request: httpx.Request
        ) -> httpx.Response | None:
            self.log.append(f"{self.name}-pre")
            try:
                return await next_handler.handle(ctx, request)
            finally:
                self.log.append(f"{self.name}-post")

        return AsyncHandlerFunc(handle)


class EchoHandler:
    """Terminal handler returning the request body as the response body."""

    def __init__(self, log: list[str] | None = None, name: str = "Echo") -> None:
        self.log = log if log is not None else []
        self.name = name
        self.calls = 0
        self.last_ctx: Context | None = None
        self.last_request: httpx.Request | None = None

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response:
        self.calls += 1
        self.last_ctx = ctx
        self.last_request = request
        self.log.append(self.name)
        return httpx.Response(200, content=request.content, request=request)


class AsyncEchoHandler(EchoHandler):
    """Async terminal handler returning the request body."""

    async def handle(  # type: ignore[override]
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response:
        return EchoHandler.handle(self, ctx, request)


class FailingHandler:
    """Terminal handler that always raises ``error``."""

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    def handle(self, ctx: Context | None, request: httpx.Request) -> None:
        self.calls += 1
        raise self.error


class AsyncFailingHandler(FailingHandler):
    async def handle(  # type: ignore[override]
        self, ctx: Context | None, request: httpx.Request
    ) -> None:
        FailingHandler.handle(self, ctx, request)


def make_request(body: str = "", url: str = "https://example.test/") -> httpx.Request:
    return httpx.Request("POST", url, content=body.encode("utf-8"))
