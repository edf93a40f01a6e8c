"""Example middleware implementations.

These middleware demonstrate the middleware pattern and can be used for
testing, debugging, and as templates for custom middleware.
"""

import logging
from dataclasses import dataclass

import httpx

from reqchain.common.handlers import Handler, HandlerFunc
from reqchain.context import Context

logger = logging.getLogger(__name__)


class LoggingMiddleware:
    """Example middleware that logs requests and responses.

    This middleware observes the exchange without modifying it. Failures are
    logged and re-raised unchanged. Useful for debugging and monitoring.
    """

    def __init__(self, prefix: str = "", level: int = logging.INFO) -> None:
        """Initialize the logging middleware.

        Args:
            prefix: Optional prefix for log messages.
            level: Logging level for request and response messages.
        """
        self.prefix = prefix
        self.level = level
        self.request_count = 0
        self.response_count = 0
        self.failure_count = 0

    def wrap(self, next_handler: Handler) -> Handler:
        return _LoggingHandler(self, next_handler)


@dataclass(frozen=True)
class _LoggingHandler:
    middleware: LoggingMiddleware
    next_handler: Handler

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        mw = self.middleware
        mw.request_count += 1
        logger.log(
            mw.level,
            f"{mw.prefix}Request #{mw.request_count}: "
            f"{request.method} {request.url}",
        )
        try:
            response = self.next_handler.handle(ctx, request)
        except Exception as e:
            mw.failure_count += 1
            logger.log(
                mw.level,
                f"{mw.prefix}Failure #{mw.failure_count}: "
                f"{type(e).__name__} from {request.url}",
            )
            raise
        mw.response_count += 1
        status = response.status_code if response is not None else None
        logger.log(
            mw.level,
            f"{mw.prefix}Response #{mw.response_count}: "
            f"{status} from {request.url}",
        )
        return response


class MockMiddleware:
    """Example middleware that returns mock responses.

    This middleware demonstrates short-circuiting by returning canned
    responses instead of calling the next handler. Useful for testing.
    """

    def __init__(self, mock_responses: dict[str, httpx.Response]) -> None:
        """Initialize the mock middleware.

        Args:
            mock_responses: Map of URLs to mock Response objects.
        """
        self.mock_responses = mock_responses
        self.mock_hits = 0
        self.mock_misses = 0

    def wrap(self, next_handler: Handler) -> Handler:
        return _MockHandler(self, next_handler)


@dataclass(frozen=True)
class _MockHandler:
    middleware: MockMiddleware
    next_handler: Handler

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response | None:
        url = str(request.url)
        mw = self.middleware
        if url in mw.mock_responses:
            mw.mock_hits += 1
            return mw.mock_responses[url]
        mw.mock_misses += 1
        return self.next_handler.handle(ctx, request)


class HeaderMiddleware:
    """Example middleware that adds headers to requests.

    Headers are set on the request in place before delegating, replacing any
    existing values for the same names.
    """

    def __init__(self, headers: dict[str, str]) -> None:
        self.headers = headers

    def wrap(self, next_handler: Handler) -> Handler:
        headers = self.headers

        def handle(
            ctx: Context | None, request: httpx.Request
        ) -> httpx.Response | None:
            request.headers.update(headers)
            return next_handler.handle(ctx, request)

        return HandlerFunc(handle)
