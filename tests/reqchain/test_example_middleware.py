"""Tests for the example middleware.

Key behaviors tested:
- LoggingMiddleware sees every request and response and logs them
- MockMiddleware short-circuits matching URLs
- Short-circuiting skips middleware nested inside the mock
- HeaderMiddleware adds headers before delegating
"""

import logging

import httpx
import pytest

from reqchain.chain import Chain
from reqchain.common.example_middleware import (
    HeaderMiddleware,
    LoggingMiddleware,
    MockMiddleware,
)
from tests.reqchain.utils import EchoHandler, FailingHandler, make_request


class TestLoggingMiddleware:
    def test_logging_middleware_counts_requests_and_responses(
        self, caplog: pytest.LogCaptureFixture, echo: EchoHandler
    ) -> None:
        """LoggingMiddleware shall log and count every exchange."""
        logger_mw = LoggingMiddleware(prefix="[TEST] ")
        handler = Chain(logger_mw).compile(echo)

        with caplog.at_level(logging.INFO):
            handler.handle(None, make_request(url="https://example.test/a"))
            handler.handle(None, make_request(url="https://example.test/b"))

        assert logger_mw.request_count == 2
        assert logger_mw.response_count == 2
        assert logger_mw.failure_count == 0
        messages = [record.getMessage() for record in caplog.records]
        assert "[TEST] Request #1: POST https://example.test/a" in messages
        assert "[TEST] Response #2: 200 from https://example.test/b" in messages

    def test_logging_middleware_reraises_failures(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Failures shall be logged and re-raised unchanged."""
        error = ConnectionError("down")
        logger_mw = LoggingMiddleware(level=logging.WARNING)
        handler = Chain(logger_mw).compile(FailingHandler(error))

        with caplog.at_level(logging.WARNING):
            with pytest.raises(ConnectionError) as exc_info:
                handler.handle(None, make_request())

        assert exc_info.value is error
        assert logger_mw.failure_count == 1
        assert logger_mw.response_count == 0
        assert any(
            "Failure #1: ConnectionError" in record.getMessage()
            for record in caplog.records
        )

    def test_multiple_logging_middleware_chain_correctly(
        self, echo: EchoHandler
    ) -> None:
        """Both loggers in a chain shall see the request and response."""
        first = LoggingMiddleware(prefix="[FIRST] ")
        second = LoggingMiddleware(prefix="[SECOND] ")

        Chain(first, second).compile(echo).handle(None, make_request())

        assert first.request_count == second.request_count == 1
        assert first.response_count == second.response_count == 1


class TestMockMiddleware:
    def test_mock_short_circuits_matching_url(self, echo: EchoHandler) -> None:
        """MockMiddleware shall return the canned response without calling next."""
        canned = httpx.Response(200, text="This is mock content")
        mock = MockMiddleware({"https://example.test/test": canned})

        response = Chain(mock).compile(echo).handle(
            None, make_request(url="https://example.test/test")
        )

        assert response is canned
        assert mock.mock_hits == 1
        assert mock.mock_misses == 0
        assert echo.calls == 0

    def test_mock_passes_through_other_urls(self, echo: EchoHandler) -> None:
        mock = MockMiddleware({"https://example.test/test": httpx.Response(200)})

        Chain(mock).compile(echo).handle(
            None, make_request(url="https://example.test/other")
        )

        assert mock.mock_misses == 1
        assert echo.calls == 1

    def test_short_circuit_skips_inner_logger(self, echo: EchoHandler) -> None:
        """Middleware after the mock shall not see short-circuited requests."""
        url = "https://example.test/cases"
        mock = MockMiddleware({url: httpx.Response(200, text="<h1>Mock</h1>")})
        logger_before = LoggingMiddleware(prefix="[BEFORE_MOCK] ")
        logger_after = LoggingMiddleware(prefix="[AFTER_MOCK] ")

        Chain(logger_before, mock, logger_after).compile(echo).handle(
            None, make_request(url=url)
        )

        assert logger_before.request_count == 1
        assert logger_before.response_count == 1
        assert logger_after.request_count == 0
        assert echo.calls == 0


class TestHeaderMiddleware:
    def test_headers_added_before_terminal(self, echo: EchoHandler) -> None:
        chain = Chain(HeaderMiddleware({"X-Api-Key": "secret", "Accept": "text/plain"}))

        chain.compile(echo).handle(None, make_request())

        assert echo.last_request is not None
        assert echo.last_request.headers["X-Api-Key"] == "secret"
        assert echo.last_request.headers["Accept"] == "text/plain"

    def test_child_chain_inherits_headers(self, echo: EchoHandler) -> None:
        """A child chain shall apply both the parent's and its own headers."""
        parent = Chain(HeaderMiddleware({"X-Client": "reqchain"}))
        child = parent.derive_child(HeaderMiddleware({"X-Scope": "api"}))

        child.compile(echo).handle(None, make_request())

        assert echo.last_request is not None
        assert echo.last_request.headers["X-Client"] == "reqchain"
        assert echo.last_request.headers["X-Scope"] == "api"
