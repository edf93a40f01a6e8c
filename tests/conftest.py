"""Shared fixtures for reqchain tests."""

import httpx
import pytest

from tests.reqchain.utils import EchoHandler, make_request


@pytest.fixture
def call_log() -> list[str]:
    """Shared log that middleware and handlers append call markers to."""
    return []


@pytest.fixture
def echo(call_log: list[str]) -> EchoHandler:
    """Terminal handler echoing the request body, recording into call_log."""
    return EchoHandler(call_log)


@pytest.fixture
def request_x() -> httpx.Request:
    """A request whose body is ``x``."""
    return make_request("x")
