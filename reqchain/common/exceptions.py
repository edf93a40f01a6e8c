"""Exception hierarchy for request chains.

Two kinds of errors exist:

- Programming errors (ChainConfigurationError): a chain compiled without a
  terminal handler, a middleware that produced no handler, and similar
  misuse. These are raised immediately, never passed down the chain.
- Domain errors: anything raised by a terminal handler or a middleware.
  The chain forwards these untouched; the classes below are the ones the
  bundled transport raises.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    import httpx


ErrorT = TypeVar("ErrorT", bound="ReqchainError")


class ReqchainError(Exception):
    """Base class for all errors raised by reqchain.

    Attributes:
        response: The response associated with the failure, if one was
            received before the error was raised.
    """

    def __init__(
        self, message: str, response: httpx.Response | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.response = response

    def with_response(self: ErrorT, response: httpx.Response | None) -> ErrorT:
        """Return a copy of this error carrying ``response``.

        The copy is built without calling __init__, so subclasses with their
        own constructor signatures copy the same way. This instance is left
        untouched.
        """
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.args = self.args
        clone.response = response
        return clone


class ChainConfigurationError(ReqchainError, TypeError):
    """Raised when a chain is assembled or compiled incorrectly."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class TransientException(ReqchainError):
    """Base class for failures that may succeed if the request is retried.

    Attributes:
        url: The URL of the request that failed.
    """

    def __init__(
        self,
        message: str,
        url: str,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message, response=response)
        self.url = url


class RequestTimeoutError(TransientException):
    """Raised when the transport times out waiting for a response.

    Attributes:
        url: The URL that timed out.
        timeout_seconds: The timeout that was in effect.
    """

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        super().__init__(
            f"Request to {url} timed out after {timeout_seconds} seconds",
            url=url,
        )
        self.timeout_seconds = timeout_seconds


class TransportError(TransientException):
    """Raised when the transport fails for a reason other than a timeout."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Request to {url} failed: {reason}", url=url)
        self.reason = reason


class RequestCancelledError(ReqchainError):
    """Raised when the execution context was cancelled before sending."""

    def __init__(self, url: str, message: str | None = None) -> None:
        super().__init__(message or f"Request to {url} was cancelled")
        self.url = url


class DeadlineExceededError(RequestCancelledError):
    """Raised when the execution context's deadline passed before sending."""

    def __init__(self, url: str) -> None:
        super().__init__(
            url, message=f"Deadline exceeded before sending request to {url}"
        )


class ResponseStatusError(ReqchainError):
    """Raised when the server answers with an error status code.

    Attributes:
        status_code: The HTTP status code received.
        url: The URL that was requested.
        response: The full response.
    """

    def __init__(
        self, status_code: int, url: str, response: httpx.Response
    ) -> None:
        super().__init__(
            f"Server returned status {status_code} for {url}",
            response=response,
        )
        self.status_code = status_code
        self.url = url
