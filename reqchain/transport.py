"""httpx-backed terminal handlers.

HttpxSender and AsyncHttpxSender are the innermost stage of a chain: they
send the request over the network and translate network failures into the
chain's exceptions.

- Cancellation and deadlines are read from the execution context before
  sending
- The effective timeout is the tighter of the configured timeout and the
  context's remaining time
- httpx timeouts become RequestTimeoutError, other httpx request errors
  become TransportError
- 5xx responses raise ResponseStatusError unless disabled in SenderConfig
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx
from pydantic import BaseModel, ConfigDict, PositiveFloat

from reqchain.common.exceptions import (
    RequestTimeoutError,
    ResponseStatusError,
    TransportError,
)
from reqchain.context import Context

logger = logging.getLogger(__name__)


class SenderConfig(BaseModel):
    """Settings for the httpx senders.

    Attributes:
        timeout: Seconds to wait for the server, or None for no limit.
        follow_redirects: Whether httpx follows redirects.
        raise_for_server_error: Raise ResponseStatusError on 5xx responses.
    """

    model_config = ConfigDict(frozen=True)

    timeout: PositiveFloat | None = 30.0
    follow_redirects: bool = False
    raise_for_server_error: bool = True


def _effective_timeout(
    config: SenderConfig, ctx: Context | None
) -> float | None:
    remaining = ctx.remaining() if ctx is not None else None
    candidates = [t for t in (config.timeout, remaining) if t is not None]
    return min(candidates) if candidates else None


def _prepare(
    config: SenderConfig, ctx: Context | None, request: httpx.Request
) -> float | None:
    """Check the context and apply the timeout extension to ``request``."""
    url = str(request.url)
    if ctx is not None:
        ctx.raise_if_done(url)
    timeout = _effective_timeout(config, ctx)
    request.extensions["timeout"] = httpx.Timeout(timeout).as_dict()
    logger.debug(
        f"Sending {request.method} {url}",
        extra={"method": request.method, "url": url, "timeout": timeout},
    )
    return timeout


def _check_response(
    config: SenderConfig, request: httpx.Request, response: httpx.Response
) -> httpx.Response:
    url = str(request.url)
    logger.debug(
        f"Received {response.status_code} from {url}",
        extra={"status_code": response.status_code, "url": url},
    )
    if config.raise_for_server_error and response.status_code >= 500:
        raise ResponseStatusError(
            status_code=response.status_code, url=url, response=response
        )
    return response


class HttpxSender:
    """Terminal handler that sends requests with ``httpx.Client``.

    Example usage:
        with HttpxSender(config=SenderConfig(timeout=10)) as sender:
            handler = chain.compile(sender)
            response = handler.handle(Context.with_timeout(5), request)
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        config: SenderConfig | None = None,
    ) -> None:
        """Initialize the sender.

        Args:
            client: Client to send with. If None, a client is created and
                closed by close().
            config: Sender settings. Defaults to SenderConfig().
        """
        self.config = config or SenderConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client()

    def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response:
        """Send ``request`` and return the response.

        Raises:
            RequestCancelledError: If ctx was cancelled.
            DeadlineExceededError: If ctx's deadline has passed.
            RequestTimeoutError: If the request timed out.
            TransportError: On any other network failure.
            ResponseStatusError: On a 5xx response, if configured.
        """
        timeout = _prepare(self.config, ctx, request)
        try:
            response = self._client.send(
                request, follow_redirects=self.config.follow_redirects
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Request to {request.url} timed out: {e}")
            raise RequestTimeoutError(
                url=str(request.url), timeout_seconds=timeout
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"Request to {request.url} failed: {e}")
            raise TransportError(url=str(request.url), reason=str(e)) from e
        return _check_response(self.config, request, response)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxSender:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class AsyncHttpxSender:
    """Terminal handler that sends requests with ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: SenderConfig | None = None,
    ) -> None:
        self.config = config or SenderConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def handle(
        self, ctx: Context | None, request: httpx.Request
    ) -> httpx.Response:
        """Send ``request`` and return the response. See HttpxSender.handle()."""
        timeout = _prepare(self.config, ctx, request)
        try:
            response = await self._client.send(
                request, follow_redirects=self.config.follow_redirects
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Request to {request.url} timed out: {e}")
            raise RequestTimeoutError(
                url=str(request.url), timeout_seconds=timeout
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"Request to {request.url} failed: {e}")
            raise TransportError(url=str(request.url), reason=str(e)) from e
        return _check_response(self.config, request, response)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpxSender:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()
