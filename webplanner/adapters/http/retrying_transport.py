"""Retrying HTTP transport built on httpx.

One logical remote call = up to ``policy.max_attempts`` strictly
sequential attempts, each bounded by ``policy.timeout_ms``, separated by
capped exponential backoff. The worst-case latency of a call is
``policy.max_total_ms``.

Classification:
- 2xx/3xx: success, returned immediately
- 4xx, malformed URL, unsupported scheme, redirect loop: terminal, raised
  immediately
- >= 500, timeout, network error: retryable

Every call asks the request router whether it must go through the
proxy; proxied calls use a dedicated client per proxy URL.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
)

import httpx

from ...domain.errors import (
    CallCancelledError,
    RetryExhaustedError,
    ServerError,
    TerminalError,
)
from ...domain.models import CallAttempt, CallOutcome, RequestSpec, RetryPolicy

if TYPE_CHECKING:
    from ...services.request_router import RequestRouter


class _CancelSignalled(Exception):
    """The caller's cancel event fired while we were waiting."""


def classify_status(status_code: int) -> CallOutcome:
    """Classify an HTTP status code."""
    if status_code >= 500:
        return CallOutcome.RETRYABLE_FAILURE
    if 400 <= status_code < 500:
        return CallOutcome.TERMINAL_FAILURE
    return CallOutcome.SUCCESS


def provider_detail(response: httpx.Response) -> str:
    """Best-effort error detail from a provider response body."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "info", "detail"):
            if data.get(key):
                return str(data[key])
        if isinstance(error, str) and error:
            return error
    return response.reason_phrase


def _default_proxy_client(proxy_url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(proxy=proxy_url, timeout=None, follow_redirects=True)


@dataclass
class RetryingTransport:
    """Executes remote calls under a retry policy.

    This adapter implements TransportPort. Each execute() call is
    independent: attempts, timeouts and backoff are never shared between
    concurrent calls.

    Attributes:
        router: Decides proxy vs direct per URL
        client: Client for direct calls (created if not given)
        proxy_client_factory: Builds a client for a proxy URL
        sleep: Awaitable sleep used for backoff (injectable for tests)
        clock: Monotonic clock in seconds
    """

    router: RequestRouter
    client: Optional[httpx.AsyncClient] = None
    proxy_client_factory: Callable[[str], httpx.AsyncClient] = _default_proxy_client
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    clock: Callable[[], float] = time.monotonic

    _proxy_clients: Dict[str, httpx.AsyncClient] = field(
        default_factory=dict, repr=False
    )
    _owns_client: bool = field(default=False, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=None, follow_redirects=True)
            self._owns_client = True

    def _client_for(self, url: str) -> Tuple[httpx.AsyncClient, bool]:
        """Pick the client for a URL and report whether it is proxied."""
        if not self.router.should_use_proxy(url):
            assert self.client is not None
            return self.client, False

        proxy_url = self.router.get_proxy_config().url
        client = self._proxy_clients.get(proxy_url)
        if client is None:
            self._logger.debug("Creating proxy client", extra={"proxy": proxy_url})
            client = self.proxy_client_factory(proxy_url)
            self._proxy_clients[proxy_url] = client
        return client, True

    async def _send(
        self,
        client: httpx.AsyncClient,
        request: RequestSpec,
        policy: RetryPolicy,
    ) -> httpx.Response:
        timeout = policy.timeout_ms / 1000
        http_request = client.build_request(
            request.method,
            request.url,
            headers=dict(request.headers),
            params=dict(request.params) or None,
            json=request.json_body,
            content=request.content,
            timeout=timeout,
        )
        return await asyncio.wait_for(client.send(http_request), timeout=timeout)

    async def _race(
        self, awaitable: Awaitable[Any], cancel: Optional[asyncio.Event]
    ) -> Any:
        """Await ``awaitable`` unless ``cancel`` fires first."""
        if cancel is None:
            return await awaitable

        work = asyncio.ensure_future(awaitable)
        stop = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {work, stop}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            stop.cancel()
            if not work.done():
                work.cancel()

        if work in done:
            return work.result()
        raise _CancelSignalled()

    def _cancelled(
        self, request: RequestSpec, attempts: List[CallAttempt]
    ) -> CallCancelledError:
        self._logger.info(
            "Call cancelled",
            extra={"url": request.url, "attempts": len(attempts)},
        )
        return CallCancelledError(
            f"{request.method} {request.url} cancelled by caller",
            url=request.url,
            attempts_made=len(attempts),
        )

    def _request_failed(
        self,
        request: RequestSpec,
        attempts: List[CallAttempt],
        attempt: int,
        started: float,
        error: Exception,
        reason: str,
    ) -> TerminalError:
        attempts.append(
            CallAttempt(
                attempt,
                CallOutcome.TERMINAL_FAILURE,
                (self.clock() - started) * 1000,
                error=str(error),
            )
        )
        self._logger.error(
            reason,
            extra={"url": request.url, "error": f"{type(error).__name__}: {error}"},
        )
        return TerminalError(
            f"{reason}: {request.method} {request.url}",
            url=request.url,
            detail=str(error),
            cause=error,
        )

    async def execute(
        self,
        request: RequestSpec,
        policy: RetryPolicy,
        cancel: Optional[asyncio.Event] = None,
    ) -> httpx.Response:
        """Execute a request under a retry policy.

        Args:
            request: Fully formed request descriptor.
            policy: Retry policy of the caller's call class.
            cancel: Optional signal; once set, no further attempt starts
                and the in-flight attempt or backoff is abandoned.

        Returns:
            The first successful response.

        Raises:
            TerminalError: On a 4xx response or malformed request.
            RetryExhaustedError: When every attempt failed transiently.
            CallCancelledError: When ``cancel`` was set.
        """
        client, proxied = self._client_for(request.url)
        attempts: List[CallAttempt] = []
        last_error: Optional[Exception] = None

        for attempt in range(1, policy.max_attempts + 1):
            if cancel is not None and cancel.is_set():
                raise self._cancelled(request, attempts)

            started = self.clock()
            status_code: Optional[int] = None
            try:
                response = await self._race(
                    self._send(client, request, policy), cancel
                )
            except _CancelSignalled:
                attempts.append(
                    CallAttempt(
                        attempt,
                        CallOutcome.CANCELLED,
                        (self.clock() - started) * 1000,
                    )
                )
                raise self._cancelled(request, attempts) from None
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                last_error = e
                error_text = f"timeout after {policy.timeout_ms}ms"
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
                raise self._request_failed(
                    request, attempts, attempt, started, e, "Malformed request"
                )
            except httpx.TransportError as e:
                last_error = e
                error_text = f"{type(e).__name__}: {e}"
            except httpx.RequestError as e:
                # redirect loops and undecodable bodies fail the same way again
                raise self._request_failed(
                    request, attempts, attempt, started, e, "Request failed"
                )
            else:
                status_code = response.status_code
                elapsed_ms = (self.clock() - started) * 1000
                outcome = classify_status(status_code)

                if outcome is CallOutcome.SUCCESS:
                    attempts.append(
                        CallAttempt(attempt, outcome, elapsed_ms, status_code)
                    )
                    self._logger.debug(
                        "Call succeeded",
                        extra={
                            "url": request.url,
                            "status": status_code,
                            "attempt": attempt,
                            "elapsed_ms": round(elapsed_ms, 1),
                            "proxied": proxied,
                        },
                    )
                    return response

                if outcome is CallOutcome.TERMINAL_FAILURE:
                    detail = provider_detail(response)
                    attempts.append(
                        CallAttempt(attempt, outcome, elapsed_ms, status_code, detail)
                    )
                    self._logger.warning(
                        "Terminal failure, not retrying",
                        extra={
                            "url": request.url,
                            "status": status_code,
                            "detail": detail,
                        },
                    )
                    raise TerminalError(
                        f"{request.method} {request.url} failed with HTTP {status_code}",
                        url=request.url,
                        status_code=status_code,
                        detail=detail,
                    )

                last_error = ServerError(
                    f"HTTP {status_code}", url=request.url, status_code=status_code
                )
                error_text = f"HTTP {status_code}"

            attempts.append(
                CallAttempt(
                    attempt,
                    CallOutcome.RETRYABLE_FAILURE,
                    (self.clock() - started) * 1000,
                    status_code,
                    error_text,
                )
            )

            if attempt < policy.max_attempts:
                delay_ms = policy.delay_ms(attempt)
                self._logger.info(
                    "Retryable failure, backing off",
                    extra={
                        "url": request.url,
                        "attempt": attempt,
                        "max_attempts": policy.max_attempts,
                        "error": error_text,
                        "delay_ms": delay_ms,
                    },
                )
                try:
                    await self._race(self.sleep(delay_ms / 1000), cancel)
                except _CancelSignalled:
                    raise self._cancelled(request, attempts) from None

        self._logger.warning(
            "Retries exhausted",
            extra={"url": request.url, "attempts": len(attempts)},
        )
        raise RetryExhaustedError(
            f"{request.method} {request.url} failed after {len(attempts)} attempts",
            cause=last_error,
            url=request.url,
            attempts=tuple(attempts),
        )

    async def aclose(self) -> None:
        """Close every client this transport created."""
        for client in self._proxy_clients.values():
            await client.aclose()
        self._proxy_clients.clear()
        if self._owns_client and self.client is not None:
            await self.client.aclose()

    async def __aenter__(self) -> RetryingTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
