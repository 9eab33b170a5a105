"""Network diagnostics - can we reach the providers from here?

Each probe is a single HEAD request through the same transport and router
as real traffic, so a probe is proxied exactly when a real call to that
host would be.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from ..config import DiagnosticsConfig
from ..domain.errors import CallCancelledError, RetryExhaustedError, TerminalError
from ..domain.models import EndpointProbe, NetworkStatus, RequestSpec, RetryPolicy
from ..ports.transport import TransportPort
from .request_router import RequestRouter


@dataclass
class NetworkDiagnostics:
    """Connectivity probes and an aggregated health summary.

    Attributes:
        transport: Transport used for the probes
        router: Routing decisions, reported on every probe
        policy: Retry policy for probes (one attempt by default)
        probe_urls: Endpoints checked by ``network_status`` by default
        clock: Monotonic clock in seconds
    """

    transport: TransportPort
    router: RequestRouter
    policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(
            max_attempts=1, base_delay_ms=0, max_delay_ms=0, timeout_ms=10000
        )
    )
    probe_urls: tuple[str, ...] = field(
        default_factory=lambda: DiagnosticsConfig().probe_urls
    )
    clock: Callable[[], float] = time.monotonic

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _elapsed_ms(self, started: float) -> float:
        return round((self.clock() - started) * 1000, 1)

    async def test_connection(self, url: str) -> EndpointProbe:
        """Probe one endpoint.

        Any HTTP answer below 500 counts as reachable, including 401/404:
        the host answered, which is all a connectivity probe asks.
        """
        proxied = self.router.should_use_proxy(url)
        started = self.clock()
        status: Optional[int] = None
        error: Optional[str] = None
        try:
            response = await self.transport.execute(
                RequestSpec(method="HEAD", url=url), self.policy
            )
            status = response.status_code
        except CallCancelledError:
            raise
        except TerminalError as e:
            status = e.status_code
            if status is None:
                error = str(e)
        except RetryExhaustedError as e:
            last = e.attempts[-1] if e.attempts else None
            status = last.status_code if last else None
            error = str(e.last_error or e)

        probe = EndpointProbe(
            url=url,
            success=error is None and status is not None and status < 500,
            status_code=status,
            response_ms=self._elapsed_ms(started),
            proxied=proxied,
            error=error,
        )
        log = self._logger.info if probe.success else self._logger.warning
        log(
            "Connection probe",
            extra={
                "url": url,
                "success": probe.success,
                "status_code": status,
                "response_ms": probe.response_ms,
                "proxied": proxied,
            },
        )
        return probe

    async def network_status(
        self, urls: Optional[Sequence[str]] = None
    ) -> NetworkStatus:
        """Probe every endpoint concurrently and summarize.

        Args:
            urls: Endpoints to probe; defaults to ``probe_urls``.
        """
        targets = tuple(urls) if urls is not None else self.probe_urls
        probes = await asyncio.gather(*(self.test_connection(u) for u in targets))
        status = NetworkStatus(
            proxy=self.router.get_proxy_config(), probes=tuple(probes)
        )
        self._logger.info(
            "Network status",
            extra={
                "overall": status.overall,
                "probes": len(status.probes),
                "proxy_enabled": status.proxy.enabled,
            },
        )
        return status
