"""Transport port - One logical remote call with a retry policy.

Implementation: adapters/http/retrying_transport.py
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    import httpx

    from ..domain.models import RequestSpec, RetryPolicy


class TransportPort(Protocol):
    """Port for executing remote calls.

    Provider clients build a RequestSpec and hand it over together with
    the policy of their call class; they never loop themselves.
    """

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
            cancel: Optional signal; setting it aborts the call.

        Returns:
            The first successful (2xx/3xx) response.

        Raises:
            TerminalError: On a non-retryable failure.
            RetryExhaustedError: When every attempt failed transiently.
            CallCancelledError: When ``cancel`` was set.
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        ...
