"""Geocoding port - Abstraction for address to coordinates lookup.

This protocol defines the contract for geocoding providers, allowing
different implementations (AMap, Baidu, etc.) to be used.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import ResolvedLocation


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/amap_adapter.py
    """

    async def geocode(
        self,
        address: str,
        city: str = "",
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[ResolvedLocation]:
        """Geocode an address, optionally scoped to a city.

        Args:
            address: The place to look up (e.g., "中山陵").
            city: City scope, empty for an unscoped lookup.
            cancel: Optional cancellation signal.

        Returns:
            A precisely resolved location, or None if the provider
            found nothing.

        Raises:
            TerminalError, RetryExhaustedError, CallCancelledError:
                propagated from the transport.
        """
        ...
