"""Address resolver - free-text place name to map coordinates.

Per call:

    START -> EXTRACTING -> RESOLVING -> SUCCESS
                                     -> FALLBACK_LOOKUP -> FALLBACK_HIT
                                                        -> FAILED

A result is either a precise remote match (``approximate=False``), an
approximate city-centre point from the fallback table
(``approximate=True``), or ResolutionFailedError. Nothing is cached
between calls.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..domain.errors import (
    ConfigurationError,
    ProviderResponseError,
    ResolutionFailedError,
    RetryExhaustedError,
    TerminalError,
)
from ..domain.models import PlaceQuery, ResolutionState, ResolvedLocation
from ..geo.city_extraction import extract_city
from ..geo.fallback_table import lookup_fallback
from ..ports.geocoding import GeocoderPort

# Failures of the remote step that send us to the fallback table.
# Cancellation is not listed here: it propagates to the caller.
REMOTE_FAILURES = (
    TerminalError,
    RetryExhaustedError,
    ConfigurationError,
    ProviderResponseError,
)


def scoped_address(address: str, city: str) -> str:
    """Prefix the city unless the address already starts with it."""
    if not city or address.startswith(city):
        return address
    return f"{city}{address}"


@dataclass
class AddressResolver:
    """Resolves place descriptions into coordinates.

    Attributes:
        geocoder: Remote geocoding provider
        city_extractor: Heuristic turning an address into a city scope
    """

    geocoder: GeocoderPort
    city_extractor: Callable[[str], str] = extract_city

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _transition(self, query: PlaceQuery, state: ResolutionState) -> None:
        self._logger.debug(
            "Resolution state",
            extra={"address": query.raw_address, "state": state.name},
        )

    def city_scope(self, text: str) -> str:
        """City named in ``text``, or "" when no pattern matched.

        The extractor returns its input when nothing matched; that is not
        a city and must not be sent as a scope.
        """
        text = text.strip()
        city = self.city_extractor(text)
        return "" if city == text else city

    async def resolve(
        self,
        raw_address: str,
        city_hint: str = "",
        cancel: Optional[asyncio.Event] = None,
    ) -> ResolvedLocation:
        """Resolve an address to coordinates.

        Args:
            raw_address: Non-empty place description.
            city_hint: Optional explicit city scope.
            cancel: Optional cancellation signal for the remote call.

        Returns:
            The resolved location; ``approximate`` tells remote from
            fallback provenance.

        Raises:
            ValueError: If the address is empty.
            ResolutionFailedError: If both remote and fallback failed.
            CallCancelledError: If the caller cancelled the remote call.
        """
        if not raw_address or not raw_address.strip():
            raise ValueError("Address must not be empty")

        query = PlaceQuery(raw_address=raw_address.strip(), city_hint=city_hint.strip())
        self._transition(query, ResolutionState.START)

        # Step 1: city scope
        self._transition(query, ResolutionState.EXTRACTING)
        city = query.city_hint or self.city_extractor(query.raw_address)
        scope = query.city_hint or self.city_scope(query.raw_address)

        # Step 2: one remote resolution
        self._transition(query, ResolutionState.RESOLVING)
        remote_error: Optional[Exception] = None
        try:
            location = await self.geocoder.geocode(
                scoped_address(query.raw_address, scope), scope, cancel
            )
        except REMOTE_FAILURES as e:
            remote_error = e
            location = None

        if location is not None:
            self._transition(query, ResolutionState.SUCCESS)
            self._logger.info(
                "Address resolved",
                extra={
                    "address": query.raw_address,
                    "city": scope,
                    "lng": location.longitude,
                    "lat": location.latitude,
                },
            )
            return location

        # Step 3: fallback table, exactly once
        self._transition(query, ResolutionState.FALLBACK_LOOKUP)
        self._logger.warning(
            "Remote resolution failed, trying fallback table",
            extra={
                "address": query.raw_address,
                "city": city,
                "error": str(remote_error) if remote_error else "no result",
            },
        )
        hit = lookup_fallback(city, query.raw_address)
        if hit is None:
            self._transition(query, ResolutionState.FAILED)
            raise ResolutionFailedError(
                f"Could not resolve {query.raw_address!r}",
                query=query.raw_address,
                city=city,
                cause=remote_error,
            )

        fallback_city, point = hit
        self._transition(query, ResolutionState.FALLBACK_HIT)
        return ResolvedLocation(
            longitude=point.longitude,
            latitude=point.latitude,
            normalized_address=fallback_city,
            approximate=True,
            city=fallback_city,
        )

    async def resolve_many(
        self,
        addresses: list[str],
        city_hint: str = "",
        cancel: Optional[asyncio.Event] = None,
    ) -> list[ResolvedLocation | Exception]:
        """Resolve several addresses concurrently.

        Each address is an independent call; one failure never affects
        another. Failures are returned in place of the location.
        """
        results = await asyncio.gather(
            *(self.resolve(a, city_hint, cancel) for a in addresses),
            return_exceptions=True,
        )
        return list(results)
