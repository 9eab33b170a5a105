"""Trip map service - locate a trip's stops and draw them."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

from ..domain.errors import CallCancelledError, RenderingError, WebPlannerError
from ..domain.models import (
    ItineraryItem,
    ResolvedLocation,
    StopResolution,
    TripLocations,
)
from ..ports.rendering import MapRendererPort
from .address_resolver import AddressResolver


@dataclass
class TripMapService:
    """Resolves every place of a trip and renders the result.

    Attributes:
        resolver: Address resolver used for every stop
        map_renderer: Optional map renderer
    """

    resolver: AddressResolver
    map_renderer: Optional[MapRendererPort] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _entry(
        label: str, address: str, outcome: Union[ResolvedLocation, BaseException]
    ) -> StopResolution:
        if isinstance(outcome, ResolvedLocation):
            return StopResolution(label, address, location=outcome)
        if isinstance(outcome, CallCancelledError) or not isinstance(
            outcome, (WebPlannerError, ValueError)
        ):
            raise outcome
        return StopResolution(label, address, error=str(outcome))

    async def locate_trip(
        self,
        destination: str,
        items: Sequence[ItineraryItem] = (),
        cancel: Optional[asyncio.Event] = None,
    ) -> TripLocations:
        """Resolve the destination and every located itinerary stop.

        All addresses are resolved concurrently and independently, scoped
        to the destination's city. A stop that fails carries its error;
        the others are unaffected.
        """
        stops = [item for item in items if item.location]
        city = self.resolver.city_scope(destination)
        outcomes = await asyncio.gather(
            self.resolver.resolve(destination, "", cancel),
            *(
                self.resolver.resolve(item.location, city, cancel)
                for item in stops
            ),
            return_exceptions=True,
        )

        trip = TripLocations(
            destination=self._entry("目的地", destination, outcomes[0]),
            stops=tuple(
                self._entry(f"第{item.day}天 {item.title}", item.location, outcome)
                for item, outcome in zip(stops, outcomes[1:])
            ),
        )
        self._logger.info(
            "Trip located",
            extra={
                "destination": destination,
                "resolved": len(trip.resolved),
                "failed": len(trip.failures),
                "approximate": sum(
                    1 for s in trip.resolved if s.location and s.location.approximate
                ),
            },
        )
        return trip

    def render(self, trip: TripLocations, output_path: Path) -> Path:
        """Draw the resolved places of a trip.

        Raises:
            RenderingError: If no renderer is configured or rendering fails.
        """
        if self.map_renderer is None:
            raise RenderingError(
                "No map renderer configured", output_path=str(output_path)
            )
        entries = ((trip.destination,) if trip.destination else ()) + trip.stops
        return self.map_renderer.render(entries, output_path)
