"""Navigation estimates between itinerary stops.

No routing engine is involved: the estimate is the geodesic distance
between the two resolved points stretched by a per-mode detour factor,
travelled at a per-mode average speed. Good enough for "about 12 km,
25 minutes" hints in the itinerary view.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from geopy.distance import geodesic

from ..domain.errors import CallCancelledError, WebPlannerError
from ..domain.models import ItineraryItem, LegDistance, ResolvedLocation, RouteEstimate
from .address_resolver import AddressResolver

# mode -> (detour factor over straight-line distance, average speed km/h)
MODE_PROFILES: Mapping[str, tuple[float, float]] = {
    "driving": (1.3, 35.0),
    "transit": (1.4, 22.0),
    "walking": (1.2, 4.5),
}


def estimate_route(
    start: ResolvedLocation, end: ResolvedLocation, mode: str = "driving"
) -> RouteEstimate:
    """Estimate distance and duration between two resolved points.

    Raises:
        ValueError: If the travel mode is unknown.
    """
    if mode not in MODE_PROFILES:
        raise ValueError(f"Unsupported travel mode: {mode!r}")

    detour, speed_kmh = MODE_PROFILES[mode]
    straight_km = geodesic(
        (start.latitude, start.longitude), (end.latitude, end.longitude)
    ).km
    distance_km = straight_km * detour
    return RouteEstimate(
        mode=mode,
        distance_m=round(distance_km * 1000),
        duration_s=round(distance_km / speed_kmh * 3600),
        approximate=start.approximate or end.approximate,
    )


@dataclass
class NavigationService:
    """Leg distances and advice for an itinerary.

    Attributes:
        resolver: Resolves stop addresses to coordinates
    """

    resolver: AddressResolver

    _logger: logging.Logger = field(init=False, repr=False)

    estimate = staticmethod(estimate_route)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def distance_between(
        self, start: str, end: str, mode: str = "driving", city_hint: str = ""
    ) -> RouteEstimate:
        """Resolve two addresses concurrently and estimate the leg."""
        origin, destination = await asyncio.gather(
            self.resolver.resolve(start, city_hint),
            self.resolver.resolve(end, city_hint),
        )
        return estimate_route(origin, destination, mode)

    async def leg_distances(
        self,
        items: Sequence[ItineraryItem],
        mode: str = "driving",
        city_hint: str = "",
    ) -> list[LegDistance]:
        """Estimate every leg between consecutive located itinerary items.

        Each stop is resolved once; a stop that cannot be resolved turns
        its adjacent legs into error entries without affecting the rest.
        """
        located = [item for item in items if item.location]
        addresses = list(dict.fromkeys(item.location for item in located))
        results = await self.resolver.resolve_many(addresses, city_hint)
        by_address = dict(zip(addresses, results))

        legs: list[LegDistance] = []
        for current, following in zip(located, located[1:]):
            origin = by_address[current.location]
            destination = by_address[following.location]
            failure: Optional[BaseException] = next(
                (r for r in (origin, destination) if isinstance(r, BaseException)),
                None,
            )
            if failure is not None:
                if isinstance(failure, CallCancelledError) or not isinstance(
                    failure, (WebPlannerError, ValueError)
                ):
                    raise failure
                self._logger.warning(
                    "Leg skipped",
                    extra={
                        "from": current.title,
                        "to": following.title,
                        "error": str(failure),
                    },
                )
                legs.append(
                    LegDistance(current.title, following.title, error=str(failure))
                )
                continue
            legs.append(
                LegDistance(
                    current.title,
                    following.title,
                    estimate=estimate_route(origin, destination, mode),  # type: ignore[arg-type]
                )
            )
        return legs

    @staticmethod
    def advice(legs: Sequence[LegDistance]) -> list[str]:
        """Human-readable summaries of the successful legs."""
        lines = []
        for leg in legs:
            if leg.estimate is None:
                continue
            line = (
                f"从 {leg.origin} 到 {leg.destination}: "
                f"{leg.estimate.distance_km}公里，约{leg.estimate.duration_min}分钟"
            )
            if leg.estimate.approximate:
                line += "（位置为估算）"
            lines.append(line)
        return lines
