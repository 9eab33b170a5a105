"""Weather for every place a trip touches.

Locations are reduced to their city first, so a trip with ten stops in
Nanjing costs a single provider call.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from ..domain.errors import (
    CallCancelledError,
    ProviderResponseError,
    WebPlannerError,
)
from ..domain.models import ForecastDay, LocationWeather, WeatherReport
from ..geo.city_extraction import extract_city, normalize_city
from ..ports.weather import WeatherProviderPort


@dataclass
class TripWeatherService:
    """Concurrent weather lookups for trip locations.

    Attributes:
        provider: Current-weather provider
        city_extractor: Maps a free-text location to its city
    """

    provider: WeatherProviderPort
    city_extractor: Callable[[str], str] = extract_city

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def current(
        self, city: str, cancel: Optional[asyncio.Event] = None
    ) -> WeatherReport:
        """Current weather for a single city.

        Raises:
            ProviderResponseError: If the provider has no live data.
        """
        report = self.provider.format_weather(
            await self.provider.weather_by_city(city, "base", cancel)
        )
        if report is None:
            raise ProviderResponseError(
                f"No live weather for {city!r}", provider="weather"
            )
        return report

    async def forecast(
        self, city: str, cancel: Optional[asyncio.Event] = None
    ) -> tuple[ForecastDay, ...]:
        """Multi-day forecast for a city.

        Raises:
            ProviderResponseError: If the provider returned no forecast.
        """
        days = self.provider.format_forecast(
            await self.provider.weather_by_city(city, "all", cancel)
        )
        if not days:
            raise ProviderResponseError(
                f"No forecast for {city!r}", provider="weather"
            )
        return days

    async def for_locations(
        self,
        locations: Sequence[str],
        cancel: Optional[asyncio.Event] = None,
    ) -> list[LocationWeather]:
        """Weather for each location, in input order.

        A failed lookup is reported on its own entry; cancellation and
        programming errors propagate.
        """
        cities = {
            location: normalize_city(self.city_extractor(location))
            for location in locations
            if location and location.strip()
        }
        unique = list(dict.fromkeys(cities.values()))
        results = await asyncio.gather(
            *(self.current(city, cancel) for city in unique), return_exceptions=True
        )
        by_city = dict(zip(unique, results))

        entries = []
        for location, city in cities.items():
            outcome = by_city[city]
            if isinstance(outcome, WeatherReport):
                entries.append(LocationWeather(location, city, report=outcome))
                continue
            if isinstance(outcome, CallCancelledError) or not isinstance(
                outcome, WebPlannerError
            ):
                raise outcome
            self._logger.warning(
                "Weather lookup failed",
                extra={"location": location, "city": city, "error": str(outcome)},
            )
            entries.append(LocationWeather(location, city, error=str(outcome)))
        return entries
