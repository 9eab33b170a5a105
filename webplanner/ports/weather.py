"""Weather port."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import ForecastDay, WeatherReport


class WeatherProviderPort(Protocol):
    """Port for live weather and forecast lookups.

    ``extensions`` is "base" for live weather or "all" for the
    multi-day forecast.

    Implementation: adapters/weather/amap_weather_adapter.py
    """

    async def weather_by_city(
        self,
        city: str,
        extensions: str = "base",
        cancel: Optional[asyncio.Event] = None,
    ) -> dict[str, Any]:
        """Return the provider payload for a city."""
        ...

    async def weather_by_location(
        self,
        longitude: float,
        latitude: float,
        extensions: str = "base",
        cancel: Optional[asyncio.Event] = None,
    ) -> dict[str, Any]:
        """Return the provider payload for coordinates."""
        ...

    def format_weather(self, payload: dict[str, Any]) -> Optional[WeatherReport]:
        """Turn a live-weather payload into a display-ready report."""
        ...

    def format_forecast(self, payload: dict[str, Any]) -> tuple[ForecastDay, ...]:
        """Turn a forecast payload into one entry per day."""
        ...
