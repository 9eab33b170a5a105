"""AMap weather adapter.

Wraps ``v3/weather/weatherInfo``. The endpoint takes an adcode or a
city name; coordinate lookups pass ``location=lng,lat``. ``extensions``
selects live weather ("base", the ``lives`` list) or the multi-day
forecast ("all", ``forecasts[].casts``).
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ...config import WeatherConfig
from ...domain.errors import ConfigurationError
from ...domain.models import ForecastDay, RequestSpec, RetryPolicy, WeatherReport
from ...ports.settings import SettingsProviderPort
from ...ports.transport import TransportPort
from ..amap_status import amap_payload

EXTENSIONS = ("base", "all")

_TRAILING_PUNCTUATION = re.compile(r"[。，、！？；：,.!?;:]+$")

CITY_ALIASES = {
    "江苏南京": "南京",
    "江苏苏州": "苏州",
    "江苏无锡": "无锡",
    "江苏常州": "常州",
    "江苏镇江": "镇江",
    "江苏扬州": "扬州",
    "江苏南通": "南通",
    "江苏泰州": "泰州",
    "江苏盐城": "盐城",
    "江苏淮安": "淮安",
    "江苏连云港": "连云港",
    "江苏宿迁": "宿迁",
    "江苏徐州": "徐州",
    "北京": "北京市",
    "上海": "上海市",
    "天津": "天津市",
    "重庆": "重庆市",
}

WEATHER_ICONS = {
    "晴": "☀️",
    "多云": "⛅",
    "阴": "☁️",
    "雨": "🌧️",
    "小雨": "🌦️",
    "中雨": "🌧️",
    "大雨": "⛈️",
    "雪": "❄️",
    "雾": "🌫️",
    "雷阵雨": "⛈️",
    "阵雨": "🌦️",
}


def clean_city_name(city: str) -> str:
    """Strip trailing punctuation and map province-prefixed names."""
    if not city:
        return ""
    cleaned = _TRAILING_PUNCTUATION.sub("", city).strip()
    return CITY_ALIASES.get(cleaned, cleaned)


def weather_icon(weather: str) -> str:
    return WEATHER_ICONS.get(weather, "🌤️")


@dataclass
class AMapWeatherAdapter:
    """Live weather and forecasts from the AMap REST API.

    This adapter implements WeatherProviderPort.

    Attributes:
        transport: Transport used for the remote call
        settings: Source of the weather (or AMap) API key
        policy: Retry policy for weather calls
        config: Endpoint configuration
    """

    transport: TransportPort
    settings: SettingsProviderPort
    policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(
            max_attempts=2, base_delay_ms=500, max_delay_ms=2000, timeout_ms=10000
        )
    )
    config: WeatherConfig = field(default_factory=WeatherConfig)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _api_key(self) -> str:
        key = self.settings.api_keys().weather_key
        if not key:
            raise ConfigurationError(
                "Weather API key is not configured", setting_name="weatherApiKey"
            )
        return key

    async def _query(
        self,
        extensions: str,
        cancel: Optional[asyncio.Event],
        **params: str,
    ) -> dict[str, Any]:
        if extensions not in EXTENSIONS:
            raise ValueError(f"extensions must be one of {EXTENSIONS}, got {extensions!r}")
        response = await self.transport.execute(
            RequestSpec(
                method="GET",
                url=self.config.base_url,
                params={
                    "key": self._api_key(),
                    "extensions": extensions,
                    "output": "JSON",
                    **params,
                },
            ),
            self.policy,
            cancel,
        )
        return amap_payload(response, "amap-weather", self.config.base_url)

    async def weather_by_city(
        self,
        city: str,
        extensions: str = "base",
        cancel: Optional[asyncio.Event] = None,
    ) -> dict[str, Any]:
        """Weather for a city name.

        Args:
            city: City name, cleaned before the lookup.
            extensions: "base" for live weather, "all" for the forecast.
            cancel: Optional cancellation signal.
        """
        cleaned = clean_city_name(city)
        self._logger.debug(
            "Weather lookup by city",
            extra={"city": city, "cleaned": cleaned, "extensions": extensions},
        )
        return await self._query(extensions, cancel, city=cleaned)

    async def weather_by_location(
        self,
        longitude: float,
        latitude: float,
        extensions: str = "base",
        cancel: Optional[asyncio.Event] = None,
    ) -> dict[str, Any]:
        """Weather for coordinates."""
        return await self._query(
            extensions, cancel, location=f"{longitude:.6f},{latitude:.6f}"
        )

    def format_weather(self, payload: dict[str, Any]) -> Optional[WeatherReport]:
        """Display-ready report from the first ``lives`` entry, if any."""
        lives = payload.get("lives") or []
        if not lives or not isinstance(lives[0], dict):
            self._logger.warning("Weather payload has no live data")
            return None

        live = lives[0]
        weather = live.get("weather") or "未知"
        return WeatherReport(
            city=live.get("city") or "未知城市",
            weather=weather,
            temperature=f"{live.get('temperature') or '--'}°C",
            wind=f"{live.get('winddirection') or '未知'}风 {live.get('windpower') or '未知'}级",
            humidity=f"{live.get('humidity') or '--'}%",
            report_time=live.get("reporttime") or "未知时间",
            icon=weather_icon(weather),
        )

    def format_forecast(self, payload: dict[str, Any]) -> tuple[ForecastDay, ...]:
        """Days of the first ``forecasts`` entry of an ``extensions=all`` reply."""
        forecasts = payload.get("forecasts") or []
        if not forecasts or not isinstance(forecasts[0], dict):
            self._logger.warning("Weather payload has no forecast data")
            return ()

        days = []
        for cast in forecasts[0].get("casts") or []:
            if not isinstance(cast, dict):
                continue
            day_weather = cast.get("dayweather") or "未知"
            days.append(
                ForecastDay(
                    date=cast.get("date") or "",
                    week=str(cast.get("week") or ""),
                    day_weather=day_weather,
                    night_weather=cast.get("nightweather") or day_weather,
                    temperature=(
                        f"{cast.get('nighttemp') or '--'}~{cast.get('daytemp') or '--'}°C"
                    ),
                    wind=f"{cast.get('daywind') or '未知'}风 {cast.get('daypower') or '未知'}级",
                    icon=weather_icon(day_weather),
                )
            )
        return tuple(days)
