"""AMap geocoder adapter.

Wraps the AMap ``v3/geocode/geo`` REST endpoint behind GeocoderPort.
Every lookup is a single logical call through the retrying transport
using the geocoding retry policy.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ...config import GeocodingConfig
from ...domain.errors import ConfigurationError, ProviderResponseError
from ...domain.models import RequestSpec, ResolvedLocation, RetryPolicy
from ...ports.settings import SettingsProviderPort
from ...ports.transport import TransportPort
from ..amap_status import amap_payload


def parse_lnglat(value: str) -> tuple[float, float]:
    """Parse AMap's ``"lng,lat"`` location string."""
    lng, _, lat = value.partition(",")
    return float(lng), float(lat)


@dataclass
class AMapGeocoderAdapter:
    """Geocoder backed by the AMap REST API.

    This adapter implements GeocoderPort.

    Attributes:
        transport: Transport used for the remote call
        settings: Source of the AMap API key
        policy: Retry policy for geocoding calls
        config: Endpoint configuration
    """

    transport: TransportPort
    settings: SettingsProviderPort
    policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(
            max_attempts=2, base_delay_ms=200, max_delay_ms=1000, timeout_ms=5000
        )
    )
    config: GeocodingConfig = field(default_factory=GeocodingConfig)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _api_key(self) -> str:
        key = self.settings.api_keys().amap_api_key
        if not key:
            raise ConfigurationError(
                "AMap API key is not configured", setting_name="amapApiKey"
            )
        return key

    async def geocode(
        self,
        address: str,
        city: str = "",
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[ResolvedLocation]:
        """Geocode an address, optionally scoped to a city.

        Args:
            address: The place to look up.
            city: City scope; sent as the ``city`` parameter when given.
            cancel: Optional cancellation signal.

        Returns:
            The best match, or None when AMap found nothing usable.
        """
        params = {"key": self._api_key(), "address": address, "output": "JSON"}
        if city:
            params["city"] = city

        response = await self.transport.execute(
            RequestSpec(method="GET", url=self.config.base_url, params=params),
            self.policy,
            cancel,
        )
        payload = amap_payload(response, "amap-geocode", self.config.base_url)

        geocodes: list[dict[str, Any]] = payload.get("geocodes") or []
        if not geocodes:
            self._logger.debug(
                "Geocode returned no result",
                extra={"address": address, "city": city},
            )
            return None

        best = geocodes[0]
        try:
            longitude, latitude = parse_lnglat(str(best.get("location", "")))
            location = ResolvedLocation(
                longitude=longitude,
                latitude=latitude,
                normalized_address=str(best.get("formatted_address") or address),
                approximate=False,
                city=str(best.get("city") or city or ""),
            )
        except ValueError as e:
            raise ProviderResponseError(
                f"Unusable location in geocode result for {address!r}",
                provider="amap-geocode",
                cause=e,
            )

        if location.location.is_origin:
            # (0, 0) is AMap's placeholder for "no coordinate"
            self._logger.warning(
                "Geocode returned null island, ignoring",
                extra={"address": address},
            )
            return None

        self._logger.debug(
            "Geocode success",
            extra={
                "address": address,
                "lng": location.longitude,
                "lat": location.latitude,
            },
        )
        return location
