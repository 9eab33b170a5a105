"""Static city-centre coordinates used when remote geocoding fails.

The table is read-only and process-wide. Points returned from it are
approximate (a city centre, not the requested place) and the resolver
flags them as such.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from ..domain.models import GeoLocation
from .city_extraction import normalize_city

# Keys are bare city names (no 市 suffix); longitude/latitude are GCJ-02,
# the datum AMap returns.
FALLBACK_TABLE: Mapping[str, GeoLocation] = MappingProxyType(
    {
        "北京": GeoLocation(latitude=39.904030, longitude=116.407526),
        "上海": GeoLocation(latitude=31.230416, longitude=121.473701),
        "天津": GeoLocation(latitude=39.084158, longitude=117.200983),
        "重庆": GeoLocation(latitude=29.563009, longitude=106.551556),
        "南京": GeoLocation(latitude=32.060255, longitude=118.796877),
        "杭州": GeoLocation(latitude=30.274084, longitude=120.155070),
        "苏州": GeoLocation(latitude=31.298886, longitude=120.585315),
        "无锡": GeoLocation(latitude=31.491169, longitude=120.311910),
        "扬州": GeoLocation(latitude=32.393159, longitude=119.412966),
        "徐州": GeoLocation(latitude=34.205768, longitude=117.284124),
        "广州": GeoLocation(latitude=23.129112, longitude=113.264385),
        "深圳": GeoLocation(latitude=22.543099, longitude=114.057868),
        "珠海": GeoLocation(latitude=22.270715, longitude=113.576726),
        "成都": GeoLocation(latitude=30.572269, longitude=104.066541),
        "武汉": GeoLocation(latitude=30.593099, longitude=114.305393),
        "西安": GeoLocation(latitude=34.341568, longitude=108.940174),
        "沈阳": GeoLocation(latitude=41.805698, longitude=123.431474),
        "大连": GeoLocation(latitude=38.914003, longitude=121.614682),
        "济南": GeoLocation(latitude=36.651216, longitude=117.120000),
        "青岛": GeoLocation(latitude=36.067082, longitude=120.382639),
        "郑州": GeoLocation(latitude=34.746599, longitude=113.625368),
        "洛阳": GeoLocation(latitude=34.619682, longitude=112.453926),
        "长沙": GeoLocation(latitude=28.228209, longitude=112.938814),
        "张家界": GeoLocation(latitude=29.117096, longitude=110.479191),
    }
)


def lookup_fallback(*candidates: str) -> Optional[tuple[str, GeoLocation]]:
    """Find the first candidate mentioning a known city.

    Each candidate is tried in order: first as an exact (normalized) city
    name, then by scanning for any table key it contains.

    Returns:
        ``(city, location)`` for the first hit, or None.
    """
    for candidate in candidates:
        if not candidate:
            continue
        name = normalize_city(candidate)
        if name in FALLBACK_TABLE:
            return name, FALLBACK_TABLE[name]
        for city, location in FALLBACK_TABLE.items():
            if city in candidate:
                return city, location
    return None
