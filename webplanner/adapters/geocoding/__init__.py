"""Geocoding adapters - Implementations of GeocoderPort.

Available implementations:
- AMapGeocoderAdapter: AMap (Gaode) REST geocoding
"""

from .amap_adapter import AMapGeocoderAdapter

__all__ = ["AMapGeocoderAdapter"]
