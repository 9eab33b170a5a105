"""Services layer - Application orchestration.

This module contains the application services that orchestrate
the flow of data through adapters to fulfill use cases.

Available services:
- RequestRouter: proxy or direct, per destination host
- AddressResolver: place name to coordinates with fallback table
- NavigationService: leg distance estimates between stops
- TripWeatherService: weather for every city of a trip
- TripMapService: locate and draw a trip
- NetworkDiagnostics: connectivity probes
"""

from .address_resolver import AddressResolver
from .feedback import describe_error
from .navigation import NavigationService, estimate_route
from .network_diagnostics import NetworkDiagnostics
from .request_router import RequestRouter
from .trip_map import TripMapService
from .trip_weather import TripWeatherService

__all__ = [
    "AddressResolver",
    "NavigationService",
    "NetworkDiagnostics",
    "RequestRouter",
    "TripMapService",
    "TripWeatherService",
    "describe_error",
    "estimate_route",
]
