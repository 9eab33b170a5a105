"""Domain layer - Core models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    CallCancelledError,
    ConfigurationError,
    ProviderResponseError,
    RenderingError,
    ResolutionFailedError,
    RetryExhaustedError,
    ServerError,
    TerminalError,
    WebPlannerError,
)
from .models import (
    CallAttempt,
    CallOutcome,
    EndpointClassification,
    EndpointProbe,
    ForecastDay,
    GeneratedItinerary,
    GeoLocation,
    ItineraryItem,
    LegDistance,
    LocationWeather,
    NetworkStatus,
    PlaceQuery,
    ProxyConfig,
    RequestSpec,
    ResolutionState,
    ResolvedLocation,
    RetryPolicy,
    RouteCategory,
    RouteEstimate,
    StopResolution,
    TripLocations,
    TripPreferences,
    TripRequest,
    WeatherReport,
)

__all__ = [
    # Routing and retries
    "CallAttempt",
    "CallOutcome",
    "EndpointClassification",
    "ProxyConfig",
    "RequestSpec",
    "RetryPolicy",
    "RouteCategory",
    # Resolution
    "GeoLocation",
    "PlaceQuery",
    "ResolutionState",
    "ResolvedLocation",
    # Trips
    "ForecastDay",
    "GeneratedItinerary",
    "ItineraryItem",
    "LegDistance",
    "LocationWeather",
    "RouteEstimate",
    "StopResolution",
    "TripLocations",
    "TripPreferences",
    "TripRequest",
    "WeatherReport",
    # Diagnostics
    "EndpointProbe",
    "NetworkStatus",
    # Errors
    "WebPlannerError",
    "TerminalError",
    "ServerError",
    "RetryExhaustedError",
    "CallCancelledError",
    "ResolutionFailedError",
    "ConfigurationError",
    "ProviderResponseError",
    "RenderingError",
]
