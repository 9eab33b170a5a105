"""Immutable domain models for the WebPlanner remote-call layer.

All models are frozen dataclasses with slots. These models have no
external dependencies and represent the core concepts the router,
transport and resolver exchange.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Mapping, Optional


class RouteCategory(Enum):
    """Routing class of a destination host."""

    ALWAYS_PROXY = auto()
    AI_PROVIDER = auto()
    DIRECT = auto()


class CallOutcome(Enum):
    """Classification of a single call attempt."""

    SUCCESS = auto()
    RETRYABLE_FAILURE = auto()
    TERMINAL_FAILURE = auto()
    CANCELLED = auto()


class ResolutionState(Enum):
    """States of a single address resolution.

    START -> EXTRACTING -> RESOLVING -> SUCCESS
                                     -> FALLBACK_LOOKUP -> FALLBACK_HIT
                                                        -> FAILED
    """

    START = auto()
    EXTRACTING = auto()
    RESOLVING = auto()
    SUCCESS = auto()
    FALLBACK_LOOKUP = auto()
    FALLBACK_HIT = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (
            ResolutionState.SUCCESS,
            ResolutionState.FALLBACK_HIT,
            ResolutionState.FAILED,
        )


def _matches_suffix(host: str, suffix: str) -> bool:
    return host == suffix or host.endswith("." + suffix)


@dataclass(frozen=True, slots=True)
class EndpointClassification:
    """Host-suffix table deciding the routing class of a hostname.

    Attributes:
        always_proxy: Suffixes of hosts that are always proxied
        ai_providers: Suffixes of LLM provider hosts, proxied on demand
    """

    always_proxy: tuple[str, ...] = ()
    ai_providers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Reject tables where a host could match both classes."""
        for proxied in self.always_proxy:
            for ai in self.ai_providers:
                if _matches_suffix(proxied, ai) or _matches_suffix(ai, proxied):
                    raise ValueError(
                        f"Endpoint classes overlap: {proxied!r} and {ai!r}"
                    )

    def classify(self, host: str) -> RouteCategory:
        """Return the routing class of a hostname (DIRECT if unmatched)."""
        host = host.lower().rstrip(".")
        if any(_matches_suffix(host, s) for s in self.always_proxy):
            return RouteCategory.ALWAYS_PROXY
        if any(_matches_suffix(host, s) for s in self.ai_providers):
            return RouteCategory.AI_PROVIDER
        return RouteCategory.DIRECT


@dataclass(frozen=True, slots=True)
class ProxyConfig:
    """Connection parameters of the configured network proxy."""

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 7890

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Immutable retry configuration for one logical remote call.

    Attributes:
        max_attempts: Upper bound on network attempts (>= 1)
        base_delay_ms: Backoff before the second attempt
        max_delay_ms: Cap on any single backoff delay
        timeout_ms: Per-attempt timeout
    """

    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    timeout_ms: int = 60000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be at least 1, got {self.max_attempts}"
            )
        if self.base_delay_ms < 0:
            raise ValueError(
                f"base_delay_ms must be non-negative, got {self.base_delay_ms}"
            )
        if self.base_delay_ms > self.max_delay_ms:
            raise ValueError(
                f"base_delay_ms ({self.base_delay_ms}) exceeds "
                f"max_delay_ms ({self.max_delay_ms})"
            )
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")

    def delay_ms(self, attempt: int) -> int:
        """Backoff to wait after a retryable failure of ``attempt`` (1-based)."""
        return min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)

    @property
    def max_total_ms(self) -> int:
        """Worst-case wall-clock time of one call under this policy.

        Callers use this to decide when to show "still working" feedback.
        """
        backoff = sum(self.delay_ms(n) for n in range(1, self.max_attempts))
        return self.max_attempts * self.timeout_ms + backoff


@dataclass(frozen=True, slots=True)
class RequestSpec:
    """A fully formed HTTP request descriptor."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)
    json_body: Optional[Any] = None
    content: Optional[bytes] = None


@dataclass(frozen=True, slots=True)
class CallAttempt:
    """Record of one attempt inside a single execute() call.

    Attributes:
        attempt_number: 1-based attempt index
        outcome: Classification of the attempt
        elapsed_ms: Time spent on the attempt
        status_code: HTTP status if a response arrived
        error: Short description of the failure, if any
    """

    attempt_number: int
    outcome: CallOutcome
    elapsed_ms: float
    status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )

    @property
    def is_origin(self) -> bool:
        return self.latitude == 0 and self.longitude == 0


@dataclass(frozen=True, slots=True)
class PlaceQuery:
    """A place description handed to the resolver.

    Attributes:
        raw_address: Free-text place name as typed by the user
        city_hint: Optional explicit city scope
    """

    raw_address: str
    city_hint: str = ""


@dataclass(frozen=True, slots=True)
class ResolvedLocation:
    """Coordinates for a place, with provenance.

    Attributes:
        longitude: Longitude in degrees
        latitude: Latitude in degrees
        normalized_address: Provider-normalized (or fallback) address
        approximate: True when the point came from the fallback table
        city: City scope used during resolution
    """

    longitude: float
    latitude: float
    normalized_address: str
    approximate: bool = False
    city: str = ""

    def __post_init__(self) -> None:
        GeoLocation(latitude=self.latitude, longitude=self.longitude)

    @property
    def location(self) -> GeoLocation:
        return GeoLocation(latitude=self.latitude, longitude=self.longitude)


@dataclass(frozen=True, slots=True)
class TripPreferences:
    """Traveller preferences fed into the itinerary prompt."""

    interests: tuple[str, ...] = ()
    pace: str = "moderate"
    accommodation: str = "hotel"
    transportation: str = "mixed"
    food: str = "local"
    accessibility: bool = False
    pet_friendly: bool = False
    family_friendly: bool = False


@dataclass(frozen=True, slots=True)
class TripRequest:
    """What the user asked the itinerary generator for."""

    title: str
    destination: str
    start_date: str
    end_date: str
    travelers: int = 1
    budget: Optional[float] = None
    description: str = ""
    preferences: TripPreferences = field(default_factory=TripPreferences)


@dataclass(frozen=True, slots=True)
class ItineraryItem:
    """One activity of a generated itinerary."""

    day: int
    title: str
    time: str = "09:00-18:00"
    date: str = ""
    description: str = ""
    location: str = ""
    category: str = "sightseeing"
    duration_minutes: int = 60
    cost: float = 0.0
    notes: str = ""


@dataclass(frozen=True, slots=True)
class GeneratedItinerary:
    """Itinerary returned by the LLM provider.

    Attributes:
        items: Flattened activities in day order
        is_sample: True when the provider output was unusable and a
            generic sample itinerary was substituted
        model: Model that produced the itinerary
    """

    items: tuple[ItineraryItem, ...] = field(default_factory=tuple)
    is_sample: bool = False
    model: str = ""

    @property
    def days(self) -> int:
        return max((item.day for item in self.items), default=0)


@dataclass(frozen=True, slots=True)
class WeatherReport:
    """Current weather for a place, formatted for display."""

    city: str
    weather: str
    temperature: str
    wind: str
    humidity: str
    report_time: str
    icon: str = ""


@dataclass(frozen=True, slots=True)
class ForecastDay:
    """One day of a multi-day forecast."""

    date: str
    week: str
    day_weather: str
    night_weather: str
    temperature: str
    wind: str
    icon: str = ""


@dataclass(frozen=True, slots=True)
class LocationWeather:
    """Weather lookup outcome for one trip location."""

    location: str
    city: str
    report: Optional[WeatherReport] = None
    error: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.report is not None


@dataclass(frozen=True, slots=True)
class RouteEstimate:
    """Estimated travel between two resolved locations.

    Attributes:
        mode: driving / transit / walking
        distance_m: Estimated route distance in metres
        duration_s: Estimated duration in seconds
        approximate: True if either endpoint was a fallback point
    """

    mode: str
    distance_m: int
    duration_s: int
    approximate: bool = False

    @property
    def distance_km(self) -> float:
        return round(self.distance_m / 1000, 1)

    @property
    def duration_min(self) -> int:
        return -(-self.duration_s // 60)


@dataclass(frozen=True, slots=True)
class LegDistance:
    """Distance between two consecutive itinerary stops."""

    origin: str
    destination: str
    estimate: Optional[RouteEstimate] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.estimate is not None


@dataclass(frozen=True, slots=True)
class EndpointProbe:
    """Result of probing one endpoint."""

    url: str
    success: bool
    status_code: Optional[int] = None
    response_ms: Optional[float] = None
    proxied: bool = False
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class NetworkStatus:
    """Aggregated connectivity report."""

    proxy: ProxyConfig
    probes: tuple[EndpointProbe, ...] = field(default_factory=tuple)

    @property
    def overall(self) -> str:
        """healthy if every probe succeeded, degraded if at least half did."""
        if not self.probes:
            return "unknown"
        ok = sum(1 for p in self.probes if p.success)
        if ok == len(self.probes):
            return "healthy"
        if ok >= len(self.probes) / 2:
            return "degraded"
        return "unhealthy"


@dataclass(frozen=True, slots=True)
class StopResolution:
    """Outcome of resolving one trip stop; exactly one field is set."""

    label: str
    address: str
    location: Optional[ResolvedLocation] = None
    error: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.location is not None


@dataclass(frozen=True, slots=True)
class TripLocations:
    """Resolved destination plus itinerary stops of a trip."""

    destination: Optional[StopResolution] = None
    stops: tuple[StopResolution, ...] = field(default_factory=tuple)

    @property
    def resolved(self) -> tuple[StopResolution, ...]:
        entries = ((self.destination,) if self.destination else ()) + self.stops
        return tuple(e for e in entries if e.is_resolved)

    @property
    def failures(self) -> tuple[StopResolution, ...]:
        entries = ((self.destination,) if self.destination else ()) + self.stops
        return tuple(e for e in entries if not e.is_resolved)
