"""Typed domain errors for the WebPlanner remote-call layer.

Every failure path of the transport, the router-backed provider clients
and the address resolver surfaces one of these types, so callers can tell
a configuration problem (terminal) from a transient one (exhausted
retries) or a caller-initiated abort (cancelled).

All errors inherit from WebPlannerError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import CallAttempt


@dataclass
class WebPlannerError(Exception):
    """Base error for the WebPlanner domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class TerminalError(WebPlannerError):
    """A remote call failed in a way retrying will not fix.

    Raised for HTTP 4xx responses, provider-level credential errors and
    malformed requests. Never retried.

    Attributes:
        url: Target of the failed call
        status_code: HTTP status, None when the request never left
        detail: Provider-supplied error detail when available
    """

    url: str = ""
    status_code: Optional[int] = None
    detail: str = ""
    credentials_rejected: bool = False

    @property
    def is_auth_failure(self) -> bool:
        """Check if the provider rejected the credentials."""
        return self.credentials_rejected or self.status_code in (401, 403)


@dataclass
class ServerError(WebPlannerError):
    """A retryable HTTP failure (status >= 500).

    Only surfaced wrapped inside RetryExhaustedError.
    """

    url: str = ""
    status_code: int = 500


@dataclass
class RetryExhaustedError(WebPlannerError):
    """All attempts were consumed by retryable failures.

    Attributes:
        url: Target of the failed call
        attempts: Record of every attempt made
    """

    url: str = ""
    attempts: tuple[CallAttempt, ...] = field(default_factory=tuple)

    @property
    def last_error(self) -> Optional[Exception]:
        """The transient error observed on the final attempt."""
        return self.cause


@dataclass
class CallCancelledError(WebPlannerError):
    """The caller cancelled an in-flight call.

    Distinct from both terminal and exhausted failures: nothing went
    wrong remotely, the caller stopped waiting.

    Attributes:
        url: Target of the cancelled call
        attempts_made: Attempts started before cancellation
    """

    url: str = ""
    attempts_made: int = 0


@dataclass
class ResolutionFailedError(WebPlannerError):
    """Both remote geocoding and the fallback lookup failed.

    Attributes:
        query: The original address the caller asked for
        city: The city scope used for the lookup
    """

    query: str = ""
    city: str = ""


@dataclass
class ConfigurationError(WebPlannerError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None


@dataclass
class ProviderResponseError(WebPlannerError):
    """A provider answered successfully but the payload was unusable.

    Attributes:
        provider: Name of the provider
    """

    provider: str = ""


@dataclass
class RenderingError(WebPlannerError):
    """Map rendering failed.

    Attributes:
        output_path: Path where rendering was attempted
        renderer_type: Type of renderer that failed
    """

    output_path: Optional[str] = None
    renderer_type: str = ""
