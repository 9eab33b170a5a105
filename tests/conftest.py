"""Shared fixtures and fakes."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

import httpx
import pytest

from webplanner.adapters.http import RetryingTransport
from webplanner.adapters.settings import InMemorySettingsProvider
from webplanner.config import RoutingConfig
from webplanner.domain.models import ResolvedLocation
from webplanner.services.request_router import RequestRouter
from webplanner.settings import ApiKeys


class RecordingSleep:
    """Stands in for asyncio.sleep; records delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeGeocoder:
    """GeocoderPort double returning canned results per address."""

    def __init__(
        self,
        results: Optional[dict[str, Any]] = None,
        default: Any = None,
    ) -> None:
        self.results = results or {}
        self.default = default
        self.calls: list[tuple[str, str]] = []

    async def geocode(
        self, address: str, city: str = "", cancel: Optional[asyncio.Event] = None
    ) -> Optional[ResolvedLocation]:
        self.calls.append((address, city))
        outcome = self.results.get(address, self.default)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome



@pytest.fixture
def settings() -> InMemorySettingsProvider:
    return InMemorySettingsProvider(
        current_keys=ApiKeys(llmApiKey="sk-test", amapApiKey="amap-test")
    )


@pytest.fixture
def router(settings: InMemorySettingsProvider) -> RequestRouter:
    return RequestRouter(
        settings=settings, classification=RoutingConfig().classification()
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_transport(
    router: RequestRouter, sleep: RecordingSleep
) -> Callable[..., RetryingTransport]:
    """Build a transport whose direct client answers through ``handler``."""

    def build(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> RetryingTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return RetryingTransport(router=router, client=client, sleep=sleep, **kwargs)

    return build


@pytest.fixture
def fake_geocoder() -> type[FakeGeocoder]:
    return FakeGeocoder
