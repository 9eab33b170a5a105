"""Tests for dependency wiring."""

from __future__ import annotations

import asyncio

import pytest

from webplanner.config import AppConfig, SettingsConfig
from webplanner.container import Container
from webplanner.ports.geocoding import GeocoderPort
from webplanner.ports.llm import ItineraryGeneratorPort
from webplanner.ports.transport import TransportPort
from webplanner.ports.weather import WeatherProviderPort
from webplanner.services import (
    AddressResolver,
    NavigationService,
    NetworkDiagnostics,
    RequestRouter,
    TripMapService,
    TripWeatherService,
)


@pytest.fixture
def container(tmp_path):
    config = AppConfig(settings=SettingsConfig(path=tmp_path / "settings.json"))
    container = Container.create_default(config)
    yield container
    asyncio.run(container.aclose())


def test_services_resolve(container):
    for service in (
        AddressResolver,
        NavigationService,
        NetworkDiagnostics,
        TripMapService,
        TripWeatherService,
    ):
        assert container.resolve(service) is container.resolve(service)


def test_providers_share_router_and_transport(container):
    transport = container.resolve(TransportPort)
    router = container.resolve(RequestRouter)

    for port in (GeocoderPort, ItineraryGeneratorPort, WeatherProviderPort):
        provider = container.resolve(port)
        assert provider.transport is transport
    assert transport.router is router


def test_unregistered_type():
    with pytest.raises(KeyError):
        Container().resolve(GeocoderPort)


def test_custom_registration_replaces_default(container, fake_geocoder):
    geocoder = fake_geocoder()
    container.register(GeocoderPort, lambda: geocoder)
    container.clear_singletons()
    assert container.resolve(AddressResolver).geocoder is geocoder
