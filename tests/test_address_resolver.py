"""Tests for the address resolver."""

from __future__ import annotations

import asyncio

import pytest

from webplanner.domain.errors import (
    CallCancelledError,
    ConfigurationError,
    ResolutionFailedError,
    RetryExhaustedError,
    TerminalError,
)
from webplanner.domain.models import ResolvedLocation
from webplanner.geo.fallback_table import FALLBACK_TABLE
from webplanner.services.address_resolver import AddressResolver, scoped_address

ZHONGSHANLING = ResolvedLocation(
    longitude=118.848049,
    latitude=32.058365,
    normalized_address="江苏省南京市玄武区中山陵",
    city="南京市",
)


def exhausted() -> RetryExhaustedError:
    return RetryExhaustedError("geocode failed", url="https://restapi.amap.com")


class TestRemoteResolution:
    def test_precise_result_inside_nanjing(self, fake_geocoder):
        geocoder = fake_geocoder(default=ZHONGSHANLING)
        resolver = AddressResolver(geocoder)

        location = asyncio.run(resolver.resolve("中山陵", "南京市"))

        assert location.approximate is False
        assert 118.5 <= location.longitude <= 119.0
        assert 31.5 <= location.latitude <= 32.5
        assert geocoder.calls == [("南京市中山陵", "南京市")]

    def test_city_extracted_when_no_hint(self, fake_geocoder):
        geocoder = fake_geocoder(default=ZHONGSHANLING)
        asyncio.run(AddressResolver(geocoder).resolve("南京中山陵"))
        assert geocoder.calls == [("南京中山陵", "南京")]

    def test_unknown_city_resolves_unscoped(self, fake_geocoder):
        geocoder = fake_geocoder(default=ZHONGSHANLING)
        asyncio.run(AddressResolver(geocoder).resolve("  鼓浪屿  "))
        assert geocoder.calls == [("鼓浪屿", "")]

    def test_single_remote_call_per_resolution(self, fake_geocoder):
        geocoder = fake_geocoder(default=exhausted())
        with pytest.raises(ResolutionFailedError):
            asyncio.run(AddressResolver(geocoder).resolve("某不存在地点"))
        assert len(geocoder.calls) == 1


class TestFallback:
    @pytest.mark.parametrize(
        "failure",
        [
            exhausted(),
            TerminalError("bad key", status_code=200, credentials_rejected=True),
            ConfigurationError("no key", setting_name="amapApiKey"),
            None,
        ],
    )
    def test_fallback_is_approximate(self, fake_geocoder, failure):
        geocoder = fake_geocoder(default=failure)
        location = asyncio.run(AddressResolver(geocoder).resolve("南京夫子庙"))

        point = FALLBACK_TABLE["南京"]
        assert location.approximate is True
        assert (location.longitude, location.latitude) == (
            point.longitude,
            point.latitude,
        )
        assert location.normalized_address == "南京"
        assert location.city == "南京"

    def test_fallback_uses_city_hint(self, fake_geocoder):
        geocoder = fake_geocoder(default=exhausted())
        location = asyncio.run(AddressResolver(geocoder).resolve("夫子庙", "南京市"))
        assert location.approximate is True
        assert location.city == "南京"

    def test_miss_raises_resolution_failed(self, fake_geocoder):
        geocoder = fake_geocoder(default=exhausted())

        with pytest.raises(ResolutionFailedError) as excinfo:
            asyncio.run(AddressResolver(geocoder).resolve("某不存在地点", ""))

        assert excinfo.value.query == "某不存在地点"
        assert isinstance(excinfo.value.cause, RetryExhaustedError)

    def test_never_returns_unflagged_origin(self, fake_geocoder):
        # the adapter turns (0, 0) into "no result"; the resolver must not
        # invent one either
        geocoder = fake_geocoder(default=None)
        with pytest.raises(ResolutionFailedError):
            asyncio.run(AddressResolver(geocoder).resolve("无名小岛"))


class TestErrors:
    def test_empty_address_rejected(self, fake_geocoder):
        resolver = AddressResolver(fake_geocoder())
        with pytest.raises(ValueError):
            asyncio.run(resolver.resolve("   "))

    def test_cancellation_skips_fallback(self, fake_geocoder):
        geocoder = fake_geocoder(default=CallCancelledError("cancelled"))
        with pytest.raises(CallCancelledError):
            asyncio.run(AddressResolver(geocoder).resolve("南京夫子庙"))


class TestResolveMany:
    def test_failures_are_isolated(self, fake_geocoder):
        geocoder = fake_geocoder(
            results={"南京中山陵": ZHONGSHANLING}, default=exhausted()
        )
        results = asyncio.run(
            AddressResolver(geocoder).resolve_many(
                ["南京中山陵", "上海外滩", "某不存在地点"]
            )
        )

        assert results[0] == ZHONGSHANLING
        assert isinstance(results[1], ResolvedLocation) and results[1].approximate
        assert isinstance(results[2], ResolutionFailedError)


def test_scoped_address_does_not_duplicate_city():
    assert scoped_address("南京中山陵", "南京") == "南京中山陵"
    assert scoped_address("中山陵", "南京") == "南京中山陵"
    assert scoped_address("中山陵", "") == "中山陵"


def test_city_scope_is_empty_without_a_match(fake_geocoder):
    resolver = AddressResolver(fake_geocoder())
    assert resolver.city_scope(" 南京夫子庙 ") == "南京"
    assert resolver.city_scope("云南大理古城") == ""
    assert resolver.city_scope("") == ""
