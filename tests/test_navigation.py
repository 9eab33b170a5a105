"""Tests for navigation estimates."""

from __future__ import annotations

import asyncio

import pytest

from webplanner.domain.errors import CallCancelledError, RetryExhaustedError
from webplanner.domain.models import ItineraryItem, LegDistance, ResolvedLocation
from webplanner.services.address_resolver import AddressResolver
from webplanner.services.navigation import NavigationService, estimate_route

FUZIMIAO = ResolvedLocation(118.788, 32.0208, "夫子庙", city="南京")
ZHONGSHANLING = ResolvedLocation(118.848049, 32.058365, "中山陵", city="南京")


class TestEstimateRoute:
    def test_driving_estimate(self):
        estimate = estimate_route(FUZIMIAO, ZHONGSHANLING)
        # about 7 km straight line, stretched by the road factor
        assert 8.0 < estimate.distance_km < 10.5
        assert 12 <= estimate.duration_min <= 20
        assert estimate.approximate is False

    def test_walking_is_slower(self):
        driving = estimate_route(FUZIMIAO, ZHONGSHANLING, "driving")
        walking = estimate_route(FUZIMIAO, ZHONGSHANLING, "walking")
        assert walking.duration_s > driving.duration_s

    def test_same_point(self):
        estimate = estimate_route(FUZIMIAO, FUZIMIAO, "transit")
        assert estimate.distance_m == 0 and estimate.duration_s == 0

    def test_approximate_endpoint_flags_estimate(self):
        centre = ResolvedLocation(118.796877, 32.060255, "南京", approximate=True)
        assert estimate_route(centre, ZHONGSHANLING).approximate is True

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            estimate_route(FUZIMIAO, ZHONGSHANLING, "teleport")

    def test_service_exposes_estimate(self):
        assert NavigationService.estimate(FUZIMIAO, ZHONGSHANLING) == estimate_route(
            FUZIMIAO, ZHONGSHANLING
        )


def item(day, title, location):
    return ItineraryItem(day=day, title=title, location=location)


class TestLegDistances:
    def test_legs_between_located_items(self, fake_geocoder):
        geocoder = fake_geocoder(
            results={"南京夫子庙": FUZIMIAO, "南京中山陵": ZHONGSHANLING}
        )
        service = NavigationService(AddressResolver(geocoder))
        items = [
            item(1, "夫子庙", "夫子庙"),
            item(1, "休息", ""),
            item(1, "中山陵", "中山陵"),
            item(2, "再逛夫子庙", "夫子庙"),
        ]

        legs = asyncio.run(service.leg_distances(items, city_hint="南京"))

        assert [(l.origin, l.destination) for l in legs] == [
            ("夫子庙", "中山陵"),
            ("中山陵", "再逛夫子庙"),
        ]
        assert all(l.is_success for l in legs)
        # each distinct address is resolved once
        assert len(geocoder.calls) == 2

    def test_unresolvable_stop_becomes_error_leg(self, fake_geocoder):
        geocoder = fake_geocoder(
            results={"南京夫子庙": FUZIMIAO},
            default=RetryExhaustedError("down"),
        )
        service = NavigationService(AddressResolver(geocoder))
        items = [item(1, "夫子庙", "南京夫子庙"), item(1, "某地", "某不存在地点")]

        legs = asyncio.run(service.leg_distances(items))

        assert len(legs) == 1
        assert legs[0].estimate is None
        assert "某不存在地点" in legs[0].error

    def test_cancellation_propagates(self, fake_geocoder):
        geocoder = fake_geocoder(default=CallCancelledError("stop"))
        service = NavigationService(AddressResolver(geocoder))
        items = [item(1, "a", "南京夫子庙"), item(1, "b", "南京中山陵")]
        with pytest.raises(CallCancelledError):
            asyncio.run(service.leg_distances(items))

    def test_distance_between(self, fake_geocoder):
        geocoder = fake_geocoder(
            results={"南京夫子庙": FUZIMIAO, "南京中山陵": ZHONGSHANLING}
        )
        service = NavigationService(AddressResolver(geocoder))
        estimate = asyncio.run(service.distance_between("夫子庙", "中山陵", "walking", "南京"))
        assert estimate.mode == "walking"


def test_advice_skips_failed_legs_and_marks_estimates():
    ok = estimate_route(FUZIMIAO, ZHONGSHANLING)
    rough = estimate_route(
        FUZIMIAO, ResolvedLocation(118.79, 32.06, "南京", approximate=True)
    )
    lines = NavigationService.advice(
        [
            LegDistance("夫子庙", "中山陵", estimate=ok),
            LegDistance("中山陵", "某地", error="not found"),
            LegDistance("夫子庙", "南京", estimate=rough),
        ]
    )

    assert len(lines) == 2
    assert lines[0].startswith("从 夫子庙 到 中山陵")
    assert lines[1].endswith("（位置为估算）")
