"""Tests for domain models and errors."""

from __future__ import annotations

import pytest

from webplanner.domain.errors import RetryExhaustedError, TerminalError, WebPlannerError
from webplanner.domain.models import (
    EndpointClassification,
    EndpointProbe,
    GeoLocation,
    NetworkStatus,
    ProxyConfig,
    ResolvedLocation,
    RetryPolicy,
    RouteCategory,
)


class TestRetryPolicy:
    def test_defaults(self):
        policy = RetryPolicy()
        assert (policy.max_attempts, policy.base_delay_ms) == (3, 1000)
        assert (policy.max_delay_ms, policy.timeout_ms) == (10000, 60000)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"base_delay_ms": -1},
            {"base_delay_ms": 5000, "max_delay_ms": 1000},
            {"timeout_ms": 0},
        ],
    )
    def test_invalid_policies_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_delay_doubles_then_caps(self):
        policy = RetryPolicy(max_attempts=5, base_delay_ms=100, max_delay_ms=500)
        assert [policy.delay_ms(n) for n in range(1, 6)] == [100, 200, 400, 500, 500]

    def test_max_total_ms(self):
        policy = RetryPolicy(
            max_attempts=3, base_delay_ms=100, max_delay_ms=1000, timeout_ms=500
        )
        assert policy.max_total_ms == 3 * 500 + 100 + 200


class TestEndpointClassification:
    def test_overlapping_classes_rejected(self):
        with pytest.raises(ValueError):
            EndpointClassification(
                always_proxy=("googleapis.com",),
                ai_providers=("generativelanguage.googleapis.com",),
            )

    def test_unmatched_host_is_direct(self):
        table = EndpointClassification(ai_providers=("api.deepseek.com",))
        assert table.classify("restapi.amap.com") is RouteCategory.DIRECT

    def test_trailing_dot_ignored(self):
        table = EndpointClassification(ai_providers=("api.deepseek.com",))
        assert table.classify("api.deepseek.com.") is RouteCategory.AI_PROVIDER


class TestLocations:
    @pytest.mark.parametrize("lat,lng", [(91, 0), (-91, 0), (0, 181), (0, -181)])
    def test_out_of_range_rejected(self, lat, lng):
        with pytest.raises(ValueError):
            GeoLocation(latitude=lat, longitude=lng)

    def test_resolved_location_validates(self):
        with pytest.raises(ValueError):
            ResolvedLocation(longitude=200, latitude=32, normalized_address="x")

    def test_location_view(self):
        loc = ResolvedLocation(longitude=118.8, latitude=32.06, normalized_address="南京")
        assert loc.location == GeoLocation(latitude=32.06, longitude=118.8)


class TestNetworkStatus:
    @staticmethod
    def status(*results: bool) -> NetworkStatus:
        return NetworkStatus(
            proxy=ProxyConfig(),
            probes=tuple(EndpointProbe(url=f"u{i}", success=r) for i, r in enumerate(results)),
        )

    def test_overall(self):
        assert self.status().overall == "unknown"
        assert self.status(True, True, True).overall == "healthy"
        assert self.status(True, True, False).overall == "degraded"
        assert self.status(True, False).overall == "degraded"
        assert self.status(True, False, False).overall == "unhealthy"


class TestErrors:
    def test_str_includes_cause(self):
        error = WebPlannerError("lookup failed", cause=ValueError("bad"))
        assert str(error) == "lookup failed: bad"

    def test_terminal_auth_failure(self):
        assert TerminalError("x", status_code=403).is_auth_failure
        assert TerminalError("x", credentials_rejected=True).is_auth_failure
        assert not TerminalError("x", status_code=404).is_auth_failure

    def test_exhausted_exposes_last_error(self):
        cause = TimeoutError("slow")
        assert RetryExhaustedError("x", cause=cause).last_error is cause
