"""Tests for connectivity diagnostics."""

from __future__ import annotations

import asyncio

import httpx

from webplanner.services.network_diagnostics import NetworkDiagnostics

STATUSES = {
    "firebaseapp.com": 200,
    "api.deepseek.com": 401,
    "lbs.amap.com": 503,
}


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "unreachable.example":
        raise httpx.ConnectError("name resolution failed", request=request)
    return httpx.Response(STATUSES.get(request.url.host, 404))


def diagnostics_for(make_transport, router, **kwargs):
    ticks = iter(range(0, 1000, 50))
    return NetworkDiagnostics(
        make_transport(
            handler,
            proxy_client_factory=lambda url: httpx.AsyncClient(
                transport=httpx.MockTransport(handler)
            ),
        ),
        router,
        clock=lambda: next(ticks) / 1000,
        **kwargs,
    )


class TestConnection:
    def test_reachable_endpoint(self, make_transport, router):
        probe = asyncio.run(
            diagnostics_for(make_transport, router).test_connection("https://firebaseapp.com")
        )
        assert probe.success is True
        assert probe.status_code == 200
        assert probe.proxied is True
        assert probe.response_ms == 50.0

    def test_client_error_still_reachable(self, make_transport, router):
        probe = asyncio.run(
            diagnostics_for(make_transport, router).test_connection(
                "https://api.deepseek.com/v1/models"
            )
        )
        assert probe.success is True
        assert probe.status_code == 401
        assert probe.proxied is False

    def test_server_error_is_failure(self, make_transport, router):
        probe = asyncio.run(
            diagnostics_for(make_transport, router).test_connection("https://lbs.amap.com")
        )
        assert probe.success is False
        assert probe.status_code == 503

    def test_network_error_is_failure(self, make_transport, router):
        probe = asyncio.run(
            diagnostics_for(make_transport, router).test_connection(
                "https://unreachable.example"
            )
        )
        assert probe.success is False
        assert probe.status_code is None
        assert "name resolution failed" in probe.error

    def test_probe_is_a_single_head_request(self, make_transport, router, sleep):
        seen = []

        def recording(request):
            seen.append(request)
            return httpx.Response(503)

        diagnostics = NetworkDiagnostics(make_transport(recording), router)
        asyncio.run(diagnostics.test_connection("https://lbs.amap.com"))
        assert [r.method for r in seen] == ["HEAD"]
        assert sleep.delays == []


class TestNetworkStatus:
    def test_default_endpoints_degraded(self, make_transport, router, settings):
        settings.update_preferences(useProxyForAI=True)
        status = asyncio.run(diagnostics_for(make_transport, router).network_status())

        assert [p.url for p in status.probes] == [
            "https://firebaseapp.com",
            "https://api.deepseek.com/v1/models",
            "https://lbs.amap.com",
        ]
        assert status.overall == "degraded"
        assert status.proxy.enabled is True

    def test_custom_endpoints(self, make_transport, router):
        status = asyncio.run(
            diagnostics_for(make_transport, router).network_status(
                ["https://firebaseapp.com"]
            )
        )
        assert status.overall == "healthy"
        assert status.proxy.enabled is False
