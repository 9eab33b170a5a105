"""Tests for the command line entry point."""

from __future__ import annotations

import pytest

from webplanner import cli
from webplanner.domain.errors import RetryExhaustedError
from webplanner.domain.models import ResolvedLocation


class TestParser:
    def test_route_defaults(self):
        args = cli.build_parser().parse_args(["route", "夫子庙", "中山陵"])
        assert args.command == "route"
        assert args.mode == "driving"
        assert args.city is None

    def test_itinerary_options(self):
        args = cli.build_parser().parse_args(
            [
                "itinerary", "南京",
                "--start", "2025-05-01", "--end", "2025-05-03",
                "--interest", "历史", "--interest", "美食",
            ]
        )
        assert args.interest == ["历史", "美食"]
        assert args.map is None

    def test_weather_forecast_flag(self):
        args = cli.build_parser().parse_args(["weather", "南京", "--forecast"])
        assert args.forecast is True
        assert cli.build_parser().parse_args(["weather", "南京"]).forecast is False

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_every_command_dispatched(self):
        parser = cli.build_parser()
        subparsers = next(
            a for a in parser._actions if a.dest == "command"
        )
        assert set(subparsers.choices) == set(cli.COMMANDS)


class TestMain:
    @pytest.fixture(autouse=True)
    def isolated_settings(self, tmp_path, monkeypatch):
        from webplanner.config import reset_config

        monkeypatch.setenv("WEBPLANNER_SETTINGS_PATH", str(tmp_path / "settings.json"))
        monkeypatch.setattr(cli, "configure_logging", lambda config: None)
        reset_config()
        yield
        reset_config()

    def patch_geocoder(self, monkeypatch, outcome):
        from webplanner.adapters.geocoding import AMapGeocoderAdapter

        async def geocode(self, address, city="", cancel=None):
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        monkeypatch.setattr(AMapGeocoderAdapter, "geocode", geocode)

    def test_resolve_prints_coordinates(self, monkeypatch, capsys):
        self.patch_geocoder(
            monkeypatch,
            ResolvedLocation(
                longitude=118.848049,
                latitude=32.058365,
                normalized_address="江苏省南京市玄武区中山陵",
                city="南京市",
            ),
        )

        assert cli.main(["resolve", "中山陵", "--city", "南京"]) == 0
        assert "118.848049,32.058365" in capsys.readouterr().out

    def test_fallback_is_marked_approximate(self, monkeypatch, capsys):
        self.patch_geocoder(monkeypatch, RetryExhaustedError("down"))

        assert cli.main(["resolve", "南京夫子庙"]) == 0
        assert "位置为估算" in capsys.readouterr().out

    def test_domain_error_reported_to_stderr(self, monkeypatch, capsys):
        self.patch_geocoder(monkeypatch, RetryExhaustedError("down"))

        assert cli.main(["resolve", "无名小岛"]) == 1
        assert "未找到地点：无名小岛" in capsys.readouterr().err

    def test_blank_address_is_a_usage_error(self, monkeypatch):
        self.patch_geocoder(monkeypatch, None)
        assert cli.main(["resolve", "   "]) == 2
