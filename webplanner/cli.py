"""WebPlanner command line.

Usage:
    python -m webplanner resolve "南京夫子庙" [--city 南京]
    python -m webplanner route "夫子庙" "中山陵" [--mode walking] [--city 南京]
    python -m webplanner weather "南京夫子庙" "上海外滩" [--forecast]
    python -m webplanner itinerary 南京 --start 2025-05-01 --end 2025-05-03 [--map trip.html]
    python -m webplanner check-key
    python -m webplanner network [URL ...]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from .config import get_config
from .container import Container
from .domain.errors import WebPlannerError
from .domain.models import TripPreferences, TripRequest
from .observability import configure_logging
from .ports.llm import ItineraryGeneratorPort
from .services import (
    AddressResolver,
    NavigationService,
    NetworkDiagnostics,
    TripMapService,
    TripWeatherService,
    describe_error,
)

logger = logging.getLogger(__name__)

Command = Callable[[Container, argparse.Namespace], Awaitable[int]]


async def cmd_resolve(container: Container, args: argparse.Namespace) -> int:
    """Resolve one address."""
    resolver: AddressResolver = container.resolve(AddressResolver)
    location = await resolver.resolve(args.address, args.city or "")
    marker = "≈" if location.approximate else "✓"
    print(
        f"{marker} {location.normalized_address}: "
        f"{location.longitude:.6f},{location.latitude:.6f}"
    )
    if location.approximate:
        print(f"  位置为估算（{location.city}市中心）")
    return 0


async def cmd_route(container: Container, args: argparse.Namespace) -> int:
    """Estimate one leg."""
    navigation: NavigationService = container.resolve(NavigationService)
    estimate = await navigation.distance_between(
        args.start, args.end, args.mode, args.city or ""
    )
    note = "（位置为估算）" if estimate.approximate else ""
    print(
        f"{args.start} → {args.end}: {estimate.distance_km}公里，"
        f"约{estimate.duration_min}分钟{note}"
    )
    return 0


async def cmd_weather(container: Container, args: argparse.Namespace) -> int:
    """Current weather, or the forecast, for each place."""
    service: TripWeatherService = container.resolve(TripWeatherService)
    if args.forecast:
        for place in args.places:
            city = service.city_extractor(place)
            print(f"{city}:")
            for day in await service.forecast(city):
                print(
                    f"  {day.icon} {day.date} 周{day.week} {day.day_weather}/"
                    f"{day.night_weather} {day.temperature} {day.wind}"
                )
        return 0

    failed = 0
    for entry in await service.for_locations(args.places):
        if entry.report is None:
            failed += 1
            print(f"✗ {entry.location}: {entry.error}")
            continue
        r = entry.report
        print(
            f"{r.icon} {r.city} {r.weather} {r.temperature} "
            f"{r.wind} 湿度{r.humidity} ({r.report_time})"
        )
    return 1 if failed else 0


async def cmd_itinerary(container: Container, args: argparse.Namespace) -> int:
    """Generate an itinerary, then locate and optionally map it."""
    generator: ItineraryGeneratorPort = container.resolve(ItineraryGeneratorPort)
    trip = TripRequest(
        title=args.title or f"{args.destination}之旅",
        destination=args.destination,
        start_date=args.start,
        end_date=args.end,
        travelers=args.travelers,
        budget=args.budget,
        preferences=TripPreferences(
            interests=tuple(args.interest or ()), pace=args.pace
        ),
    )
    itinerary = await generator.generate(trip)
    if itinerary.is_sample:
        print("⚠ 模型返回的内容无法解析，以下为示例行程")

    for item in itinerary.items:
        print(f"第{item.day}天 {item.time} {item.title} @ {item.location}")

    navigation: NavigationService = container.resolve(NavigationService)
    legs = await navigation.leg_distances(
        itinerary.items, city_hint=navigation.resolver.city_scope(args.destination)
    )
    for line in navigation.advice(legs):
        print(f"  {line}")

    if args.map:
        trip_map: TripMapService = container.resolve(TripMapService)
        located = await trip_map.locate_trip(args.destination, itinerary.items)
        for failure in located.failures:
            print(f"✗ {failure.label}: {failure.error}")
        path = trip_map.render(located, Path(args.map))
        print(f"地图已保存: {path}")
    return 0


async def cmd_check_key(container: Container, args: argparse.Namespace) -> int:
    """List models reachable with the configured LLM key."""
    generator: ItineraryGeneratorPort = container.resolve(ItineraryGeneratorPort)
    models = await generator.validate_api_key()
    print("API密钥有效，可用模型: " + (", ".join(models) or "无"))
    return 0


async def cmd_network(container: Container, args: argparse.Namespace) -> int:
    """Probe provider endpoints."""
    diagnostics: NetworkDiagnostics = container.resolve(NetworkDiagnostics)
    status = await diagnostics.network_status(args.urls or None)
    proxy = status.proxy
    print(f"代理: {'启用 ' + proxy.url if proxy.enabled else '未启用'}")
    for probe in status.probes:
        mark = "✓" if probe.success else "✗"
        route = "代理" if probe.proxied else "直连"
        detail = probe.status_code if probe.error is None else probe.error
        print(f"{mark} {probe.url} [{route}] {detail} {probe.response_ms}ms")
    print(f"总体状态: {status.overall}")
    return 0 if status.overall == "healthy" else 1


COMMANDS: dict[str, Command] = {
    "resolve": cmd_resolve,
    "route": cmd_route,
    "weather": cmd_weather,
    "itinerary": cmd_itinerary,
    "check-key": cmd_check_key,
    "network": cmd_network,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webplanner", description="WebPlanner travel tools"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # resolve
    p = subparsers.add_parser("resolve", help="Resolve a place to coordinates")
    p.add_argument("address", help="Free-text place description")
    p.add_argument("--city", help="Explicit city scope")

    # route
    p = subparsers.add_parser("route", help="Estimate travel between two places")
    p.add_argument("start")
    p.add_argument("end")
    p.add_argument(
        "--mode", choices=("driving", "transit", "walking"), default="driving"
    )
    p.add_argument("--city", help="Explicit city scope")

    # weather
    p = subparsers.add_parser("weather", help="Current weather")
    p.add_argument("places", nargs="+")
    p.add_argument(
        "--forecast", action="store_true", help="Multi-day forecast instead"
    )

    # itinerary
    p = subparsers.add_parser("itinerary", help="Generate a trip itinerary")
    p.add_argument("destination")
    p.add_argument("--start", required=True, help="Start date (YYYY-MM-DD)")
    p.add_argument("--end", required=True, help="End date (YYYY-MM-DD)")
    p.add_argument("--title")
    p.add_argument("--travelers", type=int, default=1)
    p.add_argument("--budget", type=float)
    p.add_argument("--interest", action="append", help="Repeatable")
    p.add_argument(
        "--pace", choices=("slow", "moderate", "fast"), default="moderate"
    )
    p.add_argument("--map", help="Write an HTML map of the trip here")

    # check-key
    subparsers.add_parser("check-key", help="Validate the LLM API key")

    # network
    p = subparsers.add_parser("network", help="Connectivity report")
    p.add_argument("urls", nargs="*")

    return parser


async def _run(command: Command, args: argparse.Namespace) -> int:
    container = Container.create_default()
    try:
        return await command(container, args)
    finally:
        await container.aclose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_config().observability)

    try:
        return asyncio.run(_run(COMMANDS[args.command], args))
    except WebPlannerError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"❌ {describe_error(e)}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
