"""Itinerary generation port."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import GeneratedItinerary, TripRequest


class ItineraryGeneratorPort(Protocol):
    """Port for LLM-backed itinerary generation.

    Implementation: adapters/llm/deepseek_adapter.py
    """

    async def generate(
        self, trip: TripRequest, cancel: Optional[asyncio.Event] = None
    ) -> GeneratedItinerary:
        """Generate a day-by-day itinerary for a trip."""
        ...

    async def validate_api_key(
        self, cancel: Optional[asyncio.Event] = None
    ) -> list[str]:
        """Check the configured key; returns the models it can access."""
        ...
