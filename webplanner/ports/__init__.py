"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the application core and external
adapters. They enable dependency injection and make the system testable.

This module follows the Hexagonal Architecture pattern:
- Input ports: How the application is driven (services)
- Output ports: How the application drives external systems (adapters)
"""

from .geocoding import GeocoderPort
from .llm import ItineraryGeneratorPort
from .rendering import MapRendererPort
from .settings import SettingsProviderPort
from .transport import TransportPort
from .weather import WeatherProviderPort

__all__ = [
    # Remote calls
    "TransportPort",
    # Providers
    "GeocoderPort",
    "ItineraryGeneratorPort",
    "WeatherProviderPort",
    # Rendering
    "MapRendererPort",
    # Settings
    "SettingsProviderPort",
]
