"""Dependency injection container.

Wires the settings provider, request router, retrying transport,
provider adapters and services together. Factories run on first
resolution; everything is a singleton unless registered otherwise, so
all providers share one router and one connection pool.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        resolver = container.resolve(AddressResolver)

        # Testing
        container = Container()
        container.register(GeocoderPort, lambda: FakeGeocoder())
        geocoder = container.resolve(GeocoderPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            if singleton:
                self._singleton_types.add(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Args:
            port_type: The type to resolve.

        Returns:
            An instance of the requested type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        """Check if a type is registered.

        Args:
            port_type: The type to check.

        Returns:
            True if the type is registered.
        """
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons.

        Call this to completely reset the container.
        """
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    async def aclose(self) -> None:
        """Close the shared transport if it was ever created."""
        from .ports.transport import TransportPort

        transport = self._singletons.get(TransportPort)
        if transport is not None:
            await transport.aclose()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        This creates a fully configured container with all adapters
        registered and ready to use. Every provider shares one settings
        provider, one router and one transport.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.geocoding import AMapGeocoderAdapter
        from .adapters.http import RetryingTransport
        from .adapters.llm import DeepSeekItineraryAdapter
        from .adapters.rendering import FoliumMapRenderer
        from .adapters.settings import JsonFileSettingsProvider
        from .adapters.weather import AMapWeatherAdapter
        from .ports.geocoding import GeocoderPort
        from .ports.llm import ItineraryGeneratorPort
        from .ports.rendering import MapRendererPort
        from .ports.settings import SettingsProviderPort
        from .ports.transport import TransportPort
        from .ports.weather import WeatherProviderPort
        from .services import (
            AddressResolver,
            NavigationService,
            NetworkDiagnostics,
            RequestRouter,
            TripMapService,
            TripWeatherService,
        )

        config = config or get_config()
        container = cls(config=config)

        # Settings and routing
        container.register(
            SettingsProviderPort,
            lambda: JsonFileSettingsProvider(config.settings.path),
        )
        container.register(
            RequestRouter,
            lambda: RequestRouter(
                settings=container.resolve(SettingsProviderPort),
                classification=config.routing.classification(),
                default_proxy_host=config.routing.default_proxy_host,
                default_proxy_port=config.routing.default_proxy_port,
            ),
        )
        container.register(
            TransportPort,
            lambda: RetryingTransport(router=container.resolve(RequestRouter)),
        )

        # Providers
        container.register(
            GeocoderPort,
            lambda: AMapGeocoderAdapter(
                transport=container.resolve(TransportPort),
                settings=container.resolve(SettingsProviderPort),
                policy=config.retry.geocoding.to_policy(),
                config=config.geocoding,
            ),
        )
        container.register(
            ItineraryGeneratorPort,
            lambda: DeepSeekItineraryAdapter(
                transport=container.resolve(TransportPort),
                settings=container.resolve(SettingsProviderPort),
                policy=config.retry.llm.to_policy(),
                config=config.llm,
            ),
        )
        container.register(
            WeatherProviderPort,
            lambda: AMapWeatherAdapter(
                transport=container.resolve(TransportPort),
                settings=container.resolve(SettingsProviderPort),
                policy=config.retry.weather.to_policy(),
                config=config.weather,
            ),
        )

        # Rendering
        container.register(
            MapRendererPort,
            lambda: FoliumMapRenderer(),
        )

        # Services
        container.register(
            AddressResolver,
            lambda: AddressResolver(geocoder=container.resolve(GeocoderPort)),
        )
        container.register(
            NavigationService,
            lambda: NavigationService(resolver=container.resolve(AddressResolver)),
        )
        container.register(
            TripWeatherService,
            lambda: TripWeatherService(
                provider=container.resolve(WeatherProviderPort)
            ),
        )
        container.register(
            TripMapService,
            lambda: TripMapService(
                resolver=container.resolve(AddressResolver),
                map_renderer=container.resolve(MapRendererPort),
            ),
        )
        container.register(
            NetworkDiagnostics,
            lambda: NetworkDiagnostics(
                transport=container.resolve(TransportPort),
                router=container.resolve(RequestRouter),
                policy=config.retry.diagnostics.to_policy(),
                probe_urls=config.diagnostics.probe_urls,
            ),
        )

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
