"""Request router - proxy or direct, per destination host.

Providers differ in how they are reachable behind network boundaries,
so the decision is made per host class rather than globally:

- session/auth backends are always proxied
- LLM providers are proxied only when the user enabled ``useProxyForAI``
- everything else goes direct
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from ..domain.models import EndpointClassification, ProxyConfig, RouteCategory
from ..ports.settings import SettingsProviderPort


@dataclass
class RequestRouter:
    """Host-based routing decisions.

    Decisions are a pure function of the URL and the current preference
    state read through the settings provider.

    Attributes:
        settings: Source of the user's proxy preference
        classification: Host-suffix table
    """

    settings: SettingsProviderPort
    classification: EndpointClassification = field(
        default_factory=EndpointClassification
    )
    default_proxy_host: str = "127.0.0.1"
    default_proxy_port: int = 7890

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def classify(self, url: str) -> RouteCategory:
        """Return the routing class of a URL.

        Unparseable or host-less input classifies as DIRECT.
        """
        try:
            host = urlsplit(url).hostname
        except ValueError:
            self._logger.warning("Unparseable URL, routing direct", extra={"url": url})
            return RouteCategory.DIRECT
        if not host:
            return RouteCategory.DIRECT
        return self.classification.classify(host)

    def should_use_proxy(self, url: str) -> bool:
        """Decide whether a call to ``url`` goes through the proxy.

        Fails open: a URL that cannot be parsed is routed direct instead
        of raising, so a routing problem never blocks the call.
        """
        category = self.classify(url)

        if category is RouteCategory.ALWAYS_PROXY:
            decision = True
        elif category is RouteCategory.AI_PROVIDER:
            decision = self.settings.preferences().use_proxy_for_ai
        else:
            decision = False

        self._logger.debug(
            "Routing decision",
            extra={"url": url, "category": category.name, "proxied": decision},
        )
        return decision

    def get_proxy_config(self) -> ProxyConfig:
        """Current proxy parameters.

        ``enabled`` mirrors the user's preference; host and port fall back
        to the local defaults when unset.
        """
        prefs = self.settings.preferences()
        explicit = prefs.model_fields_set
        return ProxyConfig(
            enabled=prefs.use_proxy_for_ai,
            host=prefs.proxy_host if "proxy_host" in explicit else self.default_proxy_host,
            port=prefs.proxy_port if "proxy_port" in explicit else self.default_proxy_port,
        )
