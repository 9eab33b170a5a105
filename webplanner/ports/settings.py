"""Settings port - Access to user-owned preferences and API keys.

The proxy preference and provider keys belong to the user and change
only through explicit user action. They are read through this port,
never from ambient global storage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..settings import ApiKeys, UserPreferences


class SettingsProviderPort(Protocol):
    """Port for the settings collaborator.

    Implementations: adapters/settings/ (in-memory, JSON file)
    """

    def preferences(self) -> UserPreferences:
        """Return the current user preferences."""
        ...

    def api_keys(self) -> ApiKeys:
        """Return the configured provider API keys."""
        ...
