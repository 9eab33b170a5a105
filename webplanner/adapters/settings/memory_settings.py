"""In-memory settings provider.

Holds preferences and keys for the lifetime of the process. The CLI and
tests use it; updates replace the stored model atomically, so a reader
never sees a half-applied change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel

from ...settings import ApiKeys, UserPreferences

M = TypeVar("M", bound=BaseModel)


def _merged(model: M, changes: dict[str, Any]) -> M:
    """Copy of ``model`` with ``changes`` applied, keeping unset fields unset."""
    aliases = {
        name: info.alias or name for name, info in type(model).model_fields.items()
    }
    data = model.model_dump(by_alias=True, exclude_unset=True)
    data.update({aliases.get(key, key): value for key, value in changes.items()})
    return type(model).model_validate(data)


@dataclass
class InMemorySettingsProvider:
    """Settings provider backed by plain attributes.

    Attributes:
        current_preferences: Preferences returned by preferences()
        current_keys: Keys returned by api_keys()
    """

    current_preferences: UserPreferences = field(default_factory=UserPreferences)
    current_keys: ApiKeys = field(default_factory=ApiKeys)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def preferences(self) -> UserPreferences:
        return self.current_preferences

    def api_keys(self) -> ApiKeys:
        return self.current_keys

    def update_preferences(self, **changes: Any) -> UserPreferences:
        """Apply preference changes (snake_case or camelCase names)."""
        self.current_preferences = _merged(self.current_preferences, changes)
        self._logger.info(
            "Preferences updated",
            extra={"use_proxy_for_ai": self.current_preferences.use_proxy_for_ai},
        )
        return self.current_preferences

    def update_keys(self, **changes: Any) -> ApiKeys:
        """Apply API key changes (snake_case or camelCase names)."""
        self.current_keys = _merged(self.current_keys, changes)
        self._logger.info("API keys updated", extra=self.current_keys.masked())
        return self.current_keys
