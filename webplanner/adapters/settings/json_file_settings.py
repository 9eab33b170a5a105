"""JSON file settings provider.

Reads a file shaped like the planner's browser storage:

    {
      "webplanner_settings": {"useProxyForAI": true, "proxyPort": 7890},
      "webplanner_api_keys": {"llmApiKey": "...", "amapApiKey": "..."}
    }

The file is re-read on every access so edits made by the settings UI
take effect on the next call without a restart.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ...settings import ApiKeys, UserPreferences

SETTINGS_KEY = "webplanner_settings"
API_KEYS_KEY = "webplanner_api_keys"


@dataclass
class JsonFileSettingsProvider:
    """Settings provider backed by a JSON file.

    A missing file yields defaults. An unreadable or invalid record also
    yields defaults and is logged: routing must keep working (direct
    mode) when the stored preferences are corrupt.

    Attributes:
        path: Location of the settings file
    """

    path: Path

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _read_section(self, key: str) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            self._logger.warning(
                "Settings file unreadable, using defaults",
                extra={"path": str(self.path), "error": str(e)},
            )
            return {}
        section = data.get(key, {}) if isinstance(data, dict) else {}
        return section if isinstance(section, dict) else {}

    def preferences(self) -> UserPreferences:
        try:
            return UserPreferences.model_validate(self._read_section(SETTINGS_KEY))
        except ValidationError as e:
            self._logger.warning(
                "Invalid stored preferences, using defaults",
                extra={"path": str(self.path), "error": str(e)},
            )
            return UserPreferences()

    def api_keys(self) -> ApiKeys:
        try:
            return ApiKeys.model_validate(self._read_section(API_KEYS_KEY))
        except ValidationError as e:
            self._logger.warning(
                "Invalid stored API keys, using defaults",
                extra={"path": str(self.path), "error": str(e)},
            )
            return ApiKeys()

    def save(self, preferences: UserPreferences, keys: ApiKeys) -> None:
        """Persist both records in the storage shape.

        Only fields that were set are written, so unset proxy fields keep
        following the configured defaults after a reload.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            SETTINGS_KEY: preferences.model_dump(by_alias=True, exclude_unset=True),
            API_KEYS_KEY: keys.model_dump(by_alias=True, exclude_unset=True),
        }
        self.path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        self._logger.info("Settings saved", extra={"path": str(self.path)})
