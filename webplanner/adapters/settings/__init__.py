"""Settings adapters - Implementations of SettingsProviderPort.

Available implementations:
- InMemorySettingsProvider: process-local settings
- JsonFileSettingsProvider: settings persisted to a JSON file
"""

from .json_file_settings import JsonFileSettingsProvider
from .memory_settings import InMemorySettingsProvider

__all__ = ["InMemorySettingsProvider", "JsonFileSettingsProvider"]
