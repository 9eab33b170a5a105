"""User-owned settings models.

These mirror the two records the planner front end persists
(``webplanner_settings`` and ``webplanner_api_keys``), camelCase keys
included, so a stored record can be validated as-is.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserPreferences(BaseModel):
    """Network preferences set by the user."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    use_proxy_for_ai: bool = Field(default=False, alias="useProxyForAI")
    proxy_host: str = Field(default="127.0.0.1", alias="proxyHost")
    proxy_port: int = Field(default=7890, alias="proxyPort", ge=1, le=65535)


class ApiKeys(BaseModel):
    """Provider API keys set by the user."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    llm_api_key: str = Field(default="", alias="llmApiKey")
    amap_api_key: str = Field(default="", alias="amapApiKey")
    weather_api_key: str = Field(default="", alias="weatherApiKey")

    @property
    def weather_key(self) -> str:
        """Weather calls fall back to the AMap key."""
        return self.weather_api_key or self.amap_api_key

    def masked(self) -> dict[str, str]:
        """Key status safe to log."""
        return {
            name: f"{value[:4]}..." if value else "<unset>"
            for name, value in self.model_dump().items()
        }
