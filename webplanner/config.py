"""Centralized configuration using Pydantic Settings.

Single source of truth for endpoints, routing tables and retry policies
of every call class. User-owned state (proxy preference, API keys) is
not configuration; it comes from the settings provider
(see ports/settings.py).

Configuration can be overridden via environment variables:
- WEBPLANNER_ROUTING_DEFAULT_PROXY_PORT=1080
- WEBPLANNER_RETRY_LLM_MAX_ATTEMPTS=5
- WEBPLANNER_GEO_BASE_URL=https://restapi.amap.com/v3/geocode/geo
- WEBPLANNER_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import EndpointClassification, RetryPolicy


class RoutingConfig(BaseSettings):
    """Host classification and proxy defaults.

    Environment variables prefixed with WEBPLANNER_ROUTING_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_ROUTING_")

    always_proxy_domains: tuple[str, ...] = (
        "firebaseapp.com",
        "firebaseio.com",
        "googleapis.com",
        "gstatic.com",
    )
    ai_domains: tuple[str, ...] = (
        "api.deepseek.com",
        "api.openai.com",
        "dashscope.aliyuncs.com",
        "aip.baidubce.com",
    )
    default_proxy_host: str = "127.0.0.1"
    default_proxy_port: int = 7890

    def classification(self) -> EndpointClassification:
        """Build the endpoint classification table."""
        return EndpointClassification(
            always_proxy=tuple(d.lower() for d in self.always_proxy_domains),
            ai_providers=tuple(d.lower() for d in self.ai_domains),
        )


class RetryPolicyConfig(BaseSettings):
    """Retry policy of one call class."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay_ms: int = Field(default=1000, ge=0)
    max_delay_ms: int = 10000
    timeout_ms: int = Field(default=60000, gt=0)

    @model_validator(mode="after")
    def _check_delays(self) -> RetryPolicyConfig:
        if self.base_delay_ms > self.max_delay_ms:
            raise ValueError("base_delay_ms must not exceed max_delay_ms")
        return self

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            timeout_ms=self.timeout_ms,
        )


class LLMRetryConfig(RetryPolicyConfig):
    """LLM chat completions: slow, worth waiting for.

    Environment variables prefixed with WEBPLANNER_RETRY_LLM_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_RETRY_LLM_")


class GeocodingRetryConfig(RetryPolicyConfig):
    """Geocoding sits on a user-interactive path: few attempts, short timeout.

    Environment variables prefixed with WEBPLANNER_RETRY_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_RETRY_GEO_")

    max_attempts: int = Field(default=2, ge=1)
    base_delay_ms: int = Field(default=200, ge=0)
    max_delay_ms: int = 1000
    timeout_ms: int = Field(default=5000, gt=0)


class WeatherRetryConfig(RetryPolicyConfig):
    """Environment variables prefixed with WEBPLANNER_RETRY_WEATHER_."""

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_RETRY_WEATHER_")

    max_attempts: int = Field(default=2, ge=1)
    base_delay_ms: int = Field(default=500, ge=0)
    max_delay_ms: int = 2000
    timeout_ms: int = Field(default=10000, gt=0)


class DiagnosticsRetryConfig(RetryPolicyConfig):
    """Connection probes report the first outcome, they never retry.

    Environment variables prefixed with WEBPLANNER_RETRY_DIAG_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_RETRY_DIAG_")

    max_attempts: int = Field(default=1, ge=1)
    base_delay_ms: int = Field(default=0, ge=0)
    max_delay_ms: int = 0
    timeout_ms: int = Field(default=10000, gt=0)


class RetryConfig(BaseSettings):
    """Retry policies per call class."""

    llm: LLMRetryConfig = Field(default_factory=LLMRetryConfig)
    geocoding: GeocodingRetryConfig = Field(default_factory=GeocodingRetryConfig)
    weather: WeatherRetryConfig = Field(default_factory=WeatherRetryConfig)
    diagnostics: DiagnosticsRetryConfig = Field(
        default_factory=DiagnosticsRetryConfig
    )


class GeocodingConfig(BaseSettings):
    """Geocoding provider configuration.

    Environment variables prefixed with WEBPLANNER_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_GEO_")

    base_url: str = "https://restapi.amap.com/v3/geocode/geo"


class LLMConfig(BaseSettings):
    """Itinerary generation provider configuration.

    Environment variables prefixed with WEBPLANNER_LLM_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_LLM_")

    base_url: str = "https://api.deepseek.com/v1"
    model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 4000
    system_prompt: str = (
        "你是一个专业的旅行规划师，擅长根据用户需求制定详细、实用的旅行行程。"
        "请以JSON格式返回生成的行程数据."
    )


class WeatherConfig(BaseSettings):
    """Weather provider configuration.

    Environment variables prefixed with WEBPLANNER_WEATHER_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_WEATHER_")

    base_url: str = "https://restapi.amap.com/v3/weather/weatherInfo"


class DiagnosticsConfig(BaseSettings):
    """Endpoints probed by the network status report.

    Environment variables prefixed with WEBPLANNER_DIAG_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_DIAG_")

    probe_urls: tuple[str, ...] = (
        "https://firebaseapp.com",
        "https://api.deepseek.com/v1/models",
        "https://lbs.amap.com",
    )


class SettingsConfig(BaseSettings):
    """Location of the user settings file.

    Environment variables prefixed with WEBPLANNER_SETTINGS_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_SETTINGS_")

    path: Path = Field(
        default_factory=lambda: Path.home() / ".webplanner" / "settings.json"
    )


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with WEBPLANNER_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    Sub-configurations can be accessed via attributes:

        config = get_config()
        print(config.routing.ai_domains)
        print(config.retry.geocoding.to_policy())

    Environment variables prefixed with WEBPLANNER_.
    """

    model_config = SettingsConfigDict(env_prefix="WEBPLANNER_")

    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    settings: SettingsConfig = Field(default_factory=SettingsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
