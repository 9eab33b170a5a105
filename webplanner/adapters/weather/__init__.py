"""Weather adapters - Implementations of WeatherProviderPort.

Available implementations:
- AMapWeatherAdapter: AMap (Gaode) live weather
"""

from .amap_weather_adapter import AMapWeatherAdapter, clean_city_name, weather_icon

__all__ = ["AMapWeatherAdapter", "clean_city_name", "weather_icon"]
