"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- HTTP (httpx retrying transport)
- Geocoding services (AMap)
- LLM providers (DeepSeek)
- Weather services (AMap)
- Rendering engines (Folium)
- Settings storage (in-memory, JSON file)
"""
