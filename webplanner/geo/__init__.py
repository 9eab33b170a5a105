"""Place-name heuristics: city extraction and the fallback coordinate table."""

from .city_extraction import CITY_PATTERNS, extract_city
from .fallback_table import FALLBACK_TABLE, lookup_fallback

__all__ = ["CITY_PATTERNS", "extract_city", "FALLBACK_TABLE", "lookup_fallback"]
