"""LLM adapters - Implementations of ItineraryGeneratorPort.

Available implementations:
- DeepSeekItineraryAdapter: DeepSeek chat-completion itinerary generator
"""

from .deepseek_adapter import DeepSeekItineraryAdapter, build_prompt, extract_json

__all__ = ["DeepSeekItineraryAdapter", "build_prompt", "extract_json"]
