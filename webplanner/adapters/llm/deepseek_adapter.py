"""DeepSeek itinerary generator adapter.

Builds a Chinese-language planning prompt from a TripRequest, sends it
to the OpenAI-compatible ``/chat/completions`` endpoint through the
retrying transport, and normalizes whatever itinerary shape the model
returns into a flat tuple of ItineraryItem.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from ...config import LLMConfig
from ...domain.errors import ConfigurationError, ProviderResponseError
from ...domain.models import (
    GeneratedItinerary,
    ItineraryItem,
    RequestSpec,
    RetryPolicy,
    TripPreferences,
    TripRequest,
)
from ...ports.settings import SettingsProviderPort
from ...ports.transport import TransportPort

PACE_TEXT = {"slow": "悠闲慢游", "moderate": "适中节奏", "fast": "紧凑高效"}
ACCOMMODATION_TEXT = {
    "hostel": "青年旅舍",
    "hotel": "酒店",
    "apartment": "公寓",
    "luxury": "豪华酒店",
}
TRANSPORTATION_TEXT = {"public": "公共交通", "car": "自驾", "mixed": "混合方式"}
FOOD_TEXT = {
    "local": "当地美食",
    "international": "国际美食",
    "budget": "经济实惠",
    "luxury": "高档餐厅",
}

_FENCED_JSON = re.compile(r"```json\s*\n(.*?)\n\s*```", re.DOTALL)
_FENCED = re.compile(r"```(.*?)```", re.DOTALL)
_BRACED = re.compile(r"\{.*\}", re.DOTALL)

SAMPLE_ITINERARY: tuple[ItineraryItem, ...] = (
    ItineraryItem(
        day=1, time="09:00-12:00", title="抵达目的地",
        description="抵达目的地，办理入住手续，安顿行李",
        location="机场/车站 → 酒店", category="transportation",
        duration_minutes=180, notes="请提前确认交通方式和时间",
    ),
    ItineraryItem(
        day=1, time="12:00-13:30", title="午餐时间",
        description="在当地特色餐厅享用午餐，品尝当地美食",
        location="当地特色餐厅", category="dining",
        duration_minutes=90, cost=80, notes="推荐尝试当地特色菜品",
    ),
    ItineraryItem(
        day=1, time="14:00-17:00", title="城市观光",
        description="游览城市中心景点，感受当地文化氛围",
        location="市中心景点", category="sightseeing",
        duration_minutes=180, notes="建议穿着舒适的鞋子",
    ),
    ItineraryItem(
        day=2, time="09:00-12:00", title="景点游览",
        description="参观著名景点，了解历史文化",
        location="著名景点", category="sightseeing",
        duration_minutes=180, cost=50, notes="提前查看开放时间",
    ),
    ItineraryItem(
        day=2, time="14:30-17:00", title="文化体验",
        description="参与当地文化活动或参观博物馆",
        location="文化场所", category="activity",
        duration_minutes=150, cost=30, notes="体验当地文化特色",
    ),
)


def trip_days(trip: TripRequest) -> int:
    """Number of calendar days covered by the trip, inclusive."""
    start = date.fromisoformat(trip.start_date)
    end = date.fromisoformat(trip.end_date)
    if end < start:
        raise ValueError(
            f"end_date {trip.end_date} is before start_date {trip.start_date}"
        )
    return (end - start).days + 1


def special_needs(preferences: TripPreferences) -> str:
    needs = []
    if preferences.accessibility:
        needs.append("无障碍设施")
    if preferences.pet_friendly:
        needs.append("宠物友好")
    if preferences.family_friendly:
        needs.append("家庭友好")
    return "、".join(needs) if needs else "无"


def build_prompt(trip: TripRequest) -> str:
    """Render the planning prompt for a trip."""
    days = trip_days(trip)
    prefs = trip.preferences
    budget = f"{trip.budget:g}元" if trip.budget else "未指定"
    interests = "、".join(prefs.interests) if prefs.interests else "未指定"

    return f"""请为以下旅行需求生成详细的{days}天行程：

旅行标题：{trip.title}
目的地：{trip.destination}
旅行日期：{trip.start_date} 至 {trip.end_date}（共{days}天）
预算：{budget}
旅行人数：{trip.travelers}人
旅行描述：{trip.description or '无特殊描述'}

旅行偏好：
- 兴趣：{interests}
- 节奏：{PACE_TEXT.get(prefs.pace, '适中节奏')}
- 住宿：{ACCOMMODATION_TEXT.get(prefs.accommodation, '酒店')}
- 交通：{TRANSPORTATION_TEXT.get(prefs.transportation, '混合方式')}
- 餐饮：{FOOD_TEXT.get(prefs.food, '当地美食')}
- 特殊需求：{special_needs(prefs)}

请以JSON格式返回生成的行程数据，包含每天的详细安排。每个行程项应包括：
- day: 第几天
- date: 具体日期
- time: 时间段（如"09:00-12:00"）
- title: 活动标题
- description: 详细描述
- location: 具体地点
- category: 活动类别（sightseeing/dining/accommodation/transportation/activity）
- duration: 持续时间（分钟）
- cost: 预估费用
- notes: 注意事项

请确保行程安排合理、符合用户偏好，并考虑预算限制。"""


def _number(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _item(raw: dict[str, Any], day: Any = None, day_date: str = "") -> ItineraryItem:
    return ItineraryItem(
        day=int(_number(raw.get("day", day), 1) or 1),
        date=str(raw.get("date") or day_date or ""),
        time=str(raw.get("time") or "09:00-18:00"),
        title=str(raw.get("title") or "未命名活动"),
        description=str(raw.get("description") or ""),
        location=str(raw.get("location") or ""),
        category=str(raw.get("category") or "sightseeing"),
        duration_minutes=int(_number(raw.get("duration"), 60) or 60),
        cost=_number(raw.get("cost"), 0.0),
        notes=str(raw.get("notes") or ""),
    )


def _flatten_days(days: Iterable[Any]) -> list[ItineraryItem]:
    items = []
    for plan in days:
        if not isinstance(plan, dict):
            continue
        for activity in plan.get("activities") or []:
            if isinstance(activity, dict):
                items.append(
                    _item(activity, plan.get("day", 1), str(plan.get("date") or ""))
                )
    return items


def normalize_itinerary(data: Any) -> Optional[tuple[ItineraryItem, ...]]:
    """Flatten the itinerary shapes the model is known to produce.

    Accepted shapes: ``{"daily_itinerary": [{day, activities}]}``,
    ``{"itinerary": [{day, activities}]}``, and a flat list of items.

    Returns:
        The items, or None for an unrecognized shape.
    """
    if isinstance(data, dict):
        for key in ("daily_itinerary", "itinerary"):
            if isinstance(data.get(key), list):
                return tuple(_flatten_days(data[key]))
        return None
    if isinstance(data, list):
        return tuple(_item(entry) for entry in data if isinstance(entry, dict))
    return None


def extract_json(text: str) -> Any:
    """Pull the JSON document out of a model reply.

    Tries a fenced ```json block, then any fenced block, then the outermost
    brace span, then the whole text.

    Raises:
        ValueError: If nothing parses as JSON.
    """
    for pattern in (_FENCED_JSON, _FENCED, _BRACED):
        match = pattern.search(text)
        if match:
            candidate = match.group(1) if match.groups() else match.group(0)
            try:
                return json.loads(candidate)
            except ValueError:
                continue
    return json.loads(text)


@dataclass
class DeepSeekItineraryAdapter:
    """Itinerary generator backed by the DeepSeek chat API.

    This adapter implements ItineraryGeneratorPort. It always goes through
    the transport, so whether the call is proxied is the router's
    decision (AI provider class, user preference).

    Attributes:
        transport: Transport used for the remote call
        settings: Source of the LLM API key
        policy: Retry policy for LLM calls
        config: Endpoint and model configuration
    """

    transport: TransportPort
    settings: SettingsProviderPort
    policy: RetryPolicy = field(default_factory=RetryPolicy)
    config: LLMConfig = field(default_factory=LLMConfig)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        key = self.settings.api_keys().llm_api_key
        if not key:
            raise ConfigurationError(
                "DeepSeek API key is not configured", setting_name="llmApiKey"
            )
        return {"Content-Type": "application/json", "Authorization": f"Bearer {key}"}

    def parse_response(self, content: str) -> GeneratedItinerary:
        """Turn the model's message content into an itinerary.

        Unusable output degrades to the sample itinerary, flagged with
        ``is_sample=True`` so the UI can say so.
        """
        try:
            items = normalize_itinerary(extract_json(content))
        except ValueError as e:
            self._logger.warning(
                "Model reply is not JSON, using sample itinerary",
                extra={"error": str(e)},
            )
            items = None

        if not items:
            return GeneratedItinerary(
                items=SAMPLE_ITINERARY, is_sample=True, model=self.config.model
            )
        return GeneratedItinerary(items=items, model=self.config.model)

    async def generate(
        self, trip: TripRequest, cancel: Optional[asyncio.Event] = None
    ) -> GeneratedItinerary:
        """Generate an itinerary for a trip.

        Raises:
            ConfigurationError: No API key configured.
            TerminalError: Provider rejected the request (bad key, quota).
            RetryExhaustedError: Provider unreachable or failing.
            ProviderResponseError: Completion payload malformed.
            CallCancelledError: The caller set ``cancel``.
        """
        body = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": self.config.system_prompt},
                {"role": "user", "content": build_prompt(trip)},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }
        self._logger.info(
            "Requesting itinerary",
            extra={"destination": trip.destination, "model": self.config.model},
        )
        response = await self.transport.execute(
            RequestSpec(
                method="POST",
                url=f"{self.config.base_url}/chat/completions",
                headers=self._headers(),
                json_body=body,
            ),
            self.policy,
            cancel,
        )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderResponseError(
                "Malformed chat completion payload", provider="deepseek", cause=e
            )

        itinerary = self.parse_response(str(content))
        self._logger.info(
            "Itinerary generated",
            extra={
                "items": len(itinerary.items),
                "days": itinerary.days,
                "sample": itinerary.is_sample,
            },
        )
        return itinerary

    async def validate_api_key(
        self, cancel: Optional[asyncio.Event] = None
    ) -> list[str]:
        """List the models the configured key can access.

        Raises:
            TerminalError: The key is invalid (HTTP 401).
        """
        response = await self.transport.execute(
            RequestSpec(
                method="GET",
                url=f"{self.config.base_url}/models",
                headers=self._headers(),
            ),
            RetryPolicy(
                max_attempts=2,
                base_delay_ms=self.policy.base_delay_ms,
                max_delay_ms=self.policy.max_delay_ms,
                timeout_ms=self.policy.timeout_ms,
            ),
            cancel,
        )
        try:
            models = response.json().get("data") or []
        except (ValueError, AttributeError) as e:
            raise ProviderResponseError(
                "Malformed model list payload", provider="deepseek", cause=e
            )
        return [str(m.get("id")) for m in models if isinstance(m, dict)]
