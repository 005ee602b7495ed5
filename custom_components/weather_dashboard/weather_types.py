"""Canonical weather-condition types and the text-heuristic resolver.

The upstream `weatherCondition.type` is trusted whenever it is present. When
it is missing, the free-text description is matched against an ordered list
of (predicate, type) rules; the first matching rule wins. Rule order matters
because one description can carry several tokens ("小雨转多云" is light rain
turning cloudy and must classify as LIGHT_RAIN).
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Tuple

_LOGGER = logging.getLogger(__name__)

TYPE_UNSPECIFIED = "TYPE_UNSPECIFIED"

# type -> display text, icon name and optional color
WEATHER_TYPES: Dict[str, Dict[str, str]] = {
    TYPE_UNSPECIFIED: {"text": "天气状况未指定", "icon": "question"},
    "CLEAR": {"text": "晴朗", "icon": "sun", "color": "#FFD700"},
    "MOSTLY_CLEAR": {"text": "大部晴朗", "icon": "sun-cloud", "color": "#FFDB58"},
    "PARTLY_CLOUDY": {"text": "局部多云", "icon": "partly-cloudy", "color": "#87CEEB"},
    "MOSTLY_CLOUDY": {"text": "大部多云", "icon": "mostly-cloudy", "color": "#B0C4DE"},
    "CLOUDY": {"text": "阴天", "icon": "cloudy", "color": "#708090"},
    "WINDY": {"text": "大风", "icon": "wind", "color": "#B0C4DE"},
    "WIND_AND_RAIN": {"text": "大风伴有降水", "icon": "wind-rain", "color": "#4682B4"},
    "LIGHT_RAIN_SHOWERS": {"text": "小阵雨", "icon": "shower-light", "color": "#87CEFA"},
    "CHANCE_OF_SHOWERS": {"text": "可能有阵雨", "icon": "shower-chance", "color": "#6495ED"},
    "SCATTERED_SHOWERS": {"text": "零星阵雨", "icon": "shower-scattered", "color": "#4682B4"},
    "RAIN_SHOWERS": {"text": "阵雨", "icon": "shower", "color": "#4169E1"},
    "HEAVY_RAIN_SHOWERS": {"text": "强阵雨", "icon": "shower-heavy", "color": "#191970"},
    "LIGHT_TO_MODERATE_RAIN": {"text": "小到中雨", "icon": "rain-light-moderate", "color": "#87CEFA"},
    "MODERATE_TO_HEAVY_RAIN": {"text": "中到大雨", "icon": "rain-moderate-heavy", "color": "#4169E1"},
    "RAIN": {"text": "中雨", "icon": "rain", "color": "#4682B4"},
    "LIGHT_RAIN": {"text": "小雨", "icon": "rain-light", "color": "#B0E0E6"},
    "HEAVY_RAIN": {"text": "大雨", "icon": "rain-heavy", "color": "#000080"},
    "RAIN_PERIODICALLY_HEAVY": {"text": "雨，间歇性大雨", "icon": "rain-periodic-heavy", "color": "#000080"},
    "LIGHT_SNOW_SHOWERS": {"text": "小阵雪", "icon": "snow-shower-light", "color": "#E0FFFF"},
    "CHANCE_OF_SNOW_SHOWERS": {"text": "可能有雪", "icon": "snow-shower-chance", "color": "#E0FFFF"},
    "SCATTERED_SNOW_SHOWERS": {"text": "零星降雪", "icon": "snow-scattered", "color": "#E0FFFF"},
    "SNOW_SHOWERS": {"text": "阵雪", "icon": "snow-shower", "color": "#E6E6FA"},
    "HEAVY_SNOW_SHOWERS": {"text": "强阵雪", "icon": "snow-shower-heavy", "color": "#D8BFD8"},
    "LIGHT_TO_MODERATE_SNOW": {"text": "小到中雪", "icon": "snow-light-moderate", "color": "#E6E6FA"},
    "MODERATE_TO_HEAVY_SNOW": {"text": "中到大雪", "icon": "snow-moderate-heavy", "color": "#DDA0DD"},
    "SNOW": {"text": "中雪", "icon": "snow", "color": "#E6E6FA"},
    "LIGHT_SNOW": {"text": "小雪", "icon": "snow-light", "color": "#F0F8FF"},
    "HEAVY_SNOW": {"text": "大雪", "icon": "snow-heavy", "color": "#9370DB"},
    "SNOWSTORM": {"text": "暴风雪", "icon": "snowstorm", "color": "#483D8B"},
    "SNOW_PERIODICALLY_HEAVY": {"text": "雪，间歇性大雪", "icon": "snow-periodic-heavy", "color": "#9370DB"},
    "HEAVY_SNOW_STORM": {"text": "强暴风雪", "icon": "heavy-snowstorm", "color": "#483D8B"},
    "BLOWING_SNOW": {"text": "风雪", "icon": "blowing-snow", "color": "#7B68EE"},
    "RAIN_AND_SNOW": {"text": "雨夹雪", "icon": "rain-snow", "color": "#6A5ACD"},
    "HAIL": {"text": "冰雹", "icon": "hail", "color": "#4169E1"},
    "HAIL_SHOWERS": {"text": "阵冰雹", "icon": "hail-shower", "color": "#4169E1"},
    "THUNDERSTORM": {"text": "雷暴", "icon": "thunderstorm", "color": "#4B0082"},
    "THUNDERSHOWER": {"text": "雷阵雨", "icon": "thundershower", "color": "#4B0082"},
    "LIGHT_THUNDERSTORM_RAIN": {"text": "轻度雷雨", "icon": "thunderstorm-light", "color": "#9400D3"},
    "SCATTERED_THUNDERSTORMS": {"text": "零星雷暴", "icon": "thunderstorm-scattered", "color": "#8A2BE2"},
    "HEAVY_THUNDERSTORM": {"text": "强雷暴", "icon": "thunderstorm-heavy", "color": "#800080"},
    "SLEET": {"text": "冻雨", "icon": "sleet", "color": "#5F9EA0"},
    "FREEZING_RAIN": {"text": "冰雨", "icon": "freezing-rain", "color": "#4682B4"},
}

UNKNOWN_TYPE_TEXT = "未知天气状况"
DEFAULT_TYPE_COLOR = "#808080"


def _contains_any(*tokens: str) -> Callable[[str], bool]:
    def predicate(text: str) -> bool:
        return any(tok in text for tok in tokens)

    return predicate


# Ordered most specific first; evaluated top to bottom, first match wins.
WEATHER_TYPE_RULES: List[Tuple[Callable[[str], bool], str]] = [
    (_contains_any("晴", "CLEAR", "SUNNY"), "CLEAR"),
    (_contains_any("局部", "PARTLY CLOUDY"), "PARTLY_CLOUDY"),
    (_contains_any("大部", "MOSTLY CLOUDY"), "MOSTLY_CLOUDY"),
    (_contains_any("阴", "OVERCAST"), "CLOUDY"),
    (_contains_any("小雨", "LIGHT RAIN"), "LIGHT_RAIN"),
    (_contains_any("中雨", "MODERATE RAIN"), "RAIN"),
    (_contains_any("大雨", "暴雨", "HEAVY RAIN"), "HEAVY_RAIN"),
    (_contains_any("雷", "THUNDER"), "THUNDERSTORM"),
    (_contains_any("小雪", "LIGHT SNOW"), "LIGHT_SNOW"),
    (_contains_any("中雪", "MODERATE SNOW"), "SNOW"),
    (_contains_any("暴风雪", "BLIZZARD", "SNOWSTORM"), "SNOWSTORM"),
    (_contains_any("大雪", "暴雪", "HEAVY SNOW"), "HEAVY_SNOW"),
    (_contains_any("雨夹雪", "RAIN AND SNOW", "SLEET"), "RAIN_AND_SNOW"),
    (_contains_any("阵雨", "RAIN SHOWER"), "RAIN_SHOWERS"),
    (_contains_any("阵雪", "SNOW SHOWER"), "SNOW_SHOWERS"),
    (_contains_any("风", "WIND"), "WINDY"),
    (_contains_any("多云", "CLOUDY"), "MOSTLY_CLOUDY"),
]


def classify_description(text: Any) -> str:
    """Classify free text with WEATHER_TYPE_RULES; TYPE_UNSPECIFIED when nothing matches."""
    if not isinstance(text, str) or not text.strip():
        return TYPE_UNSPECIFIED
    upper = text.upper()
    for predicate, weather_type in WEATHER_TYPE_RULES:
        if predicate(upper):
            return weather_type
    return TYPE_UNSPECIFIED


def resolve_weather_type(condition: Any) -> str:
    """Return the canonical weather type for an upstream weatherCondition dict.

    An explicit, non-empty upstream `type` is returned unchanged. Otherwise the
    description text is classified. Never raises.
    """
    if not isinstance(condition, dict):
        return TYPE_UNSPECIFIED
    explicit = condition.get("type")
    if isinstance(explicit, str) and explicit.strip():
        return explicit
    description = condition.get("description")
    text = description.get("text") if isinstance(description, dict) else description
    resolved = classify_description(text)
    _LOGGER.debug("Resolved weather type %s from description %r", resolved, text)
    return resolved


def weather_type_text(weather_type: str) -> str:
    return WEATHER_TYPES.get(weather_type, {}).get("text", UNKNOWN_TYPE_TEXT)


def weather_type_color(weather_type: str) -> str:
    return WEATHER_TYPES.get(weather_type, {}).get("color", DEFAULT_TYPE_COLOR)


def activity_suggestion(weather_type: str) -> str:
    """Suggested outdoor activity level for a canonical weather type."""
    if weather_type in ("CLEAR", "MOSTLY_CLEAR"):
        return "天气晴好，非常适合户外活动，如散步、跑步、野餐等。"
    if weather_type in ("PARTLY_CLOUDY", "MOSTLY_CLOUDY"):
        return "天气尚可，适合户外活动，但建议带上防晒用品。"
    if weather_type == "CLOUDY":
        return "天气较阴，适合轻度户外活动，如散步、购物等。"
    if weather_type in ("LIGHT_RAIN", "LIGHT_RAIN_SHOWERS", "LIGHT_TO_MODERATE_RAIN"):
        return "有小雨，建议带伞出行，可进行部分户外活动。"
    if weather_type in ("RAIN", "RAIN_SHOWERS", "MODERATE_TO_HEAVY_RAIN"):
        return "有中雨，不建议进行户外活动，外出请带伞。"
    if weather_type in ("HEAVY_RAIN", "HEAVY_RAIN_SHOWERS", "RAIN_PERIODICALLY_HEAVY"):
        return "有大雨，建议尽量避免户外活动，注意交通安全。"
    if "SNOW" in weather_type:
        return "有降雪，路面可能湿滑，请注意保暖并谨慎出行。"
    if "THUNDER" in weather_type:
        return "有雷电，请避免户外活动，不要在树下、空旷地带停留。"
    if weather_type in ("WINDY", "WIND_AND_RAIN", "BLOWING_SNOW"):
        return "有大风，外出注意防风，不要在临时搭建物附近停留。"
    if weather_type in ("HAIL", "HAIL_SHOWERS"):
        return "有冰雹，建议避免外出，保护好车辆和易损物品。"
    return "请关注天气变化，合理安排出行计划。"
