"""Unit normalization helpers shared across the integration.

Upstream records nest every value in its own shape ({degrees, unit},
{value, unit}, {percent, type}, {distance, unit}, ...). The helpers here
flatten those shapes into `Measurement` records that carry their unit
alongside the value. Units are never converted: a Fahrenheit reading stays
a Fahrenheit reading.

All coercions are tolerant: a missing or non-numeric upstream value becomes
a Measurement with value None rather than an exception. The only field that
makes a record unusable is its time (see `record_timestamp`).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from homeassistant.util import dt as dt_util

_LOGGER = logging.getLogger(__name__)

UNIT_PERCENT = "%"
UNIT_DEGREES = "degrees"
UNIT_MILLIBARS = "mb"
UNIT_INDEX = ""

CARDINAL_DIRECTION_TEXT = {
    "CARDINAL_DIRECTION_UNSPECIFIED": "未指定方向",
    "NORTH": "北风",
    "NORTH_NORTHEAST": "北偏东北风",
    "NORTHEAST": "东北风",
    "EAST_NORTHEAST": "东北偏东风",
    "EAST": "东风",
    "EAST_SOUTHEAST": "东南偏东风",
    "SOUTHEAST": "东南风",
    "SOUTH_SOUTHEAST": "南偏东南风",
    "SOUTH": "南风",
    "SOUTH_SOUTHWEST": "南偏西南风",
    "SOUTHWEST": "西南风",
    "WEST_SOUTHWEST": "西南偏西风",
    "WEST": "西风",
    "WEST_NORTHWEST": "西北偏西风",
    "NORTHWEST": "西北风",
    "NORTH_NORTHWEST": "北偏西北风",
}

TEMPERATURE_UNIT_TEXT = {
    "TEMPERATURE_UNIT_UNSPECIFIED": "未知单位",
    "CELSIUS": "°C",
    "FAHRENHEIT": "°F",
}

SPEED_UNIT_TEXT = {
    "SPEED_UNIT_UNSPECIFIED": "未知单位",
    "KILOMETERS_PER_HOUR": "公里/小时",
    "MILES_PER_HOUR": "英里/小时",
}

DISTANCE_UNIT_TEXT = {
    "UNIT_UNSPECIFIED": "未知单位",
    "KILOMETERS": "公里",
    "MILES": "英里",
}


@dataclass(frozen=True)
class Measurement:
    """A value tagged with its unit (plus optional cardinal/text/type passthrough)."""

    value: Optional[float]
    unit: str
    cardinal: Optional[str] = None
    text: Optional[str] = None
    type: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None or k == "value"}


@dataclass(frozen=True)
class WeatherMeasurements:
    """The fixed set of measurements carried by every hour / current record."""

    temperature: Measurement
    apparent_temperature: Measurement
    humidity: Measurement
    dew_point: Measurement
    wind_speed: Measurement
    wind_direction: Measurement
    uv_index: Measurement
    visibility: Measurement
    pressure: Measurement
    cloud_cover: Measurement
    precipitation_probability: Measurement

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: getattr(self, name).as_dict() for name in self.__dataclass_fields__}


def to_float(v: Any) -> Optional[float]:
    try:
        if v is None or isinstance(v, bool):
            return None
        return float(v)
    except Exception:
        return None


def _as_dict(v: Any) -> Dict[str, Any]:
    return v if isinstance(v, dict) else {}


def _dig(obj: Any, *path: str) -> Any:
    """Walk nested dicts; return None as soon as a level is missing."""
    cur = obj
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


# ---- Nested upstream shapes -> Measurement ----

def measurement_from_degrees(v: Any) -> Measurement:
    """Map {degrees, unit} (temperatures) to a Measurement."""
    d = _as_dict(v)
    return Measurement(value=to_float(d.get("degrees")), unit=str(d.get("unit") or ""))


def measurement_from_speed(v: Any) -> Measurement:
    """Map {value, unit} (wind speed) to a Measurement."""
    d = _as_dict(v)
    return Measurement(value=to_float(d.get("value")), unit=str(d.get("unit") or ""))


def measurement_from_distance(v: Any) -> Measurement:
    """Map {distance, unit} (visibility) to a Measurement."""
    d = _as_dict(v)
    return Measurement(value=to_float(d.get("distance")), unit=str(d.get("unit") or ""))


def measurement_from_qpf(v: Any) -> Measurement:
    """Map {quantity, unit} (precipitation amount) to a Measurement."""
    d = _as_dict(v)
    return Measurement(value=to_float(d.get("quantity")), unit=str(d.get("unit") or ""))


def measurement_from_percent(v: Any) -> Measurement:
    """Map a bare percentage or {percent, type} to a percent Measurement."""
    if isinstance(v, dict):
        ptype = v.get("type")
        return Measurement(value=to_float(v.get("percent")), unit=UNIT_PERCENT, type=str(ptype) if ptype else None)
    return Measurement(value=to_float(v), unit=UNIT_PERCENT)


def measurement_from_direction(v: Any) -> Measurement:
    """Map {degrees, cardinal} to a direction Measurement with localized text."""
    d = _as_dict(v)
    cardinal = d.get("cardinal")
    return Measurement(
        value=to_float(d.get("degrees")),
        unit=UNIT_DEGREES,
        cardinal=str(cardinal) if cardinal else None,
        text=wind_direction_text(cardinal) if cardinal else None,
    )


def normalize_measurements(record: Dict[str, Any]) -> WeatherMeasurements:
    """Flatten one upstream hour/current record into the fixed measurement set."""
    wind = _as_dict(record.get("wind"))
    return WeatherMeasurements(
        temperature=measurement_from_degrees(record.get("temperature")),
        apparent_temperature=measurement_from_degrees(record.get("feelsLikeTemperature")),
        humidity=measurement_from_percent(record.get("relativeHumidity")),
        dew_point=measurement_from_degrees(record.get("dewPoint")),
        wind_speed=measurement_from_speed(wind.get("speed")),
        wind_direction=measurement_from_direction(wind.get("direction")),
        uv_index=Measurement(value=to_float(record.get("uvIndex")), unit=UNIT_INDEX),
        visibility=measurement_from_distance(record.get("visibility")),
        pressure=Measurement(value=to_float(_dig(record, "airPressure", "meanSeaLevelMillibars")), unit=UNIT_MILLIBARS),
        cloud_cover=measurement_from_percent(record.get("cloudCover")),
        precipitation_probability=measurement_from_percent(_dig(record, "precipitation", "probability")),
    )


# ---- Time validation ----

def valid_iso_timestamp(raw: Any) -> Optional[str]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        parsed = dt_util.parse_datetime(raw.strip())
    except ValueError:
        # well-formed shape but out-of-range fields, e.g. month 13
        return None
    return raw.strip() if parsed is not None else None


def record_timestamp(record: Any) -> Optional[str]:
    """Return the record's interval.startTime if present and well formed, else None.

    None means the record is malformed and must be skipped by the caller.
    """
    if not isinstance(record, dict):
        return None
    return valid_iso_timestamp(_dig(record, "interval", "startTime"))


def day_date(record: Any) -> Optional[str]:
    """Return YYYY-MM-DD for a daily record (displayDate first, then interval.startTime)."""
    if not isinstance(record, dict):
        return None
    display = record.get("displayDate")
    if isinstance(display, dict):
        try:
            return f"{int(display['year']):04d}-{int(display['month']):02d}-{int(display['day']):02d}"
        except (KeyError, TypeError, ValueError):
            _LOGGER.debug("Ignoring malformed displayDate %r", display)
    start = record_timestamp(record)
    if start is None:
        return None
    parsed = dt_util.parse_datetime(start)
    return parsed.date().isoformat() if parsed else None


# ---- Display helpers ----

def wind_direction_text(cardinal: Optional[str]) -> str:
    return CARDINAL_DIRECTION_TEXT.get(cardinal or "", "未知风向")


def format_temperature(m: Measurement) -> Optional[str]:
    """Rounded temperature with its localized unit, e.g. '23°C'."""
    if m.value is None:
        return None
    return f"{round(m.value)}{TEMPERATURE_UNIT_TEXT.get(m.unit, m.unit)}"


def format_wind_speed(m: Measurement) -> Optional[str]:
    if m.value is None:
        return None
    return f"{round(m.value)} {SPEED_UNIT_TEXT.get(m.unit, m.unit)}"


def uv_index_level(uv_index: float) -> Dict[str, str]:
    """Risk level, advice and color for a UV index."""
    if uv_index <= 2:
        return {"level": "低", "description": "无需防晒", "color": "#3C763D"}
    if uv_index <= 5:
        return {"level": "中", "description": "需要防晒", "color": "#FFA500"}
    if uv_index <= 7:
        return {"level": "高", "description": "需要加强防晒", "color": "#FF8C00"}
    if uv_index <= 10:
        return {"level": "很高", "description": "需要特别防晒", "color": "#FF0000"}
    return {"level": "极高", "description": "尽量避免外出", "color": "#800080"}


def format_visibility(m: Measurement) -> Optional[Dict[str, str]]:
    """Visibility text plus a qualitative description (thresholds depend on km vs miles)."""
    if m.value is None:
        return None
    unit_text = DISTANCE_UNIT_TEXT.get(m.unit, m.unit)
    if m.unit == "KILOMETERS" or "公里" in unit_text:
        low, medium, high = 1.0, 5.0, 10.0
    else:
        low, medium, high = 0.6, 3.0, 6.0

    if m.value < low:
        description = "能见度很低，请注意安全"
    elif m.value < medium:
        description = "能见度较低"
    elif m.value < high:
        description = "能见度一般"
    else:
        description = "能见度良好"
    return {"text": f"{m.value:.1f} {unit_text}", "description": description}


def precipitation_description(probability: float) -> str:
    if probability < 10:
        return "几乎不会有降水"
    if probability < 30:
        return "可能有少量降水"
    if probability < 50:
        return "有可能会有降水"
    if probability < 70:
        return "较大可能会有降水"
    if probability < 90:
        return "很可能会有降水"
    return "几乎确定会有降水"


def cloud_cover_description(cloud_cover: float) -> str:
    if cloud_cover < 10:
        return "晴朗"
    if cloud_cover < 30:
        return "少云"
    if cloud_cover < 60:
        return "多云"
    if cloud_cover < 90:
        return "大部多云"
    return "阴天"


def humidity_description(humidity: float) -> Dict[str, str]:
    if humidity < 30:
        return {"description": "干燥", "suggestion": "注意保湿，多补充水分。"}
    if humidity < 40:
        return {"description": "偏干", "suggestion": "建议适当补充水分。"}
    if humidity < 60:
        return {"description": "舒适", "suggestion": "湿度适宜。"}
    if humidity < 80:
        return {"description": "潮湿", "suggestion": "湿度较高，注意通风。"}
    return {"description": "非常潮湿", "suggestion": "湿度很高，注意防潮、防霉。"}
