"""
Weather Dashboard sensors.

One entity per displayed category plus an error entity. Every entity reads the
coordinator's DashboardSnapshot; a category that failed on the last refresh is
simply unavailable while the others keep showing data.

Attributes carry the display model (condition text/type/color, themed icon URI,
formatted measurements) so a dashboard card can render without recomputing.
"""
from typing import Any, Dict, Optional
import logging

from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.const import ATTR_ATTRIBUTION
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import (
    DOMAIN,
    CONF_NAME,
    DEFAULT_NAME,
    CATEGORY_CURRENT,
    CATEGORY_DAILY_FORECAST,
    CATEGORY_HOURLY_FORECAST,
    CATEGORY_HOURLY_HISTORY,
)
from .errors import describe_error
from .models import WeatherCondition
from . import unit_helpers
from .weather_types import activity_suggestion, weather_type_color

_LOGGER = logging.getLogger(__name__)

ATTRIBUTION = "Data provided by Google Maps Platform Weather API"


def _condition_attributes(condition: WeatherCondition) -> Dict[str, Any]:
    attrs = condition.as_dict()
    attrs["color"] = weather_type_color(condition.type)
    return attrs


def _entity_picture(condition: WeatherCondition) -> Optional[str]:
    """Themed icon URL, or None when upstream sent no icon base."""
    if not condition.icon_base_uri.strip():
        return None
    return condition.icon_uri


def _measurement_display(measurements: unit_helpers.WeatherMeasurements) -> Dict[str, Any]:
    """Formatted strings and qualitative descriptions for the headline measurements."""
    out: Dict[str, Any] = {
        "temperature": unit_helpers.format_temperature(measurements.temperature),
        "apparent_temperature": unit_helpers.format_temperature(measurements.apparent_temperature),
        "wind_speed": unit_helpers.format_wind_speed(measurements.wind_speed),
        "wind_direction": measurements.wind_direction.text,
        "visibility": unit_helpers.format_visibility(measurements.visibility),
    }
    if measurements.uv_index.value is not None:
        out["uv_index"] = unit_helpers.uv_index_level(measurements.uv_index.value)
    if measurements.humidity.value is not None:
        out["humidity"] = unit_helpers.humidity_description(measurements.humidity.value)
    if measurements.cloud_cover.value is not None:
        out["cloud_cover"] = unit_helpers.cloud_cover_description(measurements.cloud_cover.value)
    if measurements.precipitation_probability.value is not None:
        out["precipitation"] = unit_helpers.precipitation_description(measurements.precipitation_probability.value)
    return out


class WeatherDashboardSensor(CoordinatorEntity):
    """Base entity bound to one slice of the dashboard snapshot."""

    category: Optional[str] = None

    def __init__(self, coordinator, name: str, suffix: str):
        super().__init__(coordinator)
        self._attr_name = f"{name} {suffix}"
        self._attr_unique_id = f"{DOMAIN}_{coordinator.entry_id}_{suffix.lower().replace(' ', '_')}"

    @property
    def snapshot(self):
        return self.coordinator.data or self.coordinator.dashboard.snapshot

    def _slice(self):
        return self.snapshot.slice(self.category) if self.category else None

    @property
    def available(self) -> bool:
        return bool(self.coordinator.last_update_success and self._slice() is not None)


class CurrentWeatherSensor(WeatherDashboardSensor):
    category = CATEGORY_CURRENT

    def __init__(self, coordinator, name: str):
        super().__init__(coordinator, name, "Current")

    @property
    def unit_of_measurement(self) -> Optional[str]:
        current = self._slice()
        if current is None:
            return None
        unit = current.measurements.temperature.unit
        return unit_helpers.TEMPERATURE_UNIT_TEXT.get(unit, unit)

    @property
    def state(self) -> Optional[float]:
        current = self._slice()
        return current.measurements.temperature.value if current else None

    @property
    def entity_picture(self) -> Optional[str]:
        current = self._slice()
        return _entity_picture(current.condition) if current else None

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        current = self._slice()
        if current is None:
            return {ATTR_ATTRIBUTION: ATTRIBUTION}
        location = self.snapshot.location
        return {
            "observation_time": current.observation_time,
            "condition": _condition_attributes(current.condition),
            "activity_suggestion": activity_suggestion(current.condition.type),
            "measurements": current.measurements.as_dict(),
            "display": _measurement_display(current.measurements),
            "location": location.as_dict() if location else None,
            "theme": self.coordinator.theme.state.as_dict(),
            ATTR_ATTRIBUTION: ATTRIBUTION,
        }


class HourSequenceSensor(WeatherDashboardSensor):
    """Hourly forecast or history; exposes the shared highlight index."""

    def __init__(self, coordinator, name: str, category: str, suffix: str):
        self.category = category
        super().__init__(coordinator, name, suffix)

    @property
    def state(self) -> Optional[int]:
        hours = self._slice()
        return len(hours.hours) if hours is not None else None

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        hours = self._slice()
        sync = self.coordinator.dashboard.highlights[self.category]
        records = [hour.as_dict() for hour in hours.hours] if hours is not None else []
        active = sync.active_index
        return {
            "hours": records,
            "active_index": active,
            "active_hour": records[active] if active is not None and active < len(records) else None,
            ATTR_ATTRIBUTION: ATTRIBUTION,
        }


class DailyForecastSensor(WeatherDashboardSensor):
    category = CATEGORY_DAILY_FORECAST

    def __init__(self, coordinator, name: str):
        super().__init__(coordinator, name, "Daily Forecast")

    @property
    def state(self) -> Optional[int]:
        daily = self._slice()
        return len(daily.days) if daily is not None else None

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        daily = self._slice()
        days = []
        for day in daily.days if daily is not None else []:
            entry = day.as_dict()
            entry["condition"]["color"] = weather_type_color(day.condition.type)
            entry["high_text"] = unit_helpers.format_temperature(day.high)
            entry["low_text"] = unit_helpers.format_temperature(day.low)
            days.append(entry)
        return {"days": days, ATTR_ATTRIBUTION: ATTRIBUTION}


class DashboardErrorSensor(WeatherDashboardSensor):
    """State is the error kind of the last refresh, or 'ok'."""

    def __init__(self, coordinator, name: str):
        super().__init__(coordinator, name, "Error")

    @property
    def available(self) -> bool:
        return True

    @property
    def state(self) -> str:
        error = self.snapshot.error
        return error.kind.value if error is not None else "ok"

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        error = self.snapshot.error
        return describe_error(error).as_dict() if error is not None else {}


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities):
    coordinator = hass.data[DOMAIN].get(entry.entry_id) if hass.data.get(DOMAIN) else None
    if coordinator is None:
        raise RuntimeError("Coordinator not found in hass.data for this config entry")

    name = entry.data.get(CONF_NAME) or DEFAULT_NAME
    async_add_entities(
        [
            CurrentWeatherSensor(coordinator, name),
            HourSequenceSensor(coordinator, name, CATEGORY_HOURLY_FORECAST, "Hourly Forecast"),
            DailyForecastSensor(coordinator, name),
            HourSequenceSensor(coordinator, name, CATEGORY_HOURLY_HISTORY, "Hourly History"),
            DashboardErrorSensor(coordinator, name),
        ]
    )
    _LOGGER.debug("Added weather dashboard sensors for entry %s", entry.entry_id)
