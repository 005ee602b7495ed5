# Forecast aggregation: raw Weather API payloads -> display model
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from . import unit_helpers
from .models import (
    CurrentWeather,
    DailyForecast,
    DayRecord,
    HourlyForecast,
    HourlyHistory,
    HourRecord,
    WeatherCondition,
)
from .unit_helpers import Measurement
from .weather_types import resolve_weather_type, weather_type_text

_LOGGER = logging.getLogger(__name__)

Snapshot = Union[CurrentWeather, HourlyForecast, DailyForecast, HourlyHistory, None]


class ForecastAggregator:
    """
    Builds the display model, one independent function per upstream category:

    - aggregate_current         currentConditions:lookup -> CurrentWeather | None
    - aggregate_hourly_forecast forecast/hours:lookup    -> HourlyForecast
    - aggregate_daily_forecast  forecast/days:lookup     -> DailyForecast
    - aggregate_hourly_history  history/hours:lookup     -> HourlyHistory

    Entries keep their input order. Entries whose time is missing or malformed
    are dropped silently; nothing else about an entry causes it to be dropped.
    A payload without the expected list yields an empty sequence.
    """

    def __init__(self, icon_resolver) -> None:
        self.icon_resolver = icon_resolver

    # -----------------------
    # Conditions
    # -----------------------
    def build_condition(self, raw_condition: Any) -> WeatherCondition:
        cond = raw_condition if isinstance(raw_condition, dict) else {}
        description = cond.get("description")
        text = description.get("text") if isinstance(description, dict) else description
        base_uri = cond.get("iconBaseUri") if isinstance(cond.get("iconBaseUri"), str) else ""
        weather_type = resolve_weather_type(cond)
        return WeatherCondition(
            description_text=str(text or ""),
            type=weather_type,
            type_text=weather_type_text(weather_type),
            icon_uri=self.icon_resolver.resolve(base_uri),
            icon_base_uri=base_uri,
        )

    # -----------------------
    # Categories
    # -----------------------
    def aggregate_current(self, payload: Any) -> Optional[CurrentWeather]:
        if not isinstance(payload, dict):
            _LOGGER.debug("Current conditions payload is not a dict: %r", type(payload))
            return None
        observation_time = unit_helpers.valid_iso_timestamp(payload.get("currentTime"))
        if observation_time is None:
            _LOGGER.debug("Current conditions payload has no valid currentTime; nothing to display")
            return None
        return CurrentWeather(
            observation_time=observation_time,
            measurements=unit_helpers.normalize_measurements(payload),
            condition=self.build_condition(payload.get("weatherCondition")),
        )

    def aggregate_hourly_forecast(self, payload: Any) -> HourlyForecast:
        return HourlyForecast(hours=self._aggregate_hours(payload, "forecastHours"))

    def aggregate_hourly_history(self, payload: Any) -> HourlyHistory:
        return HourlyHistory(hours=self._aggregate_hours(payload, "historyHours"))

    def aggregate_daily_forecast(self, payload: Any) -> DailyForecast:
        entries = self._entries(payload, "forecastDays")
        days: List[DayRecord] = []
        for entry in entries:
            date = unit_helpers.day_date(entry)
            if date is None:
                continue
            days.append(self._build_day(entry, date))
        self._log_dropped("forecastDays", len(entries), len(days))
        return DailyForecast(days=days)

    # -----------------------
    # Theme
    # -----------------------
    def retheme(self, *snapshots: Snapshot) -> int:
        """Recompute icon URIs in place for every condition held by the given snapshots."""
        count = 0
        for condition in self._conditions(snapshots):
            condition.icon_uri = self.icon_resolver.resolve(condition.icon_base_uri)
            count += 1
        _LOGGER.debug("Recomputed %d icon URIs after theme change", count)
        return count

    # -----------------------
    # Helpers
    # -----------------------
    @staticmethod
    def _entries(payload: Any, key: str) -> List[Any]:
        if not isinstance(payload, dict):
            return []
        entries = payload.get(key)
        if not isinstance(entries, list):
            _LOGGER.debug("Payload has no '%s' list (keys=%s)", key, list(payload.keys())[:10])
            return []
        return entries

    @staticmethod
    def _log_dropped(key: str, total: int, kept: int) -> None:
        if kept != total:
            _LOGGER.debug("Dropped %d of %d '%s' entries without a valid time", total - kept, total, key)

    def _aggregate_hours(self, payload: Any, key: str) -> List[HourRecord]:
        entries = self._entries(payload, key)
        hours: List[HourRecord] = []
        for entry in entries:
            timestamp = unit_helpers.record_timestamp(entry)
            if timestamp is None:
                continue
            hours.append(
                HourRecord(
                    timestamp=timestamp,
                    measurements=unit_helpers.normalize_measurements(entry),
                    condition=self.build_condition(entry.get("weatherCondition")),
                )
            )
        self._log_dropped(key, len(entries), len(hours))
        return hours

    def _build_day(self, entry: Dict[str, Any], date: str) -> DayRecord:
        daytime = entry.get("daytimeForecast") if isinstance(entry.get("daytimeForecast"), dict) else {}
        sun = entry.get("sunEvents") if isinstance(entry.get("sunEvents"), dict) else {}
        precipitation = daytime.get("precipitation") if isinstance(daytime.get("precipitation"), dict) else {}
        wind = daytime.get("wind") if isinstance(daytime.get("wind"), dict) else {}
        return DayRecord(
            date=date,
            sunrise=sun.get("sunriseTime"),
            sunset=sun.get("sunsetTime"),
            high=unit_helpers.measurement_from_degrees(entry.get("maxTemperature")),
            low=unit_helpers.measurement_from_degrees(entry.get("minTemperature")),
            condition=self.build_condition(daytime.get("weatherCondition")),
            precipitation_probability=unit_helpers.measurement_from_percent(precipitation.get("probability")),
            precipitation_amount=unit_helpers.measurement_from_qpf(precipitation.get("qpf")),
            uv_index=Measurement(value=unit_helpers.to_float(daytime.get("uvIndex")), unit=unit_helpers.UNIT_INDEX),
            wind_speed=unit_helpers.measurement_from_speed(wind.get("speed")),
            humidity=unit_helpers.measurement_from_percent(daytime.get("relativeHumidity")),
            wind_direction=unit_helpers.measurement_from_direction(wind.get("direction")),
        )

    @staticmethod
    def _conditions(snapshots: Iterable[Snapshot]) -> Iterable[WeatherCondition]:
        for snap in snapshots:
            if snap is None:
                continue
            if isinstance(snap, CurrentWeather):
                yield snap.condition
            elif isinstance(snap, (HourlyForecast, HourlyHistory)):
                for hour in snap.hours:
                    yield hour.condition
            elif isinstance(snap, DailyForecast):
                for day in snap.days:
                    yield day.condition
