"""Display model produced by the ForecastAggregator.

Every successful fetch builds these from scratch. The only field mutated
afterwards is `WeatherCondition.icon_uri`, recomputed in place when the
theme changes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .unit_helpers import Measurement, WeatherMeasurements


@dataclass
class WeatherCondition:
    description_text: str
    type: str
    type_text: str
    icon_uri: str
    icon_base_uri: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {
            "description_text": self.description_text,
            "type": self.type,
            "type_text": self.type_text,
            "icon_uri": self.icon_uri,
        }


@dataclass(frozen=True)
class HourRecord:
    timestamp: str
    measurements: WeatherMeasurements
    condition: WeatherCondition

    def as_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "measurements": self.measurements.as_dict(),
            "condition": self.condition.as_dict(),
        }


@dataclass(frozen=True)
class DayRecord:
    date: str
    sunrise: Optional[str]
    sunset: Optional[str]
    high: Measurement
    low: Measurement
    condition: WeatherCondition
    precipitation_probability: Measurement
    precipitation_amount: Measurement
    uv_index: Measurement
    wind_speed: Measurement
    humidity: Measurement
    wind_direction: Measurement

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "sunrise": self.sunrise,
            "sunset": self.sunset,
            "high": self.high.as_dict(),
            "low": self.low.as_dict(),
            "condition": self.condition.as_dict(),
            "precipitation_probability": self.precipitation_probability.as_dict(),
            "precipitation_amount": self.precipitation_amount.as_dict(),
            "uv_index": self.uv_index.as_dict(),
            "wind_speed": self.wind_speed.as_dict(),
            "humidity": self.humidity.as_dict(),
            "wind_direction": self.wind_direction.as_dict(),
        }


@dataclass(frozen=True)
class CurrentWeather:
    observation_time: str
    measurements: WeatherMeasurements
    condition: WeatherCondition

    def as_dict(self) -> Dict[str, Any]:
        return {
            "observation_time": self.observation_time,
            "measurements": self.measurements.as_dict(),
            "condition": self.condition.as_dict(),
        }


@dataclass(frozen=True)
class HourlyForecast:
    hours: List[HourRecord] = field(default_factory=list)


@dataclass(frozen=True)
class DailyForecast:
    days: List[DayRecord] = field(default_factory=list)


@dataclass(frozen=True)
class HourlyHistory:
    hours: List[HourRecord] = field(default_factory=list)


@dataclass(frozen=True)
class LocationData:
    latitude: float
    longitude: float
    name: Optional[str] = None
    address: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {"latitude": self.latitude, "longitude": self.longitude, "name": self.name, "address": self.address}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocationData":
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            name=data.get("name"),
            address=data.get("address"),
        )
