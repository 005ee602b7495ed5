import pytest

from custom_components.weather_dashboard.data_formatter import ForecastAggregator
from custom_components.weather_dashboard.icons import IconUriResolver
from custom_components.weather_dashboard.theme import ThemeController

ICON = "https://maps.gstatic.com/weather/v1/sunny"


class MemoryStorage:
    def __init__(self, data=None):
        self.data = data

    async def async_load(self):
        return self.data

    async def async_save(self, data):
        self.data = data


def _hour(start, temp=20.0, text="晴", wtype="CLEAR"):
    return {
        "interval": {"startTime": start, "endTime": start},
        "weatherCondition": {"iconBaseUri": ICON, "description": {"text": text}, "type": wtype},
        "temperature": {"degrees": temp, "unit": "CELSIUS"},
        "feelsLikeTemperature": {"degrees": temp - 1, "unit": "CELSIUS"},
        "relativeHumidity": 55,
        "wind": {"direction": {"degrees": 90, "cardinal": "EAST"}, "speed": {"value": 12, "unit": "KILOMETERS_PER_HOUR"}},
        "precipitation": {"probability": {"percent": 30, "type": "RAIN"}},
        "airPressure": {"meanSeaLevelMillibars": 1012.3},
    }


@pytest.fixture
def theme():
    return ThemeController(MemoryStorage(), system_prefers_dark=False)


@pytest.fixture
def aggregator(theme):
    return ForecastAggregator(IconUriResolver(theme))


def test_hourly_keeps_order_and_drops_only_bad_times(aggregator):
    payload = {
        "forecastHours": [
            _hour("2025-06-01T00:00:00Z", 20),
            {"weatherCondition": {}},
            _hour("2025-06-01T01:00:00Z", 21),
            _hour("not-a-time", 22),
            _hour("2025-13-45T00:00:00Z", 23),
            _hour("2025-06-01T02:00:00Z", 24),
        ]
    }
    hours = aggregator.aggregate_hourly_forecast(payload).hours
    assert [h.timestamp for h in hours] == [
        "2025-06-01T00:00:00Z",
        "2025-06-01T01:00:00Z",
        "2025-06-01T02:00:00Z",
    ]
    assert [h.measurements.temperature.value for h in hours] == [20, 21, 24]


def test_missing_measurements_do_not_drop_the_record(aggregator):
    payload = {"historyHours": [{"interval": {"startTime": "2025-06-01T00:00:00Z"}}]}
    hours = aggregator.aggregate_hourly_history(payload).hours
    assert len(hours) == 1
    m = hours[0].measurements
    assert m.temperature.value is None
    assert m.wind_direction.cardinal is None
    assert hours[0].condition.icon_uri == ".svg"


def test_measurements_keep_their_units(aggregator):
    hour = aggregator.aggregate_hourly_forecast({"forecastHours": [_hour("2025-06-01T00:00:00Z")]}).hours[0]
    m = hour.measurements
    assert (m.temperature.value, m.temperature.unit) == (20.0, "CELSIUS")
    assert (m.wind_speed.value, m.wind_speed.unit) == (12.0, "KILOMETERS_PER_HOUR")
    assert m.wind_direction.text == "东风"
    assert (m.precipitation_probability.value, m.precipitation_probability.type) == (30.0, "RAIN")
    assert m.pressure.value == pytest.approx(1012.3)
    assert m.humidity.value == 55.0


def test_condition_uses_text_heuristic_without_type(aggregator):
    raw = _hour("2025-06-01T00:00:00Z", text="小雨转多云", wtype=None)
    hour = aggregator.aggregate_hourly_forecast({"forecastHours": [raw]}).hours[0]
    assert hour.condition.type == "LIGHT_RAIN"
    assert hour.condition.type_text == "小雨"
    assert hour.condition.description_text == "小雨转多云"
    assert hour.condition.icon_uri == ICON + ".svg"


def test_missing_list_yields_empty_sequence(aggregator):
    assert aggregator.aggregate_hourly_forecast({}).hours == []
    assert aggregator.aggregate_hourly_forecast(None).hours == []
    assert aggregator.aggregate_daily_forecast({"forecastDays": "nope"}).days == []


def test_current_requires_valid_time(aggregator):
    assert aggregator.aggregate_current({"temperature": {"degrees": 3}}) is None
    current = aggregator.aggregate_current(dict(_hour("x"), currentTime="2025-06-01T08:15:00Z"))
    assert current.observation_time == "2025-06-01T08:15:00Z"
    assert current.condition.type == "CLEAR"


def test_daily_uses_display_date_and_daytime_forecast(aggregator):
    payload = {
        "forecastDays": [
            {
                "displayDate": {"year": 2025, "month": 6, "day": 1},
                "sunEvents": {"sunriseTime": "2025-05-31T21:00:00Z", "sunsetTime": "2025-06-01T11:00:00Z"},
                "maxTemperature": {"degrees": 28, "unit": "CELSIUS"},
                "minTemperature": {"degrees": 18, "unit": "CELSIUS"},
                "daytimeForecast": {
                    "weatherCondition": {"iconBaseUri": ICON, "description": {"text": "多云"}},
                    "precipitation": {"probability": {"percent": 10}, "qpf": {"quantity": 0.2, "unit": "MILLIMETERS"}},
                    "uvIndex": 6,
                    "relativeHumidity": 60,
                    "wind": {"speed": {"value": 8, "unit": "KILOMETERS_PER_HOUR"}, "direction": {"cardinal": "NORTH"}},
                },
            },
            {"interval": {"startTime": "2025-06-02T00:00:00Z"}},
            {"maxTemperature": {"degrees": 30}},
        ]
    }
    days = aggregator.aggregate_daily_forecast(payload).days
    assert [d.date for d in days] == ["2025-06-01", "2025-06-02"]
    first = days[0]
    assert first.high.value == 28.0 and first.low.value == 18.0
    assert first.condition.type == "MOSTLY_CLOUDY"
    assert first.precipitation_amount.value == pytest.approx(0.2)
    assert first.uv_index.value == 6.0
    assert first.wind_direction.text == "北风"


@pytest.mark.asyncio
async def test_retheme_recomputes_icons_in_place(theme, aggregator):
    hourly = aggregator.aggregate_hourly_forecast(
        {"forecastHours": [_hour("2025-06-01T00:00:00Z"), _hour("2025-06-01T01:00:00Z")]}
    )
    before = [h.condition for h in hourly.hours]
    await theme.async_set_mode("dark")

    assert aggregator.retheme(None, hourly) == 2
    assert [h.condition for h in hourly.hours] == before
    assert all(h.condition.icon_uri == ICON + "_dark.svg" for h in hourly.hours)
