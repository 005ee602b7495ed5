import asyncio

import aiohttp
import pytest

from custom_components.weather_dashboard.dashboard import WeatherDashboard
from custom_components.weather_dashboard.errors import (
    AddressNotFound,
    ErrorKind,
    GeocodingError,
    LocationNotSupported,
    NetworkError,
    describe_error,
)
from custom_components.weather_dashboard.models import HourlyForecast, LocationData
from custom_components.weather_dashboard.theme import ThemeController

ICON = "https://maps.gstatic.com/weather/v1/cloudy"
HERE = LocationData(latitude=31.23, longitude=121.47, name="上海")


class MemoryStorage:
    def __init__(self, data=None):
        self.data = data
        self.saves = []

    async def async_load(self):
        return self.data

    async def async_save(self, data):
        self.saves.append(dict(data))
        self.data = data


def _hours(key, n):
    return {
        key: [
            {
                "interval": {"startTime": f"2025-06-01T{i:02d}:00:00Z"},
                "weatherCondition": {"iconBaseUri": ICON, "type": "CLOUDY"},
                "temperature": {"degrees": 20 + i, "unit": "CELSIUS"},
            }
            for i in range(n)
        ]
    }


class MockFetcher:
    """Returns canned payloads; `failures` maps method name -> exception to raise."""

    def __init__(self, failures=None, delays=None):
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls = []

    async def _respond(self, name, payload):
        self.calls.append(name)
        await asyncio.sleep(self.delays.get(name, 0))
        if name in self.failures:
            raise self.failures[name]
        return payload

    async def fetch_current(self, lat, lon):
        return await self._respond(
            "fetch_current",
            {"currentTime": "2025-06-01T08:00:00Z", "weatherCondition": {"iconBaseUri": ICON, "type": "CLOUDY"}},
        )

    async def fetch_hourly_forecast(self, lat, lon):
        return await self._respond("fetch_hourly_forecast", _hours("forecastHours", 24))

    async def fetch_daily_forecast(self, lat, lon):
        return await self._respond(
            "fetch_daily_forecast",
            {"forecastDays": [{"displayDate": {"year": 2025, "month": 6, "day": 1}}]},
        )

    async def fetch_hourly_history(self, lat, lon):
        return await self._respond("fetch_hourly_history", _hours("historyHours", 12))

    async def geocode(self, address):
        self.calls.append("geocode")
        if "geocode" in self.failures:
            raise self.failures["geocode"]
        return LocationData(latitude=39.9, longitude=116.4, name=address, address="中国北京市")

    async def reverse_geocode(self, lat, lon):
        self.calls.append("reverse_geocode")
        if "reverse_geocode" in self.failures:
            raise self.failures["reverse_geocode"]
        return "中国上海市"


def _dashboard(fetcher, theme_data=None, location_data=None):
    theme = ThemeController(MemoryStorage(theme_data), system_prefers_dark=False)
    return WeatherDashboard(fetcher, theme, location_store=MemoryStorage(location_data))


@pytest.mark.asyncio
async def test_refresh_fills_every_category():
    dash = _dashboard(MockFetcher())
    dash.snapshot.location = HERE
    snap = await dash.async_refresh()

    assert snap.error is None
    assert snap.current.observation_time == "2025-06-01T08:00:00Z"
    assert len(snap.hourly_forecast.hours) == 24
    assert len(snap.daily_forecast.days) == 1
    assert len(snap.hourly_history.hours) == 12
    assert dash.highlights["hourly_forecast"].length == 24
    assert dash.highlights["hourly_history"].length == 12


@pytest.mark.asyncio
async def test_one_failing_category_does_not_block_the_others():
    fetcher = MockFetcher(failures={"fetch_hourly_forecast": NetworkError("HTTP 503")})
    dash = _dashboard(fetcher)
    dash.snapshot.location = HERE
    snap = await dash.async_refresh()

    assert snap.hourly_forecast == HourlyForecast(hours=[])
    assert snap.current is not None
    assert len(snap.daily_forecast.days) == 1
    assert len(snap.hourly_history.hours) == 12
    assert snap.error.kind is ErrorKind.NETWORK_ERROR
    assert describe_error(snap.error).title == "API请求失败"


@pytest.mark.asyncio
async def test_first_failure_wins_within_one_refresh():
    fetcher = MockFetcher(
        failures={
            "fetch_current": LocationNotSupported("Location not supported"),
            "fetch_hourly_history": NetworkError("timeout"),
        },
        delays={"fetch_current": 0.05},
    )
    dash = _dashboard(fetcher)
    dash.snapshot.location = HERE
    snap = await dash.async_refresh()

    # history fails first (no delay), so its error is the one displayed
    assert snap.error.kind is ErrorKind.NETWORK_ERROR
    assert snap.current is None
    assert snap.hourly_history is None
    assert len(snap.hourly_forecast.hours) == 24


@pytest.mark.asyncio
async def test_unexpected_exceptions_are_classified():
    fetcher = MockFetcher(failures={"fetch_daily_forecast": aiohttp.ClientConnectionError("reset")})
    dash = _dashboard(fetcher)
    dash.snapshot.location = HERE
    snap = await dash.async_refresh()
    assert snap.error.kind is ErrorKind.NETWORK_ERROR

    fetcher.failures = {"fetch_daily_forecast": KeyError("boom")}
    snap = await dash.async_refresh()
    assert snap.error.kind is ErrorKind.UNKNOWN_ERROR


@pytest.mark.asyncio
async def test_new_refresh_clears_previous_error():
    fetcher = MockFetcher(failures={"fetch_current": NetworkError("down")})
    dash = _dashboard(fetcher)
    dash.snapshot.location = HERE
    await dash.async_refresh()
    fetcher.failures = {}
    snap = await dash.async_refresh()
    assert snap.error is None
    assert snap.current is not None


@pytest.mark.asyncio
async def test_refresh_resets_highlight():
    dash = _dashboard(MockFetcher())
    dash.snapshot.location = HERE
    await dash.async_refresh()
    dash.highlights["hourly_forecast"].chart_point_entered(5)
    await dash.async_refresh()
    assert dash.highlights["hourly_forecast"].active_index is None


@pytest.mark.asyncio
async def test_theme_change_rethemes_without_fetching():
    fetcher = MockFetcher()
    dash = _dashboard(fetcher)
    dash.snapshot.location = HERE
    await dash.async_refresh()
    calls_before = list(fetcher.calls)
    assert dash.snapshot.hourly_forecast.hours[0].condition.icon_uri == ICON + ".svg"

    await dash.theme.async_set_mode("dark")

    assert fetcher.calls == calls_before
    snap = dash.snapshot
    assert snap.current.condition.icon_uri == ICON + "_dark.svg"
    assert all(h.condition.icon_uri == ICON + "_dark.svg" for h in snap.hourly_forecast.hours)
    assert all(h.condition.icon_uri == ICON + "_dark.svg" for h in snap.hourly_history.hours)
    assert snap.daily_forecast.days[0].condition.icon_uri == "_dark.svg"


@pytest.mark.asyncio
async def test_refresh_without_location_raises():
    dash = _dashboard(MockFetcher())
    with pytest.raises(ValueError):
        await dash.async_refresh()


@pytest.mark.asyncio
async def test_set_location_persists_and_refreshes():
    fetcher = MockFetcher()
    dash = _dashboard(fetcher)
    await dash.async_set_location(HERE)

    expected = LocationData(latitude=HERE.latitude, longitude=HERE.longitude, name="上海", address="中国上海市")
    assert dash.location_store.saves == [expected.as_dict()]
    assert fetcher.calls[0] == "reverse_geocode"
    assert "fetch_current" in fetcher.calls

    restored = _dashboard(MockFetcher(), location_data=dash.location_store.data)
    assert await restored.async_load_location() == expected
    assert restored.location == expected


@pytest.mark.asyncio
async def test_reverse_geocode_failure_keeps_coordinates():
    fetcher = MockFetcher(failures={"reverse_geocode": GeocodingError("denied")})
    dash = _dashboard(fetcher)
    snap = await dash.async_set_location(HERE)
    assert dash.location == HERE
    assert snap.error is None


@pytest.mark.asyncio
async def test_invalid_persisted_location_is_ignored():
    dash = _dashboard(MockFetcher(), location_data={"latitude": "north"})
    assert await dash.async_load_location() is None
    assert dash.location is None


@pytest.mark.asyncio
async def test_address_search_surfaces_not_found():
    fetcher = MockFetcher(failures={"geocode": AddressNotFound("未找到该地址")})
    dash = _dashboard(fetcher)
    assert await dash.async_search_address("nowhere") is None
    assert dash.snapshot.error.kind is ErrorKind.ADDRESS_NOT_FOUND
    assert fetcher.calls == ["geocode"]


@pytest.mark.asyncio
async def test_address_search_switches_location():
    fetcher = MockFetcher()
    dash = _dashboard(fetcher)
    location = await dash.async_search_address("北京")
    assert location.name == "北京"
    assert dash.location == location
    assert dash.snapshot.current is not None
