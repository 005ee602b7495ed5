import pytest

from custom_components.weather_dashboard import SET_HIGHLIGHT_SCHEMA, entry_store_key, system_prefers_dark
from custom_components.weather_dashboard.const import STORE_LOCATION_KEY
from custom_components.weather_dashboard.dashboard import WeatherDashboard
from custom_components.weather_dashboard.models import LocationData
from custom_components.weather_dashboard.theme import ThemeController
import voluptuous as vol


class State:
    def __init__(self, state):
        self.state = state


class DummyStates:
    def __init__(self, states):
        self._states = states

    def get(self, entity_id):
        return self._states.get(entity_id)


class DummyHass:
    def __init__(self, states=None):
        self.data = {}
        self.states = DummyStates(states or {})


@pytest.mark.parametrize(
    "state,expected",
    [
        ("below_horizon", True),
        ("above_horizon", False),
        ("on", True),
        ("off", False),
        ("unavailable", None),
        ("unknown", None),
    ],
)
def test_system_preference_from_entity_state(state, expected):
    hass = DummyHass({"sun.sun": State(state)})
    assert system_prefers_dark(hass, "sun.sun") is expected


def test_missing_entity_means_unknown_preference():
    assert system_prefers_dark(DummyHass(), "sun.sun") is None
    assert system_prefers_dark(DummyHass(), None) is None


def test_highlight_service_schema():
    data = SET_HIGHLIGHT_SCHEMA({"sequence": "hourly_forecast", "index": "3"})
    assert data["index"] == 3
    with pytest.raises(vol.Invalid):
        SET_HIGHLIGHT_SCHEMA({"sequence": "daily_forecast", "index": 1})
    with pytest.raises(vol.Invalid):
        SET_HIGHLIGHT_SCHEMA({"sequence": "hourly_history", "index": -1})


class KeyedStore:
    """Dict-backed stand-in for HA's Store: one shared namespace, addressed by key."""

    def __init__(self, files, key):
        self._files = files
        self.key = key

    async def async_load(self):
        return self._files.get(self.key)

    async def async_save(self, data):
        self._files[self.key] = dict(data)


class NoGeocodeFetcher:
    async def reverse_geocode(self, lat, lon):
        return None

    async def fetch_current(self, lat, lon):
        return {}

    async def fetch_hourly_forecast(self, lat, lon):
        return {}

    async def fetch_daily_forecast(self, lat, lon):
        return {}

    async def fetch_hourly_history(self, lat, lon):
        return {}


def _entry_dashboard(files, entry_id):
    theme = ThemeController(KeyedStore(files, "theme"))
    store = KeyedStore(files, entry_store_key(STORE_LOCATION_KEY, entry_id))
    return WeatherDashboard(NoGeocodeFetcher(), theme, location_store=store)


def test_store_key_is_scoped_to_the_entry():
    assert entry_store_key(STORE_LOCATION_KEY, "a") != entry_store_key(STORE_LOCATION_KEY, "b")
    assert entry_store_key(STORE_LOCATION_KEY, "a").endswith("_a")


@pytest.mark.asyncio
async def test_each_entry_keeps_its_own_location():
    files = {}
    shanghai = LocationData(latitude=31.23, longitude=121.47, name="Shanghai", address="addr")
    beijing = LocationData(latitude=39.9, longitude=116.4, name="Beijing", address="addr")

    first = _entry_dashboard(files, "entry_a")
    await first.async_set_location(shanghai)

    second = _entry_dashboard(files, "entry_b")
    assert await second.async_load_location() is None

    await second.async_set_location(beijing)
    assert await _entry_dashboard(files, "entry_a").async_load_location() == shanghai
    assert await _entry_dashboard(files, "entry_b").async_load_location() == beijing
