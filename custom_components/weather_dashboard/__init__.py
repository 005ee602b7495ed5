"""
Weather Dashboard - integration entry points.

Setup wires the Google Weather client, the tri-state theme controller (backed
by a Home Assistant Store and driven by a system color-scheme entity), the
per-category dashboard and its coordinator. Required values (API key and
coordinates) must be present in the config entry; setup fails loudly otherwise.
"""
import logging

import voluptuous as vol
from homeassistant.core import callback
from homeassistant.helpers import aiohttp_client
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.storage import Store
import homeassistant.helpers.config_validation as cv

from .const import (
    CATEGORY_HOURLY_FORECAST,
    CATEGORY_HOURLY_HISTORY,
    CONF_API_KEY,
    CONF_LANGUAGE,
    CONF_LATITUDE,
    CONF_LONGITUDE,
    CONF_NAME,
    CONF_SYSTEM_THEME_ENTITY,
    CONF_THEME_MODE,
    CONF_UNITS_SYSTEM,
    CONF_UPDATE_INTERVAL,
    DARK_STATES,
    DEFAULT_LANGUAGE,
    DEFAULT_SYSTEM_THEME_ENTITY,
    DEFAULT_UNITS_SYSTEM,
    DEFAULT_UPDATE_INTERVAL,
    DOMAIN,
    PLATFORMS,
    STORE_LOCATION_KEY,
    STORE_THEME_KEY,
    STORE_VERSION,
    THEME_AUTO,
    THEME_MODES,
)
from .coordinator import WeatherDashboardCoordinator
from .dashboard import WeatherDashboard
from .models import LocationData
from .theme import ThemeController
from .weather_fetcher import WeatherFetcher

_LOGGER = logging.getLogger(__name__)

SERVICE_SET_LOCATION = "set_location"
SERVICE_SEARCH_ADDRESS = "search_address"
SERVICE_SET_HIGHLIGHT = "set_highlight"

ATTR_ENTRY_ID = "entry_id"
ATTR_ADDRESS = "address"
ATTR_SEQUENCE = "sequence"
ATTR_INDEX = "index"

SET_LOCATION_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): cv.string,
        vol.Required(CONF_LATITUDE): cv.latitude,
        vol.Required(CONF_LONGITUDE): cv.longitude,
        vol.Optional(CONF_NAME): cv.string,
    }
)
SEARCH_ADDRESS_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): cv.string,
        vol.Required(ATTR_ADDRESS): cv.string,
    }
)
SET_HIGHLIGHT_SCHEMA = vol.Schema(
    {
        vol.Optional(ATTR_ENTRY_ID): cv.string,
        vol.Required(ATTR_SEQUENCE): vol.In([CATEGORY_HOURLY_FORECAST, CATEGORY_HOURLY_HISTORY]),
        # omitted index means the pointer left the chart/list
        vol.Optional(ATTR_INDEX): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)


def system_prefers_dark(hass, entity_id):
    """Read the system color-scheme signal from an entity state; None when unknown."""
    state = hass.states.get(entity_id) if entity_id else None
    if state is None or state.state in ("unknown", "unavailable"):
        return None
    return state.state in DARK_STATES


def entry_store_key(key, entry_id):
    return f"{key}_{entry_id}"


async def async_setup_entry(hass, entry):
    """Set up integration from a config entry."""

    _LOGGER.debug("Starting async_setup_entry for entry %s", entry.entry_id)
    session = aiohttp_client.async_get_clientsession(hass)

    api_key = entry.data.get(CONF_API_KEY)
    if not api_key:
        _LOGGER.error("Config entry %s missing required API key; aborting setup", entry.entry_id)
        return False

    lat = entry.data.get(CONF_LATITUDE)
    lon = entry.data.get(CONF_LONGITUDE)
    _LOGGER.debug("Config entry %s coordinates lat=%s lon=%s", entry.entry_id, lat, lon)
    if lat is None or lon is None:
        _LOGGER.error("Config entry missing latitude/longitude; aborting setup for entry %s", entry.entry_id)
        return False

    options = entry.options or {}
    fetcher = WeatherFetcher(
        session,
        api_key,
        language_code=entry.data.get(CONF_LANGUAGE, DEFAULT_LANGUAGE),
        units_system=entry.data.get(CONF_UNITS_SYSTEM, DEFAULT_UNITS_SYSTEM),
    )

    theme_entity = options.get(CONF_SYSTEM_THEME_ENTITY, DEFAULT_SYSTEM_THEME_ENTITY)
    default_mode = entry.data.get(CONF_THEME_MODE, THEME_AUTO)
    if default_mode not in THEME_MODES:
        _LOGGER.warning("Entry %s has invalid theme mode %r; using %s", entry.entry_id, default_mode, THEME_AUTO)
        default_mode = THEME_AUTO

    coordinator = None

    def apply_theme(_state):
        if coordinator is not None:
            coordinator.async_update_listeners()

    theme = ThemeController(
        Store(hass, STORE_VERSION, entry_store_key(STORE_THEME_KEY, entry.entry_id)),
        system_prefers_dark=system_prefers_dark(hass, theme_entity),
        apply_theme=apply_theme,
        default_mode=default_mode,
    )
    await theme.async_load()

    dashboard = WeatherDashboard(
        fetcher,
        theme,
        location_store=Store(hass, STORE_VERSION, entry_store_key(STORE_LOCATION_KEY, entry.entry_id)),
    )
    restored = await dashboard.async_load_location()
    if restored is None:
        dashboard.snapshot.location = LocationData(
            latitude=float(lat),
            longitude=float(lon),
            name=entry.data.get(CONF_NAME),
        )

    coordinator = WeatherDashboardCoordinator(
        hass,
        entry,
        dashboard=dashboard,
        update_interval=options.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL),
    )
    _LOGGER.debug("WeatherDashboardCoordinator created for entry %s", entry.entry_id)

    @callback
    def _handle_system_theme(event):
        new_state = event.data.get("new_state")
        prefers_dark = None
        if new_state is not None and new_state.state not in ("unknown", "unavailable"):
            prefers_dark = new_state.state in DARK_STATES
        _LOGGER.debug("System theme entity %s changed; prefers_dark=%s", theme_entity, prefers_dark)
        hass.async_create_task(theme.async_set_system_preference(prefers_dark))

    entry.async_on_unload(async_track_state_change_event(hass, [theme_entity], _handle_system_theme))
    entry.async_on_unload(coordinator.async_shutdown_listeners)
    entry.async_on_unload(entry.add_update_listener(_async_options_updated))

    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator
    _async_register_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.debug("async_setup_entry completed for entry %s", entry.entry_id)
    return True


async def async_unload_entry(hass, entry):
    """Unload a config entry."""
    _LOGGER.debug("Starting async_unload_entry for entry %s", entry.entry_id)
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
        if not hass.data.get(DOMAIN):
            for service in (SERVICE_SET_LOCATION, SERVICE_SEARCH_ADDRESS, SERVICE_SET_HIGHLIGHT):
                hass.services.async_remove(DOMAIN, service)
    _LOGGER.debug("async_unload_entry finished for entry %s, unload_ok=%s", entry.entry_id, unload_ok)
    return unload_ok


async def _async_options_updated(hass, entry):
    """Options changed (theme entity, interval); rebuild the entry."""
    await hass.config_entries.async_reload(entry.entry_id)


def _coordinators(hass, call):
    entries = hass.data.get(DOMAIN, {})
    entry_id = call.data.get(ATTR_ENTRY_ID)
    if entry_id:
        coordinator = entries.get(entry_id)
        return [coordinator] if coordinator is not None else []
    return list(entries.values())


def _async_register_services(hass):
    if hass.services.has_service(DOMAIN, SERVICE_SET_LOCATION):
        return

    async def _set_location(call):
        location = LocationData(
            latitude=call.data[CONF_LATITUDE],
            longitude=call.data[CONF_LONGITUDE],
            name=call.data.get(CONF_NAME),
        )
        for coordinator in _coordinators(hass, call):
            await coordinator.async_set_location(location)

    async def _search_address(call):
        for coordinator in _coordinators(hass, call):
            await coordinator.async_search_address(call.data[ATTR_ADDRESS])

    async def _set_highlight(call):
        index = call.data.get(ATTR_INDEX)
        for coordinator in _coordinators(hass, call):
            sync = coordinator.dashboard.highlights[call.data[ATTR_SEQUENCE]]
            if index is None:
                sync.list_item_left()
            else:
                sync.list_item_tapped(index)

    hass.services.async_register(DOMAIN, SERVICE_SET_LOCATION, _set_location, schema=SET_LOCATION_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_SEARCH_ADDRESS, _search_address, schema=SEARCH_ADDRESS_SCHEMA)
    hass.services.async_register(DOMAIN, SERVICE_SET_HIGHLIGHT, _set_highlight, schema=SET_HIGHLIGHT_SCHEMA)
