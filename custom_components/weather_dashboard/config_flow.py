"""Config flow for Weather Dashboard"""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import aiohttp_client, selector
import homeassistant.helpers.config_validation as cv

from .const import (
    DOMAIN,
    DEFAULT_NAME,
    CONF_NAME,
    CONF_LATITUDE,
    CONF_LONGITUDE,
    CONF_API_KEY,
    CONF_LANGUAGE,
    CONF_UNITS_SYSTEM,
    CONF_THEME_MODE,
    CONF_SYSTEM_THEME_ENTITY,
    CONF_UPDATE_INTERVAL,
    DEFAULT_LANGUAGE,
    DEFAULT_SYSTEM_THEME_ENTITY,
    DEFAULT_UNITS_SYSTEM,
    DEFAULT_UPDATE_INTERVAL,
    THEME_AUTO,
    THEME_DARK,
    THEME_LIGHT,
    UNITS_IMPERIAL,
    UNITS_METRIC,
)
from .errors import LocationNotSupported, NetworkError, WeatherDashboardError
from .weather_fetcher import WeatherFetcher

_LOGGER = logging.getLogger(__name__)


class WeatherDashboardConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Weather Dashboard."""

    VERSION = 1

    def __init__(self) -> None:
        self.dashboard_config: dict[str, Any] = {}

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Name, coordinates and API key; the key is checked with one current-conditions lookup."""
        errors: dict[str, str] = {}
        if user_input is not None:
            try:
                lat = float(user_input[CONF_LATITUDE])
                lon = float(user_input[CONF_LONGITUDE])
                if not (-90 <= lat <= 90 and -180 <= lon <= 180):
                    errors["base"] = "invalid_coordinates"
            except (ValueError, KeyError):
                errors["base"] = "invalid_coordinates"

            if not errors:
                submitted_title = str(user_input.get(CONF_NAME, "")).strip()
                for e in self.hass.config_entries.async_entries(DOMAIN):
                    if e.title == submitted_title:
                        _LOGGER.debug("Attempt to create entry with duplicate title '%s' rejected", submitted_title)
                        errors["base"] = "title_exists"
                        break

            if not errors:
                errors.update(await self._async_validate_api_key(user_input[CONF_API_KEY], lat, lon))

            if not errors:
                self.dashboard_config.update(user_input)
                return await self.async_step_display()

        default_name = user_input.get(CONF_NAME, DEFAULT_NAME) if user_input else DEFAULT_NAME
        default_lat = user_input.get(CONF_LATITUDE, self.hass.config.latitude) if user_input else self.hass.config.latitude
        default_lon = user_input.get(CONF_LONGITUDE, self.hass.config.longitude) if user_input else self.hass.config.longitude

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_NAME, default=default_name): str,
                    vol.Required(CONF_LATITUDE, default=default_lat): cv.latitude,
                    vol.Required(CONF_LONGITUDE, default=default_lon): cv.longitude,
                    vol.Required(CONF_API_KEY): str,
                }
            ),
            errors=errors,
        )

    async def _async_validate_api_key(self, api_key: str, lat: float, lon: float) -> dict[str, str]:
        fetcher = WeatherFetcher(aiohttp_client.async_get_clientsession(self.hass), api_key)
        try:
            await fetcher.fetch_current(lat, lon)
        except LocationNotSupported:
            return {"base": "location_not_supported"}
        except NetworkError:
            _LOGGER.debug("API key validation failed for %s,%s", lat, lon, exc_info=True)
            return {"base": "cannot_connect"}
        except WeatherDashboardError:
            _LOGGER.exception("Unexpected response while validating API key")
            return {"base": "unknown"}
        return {}

    async def async_step_display(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Language, unit system and the initial theme mode."""
        if user_input is not None:
            self.dashboard_config.update(user_input)
            title = str(self.dashboard_config.get(CONF_NAME) or DEFAULT_NAME).strip()
            return self.async_create_entry(title=title, data=dict(self.dashboard_config))

        return self.async_show_form(
            step_id="display",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_LANGUAGE, default=DEFAULT_LANGUAGE): str,
                    vol.Required(CONF_UNITS_SYSTEM, default=DEFAULT_UNITS_SYSTEM): selector.SelectSelector(
                        selector.SelectSelectorConfig(
                            options=[
                                {"value": UNITS_METRIC, "label": "Metric (°C, km/h, km)"},
                                {"value": UNITS_IMPERIAL, "label": "Imperial (°F, mph, mi)"},
                            ],
                            mode="dropdown",
                        )
                    ),
                    vol.Required(CONF_THEME_MODE, default=THEME_AUTO): selector.SelectSelector(
                        selector.SelectSelectorConfig(
                            options=[
                                {"value": THEME_AUTO, "label": "Follow system"},
                                {"value": THEME_LIGHT, "label": "Light"},
                                {"value": THEME_DARK, "label": "Dark"},
                            ],
                            mode="list",
                        )
                    ),
                }
            ),
        )

    # Options flow (simple)
    @staticmethod
    @callback
    def async_get_options_flow(config_entry: config_entries.ConfigEntry) -> config_entries.OptionsFlow:
        return OptionsFlowHandler(config_entry)


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options flow for Weather Dashboard."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        # Do NOT assign to `self.config_entry` (deprecated). Use a private attribute instead.
        self._config_entry = config_entry

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        options = self._config_entry.options or {}
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_SYSTEM_THEME_ENTITY,
                        default=options.get(CONF_SYSTEM_THEME_ENTITY, DEFAULT_SYSTEM_THEME_ENTITY),
                    ): selector.EntitySelector(selector.EntitySelectorConfig()),
                    vol.Required(
                        CONF_UPDATE_INTERVAL,
                        default=options.get(CONF_UPDATE_INTERVAL, DEFAULT_UPDATE_INTERVAL),
                    ): vol.All(vol.Coerce(int), vol.Range(min=300, max=6 * 3600)),
                }
            ),
        )
