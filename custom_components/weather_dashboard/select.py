"""Theme mode select (auto / light / dark)."""
import logging
from typing import Any, Dict, Optional

from homeassistant.components.select import SelectEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_NAME, DEFAULT_NAME, DOMAIN, THEME_MODES

_LOGGER = logging.getLogger(__name__)


class ThemeModeSelect(CoordinatorEntity, SelectEntity):
    """Selecting a mode persists it and re-themes displayed icons without refetching."""

    def __init__(self, coordinator, name: str):
        super().__init__(coordinator)
        self._attr_name = f"{name} Theme"
        self._attr_unique_id = f"{DOMAIN}_{coordinator.entry_id}_theme_mode"
        self._attr_options = list(THEME_MODES)

    @property
    def available(self) -> bool:
        return True

    @property
    def current_option(self) -> Optional[str]:
        return self.coordinator.theme.state.mode

    @property
    def extra_state_attributes(self) -> Dict[str, Any]:
        theme = self.coordinator.theme
        return {
            "resolved_dark": theme.state.resolved_dark,
            "system_prefers_dark": theme.system_prefers_dark,
        }

    async def async_select_option(self, option: str) -> None:
        _LOGGER.debug("Theme mode selected: %s", option)
        await self.coordinator.theme.async_set_mode(option)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities):
    coordinator = hass.data[DOMAIN].get(entry.entry_id) if hass.data.get(DOMAIN) else None
    if coordinator is None:
        raise RuntimeError("Coordinator not found in hass.data for this config entry")
    async_add_entities([ThemeModeSelect(coordinator, entry.data.get(CONF_NAME) or DEFAULT_NAME)])
