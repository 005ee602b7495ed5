# Coordinator: drives periodic refreshes of the dashboard and pushes theme/highlight changes to entities

from datetime import timedelta
import async_timeout
import logging

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import DOMAIN, REFRESH_TIMEOUT
from .dashboard import DashboardSnapshot, WeatherDashboard
from .models import LocationData

_LOGGER = logging.getLogger(__name__)


class WeatherDashboardCoordinator(DataUpdateCoordinator):
    def __init__(
        self,
        hass,
        config_entry,
        dashboard: WeatherDashboard,
        update_interval: int,
    ):
        """
        - dashboard owns fetch/aggregate/theme state; the coordinator only schedules it.
        - a failed category never fails the update; it shows up as snapshot.error instead.
        """
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            update_interval=timedelta(seconds=update_interval),
        )
        self.entry_id = config_entry.entry_id
        self.dashboard = dashboard
        self._unsub_highlights = [
            sync.async_add_listener(lambda _state: self.async_update_listeners())
            for sync in dashboard.highlights.values()
        ]

    @property
    def theme(self):
        return self.dashboard.theme

    async def async_set_location(self, location: LocationData) -> None:
        """Persist a new location and refresh immediately."""
        async with async_timeout.timeout(REFRESH_TIMEOUT):
            snapshot = await self.dashboard.async_set_location(location)
        self.async_set_updated_data(snapshot)

    async def async_search_address(self, address: str):
        async with async_timeout.timeout(REFRESH_TIMEOUT):
            location = await self.dashboard.async_search_address(address)
        self.async_set_updated_data(self.dashboard.snapshot)
        return location

    def async_shutdown_listeners(self) -> None:
        for unsub in self._unsub_highlights:
            unsub()
        self._unsub_highlights = []
        self.dashboard.close()

    async def _async_update_data(self) -> DashboardSnapshot:
        """Refresh all four categories; per-category failures are contained by the dashboard."""
        async with async_timeout.timeout(REFRESH_TIMEOUT):
            snapshot = await self.dashboard.async_refresh()
        if snapshot.error is not None:
            _LOGGER.debug("Refresh for %s finished with error: %s", self.entry_id, snapshot.error.kind.value)
        return snapshot
