"""Refresh orchestration for the four weather categories.

Each category is fetched and aggregated on its own failure path, so one
failing category never keeps the others from being displayed. The first
failure of a refresh is the one surfaced to the user; later failures in the
same refresh are logged but do not replace it.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from .const import (
    CATEGORIES,
    CATEGORY_CURRENT,
    CATEGORY_DAILY_FORECAST,
    CATEGORY_HOURLY_FORECAST,
    CATEGORY_HOURLY_HISTORY,
)
from .data_formatter import ForecastAggregator
from .errors import WeatherDashboardError, classify_error
from .highlight import HighlightSynchronizer
from .icons import IconUriResolver
from .models import CurrentWeather, DailyForecast, HourlyForecast, HourlyHistory, LocationData
from .theme import ThemeController, ThemeState

_LOGGER = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    """What is currently displayed. Each category slice is replaced wholesale."""

    location: Optional[LocationData] = None
    current: Optional[CurrentWeather] = None
    hourly_forecast: Optional[HourlyForecast] = None
    daily_forecast: Optional[DailyForecast] = None
    hourly_history: Optional[HourlyHistory] = None
    error: Optional[WeatherDashboardError] = None

    def slice(self, category: str) -> Any:
        return getattr(self, _SLICE_ATTR[category])


_SLICE_ATTR = {
    CATEGORY_CURRENT: "current",
    CATEGORY_HOURLY_FORECAST: "hourly_forecast",
    CATEGORY_DAILY_FORECAST: "daily_forecast",
    CATEGORY_HOURLY_HISTORY: "hourly_history",
}


class WeatherDashboard:
    """
    Owns the displayed snapshot, the per-sequence highlight state and the
    reaction to theme changes (icon URIs recomputed in place, no refetch).

    location_store, when given, is any object exposing async_load()/async_save(data)
    and keeps the last displayed location across restarts.
    """

    def __init__(
        self,
        fetcher,
        theme: ThemeController,
        location_store=None,
        aggregator: Optional[ForecastAggregator] = None,
    ) -> None:
        self.fetcher = fetcher
        self.theme = theme
        self.location_store = location_store
        self.aggregator = aggregator or ForecastAggregator(IconUriResolver(theme))
        self.snapshot = DashboardSnapshot()
        self.highlights: Dict[str, HighlightSynchronizer] = {
            CATEGORY_HOURLY_FORECAST: HighlightSynchronizer(),
            CATEGORY_HOURLY_HISTORY: HighlightSynchronizer(),
        }
        self._unsub_theme = theme.async_add_listener(self._handle_theme_change)

    @property
    def location(self) -> Optional[LocationData]:
        return self.snapshot.location

    def close(self) -> None:
        self._unsub_theme()

    # -----------------------
    # Location
    # -----------------------
    async def async_load_location(self) -> Optional[LocationData]:
        """Restore the last displayed location, if one was persisted."""
        if self.location_store is None:
            return None
        stored = await self.location_store.async_load()
        if not stored:
            return None
        try:
            location = LocationData.from_dict(stored)
        except (KeyError, TypeError, ValueError):
            _LOGGER.warning("Ignoring invalid persisted location %r", stored)
            return None
        self.snapshot.location = location
        _LOGGER.debug("Restored last location %s", location)
        return location

    async def async_set_location(self, location: LocationData) -> DashboardSnapshot:
        """Display a new location: fill in its address, persist it, refresh every category."""
        if location.address is None:
            try:
                address = await self.fetcher.reverse_geocode(location.latitude, location.longitude)
                location = replace(location, address=address)
            except WeatherDashboardError:
                _LOGGER.warning("Reverse geocoding failed for %s,%s; keeping coordinates only", location.latitude, location.longitude)
        self.snapshot.location = location
        if self.location_store is not None:
            await self.location_store.async_save(location.as_dict())
        return await self.async_refresh()

    async def async_search_address(self, address: str) -> Optional[LocationData]:
        """Geocode an address and display it; a failure is surfaced as the dashboard error."""
        try:
            location = await self.fetcher.geocode(address)
        except Exception as exc:
            _LOGGER.exception("Address lookup failed for %r", address)
            self.snapshot.error = classify_error(exc)
            return None
        await self.async_set_location(location)
        return location

    # -----------------------
    # Refresh
    # -----------------------
    async def async_refresh(self) -> DashboardSnapshot:
        """Fetch all four categories concurrently; each replaces only its own slice."""
        location = self.snapshot.location
        if location is None:
            raise ValueError("No location selected; cannot refresh weather data")

        self.snapshot.error = None
        _LOGGER.debug("Refreshing weather data for %s,%s", location.latitude, location.longitude)
        await asyncio.gather(*(self._async_refresh_category(category, location) for category in CATEGORIES))
        return self.snapshot

    def _handlers(self, category: str) -> Tuple[Callable[[float, float], Awaitable[Any]], Callable[[Any], Any]]:
        if category == CATEGORY_CURRENT:
            return self.fetcher.fetch_current, self.aggregator.aggregate_current
        if category == CATEGORY_HOURLY_FORECAST:
            return self.fetcher.fetch_hourly_forecast, self.aggregator.aggregate_hourly_forecast
        if category == CATEGORY_DAILY_FORECAST:
            return self.fetcher.fetch_daily_forecast, self.aggregator.aggregate_daily_forecast
        if category == CATEGORY_HOURLY_HISTORY:
            return self.fetcher.fetch_hourly_history, self.aggregator.aggregate_hourly_history
        raise ValueError(f"Unknown category {category!r}")

    async def _async_refresh_category(self, category: str, location: LocationData) -> None:
        fetch, aggregate = self._handlers(category)
        try:
            payload = await fetch(location.latitude, location.longitude)
            value = aggregate(payload)
        except Exception as exc:
            _LOGGER.exception("Fetching %s failed for %s,%s", category, location.latitude, location.longitude)
            self._record_error(category, exc)
            value = HourlyForecast(hours=[]) if category == CATEGORY_HOURLY_FORECAST else None
        self._replace_slice(category, value)

    def _record_error(self, category: str, exc: BaseException) -> None:
        if self.snapshot.error is not None:
            _LOGGER.debug("Not surfacing %s failure; an earlier error is already displayed", category)
            return
        self.snapshot.error = classify_error(exc)

    def _replace_slice(self, category: str, value: Any) -> None:
        setattr(self.snapshot, _SLICE_ATTR[category], value)
        sync = self.highlights.get(category)
        if sync is not None:
            sync.replace_sequence(len(value.hours) if value is not None else 0)

    # -----------------------
    # Theme
    # -----------------------
    def _handle_theme_change(self, state: ThemeState) -> None:
        snap = self.snapshot
        self.aggregator.retheme(snap.current, snap.hourly_forecast, snap.daily_forecast, snap.hourly_history)
