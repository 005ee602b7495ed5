"""
WeatherFetcher for the Google Maps Platform Weather and Geocoding APIs.

- One coroutine per data category (current / hourly forecast / daily forecast / hourly history);
  each returns the raw JSON payload and raises a WeatherDashboardError on failure.
- Geocoding helpers turn an address into coordinates and coordinates into a display address.
- No retries and no caching here; callers decide how a failure is contained.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from .const import (
    CURRENT_PATH,
    DAILY_FORECAST_PATH,
    DEFAULT_FORECAST_DAYS,
    DEFAULT_FORECAST_HOURS,
    DEFAULT_HISTORY_HOURS,
    DEFAULT_LANGUAGE,
    DEFAULT_UNITS_SYSTEM,
    GEOCODE_BASE,
    HOURLY_FORECAST_PATH,
    HOURLY_HISTORY_PATH,
    WEATHER_BASE,
)
from .errors import (
    AddressNotFound,
    GeocodingError,
    LocationNotSupported,
    NetworkError,
    UnknownError,
)
from .models import LocationData

_LOGGER = logging.getLogger(__name__)

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30)


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            return str(err.get("message") or err.get("status") or "")
        if isinstance(err, str):
            return err
    return ""


class WeatherFetcher:
    """
    Thin async client over a shared aiohttp session.

    base_url / geocode_url are overridable so tests can point the client at a local server.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        language_code: str = DEFAULT_LANGUAGE,
        units_system: str = DEFAULT_UNITS_SYSTEM,
        base_url: str = WEATHER_BASE,
        geocode_url: str = GEOCODE_BASE,
    ) -> None:
        if not api_key:
            raise ValueError("WeatherFetcher requires an API key")
        self.session = session
        self.api_key = api_key
        self.language_code = language_code
        self.units_system = units_system
        self.base_url = base_url.rstrip("/")
        self.geocode_url = geocode_url

    # -----------------------
    # Weather categories
    # -----------------------
    async def fetch_current(self, latitude: float, longitude: float) -> Dict[str, Any]:
        return await self._get_weather(CURRENT_PATH, latitude, longitude)

    async def fetch_hourly_forecast(self, latitude: float, longitude: float, hours: int = DEFAULT_FORECAST_HOURS) -> Dict[str, Any]:
        return await self._get_weather(HOURLY_FORECAST_PATH, latitude, longitude, hours=int(hours))

    async def fetch_daily_forecast(self, latitude: float, longitude: float, days: int = DEFAULT_FORECAST_DAYS) -> Dict[str, Any]:
        return await self._get_weather(DAILY_FORECAST_PATH, latitude, longitude, days=int(days))

    async def fetch_hourly_history(self, latitude: float, longitude: float, hours: int = DEFAULT_HISTORY_HOURS) -> Dict[str, Any]:
        return await self._get_weather(HOURLY_HISTORY_PATH, latitude, longitude, hours=int(hours))

    async def _get_weather(self, path: str, latitude: float, longitude: float, **extra: Any) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "key": self.api_key,
            "location.latitude": float(latitude),
            "location.longitude": float(longitude),
            "languageCode": self.language_code,
            "unitsSystem": self.units_system,
        }
        params.update(extra)
        url = f"{self.base_url}{path}"
        try:
            async with self.session.get(url, params=params, timeout=REQUEST_TIMEOUT) as resp:
                if resp.status >= 400:
                    body = await self._safe_json(resp)
                    message = _error_message(body) or f"HTTP {resp.status}"
                    _LOGGER.error("Weather API %s returned %s: %s", path, resp.status, message)
                    if resp.status == 400 and "not supported" in message.lower():
                        raise LocationNotSupported(message)
                    raise NetworkError(message)
                try:
                    data = await resp.json(content_type=None)
                except ValueError as exc:
                    _LOGGER.error("Weather API %s returned a non-JSON body", path)
                    raise UnknownError(f"Weather API {path} returned a non-JSON body") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            _LOGGER.exception("Weather API request %s failed for %s,%s", path, latitude, longitude)
            raise NetworkError(f"Weather API request failed: {exc}") from exc

        if not isinstance(data, dict):
            raise UnknownError(f"Weather API {path} returned unexpected payload shape")
        return data

    # -----------------------
    # Geocoding
    # -----------------------
    async def geocode(self, address: str) -> LocationData:
        """Resolve an address to coordinates (first result)."""
        if not address or not str(address).strip():
            raise AddressNotFound("缺少地址参数")
        data = await self._get_geocode({"address": address})
        result = data["results"][0]
        location = result.get("geometry", {}).get("location", {})
        try:
            return LocationData(
                latitude=float(location["lat"]),
                longitude=float(location["lng"]),
                name=str(address),
                address=result.get("formatted_address"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError("地理编码结果缺少坐标") from exc

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[str]:
        """Display address for coordinates; a locality-level result is preferred."""
        data = await self._get_geocode({"latlng": f"{latitude},{longitude}"})
        results = data["results"]
        for result in results:
            if "locality" in (result.get("types") or []):
                return result.get("formatted_address")
        return results[0].get("formatted_address")

    async def _get_geocode(self, query: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(query)
        params["key"] = self.api_key
        if self.language_code:
            params["language"] = self.language_code
        try:
            async with self.session.get(self.geocode_url, params=params, timeout=REQUEST_TIMEOUT) as resp:
                resp.raise_for_status()
                try:
                    data = await resp.json(content_type=None)
                except ValueError as exc:
                    _LOGGER.error("Geocoding returned a non-JSON body for %s", query)
                    raise GeocodingError("地理编码返回了无效数据") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            _LOGGER.exception("Geocoding request failed for %s", query)
            raise GeocodingError(f"地理编码请求失败: {exc}") from exc

        if not isinstance(data, dict):
            raise GeocodingError("地理编码返回了无效数据")
        status = data.get("status")
        if status == "ZERO_RESULTS":
            raise AddressNotFound("未找到该地址，请尝试更具体的位置")
        if status in ("REQUEST_DENIED", "INVALID_REQUEST"):
            raise GeocodingError(f"请求地理编码失败: {data.get('error_message') or status}")
        if not data.get("results"):
            raise AddressNotFound("未找到该地址，请尝试更具体的位置")
        return data

    @staticmethod
    async def _safe_json(resp: aiohttp.ClientResponse) -> Any:
        try:
            return await resp.json(content_type=None)
        except (aiohttp.ClientError, ValueError):
            return None
