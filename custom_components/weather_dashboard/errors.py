"""Error taxonomy shown to the user.

Every failure that reaches the display is one of the closed set of ErrorKind
members. `describe_error` maps each kind to its presentation.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import aiohttp


class ErrorKind(str, Enum):
    NETWORK_ERROR = "network_error"
    LOCATION_NOT_SUPPORTED = "location_not_supported"
    ADDRESS_NOT_FOUND = "address_not_found"
    GEOCODING_ERROR = "geocoding_error"
    UNKNOWN_ERROR = "unknown_error"


class WeatherDashboardError(Exception):
    """Base error carrying its ErrorKind."""

    kind = ErrorKind.UNKNOWN_ERROR

    def __init__(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.message = message


class NetworkError(WeatherDashboardError):
    kind = ErrorKind.NETWORK_ERROR


class LocationNotSupported(WeatherDashboardError):
    kind = ErrorKind.LOCATION_NOT_SUPPORTED


class AddressNotFound(WeatherDashboardError):
    kind = ErrorKind.ADDRESS_NOT_FOUND


class GeocodingError(WeatherDashboardError):
    kind = ErrorKind.GEOCODING_ERROR


class UnknownError(WeatherDashboardError):
    kind = ErrorKind.UNKNOWN_ERROR


def classify_error(exc: BaseException) -> WeatherDashboardError:
    """Map any exception onto the closed taxonomy."""
    if isinstance(exc, WeatherDashboardError):
        return exc
    if isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError)):
        return NetworkError(str(exc) or "网络请求失败")
    return UnknownError(str(exc) or "获取数据时发生未知错误，请稍后再试")


@dataclass(frozen=True)
class ErrorDisplay:
    kind: ErrorKind
    title: str
    message: str
    severity: str  # "error" | "warning"
    suggestions: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "title": self.title,
            "message": self.message,
            "severity": self.severity,
            "suggestions": list(self.suggestions),
        }


# Every ErrorKind must have an entry here.
_PRESENTATION = {
    ErrorKind.LOCATION_NOT_SUPPORTED: (
        "位置不支持",
        "warning",
        ["尝试附近的大城市或地区", "确保位置名称拼写正确", "提供更具体的地址（如添加城市名、省/州名）"],
    ),
    ErrorKind.ADDRESS_NOT_FOUND: (
        "未找到地址",
        "warning",
        ["检查地址拼写是否正确", "使用更常见或官方的地名", "尝试附近的知名地标或城市"],
    ),
    ErrorKind.GEOCODING_ERROR: (
        "地理编码错误",
        "error",
        ["可能是API密钥限制或无效", "请稍后再试"],
    ),
    ErrorKind.NETWORK_ERROR: (
        "API请求失败",
        "error",
        ["检查网络连接", "刷新页面", "如果问题持续存在，请稍后再试"],
    ),
    ErrorKind.UNKNOWN_ERROR: (
        "发生错误",
        "error",
        [],
    ),
}


def describe_error(error: BaseException) -> ErrorDisplay:
    err = classify_error(error)
    title, severity, suggestions = _PRESENTATION[err.kind]
    return ErrorDisplay(
        kind=err.kind,
        title=title,
        message=err.message or "请稍后重试",
        severity=severity,
        suggestions=list(suggestions),
    )
