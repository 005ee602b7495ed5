"""Theme-aware condition icon URIs.

Upstream conditions carry an `iconBaseUri` (e.g. https://maps.gstatic.com/weather/v1/sunny)
from which the light (`sunny.svg`) and dark (`sunny_dark.svg`) variants are derived.
Resolution always strips whatever suffix state the input carries before rebuilding,
so feeding a resolved URI back in is a no-op.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, TYPE_CHECKING

from .const import ICON_DARK_SUFFIX, ICON_EXTENSION

if TYPE_CHECKING:
    from .theme import ThemeController

_LOGGER = logging.getLogger(__name__)


def strip_icon_markers(uri: str) -> str:
    """Remove trailing dark markers and extensions (dark marker first) until none remain."""
    base = uri
    while True:
        before = base
        if base.endswith(ICON_DARK_SUFFIX + ICON_EXTENSION):
            base = base[: -len(ICON_DARK_SUFFIX + ICON_EXTENSION)] + ICON_EXTENSION
        elif base.endswith(ICON_DARK_SUFFIX):
            base = base[: -len(ICON_DARK_SUFFIX)]
        if base.endswith(ICON_EXTENSION):
            base = base[: -len(ICON_EXTENSION)]
        if base == before:
            return base


def effective_dark(
    dark_requested: bool,
    override_dark: Optional[bool] = None,
    system_prefers_dark: Optional[bool] = None,
) -> bool:
    """Document override beats system preference, which beats the caller's request."""
    if override_dark is not None:
        return bool(override_dark)
    if system_prefers_dark is not None:
        return bool(system_prefers_dark)
    return bool(dark_requested)


def resolve_icon_uri(
    base_uri: Any,
    dark_requested: bool,
    override_dark: Optional[bool] = None,
    system_prefers_dark: Optional[bool] = None,
) -> str:
    """Build the themed icon URL for `base_uri`. Idempotent and never raises."""
    base = strip_icon_markers(base_uri if isinstance(base_uri, str) else "")
    dark = effective_dark(dark_requested, override_dark, system_prefers_dark)
    return f"{base}{ICON_DARK_SUFFIX if dark else ''}{ICON_EXTENSION}"


class IconUriResolver:
    """Resolves icon URIs against the live state of a ThemeController."""

    def __init__(self, theme: "ThemeController") -> None:
        self._theme = theme

    def resolve(self, base_uri: Any, dark_requested: Optional[bool] = None) -> str:
        if dark_requested is None:
            dark_requested = self._theme.state.resolved_dark
        return resolve_icon_uri(
            base_uri,
            dark_requested,
            override_dark=self._theme.override_dark,
            system_prefers_dark=self._theme.system_prefers_dark,
        )
