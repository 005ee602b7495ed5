"""Tri-state theme controller (auto / light / dark).

The controller owns the selected mode and the live system color-scheme
signal; `resolved_dark` is always derived from those two and never set
directly. Persistence goes through an injected storage object exposing
`async_load()` / `async_save(data)` (a Home Assistant `Store` in production).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from .const import THEME_AUTO, THEME_DARK, THEME_LIGHT, THEME_MODES

_LOGGER = logging.getLogger(__name__)


class ThemeStorage(Protocol):
    async def async_load(self) -> Optional[Dict[str, Any]]:
        ...

    async def async_save(self, data: Dict[str, Any]) -> None:
        ...


@dataclass(frozen=True)
class ThemeState:
    mode: str
    resolved_dark: bool

    def as_dict(self) -> Dict[str, Any]:
        return {"mode": self.mode, "resolved_dark": self.resolved_dark}


def resolve_dark(mode: str, system_prefers_dark: Optional[bool]) -> bool:
    """Effective darkness for a mode; an unknown system preference counts as light."""
    if mode == THEME_DARK:
        return True
    if mode == THEME_LIGHT:
        return False
    return bool(system_prefers_dark)


def _validate_mode(mode: Any) -> str:
    if mode not in THEME_MODES:
        raise ValueError(f"Unsupported theme mode {mode!r}; expected one of {THEME_MODES}")
    return mode


class ThemeController:
    """
    Owns ThemeState.

    Every change of mode or resolved darkness:
      1. persists the mode through the storage,
      2. notifies listeners (icon URIs are recomputed in place there),
      3. applies the resolved theme through `apply_theme`.
    """

    def __init__(
        self,
        storage: ThemeStorage,
        system_prefers_dark: Optional[bool] = None,
        apply_theme: Optional[Callable[[ThemeState], None]] = None,
        default_mode: str = THEME_AUTO,
    ) -> None:
        self._storage = storage
        self._mode = _validate_mode(default_mode)
        self._system_prefers_dark = system_prefers_dark
        self._apply_theme = apply_theme
        self._listeners: List[Callable[[ThemeState], None]] = []
        self._state = ThemeState(self._mode, resolve_dark(self._mode, system_prefers_dark))

    @property
    def state(self) -> ThemeState:
        return self._state

    @property
    def system_prefers_dark(self) -> Optional[bool]:
        return self._system_prefers_dark

    @property
    def override_dark(self) -> Optional[bool]:
        """Explicit document-level override; None while following the system."""
        if self._mode == THEME_DARK:
            return True
        if self._mode == THEME_LIGHT:
            return False
        return None

    def async_add_listener(self, listener: Callable[[ThemeState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def async_load(self) -> ThemeState:
        """Read the persisted mode once at startup (missing or invalid -> keep default)."""
        stored = await self._storage.async_load()
        mode = stored.get("mode") if isinstance(stored, dict) else None
        if mode in THEME_MODES:
            self._mode = mode
        elif mode is not None:
            _LOGGER.warning("Ignoring persisted theme mode %r (not one of %s)", mode, THEME_MODES)
        self._state = ThemeState(self._mode, resolve_dark(self._mode, self._system_prefers_dark))
        _LOGGER.debug("Theme loaded: %s", self._state)
        if self._apply_theme:
            self._apply_theme(self._state)
        return self._state

    async def async_set_mode(self, mode: str) -> ThemeState:
        """Explicit user selection."""
        return await self._async_commit(_validate_mode(mode), self._system_prefers_dark)

    async def async_set_system_preference(self, prefers_dark: Optional[bool]) -> ThemeState:
        """System color-scheme change; only affects resolved darkness in auto mode."""
        return await self._async_commit(self._mode, prefers_dark)

    async def _async_commit(self, mode: str, system_prefers_dark: Optional[bool]) -> ThemeState:
        new_state = ThemeState(mode, resolve_dark(mode, system_prefers_dark))
        if new_state == self._state:
            self._mode = mode
            self._system_prefers_dark = system_prefers_dark
            return self._state
        _LOGGER.debug("Theme change %s -> %s", self._state, new_state)
        # nothing changes until the mode is stored
        await self._storage.async_save({"mode": mode})
        self._mode = mode
        self._system_prefers_dark = system_prefers_dark
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)
        if self._apply_theme:
            self._apply_theme(new_state)
        return new_state
