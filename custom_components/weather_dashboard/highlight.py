"""Shared highlight cursor between an hourly chart and its scrollable card list.

Both surfaces render the same hour sequence and write the same index; the
last writer wins. When an index becomes active and its card is not fully
visible, the scroll container is moved by the smallest offset that centers
the card (per axis, only along axes where the card overflows).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2.0

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2.0

    def contains(self, other: "Rect") -> bool:
        return (
            other.left >= self.left
            and other.right <= self.right
            and other.top >= self.top
            and other.bottom <= self.bottom
        )


class ScrollContainer(Protocol):
    """Geometry and scrolling capability of the card list's container."""

    def viewport(self) -> Rect:
        ...

    def item_rect(self, index: int) -> Optional[Rect]:
        ...

    def scroll_by(self, dx: float, dy: float, smooth: bool = True) -> None:
        ...


@dataclass(frozen=True)
class HighlightState:
    active_index: Optional[int] = None


def centering_offset(viewport: Rect, item: Rect) -> tuple:
    """(dx, dy) that centers `item` in `viewport` along each axis it overflows; (0, 0) when visible."""
    if viewport.contains(item):
        return 0.0, 0.0
    dx = 0.0
    dy = 0.0
    if item.left < viewport.left or item.right > viewport.right:
        dx = item.center_x - viewport.center_x
    if item.top < viewport.top or item.bottom > viewport.bottom:
        dy = item.center_y - viewport.center_y
    return dx, dy


class HighlightSynchronizer:
    """Holds HighlightState for one rendered hour sequence."""

    def __init__(self, length: int = 0, scroller: Optional[ScrollContainer] = None) -> None:
        self._length = max(0, int(length))
        self._state = HighlightState()
        self.scroller = scroller
        self._listeners: List[Callable[[HighlightState], None]] = []

    @property
    def state(self) -> HighlightState:
        return self._state

    @property
    def active_index(self) -> Optional[int]:
        return self._state.active_index

    @property
    def length(self) -> int:
        return self._length

    def async_add_listener(self, listener: Callable[[HighlightState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # Chart surface
    def chart_point_entered(self, index: int) -> HighlightState:
        return self._activate(index)

    def chart_pointer_left(self) -> HighlightState:
        return self._set(None)

    # List surface
    def list_item_entered(self, index: int) -> HighlightState:
        return self._activate(index)

    def list_item_tapped(self, index: int) -> HighlightState:
        return self._activate(index)

    def list_item_left(self) -> HighlightState:
        return self._set(None)

    def replace_sequence(self, length: int) -> HighlightState:
        """A new hour sequence is displayed; any previous index is meaningless now."""
        self._length = max(0, int(length))
        _LOGGER.debug("Hour sequence replaced (length=%d); clearing highlight", self._length)
        return self._set(None)

    def _activate(self, index: int) -> HighlightState:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < self._length:
            _LOGGER.debug("Ignoring highlight index %r outside sequence of length %d", index, self._length)
            return self._state
        state = self._set(index)
        self._scroll_into_view(index)
        return state

    def _set(self, index: Optional[int]) -> HighlightState:
        if index == self._state.active_index:
            return self._state
        self._state = HighlightState(active_index=index)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _scroll_into_view(self, index: int) -> None:
        if self.scroller is None:
            return
        item = self.scroller.item_rect(index)
        if item is None:
            return
        dx, dy = centering_offset(self.scroller.viewport(), item)
        if dx or dy:
            _LOGGER.debug("Scrolling list by (%s, %s) to center item %d", dx, dy, index)
            self.scroller.scroll_by(dx, dy, smooth=True)
