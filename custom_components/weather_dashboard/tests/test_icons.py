import pytest

from custom_components.weather_dashboard.icons import (
    IconUriResolver,
    effective_dark,
    resolve_icon_uri,
    strip_icon_markers,
)
from custom_components.weather_dashboard.theme import ThemeController

BASE = "https://maps.gstatic.com/weather/v1/sunny"


class MemoryStorage:
    def __init__(self, data=None):
        self.data = data
        self.saves = []

    async def async_load(self):
        return self.data

    async def async_save(self, data):
        self.saves.append(dict(data))
        self.data = data


def test_light_and_dark_variants_from_base():
    assert resolve_icon_uri(BASE, False) == BASE + ".svg"
    assert resolve_icon_uri(BASE, True) == BASE + "_dark.svg"


def test_resolving_a_resolved_uri_is_a_noop():
    dark = resolve_icon_uri(BASE, True)
    assert resolve_icon_uri(dark, True) == dark
    light = resolve_icon_uri(BASE, False)
    assert resolve_icon_uri(light, False) == light


def test_switching_variant_from_a_resolved_uri():
    assert resolve_icon_uri(BASE + "_dark.svg", False) == BASE + ".svg"
    assert resolve_icon_uri(BASE + ".svg", True) == BASE + "_dark.svg"


@pytest.mark.parametrize(
    "uri",
    [BASE + "_dark", BASE + "_dark.svg.svg", BASE + "_dark_dark.svg", BASE + ".svg_dark.svg"],
)
def test_stacked_markers_never_duplicate(uri):
    assert strip_icon_markers(uri) == BASE
    assert resolve_icon_uri(uri, True).count("_dark") == 1


def test_non_string_input_never_raises():
    assert resolve_icon_uri(None, False) == ".svg"
    assert resolve_icon_uri(42, True) == "_dark.svg"


def test_override_beats_system_which_beats_request():
    assert effective_dark(False, override_dark=True, system_prefers_dark=False) is True
    assert effective_dark(True, override_dark=False, system_prefers_dark=True) is False
    assert effective_dark(False, override_dark=None, system_prefers_dark=True) is True
    assert effective_dark(True, override_dark=None, system_prefers_dark=None) is True


@pytest.mark.asyncio
async def test_resolver_follows_theme_controller():
    theme = ThemeController(MemoryStorage(), system_prefers_dark=False)
    resolver = IconUriResolver(theme)
    assert resolver.resolve(BASE) == BASE + ".svg"

    await theme.async_set_mode("dark")
    assert resolver.resolve(BASE) == BASE + "_dark.svg"
    # explicit mode is a document override; the caller's request loses
    assert resolver.resolve(BASE, dark_requested=False) == BASE + "_dark.svg"
