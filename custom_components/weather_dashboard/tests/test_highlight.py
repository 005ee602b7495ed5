from custom_components.weather_dashboard.highlight import (
    HighlightSynchronizer,
    Rect,
    centering_offset,
)


class FakeScroller:
    """Horizontal card list: 100px cards in a 300px viewport."""

    def __init__(self, scroll_x=0.0):
        self.scroll_x = scroll_x
        self.scrolls = []

    def viewport(self):
        return Rect(0, 0, 300, 100)

    def item_rect(self, index):
        left = index * 100 - self.scroll_x
        return Rect(left, 0, left + 100, 100)

    def scroll_by(self, dx, dy, smooth=True):
        self.scrolls.append((dx, dy, smooth))
        self.scroll_x += dx


def test_chart_and_list_share_one_index():
    sync = HighlightSynchronizer(length=5)
    sync.chart_point_entered(3)
    assert sync.active_index == 3
    sync.list_item_entered(1)
    assert sync.active_index == 1
    sync.chart_pointer_left()
    assert sync.active_index is None


def test_out_of_range_index_is_ignored():
    sync = HighlightSynchronizer(length=3)
    sync.list_item_tapped(1)
    sync.chart_point_entered(3)
    sync.chart_point_entered(-1)
    assert sync.active_index == 1


def test_replacing_the_sequence_clears_the_index():
    seen = []
    sync = HighlightSynchronizer(length=24)
    sync.async_add_listener(seen.append)
    sync.chart_point_entered(20)
    sync.replace_sequence(10)
    assert sync.active_index is None
    assert sync.length == 10
    assert [s.active_index for s in seen] == [20, None]
    sync.chart_point_entered(20)
    assert sync.active_index is None


def test_visible_card_does_not_scroll():
    scroller = FakeScroller()
    sync = HighlightSynchronizer(length=10, scroller=scroller)
    sync.chart_point_entered(1)
    assert scroller.scrolls == []


def test_hidden_card_is_centered_horizontally_only():
    scroller = FakeScroller()
    sync = HighlightSynchronizer(length=10, scroller=scroller)
    sync.chart_point_entered(6)
    # card 6 spans 600..700, center 650; viewport center 150
    assert scroller.scrolls == [(500.0, 0.0, True)]


def test_centering_offset_per_axis():
    viewport = Rect(0, 0, 100, 100)
    assert centering_offset(viewport, Rect(10, 10, 20, 20)) == (0.0, 0.0)
    assert centering_offset(viewport, Rect(10, 150, 20, 170)) == (0.0, 110.0)
    assert centering_offset(viewport, Rect(-40, -40, -20, -20)) == (-80.0, -80.0)
