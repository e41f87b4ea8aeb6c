"""Tests for pixel → click-region translation."""

import pytest

from quakemap.geo.markers import Category
from quakemap.gui.layout import LEGEND_ROWS, WindowLayout
from quakemap.gui.selection import Region

from .helpers import VIEWPORT


@pytest.fixture
def layout():
    return WindowLayout(VIEWPORT, top_n=5)


class TestAreas:
    def test_rectangles(self, layout):
        assert (layout.legend.left, layout.legend.top) == (25.0, 50.0)
        assert layout.panel.left == VIEWPORT.right + 20.0
        assert layout.panel.top == VIEWPORT.top

    def test_map_click(self, layout):
        ev = layout.event_at(525.0, 350.0)
        assert ev.region is Region.MAP
        assert (ev.x, ev.y) == (525.0, 350.0)

    @pytest.mark.parametrize("x, y", [(190.0, 400.0), (10.0, 10.0), (600.0, 680.0)])
    def test_outside_everything(self, layout, x, y):
        assert layout.event_at(x, y).region is Region.OTHER


class TestLegend:
    @pytest.mark.parametrize("category", [row[0] for row in LEGEND_ROWS])
    def test_each_row(self, layout, category):
        y = layout.legend_row_y(category)
        ev = layout.event_at(60.0, y + 3.0)
        assert ev.region is Region.LEGEND
        assert ev.category is category

    def test_rows_are_distinct(self, layout):
        ys = [layout.legend_row_y(cat) for cat, _label, _dy in LEGEND_ROWS]
        assert len(set(ys)) == len(Category)

    def test_gap_between_rows(self, layout):
        ev = layout.event_at(60.0, layout.legend.top + 115.0)
        assert ev.region is Region.LEGEND
        assert ev.category is None


class TestPanel:
    def test_row_centres(self, layout):
        for row in range(5):
            ev = layout.event_at(900.0, layout.panel_row_y(row))
            assert ev.region is Region.RANKING_PANEL
            assert ev.row == row

    def test_row_edges(self, layout):
        y0 = layout.panel_row_y(0)
        assert layout.panel_row_at(900.0, y0 - 8.0) == 0
        assert layout.panel_row_at(900.0, y0 + 8.0) == 0
        assert layout.panel_row_at(900.0, y0 + 13.0) is None

    def test_above_first_row(self, layout):
        ev = layout.event_at(900.0, layout.panel.top + 10.0)
        assert ev.region is Region.RANKING_PANEL
        assert ev.row is None

    def test_beyond_top_n(self, layout):
        ev = layout.event_at(900.0, layout.panel_row_y(5))
        assert ev.region is Region.RANKING_PANEL
        assert ev.row is None
