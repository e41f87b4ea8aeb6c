"""Shared fixtures."""
import pytest

from quakemap.gui.selection import SelectionController
from quakemap.ranking import QuakeRanker

from .helpers import VIEWPORT, LinearProjector


@pytest.fixture
def projector():
    return LinearProjector()


@pytest.fixture
def build_controller(projector):
    def _build(quakes, cities, panel_rows=20):
        ranker = QuakeRanker(quakes)
        return SelectionController(quakes, cities, ranker, projector, VIEWPORT,
                                   panel_rows=panel_rows)
    return _build
