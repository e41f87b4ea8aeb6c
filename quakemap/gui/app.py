"""
QuakeMap application window and entry point.

    python -m quakemap [--config cfg.json] [--period day] [--min-mag 4.5]

Startup is synchronous: feed, boundaries and cities are loaded and the
session classified and ranked before the window is shown.
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import List, Optional

from PyQt5 import QtCore, QtWidgets

from ..config import MapConfig, load_config
from ..geo.classifier import CountryBoundary
from ..geo.projection import MercatorProjector, Viewport
from ..ingest.boundary_loader import ensure_countries_file, load_cities, load_countries
from ..ingest.usgs_client import PERIODS, fetch_recent_earthquakes
from ..session import MapSession
from .layout import WindowLayout
from .map_widget import QuakeMapWidget

log = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, cfg: MapConfig, countries: List[CountryBoundary], session: MapSession,
                 projector: MercatorProjector, layout: WindowLayout):
        super().__init__()
        self.setWindowTitle("QuakeMap: earthquakes and threatened cities")
        self.setFixedSize(*cfg.window_size)
        self._map = QuakeMapWidget(session, projector, layout, countries, self)
        self.setCentralWidget(self._map)
        self._map.selection_changed.connect(self._on_selection)
        self.statusBar().showMessage(
            f"{len(session.earthquakes)} earthquakes, {len(session.cities)} cities"
        )

    def _on_selection(self, state) -> None:
        self.statusBar().showMessage(type(state).__name__)


def build_session(cfg: MapConfig):
    """Load all data and return (countries, session, projector, layout)."""
    viewport = Viewport(*cfg.viewport)
    projector = MercatorProjector(
        viewport, zoom=cfg.initial_zoom, min_zoom=cfg.min_zoom,
    )
    layout = WindowLayout(viewport, top_n=cfg.top_n)

    countries_path = ensure_countries_file(
        cfg.countries_file, cfg.countries_url, timeout=cfg.fetch_timeout,
    )
    countries = load_countries(countries_path)
    cities = load_cities(cfg.cities_file)
    quakes = fetch_recent_earthquakes(
        period=cfg.feed_period, min_mag=cfg.min_magnitude, timeout=cfg.fetch_timeout,
    )

    session = MapSession(projector, viewport, top_n=cfg.top_n)
    session.load(quakes, cities, countries)
    return countries, session, projector, layout


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="QuakeMap: earthquake threat explorer")
    p.add_argument("--config", help="JSON config file (default: $QUAKEMAP_CONFIG)")
    p.add_argument("--period", dest="feed_period", choices=PERIODS)
    p.add_argument("--min-mag", dest="min_magnitude", type=float)
    p.add_argument("--top-n", dest="top_n", type=int)
    p.add_argument("--cities", dest="cities_file")
    p.add_argument("--countries", dest="countries_file")
    p.add_argument("--log-level", dest="log_level",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_known_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args, remaining = parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if k != "config"}
    cfg = load_config(args.config, overrides)

    logging.basicConfig(
        level=getattr(logging, cfg.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        countries, session, projector, layout = build_session(cfg)
    except FileNotFoundError as exc:
        log.error("Missing data file: %s", exc)
        return 1

    app = QtWidgets.QApplication(sys.argv[:1] + remaining)
    app.setStyle("Fusion")
    win = MainWindow(cfg, countries, session, projector, layout)
    win.show()

    # Qt's event loop blocks Python signal delivery; a timer lets it run
    def _sigint_handler(*_args):
        log.info("SIGINT received, closing")
        win.close()

    signal.signal(signal.SIGINT, _sigint_handler)
    _sig_timer = QtCore.QTimer()
    _sig_timer.timeout.connect(lambda: None)
    _sig_timer.start(200)

    return app.exec_()
