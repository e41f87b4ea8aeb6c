"""
Earthquake / city map widget: QPainter-based rendering of a MapSession.

Draws, from back to front:
  - Country outlines inside the map viewport (Web-Mercator)
  - Threat circle around a focused earthquake
  - City triangles and earthquake markers (circle = land, square = ocean,
    colour = depth band, cross = past day)
  - Legend (left) and "largest earthquakes" ranking panel (right)
  - Title of the hovered marker next to the pointer

The widget holds no selection state of its own: it forwards pointer moves
and clicks to the session's SelectionController and repaints from the
marker flags.  Dragging inside the viewport pans, the wheel zooms.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from PyQt5 import QtCore, QtGui, QtWidgets

from ..geo.classifier import CountryBoundary
from ..geo.markers import (
    CITY_TRI_SIZE,
    Category,
    CityMarker,
    DepthBand,
    EarthquakeMarker,
    Location,
    MarkerKind,
    describe,
    is_recent,
)
from ..geo.projection import MercatorProjector
from ..geo.threat import EARTH_RADIUS_KM
from ..session import MapSession
from .layout import LEGEND_ROWS, WindowLayout
from .selection import ClickFocused

log = logging.getLogger(__name__)

_DEPTH_COLOURS = {
    DepthBand.SHALLOW: QtGui.QColor(255, 255, 0),
    DepthBand.INTERMEDIATE: QtGui.QColor(0, 0, 255),
    DepthBand.DEEP: QtGui.QColor(255, 0, 0),
}
_CITY_COLOUR = QtGui.QColor(150, 30, 30)
_BACKGROUND = QtGui.QColor(192, 192, 192)
_OCEAN = QtGui.QColor(170, 200, 225)
_LAND = QtGui.QColor(235, 232, 220)
_PANEL = QtGui.QColor(255, 250, 240)

_DRAG_THRESHOLD_PX = 4
_ZOOM_STEP = 0.25


class QuakeMapWidget(QtWidgets.QWidget):
    """Interactive earthquake / city map.

    Signals
    -------
    selection_changed(object)
        Emitted after every click with the controller's new state.
    """

    selection_changed = QtCore.pyqtSignal(object)

    def __init__(
        self,
        session: MapSession,
        projector: MercatorProjector,
        layout: WindowLayout,
        countries: Sequence[CountryBoundary] = (),
        parent: Optional[QtWidgets.QWidget] = None,
    ):
        super().__init__(parent)
        self._session = session
        self._projector = projector
        self._layout = layout
        # Country rings in Mercator metres, projected once
        self._country_rings = [
            [projector.to_mercator(Location(lat, lon)) for lon, lat in poly.exterior.coords]
            for country in countries
            for poly in country.polygons()
        ]
        self._pointer = QtCore.QPointF(-1, -1)
        self._press_pos: Optional[QtCore.QPoint] = None
        self._last_drag: Optional[QtCore.QPoint] = None
        self._dragging = False

        self.setMouseTracking(True)
        self.setFocusPolicy(QtCore.Qt.StrongFocus)

    # ── Painting ──────────────────────────────────────────────────────

    def paintEvent(self, event):
        p = QtGui.QPainter(self)
        p.setRenderHint(QtGui.QPainter.Antialiasing)
        p.fillRect(self.rect(), _BACKGROUND)

        vp = self._layout.viewport
        vp_rect = QtCore.QRectF(vp.left, vp.top, vp.width, vp.height)
        p.save()
        p.setClipRect(vp_rect)
        p.fillRect(vp_rect, _OCEAN)
        self._draw_countries(p)
        self._draw_threat_circle(p)
        for city in self._session.cities:
            if not city.hidden:
                self._draw_city(p, city)
        for quake in self._session.earthquakes:
            if not quake.hidden:
                self._draw_quake(p, quake)
        p.restore()

        self._draw_legend(p)
        self._draw_ranking(p)
        self._draw_title(p)
        p.end()

    def _screen(self, loc: Location) -> QtCore.QPointF:
        x, y = self._projector.to_screen(loc)
        return QtCore.QPointF(x, y)

    def _draw_countries(self, p: QtGui.QPainter) -> None:
        pen = QtGui.QPen(QtGui.QColor(150, 150, 150))
        pen.setWidthF(0.5)
        p.setPen(pen)
        p.setBrush(QtGui.QBrush(_LAND))
        to_screen = self._projector.mercator_to_screen
        for ring in self._country_rings:
            p.drawPolygon(QtGui.QPolygonF(
                [QtCore.QPointF(*to_screen(mx, my)) for mx, my in ring]
            ))

    def _draw_city(self, p: QtGui.QPainter, city: CityMarker) -> None:
        c = self._screen(city.location)
        s = CITY_TRI_SIZE
        tri = QtGui.QPolygonF([
            QtCore.QPointF(c.x(), c.y() - s),
            QtCore.QPointF(c.x() - s, c.y() + s),
            QtCore.QPointF(c.x() + s, c.y() + s),
        ])
        p.setPen(self._outline(city.selected or city.clicked_owner))
        p.setBrush(QtGui.QBrush(_CITY_COLOUR))
        p.drawPolygon(tri)

    def _draw_quake(self, p: QtGui.QPainter, quake: EarthquakeMarker) -> None:
        c = self._screen(quake.location)
        r = quake.radius
        p.setPen(self._outline(quake.selected or quake.clicked_owner))
        p.setBrush(QtGui.QBrush(_DEPTH_COLOURS[quake.depth_band]))
        box = QtCore.QRectF(c.x() - r, c.y() - r, 2 * r, 2 * r)
        if quake.kind is MarkerKind.LAND_QUAKE:
            p.drawEllipse(box)
        else:
            p.drawRect(box)
        if is_recent(quake.age_bucket):
            p.drawLine(box.topLeft(), box.bottomRight())
            p.drawLine(box.bottomLeft(), box.topRight())

    @staticmethod
    def _outline(highlight: bool) -> QtGui.QPen:
        pen = QtGui.QPen(QtGui.QColor(0, 0, 0))
        pen.setWidthF(2.5 if highlight else 1.0)
        return pen

    def _draw_threat_circle(self, p: QtGui.QPainter) -> None:
        state = self._session.controller.state
        if not isinstance(state, ClickFocused) or not state.marker.is_quake:
            return
        quake = state.marker
        centre = quake.location
        # Trace the circle as a polygon so Mercator distortion shows correctly
        d = quake.threat_radius_km / EARTH_RADIUS_KM
        lat0, lon0 = math.radians(centre.lat), math.radians(centre.lon)
        pts: List[QtCore.QPointF] = []
        for i in range(73):
            brg = math.radians(i * 5)
            lat = math.asin(math.sin(lat0) * math.cos(d)
                            + math.cos(lat0) * math.sin(d) * math.cos(brg))
            lon = lon0 + math.atan2(math.sin(brg) * math.sin(d) * math.cos(lat0),
                                    math.cos(d) - math.sin(lat0) * math.sin(lat))
            lon_deg = (math.degrees(lon) + 540.0) % 360.0 - 180.0
            pts.append(self._screen(Location(math.degrees(lat), lon_deg)))
        pen = QtGui.QPen(QtGui.QColor(200, 0, 0, 180))
        pen.setStyle(QtCore.Qt.DashLine)
        p.setPen(pen)
        # Skip segments that wrap around the antimeridian
        half_world = MercatorProjector.TILE_PX * 2.0 ** self._projector.zoom / 2.0
        for a, b in zip(pts, pts[1:]):
            if abs(a.x() - b.x()) < half_world:
                p.drawLine(a, b)

    def _draw_legend(self, p: QtGui.QPainter) -> None:
        lg = self._layout.legend
        p.setPen(QtGui.QColor(0, 0, 0))
        p.setBrush(QtGui.QBrush(_PANEL))
        p.drawRect(QtCore.QRectF(lg.left, lg.top, lg.width, lg.height))

        font = p.font()
        font.setPointSize(11)
        p.setFont(font)
        p.drawText(QtCore.QPointF(lg.left + 20, lg.top + 25), "Earthquake Key")
        font.setPointSize(9)
        p.setFont(font)

        state = self._session.controller.state
        active = getattr(state, "category", None)
        x_icon = lg.left + 35
        for cat, label, dy in LEGEND_ROWS:
            y = lg.top + dy
            self._draw_legend_icon(p, cat, x_icon, y)
            font.setBold(cat is active)
            p.setFont(font)
            p.setPen(QtGui.QColor(0, 0, 0))
            p.drawText(QtCore.QPointF(lg.left + 50, y + 4), label)
        font.setBold(False)
        p.setFont(font)
        p.drawText(QtCore.QPointF(lg.left + 25, lg.top + 110 + 4), "Size ~ Magnitude")

    @staticmethod
    def _draw_legend_icon(p: QtGui.QPainter, cat: Category, x: float, y: float) -> None:
        p.setPen(QtGui.QColor(0, 0, 0))
        if cat is Category.CITY_ONLY:
            s = CITY_TRI_SIZE
            p.setBrush(QtGui.QBrush(_CITY_COLOUR))
            p.drawPolygon(QtGui.QPolygonF([
                QtCore.QPointF(x, y - s), QtCore.QPointF(x - s, y + s),
                QtCore.QPointF(x + s, y + s),
            ]))
            return
        box = QtCore.QRectF(x - 5, y - 5, 10, 10)
        colours = {
            Category.SHALLOW: _DEPTH_COLOURS[DepthBand.SHALLOW],
            Category.INTERMEDIATE: _DEPTH_COLOURS[DepthBand.INTERMEDIATE],
            Category.DEEP: _DEPTH_COLOURS[DepthBand.DEEP],
        }
        p.setBrush(QtGui.QBrush(colours.get(cat, QtGui.QColor(255, 255, 255))))
        if cat is Category.OCEAN_QUAKE_ONLY:
            p.drawRect(box)
        else:
            p.drawEllipse(box)
        if cat is Category.RECENT_ONLY:
            p.drawLine(box.topLeft(), box.bottomRight())
            p.drawLine(box.bottomLeft(), box.topRight())

    def _draw_ranking(self, p: QtGui.QPainter) -> None:
        pn = self._layout.panel
        p.setPen(QtGui.QColor(0, 0, 0))
        p.setBrush(QtGui.QBrush(_PANEL))
        p.drawRect(QtCore.QRectF(pn.left, pn.top, pn.width, pn.height))
        font = p.font()
        font.setPointSize(11)
        p.setFont(font)
        p.drawText(QtCore.QPointF(pn.left + 30, pn.top + 20),
                   "Largest earthquakes of the past week")
        font.setPointSize(9)
        for i, quake in enumerate(self._session.top_quakes()):
            font.setBold(quake.clicked_owner)
            p.setFont(font)
            p.drawText(QtCore.QPointF(pn.left + 10, self._layout.panel_row_y(i) + 4),
                       describe(quake))

    def _draw_title(self, p: QtGui.QPainter) -> None:
        marker = self._session.controller.hovered
        if marker is None:
            return
        text = describe(marker)
        fm = QtGui.QFontMetrics(p.font())
        w, h = fm.horizontalAdvance(text) + 8, fm.height() + 4
        x, y = self._pointer.x() + 10, self._pointer.y() - h
        p.setPen(QtGui.QColor(0, 0, 0))
        p.setBrush(QtGui.QBrush(QtGui.QColor(255, 255, 255, 230)))
        p.drawRect(QtCore.QRectF(x, y, w, h))
        p.drawText(QtCore.QPointF(x + 4, y + h - 6), text)

    # ── Event handlers ────────────────────────────────────────────────

    def mouseMoveEvent(self, event):
        pos = event.pos()
        self._pointer = QtCore.QPointF(pos)
        if self._press_pos is not None and event.buttons() & QtCore.Qt.LeftButton:
            if (pos - self._press_pos).manhattanLength() > _DRAG_THRESHOLD_PX:
                self._dragging = True
            if self._dragging:
                delta = pos - self._last_drag
                self._projector.pan(delta.x(), delta.y())
                self._last_drag = pos
        self._session.pointer_moved(pos.x(), pos.y())
        self.update()

    def mousePressEvent(self, event):
        if event.button() != QtCore.Qt.LeftButton:
            return
        self._press_pos = event.pos()
        self._last_drag = event.pos()
        # Only drags that start on the map pan it
        self._dragging = False
        if not self._layout.viewport.contains(event.x(), event.y()):
            self._press_pos = None

    def mouseReleaseEvent(self, event):
        if event.button() != QtCore.Qt.LeftButton:
            return
        was_drag = self._dragging
        self._press_pos = None
        self._dragging = False
        if was_drag:
            return
        click = self._layout.event_at(event.x(), event.y())
        state = self._session.clicked(click)
        log.debug("Click %s at (%d, %d) -> %s", click.region.value,
                  event.x(), event.y(), type(state).__name__)
        self.selection_changed.emit(state)
        self.update()

    def wheelEvent(self, event):
        """Zoom anchored under the mouse cursor."""
        pos = event.pos()
        if not self._layout.viewport.contains(pos.x(), pos.y()):
            event.ignore()
            return
        step = _ZOOM_STEP if event.angleDelta().y() > 0 else -_ZOOM_STEP
        self._projector.zoom_by(step, anchor=(pos.x(), pos.y()))
        self._session.pointer_moved(pos.x(), pos.y())
        self.update()
        event.accept()

    def leaveEvent(self, event):
        self._pointer = QtCore.QPointF(-1, -1)
        self._session.pointer_moved(-1, -1, inside_map=False)
        self.update()
        super().leaveEvent(event)
