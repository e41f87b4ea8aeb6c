"""
Magnitude ranking for the "largest earthquakes" panel.

The ranking is computed when the earthquake collection is (re)loaded and
cached until the next reload; it is never recomputed per frame.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .geo.markers import EarthquakeMarker

log = logging.getLogger(__name__)


def rank(earthquakes: Iterable[EarthquakeMarker]) -> List[EarthquakeMarker]:
    """Magnitude-descending order; equal magnitudes keep load order."""
    # sorted() is stable, also with reverse=True
    return sorted(earthquakes, key=lambda q: q.magnitude, reverse=True)


class QuakeRanker:
    """Cached magnitude ranking with top-N and panel-row lookup."""

    def __init__(self, earthquakes: Iterable[EarthquakeMarker] = ()):
        self._ranked: Tuple[EarthquakeMarker, ...] = ()
        self.rebuild(earthquakes)

    def rebuild(self, earthquakes: Iterable[EarthquakeMarker]) -> None:
        self._ranked = tuple(rank(earthquakes))
        if self._ranked:
            log.info(
                "Ranked %d earthquakes (largest M%.1f)",
                len(self._ranked), self._ranked[0].magnitude,
            )

    @property
    def ranked(self) -> Sequence[EarthquakeMarker]:
        return self._ranked

    def top_n(self, n: int) -> List[EarthquakeMarker]:
        if n <= 0:
            return []
        return list(self._ranked[:n])

    def row(self, index: int) -> Optional[EarthquakeMarker]:
        """Quake shown at panel row *index*, or None outside the list."""
        if 0 <= index < len(self._ranked):
            return self._ranked[index]
        return None

    def __len__(self) -> int:
        return len(self._ranked)
