"""
Application configuration.

Defaults reproduce the classic earthquake-city map: a 1230×700 window with
the map viewport at (200, 50, 650, 600), the legend to its left and the
top-20 ranking panel to its right.

A JSON file can override any field; its path comes from ``--config`` or the
``QUAKEMAP_CONFIG`` environment variable.  Command-line flags override the
file.
"""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

ROOT_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = ROOT_DIR / "data"

ENV_CONFIG = "QUAKEMAP_CONFIG"

COUNTRIES_URL = (
    "https://raw.githubusercontent.com/johan/world.geo.json/master/countries.geo.json"
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class MapConfig:
    feed_period: str = "week"
    min_magnitude: float = 2.5
    fetch_timeout: float = 15.0

    countries_file: str = str(DATA_DIR / "countries.geo.json")
    countries_url: Optional[str] = COUNTRIES_URL
    cities_file: str = str(DATA_DIR / "city-data.json")

    window_size: List[int] = field(default_factory=lambda: [1230, 700])
    # left, top, width, height in window pixels
    viewport: List[float] = field(default_factory=lambda: [200.0, 50.0, 650.0, 600.0])
    min_zoom: float = 3.0
    initial_zoom: float = 3.0
    top_n: int = 20

    log_level: str = "INFO"

    def __post_init__(self):
        if len(self.viewport) != 4:
            raise ValueError(f"viewport needs 4 numbers, got {self.viewport!r}")
        if len(self.window_size) != 2:
            raise ValueError(f"window_size needs 2 numbers, got {self.window_size!r}")
        if self.top_n < 0:
            raise ValueError(f"top_n must be >= 0, got {self.top_n}")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}")

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_json(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> MapConfig:
    """Build a :class:`MapConfig` from file + overrides.

    Unknown keys raise ``TypeError`` from the dataclass constructor.
    ``None`` override values are ignored so argparse defaults can be passed
    straight through.
    """
    cfg = load_json(path or os.environ.get(ENV_CONFIG))
    for k, v in (overrides or {}).items():
        if v is not None:
            cfg[k] = v
    return MapConfig(**cfg)
