"""
QuakeMap: interactive earthquake / city threat explorer.

Entry point: python -m quakemap

Provides:
- Marker model for earthquakes (land / ocean) and cities (geo.markers)
- Threat-circle geometry and great-circle distance (geo.threat)
- Land / ocean classification against country boundaries (geo.classifier)
- Magnitude ranking for the top-N panel (ranking)
- Hover / click selection state machine (gui.selection)
- USGS feed and boundary data loaders (ingest/)
- PyQt5 map widget and application window (gui.map_widget, gui.app)
"""

__version__ = "0.1.0"
