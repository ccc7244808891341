"""
Utility package for working with ANFR radio-site datasets.

Provides helpers for loading the SUP_*.txt tables into an entity graph,
aggregating frequency bands per operator, and exporting KML maps.
"""

from .anfr_graph import AnfrGraph, Antenna, Band, Emitter, Station, Support
from .config import AnfrConfig

__all__ = ["AnfrConfig", "AnfrGraph", "Antenna", "Band", "Emitter", "Station", "Support"]
