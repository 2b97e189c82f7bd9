"""
AR Location (arloc) Core Package.

Geospatial-to-scene reconciliation for camera views augmented with markers
anchored to GPS coordinates.

Package structure:
- proto: Value types (fixes, local positions, translations) and engine events
- localization: Geodetic math, scene location estimates
- domain: Marker nodes, node registry, points of interest
- engine: Reconciliation loop, tick driver, engine configuration
- io: Location source feed, scene collaborator interface
- metrics: Diagnostics, counters, histograms
"""

__version__ = "0.1.0"
__author__ = "ARLocation Team"
