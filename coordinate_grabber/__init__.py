"""Batch geocoding of tab-delimited address files."""

__version__ = "0.1.0"
