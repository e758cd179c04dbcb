"""Geocoding strategies for different providers."""

from .google_maps import GoogleMapsStrategy
from .outcome import Candidate, FailureKind, GeocodeResponse, LookupOutcome
from .strategy import GeocodingStrategy

__all__ = [
    "GeocodingStrategy",
    "GoogleMapsStrategy",
    "Candidate",
    "FailureKind",
    "GeocodeResponse",
    "LookupOutcome",
]
