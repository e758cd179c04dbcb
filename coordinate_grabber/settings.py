"""
Persistent settings backed by QSettings.

The Maps URI template (including the API key) lives here rather than in
code; the CLI reads it once and hands it to the strategy.
"""

from __future__ import annotations

import codecs
from typing import Optional

from PyQt6.QtCore import QSettings

from .errors import ConfigurationError

ORGANIZATION = "CoordinateGrabber"
APPLICATION = "CoordinateGrabber"

DEFAULT_RATE_LIMIT_DELAY = 0.2
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_DELIMITER = "\t"
DEFAULT_INPUT_ENCODING = "utf-8-sig"


class AppSettings:
    """Typed accessors over a QSettings store."""

    def __init__(self, settings: Optional[QSettings] = None) -> None:
        self.settings = settings if settings is not None else QSettings(ORGANIZATION, APPLICATION)

    @classmethod
    def from_file(cls, path: str) -> "AppSettings":
        """Use an INI file instead of the platform settings store."""
        return cls(QSettings(str(path), QSettings.Format.IniFormat))

    # --- Maps URI ---
    @property
    def maps_uri(self) -> str:
        return self.settings.value("mapsUri", "", type=str) or ""

    @maps_uri.setter
    def maps_uri(self, value: str) -> None:
        self.settings.setValue("mapsUri", value.strip())

    def require_maps_uri(self) -> str:
        uri = self.maps_uri
        if not uri:
            raise ConfigurationError(
                "No Maps URI configured. Run once with --maps-uri "
                "'https://maps.googleapis.com/maps/api/geocode/json?address={0}&key=YOUR_KEY'"
            )
        return uri

    # --- Request pacing ---
    @property
    def rate_limit_delay(self) -> float:
        value = self._float("rateLimitDelay", DEFAULT_RATE_LIMIT_DELAY)
        if value < 0:
            raise ConfigurationError(f"rateLimitDelay must not be negative, got {value}")
        return value

    @rate_limit_delay.setter
    def rate_limit_delay(self, value: float) -> None:
        self.settings.setValue("rateLimitDelay", float(value))

    @property
    def request_timeout(self) -> Optional[float]:
        value = self._float("requestTimeout", DEFAULT_REQUEST_TIMEOUT)
        # 0 disables the timeout
        return value if value > 0 else None

    @request_timeout.setter
    def request_timeout(self, value: float) -> None:
        self.settings.setValue("requestTimeout", float(value))

    # --- File format ---
    @property
    def delimiter(self) -> str:
        value = self.settings.value("delimiter", DEFAULT_DELIMITER, type=str)
        if not value or len(value) != 1:
            raise ConfigurationError(f"delimiter must be a single character, got {value!r}")
        return value

    @property
    def input_encoding(self) -> str:
        return _check_encoding(self.settings.value("inputEncoding", DEFAULT_INPUT_ENCODING, type=str))

    @input_encoding.setter
    def input_encoding(self, value: str) -> None:
        self.settings.setValue("inputEncoding", _check_encoding(value))

    # --- Remembered prompt answers ---
    @property
    def last_input_path(self) -> str:
        return self.settings.value("lastInputPath", "", type=str) or ""

    @property
    def last_output_path(self) -> str:
        return self.settings.value("lastOutputPath", "", type=str) or ""

    def remember_paths(self, input_path: str, output_path: str) -> None:
        if input_path:
            self.settings.setValue("lastInputPath", input_path)
        if output_path:
            self.settings.setValue("lastOutputPath", output_path)

    def sync(self) -> None:
        self.settings.sync()

    def _float(self, key: str, default: float) -> float:
        raw = self.settings.value(key, default)
        try:
            return float(raw)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{key} must be a number, got {raw!r}") from e


def _check_encoding(value: str) -> str:
    try:
        codecs.lookup(value)
    except LookupError as e:
        raise ConfigurationError(f"Unknown input encoding {value!r}") from e
    return value
