from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class AddressRecord:
    """One parsed input line."""

    street_address: str
    city: str
    state: str
    line_number: int = 0


@dataclass(frozen=True)
class GeocodeResult:
    """
    Resolved (or empty) coordinates for one AddressRecord.

    Coordinates are kept as the text the geocoding service returned so the
    output file reproduces them exactly. A failed lookup stores empty strings
    for both; a result never carries only one of the pair.
    """

    address: str
    latitude: str = ""
    longitude: str = ""

    def __post_init__(self) -> None:
        if bool(self.latitude) != bool(self.longitude):
            raise ValueError(
                f"Partial coordinates for {self.address!r}: "
                f"lat={self.latitude!r}, lng={self.longitude!r}"
            )

    @classmethod
    def resolved(cls, address: str, latitude: str, longitude: str) -> "GeocodeResult":
        if not latitude or not longitude:
            raise ValueError(f"Resolved result for {address!r} needs both coordinates")
        return cls(address, latitude, longitude)

    @classmethod
    def failed(cls, address: str) -> "GeocodeResult":
        return cls(address)

    @property
    def is_resolved(self) -> bool:
        return bool(self.latitude)


@dataclass
class RunSummary:
    """Counters accumulated across one run."""

    total_records: int = 0
    failure_count: int = 0
    failures_by_kind: Counter[str] = field(default_factory=Counter)

    def record_failure(self, kind: Optional[str] = None) -> None:
        self.failure_count += 1
        if kind:
            self.failures_by_kind[kind] += 1

    @property
    def success_count(self) -> int:
        return self.total_records - self.failure_count
