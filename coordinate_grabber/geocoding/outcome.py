"""
Response model and lookup outcome for the geocoding service.

A lookup either resolves to a coordinate pair or fails with a FailureKind.
Strategies return LookupOutcome values instead of raising, so the resolver
can account for every record without intercepting exceptions.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple


class FailureKind(str, Enum):
    """Why a lookup produced no coordinates."""

    TRANSPORT = "transport"
    EMPTY_BODY = "empty_body"
    MALFORMED_BODY = "malformed_body"
    NO_MATCH = "no_match"
    BAD_STATUS = "bad_status"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class LookupOutcome:
    latitude: str = ""
    longitude: str = ""
    failure: Optional[FailureKind] = None
    status: Optional[str] = None
    detail: str = ""

    @classmethod
    def success(cls, latitude: str, longitude: str, status: Optional[str] = "OK") -> "LookupOutcome":
        return cls(latitude=latitude, longitude=longitude, status=status)

    @classmethod
    def failed(
        cls, kind: FailureKind, detail: str = "", status: Optional[str] = None
    ) -> "LookupOutcome":
        return cls(failure=kind, status=status, detail=detail)

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class Candidate:
    """
    One entry of the service's ``results`` list.

    Only ``formatted_address`` is checked up front; the location is read
    when the candidate is the one selected.
    """

    formatted_address: str
    geometry: Any = None

    @classmethod
    def from_dict(cls, item: Any) -> "Candidate":
        if not isinstance(item, dict):
            raise ValueError("result entry is not a JSON object")
        formatted = item.get("formatted_address")
        if not isinstance(formatted, str):
            raise ValueError("result entry has no formatted_address")
        return cls(formatted_address=formatted, geometry=item.get("geometry"))

    def coordinates(self) -> Tuple[str, str]:
        """
        Return ``(lat, lng)`` from ``geometry.location``.

        Raises:
            ValueError: If the location is missing or not numeric.
        """
        try:
            location = self.geometry["location"]
            lat, lng = location["lat"], location["lng"]
        except (KeyError, TypeError) as e:
            raise ValueError(f"matched result has no geometry.location: {e!r}") from e
        return _coordinate_text(lat, "lat"), _coordinate_text(lng, "lng")


@dataclass(frozen=True)
class GeocodeResponse:
    status: str
    results: List[Any]

    @classmethod
    def from_json(cls, text: str) -> "GeocodeResponse":
        """
        Parse the envelope of a geocoding response body.

        Numbers are kept in their JSON text form (``39.1`` stays ``"39.1"``).
        Result entries are validated lazily by ``first_match``.

        Raises:
            ValueError: If the body is not JSON or lacks ``status``/``results``.
        """
        try:
            data = json.loads(text, parse_float=str, parse_int=str)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON: {e}") from e
        except RecursionError as e:
            raise ValueError("invalid JSON: nested too deeply") from e

        if not isinstance(data, dict):
            raise ValueError("response is not a JSON object")
        status = data.get("status")
        if not isinstance(status, str):
            raise ValueError("missing 'status'")
        results = data.get("results")
        if not isinstance(results, list):
            raise ValueError("missing 'results'")
        return cls(status=status, results=results)

    def first_match(self, city: str, state: str) -> Optional[Candidate]:
        """
        Return the first candidate whose formatted address contains ``"{city}, {state}"``.

        Raises:
            ValueError: If an entry examined before the match is malformed.
        """
        needle = f"{city}, {state}"
        for item in self.results:
            candidate = Candidate.from_dict(item)
            if needle in candidate.formatted_address:
                return candidate
        return None


def _coordinate_text(value: Any, name: str) -> str:
    # parse_float/parse_int turn JSON numbers into their source text
    if isinstance(value, str) and value:
        return value
    raise ValueError(f"location.{name} is missing or not a number")
