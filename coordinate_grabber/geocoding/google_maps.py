"""Google Maps geocoding strategy implementation."""

from string import Formatter
from typing import Callable, Optional

import requests

from ..errors import ConfigurationError
from ..models import AddressRecord
from .outcome import FailureKind, GeocodeResponse, LookupOutcome
from .strategy import GeocodingStrategy


class GoogleMapsStrategy(GeocodingStrategy):
    """Geocoding strategy using the Google Maps Geocoding API.

    The endpoint is given as a URI template with one positional slot that
    receives the composed query, e.g.
    ``https://maps.googleapis.com/maps/api/geocode/json?address={0}&key=KEY``.

    Requirements:
    - Google Maps API key with Geocoding API enabled (part of the template)
    - See: https://developers.google.com/maps/documentation/geocoding

    Candidates are only accepted when their formatted address contains the
    record's ``"City, ST"``; the API happily returns matches from other cities.
    """

    def __init__(
        self,
        uri_template: str,
        rate_limit_delay: float = 0.2,
        timeout: Optional[float] = 10,
        session: Optional[requests.Session] = None,
        logger: Optional[Callable[[str], None]] = None,
    ):
        """Initialize Google Maps strategy.

        Args:
            uri_template: Endpoint URI with a single ``{}``/``{0}`` slot
            rate_limit_delay: Seconds to pause after each request
            timeout: Request timeout in seconds, None to wait indefinitely
            session: Optional requests session; one is created (and owned) if omitted
            logger: Optional callable receiving diagnostic messages

        Raises:
            ConfigurationError: If the template is empty or has the wrong slots
        """
        self.uri_template = self.validate_template(uri_template)
        self.rate_limit_delay = rate_limit_delay
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.logger = logger or (lambda msg: None)

    @staticmethod
    def validate_template(uri_template: str) -> str:
        """Return the stripped template, or raise ConfigurationError if it has no single query slot."""
        if not uri_template or not uri_template.strip():
            raise ConfigurationError("Maps URI template is empty")
        try:
            fields = [
                name for _, name, _, _ in Formatter().parse(uri_template) if name is not None
            ]
        except ValueError as e:
            raise ConfigurationError(f"Maps URI template is not valid: {e}") from e
        if len(fields) != 1 or fields[0] not in ("", "0"):
            raise ConfigurationError(
                "Maps URI template must contain exactly one '{0}' slot for the address query, "
                f"got {uri_template!r}"
            )
        return uri_template.strip()

    # ------------------------------------------------------------------
    # Query construction
    # ------------------------------------------------------------------

    @staticmethod
    def build_query(record: AddressRecord) -> str:
        """Join address, city and state with '+' (spaces in the address become '+')."""
        return record.street_address.replace(" ", "+") + f"+{record.city}+{record.state}"

    def build_uri(self, record: AddressRecord) -> str:
        return self.uri_template.format(self.build_query(record))

    # ------------------------------------------------------------------
    # One HTTP request
    # ------------------------------------------------------------------

    def lookup(self, record: AddressRecord) -> LookupOutcome:
        uri = self.build_uri(record)
        try:
            resp = self.session.get(
                uri,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout:
            self.logger("Google Maps timeout")
            return LookupOutcome.failed(FailureKind.TRANSPORT, "timeout")
        except requests.RequestException as e:
            self.logger(f"Google Maps request error: {str(e)[:120]}")
            return LookupOutcome.failed(FailureKind.TRANSPORT, str(e)[:120])

        if not 200 <= resp.status_code < 300:
            self.logger(f"Google Maps HTTP {resp.status_code}: {resp.text[:120]}")
            return LookupOutcome.failed(FailureKind.TRANSPORT, f"HTTP {resp.status_code}")

        body = resp.text
        if not body or not body.strip():
            return LookupOutcome.failed(FailureKind.EMPTY_BODY, "empty response body")

        try:
            response = GeocodeResponse.from_json(body)
            return self.classify(response, record)
        except ValueError as e:
            self.logger(f"Google Maps parse error: {str(e)[:120]}")
            return LookupOutcome.failed(FailureKind.MALFORMED_BODY, str(e)[:120])

    @staticmethod
    def classify(response: GeocodeResponse, record: AddressRecord) -> LookupOutcome:
        """Apply the city/state filter, then the status check.

        Raises:
            ValueError: If a result entry reached by the filter is malformed.
        """
        match = response.first_match(record.city, record.state)
        if match is None:
            return LookupOutcome.failed(
                FailureKind.NO_MATCH,
                f"no candidate in {record.city}, {record.state}",
                status=response.status,
            )
        if response.status != "OK":
            return LookupOutcome.failed(
                FailureKind.BAD_STATUS, f"status {response.status}", status=response.status
            )
        latitude, longitude = match.coordinates()
        return LookupOutcome.success(latitude, longitude, status=response.status)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "GoogleMapsStrategy":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_source_name(self) -> str:
        """Get the provider name.

        Returns:
            'google_maps'
        """
        return "google_maps"

    def get_rate_limit_delay(self) -> float:
        return self.rate_limit_delay
