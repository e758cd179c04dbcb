"""Abstract base class for geocoding strategies."""

from abc import ABC, abstractmethod

from ..models import AddressRecord
from .outcome import LookupOutcome


class GeocodingStrategy(ABC):
    """Abstract base class for geocoding service providers.
    
    Implementations should handle provider-specific logic including:
    - Query and request formatting
    - Response parsing and candidate selection
    - Converting transport and parse errors into failed outcomes
    """

    @abstractmethod
    def lookup(self, record: AddressRecord) -> LookupOutcome:
        """Geocode one address record.
        
        Args:
            record: Parsed address line to resolve
            
        Returns:
            A successful LookupOutcome carrying latitude and longitude, or a
            failed one carrying the FailureKind. Implementations must not
            raise for per-record problems.
        """
        pass

    @abstractmethod
    def get_source_name(self) -> str:
        """Get the provider name used in log lines.
        
        Returns:
            String identifier for this geocoding provider (e.g., 'google_maps')
        """
        pass

    @abstractmethod
    def get_rate_limit_delay(self) -> float:
        """Get the delay between requests in seconds.
        
        Returns:
            Delay in seconds to wait after each geocoding request
        """
        pass
