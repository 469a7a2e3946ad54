"""Weather provider abstraction and the lookup error taxonomy."""
from abc import ABC, abstractmethod
from enum import Enum
from weather_data import WeatherResult


class ErrorKind(Enum):
    """Every way a lookup can fail."""
    VALIDATION = "validation"  # empty city
    CONFIGURATION = "configuration"  # missing API key
    TRANSPORT = "transport"  # non-OK HTTP status or network failure
    PROVIDER = "provider"  # provider-reported or malformed response


class WeatherLookupError(Exception):
    """Exception raised when a lookup fails, tagged with its ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"WeatherLookupError({self.kind.name}, {self.message!r})"


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs to make a request."""
        return True

    @abstractmethod
    def get_current(self, city: str) -> WeatherResult:
        """
        Fetch current weather for a city.

        Args:
            city: City name or any query the provider accepts

        Returns:
            WeatherResult: Current conditions

        Raises:
            WeatherLookupError: TRANSPORT or PROVIDER when the fetch fails
        """
        pass
