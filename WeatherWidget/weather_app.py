"""Query controller - owns the widget's view state and handles submits."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional
from history_store import HistoryStore
from weather_data import ErrorState, HistoryEntry, WeatherResult
from weather_provider import ErrorKind, WeatherLookupError, WeatherProviderBase

CITY_REQUIRED_MESSAGE = "El campo ciudad es obligatorio"
API_KEY_MISSING_MESSAGE = "API key no configurada"


@dataclass
class ViewState:
    """Everything the layout needs to draw the widget."""
    city: str = ""
    loading: bool = False
    error: ErrorState = field(default_factory=ErrorState.cleared)
    weather: Optional[WeatherResult] = None
    history: List[HistoryEntry] = field(default_factory=list)
    show_history: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WeatherApp:
    """
    Controller for the weather widget.

    Holds the view state, validates input, calls the provider and records
    successful lookups in the history store. Failures of any ErrorKind end
    up in the same ErrorState and never propagate out of submit().
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        history: HistoryStore,
        clock: Callable[[], datetime] = _utcnow
    ):
        """
        Initialize the controller and load the saved history.

        Args:
            provider: Weather provider to query
            history: Persisted lookup history
            clock: Returns the timestamp recorded for new history entries
        """
        self.provider = provider
        self.history = history
        self.clock = clock
        self.state = ViewState(history=history.load())

    def set_city(self, city: str) -> None:
        self.state.city = city

    def toggle_history(self) -> bool:
        """Flip history visibility. Storage is untouched."""
        self.state.show_history = not self.state.show_history
        return self.state.show_history

    def submit(self) -> bool:
        """
        Look up the current city.

        Returns:
            True if the lookup succeeded, False if an error was recorded
        """
        self.state.error = ErrorState.cleared()
        self.state.loading = True
        try:
            weather = self._fetch(self.state.city)
        except WeatherLookupError as e:
            logging.warning(f"Lookup failed ({e.kind.value}): {e.message}")
            self.state.error = ErrorState(is_error=True, message=e.message)
            return False
        finally:
            self.state.loading = False

        self.state.weather = weather
        self._record(weather)
        return True

    def _fetch(self, city: str) -> WeatherResult:
        if not city.strip():
            raise WeatherLookupError(ErrorKind.VALIDATION, CITY_REQUIRED_MESSAGE)
        if not self.provider.is_configured():
            raise WeatherLookupError(ErrorKind.CONFIGURATION, API_KEY_MISSING_MESSAGE)

        logging.info(f"Looking up weather for {city.strip()!r}")
        return self.provider.get_current(city.strip())

    def _record(self, weather: WeatherResult) -> None:
        entry = HistoryEntry(city=weather.city, country=weather.country, timestamp=self.clock())
        try:
            self.state.history = self.history.add(entry)
        except OSError as e:
            # The entry is still in memory; only the write failed
            logging.error(f"Could not save history: {e}")
            self.state.history = self.history.entries
