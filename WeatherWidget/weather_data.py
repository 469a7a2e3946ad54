"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict


@dataclass
class WeatherResult:
    """Current conditions for one city, mapped from a provider response."""
    city: str
    country: str
    temperature_c: float
    condition_code: int  # provider condition code, e.g. 1000 for "Clear"
    condition_text: str  # localized description, e.g. "Despejado"
    icon_url: str  # as returned by the provider, may be protocol-relative

    @property
    def absolute_icon_url(self) -> str:
        """Icon URL with a scheme, suitable for opening in a browser."""
        if self.icon_url.startswith("//"):
            return f"https:{self.icon_url}"
        return self.icon_url


@dataclass
class HistoryEntry:
    """One past successful lookup."""
    city: str
    country: str
    timestamp: datetime  # timezone-aware, UTC

    def to_dict(self) -> Dict[str, str]:
        """
        Serialize to the persisted record shape.

        The date is written as UTC with millisecond precision and a "Z"
        suffix, e.g. "2024-05-01T12:30:00.000Z".
        """
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        ts = ts.astimezone(timezone.utc)
        date = ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return {"city": self.city, "country": self.country, "date": date}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """
        Build an entry from a persisted record.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the date is not ISO-8601
            TypeError: If the record is not a mapping of strings
        """
        raw_date = data["date"]
        if not isinstance(raw_date, str):
            raise TypeError(f"date must be a string, got {type(raw_date).__name__}")
        if raw_date.endswith("Z"):
            raw_date = raw_date[:-1] + "+00:00"
        timestamp = datetime.fromisoformat(raw_date)
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            city=str(data["city"]),
            country=str(data["country"]),
            timestamp=timestamp.astimezone(timezone.utc),
        )


@dataclass
class ErrorState:
    """Transient failure shown next to the city field."""
    is_error: bool = False
    message: str = ""

    @classmethod
    def cleared(cls) -> "ErrorState":
        return cls(is_error=False, message="")
