"""WeatherAPI.com current conditions provider implementation."""
import logging
import requests
from typing import Any, Dict, Optional, Tuple
from weather_provider import ErrorKind, WeatherLookupError, WeatherProviderBase
from weather_data import WeatherResult


class WeatherApiProvider(WeatherProviderBase):
    """
    Weather provider using the WeatherAPI.com current conditions endpoint.

    API reference: https://www.weatherapi.com/docs/
    The free plan covers /current.json, which is all this provider uses.
    """

    BASE_URL = "https://api.weatherapi.com/v1/current.json"

    def __init__(
        self,
        api_key: Optional[str],
        lang: str = "es",
        timeout: float = 10.0
    ):
        """
        Initialize WeatherAPI provider.

        Args:
            api_key: WeatherAPI.com key (None or "" when not configured)
            lang: Language code for condition texts (e.g., "es", "en")
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.lang = lang
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_current(self, city: str) -> WeatherResult:
        """
        Fetch current weather for a city from WeatherAPI.com.

        Args:
            city: City name sent as the "q" query parameter

        Returns:
            WeatherResult: Current conditions

        Raises:
            WeatherLookupError: TRANSPORT on network failure or non-OK status,
                PROVIDER on a provider error payload or a malformed body
        """
        params = {
            "key": self.api_key,
            "lang": self.lang,
            "q": city,
        }

        try:
            logging.info(f"Making WeatherAPI request: {self.BASE_URL}")
            logging.debug(f"Request parameters: q={city!r}, lang={self.lang}")

            response = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherLookupError(ErrorKind.TRANSPORT, f"Error de red: {e}") from e

        logging.info(f"API response status: {response.status_code}")

        if not response.ok:
            status_text = response.reason or str(response.status_code)
            logging.error(f"API request failed with status {response.status_code} {status_text}")
            raise WeatherLookupError(
                ErrorKind.TRANSPORT, f"Error en la solicitud: {status_text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Non-JSON response body: {response.text[:200]}")
            raise WeatherLookupError(
                ErrorKind.PROVIDER, f"Respuesta inválida del proveedor: {e}"
            ) from e

        if isinstance(data, dict) and "error" in data:
            message = self._error_message(data["error"])
            logging.warning(f"WeatherAPI reported an error: {message}")
            raise WeatherLookupError(ErrorKind.PROVIDER, message)

        return self._parse_current(data)

    @staticmethod
    def _error_message(error: Any) -> str:
        """Pull the message out of an {"error": {...}} payload."""
        if isinstance(error, dict):
            message = error.get("message")
            if message:
                return str(message)
            if error.get("code") is not None:
                return f"WeatherAPI error {error['code']}"
        return "Error desconocido del proveedor"

    @staticmethod
    def _field(block: Any, name: str, types: Tuple[type, ...]) -> Any:
        """Fetch a required field, checking it is present and of the expected type."""
        if not isinstance(block, dict):
            raise TypeError(f"'{name}' expected inside an object, got {type(block).__name__}")
        value = block[name]
        if isinstance(value, bool) or not isinstance(value, types):
            raise TypeError(f"'{name}' has unexpected value {value!r}")
        return value

    @classmethod
    def _parse_current(cls, data: Dict[str, Any]) -> WeatherResult:
        """Map a success payload into a WeatherResult."""
        try:
            logging.debug(f"API response data keys: {list(data.keys())}")
            location = cls._field(data, "location", (dict,))
            current = cls._field(data, "current", (dict,))
            condition = cls._field(current, "condition", (dict,))

            result = WeatherResult(
                city=cls._field(location, "name", (str,)),
                country=cls._field(location, "country", (str,)),
                temperature_c=cls._field(current, "temp_c", (int, float)),
                condition_code=cls._field(condition, "code", (int,)),
                condition_text=cls._field(condition, "text", (str,)),
                icon_url=cls._field(condition, "icon", (str,)),
            )
        except KeyError as e:
            logging.error(f"Failed to parse API response: {e!r}", exc_info=True)
            raise WeatherLookupError(
                ErrorKind.PROVIDER, f"Respuesta inválida del proveedor: falta {e}"
            ) from e
        except (TypeError, AttributeError) as e:
            logging.error(f"Failed to parse API response: {e!r}", exc_info=True)
            raise WeatherLookupError(
                ErrorKind.PROVIDER, f"Respuesta inválida del proveedor: {e}"
            ) from e

        logging.info(
            f"Successfully parsed weather data: {result.city}, {result.country} "
            f"{result.temperature_c}°C, {result.condition_text}"
        )
        return result
