"""Layout and rendering logic for the widget - pure functions for testability."""
from datetime import datetime
from typing import List, Optional, Tuple
from weather_app import ViewState
from weather_data import HistoryEntry, WeatherResult

TITLE = "Weather App"
CITY_LABEL = "Ciudad"
SUBMIT_LABEL = "Buscar"
LOADING_LABEL = "Buscando..."
SHOW_HISTORY_LABEL = "Mostrar Historial"
HIDE_HISTORY_LABEL = "Ocultar Historial"
EMPTY_HISTORY_TEXT = "(sin búsquedas)"
FOOTER = "Powered by: WeatherAPI.com (https://www.weatherapi.com/)"

WIDTH = 40


def get_temperature_color(temp_c: float) -> Tuple[int, int, int]:
    """
    Get RGB color for temperature using a simple gradient.

    Cold (< 0°C) = blue
    Cool (0-15°C) = cyan
    Mild (15-25°C) = green/yellow
    Warm (25-35°C) = yellow/orange
    Hot (> 35°C) = red

    Args:
        temp_c: Temperature in Celsius

    Returns:
        Tuple of (r, g, b) values (0-255)
    """
    if temp_c < 0:
        return (0, 0, 255)
    elif temp_c < 15:
        ratio = temp_c / 15.0
        return (0, int(255 * ratio), 255)
    elif temp_c < 25:
        ratio = (temp_c - 15) / 10.0
        return (int(255 * ratio), 255, int(255 * (1 - ratio)))
    elif temp_c < 35:
        ratio = (temp_c - 25) / 10.0
        return (255, int(255 * (1 - ratio * 0.5)), 0)
    else:
        ratio = min((temp_c - 35) / 10.0, 1.0)
        return (255, int(255 * (1 - ratio)), 0)


def colorize(text: str, rgb: Tuple[int, int, int]) -> str:
    """Wrap text in a 24-bit ANSI foreground color."""
    r, g, b = rgb
    return f"\x1b[38;2;{r};{g};{b}m{text}\x1b[0m"


def format_temperature(temp_c: float) -> str:
    """21 -> "21 °C", 21.5 -> "21.5 °C"."""
    if float(temp_c).is_integer():
        return f"{int(temp_c)} °C"
    return f"{temp_c} °C"


def format_location(city: str, country: str) -> str:
    return f"{city}, {country}"


def format_timestamp(ts: datetime) -> str:
    """Locale-formatted local time."""
    return ts.astimezone().strftime("%c")


def center(text: str, width: int = WIDTH) -> str:
    return text.center(width).rstrip()


def render_form(state: ViewState) -> List[str]:
    """City field with its inline error, then the submit button."""
    lines = [f"{CITY_LABEL}: {state.city}"]
    if state.error.is_error:
        lines.append(f"  ! {state.error.message}")
    button = LOADING_LABEL if state.loading else SUBMIT_LABEL
    lines.append(f"[ {button} ]")
    return lines


def render_result(weather: WeatherResult, color: bool = False) -> List[str]:
    """Result panel: location, icon link, temperature and condition."""
    temperature = format_temperature(weather.temperature_c)
    if color:
        temperature = colorize(temperature, get_temperature_color(weather.temperature_c))
    return [
        center(format_location(weather.city, weather.country)),
        center(weather.absolute_icon_url),
        center(temperature),
        center(weather.condition_text),
    ]


def render_history(entries: List[HistoryEntry]) -> List[str]:
    if not entries:
        return [f"  {EMPTY_HISTORY_TEXT}"]
    lines = []
    for entry in entries:
        lines.append(f"  {format_location(entry.city, entry.country)}")
        lines.append(f"    {format_timestamp(entry.timestamp)}")
    return lines


def render_view(state: ViewState, color: bool = False, width: Optional[int] = None) -> List[str]:
    """
    Render the whole widget as text lines.

    Args:
        state: Controller view state
        color: Emit ANSI colors for the temperature
        width: Width of the separator rules (defaults to WIDTH)

    Returns:
        Lines to print, without trailing newlines
    """
    rule = "-" * (width or WIDTH)
    lines = [center(TITLE), rule]
    lines.extend(render_form(state))

    if state.weather is not None:
        lines.append(rule)
        lines.extend(render_result(state.weather, color=color))

    lines.append(rule)
    lines.append(f"[ {HIDE_HISTORY_LABEL if state.show_history else SHOW_HISTORY_LABEL} ]")
    if state.show_history:
        lines.extend(render_history(state.history))

    lines.append(rule)
    lines.append(FOOTER)
    return lines
