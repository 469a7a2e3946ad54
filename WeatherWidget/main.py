"""Terminal weather lookup widget."""
import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional

from dotenv import load_dotenv

from history_store import HistoryStore
from layout import render_view
from storage import JsonFileStore
from weather_app import WeatherApp
from weatherapi_provider import WeatherApiProvider

DEFAULT_HISTORY_FILE = os.path.join("~", ".weather_widget", "history.json")
DEFAULT_LANG = "es"

TOGGLE_HISTORY_COMMAND = ":h"
QUIT_COMMAND = ":q"
PROMPT = "Ciudad (:h historial, :q salir)> "


@dataclass
class Settings:
    api_key: Optional[str]
    lang: str
    history_file: str


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("weather-widget", description="Current weather lookup with history")
    parser.add_argument("cities", nargs="*", help="Look these cities up and exit")
    parser.add_argument("--history", action="store_true", help="Start with the history shown")
    parser.add_argument("--history-file", default=None, help="Where lookup history is saved")
    parser.add_argument("--lang", default=None, help="Response language (default: es)")
    parser.add_argument("--timeout", type=float, default=10.0, help="HTTP timeout in seconds")
    parser.add_argument("--no-color", action="store_true")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    # stdout belongs to the widget, logs go to stderr
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level if verbose else logging.WARNING)
    handlers: List[logging.Handler] = [console]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def load_config(args: argparse.Namespace) -> Settings:
    load_dotenv()
    api_key = os.getenv("WEATHER_API_KEY")
    lang = args.lang or os.getenv("WEATHER_LANG", DEFAULT_LANG)
    history_file = args.history_file or os.getenv("WEATHER_HISTORY_FILE", DEFAULT_HISTORY_FILE)

    # A missing key is reported on each submit, not here
    if not api_key:
        logging.warning("WEATHER_API_KEY is not set; lookups will fail until it is configured")

    logging.info("Configuration loaded: lang=%s history_file=%s", lang, history_file)
    return Settings(api_key=api_key, lang=lang, history_file=history_file)


def build_app(settings: Settings, timeout: float) -> WeatherApp:
    provider = WeatherApiProvider(
        api_key=settings.api_key,
        lang=settings.lang,
        timeout=timeout,
    )
    history = HistoryStore(JsonFileStore(settings.history_file))
    app = WeatherApp(provider, history)
    logging.info("Weather app ready (%s saved lookups)", len(app.state.history))
    return app


def draw(app: WeatherApp, color: bool, out=None) -> None:
    out = out or sys.stdout
    out.write("\n".join(render_view(app.state, color=color)) + "\n")
    out.flush()


def run_once(app: WeatherApp, cities: List[str], color: bool, out=None) -> int:
    """Look up each city in turn. Returns the process exit code."""
    failures = 0
    for city in cities:
        app.set_city(city)
        if not app.submit():
            failures += 1
        draw(app, color, out)
    return 1 if failures else 0


def run_interactive(
    app: WeatherApp,
    color: bool,
    read_line: Callable[[str], str] = input,
    out=None
) -> int:
    draw(app, color, out)
    while True:
        try:
            line = read_line(PROMPT)
        except (EOFError, KeyboardInterrupt):
            logging.info("Input closed, exiting")
            return 0

        command = line.strip()
        if command == QUIT_COMMAND:
            return 0
        if command == TOGGLE_HISTORY_COMMAND:
            app.toggle_history()
        else:
            app.set_city(line)
            try:
                app.submit()
            except KeyboardInterrupt:
                logging.info("Interrupted during lookup, exiting")
                return 0
        draw(app, color, out)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    settings = load_config(args)

    app = build_app(settings, args.timeout)
    if args.history:
        app.toggle_history()

    color = not args.no_color and sys.stdout.isatty()
    if args.cities:
        return run_once(app, args.cities, color)
    return run_interactive(app, color)


if __name__ == "__main__":
    sys.exit(main())
