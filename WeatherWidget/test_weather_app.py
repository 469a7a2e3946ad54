"""Tests for the query controller."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch
from history_store import HISTORY_KEY, HistoryStore
from layout import render_view
from storage import JsonFileStore, MemoryStore
from weather_app import API_KEY_MISSING_MESSAGE, CITY_REQUIRED_MESSAGE, WeatherApp
from weather_data import WeatherResult
from weather_provider import ErrorKind, WeatherLookupError, WeatherProviderBase
from weatherapi_provider import WeatherApiProvider


class MockProvider(WeatherProviderBase):
    """Mock weather provider for testing."""

    def __init__(self, return_data=None, raise_error=None, configured=True):
        self.return_data = return_data
        self.raise_error = raise_error
        self.configured = configured
        self.calls = []

    def is_configured(self):
        return self.configured

    def get_current(self, city):
        self.calls.append(city)
        if self.raise_error:
            raise self.raise_error
        if callable(self.return_data):
            return self.return_data(city)
        return self.return_data


class FakeClock:
    """Returns one minute later on every call."""

    def __init__(self):
        self.now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def madrid():
    return WeatherResult(
        city="Madrid",
        country="Spain",
        temperature_c=21,
        condition_code=1000,
        condition_text="Clear",
        icon_url="//x/icon.png"
    )


@pytest.fixture
def storage():
    return MemoryStore()


def make_app(provider, storage):
    return WeatherApp(provider, HistoryStore(storage), clock=FakeClock())


def test_empty_city_fails_without_network_call(madrid, storage):
    """Test that an empty city sets an error and never calls the provider."""
    provider = MockProvider(return_data=madrid)
    app = make_app(provider, storage)

    for city in ("", "   "):
        app.set_city(city)
        assert app.submit() is False
        assert app.state.error.is_error is True
        assert app.state.error.message == CITY_REQUIRED_MESSAGE

    assert provider.calls == []
    assert app.state.loading is False


def test_missing_api_key_fails_without_network_call(storage):
    """Test that a missing credential never issues an HTTP request."""
    provider = WeatherApiProvider(api_key=None)
    app = make_app(provider, storage)
    app.set_city("Madrid")

    with patch('weatherapi_provider.requests.get') as mock_get:
        assert app.submit() is False
        mock_get.assert_not_called()

    assert app.state.error.is_error is True
    assert app.state.error.message == API_KEY_MISSING_MESSAGE
    assert app.state.weather is None


def test_empty_city_is_checked_before_api_key(storage):
    provider = MockProvider(configured=False)
    app = make_app(provider, storage)

    app.submit()

    assert app.state.error.message == CITY_REQUIRED_MESSAGE


def test_successful_lookup(storage):
    """Test the Madrid response end to end through the real provider."""
    payload = {
        "location": {"name": "Madrid", "country": "Spain"},
        "current": {"temp_c": 21, "condition": {"code": 1000, "text": "Clear", "icon": "//x/icon.png"}},
    }
    app = make_app(WeatherApiProvider(api_key="test_key"), storage)
    app.set_city("Madrid")

    with patch('weatherapi_provider.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = True
        mock_response.status_code = 200
        mock_response.json.return_value = payload
        mock_get.return_value = mock_response

        assert app.submit() is True

    assert app.state.error.is_error is False
    assert app.state.loading is False
    screen = "\n".join(render_view(app.state))
    assert "Madrid, Spain" in screen
    assert "21 °C" in screen
    assert "Clear" in screen

    assert len(app.state.history) == 1
    assert (app.state.history[0].city, app.state.history[0].country) == ("Madrid", "Spain")
    assert len(storage.get_json(HISTORY_KEY)) == 1


def test_eleven_lookups_keep_ten_newest(storage):
    """Test that the 11th lookup evicts the oldest entry."""
    provider = MockProvider(
        return_data=lambda city: WeatherResult(city, "Testland", 10, 1000, "Clear", "//x/icon.png")
    )
    app = make_app(provider, storage)

    for i in range(11):
        app.set_city(f"City{i}")
        assert app.submit() is True

    expected = [f"City{i}" for i in range(10, 0, -1)]
    assert [e.city for e in app.state.history] == expected
    assert [r["city"] for r in storage.get_json(HISTORY_KEY)] == expected
    timestamps = [e.timestamp for e in app.state.history]
    assert timestamps == sorted(timestamps, reverse=True)


def test_transport_error_keeps_result_and_history(madrid, storage):
    """Test that a non-OK status shows the status text and changes nothing else."""
    provider = MockProvider(return_data=madrid)
    app = make_app(provider, storage)
    app.set_city("Madrid")
    app.submit()
    history_before = app.state.history

    provider.raise_error = WeatherLookupError(ErrorKind.TRANSPORT, "Error en la solicitud: Bad Request")
    app.set_city("Atlantis")
    assert app.submit() is False

    assert "Bad Request" in app.state.error.message
    assert app.state.weather == madrid
    assert app.state.history == history_before
    assert len(storage.get_json(HISTORY_KEY)) == 1


def test_http_400_through_provider(madrid, storage):
    """Test a real 400 response from the HTTP layer."""
    app = make_app(WeatherApiProvider(api_key="test_key"), storage)
    app.set_city("Atlantis")

    with patch('weatherapi_provider.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = False
        mock_response.status_code = 400
        mock_response.reason = "Bad Request"
        mock_get.return_value = mock_response

        assert app.submit() is False

    assert app.state.error.message == "Error en la solicitud: Bad Request"
    assert app.state.weather is None
    assert app.state.history == []
    assert storage.get_json(HISTORY_KEY) is None


def test_provider_error_message_is_shown(storage):
    """Test that the provider's message is surfaced verbatim."""
    app = make_app(WeatherApiProvider(api_key="test_key"), storage)
    app.set_city("Atlantis")

    with patch('weatherapi_provider.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = True
        mock_response.status_code = 200
        mock_response.json.return_value = {"error": {"message": "No matching location found."}}
        mock_get.return_value = mock_response

        assert app.submit() is False

    assert app.state.error.is_error is True
    assert app.state.error.message == "No matching location found."
    assert app.state.history == []


def test_error_is_cleared_on_next_submit(madrid, storage):
    provider = MockProvider(return_data=madrid)
    app = make_app(provider, storage)

    app.submit()
    assert app.state.error.is_error is True

    app.set_city("Madrid")
    app.submit()
    assert app.state.error.is_error is False
    assert app.state.error.message == ""


def test_loading_flag_is_set_during_request(madrid, storage):
    """Test that the loading flag is raised while the provider is called."""
    seen = []
    app = None

    def fetch(city):
        seen.append(app.state.loading)
        return madrid

    app = make_app(MockProvider(return_data=fetch), storage)
    app.set_city("Madrid")
    app.submit()

    assert seen == [True]
    assert app.state.loading is False


def test_city_is_trimmed_before_lookup(madrid, storage):
    provider = MockProvider(return_data=madrid)
    app = make_app(provider, storage)

    app.set_city("  Madrid ")
    app.submit()

    assert provider.calls == ["Madrid"]


def test_unexpected_errors_propagate(storage):
    """Test that programming errors aren't turned into an error state."""
    app = make_app(MockProvider(raise_error=RuntimeError("boom")), storage)
    app.set_city("Madrid")

    with pytest.raises(RuntimeError):
        app.submit()
    assert app.state.loading is False


def test_toggle_history_does_not_touch_storage(madrid):
    storage = Mock(wraps=MemoryStore())
    app = make_app(MockProvider(return_data=madrid), storage)

    assert app.state.show_history is False
    assert app.toggle_history() is True
    assert app.toggle_history() is False
    storage.set_json.assert_not_called()


def test_history_loaded_at_startup(madrid, tmp_path):
    """Test that history persists across a simulated restart."""
    path = str(tmp_path / "history.json")
    first = make_app(MockProvider(return_data=madrid), JsonFileStore(path))
    for city in ("Madrid", "Madrid"):
        first.set_city(city)
        first.submit()

    second = make_app(MockProvider(), JsonFileStore(path))

    assert second.state.history == first.state.history
    assert len(second.state.history) == 2


def test_history_write_failure_is_not_fatal(madrid):
    """Test that a storage error keeps the lookup result and in-memory entry."""
    storage = MemoryStore()
    storage.set_json = Mock(side_effect=OSError("disk full"))
    app = make_app(MockProvider(return_data=madrid), storage)
    app.set_city("Madrid")

    assert app.submit() is True
    assert app.state.weather == madrid
    assert len(app.state.history) == 1


@pytest.mark.parametrize("location, current", [
    ({"name": "Madrid", "country": "Spain"},
     {"temp_c": None, "condition": {"code": 1000, "text": "Clear", "icon": "//x/icon.png"}}),
    ({"name": 42, "country": "Spain"},
     {"temp_c": 21, "condition": {"code": 1000, "text": "Clear", "icon": "//x/icon.png"}}),
])
def test_invalid_success_payload_leaves_history_untouched(storage, location, current):
    """Test that a malformed 200 body is an error and is never recorded."""
    app = make_app(WeatherApiProvider(api_key="test_key"), storage)
    app.set_city("Madrid")

    with patch('weatherapi_provider.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = True
        mock_response.status_code = 200
        mock_response.json.return_value = {"location": location, "current": current}
        mock_get.return_value = mock_response

        assert app.submit() is False

    assert app.state.error.is_error is True
    assert app.state.weather is None
    assert app.state.history == []
    assert storage.get_json(HISTORY_KEY) is None
    render_view(app.state)
