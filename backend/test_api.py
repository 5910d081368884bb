"""Tests for the HTTP API."""
import pytest
from unittest.mock import patch
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
import config
import main
from main import app, get_weather_service
from models.weather import RawMetar
from services.noaa import WeatherProviderError
from services.weather import WeatherService

ISSUED_AT = datetime(2024, 10, 15, 12, 0, tzinfo=timezone.utc)


def _fetcher(raw="MKJP 151200Z 27025G40KT 9999 BKN010 30/24 Q1012"):
    def fetch(station):
        return RawMetar(station=station, raw=raw, issued_at=ISSUED_AT)
    return fetch


def _failing_fetcher(station):
    raise WeatherProviderError("Network error")


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use_service(service):
    app.dependency_overrides[get_weather_service] = lambda: service


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_jamaica_weather(client):
    _use_service(WeatherService(_fetcher(), clock=lambda: ISSUED_AT + timedelta(minutes=5)))

    response = client.get("/api/weather/jamaica")

    assert response.status_code == 200
    data = response.json()
    assert data["station"] == "MKJP"
    assert data["stationName"].startswith("Kingston/Norman Manley")
    assert data["observation_time"] == "151200Z"
    assert data["raw"].startswith("MKJP 151200Z")
    assert data["stale"] is False
    parsed = data["parsed"]
    assert parsed["wind"]["direction"] == 270
    assert parsed["wind"]["directionCompass"] == "W"
    assert parsed["wind"]["gust"] == 40
    assert parsed["temperature"]["fahrenheit"] == 86
    assert parsed["dewPoint"]["celsius"] == 24
    assert parsed["pressure"] == {"value": "1012", "unit": "hPa"}
    assert data["summary"] == parsed["summary"]


def test_weather_flags_stale_observation(client):
    _use_service(WeatherService(_fetcher(), max_age_hours=1, clock=lambda: ISSUED_AT + timedelta(hours=2)))

    response = client.get("/api/weather/MKJS")

    assert response.status_code == 200
    assert response.json()["stale"] is True


def test_weather_unavailable(client):
    _use_service(WeatherService(_failing_fetcher))

    response = client.get("/api/weather/jamaica")

    assert response.status_code == 503
    assert response.json()["detail"] == "Weather data not available"


def test_invalid_station_code(client):
    _use_service(WeatherService(_fetcher()))

    response = client.get("/api/weather/KJ1")

    assert response.status_code == 400


def test_health_reports_cache_state(client):
    service = WeatherService(_fetcher(), clock=lambda: ISSUED_AT)
    _use_service(service)

    assert client.get("/api/health").json()["weather"]["cached"] is False
    client.get("/api/weather/jamaica")
    assert client.get("/api/health").json()["weather"]["cached"] is True


def test_parse_endpoint(client):
    response = client.post("/api/metar/parse", json={"raw": "MKJP 151200Z VRB03KT //// SCT020 //// A2992"})

    assert response.status_code == 200
    data = response.json()
    assert data["wind"]["direction"] is None
    assert data["wind"]["directionCompass"] == "Variable"
    assert data["visibility"]["description"] == "Unknown"
    assert data["temperature"] == {"celsius": None, "fahrenheit": None}
    assert data["pressure"] == {"value": "2992", "unit": "inHg"}
    assert data["fieldStatus"]["temperature"] == "absent"


def test_parse_endpoint_empty_report(client):
    response = client.post("/api/metar/parse", json={"raw": "  "})
    assert response.status_code == 422


def test_alphanumeric_station_code(client):
    _use_service(WeatherService(_fetcher(raw="K1V4 151200Z 09010KT 9999 FEW020 30/24 A2992"), clock=lambda: ISSUED_AT))

    response = client.get("/api/weather/K1V4")

    assert response.status_code == 200
    assert response.json()["station"] == "K1V4"


def test_station_code_must_start_with_letter(client):
    _use_service(WeatherService(_fetcher()))

    assert client.get("/api/weather/1V44").status_code == 400


def test_parse_endpoint_undecodable_groups(client):
    response = client.post("/api/metar/parse", json={"raw": "MKJP 151200Z 09010KT ²³ FEW020 3X/24 Q1012"})

    assert response.status_code == 200
    data = response.json()
    assert data["visibility"]["description"] == "Unknown"
    assert data["fieldStatus"]["visibility"] == "invalid"
    assert data["fieldStatus"]["temperature"] == "invalid"
    assert data["dewPoint"]["celsius"] == 24


def test_logging_uses_configured_level():
    with patch.object(config, "LOG_LEVEL", "DEBUG"), patch("main.logging.basicConfig") as mock_basic_config:
        main.configure_logging()

    assert mock_basic_config.call_args.kwargs["level"] == "DEBUG"
