"""Tests for the NWS station feed."""
import pytest
import requests
from datetime import datetime, timezone
from unittest.mock import Mock, patch
from services.noaa import WeatherProviderError, fetch_metar_text, station_name

FEED_TEXT = "2024/10/15 12:00\nMKJP 151200Z 09010KT 9999 FEW020 30/24 Q1012\n"


def _response(status_code=200, text=FEED_TEXT):
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


def test_fetch_metar_text_success():
    with patch('services.noaa.requests.get') as mock_get:
        mock_get.return_value = _response()

        raw_metar = fetch_metar_text("mkjp")

        assert raw_metar.station == "MKJP"
        assert raw_metar.raw == "MKJP 151200Z 09010KT 9999 FEW020 30/24 Q1012"
        assert raw_metar.issued_at == datetime(2024, 10, 15, 12, 0, tzinfo=timezone.utc)
        url = mock_get.call_args[0][0]
        assert url.endswith("/MKJP.TXT")


def test_fetch_metar_text_without_header():
    with patch('services.noaa.requests.get') as mock_get:
        mock_get.return_value = _response(text="MKJP 151200Z 09010KT 9999 FEW020 30/24 Q1012")

        raw_metar = fetch_metar_text("MKJP")

        assert raw_metar.issued_at is None
        assert raw_metar.raw.startswith("MKJP 151200Z")


def test_fetch_metar_text_http_error():
    with patch('services.noaa.requests.get') as mock_get:
        mock_get.return_value = _response(status_code=404, text="Not Found")

        with pytest.raises(WeatherProviderError, match="404"):
            fetch_metar_text("ZZZZ")


def test_fetch_metar_text_network_error():
    with patch('services.noaa.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(WeatherProviderError, match="Network error"):
            fetch_metar_text("MKJP")


def test_fetch_metar_text_empty_body():
    with patch('services.noaa.requests.get') as mock_get:
        mock_get.return_value = _response(text="\n  \n")

        with pytest.raises(WeatherProviderError, match="Empty"):
            fetch_metar_text("MKJP")


def test_station_name():
    assert station_name("MKJP") == "Kingston/Norman Manley International Airport (MKJP)"
    assert station_name("kjfk") == "KJFK"
