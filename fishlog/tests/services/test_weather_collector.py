# fishlog/tests/services/test_weather_collector.py
import pytest
import requests
from unittest.mock import patch, MagicMock

from fishlog.app.core.config import WEATHER_ARCHIVE_URL, WEATHER_ATTEMPTS
from fishlog.app.services.weather import weather_collector
from fishlog.app.services.weather.weather_collector import build_weather_params, fetch_weather


# Do not actually wait between retries
@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(weather_collector.fetch_raw_weather_data.retry, "sleep", lambda seconds: None)


def _response(status_code=200, payload=None):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    if status_code >= 400:
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=mock_response
        )
    else:
        mock_response.raise_for_status.return_value = None
    return mock_response


def test_build_weather_params_requests_a_single_day():
    params = build_weather_params(44.5, -93.25, "2024-06-01")

    assert params["latitude"] == 44.5
    assert params["longitude"] == -93.25
    assert params["start_date"] == params["end_date"] == "2024-06-01"
    assert params["timezone"] == "auto"
    assert params["daily"].split(",") == [
        "temperature_2m_max", "temperature_2m_min", "weathercode",
        "precipitation_sum", "windspeed_10m_max", "winddirection_10m_dominant",
    ]
    assert params["hourly"].split(",") == [
        "temperature_2m", "relativehumidity_2m", "pressure_msl", "visibility", "uv_index",
    ]


@patch('requests.get')
def test_fetch_weather_success(mock_requests_get, archive_response):
    mock_requests_get.return_value = _response(200, archive_response)

    snapshot = fetch_weather(44.5, -93.25, "2024-06-01")

    mock_requests_get.assert_called_once()
    assert mock_requests_get.call_args[0][0] == WEATHER_ARCHIVE_URL
    assert mock_requests_get.call_args[1]["params"]["start_date"] == "2024-06-01"
    assert mock_requests_get.call_args[1]["timeout"] > 0
    assert snapshot is not None
    assert snapshot.condition == "Overcast"
    assert snapshot.date == "2024-06-01"


@pytest.mark.parametrize("status_code", [400, 404, 500, 503])
@patch('requests.get')
def test_http_error_returns_none_without_retrying(mock_requests_get, status_code):
    mock_requests_get.return_value = _response(status_code, {"error": True})

    assert fetch_weather(44.5, -93.25, "2024-06-01") is None
    mock_requests_get.assert_called_once()


@patch('requests.get')
def test_network_errors_are_retried_then_give_up(mock_requests_get):
    mock_requests_get.side_effect = requests.exceptions.ConnectionError("connection refused")

    assert fetch_weather(44.5, -93.25, "2024-06-01") is None
    assert mock_requests_get.call_count == WEATHER_ATTEMPTS


@patch('requests.get')
def test_transient_timeout_then_success(mock_requests_get, archive_response):
    mock_requests_get.side_effect = [
        requests.exceptions.Timeout("slow"),
        _response(200, archive_response),
    ]

    snapshot = fetch_weather(44.5, -93.25, "2024-06-01")

    if WEATHER_ATTEMPTS > 1:
        assert snapshot is not None
        assert mock_requests_get.call_count == 2
    else:
        assert snapshot is None


@patch('requests.get')
def test_undecodable_body_returns_none(mock_requests_get):
    mock_response = _response(200)
    mock_response.json.side_effect = ValueError("Expecting value")
    mock_requests_get.return_value = mock_response

    assert fetch_weather(44.5, -93.25, "2024-06-01") is None


@patch('requests.get')
def test_payload_without_daily_returns_none(mock_requests_get, archive_response):
    del archive_response["daily"]
    mock_requests_get.return_value = _response(200, archive_response)

    assert fetch_weather(44.5, -93.25, "2024-06-01") is None
