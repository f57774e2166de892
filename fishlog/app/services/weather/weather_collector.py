# fishlog/app/services/weather/weather_collector.py
import logging

import requests
import tenacity

from fishlog.app.core.config import (
    WEATHER_ARCHIVE_URL,
    WEATHER_ATTEMPTS,
    WEATHER_RETRY_WAIT,
    WEATHER_TIMEOUT,
)
from fishlog.app.core.errors import WeatherUnavailable
from fishlog.app.schemas.weather import WeatherSnapshot
from fishlog.app.services.weather.normalizer import normalize_weather

logger = logging.getLogger(__name__)

DAILY_VARIABLES = (
    "temperature_2m_max,temperature_2m_min,weathercode,precipitation_sum,"
    "windspeed_10m_max,winddirection_10m_dominant"
)
HOURLY_VARIABLES = "temperature_2m,relativehumidity_2m,pressure_msl,visibility,uv_index"

# --- Tenacity Retry Strategy ---
# Only transport failures are retried. An HTTP error status from the archive
# (bad date, out of range coordinates) will not change on a second try.
retry_strategy = tenacity.retry(
    stop=tenacity.stop_after_attempt(WEATHER_ATTEMPTS),
    wait=tenacity.wait_fixed(WEATHER_RETRY_WAIT),
    retry=tenacity.retry_if_exception_type(
        (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
    ),
    reraise=True,  # Re-raise the last exception if all retries fail
)


def build_weather_params(latitude: float, longitude: float, trip_date: str) -> dict:
    """Query for a single day of archive weather at one spot."""
    return {
        "latitude": latitude,
        "longitude": longitude,
        "start_date": trip_date,
        "end_date": trip_date,
        "daily": DAILY_VARIABLES,
        "hourly": HOURLY_VARIABLES,
        "timezone": "auto",
    }


@retry_strategy
def fetch_raw_weather_data(url: str, params: dict) -> dict:
    """
    Fetches raw JSON from the weather archive with retry logic.
    Raises requests.exceptions.RequestException on network/HTTP errors.
    """
    logger.debug("Fetching archive weather from %s for %s,%s", url, params["latitude"], params["longitude"])
    response = requests.get(url, params=params, timeout=WEATHER_TIMEOUT)
    response.raise_for_status()  # Raises HTTPError for 4xx/5xx responses
    return response.json()


def _fetch_snapshot(latitude: float, longitude: float, trip_date: str) -> WeatherSnapshot:
    params = build_weather_params(latitude, longitude, trip_date)
    try:
        data = fetch_raw_weather_data(WEATHER_ARCHIVE_URL, params)
    except requests.exceptions.HTTPError as e:
        status = getattr(e.response, "status_code", None)
        raise WeatherUnavailable(f"Weather API error: {status}") from e
    except requests.exceptions.RequestException as e:
        raise WeatherUnavailable(f"Network error: {e}") from e
    except ValueError as e:
        # Body was not JSON
        raise WeatherUnavailable(f"Undecodable weather response: {e}") from e

    snapshot = normalize_weather(data, trip_date)
    if snapshot is None:
        raise WeatherUnavailable("Weather response lacks daily or hourly data")
    return snapshot


def fetch_weather(latitude: float, longitude: float, trip_date: str) -> WeatherSnapshot | None:
    """
    Archive weather for one trip day, or None if it cannot be had.

    Never raises: a trip is always saveable without weather. There is no
    cancellation; a caller that does not want to wait simply saves without it.
    """
    try:
        snapshot = _fetch_snapshot(latitude, longitude, trip_date)
    except WeatherUnavailable as e:
        logger.warning("Weather unavailable for %s,%s on %s: %s", latitude, longitude, trip_date, e)
        return None

    logger.info("Fetched weather for %s,%s on %s: %s", latitude, longitude, trip_date, snapshot.condition)
    return snapshot
