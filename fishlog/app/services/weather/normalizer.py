# fishlog/app/services/weather/normalizer.py
import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from fishlog.app.core.numbers import round_half_away
from fishlog.app.schemas.weather import Temperature, WeatherSnapshot, Wind

logger = logging.getLogger(__name__)

# WMO weather interpretation codes as reported by Open-Meteo
WEATHER_CONDITIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}
UNKNOWN_CONDITION = "Unknown"

# Daily series the snapshot is built from; all of them must be present
DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "weathercode",
    "precipitation_sum",
    "windspeed_10m_max",
    "winddirection_10m_dominant",
)


def weather_condition(code: Any) -> str:
    try:
        return WEATHER_CONDITIONS.get(int(code), UNKNOWN_CONDITION)
    except (TypeError, ValueError):
        return UNKNOWN_CONDITION


def hourly_average(values: Sequence | None) -> float | None:
    """
    Mean of an hourly series rounded to one decimal.

    Missing samples count as 0 but still count toward the length, which
    pulls the mean down when the archive has gaps. Kept that way so numbers
    match trips logged by earlier versions.
    """
    if not values:
        return None
    mean = sum(_number_or_zero(v) for v in values) / len(values)
    if not math.isfinite(mean):
        # Finite samples can still overflow the sum
        return None
    return round_half_away(mean, 1)


def hourly_max(values: Sequence | None) -> float | None:
    samples = [v for v in (values or []) if _is_number(v)]
    return max(samples) if samples else None


def normalize_weather(raw: Any, requested_date: str) -> WeatherSnapshot | None:
    """
    Build a WeatherSnapshot from one archive response.

    Index 0 of every daily series is used as-is: the collector always asks
    for a single day (start_date == end_date), so there is nothing to look up.
    Returns None instead of raising when the payload is not usable.
    """
    if not isinstance(raw, Mapping):
        logger.warning("Weather payload for %s is not an object, ignoring it", requested_date)
        return None

    daily = raw.get("daily")
    hourly = raw.get("hourly")
    if not isinstance(daily, Mapping) or not isinstance(hourly, Mapping):
        logger.warning("Weather payload for %s lacks daily or hourly data", requested_date)
        return None

    try:
        day = {field: daily[field][0] for field in DAILY_FIELDS}
    except (KeyError, IndexError, TypeError) as e:
        logger.warning("Weather payload for %s has incomplete daily series: %s", requested_date, e)
        return None

    try:
        return WeatherSnapshot(
            date=requested_date,
            temperature=Temperature(
                high=day["temperature_2m_max"],
                low=day["temperature_2m_min"],
                average=hourly_average(hourly.get("temperature_2m")),
            ),
            condition=weather_condition(day["weathercode"]),
            weather_code=day["weathercode"],
            precipitation=day["precipitation_sum"] or 0,
            wind=Wind(
                speed=day["windspeed_10m_max"],
                direction=day["winddirection_10m_dominant"],
            ),
            humidity=hourly_average(hourly.get("relativehumidity_2m")),
            pressure=hourly_average(hourly.get("pressure_msl")),
            visibility=hourly_average(hourly.get("visibility")),
            uv_index=hourly_max(hourly.get("uv_index")),
        )
    except (ValidationError, TypeError, ArithmeticError) as e:
        logger.warning("Weather payload for %s could not be normalized: %s", requested_date, e)
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _number_or_zero(value: Any) -> float:
    return value if _is_number(value) else 0
