# fishlog/app/schemas/weather.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Snapshot(BaseModel):
    # Snapshots never change once attached to a trip
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class Temperature(_Snapshot):
    high: float | None = None
    low: float | None = None
    average: float | None = None  # Mean of the hourly series


class Wind(_Snapshot):
    speed: float | None = None  # Daily max, km/h
    direction: float | None = None  # Dominant direction, degrees


class WeatherSnapshot(_Snapshot):
    """Fixed-shape weather for one trip day, built by the weather normalizer."""

    date: str  # The requested trip date
    temperature: Temperature
    condition: str
    weather_code: int | None = None
    precipitation: float = Field(0, ge=0)
    wind: Wind

    # Hourly means, None when the archive returned no samples
    humidity: float | None = None
    pressure: float | None = None
    visibility: float | None = None

    uv_index: float | None = None  # Hourly max
