# fishlog/app/schemas/entry.py
import math
import re
import uuid
from datetime import date as date_type, datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from fishlog.app.schemas.weather import WeatherSnapshot

# Leading integer, the way a form's number field gets parsed
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_quantity(value: Any) -> int:
    """
    Turn whatever the form sent into a non-negative fish count.

    Floats truncate, strings use their leading integer ("3 fish" -> 3),
    anything else unparsable is 0, and negatives clamp to 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        count = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        count = int(match.group(1)) if match else 0
    else:
        return 0
    return max(count, 0)


def format_coordinate(value: float) -> str:
    """
    Render a coordinate the way JavaScript's Number toString does.

    1.0 -> "1", 44.5 -> "44.5", 0.00001 -> "0.00001", 1e-7 -> "1e-7".
    """
    value = float(value)
    if value == 0:
        return "0"
    if not math.isfinite(value):
        return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")

    # repr() already gives the shortest round-tripping digits, only the layout differs
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    point = len(digits) + exponent  # Position of the decimal point within the digits
    prefix = "-" if sign else ""

    if len(digits) <= point <= 21:
        return prefix + digits + "0" * (point - len(digits))
    if 0 < point <= 21:
        return prefix + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return prefix + "0." + "0" * -point + digits

    mantissa = digits if len(digits) == 1 else digits[0] + "." + digits[1:]
    return f"{prefix}{mantissa}e{point - 1:+d}"


def location_key(latitude: float, longitude: float) -> str:
    """Exact-match grouping key for a coordinate pair. No rounding, no tolerance."""
    return f"{format_coordinate(latitude)},{format_coordinate(longitude)}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_entry_id() -> str:
    return uuid.uuid4().hex


class _TripFields(BaseModel):
    """Fields an angler fills in on the trip form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    latitude: float = Field(allow_inf_nan=False)
    longitude: float = Field(allow_inf_nan=False)
    location_name: str = ""
    date: str = Field(..., min_length=1)  # YYYY-MM-DD, no time component
    species: str = ""
    quantity: int = 0
    notes: str = ""

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value):
        return coerce_quantity(value)

    @field_validator("location_name", "species", "notes", mode="before")
    @classmethod
    def _blank_text(cls, value):
        return "" if value is None else value

    @field_validator("date", mode="before")
    @classmethod
    def _date_string(cls, value):
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date_type):
            return value.isoformat()
        return value

    @property
    def location_key(self) -> str:
        return location_key(self.latitude, self.longitude)


class TripSubmission(_TripFields):
    """A submitted trip form, before weather and identity are attached."""


class TripForm(_TripFields):
    """Pre-filled form state handed out when a coordinate is selected or an entry is edited."""

    entry_id: str | None = None  # Set when editing an existing entry

    @property
    def is_edit(self) -> bool:
        return self.entry_id is not None


class FishingEntry(_TripFields):
    """One logged fishing trip. The only persisted entity."""

    id: str = Field(default_factory=new_entry_id, min_length=1)
    weather: WeatherSnapshot | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_record(self) -> dict:
        """JSON-ready dict with camelCase keys, the stored and exported shape."""
        return self.model_dump(mode="json", by_alias=True)


class EntryPatch(BaseModel):
    """Partial update: only the fields that were sent get replaced."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    latitude: float | None = Field(None, allow_inf_nan=False)
    longitude: float | None = Field(None, allow_inf_nan=False)
    location_name: str | None = None
    date: str | None = None
    species: str | None = None
    quantity: Any = None
    notes: str | None = None
    weather: WeatherSnapshot | None = None
