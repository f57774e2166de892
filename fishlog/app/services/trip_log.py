# fishlog/app/services/trip_log.py
"""
Logging a trip: opening the form for a picked coordinate, then saving it.

The entry being edited is always passed in explicitly; nothing here keeps
track of "the current entry" between calls.
"""
import logging
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

import pytz
from pydantic import ValidationError

from fishlog.app.core.config import TIMEZONE
from fishlog.app.core.errors import EntryValidationError
from fishlog.app.schemas.entry import FishingEntry, TripForm, TripSubmission
from fishlog.app.schemas.weather import WeatherSnapshot
from fishlog.app.services.entry_repository import EntryRepository
from fishlog.app.services.weather.weather_collector import fetch_weather

logger = logging.getLogger(__name__)

WeatherFetcher = Callable[[float, float, str], WeatherSnapshot | None]


def local_today() -> date:
    """Today's date where the angler is (FISHLOG_TIMEZONE)."""
    return datetime.now(pytz.timezone(TIMEZONE)).date()


def open_trip_form(latitude: float, longitude: float, entry: FishingEntry | None = None,
                   today: date | None = None) -> TripForm:
    """
    Form state for a selected coordinate.

    A new trip starts blank, dated today. Editing pre-fills everything from
    `entry` but keeps the coordinate that was passed in.
    """
    if entry is None:
        return TripForm(latitude=latitude, longitude=longitude, date=(today or local_today()).isoformat())

    return TripForm(
        latitude=latitude,
        longitude=longitude,
        location_name=entry.location_name,
        date=entry.date,
        species=entry.species,
        quantity=entry.quantity,
        notes=entry.notes,
        entry_id=entry.id,
    )


def parse_submission(data: Mapping[str, Any] | TripSubmission) -> TripSubmission:
    if isinstance(data, TripSubmission):
        return data
    try:
        return TripSubmission.model_validate(data)
    except ValidationError as e:
        raise EntryValidationError(f"Invalid trip submission: {e}") from e


def log_trip(repository: EntryRepository, submission: Mapping[str, Any] | TripSubmission,
             editing: FishingEntry | None = None, weather_fetcher: WeatherFetcher = fetch_weather,
             with_weather: bool = True) -> FishingEntry:
    """
    Save a submitted trip, creating a new entry or replacing `editing`.

    Weather is looked up first and is allowed to fail: the trip is then saved
    with weather=None. PersistenceError from the store propagates.
    """
    trip = parse_submission(submission)

    weather = None
    if with_weather:
        weather = weather_fetcher(trip.latitude, trip.longitude, trip.date)

    fields = trip.model_dump()
    if editing is None:
        entry = repository.create(FishingEntry(**fields, weather=weather))
        logger.info("Logged new trip %s on %s (weather: %s)", entry.id, entry.date, "yes" if weather else "no")
        return entry

    if not repository.update(editing.id, {**fields, "weather": weather}):
        # Deleted while the form was open, save it as a fresh entry under the same id
        logger.warning("Entry %s vanished while being edited, saving it again", editing.id)
        return repository.create(FishingEntry(**fields, id=editing.id, weather=weather, created_at=editing.created_at))
    return repository.get(editing.id)


def refresh_weather(repository: EntryRepository, entry_id: str,
                    weather_fetcher: WeatherFetcher = fetch_weather) -> FishingEntry | None:
    """Fetch weather again for a stored entry. Returns None when the id is unknown."""
    entry = repository.get(entry_id)
    if entry is None:
        return None

    weather = weather_fetcher(entry.latitude, entry.longitude, entry.date)
    if weather is None:
        logger.info("Weather still unavailable for entry %s, keeping what it had", entry_id)
        return entry

    repository.update(entry_id, {"weather": weather})
    return repository.get(entry_id)
