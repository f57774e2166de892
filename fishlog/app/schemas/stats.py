# fishlog/app/schemas/stats.py
from pydantic import BaseModel

from fishlog.app.schemas.entry import FishingEntry


class LocationStats(BaseModel):
    total_trips: int = 0
    total_fish: int = 0
    successful_trips: int = 0
    success_rate: int = 0  # Whole percent


class LocationSummary(BaseModel):
    """What the map needs for one marker: where it goes and what its popup shows."""

    key: str
    latitude: float
    longitude: float
    name: str
    stats: LocationStats
    preview: list[FishingEntry]  # First few entries at this spot
    more_entries: int = 0  # How many entries the preview leaves out


class LogSummary(BaseModel):
    """Numbers for the statistics page."""

    total_trips: int = 0
    total_fish: int = 0
    successful_trips: int = 0
    success_rate: int = 0
    location_count: int = 0
    most_fished: str | None = None
    most_successful: str | None = None
    favorite_species: str | None = None


class LocationMarker(LocationSummary):
    highlighted: bool = True  # False when the current filters leave nothing at this spot


class LocationDetail(BaseModel):
    """Everything logged at one spot, newest trip first."""

    key: str
    name: str
    stats: LocationStats
    entries: list[FishingEntry]
