# fishlog/app/api/entries.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool

from fishlog.app.schemas.entry import EntryPatch, FishingEntry, TripSubmission, location_key
from fishlog.app.schemas.stats import LocationDetail, LocationMarker, LogSummary
from fishlog.app.services import aggregation, filters
from fishlog.app.services.entry_repository import EntryRepository, export_filename
from fishlog.app.services.storage.kv_store import KeyValueStore
from fishlog.app.services.trip_log import WeatherFetcher, log_trip, refresh_weather
from fishlog.app.services.weather.weather_collector import fetch_weather

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Fishing Log"])


# Dependencies, overridden in tests
def get_repository() -> EntryRepository:
    return EntryRepository(KeyValueStore())


def get_weather_fetcher() -> WeatherFetcher:
    return fetch_weather


def get_criteria(
    search: str | None = None,
    species: list[str] = Query(default=[]),
    date: str | None = None,
) -> filters.FilterCriteria:
    return filters.FilterCriteria(search_text=search, species_selection=species, exact_date=date)


def _get_or_404(repository: EntryRepository, entry_id: str) -> FishingEntry:
    entry = repository.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No entry with id {entry_id}")
    return entry


# --- Entries ---

@router.get("/entries", response_model=list[FishingEntry])
def list_entries(criteria: filters.FilterCriteria = Depends(get_criteria),
                 repository: EntryRepository = Depends(get_repository)):
    """Filtered history, newest trip date first."""
    return filters.sort_by_date_desc(filters.apply_filters(repository.list_entries(), criteria))


@router.get("/entries/recent", response_model=list[FishingEntry])
def list_recent_entries(limit: int = Query(5, ge=0, le=100),
                        repository: EntryRepository = Depends(get_repository)):
    return aggregation.recent_entries(repository.list_entries(), limit)


@router.get("/entries/{entry_id}", response_model=FishingEntry)
def get_entry(entry_id: str, repository: EntryRepository = Depends(get_repository)):
    return _get_or_404(repository, entry_id)


@router.post("/entries", response_model=FishingEntry, status_code=status.HTTP_201_CREATED)
def create_entry(submission: TripSubmission, with_weather: bool = True,
                 repository: EntryRepository = Depends(get_repository),
                 weather_fetcher: WeatherFetcher = Depends(get_weather_fetcher)):
    return log_trip(repository, submission, weather_fetcher=weather_fetcher, with_weather=with_weather)


@router.put("/entries/{entry_id}", response_model=FishingEntry)
def replace_entry(entry_id: str, submission: TripSubmission, with_weather: bool = True,
                  repository: EntryRepository = Depends(get_repository),
                  weather_fetcher: WeatherFetcher = Depends(get_weather_fetcher)):
    editing = _get_or_404(repository, entry_id)
    return log_trip(repository, submission, editing=editing, weather_fetcher=weather_fetcher,
                    with_weather=with_weather)


@router.patch("/entries/{entry_id}", response_model=FishingEntry)
def patch_entry(entry_id: str, patch: EntryPatch, repository: EntryRepository = Depends(get_repository)):
    if not repository.update(entry_id, patch):
        raise HTTPException(status_code=404, detail=f"No entry with id {entry_id}")
    return repository.get(entry_id)


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(entry_id: str, repository: EntryRepository = Depends(get_repository)):
    repository.delete(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/entries/{entry_id}/weather", response_model=FishingEntry)
def refetch_entry_weather(entry_id: str, repository: EntryRepository = Depends(get_repository),
                          weather_fetcher: WeatherFetcher = Depends(get_weather_fetcher)):
    entry = refresh_weather(repository, entry_id, weather_fetcher=weather_fetcher)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No entry with id {entry_id}")
    return entry


@router.get("/species", response_model=list[str])
def list_species(repository: EntryRepository = Depends(get_repository)):
    return filters.distinct_species(repository.list_entries())


# --- Locations & statistics ---

@router.get("/locations", response_model=list[LocationMarker])
def list_locations(criteria: filters.FilterCriteria = Depends(get_criteria),
                   repository: EntryRepository = Depends(get_repository)):
    """One marker per spot. Markers with nothing left after filtering are not highlighted."""
    entries = repository.list_entries()
    visible = filters.matching_location_keys(filters.apply_filters(entries, criteria))
    return [
        LocationMarker(**summary.model_dump(), highlighted=summary.key in visible)
        for summary in aggregation.summarize_locations(entries)
    ]


@router.get("/locations/detail", response_model=LocationDetail)
def get_location_detail(latitude: float, longitude: float,
                        repository: EntryRepository = Depends(get_repository)):
    entries = repository.find_by_location(latitude, longitude)
    if not entries:
        raise HTTPException(status_code=404, detail="No entries at this location")
    return LocationDetail(
        key=location_key(latitude, longitude),
        name=aggregation.location_display_name(entries),
        stats=aggregation.stats_for_location(entries),
        entries=filters.sort_by_date_desc(entries),
    )


@router.get("/stats", response_model=LogSummary)
def get_stats(repository: EntryRepository = Depends(get_repository)):
    return aggregation.summarize_log(repository.list_entries())


# --- Import / export ---

@router.get("/export")
def export_entries(repository: EntryRepository = Depends(get_repository)):
    return Response(
        content=repository.export_all(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/import")
async def import_entries(request: Request, repository: EntryRepository = Depends(get_repository)):
    """Replace the whole log with an exported file sent as the request body."""
    # Raw body, so a malformed file reaches import_all instead of FastAPI's JSON parser
    entries = await run_in_threadpool(repository.import_all, await request.body())
    return {"imported": len(entries)}
