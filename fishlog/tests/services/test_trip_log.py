# fishlog/tests/services/test_trip_log.py
from datetime import date
from unittest.mock import MagicMock

import pytest

from fishlog.app.core.errors import EntryValidationError, PersistenceError
from fishlog.app.schemas.weather import Temperature, WeatherSnapshot, Wind
from fishlog.app.services.trip_log import local_today, log_trip, open_trip_form, refresh_weather


def _snapshot(trip_date="2024-06-01", condition="Overcast"):
    return WeatherSnapshot(
        date=trip_date,
        temperature=Temperature(high=18.4, low=9.1, average=13.0),
        condition=condition,
        weather_code=3,
        wind=Wind(speed=14.2, direction=225),
    )


@pytest.fixture
def weather_fetcher():
    return MagicMock(side_effect=lambda lat, lng, trip_date: _snapshot(trip_date))


@pytest.fixture
def submission():
    return {
        "latitude": "44.5",
        "longitude": "-93.25",
        "locationName": "Cedar Lake",
        "date": "2024-06-01",
        "species": "Walleye",
        "quantity": "3",
        "notes": "",
    }


def test_open_form_for_new_trip_defaults_to_today():
    form = open_trip_form(44.5, -93.25, today=date(2024, 6, 1))

    assert form.latitude == 44.5
    assert form.longitude == -93.25
    assert form.date == "2024-06-01"
    assert form.quantity == 0
    assert form.species == ""
    assert not form.is_edit


def test_open_form_uses_local_today_by_default():
    assert open_trip_form(1, 2).date == local_today().isoformat()


def test_open_form_for_edit_prefills_from_entry(make_entry):
    entry = make_entry(species="Pike", quantity=4, notes="weed edge")

    form = open_trip_form(entry.latitude, entry.longitude, entry=entry)

    assert form.is_edit
    assert form.entry_id == entry.id
    assert form.species == "Pike"
    assert form.quantity == 4
    assert form.notes == "weed edge"
    assert form.date == entry.date


def test_log_new_trip_with_weather(repository, submission, weather_fetcher):
    entry = log_trip(repository, submission, weather_fetcher=weather_fetcher)

    weather_fetcher.assert_called_once_with(44.5, -93.25, "2024-06-01")
    assert entry.quantity == 3
    assert entry.location_name == "Cedar Lake"
    assert entry.weather.condition == "Overcast"
    assert repository.list_entries() == [entry]


def test_log_trip_saves_without_weather_when_unavailable(repository, submission):
    entry = log_trip(repository, submission, weather_fetcher=lambda lat, lng, d: None)

    assert entry.weather is None
    assert repository.get(entry.id).weather is None


def test_log_trip_can_skip_weather(repository, submission, weather_fetcher):
    entry = log_trip(repository, submission, weather_fetcher=weather_fetcher, with_weather=False)

    weather_fetcher.assert_not_called()
    assert entry.weather is None


def test_unparsable_quantity_degrades_to_zero(repository, submission, weather_fetcher):
    submission["quantity"] = "lots"
    assert log_trip(repository, submission, weather_fetcher=weather_fetcher).quantity == 0


def test_bad_coordinates_are_rejected_before_fetching(repository, submission, weather_fetcher):
    submission["latitude"] = "here"

    with pytest.raises(EntryValidationError):
        log_trip(repository, submission, weather_fetcher=weather_fetcher)

    weather_fetcher.assert_not_called()
    assert repository.list_entries() == []


def test_edit_keeps_identity_and_refreshes_weather(repository, submission, weather_fetcher):
    original = log_trip(repository, submission, weather_fetcher=weather_fetcher)

    edited = dict(submission, date="2024-06-02", quantity=5)
    saved = log_trip(repository, edited, editing=original, weather_fetcher=weather_fetcher)

    assert saved.id == original.id
    assert saved.created_at == original.created_at
    assert saved.updated_at >= original.updated_at
    assert saved.quantity == 5
    assert saved.weather.date == "2024-06-02"
    assert len(repository.list_entries()) == 1


def test_edit_of_vanished_entry_saves_it_again(repository, submission, weather_fetcher):
    original = log_trip(repository, submission, weather_fetcher=weather_fetcher)
    repository.delete(original.id)

    saved = log_trip(repository, submission, editing=original, weather_fetcher=weather_fetcher)

    assert saved.id == original.id
    assert saved.created_at == original.created_at
    assert repository.list_entries() == [saved]


def test_store_failure_propagates(repository, store, submission, weather_fetcher):
    store.quota_bytes = 5

    with pytest.raises(PersistenceError):
        log_trip(repository, submission, weather_fetcher=weather_fetcher)


def test_refresh_weather_replaces_snapshot(repository, submission):
    entry = log_trip(repository, submission, with_weather=False)

    refreshed = refresh_weather(repository, entry.id, weather_fetcher=lambda lat, lng, d: _snapshot(d, "Foggy"))

    assert refreshed.weather.condition == "Foggy"
    assert repository.get(entry.id).weather.condition == "Foggy"


def test_refresh_weather_keeps_old_snapshot_when_unavailable(repository, submission, weather_fetcher):
    entry = log_trip(repository, submission, weather_fetcher=weather_fetcher)

    refreshed = refresh_weather(repository, entry.id, weather_fetcher=lambda lat, lng, d: None)

    assert refreshed.weather == entry.weather


def test_refresh_weather_unknown_entry(repository, weather_fetcher):
    assert refresh_weather(repository, "missing", weather_fetcher=weather_fetcher) is None
    weather_fetcher.assert_not_called()
