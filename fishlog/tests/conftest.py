# fishlog/tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fishlog.app.db.session import init_db
from fishlog.app.schemas.entry import FishingEntry
from fishlog.app.services.entry_repository import EntryRepository
from fishlog.app.services.storage.kv_store import KeyValueStore


# In-memory SQLite shared across threads, so the FastAPI TestClient sees the same data
@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return KeyValueStore(session_factory, quota_bytes=None)


@pytest.fixture
def repository(store):
    return EntryRepository(store, storage_key="test-entries")


@pytest.fixture
def make_entry():
    def _make(**overrides):
        fields = {
            "latitude": 44.5,
            "longitude": -93.25,
            "location_name": "Cedar Lake",
            "date": "2024-06-01",
            "species": "Walleye",
            "quantity": 2,
        }
        fields.update(overrides)
        return FishingEntry(**fields)
    return _make


# A trimmed Open-Meteo archive response for one day
@pytest.fixture
def archive_response():
    return {
        "latitude": 44.5,
        "longitude": -93.25,
        "timezone": "America/Chicago",
        "daily": {
            "time": ["2024-06-01"],
            "temperature_2m_max": [18.4],
            "temperature_2m_min": [9.1],
            "weathercode": [3],
            "precipitation_sum": [None],
            "windspeed_10m_max": [14.2],
            "winddirection_10m_dominant": [225],
        },
        "hourly": {
            "time": ["2024-06-01T00:00", "2024-06-01T01:00", "2024-06-01T02:00", "2024-06-01T03:00"],
            "temperature_2m": [10.0, 12.0, 15.0, None],
            "relativehumidity_2m": [80, 70, 60, 70],
            "pressure_msl": [1012.0, 1013.5, 1012.0, 1013.5],
            "visibility": [24000, 24000, 24000, 24000],
            "uv_index": [0, 3.5, None, 5.25],
        },
    }
