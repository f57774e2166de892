# fishlog/app/core/errors.py


class FishLogError(Exception):
    """Base class for errors raised by the entry data engine."""


class EntryValidationError(FishLogError):
    """A field with no sensible default (latitude, longitude) could not be parsed."""


class DuplicateEntryError(FishLogError):
    """An entry with the same id is already stored."""

    def __init__(self, entry_id: str):
        super().__init__(f"Entry '{entry_id}' already exists")
        self.entry_id = entry_id


class PersistenceError(FishLogError):
    """The key-value store refused or failed a write. Prior state is intact."""


class MalformedImport(FishLogError):
    """An import payload was not a JSON array of entry records."""


class WeatherUnavailable(FishLogError):
    """Archive weather could not be fetched. Never escapes the weather collector."""
