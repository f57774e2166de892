# fishlog/app/services/entry_repository.py
import json
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, ValidationError

from fishlog.app.core.config import STORAGE_KEY
from fishlog.app.core.errors import DuplicateEntryError, EntryValidationError, MalformedImport
from fishlog.app.schemas.entry import FishingEntry, location_key, utc_now
from fishlog.app.services.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

# Fields an update may never touch
_IMMUTABLE_FIELDS = ("id", "created_at")


def export_filename(on: date | None = None) -> str:
    """Download name for an export, stamped with the export date."""
    return f"fishing-log-{(on or date.today()).isoformat()}.json"


class EntryRepository:
    """
    CRUD plus import/export over the whole entry collection.

    The collection is one JSON array stored under a single key. Every write
    serializes the complete new collection and hands it to the store in one
    call, so a failed write (PersistenceError) leaves the old collection as it was.
    """

    def __init__(self, store: KeyValueStore, storage_key: str = STORAGE_KEY):
        self.store = store
        self.storage_key = storage_key

    # --- Reads ---

    def list_entries(self) -> list[FishingEntry]:
        """All entries in the order they were stored."""
        entries = []
        for record in self._load_records():
            entry = _parse_record(record)
            if entry is not None:
                entries.append(entry)
        return entries

    def get(self, entry_id: str) -> FishingEntry | None:
        return next((entry for entry in self.list_entries() if entry.id == entry_id), None)

    def find_by_location(self, latitude: float, longitude: float) -> list[FishingEntry]:
        """Entries logged at exactly this coordinate pair."""
        key = location_key(latitude, longitude)
        return [entry for entry in self.list_entries() if entry.location_key == key]

    # --- Writes ---
    # Writes work on the raw stored records so ones this version cannot read
    # are carried over untouched.

    def create(self, entry: FishingEntry) -> FishingEntry:
        records = self._load_records()
        if any(_record_id(record) == entry.id for record in records):
            raise DuplicateEntryError(entry.id)

        entry = entry.model_copy(update={"updated_at": utc_now()})
        records.append(entry.to_record())
        self._write(records)
        logger.info("Created entry %s at %s", entry.id, entry.location_key)
        return entry

    def update(self, entry_id: str, patch: Mapping[str, Any] | BaseModel) -> bool:
        """
        Replace the patched fields of one entry. Returns False if no entry has that id.

        Field names may be snake_case or camelCase. id and created_at are ignored.
        """
        records = self._load_records()
        for index, record in enumerate(records):
            if _record_id(record) != entry_id:
                continue
            existing = _parse_record(record)
            if existing is not None:
                break
        else:
            logger.info("Update skipped, no entry with id %s", entry_id)
            return False

        merged = existing.model_dump()
        merged.update(_normalize_patch(patch))
        merged["id"] = existing.id
        merged["created_at"] = existing.created_at
        merged["updated_at"] = utc_now()

        try:
            records[index] = FishingEntry.model_validate(merged).to_record()
        except ValidationError as e:
            raise EntryValidationError(f"Invalid update for entry {entry_id}: {e}") from e
        self._write(records)
        logger.info("Updated entry %s", entry_id)
        return True

    def delete(self, entry_id: str) -> None:
        """Remove one entry. Unknown ids are a no-op."""
        records = self._load_records()
        remaining = [record for record in records if _record_id(record) != entry_id]
        if len(remaining) == len(records):
            return
        self._write(remaining)
        logger.info("Deleted entry %s", entry_id)

    # --- Import / export ---

    def export_all(self) -> bytes:
        """The whole collection as pretty-printed UTF-8 JSON."""
        records = [entry.to_record() for entry in self.list_entries()]
        return json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")

    def import_all(self, payload: bytes | str) -> list[FishingEntry]:
        """
        Replace the whole collection with the entries in `payload`.

        All or nothing: anything that is not a JSON array of valid entries
        with distinct ids raises MalformedImport and the store is not touched.
        """
        try:
            text = payload.decode("utf-8") if isinstance(payload, (bytes, bytearray)) else payload
            records = json.loads(text)
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedImport(f"Import file is not valid JSON: {e}") from e

        if not isinstance(records, list):
            raise MalformedImport("Invalid file format: expected a list of entries")

        entries = []
        for position, record in enumerate(records):
            try:
                entries.append(FishingEntry.model_validate(record))
            except ValidationError as e:
                raise MalformedImport(f"Entry #{position} is not a valid fishing entry: {e}") from e

        ids = [entry.id for entry in entries]
        if len(set(ids)) != len(ids):
            raise MalformedImport("Import file contains duplicate entry ids")

        self._write([entry.to_record() for entry in entries])
        logger.info("Imported %d entries, replacing the previous collection", len(entries))
        return entries

    def _load_records(self) -> list:
        """The stored JSON array as-is. Unusable blobs read as empty."""
        raw = self.store.get(self.storage_key)
        if raw is None:
            return []

        try:
            records = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            logger.error("Stored entries under '%s' are not valid JSON: %s", self.storage_key, e)
            return []

        if not isinstance(records, list):
            logger.error("Stored entries under '%s' are not a list, ignoring them", self.storage_key)
            return []
        return records

    def _write(self, records: list) -> None:
        blob = json.dumps(records, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        self.store.set(self.storage_key, blob)


def _normalize_patch(patch: Mapping[str, Any] | BaseModel) -> dict:
    if isinstance(patch, FishingEntry):
        values = patch.model_dump()
    elif isinstance(patch, BaseModel):
        values = patch.model_dump(exclude_unset=True)
    else:
        values = dict(patch)

    # Accept camelCase keys as sent by the browser app
    aliases = {field.alias: name for name, field in FishingEntry.model_fields.items() if field.alias}
    normalized = {aliases.get(key, key): value for key, value in values.items()}
    for field in _IMMUTABLE_FIELDS:
        normalized.pop(field, None)
    # Derived, never stored
    normalized.pop("location_key", None)
    return normalized


def _record_id(record: Any) -> Any:
    return record.get("id") if isinstance(record, Mapping) else None


def _parse_record(record: Any) -> FishingEntry | None:
    try:
        return FishingEntry.model_validate(record)
    except ValidationError as e:
        logger.warning("Skipping unreadable stored entry %r: %s", _record_id(record), e)
        return None
