# fishlog/app/services/filters.py
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field, field_validator

from fishlog.app.schemas.entry import FishingEntry


class FilterCriteria(BaseModel):
    """History page filters. Anything left empty does not constrain the result."""

    search_text: str | None = None
    species_selection: list[str] = Field(default_factory=list)
    exact_date: str | None = None

    @field_validator("species_selection", mode="before")
    @classmethod
    def _species_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return list(value)

    @property
    def is_empty(self) -> bool:
        return not self.search_text and not self.species_selection and not self.exact_date


def matches_search(entry: FishingEntry, term: str) -> bool:
    term = term.lower()
    return (
        term in entry.location_name.lower()
        or term in entry.species.lower()
        or term in entry.notes.lower()
    )


def matches_species(entry: FishingEntry, selection: Iterable[str]) -> bool:
    """
    Loose match: the entry's species equals, contains or is contained by a selected name.

    "bass" matches "Largemouth Bass", and "largemouth bass" matches "bass".
    An entry with no species is contained by every name and always matches.
    """
    species = entry.species.strip().lower()
    for selected in selection:
        selected = selected.strip().lower()
        if species == selected or selected in species or species in selected:
            return True
    return False


def matches(entry: FishingEntry, criteria: FilterCriteria) -> bool:
    if criteria.search_text and not matches_search(entry, criteria.search_text):
        return False
    if criteria.species_selection and not matches_species(entry, criteria.species_selection):
        return False
    if criteria.exact_date and entry.date != criteria.exact_date:
        return False
    return True


def apply_filters(entries: Iterable[FishingEntry], criteria: FilterCriteria | None = None) -> list[FishingEntry]:
    """Entries passing every criterion, in their original order."""
    if criteria is None or criteria.is_empty:
        return list(entries)
    return [entry for entry in entries if matches(entry, criteria)]


def sort_by_date_desc(entries: Iterable[FishingEntry]) -> list[FishingEntry]:
    """Display order for history lists: newest trip date first, stable for equal dates."""
    return sorted(entries, key=lambda entry: entry.date, reverse=True)


def matching_location_keys(entries: Iterable[FishingEntry]) -> set[str]:
    """Location keys that still have at least one entry after filtering."""
    return {entry.location_key for entry in entries}


def distinct_species(entries: Sequence[FishingEntry]) -> list[str]:
    """Species names for the filter list, first-seen order, blanks dropped."""
    seen = {}
    for entry in entries:
        name = entry.species.strip()
        if name and name.lower() not in seen:
            seen[name.lower()] = name
    return list(seen.values())
