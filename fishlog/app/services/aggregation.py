# fishlog/app/services/aggregation.py
"""
Location grouping and trip statistics.

Everything here is a pure function of the entries passed in. Ties are always
won by whichever group or species was seen first in storage order.
"""
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from fishlog.app.core.numbers import round_half_away
from fishlog.app.schemas.entry import FishingEntry
from fishlog.app.schemas.stats import LocationStats, LocationSummary, LogSummary

UNNAMED_LOCATION = "Unnamed Location"

Groups = Mapping[str, Sequence[FishingEntry]]


def is_successful(entry: FishingEntry) -> bool:
    return entry.quantity > 0


def stats_for_location(entries: Sequence[FishingEntry]) -> LocationStats:
    total_trips = len(entries)
    successful_trips = sum(1 for entry in entries if is_successful(entry))
    return LocationStats(
        total_trips=total_trips,
        total_fish=sum(entry.quantity for entry in entries),
        successful_trips=successful_trips,
        success_rate=_percent(successful_trips, total_trips),
    )


def group_by_location(entries: Iterable[FishingEntry]) -> dict[str, list[FishingEntry]]:
    """Entries keyed by exact coordinate pair, groups and members in storage order."""
    groups: dict[str, list[FishingEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.location_key, []).append(entry)
    return groups


def most_fished(groups: Groups) -> tuple[str, Sequence[FishingEntry]] | None:
    """The group with the most trips."""
    best = None
    for key, entries in groups.items():
        # Strictly greater, so the first group seen keeps a tie
        if best is None or len(entries) > len(best[1]):
            best = (key, entries)
    return best


def most_successful(groups: Groups) -> tuple[str, Sequence[FishingEntry]] | None:
    """The group with the best success rate, ignoring empty groups."""
    best = None
    best_rate = -1.0
    for key, entries in groups.items():
        if not entries:
            continue
        rate = sum(1 for entry in entries if is_successful(entry)) / len(entries) * 100
        if rate > best_rate:
            best, best_rate = (key, entries), rate
    return best


def favorite_species(entries: Iterable[FishingEntry]) -> str | None:
    """Most frequently logged species string. Blank species are ignored."""
    counts = Counter(entry.species for entry in entries if entry.species)
    if not counts:
        return None
    # Counter keeps first-seen order and max() returns the first of equals
    return max(counts, key=counts.get)


def location_display_name(entries: Sequence[FishingEntry]) -> str:
    if entries and entries[0].location_name:
        return entries[0].location_name
    return UNNAMED_LOCATION


def summarize_locations(entries: Iterable[FishingEntry], preview: int = 3) -> list[LocationSummary]:
    """One marker payload per location: position, name, stats and a short entry preview."""
    summaries = []
    for key, group in group_by_location(entries).items():
        first = group[0]
        summaries.append(
            LocationSummary(
                key=key,
                latitude=first.latitude,
                longitude=first.longitude,
                name=location_display_name(group),
                stats=stats_for_location(group),
                preview=group[:preview],
                more_entries=max(len(group) - preview, 0),
            )
        )
    return summaries


def summarize_log(entries: Sequence[FishingEntry]) -> LogSummary:
    overall = stats_for_location(entries)
    groups = group_by_location(entries)
    fished = most_fished(groups)
    successful = most_successful(groups)
    return LogSummary(
        total_trips=overall.total_trips,
        total_fish=overall.total_fish,
        successful_trips=overall.successful_trips,
        success_rate=overall.success_rate,
        location_count=len(groups),
        most_fished=location_display_name(fished[1]) if fished else None,
        most_successful=location_display_name(successful[1]) if successful else None,
        favorite_species=favorite_species(entries),
    )


def recent_entries(entries: Sequence[FishingEntry], limit: int = 5) -> list[FishingEntry]:
    """The last `limit` entries stored, newest first."""
    if limit <= 0:
        return []
    return list(reversed(entries[-limit:]))


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return int(round_half_away(part / whole * 100))
