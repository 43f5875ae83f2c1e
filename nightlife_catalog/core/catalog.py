"""Identity resolution and fill-if-missing merging of venue records.

Matching is greedy: an incoming record is compared with the accepted entries
in insertion order and merged into the first one that looks like the same
venue. Nothing is re-clustered afterwards, so the final catalog depends on
the order in which the query plan discovered the records.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from nightlife_catalog.etl.normalize import DEFAULT_COORD_EPSILON, near, normalize_name
from nightlife_catalog.models import CatalogEntry, Category, RawResult

logger = logging.getLogger(__name__)

Record = Union[RawResult, CatalogEntry]

MERGE_FIELDS = ("name", "rating", "review_count", "operating_hours", "address", "coordinates", "place_id")
ENRICHMENT_FIELDS = ("rating", "review_count", "operating_hours")


def is_same_venue(a: Record, b: Record, epsilon: float = DEFAULT_COORD_EPSILON) -> bool:
    """Same normalized non-empty name, or both located within ``epsilon`` degrees."""
    name_a = normalize_name(a.name)
    if name_a and name_a == normalize_name(b.name):
        return True
    if a.coordinates is not None and b.coordinates is not None:
        return near(a.coordinates, b.coordinates, epsilon)
    return False


def fill_missing(entry: CatalogEntry, record: Record, fields: Iterable[str] = MERGE_FIELDS) -> List[str]:
    """Copy ``fields`` that are unset on ``entry``; returns the names that were filled."""
    filled = []
    for field_name in fields:
        if getattr(entry, field_name) is not None:
            continue
        value = getattr(record, field_name)
        if value is None:
            continue
        setattr(entry, field_name, value)
        filled.append(field_name)
    return filled


class Catalog:
    """The run's accumulating, deduplicated list of venues."""

    def __init__(self, epsilon: float = DEFAULT_COORD_EPSILON) -> None:
        self.epsilon = epsilon
        self._entries: List[CatalogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def entries(self) -> List[CatalogEntry]:
        return list(self._entries)

    def find_match(self, record: Record) -> Optional[CatalogEntry]:
        for entry in self._entries:
            if is_same_venue(entry, record, self.epsilon):
                return entry
        return None

    def insert_or_merge(self, record: RawResult, category: Category) -> CatalogEntry:
        """Merge into the first matching entry or append a new one.

        ``category`` only applies to new entries; an existing entry keeps
        the category of the phrase that discovered it first.
        """
        match = self.find_match(record)
        if match is None:
            entry = CatalogEntry(
                category=category,
                name=record.name,
                rating=record.rating,
                review_count=record.review_count,
                operating_hours=record.operating_hours,
                address=record.address,
                coordinates=record.coordinates,
                place_id=record.place_id,
            )
            self._entries.append(entry)
            return entry

        filled = fill_missing(match, record)
        if filled:
            logger.debug("Merged %s into %r", ", ".join(filled), match.name)
        return match

    def insert_or_merge_many(self, records: Iterable[RawResult], category: Category) -> int:
        """Merge a batch in order; returns how many new entries were created."""
        before = len(self._entries)
        for record in records:
            self.insert_or_merge(record, category)
        return len(self._entries) - before

    def export(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]
