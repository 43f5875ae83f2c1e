"""Core data models shared by the nightlife catalog pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Category(str, Enum):
    """Venue category; the value is what the map layer expects in the snapshot."""

    BAR = "bar"
    PUB = "pub"
    NIGHT_CLUB = "klub_nocny"


@dataclass(frozen=True)
class PhraseQuery:
    text: str
    category: Category


@dataclass(frozen=True)
class GridAnchor:
    """Search viewpoint rendered as SerpAPI's ``ll`` parameter."""

    latitude: float
    longitude: float
    zoom: int = 15

    def to_ll(self) -> str:
        return f"@{self.latitude:.4f},{self.longitude:.4f},{self.zoom}z"

    @classmethod
    def from_ll(cls, value: str) -> "GridAnchor":
        """Parse ``'@50.0647,19.9450,15z'`` back into an anchor."""
        text = (value or "").strip().lstrip("@")
        parts = [part.strip() for part in text.split(",")]
        if len(parts) != 3:
            raise ValueError(f"Grid anchor must look like '@lat,lng,zoomz', got {value!r}")
        latitude, longitude, zoom = parts
        return cls(float(latitude), float(longitude), int(zoom.rstrip("zZ")))


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(slots=True)
class RawResult:
    """Normalized snapshot of one place record returned by SerpAPI Google Maps."""

    name: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    operating_hours: Optional[Dict[str, str]] = None
    coordinates: Optional[Coordinates] = None
    address: Optional[str] = None
    place_id: Optional[str] = None
    raw_snapshot: Optional[Dict[str, Any]] = field(default=None, repr=False)


@dataclass(slots=True)
class CatalogEntry:
    """Canonical venue record; mutated in place while a run merges results into it."""

    category: Category
    name: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    operating_hours: Optional[Dict[str, str]] = None
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    place_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot representation; unknown fields are left out."""
        item: Dict[str, Any] = {}
        if self.name is not None:
            item["name"] = self.name
        if self.rating is not None:
            item["rating"] = self.rating
        if self.review_count is not None:
            item["reviews"] = self.review_count
        if self.operating_hours is not None:
            item["operating_hours"] = dict(self.operating_hours)
        if self.coordinates is not None:
            item["gps_coordinates"] = {
                "latitude": self.coordinates.latitude,
                "longitude": self.coordinates.longitude,
            }
        if self.address is not None:
            item["address"] = self.address
        item["category"] = self.category.value
        if self.place_id is not None:
            item["place_id"] = self.place_id
        return item


@dataclass(frozen=True)
class Success:
    """Outbound call that returned a usable payload."""

    records: List[RawResult]
    ok = True


@dataclass(frozen=True)
class Failure:
    """Outbound call that failed; callers treat it as an empty result."""

    reason: str
    ok = False

    @property
    def records(self) -> List[RawResult]:
        return []


Outcome = Union[Success, Failure]
