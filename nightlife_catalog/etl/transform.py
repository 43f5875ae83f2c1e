"""Adapters turning SerpAPI Google Maps payloads into RawResult records."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from nightlife_catalog.etl.normalize import safe_float, safe_int, strip_or_none
from nightlife_catalog.models import Coordinates, RawResult

logger = logging.getLogger(__name__)

_NESTED_LIST_KEYS = ("places", "results", "local_results")
_DETAILS_KEYS = ("place_results", "place", "local_result", "result")


def parse_search_payload(data: Optional[Dict[str, Any]]) -> List[RawResult]:
    """Extract place records from any of the search envelope shapes SerpAPI has used."""
    if not data or not isinstance(data, dict):
        return []

    items = _extract_items(data)
    if not items:
        logger.debug("Search payload has no recognizable result list. keys=%s", list(data.keys())[:10])
        return []

    return [to_raw_result(raw) for raw in items if isinstance(raw, dict)]


def parse_details_payload(data: Optional[Dict[str, Any]]) -> Optional[RawResult]:
    """Pick the single place record out of a details response."""
    if not data or not isinstance(data, dict):
        return None

    for key in _DETAILS_KEYS:
        candidate = data.get(key)
        if isinstance(candidate, dict):
            return to_raw_result(candidate)
    return to_raw_result(data)


def _extract_items(data: Dict[str, Any]) -> Iterable[Any]:
    """SerpAPI sometimes returns local_results as a list or nested dict."""
    local_results = data.get("local_results")
    if isinstance(local_results, list):
        return local_results
    if isinstance(local_results, dict):
        logger.debug("local_results is dict with keys: %s", list(local_results.keys())[:10])
        for key in _NESTED_LIST_KEYS:
            maybe = local_results.get(key)
            if isinstance(maybe, list):
                return maybe

    for key in ("places", "results"):
        maybe = data.get(key)
        if isinstance(maybe, list):
            return maybe

    place_results = data.get("place_results")
    if isinstance(place_results, dict):
        return [place_results]
    return []


def to_raw_result(raw: Dict[str, Any]) -> RawResult:
    review_count = None
    for key in ("reviews", "reviews_count", "user_ratings_total"):
        review_count = safe_int(raw.get(key))
        if review_count is not None:
            break

    return RawResult(
        name=strip_or_none(raw.get("title") or raw.get("name")),
        rating=safe_float(raw.get("rating")),
        review_count=review_count,
        operating_hours=parse_operating_hours(raw),
        coordinates=parse_coordinates(raw),
        address=strip_or_none(raw.get("address")),
        place_id=strip_or_none(raw.get("place_id")),
        raw_snapshot=raw,
    )


def parse_coordinates(raw: Dict[str, Any]) -> Optional[Coordinates]:
    gps = raw.get("gps_coordinates")
    if isinstance(gps, dict):
        latitude = safe_float(gps.get("latitude"))
        longitude = safe_float(gps.get("longitude"))
    else:
        latitude = safe_float(raw.get("lat"))
        longitude = safe_float(raw.get("lng"))

    if latitude is None or longitude is None:
        return None
    return Coordinates(latitude=latitude, longitude=longitude)


def parse_operating_hours(raw: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """Weekday -> hours text.

    ``operating_hours`` is usually a flat dict; details responses may instead
    carry ``hours`` as a list of single-key dicts, which gets flattened.
    """
    for key in ("operating_hours", "opening_hours", "hours"):
        value = raw.get(key)
        hours = _coerce_hours(value)
        if hours:
            return hours
    return None


def _coerce_hours(value: Any) -> Optional[Dict[str, str]]:
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        return None

    hours: Dict[str, str] = {}
    for item in value:
        if not isinstance(item, dict):
            continue
        for day, text in item.items():
            if isinstance(text, str):
                hours[str(day).strip().lower()] = text.strip()
    return hours or None
