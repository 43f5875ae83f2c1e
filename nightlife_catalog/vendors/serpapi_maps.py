"""SerpAPI Google Maps client used by the snapshot job.

Both calls are fail-soft: a transport error, a non-success response or an
unusable payload comes back as a ``Failure`` instead of raising, so a single
bad request never stops the grid sweep. There are no retries; SerpAPI bills
per request and the run is meant to have a predictable call count.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import requests
from serpapi import GoogleSearch

from nightlife_catalog.etl.transform import parse_details_payload, parse_search_payload
from nightlife_catalog.models import Failure, GridAnchor, Outcome, Success

logger = logging.getLogger(__name__)


class SerpApiError(RuntimeError):
    """Raised when SerpAPI answers with an error payload."""


def build_search_params(query: str, anchor: Optional[GridAnchor], api_key: str) -> Dict[str, Any]:
    """Construct SerpAPI request parameters for a Google Maps text search."""
    if not query or not query.strip():
        raise ValueError("Query must be provided for SerpAPI lookups.")

    params: Dict[str, Any] = {
        "engine": "google_maps",
        "type": "search",
        "q": query.strip(),
        "api_key": api_key,
    }
    if anchor is not None:
        params["ll"] = anchor.to_ll()
    return params


def build_details_params(place_id: str, api_key: str) -> Dict[str, Any]:
    if not place_id or not place_id.strip():
        raise ValueError("place_id must be provided for SerpAPI details lookups.")
    return {
        "engine": "google_maps",
        "place_id": place_id.strip(),
        "api_key": api_key,
    }


class SerpApiMapsClient:
    """Search and details calls against the SerpAPI ``google_maps`` engine."""

    def __init__(self, api_key: str, timeout: float = 30.0) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self.api_key = api_key
        self.timeout = timeout

    def search(self, query: str, anchor: Optional[GridAnchor] = None) -> Outcome:
        """Text search around ``anchor``; a Failure means zero places for this pair."""
        params = build_search_params(query, anchor, self.api_key)
        data = self._fetch(params, f"search query={query} ll={params.get('ll')}")
        if isinstance(data, Failure):
            return data
        return Success(records=parse_search_payload(data))

    def details(self, place_id: str) -> Outcome:
        """Lookup by place id; a Success always carries exactly one record."""
        params = build_details_params(place_id, self.api_key)
        data = self._fetch(params, f"details place_id={place_id}")
        if isinstance(data, Failure):
            return data

        record = parse_details_payload(data)
        if record is None:
            return Failure(reason="details payload held no place record")
        return Success(records=[record])

    def _fetch(self, params: Dict[str, Any], label: str) -> Union[Dict[str, Any], Failure]:
        try:
            return self._get_dict(params)
        except requests.RequestException as exc:
            status = getattr(exc.response, "status_code", None)
            logger.warning("SerpAPI %s failed (http status=%s): %s", label, status, exc)
            return Failure(reason=f"transport error (status={status}): {exc}")
        except Exception as exc:  # noqa: BLE001
            logger.warning("SerpAPI %s failed: %s", label, exc)
            return Failure(reason=str(exc) or exc.__class__.__name__)

    def _get_dict(self, params: Dict[str, Any]) -> Dict[str, Any]:
        search = GoogleSearch(params)
        search.timeout = self.timeout
        data = search.get_dict()
        if not data:
            raise SerpApiError("SerpAPI returned an empty payload.")
        if "error" in data:
            raise SerpApiError(f"SerpAPI returned an error response: {data.get('error') or data}")
        return data
