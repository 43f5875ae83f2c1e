import sys
from pathlib import Path

import pytest

# Ensure `nightlife_catalog` is importable when running pytest from the repository root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from nightlife_catalog.models import Failure, Success  # noqa: E402


class FakeMapsClient:
    """Stands in for SerpApiMapsClient; replies are keyed by query text or place id."""

    def __init__(self, searches=None, details=None):
        self.searches = searches or {}
        self.details_replies = details or {}
        self.search_calls = []
        self.details_calls = []

    def search(self, query, anchor=None):
        self.search_calls.append((query, anchor.to_ll() if anchor else None))
        reply = self.searches.get(query, [])
        if isinstance(reply, Failure):
            return reply
        return Success(records=list(reply))

    def details(self, place_id):
        self.details_calls.append(place_id)
        reply = self.details_replies.get(place_id)
        if reply is None:
            return Failure(reason="not found")
        if isinstance(reply, Failure):
            return reply
        return Success(records=[reply])


@pytest.fixture
def fake_client_factory():
    return FakeMapsClient
