"""Budget-bounded details sweep for entries still missing rating or hours."""

import logging
from typing import Iterator, List

from nightlife_catalog.core.catalog import ENRICHMENT_FIELDS, Catalog, fill_missing
from nightlife_catalog.core.pacing import Pacer
from nightlife_catalog.models import CatalogEntry
from nightlife_catalog.vendors.serpapi_maps import SerpApiMapsClient

logger = logging.getLogger(__name__)


def needs_details(entry: CatalogEntry) -> bool:
    return bool(entry.place_id) and (entry.rating is None or entry.operating_hours is None)


def iter_candidates(catalog: Catalog) -> Iterator[CatalogEntry]:
    for entry in catalog:
        if needs_details(entry):
            yield entry


def run_enrichment(catalog: Catalog, client: SerpApiMapsClient, pacer: Pacer, budget: int) -> int:
    """Fill rating/reviews/hours from details lookups; returns the number of calls issued.

    Every issued call counts toward ``budget``, failed ones included. Entries
    left over once the budget is spent keep their unknown fields.
    """
    calls = 0
    if budget <= 0:
        logger.info("Details budget is %s; skipping enrichment", budget)
        return calls

    for entry in iter_candidates(catalog):
        if calls >= budget:
            logger.info("Details budget of %d exhausted", budget)
            break

        outcome = client.details(entry.place_id)
        calls += 1
        if outcome.ok:
            filled: List[str] = fill_missing(entry, outcome.records[0], ENRICHMENT_FIELDS)
            logger.info("Details for %r filled: %s", entry.name, ", ".join(filled) or "nothing")
        else:
            logger.warning("Details lookup for %r skipped: %s", entry.name, outcome.reason)
        pacer.wait()

    return calls
