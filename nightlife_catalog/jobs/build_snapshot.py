"""Batch job that rebuilds the nightlife venue snapshot from SerpAPI Google Maps."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from nightlife_catalog.core.catalog import Catalog
from nightlife_catalog.core.config import ConfigError, Settings, get_settings
from nightlife_catalog.core.enrichment import run_enrichment
from nightlife_catalog.core.pacing import Pacer
from nightlife_catalog.core.query_plan import QueryPlan
from nightlife_catalog.core.snapshot import SnapshotWriteError, write_snapshot
from nightlife_catalog.vendors.serpapi_maps import SerpApiMapsClient

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    INIT = "init"
    FETCHING = "fetching"
    ENRICHING = "enriching"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunSummary:
    state: RunState
    tasks: int
    failed_searches: int
    unique_places: int
    details_calls: int
    snapshot_path: Optional[Path] = None


class SnapshotJob:
    """Drives the query plan through search, merge, enrichment and writing.

    Everything runs on one thread with at most one request in flight; the
    pacers sleep after every call. Search and details failures are logged
    and absorbed. Only a snapshot write failure escapes ``run``.
    """

    def __init__(
        self,
        client: SerpApiMapsClient,
        plan: QueryPlan,
        snapshot_path: Path,
        *,
        catalog: Optional[Catalog] = None,
        search_pacer: Optional[Pacer] = None,
        details_pacer: Optional[Pacer] = None,
        details_budget: int = 80,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.client = client
        self.plan = plan
        self.snapshot_path = Path(snapshot_path)
        self.catalog = catalog if catalog is not None else Catalog()
        self.search_pacer = search_pacer or Pacer(0.3)
        self.details_pacer = details_pacer or Pacer(0.35)
        self.details_budget = details_budget
        self.clock = clock
        self.state = RunState.INIT
        self.failed_searches = 0
        self.details_calls = 0

    def _enter(self, state: RunState) -> None:
        logger.debug("Snapshot job %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self) -> RunSummary:
        self._enter(RunState.FETCHING)
        self.fetch_all()

        self._enter(RunState.ENRICHING)
        self.details_calls = run_enrichment(self.catalog, self.client, self.details_pacer, self.details_budget)

        self._enter(RunState.WRITING)
        now = self.clock() if self.clock else None
        try:
            path = write_snapshot(self.snapshot_path, self.catalog, self.plan, now)
        except SnapshotWriteError:
            self._enter(RunState.FAILED)
            raise

        self._enter(RunState.DONE)
        summary = self.summary(path)
        logger.info(
            "Saved %s with %d unique places (details fetched: %d, failed searches: %d/%d)",
            path,
            summary.unique_places,
            summary.details_calls,
            summary.failed_searches,
            summary.tasks,
        )
        return summary

    def fetch_all(self) -> None:
        total = len(self.plan)
        for index, task in enumerate(self.plan, start=1):
            ll = task.anchor.to_ll()
            logger.info(
                "[%d/%d] Fetching %r @ %s -> category %s",
                index,
                total,
                task.phrase.text,
                ll,
                task.phrase.category.value,
            )
            outcome = self.client.search(task.phrase.text, task.anchor)
            if not outcome.ok:
                self.failed_searches += 1
                logger.warning("Search %r @ %s contributed no places: %s", task.phrase.text, ll, outcome.reason)
            self.catalog.insert_or_merge_many(outcome.records, task.phrase.category)
            logger.info("  got %d, merged total %d", len(outcome.records), len(self.catalog))
            self.search_pacer.wait()

    def summary(self, path: Optional[Path] = None) -> RunSummary:
        return RunSummary(
            state=self.state,
            tasks=len(self.plan),
            failed_searches=self.failed_searches,
            unique_places=len(self.catalog),
            details_calls=self.details_calls,
            snapshot_path=path,
        )


def build_job(
    settings: Settings,
    *,
    client: Optional[SerpApiMapsClient] = None,
    plan: Optional[QueryPlan] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SnapshotJob:
    return SnapshotJob(
        client=client or SerpApiMapsClient(settings.serpapi_key, timeout=settings.request_timeout_seconds),
        plan=plan if plan is not None else QueryPlan(),
        snapshot_path=Path(settings.snapshot_path),
        catalog=Catalog(epsilon=settings.coord_epsilon),
        search_pacer=Pacer(settings.search_delay_seconds, sleep=sleep),
        details_pacer=Pacer(settings.details_delay_seconds, sleep=sleep),
        details_budget=settings.details_budget,
    )


def run_snapshot_job(
    *,
    client: Optional[SerpApiMapsClient] = None,
    plan: Optional[QueryPlan] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunSummary:
    """Full pipeline. Raises ConfigError before any network call when the key is missing."""
    settings = get_settings()
    job = build_job(settings, client=client, plan=plan, sleep=sleep)
    logger.info(
        "Starting snapshot run: %d phrases x %d anchors = %d searches, details budget %d",
        len(job.plan.phrases),
        len(job.plan.anchors),
        len(job.plan),
        job.details_budget,
    )
    return job.run()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    try:
        run_snapshot_job()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1
    except SnapshotWriteError as exc:
        logger.error("Snapshot run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
