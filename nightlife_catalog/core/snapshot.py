"""Writes the catalog snapshot consumed by the map layer."""

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from nightlife_catalog.core.catalog import Catalog
from nightlife_catalog.core.query_plan import QueryPlan

logger = logging.getLogger(__name__)


class SnapshotWriteError(RuntimeError):
    """Raised when the snapshot could not be persisted."""


def build_snapshot(catalog: Catalog, plan: QueryPlan, now: Optional[datetime] = None) -> Dict[str, Any]:
    generated_at = now or datetime.now(timezone.utc)
    return {
        "places": catalog.export(),
        "last_updated": generated_at.date().isoformat(),
        "meta": {
            "queries": plan.query_texts(),
            "grid": plan.grid_texts(),
            "generated_at": generated_at.isoformat(),
        },
    }


def write_snapshot(
    path: Union[str, Path],
    catalog: Catalog,
    plan: QueryPlan,
    now: Optional[datetime] = None,
) -> Path:
    """Serialize the snapshot to ``path``, replacing any previous file atomically."""
    target = Path(path)
    payload = build_snapshot(catalog, plan, now)
    tmp = target.with_name(f".{target.name}.tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
        os.replace(tmp, target)
    except OSError as exc:
        logger.error("Failed to write snapshot to %s: %s", target, exc)
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise SnapshotWriteError(f"could not write snapshot to {target}: {exc}") from exc

    logger.debug("Wrote snapshot %s (%d places)", target, len(catalog))
    return target
