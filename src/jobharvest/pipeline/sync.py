# src/jobharvest/pipeline/sync.py
"""
Writing accepted jobs out: per-category rows to the sheet, and the full
record list to the local cache at the end of a run.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Protocol, Sequence

from jobharvest.io.cache import save_cache
from jobharvest.io.sheets import job_to_row
from jobharvest.models import JobRecord

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    def query_column(self, sheet_id: str, column_index: int) -> List[str]: ...

    def append_rows(self, sheet_id: str, rows: Sequence[Sequence[str]]) -> int: ...


def flush_category(batch: Sequence[JobRecord], sheet_id: str, store: RemoteStore) -> int:
    """
    Append one category's new jobs to its sheet.

    No-op for an empty batch or an unconfigured sheet. A failing write is
    logged and swallowed: the local cache still gets these records.
    """
    if not batch:
        return 0
    if not sheet_id:
        logger.info("no sheet configured; %d jobs kept in local cache only", len(batch))
        return 0
    rows = [job_to_row(j) for j in batch]
    try:
        return store.append_rows(sheet_id, rows)
    except Exception as e:
        logger.error("error appending %d rows to %s...: %s", len(rows), sheet_id[:5], e)
        return 0


def dedupe_records(records: Iterable[JobRecord]) -> List[JobRecord]:
    """First record per detail_url wins; order preserved."""
    seen = set()
    out: List[JobRecord] = []
    for r in records:
        url = r.get("detail_url")
        if not url or url in seen:
            continue
        seen.add(url)
        out.append(r)
    return out


def persist_local_cache(records: Iterable[JobRecord], path: str | Path) -> int:
    """Rewrite the local cache with every known record, de-duplicated."""
    unique = dedupe_records(records)
    written = save_cache(path, unique)
    logger.info("local cache %s now holds %d jobs", path, written)
    return written
