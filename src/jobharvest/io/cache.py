# src/jobharvest/io/cache.py
"""
Local JSON cache of every job we have ever accepted.

It is a fallback, not the authority: the sheet decides what is a duplicate
across runs. The cache only matters when the sheet is unreachable or not
configured.

On disk the records use camelCase keys (detailUrl, postedDate, ...), the
format earlier versions of the scraper wrote. Entries with our own
snake_case keys are read too.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List

from jobharvest.models import JobRecord

logger = logging.getLogger(__name__)

# record key -> key in jobs.json
FILE_KEYS: Dict[str, str] = {
    "title": "title",
    "company": "company",
    "location": "location",
    "experience": "experience",
    "posted_date": "postedDate",
    "detail_url": "detailUrl",
    "category": "category",
    "scraped_at": "scrapedAt",
    "source_platform": "sourcePlatform",
}
_RECORD_KEYS = {v: k for k, v in FILE_KEYS.items()}


def to_file_entry(job: JobRecord) -> Dict[str, Any]:
    return {FILE_KEYS.get(k, k): v for k, v in job.items()}


def from_file_entry(entry: Dict[str, Any]) -> JobRecord:
    return {_RECORD_KEYS.get(k, k): v for k, v in entry.items()}  # type: ignore[return-value]


def load_cache(path: str | Path) -> List[JobRecord]:
    """
    Read the cache. A missing or unreadable file is treated as an empty cache;
    the run goes on either way.
    """
    path = Path(path)
    if not path.exists():
        logger.info("no local cache at %s; starting empty", path)
        return []
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("could not read local cache %s (%s); treating as empty", path, e)
        return []

    if not isinstance(data, list):
        logger.error("local cache %s is not a JSON array; treating as empty", path)
        return []
    # drop entries that cannot be deduped on
    jobs = [from_file_entry(j) for j in data if isinstance(j, dict)]
    jobs = [j for j in jobs if j.get("detail_url")]
    if len(jobs) != len(data):
        logger.warning("skipped %d malformed entries in %s", len(data) - len(jobs), path)
    return jobs


def save_cache(path: str | Path, jobs: Iterable[JobRecord]) -> int:
    """
    Overwrite the cache with `jobs`. Written to a temp file in the same
    directory and swapped in, so a crash never leaves half a file behind.
    Returns the number of records written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [to_file_entry(j) for j in jobs]

    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return len(data)
