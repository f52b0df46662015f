# src/jobharvest/pipeline/orchestrator.py
"""
Category fan-out: category x source x location x role.

Every raw card goes normalize -> filter -> dedup -> accept. Run state
(the ledger and the accumulated records) lives in a RunState that is passed
in and handed back, so two runs never share anything.
"""
from __future__ import annotations

import datetime as dt
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from jobharvest.clients.base import JobSource
from jobharvest.clients.browser import BrowserSession
from jobharvest.models import CategoryConfig, JobRecord, RawRecord
from jobharvest.pipeline.filter import rejection_reason
from jobharvest.pipeline.ledger import DedupLedger
from jobharvest.pipeline.normalize import normalize_raw
from jobharvest.pipeline.sync import RemoteStore, flush_category

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")


@dataclass
class RunState:
    """
    Everything one run accumulates.

    - ledger: URLs known before or accepted during this run
    - known: cached records + accepted ones (what the local cache becomes)
    - accepted: only this run's new records
    """

    ledger: DedupLedger = field(default_factory=DedupLedger)
    known: List[JobRecord] = field(default_factory=list)
    accepted: List[JobRecord] = field(default_factory=list)
    per_category: Dict[str, int] = field(default_factory=dict)
    rejected: Counter = field(default_factory=Counter)
    failures: int = 0

    @classmethod
    def from_cache(cls, cached: Iterable[JobRecord]) -> "RunState":
        cached = list(cached)
        state = cls(known=cached)
        state.ledger.seed(j["detail_url"] for j in cached if j.get("detail_url"))
        return state


def consider(
    raw: RawRecord,
    config: CategoryConfig,
    source: JobSource,
    state: RunState,
    now: Callable[[], str] = utc_now,
) -> Optional[JobRecord]:
    """
    Decide on one raw card. Returns the accepted record (already added to
    the ledger and the run lists), or None if it was rejected.
    """
    job = normalize_raw(raw, source.base_url)
    if job is None:
        state.rejected["no_url"] += 1
        return None

    reason = rejection_reason(job, config, allow_unknown_experience=not source.exposes_experience)
    if reason:
        state.rejected[reason] += 1
        return None

    if state.ledger.contains(job["detail_url"]):
        state.rejected["duplicate"] += 1
        return None

    job["scraped_at"] = now()
    job["category"] = config.category
    job["source_platform"] = source.name
    state.ledger.add(job["detail_url"])
    state.accepted.append(job)
    state.known.append(job)
    return job


def collect_category(
    config: CategoryConfig,
    sources: Sequence[JobSource],
    session: BrowserSession,
    state: RunState,
    locations: Sequence[str],
    now: Callable[[], str] = utc_now,
) -> List[JobRecord]:
    """Run every (source, location, role) search for one category; return its new jobs."""
    batch: List[JobRecord] = []
    for source in sources:
        for location in locations:
            for role in config.roles:
                try:
                    for raw in source.search(session, config, location, role):
                        job = consider(raw, config, source, state, now)
                        if job is not None:
                            batch.append(job)
                except Exception as e:
                    # one bad search (timeout, missing selector, dead page) never ends the category
                    state.failures += 1
                    logger.error("[%s] error searching %r in %r: %s", source.name, role, location, e)
    return batch


def run_categories(
    configs: Sequence[CategoryConfig],
    sources: Sequence[JobSource],
    session: BrowserSession,
    state: RunState,
    store: RemoteStore,
    locations: Sequence[str],
    now: Callable[[], str] = utc_now,
) -> RunState:
    """Process every category in order, flushing each one's batch to its sheet."""
    for config in configs:
        logger.info("--- processing category: %s ---", config.category)
        batch = collect_category(config, sources, session, state, locations, now)
        state.per_category[config.category] = len(batch)
        if batch:
            logger.info("found %d new %s jobs", len(batch), config.category)
            flush_category(batch, config.sheet_id, store)
        else:
            logger.info("no new %s jobs found", config.category)
    return state
