# src/jobharvest/runner.py
"""
One full pipeline run, end to end:

1. load the local cache and seed the dedup ledger from it
2. seed the ledger from every category's sheet (the source of truth)
3. open the browser session, fan out over categories and sources
4. rewrite the local cache, whatever happened in between

Runs never overlap: a second call while one is in progress is skipped.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, ContextManager, List, Optional, Sequence

from jobharvest.clients.base import JobSource
from jobharvest.clients.browser import BrowserSession, open_session
from jobharvest.clients.linkedin import LinkedInSource
from jobharvest.clients.naukri import NaukriSource
from jobharvest.config import Settings
from jobharvest.io.cache import load_cache
from jobharvest.io.sheets import SheetsStore
from jobharvest.models import DETAIL_URL_COLUMN, CategoryConfig
from jobharvest.pipeline.orchestrator import RunState, run_categories
from jobharvest.pipeline.sync import RemoteStore, persist_local_cache

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], ContextManager[BrowserSession]]

_run_lock = threading.Lock()


def default_sources(settings: Settings) -> List[JobSource]:
    return [NaukriSource(settings), LinkedInSource(settings)]


def seed_from_store(state: RunState, configs: Sequence[CategoryConfig], store: RemoteStore) -> None:
    """Union every category sheet's Detail URL column into the ledger."""
    for config in configs:
        if not config.sheet_id:
            continue
        try:
            urls = store.query_column(config.sheet_id, DETAIL_URL_COLUMN)
        except Exception as e:
            logger.error("error fetching urls from %s...: %s", config.sheet_id[:5], e)
            continue
        added = state.ledger.seed(urls)
        logger.info("loaded %d urls from sheet (%s), %d new to the ledger", len(urls), config.category, added)


def run_once(
    settings: Settings,
    configs: Sequence[CategoryConfig],
    *,
    sources: Optional[Sequence[JobSource]] = None,
    store: Optional[RemoteStore] = None,
    session_factory: SessionFactory = open_session,
    write_cache: bool = True,
) -> Optional[RunState]:
    """
    Run the pipeline once. Returns the finished RunState, or None if another
    run was already in progress.

    SessionError (browser cannot start) propagates to the caller; the local
    cache is still rewritten first.
    """
    if not _run_lock.acquire(blocking=False):
        logger.warning("previous run still in progress; skipping this trigger")
        return None
    try:
        return _run(settings, configs, sources, store, session_factory, write_cache)
    finally:
        _run_lock.release()


def _run(
    settings: Settings,
    configs: Sequence[CategoryConfig],
    sources: Optional[Sequence[JobSource]],
    store: Optional[RemoteStore],
    session_factory: SessionFactory,
    write_cache: bool,
) -> RunState:
    logger.info("starting multi-category scrape (%d categories)", len(configs))
    sources = list(sources) if sources is not None else default_sources(settings)
    store = store if store is not None else SheetsStore.from_settings(settings)

    state = RunState.from_cache(load_cache(settings.results_file))
    seed_from_store(state, configs, store)
    logger.info("total unique existing jobs tracked: %d", len(state.ledger))

    try:
        with session_factory(settings) as session:
            run_categories(configs, sources, session, state, store, settings.locations)
    finally:
        if write_cache:
            persist_local_cache(state.known, settings.results_file)

    logger.info(
        "run finished: %d new jobs, %d failed searches, rejections %s",
        len(state.accepted), state.failures, dict(state.rejected),
    )
    return state
