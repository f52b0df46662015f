# src/jobharvest/pipeline/ledger.py
"""
In-run set of job URLs we already know about.

The ledger is rebuilt from scratch every run (local cache + remote sheet),
so it never needs to persist on its own. Losing it mid-run only means
re-fetching things we would have rejected anyway.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Set

from jobharvest.pipeline.normalize import canonical_url

logger = logging.getLogger(__name__)


class DedupLedger:
    """Insert-only set of canonical detail URLs."""

    def __init__(self, urls: Optional[Iterable[str]] = None) -> None:
        self._urls: Set[str] = set()
        if urls:
            self.seed(urls)

    @staticmethod
    def _key(url: Optional[str]) -> Optional[str]:
        return canonical_url(url)

    def seed(self, urls: Iterable[str]) -> int:
        """Merge URLs into the ledger; returns how many were new. Junk is ignored."""
        before = len(self._urls)
        for url in urls:
            key = self._key(url)
            if key:
                self._urls.add(key)
        added = len(self._urls) - before
        logger.debug("ledger seeded with %d new urls (total %d)", added, len(self._urls))
        return added

    def contains(self, url: Optional[str]) -> bool:
        key = self._key(url)
        return key is not None and key in self._urls

    def add(self, url: str) -> None:
        key = self._key(url)
        if key is None:
            raise ValueError(f"Not an absolute http(s) URL: {url!r}")
        self._urls.add(key)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.contains(url)

    def __len__(self) -> int:
        return len(self._urls)
