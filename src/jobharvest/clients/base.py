# src/jobharvest/clients/base.py
"""Base class for listing-source adapters."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional

from jobharvest.clients.browser import BrowserSession, random_delay
from jobharvest.config import Settings
from jobharvest.models import CategoryConfig, RawRecord

Pause = Callable[[float, float], None]


def slugify(text: str) -> str:
    """'UI/UX Developer' -> 'ui-ux-developer'"""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


class JobSource(ABC):
    """
    One listing site. Knows how to build a search for (location, role),
    drive the page until results are visible, and pull raw cards off it.
    """

    name: str
    base_url: str
    # False for sites whose result cards never show years of experience
    exposes_experience: bool = True

    def __init__(self, settings: Settings, pause: Optional[Pause] = None) -> None:
        self.settings = settings
        self._pause = pause or random_delay

    @abstractmethod
    def search_url(self, config: CategoryConfig, location: str, role: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def search(self, session: BrowserSession, config: CategoryConfig, location: str, role: str) -> Iterator[RawRecord]:
        """Yield raw records for one (location, role) search."""
        raise NotImplementedError
