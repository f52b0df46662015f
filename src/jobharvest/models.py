# src/jobharvest/models.py
"""
Record shapes and category configuration used throughout the pipeline.

Job records stay plain dicts with type hints (TypedDict), the same way they
travel through JSON and into the sheet. Category configuration is immutable
once built, so it uses frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, TypedDict

# Sentinel for any field a source did not provide.
UNKNOWN = "N/A"


class RawRecord(TypedDict, total=False):
    """
    What an adapter scrapes off one result card. Every key is optional;
    a missing key means the card did not carry that piece of data.
    """

    title: Optional[str]
    company: Optional[str]
    location: Optional[str]
    experience: Optional[str]
    posted_date: Optional[str]
    detail_url: Optional[str]


class JobRecord(TypedDict, total=False):
    """
    Canonical job record, as stored in the local cache and written to the sheet.

    Notes:
    - `detail_url` is the identity key. Nothing else is used for dedup.
    - `category`, `scraped_at` and `source_platform` are stamped at
      acceptance time by the orchestrator, never by the source.
    """

    title: str
    company: str
    location: str
    experience: str
    posted_date: str
    detail_url: str
    category: str
    scraped_at: str
    source_platform: str


# Sheet column order. Dedup seeding reads "Detail URL" back by position,
# so new columns only ever go on the end.
SHEET_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("Company", "company"),
    ("Title", "title"),
    ("Experience", "experience"),
    ("Location", "location"),
    ("Detail URL", "detail_url"),
    ("Posted Date", "posted_date"),
    ("Scraped At", "scraped_at"),
    ("Platform", "source_platform"),
)
DETAIL_URL_COLUMN = 4  # column E, 0-based


@dataclass(frozen=True)
class CategoryPolicy:
    """Declarative filter policy for one category."""

    valid_keywords: Tuple[str, ...]
    excluded_keywords: Tuple[str, ...] = ()
    allowed_locations: Tuple[str, ...] = ()
    denied_locations: Tuple[str, ...] = ()
    experience_min: int = 2
    experience_max: int = 3
    experience_fallbacks: Tuple[str, ...] = ()  # empty: derived from the target range
    recency_window_days: int = 1


@dataclass(frozen=True)
class CategoryConfig:
    """One search vertical: what to search for, how to judge it, where it goes."""

    category: str
    sheet_id: str
    roles: Tuple[str, ...]
    policy: CategoryPolicy
    ui_filter: Optional[str] = None

    def validate_title(self, title: Optional[str]) -> bool:
        # local import: pipeline.filter imports this module
        from jobharvest.pipeline.filter import validate_title

        return validate_title(title, self.policy.valid_keywords, self.policy.excluded_keywords)
