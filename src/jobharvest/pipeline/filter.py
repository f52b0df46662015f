# src/jobharvest/pipeline/filter.py
"""
Pure predicates deciding whether a normalized job record qualifies.

Nothing in here touches the dedup ledger or any other state, so each
predicate can be tested on its own.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from jobharvest.models import UNKNOWN, CategoryConfig, JobRecord

# Sub-day phrasing. Any of these means "posted within the last day".
SAME_DAY_MARKERS = ("just now", "few hours", "sec", "min", "hour", "today")

_AGE_RE = re.compile(r"(\d+)\s*\+?\s*(day|week|month)s?\b")
_DAYS_PER_UNIT = {"day": 1, "week": 7, "month": 30}

_RANGE_RE = re.compile(r"(\d+)\s*[-–—]\s*(\d+)")
_SINGLE_YEAR_RE = re.compile(r"(\d+)\s*\+?\s*(?:yrs?|years?)\b")


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(n.lower() in text for n in needles)


def validate_title(title: Optional[str], valid: Iterable[str], excluded: Iterable[str]) -> bool:
    """
    Keyword classifier: at least one valid keyword and no excluded keyword.
    Exclusion always wins.
    """
    if not title:
        return False
    t = title.lower()
    return _contains_any(t, valid) and not _contains_any(t, excluded)


def is_valid_location(location: Optional[str], allowed: Iterable[str], denied: Iterable[str]) -> bool:
    """Deny-list first (absolute), then require an allowed marker."""
    if not location:
        return False
    loc = location.lower()
    if _contains_any(loc, denied):
        return False
    return _contains_any(loc, allowed)


def is_recent(posted_date: Optional[str], window_days: int = 1) -> bool:
    """
    Classify a free-text "posted" string as fresh enough.

    Anything phrased in seconds/minutes/hours or "today" is fresh. A
    "N days/weeks/months ago" phrase is fresh if it falls inside the window.
    Everything else fails closed.
    """
    if not posted_date:
        return False
    text = posted_date.lower()
    if _contains_any(text, SAME_DAY_MARKERS):
        return True

    m = _AGE_RE.search(text)
    if not m:
        return False
    age_days = int(m.group(1)) * _DAYS_PER_UNIT[m.group(2)]
    return age_days <= window_days


def experience_matches(
    experience: Optional[str],
    target_min: int,
    target_max: int,
    fallbacks: Iterable[str] = (),
    *,
    allow_unknown: bool = False,
) -> bool:
    """
    True if the declared experience overlaps [target_min, target_max].

    "a-b" ranges use inclusive any-overlap semantics. A single year mention
    must sit inside the target. Fallback phrases are only consulted for text
    with no parseable number of years; when none are given they are derived
    from the target ("2 yrs", "3 yrs" for [2, 3]).
    """
    if not experience or experience.strip() == UNKNOWN:
        return allow_unknown
    exp = experience.lower()

    m = _RANGE_RE.search(exp)
    if m:
        low, high = int(m.group(1)), int(m.group(2))
        return low <= target_max and high >= target_min

    m = _SINGLE_YEAR_RE.search(exp)
    if m:
        return target_min <= int(m.group(1)) <= target_max

    phrases = tuple(fallbacks) or tuple(f"{n} yrs" for n in range(target_min, target_max + 1))
    return any(re.search(rf"(?<!\w){re.escape(p.lower())}(?!\w)", exp) for p in phrases)


def rejection_reason(
    record: JobRecord,
    config: CategoryConfig,
    *,
    allow_unknown_experience: bool = False,
) -> Optional[str]:
    """
    Run all four predicates in order and return the name of the first one
    that fails, or None when the record qualifies.
    """
    policy = config.policy
    if not config.validate_title(record.get("title")):
        return "title"
    if not is_valid_location(record.get("location"), policy.allowed_locations, policy.denied_locations):
        return "location"
    if not is_recent(record.get("posted_date"), policy.recency_window_days):
        return "recency"
    if not experience_matches(
        record.get("experience"),
        policy.experience_min,
        policy.experience_max,
        policy.experience_fallbacks,
        allow_unknown=allow_unknown_experience,
    ):
        return "experience"
    return None
