# src/jobharvest/pipeline/normalize.py
"""
Convert whatever an adapter scraped off a result card into our canonical
JobRecord shape.

Both sources hand us loosely-typed strings (or nothing at all). This module
is the only place that decides what "missing" looks like (the "N/A"
sentinel) and what a job's identity URL is.
"""
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from jobharvest.models import UNKNOWN, JobRecord, RawRecord

_WS_RE = re.compile(r"\s+")

_TEXT_FIELDS = ("title", "company", "location", "experience", "posted_date")


def _clean(value: Optional[str]) -> str:
    # collapse newlines/tabs that innerText leaves behind; empty -> sentinel
    if value is None:
        return UNKNOWN
    value = _WS_RE.sub(" ", str(value)).strip()
    return value or UNKNOWN


def canonical_url(url: Optional[str], base: Optional[str] = None) -> Optional[str]:
    """
    Stable identity form of a job URL.

    - relative links are resolved against `base` (the search page URL)
    - only http(s) is accepted
    - scheme/host are lowercased, query string and fragment are dropped
      (both sources stuff tracking ids in there)
    """
    if not url:
        return None
    url = url.strip()
    if base:
        url = urljoin(base, url)
    parts = urlsplit(url)
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return None
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))


def normalize_raw(raw: RawRecord, base_url: Optional[str] = None) -> Optional[JobRecord]:
    """
    Map one raw card onto a JobRecord.

    Returns None when the card has no usable detail URL, since without it the
    record has no identity. Unknown fields are passed through as "N/A", never
    guessed.
    """
    url = canonical_url(raw.get("detail_url"), base_url)
    if url is None:
        return None

    out: JobRecord = {field: _clean(raw.get(field)) for field in _TEXT_FIELDS}
    out["detail_url"] = url
    return out
