# src/jobharvest/config.py
"""
Runtime settings, read from the environment (and a .env file in the
project root, if there is one).
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()  # automatically looks for a .env file walking up from the working directory

DEFAULT_LOCATIONS = ("Chennai", "Bengaluru", "Coimbatore", "Hyderabad", "Kerala", "Remote", "Hybrid")

# Never acceptable, even if an allowed marker also shows up.
DENIED_LOCATIONS = (
    "san francisco", "usa", "united states", "uk", "united kingdom", "london",
    "europe", "germany", "singapore", "australia", "canada", "dubai", "uae",
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Local cache + Google credentials
    results_file: str = field(default_factory=lambda: os.getenv("RESULTS_FILE", "jobs.json"))
    service_account_file: str = field(
        default_factory=lambda: os.getenv("SERVICE_ACCOUNT_FILE", "service_account_credentials.json")
    )
    service_account_email: str = field(default_factory=lambda: os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", ""))
    service_account_private_key: str = field(default_factory=lambda: os.getenv("GOOGLE_PRIVATE_KEY", ""))

    categories_file: str = field(default_factory=lambda: os.getenv("CATEGORIES_FILE", ""))

    # Search + filter policy shared by all categories
    locations: Tuple[str, ...] = field(default_factory=lambda: _env_list("SEARCH_LOCATIONS", DEFAULT_LOCATIONS))
    denied_locations: Tuple[str, ...] = field(default_factory=lambda: _env_list("DENIED_LOCATIONS", DENIED_LOCATIONS))
    experience_param: str = field(default_factory=lambda: os.getenv("EXPERIENCE_PARAM", "2"))
    experience_min: int = field(default_factory=lambda: int(os.getenv("EXPERIENCE_MIN", "2")))
    experience_max: int = field(default_factory=lambda: int(os.getenv("EXPERIENCE_MAX", "3")))
    recency_window_days: int = field(default_factory=lambda: int(os.getenv("RECENCY_WINDOW_DAYS", "1")))

    # Browser / scraping
    headless: bool = field(default_factory=lambda: _env_bool("HEADLESS", True))
    user_agent: str = field(default_factory=lambda: os.getenv("USER_AGENT", DEFAULT_USER_AGENT))
    nav_timeout_ms: int = field(default_factory=lambda: int(os.getenv("NAV_TIMEOUT_MS", "30000")))
    selector_timeout_ms: int = field(default_factory=lambda: int(os.getenv("SELECTOR_TIMEOUT_MS", "10000")))
    delay_min: float = field(default_factory=lambda: float(os.getenv("REQUEST_DELAY_MIN", "2")))
    delay_max: float = field(default_factory=lambda: float(os.getenv("REQUEST_DELAY_MAX", "5")))
    linkedin_max_pages: int = field(default_factory=lambda: int(os.getenv("LINKEDIN_MAX_PAGES", "5")))
    linkedin_geo_id: str = field(default_factory=lambda: os.getenv("LINKEDIN_GEO_ID", "102713980"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
