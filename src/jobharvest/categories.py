# src/jobharvest/categories.py
"""
Category tables: which roles to search for and which titles count.

Keyword lists are data, not code. The built-in tables below cover the two
verticals we run by default; a YAML file with the same shape can replace
them (see `load_categories`).

YAML shape:

    categories:
      - category: Frontend
        sheet_id: "1AbC..."          # or sheet_id_env: GOOGLE_SHEET_ID
        ui_filter: null
        roles: [Frontend Developer, ...]
        valid_keywords: [frontend, ...]
        excluded_keywords: [sales, ...]
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from jobharvest.config import Settings
from jobharvest.models import CategoryConfig, CategoryPolicy

logger = logging.getLogger(__name__)

FRONTEND = {
    "category": "Frontend",
    "sheet_id_env": "GOOGLE_SHEET_ID",
    "ui_filter": None,
    "roles": [
        "Frontend Developer", "Front End Developer", "React Frontend Developer", "Angular UI Developer",
        "JavaScript Front End", "Junior Web Developer", "Senior Web Developer", "Web Developer",
        "Frontend Engineer", "React JS Developer", "UI/UX Developer", "UI UX Developer",
        "UX/UI Developer", "UI Developer", "Frontend UI/UX Developer", "User Interface Developer",
        "User Experience Developer", "UI/UX Designer Developer", "UI/UX Design Consultant",
    ],
    "valid_keywords": [
        "frontend", "front end", "web develop", "web design", "ui develop",
        "ui ux", "ux ui", "user interface", "user experience", "interaction design",
        "responsive web design", "front end design", "sde", "engineer",
        "react", "vue", "javascript", "typescript", "html", "css", "angular",
    ],
    "excluded_keywords": [
        "sales", "marketing", "hr", "recruiter", "manager",
        "backend", "java ", "python", "php", "net", ".net",
    ],
}

DESIGN = {
    "category": "Design",
    "sheet_id_env": "GOOGLE_DESIGN_SHEET_ID",
    "ui_filter": "UX, Design",
    "roles": [
        "Product Designer", "UI/UX Designer", "UX Designer", "UI Designer",
        "Interaction Designer", "Visual Designer", "User Experience Designer",
    ],
    "valid_keywords": [
        "product design", "product designer",
        "ux", "ui", "user experience", "user interface", "interaction design",
        "visual design", "product manager",
    ],
    "excluded_keywords": [
        "sheet metal", "hvac", "electrical", "civil", "architect",
        "mechanical", "sales", "marketing", "youtube", "anchor",
        "camera", "diesel", "quality", "compliance", "technician",
        "cleanroom", "mep", "panel design", "silicon", "manager",
    ],
}

DEFAULT_TABLES = [FRONTEND, DESIGN]


def _policy(settings: Settings) -> Dict[str, Any]:
    return {
        "allowed_locations": tuple(settings.locations),
        "denied_locations": tuple(settings.denied_locations),
        "experience_min": settings.experience_min,
        "experience_max": settings.experience_max,
        "recency_window_days": settings.recency_window_days,
    }


def build_category(table: Dict[str, Any], settings: Settings) -> CategoryConfig:
    """Turn one category table (dict) into an immutable CategoryConfig."""
    missing = [k for k in ("category", "roles", "valid_keywords") if not table.get(k)]
    if missing:
        raise ValueError(f"Category table is missing: {', '.join(missing)}")

    sheet_id = table.get("sheet_id") or ""
    if not sheet_id and table.get("sheet_id_env"):
        sheet_id = os.getenv(table["sheet_id_env"], "")

    policy = CategoryPolicy(
        valid_keywords=tuple(k.lower() for k in table["valid_keywords"]),
        excluded_keywords=tuple(k.lower() for k in table.get("excluded_keywords") or ()),
        **_policy(settings),
    )
    return CategoryConfig(
        category=str(table["category"]),
        sheet_id=sheet_id.strip(),
        roles=tuple(table["roles"]),
        policy=policy,
        ui_filter=table.get("ui_filter") or None,
    )


def load_categories(settings: Settings, path: Optional[str | Path] = None) -> List[CategoryConfig]:
    """
    Build the category list once at startup.
    Uses the YAML file at `path` (or settings.categories_file) when given,
    otherwise the built-in tables.
    """
    path = path or settings.categories_file
    if path:
        with open(path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f) or {}
        tables = doc.get("categories") if isinstance(doc, dict) else doc
        if not tables:
            raise ValueError(f"No categories found in {path}")
        logger.info("loaded %d categories from %s", len(tables), path)
    else:
        tables = DEFAULT_TABLES

    configs = [build_category(t, settings) for t in tables]
    for c in configs:
        if not c.sheet_id:
            logger.warning("category %s has no sheet configured; results stay in the local cache only", c.category)
    return configs
