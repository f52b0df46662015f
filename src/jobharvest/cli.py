# src/jobharvest/cli.py
"""
Command-line interface for the job harvester.

This module provides CLI commands to:
- Run the scrape once (CI / cron-from-outside)
- Run it hourly, forever (server / container)
- Debug Google Sheets access and preview what dedup will see
"""

import json
import logging
import os
from typing import List, Optional, Sequence

import typer

from jobharvest.categories import load_categories
from jobharvest.clients.browser import SessionError
from jobharvest.config import Settings
from jobharvest.io.sheets import SheetsStore
from jobharvest.logging_setup import configure_logging
from jobharvest.models import DETAIL_URL_COLUMN
from jobharvest.runner import run_once
from jobharvest.scheduler import serve

logger = logging.getLogger(__name__)

# Typer app instance for CLI commands
app = typer.Typer(help="Job harvester: Naukri + LinkedIn -> Google Sheets")


class DryRunStore:
    """Reads from the real sheets, prints instead of appending."""

    def __init__(self, store: SheetsStore) -> None:
        self._store = store

    def query_column(self, sheet_id: str, column_index: int) -> List[str]:
        return self._store.query_column(sheet_id, column_index)

    def append_rows(self, sheet_id: str, rows: Sequence[Sequence[str]]) -> int:
        typer.echo(json.dumps({"sheet": sheet_id, "preview_rows": [list(r) for r in rows]}, indent=2))
        return len(rows)


def _setup(categories_file: Optional[str]):
    settings = Settings()
    configure_logging(settings.log_level)
    return settings, load_categories(settings, categories_file)


def _run_or_exit(settings: Settings, configs, dry_run: bool = False) -> None:
    store = SheetsStore.from_settings(settings)
    try:
        state = run_once(
            settings,
            configs,
            store=DryRunStore(store) if dry_run else store,
            write_cache=not dry_run,
        )
    except SessionError as e:
        logger.error("scrape failed: %s", e)
        raise typer.Exit(code=1)
    except Exception:
        logger.exception("scrape failed")
        raise typer.Exit(code=1)

    if state is None:
        typer.echo("Another run is in progress; nothing done.")
        return
    typer.echo(json.dumps({
        "new": len(state.accepted),
        "per_category": state.per_category,
        "rejected": dict(state.rejected),
        "failed_searches": state.failures,
    }, indent=2))


@app.command()
def run(
    categories: Optional[str] = typer.Option(None, "--categories", help="YAML file with category tables"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print rows but do not write to Sheets or the local cache"),
):
    """
    Scrape once: load cache + sheets → search every category → append new rows → rewrite cache.
    Exits non-zero if the browser cannot be started.
    """
    settings, configs = _setup(categories)
    _run_or_exit(settings, configs, dry_run=dry_run)
    typer.echo("Scrape complete.")


@app.command()
def schedule(
    categories: Optional[str] = typer.Option(None, "--categories", help="YAML file with category tables"),
    minute: int = typer.Option(0, "--minute", min=0, max=59, help="Minute past each hour to run at"),
    run_now: bool = typer.Option(True, "--run-now/--no-run-now", help="Also run immediately on start"),
):
    """Run hourly at a fixed minute until interrupted. Failed runs wait for the next trigger."""
    settings, configs = _setup(categories)
    typer.echo(f"Scheduling hourly runs at minute {minute}.")
    serve(lambda: run_once(settings, configs), minute=minute, run_now=run_now)


@app.command()
def start(
    categories: Optional[str] = typer.Option(None, "--categories", help="YAML file with category tables"),
):
    """
    Container entry point: run once and exit when CI=true, otherwise run now
    and then every hour at minute 0.
    """
    settings, configs = _setup(categories)
    if os.getenv("CI", "").lower() == "true":
        typer.echo("CI environment detected. Running once...")
        _run_or_exit(settings, configs)
        typer.echo("Scrape complete. Exiting.")
        return
    typer.echo('Local/server environment. Scheduling cron "0 * * * *".')
    serve(lambda: run_once(settings, configs), minute=0, run_now=True)


@app.command()
def sheets_debug(
    categories: Optional[str] = typer.Option(None, "--categories", help="YAML file with category tables"),
):
    """
    List worksheet titles and IDs for every category's sheet, to verify
    the service account can see them.
    """
    settings, configs = _setup(categories)
    store = SheetsStore.from_settings(settings)
    for c in configs:
        if not c.sheet_id:
            typer.echo(f"{c.category}: no sheet configured")
            continue
        ws = store.first_worksheet(c.sheet_id)
        typer.echo(f"{c.category}: first tab {ws.title!r}  gid={ws.id}")


@app.command()
def urls_preview(
    limit: int = 5,
    categories: Optional[str] = typer.Option(None, "--categories", help="YAML file with category tables"),
):
    """Quick check: show the first few Detail URLs dedup will read from each sheet."""
    settings, configs = _setup(categories)
    store = SheetsStore.from_settings(settings)
    out = {}
    for c in configs:
        urls = store.query_column(c.sheet_id, DETAIL_URL_COLUMN)
        out[c.category] = {"count": len(urls), "first": urls[:limit]}
    typer.echo(json.dumps(out, indent=2))


@app.command("categories")
def show_categories(
    categories: Optional[str] = typer.Option(None, "--categories", help="YAML file with category tables"),
):
    """Print the category configuration the pipeline would use."""
    _, configs = _setup(categories)
    typer.echo(json.dumps([
        {
            "category": c.category,
            "sheet_configured": bool(c.sheet_id),
            "ui_filter": c.ui_filter,
            "roles": list(c.roles),
            "valid_keywords": list(c.policy.valid_keywords),
            "excluded_keywords": list(c.policy.excluded_keywords),
            "locations": list(c.policy.allowed_locations),
            "experience": [c.policy.experience_min, c.policy.experience_max],
            "recency_window_days": c.policy.recency_window_days,
        }
        for c in configs
    ], indent=2))


if __name__ == "__main__":
    app()
