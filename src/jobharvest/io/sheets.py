# src/jobharvest/io/sheets.py
"""
Google Sheets as the remote "source of truth" for accepted jobs.

Each category writes to its own spreadsheet (first tab). We only ever do two
things with it: read one column back (to seed dedup) and append rows.
"""
from __future__ import annotations

import io
import logging
import os
from typing import List, Optional, Sequence

import gspread
import httpx
import pandas as pd

from jobharvest.config import Settings
from jobharvest.models import SHEET_COLUMNS, JobRecord

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"


def csv_export_url(sheet_id: str) -> str:
    # no gid -> Google exports the first tab
    return f"https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"


def _read_csv_via_httpx(url: str) -> pd.DataFrame:
    with httpx.Client(timeout=20) as client:
        r = client.get(url)
        r.raise_for_status()  # private sheets answer with a redirect to login -> raises too
    try:
        return pd.read_csv(io.StringIO(r.text), header=None, dtype=str)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()


def job_to_row(job: JobRecord) -> List[str]:
    """One sheet row in SHEET_COLUMNS order. Missing values become ''."""
    return [str(job.get(key) or "") for _, key in SHEET_COLUMNS]


class SheetsStore:
    """
    Thin wrapper around gspread for one set of service-account credentials.

    Credentials come from the service account JSON file if it exists, else
    from GOOGLE_SERVICE_ACCOUNT_EMAIL + GOOGLE_PRIVATE_KEY.
    """

    def __init__(self, service_account_file: str, email: str = "", private_key: str = "") -> None:
        self.service_account_file = service_account_file
        self.email = email
        # keys pasted into env vars usually carry literal "\n"
        self.private_key = private_key.replace("\\n", "\n") if private_key else ""
        self._gc: Optional[gspread.Client] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SheetsStore":
        return cls(
            settings.service_account_file,
            email=settings.service_account_email,
            private_key=settings.service_account_private_key,
        )

    @property
    def has_credentials(self) -> bool:
        return os.path.exists(self.service_account_file) or bool(self.email and self.private_key)

    def _client(self) -> gspread.Client:
        if self._gc is None:
            if os.path.exists(self.service_account_file):
                self._gc = gspread.service_account(filename=self.service_account_file)
            elif self.email and self.private_key:
                self._gc = gspread.service_account_from_dict({
                    "type": "service_account",
                    "client_email": self.email,
                    "private_key": self.private_key,
                    "token_uri": TOKEN_URI,
                })
            else:
                raise RuntimeError(
                    f"No Google credentials: {self.service_account_file} not found and "
                    "GOOGLE_SERVICE_ACCOUNT_EMAIL / GOOGLE_PRIVATE_KEY not set."
                )
        return self._gc

    def first_worksheet(self, sheet_id: str) -> gspread.Worksheet:
        # tab names differ between sheets, so always resolve the first one
        sh = self._client().open_by_key(sheet_id)
        return sh.get_worksheet(0)

    def read_tab(self, sheet_id: str) -> pd.DataFrame:
        """First tab as a header-less DataFrame of strings."""
        # Try public CSV first; if the sheet is private and we have creds, use the service account
        try:
            return _read_csv_via_httpx(csv_export_url(sheet_id))
        except httpx.HTTPStatusError as e:
            if not self.has_credentials:
                raise
            logger.debug("csv export refused (%s); falling back to gspread", e.response.status_code)
        rows = self.first_worksheet(sheet_id).get_all_values()
        return pd.DataFrame(rows, dtype=str)

    def query_column(self, sheet_id: str, column_index: int) -> List[str]:
        """
        Values of one column (0-based) of the first tab, keeping only URLs.
        An unset sheet id reads as empty.
        """
        if not sheet_id:
            return []
        df = self.read_tab(sheet_id)
        if df.empty or column_index >= df.shape[1]:
            return []
        values = df.iloc[:, column_index].dropna().astype(str).str.strip()
        return [v for v in values.tolist() if v.startswith("http")]

    def append_rows(self, sheet_id: str, rows: Sequence[Sequence[str]]) -> int:
        """
        Append rows at the bottom of the first tab. Never overwrites.
        Returns number of rows appended (0 when there is nothing to do).
        """
        if not sheet_id:
            logger.info("no spreadsheet id provided; skipping sheet upload")
            return 0
        if not rows:
            return 0
        ws = self.first_worksheet(sheet_id)
        ws.append_rows([list(r) for r in rows], value_input_option="USER_ENTERED", table_range="A1")
        logger.info("appended %d rows to sheet %r (%s...)", len(rows), ws.title, sheet_id[:5])
        return len(rows)
