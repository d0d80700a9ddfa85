"""Google Sheets tab access → raw string grids.

Everything here returns ``list[list[str]]`` with no semantic
interpretation. Three transports are supported:

  - GViz JSON (``/gviz/tq``): public sheets; exposes both raw and formatted
    cell values
  - CSV export (``/export?format=csv``): public sheets; formatted values
  - gspread: private sheets via a service account

Network failures surface as ``SheetFetchError``.
"""

from __future__ import annotations

import base64
import csv
import io
import json
import math
import os
import re
import time
from collections.abc import Sequence
from typing import Any

import gspread
import requests
from google.oauth2 import service_account

SHEETS_BASE_URL = "https://docs.google.com/spreadsheets/d"
READONLY_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

_SET_RESPONSE_RE = re.compile(r"setResponse\(([\s\S]*)\);?\s*$")
_GID_RE = re.compile(r"gid=(\d+)")


class SheetFetchError(RuntimeError):
    """Raised when a sheet tab cannot be fetched or decoded."""


def gviz_url(sheet_id: str, gid: str | int) -> str:
    return f"{SHEETS_BASE_URL}/{sheet_id}/gviz/tq?gid={gid}&tqx=out:json"


def csv_export_url(sheet_id: str, gid: str | int) -> str:
    return f"{SHEETS_BASE_URL}/{sheet_id}/export?format=csv&gid={gid}"


def unwrap_gviz(text: str) -> dict[str, Any]:
    """Strip the ``google.visualization.Query.setResponse(...)`` wrapper.

    Raises:
        SheetFetchError: If the wrapper or its JSON payload is malformed
    """
    m = _SET_RESPONSE_RE.search(text or "")
    if not m:
        raise SheetFetchError("GViz response could not be unwrapped")
    try:
        return json.loads(m.group(1))
    except json.JSONDecodeError as e:
        raise SheetFetchError(f"GViz payload is not valid JSON: {e}") from e


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def gviz_cell(cell: dict[str, Any] | None, prefer: str = "raw") -> str:
    """Cell text: ``v`` then ``f`` ("raw") or ``f`` then ``v`` ("formatted")."""
    if not cell:
        return ""
    order = ("v", "f") if prefer == "raw" else ("f", "v")
    for k in order:
        if cell.get(k) is not None:
            return _scalar(cell[k]).replace("\r", "").strip()
    return ""


def gviz_column_labels(payload: dict[str, Any]) -> list[str]:
    cols = (payload.get("table") or {}).get("cols") or []
    return [str(c.get("label") or "").strip() for c in cols]


def gviz_to_grid(payload: dict[str, Any], prefer: str = "raw") -> list[list[str]]:
    """Convert a GViz table to a rectangular grid padded to the widest row."""
    table = payload.get("table") or {}
    cols = table.get("cols") or []
    rows = table.get("rows") or []
    width = max([len(cols), *(len(r.get("c") or []) for r in rows)])
    grid = []
    for r in rows:
        cells = r.get("c") or []
        grid.append([gviz_cell(cells[i] if i < len(cells) else None, prefer) for i in range(width)])
    return grid


def csv_to_grid(text: str) -> list[list[str]]:
    """Parse CSV export text (quoted fields, embedded commas and newlines)."""
    return [list(row) for row in csv.reader(io.StringIO(text))]


def fill_forward(row: Sequence[object]) -> list[str]:
    """Repeat the last non-blank value across blanks (merged-cell rows)."""
    out = []
    last = ""
    for v in row:
        s = "" if v is None else str(v).replace("\r", "").strip()
        if s:
            last = s
        out.append(last)
    return out


def overview_team_tabs(payload: dict[str, Any]) -> dict[str, dict[str, str]]:
    """Team → team-sheet tab from the league Overview tab.

    Column A holds a hyperlinked sheet name whose formatted text carries
    ``gid=<n>``; column B holds the team. Rows lacking any part are skipped.
    """
    mapping: dict[str, dict[str, str]] = {}
    for row in (payload.get("table") or {}).get("rows") or []:
        cells = row.get("c") or []
        if len(cells) < 2 or not cells[0] or not cells[1]:
            continue
        sheet_name = _scalar(cells[0].get("v")).strip()
        team = _scalar(cells[1].get("v")).strip()
        m = _GID_RE.search(str(cells[0].get("f") or ""))
        if sheet_name and team and m:
            mapping[team] = {"sheet_name": sheet_name, "gid": m.group(1)}
    return mapping


class SheetsClient:
    """HTTP access to public sheet tabs with retry."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: int = 30,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
    ):
        """Initialize the client.

        Args:
            session: Optional requests session (defaults to a new one)
            timeout: Per-request timeout in seconds
            max_retries: Attempts per request
            backoff_seconds: Base of the exponential backoff between attempts
        """
        self._session = session or requests.Session()
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds

    def _get_text(self, url: str) -> str:
        for attempt in range(self.max_retries):
            try:
                response = self._session.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.text
            except requests.exceptions.RequestException as e:
                if attempt == self.max_retries - 1:
                    raise SheetFetchError(
                        f"Failed to fetch {url} after {self.max_retries} attempts: {e}"
                    ) from e
                time.sleep(self.backoff_seconds * 2**attempt)
        raise SheetFetchError(f"Failed to fetch {url}")

    def fetch_gviz(self, sheet_id: str, gid: str | int) -> dict[str, Any]:
        return unwrap_gviz(self._get_text(gviz_url(sheet_id, gid)))

    def fetch_gviz_grid(
        self, sheet_id: str, gid: str | int, prefer: str = "raw"
    ) -> list[list[str]]:
        return gviz_to_grid(self.fetch_gviz(sheet_id, gid), prefer=prefer)

    def fetch_csv_grid(self, sheet_id: str, gid: str | int) -> list[list[str]]:
        return csv_to_grid(self._get_text(csv_export_url(sheet_id, gid)))

    def fetch_overview(self, sheet_id: str, gid: str | int) -> dict[str, dict[str, str]]:
        return overview_team_tabs(self.fetch_gviz(sheet_id, gid))


def create_gspread_client() -> gspread.Client:
    """Create an authenticated gspread client from env credentials.

    Reads ``GOOGLE_APPLICATION_CREDENTIALS_JSON`` (base64 service account
    JSON, for CI) before ``GOOGLE_APPLICATION_CREDENTIALS`` (file path).

    Raises:
        SheetFetchError: If no credentials are configured
    """
    creds_json = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
    if creds_json:
        info = json.loads(base64.b64decode(creds_json))
        creds = service_account.Credentials.from_service_account_info(
            info, scopes=READONLY_SCOPES
        )
        return gspread.authorize(creds)

    creds_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if creds_path:
        creds = service_account.Credentials.from_service_account_file(
            creds_path, scopes=READONLY_SCOPES
        )
        return gspread.authorize(creds)

    raise SheetFetchError(
        "Missing Google credentials. Set GOOGLE_APPLICATION_CREDENTIALS or "
        "GOOGLE_APPLICATION_CREDENTIALS_JSON"
    )


def fetch_worksheet_grid(
    client: gspread.Client, sheet_id: str, *, title: str | None = None, gid: int | None = None
) -> list[list[str]]:
    """All values of one worksheet, selected by title or gid."""
    spreadsheet = client.open_by_key(sheet_id)
    try:
        if title is not None:
            worksheet = spreadsheet.worksheet(title)
        elif gid is not None:
            worksheet = spreadsheet.get_worksheet_by_id(int(gid))
        else:
            raise ValueError("fetch_worksheet_grid needs a title or a gid")
    except gspread.exceptions.WorksheetNotFound as e:
        raise SheetFetchError(f"Worksheet not found in {sheet_id}: {title or gid}") from e
    return [[str(c).replace("\r", "").strip() for c in row] for row in worksheet.get_all_values()]


def list_worksheets(client: gspread.Client, sheet_id: str) -> list[dict[str, Any]]:
    """Tab titles and gids of a spreadsheet."""
    return [{"title": ws.title, "gid": ws.id} for ws in client.open_by_key(sheet_id).worksheets()]
