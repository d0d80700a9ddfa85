from __future__ import annotations

import json

import pytest
import requests

from ingest.sheets.grid_access import (
    SheetFetchError,
    SheetsClient,
    create_gspread_client,
    csv_to_grid,
    fill_forward,
    gviz_cell,
    gviz_to_grid,
    overview_team_tabs,
    unwrap_gviz,
)

GVIZ_PAYLOAD = {
    "table": {
        "cols": [{"label": "Date"}, {"label": "Amount"}, {"label": ""}],
        "rows": [
            {"c": [{"v": "Date(2024,0,15)", "f": "15/01/2024"}, {"v": 2024.0, "f": "2.024"}]},
            {"c": [None, {"v": 119.0}, {"v": "  text\r "}]},
        ],
    }
}


def _wrap(payload: dict) -> str:
    return "/*O_o*/\ngoogle.visualization.Query.setResponse(" + json.dumps(payload) + ");"


class _FakeResponse:
    def __init__(self, text: str = "", status: int = 200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, responses: list):
        self._responses = list(responses)
        self.calls: list[dict] = []

    def get(self, url, timeout=None):
        self.calls.append({"url": url, "timeout": timeout})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class TestGviz:
    """Test GViz payload handling."""

    def test_unwrap(self):
        assert unwrap_gviz(_wrap(GVIZ_PAYLOAD)) == GVIZ_PAYLOAD

    def test_unwrap_malformed(self):
        with pytest.raises(SheetFetchError):
            unwrap_gviz("<html>login</html>")
        with pytest.raises(SheetFetchError):
            unwrap_gviz("setResponse({not json});")

    def test_raw_grid(self):
        grid = gviz_to_grid(GVIZ_PAYLOAD)
        assert grid == [["Date(2024,0,15)", "2024", ""], ["", "119", "text"]]

    def test_formatted_grid(self):
        grid = gviz_to_grid(GVIZ_PAYLOAD, prefer="formatted")
        assert grid[0][:2] == ["15/01/2024", "2.024"]
        assert grid[1][1] == "119"

    def test_cell_fallbacks(self):
        assert gviz_cell(None) == ""
        assert gviz_cell({"f": "only formatted"}) == "only formatted"
        assert gviz_cell({"v": True}) == "true"
        assert gviz_cell({"v": 1.5}) == "1.5"

    def test_overview_team_tabs(self):
        payload = {
            "table": {
                "rows": [
                    {"c": [{"v": "Alpha", "f": "=HYPERLINK(\"#gid=12345\")"}, {"v": "Team Alpha"}]},
                    {"c": [{"v": "Beta", "f": "Beta"}, {"v": "Team Beta"}]},
                    {"c": [{"v": "Gamma", "f": "#gid=999"}]},
                ]
            }
        }
        assert overview_team_tabs(payload) == {
            "Team Alpha": {"sheet_name": "Alpha", "gid": "12345"}
        }


class TestCsvAndRows:
    """Test CSV parsing and row helpers."""

    def test_csv_quoted_fields(self):
        text = 'Player,Note\n"O\'Neal, Kevin","line1\nline2"\n'
        assert csv_to_grid(text) == [["Player", "Note"], ["O'Neal, Kevin", "line1\nline2"]]

    def test_fill_forward(self):
        assert fill_forward(["2024", "", None, "Total", ""]) == [
            "2024",
            "2024",
            "2024",
            "Total",
            "Total",
        ]


class TestSheetsClient:
    """Test HTTP fetch with retry."""

    def test_fetch_gviz_grid(self):
        session = _FakeSession([_FakeResponse(_wrap(GVIZ_PAYLOAD))])
        client = SheetsClient(session=session, timeout=5)
        grid = client.fetch_gviz_grid("sheet123", 42)
        assert grid[1][1] == "119"
        assert "sheet123/gviz/tq?gid=42" in session.calls[0]["url"]
        assert session.calls[0]["timeout"] == 5

    def test_fetch_csv_grid(self):
        session = _FakeSession([_FakeResponse("a,b\n1,2\n")])
        grid = SheetsClient(session=session).fetch_csv_grid("sheet123", "7")
        assert grid == [["a", "b"], ["1", "2"]]
        assert "export?format=csv&gid=7" in session.calls[0]["url"]

    def test_retries_then_succeeds(self):
        session = _FakeSession(
            [requests.ConnectionError("boom"), _FakeResponse("x\n")]
        )
        client = SheetsClient(session=session, backoff_seconds=0)
        assert client.fetch_csv_grid("s", 1) == [["x"]]
        assert len(session.calls) == 2

    def test_gives_up_after_max_retries(self):
        session = _FakeSession([_FakeResponse(status=500)] * 3)
        client = SheetsClient(session=session, max_retries=3, backoff_seconds=0)
        with pytest.raises(SheetFetchError, match="after 3 attempts"):
            client.fetch_csv_grid("s", 1)
        assert len(session.calls) == 3


class TestGspreadClient:
    """Test service account configuration."""

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
        monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS_JSON", raising=False)
        with pytest.raises(SheetFetchError, match="Missing Google credentials"):
            create_gspread_client()
