"""Prefect flow for loading the league spreadsheet into a parsed snapshot.

This flow fetches every league tab, parses it with the pure sheet parsers,
derives payroll, and runs governance validation on the resulting tables.
Nothing is written back: the sheet is the source of truth and every run
recomputes from it.

Architecture:
    1. Resolve team sheet tabs from the Overview tab
    2. Fetch the league tabs and team sheets concurrently
    3. Build the league snapshot (players, payroll, ledger, history, options)
    4. Validate row counts, required columns and cap compliance

Transports:
    - players and team sheets: CSV export (formatted values)
    - history: GViz, raw values (tenths-of-percent integers)
    - transactions and player options: GViz, formatted values (dd/mm/yyyy dates)
    - gspread instead of the public endpoints when ``use_service_account``

Production Hardening:
    - fetch_tab_grid: retries per FETCH_RETRY (handles HTTP transients);
      the HTTP client itself makes one attempt per task run
    - a tab that still fails is logged and left out of the snapshot
"""

from datetime import date

from prefect import flow, task

from flows.config import (
    FETCH_RETRY,
    REQUIRED_COLUMNS,
    ROW_COUNT_MINIMUMS,
    SALARY_CAP,
    WAIVER_AMOUNT_UNIT,
    get_sheet_id,
    get_tab_gid,
)
from flows.utils.notifications import log_info, log_warning
from flows.utils.validation import (
    check_cap_compliance,
    summarize_parse_warnings,
    validate_required_columns,
    validate_row_counts,
)
from ingest.sheets.grid_access import (
    SheetsClient,
    create_gspread_client,
    fetch_worksheet_grid,
)
from ingest.sheets.players_parser import players_to_frame
from ingest.sheets.transactions_parser import annotate_ledger, ledger_to_frame
from league_analytics.payroll import payroll_to_frame
from league_analytics.snapshot import LeagueSnapshot, build_league_snapshot

TAB_TRANSPORTS = {
    "players": ("csv", None),
    "history": ("gviz", "raw"),
    "transactions": ("gviz", "formatted"),
    "player_options": ("gviz", "formatted"),
}


def _sheets_client() -> SheetsClient:
    # single attempt per call; task retries re-run the whole fetch
    return SheetsClient(max_retries=1)


@task(
    name="fetch_tab_grid",
    retries=FETCH_RETRY["retries"],
    retry_delay_seconds=FETCH_RETRY["retry_delay_seconds"],
    tags=["external_api"],
)
def fetch_tab_grid(
    sheet_id: str, gid: str, transport: str = "csv", prefer: str | None = None
) -> list[list[str]]:
    """Fetch one tab as a string grid.

    Args:
        sheet_id: Spreadsheet id
        gid: Tab gid
        transport: "csv", "gviz" or "gspread"
        prefer: GViz value preference ("raw" or "formatted")

    Returns:
        Grid of trimmed strings

    """
    if transport == "gspread":
        return fetch_worksheet_grid(create_gspread_client(), sheet_id, gid=int(gid))
    client = _sheets_client()
    if transport == "gviz":
        return client.fetch_gviz_grid(sheet_id, gid, prefer=prefer or "raw")
    return client.fetch_csv_grid(sheet_id, gid)


@task(
    name="fetch_team_tabs",
    retries=FETCH_RETRY["retries"],
    retry_delay_seconds=FETCH_RETRY["retry_delay_seconds"],
    tags=["external_api"],
)
def fetch_team_tabs(sheet_id: str, overview_gid: str) -> dict:
    """Team → {sheet_name, gid} from the Overview tab."""
    return _sheets_client().fetch_overview(sheet_id, overview_gid)


@task(name="build_snapshot")
def build_snapshot(grids: dict, team_grids: dict, today: date | None = None) -> LeagueSnapshot:
    """Parse all fetched grids into a league snapshot."""
    return build_league_snapshot(
        grids, team_grids, today=today, waiver_unit=WAIVER_AMOUNT_UNIT
    )


@task(name="tabulate_snapshot")
def tabulate_snapshot(snapshot: LeagueSnapshot, transactions_grid: list | None) -> dict:
    """Tables for governance checks, keyed like ROW_COUNT_MINIMUMS."""
    tables = {}
    if snapshot.catalog is not None:
        tables["players"] = players_to_frame(snapshot.catalog.players)
        tables["payroll"] = payroll_to_frame(snapshot.payroll)
    if transactions_grid is not None:
        tables["transactions"] = ledger_to_frame(annotate_ledger(transactions_grid))
    if snapshot.history is not None and snapshot.history.ok:
        tables["history"] = snapshot.history.rows
    return tables


def _collect(futures: dict, kind: str) -> tuple[dict, list[str]]:
    results, failed = {}, []
    for name, future in futures.items():
        outcome = future.result(raise_on_failure=False)
        if isinstance(outcome, BaseException):
            log_warning(f"Failed to fetch {kind}", context={"error": str(outcome)}, source=name)
            failed.append(name)
            continue
        results[name] = outcome
    return results, failed


@flow(name="load_league_flow")
def load_league_flow(
    sheet_id: str | None = None,
    include_team_sheets: bool = True,
    use_service_account: bool = False,
    today: date | None = None,
) -> dict:
    """Prefect flow for loading the league spreadsheet.

    Args:
        sheet_id: Spreadsheet id (defaults to LEAGUE_SHEET_ID / config)
        include_team_sheets: Also fetch every team sheet listed on Overview
        use_service_account: Fetch through gspread instead of public endpoints
        today: Reference date for season defaults

    Returns:
        Flow result with the snapshot, failed fetches and validation results

    """
    sheet_id = sheet_id or get_sheet_id()
    log_info("Starting load league flow", context={"sheet_id": sheet_id})

    tab_futures = {}
    for tab, (transport, prefer) in TAB_TRANSPORTS.items():
        tab_futures[tab] = fetch_tab_grid.submit(
            sheet_id,
            get_tab_gid(tab),
            "gspread" if use_service_account else transport,
            prefer,
        )

    team_tabs = {}
    if include_team_sheets:
        team_tabs, _ = _collect(
            {"overview": fetch_team_tabs.submit(sheet_id, get_tab_gid("overview"))}, "overview"
        )
        team_tabs = team_tabs.get("overview", {})

    team_futures = {
        team: fetch_tab_grid.submit(
            sheet_id, tab["gid"], "gspread" if use_service_account else "csv"
        )
        for team, tab in team_tabs.items()
    }

    grids, failed_tabs = _collect(tab_futures, "tab")
    team_grids, failed_teams = _collect(team_futures, "team sheet")

    snapshot = build_snapshot(grids, team_grids, today)
    for source, message in snapshot.errors.items():
        log_warning("Source failed to parse", context={"error": message}, source=source)

    tables = tabulate_snapshot(snapshot, grids.get("transactions"))
    row_count_result = validate_row_counts(
        tables, {k: v for k, v in ROW_COUNT_MINIMUMS.items() if k in grids}
    )
    column_result = validate_required_columns(tables, REQUIRED_COLUMNS)
    cap_result = check_cap_compliance(snapshot.cap_payroll, SALARY_CAP)
    warnings_result = (
        summarize_parse_warnings(snapshot.catalog.warnings) if snapshot.catalog else None
    )

    log_info(
        "Load league flow complete",
        context={
            "players": len(snapshot.catalog.players) if snapshot.catalog else 0,
            "transactions": len(snapshot.transactions),
            "team_sheets": len(snapshot.team_sheets),
            "failed": failed_tabs + failed_teams,
        },
    )

    return {
        "snapshot": snapshot,
        "failed_tabs": failed_tabs,
        "failed_team_sheets": failed_teams,
        "row_count_validation": row_count_result,
        "column_validation": column_result,
        "cap_validation": cap_result,
        "parse_warnings": warnings_result,
    }


if __name__ == "__main__":
    result = load_league_flow()
