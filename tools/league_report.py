"""League sheet report runner.

Options:
- Fetch tabs from the league Google Sheet (public GViz/CSV endpoints)
- Or parse a local directory of CSV exports (``players.csv``, ``history.csv``,
  ``transactions.csv``, ``player_options.csv`` and ``teams/<Team>.csv``)

Outputs:
- A JSON summary on stdout (catalog size, season, payroll, cap status,
  ledger counts, parse warnings)
- Optional what-if trade evaluation (``--trade "Team A=Player 1,Player 2"``)
- Optional CSV previews of the parsed tables in ``--out-csv``

Environment (loaded from ``.env``):
- LEAGUE_SHEET_ID, LEAGUE_<TAB>_GID
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from pathlib import Path

from dotenv import load_dotenv

from flows.config import DEFAULT_TRADE_YEAR_COUNT, SALARY_CAP, get_sheet_id, get_tab_gid
from flows.load_league_flow import TAB_TRANSPORTS
from ingest.sheets.grid_access import SheetFetchError, SheetsClient, csv_to_grid
from ingest.sheets.players_parser import players_to_frame, salary_long_frame
from ingest.sheets.transactions_parser import annotate_ledger, count_by_type, ledger_to_frame
from league_analytics.payroll import payroll_to_frame
from league_analytics.snapshot import SOURCES, LeagueSnapshot, build_league_snapshot
from league_analytics.trade_simulator import (
    default_trade_years,
    simulate_trade,
    trade_result_to_frame,
)


def _read_local(in_dir: Path) -> tuple[dict, dict]:
    grids = {}
    for source in SOURCES:
        path = in_dir / f"{source}.csv"
        if path.exists():
            grids[source] = csv_to_grid(path.read_text(encoding="utf-8"))
    team_grids = {}
    teams_dir = in_dir / "teams"
    if teams_dir.is_dir():
        for path in sorted(teams_dir.glob("*.csv")):
            team_grids[path.stem] = csv_to_grid(path.read_text(encoding="utf-8"))
    return grids, team_grids


def _fetch_remote(sheet_id: str, include_teams: bool) -> tuple[dict, dict]:
    client = SheetsClient()
    grids = {}
    for tab, (transport, prefer) in TAB_TRANSPORTS.items():
        gid = get_tab_gid(tab)
        try:
            if transport == "gviz":
                grids[tab] = client.fetch_gviz_grid(sheet_id, gid, prefer=prefer or "raw")
            else:
                grids[tab] = client.fetch_csv_grid(sheet_id, gid)
        except SheetFetchError as e:
            print(f"⚠️  {tab}: {e}")

    team_grids = {}
    if include_teams:
        for team, tab in client.fetch_overview(sheet_id, get_tab_gid("overview")).items():
            try:
                team_grids[team] = client.fetch_csv_grid(sheet_id, tab["gid"])
            except SheetFetchError as e:
                print(f"⚠️  {team}: {e}")
    return grids, team_grids


def _parse_trade(entries: list[str]) -> dict[str, list[str]]:
    """``["Team A=P1,P2", "Team B=P3"]`` → ``{"Team A": ["P1", "P2"], "Team B": ["P3"]}``."""
    trade: dict[str, list[str]] = {}
    for entry in entries:
        team, sep, names = entry.partition("=")
        if not sep or not team.strip():
            raise SystemExit(f"Invalid --trade value (expected 'Team=Player,...'): {entry}")
        trade.setdefault(team.strip(), []).extend(n.strip() for n in names.split(",") if n.strip())
    return trade


def _summary(snapshot: LeagueSnapshot) -> dict:
    catalog = snapshot.catalog
    summary: dict = {
        "missing_sources": snapshot.missing,
        "errors": snapshot.errors,
        "players": len(catalog.players) if catalog else 0,
        "current_season": catalog.current_season if catalog else None,
        "salary_years": catalog.years if catalog else [],
        "salary_block_phase": catalog.salary_block.phase if catalog else None,
        "teams": catalog.teams() if catalog else [],
        "cap_payroll": snapshot.cap_payroll,
        "over_cap": [
            {"team": team, "year": year, "payroll": amount}
            for team, by_year in snapshot.cap_payroll.items()
            for year, amount in by_year.items()
            if amount > SALARY_CAP
        ],
        "transactions": len(snapshot.transactions),
        "transactions_by_type": count_by_type(snapshot.transactions),
        "history_years": snapshot.history.years if snapshot.history else [],
        "history_rows": len(snapshot.history.rows) if snapshot.history else 0,
        "player_options": snapshot.player_options.option_count()
        if snapshot.player_options
        else 0,
        "team_sheets": {
            team: {"gm": sheet.gm, "waivers": sheet.waivers, "picks_phase": sheet.picks_phase}
            for team, sheet in snapshot.team_sheets.items()
        },
    }
    if catalog:
        summary["parse_warnings"] = catalog.warnings.by_field()
    return summary


def _write_previews(snapshot: LeagueSnapshot, transactions_grid, out_csv: Path) -> None:
    out_csv.mkdir(parents=True, exist_ok=True)
    if snapshot.catalog is not None:
        players_to_frame(snapshot.catalog.players).write_csv(out_csv / "players.csv")
        salary_long_frame(snapshot.catalog.players).write_csv(out_csv / "salaries.csv")
        payroll_to_frame(snapshot.cap_payroll).write_csv(out_csv / "payroll.csv")
    if transactions_grid is not None:
        ledger_to_frame(annotate_ledger(transactions_grid)).write_csv(out_csv / "ledger.csv")


def main() -> int:
    """Load the league sheet, print a summary and optionally evaluate a trade."""
    # Load .env so sheet ids in .env are available
    load_dotenv()
    p = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    g = p.add_mutually_exclusive_group()
    g.add_argument("--in-dir", type=Path, help="Directory of local CSV exports")
    g.add_argument("--sheet-id", help="League spreadsheet id (default: LEAGUE_SHEET_ID)")
    p.add_argument("--no-teams", action="store_true", help="Skip per-team sheets")
    p.add_argument(
        "--trade",
        action="append",
        default=[],
        help="Receiving team and player names, e.g. 'Team A=Player 1,Player 2' (repeatable)",
    )
    p.add_argument(
        "--years", type=int, default=DEFAULT_TRADE_YEAR_COUNT, help="Trade years to evaluate"
    )
    p.add_argument("--out-csv", type=Path, help="Write CSV previews of parsed tables here")
    args = p.parse_args()

    if args.in_dir:
        grids, team_grids = _read_local(args.in_dir)
    else:
        grids, team_grids = _fetch_remote(args.sheet_id or get_sheet_id(), not args.no_teams)

    snapshot = build_league_snapshot(grids, team_grids)
    report = _summary(snapshot)

    if args.trade:
        if snapshot.catalog is None:
            raise SystemExit("Cannot simulate a trade without a player catalog")
        catalog = snapshot.catalog
        years = default_trade_years(catalog.years, catalog.current_season, args.years)
        result = simulate_trade(
            _parse_trade(args.trade), catalog.players, years, snapshot.cap_payroll, SALARY_CAP
        )
        report["trade"] = {
            "moves": [asdict(m) for m in result.moves],
            "missing": [asdict(m) for m in result.missing],
            "impact": trade_result_to_frame(result).to_dicts(),
            "fp_net": {t.team_id: t.fp_net for t in result.teams},
        }

    if args.out_csv:
        _write_previews(snapshot, grids.get("transactions"), args.out_csv)

    print(json.dumps(report, indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
