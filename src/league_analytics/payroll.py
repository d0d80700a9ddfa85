"""Team payroll derived from the player catalog (pure functions).

Teams are not a table of their own: a team is the set of players sharing a
normalized owner string. Salaries are summed in the sheet's salary unit;
team-sheet waiver amounts are stated in millions and scaled by
``WAIVER_AMOUNT_UNIT`` before they are added.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

import polars as pl

from ingest.sheets.players_parser import Player
from league_utils.text import normalize_team

SALARY_CAP = 200_000_000
WAIVER_AMOUNT_UNIT = 1_000_000
UNASSIGNED = "UNASSIGNED"
MINORS_STATUS = "M"

Payroll = dict[str, dict[str, float]]


def compute_team_payroll_by_year(
    players: Iterable[Player],
    years: Sequence[str],
    teams: Iterable[str] | None = None,
) -> Payroll:
    """Sum salaries per team per year.

    Args:
        players: Player slice to aggregate (the full catalog or a what-if)
        years: Salary years to report
        teams: Optional pre-seeded teams, kept even with no players

    Returns:
        team → year → total salary. Team keys are the first-seen display
        string for each normalized owner; owner-less players land in
        ``UNASSIGNED``.
    """
    years = [str(y) for y in years]
    display: dict[str, str] = {}
    payroll: Payroll = {}

    def bucket(team: str) -> dict[str, float]:
        key = normalize_team(team) if team else UNASSIGNED.lower()
        if key not in display:
            display[key] = team if team else UNASSIGNED
            payroll[display[key]] = {y: 0.0 for y in years}
        return payroll[display[key]]

    for team in teams or []:
        bucket(team.strip())

    for p in players:
        row = bucket(p.team_id.strip())
        for y in years:
            row[y] += p.salary_by_year.get(y, 0.0)

    return payroll


def waiver_hit(
    team: str,
    year: str | int,
    waivers_by_team: Mapping[str, Mapping[str, float]] | None,
    unit: float = WAIVER_AMOUNT_UNIT,
) -> float:
    """Waiver cap hit for a team/year in salary units."""
    if not waivers_by_team:
        return 0.0
    key = normalize_team(team)
    for name, by_year in waivers_by_team.items():
        if normalize_team(name) == key:
            return float(by_year.get(str(year), 0.0) or 0.0) * unit
    return 0.0


def team_payroll_for_year(
    players: Iterable[Player],
    team: str,
    year: str | int,
    waivers_by_team: Mapping[str, Mapping[str, float]] | None = None,
    waiver_unit: float = WAIVER_AMOUNT_UNIT,
) -> float:
    """Roster salary plus waiver hit for one team and one year."""
    key = normalize_team(team)
    base = sum(p.salary_for(year) for p in players if normalize_team(p.team_id) == key)
    return base + waiver_hit(team, year, waivers_by_team, waiver_unit)


def team_payroll_by_year(
    players: Sequence[Player],
    years: Sequence[str],
    waivers_by_team: Mapping[str, Mapping[str, float]] | None = None,
    waiver_unit: float = WAIVER_AMOUNT_UNIT,
    teams: Iterable[str] | None = None,
) -> Payroll:
    """Payroll including waiver hits for every owned or pre-seeded team.

    Pre-seeded teams (e.g. known only from their team sheet) are kept even
    with no players.
    """
    display: dict[str, str] = {}
    for team in list(teams or []) + [p.team_id for p in players]:
        if team.strip():
            display.setdefault(normalize_team(team), team.strip())
    return {
        t: {
            str(y): team_payroll_for_year(players, t, y, waivers_by_team, waiver_unit)
            for y in years
        }
        for t in display.values()
    }


@dataclass
class SalaryYearSummary:
    """Cap position of one team for one season."""

    year: str
    roster: float
    minors: float
    waiver: float
    cap_space: float


def team_salary_summary(
    players: Iterable[Player],
    team: str,
    years: Sequence[str | int],
    waivers_by_year: Mapping[str, float] | None = None,
    cap: float = SALARY_CAP,
    waiver_unit: float = WAIVER_AMOUNT_UNIT,
) -> list[SalaryYearSummary]:
    """Roster/minors/waiver split and cap space per season.

    Minor-league contracts (status "M") do not count against the cap. The
    waiver hit is included in ``roster``.
    """
    key = normalize_team(team)
    roster_players = [p for p in players if normalize_team(p.team_id) == key]
    out: list[SalaryYearSummary] = []
    for y in years:
        year = str(y)
        minors = sum(p.salary_for(year) for p in roster_players if p.contract_status == MINORS_STATUS)
        active = sum(p.salary_for(year) for p in roster_players if p.contract_status != MINORS_STATUS)
        waiver = float((waivers_by_year or {}).get(year, 0.0)) * waiver_unit
        out.append(
            SalaryYearSummary(
                year=year,
                roster=active + waiver,
                minors=minors,
                waiver=waiver,
                cap_space=cap - (active + waiver),
            )
        )
    return out


def payroll_to_frame(payroll: Mapping[str, Mapping[str, float]]) -> pl.DataFrame:
    """Long payroll table (team, year, payroll) sorted by team and year."""
    rows = [[team, int(y), float(v)] for team, by_year in payroll.items() for y, v in by_year.items()]
    return pl.DataFrame(
        rows,
        schema={"team": pl.Utf8, "year": pl.Int64, "payroll": pl.Float64},
        orient="row",
    ).sort(["team", "year"])
