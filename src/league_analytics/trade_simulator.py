"""What-if trade simulation over the player catalog (pure, no mutation).

A trade is expressed from the receiving side: team → names it receives.
Each resolved name implies a move from the player's current owner to the
receiving team. Per touched team the simulator reports salary impact per
season and fantasy production deltas, plus projected payroll and cap status
when a payroll baseline is supplied.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import polars as pl

from ingest.sheets.players_parser import Player
from league_analytics.payroll import SALARY_CAP
from league_utils.text import normalize_fuzzy, normalize_team

METRICS = ("fpts", "fpg", "fp$", "fpg$")


@dataclass(frozen=True)
class Move:
    player_id: str
    name: str
    from_team_id: str
    to_team_id: str


@dataclass(frozen=True)
class MissingAsset:
    """A typed name that matched no player."""

    team_id: str
    name: str


@dataclass
class YearImpact:
    incoming: float = 0.0
    outgoing: float = 0.0
    net: float = 0.0
    new_payroll: float | None = None
    over_cap: bool | None = None


def _zero_metrics() -> dict[str, float]:
    return {m: 0.0 for m in METRICS}


@dataclass
class TeamImpact:
    """Trade effect on one team."""

    team_id: str
    incoming: list[Player] = field(default_factory=list)
    outgoing: list[Player] = field(default_factory=list)
    by_year: dict[str, YearImpact] = field(default_factory=dict)
    fp_incoming: dict[str, float] = field(default_factory=_zero_metrics)
    fp_outgoing: dict[str, float] = field(default_factory=_zero_metrics)
    fp_net: dict[str, float] = field(default_factory=_zero_metrics)

    @property
    def salary_impact_by_year(self) -> dict[str, float]:
        return {y: cell.net for y, cell in self.by_year.items()}


@dataclass
class TradeResult:
    moves: list[Move]
    missing: list[MissingAsset]
    teams: list[TeamImpact]

    def team(self, team_id: str) -> TeamImpact | None:
        key = normalize_team(team_id)
        return next((t for t in self.teams if normalize_team(t.team_id) == key), None)


def default_trade_years(
    salary_years: Sequence[str], current_season: int, limit: int = 5
) -> list[str]:
    """Salary years from the current season on, capped at ``limit``."""
    upcoming = [y for y in salary_years if int(y) >= current_season]
    return upcoming[:limit]


def _sum_metrics(players: Sequence[Player]) -> dict[str, float]:
    totals = _zero_metrics()
    for p in players:
        for metric, value in p.stats.as_metrics().items():
            totals[metric] += value
    return totals


def _lookup_payroll(
    payroll: Mapping[str, Mapping[str, float]] | None, team_id: str
) -> Mapping[str, float] | None:
    if not payroll:
        return None
    key = normalize_team(team_id)
    return next((v for t, v in payroll.items() if normalize_team(t) == key), None)


def simulate_trade(
    trade: Mapping[str, Sequence[str]],
    players: Sequence[Player],
    years: Sequence[str],
    payroll: Mapping[str, Mapping[str, float]] | None = None,
    cap: float = SALARY_CAP,
) -> TradeResult:
    """Simulate a multi-team trade.

    Args:
        trade: Receiving team → names of the players it receives
        players: Full player catalog (not modified)
        years: Salary years to evaluate
        payroll: Optional team → year → current payroll baseline
        cap: League salary cap used for ``over_cap``

    Returns:
        TradeResult with moves in input order, unresolved names in
        ``missing`` and one TeamImpact per touched team ordered by team id.
        A player both received and sent by a team counts on both sides.
    """
    years = [str(y) for y in years]
    by_name = {normalize_fuzzy(p.name): p for p in players}

    moves: list[Move] = []
    resolved: list[Player] = []
    missing: list[MissingAsset] = []
    for to_team, names in trade.items():
        for raw in names:
            p = by_name.get(normalize_fuzzy(raw))
            if p is None:
                missing.append(MissingAsset(team_id=to_team, name=raw))
                continue
            moves.append(
                Move(player_id=p.player_id, name=p.name, from_team_id=p.team_id, to_team_id=to_team)
            )
            resolved.append(p)

    impacts: dict[str, TeamImpact] = {}

    def impact(team_id: str) -> TeamImpact:
        key = normalize_team(team_id)
        if key not in impacts:
            impacts[key] = TeamImpact(team_id=team_id, by_year={y: YearImpact() for y in years})
        return impacts[key]

    for mv, p in zip(moves, resolved):
        impact(mv.to_team_id).incoming.append(p)
        impact(mv.from_team_id).outgoing.append(p)

    for team in impacts.values():
        baseline = _lookup_payroll(payroll, team.team_id)
        for y in years:
            cell = team.by_year[y]
            cell.incoming = sum(p.salary_for(y) for p in team.incoming)
            cell.outgoing = sum(p.salary_for(y) for p in team.outgoing)
            cell.net = cell.incoming - cell.outgoing
            if baseline is not None and baseline.get(y) is not None:
                cell.new_payroll = baseline[y] + cell.net
                cell.over_cap = cell.new_payroll > cap

        team.fp_incoming = _sum_metrics(team.incoming)
        team.fp_outgoing = _sum_metrics(team.outgoing)
        team.fp_net = {m: team.fp_incoming[m] - team.fp_outgoing[m] for m in METRICS}

    teams = sorted(impacts.values(), key=lambda t: t.team_id.lower())
    return TradeResult(moves=moves, missing=missing, teams=teams)


def trade_result_to_frame(result: TradeResult) -> pl.DataFrame:
    """One row per team per year with salary and payroll columns."""
    rows = [
        [
            t.team_id,
            int(y),
            cell.incoming,
            cell.outgoing,
            cell.net,
            cell.new_payroll,
            cell.over_cap,
        ]
        for t in result.teams
        for y, cell in t.by_year.items()
    ]
    return pl.DataFrame(
        rows,
        schema={
            "team": pl.Utf8,
            "year": pl.Int64,
            "incoming": pl.Float64,
            "outgoing": pl.Float64,
            "net": pl.Float64,
            "new_payroll": pl.Float64,
            "over_cap": pl.Boolean,
        },
        orient="row",
    )
