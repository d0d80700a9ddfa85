"""Player search over the catalog: filters, metric ranking and ironmen modes.

Ironmen modes replace the manual games filter:

  - "pct10": keep players at or above the 90th percentile of games played
    (nearest rank) among players passing the other filters
  - "closest_leader": sort by games descending, then by metric, and show
    at least 15 players
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from ingest.sheets.players_parser import Player
from league_utils.coerce import parse_number
from league_utils.text import normalize_name, normalize_team

METRICS = ("fpts", "fpg", "fp$", "fpg$")
IRONMEN_MODES = ("", "pct10", "closest_leader")
MAX_TOP_N = 200
CLOSEST_LEADER_MIN_N = 15


@dataclass
class PlayerQuery:
    """Query settings; ``None`` disables a bound."""

    teams: list[str] = field(default_factory=list)
    search: str = ""
    position: str = ""
    min_age: float = 20
    max_age: float | None = None
    max_salary: float | None = None
    min_games: float | None = None
    metric: str = "fpg"
    top_n: int = 10
    ironmen_mode: str = ""


PRESETS: dict[str, PlayerQuery] = {
    "young_stars": PlayerQuery(min_age=20, max_age=24, metric="fpg", top_n=10),
    "ironmen_pct": PlayerQuery(ironmen_mode="pct10", metric="fpg", top_n=15),
    "ironmen_leader": PlayerQuery(ironmen_mode="closest_leader", metric="fpg", top_n=15),
    "cheap_value": PlayerQuery(max_salary=10_000_000, min_games=20, metric="fp$", top_n=15),
    "superstars": PlayerQuery(min_games=40, metric="fpts", top_n=10),
    "efficiency": PlayerQuery(min_games=30, metric="fpg$", top_n=15),
}


@dataclass(frozen=True)
class QueryRow:
    player_id: str
    name: str
    owner: str
    position: str
    age: float
    games: float
    salary_now: float
    metric: float


@dataclass
class QueryResult:
    rows: list[QueryRow]
    games_threshold: float | None = None
    games_leader: float | None = None


def percentile_90(values: Sequence[float]) -> float:
    """Nearest-rank 90th percentile; 0 for an empty sequence."""
    arr = sorted(v for v in values if math.isfinite(v))
    if not arr:
        return 0.0
    idx = max(0, min(len(arr) - 1, math.ceil(0.9 * len(arr)) - 1))
    return arr[idx]


def metric_value(player: Player, metric: str) -> float:
    return player.stats.as_metrics().get(metric, player.stats.fpg_per_dollar)


def passes_base_filters(player: Player, query: PlayerQuery) -> bool:
    """All filters except games played."""
    if not player.name:
        return False
    if query.teams:
        wanted = {normalize_team(t) for t in query.teams}
        if normalize_team(player.team_id) not in wanted:
            return False
    needle = normalize_name(query.search)
    if needle and needle not in normalize_name(player.name):
        return False
    pos = normalize_name(query.position)
    if pos and pos not in normalize_name(player.position):
        return False
    age = parse_number(player.age)
    if query.min_age and age < query.min_age:
        return False
    if query.max_age is not None and age > query.max_age:
        return False
    if query.max_salary is not None and player.salary_now > query.max_salary:
        return False
    return True


def run_query(players: Sequence[Player], query: PlayerQuery) -> QueryResult:
    """Filter, rank and trim the catalog.

    Raises:
        ValueError: If the metric or ironmen mode is unknown
    """
    if query.metric not in METRICS:
        raise ValueError(f"Unknown metric: {query.metric}")
    if query.ironmen_mode not in IRONMEN_MODES:
        raise ValueError(f"Unknown ironmen mode: {query.ironmen_mode}")

    base = [p for p in players if passes_base_filters(p, query)]
    games = [p.stats.games for p in base]
    leader = max(games, default=0.0) if query.ironmen_mode else None
    threshold = None

    if query.ironmen_mode == "pct10":
        threshold = percentile_90(games)
        selected = [p for p in base if p.stats.games >= threshold]
    elif query.ironmen_mode == "closest_leader":
        selected = list(base)
    elif query.min_games is not None:
        selected = [p for p in base if p.stats.games >= query.min_games]
    else:
        selected = list(base)

    rows = [
        QueryRow(
            player_id=p.player_id,
            name=p.name,
            owner=p.team_id,
            position=p.position,
            age=parse_number(p.age),
            games=p.stats.games,
            salary_now=p.salary_now,
            metric=metric_value(p, query.metric),
        )
        for p in selected
    ]
    if query.ironmen_mode == "closest_leader":
        rows.sort(key=lambda r: (-r.games, -r.metric))
    else:
        rows.sort(key=lambda r: -r.metric)

    n = max(1, min(MAX_TOP_N, query.top_n or 10))
    if query.ironmen_mode == "closest_leader":
        n = max(n, CLOSEST_LEADER_MIN_N)
    return QueryResult(rows=rows[:n], games_threshold=threshold, games_leader=leader)


def preset(name: str, **overrides) -> PlayerQuery:
    """A copy of a named preset with optional field overrides."""
    return replace(PRESETS[name], **overrides)
