"""Season-by-season player trends and career arc summary."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ingest.sheets.players_parser import Player

TREND_START_YEAR = 2020
BOTTOM_RANK = 459  # league bottom rank, used for seasons with zero games


@dataclass(frozen=True)
class TrendPoint:
    year: int
    value: float | None
    is_dnp: bool = False
    games: int | None = None


def _years(start_year: int, current_year: int | None) -> range:
    end = current_year if current_year is not None else date.today().year
    return range(start_year, end + 1)


def rank_trend(
    player: Player, start_year: int = TREND_START_YEAR, current_year: int | None = None
) -> list[TrendPoint]:
    """Overall rank per season; a season with 0 games counts as bottom rank."""
    years = _years(start_year, current_year)
    points = []
    for y in years:
        current = y == years[-1]
        rank = player.hist.get("rank" if current else f"{y} rank")
        games = player.hist.get("g" if current else f"{y} g")
        games_int = int(games) if games is not None else None
        is_dnp = games_int == 0
        points.append(
            TrendPoint(year=y, value=BOTTOM_RANK if is_dnp else rank, is_dnp=is_dnp, games=games_int)
        )
    return points


def fpts_trend(
    player: Player, start_year: int = TREND_START_YEAR, current_year: int | None = None
) -> list[TrendPoint]:
    """Fantasy points per game per season."""
    years = _years(start_year, current_year)
    return [
        TrendPoint(year=y, value=player.hist.get("fpts/g" if y == years[-1] else f"{y} fpts/g"))
        for y in years
    ]


def salary_trend(
    player: Player, start_year: int = TREND_START_YEAR, current_year: int | None = None
) -> list[TrendPoint]:
    return [
        TrendPoint(year=y, value=player.salary_history.get(str(y)))
        for y in _years(start_year, current_year)
    ]


@dataclass(frozen=True)
class SeasonMark:
    year: int
    value: float


@dataclass(frozen=True)
class RankMove:
    from_year: int
    to_year: int
    delta: float


@dataclass(frozen=True)
class CareerArc:
    best_rank: SeasonMark | None
    worst_rank: SeasonMark | None
    best_fpts: SeasonMark | None
    biggest_jump: RankMove | None
    biggest_drop: RankMove | None
    salary_peak: SeasonMark | None


def _known(points: list[TrendPoint]) -> list[SeasonMark]:
    return [SeasonMark(p.year, p.value) for p in points if p.value is not None]


def career_arc(
    ranks: list[TrendPoint], fpts: list[TrendPoint], salaries: list[TrendPoint]
) -> CareerArc:
    """Best/worst seasons and the largest year-over-year rank moves.

    Lower rank is better; a jump is an improvement, a drop a decline. Ties
    keep the earliest season.
    """
    rank_points = _known(ranks)
    fpts_points = _known(fpts)
    salary_points = _known(salaries)

    best_rank = min(rank_points, key=lambda p: p.value, default=None)
    worst_rank = max(rank_points, key=lambda p: p.value, default=None)
    best_fpts = max(fpts_points, key=lambda p: p.value, default=None)
    salary_peak = max(salary_points, key=lambda p: p.value, default=None)

    jump: RankMove | None = None
    drop: RankMove | None = None
    for prev, curr in zip(rank_points, rank_points[1:]):
        diff = curr.value - prev.value
        if diff < 0 and (jump is None or -diff > jump.delta):
            jump = RankMove(prev.year, curr.year, -diff)
        elif diff > 0 and (drop is None or diff > drop.delta):
            drop = RankMove(prev.year, curr.year, diff)

    return CareerArc(
        best_rank=best_rank,
        worst_rank=worst_rank,
        best_fpts=best_fpts,
        biggest_jump=jump,
        biggest_drop=drop,
        salary_peak=salary_peak,
    )
