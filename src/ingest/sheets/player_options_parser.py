"""Player options tab → (player, year) → "T"/"P" lookup (pure parsing).

The options tab is a matrix whose real header row is not the sheet's first
row, so columns get positional keys ``__col_<i>`` and the header row is
found by content: the row (within the first 10) whose player cell reads
"Player" and which holds at least 3 year labels.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from league_utils.coerce import as_year
from league_utils.text import clean_cell, normalize_name

OPTION_CODES = {"T": "Team Option", "P": "Player Option"}
HEADER_SCAN_ROWS = 10
PLAYER_KEY_SCAN_ROWS = 5
MIN_YEAR_COLUMNS = 3


@dataclass
class PlayerOptions:
    """Sparse option lookup plus the structure it was read from.

    ``header_row_index`` is -1 when no header row qualified; the lookup is
    then empty.
    """

    keys: list[str]
    rows: list[dict[str, str]]
    player_key: str
    header_row_index: int = -1
    col_to_year: dict[str, str] = field(default_factory=dict)
    by_player_year: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def years(self) -> list[str]:
        return sorted(set(self.col_to_year.values()))

    def option_count(self) -> int:
        return sum(len(v) for v in self.by_player_year.values())


def column_keys(width: int) -> list[str]:
    return [f"__col_{i}" for i in range(width)]


def _year_str(value: object) -> str:
    y = as_year(value)
    return str(y) if y is not None else ""


def detect_player_key(rows: Sequence[dict[str, str]], keys: Sequence[str]) -> str:
    """Key of the first cell reading "Player" in the first 5 rows."""
    for r in rows[:PLAYER_KEY_SCAN_ROWS]:
        for k in keys:
            if clean_cell(r.get(k)).lower() == "player":
                return k
    return keys[0] if keys else "__col_0"


def find_header_row(
    rows: Sequence[dict[str, str]], player_key: str, keys: Sequence[str]
) -> int:
    """Index of the matrix header row within the first 10 rows, or -1."""
    for i, r in enumerate(rows[:HEADER_SCAN_ROWS]):
        if clean_cell(r.get(player_key)).lower() != "player":
            continue
        year_cells = sum(1 for k in keys if k != player_key and _year_str(r.get(k)))
        if year_cells >= MIN_YEAR_COLUMNS:
            return i
    return -1


def parse_player_options(grid: Sequence[Sequence[object]]) -> PlayerOptions:
    """Parse the options matrix grid.

    Only cells reading "T" or "P" (case-insensitive) are recorded; players
    with no option codes are left out of the lookup.
    """
    width = max((len(r) for r in grid), default=0)
    keys = column_keys(width)
    rows = [
        {k: clean_cell(r[i]) if i < len(r) else "" for i, k in enumerate(keys)} for r in grid
    ]

    player_key = detect_player_key(rows, keys)
    header_idx = find_header_row(rows, player_key, keys)
    options = PlayerOptions(keys=keys, rows=rows, player_key=player_key)
    if header_idx == -1:
        return options

    header = rows[header_idx]
    col_to_year = {k: y for k in keys if (y := _year_str(header.get(k)))}

    by_player_year: dict[str, dict[str, str]] = {}
    for idx, r in enumerate(rows):
        if idx == header_idx:
            continue
        player = r.get(player_key, "")
        if not player or player.lower() == "player":
            continue
        for k, year in col_to_year.items():
            code = r.get(k, "").upper()
            if code in OPTION_CODES:
                by_player_year.setdefault(normalize_name(player), {})[year] = code

    options.header_row_index = header_idx
    options.col_to_year = col_to_year
    options.by_player_year = by_player_year
    return options


def option_for(options: PlayerOptions, player: str, year: str | int) -> str:
    """Option code ("T", "P" or "") for a player and season."""
    return options.by_player_year.get(normalize_name(player), {}).get(str(year).strip(), "")


def option_label(code: str) -> str:
    return OPTION_CODES.get(code, "")
