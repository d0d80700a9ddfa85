"""League history tab → banded row/column model (pure parsing).

Layout of the history tab:

  - row 0: sparse category labels ("2024", "Total", "Records", blanks from
    merged cells)
  - row 1: column headers; the leading base columns are Division,
    Conference, Team and Champs / Finals
  - row 2+: one row per team until the first row whose base columns are
    all blank

Every reporting period is a band of 3 columns (Record W%, Fpts/G Adjusted,
Playoffs). Year bands are found from their label. The Total and Records
bands are found by position from the end of the row (Records = last 3
columns, Total = the 3 before) because their labels are often blank.

Parsing Functions:
  - parse_history_grid(grid) → HistoryTable
  - resolve_band(table, band) → BandColumns
  - history_view(table, band, ...) → HistoryView
  - team_history_summary(grid) → dict[str, TeamHistorySummary]
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from league_utils.coerce import format_tenths_percent, year_in_text
from league_utils.text import clean_cell, normalize_label

DEFAULT_BASE_COUNT = 4
BAND_WIDTH = 3
BASE_SEQUENCES = (
    ("division", "conference", "team", "champs / finals"),
    ("division", "conference", "team", "champs/finals"),
)
TOTAL_BAND = "Total"
RECORDS_BAND = "Records"
YEAR_BAND_LABELS = ("Record W%", "Fpts/G Adjusted", "Playoffs")
TOTAL_BAND_LABELS = ("Record W%", "Fpts/G Adjusted", "Playoffs Appearances")
RECORDS_BAND_LABELS = ("Best Record W%", "Best Fpts/G Adjusted", "Best Playoffs")
PERCENT_HEADERS = {"record w%", "best record w%"}
ALL = "All"

# Year label sits in the middle of its band (offset -1) or on its first column (offset 0).
CENTERED = -1
LEFT_ALIGNED = 0


def is_year_label(value: object) -> bool:
    return year_in_text(value) is not None


def is_total(value: object) -> bool:
    return normalize_label(value) == "total"


def is_records(value: object) -> bool:
    return normalize_label(value) == "records"


@dataclass(frozen=True)
class HistoryColumn:
    idx: int
    key: str
    header: str
    category: str


@dataclass(frozen=True)
class SpecialBands:
    total: list[int] = field(default_factory=list)
    records: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class BandColumns:
    """Column indices of a band and the discovery step that found them.

    ``phase`` is "anchor" (year label), "category" (propagated category
    row), "position" (offset from the row end) or "none".
    """

    indices: list[int]
    phase: str


@dataclass
class HistoryTable:
    ok: bool
    error: str = ""
    base_count: int = 0
    year_offset: int = CENTERED
    years: list[str] = field(default_factory=list)
    columns: list[HistoryColumn] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    header_row: list[str] = field(default_factory=list)
    raw_categories: list[str] = field(default_factory=list)
    special_bands: SpecialBands = field(default_factory=SpecialBands)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def base_columns(self) -> list[HistoryColumn]:
        return self.columns[: min(self.base_count, len(self.columns))]

    def column_key(self, header: str) -> str | None:
        target = normalize_label(header)
        return next((c.key for c in self.columns if normalize_label(c.header) == target), None)


def base_column_count(header_row: Sequence[object]) -> int:
    """Number of leading base columns, from the Division..Champs/Finals run."""
    headers = [normalize_label(h) for h in header_row]
    for seq in BASE_SEQUENCES:
        matched = 0
        for i, h in enumerate(headers):
            if h == seq[matched]:
                matched += 1
            if matched == len(seq):
                return i + 1
    return DEFAULT_BASE_COUNT


def year_band_offset(raw_categories: Sequence[str], base_count: int) -> int:
    """Where year labels sit inside their band.

    A first year label on a band boundary (``base_count``, ``base_count+3``,
    ...) means labels mark the band's first column; otherwise they mark its
    middle column.
    """
    for i in range(base_count, len(raw_categories)):
        if is_year_label(raw_categories[i]):
            return LEFT_ALIGNED if (i - base_count) % BAND_WIDTH == 0 else CENTERED
    return CENTERED


def build_categories(
    raw_categories: Sequence[object], base_count: int, year_offset: int = CENTERED
) -> list[str]:
    """Align category labels to every column at or after ``base_count``.

    Non-year labels stay in place; a year label also covers the blank
    neighbours of its band; remaining blanks take the last non-year label.
    """
    raw = [clean_cell(v) for v in raw_categories]
    out = ["" for _ in raw]

    for i in range(base_count, len(raw)):
        if raw[i] and not is_year_label(raw[i]):
            out[i] = raw[i]

    for i, v in enumerate(raw):
        if not is_year_label(v):
            continue
        if i >= base_count:
            out[i] = v
        for j in range(i + year_offset, i + year_offset + BAND_WIDTH):
            if j != i and base_count <= j < len(raw) and not raw[j]:
                out[j] = v

    last_non_year = ""
    for i in range(base_count, len(out)):
        if out[i] and not is_year_label(out[i]):
            last_non_year = out[i]
        if not out[i] and last_non_year:
            out[i] = last_non_year
    return out


def special_bands_by_position(col_count: int, base_count: int) -> SpecialBands:
    """Records = last 3 columns, Total = the 3 before; kept only when whole."""
    records = [i for i in range(col_count - 3, col_count) if i >= base_count]
    total = [i for i in range(col_count - 6, col_count - 3) if i >= base_count]
    return SpecialBands(
        total=total if len(total) == BAND_WIDTH else [],
        records=records if len(records) == BAND_WIDTH else [],
    )


def unique_keys(headers: Sequence[str]) -> list[str]:
    seen: dict[str, int] = {}
    keys = []
    for h in headers:
        seen[h] = seen.get(h, 0) + 1
        keys.append(h if seen[h] == 1 else f"{h}_{seen[h]}")
    return keys


def _padded(row: Sequence[object], width: int) -> list[str]:
    return [clean_cell(row[i]) if i < len(row) else "" for i in range(width)]


def parse_history_grid(grid: Sequence[Sequence[object]]) -> HistoryTable:
    """Parse the history grid.

    A grid without a category row and a header row is reported with
    ``ok=False`` rather than raised.
    """
    if len(grid) < 2:
        return HistoryTable(
            ok=False,
            error="History sheet must have at least 2 rows (categories, headers).",
        )

    width = max(len(grid[0]), len(grid[1]))
    raw_categories = _padded(grid[0], width)
    header_row = _padded(grid[1], width)

    base_count = base_column_count(header_row)
    offset = year_band_offset(raw_categories, base_count)
    categories = build_categories(raw_categories, base_count, offset)

    columns = [
        HistoryColumn(idx=i, key=key, header=header_row[i] or key, category=categories[i])
        for i, key in enumerate(unique_keys(header_row))
    ]

    years = sorted(
        {c.category for c in columns[base_count:] if c.category and is_year_label(c.category)},
        key=lambda y: int(year_in_text(y) or 0),
        reverse=True,
    )

    rows: list[dict[str, str]] = []
    for raw in grid[2:]:
        row = _padded(raw, width)
        if not any(row) or not any(row[:base_count]):
            break
        rows.append({c.key: row[c.idx] for c in columns})

    return HistoryTable(
        ok=True,
        base_count=base_count,
        year_offset=offset,
        years=years,
        columns=columns,
        categories=categories,
        header_row=header_row,
        raw_categories=raw_categories,
        special_bands=special_bands_by_position(width, base_count),
        rows=rows,
    )


def _in_range(table: HistoryTable, indices: Sequence[int]) -> list[int]:
    return [i for i in indices if table.base_count <= i < len(table.categories)]


def resolve_band(table: HistoryTable, band: str) -> BandColumns:
    """Column indices of a band.

    Year bands try the literal label (phase "anchor") before the
    propagated category row (phase "category"). Total and Records come from
    position only.
    """
    label = clean_cell(band)
    if not label or not table.ok:
        return BandColumns([], "none")

    if is_year_label(label):
        anchor = next(
            (
                i
                for i in range(table.base_count, len(table.raw_categories))
                if table.raw_categories[i] == label
            ),
            -1,
        )
        if anchor >= 0:
            start = anchor + table.year_offset
            return BandColumns(_in_range(table, range(start, start + BAND_WIDTH)), "anchor")
        first = next(
            (
                i
                for i, c in enumerate(table.categories)
                if i >= table.base_count and clean_cell(c) == label
            ),
            -1,
        )
        if first < 0:
            return BandColumns([], "none")
        return BandColumns(_in_range(table, range(first, first + BAND_WIDTH)), "category")

    if is_total(label) or is_records(label):
        indices = table.special_bands.total if is_total(label) else table.special_bands.records
        return BandColumns(list(indices), "position" if indices else "none")

    indices = [
        i
        for i in range(table.base_count, len(table.categories))
        if clean_cell(table.categories[i]) == label
    ][:BAND_WIDTH]
    return BandColumns(indices, "category" if indices else "none")


def band_headers(table: HistoryTable, band: str, indices: Sequence[int]) -> list[str]:
    """Header row with the selected band's columns relabelled."""
    headers = list(table.header_row)
    if is_year_label(band):
        labels: Sequence[str] = YEAR_BAND_LABELS
    elif is_total(band):
        labels = TOTAL_BAND_LABELS
    elif is_records(band):
        labels = RECORDS_BAND_LABELS
    else:
        return headers
    for k, idx in enumerate(indices):
        if k < len(labels):
            headers[idx] = labels[k]
    return headers


def render_cell(header: str, value: str) -> str:
    """Percent columns hold tenths of a percent; everything else is verbatim."""
    if normalize_label(header) in PERCENT_HEADERS:
        return format_tenths_percent(value)
    return value


def display_header(header: str) -> str:
    """Short labels for the base columns."""
    key = normalize_label(header)
    if key == "division":
        return "Div"
    if key == "conference":
        return "Conf"
    if key.replace(" ", "") == "champs/finals":
        return "Awards"
    return header


def conference_options(table: HistoryTable) -> list[str]:
    key = table.column_key("Conference")
    if not key:
        return []
    return sorted({r[key] for r in table.rows if r[key]})


def division_options(table: HistoryTable, conference: str = ALL) -> list[str]:
    key = table.column_key("Division")
    if not key:
        return []
    conf_key = table.column_key("Conference")
    rows = table.rows
    if conference != ALL and conf_key:
        rows = [r for r in rows if r[conf_key] == conference]
    return sorted({r[key] for r in rows if r[key]})


@dataclass(frozen=True)
class ViewColumn:
    key: str
    header: str


@dataclass
class HistoryView:
    band: BandColumns
    columns: list[ViewColumn]
    rows: list[dict[str, str]]

    @property
    def band_missing(self) -> bool:
        return not self.band.indices


def history_view(
    table: HistoryTable,
    band: str | None = None,
    conference: str = ALL,
    division: str = ALL,
    query: str = "",
) -> HistoryView:
    """Visible columns and filtered rows for one band selection.

    The default band is the newest year, or Total when no year exists. The
    Awards column is shown only for Total and Records. Record percentages
    are rendered with a decimal comma.
    """
    if not band:
        band = table.years[0] if table.years else TOTAL_BAND
    selected = resolve_band(table, band)
    headers = band_headers(table, band, selected.indices) if selected.indices else table.header_row
    show_awards = is_total(band) or is_records(band)

    columns = [
        ViewColumn(c.key, display_header(c.header))
        for c in table.base_columns
        if show_awards or display_header(c.header) != "Awards"
    ]
    by_idx = {c.idx: c for c in table.columns}
    columns += [
        ViewColumn(by_idx[i].key, display_header(headers[i] or by_idx[i].header))
        for i in selected.indices
        if i in by_idx
    ]

    conf_key = table.column_key("Conference")
    div_key = table.column_key("Division")
    base_keys = [c.key for c in table.base_columns]
    needle = normalize_label(query)

    rows = table.rows
    if conference != ALL and conf_key:
        rows = [r for r in rows if r[conf_key] == conference]
    if division != ALL and div_key:
        rows = [r for r in rows if r[div_key] == division]
    if needle:
        rows = [r for r in rows if needle in " ".join(normalize_label(r[k]) for k in base_keys)]

    rendered = [{c.key: render_cell(c.header, r.get(c.key, "")) for c in columns} for r in rows]
    return HistoryView(band=selected, columns=columns, rows=rendered)


@dataclass(frozen=True)
class TeamHistorySummary:
    """Career line of one team across the history tab."""

    team: str
    awards: str
    best_record_w: str
    best_fpts_adjusted: str
    best_playoffs: str
    total_record_w: str
    total_fpts_adjusted: str
    total_playoffs_appearances: str


def team_history_summary(grid: Sequence[Sequence[object]]) -> dict[str, TeamHistorySummary]:
    """Summaries keyed by normalized team name.

    Best figures come from the Records band, totals from the Total band,
    both located by position. Grids narrower than 8 columns yield nothing.
    """
    table = parse_history_grid(grid)
    if not table.ok or len(table.columns) < 8:
        return {}

    team_key = table.column_key("Team")
    awards_key = table.column_key("Champs / Finals") or table.column_key("Champs/Finals")
    if awards_key is None and table.base_count >= DEFAULT_BASE_COUNT:
        awards_key = table.columns[table.base_count - 1].key
    if team_key is None:
        return {}

    records = [table.columns[i].key for i in table.special_bands.records]
    total = [table.columns[i].key for i in table.special_bands.total]

    def pick(row: Mapping[str, str], keys: Sequence[str], k: int) -> str:
        return row.get(keys[k], "") if k < len(keys) else ""

    out: dict[str, TeamHistorySummary] = {}
    for row in table.rows:
        team = row[team_key]
        if not team:
            continue
        out[normalize_label(team)] = TeamHistorySummary(
            team=team,
            awards=row.get(awards_key, "") if awards_key else "",
            best_record_w=format_tenths_percent(pick(row, records, 0)),
            best_fpts_adjusted=pick(row, records, 1),
            best_playoffs=pick(row, records, 2),
            total_record_w=format_tenths_percent(pick(row, total, 0)),
            total_fpts_adjusted=pick(row, total, 1),
            total_playoffs_appearances=pick(row, total, 2),
        )
    return out


def match_team_summary(
    summaries: Mapping[str, TeamHistorySummary], team: str
) -> TeamHistorySummary | None:
    """Exact key, then prefix either way, then substring either way."""
    key = normalize_label(team)
    if not key:
        return None
    if key in summaries:
        return summaries[key]
    for k, v in summaries.items():
        if k.startswith(key) or key.startswith(k):
            return v
    for k, v in summaries.items():
        if key in k or k in key:
            return v
    return None
