"""Transactions ledger tab → grouped transaction records (pure parsing).

The ledger is a flat grid where one transaction spans several rows: the
first row of a block carries the date, later rows leave date/type/team
cells blank and list further asset lines. Columns are positional:

    date | type | team A | asset A | salary A | rookie | team B | asset B | salary B

Trades are stored asymmetrically (team A's outgoing assets in the A columns,
team B's outgoing assets in the B columns), so consumers render a trade
from one team's point of view via ``team_view``.

Parsing Functions:
  - annotate_ledger(rows) → list[LedgerRow]
  - group_transactions(rows) → list[Transaction]
  - transactions_for_player(transactions, name) → list[TransactionView]
  - transactions_for_team(transactions, team) → list[TransactionView]
  - ledger_to_frame(rows) → pl.DataFrame
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

import polars as pl

from league_utils.coerce import date_sortable
from league_utils.text import canonical_tx_type, clean_cell, is_trade, normalize_fuzzy, normalize_team

LEDGER_COLUMNS = (
    "date",
    "type",
    "team_a",
    "asset_a",
    "salary_a",
    "rookie",
    "team_b",
    "asset_b",
    "salary_b",
)
TX_TYPES = ("trade", "waiver", "buyout")


@dataclass(frozen=True)
class LedgerRow:
    """One ledger line with block attributes carried forward.

    ``tx_id`` is -1 for rows that precede the first dated row.
    """

    tx_id: int
    row_index: int
    date: str
    type: str
    team_a: str
    asset_a: str
    salary_a: str
    rookie: str
    team_b: str
    asset_b: str
    salary_b: str


@dataclass
class Transaction:
    tx_id: int
    date: str
    type: str
    team_a: str
    team_b: str
    rookie: str
    lines: list[LedgerRow] = field(default_factory=list)

    @property
    def canonical_type(self) -> str:
        return canonical_tx_type(self.type)

    @property
    def is_trade(self) -> bool:
        return is_trade(self.type)

    def involves_player(self, name: str) -> bool:
        """True when the name appears as either asset on any line."""
        target = normalize_fuzzy(name)
        if not target:
            return False
        return any(
            normalize_fuzzy(line.asset_a) == target or normalize_fuzzy(line.asset_b) == target
            for line in self.lines
        )


@dataclass
class TransactionView:
    """A transaction framed as assets sent and received by one side."""

    transaction: Transaction
    sent: list[str]
    received: list[str]

    @property
    def tx_id(self) -> int:
        return self.transaction.tx_id

    @property
    def date(self) -> str:
        return self.transaction.date

    @property
    def type(self) -> str:
        return self.transaction.type


@dataclass
class _Carry:
    tx_id: int = -1
    date: str = ""
    type: str = ""
    team_a: str = ""
    team_b: str = ""


def _cell(row: Sequence[object], i: int) -> str:
    return clean_cell(row[i]) if i < len(row) else ""


def annotate_ledger(rows: Sequence[Sequence[object]], header_rows: int = 0) -> list[LedgerRow]:
    """Tag every ledger row with its block id and carried-forward attributes.

    A block starts exactly at a row with a non-blank date cell; type and team
    changes alone never start one. Carry state lives in this call only.

    Args:
        rows: Ledger grid rows (positional columns, see module docstring)
        header_rows: Leading label rows to skip (CSV exports keep the header)

    Returns:
        All rows, in order, including undated leading rows with ``tx_id == -1``
    """
    carry = _Carry()
    out: list[LedgerRow] = []
    for idx, row in enumerate(rows[header_rows:]):
        raw = [_cell(row, i) for i in range(len(LEDGER_COLUMNS))]
        date, tx_type, team_a, team_b = raw[0], raw[1], raw[2], raw[6]

        if date:
            carry = replace(carry, tx_id=carry.tx_id + 1, date=date)
        if tx_type:
            carry = replace(carry, type=tx_type)
        if team_a:
            carry = replace(carry, team_a=team_a)
        if team_b:
            carry = replace(carry, team_b=team_b)

        out.append(
            LedgerRow(
                tx_id=carry.tx_id,
                row_index=idx,
                date=date or carry.date,
                type=tx_type or carry.type,
                team_a=team_a or carry.team_a,
                asset_a=raw[3],
                salary_a=raw[4],
                rookie=raw[5],
                team_b=team_b or carry.team_b,
                asset_b=raw[7],
                salary_b=raw[8],
            )
        )
    return out


def group_transactions(rows: Sequence[LedgerRow]) -> list[Transaction]:
    """Collect annotated rows into transactions, newest first.

    Rows with ``tx_id < 0`` are discarded. Lines keep source order; groups
    are ordered by ``dd/mm/yyyy`` date descending (undated/malformed last),
    ties keeping ledger order.
    """
    groups: dict[int, list[LedgerRow]] = {}
    for r in rows:
        if r.tx_id < 0:
            continue
        groups.setdefault(r.tx_id, []).append(r)

    transactions: list[Transaction] = []
    for tx_id, lines in groups.items():
        lines.sort(key=lambda line: line.row_index)
        head = lines[0]
        transactions.append(
            Transaction(
                tx_id=tx_id,
                date=head.date,
                type=head.type,
                team_a=head.team_a,
                team_b=head.team_b,
                rookie=head.rookie,
                lines=lines,
            )
        )
    transactions.sort(key=lambda t: date_sortable(t.date), reverse=True)
    return transactions


def parse_transactions(rows: Sequence[Sequence[object]], header_rows: int = 0) -> list[Transaction]:
    return group_transactions(annotate_ledger(rows, header_rows=header_rows))


def format_asset(asset: str, salary: str) -> str:
    """Render an asset as "Asset (salary)" when a salary is present."""
    if not asset:
        return ""
    return f"{asset} ({salary})" if salary else asset


def team_view(tx: Transaction, team: str | None = None) -> TransactionView:
    """Frame a transaction as sent/received for ``team``.

    Without a team, or when the team is side A, the A columns are "sent".
    When the team is side B of a trade the two sides swap.
    """
    as_b = (
        team is not None
        and tx.is_trade
        and normalize_team(tx.team_b) == normalize_team(team)
    )
    sent: list[str] = []
    received: list[str] = []
    for line in tx.lines:
        a = format_asset(line.asset_a, line.salary_a)
        b = format_asset(line.asset_b, line.salary_b)
        out_asset, in_asset = (b, a) if as_b else (a, b)
        if out_asset:
            sent.append(out_asset)
        if in_asset:
            received.append(in_asset)
    return TransactionView(transaction=tx, sent=sent, received=received)


def involves_team(tx: Transaction, team: str) -> bool:
    """Team is side A, or side B of a trade."""
    key = normalize_team(team)
    if normalize_team(tx.team_a) == key:
        return True
    return tx.is_trade and normalize_team(tx.team_b) == key


def transactions_for_team(transactions: Sequence[Transaction], team: str) -> list[TransactionView]:
    return [team_view(tx, team) for tx in transactions if involves_team(tx, team)]


def transactions_for_player(
    transactions: Sequence[Transaction], name: str
) -> list[TransactionView]:
    return [team_view(tx) for tx in transactions if tx.involves_player(name)]


def filter_by_type(views: Sequence[TransactionView], tx_type: str) -> list[TransactionView]:
    """Keep views whose canonical type matches ``tx_type`` ("Buy-out" == "buyout")."""
    wanted = canonical_tx_type(tx_type)
    return [v for v in views if v.transaction.canonical_type == wanted]


def count_by_type(items: Sequence[Transaction | TransactionView]) -> dict[str, int]:
    """Counts of trade/waiver/buyout transactions; other types are ignored."""
    counts = {t: 0 for t in TX_TYPES}
    for item in items:
        tx = item.transaction if isinstance(item, TransactionView) else item
        if tx.canonical_type in counts:
            counts[tx.canonical_type] += 1
    return counts


def ledger_to_frame(rows: Sequence[LedgerRow]) -> pl.DataFrame:
    """Annotated ledger lines belonging to a transaction block."""
    data = [
        [r.tx_id, r.row_index, *(getattr(r, c) for c in LEDGER_COLUMNS)]
        for r in rows
        if r.tx_id >= 0
    ]
    schema = {"tx_id": pl.Int64, "row_index": pl.Int64, **{c: pl.Utf8 for c in LEDGER_COLUMNS}}
    return pl.DataFrame(data, schema=schema, orient="row").with_columns(
        pl.col("date").map_elements(date_sortable, return_dtype=pl.Int64).alias("date_key")
    )
