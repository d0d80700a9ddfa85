"""Shared text normalization for league sheet identities.

Every parser that cross-references names (players, teams, transaction
assets, option codes) goes through these helpers so identity rules stay
identical across the ledger, the catalog and the trade builder.

Normalizers:
  - normalize_name: trim, collapse whitespace, case-fold
  - normalize_fuzzy: normalize_name plus punctuation stripped
  - normalize_team: dash/quote variants unified, then normalize_name
  - normalize_label: header/category cells (percent, slash, dash variants)
  - canonical_tx_type: transaction type key ("Buy–out" == "buyout")
"""

from __future__ import annotations

import re

NBSP = "\u00a0"

_WS_RE = re.compile(r"\s+")
_FUZZY_PUNCT_RE = re.compile(r"[’'\".,()/\\\-_:;!?]+")
_DASH_RE = re.compile(r"[‐‑‒–—―−]")
_QUOTE_RE = re.compile(r"[\"'`‘’“”]")
_TEAM_DASH_RE = re.compile(r"\s*-\s*")
_TX_TYPE_STRIP_RE = re.compile("[\\s\u00a0\\-_\u2013\u2014]+")


def clean_cell(value: object) -> str:
    """Return a cell as a trimmed string with carriage returns removed."""
    if value is None:
        return ""
    return str(value).replace("\r", "").strip()


def normalize_name(value: object) -> str:
    """Player lookup key: trimmed, whitespace collapsed, lower case."""
    return _WS_RE.sub(" ", clean_cell(value).replace(NBSP, " ")).strip().lower()


def normalize_fuzzy(value: object) -> str:
    """Punctuation-insensitive lookup key used for typed or ledger names.

    "Kevin O'Neal", " kevin o'neal " and "KEVIN O’NEAL" share one key.
    """
    return _FUZZY_PUNCT_RE.sub("", normalize_name(value))


def normalize_team(value: object) -> str:
    """Team identity key.

    Dash variants become "-" with single spaces around it, quotes are
    dropped, whitespace collapsed and the result lower-cased.
    """
    s = clean_cell(value).replace(NBSP, " ")
    s = _QUOTE_RE.sub("", s)
    s = _DASH_RE.sub("-", s)
    s = _TEAM_DASH_RE.sub(" - ", s)
    return _WS_RE.sub(" ", s).strip().lower()


def normalize_label(value: object) -> str:
    """Header/category label key for the history sheet."""
    s = "" if value is None else str(value)
    s = s.replace("\r", " ").replace(NBSP, " ")
    s = s.replace("％", "%").replace("∕", "/")
    s = _QUOTE_RE.sub("", s)
    s = _DASH_RE.sub("-", s)
    return _WS_RE.sub(" ", s).strip().lower()


def canonical_tx_type(value: object) -> str:
    """Canonical transaction type: "Buy-out", "Buy–out", "Buy out" → "buyout"."""
    s = "" if value is None else str(value)
    return _TX_TYPE_STRIP_RE.sub("", s.lower())


def is_trade(value: object) -> bool:
    return canonical_tx_type(value) == "trade"
