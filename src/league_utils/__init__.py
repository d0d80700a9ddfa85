from .coerce import (
    ParseWarning,
    ParseWarnings,
    as_year,
    date_sortable,
    format_tenths_percent,
    is_year_header,
    parse_int_or_none,
    parse_number,
    parse_number_or_none,
    year_in_text,
)
from .text import (
    canonical_tx_type,
    clean_cell,
    is_trade,
    normalize_fuzzy,
    normalize_label,
    normalize_name,
    normalize_team,
)

__all__: list[str] = [
    "ParseWarning",
    "ParseWarnings",
    "as_year",
    "canonical_tx_type",
    "clean_cell",
    "date_sortable",
    "format_tenths_percent",
    "is_trade",
    "is_year_header",
    "normalize_fuzzy",
    "normalize_label",
    "normalize_name",
    "normalize_team",
    "parse_int_or_none",
    "parse_number",
    "parse_number_or_none",
    "year_in_text",
]
