"""Shared validation utilities for Prefect flows."""

from prefect import task

from flows.utils.notifications import log_error, log_info, log_warning
from league_utils.coerce import ParseWarnings


@task(name="validate_row_counts")
def validate_row_counts(data: dict, expected_min_rows: dict) -> dict:
    """Validate row counts against expected minimums.

    Args:
        data: Dict of DataFrames keyed by table name
        expected_min_rows: Dict of expected minimum row counts per table

    Returns:
        Validation results with any issues

    """
    issues = []

    for table_name, expected_min in expected_min_rows.items():
        if table_name not in data:
            issues.append({"table": table_name, "issue": "table_missing"})
            continue

        df = data[table_name]
        row_count = df.height if hasattr(df, "height") else len(df)

        if row_count < expected_min:
            issues.append(
                {
                    "table": table_name,
                    "row_count": row_count,
                    "expected_min": expected_min,
                    "issue": "below_minimum",
                }
            )

    if issues:
        log_warning("Row count validation warnings", context={"issues": issues})
    else:
        log_info("Row count validation passed")

    return {"valid": len(issues) == 0, "issues": issues}


@task(name="validate_required_columns")
def validate_required_columns(data: dict, required_columns: dict) -> dict:
    """Validate required columns exist in each table.

    Args:
        data: Dict of DataFrames keyed by table name
        required_columns: Dict of required column lists per table

    Returns:
        Validation results with any issues

    Raises:
        RuntimeError: If any table lacks a required column

    """
    issues = []

    for table_name, required_cols in required_columns.items():
        if table_name not in data:
            continue  # Already flagged in row count validation

        df = data[table_name]
        df_columns = df.columns if hasattr(df, "columns") else []
        missing_cols = [col for col in required_cols if col not in df_columns]

        if missing_cols:
            issues.append({"table": table_name, "missing_columns": missing_cols})

    if issues:
        log_error("Missing required columns", context={"issues": issues})
    else:
        log_info("Required columns validation passed")

    return {"valid": len(issues) == 0, "issues": issues}


@task(name="check_cap_compliance")
def check_cap_compliance(payroll: dict, cap: float) -> dict:
    """Flag team seasons whose payroll exceeds the cap.

    Args:
        payroll: team → year → payroll
        cap: League salary cap

    Returns:
        Dictionary with the over-cap team seasons

    """
    over_cap = [
        {"team": team, "year": year, "payroll": amount, "over_by": amount - cap}
        for team, by_year in payroll.items()
        for year, amount in by_year.items()
        if amount > cap
    ]

    if over_cap:
        log_warning("Teams over the salary cap", context={"over_cap": over_cap})
    else:
        log_info("All teams under the salary cap")

    return {"compliant": not over_cap, "over_cap": over_cap}


@task(name="summarize_parse_warnings")
def summarize_parse_warnings(warnings: ParseWarnings, sample_size: int = 5) -> dict:
    """Report cells that silently coerced to zero.

    Args:
        warnings: Collector filled during parsing
        sample_size: Number of example cells to include

    Returns:
        Counts per column and a sample of offending cells

    """
    by_field = warnings.by_field()
    sample = [
        {"field": w.field, "raw": w.raw, "row": w.row} for w in warnings.items[:sample_size]
    ]

    if by_field:
        log_warning(
            "Unparsable numeric cells treated as 0",
            context={"by_field": by_field, "sample": sample},
        )

    return {"count": len(warnings), "by_field": by_field, "sample": sample}
