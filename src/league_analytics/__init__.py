from .payroll import (
    SALARY_CAP,
    UNASSIGNED,
    compute_team_payroll_by_year,
    team_payroll_by_year,
    team_payroll_for_year,
    team_salary_summary,
)
from .trade_simulator import default_trade_years, simulate_trade

__all__: list[str] = [
    "SALARY_CAP",
    "UNASSIGNED",
    "compute_team_payroll_by_year",
    "default_trade_years",
    "simulate_trade",
    "team_payroll_by_year",
    "team_payroll_for_year",
    "team_salary_summary",
]
