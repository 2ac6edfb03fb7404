"""
Buy vs. rent projection toolkit.

This package projects, month by month, the cost and net worth of buying a
home with a fixed-rate mortgage versus renting and investing the
difference, producing two index-aligned series for charting, tables or
CSV export.
"""

from .model import project, run_projection, monthly_mortgage_payment
from .parsing import InputError, advisory_warnings
from .schemas import (
    BuyConfig,
    BuyInputs,
    BuyMonthRecord,
    MaintenanceMode,
    ProjectionRequest,
    ProjectionResult,
    RentConfig,
    RentInputs,
    RentMonthRecord,
)

__all__ = [
    "BuyConfig",
    "BuyInputs",
    "BuyMonthRecord",
    "InputError",
    "MaintenanceMode",
    "ProjectionRequest",
    "ProjectionResult",
    "RentConfig",
    "RentInputs",
    "RentMonthRecord",
    "advisory_warnings",
    "monthly_mortgage_payment",
    "project",
    "run_projection",
]
