from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict
from typing import Any, Dict, List, Optional, TextIO

from .schemas import ProjectionResult

BUY_COLUMNS = (
    "house_value",
    "remaining_principal",
    "payment",
    "principal_paid",
    "interest_paid",
    "pmi",
    "insurance",
    "property_tax",
    "hoa",
    "maintenance",
    "total_monthly",
    "equity",
    "cumulative_payments",
    "cumulative_maintenance",
    "tax_savings",
    "cumulative_tax_savings",
    "investment_contribution",
    "investment_principal",
    "investment_interest",
    "investment_value",
    "net_value",
    "net_value_after_deductions",
    "net_value_after_tax",
)

RENT_COLUMNS = (
    "rent",
    "insurance",
    "total_monthly",
    "cumulative_payments",
    "investment_contribution",
    "investment_principal",
    "investment_interest",
    "investment_value",
    "net_value",
    "net_value_after_tax",
)


def sample_indices(months: int, yearly: bool) -> List[int]:
    """Indices charted or tabulated: the first month of every year, or all."""
    step = 12 if yearly else 1
    return list(range(0, months, step))


def period_label(index: int, yearly: bool) -> str:
    if yearly:
        return f"Year {index // 12 + 1}"
    return f"Month {index + 1}"


def table_rows(result: ProjectionResult, *, yearly: bool = True) -> List[Dict[str, Any]]:
    """Flatten both series into one row per period, buy and rent side by side."""
    rows: List[Dict[str, Any]] = []
    for index in sample_indices(result.months, yearly):
        buy = result.buy_data[index]
        rent = result.rent_data[index]
        row: Dict[str, Any] = {"period": period_label(index, yearly), "month": buy.month}
        row.update({f"buy_{name}": getattr(buy, name) for name in BUY_COLUMNS})
        row.update({f"rent_{name}": getattr(rent, name) for name in RENT_COLUMNS})
        row["buy_minus_rent"] = result.difference(index)
        rows.append(row)
    return rows


def table_columns() -> List[str]:
    return (
        ["period", "month"]
        + [f"buy_{name}" for name in BUY_COLUMNS]
        + [f"rent_{name}" for name in RENT_COLUMNS]
        + ["buy_minus_rent"]
    )


def write_csv(
    result: ProjectionResult,
    handle: TextIO,
    *,
    yearly: bool = False,
    decimals: Optional[int] = 2,
) -> int:
    """Write the combined table to ``handle``; returns the number of data rows."""
    writer = csv.DictWriter(handle, fieldnames=table_columns(), lineterminator="\n")
    writer.writeheader()
    rows = table_rows(result, yearly=yearly)
    for row in rows:
        if decimals is not None:
            row = {
                key: round(value, decimals) if isinstance(value, float) else value
                for key, value in row.items()
            }
        writer.writerow(row)
    return len(rows)


def to_csv_text(result: ProjectionResult, *, yearly: bool = False) -> str:
    buffer = io.StringIO()
    write_csv(result, buffer, yearly=yearly)
    return buffer.getvalue()


def timeline_payload(result: ProjectionResult) -> Dict[str, Any]:
    return {
        "buy_data": [asdict(record) for record in result.buy_data],
        "rent_data": [asdict(record) for record in result.rent_data],
    }


def timeline_json(result: ProjectionResult, *, indent: Optional[int] = 2) -> str:
    return json.dumps(timeline_payload(result), indent=indent)
