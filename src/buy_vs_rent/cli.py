from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import NoReturn, Optional

import typer

from .exporters import period_label, sample_indices, timeline_json, write_csv
from .model import project
from .parsing import InputError
from .persistence import (
    PersistenceError,
    default_state_path,
    dump_request,
    load_request,
    save_request,
)
from .schemas import ProjectionRequest, ProjectionResult

app = typer.Typer(help="Project the month-by-month cost of buying versus renting a home.")


def _default_state_file() -> Path:
    return default_state_path()


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=2)


@app.command()
def run(
    house_price: Optional[str] = typer.Option(None, help="Purchase price, e.g. 650000."),
    down_payment_percent: Optional[str] = typer.Option(
        None, help="Down payment as a percent of the price."
    ),
    down_payment_amount: Optional[str] = typer.Option(
        None, help="Down payment in dollars (takes precedence over the percent)."
    ),
    mortgage_rate: Optional[str] = typer.Option(None, help="Annual mortgage rate in percent."),
    mortgage_years: Optional[str] = typer.Option(None, help="Mortgage term and horizon in years."),
    appreciation_rate: Optional[str] = typer.Option(
        None, help="Annual home appreciation in percent."
    ),
    annual_insurance: Optional[str] = typer.Option(None, help="Annual homeowner's insurance."),
    property_tax: Optional[str] = typer.Option(None, help="Annual property tax."),
    monthly_hoa: Optional[str] = typer.Option(None, help="Monthly HOA dues."),
    maintenance_percent: Optional[str] = typer.Option(
        None, help="Annual maintenance as a percent of home value."
    ),
    maintenance_amount: Optional[str] = typer.Option(
        None, help="Flat annual maintenance (used when no percent is set)."
    ),
    buy_closing_cost_percent: Optional[str] = typer.Option(
        None, help="Purchase closing costs in percent of price."
    ),
    sell_closing_cost_percent: Optional[str] = typer.Option(
        None, help="Sale closing costs in percent of value."
    ),
    federal_tax_rate: Optional[str] = typer.Option(None, help="Federal marginal tax rate."),
    state_tax_rate: Optional[str] = typer.Option(None, help="State marginal tax rate."),
    monthly_rent: Optional[str] = typer.Option(None, help="Current monthly rent."),
    rent_increase_rate: Optional[str] = typer.Option(None, help="Annual rent increase in percent."),
    renters_insurance: Optional[str] = typer.Option(None, help="Annual renter's insurance."),
    investment_return_rate: Optional[str] = typer.Option(
        None, help="Annual investment return in percent."
    ),
    resume: bool = typer.Option(
        False, "--resume", help="Start from the inputs saved by a previous --save."
    ),
    save: bool = typer.Option(False, "--save", help="Persist the inputs used for this run."),
    state_file: Path = typer.Option(
        default_factory=_default_state_file,
        help="Where inputs are saved (env BUY_VS_RENT_STATE if omitted).",
    ),
    yearly: bool = typer.Option(True, "--yearly/--monthly", help="Table granularity."),
    show_table: bool = typer.Option(False, help="Print the buy vs rent table."),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Export the full table as CSV."),
    show_timeline: bool = typer.Option(
        False, help="If set, dump both monthly series as JSON."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """
    Run the projection and summarise which path leaves you better off.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    request = ProjectionRequest()
    if resume:
        try:
            saved = load_request(state_file)
        except PersistenceError as exc:
            _fail(str(exc))
        if saved is None:
            typer.echo(f"No saved inputs at {state_file}; using defaults.", err=True)
        else:
            request = saved

    buy_overrides = {
        "house_price": house_price,
        "down_payment_percent": down_payment_percent,
        "down_payment_amount": down_payment_amount,
        "mortgage_rate": mortgage_rate,
        "mortgage_years": mortgage_years,
        "appreciation_rate": appreciation_rate,
        "annual_insurance": annual_insurance,
        "property_tax": property_tax,
        "monthly_hoa": monthly_hoa,
        "maintenance_percent": maintenance_percent,
        "maintenance_amount": maintenance_amount,
        "buy_closing_cost_percent": buy_closing_cost_percent,
        "sell_closing_cost_percent": sell_closing_cost_percent,
        "federal_tax_rate": federal_tax_rate,
        "state_tax_rate": state_tax_rate,
    }
    buy_overrides = {k: v for k, v in buy_overrides.items() if v is not None}
    if down_payment_amount is not None:
        buy_overrides["down_payment_type"] = "amount"
    elif down_payment_percent is not None:
        buy_overrides["down_payment_type"] = "percent"
    if maintenance_amount is not None and maintenance_percent is None:
        buy_overrides["maintenance_percent"] = ""

    rent_overrides = {
        "monthly_rent": monthly_rent,
        "rent_increase_rate": rent_increase_rate,
        "renters_insurance": renters_insurance,
        "investment_return_rate": investment_return_rate,
    }
    rent_overrides = {k: v for k, v in rent_overrides.items() if v is not None}

    request = ProjectionRequest(
        buy_inputs=replace(request.buy_inputs, **buy_overrides),
        rent_inputs=replace(request.rent_inputs, **rent_overrides),
    )

    try:
        result = project(request)
    except InputError as exc:
        _fail(f"invalid {exc.field}: {exc.reason}")

    if save:
        path = save_request(request, state_file)
        typer.echo(f"Saved inputs to {path}")

    _print_summary(result)

    if show_table:
        typer.echo("")
        _print_table(result, yearly=yearly)

    if csv_path is not None:
        with csv_path.open("w", newline="", encoding="utf-8") as handle:
            count = write_csv(result, handle, yearly=yearly)
        typer.echo(f"Wrote {count} rows to {csv_path}")

    if show_timeline:
        typer.echo(timeline_json(result))


@app.command()
def inputs(
    state_file: Path = typer.Option(
        default_factory=_default_state_file,
        help="Saved inputs file (env BUY_VS_RENT_STATE if omitted).",
    ),
) -> None:
    """
    Print the saved inputs as JSON.
    """
    try:
        saved = load_request(state_file)
    except PersistenceError as exc:
        _fail(str(exc))
    if saved is None:
        _fail(f"no saved inputs at {state_file}")
    typer.echo(json.dumps(dump_request(saved), indent=2))


def _print_summary(result: ProjectionResult) -> None:
    buy_config = result.buy_config
    final_buy = result.buy_data[-1]
    final_rent = result.rent_data[-1]

    typer.echo(f"House price: ${buy_config.house_price:,.0f}")
    typer.echo(
        f"Down payment: ${buy_config.down_payment:,.0f} ({buy_config.down_payment_percent:.1f}%)"
    )
    typer.echo(f"Loan amount: ${buy_config.loan_amount:,.0f}")
    typer.echo(f"Mortgage payment (P&I): ${result.monthly_payment:,.2f}")
    typer.echo(f"First-month cost to buy: ${result.buy_data[0].total_monthly:,.2f}")
    typer.echo(f"First-month cost to rent: ${result.rent_data[0].total_monthly:,.2f}")
    typer.echo("")
    typer.echo(f"After {result.months // 12} years:")
    typer.echo(f"  Buy net value (after tax): ${final_buy.net_value_after_tax:,.0f}")
    typer.echo(f"  Buy net value (after deductions): ${final_buy.net_value_after_deductions:,.0f}")
    typer.echo(f"  Rent net value (after tax): ${final_rent.net_value_after_tax:,.0f}")
    typer.echo(f"  Renter portfolio: ${final_rent.investment_value:,.0f}")
    if result.buy_investment_start_month:
        typer.echo(
            f"  Buyer starts investing savings in month {result.buy_investment_start_month}"
        )
    typer.echo(f"Better outcome: {result.better_option}")
    if result.break_even_month:
        years = result.break_even_month / 12
        typer.echo(f"Break-even month: {result.break_even_month} (~{years:.1f} years)")


def _print_table(result: ProjectionResult, *, yearly: bool) -> None:
    header = f"{'Period':<10}{'House value':>14}{'Equity':>14}{'Buy total':>12}{'Rent total':>12}{'Buy net':>14}{'Rent net':>14}{'Buy - rent':>14}"
    typer.echo(header)
    for index in sample_indices(result.months, yearly):
        buy = result.buy_data[index]
        rent = result.rent_data[index]
        typer.echo(
            f"{period_label(index, yearly):<10}"
            f"{buy.house_value:>14,.0f}"
            f"{buy.equity:>14,.0f}"
            f"{buy.total_monthly:>12,.0f}"
            f"{rent.total_monthly:>12,.0f}"
            f"{buy.net_value_after_tax:>14,.0f}"
            f"{rent.net_value_after_tax:>14,.0f}"
            f"{result.difference(index):>14,.0f}"
        )


if __name__ == "__main__":
    app()
