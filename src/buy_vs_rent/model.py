from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, replace
from typing import List, Optional, Tuple

from .parsing import parse_request
from .reconciler import reconcile
from .schemas import (
    BuyConfig,
    BuyMonthRecord,
    MaintenanceMode,
    ProjectionRequest,
    ProjectionResult,
    RentConfig,
    RentMonthRecord,
)

logger = logging.getLogger(__name__)

PMI_LTV_THRESHOLD = 0.80
PMI_ANNUAL_RATE = 0.0075


def project(request: Optional[ProjectionRequest] = None) -> ProjectionResult:
    """Parse the string inputs and run the full buy-versus-rent projection."""
    request = request or ProjectionRequest()
    buy_config, rent_config = parse_request(request)
    return run_projection(buy_config, rent_config)


def run_projection(buy_config: BuyConfig, rent_config: RentConfig) -> ProjectionResult:
    months = buy_config.total_months
    logger.debug(
        "Projecting %d months: price=%.2f down=%.2f rate=%.3f%%",
        months,
        buy_config.house_price,
        buy_config.down_payment,
        buy_config.mortgage_rate,
    )

    buy_data = project_buy(buy_config)
    rent_data = project_rent(rent_config, months)
    buy_data, rent_data, buy_start = reconcile(buy_config, rent_config, buy_data, rent_data)

    result = ProjectionResult(
        buy_config=buy_config,
        rent_config=rent_config,
        buy_data=buy_data,
        rent_data=rent_data,
        buy_investment_start_month=buy_start,
    )
    _ensure_finite(result)
    logger.debug("Projection finished; better option at horizon: %s", result.better_option)
    return result


def _ensure_finite(result: ProjectionResult) -> None:
    for series in (result.buy_data, result.rent_data):
        for record in series:
            for name, value in asdict(record).items():
                if isinstance(value, float) and not math.isfinite(value):
                    raise RuntimeError(
                        f"non-finite {name} at month {record.month}; inputs were not validated"
                    )


# Mortgage amortization


def monthly_mortgage_payment(
    principal: float, annual_rate_pct: float, term_years: int
) -> float:
    if term_years <= 0:
        raise ValueError("term_years must be positive")
    if principal <= 0:
        return 0.0
    months = term_years * 12
    monthly_rate = annual_to_monthly_rate(annual_rate_pct)
    if monthly_rate == 0:
        return principal / months
    growth = (1 + monthly_rate) ** months
    return principal * monthly_rate * growth / (growth - 1)


def split_payment(
    balance: float, payment: float, monthly_rate: float
) -> Tuple[float, float]:
    """Return the ``(interest, principal)`` portions of one payment."""
    interest = balance * monthly_rate
    return interest, payment - interest


def annual_to_monthly_rate(annual_rate_pct: float) -> float:
    if annual_rate_pct <= 0:
        return 0.0
    return annual_rate_pct / 100.0 / 12.0


def private_mortgage_insurance(balance: float, house_value: float) -> float:
    if house_value > 0 and balance / house_value > PMI_LTV_THRESHOLD:
        return balance * PMI_ANNUAL_RATE / 12
    return 0.0


def appreciated_value(year_start_value: float, annual_rate_pct: float, month_in_year: int) -> float:
    """Value after ``month_in_year + 1`` months of exact sub-annual compounding.

    Twelve steps land on ``year_start_value * (1 + rate)`` exactly, so no
    drift accumulates across year boundaries.
    """
    return year_start_value * (1 + annual_rate_pct / 100.0) ** ((month_in_year + 1) / 12.0)


# Buying


@dataclass(frozen=True)
class BuyState:
    month: int
    principal: float
    house_value: float
    year_start_value: float
    insurance: float
    property_tax: float
    hoa: float
    maintenance: float
    cumulative_payments: float
    cumulative_maintenance: float = 0.0
    cumulative_tax_savings: float = 0.0

    @classmethod
    def initial(cls, config: BuyConfig) -> "BuyState":
        if config.maintenance_mode is MaintenanceMode.PERCENT_OF_VALUE:
            maintenance = config.house_price * config.maintenance_percent / 100 / 12
        else:
            maintenance = config.maintenance_amount / 12
        return cls(
            month=0,
            principal=config.loan_amount,
            house_value=config.house_price,
            year_start_value=config.house_price,
            insurance=config.annual_insurance / 12,
            property_tax=config.property_tax / 12,
            hoa=config.monthly_hoa,
            maintenance=maintenance,
            cumulative_payments=config.upfront_cash,
        )


def buy_step(
    state: BuyState, config: BuyConfig, payment: float, monthly_rate: float
) -> Tuple[BuyState, BuyMonthRecord]:
    month_in_year = state.month % 12
    interest, principal_paid = split_payment(state.principal, payment, monthly_rate)
    # PMI is judged against the value before this month's appreciation.
    pmi = private_mortgage_insurance(state.principal, state.house_value)

    house_value = appreciated_value(
        state.year_start_value, config.appreciation_rate, month_in_year
    )
    year_start_value = state.year_start_value
    if month_in_year == 11:
        year_start_value *= 1 + config.appreciation_rate / 100.0

    tax_savings = (interest + state.property_tax) * config.combined_tax_rate

    insurance, property_tax, hoa, maintenance = (
        state.insurance,
        state.property_tax,
        state.hoa,
        state.maintenance,
    )
    if state.month > 0 and month_in_year == 0:
        insurance *= 1 + config.insurance_increase_rate / 100
        property_tax *= 1 + config.property_tax_increase_rate / 100
        hoa *= 1 + config.hoa_increase_rate / 100
        if config.maintenance_mode is MaintenanceMode.PERCENT_OF_VALUE:
            maintenance = house_value * config.maintenance_percent / 100 / 12
        else:
            maintenance *= 1 + config.appreciation_rate / 100

    total_monthly = payment + pmi + insurance + property_tax + hoa + maintenance
    remaining = state.principal - principal_paid

    next_state = replace(
        state,
        month=state.month + 1,
        principal=remaining,
        house_value=house_value,
        year_start_value=year_start_value,
        insurance=insurance,
        property_tax=property_tax,
        hoa=hoa,
        maintenance=maintenance,
        cumulative_payments=state.cumulative_payments + total_monthly,
        cumulative_maintenance=state.cumulative_maintenance + maintenance,
        cumulative_tax_savings=state.cumulative_tax_savings + tax_savings,
    )
    record = BuyMonthRecord(
        month=state.month + 1,
        house_value=house_value,
        remaining_principal=remaining,
        payment=payment,
        principal_paid=principal_paid,
        interest_paid=interest,
        pmi=pmi,
        insurance=insurance,
        property_tax=property_tax,
        hoa=hoa,
        maintenance=maintenance,
        total_monthly=total_monthly,
        equity=house_value - remaining,
        cumulative_payments=next_state.cumulative_payments,
        cumulative_maintenance=next_state.cumulative_maintenance,
        tax_savings=tax_savings,
        cumulative_tax_savings=next_state.cumulative_tax_savings,
    )
    return next_state, record


def project_buy(config: BuyConfig) -> List[BuyMonthRecord]:
    payment = monthly_mortgage_payment(
        config.loan_amount, config.mortgage_rate, config.mortgage_years
    )
    monthly_rate = annual_to_monthly_rate(config.mortgage_rate)

    state = BuyState.initial(config)
    timeline: List[BuyMonthRecord] = []
    for _ in range(config.total_months):
        state, record = buy_step(state, config, payment, monthly_rate)
        timeline.append(record)
    return timeline


# Renting


@dataclass(frozen=True)
class RentState:
    month: int
    rent: float
    insurance: float
    cumulative_payments: float = 0.0

    @classmethod
    def initial(cls, config: RentConfig) -> "RentState":
        return cls(month=0, rent=config.monthly_rent, insurance=config.renters_insurance / 12)


def rent_step(state: RentState, config: RentConfig) -> Tuple[RentState, RentMonthRecord]:
    rent, insurance = state.rent, state.insurance
    if state.month > 0 and state.month % 12 == 0:
        # Renter's insurance is assumed to track rent.
        rent *= 1 + config.rent_increase_rate / 100
        insurance *= 1 + config.rent_increase_rate / 100

    total_monthly = rent + insurance
    next_state = RentState(
        month=state.month + 1,
        rent=rent,
        insurance=insurance,
        cumulative_payments=state.cumulative_payments + total_monthly,
    )
    record = RentMonthRecord(
        month=next_state.month,
        rent=rent,
        insurance=insurance,
        total_monthly=total_monthly,
        cumulative_payments=next_state.cumulative_payments,
    )
    return next_state, record


def project_rent(config: RentConfig, months: int) -> List[RentMonthRecord]:
    state = RentState.initial(config)
    timeline: List[RentMonthRecord] = []
    for _ in range(months):
        state, record = rent_step(state, config)
        timeline.append(record)
    return timeline
