"""Numeric boundary between the string-typed form inputs and the engine.

Every field is parsed exactly once here.  Anything the simulation cannot
survive (blank or non-numeric text, a non-positive price, a fractional or
non-positive term, a down payment larger than the price) is rejected with
an :class:`InputError` that names the offending field, before a single
month is projected.  Values that are merely unusual are reported by
:func:`advisory_warnings` and otherwise left alone.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

from .schemas import (
    BuyConfig,
    BuyInputs,
    MaintenanceMode,
    ProjectionRequest,
    RentConfig,
    RentInputs,
)

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """A single input field could not be turned into a usable number."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


def parse_number(field: str, value: Optional[str]) -> float:
    if value is None or not str(value).strip():
        raise InputError(field, "value is required")
    text = str(value).strip().replace(",", "")
    try:
        number = float(text)
    except ValueError as exc:
        raise InputError(field, f"'{value}' is not a number") from exc
    if not math.isfinite(number):
        raise InputError(field, f"'{value}' is not a finite number")
    return number


def parse_optional(field: str, value: Optional[str]) -> Optional[float]:
    if value is None or not str(value).strip():
        return None
    return parse_number(field, value)


def _parse_years(value: Optional[str]) -> int:
    years = parse_number("mortgage_years", value)
    if years <= 0:
        raise InputError("mortgage_years", "term must be a positive number of years")
    if years != int(years):
        raise InputError("mortgage_years", "term must be a whole number of years")
    return int(years)


def _parse_down_payment(inputs: BuyInputs, house_price: float) -> float:
    kind = (inputs.down_payment_type or "percent").strip().lower()
    if kind not in ("percent", "amount"):
        raise InputError("down_payment_type", f"unknown type '{inputs.down_payment_type}'")

    percent = parse_optional("down_payment_percent", inputs.down_payment_percent)
    amount = parse_optional("down_payment_amount", inputs.down_payment_amount)
    if percent is None and amount is None:
        raise InputError(
            "down_payment_percent",
            "either down payment percentage or amount is required",
        )

    if (kind == "percent" and percent is not None) or amount is None:
        down_payment = house_price * percent / 100.0
        field = "down_payment_percent"
    else:
        down_payment = amount
        field = "down_payment_amount"

    if down_payment < 0:
        raise InputError(field, "down payment cannot be negative")
    if down_payment > house_price:
        raise InputError(field, "down payment cannot exceed the house price")
    return down_payment


def parse_buy_inputs(inputs: BuyInputs) -> BuyConfig:
    house_price = parse_number("house_price", inputs.house_price)
    if house_price <= 0:
        raise InputError("house_price", "house price must be greater than zero")

    mortgage_rate = parse_number("mortgage_rate", inputs.mortgage_rate)
    if mortgage_rate < 0:
        raise InputError("mortgage_rate", "rate cannot be negative")

    appreciation_rate = parse_number("appreciation_rate", inputs.appreciation_rate)
    if appreciation_rate <= -100:
        raise InputError("appreciation_rate", "appreciation must be greater than -100%")

    maintenance_percent = parse_optional("maintenance_percent", inputs.maintenance_percent)
    if maintenance_percent is not None:
        maintenance_mode = MaintenanceMode.PERCENT_OF_VALUE
        maintenance_amount = 0.0
    else:
        maintenance_mode = MaintenanceMode.FLAT_AMOUNT
        maintenance_percent = 0.0
        maintenance_amount = parse_number("maintenance_amount", inputs.maintenance_amount)

    return BuyConfig(
        house_price=house_price,
        down_payment=_parse_down_payment(inputs, house_price),
        mortgage_rate=mortgage_rate,
        mortgage_years=_parse_years(inputs.mortgage_years),
        appreciation_rate=appreciation_rate,
        annual_insurance=parse_number("annual_insurance", inputs.annual_insurance),
        insurance_increase_rate=parse_number(
            "insurance_increase_rate", inputs.insurance_increase_rate
        ),
        property_tax=parse_number("property_tax", inputs.property_tax),
        property_tax_increase_rate=parse_number(
            "property_tax_increase_rate", inputs.property_tax_increase_rate
        ),
        monthly_hoa=parse_number("monthly_hoa", inputs.monthly_hoa),
        hoa_increase_rate=parse_number("hoa_increase_rate", inputs.hoa_increase_rate),
        buy_closing_cost_percent=parse_number(
            "buy_closing_cost_percent", inputs.buy_closing_cost_percent
        ),
        sell_closing_cost_percent=parse_number(
            "sell_closing_cost_percent", inputs.sell_closing_cost_percent
        ),
        maintenance_mode=maintenance_mode,
        maintenance_percent=maintenance_percent,
        maintenance_amount=maintenance_amount,
        federal_tax_rate=parse_number("federal_tax_rate", inputs.federal_tax_rate),
        state_tax_rate=parse_number("state_tax_rate", inputs.state_tax_rate),
    )


def parse_rent_inputs(inputs: RentInputs, buy_config: Optional[BuyConfig] = None) -> RentConfig:
    investment_return_rate = parse_number(
        "investment_return_rate", inputs.investment_return_rate
    )
    if investment_return_rate <= -100:
        raise InputError("investment_return_rate", "return must be greater than -100%")

    initial_investment = parse_optional("initial_investment", inputs.initial_investment)
    if initial_investment is None and buy_config is not None:
        initial_investment = buy_config.upfront_cash

    return RentConfig(
        monthly_rent=parse_number("monthly_rent", inputs.monthly_rent),
        rent_increase_rate=parse_number("rent_increase_rate", inputs.rent_increase_rate),
        renters_insurance=parse_number("renters_insurance", inputs.renters_insurance),
        initial_investment=initial_investment,
        investment_return_rate=investment_return_rate,
    )


def parse_request(request: ProjectionRequest) -> tuple[BuyConfig, RentConfig]:
    buy_config = parse_buy_inputs(request.buy_inputs)
    rent_config = parse_rent_inputs(request.rent_inputs, buy_config)
    for message in advisory_warnings(buy_config, rent_config):
        logger.warning(message)
    return buy_config, rent_config


def advisory_warnings(buy: BuyConfig, rent: RentConfig) -> List[str]:
    """Return human-readable notes for values outside the usual ranges.

    Nothing here blocks a run; the engine copes with any finite value the
    parser accepted.
    """
    warnings: List[str] = []
    if not 0 <= buy.mortgage_rate <= 20:
        warnings.append(
            f"Mortgage rate {buy.mortgage_rate:g}% is outside the usual 0-20% range."
        )
    if not 1 <= buy.mortgage_years <= 50:
        warnings.append(
            f"Mortgage term of {buy.mortgage_years} years is outside the usual 1-50 year range."
        )
    if not 0 <= rent.rent_increase_rate <= 20:
        warnings.append(
            f"Rent increase of {rent.rent_increase_rate:g}% is outside the usual 0-20% range."
        )
    if not -20 <= rent.investment_return_rate <= 20:
        warnings.append(
            f"Investment return of {rent.investment_return_rate:g}% is outside the usual -20-20% range."
        )
    if (
        rent.initial_investment is not None
        and not math.isclose(rent.initial_investment, buy.upfront_cash, abs_tol=0.01)
    ):
        warnings.append(
            f"Initial investment ${rent.initial_investment:,.2f} differs from the down payment "
            f"plus closing costs (${buy.upfront_cash:,.2f}); the renter is seeded with the latter."
        )
    return warnings
