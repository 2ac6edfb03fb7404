"""Cross-investment of the monthly cost gap between buying and renting.

Both paths are held to the same cash outflow.  Each month the cheaper
side invests what it saved relative to the other:

* renting starts with the down payment and purchase closing costs
  already invested, and adds ``buy - rent`` whenever buying costs more;
* buying opens its own pool the first month renting costs more, and adds
  ``rent - buy`` from then on whenever that holds.

Only one side can receive money in a given month.  Balances compound at
the monthly equivalent of the annual return, and a contribution starts
earning the month after it is made.

Net values are marked to market every month as though the house were
sold and the portfolios liquidated that month, including capital-gains
tax.  Early in the horizon that overstates the tax drag relative to a
real sale date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .schemas import BuyConfig, BuyMonthRecord, RentConfig, RentMonthRecord

logger = logging.getLogger(__name__)

CAPITAL_GAINS_RATE = 0.15
PRIMARY_RESIDENCE_EXCLUSION = 250_000.0


def annual_to_monthly_growth(annual_rate: float) -> float:
    if annual_rate <= -1:
        raise ValueError("annual rate must be greater than -100%")
    return (1 + annual_rate) ** (1 / 12.0) - 1


@dataclass(frozen=True)
class InvestmentPool:
    principal: float = 0.0
    interest: float = 0.0

    @property
    def value(self) -> float:
        return self.principal + self.interest

    def accrue(self, monthly_rate: float) -> "InvestmentPool":
        return replace(self, interest=self.interest + self.value * monthly_rate)

    def contribute(self, amount: float) -> "InvestmentPool":
        return replace(self, principal=self.principal + amount)


@dataclass(frozen=True)
class ReconcilerState:
    rent_pool: InvestmentPool
    buy_pool: InvestmentPool = InvestmentPool()
    buy_start_month: Optional[int] = None


def split_difference(buy_total: float, rent_total: float) -> Tuple[float, float]:
    """Return ``(buy_contribution, rent_contribution)`` for one month.

    At most one of the two is non-zero.
    """
    diff = buy_total - rent_total
    if diff > 0:
        return 0.0, diff
    if diff < 0:
        return -diff, 0.0
    return 0.0, 0.0


def buy_capital_gains_tax(
    config: BuyConfig, house_value: float, cumulative_maintenance: float, pool: InvestmentPool
) -> float:
    gain = (house_value - config.house_price - cumulative_maintenance) + pool.interest
    return max(gain - PRIMARY_RESIDENCE_EXCLUSION, 0.0) * CAPITAL_GAINS_RATE


def rent_capital_gains_tax(pool: InvestmentPool) -> float:
    return pool.interest * CAPITAL_GAINS_RATE


def reconcile(
    buy_config: BuyConfig,
    rent_config: RentConfig,
    buy_data: List[BuyMonthRecord],
    rent_data: List[RentMonthRecord],
) -> Tuple[List[BuyMonthRecord], List[RentMonthRecord], Optional[int]]:
    """Fill in the investment and net-value fields of both series.

    Returns new record lists plus the month the buy-side pool first
    received money (``None`` if buying never cost less than renting).
    """
    if len(buy_data) != len(rent_data):
        raise ValueError("buy and rent series must cover the same months")

    monthly_rate = annual_to_monthly_growth(rent_config.investment_return_rate / 100.0)
    state = ReconcilerState(rent_pool=InvestmentPool(principal=buy_config.upfront_cash))

    buy_out: List[BuyMonthRecord] = []
    rent_out: List[RentMonthRecord] = []
    for buy, rent in zip(buy_data, rent_data):
        state, buy_record, rent_record = reconcile_month(
            state, buy_config, monthly_rate, buy, rent
        )
        buy_out.append(buy_record)
        rent_out.append(rent_record)

    return buy_out, rent_out, state.buy_start_month


def reconcile_month(
    state: ReconcilerState,
    buy_config: BuyConfig,
    monthly_rate: float,
    buy: BuyMonthRecord,
    rent: RentMonthRecord,
) -> Tuple[ReconcilerState, BuyMonthRecord, RentMonthRecord]:
    buy_contribution, rent_contribution = split_difference(
        buy.total_monthly, rent.total_monthly
    )

    rent_pool = state.rent_pool.accrue(monthly_rate).contribute(rent_contribution)
    buy_pool = state.buy_pool.accrue(monthly_rate).contribute(buy_contribution)

    buy_start_month = state.buy_start_month
    if buy_start_month is None and buy_contribution > 0:
        buy_start_month = buy.month
        logger.debug("Buying first costs less than renting in month %d", buy.month)

    rent_net = rent_pool.value - rent.cumulative_payments - rent_pool.principal
    rent_record = replace(
        rent,
        investment_contribution=rent_contribution,
        investment_principal=rent_pool.principal,
        investment_interest=rent_pool.interest,
        investment_value=rent_pool.value,
        net_value=rent_net,
        net_value_after_tax=rent_net - rent_capital_gains_tax(rent_pool),
    )

    selling_costs = buy.house_value * buy_config.sell_closing_cost_percent / 100
    buy_net = buy.equity - selling_costs - buy.cumulative_payments
    buy_tax = buy_capital_gains_tax(
        buy_config, buy.house_value, buy.cumulative_maintenance, buy_pool
    )
    buy_record = replace(
        buy,
        investment_contribution=buy_contribution,
        investment_principal=buy_pool.principal,
        investment_interest=buy_pool.interest,
        investment_value=buy_pool.value,
        net_value=buy_net,
        net_value_after_deductions=buy_net + buy.cumulative_tax_savings,
        net_value_after_tax=buy_net - buy_tax,
    )

    next_state = ReconcilerState(
        rent_pool=rent_pool, buy_pool=buy_pool, buy_start_month=buy_start_month
    )
    return next_state, buy_record, rent_record
