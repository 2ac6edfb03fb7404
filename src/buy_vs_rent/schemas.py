from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


@dataclass
class BuyInputs:
    """Purchase-side form values, kept as decimal strings until parsed."""

    house_price: str = "650000"
    down_payment_type: str = "percent"  # "percent" or "amount"
    down_payment_percent: str = "20"
    down_payment_amount: str = "130000"
    mortgage_rate: str = "6.5"  # annual percentage
    mortgage_years: str = "30"
    appreciation_rate: str = "3"
    annual_insurance: str = "2600"
    insurance_increase_rate: str = "3"
    property_tax: str = "7767.5"  # annual
    property_tax_increase_rate: str = "2"
    monthly_hoa: str = "600"
    hoa_increase_rate: str = "3"
    buy_closing_cost_percent: str = "2"
    sell_closing_cost_percent: str = "8"
    maintenance_percent: str = "1"
    maintenance_amount: str = "6500"  # annual, used when maintenance_percent is blank
    federal_tax_rate: str = "18"
    state_tax_rate: str = "7"

    @classmethod
    def for_price(cls, house_price: float, **overrides: str) -> "BuyInputs":
        """Build inputs whose price-proportional defaults track ``house_price``."""
        values = {
            "house_price": _fmt(house_price),
            "down_payment_amount": _fmt(house_price * 0.20),
            "annual_insurance": _fmt(house_price * 0.004),
            "property_tax": _fmt(house_price * 0.01195),
            "maintenance_amount": _fmt(house_price * 0.01),
        }
        values.update(overrides)
        return cls(**values)


@dataclass
class RentInputs:
    """Rental-side form values, kept as decimal strings until parsed."""

    monthly_rent: str = "3250"
    rent_increase_rate: str = "5"
    renters_insurance: str = "200"  # annual
    initial_investment: str = ""  # blank: down payment + buy closing costs
    investment_return_rate: str = "7"


@dataclass
class ProjectionRequest:
    buy_inputs: BuyInputs = field(default_factory=BuyInputs)
    rent_inputs: RentInputs = field(default_factory=RentInputs)


class MaintenanceMode(str, enum.Enum):
    PERCENT_OF_VALUE = "percent"
    FLAT_AMOUNT = "amount"


@dataclass(frozen=True)
class BuyConfig:
    """Parsed purchase assumptions. Rates are annual percentages."""

    house_price: float
    down_payment: float
    mortgage_rate: float
    mortgage_years: int
    appreciation_rate: float = 0.0
    annual_insurance: float = 0.0
    insurance_increase_rate: float = 0.0
    property_tax: float = 0.0
    property_tax_increase_rate: float = 0.0
    monthly_hoa: float = 0.0
    hoa_increase_rate: float = 0.0
    buy_closing_cost_percent: float = 0.0
    sell_closing_cost_percent: float = 0.0
    maintenance_mode: MaintenanceMode = MaintenanceMode.PERCENT_OF_VALUE
    maintenance_percent: float = 0.0
    maintenance_amount: float = 0.0
    federal_tax_rate: float = 0.0
    state_tax_rate: float = 0.0

    def __post_init__(self) -> None:
        if self.house_price <= 0:
            raise ValueError("house_price must be positive")
        if self.mortgage_years <= 0:
            raise ValueError("mortgage_years must be positive")
        if not 0 <= self.down_payment <= self.house_price:
            raise ValueError("down_payment must be between 0 and house_price")
        if self.mortgage_rate < 0:
            raise ValueError("mortgage_rate cannot be negative")
        if self.appreciation_rate <= -100:
            raise ValueError("appreciation_rate must be greater than -100%")

    @property
    def down_payment_percent(self) -> float:
        return self.down_payment / self.house_price * 100.0

    @property
    def loan_amount(self) -> float:
        return self.house_price - self.down_payment

    @property
    def total_months(self) -> int:
        return self.mortgage_years * 12

    @property
    def buy_closing_costs(self) -> float:
        return self.house_price * self.buy_closing_cost_percent / 100.0

    @property
    def upfront_cash(self) -> float:
        """Down payment plus purchase closing costs, sunk at month 0."""
        return self.down_payment + self.buy_closing_costs

    @property
    def combined_tax_rate(self) -> float:
        return (self.federal_tax_rate + self.state_tax_rate) / 100.0


@dataclass(frozen=True)
class RentConfig:
    monthly_rent: float
    rent_increase_rate: float = 0.0
    renters_insurance: float = 0.0  # annual
    initial_investment: Optional[float] = None
    investment_return_rate: float = 0.0

    def __post_init__(self) -> None:
        if self.investment_return_rate <= -100:
            raise ValueError("investment_return_rate must be greater than -100%")


@dataclass(frozen=True)
class BuyMonthRecord:
    month: int
    house_value: float
    remaining_principal: float
    payment: float
    principal_paid: float
    interest_paid: float
    pmi: float
    insurance: float
    property_tax: float
    hoa: float
    maintenance: float
    total_monthly: float
    equity: float
    cumulative_payments: float
    cumulative_maintenance: float
    tax_savings: float
    cumulative_tax_savings: float
    investment_contribution: float = 0.0
    investment_principal: float = 0.0
    investment_interest: float = 0.0
    investment_value: float = 0.0
    net_value: float = 0.0
    net_value_after_deductions: float = 0.0
    net_value_after_tax: float = 0.0


@dataclass(frozen=True)
class RentMonthRecord:
    month: int
    rent: float
    insurance: float
    total_monthly: float
    cumulative_payments: float
    investment_contribution: float = 0.0
    investment_principal: float = 0.0
    investment_interest: float = 0.0
    investment_value: float = 0.0
    net_value: float = 0.0
    net_value_after_tax: float = 0.0


@dataclass
class ProjectionResult:
    buy_config: BuyConfig
    rent_config: RentConfig
    buy_data: List[BuyMonthRecord] = field(default_factory=list)
    rent_data: List[RentMonthRecord] = field(default_factory=list)
    buy_investment_start_month: Optional[int] = None

    @property
    def months(self) -> int:
        return len(self.buy_data)

    @property
    def monthly_payment(self) -> float:
        return self.buy_data[0].payment if self.buy_data else 0.0

    def difference(self, index: int) -> float:
        """Buying minus renting, after capital-gains tax, at a 0-based index."""
        return (
            self.buy_data[index].net_value_after_tax
            - self.rent_data[index].net_value_after_tax
        )

    @property
    def break_even_month(self) -> Optional[int]:
        for buy, rent in zip(self.buy_data, self.rent_data):
            if buy.net_value_after_tax >= rent.net_value_after_tax:
                return buy.month
        return None

    @property
    def better_option(self) -> str:
        if not self.buy_data:
            return "tie"
        diff = self.difference(-1)
        if diff > 0:
            return "buying"
        if diff < 0:
            return "renting"
        return "tie"
