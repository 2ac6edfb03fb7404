import pytest

from buy_vs_rent.parsing import (
    InputError,
    advisory_warnings,
    parse_buy_inputs,
    parse_number,
    parse_rent_inputs,
    parse_request,
)
from buy_vs_rent.schemas import (
    BuyConfig,
    BuyInputs,
    MaintenanceMode,
    ProjectionRequest,
    RentConfig,
    RentInputs,
)


def test_parse_number_accepts_thousands_separators():
    assert parse_number("house_price", " 650,000 ") == 650_000


@pytest.mark.parametrize("value", ["", "   ", None])
def test_blank_required_field_is_rejected(value):
    with pytest.raises(InputError) as excinfo:
        parse_buy_inputs(BuyInputs(mortgage_rate=value))
    assert excinfo.value.field == "mortgage_rate"


def test_non_numeric_field_is_rejected():
    with pytest.raises(InputError) as excinfo:
        parse_rent_inputs(RentInputs(monthly_rent="three thousand"))
    assert excinfo.value.field == "monthly_rent"
    assert "three thousand" in str(excinfo.value)


def test_non_finite_field_is_rejected():
    with pytest.raises(InputError) as excinfo:
        parse_buy_inputs(BuyInputs(appreciation_rate="nan"))
    assert excinfo.value.field == "appreciation_rate"


def test_input_error_is_a_value_error():
    assert issubclass(InputError, ValueError)


@pytest.mark.parametrize("price", ["0", "-100000"])
def test_non_positive_price_is_rejected(price):
    with pytest.raises(InputError) as excinfo:
        parse_buy_inputs(BuyInputs(house_price=price))
    assert excinfo.value.field == "house_price"


@pytest.mark.parametrize("years", ["0", "-5", "2.5"])
def test_bad_term_is_rejected(years):
    with pytest.raises(InputError) as excinfo:
        parse_buy_inputs(BuyInputs(mortgage_years=years))
    assert excinfo.value.field == "mortgage_years"


def test_negative_rate_is_rejected():
    with pytest.raises(InputError):
        parse_buy_inputs(BuyInputs(mortgage_rate="-1"))


def test_down_payment_from_percent():
    config = parse_buy_inputs(BuyInputs(house_price="500000", down_payment_percent="10"))
    assert config.down_payment == pytest.approx(50_000)
    assert config.loan_amount == pytest.approx(450_000)


def test_down_payment_from_amount():
    config = parse_buy_inputs(
        BuyInputs(down_payment_type="amount", down_payment_amount="97500")
    )
    assert config.down_payment == 97_500
    assert config.down_payment_percent == pytest.approx(15)


def test_down_payment_falls_back_to_other_field():
    config = parse_buy_inputs(BuyInputs(down_payment_percent="", down_payment_amount="65000"))
    assert config.down_payment == 65_000


def test_down_payment_required():
    with pytest.raises(InputError) as excinfo:
        parse_buy_inputs(BuyInputs(down_payment_percent="", down_payment_amount=""))
    assert excinfo.value.field == "down_payment_percent"


def test_down_payment_cannot_exceed_price():
    with pytest.raises(InputError) as excinfo:
        parse_buy_inputs(BuyInputs(down_payment_type="amount", down_payment_amount="700000"))
    assert excinfo.value.field == "down_payment_amount"


def test_unknown_down_payment_type():
    with pytest.raises(InputError):
        parse_buy_inputs(BuyInputs(down_payment_type="shares"))


def test_maintenance_mode_selection():
    assert parse_buy_inputs(BuyInputs()).maintenance_mode is MaintenanceMode.PERCENT_OF_VALUE
    flat = parse_buy_inputs(BuyInputs(maintenance_percent=""))
    assert flat.maintenance_mode is MaintenanceMode.FLAT_AMOUNT
    assert flat.maintenance_amount == 6500


def test_initial_investment_defaults_to_upfront_cash():
    buy = parse_buy_inputs(BuyInputs())
    rent = parse_rent_inputs(RentInputs(), buy)
    assert rent.initial_investment == pytest.approx(143_000)


def test_investment_return_must_exceed_minus_100():
    with pytest.raises(InputError):
        parse_rent_inputs(RentInputs(investment_return_rate="-100"))


def test_appreciation_must_exceed_minus_100():
    with pytest.raises(InputError):
        parse_buy_inputs(BuyInputs(appreciation_rate="-150"))


def test_config_guards_direct_construction():
    with pytest.raises(ValueError):
        BuyConfig(house_price=0, down_payment=0, mortgage_rate=5, mortgage_years=30)
    with pytest.raises(ValueError):
        BuyConfig(house_price=100, down_payment=10, mortgage_rate=5, mortgage_years=0)
    with pytest.raises(ValueError):
        RentConfig(monthly_rent=1000, investment_return_rate=-100)


def test_for_price_tracks_proportional_defaults():
    inputs = BuyInputs.for_price(400_000)
    assert inputs.house_price == "400000"
    assert inputs.annual_insurance == "1600"
    assert inputs.property_tax == "4780"
    assert inputs.maintenance_amount == "4000"


def test_advisory_warnings_do_not_block():
    buy = parse_buy_inputs(BuyInputs(mortgage_rate="25", mortgage_years="55"))
    rent = parse_rent_inputs(RentInputs(rent_increase_rate="-2", investment_return_rate="30"), buy)
    messages = advisory_warnings(buy, rent)
    assert len(messages) == 4
    assert any("Mortgage rate" in m for m in messages)
    assert any("55 years" in m for m in messages)


def test_defaults_produce_no_warnings():
    buy, rent = parse_request(ProjectionRequest())
    assert advisory_warnings(buy, rent) == []


def test_zero_mortgage_rate_is_within_usual_range():
    buy = parse_buy_inputs(BuyInputs(mortgage_rate="0"))
    rent = parse_rent_inputs(RentInputs(), buy)
    assert advisory_warnings(buy, rent) == []
