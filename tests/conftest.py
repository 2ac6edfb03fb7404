import pytest

from buy_vs_rent.parsing import parse_buy_inputs, parse_rent_inputs
from buy_vs_rent.schemas import BuyInputs, RentInputs


@pytest.fixture
def buy_config():
    return parse_buy_inputs(BuyInputs())


@pytest.fixture
def rent_config(buy_config):
    return parse_rent_inputs(RentInputs(), buy_config)
