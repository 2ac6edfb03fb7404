import json

import pytest

from buy_vs_rent.persistence import (
    STATE_ENV_VAR,
    PersistenceError,
    default_state_path,
    load_request,
    load_request_dict,
    save_request,
)
from buy_vs_rent.schemas import BuyInputs, ProjectionRequest, RentInputs


def test_save_and_resume(tmp_path):
    request = ProjectionRequest(
        BuyInputs(house_price="480000", down_payment_type="amount", down_payment_amount="60000"),
        RentInputs(monthly_rent="2700"),
    )
    path = save_request(request, tmp_path / "nested" / "inputs.json")
    assert path.exists()
    assert load_request(path) == request


def test_missing_file_means_no_saved_inputs(tmp_path):
    assert load_request(tmp_path / "absent.json") is None


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "inputs.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        load_request(path)


def test_wrong_shape_raises():
    with pytest.raises(PersistenceError):
        load_request_dict(["buy", "rent"])
    with pytest.raises(PersistenceError):
        load_request_dict({"buy_inputs": "650000"})


def test_partial_payload_keeps_defaults(caplog):
    request = load_request_dict(
        {"buy_inputs": {"house_price": 700000, "zipcode": "92101"}, "rent_inputs": {}}
    )
    assert request.buy_inputs.house_price == "700000"
    assert request.buy_inputs.mortgage_rate == BuyInputs().mortgage_rate
    assert request.rent_inputs == RentInputs()
    assert "zipcode" in caplog.text


def test_saved_file_is_plain_json(tmp_path):
    path = save_request(ProjectionRequest(), tmp_path / "inputs.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"buy_inputs", "rent_inputs"}
    assert data["rent_inputs"]["monthly_rent"] == "3250"


def test_state_path_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(STATE_ENV_VAR, str(tmp_path / "state.json"))
    assert default_state_path() == tmp_path / "state.json"
    monkeypatch.delenv(STATE_ENV_VAR)
    assert default_state_path().name == "inputs.json"


def test_null_values_load_as_blank(tmp_path):
    path = tmp_path / "inputs.json"
    path.write_text(
        json.dumps({"buy_inputs": {}, "rent_inputs": {"initial_investment": None}}),
        encoding="utf-8",
    )
    request = load_request(path)
    assert request.rent_inputs.initial_investment == ""
    assert load_request(save_request(request, path)) == request
