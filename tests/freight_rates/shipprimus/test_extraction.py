import pytest

from freight_rates.shipprimus.extraction import (
    ACCESS_TOKEN_RULES,
    CARRIER_RULES,
    RESULTS_RULES,
    first_present,
    is_nonempty_text,
    resolve,
)


@pytest.mark.unit
def test_resolve_walks_nested_mappings():
    assert resolve({"data": {"token": "t"}}, ("data", "token")) == "t"
    assert resolve({"data": "flat"}, ("data", "token")) is None
    assert resolve(None, ("data",)) is None


@pytest.mark.unit
def test_first_present_follows_rule_order():
    record = {"name": "by-name", "carrier": "by-carrier"}
    assert first_present(record, CARRIER_RULES) == "by-name"
    assert first_present({"carrier": "by-carrier"}, CARRIER_RULES) == "by-carrier"


@pytest.mark.unit
def test_first_present_skips_null_values_and_falls_back():
    body = {"accessToken": None, "data": {"accessToken": "nested"}}
    assert first_present(body, ACCESS_TOKEN_RULES) == "nested"


@pytest.mark.unit
def test_first_present_keeps_falsy_non_null_values():
    assert first_present({"name": ""}, CARRIER_RULES, "UNKNOWN") == ""
    assert first_present({"results": []}, RESULTS_RULES) == []


@pytest.mark.unit
def test_first_present_default():
    assert first_present({}, CARRIER_RULES, "UNKNOWN") == "UNKNOWN"
    assert first_present({}, RESULTS_RULES) is None


@pytest.mark.unit
@pytest.mark.parametrize("empty", ["", "   ", 123, None])
def test_first_present_with_nonempty_text_skips_unusable_tokens(empty):
    body = {"accessToken": empty, "data": {"accessToken": "nested"}}
    assert first_present(body, ACCESS_TOKEN_RULES, present=is_nonempty_text) == "nested"


@pytest.mark.unit
def test_first_present_with_nonempty_text_returns_default_when_all_empty():
    body = {"accessToken": "", "data": {"accessToken": " "}}
    assert first_present(body, ACCESS_TOKEN_RULES, present=is_nonempty_text) is None
