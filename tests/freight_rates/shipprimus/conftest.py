import pytest

from freight_rates.shipprimus.config import ShipPrimusConfig


@pytest.fixture
def config():
    return ShipPrimusConfig(
        base_url="https://api.example.com/api/v1",
        username="test",
        password="1234",
        vendor_id="42",
    )
