import importlib.util
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from freight_rates.shipprimus import AuthError, TransportHTTPError


def load_module():
    script = Path(__file__).resolve().parents[1] / "scripts" / "fetch_rates.py"
    spec = importlib.util.spec_from_file_location("fetch_rates", script)
    mod = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = mod
    spec.loader.exec_module(mod)  # type: ignore
    return mod


@pytest.fixture
def mod(monkeypatch):
    for name in ("SHIPPRIMUS_API_BASE", "SHIPPRIMUS_AUTH_TIMEOUT_SEC", "SHIPPRIMUS_RATE_TIMEOUT_SEC"):
        monkeypatch.delenv(name, raising=False)
    return load_module()


def stub_client(monkeypatch, mod, payload=None, error=None):
    """Replace build_client/get_rate_quotes so no network is touched."""
    built = {}

    def fake_build_client(config):
        built["config"] = config
        return MagicMock()

    def fake_get_rate_quotes(query, client):
        built["query"] = query
        if error is not None:
            raise error
        return payload

    monkeypatch.setattr(mod, "build_client", fake_build_client)
    monkeypatch.setattr(mod, "get_rate_quotes", fake_get_rate_quotes)
    return built


@pytest.mark.unit
def test_success_prints_payload_and_returns_zero(monkeypatch, capsys, mod):
    payload = {"data": [{"CARRIER": "A"}], "cheapest": [{"CARRIER": "A"}]}
    built = stub_client(monkeypatch, mod, payload=payload)

    rc = mod.main(
        [
            "--param", "originZipcode=33126",
            "--param", "destinationZipcode=10001",
            "--freight-info", '[{"qty":1}]',
            "--vendor-id", "321",
            "--log-level", "ERROR",
        ]
    )

    assert rc == 0
    assert json.loads(capsys.readouterr().out) == payload
    assert built["query"] == {
        "originZipcode": "33126",
        "destinationZipcode": "10001",
        "freightInfo": '[{"qty":1}]',
    }
    assert built["config"].vendor_id == "321"


@pytest.mark.unit
def test_invalid_freight_info_returns_two_with_error_message(monkeypatch, capsys, mod):
    stub_client(monkeypatch, mod, error=mod.ClientInputError("Invalid freightInfo JSON"))

    rc = mod.main(["--freight-info", "{oops", "--log-level", "ERROR"])

    assert rc == 2
    assert json.loads(capsys.readouterr().out) == {"error": "Invalid freightInfo JSON"}


@pytest.mark.unit
def test_malformed_param_is_client_input_error(monkeypatch, capsys, mod):
    stub_client(monkeypatch, mod, payload={"data": [], "cheapest": []})

    rc = mod.main(["--param", "no-equals-sign", "--log-level", "ERROR"])

    assert rc == 2
    assert "KEY=VALUE" in json.loads(capsys.readouterr().out)["error"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "error",
    [
        AuthError("Could not obtain token from auth endpoint"),
        TransportHTTPError("HTTP 500 returned from x", status_code=500, url="x"),
    ],
)
def test_upstream_failures_return_one_without_traceback(monkeypatch, capsys, mod, error):
    stub_client(monkeypatch, mod, error=error)

    rc = mod.main(["--log-level", "ERROR"])

    captured = capsys.readouterr()
    assert rc == 1
    assert json.loads(captured.out) == {"error": str(error)}
    assert "Traceback" not in captured.out
    assert "Traceback" not in captured.err


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["-3", "0"])
def test_non_positive_timeout_env_returns_one_without_traceback(monkeypatch, capsys, mod, raw):
    stub_client(monkeypatch, mod, payload={"data": [], "cheapest": []})
    monkeypatch.setenv("SHIPPRIMUS_RATE_TIMEOUT_SEC", raw)

    rc = mod.main(["--log-level", "ERROR"])

    captured = capsys.readouterr()
    assert rc == 1
    assert "greater than zero" in json.loads(captured.out)["error"]
    assert "Traceback" not in captured.err


@pytest.mark.unit
def test_log_file_is_written(monkeypatch, tmp_path, mod):
    stub_client(monkeypatch, mod, payload={"data": [], "cheapest": []})
    log_file = tmp_path / "logs" / "fetch_rates.log"

    rc = mod.main(["--log-level", "INFO", "--log-file", str(log_file)])

    assert rc == 0
    assert "Fetched 0 rates" in log_file.read_text(encoding="utf-8")
