"""
Tests for the terminal client: preferences, gateway client and CLI.

The requests.Session is replaced with a MagicMock; no gateway is contacted.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from stellar_explorer.client import cli
from stellar_explorer.client.gateway_client import GatewayClient, GatewayClientError, route_search
from stellar_explorer.client.preferences import (
    Preferences,
    load_preferences,
    save_preferences,
    toggle_network,
    toggle_theme,
)

ACCOUNT = "G" + "A" * 55
CONTRACT = "C" + "A" * 55
TX_HASH = "ab" * 32


def _response(status=200, payload=None):
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 300
    r.json.return_value = payload if payload is not None else {}
    return r


@pytest.fixture
def prefs_path(tmp_path, monkeypatch):
    path = tmp_path / "prefs" / "preferences.json"
    monkeypatch.setenv("STELLAR_EXPLORER_PREFS", str(path))
    return path


# -----------------------------------------------------------------------------
# Preferences
# -----------------------------------------------------------------------------


def test_preferences_roundtrip(prefs_path):
    assert load_preferences() == Preferences("mainnet", "light")
    save_preferences(toggle_theme(toggle_network(Preferences())))
    assert load_preferences() == Preferences("testnet", "dark")
    assert json.loads(prefs_path.read_text()) == {"network": "testnet", "theme": "dark"}


def test_invalid_preferences_fall_back_to_defaults(prefs_path):
    prefs_path.parent.mkdir(parents=True)
    prefs_path.write_text("{not json")
    assert load_preferences() == Preferences()
    prefs_path.write_text(json.dumps({"network": "futurenet", "theme": "dark"}))
    assert load_preferences() == Preferences("mainnet", "dark")


# -----------------------------------------------------------------------------
# Gateway client
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "term, route",
    [
        (ACCOUNT, f"/account/{ACCOUNT}"),
        (CONTRACT, f"/contract/{CONTRACT}"),
        (TX_HASH, f"/tx/{TX_HASH}"),
        ("42", "/ledger/42"),
        ("hello", None),
    ],
)
def test_route_search(term, route):
    assert route_search(term) == route


def test_client_sends_network():
    session = MagicMock()
    session.get.return_value = _response(payload=[{"sequence": 1}])
    client = GatewayClient("http://gw:3001/", network="testnet", session=session, timeout=3)

    assert client.recent_ledgers(5) == [{"sequence": 1}]
    session.get.assert_called_once_with(
        "http://gw:3001/api/ledgers",
        params={"limit": 5, "network": "testnet"},
        timeout=3,
    )


def test_client_raises_on_error_status():
    session = MagicMock()
    session.get.return_value = _response(404, {"message": "Transaction not found."})
    client = GatewayClient(session=session)
    with pytest.raises(GatewayClientError) as excinfo:
        client.transaction(TX_HASH)
    assert excinfo.value.status == 404
    assert excinfo.value.payload["message"] == "Transaction not found."


# -----------------------------------------------------------------------------
# CLI
# -----------------------------------------------------------------------------


def test_cli_search_is_local(capsys, monkeypatch):
    monkeypatch.setattr(cli, "GatewayClient", MagicMock(side_effect=AssertionError("no network")))
    assert cli.main(["search", "123"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"type": "ledger", "sequence": "123", "route": "/ledger/123"}
    assert cli.main(["search", "hello"]) == 1


def test_cli_network_toggle_persists(prefs_path, capsys):
    assert cli.main(["network", "toggle"]) == 0
    assert capsys.readouterr().out.strip() == "testnet"
    assert load_preferences().network == "testnet"
    assert cli.main(["theme", "dark"]) == 0
    assert load_preferences() == Preferences("testnet", "dark")


def test_cli_uses_saved_network(prefs_path, monkeypatch, capsys):
    save_preferences(Preferences(network="testnet"))
    instance = MagicMock()
    instance.ledger.return_value = {"sequence": 9}
    factory = MagicMock(return_value=instance)
    monkeypatch.setattr(cli, "GatewayClient", factory)

    assert cli.main(["ledger", "9"]) == 0
    assert factory.call_args.kwargs["network"] == "testnet"
    assert json.loads(capsys.readouterr().out) == {"sequence": 9}


def test_cli_reports_gateway_error(prefs_path, monkeypatch, capsys):
    instance = MagicMock()
    instance.account.side_effect = GatewayClientError(404, {"message": "Account not found."})
    monkeypatch.setattr(cli, "GatewayClient", MagicMock(return_value=instance))

    assert cli.main(["account", ACCOUNT]) == 1
    assert json.loads(capsys.readouterr().out) == {"status": 404, "message": "Account not found."}


def test_watch_polls_until_iterations(capsys):
    calls = []
    sleeps = []

    def fetch():
        calls.append(1)
        if len(calls) == 2:
            raise GatewayClientError(503, {"message": "down"})
        return [{"n": len(calls)}]

    assert cli.watch(fetch, interval=30, iterations=3, sleep=sleeps.append) == 0
    assert len(calls) == 3
    assert sleeps == [30, 30]
    assert "poll failed" in capsys.readouterr().err


def test_cli_stdout_stays_json_when_gateway_unreachable(prefs_path, monkeypatch, capsys):
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("connection refused")
    monkeypatch.setattr(
        cli,
        "GatewayClient",
        lambda *args, **kwargs: GatewayClient(*args, session=session, **kwargs),
    )

    assert cli.main(["account", ACCOUNT]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out == {"status": 0, "message": "connection refused"}


def test_cli_stdout_stays_json_on_gateway_error(prefs_path, monkeypatch, capsys):
    session = MagicMock()
    session.get.return_value = _response(503, {"message": "Service temporarily unavailable. Try again."})
    monkeypatch.setattr(
        cli,
        "GatewayClient",
        lambda *args, **kwargs: GatewayClient(*args, session=session, **kwargs),
    )

    assert cli.main(["ledger", "5"]) == 1
    assert json.loads(capsys.readouterr().out)["status"] == 503


def test_client_related_lists():
    session = MagicMock()
    session.get.return_value = _response(payload=[])
    client = GatewayClient("http://gw:3001", session=session, timeout=3)

    client.account_transactions(ACCOUNT, limit=5)
    client.transaction_operations(TX_HASH)
    client.ledger_transactions(42)

    calls = [(c.args[0], c.kwargs["params"]) for c in session.get.call_args_list]
    assert calls == [
        (f"http://gw:3001/api/accounts/{ACCOUNT}/transactions", {"limit": 5, "network": "mainnet"}),
        (f"http://gw:3001/api/transactions/{TX_HASH}/operations", {"network": "mainnet"}),
        ("http://gw:3001/api/ledgers/42/transactions", {"network": "mainnet"}),
    ]


def test_cli_related_list_flags(prefs_path, monkeypatch, capsys):
    instance = MagicMock()
    instance.account_transactions.return_value = [{"hash": TX_HASH}]
    instance.transaction_operations.return_value = [{"type": "payment"}]
    instance.ledger_transactions.return_value = []
    monkeypatch.setattr(cli, "GatewayClient", MagicMock(return_value=instance))

    assert cli.main(["account", ACCOUNT, "--transactions", "--limit", "5"]) == 0
    instance.account_transactions.assert_called_once_with(ACCOUNT, limit=5)
    assert json.loads(capsys.readouterr().out) == [{"hash": TX_HASH}]

    assert cli.main(["tx", TX_HASH, "--operations"]) == 0
    instance.transaction_operations.assert_called_once_with(TX_HASH)
    assert json.loads(capsys.readouterr().out) == [{"type": "payment"}]

    assert cli.main(["ledger", "42", "--transactions"]) == 0
    instance.ledger_transactions.assert_called_once_with("42", limit=None)
    instance.account.assert_not_called()
    instance.transaction.assert_not_called()
    instance.ledger.assert_not_called()
