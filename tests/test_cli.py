import json
import sys

import pytest
from typer.testing import CliRunner

import importlib

cli_main = importlib.import_module("depthsim.cli.main")

from fixtures.feeds import FakeConnector, FakeWebSocket

OKX_BOOK = json.dumps(
    {
        "arg": {"channel": "books", "instId": "BTC-USDT"},
        "data": [{"bids": [["99", "1", "0", "1"]], "asks": [["100", "2", "0", "1"]]}],
    }
)


@pytest.fixture(autouse=True)
def _quiet(monkeypatch):
    monkeypatch.setattr(cli_main, "setup_logging", lambda level=None: None)


def test_venues_lists_instruments():
    runner = CliRunner()
    result = runner.invoke(cli_main.app, ["venues", "--symbol", "btc/usd"])
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0].split()[:2] == ["bybit", "BTCUSD"]
    assert lines[1].split()[:2] == ["deribit", "BTC-PERPETUAL"]
    assert lines[2].split()[:2] == ["okx", "BTC-USDT"]


@pytest.mark.parametrize(
    "args",
    [
        ["watch", "--venue", "kraken"],
        ["venues", "--symbol", "BTC"],
        ["simulate", "--qty", "0"],
        ["simulate", "--qty", "1", "--type", "Limit"],
        ["simulate", "--qty", "1", "--side", "hold"],
    ],
)
def test_invalid_arguments_rejected(args):
    result = CliRunner().invoke(cli_main.app, args)
    assert result.exit_code == 2


def test_simulate_prints_results(monkeypatch):
    connector = FakeConnector(FakeWebSocket([OKX_BOOK], hold=True))
    monkeypatch.setattr("depthsim.live.session.websockets.connect", connector)
    result = CliRunner().invoke(
        cli_main.app,
        ["simulate", "--venue", "okx", "--symbol", "BTC-USDT", "--qty", "1", "--timeout", "2"],
    )
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out[0]["delay"] == 0
    assert out[0]["avg_fill_price"] == "100"
    assert out[0]["error"] is None


def test_simulate_exits_when_feed_fails(monkeypatch):
    def refuse(url, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr("depthsim.live.session.websockets.connect", refuse)
    result = CliRunner().invoke(
        cli_main.app, ["simulate", "--venue", "bybit", "--qty", "1", "--timeout", "1"]
    )
    assert result.exit_code == 1


def test_main_returns_exit_codes(monkeypatch, capsys):
    def refuse(url, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr("depthsim.live.session.websockets.connect", refuse)

    monkeypatch.setattr(sys, "argv", ["depthsim", "venues"])
    assert cli_main.main() == 0
    assert "BTC-PERPETUAL" in capsys.readouterr().out

    monkeypatch.setattr(sys, "argv", ["depthsim", "simulate", "--qty", "-1"])
    assert cli_main.main() == 2
    assert "quantity" in capsys.readouterr().err

    monkeypatch.setattr(sys, "argv", ["depthsim", "simulate", "--qty", "1", "--timeout", "1"])
    assert cli_main.main() == 1
    assert "no order book from bybit" in capsys.readouterr().err
