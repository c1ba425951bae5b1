from depthsim.adapters import DeribitAdapter
from depthsim.config import Settings, settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.default_venue == "bybit"
    assert s.book_depth == 15
    assert s.slippage_warn_pct == 1.0
    assert s.deribit_ping_interval == 5.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BOOK_DEPTH", "5")
    monkeypatch.setenv("OKX_WS_URL", "wss://example.invalid/ws")
    monkeypatch.setenv("LOG_JSON", "true")
    s = Settings(_env_file=None)
    assert s.book_depth == 5
    assert s.okx_ws_url == "wss://example.invalid/ws"
    assert s.log_json is True


def test_adapters_read_current_settings(monkeypatch):
    monkeypatch.setattr(settings, "deribit_ping_interval", 1.5)
    monkeypatch.setattr(settings, "deribit_ws_url", "wss://test.deribit.com/ws/api/v2")
    adapter = DeribitAdapter()
    assert adapter.heartbeat_interval == 1.5
    assert adapter.ws_url == "wss://test.deribit.com/ws/api/v2"
