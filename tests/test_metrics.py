from depthsim.book.store import OrderBook
from depthsim.execution import SimulationRequest, evaluate
from depthsim.feed import decode
from depthsim.utils.metrics import (
    FRAMES,
    PROTOCOL_ERRORS,
    SIM_SLIPPAGE,
    SIMULATIONS,
)

from fixtures.feeds import levels


def _sample(metric, name, **labels):
    for family in metric.collect():
        for s in family.samples:
            if s.name == name and all(s.labels.get(k) == v for k, v in labels.items()):
                return s.value
    return 0.0


def test_decoder_counts_frames_by_kind():
    FRAMES.clear()
    PROTOCOL_ERRORS.clear()

    decode("bybit", '{"op":"pong","success":true}')
    decode("bybit", "garbage")
    decode("bybit", '{"topic":"tickers.BTCUSDT","data":{"lastPrice":"1","volume24h":"2"}}')

    assert _sample(FRAMES, "feed_frames_total", venue="bybit", kind="heartbeat") == 1.0
    assert _sample(FRAMES, "feed_frames_total", venue="bybit", kind="ticker") == 1.0
    assert _sample(FRAMES, "feed_frames_total", venue="bybit", kind="error") == 1.0
    assert _sample(PROTOCOL_ERRORS, "feed_protocol_errors_total", venue="bybit") == 1.0


def test_simulation_outcomes_and_slippage():
    SIMULATIONS.clear()
    SIM_SLIPPAGE.clear()
    book = OrderBook(asks=levels((100, 1), (102, 1)))

    evaluate(SimulationRequest("Buy", "Market", 2), book)
    evaluate(SimulationRequest("Buy", "Market", 5), book)
    evaluate(SimulationRequest("Buy", "Limit", 1, price=90), book)
    evaluate(SimulationRequest("Sell", "Market", 1), book)

    for outcome in ("filled", "partial", "unfilled", "unavailable"):
        assert _sample(SIMULATIONS, "simulations_total", outcome=outcome) == 1.0
    assert _sample(SIM_SLIPPAGE, "simulated_slippage_pct_count", side="Buy") == 2.0
    assert _sample(SIM_SLIPPAGE, "simulated_slippage_pct_sum", side="Buy") == 2.0
