import asyncio
from decimal import Decimal

import pytest

from depthsim.book.store import OrderBook
from depthsim.exceptions import InvalidSimulationRequest
from depthsim.execution import (
    HIGH_IMPACT_WARNING,
    MARKET_PRICE_UNAVAILABLE,
    OrderType,
    Side,
    SimulationRequest,
    evaluate,
    simulate,
)
from depthsim.execution.slippage import slippage_pct, walk_book

from fixtures.feeds import D, levels


def _req(side="Buy", type_="Market", qty=1, price=None, delays=(0,)):
    return SimulationRequest(side=side, type_=type_, quantity=qty, price=price, delays=frozenset(delays))


def test_market_buy_walks_asks():
    book = OrderBook(asks=levels((100, 2), (101, 3)))
    res = evaluate(_req(qty=4), book)
    assert res.filled_quantity == D(4)
    assert res.avg_fill_price == D("100.5")
    assert res.fill_percentage == D(100)
    assert res.market_price == D(100)
    assert res.sim_price == D(100)
    assert res.slippage_pct == D("0.5")
    assert res.fills == levels((100, 2), (101, 2))
    assert res.warning is None
    assert res.error is None


def test_limit_buy_below_best_ask_does_not_cross():
    book = OrderBook(asks=levels((100, 2)))
    res = evaluate(_req(type_="Limit", price=99, qty=5), book)
    assert res.filled_quantity == D(0)
    assert res.fill_percentage == D(0)
    assert res.avg_fill_price is None
    assert res.slippage_pct is None
    assert res.sim_price == D(99)
    assert res.market_price == D(100)


def test_empty_side_reports_missing_market_price():
    book = OrderBook(bids=levels((99, 1)))
    res = evaluate(_req(qty=1), book)
    assert res.error == MARKET_PRICE_UNAVAILABLE
    assert res.filled_quantity is None
    assert res.fill_percentage is None
    assert res.avg_fill_price is None
    assert res.market_price is None
    assert res.slippage_pct is None


def test_limit_sell_fills_bids_at_or_above_price(ladder_book):
    res = evaluate(_req(side="sell", type_="limit", price=98, qty=5), ladder_book)
    assert res.filled_quantity == D(3)
    assert res.fill_percentage == D(60)
    assert res.avg_fill_price == (D(99) + D(196)) / 3
    assert res.market_price == D(99)


def test_partial_fill_when_book_exhausted(ladder_book):
    res = evaluate(_req(qty=10), ladder_book)
    assert res.filled_quantity == D(5)
    assert res.fill_percentage == D(50)


def test_high_slippage_raises_warning():
    book = OrderBook(asks=levels((100, 1), (110, 1)))
    res = evaluate(_req(qty=2), book)
    assert res.slippage_pct == D(5)
    assert res.warning == HIGH_IMPACT_WARNING
    assert evaluate(_req(qty=2), book, warn_pct=10).warning is None


def test_limit_price_through_book_walks_crossing_levels_only(ladder_book):
    res = evaluate(_req(type_="Limit", price="100.5", qty=4), ladder_book)
    assert res.fills == levels((100, 2))


@pytest.mark.asyncio
async def test_simulate_runs_one_result_per_delay_with_own_book():
    books = {
        0: OrderBook(asks=levels((100, 1))),
        5: OrderBook(asks=levels((105, 1))),
        10: OrderBook(),
    }
    seen = []

    async def provider(delay):
        seen.append(delay)
        await asyncio.sleep(0)
        return books[delay]

    results = await simulate(_req(qty=1, delays={10, 0, 5}), provider)
    assert [r.delay for r in results] == [0, 5, 10]
    assert sorted(seen) == [0, 5, 10]
    assert results[0].avg_fill_price == D(100)
    assert results[1].avg_fill_price == D(105)
    assert results[2].error == MARKET_PRICE_UNAVAILABLE


@pytest.mark.asyncio
async def test_simulate_accepts_sync_provider(ladder_book):
    results = await simulate(_req(side=Side.SELL, qty=1), lambda delay: ladder_book)
    assert results[0].avg_fill_price == D(99)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"qty": 0},
        {"qty": -1},
        {"type_": "Limit", "price": None},
        {"type_": "Limit", "price": 0},
        {"delays": ()},
        {"delays": (-5,)},
    ],
)
async def test_invalid_requests_rejected_before_scheduling(kwargs):
    calls = []

    def provider(delay):
        calls.append(delay)
        return OrderBook()

    with pytest.raises(InvalidSimulationRequest):
        await simulate(_req(**kwargs), provider)
    assert calls == []


@pytest.mark.parametrize(
    "bad",
    [
        {"side": "hold"},
        {"type_": "stop"},
        {"qty": "abc"},
        {"qty": "NaN"},
        {"qty": "Infinity"},
        {"qty": Decimal("-Infinity")},
        {"price": "NaN", "type_": "Limit"},
        {"delays": (1.5,)},
        {"delays": ("1.5",)},
        {"delays": ("soon",)},
        {"delays": (True,)},
    ],
)
def test_request_construction_errors(bad):
    with pytest.raises(InvalidSimulationRequest):
        _req(**bad)


def test_request_coercion():
    req = SimulationRequest(side="buy", type_="LIMIT", quantity="1.5", price="100", delays=["5", 0])
    assert req.side is Side.BUY
    assert req.type_ is OrderType.LIMIT
    assert req.quantity == D("1.5")
    assert req.price == D(100)
    assert req.delays == frozenset({0, 5})


def test_result_to_dict(ladder_book):
    out = evaluate(_req(qty=1), ladder_book, delay=5).to_dict()
    assert out["delay"] == 5
    assert out["side"] == "Buy"
    assert out["avg_fill_price"] == "100"
    assert out["error"] is None


def test_walk_book_and_slippage_helpers():
    fill = walk_book(Side.BUY, OrderType.MARKET, D(100), D(1), levels((100, 3)))
    assert fill.filled_qty == D(1)
    assert fill.avg_price == D(100)
    assert walk_book(Side.BUY, OrderType.MARKET, D(100), D(1), ()).avg_price is None
    assert slippage_pct(D(99), D(100)) == D(1)
    assert slippage_pct(None, D(100)) is None
    assert slippage_pct(D(1), None) is None


@pytest.mark.parametrize("raw", [5, "5", "05", " +5", 5.0, Decimal("5.00")])
def test_whole_second_delays_accepted_in_any_notation(raw):
    assert _req(delays=(raw,)).delays == frozenset({5})
