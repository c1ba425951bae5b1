import logging

import pytest

from depthsim.bus import EventBus


@pytest.mark.asyncio
async def test_publish_reaches_sync_and_async_subscribers():
    bus = EventBus()
    seen = []

    async def on_async(msg):
        seen.append(("async", msg))

    bus.subscribe("ticker", lambda msg: seen.append(("sync", msg)))
    bus.subscribe("ticker", on_async)
    await bus.publish("ticker", 1)
    await bus.publish("orderbook", 2)
    assert seen == [("sync", 1), ("async", 1)]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_block_others(caplog):
    bus = EventBus()
    seen = []

    def boom(msg):
        raise RuntimeError("consumer bug")

    bus.subscribe("status", boom)
    bus.subscribe("status", seen.append)
    with caplog.at_level(logging.ERROR, logger="depthsim.bus"):
        await bus.publish("status", "x")
    assert seen == ["x"]
    assert "subscriber for 'status' failed" in caplog.text


@pytest.mark.asyncio
async def test_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe("ticker", seen.append)
    bus.unsubscribe("ticker", seen.append)
    bus.unsubscribe("ticker", seen.append)
    await bus.publish("ticker", 1)
    assert seen == []
