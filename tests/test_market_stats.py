import dataclasses

import pytest

from depthsim.book.stats import MarketStatsCache
from depthsim.types import MarketStats

from fixtures.feeds import D


def test_replace_is_last_write_wins():
    cache = MarketStatsCache()
    assert cache.get() is None
    cache.replace(D(100), D(5))
    cache.replace(D(101), D(7))
    assert cache.get() == MarketStats(last=D(101), vol24h=D(7))


def test_stats_are_immutable_and_resettable():
    cache = MarketStatsCache()
    stats = cache.replace(D(1), D(2))
    with pytest.raises(dataclasses.FrozenInstanceError):
        stats.last = D(3)
    cache.reset()
    assert cache.get() is None
