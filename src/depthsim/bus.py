import asyncio
import logging
from collections import defaultdict
from typing import Callable, Any

log = logging.getLogger(__name__)


class EventBus:
    """In-process publish/subscribe used to push feed updates to consumers.

    Topics published by :class:`depthsim.live.session.FeedSubscription`:
    ``orderbook`` (:class:`~depthsim.book.store.BookView`), ``ticker``
    (:class:`~depthsim.types.MarketStats`), ``status``
    (:class:`~depthsim.types.ConnectionStatus`) and ``protocol_error``
    (:class:`~depthsim.types.ProtocolError`).
    """

    def __init__(self):
        self._subs: dict[str, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, topic: str, cb: Callable[[Any], None]):
        self._subs[topic].append(cb)

    def unsubscribe(self, topic: str, cb: Callable[[Any], None]):
        try:
            self._subs[topic].remove(cb)
        except ValueError:
            pass

    async def publish(self, topic: str, msg: Any):
        for cb in list(self._subs.get(topic, [])):
            try:
                res = cb(msg)
                if asyncio.iscoroutine(res):
                    await res
            except Exception:
                # a failing consumer must not stop the feed
                log.exception("subscriber for %r failed", topic)
