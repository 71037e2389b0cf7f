"""Push game snapshots to connected WebSocket clients."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SUBSCRIBER_QUEUE_SIZE = 16


@dataclass(eq=False)
class Subscription:
    game_id: Optional[str]
    loop: asyncio.AbstractEventLoop
    queue: "asyncio.Queue[Dict[str, Any]]"

    def wants(self, game_id: str) -> bool:
        return self.game_id is None or self.game_id == game_id

    def offer(self, snapshot: Dict[str, Any]) -> None:
        """Queue ``snapshot``, dropping the oldest one if the client is behind.

        Runs on the subscriber's event loop.
        """
        if self.queue.full():
            self.queue.get_nowait()
            logger.debug("Subscriber for %s is behind; dropped a snapshot", self.game_id or "all games")
        self.queue.put_nowait(snapshot)


class BroadcastHub:
    """Fan snapshots out to subscribers.

    ``publish`` may be called from any thread: worker threads serving
    requests and the timer threads that advance tricks. Each snapshot
    carries the game's ``revision`` so clients can ignore one that arrives
    after a newer one.
    """

    def __init__(self, queue_size: int = SUBSCRIBER_QUEUE_SIZE) -> None:
        self.queue_size = queue_size
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self, game_id: Optional[str] = None) -> Subscription:
        subscription = Subscription(
            game_id=game_id,
            loop=asyncio.get_running_loop(),
            queue=asyncio.Queue(maxsize=self.queue_size),
        )
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, game_id: str, snapshot: Dict[str, Any]) -> None:
        with self._lock:
            targets = [sub for sub in self._subscriptions if sub.wants(game_id)]
        for subscription in targets:
            try:
                subscription.loop.call_soon_threadsafe(subscription.offer, snapshot)
            except RuntimeError:
                logger.warning("Dropping subscriber whose event loop has closed")
                self.unsubscribe(subscription)
