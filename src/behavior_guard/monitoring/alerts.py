"""Alert Channels - non-blocking fan-out of findings to subscribers."""

import logging
import queue
import threading
from typing import Generic, Iterator, Optional, TypeVar

from behavior_guard.common.constants import AlertConstants
from behavior_guard.common.exceptions import ChannelClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription(Generic[T]):
    """One subscriber's bounded view of an AlertChannel.

    When the queue is full, new events are dropped for this subscriber
    only and counted.
    """

    def __init__(self, channel_name: str, max_queue_size: int):
        self.channel_name = channel_name
        self.max_queue_size = max_queue_size
        self._queue: queue.Queue[T] = queue.Queue(maxsize=max_queue_size)
        self._closed = threading.Event()

        # Statistics
        self._delivered = 0
        self._dropped = 0
        self._stats_lock = threading.Lock()

    def _offer(self, event: T) -> bool:
        if self._closed.is_set():
            return False
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            with self._stats_lock:
                self._dropped += 1
            logger.debug(f"Subscriber queue full on '{self.channel_name}', event dropped")
            return False
        with self._stats_lock:
            self._delivered += 1
        return True

    def _close(self) -> None:
        self._closed.set()

    def get(self, timeout: Optional[float] = AlertConstants.QUEUE_GET_TIMEOUT) -> Optional[T]:
        """Next event, or None if nothing arrived within `timeout`.

        Args:
            timeout: Seconds to wait. Zero polls without waiting.
        """
        try:
            if timeout == 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[T]:
        """Remove and return everything currently queued."""
        events: list[T] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def __iter__(self) -> Iterator[T]:
        """Yield events until the channel closes and the queue is empty."""
        while True:
            if self._closed.is_set():
                try:
                    event = self._queue.get_nowait()
                except queue.Empty:
                    return
            else:
                try:
                    event = self._queue.get(timeout=AlertConstants.QUEUE_GET_TIMEOUT)
                except queue.Empty:
                    continue
            yield event

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def pending(self) -> int:
        """Events queued but not yet read."""
        return self._queue.qsize()

    @property
    def dropped(self) -> int:
        with self._stats_lock:
            return self._dropped

    def get_stats(self) -> dict:
        with self._stats_lock:
            return {
                "delivered": self._delivered,
                "dropped": self._dropped,
                "pending": self._queue.qsize(),
                "max_queue_size": self.max_queue_size,
            }


class AlertChannel(Generic[T]):
    """Broadcast channel with one bounded queue per subscriber.

    publish() never blocks: each subscriber either gets the event queued
    or has it dropped and counted.
    """

    DEFAULT_QUEUE_SIZE = AlertConstants.SUBSCRIBER_QUEUE_SIZE

    def __init__(self, name: str, max_queue_size: int = DEFAULT_QUEUE_SIZE):
        self.name = name
        self.max_queue_size = max_queue_size
        self._subscribers: list[Subscription[T]] = []
        self._lock = threading.Lock()
        self._closed = False
        self._published = 0

    def subscribe(self, max_queue_size: Optional[int] = None) -> Subscription[T]:
        """Register a new subscriber.

        Args:
            max_queue_size: Queue bound for this subscriber. Channel default if None.

        Raises:
            ChannelClosedError: If the channel was closed
        """
        subscription: Subscription[T] = Subscription(
            self.name, max_queue_size or self.max_queue_size
        )
        with self._lock:
            if self._closed:
                raise ChannelClosedError(self.name)
            self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)
        subscription._close()

    def publish(self, event: T) -> int:
        """Offer an event to every subscriber.

        Returns:
            Number of subscribers the event was queued for
        """
        with self._lock:
            if self._closed:
                logger.debug(f"Publish on closed channel '{self.name}' ignored")
                return 0
            subscribers = list(self._subscribers)
            self._published += 1

        return sum(1 for s in subscribers if s._offer(event))

    def close(self) -> None:
        """Close the channel. Queued events stay readable."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscribers = list(self._subscribers)
            self._subscribers.clear()

        for subscription in subscribers:
            subscription._close()
        logger.debug(f"Alert channel '{self.name}' closed")

    @property
    def is_closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def get_stats(self) -> dict:
        """Get channel statistics."""
        with self._lock:
            subscribers = list(self._subscribers)
            published = self._published
        return {
            "published": published,
            "subscribers": len(subscribers),
            "dropped": sum(s.dropped for s in subscribers),
        }
