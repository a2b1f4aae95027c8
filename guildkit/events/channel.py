"""
Broadcast Channels

Async publish/subscribe channels used for every typed event stream.
Publishing iterates over a snapshot of the subscriber list, so
subscribers may come and go while a publish is in progress.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Callbacks may be plain functions or coroutines
Callback = Callable[[T], "Awaitable[Any] | Any"]
ErrorCallback = Callable[[BaseException], "Awaitable[Any] | Any"]
CompleteCallback = Callable[[], "Awaitable[Any] | Any"]

_COMPLETED = object()


async def _call(callback: Callable[..., Any], *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class Subscription(Generic[T]):
    """A single subscriber to a channel."""

    def __init__(
        self,
        channel: Channel[T],
        callback: Callback,
        on_error: ErrorCallback | None = None,
        on_complete: CompleteCallback | None = None,
        predicate: Callable[[T], bool] | None = None,
        once: bool = False,
    ) -> None:
        self._channel = channel
        self.callback = callback
        self.on_error = on_error
        self.on_complete = on_complete
        self.predicate = predicate
        self.once = once
        self._active = True

    @property
    def active(self) -> bool:
        """Whether the subscription still receives values."""
        return self._active

    def unsubscribe(self) -> None:
        """Stop receiving values. Safe to call more than once."""
        if self._active:
            self._active = False
            self._channel._remove(self)

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.unsubscribe()


class Channel(Generic[T]):
    """
    Broadcast channel for values of one type.

    Usage:
        channel: Channel[MessageEvent] = Channel("ChatMessageCreated")

        sub = channel.subscribe(on_message)
        await channel.publish(event)
        sub.unsubscribe()

        async for event in channel.stream():
            ...
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subscriptions: list[Subscription[T]] = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        callback: Callback,
        *,
        on_error: ErrorCallback | None = None,
        on_complete: CompleteCallback | None = None,
        predicate: Callable[[T], bool] | None = None,
        once: bool = False,
    ) -> Subscription[T]:
        """
        Subscribe to values published on this channel.

        Args:
            callback: Called with every value; may be async
            on_error: Called once if the channel is failed
            on_complete: Called once if the channel is completed
            predicate: Only values for which this returns True are delivered
            once: Unsubscribe after the first delivered value

        Returns:
            The subscription handle
        """
        subscription = Subscription(
            self,
            callback,
            on_error=on_error,
            on_complete=on_complete,
            predicate=predicate,
            once=once,
        )
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription[T]) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _snapshot(self) -> tuple[Subscription[T], ...]:
        with self._lock:
            return tuple(self._subscriptions)

    def _detach_all(self) -> tuple[Subscription[T], ...]:
        with self._lock:
            snapshot = tuple(self._subscriptions)
            self._subscriptions.clear()
        for subscription in snapshot:
            subscription._active = False
        return snapshot

    async def publish(self, value: T) -> None:
        """
        Deliver a value to every subscriber, in subscription order.

        Async callbacks are awaited before the next subscriber runs.
        Exceptions raised by a subscriber propagate to the publisher.
        """
        for subscription in self._snapshot():
            if not subscription.active:
                continue
            if subscription.predicate is not None and not subscription.predicate(value):
                continue
            if subscription.once:
                subscription.unsubscribe()
            await _call(subscription.callback, value)

    async def fail(self, error: BaseException) -> None:
        """Deliver an error to current subscribers and end their subscriptions."""
        snapshot = self._detach_all()
        logger.debug(
            "Channel failed",
            channel=self.name,
            subscribers=len(snapshot),
            error=str(error),
        )
        for subscription in snapshot:
            if subscription.on_error is not None:
                await _call(subscription.on_error, error)

    async def complete(self) -> None:
        """Signal completion to current subscribers and end their subscriptions."""
        for subscription in self._detach_all():
            if subscription.on_complete is not None:
                await _call(subscription.on_complete)

    async def stream(self, max_queue_size: int = 100) -> AsyncIterator[T]:
        """
        Iterate over values as they are published.

        Args:
            max_queue_size: Maximum values to buffer

        Yields:
            Published values until the channel completes

        Raises:
            The error passed to fail(), if the channel fails
        """
        queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max_queue_size)

        def push(value: Any) -> None:
            try:
                queue.put_nowait(value)
            except asyncio.QueueFull:
                logger.warning("Channel stream queue full, dropping value", channel=self.name)

        def push_terminal(value: Any) -> None:
            # Terminal markers must get through even when the buffer is full
            while queue.full():
                queue.get_nowait()
            queue.put_nowait(value)

        subscription = self.subscribe(
            push,
            on_error=push_terminal,
            on_complete=lambda: push_terminal(_COMPLETED),
        )
        try:
            while True:
                item = await queue.get()
                if item is _COMPLETED:
                    return
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            subscription.unsubscribe()

    async def wait_for(
        self,
        predicate: Callable[[T], bool] | None = None,
        timeout: float | None = None,
    ) -> T:
        """Wait for the next value matching the predicate."""
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

        def resolve(value: T) -> None:
            if not future.done():
                future.set_result(value)

        def reject(error: BaseException) -> None:
            if not future.done():
                future.set_exception(error)

        subscription = self.subscribe(resolve, on_error=reject, predicate=predicate, once=True)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        finally:
            subscription.unsubscribe()

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscriptions."""
        with self._lock:
            return len(self._subscriptions)

    def __len__(self) -> int:
        return self.subscriber_count

    def __repr__(self) -> str:
        return f"Channel({self.name!r}, subscribers={self.subscriber_count})"
