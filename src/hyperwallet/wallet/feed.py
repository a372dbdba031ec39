"""
Live feed of the most recent blocks.

``BlockFeed.mount`` subscribes to the ledger's block stream and keeps the
newest blocks in a bounded buffer. Subscribing is asynchronous: the
unsubscribe function only exists once the subscribe call completes, so it is
held in a ``BlockSubscription`` whose ``cancel`` waits for it first.

A separate tick wakes render listeners every ``tick_interval`` seconds so
relative ages ("12 seconds ago") advance while no blocks arrive. The tick
never touches the subscription.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterator, Optional, Protocol

from ..errors import SubscriptionError
from ..ledger.blocks import Block
from ..utils import relative_age, utc_now

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5
DEFAULT_TICK_INTERVAL = 10.0

Unsubscribe = Callable[[], Awaitable[None]]


class BlockSource(Protocol):
    async def listen_to_blocks(self, handler: Callable[[Block], Any], **options: Any) -> Unsubscribe:
        ...


class BlockBuffer:
    """Newest-first blocks; pushing past capacity drops the oldest."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._blocks: deque[Block] = deque(maxlen=capacity)

    def push(self, block: Block) -> None:
        self._blocks.appendleft(block)

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(list(self._blocks))

    def snapshot(self) -> list[Block]:
        return list(self._blocks)


def _log_subscribe_failure(task: "asyncio.Future[Unsubscribe]") -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Block subscription failed: %s", task.exception())


class BlockSubscription:
    """Cancellation handle for a subscription that may still be starting."""

    def __init__(self, pending: "asyncio.Task[Unsubscribe]") -> None:
        self._pending = pending
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def failed(self) -> bool:
        """True once the subscribe call has raised."""
        pending = self._pending
        return pending.done() and not pending.cancelled() and pending.exception() is not None

    async def wait_started(self) -> None:
        """Wait until the subscribe call completes.

        Raises:
            SubscriptionError: If subscribing failed
        """
        try:
            await asyncio.shield(self._pending)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise SubscriptionError(f"Subscription never started: {exc}") from exc

    async def cancel(self) -> None:
        """Unsubscribe once; later calls do nothing.

        Raises:
            SubscriptionError: If subscribing or unsubscribing failed
        """
        if self._cancelled:
            return
        self._cancelled = True
        try:
            unsubscribe = await self._pending
        except Exception as exc:
            raise SubscriptionError(f"Subscription never started: {exc}") from exc
        try:
            await unsubscribe()
        except Exception as exc:
            raise SubscriptionError(f"Unsubscribe failed: {exc}") from exc


class BlockFeed:
    def __init__(
        self,
        source: BlockSource,
        *,
        capacity: int = DEFAULT_CAPACITY,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        **listen_options: Any,
    ) -> None:
        self.source = source
        self.buffer = BlockBuffer(capacity)
        self.tick_interval = tick_interval
        self.listen_options = listen_options
        self.ticks = 0
        self._subscription: Optional[BlockSubscription] = None
        self._ticker: Optional[asyncio.Task[None]] = None
        self._listeners: list[Callable[["BlockFeed"], None]] = []

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    def subscribe(self, listener: Callable[["BlockFeed"], None]) -> None:
        """Register a render callback, called on each block and each tick."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Block feed listener failed")

    def _receive(self, block: Block) -> None:
        logger.debug("New block %s", block.height)
        self.buffer.push(block)
        self._notify()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self.ticks += 1
            self._notify()

    def mount(self) -> BlockSubscription:
        """Start the subscription and the tick. Must run inside an event loop.

        Mounting an already mounted feed returns the existing subscription.
        """
        if self._subscription is not None:
            return self._subscription
        pending = asyncio.ensure_future(
            self.source.listen_to_blocks(self._receive, **self.listen_options)
        )
        pending.add_done_callback(_log_subscribe_failure)
        self._subscription = BlockSubscription(pending)
        self._ticker = asyncio.create_task(self._tick())
        return self._subscription

    async def unmount(self) -> None:
        """Stop the tick and unsubscribe. Errors are logged, never raised."""
        subscription, ticker = self._subscription, self._ticker
        self._subscription = None
        self._ticker = None

        if ticker is not None:
            ticker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticker

        if subscription is None:
            return
        try:
            await subscription.cancel()
        except SubscriptionError as exc:
            # subscribe failures were already logged when they happened
            if not subscription.failed:
                logger.error("Error unsubscribing: %s", exc)

    def blocks(self) -> list[Block]:
        return self.buffer.snapshot()

    def view(self, now: Optional[datetime] = None) -> list[tuple[Block, str]]:
        """Blocks newest first, each with its age relative to ``now``."""
        now = now or utc_now()
        return [(block, relative_age(block.produced_at, now)) for block in self.buffer]
