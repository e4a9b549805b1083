"""Cancellable stream of full snapshots."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Callable, Generic, TypeVar

T = TypeVar("T")


class Subscription(Generic[T]):
    """Live view over a store collection.

    Every value published is the complete current state and supersedes the
    previous one. Consumers either pass a callback or iterate with
    ``async for``; iteration yields the latest value and may skip
    intermediate ones. After ``cancel()`` nothing more is delivered.
    """

    def __init__(
        self,
        on_snapshot: Callable[[T], None] | None = None,
        on_cancel: Callable[["Subscription[T]"], None] | None = None,
    ) -> None:
        self._on_snapshot = on_snapshot
        self._on_cancel = on_cancel
        self._detach: Callable[[], None] | None = None
        self._cancelled = False
        self._latest: T | None = None
        self._version = 0
        self._waker = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def latest(self) -> T | None:
        return self._latest

    def bind(self, detach: Callable[[], None]) -> None:
        """Attach the store listener, replacing any previous one."""
        self.unbind()
        self._detach = detach

    def unbind(self) -> None:
        if self._detach is not None:
            detach, self._detach = self._detach, None
            detach()

    def publish(self, value: T) -> None:
        if self._cancelled:
            return
        self._latest = value
        self._version += 1
        if self._on_snapshot is not None:
            self._on_snapshot(value)
        self._wake()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self.unbind()
        self._wake()
        if self._on_cancel is not None:
            self._on_cancel(self)

    def _wake(self) -> None:
        waker, self._waker = self._waker, asyncio.Event()
        waker.set()

    async def __aiter__(self) -> AsyncIterator[T]:
        seen = 0
        while not self._cancelled:
            if self._version > seen:
                seen = self._version
                yield self._latest  # type: ignore[misc]
                continue
            await self._waker.wait()

    async def first(self, timeout: float | None = None) -> T:
        """Wait for the next snapshot (or return the current one)."""

        async def _next() -> T:
            async for value in self:
                return value
            raise RuntimeError("Subscription cancelled before a snapshot arrived")

        return await asyncio.wait_for(_next(), timeout)
