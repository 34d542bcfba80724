"""KeyedQueue: ordered execution of async actions, one at a time per key."""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Awaitable, Callable, Optional

from common.logger import get_logger

Action = Callable[[], Awaitable[Any]]


class KeyedQueue:
    """Runs actions strictly in submission order per key, concurrently across keys.

    Every key with outstanding work maps to the tail of its chain: a future
    that resolves (and never fails) once the newest action queued for that
    key has settled. A new action waits on the current tail, then installs
    its own tail, all without yielding to the event loop, so two enqueues
    can never both chain behind the same stale tail.

    An action's result or exception goes only to the caller that queued it.
    The chain itself only observes that the action finished, so a failing
    action never blocks or fails the ones behind it.
    """

    def __init__(self) -> None:
        self._tails: dict[str, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._tails)

    def __contains__(self, key: object) -> bool:
        return key in self._tails

    def keys(self) -> list[str]:
        return list(self._tails)

    def enqueue(self, key: str, action: Action) -> asyncio.Future:
        """Queue `action` behind everything already queued for `key`.

        Returns a future for the action's own outcome. Cancelling that future
        does not interrupt the action; the chain still waits for it.
        """
        loop = asyncio.get_running_loop()
        previous = self._tails.get(key)
        tail = loop.create_future()
        self._tails[key] = tail

        task = loop.create_task(self._run(key, previous, tail, action))
        task.add_done_callback(functools.partial(self._log_outcome, key))
        return asyncio.shield(task)

    async def _run(
        self,
        key: str,
        previous: Optional[asyncio.Future],
        tail: asyncio.Future,
        action: Action,
    ) -> Any:
        try:
            if previous is not None:
                await asyncio.shield(previous)
            return await action()
        finally:
            # Only forget the key if nothing was queued behind this action.
            if self._tails.get(key) is tail:
                del self._tails[key]
            if not tail.done():
                tail.set_result(None)

    def _log_outcome(self, key: str, task: asyncio.Task) -> None:
        if task.cancelled():
            get_logger(__name__).warning("queue: action cancelled key=%s", key)
            return
        error = task.exception()
        if error is not None:
            get_logger(__name__).debug("queue: action failed key=%s error=%r", key, error)

    async def drain(self) -> None:
        """Wait until every action queued so far, for every key, has settled."""
        tails = list(self._tails.values())
        if tails:
            await asyncio.wait(tails)
