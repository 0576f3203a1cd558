"""Single-flight guard for chain writes.

At most one write per (operation, account) key runs at a time. A repeat of
the exact same call while it is in flight joins it and receives the same
result; a different call under the same key is refused with
OperationInProgress. The key is released as soon as the write settles.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Any, TypeVar

import structlog

from evault.core.exceptions import OperationInProgress

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

T = TypeVar("T")


class SingleFlight:
    """Coalesce identical in-flight writes and reject conflicting ones."""

    def __init__(self) -> None:
        self._inflight: dict[Hashable, tuple[Hashable, asyncio.Future[Any]]] = {}

    def in_flight(self, key: Hashable) -> bool:
        return key in self._inflight

    async def run(
        self,
        key: Hashable,
        fingerprint: Hashable,
        factory: Callable[[], Awaitable[T]],
    ) -> T:
        current = self._inflight.get(key)
        if current is not None:
            running_fingerprint, running = current
            if running_fingerprint != fingerprint:
                raise OperationInProgress(
                    "Another request for this operation is still being confirmed",
                    details={"operation": _describe(key)},
                )
            logger.info("single_flight_joined", operation=_describe(key))
            result: T = await asyncio.shield(running)
            return result

        task: asyncio.Future[T] = asyncio.ensure_future(factory())
        self._inflight[key] = (fingerprint, task)
        task.add_done_callback(lambda _: self._release(key, task))
        return await asyncio.shield(task)

    def _release(self, key: Hashable, task: asyncio.Future[Any]) -> None:
        current = self._inflight.get(key)
        if current is not None and current[1] is task:
            del self._inflight[key]


def _describe(key: Hashable) -> str:
    if isinstance(key, tuple):
        return ":".join(str(part) for part in key)
    return str(key)
