"""
Request-Scoped Memoizer

De-duplicates lookups for the same key within one inbound request. The
first call for a key starts the work as a task; every later call in the
same scope awaits that same task and sees the same value or the same
exception.

Callers await the task through asyncio.shield, so a caller that is
cancelled (client disconnect, timeout) does not cancel the work other
callers are waiting on.

A scope is created per request by the API dependency layer and dropped
with the request; there is no teardown.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from biolink.core.config.constants import Stage
from biolink.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

T = TypeVar("T")


def _consume_exception(task: asyncio.Task) -> None:
    # Marks the exception as retrieved when every waiter was cancelled;
    # waiters that are still attached receive it unchanged.
    if not task.cancelled():
        task.exception()


class RequestScope:
    """
    Map of (namespace, key) → in-flight or finished task, for one request.

    Usage:
        scope = RequestScope()
        a, b = await asyncio.gather(
            resolver.get_profile("alice", scope),
            resolver.get_profile("alice", scope),
        )   # one lookup, two results
    """

    def __init__(self, request_id: str | None = None):
        self.request_id = request_id
        self._tasks: dict[tuple[str, str], asyncio.Task] = {}

    async def memoize(
        self, namespace: str, key: str, producer: Callable[[], Awaitable[T]]
    ) -> T:
        """
        Run producer once per (namespace, key) in this scope.

        STAGE-1.0: Request scope lookup
        """
        scope_key = (namespace, key)
        task = self._tasks.get(scope_key)
        if task is None:
            task = asyncio.ensure_future(producer())
            task.add_done_callback(_consume_exception)
            self._tasks[scope_key] = task
        else:
            log_stage(logger, Stage.REQUEST_SCOPE, "Request scope hit", level="debug",
                      namespace=namespace, key=key)
        return await asyncio.shield(task)

    def __contains__(self, scope_key: tuple[str, str]) -> bool:
        return scope_key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def pending(self) -> list[tuple[str, str]]:
        """Keys whose work has not finished yet."""
        return [k for k, task in self._tasks.items() if not task.done()]

    def describe(self) -> dict[str, Any]:
        return {"request_id": self.request_id, "keys": len(self._tasks), "pending": len(self.pending())}
