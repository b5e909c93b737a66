"""
Unit Tests for RequestScope

Tests per-request de-duplication: shared results, shared exceptions, and
isolation of the shared work from cancelled callers.
"""

import asyncio

import pytest

from biolink.caching.request_scope import RequestScope
from biolink.core.exceptions import PersistenceError


class GatedProducer:
    """Producer factory that counts starts and blocks until released."""

    def __init__(self, result="value", error: Exception | None = None):
        self.result = result
        self.error = error
        self.starts = 0
        self.release = asyncio.Event()

    def __call__(self):
        return self._run()

    async def _run(self):
        self.starts += 1
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.unit
class TestRequestScope:
    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_producer(self):
        scope = RequestScope("req_1")
        producer = GatedProducer(result={"username": "alice"})

        calls = [asyncio.create_task(scope.memoize("profile", "alice", producer)) for _ in range(5)]
        await asyncio.sleep(0)
        producer.release.set()
        results = await asyncio.gather(*calls)

        assert producer.starts == 1
        assert all(result is results[0] for result in results)

    @pytest.mark.asyncio
    async def test_later_call_reuses_finished_result(self):
        scope = RequestScope()
        producer = GatedProducer()
        producer.release.set()

        first = await scope.memoize("profile", "alice", producer)
        second = await scope.memoize("profile", "alice", producer)

        assert first == second == "value"
        assert producer.starts == 1

    @pytest.mark.asyncio
    async def test_keys_and_namespaces_are_distinct(self):
        scope = RequestScope()
        producer = GatedProducer()
        producer.release.set()

        await scope.memoize("profile", "launch", producer)
        await scope.memoize("ai-page", "launch", producer)
        await scope.memoize("profile", "other", producer)

        assert producer.starts == 3
        assert len(scope) == 3
        assert ("ai-page", "launch") in scope

    @pytest.mark.asyncio
    async def test_exception_shared_by_all_callers(self):
        scope = RequestScope()
        producer = GatedProducer(error=PersistenceError("Failed to fetch profile."))

        calls = [asyncio.create_task(scope.memoize("profile", "alice", producer)) for _ in range(3)]
        await asyncio.sleep(0)
        producer.release.set()
        results = await asyncio.gather(*calls, return_exceptions=True)

        assert producer.starts == 1
        assert all(isinstance(result, PersistenceError) for result in results)
        assert results[0] is results[1] is results[2]

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_work(self):
        scope = RequestScope()
        producer = GatedProducer(result="done")

        abandoned = asyncio.create_task(scope.memoize("profile", "alice", producer))
        waiting = asyncio.create_task(scope.memoize("profile", "alice", producer))
        await asyncio.sleep(0)

        abandoned.cancel()
        await asyncio.sleep(0)
        producer.release.set()

        assert await waiting == "done"
        assert abandoned.cancelled()
        assert producer.starts == 1

    @pytest.mark.asyncio
    async def test_pending_and_describe(self):
        scope = RequestScope("req_42")
        producer = GatedProducer()

        call = asyncio.create_task(scope.memoize("profile", "alice", producer))
        await asyncio.sleep(0)

        assert scope.pending() == [("profile", "alice")]
        assert scope.describe() == {"request_id": "req_42", "keys": 1, "pending": 1}

        producer.release.set()
        await call
        assert scope.pending() == []

    @pytest.mark.asyncio
    async def test_scopes_are_independent(self):
        producer = GatedProducer()
        producer.release.set()

        await RequestScope().memoize("profile", "alice", producer)
        await RequestScope().memoize("profile", "alice", producer)

        assert producer.starts == 2
