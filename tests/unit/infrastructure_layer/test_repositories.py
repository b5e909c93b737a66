"""
Unit Tests for the Record Stores

Tests the in-memory stores and the Redis hash stores, including retry of
transient failures and the error policy at the accessor boundary.
"""

from datetime import datetime, timedelta, timezone

import orjson
import pytest

from biolink.core.config.constants import MAX_RETRIES, REDIS_KEY_AI_PAGE_IDS, REDIS_KEY_AI_PAGES, REDIS_KEY_PROFILES
from biolink.core.exceptions import PersistenceError, SlugUnavailableError, UsernameTakenError
from biolink.infrastructure.persistence import (
    InMemoryAIPageRepository,
    InMemoryProfileRepository,
    RedisAIPageRepository,
    RedisProfileRepository,
)
from biolink.models.profile import Profile


@pytest.mark.unit
class TestInMemoryProfileRepository:
    @pytest.mark.asyncio
    async def test_create_and_fetch(self, record_factory):
        repo = InMemoryProfileRepository()
        profile = record_factory.profile("alice")

        await repo.create(profile)

        assert await repo.fetch_by_username("alice") is profile
        assert await repo.exists("alice") is True
        assert await repo.fetch_by_username("nobody") is None

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, record_factory):
        repo = InMemoryProfileRepository([record_factory.profile("alice")])

        with pytest.raises(UsernameTakenError):
            await repo.create(record_factory.profile("alice", user_id="user-9"))

    @pytest.mark.asyncio
    async def test_list_newest_first(self, record_factory):
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        older = record_factory.profile("alice", created_at=base)
        newer = record_factory.profile("bob", created_at=base + timedelta(days=1))
        repo = InMemoryProfileRepository([older, newer])

        profiles = await repo.list_all()

        assert [p.username for p in profiles] == ["bob", "alice"]


@pytest.mark.unit
class TestInMemoryAIPageRepository:
    @pytest.mark.asyncio
    async def test_save_fetch_and_lookup_by_id(self, record_factory):
        repo = InMemoryAIPageRepository()
        page = record_factory.ai_page("launch")

        await repo.save(page)

        assert await repo.fetch_by_slug("launch") is page
        assert await repo.get_by_id(page.id) is page
        assert await repo.exists("launch") is True

    @pytest.mark.asyncio
    async def test_slug_owned_by_other_page_rejected(self, record_factory):
        repo = InMemoryAIPageRepository([record_factory.ai_page("launch")])

        with pytest.raises(SlugUnavailableError):
            await repo.save(record_factory.ai_page("launch", user_id="user-2"))

    @pytest.mark.asyncio
    async def test_list_for_user_returns_summaries(self, record_factory):
        repo = InMemoryAIPageRepository(
            [
                record_factory.ai_page("one", updated_at=datetime(2025, 1, 1, tzinfo=timezone.utc)),
                record_factory.ai_page("two", updated_at=datetime(2025, 2, 1, tzinfo=timezone.utc)),
                record_factory.ai_page("theirs", user_id="user-2"),
            ]
        )

        summaries = await repo.list_for_user("user-1")

        assert [s.slug for s in summaries] == ["two", "one"]
        assert not hasattr(summaries[0], "html")

    @pytest.mark.asyncio
    async def test_delete(self, record_factory):
        page = record_factory.ai_page("launch")
        repo = InMemoryAIPageRepository([page])

        assert await repo.delete(page.id) is True
        assert await repo.delete(page.id) is False
        assert await repo.fetch_by_slug("launch") is None


@pytest.mark.unit
class TestRedisProfileRepository:
    @pytest.fixture
    def repo(self, kv_backend):
        return RedisProfileRepository(kv_backend)

    @pytest.mark.asyncio
    async def test_create_stores_json_document(self, repo, kv_backend, record_factory):
        profile = record_factory.profile("alice")

        await repo.create(profile)

        document = orjson.loads(kv_backend.hashes[REDIS_KEY_PROFILES]["alice"])
        assert document["username"] == "alice"
        assert document["links"][0]["title"] == "GitHub"

    @pytest.mark.asyncio
    async def test_fetch_round_trip(self, repo, record_factory):
        profile = record_factory.profile("alice")
        await repo.create(profile)

        fetched = await repo.fetch_by_username("alice")

        assert isinstance(fetched, Profile)
        assert fetched == profile

    @pytest.mark.asyncio
    async def test_fetch_missing(self, repo):
        assert await repo.fetch_by_username("nobody") is None

    @pytest.mark.asyncio
    async def test_create_duplicate_rejected(self, repo, record_factory):
        await repo.create(record_factory.profile("alice"))

        with pytest.raises(UsernameTakenError):
            await repo.create(record_factory.profile("alice"))

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self, repo, kv_backend, record_factory):
        await repo.create(record_factory.profile("alice"))
        kv_backend.fail_times = MAX_RETRIES - 1

        profile = await repo.fetch_by_username("alice")

        assert profile.username == "alice"

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_persistence_error(self, repo, kv_backend):
        kv_backend.down = True

        with pytest.raises(PersistenceError) as exc_info:
            await repo.fetch_by_username("alice")

        assert exc_info.value.message == "Failed to fetch profile."
        assert kv_backend.operations.count("HGET") == MAX_RETRIES

    @pytest.mark.asyncio
    async def test_corrupt_document_raises_persistence_error(self, repo, kv_backend):
        kv_backend.hashes[REDIS_KEY_PROFILES] = {"alice": "{broken"}

        with pytest.raises(PersistenceError):
            await repo.fetch_by_username("alice")

    @pytest.mark.asyncio
    async def test_list_all(self, repo, record_factory):
        await repo.create(record_factory.profile("alice"))
        await repo.create(record_factory.profile("bob"))

        assert {p.username for p in await repo.list_all()} == {"alice", "bob"}


@pytest.mark.unit
class TestRedisAIPageRepository:
    @pytest.fixture
    def repo(self, kv_backend):
        return RedisAIPageRepository(kv_backend)

    @pytest.mark.asyncio
    async def test_save_writes_page_and_id_index(self, repo, kv_backend, record_factory):
        page = record_factory.ai_page("launch")

        await repo.save(page)

        assert kv_backend.hashes[REDIS_KEY_AI_PAGE_IDS][page.id] == "launch"
        assert (await repo.fetch_by_slug("launch")) == page
        assert (await repo.get_by_id(page.id)) == page

    @pytest.mark.asyncio
    async def test_save_over_other_page_rejected(self, repo, record_factory):
        await repo.save(record_factory.ai_page("launch"))

        with pytest.raises(SlugUnavailableError):
            await repo.save(record_factory.ai_page("launch"))

    @pytest.mark.asyncio
    async def test_update_in_place(self, repo, record_factory):
        page = record_factory.ai_page("launch")
        await repo.save(page)

        await repo.save(page.model_copy(update={"prompt": "Updated"}))

        assert (await repo.fetch_by_slug("launch")).prompt == "Updated"

    @pytest.mark.asyncio
    async def test_fetch_failure_reported_as_missing(self, repo, kv_backend, record_factory):
        await repo.save(record_factory.ai_page("launch"))
        kv_backend.down = True

        assert await repo.fetch_by_slug("launch") is None

    @pytest.mark.asyncio
    async def test_delete_removes_page_and_index(self, repo, kv_backend, record_factory):
        page = record_factory.ai_page("launch")
        await repo.save(page)

        assert await repo.delete(page.id) is True
        assert await repo.delete(page.id) is False
        assert kv_backend.hashes[REDIS_KEY_AI_PAGES] == {}

    @pytest.mark.asyncio
    async def test_write_failure_raises_persistence_error(self, repo, kv_backend, record_factory):
        kv_backend.down = True

        with pytest.raises(PersistenceError):
            await repo.save(record_factory.ai_page("launch"))
