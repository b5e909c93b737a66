#!/usr/bin/env python3
"""
Redis Record Stores

Profiles and AI pages stored as orjson documents in Redis hashes:

    biolink:store:profiles      username → Profile JSON
    biolink:store:ai-pages      slug     → AIPage JSON
    biolink:store:ai-page-ids   id       → slug

Resilience:
    - Transient Redis failures (CacheError from the client) are retried
      with tenacity, exponential backoff with jitter
    - Error policy at the accessor boundary once retries are exhausted:
        fetch_by_username → logs, raises PersistenceError("Failed to fetch profile.")
        fetch_by_slug     → logs, returns None
        writes / listings → raise PersistenceError

Author: System Architect
Date: 2025-12-08
"""

import orjson
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from biolink.core.config.constants import (
    MAX_RETRIES,
    REDIS_KEY_AI_PAGE_IDS,
    REDIS_KEY_AI_PAGES,
    REDIS_KEY_PROFILES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
    Stage,
)
from biolink.core.exceptions import (
    CacheError,
    PersistenceError,
    SlugUnavailableError,
    UsernameTakenError,
)
from biolink.core.interfaces.cache import KeyValueBackend
from biolink.core.logging.logger import get_logger, log_stage
from biolink.models.ai_page import AIPage, AIPageSummary
from biolink.models.profile import Profile

logger = get_logger(__name__)


def create_retry_decorator(
    max_attempts: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
):
    """
    Retry transient store failures with exponential backoff and jitter.

    The last failure is re-raised unchanged so callers can apply their
    own error policy.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential_jitter(initial=base_delay, max=max_delay),
        retry=retry_if_exception_type(CacheError),
        reraise=True,
        before_sleep=lambda retry_state: logger.info(
            "Retrying record store operation",
            stage="STORE.RETRY",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()),
        ),
    )


store_retry = create_retry_decorator()


class RedisHashStore:
    """Retried hash operations shared by the record stores."""

    def __init__(self, backend: KeyValueBackend):
        self._backend = backend

    @store_retry
    async def _hget(self, name: str, key: str) -> str | None:
        return await self._backend.hget(name, key)

    @store_retry
    async def _hgetall(self, name: str) -> dict[str, str]:
        return await self._backend.hgetall(name)

    @store_retry
    async def _hset(self, name: str, key: str, value: str) -> int:
        return await self._backend.hset(name, key, value)

    @store_retry
    async def _hdel(self, name: str, key: str) -> int:
        return await self._backend.hdel(name, key)

    @store_retry
    async def _hexists(self, name: str, key: str) -> bool:
        return await self._backend.hexists(name, key)

    @staticmethod
    def _dump(record: Profile | AIPage) -> str:
        return orjson.dumps(record.model_dump(mode="json")).decode("utf-8")


# =============================================================================
# PROFILES
# =============================================================================


class RedisProfileRepository(RedisHashStore):
    """Profile store backed by the biolink:store:profiles hash."""

    async def fetch_by_username(self, username: str) -> Profile | None:
        """
        STAGE-4.0: Persistence fetch (profile)

        Raises:
            PersistenceError: Store unreachable or record unreadable
        """
        try:
            raw = await self._hget(REDIS_KEY_PROFILES, username)
            if raw is None:
                return None
            return Profile.model_validate(orjson.loads(raw))
        except (CacheError, orjson.JSONDecodeError, ValidationError) as e:
            log_stage(logger, Stage.PERSISTENCE_FETCH, "Failed to fetch profile",
                      level="error", username=username, error=str(e))
            raise PersistenceError.from_exception(e, "Failed to fetch profile.", username=username) from e

    async def list_all(self) -> list[Profile]:
        try:
            documents = await self._hgetall(REDIS_KEY_PROFILES)
        except CacheError as e:
            raise PersistenceError.from_exception(e, "Failed to list profiles.") from e
        profiles = [Profile.model_validate(orjson.loads(raw)) for raw in documents.values()]
        profiles.sort(key=lambda p: p.created_at, reverse=True)
        return profiles

    async def exists(self, username: str) -> bool:
        try:
            return await self._hexists(REDIS_KEY_PROFILES, username)
        except CacheError as e:
            raise PersistenceError.from_exception(e, "Failed to check username.", username=username) from e

    async def create(self, profile: Profile) -> Profile:
        if await self.exists(profile.username):
            raise UsernameTakenError("Username is already taken", details={"username": profile.username})
        return await self.update(profile)

    async def update(self, profile: Profile) -> Profile:
        try:
            await self._hset(REDIS_KEY_PROFILES, profile.username, self._dump(profile))
        except CacheError as e:
            raise PersistenceError.from_exception(
                e, "Failed to save profile.", username=profile.username
            ) from e
        return profile


# =============================================================================
# AI PAGES
# =============================================================================


class RedisAIPageRepository(RedisHashStore):
    """AI page store backed by the biolink:store:ai-pages hash and its id index."""

    async def fetch_by_slug(self, slug: str) -> AIPage | None:
        """
        STAGE-4.0: Persistence fetch (AI page)

        Storage failures are logged and reported as "not found".
        """
        try:
            raw = await self._hget(REDIS_KEY_AI_PAGES, slug)
            if raw is None:
                return None
            return AIPage.model_validate(orjson.loads(raw))
        except (CacheError, orjson.JSONDecodeError, ValidationError) as e:
            log_stage(logger, Stage.PERSISTENCE_FETCH, "Failed to fetch AI generated page",
                      level="error", slug=slug, error=str(e))
            return None

    async def get_by_id(self, page_id: str) -> AIPage | None:
        try:
            slug = await self._hget(REDIS_KEY_AI_PAGE_IDS, page_id)
            if slug is None:
                return None
            raw = await self._hget(REDIS_KEY_AI_PAGES, slug)
        except CacheError as e:
            raise PersistenceError.from_exception(e, "Failed to fetch page.", page_id=page_id) from e
        return AIPage.model_validate(orjson.loads(raw)) if raw is not None else None

    async def list_for_user(self, user_id: str) -> list[AIPageSummary]:
        try:
            documents = await self._hgetall(REDIS_KEY_AI_PAGES)
        except CacheError as e:
            raise PersistenceError.from_exception(e, "Failed to list pages.", user_id=user_id) from e
        pages = [AIPage.model_validate(orjson.loads(raw)) for raw in documents.values()]
        pages = [p for p in pages if p.user_id == user_id]
        pages.sort(key=lambda p: p.updated_at, reverse=True)
        return [p.summary() for p in pages]

    async def exists(self, slug: str) -> bool:
        try:
            return await self._hexists(REDIS_KEY_AI_PAGES, slug)
        except CacheError as e:
            raise PersistenceError.from_exception(e, "Failed to check slug.", slug=slug) from e

    async def save(self, page: AIPage) -> AIPage:
        try:
            raw = await self._hget(REDIS_KEY_AI_PAGES, page.slug)
            if raw is not None and orjson.loads(raw).get("id") != page.id:
                raise SlugUnavailableError(
                    "Slug is already used by another page", details={"slug": page.slug}
                )
            await self._hset(REDIS_KEY_AI_PAGES, page.slug, self._dump(page))
            await self._hset(REDIS_KEY_AI_PAGE_IDS, page.id, page.slug)
        except CacheError as e:
            raise PersistenceError.from_exception(e, "Failed to save page.", slug=page.slug) from e
        return page

    async def delete(self, page_id: str) -> bool:
        try:
            slug = await self._hget(REDIS_KEY_AI_PAGE_IDS, page_id)
            if slug is None:
                return False
            await self._hdel(REDIS_KEY_AI_PAGES, slug)
            await self._hdel(REDIS_KEY_AI_PAGE_IDS, page_id)
        except CacheError as e:
            raise PersistenceError.from_exception(e, "Failed to delete page.", page_id=page_id) from e
        return True
