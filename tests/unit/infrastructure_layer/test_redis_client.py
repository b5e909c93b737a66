"""
Unit Tests for RedisClient

Redis itself is mocked: these tests cover error translation, the
not-connected guard, and health reporting.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from biolink.core.exceptions import CacheConnectionError, CacheKeyError
from biolink.infrastructure.cache.redis_client import OperationExecutor, RedisClient


@pytest.mark.unit
class TestOperationExecutor:
    @pytest.mark.asyncio
    async def test_successful_command_passes_through(self):
        redis = MagicMock()
        redis.hget = AsyncMock(return_value='{"username": "alice"}')
        executor = OperationExecutor(redis)

        assert await executor.hget("biolink:store:profiles", "alice") == '{"username": "alice"}'

    @pytest.mark.asyncio
    async def test_redis_error_becomes_cache_key_error(self):
        redis = MagicMock()
        redis.incr = AsyncMock(side_effect=ResponseError("value is not an integer"))
        executor = OperationExecutor(redis)

        with pytest.raises(CacheKeyError) as exc_info:
            await executor.incr("biolink:revalidate:tag:profile")

        assert exc_info.value.details == {"key": "biolink:revalidate:tag:profile"}
        assert isinstance(exc_info.value.__cause__, ResponseError)

    @pytest.mark.asyncio
    async def test_set_passes_ttl_as_expiry(self):
        redis = MagicMock()
        redis.set = AsyncMock(return_value=True)
        executor = OperationExecutor(redis)

        assert await executor.set("k", "v", ttl=60) is True
        redis.set.assert_awaited_once_with("k", "v", ex=60)

    @pytest.mark.asyncio
    async def test_mget_passes_key_list(self):
        redis = MagicMock()
        redis.mget = AsyncMock(return_value=["1", None])
        executor = OperationExecutor(redis)

        assert await executor.mget("a", "b") == ["1", None]
        redis.mget.assert_awaited_once_with(["a", "b"])


@pytest.mark.unit
class TestRedisClient:
    @pytest.mark.asyncio
    async def test_commands_require_connection(self, test_settings):
        client = RedisClient(test_settings)

        with pytest.raises(CacheConnectionError):
            await client.get("k")

    @pytest.mark.asyncio
    async def test_connect_failure_raises_cache_connection_error(self, test_settings):
        client = RedisClient(test_settings)
        failing = MagicMock()
        failing.ping = AsyncMock(side_effect=RedisConnectionError("connection refused"))

        with patch("biolink.infrastructure.cache.redis_client.redis.Redis", return_value=failing):
            with pytest.raises(CacheConnectionError) as exc_info:
                await client.connect()

        assert exc_info.value.details["port"] == test_settings.REDIS_PORT

    @pytest.mark.asyncio
    async def test_health_check_before_connect(self, test_settings):
        client = RedisClient(test_settings)

        health = await client.health_check()

        assert health["status"] == "unhealthy"
        assert health["connected"] is False

    @pytest.mark.asyncio
    async def test_ping_before_connect(self, test_settings):
        assert await RedisClient(test_settings).ping() is False
