"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API)
        ├── ConnectionManager (Connection lifecycle)
        ├── OperationExecutor (Command execution with error handling)
        └── HealthMonitor (Health checks and pool metrics)

Used by the Redis revalidation store (entries + tag version counters) and
the Redis record stores (profile and AI page hashes).

Author: Refactored for clarity and maintainability
Date: 2025-12-13
"""

import time
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from biolink.core.config.settings import Settings, get_settings
from biolink.core.exceptions import CacheConnectionError, CacheKeyError
from biolink.core.logging.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# Handles connection lifecycle and pooling
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    Pool Configuration:
    - Max connections: REDIS_MAX_CONNECTIONS
    - Socket timeout: REDIS_SOCKET_TIMEOUT
    - Health check interval: REDIS_HEALTH_CHECK_INTERVAL
    - Decode responses: True (values are JSON text)
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis with connection pooling.

        STAGE-REDIS.2: Connection establishment

        Raises:
            CacheConnectionError: If connection fails
        """
        if self._is_connected and self._client:
            return self._client

        try:
            self._pool = ConnectionPool(
                host=self._settings.redis.REDIS_HOST,
                port=self._settings.redis.REDIS_PORT,
                db=self._settings.redis.REDIS_DB,
                password=self._settings.redis.REDIS_PASSWORD,
                max_connections=self._settings.redis.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=self._settings.redis.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=self._settings.redis.REDIS_SOCKET_TIMEOUT,
                retry_on_timeout=True,
                health_check_interval=self._settings.redis.REDIS_HEALTH_CHECK_INTERVAL,
                decode_responses=True,
            )
            self._client = redis.Redis(connection_pool=self._pool)

            # Verify the connection actually works
            await self._client.ping()

            self._is_connected = True

            logger.info(
                "Redis connected successfully",
                stage="REDIS.2",
                host=self._settings.redis.REDIS_HOST,
                port=self._settings.redis.REDIS_PORT,
                max_connections=self._settings.redis.REDIS_MAX_CONNECTIONS,
            )

            return self._client

        except (ConnectionError, TimeoutError) as e:
            logger.error("Failed to connect to Redis", stage="REDIS.2", error=str(e))
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={
                    "host": self._settings.redis.REDIS_HOST,
                    "port": self._settings.redis.REDIS_PORT,
                },
            ) from e

    async def disconnect(self) -> None:
        """
        Close Redis connection and pool.

        STAGE-REDIS.3: Connection cleanup
        """
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        logger.info("Redis disconnected", stage="REDIS.3")

    async def ping(self) -> bool:
        try:
            if self._client and self._is_connected:
                await self._client.ping()
                return True
        except (ConnectionError, TimeoutError):
            return False
        return False

    def get_client(self) -> redis.Redis | None:
        return self._client

    def get_pool(self) -> ConnectionPool | None:
        return self._pool

    def is_connected(self) -> bool:
        return self._is_connected


# =============================================================================
# LAYER 2: OPERATION EXECUTOR
# Executes Redis commands with error handling and logging
# =============================================================================


class OperationExecutor:
    """
    Executes Redis operations with consistent error handling.

    Error Handling Strategy:
    - Catch RedisError exceptions
    - Log error with context (stage, key)
    - Raise CacheKeyError with details, chained to the original error
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    def _fail(self, operation: str, error: RedisError, **context) -> CacheKeyError:
        logger.error(f"Redis {operation} failed", stage=f"REDIS.{operation}", error=str(error), **context)
        return CacheKeyError(message=f"Redis {operation} failed: {error}", details=context)

    # -------------------------------------------------------------------------
    # Basic Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise self._fail("GET", e, key=key) from e

    async def mget(self, *keys: str) -> list[str | None]:
        try:
            return await self._redis.mget(list(keys))
        except RedisError as e:
            raise self._fail("MGET", e, keys=list(keys)) from e

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        Set value in Redis.

        STAGE-REDIS.SET: Redis SET operation

        Args:
            key: Redis key
            value: Value to set
            ttl: Time-to-live in seconds (optional)
        """
        try:
            result = await self._redis.set(key, value, ex=ttl)
            return bool(result)
        except RedisError as e:
            raise self._fail("SET", e, key=key) from e

    async def delete(self, *keys: str) -> int:
        try:
            return await self._redis.delete(*keys)
        except RedisError as e:
            raise self._fail("DEL", e, keys=list(keys)) from e

    async def incr(self, key: str) -> int:
        try:
            return await self._redis.incr(key)
        except RedisError as e:
            raise self._fail("INCR", e, key=key) from e

    # -------------------------------------------------------------------------
    # Hash Operations
    # -------------------------------------------------------------------------

    async def hget(self, name: str, key: str) -> str | None:
        try:
            return await self._redis.hget(name, key)
        except RedisError as e:
            raise self._fail("HGET", e, name=name, field=key) from e

    async def hset(self, name: str, key: str, value: str) -> int:
        try:
            return await self._redis.hset(name, key, value)
        except RedisError as e:
            raise self._fail("HSET", e, name=name, field=key) from e

    async def hgetall(self, name: str) -> dict[str, str]:
        try:
            return await self._redis.hgetall(name)
        except RedisError as e:
            raise self._fail("HGETALL", e, name=name) from e

    async def hdel(self, name: str, *keys: str) -> int:
        try:
            return await self._redis.hdel(name, *keys)
        except RedisError as e:
            raise self._fail("HDEL", e, name=name, fields=list(keys)) from e

    async def hexists(self, name: str, key: str) -> bool:
        try:
            return bool(await self._redis.hexists(name, key))
        except RedisError as e:
            raise self._fail("HEXISTS", e, name=name, field=key) from e


# =============================================================================
# LAYER 3: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """
    Monitors Redis health and connection pool metrics.

    Metrics Tracked:
    - Connection status
    - Ping latency
    - Pool size and utilization (warning above 80%)
    """

    def __init__(self, connection_manager: ConnectionManager, settings: Settings):
        self._conn_mgr = connection_manager
        self._settings = settings

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check on Redis connection.

        STAGE-REDIS.HEALTH: Redis health check
        """
        health = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            "host": self._settings.redis.REDIS_HOST,
            "port": self._settings.redis.REDIS_PORT,
            "pool_size": 0,
            "pool_utilization_pct": 0,
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if not client:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            await client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)
            return health

        pool = self._conn_mgr.get_pool()
        if pool and hasattr(pool, "_available_connections"):
            health["pool_size"] = pool.max_connections
            available = len(pool._available_connections)
            utilization = 100.0 * ((pool.max_connections - available) / pool.max_connections)
            health["pool_utilization_pct"] = round(utilization, 1)
            if utilization > 80:
                logger.warning(
                    "Redis pool utilization high",
                    pool_utilization=utilization,
                    max_connections=pool.max_connections,
                )

        return health


# =============================================================================
# LAYER 4: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Async Redis client with connection pooling and health checks.

    Implements the KeyValueBackend protocol.

    Usage:
        client = RedisClient()
        await client.connect()
        await client.hset("biolink:store:profiles", "alice", "{...}")
        await client.disconnect()
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize Redis client.

        STAGE-REDIS.1: Client initialization
        """
        self._settings = settings or get_settings()

        self._conn_mgr = ConnectionManager(self._settings)
        self._executor: OperationExecutor | None = None
        self._health_monitor = HealthMonitor(self._conn_mgr, self._settings)

        logger.info(
            "Redis client initialized",
            stage="REDIS.1",
            host=self._settings.redis.REDIS_HOST,
            port=self._settings.redis.REDIS_PORT,
        )

    async def connect(self) -> None:
        """
        Raises:
            CacheConnectionError: If connection fails
        """
        client = await self._conn_mgr.connect()
        self._executor = OperationExecutor(client)

    async def disconnect(self) -> None:
        await self._conn_mgr.disconnect()
        self._executor = None

    async def ping(self) -> bool:
        return await self._conn_mgr.ping()

    @property
    def _ops(self) -> OperationExecutor:
        if self._executor is None:
            raise CacheConnectionError("Redis client is not connected")
        return self._executor

    # -------------------------------------------------------------------------
    # Delegate to OperationExecutor
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        return await self._ops.get(key)

    async def mget(self, *keys: str) -> list[str | None]:
        return await self._ops.mget(*keys)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        return await self._ops.set(key, value, ttl)

    async def delete(self, *keys: str) -> int:
        return await self._ops.delete(*keys)

    async def incr(self, key: str) -> int:
        return await self._ops.incr(key)

    async def hget(self, name: str, key: str) -> str | None:
        return await self._ops.hget(name, key)

    async def hset(self, name: str, key: str, value: str) -> int:
        return await self._ops.hset(name, key, value)

    async def hgetall(self, name: str) -> dict[str, str]:
        return await self._ops.hgetall(name)

    async def hdel(self, name: str, *keys: str) -> int:
        return await self._ops.hdel(name, *keys)

    async def hexists(self, name: str, key: str) -> bool:
        return await self._ops.hexists(name, key)

    async def health_check(self) -> dict[str, Any]:
        return await self._health_monitor.health_check()
