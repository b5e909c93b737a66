"""
Pytest Configuration and Shared Test Fixtures

Fixtures defined here are available to every test module. Clocks are
fakes so TTL and revalidate-window behavior is tested without sleeping.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from biolink.core.config.settings import Settings
from biolink.infrastructure.cache.memory_cache import ProcessMemoryCache
from biolink.infrastructure.cache.revalidating_cache import RevalidatingCache
from biolink.infrastructure.cache.revalidation_store import InMemoryRevalidationStore
from biolink.infrastructure.monitoring.metrics_collector import get_metrics_collector
from tests.test_fixtures.fakes import CountingAccessor, FakeClock, InMemoryKeyValueBackend
from tests.test_fixtures.record_factory import RecordFactory

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """Settings for tests: in-memory backends, console logs."""
    return Settings(
        ENVIRONMENT="test",
        STORAGE_BACKEND="memory",
        REVALIDATION_BACKEND="memory",
        LOG_FORMAT="console",
        LOG_LEVEL="WARNING",
    )


# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def memory_clock():
    """Monotonic clock for the process memory cache."""
    return FakeClock(start=100.0)


@pytest.fixture
def wall_clock():
    """Wall clock for the revalidating cache and its store."""
    return FakeClock(start=1_700_000_000.0)


# ============================================================================
# Infrastructure Fixtures
# ============================================================================


@pytest.fixture
def metrics():
    return get_metrics_collector()


@pytest.fixture
def kv_backend():
    return InMemoryKeyValueBackend()


@pytest.fixture
def revalidation_store(wall_clock):
    return InMemoryRevalidationStore(max_entry_age=86_400, clock=wall_clock)


@pytest.fixture
def memory_cache(memory_clock, metrics):
    return ProcessMemoryCache(
        {"profile": 100, "ai-page": 100},
        std_ttl=300,
        check_period=60,
        clock=memory_clock,
        metrics=metrics,
    )


@pytest.fixture
def accessor():
    """Profile accessor holding alice and bob."""
    return CountingAccessor(
        {
            "alice": RecordFactory.profile("alice"),
            "bob": RecordFactory.profile("bob", user_id="user-2"),
        }
    )


@pytest.fixture
def revalidating_cache(accessor, revalidation_store, wall_clock, metrics):
    return RevalidatingCache(
        "profile",
        fetch=accessor,
        store=revalidation_store,
        tags=["profile"],
        revalidate_seconds=60,
        clock=wall_clock,
        metrics=metrics,
    )


@pytest.fixture
def record_factory():
    return RecordFactory
