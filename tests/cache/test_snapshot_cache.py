import pytest
import pytest_asyncio

from coach_context.cache.snapshot_cache import CachedContextService, SnapshotCache, context_cache_key
from coach_context.coach.context_builder import CoachingContextBuilder, ContextRequest
from coach_context.repositories.memory import InMemoryActivityRepository, InMemoryProfileRepository


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class CountingActivityRepository(InMemoryActivityRepository):
    def __init__(self):
        super().__init__()
        self.calls = 0

    async def query(self, user_id, since=None, *, until=None, min_duration_seconds=None, limit=None):
        self.calls += 1
        return await super().query(user_id, since, until=until, min_duration_seconds=min_duration_seconds, limit=limit)


@pytest_asyncio.fixture
async def snapshot(now):
    builder = CoachingContextBuilder(InMemoryActivityRepository(), InMemoryProfileRepository())
    return await builder.build(ContextRequest(user_id="u1", now=now))


@pytest.mark.asyncio
async def test_cache_set_and_get(snapshot):
    cache = SnapshotCache(clock=FakeClock())

    cache.put("context:u1", snapshot, ttl=60)

    assert cache.get("context:u1") is snapshot
    assert cache.get("context:u2") is None


@pytest.mark.asyncio
async def test_cache_entry_expires(snapshot):
    clock = FakeClock()
    cache = SnapshotCache(clock=clock)
    cache.put("context:u1", snapshot, ttl=60)

    clock.advance(59)
    assert cache.get("context:u1") is not None

    clock.advance(1)
    assert cache.get("context:u1") is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_sweep_expired(snapshot):
    clock = FakeClock()
    cache = SnapshotCache(clock=clock)
    cache.put("a", snapshot, ttl=10)
    cache.put("b", snapshot, ttl=100)

    clock.advance(50)

    assert cache.sweep_expired() == 1
    assert len(cache) == 1
    assert cache.get("b") is not None


@pytest.mark.asyncio
async def test_full_cache_sweeps_then_evicts_oldest(snapshot):
    clock = FakeClock()
    cache = SnapshotCache(max_entries=2, clock=clock)
    cache.put("a", snapshot, ttl=100)
    cache.put("b", snapshot, ttl=100)

    cache.put("c", snapshot, ttl=100)

    assert cache.get("a") is None
    assert cache.get("b") is not None
    assert cache.get("c") is not None

    clock.advance(10)
    cache.put("short", snapshot, ttl=1)
    clock.advance(5)
    # "short" has expired, so the sweep frees room without evicting live entries
    cache.put("d", snapshot, ttl=100)

    assert len(cache) == 2
    assert cache.get("d") is not None


def test_service_keeps_injected_empty_cache():
    cache = SnapshotCache(max_entries=3, clock=FakeClock())
    builder = CoachingContextBuilder(InMemoryActivityRepository(), InMemoryProfileRepository())

    service = CachedContextService(builder, cache=cache, ttl_seconds=30)

    assert service.cache is cache
    assert service.cache.max_entries == 3
    assert service.ttl_seconds == 30


def test_cache_rejects_zero_capacity():
    with pytest.raises(ValueError):
        SnapshotCache(max_entries=0)


def test_cache_key():
    assert context_cache_key("user-42") == "context:user-42"


@pytest.mark.asyncio
async def test_cached_service_builds_once_per_ttl():
    activities = CountingActivityRepository()
    clock = FakeClock()
    service = CachedContextService(
        CoachingContextBuilder(activities, InMemoryProfileRepository()),
        cache=SnapshotCache(clock=clock),
        ttl_seconds=3600,
    )

    first = await service.get_context("u1")
    second = await service.get_context("u1")

    assert second is first
    assert activities.calls == 6

    clock.advance(3600)
    await service.get_context("u1")
    assert activities.calls == 12


@pytest.mark.asyncio
async def test_cached_service_invalidate():
    activities = CountingActivityRepository()
    service = CachedContextService(CoachingContextBuilder(activities, InMemoryProfileRepository()), cache=SnapshotCache(clock=FakeClock()))

    await service.get_context("u1")
    service.invalidate("u1")
    await service.get_context("u1")

    assert activities.calls == 12


@pytest.mark.asyncio
async def test_pinned_now_bypasses_cache(now):
    activities = CountingActivityRepository()
    cache = SnapshotCache(clock=FakeClock())
    service = CachedContextService(CoachingContextBuilder(activities, InMemoryProfileRepository()), cache=cache)

    await service.get_context("u1", now=now)

    assert len(cache) == 0
    assert activities.calls == 6
