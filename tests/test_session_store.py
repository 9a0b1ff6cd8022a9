"""Tests for flow session stores and handoff locks."""

import pytest

from src.domain.enums import FlowStage, PackageSlug, Role
from src.domain.fares import PaymentSession
from src.domain.flow import FlowState
from src.infrastructure.locks import DistributedLock, LocalLock
from src.infrastructure.session_store import MemoryFlowStore, RedisFlowStore


class _FakeRedis:
    """Just enough of ``redis.asyncio.Redis`` for the store and lock."""

    def __init__(self):
        self.data: dict[str, object] = {}
        self.expiry: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.data:
            return None
        self.data[key] = value
        if ex is not None:
            self.expiry[key] = ex
        return True

    async def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    async def eval(self, script, numkeys, key, token):
        if self.data.get(key) == token:
            del self.data[key]
            return 1
        return 0


def _populated_state(sample_trip, economy_fare) -> FlowState:
    state = FlowState()
    state.choose_role(Role.RIDER)
    state.trip_computed(sample_trip)
    state.select_fare(economy_fare)
    state.attach_session(PaymentSession.issue("cs_test_mock_session_1", 12.0, "usd"))
    return state


class TestMemoryFlowStore:
    @pytest.mark.asyncio
    async def test_create_and_get(self):
        store = MemoryFlowStore()
        flow_id, state = await store.create()
        assert await store.get(flow_id) == FlowState()

    @pytest.mark.asyncio
    async def test_get_returns_copy(self):
        store = MemoryFlowStore()
        flow_id, _ = await store.create()
        state = await store.get(flow_id)
        state.choose_role(Role.DRIVER)
        assert (await store.get(flow_id)).stage == FlowStage.INITIAL

    @pytest.mark.asyncio
    async def test_delete(self):
        store = MemoryFlowStore()
        flow_id, _ = await store.create()
        await store.delete(flow_id)
        assert await store.get(flow_id) is None


class TestRedisFlowStore:
    @pytest.mark.asyncio
    async def test_round_trip_full_state(self, sample_trip, economy_fare):
        redis = _FakeRedis()
        store = RedisFlowStore(redis, ttl_seconds=120)
        state = _populated_state(sample_trip, economy_fare)
        await store.save("abc", state)
        assert redis.expiry["flow:abc"] == 120
        loaded = await store.get("abc")
        assert loaded == state
        assert loaded.selected_fare.package_slug is PackageSlug.ECONOMY
        assert loaded.payment_session.is_mock

    @pytest.mark.asyncio
    async def test_missing_flow(self):
        store = RedisFlowStore(_FakeRedis())
        assert await store.get("nope") is None


class TestLocks:
    @pytest.mark.asyncio
    async def test_local_lock_is_exclusive(self):
        first, second = LocalLock("k"), LocalLock("k")
        assert await first.acquire()
        assert not await second.acquire()
        await first.release()
        assert await second.acquire()
        await second.release()

    @pytest.mark.asyncio
    async def test_distributed_lock_release_checks_owner(self):
        redis = _FakeRedis()
        owner = DistributedLock(redis, "k", ttl_seconds=5)
        other = DistributedLock(redis, "k", ttl_seconds=5)
        assert await owner.acquire()
        assert not await other.acquire()
        await other.release()
        assert "lock:k" in redis.data
        await owner.release()
        assert "lock:k" not in redis.data
