"""
Handoff locks.

A payment handoff holds a lock keyed by the payment session id so that a
second click cannot open a second checkout while the first one is running.

* ``LocalLock`` -- in-process, for the in-memory session store.
* ``DistributedLock`` -- Redis ``SET NX EX`` with a Lua check-and-delete on
  release, for deployments running several API processes against Redis.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

_held: set[str] = set()


class LocalLock:
    def __init__(self, key: str):
        self.key = f"lock:{key}"

    async def acquire(self) -> bool:
        if self.key in _held:
            return False
        _held.add(self.key)
        return True

    async def release(self) -> None:
        _held.discard(self.key)


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        lua = """
        if redis.call("get", KEYS[1]) == ARGV[1] then
            return redis.call("del", KEYS[1])
        else
            return 0
        end
        """
        await self.redis.eval(lua, 1, self.key, self.token)
