"""
Flow session stores.

One ``FlowState`` per flow id.  The memory store is the default; the Redis
store lets several API processes serve the same flow.  Both hand out
copies, so a caller only changes stored state by calling ``save``.
"""

from __future__ import annotations

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Optional

import redis.asyncio as aioredis
from pydantic import TypeAdapter

from src.domain.flow import FlowState

_flow_adapter = TypeAdapter(FlowState)


class FlowStore(ABC):
    @abstractmethod
    async def get(self, flow_id: str) -> Optional[FlowState]: ...

    @abstractmethod
    async def save(self, flow_id: str, state: FlowState) -> None: ...

    @abstractmethod
    async def delete(self, flow_id: str) -> None: ...

    async def create(self) -> tuple[str, FlowState]:
        flow_id = uuid.uuid4().hex
        state = FlowState()
        await self.save(flow_id, state)
        return flow_id, state


class MemoryFlowStore(FlowStore):
    def __init__(self) -> None:
        self._flows: dict[str, FlowState] = {}

    async def get(self, flow_id: str) -> Optional[FlowState]:
        state = self._flows.get(flow_id)
        return copy.deepcopy(state) if state is not None else None

    async def save(self, flow_id: str, state: FlowState) -> None:
        self._flows[flow_id] = copy.deepcopy(state)

    async def delete(self, flow_id: str) -> None:
        self._flows.pop(flow_id, None)


class RedisFlowStore(FlowStore):
    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 3600):
        self.redis = client
        self.ttl = ttl_seconds

    @staticmethod
    def _key(flow_id: str) -> str:
        return f"flow:{flow_id}"

    async def get(self, flow_id: str) -> Optional[FlowState]:
        raw = await self.redis.get(self._key(flow_id))
        if raw is None:
            return None
        return _flow_adapter.validate_json(raw)

    async def save(self, flow_id: str, state: FlowState) -> None:
        payload = _flow_adapter.dump_json(state)
        await self.redis.set(self._key(flow_id), payload, ex=self.ttl)

    async def delete(self, flow_id: str) -> None:
        await self.redis.delete(self._key(flow_id))
