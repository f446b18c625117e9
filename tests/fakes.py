"""
In-memory stand-in for the redis-py asyncio client used by unit tests.

Covers the commands the cache issues, key expiry against a controllable
clock, and MULTI/EXEC pipelines that apply nothing when execution fails.
"""

import asyncio
import time
from fnmatch import fnmatchcase
from typing import Any, Dict, List, Optional, Tuple


class FakePipeline:
    """Buffers commands until execute(), like a transactional pipeline."""

    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._queue: List[Tuple[Any, ...]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._queue.clear()

    def set(self, key: str, value: str, ex: Optional[int] = None) -> "FakePipeline":
        self._queue.append(("SET", key, value, ex))
        return self

    def delete(self, *keys: str) -> "FakePipeline":
        self._queue.append(("DEL", keys))
        return self

    async def execute(self) -> List[Any]:
        self._redis.commands.append("MULTI")
        if self._redis.fail_on_execute is not None:
            self._queue.clear()
            raise self._redis.fail_on_execute

        results = []
        for command in self._queue:
            if command[0] == "SET":
                _, key, value, ex = command
                self._redis._write(key, value, ex)
                results.append(True)
            else:
                results.append(self._redis._remove(command[1]))
        self._queue.clear()
        self._redis.commands.append("EXEC")
        return results


class FakeRedis:
    """Dict-backed async Redis double."""

    def __init__(self):
        self.data: Dict[str, Tuple[str, Optional[float]]] = {}
        self.commands: List[str] = []
        self.fail_on_execute: Optional[Exception] = None
        self.ping_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.closed = False
        self._clock_offset = 0.0

    # Test helpers

    def advance(self, seconds: float) -> None:
        """Move the expiry clock forward."""
        self._clock_offset += seconds

    def ttl_of(self, key: str) -> Optional[float]:
        """Remaining seconds before expiry, or None for persistent keys."""
        entry = self._alive(key)
        if entry is None or entry[1] is None:
            return None
        return entry[1] - self._now()

    def _now(self) -> float:
        return time.monotonic() + self._clock_offset

    def _alive(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self.data.get(key)
        if entry is None:
            return None
        if entry[1] is not None and entry[1] <= self._now():
            del self.data[key]
            return None
        return entry

    def _write(self, key: str, value: str, ex: Optional[int]) -> None:
        expires_at = self._now() + ex if ex else None
        self.data[key] = (value, expires_at)

    def _remove(self, keys) -> int:
        removed = 0
        for key in keys:
            if self._alive(key) is not None:
                del self.data[key]
                removed += 1
        return removed

    # Commands

    async def ping(self) -> bool:
        self.commands.append("PING")
        if self.ping_error is not None:
            raise self.ping_error
        return True

    async def get(self, key: str) -> Optional[str]:
        self.commands.append("GET")
        if self.gate is not None:
            await self.gate.wait()
        entry = self._alive(key)
        return entry[0] if entry else None

    async def getex(self, key: str, ex: Optional[int] = None) -> Optional[str]:
        self.commands.append("GETEX")
        entry = self._alive(key)
        if entry is None:
            return None
        if ex:
            self._write(key, entry[0], ex)
        return entry[0]

    async def mget(self, keys: List[str]) -> List[Optional[str]]:
        self.commands.append("MGET")
        return [entry[0] if entry else None for entry in map(self._alive, keys)]

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.commands.append("SET")
        self._write(key, value, ex)
        return True

    async def delete(self, *keys: str) -> int:
        self.commands.append("DEL")
        return self._remove(keys)

    async def keys(self, pattern: str = "*") -> List[str]:
        self.commands.append("KEYS")
        return [
            key
            for key in list(self.data)
            if self._alive(key) is not None and fnmatchcase(key, pattern)
        ]

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def aclose(self) -> None:
        self.closed = True
