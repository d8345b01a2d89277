"""Shared fixtures: key-value stores with controllable behaviour."""

import asyncio

import pytest

from lesson_progress.storage import MemoryStore


class RecordingStore(MemoryStore):
    """MemoryStore that counts writes and can be told to fail or stall."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[tuple[str, str]] = []
        self.fail_get = False
        self.fail_set = False
        self.set_delays: list[float] = []
        self.get_delays: list[float] = []

    async def get(self, key: str) -> str | None:
        if self.get_delays:
            await asyncio.sleep(self.get_delays.pop(0))
        if self.fail_get:
            raise OSError("disk unavailable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.set_delays:
            await asyncio.sleep(self.set_delays.pop(0))
        if self.fail_set:
            raise OSError("disk full")
        self.writes.append((key, value))
        await super().set(key, value)


@pytest.fixture
def store():
    """Create an empty RecordingStore."""
    return RecordingStore()
