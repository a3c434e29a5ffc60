"""
Kernel test configuration.

Kernel tests use MemoryStorage and a deterministic id factory. Bootstrap on
an empty store yields buf_1 (index.html), buf_2 (style.css), buf_3 (script.js).
"""

import pytest

from livepen.kernel.buffer_store import BufferStore
from livepen.kernel.storage import KeyValueStorage, MemoryStorage, StorageError
from livepen.kernel.types import CounterIds


class FlakyStorage(KeyValueStorage):
    """MemoryStorage whose reads and/or writes can be switched to fail."""

    def __init__(
        self,
        fail_reads: bool = False,
        fail_writes: bool = False,
        fail_read_keys: frozenset[str] = frozenset(),
    ) -> None:
        self.inner = MemoryStorage()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.fail_read_keys = fail_read_keys

    async def get(self, key: str) -> str | None:
        if self.fail_reads or key in self.fail_read_keys:
            raise StorageError("read refused")
        return await self.inner.get(key)

    async def put(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("write refused")
        await self.inner.put(key, value)

    async def delete(self, key: str) -> None:
        await self.inner.delete(key)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
async def store(storage):
    """A loaded store, bootstrapped with the three starter buffers."""
    s = BufferStore(storage, id_factory=CounterIds())
    await s.load()
    return s
