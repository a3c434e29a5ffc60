"""
LivePen Kernel -- Buffer Store

Holds the named buffers and the active-selection record, persists both
after every mutation, and notifies listeners with the kinds a mutation
touched.

Operations: load, create_buffer, update_content, update_active_content,
select_buffer, rename_buffer, delete_buffer

Invalid operations (unknown ids, writes to a buffer that is not the active
one of its kind) are silent no-ops returning None. The UI always addresses
buffers through the active slot, so such calls only come from stale
references.

Persistence failures never undo an in-memory mutation: the store stays
authoritative for the running session.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterable

from livepen.kernel.defaults import STARTER_BUFFERS, placeholder_content
from livepen.kernel.storage import BUFFERS_KEY, SELECTION_KEY, KeyValueStorage, StorageError
from livepen.kernel.types import (
    KINDS,
    ActiveSelection,
    Buffer,
    BufferKind,
    IdFactory,
    StoreSnapshot,
    new_buffer_id,
)

logger = logging.getLogger(__name__)

StoreListener = Callable[[frozenset[BufferKind]], None]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def serialize_buffers(buffers: Iterable[Buffer]) -> str:
    return json.dumps([b.to_dict() for b in buffers], ensure_ascii=False)


def serialize_selection(active: ActiveSelection) -> str:
    return json.dumps(active.to_dict(), sort_keys=True)


def deserialize_buffers(raw: str | None) -> list[Buffer]:
    """
    Parse the persisted buffer list. None or empty text reads as [].
    Raises ValueError on malformed data.
    """
    if not raw:
        return []
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("buffer collection must be a JSON list")
    try:
        return [Buffer.from_dict(item) for item in data]
    except (KeyError, TypeError) as e:
        raise ValueError(f"malformed buffer entry: {e}") from e


def deserialize_selection(raw: str | None) -> ActiveSelection:
    if not raw:
        return ActiveSelection()
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("active selection must be a JSON object")
    return ActiveSelection.from_dict(data)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class BufferStore:
    """
    The set of buffers plus the active selection.
    Mutated only from the event loop. Saves are serialized so the last
    mutation is always the last state written.
    """

    def __init__(self, storage: KeyValueStorage, id_factory: IdFactory | None = None):
        self._storage = storage
        self._id_factory = id_factory or new_buffer_id
        self._buffers: list[Buffer] = []
        self._active = ActiveSelection()
        self._listeners: list[StoreListener] = []
        self._save_lock = asyncio.Lock()

    # -- read model --

    @property
    def buffers(self) -> list[Buffer]:
        """Buffers in store order (a copy of the list, not of the buffers)."""
        return list(self._buffers)

    @property
    def active(self) -> ActiveSelection:
        return ActiveSelection(**self._active.to_dict())

    def get(self, buffer_id: str) -> Buffer | None:
        for buf in self._buffers:
            if buf.id == buffer_id:
                return buf
        return None

    def active_buffer(self, kind: BufferKind) -> Buffer | None:
        buffer_id = self._active.get(kind)
        return self.get(buffer_id) if buffer_id else None

    def active_content(self, kind: BufferKind) -> str:
        buf = self.active_buffer(kind)
        return buf.content if buf else ""

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            buffers=[Buffer(b.id, b.name, b.kind, b.content) for b in self._buffers],
            active=self.active,
        )

    # -- observers --

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kinds: Iterable[BufferKind]) -> None:
        affected = frozenset(kinds)
        for listener in list(self._listeners):
            listener(affected)

    # -- load --

    async def load(self) -> None:
        """
        Read both keys from storage.
        Falls back to first-run bootstrap when the buffer collection is
        absent, empty, unreadable or malformed. A bad selection record only
        resets the selection; the buffers are kept and the slots repaired.
        """
        try:
            buffers = deserialize_buffers(await self._storage.get(BUFFERS_KEY))
        except StorageError as e:
            logger.warning("buffer_store: load failed, bootstrapping: %s", e)
            buffers = []
        except ValueError as e:
            logger.warning("buffer_store: persisted buffers malformed, bootstrapping: %s", e)
            buffers = []

        if not buffers:
            await self._bootstrap()
            return

        try:
            active = deserialize_selection(await self._storage.get(SELECTION_KEY))
        except (StorageError, ValueError) as e:
            logger.warning("buffer_store: active selection unusable, repairing: %s", e)
            active = ActiveSelection()

        self._buffers = _dedupe_ids(buffers)
        self._active = active
        self._repair_selection()
        logger.info("buffer_store: loaded %d buffers", len(self._buffers))
        self._notify(KINDS)

    async def _bootstrap(self) -> None:
        """Seed exactly one buffer per kind, all active. Runs once, on an empty store."""
        self._buffers = []
        self._active = ActiveSelection()
        for name, kind, content in STARTER_BUFFERS:
            buf = Buffer(id=self._fresh_id(), name=name, kind=kind, content=content)
            self._buffers.append(buf)
            self._active.set(kind, buf.id)
        logger.info("buffer_store: first run, seeded %d starter buffers", len(self._buffers))
        await self._save()
        self._notify(KINDS)

    def _repair_selection(self) -> None:
        for kind in KINDS:
            buffer_id = self._active.get(kind)
            buf = self.get(buffer_id) if buffer_id else None
            if buf is None or buf.kind is not kind:
                fallback = self._first_of_kind(kind)
                self._active.set(kind, fallback.id if fallback else None)

    # -- operations --

    async def create_buffer(self, name: str, kind: BufferKind) -> Buffer:
        """Append a new buffer. It becomes active if its kind has no active buffer."""
        buf = Buffer(
            id=self._fresh_id(),
            name=name,
            kind=kind,
            content=placeholder_content(name, kind),
        )
        self._buffers.append(buf)
        if self._active.get(kind) is None:
            self._active.set(kind, buf.id)
        logger.info("buffer_store: created %s buffer %s (%s)", kind.value, buf.id, name)
        await self._commit([kind])
        return buf

    async def update_content(self, buffer_id: str, content: str) -> Buffer | None:
        """Replace content, only if buffer_id is the active buffer of its kind."""
        buf = self.get(buffer_id)
        if buf is None or self._active.get(buf.kind) != buffer_id:
            logger.debug("buffer_store: ignoring write to inactive buffer %s", buffer_id)
            return None
        buf.content = content
        await self._commit([buf.kind])
        return buf

    async def update_active_content(self, kind: BufferKind, content: str) -> Buffer | None:
        """Write through the active slot of kind. No-op when the slot is empty."""
        buffer_id = self._active.get(kind)
        if buffer_id is None:
            return None
        return await self.update_content(buffer_id, content)

    async def select_buffer(self, buffer_id: str) -> Buffer | None:
        buf = self.get(buffer_id)
        if buf is None:
            logger.debug("buffer_store: select of unknown buffer %s", buffer_id)
            return None
        self._active.set(buf.kind, buf.id)
        await self._commit([buf.kind])
        return buf

    async def rename_buffer(self, buffer_id: str, name: str) -> Buffer | None:
        buf = self.get(buffer_id)
        if buf is None:
            return None
        buf.name = name
        await self._commit([buf.kind])
        return buf

    async def delete_buffer(self, buffer_id: str) -> Buffer | None:
        """
        Remove a buffer. If it was active, selection falls back to the first
        remaining buffer of the same kind, or None.
        """
        buf = self.get(buffer_id)
        if buf is None:
            return None
        self._buffers = [b for b in self._buffers if b.id != buffer_id]
        if self._active.get(buf.kind) == buffer_id:
            fallback = self._first_of_kind(buf.kind)
            self._active.set(buf.kind, fallback.id if fallback else None)
        logger.info("buffer_store: deleted %s buffer %s", buf.kind.value, buffer_id)
        await self._commit([buf.kind])
        return buf

    # -- internals --

    def _first_of_kind(self, kind: BufferKind) -> Buffer | None:
        for buf in self._buffers:
            if buf.kind is kind:
                return buf
        return None

    def _fresh_id(self) -> str:
        existing = {b.id for b in self._buffers}
        buffer_id = self._id_factory()
        while buffer_id in existing:
            buffer_id = self._id_factory()
        return buffer_id

    async def _commit(self, kinds: Iterable[BufferKind]) -> None:
        await self._save()
        self._notify(kinds)

    async def _save(self) -> None:
        # serialize inside the lock: a save queued behind another writes the newer state
        async with self._save_lock:
            try:
                await self._storage.put(BUFFERS_KEY, serialize_buffers(self._buffers))
                await self._storage.put(SELECTION_KEY, serialize_selection(self._active))
            except StorageError as e:
                logger.warning("buffer_store: save failed, keeping in-memory state: %s", e)


def _dedupe_ids(buffers: list[Buffer]) -> list[Buffer]:
    """Drop later entries that reuse an id already seen."""
    seen: set[str] = set()
    unique: list[Buffer] = []
    for buf in buffers:
        if buf.id in seen:
            logger.warning("buffer_store: dropping duplicate buffer id %s", buf.id)
            continue
        seen.add(buf.id)
        unique.append(buf)
    return unique
