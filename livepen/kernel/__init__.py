"""
LivePen Kernel -- the live preview pipeline.

Three components:
  buffer_store  -- named, kind-tagged buffers and the active selection
  debounce      -- per-kind quiescence timers publishing the settled triple
  renderer      -- document assembly + isolated execution boundary + viewport

Persistence adapters live in storage (memory, JSON files) and
postgres_storage.
"""

from livepen.kernel.boundary import BoundaryHandle, ExecutionBoundary
from livepen.kernel.buffer_store import BufferStore
from livepen.kernel.debounce import ChangeAggregator, Debouncer
from livepen.kernel.document import assemble_document
from livepen.kernel.renderer import PreviewEvent, PreviewRenderer
from livepen.kernel.storage import FileStorage, KeyValueStorage, MemoryStorage, StorageError
from livepen.kernel.types import (
    ActiveSelection,
    Buffer,
    BufferKind,
    CompositeDocument,
    CounterIds,
)
from livepen.kernel.viewport import ViewportMode, ViewportState

__all__ = [
    "ActiveSelection",
    "Buffer",
    "BufferKind",
    "BufferStore",
    "BoundaryHandle",
    "ChangeAggregator",
    "CompositeDocument",
    "CounterIds",
    "Debouncer",
    "ExecutionBoundary",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PreviewEvent",
    "PreviewRenderer",
    "StorageError",
    "ViewportMode",
    "ViewportState",
    "assemble_document",
]
