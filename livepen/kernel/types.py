"""
LivePen Kernel -- Shared Types

Data classes used across the buffer store, aggregator, document assembly
and preview renderer. These are the contracts that bind the kernel together.

Serialized field names follow the persisted format:
- buffers are stored as {"id", "name", "type", "content"}
- the active selection is stored as {"html", "css", "js"}
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BufferKind(str, Enum):
    """Content kind of a buffer. Values are the persisted file-type tags."""

    MARKUP = "html"
    STYLE = "css"
    SCRIPT = "js"


# Store order for anything that walks all kinds
KINDS: tuple[BufferKind, ...] = (BufferKind.MARKUP, BufferKind.STYLE, BufferKind.SCRIPT)


IdFactory = Callable[[], str]


def new_buffer_id() -> str:
    """Default id generator: random 128-bit token."""
    return str(uuid.uuid4())


class CounterIds:
    """Monotonic id generator. Deterministic, handy for tests and fixtures."""

    def __init__(self, prefix: str = "buf") -> None:
        self.prefix = prefix
        self._next = 0

    def __call__(self) -> str:
        self._next += 1
        return f"{self.prefix}_{self._next}"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class Buffer:
    """A named, kind-tagged unit of editable text content."""

    id: str
    name: str
    kind: BufferKind
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.kind.value,
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Buffer:
        return cls(
            id=str(d["id"]),
            name=str(d.get("name", "")),
            kind=BufferKind(d["type"]),
            content=str(d.get("content", "")),
        )


@dataclass
class ActiveSelection:
    """
    The single active buffer id per kind (or None).

    Invariant (enforced by BufferStore): a non-None field references an
    existing buffer whose kind matches the field.
    """

    html: str | None = None
    css: str | None = None
    js: str | None = None

    def get(self, kind: BufferKind) -> str | None:
        return getattr(self, kind.value)

    def set(self, kind: BufferKind, buffer_id: str | None) -> None:
        setattr(self, kind.value, buffer_id)

    def to_dict(self) -> dict[str, str | None]:
        return {"html": self.html, "css": self.css, "js": self.js}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ActiveSelection:
        return cls(
            html=d.get("html") or None,
            css=d.get("css") or None,
            js=d.get("js") or None,
        )


@dataclass(frozen=True)
class CompositeDocument:
    """The settled {markup, style, script} triple consumed by the renderer."""

    markup: str = ""
    style: str = ""
    script: str = ""

    def get(self, kind: BufferKind) -> str:
        if kind is BufferKind.MARKUP:
            return self.markup
        if kind is BufferKind.STYLE:
            return self.style
        return self.script

    def replace(self, kind: BufferKind, value: str) -> CompositeDocument:
        """Return a copy with one part swapped."""
        parts = {"markup": self.markup, "style": self.style, "script": self.script}
        parts[_COMPOSITE_FIELDS[kind]] = value
        return CompositeDocument(**parts)


_COMPOSITE_FIELDS: dict[BufferKind, str] = {
    BufferKind.MARKUP: "markup",
    BufferKind.STYLE: "style",
    BufferKind.SCRIPT: "script",
}


@dataclass
class StoreSnapshot:
    """Read model handed to presentation: buffers in store order + selection."""

    buffers: list[Buffer] = field(default_factory=list)
    active: ActiveSelection = field(default_factory=ActiveSelection)

    def to_dict(self) -> dict[str, Any]:
        return {
            "buffers": [b.to_dict() for b in self.buffers],
            "active": self.active.to_dict(),
        }
