"""
LivePen Kernel -- Execution Boundary

A managed execution boundary: create(document) -> handle, destroy(handle).
Each handle is one isolated execution context. The browser runs it inside a
sandboxed frame that may execute scripts but has no same-origin access, no
top-level navigation, no forms and no popups, so the previewed code cannot
touch the host page, its storage or its location.

A destroyed handle is gone for good: its document can no longer be fetched,
and a frame pointed at it comes back empty. Rebuilding is the only update
mechanism; nothing is patched into a running context.
"""

from __future__ import annotations

import itertools
import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime

# Tokens for the iframe sandbox attribute. Must not include allow-same-origin
# or allow-top-navigation.
SANDBOX_TOKENS: tuple[str, ...] = ("allow-scripts",)


def sandbox_attribute() -> str:
    return " ".join(SANDBOX_TOKENS)


def sandbox_csp() -> str:
    """Content-Security-Policy header value applying the same sandbox when served directly."""
    return "sandbox " + sandbox_attribute()


@dataclass(frozen=True)
class BoundaryHandle:
    """One live isolated execution context."""

    id: str
    generation: int
    document: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ExecutionBoundary:
    """Registry of live handles."""

    def __init__(self) -> None:
        self._handles: dict[str, BoundaryHandle] = {}
        self._generations = itertools.count(1)

    def create(self, document: str) -> BoundaryHandle:
        handle = BoundaryHandle(
            id=secrets.token_urlsafe(16),
            generation=next(self._generations),
            document=document,
        )
        self._handles[handle.id] = handle
        return handle

    def destroy(self, handle: BoundaryHandle) -> None:
        self._handles.pop(handle.id, None)

    def get(self, handle_id: str) -> BoundaryHandle | None:
        return self._handles.get(handle_id)

    def __len__(self) -> int:
        return len(self._handles)
