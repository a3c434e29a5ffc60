"""
LivePen Kernel -- Debounced Change Aggregator

Decouples the high-frequency edit stream from the comparatively expensive
rebuild of the preview. Each kind (markup, style, script) has its own
cancellable timer: a new value cancels the pending timer and arms a fresh
one, so only the value present when the timer expires uninterrupted is
ever emitted.

There is no cross-kind barrier. The settled triple may combine values that
settled at three different moments.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial
from typing import Generic, TypeVar

from livepen.kernel.buffer_store import BufferStore
from livepen.kernel.types import KINDS, BufferKind, CompositeDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_QUIESCENCE_SECONDS = 0.5

SettledListener = Callable[[CompositeDocument], None]


class Debouncer(Generic[T]):
    """
    Single cancellable timer. Last writer wins.
    Must be driven from inside a running event loop.
    """

    def __init__(self, delay: float, callback: Callable[[T], None]):
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._latest: T | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        """Record value and restart the quiescence window."""
        self.cancel()
        self._latest = value
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Deliver the pending value now instead of waiting for the timer."""
        if self._handle is not None:
            self.cancel()
            self._callback(self._latest)  # type: ignore[arg-type]

    def _fire(self) -> None:
        self._handle = None
        self._callback(self._latest)  # type: ignore[arg-type]


class ChangeAggregator:
    """
    Watches the active buffer of each kind and republishes the settled
    CompositeDocument after edits to that kind have been quiet for `delay`
    seconds.

    Renames, selection switches and deletions reach the aggregator through
    the same store notification as content edits and take the same path.
    """

    def __init__(self, store: BufferStore, delay: float = DEFAULT_QUIESCENCE_SECONDS):
        self._store = store
        self.delay = delay
        self._settled = CompositeDocument()
        self._debouncers: dict[BufferKind, Debouncer[str]] = {
            kind: Debouncer(delay, partial(self._on_settled, kind)) for kind in KINDS
        }
        self._listeners: list[SettledListener] = []
        self._detach: Callable[[], None] | None = None

    @property
    def settled(self) -> CompositeDocument:
        return self._settled

    def start(self) -> CompositeDocument:
        """
        Seed the settled triple from the store's current content and start
        watching it. The seed is published immediately: the first render
        does not wait for a quiescence window.
        """
        self._settled = CompositeDocument(
            markup=self._store.active_content(BufferKind.MARKUP),
            style=self._store.active_content(BufferKind.STYLE),
            script=self._store.active_content(BufferKind.SCRIPT),
        )
        if self._detach is None:
            self._detach = self._store.subscribe(self._on_store_change)
        self._emit()
        return self._settled

    def close(self) -> None:
        """Cancel every pending timer and stop watching the store."""
        for debouncer in self._debouncers.values():
            debouncer.cancel()
        if self._detach is not None:
            self._detach()
            self._detach = None

    def flush(self) -> CompositeDocument:
        """Settle all pending kinds immediately."""
        for debouncer in self._debouncers.values():
            debouncer.flush()
        return self._settled

    def pending(self, kind: BufferKind) -> bool:
        return self._debouncers[kind].pending

    def subscribe(self, listener: SettledListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- internals --

    def _on_store_change(self, kinds: frozenset[BufferKind]) -> None:
        for kind in KINDS:
            if kind in kinds:
                self._debouncers[kind].push(self._store.active_content(kind))

    def _on_settled(self, kind: BufferKind, value: str) -> None:
        if self._settled.get(kind) == value:
            return
        self._settled = self._settled.replace(kind, value)
        logger.debug("aggregator: %s settled (%d chars)", kind.value, len(value))
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._settled)
