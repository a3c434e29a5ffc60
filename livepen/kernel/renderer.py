"""
LivePen Kernel -- Preview Renderer

Turns a settled CompositeDocument into a live isolated execution:
assemble the document, create a fresh boundary handle for it, tear down the
previous one. Full teardown/rebuild is the only update path, so no timers or
listeners from an old render survive into the next.

Also owns the viewport state. Viewport changes notify observers but never
re-execute the document.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Literal

from livepen.kernel.boundary import BoundaryHandle, ExecutionBoundary
from livepen.kernel.document import assemble_document
from livepen.kernel.types import CompositeDocument
from livepen.kernel.viewport import ViewportMode, ViewportState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewEvent:
    """What observers of the renderer are told."""

    type: Literal["render", "viewport"]
    handle: BoundaryHandle | None
    viewport: ViewportState


PreviewListener = Callable[[PreviewEvent], None]


class PreviewRenderer:
    def __init__(self, boundary: ExecutionBoundary | None = None):
        self.boundary = boundary or ExecutionBoundary()
        self._current: BoundaryHandle | None = None
        self._composite = CompositeDocument()
        self._viewport = ViewportState()
        self._listeners: list[PreviewListener] = []

    @property
    def current(self) -> BoundaryHandle | None:
        return self._current

    @property
    def composite(self) -> CompositeDocument:
        return self._composite

    @property
    def viewport(self) -> ViewportState:
        return replace(self._viewport)

    def subscribe(self, listener: PreviewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- rendering --

    def render(self, composite: CompositeDocument) -> BoundaryHandle:
        """
        Rebuild the isolated execution from a settled triple.
        An unchanged document keeps the current handle.
        """
        document = assemble_document(composite)
        self._composite = composite
        if self._current is not None and self._current.document == document:
            return self._current

        previous = self._current
        handle = self.boundary.create(document)
        self._current = handle
        if previous is not None:
            self.boundary.destroy(previous)

        logger.info(
            "renderer: rebuilt preview generation=%d handle=%s size=%d",
            handle.generation,
            handle.id,
            len(document),
        )
        self._emit(PreviewEvent(type="render", handle=handle, viewport=self.viewport))
        return handle

    def close(self) -> None:
        """Tear down the live handle, if any."""
        if self._current is not None:
            self.boundary.destroy(self._current)
            self._current = None

    # -- viewport --

    def set_viewport(self, mode: ViewportMode) -> ViewportState:
        return self._update_viewport(replace(self._viewport, mode=mode))

    def set_full_screen(self, full_screen: bool) -> ViewportState:
        return self._update_viewport(replace(self._viewport, full_screen=full_screen))

    def toggle_full_screen(self) -> ViewportState:
        return self.set_full_screen(not self._viewport.full_screen)

    def _update_viewport(self, state: ViewportState) -> ViewportState:
        if state == self._viewport:
            return self.viewport
        self._viewport = state
        self._emit(PreviewEvent(type="viewport", handle=self._current, viewport=self.viewport))
        return self.viewport

    def _emit(self, event: PreviewEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
