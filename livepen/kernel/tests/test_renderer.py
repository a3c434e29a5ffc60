"""
LivePen Preview Renderer -- Boundary Lifecycle Tests

Every change to the settled triple tears down the previous execution
context and builds a new one. At most one handle is live at a time.
Viewport changes are presentational and never rebuild.
"""

import pytest

from livepen.kernel.boundary import ExecutionBoundary, sandbox_attribute, sandbox_csp
from livepen.kernel.renderer import PreviewRenderer
from livepen.kernel.types import CompositeDocument
from livepen.kernel.viewport import VIEWPORT_DIMENSIONS, ViewportMode, ViewportState


@pytest.fixture
def renderer():
    return PreviewRenderer()


@pytest.fixture
def events(renderer):
    seen = []
    renderer.subscribe(seen.append)
    return seen


class TestBoundary:
    """Handle bookkeeping in the execution boundary."""

    def test_create_and_destroy(self):
        """A created handle is reachable until destroyed."""
        boundary = ExecutionBoundary()
        h = boundary.create("<p></p>")
        assert boundary.get(h.id) is h
        boundary.destroy(h)
        assert boundary.get(h.id) is None
        assert len(boundary) == 0

    def test_generations_increase(self):
        """Each handle gets the next generation and a new id."""
        boundary = ExecutionBoundary()
        a = boundary.create("a")
        b = boundary.create("b")
        assert (a.generation, b.generation) == (1, 2)
        assert a.id != b.id

    def test_destroy_twice_is_harmless(self):
        """Destroying a torn-down handle is a no-op."""
        boundary = ExecutionBoundary()
        h = boundary.create("a")
        boundary.destroy(h)
        boundary.destroy(h)
        assert len(boundary) == 0

    def test_sandbox_allows_scripts_only(self):
        """Scripts run, but never with the host origin."""
        assert sandbox_attribute() == "allow-scripts"
        assert sandbox_csp() == "sandbox allow-scripts"
        assert "allow-same-origin" not in sandbox_attribute()


class TestRender:
    """Rebuild on every settled change."""

    def test_first_render_creates_handle(self, renderer, events):
        """The first document produces a live handle and a render event."""
        h = renderer.render(CompositeDocument(markup="<p>1</p>"))
        assert renderer.current is h
        assert "<p>1</p>" in h.document
        assert [e.type for e in events] == ["render"]
        assert events[0].handle is h

    def test_rebuild_destroys_previous(self, renderer):
        """A rebuild tears down the old context before the new one is live."""
        first = renderer.render(CompositeDocument(script="setInterval(tick, 10)"))
        second = renderer.render(CompositeDocument(script="tick()"))
        assert second is not first
        assert renderer.boundary.get(first.id) is None
        assert renderer.boundary.get(second.id) is second
        assert len(renderer.boundary) == 1

    def test_fault_then_fix_leaves_no_trace(self, renderer):
        """A fixed script starts clean, with the faulting context gone."""
        broken = renderer.render(CompositeDocument(markup="<p>hi</p>", script="throw new Error('x')"))
        fixed = renderer.render(CompositeDocument(markup="<p>hi</p>", script="1 + 1"))
        assert renderer.boundary.get(broken.id) is None
        assert "throw new Error('x')" not in fixed.document

    def test_identical_document_keeps_handle(self, renderer, events):
        """Re-rendering the same text keeps the current context."""
        composite = CompositeDocument(markup="<p>same</p>")
        a = renderer.render(composite)
        b = renderer.render(CompositeDocument(markup="<p>same</p>"))
        assert a is b
        assert len(events) == 1

    def test_composite_is_tracked(self, renderer):
        """The last rendered composite is kept."""
        composite = CompositeDocument(style="x")
        renderer.render(composite)
        assert renderer.composite == composite

    def test_close_tears_down(self, renderer):
        """close() destroys the live handle."""
        h = renderer.render(CompositeDocument())
        renderer.close()
        assert renderer.current is None
        assert renderer.boundary.get(h.id) is None


class TestViewport:
    """Presentational viewport state."""

    def test_default_is_desktop_windowed(self, renderer):
        """Desktop and windowed to start with."""
        assert renderer.viewport == ViewportState(ViewportMode.DESKTOP, False)

    def test_set_viewport_does_not_rebuild(self, renderer, events):
        """Changing mode keeps the same live handle."""
        h = renderer.render(CompositeDocument(markup="<p>x</p>"))
        state = renderer.set_viewport(ViewportMode.MOBILE)
        assert state.mode is ViewportMode.MOBILE
        assert renderer.current is h
        assert renderer.boundary.get(h.id) is h
        assert [e.type for e in events] == ["render", "viewport"]
        assert events[-1].handle is h

    def test_unchanged_viewport_is_silent(self, renderer, events):
        """Setting the current state emits nothing."""
        renderer.set_viewport(ViewportMode.DESKTOP)
        renderer.set_full_screen(False)
        assert events == []

    def test_toggle_full_screen(self, renderer):
        """Toggling flips the flag each call."""
        assert renderer.toggle_full_screen().full_screen is True
        assert renderer.toggle_full_screen().full_screen is False

    def test_full_screen_is_orthogonal_to_mode(self, renderer):
        """Full screen keeps the chosen mode."""
        renderer.set_viewport(ViewportMode.TABLET)
        state = renderer.set_full_screen(True)
        assert state.mode is ViewportMode.TABLET
        assert state.full_screen

    def test_viewport_copy_is_detached(self, renderer):
        """Mutating the returned state does not reach the renderer."""
        renderer.viewport.full_screen = True
        assert renderer.viewport.full_screen is False

    @pytest.mark.parametrize("mode", list(ViewportMode))
    def test_dimensions(self, mode):
        """Each mode reports its fixed frame size."""
        width, height = VIEWPORT_DIMENSIONS[mode]
        assert ViewportState(mode).to_dict() == {
            "mode": mode.value,
            "full_screen": False,
            "width": width,
            "height": height,
        }
