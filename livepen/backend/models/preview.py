"""Preview and viewport models."""

from __future__ import annotations

from pydantic import BaseModel

from livepen.kernel.boundary import BoundaryHandle
from livepen.kernel.viewport import ViewportMode, ViewportState


class ViewportRequest(BaseModel):
    """What the client sends to change the viewport. All fields optional."""

    model_config = {"extra": "forbid"}

    mode: ViewportMode | None = None
    full_screen: bool | None = None


class ViewportResponse(BaseModel):
    mode: ViewportMode
    full_screen: bool
    width: str
    height: str

    @classmethod
    def from_state(cls, state: ViewportState) -> ViewportResponse:
        width, height = state.dimensions()
        return cls(mode=state.mode, full_screen=state.full_screen, width=width, height=height)


class PreviewResponse(BaseModel):
    """The live boundary handle (if any) plus the viewport it is shown in."""

    handle_id: str | None
    url: str | None
    generation: int
    sandbox: str
    viewport: ViewportResponse

    @classmethod
    def build(cls, handle: BoundaryHandle | None, viewport: ViewportState, sandbox: str) -> PreviewResponse:
        return cls(
            handle_id=handle.id if handle else None,
            url=preview_url(handle) if handle else None,
            generation=handle.generation if handle else 0,
            sandbox=sandbox,
            viewport=ViewportResponse.from_state(viewport),
        )


def preview_url(handle: BoundaryHandle) -> str:
    return f"/preview/{handle.id}"
