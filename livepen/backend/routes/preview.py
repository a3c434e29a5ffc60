"""
Preview routes.

GET /preview/{handle_id} serves the assembled document of a live boundary
handle. The response carries its own sandbox policy, so the document stays
isolated even when opened outside the host's sandboxed frame.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response

from livepen.backend.models.preview import PreviewResponse, ViewportRequest, ViewportResponse
from livepen.backend.services.playground import Playground, get_playground
from livepen.kernel.boundary import sandbox_csp
from livepen.kernel.document import assemble_document

router = APIRouter(tags=["preview"])

_EXPORT_TITLE = "LivePen export"


@router.get("/preview/{handle_id}", response_class=HTMLResponse)
async def serve_preview(handle_id: str, playground: Playground = Depends(get_playground)) -> Response:
    """
    Serve the document of a live handle.
    Returns 404 once the handle has been torn down by a newer render.
    """
    handle = playground.renderer.boundary.get(handle_id)
    if handle is None:
        return HTMLResponse(
            content="<html><body><h1>404 -- Preview expired</h1></body></html>",
            status_code=404,
            headers={"Cache-Control": "no-store"},
        )

    return Response(
        content=handle.document,
        media_type="text/html; charset=utf-8",
        headers={
            "Content-Security-Policy": sandbox_csp(),
            "Cache-Control": "no-store",
            "X-Content-Type-Options": "nosniff",
        },
    )


@router.get("/api/preview", status_code=200)
async def get_preview(playground: Playground = Depends(get_playground)) -> PreviewResponse:
    """The live handle and viewport."""
    return playground.preview()


@router.put("/api/preview/viewport", status_code=200)
async def update_viewport(
    req: ViewportRequest,
    playground: Playground = Depends(get_playground),
) -> ViewportResponse:
    """Switch viewport size and/or full-screen. Never re-executes the document."""
    renderer = playground.renderer
    if req.mode is not None:
        renderer.set_viewport(req.mode)
    if req.full_screen is not None:
        renderer.set_full_screen(req.full_screen)
    return ViewportResponse.from_state(renderer.viewport)


@router.get("/api/export", response_class=HTMLResponse)
async def export_document(playground: Playground = Depends(get_playground)) -> Response:
    """Download the current buffers as one self-contained HTML file."""
    document = assemble_document(playground.current_source(), title=_EXPORT_TITLE)
    return Response(
        content=document,
        media_type="text/html; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="index.html"'},
    )
