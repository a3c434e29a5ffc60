"""Buffer routes -- workspace read model, create, rename, select, delete, content writes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from livepen.backend.models.buffer import (
    BufferResponse,
    CreateBufferRequest,
    RenameBufferRequest,
    UpdateContentRequest,
    UpdateContentResponse,
    WorkspaceResponse,
)
from livepen.backend.services.playground import Playground, get_playground
from livepen.kernel.types import BufferKind

router = APIRouter(prefix="/api", tags=["buffers"])


def _workspace(playground: Playground) -> WorkspaceResponse:
    return WorkspaceResponse.from_snapshot(playground.store.snapshot())


@router.get("/workspace", status_code=200)
async def get_workspace(playground: Playground = Depends(get_playground)) -> WorkspaceResponse:
    """All buffers in store order plus the active selection."""
    return _workspace(playground)


@router.post("/buffers", status_code=201)
async def create_buffer(
    req: CreateBufferRequest,
    playground: Playground = Depends(get_playground),
) -> BufferResponse:
    """Create a buffer. It becomes active if its kind has no active buffer yet."""
    buf = await playground.store.create_buffer(req.name, req.kind)
    return BufferResponse.from_buffer(buf)


@router.patch("/buffers/{buffer_id}", status_code=200)
async def rename_buffer(
    buffer_id: str,
    req: RenameBufferRequest,
    playground: Playground = Depends(get_playground),
) -> BufferResponse:
    buf = await playground.store.rename_buffer(buffer_id, req.name)
    if buf is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Buffer not found.")
    return BufferResponse.from_buffer(buf)


@router.post("/buffers/{buffer_id}/select", status_code=200)
async def select_buffer(
    buffer_id: str,
    playground: Playground = Depends(get_playground),
) -> WorkspaceResponse:
    buf = await playground.store.select_buffer(buffer_id)
    if buf is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Buffer not found.")
    return _workspace(playground)


@router.delete("/buffers/{buffer_id}", status_code=200)
async def delete_buffer(
    buffer_id: str,
    playground: Playground = Depends(get_playground),
) -> WorkspaceResponse:
    """
    Delete a buffer. If it was active, the first remaining buffer of the same
    kind takes over, or the slot empties. Confirmation is the client's job.
    """
    buf = await playground.store.delete_buffer(buffer_id)
    if buf is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Buffer not found.")
    return _workspace(playground)


@router.put("/buffers/{buffer_id}/content", status_code=200)
async def update_buffer_content(
    buffer_id: str,
    req: UpdateContentRequest,
    playground: Playground = Depends(get_playground),
) -> UpdateContentResponse:
    """
    Write content to a buffer. Only the active buffer of its kind accepts
    writes; anything else is dropped without error.
    """
    buf = await playground.store.update_content(buffer_id, req.content)
    return UpdateContentResponse(applied=buf is not None)


@router.put("/active/{kind}/content", status_code=200)
async def update_active_content(
    kind: BufferKind,
    req: UpdateContentRequest,
    playground: Playground = Depends(get_playground),
) -> UpdateContentResponse:
    """Write through the active slot of a kind."""
    buf = await playground.store.update_active_content(kind, req.content)
    return UpdateContentResponse(applied=buf is not None)
