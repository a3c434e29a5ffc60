"""
Pydantic models for LivePen.

All request/response shapes defined here. No imports from routes or services.
"""

from livepen.backend.models.buffer import (
    ActiveSelectionResponse,
    BufferResponse,
    CreateBufferRequest,
    RenameBufferRequest,
    UpdateContentRequest,
    UpdateContentResponse,
    WorkspaceResponse,
)
from livepen.backend.models.preview import PreviewResponse, ViewportRequest, ViewportResponse

__all__ = [
    "ActiveSelectionResponse",
    "BufferResponse",
    "CreateBufferRequest",
    "PreviewResponse",
    "RenameBufferRequest",
    "UpdateContentRequest",
    "UpdateContentResponse",
    "ViewportRequest",
    "ViewportResponse",
    "WorkspaceResponse",
]
