"""
LivePen configuration -- all environment variables in one place.

Read from environment at runtime.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
    HOST: str = os.environ.get("HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("PORT", "8000"))

    # Persistence: "file" (JSON files in DATA_DIR), "postgres" or "memory"
    STORAGE_BACKEND: str = os.environ.get("STORAGE_BACKEND", "file")
    DATA_DIR: str = os.environ.get("DATA_DIR", os.path.join(os.path.expanduser("~"), ".livepen"))
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")

    # Preview pipeline
    DEBOUNCE_MS: int = int(os.environ.get("DEBOUNCE_MS", "500"))

    # WebSocket
    WEBSOCKET_MAX_MESSAGE_BYTES: int = 4_000_000

    @property
    def DEBOUNCE_SECONDS(self) -> float:
        return self.DEBOUNCE_MS / 1000


# Singleton instance
settings = Settings()

_STORAGE_BACKENDS = {"file", "postgres", "memory"}

if settings.STORAGE_BACKEND not in _STORAGE_BACKENDS:
    raise RuntimeError(
        f"STORAGE_BACKEND must be one of {sorted(_STORAGE_BACKENDS)}, got {settings.STORAGE_BACKEND!r}"
    )
if settings.STORAGE_BACKEND == "postgres" and not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required for the postgres backend")
if settings.DEBOUNCE_MS < 0:
    raise RuntimeError("DEBOUNCE_MS must be >= 0")
