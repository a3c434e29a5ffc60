"""
LivePen Kernel -- Viewport State

{desktop, tablet, mobile} x {normal, full-screen}. Purely presentational:
switching never re-executes the previewed document.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ViewportMode(str, Enum):
    DESKTOP = "desktop"  # wide
    TABLET = "tablet"  # medium
    MOBILE = "mobile"  # narrow


# CSS width/height of the isolated surface per mode
VIEWPORT_DIMENSIONS: dict[ViewportMode, tuple[str, str]] = {
    ViewportMode.DESKTOP: ("100%", "100%"),
    ViewportMode.TABLET: ("768px", "1024px"),
    ViewportMode.MOBILE: ("375px", "667px"),
}


@dataclass
class ViewportState:
    mode: ViewportMode = ViewportMode.DESKTOP
    full_screen: bool = False

    def dimensions(self) -> tuple[str, str]:
        return VIEWPORT_DIMENSIONS[self.mode]

    def to_dict(self) -> dict[str, Any]:
        width, height = self.dimensions()
        return {
            "mode": self.mode.value,
            "full_screen": self.full_screen,
            "width": width,
            "height": height,
        }
