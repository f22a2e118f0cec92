# aim_assist.py
"""Stateless aiming policy: visibility test and dead-zone nudge vector."""
from __future__ import annotations

from typing import Tuple

from wildlife_photo.common import LocatableObject
from wildlife_photo.viewport import Viewport


class AimAssist:
    def __init__(self, tolerance_px: float = 50.0):
        self.tolerance = tolerance_px

    def is_in_view(self, viewport: Viewport, obj: LocatableObject) -> bool:
        """
        Does the object's square (half-width = radius) touch the viewport?
        Box-vs-box on purpose, not an exact circle test.
        """
        if not obj.has_position:
            return False
        r = obj.radius
        return not (
            obj.x + r < viewport.x
            or obj.x - r > viewport.x + viewport.width
            or obj.y + r < viewport.y
            or obj.y - r > viewport.y + viewport.height
        )

    def offset_from_center(self, viewport: Viewport, obj: LocatableObject) -> Tuple[float, float]:
        cx, cy = viewport.center
        return obj.x - cx, obj.y - cy

    def compute_nudge(self, viewport: Viewport, obj: LocatableObject) -> Tuple[float, float]:
        """Half-step toward the object, per axis, outside the dead-zone."""
        if not obj.has_position:
            return 0.0, 0.0
        ex, ey = self.offset_from_center(viewport, obj)

        # Dead-zone
        dx = 0.0 if abs(ex) <= self.tolerance else ex * 0.5
        dy = 0.0 if abs(ey) <= self.tolerance else ey * 0.5
        return dx, dy

    def is_centered(self, viewport: Viewport, obj: LocatableObject) -> bool:
        ex, ey = self.offset_from_center(viewport, obj)
        return abs(ex) <= self.tolerance and abs(ey) <= self.tolerance
