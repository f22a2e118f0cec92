# viewport.py
"""Movable window into scene (world-pixel) coordinates."""
from __future__ import annotations

from typing import Tuple

from wildlife_photo.helpers import round_half_up


class Viewport:
    """
    The visible world rectangle.  Sole authority for screen↔world mapping.
    ``x``/``y`` always stay inside ``[0, scene_dim - view_dim]``.
    """

    def __init__(self, scene_width: float, scene_height: float, width: float, height: float):
        self.scene_width = scene_width
        self.scene_height = scene_height

        self.width = min(width, scene_width)
        self.height = min(height, scene_height)
        self.x: float = max(0, round_half_up((scene_width - self.width) / 2))
        self.y: float = max(0, round_half_up((scene_height - self.height) / 2))

    @classmethod
    def for_canvas(
        cls,
        scene_width: int,
        scene_height: int,
        canvas_width: int,
        canvas_height: int,
        fraction: float = 0.4,
    ) -> "Viewport":
        """Show ``fraction`` of the scene width, keeping the canvas aspect."""
        vw = max(
            min(round_half_up(scene_width * fraction), scene_width),
            round_half_up(canvas_width / 2),
        )
        vh = round_half_up(vw * canvas_height / canvas_width)
        return cls(scene_width, scene_height, vw, vh)

    # ------------------ Geometry --------------------
    @property
    def max_x(self) -> float:
        return max(0, self.scene_width - self.width)

    @property
    def max_y(self) -> float:
        return max(0, self.scene_height - self.height)

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def contains(self, world_x: float, world_y: float) -> bool:
        return (
            self.x <= world_x <= self.x + self.width
            and self.y <= world_y <= self.y + self.height
        )

    # ------------------ Movement --------------------
    def pan(self, dx_world: float, dy_world: float) -> None:
        self.move_to(self.x + dx_world, self.y + dy_world)

    def move_to(self, x: float, y: float) -> None:
        self.x = min(max(0, x), self.max_x)
        self.y = min(max(0, y), self.max_y)

    # ---------------- Screen mapping -----------------
    def screen_to_world(
        self, screen_x: float, screen_y: float, canvas_width: float, canvas_height: float
    ) -> Tuple[float, float]:
        return (
            self.x + (screen_x / canvas_width) * self.width,
            self.y + (screen_y / canvas_height) * self.height,
        )

    def world_to_screen(
        self, world_x: float, world_y: float, canvas_width: float, canvas_height: float
    ) -> Tuple[float, float]:
        return (
            (world_x - self.x) / self.width * canvas_width,
            (world_y - self.y) / self.height * canvas_height,
        )

    def screen_delta_to_world(
        self, dx_screen: float, dy_screen: float, canvas_width: float, canvas_height: float
    ) -> Tuple[float, float]:
        return (
            (dx_screen / canvas_width) * self.width,
            (dy_screen / canvas_height) * self.height,
        )

    def __repr__(self) -> str:
        return (
            f"<Viewport x={self.x:.1f} y={self.y:.1f} {self.width}x{self.height} "
            f"of {self.scene_width}x{self.scene_height}>"
        )
