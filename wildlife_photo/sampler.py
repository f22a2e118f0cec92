# sampler.py
"""Point sampling of the color mask with an anti-aliasing fallback."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from wildlife_photo.helpers import ensure_rgba, rgb_to_hex, round_half_up

log = logging.getLogger(__name__)

NO_OBJECT = "#000000"  # masks paint unassigned regions black


class MaskSampler:
    def __init__(self, mask: np.ndarray, search_radius_px: int = 12):
        self.mask = ensure_rgba(mask)
        self.search_radius_px = search_radius_px

    @property
    def width(self) -> int:
        return self.mask.shape[1]

    @property
    def height(self) -> int:
        return self.mask.shape[0]

    def in_bounds(self, world_x: float, world_y: float) -> bool:
        return 0 <= world_x < self.width and 0 <= world_y < self.height

    def sample(self, world_x: float, world_y: float) -> Optional[str]:
        """
        Hex color under a world point, or None when nothing is there.
        Transparent / black hits fall back to the most frequent object
        color in the surrounding square.
        """
        if not self.in_bounds(world_x, world_y):
            log.debug("[Sampler] no pixel data at (%.1f, %.1f)", world_x, world_y)
            return None
        # Rounding may push a point on the last pixel column/row one past the edge
        px = min(round_half_up(world_x), self.width - 1)
        py = min(round_half_up(world_y), self.height - 1)
        p = self.mask[py, px]

        hex_color = rgb_to_hex(*p[:3])
        if p[3] != 0 and hex_color != NO_OBJECT:
            return hex_color
        return self.dominant_color_near(px, py)

    def dominant_color_near(self, px: int, py: int) -> Optional[str]:
        r = self.search_radius_px
        x0, x1 = max(0, px - r), min(self.width, px + r + 1)
        y0, y1 = max(0, py - r), min(self.height, py + r + 1)
        if x0 >= x1 or y0 >= y1:
            return None

        window = self.mask[y0:y1, x0:x1].reshape(-1, 4)
        rgb = window[:, :3].astype(np.uint32)
        keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
        keep = (window[:, 3] != 0) & (keys != 0)
        if not keep.any():
            return None

        # np.unique sorts, so ties resolve to the lowest color value
        colors, counts = np.unique(keys[keep], return_counts=True)
        best = int(colors[int(np.argmax(counts))])
        hex_color = f"#{best:06X}"
        log.debug("[Sampler] neighbourhood fallback at (%d, %d) -> %s", px, py, hex_color)
        return hex_color
