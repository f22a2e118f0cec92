# segmenter.py
"""Color-mask segmentation: per-color centroid, bounding box and radius."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from wildlife_photo.common import LocatableObject
from wildlife_photo.config import SegmenterConfig
from wildlife_photo.helpers import ensure_rgba, round_half_up

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ColorAggregate:
    sum_x: float
    sum_y: float
    count: int
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def centroid(self) -> Tuple[float, float]:
        return self.sum_x / self.count, self.sum_y / self.count

    @property
    def bbox_size(self) -> Tuple[int, int]:
        return self.max_x - self.min_x + 1, self.max_y - self.min_y + 1


class MaskSegmenter:
    """
    Single O(W·H) scan of an RGBA mask.  Every opaque pixel votes for the
    uppercase hex color of its RGB; alpha == 0 is background.
    """

    def __init__(self, config: Optional[SegmenterConfig] = None):
        self.config = config or SegmenterConfig()

    # ------------------ Public API --------------------
    def aggregate(self, mask: np.ndarray) -> Dict[str, ColorAggregate]:
        """Fresh per-color aggregates; nothing is carried over between calls."""
        rgba = ensure_rgba(mask)
        ys, xs = np.nonzero(rgba[..., 3])
        if xs.size == 0:
            return {}

        rgb = rgba[ys, xs, :3].astype(np.uint32)
        keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]
        colors, inverse, counts = np.unique(keys, return_inverse=True, return_counts=True)
        inverse = inverse.ravel()
        n = colors.size

        sum_x = np.bincount(inverse, weights=xs, minlength=n)
        sum_y = np.bincount(inverse, weights=ys, minlength=n)

        min_x = np.full(n, np.iinfo(np.int64).max, dtype=np.int64)
        min_y = min_x.copy()
        max_x = np.full(n, -1, dtype=np.int64)
        max_y = max_x.copy()
        np.minimum.at(min_x, inverse, xs)
        np.minimum.at(min_y, inverse, ys)
        np.maximum.at(max_x, inverse, xs)
        np.maximum.at(max_y, inverse, ys)

        out: Dict[str, ColorAggregate] = {}
        for i, key in enumerate(colors.tolist()):
            out[f"#{key:06X}"] = ColorAggregate(
                sum_x=float(sum_x[i]),
                sum_y=float(sum_y[i]),
                count=int(counts[i]),
                min_x=int(min_x[i]),
                min_y=int(min_y[i]),
                max_x=int(max_x[i]),
                max_y=int(max_y[i]),
            )
        return out

    def radius_for(self, acc: ColorAggregate) -> int:
        bbox_w, bbox_h = acc.bbox_size
        return max(self.config.min_radius_px, round_half_up(max(bbox_w, bbox_h) / 2))

    def locate(
        self,
        objects: Iterable[LocatableObject],
        aggregates: Dict[str, ColorAggregate],
        label: str = "",
    ) -> List[LocatableObject]:
        """Position every object whose color was observed; return the rest."""
        missing: List[LocatableObject] = []
        for obj in objects:
            acc = aggregates.get(obj.color.upper())
            if acc is None or acc.count == 0:
                obj.x = obj.y = obj.radius = None
                log.warning(
                    "[Segmenter] %scolor %s not found in mask for %s",
                    f"{label}: " if label else "",
                    obj.color.upper(),
                    obj.name,
                )
                missing.append(obj)
                continue
            obj.x, obj.y = acc.centroid
            obj.radius = self.radius_for(acc)
        return missing

    def run(
        self, objects: Iterable[LocatableObject], mask: np.ndarray, label: str = ""
    ) -> Dict[str, ColorAggregate]:
        objects = list(objects)
        aggregates = self.aggregate(mask)
        missing = self.locate(objects, aggregates, label)
        log.debug(
            "[Segmenter] %d mask colors, %d/%d objects positioned",
            len(aggregates),
            len(objects) - len(missing),
            len(objects),
        )
        return aggregates
