import asyncio
import json
from typing import Iterable, Tuple

import cv2
import numpy as np
import pytest


class ManualClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    c = color.lstrip("#")
    return int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)


def build_mask(width: int, height: int, blocks: Iterable[tuple] = ()) -> np.ndarray:
    """RGBA mask; each block is (hex, x, y, w, h) or (hex, x, y, w, h, alpha)."""
    mask = np.zeros((height, width, 4), dtype=np.uint8)
    for block in blocks:
        color, x, y, w, h = block[:5]
        alpha = block[5] if len(block) > 5 else 255
        mask[y:y + h, x:x + w, :3] = hex_to_rgb(color)
        mask[y:y + h, x:x + w, 3] = alpha
    return mask


def build_background(width: int, height: int) -> np.ndarray:
    bg = np.zeros((height, width, 4), dtype=np.uint8)
    bg[..., 0] = np.arange(width, dtype=np.uint16)[None, :] % 256
    bg[..., 1] = np.arange(height, dtype=np.uint16)[:, None] % 256
    bg[..., 3] = 255
    return bg


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def frame_sleep(clock):
    """Animation sleep that moves the manual clock and yields to the loop."""
    async def _sleep(dt: float) -> None:
        clock.advance(dt)
        await asyncio.sleep(0)

    return _sleep


def write_scene(root, name, record, mask, background=None):
    """Write ``name``.json, ``name``_mask.png and ``name``.png under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    (root / f"{name}.json").write_text(json.dumps(record), encoding="utf-8")
    cv2.imwrite(str(root / f"{name}_mask.png"), cv2.cvtColor(mask, cv2.COLOR_RGBA2BGRA))
    if background is None:
        background = build_background(mask.shape[1], mask.shape[0])
    cv2.imwrite(str(root / f"{name}.png"), cv2.cvtColor(background, cv2.COLOR_RGBA2BGRA))
