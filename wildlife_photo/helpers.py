# helpers.py
"""Small utility classes that don’t fit elsewhere."""
from __future__ import annotations

import math
import re
import time
from typing import Callable, Optional

import numpy as np

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6})$")


def round_half_up(value: float) -> int:
    """Browser-style rounding: 2.5 -> 3, -2.5 -> -2."""
    return int(math.floor(value + 0.5))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{int(r):02X}{int(g):02X}{int(b):02X}"


def normalize_hex(color: str) -> str:
    """Canonical ``#RRGGBB`` form; raises ValueError for anything else."""
    m = _HEX_PATTERN.match(str(color).strip())
    if not m:
        raise ValueError(f"Not a #RRGGBB color: {color!r}")
    return f"#{m.group(1).upper()}"


def ensure_rgba(raster: np.ndarray) -> np.ndarray:
    """
    Return an (H, W, 4) uint8 RGBA view of ``raster``.
    3-channel input is treated as fully opaque.
    """
    arr = np.asarray(raster)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) raster, got shape {arr.shape}")
    if arr.dtype != np.uint8:
        arr = arr.astype(np.uint8)
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=2)
    return arr


def ease_in_out(t: float) -> float:
    """Quadratic ease-in-out on [0, 1]."""
    t = min(1.0, max(0.0, t))
    return 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t


class Cooldown:
    """
    Re-arm-after-delay guard.  ``trigger()`` arms it and returns False if it
    was already armed; it disarms itself once ``duration_s`` has elapsed.
    """

    def __init__(self, duration_s: float, clock: Callable[[], float] = time.monotonic):
        self.duration_s = duration_s
        self._clock = clock
        self._armed_at: Optional[float] = None

    def is_active(self) -> bool:
        if self._armed_at is None:
            return False
        if self._clock() - self._armed_at >= self.duration_s:
            self._armed_at = None
            return False
        return True

    def trigger(self) -> bool:
        if self.is_active():
            return False
        self._armed_at = self._clock()
        return True

    def rearm(self) -> None:
        """Restart the window even if it is still running."""
        self._armed_at = self._clock()

    def remaining(self) -> float:
        if not self.is_active():
            return 0.0
        return self.duration_s - (self._clock() - self._armed_at)


class CancelToken:
    """Flag checked once per animation frame."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
