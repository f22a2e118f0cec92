# config.py
"""Typed configuration blobs for the whole game core."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class CaptureProtocol(str, Enum):
    TWO_PHASE = "two_phase"   # nudge decision, then a separate capture
    DIRECT = "direct"         # reject outright when the target is off-screen
    ASSISTED = "assisted"     # half-step nudge, then one retry


# --------------------- Segmenter --------------------
@dataclass
class SegmenterConfig:
    min_radius_px: int = 8


# ---------------------- Viewport --------------------
@dataclass
class ViewportConfig:
    scene_fraction: float = 0.4  # share of the scene width shown at once


# ------------------------ Aim -----------------------
@dataclass
class AimConfig:
    tolerance_px: float = 50.0


# ---------------------- Capture ---------------------
@dataclass
class CaptureConfig:
    cooldown_s: float = 1.0
    nudge_duration_s: float = 2.4          # slow enough for small children
    max_nudge_distance_factor: float = 0.6  # x min(viewport w, h)
    frame_interval_s: float = 1.0 / 60.0
    sample_search_radius_px: int = 12
    cutout_padding_px: int = 12
    protocol: CaptureProtocol = CaptureProtocol.TWO_PHASE


# ----------------------- Assets ---------------------
@dataclass
class AssetConfig:
    base_path: str = "."
    scenes_dir: str = "assets/scenes"
    image_suffix: str = ".jpg"
    mask_suffix: str = "_mask.png"


# ---------------------- Session ---------------------
@dataclass
class SessionConfig:
    shuffle_objectives: bool = True
    tuning_path: Optional[str] = None  # e.g. "runtime_params.json"


@dataclass
class GameConfig:
    segmenter: SegmenterConfig = field(default_factory=SegmenterConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    aim: AimConfig = field(default_factory=AimConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    assets: AssetConfig = field(default_factory=AssetConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
