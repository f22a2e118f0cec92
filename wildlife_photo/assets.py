# assets.py
"""Scene files on disk → decoded RGBA rasters + Scene.

Outer collaborator of the game core: the core itself only ever sees the
decoded arrays and the normalised Scene.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import numpy as np

from wildlife_photo.config import AssetConfig
from wildlife_photo.scene import Scene, SceneDefinitionError

log = logging.getLogger(__name__)


class AssetError(RuntimeError):
    """Raised when a scene file is missing or cannot be decoded."""


def scenes_root(config: AssetConfig) -> Path:
    return Path(config.base_path).expanduser() / config.scenes_dir


def read_raster(path: Path) -> np.ndarray:
    """Decode an image file to an (H, W, 4) uint8 RGBA array."""
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise AssetError(f"Could not decode image {path}")

    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise AssetError(f"Unsupported channel count {img.shape[2]} in {path}")


def read_definition(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
    except FileNotFoundError as exc:
        raise AssetError(f"Missing scene definition {path}") from exc
    except json.JSONDecodeError as exc:
        raise AssetError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise AssetError(f"{path} must hold a JSON object")
    return data


def list_scenes(config: AssetConfig) -> List[str]:
    """Scene names that have a definition file; templates are skipped."""
    root = scenes_root(config)
    if not root.is_dir():
        return []
    # Only the top level is scanned, so template/ sub-folders never show up
    return sorted(p.stem for p in root.glob("*.json") if not p.stem.startswith("template"))


def background_path(name: str, record: Dict[str, Any], config: AssetConfig) -> Path:
    root = scenes_root(config)
    if record.get("image"):
        return root / str(record["image"])
    primary = root / f"{name}{config.image_suffix}"
    if primary.exists():
        return primary
    return root / f"{name}.png"


def mask_path(name: str, config: AssetConfig) -> Path:
    return scenes_root(config) / f"{name}{config.mask_suffix}"


@dataclass
class SceneAssets:
    scene: Scene
    mask: np.ndarray
    background: np.ndarray
    definition: Dict[str, Any]

    @classmethod
    def load(
        cls,
        name: str,
        config: Optional[AssetConfig] = None,
        *,
        shuffle_objectives: bool = False,
        rng: Optional[random.Random] = None,
    ) -> "SceneAssets":
        config = config or AssetConfig()
        record = read_definition(scenes_root(config) / f"{name}.json")
        record.setdefault("name", name)

        try:
            scene = Scene.from_definition(record, shuffle=shuffle_objectives, rng=rng)
        except SceneDefinitionError as exc:
            raise AssetError(f"Scene {name!r}: {exc}") from exc

        mask = read_raster(mask_path(name, config))
        background = read_raster(background_path(name, record, config))
        if mask.shape[:2] != background.shape[:2]:
            raise AssetError(
                f"Scene {name!r}: mask {mask.shape[1]}x{mask.shape[0]} and background "
                f"{background.shape[1]}x{background.shape[0]} differ in size"
            )

        log.info(
            "[Assets] Loaded %s (%dx%d, %d objects)",
            name,
            mask.shape[1],
            mask.shape[0],
            len(scene.objects),
        )
        return cls(scene=scene, mask=mask, background=background, definition=record)
