# validation.py
"""Consistency checks for the scene folder (definition ↔ mask ↔ background)."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set

import numpy as np

from wildlife_photo.assets import (
    AssetError,
    read_definition,
    read_raster,
    scenes_root,
)
from wildlife_photo.common import SceneType
from wildlife_photo.config import AssetConfig
from wildlife_photo.helpers import ensure_rgba, normalize_hex

log = logging.getLogger(__name__)

_VALID_TYPES = {t.value for t in SceneType}


@dataclass
class ValidationReport:
    scene: str
    errors: List[str] = field(default_factory=list)
    object_count: int = 0
    scene_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.errors


def mask_colors(mask: np.ndarray) -> Set[str]:
    """Uppercase hex colors of every non-transparent mask pixel."""
    rgba = ensure_rgba(mask)
    opaque = rgba[rgba[..., 3] > 0][:, :3].astype(np.uint32)
    keys = np.unique((opaque[:, 0] << 16) | (opaque[:, 1] << 8) | opaque[:, 2])
    return {f"#{k:06X}" for k in keys.tolist()}


def _scene_bases(root: Path, config: AssetConfig) -> List[str]:
    bases = set()
    for p in root.iterdir():
        if not p.is_file():
            continue
        name = p.name
        if name.endswith(config.mask_suffix):
            bases.add(name[: -len(config.mask_suffix)])
        elif p.suffix.lower() in (".json", ".jpg", ".png"):
            bases.add(p.stem)
    return sorted(bases)


def validate_scene(base: str, config: AssetConfig) -> ValidationReport:
    root = scenes_root(config)
    report = ValidationReport(scene=base)

    json_path = root / f"{base}.json"
    mask_file = root / f"{base}{config.mask_suffix}"
    image_file = root / f"{base}{config.image_suffix}"

    if not json_path.exists():
        report.errors.append("Missing .json")
    if not mask_file.exists():
        report.errors.append(f"Missing {config.mask_suffix}")
    if not image_file.exists() and not (root / f"{base}.png").exists():
        report.errors.append(f"Missing {config.image_suffix} or .png base image")
    if not json_path.exists() or not mask_file.exists():
        return report

    try:
        data = read_definition(json_path)
    except AssetError as exc:
        report.errors.append(str(exc))
        return report

    report.scene_type = data.get("sceneType")
    if report.scene_type not in _VALID_TYPES:
        report.errors.append(
            f'Missing or invalid "sceneType" (expected one of {sorted(_VALID_TYPES)})'
        )
        return report

    try:
        found_colors = mask_colors(read_raster(mask_file))
    except AssetError as exc:
        report.errors.append(str(exc))
        return report

    items = data.get("objects")
    if not isinstance(items, list):
        items = data.get("animals") if isinstance(data.get("animals"), list) else []

    declared: List[str] = []
    for item in items:
        raw = item.get("color") if isinstance(item, dict) else None
        if not raw:
            continue
        try:
            declared.append(normalize_hex(raw))
        except ValueError:
            report.errors.append(f"Invalid color {raw!r}")
    report.object_count = len(set(declared))

    for color, n in sorted(Counter(declared).items()):
        if n > 1:
            report.errors.append(f"Color {color} used by {n} objects")
    for color in sorted(set(declared)):
        if color not in found_colors:
            report.errors.append(f"Color {color} from JSON not found in mask")
    return report


def validate_scenes(config: Optional[AssetConfig] = None) -> List[ValidationReport]:
    config = config or AssetConfig()
    root = scenes_root(config)
    if not root.is_dir():
        raise AssetError(f"Scene directory {root} does not exist")
    reports = [validate_scene(base, config) for base in _scene_bases(root, config)]
    for r in reports:
        if not r.ok:
            log.warning("[Validate] %s: %s", r.scene, "; ".join(r.errors))
    return reports
