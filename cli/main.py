# main.py
"""
Entry-point for the scene tooling.

Sub-commands
------------
``validate``  check every scene in the scenes folder: definition, mask and
              background present, ``sceneType`` valid, every object color
              actually painted in the mask and no color used twice.
``locate``    load one scene, run the mask segmentation and print where each
              object ended up (centroid + radius) or that it is unreachable.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from wildlife_photo.assets import AssetError, SceneAssets
from wildlife_photo.config import AssetConfig, SegmenterConfig
from wildlife_photo.segmenter import MaskSegmenter
from wildlife_photo.validation import validate_scenes


# ────────────────────────────────────────────────────────────────────────────
#   C O M M A N D S
# ────────────────────────────────────────────────────────────────────────────
def _cmd_validate(asset_cfg: AssetConfig) -> int:
    try:
        reports = validate_scenes(asset_cfg)
    except AssetError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        return 1

    for r in reports:
        if r.ok:
            print(f"✔ {r.scene}: validated ({r.object_count} entities, type={r.scene_type})")
        for err in r.errors:
            print(f"✖ {r.scene}: {err}", file=sys.stderr)

    if any(not r.ok for r in reports):
        print("\nValidation failed.\n", file=sys.stderr)
        return 1
    print("\nAll scenes validated successfully.\n")
    return 0


def _cmd_locate(name: str, asset_cfg: AssetConfig, min_radius: int) -> int:
    try:
        assets = SceneAssets.load(name, asset_cfg)
    except AssetError as exc:
        print(f"✖ {exc}", file=sys.stderr)
        return 1

    scene = assets.scene
    MaskSegmenter(SegmenterConfig(min_radius_px=min_radius)).run(
        scene.objects, assets.mask, label=scene.name
    )

    h, w = assets.mask.shape[:2]
    print(f"Scene: {scene.name} ({scene.scene_type.value}, {w}x{h})")
    for obj in scene.objects:
        if obj.has_position:
            print(f"  {obj.name:<20} {obj.color}  x={obj.x:8.1f}  y={obj.y:8.1f}  r={obj.radius}")
        else:
            print(f"  {obj.name:<20} {obj.color}  unpositioned")
    for idx, objective in enumerate(scene.objectives):
        members = ", ".join(o.name for o in scene.objects_for_objective(objective))
        print(f"  objective {idx}: {objective.label} [{', '.join(objective.tags)}] -> {members}")
    return 1 if scene.unpositioned() else 0


# ────────────────────────────────────────────────────────────────────────────
#   M A I N
# ────────────────────────────────────────────────────────────────────────────
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scene tooling for the wildlife photo game")
    parser.add_argument("--base-path", default=".", help="folder that holds assets/scenes")
    parser.add_argument("--scenes-dir", default="assets/scenes")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("validate", help="check every scene in the scenes folder")

    loc = sub.add_parser("locate", help="segment one scene and print object positions")
    loc.add_argument("scene")
    loc.add_argument("--min-radius", type=int, default=SegmenterConfig().min_radius_px)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        format="%(levelname)s %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )
    asset_cfg = AssetConfig(base_path=args.base_path, scenes_dir=args.scenes_dir)

    if args.command == "validate":
        return _cmd_validate(asset_cfg)
    return _cmd_locate(args.scene, asset_cfg, args.min_radius)


if __name__ == "__main__":
    sys.exit(main())
