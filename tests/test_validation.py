import pytest

from tests.conftest import build_mask, write_scene
from wildlife_photo.assets import AssetError
from wildlife_photo.config import AssetConfig
from wildlife_photo.validation import mask_colors, validate_scene, validate_scenes


@pytest.fixture
def asset_cfg(tmp_path):
    return AssetConfig(base_path=str(tmp_path))


@pytest.fixture
def scenes(tmp_path):
    return tmp_path / "assets" / "scenes"


def _record(*colors, scene_type="photo"):
    return {
        "sceneType": scene_type,
        "objects": [{"name": f"o{i}", "color": c} for i, c in enumerate(colors)],
    }


def test_mask_colors_skip_transparent():
    mask = build_mask(10, 10, [("#ff0000", 0, 0, 2, 2), ("#00FF00", 5, 5, 2, 2, 0)])
    assert mask_colors(mask) == {"#FF0000"}


def test_valid_scene(asset_cfg, scenes):
    mask = build_mask(20, 20, [("#FF0000", 0, 0, 5, 5), ("#00FF00", 10, 10, 5, 5)])
    write_scene(scenes, "savanna", _record("#ff0000", "#00FF00"), mask)

    report = validate_scene("savanna", asset_cfg)

    assert report.ok, report.errors
    assert report.object_count == 2
    assert report.scene_type == "photo"


def test_color_missing_from_mask(asset_cfg, scenes):
    mask = build_mask(20, 20, [("#FF0000", 0, 0, 5, 5)])
    write_scene(scenes, "savanna", _record("#FF0000", "#0000FF"), mask)

    report = validate_scene("savanna", asset_cfg)

    assert report.errors == ["Color #0000FF from JSON not found in mask"]


def test_duplicate_and_invalid_colors(asset_cfg, scenes):
    mask = build_mask(20, 20, [("#FF0000", 0, 0, 5, 5)])
    write_scene(scenes, "savanna", _record("#FF0000", "#ff0000", "purple"), mask)

    errors = validate_scene("savanna", asset_cfg).errors

    assert "Invalid color 'purple'" in errors
    assert "Color #FF0000 used by 2 objects" in errors


def test_invalid_scene_type(asset_cfg, scenes):
    write_scene(scenes, "savanna", _record(scene_type="panorama"), build_mask(5, 5))
    report = validate_scene("savanna", asset_cfg)
    assert not report.ok
    assert "sceneType" in report.errors[0]


def test_missing_files_are_reported(asset_cfg, scenes):
    write_scene(scenes, "savanna", _record(), build_mask(5, 5))
    (scenes / "savanna_mask.png").unlink()
    (scenes / "savanna.png").unlink()

    errors = validate_scene("savanna", asset_cfg).errors

    assert "Missing _mask.png" in errors
    assert "Missing .jpg or .png base image" in errors


def test_validate_scenes_covers_every_base(asset_cfg, scenes):
    write_scene(scenes, "good", _record("#FF0000"), build_mask(5, 5, [("#FF0000", 0, 0, 1, 1)]))
    write_scene(scenes, "bad", _record("#00FF00"), build_mask(5, 5))

    reports = {r.scene: r for r in validate_scenes(asset_cfg)}

    assert set(reports) == {"good", "bad"}
    assert reports["good"].ok
    assert not reports["bad"].ok


def test_missing_scene_folder(asset_cfg):
    with pytest.raises(AssetError):
        validate_scenes(asset_cfg)
