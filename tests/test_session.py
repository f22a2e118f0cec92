import asyncio
import json

import pytest

from tests.conftest import build_background, build_mask
from wildlife_photo.common import CaptureOutcome
from wildlife_photo.config import GameConfig, SessionConfig
from wildlife_photo.session import GameSession

RECORD = {
    "name": "jungle",
    "objects": [
        {"name": "lion", "color": "#FF0000", "tags": ["cat"]},
        {"name": "parrot", "color": "#00FF00", "tags": ["bird"]},
    ],
    "objectives": [
        {"title": "Find the cat", "tags": ["cat"]},
        {"title": "Find the bird", "tags": ["bird"]},
    ],
}


def _mask():
    return build_mask(
        200, 100, [("#FF0000", 90, 40, 20, 20), ("#00FF00", 170, 40, 20, 20)]
    )


def _session(clock, frame_sleep, record=RECORD, **session_cfg):
    config = GameConfig(session=SessionConfig(shuffle_objectives=False, **session_cfg))
    return GameSession.from_definition(
        record,
        _mask(),
        build_background(200, 100),
        (200, 100),
        config,
        clock=clock,
        sleep=frame_sleep,
    )


def test_session_positions_objects_and_viewport(clock, frame_sleep):
    session = _session(clock, frame_sleep)

    lion = session.scene.find("lion")
    assert (lion.x, lion.y) == (99.5, 49.5)
    assert (session.viewport.width, session.viewport.height) == (100, 50)
    assert (session.viewport.x, session.viewport.y) == (50, 25)
    assert session.controller.viewport is session.viewport


def test_photo_round_with_objectives(clock, frame_sleep):
    session = _session(clock, frame_sleep)
    events = []
    session.subscribe(events.append)

    assert session.pointer_tap(100, 50) is None
    assert session.last_tap_world == (100, 50)

    first = asyncio.run(session.shutter())
    assert first.outcome is CaptureOutcome.FOUND
    assert [(e.kind, e.name) for e in events] == [
        ("captured", "lion"),
        ("objective-advanced", None),
    ]
    assert events[-1].objective.title == "Find the bird"

    # parrot is 79.5 px from the centre, beyond 0.6 * 50
    clock.advance(1.0)
    skipped = asyncio.run(session.shutter())
    assert skipped.outcome is CaptureOutcome.SKIPPED_TOO_FAR
    assert events[-1].kind == "nudge-skipped"

    session.drag(-160, 0)
    assert session.viewport.x == 100

    session.pointer_tap(160, 50)
    done = asyncio.run(session.shutter())
    assert done.outcome is CaptureOutcome.FOUND
    assert [e.kind for e in events[-2:]] == ["captured", "all-complete"]
    assert session.completed


def test_missed_shutter_publishes_miss(clock, frame_sleep):
    session = _session(clock, frame_sleep)
    events = []
    session.subscribe(events.append)

    session.pointer_tap(10, 5)
    result = asyncio.run(session.shutter())

    assert result.outcome is CaptureOutcome.MISS
    assert [e.kind for e in events] == ["miss"]


def test_wimmelbild_tap_finds_immediately(clock, frame_sleep):
    session = _session(clock, frame_sleep, record=dict(RECORD, sceneType="wimmelbild"))
    events = []
    session.subscribe(events.append)

    result = session.pointer_tap(100, 50)

    assert result.outcome is CaptureOutcome.FOUND
    assert events[0].kind == "found"
    assert asyncio.run(session.shutter()).outcome is CaptureOutcome.NO_TARGET


def test_mismatched_rasters_are_rejected(clock, frame_sleep):
    with pytest.raises(ValueError):
        GameSession.from_definition(
            RECORD, _mask(), build_background(100, 100), (200, 100), clock=clock
        )


def test_resize_rebuilds_viewport(clock, frame_sleep):
    session = _session(clock, frame_sleep)
    old = session.viewport

    session.resize(400, 100)

    assert session.viewport is not old
    assert session.controller.viewport is session.viewport
    assert (session.viewport.width, session.viewport.height) == (200, 50)
    assert session.canvas_width == 400


def test_progress_rows(clock, frame_sleep):
    session = _session(clock, frame_sleep)
    rows = session.progress()
    assert [r.objective.title for r in rows] == ["Find the cat", "Find the bird"]
    assert rows[0].current


def test_live_tuning_file_is_applied(clock, frame_sleep, tmp_path):
    path = tmp_path / "tuning.json"
    path.write_text(json.dumps({"aim_tolerance_px": 5}))

    session = _session(clock, frame_sleep, tuning_path=str(path))
    assert session.controller.aim_tolerance == 5

    path.write_text(json.dumps({"aim_tolerance_px": 75.5, "cooldown_s": 0.5}))
    session.tick()

    assert session.controller.aim_tolerance == 75.5
    assert session.controller.cooldown.duration_s == 0.5
