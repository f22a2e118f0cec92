from wildlife_photo.common import ObjectiveEvent
from wildlife_photo.objectives import ObjectiveTracker
from wildlife_photo.scene import Scene


def _scene(objectives):
    return Scene.from_definition({
        "name": "pond",
        "objects": [
            {"name": "frog", "color": "#00FF00", "tags": ["amphibian"]},
            {"name": "newt", "color": "#00AA00", "tags": ["amphibian"]},
            {"name": "heron", "color": "#FFFFFF", "tags": ["bird"]},
            {"name": "duck", "color": "#FFFF00", "tags": ["bird"]},
        ],
        "objectives": objectives,
    })


BIRDS_THEN_FROGS = [
    {"title": "Birds", "tags": ["bird"]},
    {"title": "Amphibians", "tags": ["amphibian"]},
]


def test_advances_when_current_group_completes():
    scene = _scene(BIRDS_THEN_FROGS)
    tracker = ObjectiveTracker(scene)

    scene.mark_found_by_color("#FFFFFF")
    assert tracker.record_find() is ObjectiveEvent.NONE
    assert tracker.current.title == "Birds"

    scene.mark_found_by_color("#FFFF00")
    assert tracker.record_find() is ObjectiveEvent.ADVANCED
    assert tracker.current_index == 1
    assert tracker.current.title == "Amphibians"


def test_all_complete_fires_exactly_once():
    scene = _scene(BIRDS_THEN_FROGS)
    tracker = ObjectiveTracker(scene)
    events = []

    for color in ("#FFFFFF", "#FFFF00", "#00FF00", "#00AA00"):
        scene.mark_found_by_color(color)
        events.append(tracker.record_find())

    assert events == [
        ObjectiveEvent.NONE,
        ObjectiveEvent.ADVANCED,
        ObjectiveEvent.NONE,
        ObjectiveEvent.ALL_COMPLETE,
    ]
    assert tracker.completed
    assert tracker.record_find() is ObjectiveEvent.NONE


def test_already_complete_objectives_are_skipped():
    scene = _scene([
        {"title": "Birds", "tags": ["bird"]},
        {"title": "Amphibians", "tags": ["amphibian"]},
        {"title": "Herons", "tags": ["bird"]},
    ])
    tracker = ObjectiveTracker(scene)

    # Amphibians found out of order while birds were active
    for color in ("#00FF00", "#00AA00", "#FFFFFF"):
        scene.mark_found_by_color(color)
        tracker.record_find()
    scene.mark_found_by_color("#FFFF00")

    assert tracker.record_find() is ObjectiveEvent.ALL_COMPLETE


def test_without_objectives_completion_needs_every_object():
    scene = _scene([])
    tracker = ObjectiveTracker(scene)

    for color in ("#00FF00", "#00AA00", "#FFFFFF"):
        scene.mark_found_by_color(color)
        assert tracker.record_find() is ObjectiveEvent.NONE

    scene.mark_found_by_color("#FFFF00")
    assert tracker.record_find() is ObjectiveEvent.ALL_COMPLETE


def test_next_target_follows_current_objective():
    scene = _scene(BIRDS_THEN_FROGS)
    tracker = ObjectiveTracker(scene)

    assert tracker.next_target().name == "heron"
    scene.mark_found_by_color("#FFFFFF")
    assert tracker.next_target().name == "duck"


def test_progress_rows():
    scene = _scene(BIRDS_THEN_FROGS)
    tracker = ObjectiveTracker(scene)
    scene.mark_found_by_color("#FFFFFF")
    tracker.record_find()

    birds, frogs = tracker.progress()

    assert (birds.found, birds.total, birds.done, birds.current) == (1, 2, False, True)
    assert (frogs.found, frogs.total, frogs.done, frogs.current) == (0, 2, False, False)


def test_objective_matching_nothing_is_skipped_up_front():
    scene = _scene([
        {"title": "Fish", "tags": ["fish"]},
        {"title": "Birds", "tags": ["bird"]},
    ])
    tracker = ObjectiveTracker(scene)

    assert tracker.current.title == "Birds"
    assert tracker.next_target().name == "heron"
