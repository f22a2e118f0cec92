# scene.py
"""Canonical scene model plus the one-time normalisation of raw scene records."""
from __future__ import annotations

import logging
import random
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from wildlife_photo.common import LocatableObject, Objective, SceneType
from wildlife_photo.helpers import normalize_hex

log = logging.getLogger(__name__)


class SceneDefinitionError(ValueError):
    """Raised when a scene record cannot be turned into a Scene."""


# ------------------ Record normalisation -------------------
def _parse_object(raw: Any, idx: int) -> LocatableObject:
    if not isinstance(raw, Mapping):
        raise SceneDefinitionError(f"object #{idx} is not a mapping")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise SceneDefinitionError(f"object #{idx} has no name")
    try:
        color = normalize_hex(raw.get("color", ""))
    except ValueError as exc:
        raise SceneDefinitionError(f"object {name!r}: {exc}") from exc
    tags = raw.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]
    return LocatableObject(
        name=name,
        color=color,
        tags=[str(t) for t in tags],
        found=bool(raw.get("found", False)),
    )


def _parse_objective(raw: Any, idx: int) -> Objective:
    if not isinstance(raw, Mapping):
        raise SceneDefinitionError(f"objective #{idx} is not a mapping")
    # Newer records carry `tags`, older ones a single `tag`
    tags = raw.get("tags")
    if not tags:
        tag = raw.get("tag")
        tags = [tag] if tag else []
    elif isinstance(tags, str):
        tags = [tags]
    return Objective(
        title=str(raw.get("title", "")),
        tags=tuple(str(t) for t in tags),
        emoji=raw.get("emoji") or None,
    )


class Scene:
    """
    Authoritative list of hidden objects and their found state.
    Objects are only ever flipped to found through ``mark_found_by_color``.
    """

    def __init__(
        self,
        name: str,
        objects: Sequence[LocatableObject],
        objectives: Sequence[Objective] = (),
        scene_type: SceneType = SceneType.PHOTO,
    ):
        self.name = name
        self.objects: List[LocatableObject] = list(objects)
        self.objectives: List[Objective] = list(objectives)
        self.scene_type = scene_type

        seen = set()
        for obj in self.objects:
            if obj.name in seen:
                raise SceneDefinitionError(f"duplicate object name {obj.name!r}")
            seen.add(obj.name)

    @classmethod
    def from_definition(
        cls,
        record: Mapping[str, Any],
        *,
        shuffle: bool = False,
        rng: Optional[random.Random] = None,
    ) -> "Scene":
        """
        Build a Scene from a decoded scene JSON record.

        Accepts ``objects`` or the legacy ``animals`` key and objective
        ``tags`` or the legacy single ``tag``.  The record is not modified.
        With ``shuffle`` the objective order is shuffled once, here.
        """
        if not isinstance(record, Mapping):
            raise SceneDefinitionError("scene record must be a mapping")
        name = record.get("name")
        if not name or not isinstance(name, str):
            raise SceneDefinitionError("scene record has no name")

        raw_objects = record.get("objects")
        if raw_objects is None:
            raw_objects = record.get("animals", [])
        if not isinstance(raw_objects, list):
            raise SceneDefinitionError(f"scene {name!r}: objects must be a list")
        objects = [_parse_object(o, i) for i, o in enumerate(raw_objects)]

        raw_objectives = record.get("objectives") or []
        if not isinstance(raw_objectives, list):
            raise SceneDefinitionError(f"scene {name!r}: objectives must be a list")
        objectives = [_parse_objective(o, i) for i, o in enumerate(raw_objectives)]
        if shuffle and len(objectives) > 1:
            (rng or random.Random()).shuffle(objectives)

        try:
            scene_type = SceneType(record.get("sceneType") or SceneType.PHOTO.value)
        except ValueError as exc:
            raise SceneDefinitionError(
                f"scene {name!r}: invalid sceneType {record.get('sceneType')!r}"
            ) from exc

        return cls(name, objects, objectives, scene_type)

    # ------------------ Public API --------------------
    def find(self, name: str) -> Optional[LocatableObject]:
        return next((o for o in self.objects if o.name == name), None)

    def mark_found_by_color(self, hex_color: str) -> Optional[LocatableObject]:
        """Flip the first not-yet-found object with this color; None on no match."""
        try:
            color = normalize_hex(hex_color)
        except ValueError:
            return None
        obj = next((o for o in self.objects if not o.found and o.color == color), None)
        if obj is None:
            return None
        obj.found = True
        log.info("[Scene] %s: found %s (%s)", self.name, obj.name, color)
        return obj

    def objects_for_objective(self, objective: Optional[Objective] = None) -> List[LocatableObject]:
        if objective is None or not objective.tags:
            return list(self.objects)
        wanted = set(objective.tags)
        return [o for o in self.objects if wanted.intersection(o.tags)]

    def all_found(self, objects: Optional[Iterable[LocatableObject]] = None) -> bool:
        return all(o.found for o in (self.objects if objects is None else objects))

    def first_unfound(self, objective: Optional[Objective] = None) -> Optional[LocatableObject]:
        return next((o for o in self.objects_for_objective(objective) if not o.found), None)

    def unpositioned(self) -> List[LocatableObject]:
        return [o for o in self.objects if not o.has_position]

    def __repr__(self) -> str:
        found = sum(o.found for o in self.objects)
        return f"<Scene {self.name!r} {self.scene_type.value} {found}/{len(self.objects)} found>"
