# objectives.py
"""Ordered objective groups and their progression."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from wildlife_photo.common import LocatableObject, Objective, ObjectiveEvent
from wildlife_photo.scene import Scene

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ObjectiveProgress:
    objective: Objective
    found: int
    total: int
    done: bool
    current: bool


class ObjectiveTracker:
    """
    Walks the scene's objectives in order.  ``record_find()`` is called
    after every successful find; the terminal ALL_COMPLETE event fires once.
    """

    def __init__(self, scene: Scene):
        self.scene = scene
        self.current_index = 0
        self._completed = False
        self._skip_completed()

    @property
    def objectives(self) -> List[Objective]:
        return self.scene.objectives

    @property
    def current(self) -> Optional[Objective]:
        if 0 <= self.current_index < len(self.objectives):
            return self.objectives[self.current_index]
        return None

    @property
    def completed(self) -> bool:
        return self._completed

    def objects_for(self, objective: Optional[Objective]) -> List[LocatableObject]:
        return self.scene.objects_for_objective(objective)

    def all_found(self, objects: List[LocatableObject]) -> bool:
        return self.scene.all_found(objects)

    def active_objects(self) -> List[LocatableObject]:
        return self.objects_for(self.current)

    def next_target(self) -> Optional[LocatableObject]:
        self._skip_completed()
        return self.scene.first_unfound(self.current)

    def _skip_completed(self) -> bool:
        """Move past objectives with nothing left to find; True if the index moved."""
        moved = False
        while (
            self.current_index + 1 < len(self.objectives)
            and self.all_found(self.active_objects())
        ):
            self.current_index += 1
            moved = True
        return moved

    def record_find(self) -> ObjectiveEvent:
        if self._completed:
            return ObjectiveEvent.NONE

        if not self.objectives:
            if self.scene.all_found():
                self._completed = True
                log.info("[Objectives] %s: all objects found", self.scene.name)
                return ObjectiveEvent.ALL_COMPLETE
            return ObjectiveEvent.NONE

        if not self.all_found(self.active_objects()):
            return ObjectiveEvent.NONE

        self._skip_completed()
        if not self.all_found(self.active_objects()):
            log.info("[Objectives] advanced to %r", self.current.title)
            return ObjectiveEvent.ADVANCED

        self._completed = True
        log.info("[Objectives] %s: all objectives complete", self.scene.name)
        return ObjectiveEvent.ALL_COMPLETE

    def progress(self) -> List[ObjectiveProgress]:
        rows = []
        for idx, obj in enumerate(self.objectives):
            objs = self.objects_for(obj)
            done = self.all_found(objs)
            rows.append(
                ObjectiveProgress(
                    objective=obj,
                    found=sum(o.found for o in objs),
                    total=len(objs),
                    done=done,
                    current=idx == self.current_index and not done,
                )
            )
        return rows
