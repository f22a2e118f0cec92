# common.py
"""Objects that are shared across multiple modules."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np


class SceneType(str, Enum):
    PHOTO = "photo"
    WIMMELBILD = "wimmelbild"


class NudgeOutcome(str, Enum):
    NUDGED = "nudged"
    ALREADY_CENTERED = "already-centered"
    SKIPPED_TOO_FAR = "skipped-too-far"
    UNPOSITIONED = "unpositioned"
    CANCELLED = "cancelled"


class CaptureOutcome(str, Enum):
    FOUND = "found"
    MISS = "miss"
    COOLDOWN = "cooldown"
    NO_TARGET = "no-target"
    NOT_IN_VIEW = "not-in-view"
    SKIPPED_TOO_FAR = "skipped-too-far"
    CANCELLED = "cancelled"


class ObjectiveEvent(str, Enum):
    NONE = "none"
    ADVANCED = "objective-advanced"
    ALL_COMPLETE = "all-complete"


@dataclass
class LocatableObject:
    """
    One hidden object of a scene.
    ``x``/``y``/``radius`` are filled in by the mask segmenter and stay
    ``None`` when the object's color never shows up in the mask.
    """
    name: str
    color: str
    tags: List[str] = field(default_factory=list)
    found: bool = False
    x: Optional[float] = None
    y: Optional[float] = None
    radius: Optional[int] = None

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None and self.radius is not None


@dataclass(frozen=True)
class Objective:
    title: str
    tags: Tuple[str, ...] = ()
    emoji: Optional[str] = None

    @property
    def label(self) -> str:
        return self.emoji or self.title or "📍"


@dataclass(frozen=True)
class CaptureArtifact:
    """Background cut-out handed to the presentation layer after a find."""
    name: str
    cutout: np.ndarray
    bbox: Tuple[int, int, int, int]  # (left, top, w, h) in world pixels


@dataclass(frozen=True)
class CaptureResult:
    outcome: CaptureOutcome
    artifact: Optional[CaptureArtifact] = None
    sampled_color: Optional[str] = None
    objective_event: ObjectiveEvent = ObjectiveEvent.NONE
    nudge: Optional[NudgeOutcome] = None

    @property
    def found(self) -> bool:
        return self.outcome is CaptureOutcome.FOUND

    @property
    def name(self) -> Optional[str]:
        return self.artifact.name if self.artifact else None


@dataclass(frozen=True)
class GameEvent:
    kind: str  # "captured", "found", "miss", "nudge-skipped", "objective-advanced", "all-complete"
    name: Optional[str] = None
    objective: Optional[Objective] = None
