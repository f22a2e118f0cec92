# wildlife_photo/__init__.py
"""Spot-the-object game core – re-export high-level API."""
from .aim_assist import AimAssist                # noqa: F401
from .common import (                            # noqa: F401
    CaptureArtifact, CaptureOutcome, CaptureResult, GameEvent,
    LocatableObject, NudgeOutcome, Objective, ObjectiveEvent, SceneType,
)
from .config import (                            # noqa: F401
    AimConfig, AssetConfig, CaptureConfig, CaptureProtocol, GameConfig,
    SegmenterConfig, SessionConfig, ViewportConfig,
)
from .controller import CameraController         # noqa: F401
from .objectives import ObjectiveProgress, ObjectiveTracker  # noqa: F401
from .scene import Scene, SceneDefinitionError   # noqa: F401
from .segmenter import MaskSegmenter             # noqa: F401
from .session import GameSession                 # noqa: F401
from .viewport import Viewport                   # noqa: F401
