# session.py
"""Glue that wires scene → segmenter → viewport → controller → objectives.

One GameSession per loaded scene.  Everything runs on the caller's frame
loop: ``tick()`` once per frame, pointer/drag handlers as input arrives and
``await shutter()`` from the shutter button.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Tuple

import numpy as np

from wildlife_photo.assets import SceneAssets
from wildlife_photo.common import (
    CaptureOutcome,
    CaptureResult,
    GameEvent,
    ObjectiveEvent,
    SceneType,
)
from wildlife_photo.config import GameConfig
from wildlife_photo.controller import CameraController
from wildlife_photo.helpers import ensure_rgba
from wildlife_photo.live_tuning import RuntimeParamWatcher, apply_runtime_params
from wildlife_photo.objectives import ObjectiveProgress, ObjectiveTracker
from wildlife_photo.scene import Scene
from wildlife_photo.segmenter import MaskSegmenter
from wildlife_photo.viewport import Viewport

log = logging.getLogger(__name__)

Listener = Callable[[GameEvent], None]


class GameSession:
    def __init__(
        self,
        scene: Scene,
        mask: np.ndarray,
        background: np.ndarray,
        canvas_size: Tuple[int, int],
        config: Optional[GameConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or GameConfig()
        self.scene = scene
        self.mask = ensure_rgba(mask)
        self.background = np.asarray(background)
        if self.mask.shape[:2] != self.background.shape[:2]:
            raise ValueError(
                f"mask {self.mask.shape[1]}x{self.mask.shape[0]} does not match "
                f"background {self.background.shape[1]}x{self.background.shape[0]}"
            )
        self.scene_height, self.scene_width = self.mask.shape[:2]

        # Build sub-systems
        MaskSegmenter(self.config.segmenter).run(scene.objects, self.mask, label=scene.name)
        self.canvas_width, self.canvas_height = canvas_size
        self.viewport = self._make_viewport()
        self.tracker = ObjectiveTracker(scene)
        self.controller = CameraController(
            scene,
            self.viewport,
            self.mask,
            self.background,
            self.tracker,
            self.config.capture,
            self.config.aim,
            clock=clock,
            sleep=sleep,
        )

        self.last_tap_world: Optional[Tuple[float, float]] = None
        self._listeners: List[Listener] = []

        # Live-tuning
        self.param_watcher: Optional[RuntimeParamWatcher] = None
        if self.config.session.tuning_path:
            self.param_watcher = RuntimeParamWatcher(self.config.session.tuning_path)
            apply_runtime_params(self.controller, self.param_watcher.params)

        log.info(
            "[Session] %s ready (%s, %dx%d, %d objects)",
            scene.name,
            scene.scene_type.value,
            self.scene_width,
            self.scene_height,
            len(scene.objects),
        )

    @classmethod
    def from_definition(
        cls,
        record: Mapping[str, Any],
        mask: np.ndarray,
        background: np.ndarray,
        canvas_size: Tuple[int, int],
        config: Optional[GameConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        **kwargs: Any,
    ) -> "GameSession":
        config = config or GameConfig()
        scene = Scene.from_definition(
            record, shuffle=config.session.shuffle_objectives, rng=rng
        )
        return cls(scene, mask, background, canvas_size, config, **kwargs)

    @classmethod
    def load(
        cls,
        name: str,
        canvas_size: Tuple[int, int],
        config: Optional[GameConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        **kwargs: Any,
    ) -> "GameSession":
        """Load ``name`` from the configured scenes folder and start a session."""
        config = config or GameConfig()
        assets = SceneAssets.load(
            name,
            config.assets,
            shuffle_objectives=config.session.shuffle_objectives,
            rng=rng,
        )
        return cls(assets.scene, assets.mask, assets.background, canvas_size, config, **kwargs)

    def _make_viewport(self) -> Viewport:
        return Viewport.for_canvas(
            self.scene_width,
            self.scene_height,
            self.canvas_width,
            self.canvas_height,
            self.config.viewport.scene_fraction,
        )

    # ------------------------------------------------------------------ #
    #   E V E N T S
    # ------------------------------------------------------------------ #
    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _emit(self, kind: str, name: Optional[str] = None) -> None:
        event = GameEvent(kind, name, self.tracker.current)
        for listener in self._listeners:
            listener(event)

    def _publish(self, result: CaptureResult) -> None:
        if result.outcome is CaptureOutcome.FOUND:
            self._emit("captured" if self.is_photo else "found", result.name)
        elif result.outcome is CaptureOutcome.MISS:
            self._emit("miss")
        elif result.outcome is CaptureOutcome.SKIPPED_TOO_FAR:
            self._emit("nudge-skipped")

        if result.objective_event is not ObjectiveEvent.NONE:
            self._emit(result.objective_event.value)

    # ------------------------------------------------------------------ #
    #   I N P U T
    # ------------------------------------------------------------------ #
    @property
    def is_photo(self) -> bool:
        return self.scene.scene_type is SceneType.PHOTO

    def drag(self, dx_screen: float, dy_screen: float) -> None:
        """Dragging right reveals what is to the left."""
        dx, dy = self.viewport.screen_delta_to_world(
            dx_screen, dy_screen, self.canvas_width, self.canvas_height
        )
        self.viewport.pan(-dx, -dy)

    def pointer_tap(self, screen_x: float, screen_y: float) -> Optional[CaptureResult]:
        world_x, world_y = self.viewport.screen_to_world(
            screen_x, screen_y, self.canvas_width, self.canvas_height
        )
        if not (0 <= world_x < self.scene_width and 0 <= world_y < self.scene_height):
            return None

        if self.is_photo:
            # Photo mode only aims; the shutter does the capturing
            self.last_tap_world = (world_x, world_y)
            return None

        result = self.controller.resolve_tap(world_x, world_y)
        self._publish(result)
        return result

    async def shutter(self) -> CaptureResult:
        if not self.is_photo:
            return CaptureResult(CaptureOutcome.NO_TARGET)
        result = await self.controller.capture(self.last_tap_world)
        log.info("[Session] shutter -> %s", result.outcome.value)
        self._publish(result)
        return result

    # ------------------------------------------------------------------ #
    #   F R A M E   /   L I F E C Y C L E
    # ------------------------------------------------------------------ #
    def tick(self) -> None:
        if self.param_watcher and self.param_watcher.maybe_reload():
            apply_runtime_params(self.controller, self.param_watcher.params)
            log.info("[Runtime] Parameters updated.")

    def resize(self, canvas_width: int, canvas_height: int) -> None:
        self.controller.cancel_animation()
        self.canvas_width, self.canvas_height = canvas_width, canvas_height
        self.viewport = self._make_viewport()
        self.controller.viewport = self.viewport

    def progress(self) -> List[ObjectiveProgress]:
        return self.tracker.progress()

    @property
    def completed(self) -> bool:
        return self.tracker.completed

    def close(self) -> None:
        if self.controller.cancel_animation():
            log.info("[Session] %s closed mid-animation", self.scene.name)
