# controller.py
"""Capture state machine: target → visibility/nudge → mask sample → found/miss.

Protocols
---------
* ``TWO_PHASE`` (default): decide on a full re-centring nudge, animate it,
  then run a separate, non-recursive sample-and-resolve step.
* ``DIRECT``: an off-screen target rejects the capture outright.
* ``ASSISTED``: animate a half-step nudge, then re-check visibility once.

Animations are frame-stepped coroutines.  Each one carries a CancelToken so a
scene reload can stop it before it writes to a stale viewport.
"""
from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import replace
from typing import Awaitable, Callable, Optional, Tuple

import numpy as np

from wildlife_photo.aim_assist import AimAssist
from wildlife_photo.common import (
    CaptureArtifact,
    CaptureOutcome,
    CaptureResult,
    LocatableObject,
    NudgeOutcome,
)
from wildlife_photo.config import AimConfig, CaptureConfig, CaptureProtocol
from wildlife_photo.helpers import CancelToken, Cooldown, ease_in_out
from wildlife_photo.objectives import ObjectiveTracker
from wildlife_photo.sampler import MaskSampler
from wildlife_photo.scene import Scene
from wildlife_photo.viewport import Viewport

log = logging.getLogger(__name__)

Point = Tuple[float, float]


class CameraController:
    """Runs one capture attempt end-to-end for a single game session."""

    def __init__(
        self,
        scene: Scene,
        viewport: Viewport,
        mask: np.ndarray,
        background: np.ndarray,
        tracker: Optional[ObjectiveTracker] = None,
        capture_cfg: Optional[CaptureConfig] = None,
        aim_cfg: Optional[AimConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.scene = scene
        self.viewport = viewport
        # Own copy: apply_tuning must not leak into other sessions
        self.cfg = replace(capture_cfg) if capture_cfg is not None else CaptureConfig()
        self.aim = AimAssist((aim_cfg or AimConfig()).tolerance_px)
        self.cooldown = Cooldown(self.cfg.cooldown_s, clock)
        self.sampler = MaskSampler(mask, self.cfg.sample_search_radius_px)
        self.background = np.asarray(background)
        self.tracker = tracker or ObjectiveTracker(scene)

        self._clock = clock
        self._sleep = sleep
        self._active_token: Optional[CancelToken] = None

    # ------------------------------------------------------------------ #
    #   L I V E   T U N I N G
    # ------------------------------------------------------------------ #
    def apply_tuning(
        self,
        aim_tolerance_px: Optional[float] = None,
        cooldown_s: Optional[float] = None,
        nudge_duration_s: Optional[float] = None,
        max_nudge_distance_factor: Optional[float] = None,
        sample_search_radius_px: Optional[int] = None,
    ) -> None:
        if aim_tolerance_px is not None:
            self.aim.tolerance = float(aim_tolerance_px)
        if cooldown_s is not None and cooldown_s >= 0:
            self.cfg.cooldown_s = float(cooldown_s)
            self.cooldown.duration_s = self.cfg.cooldown_s
        if nudge_duration_s is not None and nudge_duration_s >= 0:
            self.cfg.nudge_duration_s = float(nudge_duration_s)
        if max_nudge_distance_factor is not None and max_nudge_distance_factor > 0:
            self.cfg.max_nudge_distance_factor = float(max_nudge_distance_factor)
        if sample_search_radius_px is not None and sample_search_radius_px >= 0:
            self.cfg.sample_search_radius_px = int(sample_search_radius_px)
            self.sampler.search_radius_px = self.cfg.sample_search_radius_px

    @property
    def aim_tolerance(self) -> float:
        return self.aim.tolerance

    # ------------------------------------------------------------------ #
    #   T A R G E T I N G
    # ------------------------------------------------------------------ #
    def select_target(self) -> Optional[LocatableObject]:
        """First not-yet-found object of the active objective (or the scene)."""
        return self.tracker.next_target()

    def _nudge_decision(self, target: LocatableObject) -> Optional[NudgeOutcome]:
        """Outcome that needs no animation, or None when one must run."""
        if not target.has_position:
            return NudgeOutcome.UNPOSITIONED
        ex, ey = self.aim.offset_from_center(self.viewport, target)
        limit = self.cfg.max_nudge_distance_factor * min(self.viewport.width, self.viewport.height)
        if math.hypot(ex, ey) > limit:
            log.info("[Camera] %s too far from centre for a nudge", target.name)
            return NudgeOutcome.SKIPPED_TOO_FAR
        if self.aim.is_centered(self.viewport, target):
            log.debug("[Camera] nudge not needed (already centred within tolerance)")
            return NudgeOutcome.ALREADY_CENTERED
        return None

    async def nudge_to_target(
        self,
        target: LocatableObject,
        duration_s: Optional[float] = None,
        token: Optional[CancelToken] = None,
    ) -> NudgeOutcome:
        """Animate the viewport so ``target`` ends up exactly centred."""
        decision = self._nudge_decision(target)
        if decision is not None:
            return decision

        ex, ey = self.aim.offset_from_center(self.viewport, target)
        duration = self.cfg.nudge_duration_s if duration_s is None else duration_s
        log.debug("[Camera] starting slow nudge (%.1f, %.1f) over %.2fs", ex, ey, duration)
        done = await self._animate_to(self.viewport.x + ex, self.viewport.y + ey, duration, token)
        return NudgeOutcome.NUDGED if done else NudgeOutcome.CANCELLED

    # ------------------------------------------------------------------ #
    #   A N I M A T I O N
    # ------------------------------------------------------------------ #
    @property
    def animating(self) -> bool:
        return self._active_token is not None

    def cancel_animation(self) -> bool:
        if self._active_token is None:
            return False
        self._active_token.cancel()
        return True

    async def _animate_to(
        self,
        end_x: float,
        end_y: float,
        duration_s: float,
        token: Optional[CancelToken] = None,
    ) -> bool:
        """Ease the viewport to (end_x, end_y); False if cancelled midway."""
        token = token or CancelToken()
        self._active_token = token
        vp = self.viewport
        start_x, start_y = vp.x, vp.y
        start = self._clock()
        try:
            while True:
                if token.cancelled:
                    log.info("[Camera] nudge cancelled")
                    return False
                t = 1.0 if duration_s <= 0 else min(1.0, (self._clock() - start) / duration_s)
                ease = ease_in_out(t)
                vp.move_to(start_x + (end_x - start_x) * ease, start_y + (end_y - start_y) * ease)
                if t >= 1.0:
                    log.debug("[Camera] slow nudge complete")
                    return True
                await self._sleep(self.cfg.frame_interval_s)
        finally:
            if self._active_token is token:
                self._active_token = None

    # ------------------------------------------------------------------ #
    #   C A P T U R E
    # ------------------------------------------------------------------ #
    async def capture(self, tap: Optional[Point] = None) -> CaptureResult:
        """Shutter press, using the configured protocol."""
        if self.animating:
            # A nudge may outlast cooldown_s; only one animation owns the viewport
            log.debug("[Camera] nudge in progress")
            return CaptureResult(CaptureOutcome.COOLDOWN)
        if self.cfg.protocol is CaptureProtocol.DIRECT:
            return self.attempt_capture(tap)
        if self.cfg.protocol is CaptureProtocol.ASSISTED:
            return await self._capture_assisted(tap)
        return await self._capture_two_phase(tap)

    def attempt_capture(self, tap: Optional[Point] = None) -> CaptureResult:
        """Immediate capture; an off-screen target is rejected, not nudged."""
        if self.cooldown.is_active():
            log.debug("[Camera] cooldown active")
            return CaptureResult(CaptureOutcome.COOLDOWN)

        target = self.select_target()
        if target is None:
            return CaptureResult(CaptureOutcome.NO_TARGET)

        if not self.aim.is_in_view(self.viewport, target):
            log.info("[Camera] target not in view; nudge required before capture")
            return CaptureResult(CaptureOutcome.NOT_IN_VIEW)

        result = self.sample_and_resolve(tap)
        self.cooldown.rearm()
        return result

    async def _capture_two_phase(self, tap: Optional[Point]) -> CaptureResult:
        if self.cooldown.is_active():
            log.debug("[Camera] cooldown active")
            return CaptureResult(CaptureOutcome.COOLDOWN)

        target = self.select_target()
        if target is None:
            return CaptureResult(CaptureOutcome.NO_TARGET)

        nudge = self._nudge_decision(target)
        if nudge is NudgeOutcome.SKIPPED_TOO_FAR:
            return CaptureResult(CaptureOutcome.SKIPPED_TOO_FAR, nudge=nudge)
        if nudge is NudgeOutcome.UNPOSITIONED:
            return CaptureResult(CaptureOutcome.NOT_IN_VIEW, nudge=nudge)
        if nudge is None:
            # Armed for the whole animation so a second press is rejected
            self.cooldown.rearm()
            nudge = await self.nudge_to_target(target)
            if nudge is NudgeOutcome.CANCELLED:
                return CaptureResult(CaptureOutcome.CANCELLED, nudge=nudge)

        if not self.aim.is_in_view(self.viewport, target):
            return CaptureResult(CaptureOutcome.NOT_IN_VIEW, nudge=nudge)

        result = self.sample_and_resolve(tap, nudge=nudge)
        self.cooldown.rearm()
        return result

    async def _capture_assisted(self, tap: Optional[Point]) -> CaptureResult:
        if self.cooldown.is_active():
            log.debug("[Camera] cooldown active")
            return CaptureResult(CaptureOutcome.COOLDOWN)

        target = self.select_target()
        if target is None:
            return CaptureResult(CaptureOutcome.NO_TARGET)

        nudge: Optional[NudgeOutcome] = None
        if not self.aim.is_in_view(self.viewport, target):
            dx, dy = self.aim.compute_nudge(self.viewport, target)
            if dx == 0.0 and dy == 0.0:
                return CaptureResult(CaptureOutcome.NOT_IN_VIEW)

            self.cooldown.rearm()
            done = await self._animate_to(
                self.viewport.x + dx, self.viewport.y + dy, self.cfg.nudge_duration_s
            )
            if not done:
                return CaptureResult(CaptureOutcome.CANCELLED, nudge=NudgeOutcome.CANCELLED)
            nudge = NudgeOutcome.NUDGED

            # Single retry, no further animation
            if not self.aim.is_in_view(self.viewport, target):
                log.info("[Camera] target still not in view after assisted nudge")
                return CaptureResult(CaptureOutcome.NOT_IN_VIEW, nudge=nudge)

        result = self.sample_and_resolve(tap, nudge=nudge)
        self.cooldown.rearm()
        return result

    def resolve_tap(self, world_x: float, world_y: float) -> CaptureResult:
        """Tap-to-find mode: no shutter, no cooldown, no target gating."""
        if not self.sampler.in_bounds(world_x, world_y):
            return CaptureResult(CaptureOutcome.MISS)
        return self.sample_and_resolve((world_x, world_y))

    # ------------------------------------------------------------------ #
    #   S A M P L E   &   R E S O L V E
    # ------------------------------------------------------------------ #
    def sample_point(self, tap: Optional[Point]) -> Point:
        if tap is not None and self.sampler.in_bounds(*tap):
            return tap
        return self.viewport.center

    def sample_and_resolve(
        self, tap: Optional[Point] = None, nudge: Optional[NudgeOutcome] = None
    ) -> CaptureResult:
        sx, sy = self.sample_point(tap)
        color = self.sampler.sample(sx, sy)
        log.debug("[Camera] sampled %s at (%.1f, %.1f)", color, sx, sy)
        if color is None:
            return CaptureResult(CaptureOutcome.MISS, nudge=nudge)

        obj = self.scene.mark_found_by_color(color)
        if obj is None:
            log.info("[Camera] nothing found for %s", color)
            return CaptureResult(CaptureOutcome.MISS, sampled_color=color, nudge=nudge)

        event = self.tracker.record_find()
        log.info("[Camera] captured %s", obj.name)
        return CaptureResult(
            CaptureOutcome.FOUND,
            artifact=self.cutout(obj),
            sampled_color=color,
            objective_event=event,
            nudge=nudge,
        )

    def cutout(self, obj: LocatableObject) -> CaptureArtifact:
        """Background region around the object, padded and clamped to the image."""
        img_h, img_w = self.background.shape[:2]
        pad = self.cfg.cutout_padding_px
        x = obj.x if obj.x is not None else 0.0
        y = obj.y if obj.y is not None else 0.0
        r = obj.radius if obj.radius is not None else 30

        left = max(0, math.floor(x - r - pad))
        top = max(0, math.floor(y - r - pad))
        w = max(0, min(img_w - left, math.floor(r * 2 + pad * 2)))
        h = max(0, min(img_h - top, math.floor(r * 2 + pad * 2)))
        region = self.background[top:top + h, left:left + w].copy()
        return CaptureArtifact(name=obj.name, cutout=region, bbox=(left, top, w, h))
