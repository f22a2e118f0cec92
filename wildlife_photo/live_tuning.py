# live_tuning.py
"""Hot-reloadable gameplay parameters (aim tolerance, cooldown, nudge timing)."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Tuple

if TYPE_CHECKING:
    from wildlife_photo.controller import CameraController

log = logging.getLogger(__name__)

TUNABLE_KEYS = (
    "aim_tolerance_px",
    "cooldown_s",
    "nudge_duration_s",
    "max_nudge_distance_factor",
    "sample_search_radius_px",
)


class RuntimeParamWatcher:
    """Watch a JSON file and reload its contents when it changes."""

    def __init__(self, path: str | Path = "runtime_params.json") -> None:
        self.path = Path(path).expanduser().resolve()
        self._stamp: Tuple[float, int] = (0.0, -1)  # (mtime, size)
        self.params: Dict[str, Any] = {}

        log.info("[Runtime] Watching: %s", self.path)
        self._load(initial=True)

    # ------------------------------------------------------------------
    #   Internal helpers
    # ------------------------------------------------------------------
    def _load(self, *, initial: bool = False) -> None:
        try:
            stat = self.path.stat()
            self._stamp = (stat.st_mtime, stat.st_size)
            with self.path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
        except FileNotFoundError:
            if initial:
                log.info("[Runtime] %s not found – live-tuning disabled.", self.path)
            else:
                log.warning("[Runtime] %s was deleted – keeping old params.", self.path)
            return
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("[Runtime] Failed to load %s: %s", self.path, exc)
            return

        if not isinstance(data, dict):
            log.warning("[Runtime] %s must hold a JSON object – ignored.", self.path)
            return
        self.params = data
        if not initial:
            log.info("[Runtime] Reloaded parameters from %s", self.path)

    # ------------------------------------------------------------------
    #   Public API
    # ------------------------------------------------------------------
    def maybe_reload(self) -> bool:
        """
        If the watched file changed since the last call reload it and
        return **True**, else return **False**.
        """
        try:
            stat = self.path.stat()
        except FileNotFoundError:
            return False

        mtime, fsize = self._stamp
        # Coarse filesystem timestamps: any size change or a >=1 s newer mtime
        if stat.st_size != fsize or stat.st_mtime - mtime >= 1.0:
            self._load()
            return True
        return False

    def get(self, key: str, default: Any | None = None) -> Any:
        return self.params.get(key, default)


def apply_runtime_params(controller: "CameraController", params: Mapping[str, Any]) -> None:
    """Push the known keys of ``params`` into a running controller."""
    values = {}
    for key in TUNABLE_KEYS:
        if key not in params:
            continue
        try:
            values[key] = float(params[key])
        except (TypeError, ValueError):
            log.warning("[Runtime] Ignoring non-numeric %s=%r", key, params[key])
    if "sample_search_radius_px" in values:
        values["sample_search_radius_px"] = int(values["sample_search_radius_px"])
    controller.apply_tuning(**values)
