"""Application shell tying viewport, settings, selection and persistence together."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np

from .mapper import DEFAULT_VIEWPORT, CanvasSize, Viewport, check_canvas
from .renderer import BACKGROUND, RenderResult, colorize, render_frame
from .selection import Selection, SelectionMachine, SelectionState
from .settings import DEFAULT_SETTINGS, RGB, RenderSettings
from .store import MemoryStore, SettingsStore, ViewStateStore

STATUS_IDLE = "Idle"
STATUS_RENDERING = "Rendering Mandelbrot..."
STATUS_DONE = "Done"


class ExplorerSession:
    """Owns the state of one interactive exploration.

    Status changes are reported through ``on_status`` before and after each
    render so a front end can show progress; ``on_log`` receives debug lines.
    """

    def __init__(
        self,
        canvas: CanvasSize,
        *,
        view_store: Optional[ViewStateStore] = None,
        settings_store: Optional[SettingsStore] = None,
        device: Optional[str] = None,
        background: RGB = BACKGROUND,
        on_status: Optional[Callable[[str], None]] = None,
        on_log: Optional[Callable[[str], None]] = None,
    ) -> None:
        check_canvas(canvas)
        self.canvas = canvas
        self.view_store = view_store if view_store is not None else ViewStateStore(MemoryStore())
        self.settings_store = settings_store if settings_store is not None else SettingsStore(MemoryStore())
        self.device = device
        self.background = background
        self.on_status = on_status
        self.on_log = on_log

        self.selection = SelectionMachine()
        self.settings = self.settings_store.load()
        self.viewport = self.view_store.load() or DEFAULT_VIEWPORT
        self.status = STATUS_IDLE
        self.last_result: Optional[RenderResult] = None
        self.last_raster: Optional[np.ndarray] = None
        self.history: list[Viewport] = [self.viewport]

        self.view_store.save(self.viewport)

    @property
    def selection_state(self) -> SelectionState:
        return self.selection.state

    def _set_status(self, status: str) -> None:
        self.status = status
        if self.on_status is not None:
            self.on_status(status)

    def _log(self, message: str) -> None:
        if self.on_log is not None:
            self.on_log(message)

    def render(self) -> np.ndarray:
        """Render the current viewport with the current settings into an RGB raster."""

        self._set_status(STATUS_RENDERING)
        result = render_frame(self.viewport, self.canvas, self.settings, device=self.device)
        self.last_result = result
        self.last_raster = colorize(result, self.settings.palette, self.background)
        vp = self.viewport
        self._log(f"Rendered x1: {vp.x_min!r} y1: {vp.y_min!r} x2: {vp.x_max!r} y2: {vp.y_max!r}")
        self._set_status(STATUS_DONE)
        return self.last_raster

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport
        self.history.append(viewport)
        self.view_store.save(viewport)

    def click(self, px: int, py: int) -> Optional[Selection]:
        """Handle one canvas click; the second click of a pair zooms in.

        Returns the completed selection, or ``None`` while waiting for the
        second corner or when the selection had no height.
        """

        selection = self.selection.click((px, py), self.viewport, self.canvas)
        if selection is None:
            return None
        if selection.is_degenerate:
            self._log(f"Ignoring selection without height: {selection.corner1} -> {selection.corner2}")
            return None
        self.set_viewport(selection.viewport)
        return selection

    def reset(self) -> np.ndarray:
        """Return to the default viewport, drop any pending corner and re-render."""

        self.selection.cancel()
        self.set_viewport(DEFAULT_VIEWPORT)
        return self.render()

    def update_settings(self, settings: RenderSettings) -> None:
        self.settings = settings.validate()
        self.settings_store.save(self.settings)

    def reset_settings(self) -> None:
        self.update_settings(DEFAULT_SETTINGS)
