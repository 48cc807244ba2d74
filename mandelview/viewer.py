"""Interactive matplotlib window for zooming by two-click selection."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.image import AxesImage
from matplotlib.lines import Line2D
from matplotlib.patches import Rectangle
from matplotlib.text import Text

from .imaging import raster_to_image, write_single_image
from .selection import CornerPicked
from .session import ExplorerSession

SELECTION_COLOR = "#FF0000"

HELP_TEXT = "click twice: zoom to rectangle | r: reset | s: save | q: quit"


class ExplorerViewer:
    """Shows the session raster and turns mouse clicks into zoom selections.

    The axes use pixel coordinates, so ``event.xdata``/``event.ydata`` are
    canvas pixels with row 0 at the top.
    """

    def __init__(self, session: ExplorerSession, *, save_dir: Optional[Path] = None) -> None:
        self.session = session
        self.save_dir = Path(save_dir) if save_dir is not None else Path.cwd()
        self.save_counter = 0

        self.fig: Optional[plt.Figure] = None
        self.ax: Optional[plt.Axes] = None
        self.im: Optional[AxesImage] = None
        self.status_text: Optional[Text] = None
        self.corner_marker: Optional[Line2D] = None
        self.outline: Optional[Rectangle] = None

        self._setup_plot()
        self.session.on_status = self._show_status
        self.refresh()

    def _setup_plot(self) -> None:
        canvas = self.session.canvas
        dpi = 100
        self.fig, self.ax = plt.subplots(figsize=(max(canvas.width, 1) / dpi, canvas.height / dpi + 0.6), dpi=dpi)
        if self.fig.canvas.manager:
            self.fig.canvas.manager.set_window_title("Mandelbrot explorer")

        self.im = self.ax.imshow(
            np.zeros((canvas.height, max(canvas.width, 1), 3), dtype=np.uint8),
            origin="upper",
            interpolation="nearest",
        )
        self.ax.set_axis_off()

        (self.corner_marker,) = self.ax.plot([], [], marker="s", markersize=2, color=SELECTION_COLOR, linestyle="none")
        self.outline = Rectangle((0, 0), 0, 0, fill=False, edgecolor=SELECTION_COLOR, linewidth=1, visible=False)
        self.ax.add_patch(self.outline)

        self.status_text = self.fig.text(0.01, 0.01, "", fontsize=9, transform=self.fig.transFigure)
        self.fig.text(0.99, 0.01, HELP_TEXT, fontsize=8, ha="right", transform=self.fig.transFigure)

        self.fig.canvas.mpl_connect("button_press_event", self._on_press)
        self.fig.canvas.mpl_connect("motion_notify_event", self._on_motion)
        self.fig.canvas.mpl_connect("key_press_event", self._on_key)

        self.fig.subplots_adjust(left=0, right=1, top=1, bottom=0.6 / (canvas.height / dpi + 0.6))

    def _show_status(self, status: str) -> None:
        if self.status_text is not None:
            self.status_text.set_text(status)
            self.fig.canvas.draw_idle()
            self.fig.canvas.flush_events()

    def _clear_selection_echo(self) -> None:
        self.corner_marker.set_data([], [])
        self.outline.set_visible(False)

    def _set_outline(self, corner1: tuple[int, int], corner2: tuple[int, int]) -> None:
        (x1, y1), (x2, y2) = corner1, corner2
        self.outline.set_xy((min(x1, x2), min(y1, y2)))
        self.outline.set_width(abs(x2 - x1))
        self.outline.set_height(abs(y2 - y1))
        self.outline.set_visible(True)

    def refresh(self) -> None:
        raster = self.session.render()
        self._clear_selection_echo()
        self.im.set_data(raster)
        self.fig.canvas.draw_idle()

    def _event_pixel(self, event) -> Optional[tuple[int, int]]:
        if event.inaxes != self.ax or event.xdata is None or event.ydata is None:
            return None
        # imshow centers pixel i on coordinate i
        return int(round(event.xdata)), int(round(event.ydata))

    def _on_press(self, event) -> None:
        if event.button != 1:
            return
        pixel = self._event_pixel(event)
        if pixel is None:
            return

        selection = self.session.click(*pixel)
        state = self.session.selection_state
        if isinstance(state, CornerPicked):
            self.corner_marker.set_data([pixel[0]], [pixel[1]])
            self.fig.canvas.draw_idle()
            return
        if selection is None:
            self._clear_selection_echo()
            self.fig.canvas.draw_idle()
            return

        self._set_outline(selection.corner1, selection.corner2)
        self.fig.canvas.draw_idle()
        self.fig.canvas.flush_events()
        self.refresh()

    def _on_motion(self, event) -> None:
        corner = self.session.selection.pending_corner
        if corner is None:
            return
        pixel = self._event_pixel(event)
        if pixel is None:
            return
        self._set_outline(corner, pixel)
        self.fig.canvas.draw_idle()

    def _on_key(self, event) -> None:
        if event.key == "r":
            self.session.reset()
            self._clear_selection_echo()
            self.im.set_data(self.session.last_raster)
            self.fig.canvas.draw_idle()
        elif event.key == "s":
            self.save()
        elif event.key == "q":
            plt.close(self.fig)

    def save(self) -> Path:
        self.save_counter += 1
        path = self.save_dir / f"mandelbrot_{self.save_counter:03d}.png"
        write_single_image(raster_to_image(self.session.last_raster), path, "png")
        self._show_status(f"Saved {path}")
        return path

    def show(self) -> None:
        plt.show()
