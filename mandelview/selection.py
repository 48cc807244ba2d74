"""Two-click rectangle selection driving the zoom."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .mapper import CanvasSize, Viewport, rectangle_from_selection

Pixel = tuple[int, int]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class CornerPicked:
    pixel: Pixel


SelectionState = Union[Idle, CornerPicked]


@dataclass(frozen=True)
class Selection:
    """A completed selection: both pixel corners and the viewport they produce."""

    corner1: Pixel
    corner2: Pixel
    viewport: Viewport

    @property
    def is_degenerate(self) -> bool:
        return self.viewport.y_max == self.viewport.y_min


@dataclass
class SelectionMachine:
    """Track the ``Idle -> CornerPicked -> Idle`` cycle of a zoom selection."""

    state: SelectionState = field(default_factory=Idle)

    def click(self, pixel: Pixel, viewport: Viewport, canvas: CanvasSize) -> Optional[Selection]:
        """Feed one click; return the completed ``Selection`` on the second one."""

        pixel = (int(pixel[0]), int(pixel[1]))
        if isinstance(self.state, Idle):
            self.state = CornerPicked(pixel)
            return None

        corner1 = self.state.pixel
        self.state = Idle()
        new_viewport = rectangle_from_selection(corner1, pixel, viewport, canvas)
        return Selection(corner1=corner1, corner2=pixel, viewport=new_viewport)

    def cancel(self) -> None:
        self.state = Idle()

    @property
    def pending_corner(self) -> Optional[Pixel]:
        if isinstance(self.state, CornerPicked):
            return self.state.pixel
        return None

    def outline(self, pointer: Pixel) -> Optional[tuple[Pixel, Pixel]]:
        """Corners of the running outline between the picked corner and ``pointer``."""

        corner = self.pending_corner
        if corner is None:
            return None
        return corner, (int(pointer[0]), int(pointer[1]))
