"""Mapping between canvas pixels and the complex plane."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import InvalidGeometry


@dataclass(frozen=True)
class Viewport:
    """Rectangle of the complex plane spanned by two corner points.

    ``(x_min, y_min)`` is the corner mapped onto pixel ``(0, 0)``. The second
    corner only contributes its height to the scale factor.
    """

    x_min: float
    y_min: float
    x_max: float
    y_max: float

    def is_ordered(self) -> bool:
        return self.x_max > self.x_min and self.y_max > self.y_min

    def normalized(self) -> "Viewport":
        return Viewport(
            x_min=min(self.x_min, self.x_max),
            y_min=min(self.y_min, self.y_max),
            x_max=max(self.x_min, self.x_max),
            y_max=max(self.y_min, self.y_max),
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x_min, self.y_min, self.x_max, self.y_max)


DEFAULT_VIEWPORT = Viewport(x_min=-2.0, y_min=-1.25, x_max=0.5, y_max=1.25)


@dataclass(frozen=True)
class CanvasSize:
    width: int
    height: int


def check_canvas(canvas: CanvasSize) -> None:
    if canvas.height <= 0:
        raise InvalidGeometry(f"canvas height must be positive, got {canvas.height}")
    if canvas.width < 0:
        raise InvalidGeometry(f"canvas width must not be negative, got {canvas.width}")


def scale_factor(viewport: Viewport, canvas: CanvasSize) -> float:
    """Complex-plane distance covered by one pixel, derived from the height only."""

    check_canvas(canvas)
    return float(np.abs(np.float64(viewport.y_max) - np.float64(viewport.y_min)) / np.float64(canvas.height))


def pixel_to_complex(px: float, py: float, viewport: Viewport, canvas: CanvasSize) -> tuple[float, float]:
    f = np.float64(scale_factor(viewport, canvas))
    cx = np.float64(viewport.x_min) + np.float64(px) * f
    cy = np.float64(viewport.y_min) + np.float64(py) * f
    return float(cx), float(cy)


def complex_to_pixel(cx: float, cy: float, viewport: Viewport, canvas: CanvasSize) -> tuple[float, float]:
    f = np.float64(scale_factor(viewport, canvas))
    if f == 0.0:
        raise InvalidGeometry("viewport has zero height; pixel positions are undefined")
    px = (np.float64(cx) - np.float64(viewport.x_min)) / f
    py = (np.float64(cy) - np.float64(viewport.y_min)) / f
    return float(px), float(py)


def rectangle_from_selection(
    corner1: tuple[float, float],
    corner2: tuple[float, float],
    viewport: Viewport,
    canvas: CanvasSize,
) -> Viewport:
    """Map two selected pixel corners through ``viewport`` into the next viewport.

    Corners are kept in selection order; no axis is swapped.
    """

    x1, y1 = pixel_to_complex(corner1[0], corner1[1], viewport, canvas)
    x2, y2 = pixel_to_complex(corner2[0], corner2[1], viewport, canvas)
    return Viewport(x_min=x1, y_min=y1, x_max=x2, y_max=y2)


def visible_bounds(viewport: Viewport, canvas: CanvasSize) -> Viewport:
    """The rectangle the canvas actually covers at the current scale."""

    x_far, y_far = pixel_to_complex(canvas.width, canvas.height, viewport, canvas)
    return Viewport(x_min=viewport.x_min, y_min=viewport.y_min, x_max=x_far, y_max=y_far)
