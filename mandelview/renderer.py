"""Escape-time rendering of the Mandelbrot set."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .mapper import CanvasSize, Viewport, check_canvas, pixel_to_complex, scale_factor
from .settings import RGB, Palette, RenderSettings

HORIZON = 2.0

SKIPPED = -1
INTERIOR = 0
ESCAPE_ODD = 1
ESCAPE_EVEN = 2

BACKGROUND = (255, 255, 255)


@dataclass(frozen=True)
class SamplingMetadata:
    """Origin and per-pixel step of the sampling grid for a rendered frame."""

    x_min: float
    y_min: float
    step: float
    width: int
    height: int


@dataclass(frozen=True)
class RenderResult:
    """Numerical results of a render.

    ``iterations`` holds the iteration at which a pixel escaped, 0 for pixels
    that did not escape or were not computed. ``classes`` holds one of
    ``SKIPPED``, ``INTERIOR``, ``ESCAPE_ODD`` or ``ESCAPE_EVEN``.
    """

    iterations: np.ndarray
    classes: np.ndarray
    computed: np.ndarray
    metadata: SamplingMetadata
    max_iterations: int


def escape_count(cx: float, cy: float, max_iterations: int) -> int:
    """Return the iteration at which ``z -> z**2 + c`` leaves radius 2, or 0."""

    xz = 0.0
    yz = 0.0
    iteration = 1
    while iteration <= max_iterations and math.sqrt(xz * xz + yz * yz) < HORIZON:
        xxz = xz * xz - yz * yz + cx
        yz = 2 * xz * yz + cy
        xz = xxz
        if math.sqrt(xz * xz + yz * yz) > HORIZON:
            return iteration
        iteration += 1
    # |z| landing exactly on 2 ends the loop without escaping. Such points are
    # reported as interior here, where the browser version left them unpainted.
    return 0


def classify_count(count: int) -> int:
    if count == 0:
        return INTERIOR
    return ESCAPE_EVEN if count % 2 == 0 else ESCAPE_ODD


def classify_point(cx: float, cy: float, max_iterations: int) -> int:
    return classify_count(escape_count(cx, cy, max_iterations))


def classify_pixel(px: int, py: int, viewport: Viewport, canvas: CanvasSize, max_iterations: int) -> int:
    """Classify one pixel the way ``render_frame`` does, without TensorFlow."""

    check_canvas(canvas)
    if not (1 <= px < canvas.width and 1 <= py < canvas.height):
        return SKIPPED
    cx, cy = pixel_to_complex(px, py, viewport, canvas)
    return classify_point(cx, cy, max_iterations)


@tf.function
def _escape_step(
    xz: tf.Tensor,
    yz: tf.Tensor,
    xc: tf.Tensor,
    yc: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    iteration: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every active point by one iteration and record new escapes."""

    xxz = xz * xz - yz * yz + xc
    yyz = 2.0 * xz * yz + yc
    xz = tf.where(active, xxz, xz)
    yz = tf.where(active, yyz, yz)
    modulus = tf.sqrt(xz * xz + yz * yz)
    horizon = tf.cast(HORIZON, modulus.dtype)
    escaped = tf.logical_and(active, modulus > horizon)
    ns = tf.where(escaped, tf.fill(tf.shape(ns), iteration), ns)
    active = tf.logical_and(active, modulus < horizon)
    return xz, yz, ns, active


@tf.function
def _escape_run(
    xc: tf.Tensor,
    yc: tf.Tensor,
    active: tf.Tensor,
    max_iterations: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate the escape-time recurrence using a TensorFlow while loop."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(1, dtype=tf.int32)
    xz = tf.zeros_like(xc)
    yz = tf.zeros_like(yc)
    ns = tf.zeros(tf.shape(xc), tf.int32)

    def cond(i, xz, yz, ns, active):
        return tf.logical_and(tf.less_equal(i, max_iterations), tf.reduce_any(active))

    def body(i, xz, yz, ns, active):
        xz, yz, ns, active = _escape_step(xz, yz, xc, yc, ns, active, i)
        return i + 1, xz, yz, ns, active

    return tf.while_loop(cond, body, (i, xz, yz, ns, active))


def compute_metadata(viewport: Viewport, canvas: CanvasSize) -> SamplingMetadata:
    check_canvas(canvas)
    return SamplingMetadata(
        x_min=float(viewport.x_min),
        y_min=float(viewport.y_min),
        step=scale_factor(viewport, canvas),
        width=int(canvas.width),
        height=int(canvas.height),
    )


def render_frame(
    viewport: Viewport,
    canvas: CanvasSize,
    settings: RenderSettings,
    *,
    device: Optional[str] = None,
) -> RenderResult:
    """Classify every pixel of ``canvas`` for ``viewport``.

    Row 0 and column 0 are never iterated and come back as ``SKIPPED``.
    """

    settings.validate()
    metadata = compute_metadata(viewport, canvas)
    width, height = metadata.width, metadata.height

    step = np.float64(metadata.step)
    x = np.float64(metadata.x_min) + np.arange(width, dtype=np.float64) * step
    y = np.float64(metadata.y_min) + np.arange(height, dtype=np.float64) * step

    computed = np.zeros((height, width), dtype=bool)
    computed[1:, 1:] = True

    if not computed.any():
        return RenderResult(
            iterations=np.zeros((height, width), dtype=np.int32),
            classes=np.full((height, width), SKIPPED, dtype=np.int8),
            computed=computed,
            metadata=metadata,
            max_iterations=settings.max_iterations,
        )

    max_iterations = tf.constant(settings.max_iterations, dtype=tf.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        x_tf = tf.convert_to_tensor(x, dtype=tf.float64)
        y_tf = tf.convert_to_tensor(y, dtype=tf.float64)
        XC, YC = tf.meshgrid(x_tf, y_tf)
        active = tf.convert_to_tensor(computed)

        _, _, _, ns, _ = _escape_run(XC, YC, active, max_iterations)

    iterations = ns.numpy()
    classes = np.where(iterations % 2 == 0, ESCAPE_EVEN, ESCAPE_ODD).astype(np.int8)
    classes[iterations == 0] = INTERIOR
    classes[~computed] = SKIPPED

    return RenderResult(
        iterations=iterations,
        classes=classes,
        computed=computed,
        metadata=metadata,
        max_iterations=settings.max_iterations,
    )


def colorize(result: RenderResult, palette: Palette, background: RGB = BACKGROUND) -> np.ndarray:
    """Turn the class grid of ``result`` into an ``(height, width, 3)`` uint8 raster."""

    lookup = np.array([*palette.as_list(), background], dtype=np.uint8)
    # SKIPPED (-1) indexes the background row at the end of the table
    return lookup[result.classes.astype(np.intp)]
