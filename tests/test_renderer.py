import numpy as np
import pytest

from mandelview import (
    DEFAULT_PALETTE,
    ESCAPE_EVEN,
    ESCAPE_ODD,
    INTERIOR,
    SKIPPED,
    CanvasSize,
    InvalidGeometry,
    InvalidSettings,
    RenderSettings,
    Viewport,
    classify_pixel,
    classify_point,
    colorize,
    escape_count,
    pixel_to_complex,
    render_frame,
)


@pytest.mark.parametrize("limit", [1, 2, 10, 300])
def test_origin_never_escapes(limit):
    assert escape_count(0.0, 0.0, limit) == 0
    assert classify_point(0.0, 0.0, limit) == INTERIOR


def test_far_point_escapes_on_first_iteration():
    assert escape_count(2.0, 2.0, 300) == 1
    assert classify_point(2.0, 2.0, 300) == ESCAPE_ODD


def test_even_escape_count():
    # 0.6, 0.96, 1.5216, 2.915...
    assert escape_count(0.6, 0.0, 300) == 4
    assert classify_point(0.6, 0.0, 300) == ESCAPE_EVEN


def test_odd_escape_count():
    # 0.5, 0.75, 1.0625, 1.6289..., 3.153...
    assert escape_count(0.5, 0.0, 300) == 5
    assert classify_point(0.5, 0.0, 300) == ESCAPE_ODD


def test_modulus_landing_exactly_on_horizon_does_not_escape():
    # c = 1: z runs 1, 2 and stops at |z| == 2 without exceeding it
    assert escape_count(1.0, 0.0, 300) == 0
    assert classify_point(1.0, 0.0, 300) == INTERIOR


def test_escape_beyond_limit_is_interior():
    assert escape_count(0.5, 0.0, 4) == 0
    assert escape_count(0.5, 0.0, 5) == 5


def test_zero_iteration_budget_is_interior():
    assert escape_count(2.0, 2.0, 0) == 0


def test_first_row_and_column_are_not_iterated(viewport, canvas, fast_settings):
    result = render_frame(viewport, canvas, fast_settings)
    assert result.classes.shape == (100, 100)
    assert (result.classes[0, :] == SKIPPED).all()
    assert (result.classes[:, 0] == SKIPPED).all()
    assert not result.computed[0, :].any()
    assert not result.computed[:, 0].any()
    assert (result.iterations[0, :] == 0).all()
    assert (result.classes[1:, 1:] != SKIPPED).all()
    assert classify_pixel(0, 5, viewport, canvas, 40) == SKIPPED
    assert classify_pixel(5, 0, viewport, canvas, 40) == SKIPPED


def test_default_view_center_and_corner(viewport, canvas):
    result = render_frame(viewport, canvas, RenderSettings(max_iterations=300))
    cx, cy = pixel_to_complex(50, 50, viewport, canvas)
    assert cx == pytest.approx(-0.75)
    assert cy == pytest.approx(0.0)
    assert result.classes[50, 50] == INTERIOR

    assert result.classes[1, 1] in (ESCAPE_ODD, ESCAPE_EVEN)
    assert 1 <= result.iterations[1, 1] <= 3


def test_raster_matches_scalar_reference(fast_settings):
    vp = Viewport(-1.6, -0.9, 0.4, 0.9)
    size = CanvasSize(24, 16)
    result = render_frame(vp, size, fast_settings)
    for py in range(size.height):
        for px in range(size.width):
            expected = classify_pixel(px, py, vp, size, fast_settings.max_iterations)
            assert result.classes[py, px] == expected, (px, py)
            if expected != SKIPPED:
                cx, cy = pixel_to_complex(px, py, vp, size)
                assert result.iterations[py, px] == escape_count(cx, cy, fast_settings.max_iterations)


def test_rendering_is_repeatable(viewport, canvas, fast_settings):
    first = render_frame(viewport, canvas, fast_settings)
    second = render_frame(viewport, canvas, fast_settings)
    assert np.array_equal(first.classes, second.classes)
    assert np.array_equal(first.iterations, second.iterations)
    assert np.array_equal(
        colorize(first, DEFAULT_PALETTE),
        colorize(second, DEFAULT_PALETTE),
    )


def test_metadata_describes_grid(viewport, canvas, fast_settings):
    result = render_frame(viewport, canvas, fast_settings)
    assert result.metadata.x_min == -2.0
    assert result.metadata.y_min == -1.25
    assert result.metadata.step == pytest.approx(0.025)
    assert (result.metadata.width, result.metadata.height) == (100, 100)
    assert result.max_iterations == 40


def test_tiny_canvas_is_all_skipped(viewport, fast_settings):
    result = render_frame(viewport, CanvasSize(1, 1), fast_settings)
    assert result.classes.tolist() == [[SKIPPED]]


def test_zero_height_canvas_is_rejected(viewport, fast_settings):
    with pytest.raises(InvalidGeometry):
        render_frame(viewport, CanvasSize(10, 0), fast_settings)


def test_non_positive_iteration_limit_is_rejected(viewport, canvas):
    with pytest.raises(InvalidSettings):
        render_frame(viewport, canvas, RenderSettings(max_iterations=0))


def test_colorize_uses_palette_and_background(viewport, canvas):
    result = render_frame(viewport, canvas, RenderSettings(max_iterations=300))
    raster = colorize(result, DEFAULT_PALETTE, background=(1, 2, 3))
    assert raster.shape == (100, 100, 3)
    assert raster.dtype == np.uint8
    assert tuple(raster[0, 0]) == (1, 2, 3)
    assert tuple(raster[50, 50]) == DEFAULT_PALETTE.interior
    expected = DEFAULT_PALETTE.escape_odd if result.classes[1, 1] == ESCAPE_ODD else DEFAULT_PALETTE.escape_even
    assert tuple(raster[1, 1]) == expected
