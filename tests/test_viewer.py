from types import SimpleNamespace

import matplotlib.pyplot as plt
import pytest

from mandelview import DEFAULT_VIEWPORT, CanvasSize, CornerPicked, ExplorerSession, Idle, MemoryStore, SettingsStore
from mandelview.viewer import ExplorerViewer


@pytest.fixture
def viewer(tmp_path):
    settings = MemoryStore({"iterations": "15", "color_interior": "#000000",
                            "color_escape_odd": "#55AA22", "color_escape_even": "#DD5599"})
    session = ExplorerSession(CanvasSize(32, 24), settings_store=SettingsStore(settings))
    view = ExplorerViewer(session, save_dir=tmp_path)
    yield view
    plt.close(view.fig)


def _click(viewer, x, y, button=1):
    return SimpleNamespace(inaxes=viewer.ax, xdata=x, ydata=y, button=button, key=None)


def test_initial_render_is_shown(viewer):
    assert viewer.session.last_raster is not None
    assert viewer.im.get_array().shape == (24, 32, 3)
    assert viewer.status_text.get_text() == "Done"


def test_first_click_marks_corner(viewer):
    viewer._on_press(_click(viewer, 4.2, 5.6))
    assert viewer.session.selection_state == CornerPicked((4, 6))
    xs, ys = viewer.corner_marker.get_data()
    assert list(xs) == [4] and list(ys) == [6]


def test_motion_echoes_running_outline(viewer):
    viewer._on_motion(_click(viewer, 10, 10))
    assert not viewer.outline.get_visible()
    viewer._on_press(_click(viewer, 4, 6))
    viewer._on_motion(_click(viewer, 10, 2))
    assert viewer.outline.get_visible()
    assert viewer.outline.get_xy() == (4, 2)
    assert viewer.outline.get_width() == 6
    assert viewer.outline.get_height() == 4


def test_second_click_zooms(viewer):
    viewer._on_press(_click(viewer, 4, 6))
    viewer._on_press(_click(viewer, 20, 18))
    assert viewer.session.selection_state == Idle()
    assert viewer.session.viewport != DEFAULT_VIEWPORT
    assert not viewer.outline.get_visible()


def test_clicks_outside_axes_and_other_buttons_are_ignored(viewer):
    viewer._on_press(SimpleNamespace(inaxes=None, xdata=None, ydata=None, button=1))
    viewer._on_press(_click(viewer, 4, 6, button=3))
    assert viewer.session.selection_state == Idle()


def test_reset_key(viewer):
    viewer._on_press(_click(viewer, 4, 6))
    viewer._on_press(_click(viewer, 20, 18))
    viewer._on_key(SimpleNamespace(key="r"))
    assert viewer.session.viewport == DEFAULT_VIEWPORT


def test_save_key_writes_png(viewer, tmp_path):
    viewer._on_key(SimpleNamespace(key="s"))
    assert (tmp_path / "mandelbrot_001.png").exists()
