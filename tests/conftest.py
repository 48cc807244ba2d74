import os

os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")
os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib

matplotlib.use("Agg")

import pytest

from mandelview import DEFAULT_VIEWPORT, CanvasSize, RenderSettings


@pytest.fixture
def canvas():
    return CanvasSize(100, 100)


@pytest.fixture
def viewport():
    return DEFAULT_VIEWPORT


@pytest.fixture
def fast_settings():
    return RenderSettings(max_iterations=40)
