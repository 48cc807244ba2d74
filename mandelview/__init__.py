"""Public API for Mandelbrot exploration utilities."""

from .errors import InvalidGeometry, InvalidSettings, MandelviewError
from .mapper import (
    DEFAULT_VIEWPORT,
    CanvasSize,
    Viewport,
    complex_to_pixel,
    pixel_to_complex,
    rectangle_from_selection,
    scale_factor,
    visible_bounds,
)
from .renderer import (
    ESCAPE_EVEN,
    ESCAPE_ODD,
    INTERIOR,
    SKIPPED,
    RenderResult,
    SamplingMetadata,
    classify_pixel,
    classify_point,
    colorize,
    escape_count,
    render_frame,
)
from .selection import CornerPicked, Idle, Selection, SelectionMachine
from .session import ExplorerSession
from .settings import DEFAULT_PALETTE, DEFAULT_SETTINGS, Palette, RenderSettings, parse_hex_color
from .store import JsonFileStore, MemoryStore, SettingsStore, ViewStateStore

__all__ = [
    "CanvasSize",
    "CornerPicked",
    "DEFAULT_PALETTE",
    "DEFAULT_SETTINGS",
    "DEFAULT_VIEWPORT",
    "ESCAPE_EVEN",
    "ESCAPE_ODD",
    "ExplorerSession",
    "INTERIOR",
    "Idle",
    "InvalidGeometry",
    "InvalidSettings",
    "JsonFileStore",
    "MandelviewError",
    "MemoryStore",
    "Palette",
    "RenderResult",
    "RenderSettings",
    "SKIPPED",
    "SamplingMetadata",
    "Selection",
    "SelectionMachine",
    "SettingsStore",
    "ViewStateStore",
    "Viewport",
    "classify_pixel",
    "classify_point",
    "colorize",
    "complex_to_pixel",
    "escape_count",
    "parse_hex_color",
    "pixel_to_complex",
    "rectangle_from_selection",
    "render_frame",
    "scale_factor",
    "visible_bounds",
]
