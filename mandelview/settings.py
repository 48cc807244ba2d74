"""Iteration limit and three-color palette used by the renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .errors import InvalidSettings

RGB = tuple[int, int, int]

DEFAULT_MAX_ITERATIONS = 300
DEFAULT_COLORS = ("#000000", "#55AA22", "#DD5599")


def parse_hex_color(hex_color: str) -> RGB:
    """Parse ``#RRGGBB`` (leading ``#`` optional) into an RGB triple."""

    if not isinstance(hex_color, str):
        raise InvalidSettings(f"color must be a string, got {hex_color!r}")
    value = hex_color.strip().lstrip("#")
    if len(value) != 6:
        raise InvalidSettings(f"color {hex_color!r} must be in the form #RRGGBB.")
    try:
        return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError as exc:
        raise InvalidSettings(f"color {hex_color!r} must contain only hexadecimal digits.") from exc


def format_hex_color(rgb: RGB) -> str:
    return "#{:02X}{:02X}{:02X}".format(*rgb)


@dataclass(frozen=True)
class Palette:
    """Colors for points that never escape and for odd/even escape counts."""

    interior: RGB
    escape_odd: RGB
    escape_even: RGB

    @classmethod
    def from_hex(cls, colors: Sequence[str]) -> "Palette":
        """Build a palette from ``[interior, escape_odd, escape_even]`` hex strings."""

        if isinstance(colors, str) or len(colors) != 3:
            raise InvalidSettings(f"palette needs exactly three colors, got {colors!r}")
        interior, odd, even = (parse_hex_color(color) for color in colors)
        return cls(interior=interior, escape_odd=odd, escape_even=even)

    def to_hex(self) -> tuple[str, str, str]:
        return (
            format_hex_color(self.interior),
            format_hex_color(self.escape_odd),
            format_hex_color(self.escape_even),
        )

    def as_list(self) -> list[RGB]:
        return [self.interior, self.escape_odd, self.escape_even]


DEFAULT_PALETTE = Palette.from_hex(DEFAULT_COLORS)


@dataclass(frozen=True)
class RenderSettings:
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    palette: Palette = field(default_factory=lambda: DEFAULT_PALETTE)

    def validate(self) -> "RenderSettings":
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int):
            raise InvalidSettings(f"iteration limit must be an integer, got {self.max_iterations!r}")
        if self.max_iterations <= 0:
            raise InvalidSettings(f"iteration limit must be positive, got {self.max_iterations}")
        for name in ("interior", "escape_odd", "escape_even"):
            rgb = getattr(self.palette, name)
            if len(rgb) != 3 or any(not 0 <= channel <= 255 for channel in rgb):
                raise InvalidSettings(f"palette color {name} is not an RGB triple: {rgb!r}")
        return self


DEFAULT_SETTINGS = RenderSettings()


def settings_from_values(max_iterations, colors: Sequence[str]) -> RenderSettings:
    """Validate raw values, e.g. from a form or a store, into ``RenderSettings``."""

    try:
        limit = int(max_iterations)
    except (TypeError, ValueError) as exc:
        raise InvalidSettings(f"iteration limit {max_iterations!r} is not an integer") from exc
    return RenderSettings(max_iterations=limit, palette=Palette.from_hex(colors)).validate()
