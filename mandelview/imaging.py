"""Pillow and imageio helpers for turning rasters into files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import imageio
import numpy as np
import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

from .mapper import CanvasSize, Viewport, complex_to_pixel, visible_bounds

SELECTION_COLOR = (255, 0, 0)

_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
)


def raster_to_image(raster: np.ndarray) -> PIL.Image.Image:
    return PIL.Image.fromarray(np.ascontiguousarray(raster, dtype=np.uint8))


def mark_corner(image: PIL.Image.Image, pixel: tuple[int, int], color=SELECTION_COLOR) -> PIL.Image.Image:
    """Color the single pixel picked as the first selection corner."""

    x, y = pixel
    if 0 <= x < image.width and 0 <= y < image.height:
        image.putpixel((x, y), color)
    return image


def draw_selection_outline(
    image: PIL.Image.Image,
    corner1: tuple[int, int],
    corner2: tuple[int, int],
    color=SELECTION_COLOR,
) -> PIL.Image.Image:
    """Draw the rectangle spanned by two selection corners, in either order."""

    (x1, y1), (x2, y2) = corner1, corner2
    draw = PIL.ImageDraw.Draw(image)
    draw.rectangle([(min(x1, x2), min(y1, y2)), (max(x1, x2), max(y1, y2))], outline=color, width=1)
    return image


def _load_annotation_font(image: PIL.Image.Image) -> PIL.ImageFont.ImageFont:
    target_size = max(12, int(round(max(min(image.size), 1) * 0.028)))
    for path in _FONT_CANDIDATES:
        font_path = Path(path)
        if font_path.exists():
            try:
                return PIL.ImageFont.truetype(str(font_path), target_size)
            except OSError:
                continue
    return PIL.ImageFont.load_default()


def annotate_bounds(image: PIL.Image.Image, viewport: Viewport, canvas: CanvasSize) -> PIL.Image.Image:
    """Overlay the complex-plane bounds covered by the canvas and mark the origin."""

    if image.mode != "RGBA":
        image = image.convert("RGBA")

    bounds = visible_bounds(viewport, canvas)
    lines = [
        f"X: [{bounds.x_min:.6g}, {bounds.x_max:.6g}]",
        f"Y: [{bounds.y_min:.6g}, {bounds.y_max:.6g}]",
    ]
    text = "\n".join(lines)

    overlay = PIL.Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = PIL.ImageDraw.Draw(overlay)
    font = _load_annotation_font(image)
    spacing = 4
    left, top, right, bottom = draw.multiline_textbbox((0, 0), text, font=font, spacing=spacing)
    padding = 8
    box_left = box_top = 12
    box = [
        (box_left, box_top),
        (box_left + (right - left) + padding * 2, box_top + (bottom - top) + padding * 2),
    ]
    draw.rectangle(box, fill=(18, 22, 40, 190), outline=(255, 255, 255, 45))
    draw.multiline_text(
        (box_left + padding - left, box_top + padding - top),
        text,
        font=font,
        fill=(240, 244, 255, 255),
        spacing=spacing,
    )

    if viewport.y_max != viewport.y_min:
        origin_x, origin_y = complex_to_pixel(0.0, 0.0, viewport, canvas)
        col, row = int(round(origin_x)), int(round(origin_y))
        if 0 <= col < image.width and 0 <= row < image.height:
            radius = max(3, int(round(min(image.size) * 0.005)))
            draw.ellipse(
                [(col - radius, row - radius), (col + radius, row + radius)],
                fill=(255, 255, 255, 235),
                outline=(0, 0, 0, 180),
            )
    return PIL.Image.alpha_composite(image, overlay)


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    if pil_format == "JPEG" and image.mode != "RGB":
        image = image.convert("RGB")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


class GifWriter:
    """Append frames of a zoom trail to an animated GIF."""

    def __init__(self, path: Path, duration: float = 0.5) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._writer: Optional[Any] = imageio.get_writer(str(path), mode="I", duration=duration, loop=0)
        self.frames = 0

    def append(self, frame: np.ndarray) -> None:
        if self._writer is None:
            raise ValueError(f"GIF writer for {self.path} is closed")
        self._writer.append_data(np.asarray(frame, dtype=np.uint8))
        self.frames += 1

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def __enter__(self) -> "GifWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
