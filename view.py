import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from argparse import ArgumentParser

from mandelview import (
    DEFAULT_PALETTE,
    DEFAULT_VIEWPORT,
    CanvasSize,
    ExplorerSession,
    InvalidSettings,
    JsonFileStore,
    MemoryStore,
    Palette,
    RenderSettings,
    Selection,
    SettingsStore,
    ViewStateStore,
)
from mandelview.imaging import (
    GifWriter,
    annotate_bounds,
    draw_selection_outline,
    mark_corner,
    raster_to_image,
    write_single_image,
)
from mandelview.viewer import ExplorerViewer

DEFAULT_STATE_FILE = "~/.mandelview.json"


def select_device() -> str:
    """Use the first GPU when TensorFlow sees one, the CPU otherwise."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


@dataclass
class OutputConfig:
    mode: str
    image_path: Path | None
    gif_path: Path | None
    image_format: str
    state_path: Path | None


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set and zoom by selecting rectangles.')

    parser.add_argument('--mode', dest='mode', choices=['interactive', 'image', 'gif'], default='interactive',
                        help='interactive window, a single image, or a GIF of the zoom trail. Default: interactive.')

    parser.add_argument('--width', type=int,
                        dest='width', help='canvas width in pixels',
                        metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int,
                        dest='height', help='canvas height in pixels',
                        metavar='HEIGHT', default=600)

    parser.add_argument('--iterations', type=int,
                        dest='iterations', help='iteration limit; stored for later runs',
                        metavar='ITERATIONS', default=None)

    parser.add_argument('--colors', nargs=3, dest='colors',
                        metavar=('INTERIOR', 'ODD', 'EVEN'),
                        help='hex colors for interior points and odd/even escape counts; stored for later runs')

    parser.add_argument('--reset-settings', dest='reset_settings', action='store_true',
                        help='restore the default iteration limit and colors before rendering')

    parser.add_argument('--reset', dest='reset', action='store_true',
                        help='start from the default viewport instead of the stored one')

    parser.add_argument('--select', dest='selections', action='append', type=int, nargs=4,
                        metavar=('X1', 'Y1', 'X2', 'Y2'),
                        help='zoom to the rectangle between two pixel corners. May be repeated.')

    parser.add_argument('--state-file', dest='state_file', type=str, default=DEFAULT_STATE_FILE,
                        help='JSON file holding the viewport and settings between runs. Default: %(default)s.')

    parser.add_argument('--no-persist', dest='no_persist', action='store_true',
                        help='do not read or write the state file')

    parser.add_argument('--output', dest='output', type=str,
                        help='destination file for image or gif modes')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image mode. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--duration', type=float, default=0.5,
                        help='seconds each GIF frame is shown')

    parser.add_argument('--show-coordinates', help='overlay the visible complex-plane bounds on saved images',
                        dest='show_coordinates', action='store_true')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    if opt.width < 0:
        parser.error("--width must not be negative.")
    if opt.height <= 0:
        parser.error("--height must be positive.")
    if opt.iterations is not None and opt.iterations <= 0:
        parser.error("--iterations must be positive.")
    if opt.duration <= 0:
        parser.error("--duration must be positive.")

    image_format = (getattr(opt, "format", "png") or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    image_path: Path | None = None
    gif_path: Path | None = None
    output_arg = getattr(opt, "output", None)

    if opt.mode == "interactive":
        if output_arg:
            parser.error("--output is only valid with the image or gif modes.")
    elif opt.mode == "image":
        output_path = Path(output_arg or f"mandelbrot.{image_format}").expanduser()
        expected_suffix = f".{image_format}"
        if output_path.suffix:
            if output_path.suffix.lower() != expected_suffix.lower():
                parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
        else:
            output_path = output_path.with_suffix(expected_suffix)
        if output_path.exists() and output_path.is_dir():
            parser.error("--output must point to a file, not a directory.")
        image_path = output_path.resolve()
    else:
        output_path = Path(output_arg or "zoom.gif").expanduser()
        if output_path.suffix:
            if output_path.suffix.lower() != ".gif":
                parser.error("GIF outputs must end with .gif.")
        else:
            output_path = output_path.with_suffix(".gif")
        gif_path = output_path.resolve()

    state_path = None if opt.no_persist else Path(opt.state_file).expanduser()

    return OutputConfig(
        mode=opt.mode,
        image_path=image_path,
        gif_path=gif_path,
        image_format=image_format,
        state_path=state_path,
    )


def resolve_palette(colors) -> Palette:
    try:
        return Palette.from_hex(colors)
    except InvalidSettings as exc:
        print(f"Invalid colors {' '.join(colors)} ({exc}), defaulting to {' '.join(DEFAULT_PALETTE.to_hex())}.")
        return DEFAULT_PALETTE


def build_session(opt, config: OutputConfig, device: str) -> ExplorerSession:
    store = JsonFileStore(config.state_path) if config.state_path is not None else MemoryStore()
    session = ExplorerSession(
        CanvasSize(opt.width, opt.height),
        view_store=ViewStateStore(store),
        settings_store=SettingsStore(store),
        device=device,
        on_status=log,
        on_log=log,
    )

    if opt.reset_settings:
        session.reset_settings()
    if opt.iterations is not None or opt.colors:
        session.update_settings(RenderSettings(
            max_iterations=opt.iterations if opt.iterations is not None else session.settings.max_iterations,
            palette=resolve_palette(opt.colors) if opt.colors else session.settings.palette,
        ))
    if opt.reset:
        session.set_viewport(DEFAULT_VIEWPORT)
    return session


def apply_selection(session: ExplorerSession, corners) -> Selection | None:
    x1, y1, x2, y2 = corners
    session.click(x1, y1)
    selection = session.click(x2, y2)
    if selection is None:
        print(f"Ignoring selection {x1} {y1} {x2} {y2}: it has no height.")
    return selection


def to_image(session: ExplorerSession, raster, show_coordinates: bool):
    image = raster_to_image(raster)
    if show_coordinates:
        image = annotate_bounds(image, session.viewport, session.canvas)
    return image


def run_image(opt, config: OutputConfig, session: ExplorerSession) -> None:
    for corners in opt.selections or []:
        apply_selection(session, corners)
    raster = session.render()
    image = to_image(session, raster, opt.show_coordinates)
    write_single_image(image, config.image_path, config.image_format)
    print(f"Wrote {config.image_path}")


def run_gif(opt, config: OutputConfig, session: ExplorerSession) -> None:
    selections = opt.selections or []
    with GifWriter(config.gif_path, duration=opt.duration) as writer:
        raster = session.render()
        writer.append(to_image(session, raster, opt.show_coordinates).convert("RGB"))
        for i, corners in enumerate(selections):
            print("selection {0} out of {1}".format(i, len(selections)), end='\r')
            x1, y1, x2, y2 = corners
            if apply_selection(session, corners) is None:
                continue
            writer.append(mark_corner(raster_to_image(raster), (x1, y1)))
            writer.append(draw_selection_outline(raster_to_image(raster), (x1, y1), (x2, y2)))
            raster = session.render()
            writer.append(to_image(session, raster, opt.show_coordinates).convert("RGB"))
    print(f"Wrote {config.gif_path} ({writer.frames} frames)")


def run_interactive(opt, session: ExplorerSession) -> None:
    for corners in opt.selections or []:
        apply_selection(session, corners)
    ExplorerViewer(session).show()


def run(argv=None) -> ExplorerSession:
    parser = build_parser()
    opt = parser.parse_args(argv)

    config = resolve_output_config(opt, parser)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    log("TensorFlow version: %s" % tf.__version__)
    device = select_device()
    session = build_session(opt, config, device)

    if config.mode == "image":
        run_image(opt, config, session)
    elif config.mode == "gif":
        run_gif(opt, config, session)
    else:
        run_interactive(opt, session)
    return session


def main(argv=None):
    run(argv)
    return 0


if __name__ == '__main__':
    sys.exit(main())
