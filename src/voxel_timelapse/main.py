import argparse
import logging
import sys
import time

import PIL.Image

from voxel_timelapse import constants
from voxel_timelapse.builder import build_house_scene
from voxel_timelapse.camera import CameraOrbit
from voxel_timelapse.daynight import DayNightModel
from voxel_timelapse.errors import ConfigurationError, RenderError
from voxel_timelapse.output import FrameWriter, to_uint8
from voxel_timelapse.textures import ImageTextureSampler
from voxel_timelapse.tiles import TileRenderer
from voxel_timelapse.timelapse import TimelapseDriver
from voxel_timelapse.tracer import RayTracer

logger = logging.getLogger("voxel_timelapse")


def setup_logging(level="INFO"):
    """Send plain-text log lines to stdout at the requested level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(name)s [%(levelname)s] %(message)s",
        stream=sys.stdout,
    )


def validate_args(args):
    """Reject sizes and counts the renderer cannot work with."""
    checks = [
        ("width", args.width, 1), ("height", args.height, 1), ("workers", args.workers, 1),
        ("tile-size", args.tile_size, 1), ("samples", args.samples, 1), ("depth", args.depth, 0),
    ]
    for name, value, minimum in checks:
        if value < minimum:
            raise ConfigurationError(f"--{name} must be >= {minimum}, got {value}")
    if args.fps <= 0:
        raise ConfigurationError(f"--fps must be positive, got {args.fps}")
    if args.frames is not None and args.frames < 0:
        raise ConfigurationError(f"--frames must be >= 0, got {args.frames}")


def build_renderer(args):
    scene = build_house_scene()
    sampler = None
    if args.textures:
        sampler = ImageTextureSampler(args.textures)
        sampler.preload(scene.materials.textures)
    logger.info("Scene: %d voxels, %d torch light(s)", scene.voxel_count, len(scene.lights))
    tracer = RayTracer(scene, sampler=sampler, max_depth=args.depth, ambient_occlusion=not args.no_ao)
    return TileRenderer(tracer, workers=args.workers, tile_size=args.tile_size, samples=args.samples)


def build_orbit(args):
    return CameraOrbit(base_radius=args.radius, zoom_amplitude=args.zoom,
                       period_seconds=args.orbit_period)


def render_preview(args):
    """Render a single frame at a given time of day and animation second."""
    renderer = build_renderer(args)
    env = DayNightModel().evaluate(args.time)
    camera = build_orbit(args).pose_at(args.at, aspect=args.width / args.height)
    t0 = time.time()
    frame = renderer.render(env, camera, args.width, args.height, seconds=args.at)
    logger.info("Preview rendered in %.2fs", time.time() - t0)
    PIL.Image.fromarray(to_uint8(frame, tonemap=not args.no_tonemap)).save(args.preview)
    logger.info("Saved %s", args.preview)


def render_timelapse(args):
    renderer = build_renderer(args)
    writer = FrameWriter(args.outdir, pattern=args.pattern, tonemap=not args.no_tonemap)
    driver = TimelapseDriver(renderer, DayNightModel(), build_orbit(args), writer,
                             width=args.width, height=args.height, fps=args.fps,
                             start_time=args.start_time, day_cycles=args.day_cycles)
    n_frames = args.frames if args.frames is not None else TimelapseDriver.frame_count(args.fps, args.seconds)
    driver.run(n_frames)


def build_parser():
    parser = argparse.ArgumentParser(description="Voxel Timelapse Renderer CLI")
    parser.add_argument("--ui", action="store_true", help="Launch the interactive Gradio preview")
    parser.add_argument("--plot", metavar="PATH", help="Plot the day/night cycle to PATH and exit")
    parser.add_argument("--preview", metavar="PATH", help="Render a single frame to PATH and exit")
    parser.add_argument("--time", type=float, default=0.5, help="time_of_day for --preview (0=midnight, 0.5=noon)")
    parser.add_argument("--at", type=float, default=0.0, help="Animation second for the --preview camera")

    parser.add_argument("--width", type=int, default=constants.DEFAULT_WIDTH, help="Frame width in pixels")
    parser.add_argument("--height", type=int, default=constants.DEFAULT_HEIGHT, help="Frame height in pixels")
    parser.add_argument("--fps", type=float, default=constants.DEFAULT_FPS, help="Frames per second")
    parser.add_argument("--seconds", type=float, default=constants.DEFAULT_SECONDS, help="Timelapse duration")
    parser.add_argument("--frames", type=int, default=None, help="Frame count (overrides --seconds)")
    parser.add_argument("--start-time", type=float, default=constants.DEFAULT_START_TIME,
                        help="time_of_day of the first frame")
    parser.add_argument("--day-cycles", type=float, default=constants.DEFAULT_DAY_CYCLES,
                        help="Day/night cycles spanned by the run")

    parser.add_argument("--radius", type=float, default=constants.ORBIT_BASE_RADIUS, help="Orbit base radius")
    parser.add_argument("--zoom", type=float, default=constants.ORBIT_ZOOM_AMPLITUDE, help="Orbit zoom amplitude")
    parser.add_argument("--orbit-period", type=float, default=constants.ORBIT_PERIOD_SECONDS,
                        help="Seconds per camera revolution")

    parser.add_argument("--depth", type=int, default=constants.MAX_DEPTH, help="Reflection recursion limit")
    parser.add_argument("--workers", type=int, default=constants.DEFAULT_WORKERS, help="Tile worker threads")
    parser.add_argument("--tile-size", type=int, default=constants.DEFAULT_TILE_SIZE, help="Tile edge in pixels")
    parser.add_argument("--samples", type=int, default=constants.DEFAULT_SAMPLES,
                        help="Primary rays per pixel (supersampling)")
    parser.add_argument("--no-ao", action="store_true", help="Disable ambient occlusion")
    parser.add_argument("--textures", metavar="DIR", default=None, help="Directory of material textures")

    parser.add_argument("--outdir", default=constants.DEFAULT_OUTPUT_DIR, help="Frame output directory")
    parser.add_argument("--pattern", default=constants.FRAME_PATTERN,
                        help="Frame file name pattern; suffix selects PNG or BMP")
    parser.add_argument("--no-tonemap", action="store_true", help="Write linear colors without ACES/gamma")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        validate_args(args)
        if args.ui:
            from voxel_timelapse.ui import CSS, create_ui
            logger.info("Launching UI...")
            create_ui(workers=args.workers).launch(css=CSS)
        elif args.plot:
            from voxel_timelapse.tools.plot_daynight import plot_cycle
            plot_cycle(DayNightModel(), args.plot)
        elif args.preview:
            render_preview(args)
        else:
            render_timelapse(args)
    except (RenderError, FileNotFoundError) as exc:
        logger.error("Render failed: %s", exc)
        return 1
    return 0


def run_ui():
    """Entry point for voxel-timelapse-ui command."""
    return main(["--ui"])


def run_plot():
    """Entry point for voxel-timelapse-plot command."""
    return main(["--plot", "daynight_cycle.png"])


if __name__ == "__main__":
    sys.exit(main())
