"""
Timelapse driver: one rendered and written frame per animation step.
"""
import logging
import time

from voxel_timelapse import constants
from voxel_timelapse.errors import ConfigurationError

logger = logging.getLogger(__name__)


class TimelapseDriver:
    """
    Advances orbit angle and time of day per frame and hands each finished
    frame to the writer before starting the next one.

    Args:
        renderer: TileRenderer
        day_night: DayNightModel
        orbit: CameraOrbit
        writer: Object with write(frame, index); typically a FrameWriter
        width, height: Frame size in pixels
        fps: Frames per animation second
        start_time: time_of_day of the first frame
        day_cycles: Full day/night cycles spanned by the run
    """

    def __init__(self, renderer, day_night, orbit, writer,
                 width=constants.DEFAULT_WIDTH, height=constants.DEFAULT_HEIGHT,
                 fps=constants.DEFAULT_FPS, start_time=constants.DEFAULT_START_TIME,
                 day_cycles=constants.DEFAULT_DAY_CYCLES):
        if fps <= 0:
            raise ConfigurationError(f"fps must be positive, got {fps}")
        self.renderer = renderer
        self.day_night = day_night
        self.orbit = orbit
        self.writer = writer
        self.width = int(width)
        self.height = int(height)
        self.fps = float(fps)
        self.start_time = float(start_time)
        self.day_cycles = float(day_cycles)

    @staticmethod
    def frame_count(fps, seconds):
        return int(fps * seconds)

    def time_of_day(self, index, n_frames):
        return (self.start_time + self.day_cycles * index / max(n_frames, 1)) % 1.0

    def frame_parameters(self, index, n_frames):
        """Light environment and camera for one frame."""
        seconds = index / self.fps
        env = self.day_night.evaluate(self.time_of_day(index, n_frames))
        camera = self.orbit.pose_at(seconds, aspect=self.width / self.height)
        return env, camera

    def render_frame(self, index, n_frames):
        env, camera = self.frame_parameters(index, n_frames)
        return self.renderer.render(env, camera, self.width, self.height, seconds=index / self.fps)

    def run(self, n_frames):
        """
        Render and write n_frames frames in order.

        Returns:
            list of whatever the writer returned per frame (paths for FrameWriter)
        """
        logger.info("Rendering %d frames at %dx%d (%.1f fps, %.2f day cycles from t=%.3f)",
                    n_frames, self.width, self.height, self.fps, self.day_cycles, self.start_time)
        outputs = []
        run_start = time.perf_counter()
        for index in range(n_frames):
            t0 = time.perf_counter()
            frame = self.render_frame(index, n_frames)
            outputs.append(self.writer.write(frame, index))
            logger.info("Frame %d/%d (time_of_day=%.3f) saved in %.2fs",
                        index + 1, n_frames, self.time_of_day(index, n_frames),
                        time.perf_counter() - t0)
        logger.info("Done: %d frames in %.1fs", n_frames, time.perf_counter() - run_start)
        return outputs
