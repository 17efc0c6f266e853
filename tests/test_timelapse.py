"""
Integration tests: the scene builder, the timelapse driver and the CLI.
"""
import numpy as np
import PIL.Image
import pytest
from voxel_timelapse import builder
from voxel_timelapse.camera import CameraOrbit
from voxel_timelapse.daynight import DayNightModel
from voxel_timelapse.main import main
from voxel_timelapse.output import FrameWriter
from voxel_timelapse.scene import HitType
from voxel_timelapse.tiles import TileRenderer
from voxel_timelapse.timelapse import TimelapseDriver
from voxel_timelapse.tracer import RayTracer


class RecordingRenderer:
    def __init__(self):
        self.calls = []
        self.seconds = []

    def render(self, env, camera, width, height, seconds=0.0):
        self.calls.append((env, camera, width, height))
        self.seconds.append(seconds)
        return np.full((height, width, 3), env.time_of_day)


class RecordingWriter:
    def __init__(self):
        self.frames = []

    def write(self, frame, index):
        self.frames.append((index, frame))
        return f"frame-{index}"


class TestDriver:

    @pytest.fixture
    def driver(self):
        return TimelapseDriver(RecordingRenderer(), DayNightModel(), CameraOrbit(), RecordingWriter(),
                               width=8, height=4, fps=2.0, start_time=0.25, day_cycles=1.0)

    def test_frames_rendered_and_written_in_order(self, driver):
        outputs = driver.run(4)
        assert outputs == ["frame-0", "frame-1", "frame-2", "frame-3"]
        assert [index for index, _ in driver.writer.frames] == [0, 1, 2, 3]
        assert driver.writer.frames[0][1].shape == (4, 8, 3)

    def test_time_of_day_advances(self, driver):
        driver.run(4)
        times = [env.time_of_day for env, _, _, _ in driver.renderer.calls]
        np.testing.assert_allclose(times, [0.25, 0.5, 0.75, 0.0])

    def test_camera_follows_orbit(self, driver):
        driver.run(3)
        orbit = driver.orbit
        for index, (_, camera, width, height) in enumerate(driver.renderer.calls):
            expected = orbit.pose_at(index / driver.fps, aspect=width / height)
            np.testing.assert_allclose(camera.position, expected.position)
            assert camera.aspect == pytest.approx(2.0)

    def test_animation_seconds_passed(self, driver):
        driver.run(3)
        np.testing.assert_allclose(driver.renderer.seconds, [0.0, 0.5, 1.0])

    def test_frame_count(self):
        assert TimelapseDriver.frame_count(30, 10) == 300
        assert TimelapseDriver.frame_count(24, 0.5) == 12

    def test_zero_frames(self, driver):
        assert driver.run(0) == []

    def test_bad_fps(self):
        with pytest.raises(ValueError):
            TimelapseDriver(RecordingRenderer(), DayNightModel(), CameraOrbit(), RecordingWriter(), fps=0)


class TestHouseScene:

    @pytest.fixture(scope="class")
    def scene(self):
        return builder.build_house_scene()

    def test_two_torches(self, scene):
        assert len(scene.lights) == 2
        positions = sorted(tuple(light.position) for light in scene.lights)
        assert positions == [(6.5, 1.5, 14.5), (9.5, 2.5, 12.5)]

    def test_door_is_open(self, scene):
        assert scene.voxel_at(7, 0, 11) == -1
        assert scene.voxel_at(8, 1, 11) == -1
        assert scene.voxel_at(6, 0, 11) >= 0

    def test_roof_covers_house(self, scene):
        """Straight down over the middle of the house hits the roof."""
        hits = scene.intersect(np.array([8.0, 30.0, 8.0]), np.array([0.0, -1.0, 0.0]))
        assert hits.hit_type[0] == HitType.VOXEL.value
        assert hits.material[0] == scene.materials.id_of("roof")

    def test_puddle_is_water(self, scene):
        hits = scene.intersect(np.array([2.5, 5.0, 15.5]), np.array([0.0, -1.0, 0.0]))
        assert hits.hit_type[0] == HitType.WATER.value
        assert scene.materials[hits.material[0]].reflection > 0.0

    def test_small_render(self, scene, tmp_path):
        renderer = TileRenderer(RayTracer(scene, max_depth=1), workers=2, tile_size=8)
        driver = TimelapseDriver(renderer, DayNightModel(), CameraOrbit(), FrameWriter(tmp_path),
                                 width=16, height=9, fps=30)
        paths = driver.run(2)
        assert [p.name for p in paths] == ["frame_0000.png", "frame_0001.png"]
        for path in paths:
            with PIL.Image.open(path) as img:
                assert img.size == (16, 9)


class TestCli:

    def test_render_frames(self, tmp_path):
        outdir = tmp_path / "out"
        status = main(["--frames", "2", "--width", "12", "--height", "8", "--workers", "2",
                       "--depth", "1", "--outdir", str(outdir), "--log-level", "WARNING"])
        assert status == 0
        assert sorted(p.name for p in outdir.iterdir()) == ["frame_0000.png", "frame_0001.png"]

    def test_preview(self, tmp_path):
        path = tmp_path / "preview.bmp"
        status = main(["--preview", str(path), "--time", "0.9", "--width", "10", "--height", "6",
                       "--workers", "1", "--log-level", "WARNING"])
        assert status == 0
        with PIL.Image.open(path) as img:
            assert img.size == (10, 6)

    def test_render_error_exit_status(self, tmp_path):
        status = main(["--frames", "1", "--width", "4", "--height", "4", "--radius", "-1",
                       "--outdir", str(tmp_path), "--log-level", "WARNING"])
        assert status == 1

    def test_missing_textures_exit_status(self, tmp_path):
        status = main(["--frames", "1", "--width", "4", "--height", "4", "--textures", str(tmp_path),
                       "--outdir", str(tmp_path / "out"), "--log-level", "WARNING"])
        assert status == 1

    @pytest.mark.parametrize("flag, value", [
        ("--workers", "0"), ("--height", "0"), ("--width", "-3"), ("--samples", "0"),
        ("--tile-size", "0"), ("--fps", "0"), ("--depth", "-1"),
    ])
    def test_bad_settings_exit_status(self, tmp_path, flag, value):
        path = tmp_path / "preview.png"
        status = main(["--preview", str(path), "--width", "8", "--height", "4", flag, value,
                       "--log-level", "WARNING"])
        assert status == 1
        assert not path.exists()

    def test_supersampled_preview_without_ao(self, tmp_path):
        path = tmp_path / "preview.png"
        status = main(["--preview", str(path), "--width", "8", "--height", "6", "--samples", "2",
                       "--no-ao", "--at", "1.5", "--workers", "1", "--log-level", "WARNING"])
        assert status == 0
        with PIL.Image.open(path) as img:
            assert img.size == (8, 6)

    def test_plot(self, tmp_path):
        path = tmp_path / "cycle.png"
        assert main(["--plot", str(path), "--log-level", "WARNING"]) == 0
        assert path.stat().st_size > 0


if __name__ == "__main__":
    pytest.main([__file__])
