import numpy as np
import PIL.Image
import pytest
from voxel_timelapse.output import FrameWriter, to_uint8, tonemap_aces
from voxel_timelapse.textures import ImageTextureSampler, TextureSampler


class TestEncoding:

    def test_linear_quantization(self):
        frame = np.array([[[0.0, 0.5, 1.0], [2.0, -1.0, 0.25]]])
        encoded = to_uint8(frame, tonemap=False)
        assert encoded.dtype == np.uint8
        np.testing.assert_array_equal(encoded, [[[0, 128, 255], [255, 0, 64]]])

    def test_tonemapped_quantization(self):
        frame = np.linspace(0.0, 1.0, 11).reshape(1, 11, 1).repeat(3, axis=2)
        encoded = to_uint8(frame, tonemap=True)
        expected = np.floor(tonemap_aces(frame) ** (1.0 / 2.2) * 255.0 + 0.5).astype(np.uint8)
        np.testing.assert_array_equal(encoded, expected)
        assert encoded[0, 0, 0] == 0
        assert np.all(np.diff(encoded[0, :, 0].astype(int)) >= 0)

    def test_aces_is_bounded(self):
        values = tonemap_aces(np.array([0.0, 0.1, 1.0, 10.0, 1000.0]))
        assert values[0] == 0.0
        assert np.all((values >= 0.0) & (values <= 1.0))


class TestFrameWriter:

    def test_writes_indexed_png(self, tmp_path):
        writer = FrameWriter(tmp_path / "frames")
        frame = np.zeros((6, 8, 3))
        frame[:, :, 0] = 1.0
        path = writer.write(frame, 3)

        assert path == tmp_path / "frames" / "frame_0003.png"
        with PIL.Image.open(path) as img:
            assert img.size == (8, 6)
            assert img.getpixel((0, 0))[1] == 0

    def test_bmp_pattern(self, tmp_path):
        writer = FrameWriter(tmp_path, pattern="frame_{index:04d}.bmp", tonemap=False)
        path = writer.write(np.full((2, 2, 3), 0.5), 12)
        assert path.name == "frame_0012.bmp"
        with PIL.Image.open(path) as img:
            assert img.format == "BMP"
            assert img.getpixel((1, 1)) == (128, 128, 128)


class TestTextures:

    @pytest.fixture
    def texture_dir(self, tmp_path):
        texels = np.array([
            [[255, 0, 0], [0, 255, 0]],
            [[0, 0, 255], [255, 255, 255]],
        ], dtype=np.uint8)
        PIL.Image.fromarray(texels).save(tmp_path / "checker.png")
        return tmp_path

    def test_neutral_sampler(self):
        np.testing.assert_array_equal(TextureSampler().sample("any", np.zeros(4), np.zeros(4)), np.ones((4, 3)))

    def test_nearest_lookup_and_wrap(self, texture_dir):
        sampler = ImageTextureSampler(texture_dir)
        u = np.array([0.25, 0.75, 0.25, 1.25, -0.25])
        v = np.array([0.25, 0.25, 0.75, 0.25, 0.75])
        colors = sampler.sample("checker.png", u, v)
        np.testing.assert_allclose(colors, [
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 1.0],
        ])

    def test_texture_cached(self, texture_dir):
        sampler = ImageTextureSampler(texture_dir)
        assert sampler.load("checker.png") is sampler.load("checker.png")

    def test_missing_texture(self, tmp_path):
        sampler = ImageTextureSampler(tmp_path)
        with pytest.raises(FileNotFoundError):
            sampler.preload(["nope.png", None])


if __name__ == "__main__":
    pytest.main([__file__])
