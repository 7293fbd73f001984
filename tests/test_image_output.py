import numpy as np
import pytest

from mandelzoom.core.viewport import ViewportState
from mandelzoom.rendering.coloring import CLASSIC_PALETTE
from mandelzoom.rendering.image_output import ImageExporter, RenderMetadata


@pytest.fixture
def metadata():
    state = ViewportState(scale=0.01, offset_x=-0.75, offset_y=0.1)
    return RenderMetadata.for_state(state, 10, 50, "Classic", render_time_seconds=0.5)


@pytest.fixture
def rgb_image(small_generator):
    return small_generator.color_grid(ViewportState(scale=0.5))


class TestRenderMetadata:

    def test_json_round_trip(self, metadata):
        restored = RenderMetadata.from_json(metadata.to_json())
        assert restored == metadata
        assert restored.viewport == ViewportState(0.01, -0.75, 0.1)

    def test_timestamp_defaults(self, metadata):
        assert metadata.timestamp


class TestImageExporter:

    @pytest.mark.parametrize("suffix", [".png", ".tif"])
    def test_embedded_metadata(self, tmp_path, rgb_image, metadata, suffix):
        exporter = ImageExporter()
        path = tmp_path / f"field{suffix}"
        exporter.save_image(rgb_image, path, metadata)

        assert exporter.extract_metadata_from_image(path) == metadata

    def test_jpeg_companion_metadata(self, tmp_path, rgb_image, metadata):
        exporter = ImageExporter()
        path = tmp_path / "field.jpg"
        exporter.save_image(rgb_image, path, metadata)

        assert path.with_suffix('.json').exists()
        assert exporter.extract_metadata_from_image(path) == metadata

    def test_image_without_metadata(self, tmp_path, rgb_image):
        exporter = ImageExporter()
        path = tmp_path / "plain.png"
        exporter.save_image(rgb_image, path)
        assert exporter.extract_metadata_from_image(path) is None

    def test_palette_colors_survive_export(self, tmp_path):
        from PIL import Image

        row = np.array([[c.to_tuple() for c in CLASSIC_PALETTE]])
        path = tmp_path / "palette.png"
        ImageExporter().save_image(row, path)

        with Image.open(path) as img:
            pixels = np.asarray(img.convert('RGB'))
        assert [tuple(p) for p in pixels[0]] == [c.to_uint8_tuple() for c in CLASSIC_PALETTE]

    def test_unsupported_format(self, tmp_path, rgb_image):
        with pytest.raises(ValueError, match="Unsupported format"):
            ImageExporter().save_image(rgb_image, tmp_path / "field.bmp")

    def test_bad_shape(self, tmp_path):
        with pytest.raises(ValueError):
            ImageExporter().save_image(np.zeros((4, 4)), tmp_path / "field.png")

    def test_raw_data(self, tmp_path, small_generator, metadata):
        exporter = ImageExporter()
        iterations = small_generator.iteration_grid(ViewportState())
        saved = exporter.save_raw_data(iterations, tmp_path / "field.dat", metadata)

        assert saved.suffix == '.npy'
        loaded, loaded_metadata = exporter.load_raw_data(saved)
        np.testing.assert_array_equal(loaded, iterations)
        assert loaded_metadata == metadata
