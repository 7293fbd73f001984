import numpy as np
import pytest

from mandelzoom.core.escape_time import BOUNDED, BOUNDED_MARKER, Escaped
from mandelzoom.core.exceptions import ConfigurationError
from mandelzoom.rendering import coloring
from mandelzoom.rendering.coloring import (
    BLACK,
    CLASSIC_PALETTE,
    ColorClassifier,
    ColorRGB,
    Palette,
    PaletteRegistry,
    classify,
)


class TestColorRGB:

    def test_uint8_round_trip_is_lossless(self):
        for value in range(256):
            color = ColorRGB.from_uint8(value, 255 - value, value // 2)
            assert color.to_uint8_tuple() == (value, 255 - value, value // 2)

    def test_components_are_validated(self):
        with pytest.raises(ConfigurationError):
            ColorRGB(1.5, 0, 0)
        with pytest.raises(ConfigurationError):
            ColorRGB.from_uint8(256, 0, 0)

    def test_from_hex(self):
        assert ColorRGB.from_hex('#206bcb').to_uint8_tuple() == (32, 107, 203)
        with pytest.raises(ConfigurationError):
            ColorRGB.from_hex('#12')
        with pytest.raises(ConfigurationError):
            ColorRGB.from_hex('zzzzzz')


class TestPalette:

    def test_classic_palette(self):
        assert len(CLASSIC_PALETTE) == 6
        assert CLASSIC_PALETTE[0].to_uint8_tuple() == (0, 0, 255)
        assert CLASSIC_PALETTE[5].to_uint8_tuple() == (0, 255, 0)

    def test_empty_palette_rejected(self):
        with pytest.raises(ConfigurationError):
            Palette([])

    def test_invalid_entry_rejected(self):
        with pytest.raises(ConfigurationError):
            Palette([(0, 0)])

    def test_single_color_palette(self):
        palette = Palette([(0.5, 0.5, 0.5)])
        assert palette.color_for(0) == palette.color_for(17)

    def test_gpl_round_trip(self, tmp_path):
        path = tmp_path / "classic.gpl"
        CLASSIC_PALETTE.save_to_file(path)
        loaded = Palette.load_from_file(path)
        assert loaded == CLASSIC_PALETTE
        assert loaded.name == "Classic"

    def test_gpl_without_colors(self, tmp_path):
        path = tmp_path / "empty.gpl"
        path.write_text("GIMP Palette\nName: Empty\n#\n")
        with pytest.raises(ConfigurationError):
            Palette.load_from_file(path)

    def test_from_matplotlib(self):
        palette = Palette.from_matplotlib('viridis', 8)
        assert len(palette) == 8
        assert palette.name == "From_viridis"

    def test_from_unknown_colormap(self):
        with pytest.raises(ConfigurationError):
            Palette.from_matplotlib('no-such-colormap')

    def test_from_matplotlib_without_matplotlib(self, monkeypatch):
        monkeypatch.setattr(coloring, 'MATPLOTLIB_AVAILABLE', False)
        with pytest.raises(ConfigurationError, match="matplotlib"):
            PaletteRegistry.get('mpl:viridis')


class TestRegistry:

    def test_builtin_names(self):
        names = PaletteRegistry.list_palettes()
        assert 'classic' in names
        assert PaletteRegistry.get('Classic') is CLASSIC_PALETTE

    def test_unknown_palette(self):
        with pytest.raises(ConfigurationError):
            PaletteRegistry.get('nope')

    def test_matplotlib_name(self):
        assert len(PaletteRegistry.get('mpl:plasma')) == 16

    def test_register(self):
        palette = Palette([(1, 0, 0), (0, 1, 0)], name="Duo")
        PaletteRegistry.register('duo', palette)
        try:
            assert PaletteRegistry.get('duo') is palette
        finally:
            PaletteRegistry._palettes.pop('duo')


class TestClassify:

    def test_wraparound(self):
        n = len(CLASSIC_PALETTE)
        assert classify(Escaped(n), CLASSIC_PALETTE) == classify(Escaped(0), CLASSIC_PALETTE)
        assert classify(Escaped(2 * n + 3), CLASSIC_PALETTE) == CLASSIC_PALETTE[3]

    def test_bounded_is_black(self):
        assert classify(BOUNDED, CLASSIC_PALETTE) == BLACK

    def test_custom_interior_color(self):
        white = ColorRGB(1, 1, 1)
        assert classify(BOUNDED, CLASSIC_PALETTE, white) == white
        assert ColorClassifier(CLASSIC_PALETTE, white).classify(BOUNDED) == white

    def test_unsupported_result(self):
        with pytest.raises(TypeError):
            classify(3, CLASSIC_PALETTE)

    def test_classify_array_matches_scalar(self):
        classifier = ColorClassifier()
        iterations = np.array([[0, 1, 5], [6, BOUNDED_MARKER, 13]], dtype=np.int32)
        rgb = classifier.classify_array(iterations)

        assert rgb.shape == (2, 3, 3)
        for (row, col), value in np.ndenumerate(iterations):
            result = BOUNDED if value == BOUNDED_MARKER else Escaped(int(value))
            assert tuple(rgb[row, col]) == classifier.classify(result).to_tuple()
