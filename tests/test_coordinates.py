import numpy as np
import pytest

from mandelzoom.core.coordinates import CoordinateMapper
from mandelzoom.core.exceptions import ConfigurationError, PixelOutOfBoundsError
from mandelzoom.core.viewport import ComplexPoint, PixelCoordinate, ViewportState


class TestPixelToPlane:

    def test_full_view_corners(self, full_view):
        mapper = CoordinateMapper(800)
        assert mapper.pixel_to_plane(PixelCoordinate(0, 0), full_view) == ComplexPoint(-2.0, 2.0)
        assert mapper.pixel_to_plane(PixelCoordinate(800, 800), full_view) == ComplexPoint(2.0, -2.0)
        assert mapper.pixel_to_plane(PixelCoordinate(400, 400), full_view) == ComplexPoint(0.0, 0.0)

    def test_rows_grow_downwards(self, full_view):
        mapper = CoordinateMapper(800)
        upper = mapper.pixel_to_plane(PixelCoordinate(400, 100), full_view)
        lower = mapper.pixel_to_plane(PixelCoordinate(400, 700), full_view)
        assert upper.im > 0 > lower.im

    def test_known_point(self, full_view):
        mapper = CoordinateMapper(800)
        assert mapper.pixel_to_plane(PixelCoordinate(500, 300), full_view) == ComplexPoint(0.5, 0.5)

    def test_scale_and_offset(self):
        mapper = CoordinateMapper(800)
        state = ViewportState(scale=0.1, offset_x=0.5, offset_y=0.5)
        assert mapper.pixel_to_plane(PixelCoordinate(400, 400), state).re == pytest.approx(0.5)
        assert mapper.pixel_to_plane(PixelCoordinate(400, 400), state).im == pytest.approx(0.5)
        corner = mapper.pixel_to_plane(PixelCoordinate(0, 0), state)
        assert corner.re == pytest.approx(0.3)
        assert corner.im == pytest.approx(0.7)

    def test_pixels_per_unit(self, full_view):
        assert CoordinateMapper(800).pixels_per_unit(full_view) == 200.0
        assert CoordinateMapper(800).pixels_per_unit(ViewportState(scale=0.1)) == pytest.approx(2000.0)


class TestRoundTrip:

    @pytest.mark.parametrize("state", [
        ViewportState(),
        ViewportState(scale=0.1, offset_x=0.5, offset_y=0.5),
        ViewportState(scale=1e-3, offset_x=-0.7436, offset_y=0.1318),
        ViewportState(scale=1e-6, offset_x=-1.25, offset_y=0.02),
    ])
    def test_plane_to_pixel_inverts_pixel_to_plane(self, state):
        mapper = CoordinateMapper(640)
        for x in range(0, 641, 37):
            for y in range(0, 641, 53):
                pixel = PixelCoordinate(x, y)
                assert mapper.plane_to_pixel(mapper.pixel_to_plane(pixel, state), state) == pixel

    def test_plane_to_pixel_rounds_to_nearest(self, full_view):
        mapper = CoordinateMapper(800)
        assert mapper.plane_to_pixel(ComplexPoint(0.0026, -0.0026), full_view) == PixelCoordinate(401, 401)


class TestDeviceSpace:

    def test_corners_and_centre(self):
        mapper = CoordinateMapper(800)
        assert mapper.pixel_to_device(PixelCoordinate(0, 0)) == (-1.0, -1.0)
        assert mapper.pixel_to_device(PixelCoordinate(800, 800)) == (1.0, 1.0)
        assert mapper.pixel_to_device(PixelCoordinate(400, 200)) == (0.0, -0.5)


class TestBoundsAndValidation:

    def test_contains_is_inclusive(self):
        mapper = CoordinateMapper(10)
        assert mapper.contains(PixelCoordinate(0, 0))
        assert mapper.contains(PixelCoordinate(10, 10))
        assert not mapper.contains(PixelCoordinate(11, 0))
        assert not mapper.contains(PixelCoordinate(0, -1))

    def test_check_bounds_raises(self):
        with pytest.raises(PixelOutOfBoundsError) as excinfo:
            CoordinateMapper(10).check_bounds(PixelCoordinate(-1, 3))
        assert excinfo.value.surface_size == 10

    @pytest.mark.parametrize("size", [0, -5, 2.5, True])
    def test_invalid_surface_size(self, size):
        with pytest.raises(ConfigurationError):
            CoordinateMapper(size)

    @pytest.mark.parametrize("scale", [0, -1.0, float('nan'), float('inf')])
    def test_invalid_scale(self, scale):
        with pytest.raises(ConfigurationError):
            ViewportState(scale=scale)


class TestCoordinateArrays:

    def test_arrays_match_scalar_mapping(self):
        mapper = CoordinateMapper(20)
        state = ViewportState(scale=0.25, offset_x=-0.75, offset_y=0.1)
        real, imag = mapper.create_coordinate_arrays(state)

        assert real.shape == (21, 21)
        for x in range(21):
            for y in range(21):
                point = mapper.pixel_to_plane(PixelCoordinate(x, y), state)
                assert real[y, x] == point.re
                assert imag[y, x] == point.im

    def test_arrays_are_float64(self, full_view):
        real, imag = CoordinateMapper(4).create_coordinate_arrays(full_view)
        assert real.dtype == np.float64
        assert imag.dtype == np.float64
