import numpy as np
import pytest

from mandelzoom.core.escape_time import evaluate
from mandelzoom.core.exceptions import ConfigurationError
from mandelzoom.core.field import FractalFieldGenerator, generate_field
from mandelzoom.core.viewport import PixelCoordinate, ViewportState
from mandelzoom.rendering.coloring import BLACK, CLASSIC_PALETTE, classify


class TestGenerate:

    def test_field_completeness(self, small_generator, full_view):
        # The sweep includes the far edge: (size + 1) ** 2 points
        points = list(small_generator.generate(full_view))
        assert len(points) == 11 ** 2
        assert small_generator.point_count == 121

        pixels = {p.pixel for p in points}
        assert len(pixels) == 121
        assert all(0 <= p.x <= 10 and 0 <= p.y <= 10 for p in pixels)

    def test_columns_outer_rows_inner(self, small_generator, full_view):
        points = list(small_generator.generate(full_view))
        assert points[0].pixel == PixelCoordinate(0, 0)
        assert points[1].pixel == PixelCoordinate(0, 1)
        assert points[11].pixel == PixelCoordinate(1, 0)
        assert points[-1].pixel == PixelCoordinate(10, 10)

    def test_restartable_and_deterministic(self, small_generator):
        state = ViewportState(scale=0.5, offset_x=-0.5, offset_y=0.25)
        assert list(small_generator.generate(state)) == list(small_generator.generate(state))

    def test_colors_follow_pipeline(self, small_generator):
        state = ViewportState(scale=0.3, offset_x=-0.6, offset_y=0.4)
        for point in small_generator.generate(state):
            c = small_generator.mapper.pixel_to_plane(point.pixel, state)
            assert point.color == classify(evaluate(c, 50), CLASSIC_PALETTE)

    def test_origin_pixel_is_black(self, small_generator, full_view):
        colors = {p.pixel: p.color for p in small_generator.generate(full_view)}
        assert colors[PixelCoordinate(5, 5)] == BLACK
        # (-2, 2) escapes at once
        assert colors[PixelCoordinate(0, 0)] == CLASSIC_PALETTE[0]

    def test_generate_field_wrapper(self, full_view):
        points = list(generate_field(4, 20, full_view))
        assert len(points) == 25


class TestSnapshot:

    def test_snapshot_is_immutable_copy(self, small_generator):
        state = ViewportState(scale=0.5)
        snapshot = small_generator.snapshot(state)
        state.scale = 0.01

        assert snapshot.state.scale == 0.5
        assert snapshot.state is not state
        assert isinstance(snapshot.points, tuple)
        assert len(snapshot) == 121
        assert snapshot.surface_size == 10
        assert snapshot.max_iter == 50

    def test_snapshot_matches_generate(self, small_generator, full_view):
        assert list(small_generator.snapshot(full_view)) == list(small_generator.generate(full_view))


class TestGrids:

    def test_color_grid_matches_points(self, small_generator):
        state = ViewportState(scale=0.4, offset_x=-0.4)
        grid = small_generator.color_grid(state)
        assert grid.shape == (11, 11, 3)
        for point in small_generator.generate(state):
            assert tuple(grid[point.pixel.y, point.pixel.x]) == point.color.to_tuple()

    def test_iteration_grid_dtype(self, small_generator, full_view):
        grid = small_generator.iteration_grid(full_view)
        assert grid.shape == (11, 11)
        assert grid.dtype == np.int32


class TestValidation:

    def test_invalid_surface(self):
        with pytest.raises(ConfigurationError):
            FractalFieldGenerator(0, 10)

    def test_invalid_budget(self):
        with pytest.raises(ConfigurationError):
            FractalFieldGenerator(10, 0)

    def test_invalid_state_rejected_before_work(self, small_generator):
        state = ViewportState()
        state.scale = -1.0
        with pytest.raises(ConfigurationError):
            small_generator.generate(state)
