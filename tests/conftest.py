import pytest

from mandelzoom.api import ZoomController
from mandelzoom.core.field import FractalFieldGenerator
from mandelzoom.core.viewport import ViewportState


@pytest.fixture
def full_view():
    return ViewportState()


@pytest.fixture
def small_generator():
    return FractalFieldGenerator(surface_size=10, max_iter=50)


@pytest.fixture
def controller():
    # At size 80 pixel (50, 30) shows the plane point (0.5, 0.5)
    return ZoomController(FractalFieldGenerator(surface_size=80, max_iter=40))
