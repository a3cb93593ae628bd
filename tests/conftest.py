import matplotlib

matplotlib.use("Agg")

import pytest
from shapely.geometry import Polygon

from facemoments import Mesh2D


L_SHAPE = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 3), (0, 3)]


@pytest.fixture
def unit_square():
    return Mesh2D([(0, 0), (1, 0), (1, 1), (0, 1)], [0, 1, 2, 0, 2, 3])


@pytest.fixture
def l_shape_fan():
    # fan from the reflex corner (1, 1)
    return Mesh2D(L_SHAPE, [3, 4, 5, 3, 5, 0, 3, 0, 1, 3, 1, 2])


@pytest.fixture
def l_shape_strips():
    # two rectangles split through the extra point (0, 1)
    return Mesh2D(L_SHAPE + [(0, 1)], [0, 1, 2, 0, 2, 6, 6, 3, 4, 6, 4, 5])


@pytest.fixture
def l_polygon():
    return Polygon(L_SHAPE)
