import math

import matplotlib.pyplot as plt
import pytest
from shapely.geometry import box

from facemoments import (
    FaceAnalysisResult, Mesh2D, Mesh3D, analyze_mesh, calculate, derive_properties, polygon_facets,
)
from facemoments_plot import (
    annotate_principal_axes, local_mesh, plot_face, plot_face_with_props, save_plot,
)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture
def tilted_rect():
    # 2 x 1 rectangle standing in the XZ plane
    facets = polygon_facets(box(0, 0, 2, 1)).reshape(-1, 3)
    facets = facets[:, [0, 2, 1]]
    return Mesh3D.from_facets(facets.ravel())


def test_local_mesh_matches_analysis(tilted_rect):
    m2 = local_mesh(tilted_rect)
    assert m2.vertices.shape == (tilted_rect.n_vertices, 2)
    assert m2.vertices[0] == pytest.approx((0.0, 0.0))


def test_plot_face_draws_outline_and_triangles(unit_square):
    ax = plot_face(unit_square)
    assert len(ax.patches) == 1
    assert len(ax.lines) >= 1


def test_plot_face_of_empty_mesh_returns_axes():
    _, ax = plt.subplots()
    assert plot_face(Mesh2D([], []), ax=ax) is ax
    assert len(ax.patches) == 0


def test_principal_axes_are_drawn_through_centroid(unit_square):
    r = derive_properties(calculate(unit_square), unit_square)
    _, ax = plt.subplots()
    annotate_principal_axes(ax, r)
    assert len(ax.lines) == 2
    xs, ys = ax.lines[0].get_data()
    assert (sum(xs) / 2, sum(ys) / 2) == pytest.approx((r.Cx, r.Cy))
    assert math.hypot(xs[1] - xs[0], ys[1] - ys[0]) == pytest.approx(2 * 0.5)


def test_plot_face_with_props(tilted_rect, tmp_path):
    r = analyze_mesh(tilted_rect, face_type="Planar Face")
    fig, ax = plot_face_with_props(tilted_rect, r)

    assert ax.get_title() == "Planar Face"
    assert len(ax.lines) >= 2
    assert any("A = 2.0000" in t.get_text() for t in ax.texts)

    out = tmp_path / "face.png"
    save_plot(fig, str(out))
    assert out.exists() and out.stat().st_size > 0


def test_plot_degenerate_face_only_sets_title():
    fig, ax = plot_face_with_props(Mesh3D.empty(), FaceAnalysisResult(), title="empty")
    assert ax.get_title() == "empty"
    assert len(ax.texts) == 0
    assert len(ax.collections) == 0
