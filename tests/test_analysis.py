import logging
import math

import numpy as np
import pytest
from shapely.geometry import box

from facemoments import (
    DEFAULT_TOLERANCE, FaceAnalysisResult, Mesh2D, Mesh3D, analyze_face,
    analyze_faces, analyze_mesh, calculate, collect_polygons, derive_properties, face_outline,
    face_type_label, polygon_facets,
)


class FakeProvider:
    """In-memory mesh provider keyed by face name."""

    def __init__(self, faces):
        self.faces = faces
        self.tolerances = []

    def facet_data(self, face, tolerance):
        self.tolerances.append(tolerance)
        return self.faces[face][0]

    def surface_type(self, face):
        return self.faces[face][1]


# ------------------------------------------------------------
# Derived properties
# ------------------------------------------------------------

def test_derived_unit_square(unit_square):
    r = derive_properties(calculate(unit_square), unit_square, perimeter=4.0, face_type="Planar Face")

    assert r.Ixx_origin == pytest.approx(1 / 3)
    assert r.Iyy_origin == pytest.approx(1 / 3)
    assert r.Ixy_origin == pytest.approx(1 / 4)
    assert r.J_origin == pytest.approx(2 / 3)
    assert r.J_centroid == pytest.approx(1 / 6)
    assert (r.cx_max, r.cy_max) == pytest.approx((0.5, 0.5))
    assert r.Rx == pytest.approx(math.sqrt(1 / 12))
    assert r.Ry == pytest.approx(math.sqrt(1 / 12))
    assert r.Sx_min == pytest.approx(1 / 6)
    assert r.Sy_min == pytest.approx(1 / 6)
    assert r.perimeter == 4.0
    assert r.face_type == "Planar Face"


def test_derived_keeps_centroidal_fields(l_shape_fan):
    base = calculate(l_shape_fan)
    r = derive_properties(base, l_shape_fan)
    assert (r.area, r.Cx, r.Cy, r.Ix, r.Iy, r.Ixy, r.Imin, r.Imax, r.theta) == \
        (base.area, base.Cx, base.Cy, base.Ix, base.Iy, base.Ixy, base.Imin, base.Imax, base.theta)


def test_derived_extreme_fibers_of_l_shape(l_shape_fan):
    r = derive_properties(calculate(l_shape_fan), l_shape_fan)
    assert r.cx_max == pytest.approx(2 - 0.75)
    assert r.cy_max == pytest.approx(3 - 1.25)
    assert r.Sx_min == pytest.approx(r.Ix / 1.75)
    assert r.Sy_min == pytest.approx(r.Iy / 1.25)


def test_first_moments_and_polar_radius(unit_square):
    r = derive_properties(calculate(unit_square), unit_square)
    assert r.Qx == pytest.approx(0.5)
    assert r.Qy == pytest.approx(0.5)
    assert r.Rz == pytest.approx(math.sqrt(1 / 6))
    assert r.theta_deg == 0.0


def test_degenerate_mesh_has_no_nan():
    mesh = Mesh2D([(0, 0), (1, 0), (2, 0)], [0, 1, 2])
    r = derive_properties(calculate(mesh), mesh)
    values = [v for v in r.as_dict().values() if isinstance(v, float)]
    assert not any(math.isnan(v) or math.isinf(v) for v in values)
    assert r.Rx == r.Ry == r.Rz == 0.0
    assert r.Sx_min == r.Sy_min == 0.0
    assert r.cx_max == 2.0


def test_tiny_area_skips_radii_of_gyration():
    mesh = Mesh2D([(0, 0), (1e-6, 0), (0, 2e-6)], [0, 1, 2])
    r = derive_properties(calculate(mesh), mesh)
    assert r.area == pytest.approx(1e-12)
    assert r.Rx == 0.0 and r.Ry == 0.0


def test_thin_sliver_away_from_origin_does_not_raise():
    h = 1e-9
    mesh = Mesh2D([(0, 3.7), (1, 3.7), (1, 3.7 + h), (0, 3.7 + h)], [0, 1, 2, 0, 2, 3])
    base = calculate(mesh)
    assert base.area == pytest.approx(h)

    r = derive_properties(base, mesh)

    assert r.Rx >= 0.0 and r.Rz >= 0.0
    assert r.Rx == pytest.approx(0.0, abs=1e-6)
    assert r.Ry == pytest.approx(math.sqrt(1 / 12))
    assert not any(math.isnan(v) for v in r.as_dict().values() if isinstance(v, float))


def test_clockwise_square_keeps_positive_inertia():
    cw = Mesh2D([(0, 0), (0, 1), (1, 1), (1, 0)], [0, 1, 2, 0, 2, 3])
    r = derive_properties(calculate(cw), cw)
    assert r.area == pytest.approx(1.0)
    assert r.Ix == pytest.approx(1 / 12)
    assert r.Ixx_origin == pytest.approx(1 / 3)


def test_collect_polygons_is_public():
    assert len(collect_polygons(box(0, 0, 1, 1).union(box(2, 0, 3, 1)))) == 2
    assert collect_polygons(None) == []


def test_results_are_immutable(unit_square):
    r = derive_properties(calculate(unit_square), unit_square)
    with pytest.raises(AttributeError):
        r.area = 2.0


# ------------------------------------------------------------
# Outline and perimeter
# ------------------------------------------------------------

def test_outline_of_unit_square(unit_square):
    outline = face_outline(unit_square)
    assert outline.area == pytest.approx(1.0)
    assert outline.length == pytest.approx(4.0)


def test_outline_of_empty_mesh():
    assert face_outline(Mesh2D([], [])).is_empty


def test_perimeter_includes_holes():
    g = box(0, 0, 3, 3).difference(box(1, 1, 2, 2))
    r = analyze_mesh(Mesh3D.from_facets(polygon_facets(g)))
    assert r.area == pytest.approx(8.0)
    assert r.perimeter == pytest.approx(12.0 + 4.0)


# ------------------------------------------------------------
# Pipeline
# ------------------------------------------------------------

def test_from_facets_builds_sequential_indices():
    facets = [0, 0, 0, 1, 0, 0, 0, 1, 0, 1, 0, 0, 1, 1, 0, 0, 1, 0, 7]
    mesh = Mesh3D.from_facets(facets)
    assert mesh.n_vertices == 6
    assert mesh.indices.tolist() == [[0, 1, 2], [3, 4, 5]]


@pytest.mark.parametrize("facets", [[], [0.0] * 5, [0, 0, 0, 1, 0, 0, 0, 1, 0]])
def test_from_facets_without_usable_geometry(facets, caplog):
    with caplog.at_level(logging.WARNING, logger="facemoments"):
        mesh = Mesh3D.from_facets(facets)
    assert mesh.n_triangles == 0
    assert "no usable geometry" in caplog.text


def test_analyze_mesh_of_empty_mesh():
    r = analyze_mesh(Mesh3D.empty(), face_type="Planar Face")
    assert r == FaceAnalysisResult(face_type="Planar Face")


def test_analyze_mesh_rectangle_at_height():
    mesh = Mesh3D.from_facets(polygon_facets(box(2, 1, 6, 3), z=4.0))
    r = analyze_mesh(mesh)
    assert r.area == pytest.approx(8.0)
    assert r.Ix == pytest.approx(4 * 2**3 / 12)
    assert r.Iy == pytest.approx(2 * 4**3 / 12)
    assert r.perimeter == pytest.approx(12.0)
    # origin is the first facet vertex, so the centroid is relative to it
    first = mesh.vertices[0]
    assert (r.Cx, r.Cy) == pytest.approx((4 - first[0], 2 - first[1]))


def test_analyze_face_uses_provider():
    facets = polygon_facets(box(0, 0, 1, 1))
    provider = FakeProvider({"top": (facets, "AD_PLANE")})

    r = analyze_face(provider, "top")

    assert provider.tolerances == [DEFAULT_TOLERANCE]
    assert r.face_type == "Planar Face"
    assert r.area == pytest.approx(1.0)
    assert r.perimeter == pytest.approx(4.0)


def test_analyze_face_with_no_geometry_returns_zero_result():
    provider = FakeProvider({"f": ([1.0, 2.0, 3.0], "cylinder")})
    r = analyze_face(provider, "f", tolerance=0.01)
    assert r == FaceAnalysisResult(face_type="Cylindrical Face")
    assert provider.tolerances == [0.01]


@pytest.mark.parametrize("tol", [0.0, -1.0])
def test_analyze_face_rejects_bad_tolerance(tol):
    provider = FakeProvider({"f": (polygon_facets(box(0, 0, 1, 1)), "plane")})
    with pytest.raises(ValueError):
        analyze_face(provider, "f", tolerance=tol)


def test_analyze_faces_names_faces_in_order():
    provider = FakeProvider({
        "a": (polygon_facets(box(0, 0, 1, 1)), "plane"),
        "b": (np.zeros(0), "torus"),
        "c": (polygon_facets(box(0, 0, 2, 1)), "something else"),
    })
    out = analyze_faces(provider, ["a", "b", "c"])
    assert [name for name, _ in out] == ["Planar Face 1", "Toroidal Face 2", "Face 3"]
    assert out[2][1].area == pytest.approx(2.0)


@pytest.mark.parametrize("raw, label", [
    ("plane", "Planar Face"),
    ("AD_CYLINDER", "Cylindrical Face"),
    ("Cone", "Conical Face"),
    ("sphere", "Spherical Face"),
    ("torus", "Toroidal Face"),
    ("B-Spline", "B-Spline Surface"),
    ("bsurf", "B-Spline Surface"),
    ("unknown", "Face"),
    (None, "Face"),
])
def test_face_type_label(raw, label):
    assert face_type_label(raw) == label


def test_polygon_facets_rejects_non_polygons():
    from shapely.geometry import LineString
    with pytest.raises(TypeError):
        polygon_facets(LineString([(0, 0), (1, 1)]))


def test_polygon_facets_are_counter_clockwise(l_polygon):
    tris = polygon_facets(l_polygon).reshape(-1, 3, 3)
    a = tris[:, 1] - tris[:, 0]
    b = tris[:, 2] - tris[:, 0]
    assert (a[:, 0] * b[:, 1] - a[:, 1] * b[:, 0] > 0).all()
