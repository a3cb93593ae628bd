# facemoments.py
"""
facemoments - Area moments of inertia of triangulated planar faces.

Pipeline:
    facet soup (3D) -> normal from first triangle -> projection onto the
    face plane (2D) -> triangle integration -> derived section properties

Local 2D coordinate system:
    Origin (0, 0) = first vertex of the mesh
    +Z = face normal (right-hand rule on the first triangle)
    +X = global Y x normal (global X fallback when the normal is close to Y)
    +Y = normal x X

Example:
    >>> from shapely.geometry import box
    >>> from facemoments import Mesh3D, analyze_mesh, polygon_facets
    >>> mesh = Mesh3D.from_facets(polygon_facets(box(0, 0, 2, 1)))
    >>> r = analyze_mesh(mesh, face_type="Planar Face")
    >>> print(f"Area: {r.area:.3f}")
    Area: 2.000

Degenerate input (empty mesh, zero triangles, net-zero signed area) never
raises: it yields an all-zero result.

Dependencies: numpy, shapely
"""
from __future__ import annotations

import logging
import math
import sys
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import numpy as np
import shapely
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

__all__ = [
    "Vec3", "Mesh3D", "Mesh2D", "AreaMomentsResult", "FaceAnalysisResult",
    "MeshProvider", "calculate_normal", "project_to_2d", "calculate",
    "derive_properties", "face_outline", "face_type_label", "analyze_mesh",
    "analyze_face", "analyze_faces", "collect_polygons", "plane_basis", "polygon_facets",
    "setup_logging",
    "DEFAULT_TOLERANCE",
]

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.001   # tessellation deviation, model length units
NORMALIZE_EPS = 1e-10
AREA_EPS = 1e-15
DERIVED_EPS = 1e-10
BASIS_SWITCH = 0.9          # |z . globalY| at which the X axis comes from global X


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure the 'facemoments' logger for scripts and examples.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to also write the log to.
    """
    log = logging.getLogger("facemoments")
    log.setLevel(level)

    if log.hasHandlers():
        log.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    log.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)


# ============================================================
# VALUE TYPES
# ============================================================

@dataclass(frozen=True)
class Vec3:
    """A point or direction in 3D space."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> Vec3:
        """
        Unit vector in the same direction.

        Returns the zero vector when the length is below 1e-10; callers must
        read that as "no direction", not as a unit vector.
        """
        n = self.length()
        if n < NORMALIZE_EPS:
            return Vec3(0.0, 0.0, 0.0)
        return Vec3(self.x / n, self.y / n, self.z / n)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


def _as_indices(indices: Any) -> np.ndarray:
    idx = np.asarray(indices, dtype=np.int64).ravel()
    # triangle count = len // 3; a trailing partial triple is ignored
    idx = idx[: idx.size - idx.size % 3]
    return np.ascontiguousarray(idx.reshape(-1, 3))


def _as_coords(vertices: Any, dim: int) -> np.ndarray:
    arr = np.asarray(vertices, dtype=np.float64)
    if arr.size % dim != 0:
        raise ValueError(
            f"Vertex data must hold {dim} coordinates per vertex, got {arr.size} values."
        )
    return np.ascontiguousarray(arr.reshape(-1, dim))


@dataclass(frozen=True)
class Mesh3D:
    """
    Triangulated face in model space.

    vertices: (N,3) float64
    indices:  (M,3) int64, one row per triangle

    Index range is not checked.
    """
    vertices: np.ndarray
    indices: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "vertices", _as_coords(self.vertices, 3))
        object.__setattr__(self, "indices", _as_indices(self.indices))

    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_triangles(self) -> int:
        return int(self.indices.shape[0])

    @classmethod
    def empty(cls) -> Mesh3D:
        return cls(np.zeros((0, 3)), np.zeros((0, 3), dtype=np.int64))

    @classmethod
    def from_facets(cls, data: Sequence[float]) -> Mesh3D:
        """
        Build a mesh from unindexed facet data.

        Args:
            data: Flat triangle soup, 9 values per triangle
                  (x0, y0, z0, x1, y1, z1, x2, y2, z2, ...)

        Returns:
            Mesh3D with sequential indices 0..3n. Fewer than 10 values or
            no whole triangle gives an empty mesh.
        """
        arr = np.asarray(data, dtype=np.float64).ravel()
        n_tri = arr.size // 9
        if arr.size < 10 or n_tri == 0:
            logger.warning("Facet data has no usable geometry (%d values).", arr.size)
            return cls.empty()
        verts = arr[: n_tri * 9].reshape(-1, 3)
        return cls(verts, np.arange(n_tri * 3, dtype=np.int64))


@dataclass(frozen=True)
class Mesh2D:
    """
    Face triangulation in local plane coordinates.

    vertices: (N,2) float64, one per 3D vertex in the same order
    indices:  (M,3) int64
    """
    vertices: np.ndarray
    indices: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "vertices", _as_coords(self.vertices, 2))
        object.__setattr__(self, "indices", _as_indices(self.indices))

    @property
    def n_triangles(self) -> int:
        return int(self.indices.shape[0])


@dataclass(frozen=True)
class AreaMomentsResult:
    """
    Centroidal properties of a planar region.

    Ix, Iy, Ixy are about axes through the centroid parallel to the local
    X/Y axes. theta is the angle (radians) from +X to the principal axis.
    """
    area: float = 0.0
    Cx: float = 0.0
    Cy: float = 0.0
    Ix: float = 0.0
    Iy: float = 0.0
    Ixy: float = 0.0
    Imin: float = 0.0
    Imax: float = 0.0
    theta: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.area == 0.0


@dataclass(frozen=True)
class FaceAnalysisResult(AreaMomentsResult):
    """Centroidal result plus origin-referenced and derived properties."""
    perimeter: float = 0.0
    Ixx_origin: float = 0.0
    Iyy_origin: float = 0.0
    Ixy_origin: float = 0.0
    J_origin: float = 0.0
    J_centroid: float = 0.0
    Rx: float = 0.0
    Ry: float = 0.0
    cx_max: float = 0.0
    cy_max: float = 0.0
    Sx_min: float = 0.0
    Sy_min: float = 0.0
    face_type: str = "Face"

    @property
    def theta_deg(self) -> float:
        return math.degrees(self.theta)

    @property
    def Qx(self) -> float:
        """First moment of area about the local X axis."""
        return self.area * self.Cy

    @property
    def Qy(self) -> float:
        """First moment of area about the local Y axis."""
        return self.area * self.Cx

    @property
    def Rz(self) -> float:
        """Polar radius of gyration about the centroid."""
        if self.area > DERIVED_EPS:
            return math.sqrt(max(self.J_centroid, 0.0) / self.area)
        return 0.0

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d.update(theta_deg=self.theta_deg, Qx=self.Qx, Qy=self.Qy, Rz=self.Rz)
        return d


class MeshProvider(Protocol):
    """Source of tessellated face geometry."""

    def facet_data(self, face: Any, tolerance: float) -> Sequence[float]:
        """Flat triangle soup of the face, 9 values per triangle."""
        ...

    def surface_type(self, face: Any) -> str:
        """Surface type name of the face (e.g. 'plane', 'cylinder')."""
        ...


# ============================================================
# PLANE AND PROJECTION
# ============================================================

_GLOBAL_X = Vec3(1.0, 0.0, 0.0)
_GLOBAL_Y = Vec3(0.0, 1.0, 0.0)


def calculate_normal(mesh: Mesh3D) -> Vec3:
    """
    Face normal from the first triangle (right-hand rule).

    The mesh is assumed planar and consistently wound; only the first
    triangle is looked at.

    Returns:
        Unit normal, or (0, 0, 1) when the mesh has fewer than 3 indices or
        fewer than 9 coordinate values. A zero-area first triangle gives the
        zero vector.
    """
    if mesh.indices.size < 3 or mesh.vertices.size < 9:
        return Vec3(0.0, 0.0, 1.0)

    i0, i1, i2 = mesh.indices[0]
    v0 = Vec3(*mesh.vertices[i0])
    v1 = Vec3(*mesh.vertices[i1])
    v2 = Vec3(*mesh.vertices[i2])

    return (v1 - v0).cross(v2 - v0).normalize()


def plane_basis(normal: Vec3) -> Tuple[Vec3, Vec3, Vec3]:
    """Right-handed (x, y, z) axes of the plane with the given normal."""
    z_axis = normal.normalize()
    if abs(z_axis.dot(_GLOBAL_Y)) < BASIS_SWITCH:
        x_axis = _GLOBAL_Y.cross(z_axis).normalize()
    else:
        x_axis = z_axis.cross(_GLOBAL_X).normalize()
    y_axis = z_axis.cross(x_axis).normalize()
    return x_axis, y_axis, z_axis


def project_to_2d(mesh: Mesh3D, normal: Vec3, origin: Vec3) -> Mesh2D:
    """
    Project a 3D mesh onto its plane.

    Args:
        mesh:   3D mesh
        normal: Plane normal (need not be unit length)
        origin: Point that maps to (0, 0)

    Returns:
        Mesh2D with one (x, y) per input vertex and the same indices.
    """
    if mesh.vertices.size == 0:
        return Mesh2D(np.zeros((0, 2)), mesh.indices)

    x_axis, y_axis, _ = plane_basis(normal)
    p = mesh.vertices - origin.as_array()
    xy = np.column_stack((p @ x_axis.as_array(), p @ y_axis.as_array()))
    return Mesh2D(xy, mesh.indices)


# ============================================================
# TRIANGLE INTEGRATION
# ============================================================
# Signed triangle areas keep the sign of the winding, so the sums
# are only valid when every triangle is wound the same way.
# ============================================================

def calculate(mesh: Mesh2D) -> AreaMomentsResult:
    """
    Integrate area, centroid and second moments over a 2D triangulation.

    Returns:
        AreaMomentsResult about centroidal axes. All zero when the mesh is
        empty or the signed areas cancel (|sum| < 1e-15).
    """
    if mesh.vertices.size == 0 or mesh.indices.size == 0:
        return AreaMomentsResult()

    tri = mesh.vertices[mesh.indices]  # (M, 3, 2)
    x1, y1 = tri[:, 0, 0], tri[:, 0, 1]
    x2, y2 = tri[:, 1, 0], tri[:, 1, 1]
    x3, y3 = tri[:, 2, 0], tri[:, 2, 1]

    # Pass 1: area and centroid
    a = 0.5 * ((x2 - x1) * (y3 - y1) - (x3 - x1) * (y2 - y1))
    A_signed = float(np.sum(a))
    if abs(A_signed) < AREA_EPS:
        logger.debug("Signed area %.3e cancels over %d triangles.", A_signed, mesh.n_triangles)
        return AreaMomentsResult()

    area = abs(A_signed)
    Cx = float(np.sum(a * (x1 + x2 + x3) / 3.0)) / A_signed
    Cy = float(np.sum(a * (y1 + y2 + y3) / 3.0)) / A_signed

    # Pass 2: moments about the local origin
    Ix_0 = float(np.sum(a / 6.0 * (y1**2 + y2**2 + y3**2 + y1 * y2 + y2 * y3 + y3 * y1)))
    Iy_0 = float(np.sum(a / 6.0 * (x1**2 + x2**2 + x3**2 + x1 * x2 + x2 * x3 + x3 * x1)))
    Ixy_0 = float(np.sum(a / 12.0 * (
        x1 * (2 * y1 + y2 + y3) + x2 * (y1 + 2 * y2 + y3) + x3 * (y1 + y2 + 2 * y3)
    )))

    if A_signed < 0:
        # clockwise triangulation: integrals carry the winding sign
        Ix_0, Iy_0, Ixy_0 = -Ix_0, -Iy_0, -Ixy_0

    # Transfer to centroid (parallel axis theorem)
    Ix = Ix_0 - area * Cy**2
    Iy = Iy_0 - area * Cx**2
    Ixy = Ixy_0 - area * Cx * Cy

    # Principal moments
    I_avg = (Ix + Iy) / 2.0
    I_diff = (Ix - Iy) / 2.0
    R = math.sqrt(I_diff**2 + Ixy**2)

    if abs(Ixy) < AREA_EPS and abs(I_diff) < AREA_EPS:
        theta = 0.0
    else:
        theta = 0.5 * math.atan2(-2.0 * Ixy, Ix - Iy)

    return AreaMomentsResult(
        area=area,
        Cx=Cx,
        Cy=Cy,
        Ix=Ix,
        Iy=Iy,
        Ixy=Ixy,
        Imin=I_avg - R,
        Imax=I_avg + R,
        theta=theta
    )


def derive_properties(
    result: AreaMomentsResult,
    mesh: Mesh2D,
    *,
    perimeter: float = 0.0,
    face_type: str = "Face"
) -> FaceAnalysisResult:
    """
    Derive origin moments, polar moments, radii of gyration and section moduli.

    Args:
        result:    Centroidal result from calculate()
        mesh:      The 2D mesh the result was computed from
        perimeter: Boundary length of the face
        face_type: Descriptive label carried through to the output

    Returns:
        FaceAnalysisResult. Divisions by an area or fiber distance below
        1e-10 are skipped and leave the field at zero.
    """
    A, Cx, Cy = result.area, result.Cx, result.Cy

    Ixx_origin = result.Ix + A * Cy**2
    Iyy_origin = result.Iy + A * Cx**2
    Ixy_origin = result.Ixy + A * Cx * Cy

    cx_max = 0.0
    cy_max = 0.0
    if mesh.vertices.size:
        cx_max = float(np.max(np.abs(mesh.vertices[:, 0] - Cx)))
        cy_max = float(np.max(np.abs(mesh.vertices[:, 1] - Cy)))

    Rx = Ry = 0.0
    if A > DERIVED_EPS:
        Rx = math.sqrt(max(result.Ix, 0.0) / A)
        Ry = math.sqrt(max(result.Iy, 0.0) / A)

    Sx_min = result.Ix / cy_max if cy_max > DERIVED_EPS else 0.0
    Sy_min = result.Iy / cx_max if cx_max > DERIVED_EPS else 0.0

    return FaceAnalysisResult(
        **{f.name: getattr(result, f.name) for f in fields(AreaMomentsResult)},
        perimeter=perimeter,
        Ixx_origin=Ixx_origin,
        Iyy_origin=Iyy_origin,
        Ixy_origin=Ixy_origin,
        J_origin=Ixx_origin + Iyy_origin,
        J_centroid=result.Ix + result.Iy,
        Rx=Rx,
        Ry=Ry,
        cx_max=cx_max,
        cy_max=cy_max,
        Sx_min=Sx_min,
        Sy_min=Sy_min,
        face_type=face_type
    )


# ============================================================
# OUTLINE AND PERIMETER
# ============================================================

def collect_polygons(g: BaseGeometry) -> List[Polygon]:
    """Return a list of Polygon objects from a geometry."""
    if g is None or g.is_empty:
        return []
    if isinstance(g, Polygon):
        return [g]
    if isinstance(g, MultiPolygon):
        return list(g.geoms)
    if isinstance(g, GeometryCollection):
        return [p for p in g.geoms if isinstance(p, Polygon)]
    return []


def face_outline(mesh: Mesh2D) -> BaseGeometry:
    """
    Union of the mesh triangles as a shapely geometry.

    Zero-area triangles are skipped. Returns an empty GeometryCollection for
    an empty mesh.
    """
    if mesh.vertices.size == 0 or mesh.indices.size == 0:
        return GeometryCollection()

    tris = [Polygon(t) for t in mesh.vertices[mesh.indices]]
    tris = [t for t in tris if t.area > AREA_EPS]
    if not tris:
        return GeometryCollection()
    return unary_union(tris)


def _perimeter(mesh: Mesh2D) -> float:
    try:
        outline = face_outline(mesh)
    except GEOSException as e:
        logger.warning("Could not build face outline, perimeter set to 0. Error: %s", e)
        return 0.0
    return float(sum(p.length for p in collect_polygons(outline)))


# ============================================================
# PIPELINE
# ============================================================

# Keys are normalized (lowercase, spaces/hyphens -> underscores) surface type
# names as reported by a mesh provider.
_FACE_TYPE_MAP: Dict[str, str] = {
    "plane": "Planar Face",
    "planar": "Planar Face",
    "cylinder": "Cylindrical Face",
    "cylindrical": "Cylindrical Face",
    "cone": "Conical Face",
    "conical": "Conical Face",
    "sphere": "Spherical Face",
    "spherical": "Spherical Face",
    "torus": "Toroidal Face",
    "toroidal": "Toroidal Face",
    "bsurf": "B-Spline Surface",
    "bspline": "B-Spline Surface",
    "b_spline": "B-Spline Surface",
}


def face_type_label(surface_type: Optional[str]) -> str:
    """Display label for a provider surface type name ('Face' if unknown)."""
    key = str(surface_type or "").strip().lower().replace("-", "_").replace(" ", "_")
    for prefix in ("ad_", "geometrytype_"):
        if key.startswith(prefix):
            key = key[len(prefix):]
    return _FACE_TYPE_MAP.get(key, "Face")


def analyze_mesh(mesh: Mesh3D, *, face_type: str = "Face") -> FaceAnalysisResult:
    """
    Full analysis of a triangulated planar face.

    The plane origin is the first vertex; the normal comes from the first
    triangle.
    """
    if mesh.n_vertices == 0 or mesh.n_triangles == 0:
        return FaceAnalysisResult(face_type=face_type)

    normal = calculate_normal(mesh)
    origin = Vec3(*mesh.vertices[0])
    logger.debug(
        "Analyzing %s: %d triangles, normal (%.4f, %.4f, %.4f)",
        face_type, mesh.n_triangles, normal.x, normal.y, normal.z
    )

    mesh2d = project_to_2d(mesh, normal, origin)
    result = calculate(mesh2d)
    perimeter = _perimeter(mesh2d) if not result.is_degenerate else 0.0

    return derive_properties(result, mesh2d, perimeter=perimeter, face_type=face_type)


def analyze_face(
    provider: MeshProvider,
    face: Any,
    *,
    tolerance: float = DEFAULT_TOLERANCE
) -> FaceAnalysisResult:
    """
    Tessellate a face through its provider and analyze it.

    Args:
        provider:  Mesh provider
        face:      Face handle understood by the provider
        tolerance: Tessellation deviation (> 0)

    Raises:
        ValueError: If tolerance is not positive
    """
    if not tolerance > 0:
        raise ValueError(f"tolerance must be positive: tolerance={tolerance}")

    label = face_type_label(provider.surface_type(face))
    mesh = Mesh3D.from_facets(provider.facet_data(face, tolerance))
    return analyze_mesh(mesh, face_type=label)


def analyze_faces(
    provider: MeshProvider,
    faces: Iterable[Any],
    *,
    tolerance: float = DEFAULT_TOLERANCE
) -> List[Tuple[str, FaceAnalysisResult]]:
    """
    Analyze several faces.

    Returns:
        List of (name, result); names are "<face type> <n>" with n from 1.
    """
    out = []
    for n, face in enumerate(faces, start=1):
        r = analyze_face(provider, face, tolerance=tolerance)
        out.append((f"{r.face_type} {n}", r))
    return out


# ============================================================
# POLYGON FACETS
# ============================================================

def polygon_facets(g: BaseGeometry, z: float = 0.0) -> np.ndarray:
    """
    Triangulate a shapely Polygon/MultiPolygon into facet data.

    Holes are respected (constrained Delaunay). Every triangle is wound
    counter-clockwise.

    Args:
        g: Shapely geometry (Polygon or MultiPolygon)
        z: Height of the XY plane the facets lie in

    Returns:
        Flat float array, 9 values per triangle.

    Raises:
        TypeError: If the geometry contains no polygons
    """
    polys = collect_polygons(g)
    if not polys:
        raise TypeError(f"Expected Polygon or MultiPolygon, got {type(g).__name__}")

    rows = []
    for p in polys:
        tris = shapely.constrained_delaunay_triangles(p)
        for t in collect_polygons(tris):
            if t.area <= AREA_EPS:
                continue
            t = orient(t, 1.0)
            xy = np.asarray(t.exterior.coords)[:3]
            rows.append(np.column_stack((xy, np.full(3, z))).ravel())

    if not rows:
        return np.zeros(0)
    return np.concatenate(rows)
