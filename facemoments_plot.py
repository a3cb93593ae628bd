# facemoments_plot.py
# flake8: noqa E501
"""
2D plotting helpers for projected faces.

Provides Matplotlib wrappers for drawing a face in its local plane
coordinates and standard annotations:
- filled outline and triangulation (plot_face)
- centroid (annotate_centroid)
- principal axes (annotate_principal_axes)
- properties text box (plot_face_with_props)

Coordinate system: the local 2D system of facemoments.project_to_2d().

Dependencies: matplotlib, numpy, shapely, facemoments.
"""

# Note: numerical properties are computed in facemoments.analyze_mesh().
import math
from typing import Any, Dict, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from facemoments import (
    FaceAnalysisResult, Mesh2D, Mesh3D, analyze_mesh, calculate_normal,
    collect_polygons, face_outline, project_to_2d, Vec3,
)


DEFAULT_TEXT_KWARGS: Dict[str, Any] = dict(
    fontsize=9,
    ha='left',
    va='bottom',
    color="black"
)
DEFAULT_CENTROID_MARKER_KWARGS: Dict[str, Any] = dict(
    marker='+',
    color='red',
    s=50,
    zorder=10,
    linewidths=1.0
)
DEFAULT_AXIS_KWARGS: Dict[str, Any] = dict(
    color="darkred",
    linestyle="-.",
    linewidth=0.8,
    zorder=9
)
DEFAULT_TRIANGLE_KWARGS: Dict[str, Any] = dict(
    color="gray",
    linewidth=0.4,
    alpha=0.8
)


def local_mesh(mesh: Mesh3D) -> Mesh2D:
    """Project a 3D mesh with the same plane and origin analyze_mesh() uses."""
    if mesh.n_vertices == 0:
        return project_to_2d(mesh, Vec3(0.0, 0.0, 1.0), Vec3())
    return project_to_2d(mesh, calculate_normal(mesh), Vec3(*mesh.vertices[0]))


def plot_face(
    mesh: Mesh2D,
    ax: Optional[Axes] = None,
    *,
    face: str = "lightblue",
    edge: str = "k",
    linewidth: float = 1.0,
    show_triangles: bool = True,
    triangle_kwargs: Optional[Dict[str, Any]] = None
) -> Axes:
    """
    Plot a projected face.

    Args:
        mesh:           2D mesh (local plane coordinates)
        ax:             Matplotlib axes (created if None)
        face:           Fill color
        edge:           Outline color
        linewidth:      Outline width
        show_triangles: Draw the triangle edges over the fill
        triangle_kwargs: Overrides for the triangle edge style

    Returns:
        Matplotlib axes object
    """
    if ax is None:
        _, ax = plt.subplots()
        ax.axis('off')

    if mesh.vertices.size == 0 or mesh.n_triangles == 0:
        return ax

    for p in collect_polygons(face_outline(mesh)):
        ax.fill(*p.exterior.xy, color=face, edgecolor=edge, linewidth=linewidth)
        for ring in p.interiors:
            ax.fill(*ring.xy, color="white", edgecolor=edge, linewidth=linewidth)

    if show_triangles:
        kw = DEFAULT_TRIANGLE_KWARGS.copy()
        kw.update(triangle_kwargs or {})
        ax.triplot(mesh.vertices[:, 0], mesh.vertices[:, 1], mesh.indices, **kw)

    ax.set_aspect('equal')
    return ax


def annotate_centroid(
    ax: Axes,
    result: FaceAnalysisResult,
    *,
    show_text: bool = True,
    text_fmt: str = '({Cx:.3f}, {Cy:.3f})',
    marker_kwargs: Optional[Dict[str, Any]] = None,
    text_offset: Tuple[float, float] = (5, 5)
) -> None:
    """Mark the centroid with a + marker and optional coordinates label."""
    kw = DEFAULT_CENTROID_MARKER_KWARGS.copy()
    kw.update(marker_kwargs or {})
    ax.scatter([result.Cx], [result.Cy], **kw)

    if show_text:
        ax.annotate(
            text_fmt.format(Cx=result.Cx, Cy=result.Cy),
            xy=(result.Cx, result.Cy),
            xytext=text_offset,
            textcoords='offset points',
            **DEFAULT_TEXT_KWARGS
        )


def annotate_principal_axes(
    ax: Axes,
    result: FaceAnalysisResult,
    *,
    length: Optional[float] = None,
    axis_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """
    Draw both principal axes through the centroid.

    Args:
        ax:     Matplotlib axes
        result: Face result (Cx, Cy, theta)
        length: Half-length of the drawn axes; defaults to the larger
                extreme-fiber distance
    """
    half = length if length is not None else max(result.cx_max, result.cy_max)
    if half <= 0:
        return

    kw = DEFAULT_AXIS_KWARGS.copy()
    kw.update(axis_kwargs or {})

    for angle in (result.theta, result.theta + math.pi / 2):
        dx = half * math.cos(angle)
        dy = half * math.sin(angle)
        ax.plot([result.Cx - dx, result.Cx + dx], [result.Cy - dy, result.Cy + dy], **kw)


def plot_face_with_props(
    mesh: Mesh3D,
    result: Optional[FaceAnalysisResult] = None,
    *,
    title: Optional[str] = None,
    show_centroid: bool = True,
    show_axes: bool = True,
    show_props_text: bool = True,
    figsize: Tuple[float, float] = (8, 8)
) -> Tuple[Figure, Axes]:
    """
    Plot a face in its local plane with properties annotation.

    Args:
        mesh:            3D mesh of the face
        result:          Result from analyze_mesh() or None to compute it
        title:           Plot title (defaults to the face type)
        show_centroid:   Mark centroid
        show_axes:       Draw principal axes
        show_props_text: Show properties text box
        figsize:         Figure size

    Returns:
        (Figure, Axes) tuple
    """
    if result is None:
        result = analyze_mesh(mesh)

    fig, ax = plt.subplots(figsize=figsize)
    ax.axis('off')
    plot_face(local_mesh(mesh), ax=ax)

    ax.set_title(title or result.face_type, fontsize=12, weight="bold")

    if result.is_degenerate:
        return fig, ax

    if show_centroid:
        annotate_centroid(ax, result)

    if show_axes:
        annotate_principal_axes(ax, result)

    if show_props_text:
        props_text = (
            f"A = {result.area:,.4f}\n"
            f"Ix = {result.Ix:,.4f}\n"
            f"Iy = {result.Iy:,.4f}\n"
            f"Ixy = {result.Ixy:,.4f}\n"
            f"I1 = {result.Imin:,.4f}\n"
            f"I2 = {result.Imax:,.4f}\n"
            f"theta = {result.theta_deg:.2f} deg"
        )
        ax.text(
            0.02,
            0.98,
            props_text,
            transform=ax.transAxes,
            fontsize=9,
            verticalalignment="top",
            fontfamily="monospace",
            bbox=dict(boxstyle="round", facecolor="wheat", alpha=0.8)
        )

    return fig, ax


def save_plot(fig: Figure, filename: str, dpi: int = 150) -> None:
    """Save figure to file with sensible defaults."""
    fig.savefig(filename, dpi=dpi, bbox_inches="tight")
