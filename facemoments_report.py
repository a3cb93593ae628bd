# facemoments_report.py
"""
Unit scaling and text output for facemoments results.

Results are computed in model length units (taken as cm). A unit system
scales every field by the power of length it carries:

    length         L      (Cx, Cy, perimeter, Rx, Ry, cx_max, cy_max)
    area           L^2
    section moduli L^3    (Sx_min, Sy_min, and the first moments Qx, Qy)
    inertia        L^4    (Ix, Iy, Ixy, Imin, Imax, *_origin, J_*)

Example:
    >>> from facemoments_report import format_report
    >>> text = format_report([("Planar Face 1", result)], units="mm")

Dependencies: numpy
"""
import dataclasses
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import numpy as np

from facemoments import FaceAnalysisResult

__all__ = [
    "UNITS", "unit_factors", "scale_result", "format_result", "format_report",
    "pretty",
]

# name -> (length factor from model units, suffix)
UNITS: Dict[str, Tuple[float, str]] = {
    "cm": (1.0, "cm"),
    "mm": (10.0, "mm"),
    "in": (1.0 / 2.54, "in"),
}

_UNIT_ALIASES: Dict[str, str] = {
    "centimeter": "cm",
    "centimeters": "cm",
    "centimetre": "cm",
    "centimetres": "cm",
    "millimeter": "mm",
    "millimeters": "mm",
    "millimetre": "mm",
    "millimetres": "mm",
    "inch": "in",
    "inches": "in",
}

_LENGTH_FIELDS = ("Cx", "Cy", "perimeter", "Rx", "Ry", "cx_max", "cy_max")
_MODULUS_FIELDS = ("Sx_min", "Sy_min")
_INERTIA_FIELDS = (
    "Ix", "Iy", "Ixy", "Imin", "Imax",
    "Ixx_origin", "Iyy_origin", "Ixy_origin", "J_origin", "J_centroid",
)


def _norm_units(units: str) -> str:
    key = str(units or "cm").strip().lower()
    key = _UNIT_ALIASES.get(key, key)
    if key not in UNITS:
        raise ValueError(f"Unsupported units: {units!r}. Expected one of: {sorted(UNITS)}")
    return key


def unit_factors(units: str = "cm") -> Tuple[float, float, float, float, str]:
    """
    Conversion factors for a unit system.

    Returns:
        (length, area, modulus, inertia, suffix)

    Raises:
        ValueError: If the unit name is unknown
    """
    L, suffix = UNITS[_norm_units(units)]
    return L, L**2, L**3, L**4, suffix


def scale_result(result: FaceAnalysisResult, units: str = "cm") -> FaceAnalysisResult:
    """Return a copy of result with every field expressed in the given units."""
    L, A, S, I, _ = unit_factors(units)
    changes: Dict[str, Any] = {"area": result.area * A}
    changes.update({k: getattr(result, k) * L for k in _LENGTH_FIELDS})
    changes.update({k: getattr(result, k) * S for k in _MODULUS_FIELDS})
    changes.update({k: getattr(result, k) * I for k in _INERTIA_FIELDS})
    return dataclasses.replace(result, **changes)


def format_result(name: str, result: FaceAnalysisResult, units: str = "cm") -> str:
    """
    Format one face result as a text block.

    Values are fixed 6-decimal; the principal angle is in degrees with 2
    decimals.
    """
    r = scale_result(result, units)
    u = unit_factors(units)[4]

    lines = [
        name,
        "-" * len(name),
        "",
        "Basic Properties:",
        f"  Area: {r.area:.6f} {u}^2",
        f"  Centroid: ({r.Cx:.6f}, {r.Cy:.6f}) {u}",
        "",
        "First Moments:",
        f"  Qx: {r.Qx:.6f} {u}^3",
        f"  Qy: {r.Qy:.6f} {u}^3",
        "",
        "Second Moments (about Origin):",
        f"  Ixx: {r.Ixx_origin:.6f} {u}^4",
        f"  Iyy: {r.Iyy_origin:.6f} {u}^4",
        f"  Izz: {r.J_origin:.6f} {u}^4",
        f"  Ixy: {r.Ixy_origin:.6f} {u}^4",
        "",
        "Moments about Centroid:",
        f"  Ix: {r.Ix:.6f} {u}^4",
        f"  Iy: {r.Iy:.6f} {u}^4",
        f"  Iz (polar): {r.J_centroid:.6f} {u}^4",
        f"  Ixy: {r.Ixy:.6f} {u}^4",
        "",
        "Principal Moments:",
        f"  I1 (min): {r.Imin:.6f} {u}^4",
        f"  I2 (max): {r.Imax:.6f} {u}^4",
        f"  Principal Angle: {r.theta_deg:.2f} deg",
        "",
        "Radii of Gyration:",
        f"  Rx: {r.Rx:.6f} {u}",
        f"  Ry: {r.Ry:.6f} {u}",
        f"  Rz: {r.Rz:.6f} {u}",
        "",
        "Section Modulus (Elastic):",
        f"  Sx (Ix/c): {r.Sx_min:.6f} {u}^3",
        f"  Sy (Iy/c): {r.Sy_min:.6f} {u}^3",
        "",
    ]
    return "\n".join(lines) + "\n"


def format_report(items: Iterable[Tuple[str, FaceAnalysisResult]], units: str = "cm") -> str:
    """
    Text export of several face results.

    Args:
        items: (name, result) pairs, e.g. from facemoments.analyze_faces()
        units: "cm", "mm" or "in"
    """
    _norm_units(units)
    parts: List[str] = [
        "Area Moments of Inertia Results\n",
        "================================\n\n",
    ]
    for name, result in items:
        parts.append(format_result(name, result, units))
    return "".join(parts)


def pretty(d: Any, n: int = 6) -> str:
    """
    Format a result for printing, one aligned "key = value" per line.

    Args:
        d: FaceAnalysisResult, AreaMomentsResult or a mapping of values
        n: Number of decimal places
    """
    if dataclasses.is_dataclass(d):
        d = d.as_dict() if hasattr(d, "as_dict") else dataclasses.asdict(d)
    if not isinstance(d, Mapping):
        raise TypeError(f"pretty expects a result or mapping, got {type(d).__name__}")

    float_format = f',.{n}f'
    lines = []

    key_order = ['area', 'perimeter', 'Cx', 'Cy', 'Ix', 'Iy', 'Ixy', 'Imin', 'Imax',
                 'theta_deg', 'J_centroid', 'Rx', 'Ry', 'Sx_min', 'Sy_min']

    def _is_number(value: Any) -> bool:
        return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool)

    for k in key_order:
        if k in d and _is_number(d[k]):
            lines.append(f"{k:<11}= {format(float(d[k]), float_format)}")

    for k, v in d.items():
        if k not in key_order and _is_number(v):
            lines.append(f"{k:<11}= {format(float(v), float_format)}")

    return '\n'.join(lines)
