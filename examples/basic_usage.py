from pathlib import Path
import logging
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import numpy as np
from shapely.geometry import Polygon, box

from facemoments import analyze_faces, polygon_facets, setup_logging
from facemoments_report import format_report, pretty


def i_beam_outline(b: float, h: float, tw: float, tf: float) -> Polygon:
    hb, hh, htw = b / 2, h / 2, tw / 2
    return Polygon([
        (-hb, -hh), (hb, -hh), (hb, -hh + tf), (htw, -hh + tf),
        (htw, hh - tf), (hb, hh - tf), (hb, hh), (-hb, hh),
        (-hb, hh - tf), (-htw, hh - tf), (-htw, -hh + tf), (-hb, -hh + tf),
    ])


class SketchProvider:
    """Serves flat outlines placed on the XZ plane at a given offset."""

    def __init__(self, faces):
        self.faces = faces

    def facet_data(self, face, tolerance):
        outline, offset, _ = self.faces[face]
        pts = polygon_facets(outline).reshape(-1, 3)[:, [0, 2, 1]]
        return (pts + np.asarray(offset)).ravel()

    def surface_type(self, face):
        return self.faces[face][2]


def main() -> None:
    setup_logging(logging.INFO)

    provider = SketchProvider({
        "web": (i_beam_outline(b=20, h=30, tw=0.8, tf=1.2), (5.0, 2.0, 0.0), "plane"),
        "tube": (box(0, 0, 10, 6).difference(box(1, 1, 9, 5)), (0.0, 0.0, 0.0), "plane"),
    })

    results = analyze_faces(provider, ["web", "tube"])
    print(format_report(results, units="mm"))
    for name, r in results:
        print(name)
        print(pretty(r, n=2))
        print()


if __name__ == "__main__":
    main()
