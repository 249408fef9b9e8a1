"""
Boundary loop extraction from slab-like objects.

The extractor reduces a solid-like object to the closed boundary loops
of its upward-facing planar faces.  Every face loop (the outer boundary
followed by any holes) is tessellated edge by edge, in loop order, and
each point is quantized onto the integer lattice.  All loops of all
qualifying faces are gathered into a single :class:`PolygonSet`, whose
even-odd fill rule makes nested loops behave as holes without any
winding bookkeeping.

Pieces that are not solids are skipped and an object without a
qualifying face simply yields an empty set.  Set the ``INTERSECT_DEBUG``
environment variable to log a line per inspected face and loop.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence

from .host_geometry import (
    NORMAL_TOLERANCE,
    UP,
    FaceKind,
    GeometrySource,
    iter_classified_faces,
)
from .quantize import DEFAULT_QUANTIZER, LatticePoint, Quantizer

logger = logging.getLogger(__name__)

Loop = List[LatticePoint]

EVEN_ODD = "evenodd"


@dataclass
class PolygonSet:
    """Loops of one object interpreted collectively under a fill rule.

    Attributes:
        loops: Implicitly closed rings of lattice points.  Outer
            boundaries and holes are not distinguished.
        fill_rule: Rule resolving which regions are inside.  Only
            ``"evenodd"`` is produced by this package.
    """

    loops: List[Loop] = field(default_factory=list)
    fill_rule: str = EVEN_ODD

    def __len__(self) -> int:
        return len(self.loops)

    def __iter__(self) -> Iterator[Loop]:
        return iter(self.loops)

    @property
    def is_empty(self) -> bool:
        return not self.loops


def extract_top_loops(
    source: GeometrySource,
    quantizer: Quantizer = DEFAULT_QUANTIZER,
    up: Sequence[float] = UP,
    tol: float = NORMAL_TOLERANCE,
) -> PolygonSet:
    """Collect the quantized boundary loops of the top faces of ``source``.

    Args:
        source: Object exposing solid pieces and their faces.
        quantizer: Converts tessellated points onto the lattice.
        up: Reference direction a face normal must match.
        tol: Component-wise tolerance for the normal comparison.

    Returns:
        PolygonSet: Loops in face/loop iteration order.  Loops that
        collapse to fewer than three lattice points are dropped.
    """
    debug = bool(os.getenv("INTERSECT_DEBUG"))
    polys = PolygonSet()
    skipped_pieces = 0
    for kind, face in iter_classified_faces(source, up, tol):
        if kind is FaceKind.NON_SOLID:
            skipped_pieces += 1
            continue
        if kind is not FaceKind.PLANAR_UP:
            continue
        for loop_index, edge_loop in enumerate(face.edge_loops()):
            points = []
            for edge in edge_loop:
                points.extend(edge.tessellate())
            poly = quantizer.quantize_loop(points)
            if debug:
                logger.debug(
                    "extract_top_loops: loop %d edges=%d points=%d lattice=%d",
                    loop_index,
                    len(edge_loop),
                    len(points),
                    len(poly),
                )
            if len(poly) < 3:
                continue
            polys.loops.append(poly)
    if debug:
        logger.debug(
            "extract_top_loops: %d loop(s), %d non-solid piece(s) skipped",
            len(polys),
            skipped_pieces,
        )
    return polys
