"""
Intersection of the top faces of two slab-like objects.

``SlabIntersector.execute`` ties the pipeline together:

1. the top-face loops of both objects are extracted and quantized;
2. the eave loops (subject) are intersected with the boundary loops
   (clip), each filled with the even-odd rule;
3. every result loop is turned back into a closed sequence of straight
   segments in the original coordinate space.

The computation is a pure function of its two inputs.  No state is
kept between calls, so one intersector may be shared freely.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Tuple

from .clipping import intersect_polygon_sets
from .host_geometry import NORMAL_TOLERANCE, UP, GeometrySource
from .loops import extract_top_loops
from .quantize import DEFAULT_QUANTIZER, Quantizer
from .reconstruct import BoundaryCurveSequence, reconstruct_loop

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlabIntersector:
    """Compute the common top-face region of two objects.

    Attributes:
        quantizer: Lattice conversion shared by extraction and
            reconstruction.
        up: Direction a face normal must match to count as a top face.
        tol: Tolerance for that comparison.
    """

    quantizer: Quantizer = DEFAULT_QUANTIZER
    up: Tuple[float, float, float] = UP
    tol: float = NORMAL_TOLERANCE

    def execute(self, eave: GeometrySource, boundary: GeometrySource) -> List[BoundaryCurveSequence]:
        """Return one closed boundary curve sequence per intersection loop.

        Args:
            eave: Object whose top face is the subject operand.
            boundary: Object whose top face is the clip operand.

        Returns:
            The sequences in the order the clip engine produced the
            loops; an empty list when the top faces do not overlap or
            either object has no top face.
        """
        start_time = time.perf_counter()
        subj = extract_top_loops(eave, self.quantizer, self.up, self.tol)
        clip = extract_top_loops(boundary, self.quantizer, self.up, self.tol)

        intersection = intersect_polygon_sets(subj, clip)

        results: List[BoundaryCurveSequence] = []
        if intersection.is_empty:
            logger.info(
                "execute: no intersection (subject loops=%d, clip loops=%d)",
                len(subj),
                len(clip),
            )
            return results
        for poly in intersection:
            curves = reconstruct_loop(poly, self.quantizer)
            if curves is not None:
                results.append(curves)
        logger.info(
            "execute: %d boundary loop(s) from subject=%d clip=%d in %.3f s",
            len(results),
            len(subj),
            len(clip),
            time.perf_counter() - start_time,
        )
        return results


def intersect_slabs(eave: GeometrySource, boundary: GeometrySource) -> List[BoundaryCurveSequence]:
    """Intersect two objects with the default lattice and up direction."""
    return SlabIntersector().execute(eave, boundary)
