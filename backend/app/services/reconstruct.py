"""
Reconstruction of continuous boundary curves from lattice loops.

Each loop returned by the clip engine becomes a
:class:`BoundaryCurveSequence`: straight segments between consecutive
dequantized points plus a closing segment back to the first point.  No
snapping is applied beyond :meth:`Quantizer.dequantize_point`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .loops import Loop
from .quantize import DEFAULT_QUANTIZER, ContinuousPoint, Quantizer


@dataclass
class LineSegment:
    """Bounded straight line between two continuous points."""

    start: ContinuousPoint
    end: ContinuousPoint


@dataclass
class BoundaryCurveSequence:
    """Closed chain of straight segments, one per intersection loop."""

    segments: List[LineSegment] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def points(self) -> List[ContinuousPoint]:
        """Vertices in traversal order, without the closing repeat."""
        return [seg.start for seg in self.segments]

    def signed_area(self) -> float:
        return polygon_signed_area([(p[0], p[1]) for p in self.points])


def polygon_signed_area(points_uv: Sequence[Tuple[float, float]]) -> float:
    """Signed shoelace area of a closed 2D polygon.

    The polygon is implicitly closed.  The result is positive for
    counter-clockwise rings and negative for clockwise ones.
    """
    if len(points_uv) < 3:
        return 0.0
    pts = np.asarray(points_uv, dtype=float)
    x = pts[:, 0]
    y = pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def total_area(sequences: Iterable[BoundaryCurveSequence]) -> float:
    """Net area enclosed by reconstructed sequences.

    Outer rings are counter-clockwise and holes clockwise, so summing
    the signed areas subtracts the holes.
    """
    return sum(seq.signed_area() for seq in sequences)


def reconstruct_loop(
    loop: Loop,
    quantizer: Quantizer = DEFAULT_QUANTIZER,
) -> Optional[BoundaryCurveSequence]:
    """Build the closed boundary curve sequence for one lattice loop.

    Returns:
        The sequence, or ``None`` when the loop has fewer than two
        distinct points.
    """
    if len(set(loop)) < 2:
        return None
    pts = [quantizer.dequantize_point(q) for q in loop]
    segments = [LineSegment(p, q) for p, q in zip(pts, pts[1:])]
    segments.append(LineSegment(pts[-1], pts[0]))
    return BoundaryCurveSequence(segments=segments)
