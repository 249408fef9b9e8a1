"""
Fixed-precision quantization of planar coordinates.

Polygon boolean operations need exact coordinate comparisons to detect
coincident vertices and edges.  Host geometry arrives as floating point
values in feet, so every point is converted once, at the boundary of the
pipeline, onto an integer millimetre lattice and only converted back
when the final boundary curves are built.

A ``Quantizer`` bundles the two numeric constants involved:

- ``scale`` – lattice units per source length unit (``25.4 * 12``, i.e.
  millimetres per foot, by default).
- ``eps`` – magnitudes below this value (in source units) are snapped
  to exactly zero before rounding.  This keeps floating noise around
  the origin from producing spurious ±1 lattice units.

Rounding is half away from zero: the value is offset by ±0.5 and then
truncated toward zero, so ``quantize(-x) == -quantize(x)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

# Millimetres per foot.
FEET_TO_MM: float = 25.4 * 12

# A source length smaller than this is treated as zero.
ZERO_EPS: float = 1.0e-9

ContinuousPoint = Tuple[float, float, float]
LatticePoint = Tuple[int, int]


@dataclass(frozen=True)
class Quantizer:
    """Convert between continuous coordinates and the integer lattice.

    Attributes:
        scale: Number of lattice units per source length unit.
        eps: Snap-to-zero threshold expressed in source units.
    """

    scale: float = FEET_TO_MM
    eps: float = ZERO_EPS

    def __post_init__(self) -> None:
        if not self.scale > 0.0:
            raise ValueError(f"scale must be positive, got {self.scale!r}")
        if self.eps < 0.0:
            raise ValueError(f"eps must not be negative, got {self.eps!r}")

    @property
    def grain(self) -> float:
        """Size of one lattice unit in source units."""
        return 1.0 / self.scale

    def quantize_value(self, d: float) -> int:
        if 0 < d:
            return 0 if self.eps > d else int(self.scale * d + 0.5)
        return 0 if self.eps > -d else int(self.scale * d - 0.5)

    def dequantize_value(self, n: int) -> float:
        return n / self.scale

    def quantize_point(self, p: Iterable[float]) -> LatticePoint:
        """Return the lattice point for ``p``, dropping any elevation."""
        x, y = tuple(p)[:2]
        return (self.quantize_value(x), self.quantize_value(y))

    def dequantize_point(self, q: LatticePoint) -> ContinuousPoint:
        """Return the continuous point for ``q`` with a zero elevation."""
        return (self.dequantize_value(q[0]), self.dequantize_value(q[1]), 0.0)

    def quantize_loop(self, points: Iterable[Iterable[float]]) -> List[LatticePoint]:
        """Quantize an ordered ring of points.

        Consecutive points that land on the same lattice point are
        merged and a trailing point equal to the first one is dropped,
        since the closing edge of a loop is implicit.
        """
        loop: List[LatticePoint] = []
        for p in points:
            q = self.quantize_point(p)
            if not loop or loop[-1] != q:
                loop.append(q)
        while len(loop) > 1 and loop[-1] == loop[0]:
            loop.pop()
        return loop


DEFAULT_QUANTIZER = Quantizer()
