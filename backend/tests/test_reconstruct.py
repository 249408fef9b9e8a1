"""Tests for rebuilding closed segment chains from lattice loops."""

from __future__ import annotations

import sys
from pathlib import Path
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.services.quantize import DEFAULT_QUANTIZER, Quantizer
from app.services.reconstruct import (
    BoundaryCurveSequence,
    LineSegment,
    polygon_signed_area,
    reconstruct_loop,
    total_area,
)


def test_segments_chain_and_close() -> None:
    loop = [(0, 0), (3048, 0), (3048, 3048), (0, 3048)]
    seq = reconstruct_loop(loop)
    assert seq is not None
    assert len(seq) == 4
    for a, b in zip(seq.segments, seq.segments[1:]):
        assert a.end == b.start
    assert seq.segments[-1].end == seq.segments[0].start


def test_endpoints_are_exact_dequantized_points() -> None:
    loop = [(1, 2), (305, 7), (-42, 610)]
    seq = reconstruct_loop(loop)
    assert seq is not None
    assert seq.points == [DEFAULT_QUANTIZER.dequantize_point(q) for q in loop]
    assert all(p[2] == 0.0 for p in seq.points)


def test_two_point_loop_gets_closing_segment() -> None:
    seq = reconstruct_loop([(0, 0), (10, 0)], Quantizer(scale=1.0))
    assert seq is not None
    assert seq.segments == [
        LineSegment((0.0, 0.0, 0.0), (10.0, 0.0, 0.0)),
        LineSegment((10.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
    ]


@pytest.mark.parametrize("loop", [[], [(5, 5)], [(5, 5), (5, 5)]])
def test_degenerate_loops_are_skipped(loop: list[tuple[int, int]]) -> None:
    assert reconstruct_loop(loop) is None


def test_signed_area_follows_orientation() -> None:
    ccw = [(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)]
    assert polygon_signed_area(ccw) == pytest.approx(4.0)
    assert polygon_signed_area(list(reversed(ccw))) == pytest.approx(-4.0)
    assert polygon_signed_area(ccw[:2]) == 0.0


def test_total_area_subtracts_holes() -> None:
    q = Quantizer(scale=1.0)
    outer = reconstruct_loop([(0, 0), (10, 0), (10, 10), (0, 10)], q)
    hole = reconstruct_loop([(4, 4), (4, 6), (6, 6), (6, 4)], q)
    assert outer is not None and hole is not None
    assert total_area([outer, hole]) == pytest.approx(96.0)
    assert total_area([]) == 0.0
    assert BoundaryCurveSequence().points == []
