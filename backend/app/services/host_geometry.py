"""
Host geometry access and top-face classification.

The intersection pipeline never walks a CAD document itself.  Instead it
consumes any object that behaves like a ``GeometrySource``: a collection
of pieces, some of which are solids with faces, each face exposing a
planarity flag, an outward normal and its boundary edge loops.  Edges
know how to tessellate themselves into ordered points.

This module defines that interface, a face classification capability
used to pick out the upward-facing planar faces, and a small pure-Python
implementation of the interface.  The in-memory model is what the JSON
API builds from slab profiles and what the tests use; the Open CASCADE
backed implementation lives in :mod:`occ_geometry`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple

ContinuousPoint = Tuple[float, float, float]

# Component-wise tolerance used when comparing unit normals.
NORMAL_TOLERANCE: float = 1.0e-9

UP: ContinuousPoint = (0.0, 0.0, 1.0)


class EdgeLike(Protocol):
    def tessellate(self) -> List[ContinuousPoint]:
        ...


class FaceLike(Protocol):
    is_planar: bool
    normal: ContinuousPoint

    def edge_loops(self) -> List[List[EdgeLike]]:
        ...


class GeometryPiece(Protocol):
    is_solid: bool

    def faces(self) -> Iterable[FaceLike]:
        ...


class GeometrySource(Protocol):
    def pieces(self) -> Iterable[GeometryPiece]:
        ...


class FaceKind(str, Enum):
    """Classification of a face with respect to an "up" direction."""

    PLANAR_UP = "planar_up"
    PLANAR_OTHER = "planar_other"
    NON_PLANAR = "non_planar"
    NON_SOLID = "non_solid"


def _unit(v: Sequence[float]) -> Optional[ContinuousPoint]:
    length = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    if length == 0.0:
        return None
    return (v[0] / length, v[1] / length, v[2] / length)


def normals_equal(a: Sequence[float], b: Sequence[float], tol: float = NORMAL_TOLERANCE) -> bool:
    """Return ``True`` when two directions are equal within ``tol``.

    Both vectors are normalised first.  Opposite directions are not
    equal, so a downward-facing face never matches an upward reference.
    """
    ua = _unit(a)
    ub = _unit(b)
    if ua is None or ub is None:
        return False
    return all(math.isclose(x, y, abs_tol=tol) for x, y in zip(ua, ub))


def classify_face(
    piece: GeometryPiece,
    face: Optional[FaceLike],
    up: Sequence[float] = UP,
    tol: float = NORMAL_TOLERANCE,
) -> FaceKind:
    if not piece.is_solid or face is None:
        return FaceKind.NON_SOLID
    if not face.is_planar:
        return FaceKind.NON_PLANAR
    if normals_equal(face.normal, up, tol):
        return FaceKind.PLANAR_UP
    return FaceKind.PLANAR_OTHER


def iter_classified_faces(
    source: GeometrySource,
    up: Sequence[float] = UP,
    tol: float = NORMAL_TOLERANCE,
) -> Iterator[Tuple[FaceKind, Optional[FaceLike]]]:
    """Yield ``(kind, face)`` for every face of every piece of ``source``.

    A piece that is not a solid produces a single ``(NON_SOLID, None)``
    entry and its contents are not inspected.
    """
    for piece in source.pieces():
        if not piece.is_solid:
            yield FaceKind.NON_SOLID, None
            continue
        for face in piece.faces():
            yield classify_face(piece, face, up, tol), face


# --- In-memory host model ---


@dataclass
class LineEdge:
    """Straight edge between two points."""

    start: ContinuousPoint
    end: ContinuousPoint

    def tessellate(self) -> List[ContinuousPoint]:
        return [self.start, self.end]


@dataclass
class ArcEdge:
    """Circular arc in a horizontal plane.

    The arc runs from ``start_angle`` to ``end_angle`` (radians) around
    ``center``; a negative sweep runs clockwise.  Tessellation emits
    ``segments + 1`` points including both end points.
    """

    center: ContinuousPoint
    radius: float
    start_angle: float
    end_angle: float
    segments: int = 16

    def tessellate(self) -> List[ContinuousPoint]:
        n = max(1, int(self.segments))
        cx, cy, cz = self.center
        sweep = self.end_angle - self.start_angle
        pts: List[ContinuousPoint] = []
        for i in range(n + 1):
            a = self.start_angle + sweep * i / n
            pts.append((cx + self.radius * math.cos(a), cy + self.radius * math.sin(a), cz))
        return pts


@dataclass
class PlanarFace:
    """Planar face with an outward normal and ordered edge loops."""

    normal: ContinuousPoint
    loops: List[List[LineEdge | ArcEdge]] = field(default_factory=list)
    is_planar: bool = True

    def edge_loops(self) -> List[List[LineEdge | ArcEdge]]:
        return self.loops


@dataclass
class CurvedFace:
    """Non-planar face.  Its normal is reported at a representative point."""

    normal: ContinuousPoint = (0.0, 0.0, 1.0)
    loops: List[List[LineEdge | ArcEdge]] = field(default_factory=list)
    is_planar: bool = False

    def edge_loops(self) -> List[List[LineEdge | ArcEdge]]:
        return self.loops


@dataclass
class Solid:
    face_list: List[PlanarFace | CurvedFace] = field(default_factory=list)
    is_solid: bool = True

    def faces(self) -> List[PlanarFace | CurvedFace]:
        return self.face_list


@dataclass
class NonSolidPiece:
    """Auxiliary geometry such as a curve or a symbol instance."""

    description: str = ""
    is_solid: bool = False

    def faces(self) -> List[PlanarFace | CurvedFace]:
        return []


@dataclass
class SlabGeometry:
    """A slab-like object made of one or more geometric pieces."""

    piece_list: List[Solid | NonSolidPiece] = field(default_factory=list)

    def pieces(self) -> List[Solid | NonSolidPiece]:
        return self.piece_list


def polyline_edges(points: Sequence[Sequence[float]], z: float) -> List[LineEdge]:
    """Return closed straight edges through 2D ``points`` at elevation ``z``."""
    pts3 = [(float(p[0]), float(p[1]), float(z)) for p in points]
    if len(pts3) > 1 and pts3[0] == pts3[-1]:
        pts3 = pts3[:-1]
    n = len(pts3)
    return [LineEdge(pts3[i], pts3[(i + 1) % n]) for i in range(n)]


def make_prism(
    outline: Sequence[Sequence[float]],
    holes: Sequence[Sequence[Sequence[float]]] = (),
    bottom: float = 0.0,
    top: float = 1.0,
) -> SlabGeometry:
    """Build a closed slab solid by extruding a 2D profile vertically.

    The top face points up and carries the outline followed by the
    holes; the bottom face points down and traverses the same loops in
    reverse.  One vertical side face is created per profile edge.

    Raises:
        ValueError: If the outline has fewer than three points or the
            slab has no thickness.
    """
    if len(outline) < 3:
        raise ValueError("outline must have at least three points")
    if not top > bottom:
        raise ValueError(f"top ({top}) must be above bottom ({bottom})")
    rings = [list(outline)] + [list(h) for h in holes]

    top_face = PlanarFace(normal=(0.0, 0.0, 1.0), loops=[polyline_edges(r, top) for r in rings])
    bottom_face = PlanarFace(
        normal=(0.0, 0.0, -1.0),
        loops=[polyline_edges(list(reversed(r)), bottom) for r in rings],
    )
    sides: List[PlanarFace | CurvedFace] = []
    for ring in rings:
        for edge in polyline_edges(ring, bottom):
            (x0, y0, _), (x1, y1, _) = edge.start, edge.end
            # Outward for a counter-clockwise outline
            normal = (y1 - y0, x0 - x1, 0.0)
            sides.append(
                PlanarFace(
                    normal=normal,
                    loops=[
                        [
                            LineEdge((x0, y0, bottom), (x1, y1, bottom)),
                            LineEdge((x1, y1, bottom), (x1, y1, top)),
                            LineEdge((x1, y1, top), (x0, y0, top)),
                            LineEdge((x0, y0, top), (x0, y0, bottom)),
                        ]
                    ],
                )
            )
    return SlabGeometry(piece_list=[Solid(face_list=[top_face, bottom_face] + sides)])
