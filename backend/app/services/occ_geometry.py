"""
Open CASCADE backed geometry source.

This module adapts CadQuery/OCP shapes to the ``GeometrySource``
interface consumed by the loop extractor.  A shape is decomposed into
pieces by walking its topology tree: solids become solid pieces,
compounds and compsolids are descended into, and anything else (free
shells, faces, wires, edges, vertices) is reported as a non-solid
piece so that the extractor skips it.

Edges are tessellated with ``GCPnts_QuasiUniformDeflection`` and the
resulting points follow the wire's traversal direction, so an edge used
reversed inside a wire is emitted end to start.

CadQuery and OCP are imported lazily.  The rest of the pipeline does not
require them; calling into this module without them installed raises
``ImportError``.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Iterator, List, Tuple

logger = logging.getLogger(__name__)

ContinuousPoint = Tuple[float, float, float]

# Maximum chordal deviation (in model units) when tessellating curved edges.
DEFAULT_DEFLECTION: float = 1.0e-3

SUPPORTED_EXTENSIONS = (".step", ".stp")


def _unwrap(shape: Any) -> Any:
    """Return the underlying ``TopoDS_Shape`` for CadQuery objects."""
    if hasattr(shape, "vals"):
        import cadquery as cq  # type: ignore

        shapes = [v for v in shape.vals() if isinstance(v, cq.Shape)]
        if len(shapes) == 1:
            return shapes[0].wrapped
        return cq.Compound.makeCompound(shapes).wrapped
    return getattr(shape, "wrapped", shape)


class OccEdge:
    """A topological edge as traversed inside a wire."""

    def __init__(self, edge: Any, reversed_: bool, deflection: float) -> None:
        self.edge = edge
        self.reversed = reversed_
        self.deflection = deflection

    def tessellate(self) -> List[ContinuousPoint]:
        from OCP.BRepAdaptor import BRepAdaptor_Curve
        from OCP.GCPnts import GCPnts_QuasiUniformDeflection

        adaptor = BRepAdaptor_Curve(self.edge)
        sampler = GCPnts_QuasiUniformDeflection(adaptor, self.deflection)
        points: List[ContinuousPoint] = []
        if sampler.IsDone():
            for i in range(1, sampler.NbPoints() + 1):
                pnt = sampler.Value(i)
                points.append((pnt.X(), pnt.Y(), pnt.Z()))
        else:
            # Fall back to the end points of the edge's parameter range
            for param in (adaptor.FirstParameter(), adaptor.LastParameter()):
                pnt = adaptor.Value(param)
                points.append((pnt.X(), pnt.Y(), pnt.Z()))
        if self.reversed:
            points.reverse()
        return points


class OccFace:
    """Adapter exposing planarity, outward normal and ordered edge loops."""

    def __init__(self, face: Any, deflection: float) -> None:
        self.face = face
        self.deflection = deflection
        self.is_planar = face.geomType() == "PLANE"
        n = face.normalAt()
        self.normal: ContinuousPoint = (n.x, n.y, n.z)

    def _wire_edges(self, wire: Any) -> List[OccEdge]:
        from OCP.BRepTools import BRepTools_WireExplorer
        from OCP.TopAbs import TopAbs_REVERSED

        edges: List[OccEdge] = []
        exp = BRepTools_WireExplorer(wire.wrapped, self.face.wrapped)
        while exp.More():
            edges.append(
                OccEdge(exp.Current(), exp.Orientation() == TopAbs_REVERSED, self.deflection)
            )
            exp.Next()
        return edges

    def edge_loops(self) -> List[List[OccEdge]]:
        wires = [self.face.outerWire()] + list(self.face.innerWires())
        return [self._wire_edges(w) for w in wires]


class OccPiece:
    """One top-level piece of a shape: a solid or some auxiliary geometry."""

    def __init__(self, shape: Any, deflection: float) -> None:
        from OCP.TopAbs import TopAbs_SOLID

        self.shape = shape
        self.deflection = deflection
        self.is_solid = shape.ShapeType() == TopAbs_SOLID

    def faces(self) -> Iterator[OccFace]:
        if not self.is_solid:
            return iter(())
        import cadquery as cq  # type: ignore

        solid = cq.Shape.cast(self.shape)
        return (OccFace(f, self.deflection) for f in solid.Faces())


class OccGeometrySource:
    """``GeometrySource`` over a CadQuery shape, workplane or ``TopoDS_Shape``."""

    def __init__(self, shape: Any, deflection: float = DEFAULT_DEFLECTION) -> None:
        if deflection <= 0.0:
            raise ValueError("deflection must be positive")
        self.shape = _unwrap(shape)
        self.deflection = deflection

    def _walk(self, shape: Any) -> Iterator[Any]:
        from OCP.TopAbs import TopAbs_COMPOUND, TopAbs_COMPSOLID
        from OCP.TopoDS import TopoDS_Iterator

        if shape.ShapeType() in (TopAbs_COMPOUND, TopAbs_COMPSOLID):
            it = TopoDS_Iterator(shape)
            while it.More():
                yield from self._walk(it.Value())
                it.Next()
        else:
            yield shape

    def pieces(self) -> Iterator[OccPiece]:
        for sub in self._walk(self.shape):
            piece = OccPiece(sub, self.deflection)
            if os.getenv("INTERSECT_DEBUG"):
                logger.debug("OccGeometrySource: piece type=%s solid=%s", sub.ShapeType(), piece.is_solid)
            yield piece


def load_step_shape(file_path: Path | str) -> Any:
    """Load a STEP file into a CadQuery shape.

    Raises:
        ValueError: If the file extension is not a STEP extension.
        ImportError: If CadQuery is not installed.
    """
    path = Path(file_path)
    ext = path.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported file extension: {ext or '<none>'}")

    import cadquery as cq  # type: ignore

    start_time = time.perf_counter()
    try:
        workplane = cq.importers.importStep(str(path))
    except Exception as exc:
        logger.exception("Failed to import CAD model %s via CadQuery. Reason: %r", path, exc)
        raise
    shapes = [v for v in workplane.vals() if isinstance(v, cq.Shape)]
    shape = shapes[0] if len(shapes) == 1 else cq.Compound.makeCompound(shapes)
    logger.debug(
        "load_step_shape(%s): %d shape(s) imported in %.2f s",
        path.name,
        len(shapes),
        time.perf_counter() - start_time,
    )
    return shape
