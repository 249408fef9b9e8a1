"""
Tests for the Open CASCADE backed geometry source.

Tests that need real CAD geometry build it with CadQuery and are skipped
when CadQuery is not installed.  Solids are created directly in feet so
that the expected lattice coordinates can be stated exactly.
"""

from __future__ import annotations

import io
import math
import sys
from pathlib import Path

import pytest

# Make the backend package importable when running tests directly via pytest
sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.services.host_geometry import FaceKind, iter_classified_faces
from app.services.intersection import intersect_slabs
from app.services.loops import extract_top_loops
from app.services.occ_geometry import OccGeometrySource, load_step_shape
from app.services.reconstruct import total_area


def _box(cq, x: float, y: float, size: float = 10.0, height: float = 1.0):
    return cq.Workplane("XY").box(size, size, height, centered=False).translate((x, y, 0))


def test_load_step_shape_rejects_other_extensions(tmp_path: Path) -> None:
    path = tmp_path / "model.igs"
    path.write_bytes(b"")
    with pytest.raises(ValueError):
        load_step_shape(path)


def test_box_top_face_loop() -> None:
    cq = pytest.importorskip("cadquery")
    src = OccGeometrySource(_box(cq, 0.0, 0.0))
    kinds = [kind for kind, _ in iter_classified_faces(src)]
    assert kinds.count(FaceKind.PLANAR_UP) == 1
    assert kinds.count(FaceKind.PLANAR_OTHER) == 5
    polys = extract_top_loops(src)
    assert len(polys) == 1
    assert set(polys.loops[0]) == {(0, 0), (3048, 0), (3048, 3048), (0, 3048)}
    assert len(polys.loops[0]) == 4


def test_circular_hole_is_tessellated() -> None:
    cq = pytest.importorskip("cadquery")
    slab = _box(cq, 0.0, 0.0).faces(">Z").workplane(centerOption="CenterOfBoundBox").hole(2.0)
    polys = extract_top_loops(OccGeometrySource(slab))
    assert len(polys) == 2
    circle = polys.loops[1]
    assert len(circle) > 8
    for x, y in circle:
        assert math.hypot(x - 1524, y - 1524) == pytest.approx(304.8, abs=2.0)


def test_non_solid_pieces_are_skipped() -> None:
    cq = pytest.importorskip("cadquery")
    box = _box(cq, 0.0, 0.0).val()
    line = cq.Edge.makeLine(cq.Vector(0, 0, 0), cq.Vector(1, 0, 0))
    compound = cq.Compound.makeCompound([box, line])
    src = OccGeometrySource(compound)
    pieces = list(src.pieces())
    assert [p.is_solid for p in pieces] == [True, False]
    assert len(extract_top_loops(src)) == 1


def test_intersect_two_boxes() -> None:
    cq = pytest.importorskip("cadquery")
    result = intersect_slabs(
        OccGeometrySource(_box(cq, 0.0, 0.0)),
        OccGeometrySource(_box(cq, 5.0, 5.0)),
    )
    assert len(result) == 1
    assert total_area(result) == pytest.approx(25.0, abs=0.01)


def test_step_round_trip_and_upload(tmp_path: Path) -> None:
    cq = pytest.importorskip("cadquery")
    from fastapi.testclient import TestClient

    from app.main import app  # type: ignore

    eave_path = tmp_path / "eave.step"
    boundary_path = tmp_path / "boundary.step"
    cq.exporters.export(_box(cq, 0.0, 0.0), str(eave_path))
    cq.exporters.export(_box(cq, 5.0, 5.0), str(boundary_path))

    polys = extract_top_loops(OccGeometrySource(load_step_shape(eave_path)))
    assert len(polys) == 1

    client = TestClient(app)
    response = client.post(
        "/api/intersections/step",
        files={
            "eave": ("eave.step", io.BytesIO(eave_path.read_bytes()), "application/octet-stream"),
            "boundary": ("boundary.STEP", io.BytesIO(boundary_path.read_bytes()), "application/octet-stream"),
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["metadata"]["loopCount"] == 1
    assert data["metadata"]["totalArea"] == pytest.approx(25.0, abs=0.01)
