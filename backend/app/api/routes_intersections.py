"""
API routes for slab top-face intersection.

Two entry points are provided.  ``POST /intersections`` accepts slab
plan profiles as JSON and builds simple extruded solids from them.
``POST /intersections/step`` accepts two STEP uploads, imports them via
CadQuery and intersects the top faces of the solids they contain.

Both return the same response: one loop of straight segments per
boundary of the intersection region, plus summary metadata.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List

from fastapi import APIRouter, File, HTTPException, UploadFile

from .models import (
    CurveLoop,
    IntersectionRequest,
    IntersectionResponse,
    Point3,
    Segment,
)
from ..services.host_geometry import make_prism
from ..services.intersection import SlabIntersector
from ..services.occ_geometry import SUPPORTED_EXTENSIONS, OccGeometrySource, load_step_shape
from ..services.reconstruct import BoundaryCurveSequence, total_area

logger = logging.getLogger(__name__)

router = APIRouter()

_intersector = SlabIntersector()


def _point(p) -> Point3:
    return Point3(x=float(p[0]), y=float(p[1]), z=float(p[2]))


def build_response(sequences: List[BoundaryCurveSequence]) -> IntersectionResponse:
    """Serialise reconstructed sequences into the API response model."""
    loops = [
        CurveLoop(
            index=idx,
            segments=[Segment(start=_point(s.start), end=_point(s.end)) for s in seq.segments],
            area=seq.signed_area(),
        )
        for idx, seq in enumerate(sequences)
    ]
    metadata = {
        "loopCount": len(loops),
        "totalArea": total_area(sequences),
        "scale": _intersector.quantizer.scale,
        "eps": _intersector.quantizer.eps,
    }
    return IntersectionResponse(loops=loops, metadata=metadata)


@router.post("/intersections", response_model=IntersectionResponse)
async def intersect_profiles(request: IntersectionRequest) -> IntersectionResponse:
    """Intersect the top faces of two extruded slab profiles."""
    try:
        eave = make_prism(
            request.eave.outline, request.eave.holes, request.eave.bottom, request.eave.top
        )
        boundary = make_prism(
            request.boundary.outline,
            request.boundary.holes,
            request.boundary.bottom,
            request.boundary.top,
        )
    except (ValueError, IndexError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    try:
        sequences = _intersector.execute(eave, boundary)
    except Exception as exc:
        logger.exception("intersection endpoint error: %s", exc)
        raise HTTPException(status_code=500, detail=f"Failed to compute intersection: {exc}")
    return build_response(sequences)


def _save_upload(upload_file: UploadFile, directory: Path, stem: str) -> Path:
    """Stream an upload into ``directory`` keeping its extension."""
    _, ext = os.path.splitext(upload_file.filename or "")
    ext = ext.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file extension: {ext or '<none>'}",
        )
    target = directory / f"{stem}{ext}"
    with target.open("wb") as fh:
        while True:
            chunk = upload_file.file.read(8192)
            if not chunk:
                break
            fh.write(chunk)
    return target


@router.post("/intersections/step", response_model=IntersectionResponse)
async def intersect_step_files(
    eave: UploadFile = File(...),
    boundary: UploadFile = File(...),
) -> IntersectionResponse:
    """Intersect the top faces of the solids in two uploaded STEP files."""
    logger.info(
        "Intersecting uploaded models eave=%s boundary=%s",
        eave.filename,
        boundary.filename,
    )
    with tempfile.TemporaryDirectory() as tmp:
        tmp_dir = Path(tmp)
        eave_path = _save_upload(eave, tmp_dir, "eave")
        boundary_path = _save_upload(boundary, tmp_dir, "boundary")
        try:
            eave_src = OccGeometrySource(load_step_shape(eave_path))
            boundary_src = OccGeometrySource(load_step_shape(boundary_path))
            sequences = _intersector.execute(eave_src, boundary_src)
        except Exception as exc:
            logger.exception("STEP intersection endpoint error: %s", exc)
            raise HTTPException(status_code=500, detail=f"Failed to compute intersection: {exc}")
    return build_response(sequences)
