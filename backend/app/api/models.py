"""
Pydantic data models for the slab intersection API.

These models define the shapes of requests and responses used by the
backend.  Maintaining these schemas separately helps enforce the API
contract and keeps the route handlers free of validation details.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class SlabProfile(BaseModel):
    """Plan profile of a slab, extruded between two elevations.

    Coordinates are expressed in feet, the native length unit of the
    host model.  The outline and holes are closed implicitly; repeating
    the first point at the end is allowed.
    """

    outline: List[List[float]] = Field(
        ..., description="Outer boundary as a list of [x, y] points"
    )
    holes: List[List[List[float]]] = Field(
        default_factory=list,
        description="Openings in the slab, each a list of [x, y] points",
    )
    bottom: float = Field(default=0.0, description="Elevation of the slab underside")
    top: float = Field(default=1.0, description="Elevation of the slab top face")


class IntersectionRequest(BaseModel):
    """Request body for intersecting two slab profiles."""

    eave: SlabProfile = Field(..., description="Slab whose top face is the subject operand")
    boundary: SlabProfile = Field(..., description="Slab whose top face is the clip operand")


class Point3(BaseModel):
    """Single 3D point.  Intersection results always have ``z == 0``."""

    x: float
    y: float
    z: float


class Segment(BaseModel):
    """Straight segment of a boundary loop."""

    start: Point3
    end: Point3


class CurveLoop(BaseModel):
    """Closed chain of segments bounding part of the intersection."""

    index: int = Field(..., description="Position of the loop in the engine output")
    segments: List[Segment] = Field(..., description="Segments chained head to tail")
    area: float = Field(
        ..., description="Signed area; positive for outer boundaries, negative for holes"
    )


class IntersectionResponse(BaseModel):
    """Response returned after intersecting two slabs."""

    loops: List[CurveLoop] = Field(
        default_factory=list, description="Boundary loops of the intersection region"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Summary such as the loop count, net area and lattice constants",
    )
