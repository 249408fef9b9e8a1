"""
Polygon set intersection on the integer lattice.

The boolean clipping itself is delegated to Shapely (GEOS).  This module
adapts :class:`~app.services.loops.PolygonSet` values to that engine
under the contract the rest of the pipeline relies on:

- each operand is resolved independently with the even-odd fill rule,
  so nested loops become holes and overlapping loops cancel by parity;
- every overlay runs with ``grid_size=1.0``, which keeps all result
  vertices on the input lattice (new edge crossings are snapped to the
  nearest lattice point rather than carried as floats);
- results are returned as plain loops: for each output polygon, its
  exterior ring (counter-clockwise) followed by its holes (clockwise);
- an operand without loops yields an empty result.

Self-intersecting loops are repaired with ``make_valid`` before use.
This is best effort only; no further validation is performed.
"""

from __future__ import annotations

import logging
import os
from typing import List

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.validation import make_valid

from .loops import EVEN_ODD, Loop, PolygonSet

logger = logging.getLogger(__name__)

# Overlay precision in lattice units.
GRID_SIZE: float = 1.0


def _polygons(geom: BaseGeometry) -> List[Polygon]:
    """Flatten ``geom`` into its polygonal parts, dropping lines and points."""
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    parts: List[Polygon] = []
    for sub in getattr(geom, "geoms", ()):
        parts.extend(_polygons(sub))
    return parts


def _as_area(geom: BaseGeometry) -> MultiPolygon:
    return MultiPolygon(_polygons(geom))


def _loop_region(loop: Loop) -> MultiPolygon:
    poly = Polygon(loop)
    if not poly.is_valid:
        poly = make_valid(poly)
    return _as_area(poly)


def even_odd_region(polys: PolygonSet) -> MultiPolygon:
    """Return the area enclosed by ``polys`` under the even-odd rule.

    Raises:
        ValueError: If the set uses a fill rule other than even-odd.
    """
    if polys.fill_rule != EVEN_ODD:
        raise ValueError(f"Unsupported fill rule: {polys.fill_rule!r}")
    region = MultiPolygon()
    for loop in polys:
        if len(set(loop)) < 3:
            continue
        region = _as_area(region.symmetric_difference(_loop_region(loop), grid_size=GRID_SIZE))
    return region


def _ring_loop(coords) -> Loop:
    loop: Loop = []
    for x, y in list(coords)[:-1]:
        q = (int(round(x)), int(round(y)))
        if not loop or loop[-1] != q:
            loop.append(q)
    while len(loop) > 1 and loop[-1] == loop[0]:
        loop.pop()
    return loop


def region_to_polygon_set(region: BaseGeometry) -> PolygonSet:
    """Convert an overlay result back into lattice loops."""
    result = PolygonSet()
    for poly in _polygons(region):
        poly = orient(poly, sign=1.0)
        for ring in [poly.exterior] + list(poly.interiors):
            loop = _ring_loop(ring.coords)
            if len(loop) >= 3:
                result.loops.append(loop)
    return result


def intersect_polygon_sets(subject: PolygonSet, clip: PolygonSet) -> PolygonSet:
    """Intersect two polygon sets, each filled with the even-odd rule.

    Args:
        subject: Loops of the subject operand.
        clip: Loops of the clip operand.

    Returns:
        PolygonSet: Loops bounding the common region, possibly empty.
    """
    a = even_odd_region(subject)
    b = even_odd_region(clip)
    if a.is_empty or b.is_empty:
        if os.getenv("INTERSECT_DEBUG"):
            logger.debug(
                "intersect_polygon_sets: empty operand (subject=%d loops, clip=%d loops)",
                len(subject),
                len(clip),
            )
        return PolygonSet()
    region = a.intersection(b, grid_size=GRID_SIZE)
    result = region_to_polygon_set(region)
    if os.getenv("INTERSECT_DEBUG"):
        logger.debug(
            "intersect_polygon_sets: subject=%d clip=%d -> %d loop(s), area=%.1f",
            len(subject),
            len(clip),
            len(result),
            region.area,
        )
    return result
