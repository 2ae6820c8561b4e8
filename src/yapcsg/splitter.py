"""Plane classification and polygon splitting.

Every vertex of a polygon is bucketed by its signed distance to a
plane, using the kernel-wide ``epsilon``:

- distance < -epsilon: ``BACK``
- distance >  epsilon: ``FRONT``
- otherwise: ``COPLANAR``

OR-ing the vertex flags gives the polygon flag.  ``SPANNING`` is just
``FRONT | BACK``.  A vertex within epsilon of the plane goes to both
fragments of a split, so near-coplanar vertices never create slivers.
"""

from __future__ import annotations

from enum import IntFlag
from typing import List, Tuple

from yapcsg.geom import epsilon
from yapcsg.polygon import Plane, Polygon


class Classification(IntFlag):
    COPLANAR = 0
    FRONT = 1
    BACK = 2
    SPANNING = 3


COPLANAR = Classification.COPLANAR
FRONT = Classification.FRONT
BACK = Classification.BACK
SPANNING = Classification.SPANNING


def classify_point(plane: Plane, p) -> Classification:
    t = plane.signed_distance(p)
    if t < -epsilon:
        return BACK
    if t > epsilon:
        return FRONT
    return COPLANAR


def classify_polygon(plane: Plane, polygon: Polygon) -> Tuple[Classification, List[Classification]]:
    """Return the polygon flag together with the per-vertex flags."""
    polygon_type = COPLANAR
    types = []
    for vertex in polygon.vertices:
        t = classify_point(plane, vertex.pos)
        polygon_type |= t
        types.append(t)
    return Classification(polygon_type), types


def _dedupe(vertices):
    if len(vertices) < 3:
        return vertices
    result = []
    for v in vertices:
        if result and result[-1].pos.distance_to(v.pos) < epsilon:
            continue
        result.append(v)
    while len(result) > 1 and result[0].pos.distance_to(result[-1].pos) < epsilon:
        result.pop()
    return result


def _fragment(vertices, polygon: Polygon):
    vertices = _dedupe(vertices)
    if len(vertices) < 3:
        return None
    frag = Polygon(tuple(vertices), polygon.shared, polygon.plane)
    if frag.area() < epsilon * epsilon:
        return None
    return frag


def split_polygon(plane: Plane, polygon: Polygon,
                  coplanar_front: list, coplanar_back: list,
                  front: list, back: list) -> None:
    """Put ``polygon`` (or its fragments) into the matching output lists.

    Coplanar polygons go to ``coplanar_front`` when their own normal
    points the same way as the plane's, else to ``coplanar_back``.
    Spanning polygons are cut along the plane; the crossing vertex of
    each cut edge is interpolated at the root of the signed distance and
    emitted into both fragments.  Fragments with fewer than three
    distinct vertices, or with no area, are dropped.
    """
    polygon_type, types = classify_polygon(plane, polygon)

    if polygon_type == COPLANAR:
        if plane.normal.dot(polygon.plane.normal) > 0:
            coplanar_front.append(polygon)
        else:
            coplanar_back.append(polygon)
    elif polygon_type == FRONT:
        front.append(polygon)
    elif polygon_type == BACK:
        back.append(polygon)
    else:
        f = []
        b = []
        vertices = polygon.vertices
        count = len(vertices)
        for i in range(count):
            j = (i + 1) % count
            ti = types[i]
            tj = types[j]
            vi = vertices[i]
            vj = vertices[j]
            if ti != BACK:
                f.append(vi)
            if ti != FRONT:
                b.append(vi)
            if (ti | tj) == SPANNING:
                di = plane.signed_distance(vi.pos)
                dj = plane.signed_distance(vj.pos)
                t = di / (di - dj)
                v = vi.interpolate(vj, t)
                f.append(v)
                b.append(v)
        frag = _fragment(f, polygon)
        if frag is not None:
            front.append(frag)
        frag = _fragment(b, polygon)
        if frag is not None:
            back.append(frag)


__all__ = [
    'BACK',
    'COPLANAR',
    'Classification',
    'FRONT',
    'SPANNING',
    'classify_point',
    'classify_polygon',
    'split_polygon',
]
