"""Canonicalization of polygon sets.

Floating point noise makes two copies of "the same" vertex differ in
the last few bits.  ``FuzzyFactory`` snaps such values together: every
value is quantized onto a grid of cell size ``epsilon`` and the first
value to populate a cell becomes the representative for that cell and
all neighbouring cells it could round into.  Later values that round to
a populated cell are replaced by the representative.

``canonicalize_polygons`` runs vertices, planes and shared tags through
such factories, drops polygons that collapse to fewer than three
distinct vertices, and orders the result so that equivalent polygon
sets come out structurally equal.
"""

from __future__ import annotations

import itertools
import logging
import math
from typing import Callable, Dict, Hashable, List, Sequence, Tuple

from yapcsg.geom import Vector3, epsilon
from yapcsg.polygon import Plane, Polygon, Shared, Vertex

logger = logging.getLogger(__name__)


class FuzzyFactory:
    """Map nearly-equal numeric tuples onto one representative object."""

    def __init__(self, numdimensions: int, tolerance: float = epsilon):
        self.numdimensions = numdimensions
        self.multiplier = 1.0 / tolerance
        self.lookuptable: Dict[Tuple[int, ...], object] = {}

    def quantize(self, values: Sequence[float]) -> Tuple[int, ...]:
        m = self.multiplier
        return tuple(int(round(v * m)) for v in values)

    def lookup_or_create(self, values: Sequence[float], creator: Callable[[Sequence[float]], object]):
        if len(values) != self.numdimensions:
            raise ValueError('expected {} values, got {}'.format(self.numdimensions, len(values)))
        key = self.quantize(values)
        found = self.lookuptable.get(key)
        if found is not None:
            return found
        obj = creator(values)
        m = self.multiplier
        ## register floor and floor+1 in every dimension so any value that
        ## rounds into the neighbourhood finds this representative
        cells = []
        for v in values:
            q0 = math.floor(v * m)
            cells.append((q0, q0 + 1))
        for cell in itertools.product(*cells):
            self.lookuptable[cell] = obj
        return obj


class PolygonCanonicalizer:
    """Shared factories for vertices, planes and shared tags."""

    def __init__(self, tolerance: float = epsilon):
        self.posfactory = FuzzyFactory(3, tolerance)
        self.normalfactory = FuzzyFactory(3, tolerance)
        self.planefactory = FuzzyFactory(4, tolerance)
        self.sharedcache: Dict[Hashable, Shared] = {}
        self.vertexcache: Dict[Tuple[Vector3, Vector3], Vertex] = {}

    def vertex(self, v: Vertex) -> Vertex:
        ## positions snap independently of normals, so faces meeting at a
        ## corner share the exact same point even if their normals differ
        pos = self.posfactory.lookup_or_create(v.pos, lambda _: v.pos)
        normal = self.normalfactory.lookup_or_create(v.normal, lambda _: v.normal)
        return self.vertexcache.setdefault((pos, normal), Vertex(pos, normal))

    def plane(self, p: Plane) -> Plane:
        values = (p.normal.x, p.normal.y, p.normal.z, p.w)
        return self.planefactory.lookup_or_create(values, lambda _: p)

    def shared(self, s: Shared) -> Shared:
        return self.sharedcache.setdefault(s, s)

    def polygon(self, polygon: Polygon):
        """canonical polygon, or ``None`` if it collapses"""
        newplane = self.plane(polygon.plane)
        newshared = self.shared(polygon.shared)
        vertices: List[Vertex] = []
        for v in polygon.vertices:
            cv = self.vertex(v)
            if vertices and vertices[-1].pos == cv.pos:
                continue
            vertices.append(cv)
        while len(vertices) > 1 and vertices[0].pos == vertices[-1].pos:
            vertices.pop()
        if len(set(v.pos for v in vertices)) < 3:
            return None
        return Polygon(tuple(vertices), newshared, newplane)


def _vertex_key(v: Vertex, m: float):
    p = v.pos
    return (round(p.x * m), round(p.y * m), round(p.z * m))


def _shared_key(s: Shared):
    return (s.color is not None, s.color or ())


def _ordered(polygons: Sequence[Polygon], tolerance: float) -> List[Polygon]:
    """rotate each vertex cycle to its smallest vertex and sort the polygons"""
    m = 1.0 / tolerance
    keyed = []
    for index, polygon in enumerate(polygons):
        keys = [_vertex_key(v, m) for v in polygon.vertices]
        start = min(range(len(keys)), key=keys.__getitem__)
        if start:
            polygon = Polygon(polygon.vertices[start:] + polygon.vertices[:start],
                              polygon.shared, polygon.plane)
            keys = keys[start:] + keys[:start]
        keyed.append(((tuple(keys), _shared_key(polygon.shared), index), polygon))
    keyed.sort(key=lambda item: item[0])
    return [polygon for _, polygon in keyed]


def canonicalize_polygons(polygons: Sequence[Polygon], tolerance: float = epsilon) -> List[Polygon]:
    canon = PolygonCanonicalizer(tolerance)
    result = []
    for polygon in _ordered(polygons, tolerance):
        cp = canon.polygon(polygon)
        if cp is not None:
            result.append(cp)
    logger.debug('canonicalized %d polygons into %d', len(polygons), len(result))
    return result


__all__ = [
    'FuzzyFactory',
    'PolygonCanonicalizer',
    'canonicalize_polygons',
]
