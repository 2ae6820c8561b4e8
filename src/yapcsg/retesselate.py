"""Retesselation and T-junction repair.

Repeated boolean operations chop faces into many coplanar fragments,
and leave *T-junctions*: places where a vertex of one polygon sits in
the middle of an edge of its neighbour.  Renderers show those as
cracks, and edge-based checks see the mesh as open.

``retesselate_polygons`` merges every group of polygons sharing a plane
and a shared tag into its boundary loops, triangulates the loops again
(outer loops with their holes, via ``yapcsg.triangulator``) and then
runs ``fix_t_junctions`` over the whole result.

``fix_t_junctions`` inserts, into every polygon edge, each mesh vertex
that lies strictly inside that edge within ``epsilon``.  Only existing
positions are inserted, so the pass terminates and running it twice
changes nothing.

Both expect canonicalized input (see ``yapcsg.fuzzy``): coincident
points must be exactly equal.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from yapcsg.geom import Vector3, epsilon
from yapcsg.polygon import Plane, Polygon, Shared, Vertex
from yapcsg.triangulator import point_in_loop, signed_area, triangulate_loops

logger = logging.getLogger(__name__)

Edge = Tuple[Vector3, Vector3]


class _PointIndex:
    """positions sorted by x, for segment queries"""

    def __init__(self, positions):
        self.points = sorted(set(positions))
        self.xs = [p.x for p in self.points]

    def on_segment(self, a: Vector3, b: Vector3) -> List[Tuple[float, Vector3]]:
        """points strictly between ``a`` and ``b``, as ``(t, point)`` sorted by ``t``"""
        d = b - a
        length2 = d.length_squared()
        if length2 < epsilon * epsilon:
            return []
        length = length2 ** 0.5
        lo = bisect_left(self.xs, min(a.x, b.x) - epsilon)
        hi = bisect_right(self.xs, max(a.x, b.x) + epsilon)
        ymin, ymax = min(a.y, b.y) - epsilon, max(a.y, b.y) + epsilon
        zmin, zmax = min(a.z, b.z) - epsilon, max(a.z, b.z) + epsilon
        found = []
        for p in self.points[lo:hi]:
            if p.y < ymin or p.y > ymax or p.z < zmin or p.z > zmax:
                continue
            t = (p - a).dot(d) / length2
            if t * length <= epsilon or (1.0 - t) * length <= epsilon:
                continue
            if (a + d * t).distance_to(p) < epsilon:
                found.append((t, p))
        found.sort()
        return found


def _insert_edge_vertices(polygon: Polygon, index: _PointIndex) -> Tuple[Polygon, int]:
    vertices = polygon.vertices
    count = len(vertices)
    result: List[Vertex] = []
    inserted = 0
    for i in range(count):
        v = vertices[i]
        w = vertices[(i + 1) % count]
        result.append(v)
        for t, p in index.on_segment(v.pos, w.pos):
            result.append(Vertex(p, v.normal.lerp(w.normal, t)))
            inserted += 1
    if not inserted:
        return polygon, 0
    return Polygon(tuple(result), polygon.shared, polygon.plane), inserted


def fix_t_junctions(polygons: Sequence[Polygon]) -> List[Polygon]:
    """Insert T-junction vertices so that neighbours share their edge vertices."""
    index = _PointIndex(v.pos for p in polygons for v in p.vertices)
    result = []
    total = 0
    for polygon in polygons:
        fixed, inserted = _insert_edge_vertices(polygon, index)
        total += inserted
        result.append(fixed)
    logger.debug('fixed %d t-junctions in %d polygons', total, len(polygons))
    return result


## loop extraction
## ---------------

def _boundary_edges(polygons: Sequence[Polygon]) -> List[Edge]:
    """directed edges not cancelled by an opposite edge of the same group"""
    edges: List[Edge] = []
    for polygon in polygons:
        positions = [v.pos for v in polygon.vertices]
        for i, a in enumerate(positions):
            edges.append((a, positions[(i + 1) % len(positions)]))
    counts = Counter(edges)
    for (a, b) in list(counts):
        if counts[(a, b)] and counts[(b, a)]:
            n = min(counts[(a, b)], counts[(b, a)])
            counts[(a, b)] -= n
            counts[(b, a)] -= n
    remaining = []
    for e in edges:
        if counts[e] > 0:
            counts[e] -= 1
            remaining.append(e)
    return remaining


def _chain_loops(edges: Sequence[Edge]) -> Optional[List[List[Vector3]]]:
    """join directed edges into closed loops, or ``None`` if they do not close"""
    outgoing: Dict[Vector3, List[Vector3]] = {}
    for a, b in edges:
        outgoing.setdefault(a, []).append(b)
    loops = []
    limit = len(edges) + 1
    for start, _ in edges:
        while outgoing[start]:
            loop = [start]
            cur = outgoing[start].pop(0)
            steps = 0
            while cur != start:
                loop.append(cur)
                nxt = outgoing.get(cur)
                steps += 1
                if not nxt or steps > limit:
                    return None
                cur = nxt.pop(0)
            loops.append(loop)
    return loops


def _rotate_to_min(loop: List[Vector3]) -> List[Vector3]:
    start = min(range(len(loop)), key=loop.__getitem__)
    return loop[start:] + loop[:start]


def _is_redundant(prev: Vector3, cur: Vector3, nxt: Vector3) -> bool:
    """``cur`` adds nothing to the outline: a duplicate, a straight-through
    point or the tip of a zero-width spike"""
    if cur.distance_to(prev) < epsilon or cur.distance_to(nxt) < epsilon:
        return True
    base = nxt - prev
    blen = base.length()
    if blen < epsilon:
        return True
    return (cur - prev).cross(base).length() / blen < epsilon


def _simplify_loop(loop: List[Vector3]) -> List[Vector3]:
    loop = _rotate_to_min(list(loop))
    changed = True
    while changed and len(loop) >= 3:
        changed = False
        n = len(loop)
        for i in range(n):
            if _is_redundant(loop[i - 1], loop[i], loop[(i + 1) % n]):
                del loop[i]
                changed = True
                break
    if len(loop) < 3:
        return []
    return _rotate_to_min(loop)


## group retesselation
## -------------------

def _plane_basis(plane: Plane) -> Tuple[Vector3, Vector3]:
    u = plane.normal.any_perpendicular()
    v = plane.normal.cross(u)
    return u, v


def _retesselate_group(plane: Plane, shared: Shared, polygons: Sequence[Polygon]) -> List[Polygon]:
    vertex_at: Dict[Vector3, Vertex] = {}
    for polygon in polygons:
        for v in polygon.vertices:
            vertex_at.setdefault(v.pos, v)

    ## split edges at the group's own vertices so shared edges cancel
    index = _PointIndex(vertex_at.keys())
    split = [_insert_edge_vertices(p, index)[0] for p in polygons]
    for polygon in split:
        for v in polygon.vertices:
            vertex_at.setdefault(v.pos, v)

    loops = _chain_loops(_boundary_edges(split))
    if loops is None:
        logger.debug('group boundary does not close, keeping %d polygons', len(polygons))
        return list(polygons)
    loops = [lp for lp in (_simplify_loop(lp) for lp in loops) if lp]
    loops.sort()

    u, v = _plane_basis(plane)
    outers = []
    holes = []
    for loop in loops:
        flat = [(p.dot(u), p.dot(v)) for p in loop]
        area = signed_area(flat)
        if area > epsilon * epsilon:
            outers.append((loop, flat, area))
        elif area < -epsilon * epsilon:
            holes.append((loop, flat))

    holes_of: List[List[Tuple[List[Vector3], list]]] = [[] for _ in outers]
    for hole, hflat in holes:
        best = None
        for k, (outer, oflat, area) in enumerate(outers):
            outer_points = set(outer)
            probe = next((hflat[i] for i, p in enumerate(hole) if p not in outer_points), None)
            if probe is None or not point_in_loop(probe, oflat):
                continue
            if best is None or area < outers[best][2]:
                best = k
        if best is not None:
            holes_of[best].append((hole, hflat))

    result = []
    for k, (outer, oflat, _) in enumerate(outers):
        ring_points = [outer] + [h for h, _ in holes_of[k]]
        for tri in triangulate_loops(oflat, [hf for _, hf in holes_of[k]]):
            corners = tuple(vertex_at[ring_points[loop_id][i]] for loop_id, i in tri)
            result.append(Polygon(corners, shared, plane))
    return result


def retesselate_polygons(polygons: Sequence[Polygon]) -> List[Polygon]:
    """Merge and re-triangulate coplanar groups, then repair T-junctions."""
    groups: Dict[Tuple[Plane, Shared], List[Polygon]] = {}
    for polygon in polygons:
        groups.setdefault((polygon.plane, polygon.shared), []).append(polygon)
    result: List[Polygon] = []
    for (plane, shared), members in groups.items():
        result.extend(_retesselate_group(plane, shared, members))
    logger.debug('retesselated %d polygons in %d groups into %d triangles',
                 len(polygons), len(groups), len(result))
    return fix_t_junctions(result)


__all__ = [
    'fix_t_junctions',
    'retesselate_polygons',
]
