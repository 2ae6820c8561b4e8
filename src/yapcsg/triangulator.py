"""Triangulation helpers for yapcsg polygon loops.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL) to keep the logic compact and reliable.  The helpers
in this file normalise 2-D loops into the format expected by earcut and
convert the resulting indices back into triangles.

Unlike a plain point triangulation, ``triangulate_loops`` returns
*indices* into the caller's loops, so that callers working with richer
vertex objects (3-D vertices with normals, say) can map each triangle
corner back to the object it came from.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate polygons with holes"
    ) from exc

from yapcsg.geom import epsilon

Point2D = Tuple[float, float]
LoopIndex = Tuple[int, int]


def triangulate_loops(outer: Sequence[Sequence[float]],
                      holes: Iterable[Sequence[Sequence[float]]] | None = None
                      ) -> List[Tuple[LoopIndex, LoopIndex, LoopIndex]]:
    """Return triangles covering ``outer`` minus any ``holes``.

    Each triangle corner is a ``(loop, index)`` pair: loop 0 is
    ``outer``, loop ``k`` is the ``k``-th hole.  Triangles are returned
    counter-clockwise; zero-area triangles are omitted.  Loops are used
    in the order and orientation given, so identical input always gives
    identical output.
    """

    if holes is None:
        holes = []

    point_map: List[Point2D] = []
    index_map: List[LoopIndex] = []
    ring_ends: List[int] = []

    def _append(loop_id: int, loop: Sequence[Sequence[float]]) -> None:
        for i, pt in enumerate(loop):
            point_map.append((float(pt[0]), float(pt[1])))
            index_map.append((loop_id, i))
        ring_ends.append(len(point_map))

    if len(outer) < 3:
        return []
    _append(0, outer)
    for k, hole in enumerate(holes, start=1):
        if len(hole) < 3:
            continue
        _append(k, hole)

    vertices = np.asarray(point_map, dtype=np.float64).reshape(-1, 2)
    ring_array = np.asarray(ring_ends, dtype=np.uint32)
    indices = _earcut.triangulate_float64(vertices, ring_array)

    triangles = []
    for i in range(0, len(indices), 3):
        a, b, c = int(indices[i]), int(indices[i + 1]), int(indices[i + 2])
        area = _triangle_area2(point_map[a], point_map[b], point_map[c])
        if abs(area) <= epsilon * epsilon:
            continue
        if area < 0:
            b, c = c, b
        triangles.append((index_map[a], index_map[b], index_map[c]))
    return triangles


def signed_area(loop: Sequence[Sequence[float]]) -> float:
    total = 0.0
    for i, (x0, y0) in enumerate(loop):
        x1, y1 = loop[(i + 1) % len(loop)]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def point_in_loop(p: Sequence[float], loop: Sequence[Sequence[float]]) -> bool:
    """even-odd test of ``p`` against a closed 2-D loop"""
    x, y = p[0], p[1]
    inside = False
    count = len(loop)
    for i in range(count):
        x0, y0 = loop[i][0], loop[i][1]
        x1, y1 = loop[(i + 1) % count][0], loop[(i + 1) % count][1]
        if (y0 > y) != (y1 > y):
            xc = x0 + (y - y0) * (x1 - x0) / (y1 - y0)
            if x < xc:
                inside = not inside
    return inside


def _triangle_area2(a: Point2D, b: Point2D, c: Point2D) -> float:
    return (b[0] - a[0]) * (c[1] - a[1]) - (c[0] - a[0]) * (b[1] - a[1])


__all__ = [
    'point_in_loop',
    'signed_area',
    'triangulate_loops',
]
