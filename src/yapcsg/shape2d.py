"""Minimal 2-D regions, the input of the extrusion functions.

A ``Shape2D`` is one outer loop plus any number of hole loops.  Loops
are normalized on construction: the outer loop runs counter-clockwise
and holes run clockwise, so every side has the inside of the region on
its left.

The class only knows how to emit flat 3-D polygon lists: cap polygons
(``to_plane_polygons``) and side walls between two placements of the
profile (``to_wall_polygons``).  Turning those lists into solids is the
job of ``yapcsg.extrusions``.
"""

from __future__ import annotations

from math import cos, sin, pi
from typing import List, Optional, Sequence, Tuple

from yapcsg.connectors import Connector, STANDARD_CONNECTOR
from yapcsg.geom import Vector2, Vector3, YAXIS, ZAXIS, ZERO, default_resolution_2d, epsilon, vect2, vect3
from yapcsg.polygon import Plane, Polygon, Vertex
from yapcsg.triangulator import signed_area, triangulate_loops

Side = Tuple[Vector2, Vector2]


def _loop(points) -> List[Vector2]:
    loop = []
    for p in points:
        p = vect2(p)
        if loop and (p - loop[-1]).length() < epsilon:
            continue
        loop.append(p)
    while len(loop) > 1 and (loop[0] - loop[-1]).length() < epsilon:
        loop.pop()
    return loop


class Shape2D:
    """Closed 2-D region with optional holes."""

    def __init__(self, outer: Sequence = (), holes: Sequence[Sequence] = ()):
        outer = _loop(outer)
        if outer and len(outer) < 3:
            raise ValueError('outer loop needs at least three distinct points, got {}'.format(len(outer)))
        if outer and signed_area(outer) < 0:
            outer.reverse()
        self.outer: List[Vector2] = outer
        self.holes: List[List[Vector2]] = []
        for hole in holes:
            hole = _loop(hole)
            if len(hole) < 3:
                raise ValueError('hole loop needs at least three distinct points, got {}'.format(len(hole)))
            if signed_area(hole) > 0:
                hole.reverse()
            self.holes.append(hole)
        if self.holes and not self.outer:
            raise ValueError('holes given without an outer loop')

    def __repr__(self):
        return 'Shape2D({}, holes={})'.format(self.outer, self.holes)

    @classmethod
    def rectangle(cls, center=(0.0, 0.0), radius=(1.0, 1.0)) -> "Shape2D":
        c = vect2(center)
        r = vect2(radius)
        return cls([(c.x - r.x, c.y - r.y), (c.x + r.x, c.y - r.y),
                    (c.x + r.x, c.y + r.y), (c.x - r.x, c.y + r.y)])

    @classmethod
    def circle(cls, center=(0.0, 0.0), radius=1.0, resolution=default_resolution_2d) -> "Shape2D":
        if resolution < 3:
            raise ValueError('circle resolution must be at least 3, got {}'.format(resolution))
        c = vect2(center)
        return cls([(c.x + radius * cos(2.0 * pi * i / resolution),
                     c.y + radius * sin(2.0 * pi * i / resolution)) for i in range(resolution)])

    def is_empty(self) -> bool:
        return not self.outer

    @property
    def sides(self) -> List[Side]:
        result = []
        for loop in [self.outer] + self.holes:
            for i, p in enumerate(loop):
                result.append((p, loop[(i + 1) % len(loop)]))
        return result

    def area(self) -> float:
        return sum(signed_area(loop) for loop in [self.outer] + self.holes) if self.outer else 0.0

    def bounds(self) -> Tuple[Vector2, Vector2]:
        if not self.outer:
            return Vector2(0.0, 0.0), Vector2(0.0, 0.0)
        xs = [p.x for p in self.outer]
        ys = [p.y for p in self.outer]
        return Vector2(min(xs), min(ys)), Vector2(max(xs), max(ys))

    def to_plane_polygons(self, translation=ZERO, normal=YAXIS, flipped: bool = False,
                          connector: Optional[Connector] = None) -> List[Polygon]:
        """Triangulated cap of the region, facing +z before placement.

        The cap is moved from the standard frame onto ``connector``, or
        onto ``Connector(translation, z axis, normal)`` when no
        connector is given; ``flipped`` turns it to face the other way.
        """
        if connector is None:
            connector = Connector(vect3(translation), ZAXIS, vect3(normal))
        elif not isinstance(connector, Connector):
            raise TypeError('to_plane_polygons expects a Connector, got {!r}'.format(connector))
        if self.is_empty():
            return []
        m = STANDARD_CONNECTOR.transformation_to(connector)
        loops = [self.outer] + self.holes
        plane = Plane(ZAXIS, 0.0)
        result = []
        for tri in triangulate_loops(self.outer, self.holes):
            verts = tuple(Vertex(loops[k][i].to_vector3()) for k, i in tri)
            polygon = Polygon(verts, plane=plane)
            if flipped:
                polygon = polygon.flipped()
            result.append(polygon.transform(m))
        return result

    def to_wall_polygons(self, connector1: Connector, connector2: Connector) -> List[Polygon]:
        """Side walls joining the profile placed at ``connector1`` to the
        profile placed at ``connector2``; two triangles per side, facing
        outwards when ``connector2`` lies along the axis of ``connector1``.
        Triangles that collapse (sides touching a sweep axis) are skipped.
        """
        if not isinstance(connector1, Connector) or not isinstance(connector2, Connector):
            raise TypeError('to_wall_polygons expects two Connectors, got {!r} and {!r}'.format(
                connector1, connector2))
        m1 = STANDARD_CONNECTOR.transformation_to(connector1)
        m2 = STANDARD_CONNECTOR.transformation_to(connector2)
        result = []
        for p0, p1 in self.sides:
            a0, a1 = p0.to_vector3(), p1.to_vector3()
            v1 = (m1.transform_point(a0), m1.transform_point(a1))
            v2 = (m2.transform_point(a0), m2.transform_point(a1))
            for points in ((v2[1], v2[0], v1[0]), (v2[1], v1[0], v1[1])):
                if _triangle_degenerate(*points):
                    continue
                result.append(Polygon(tuple(Vertex(p) for p in points)))
        return result


def _triangle_degenerate(a: Vector3, b: Vector3, c: Vector3) -> bool:
    return (b - a).cross(c - a).length() < epsilon * epsilon


__all__ = [
    'Shape2D',
]
