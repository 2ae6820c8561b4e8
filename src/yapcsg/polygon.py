## planes, vertices and convex polygons, the value types of yapcsg
## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
=====================================================
polygon -- immutable geometric primitives for yapcsg
=====================================================

A solid is nothing more than a list of planar polygons, so the whole
kernel is built on the four value types defined here:

``Plane(normal, w)``
    unit ``normal`` and signed offset ``w``; the plane is the set of
    points ``p`` with ``dot(normal, p) == w``.  Points with a positive
    signed distance are in FRONT of the plane.

``Vertex(pos, normal)``
    a position and a shading normal.  ``interpolate`` blends both, and
    is what polygon splitting uses to create the crossing vertex on a
    cut edge.

``Shared(color)``
    an opaque per-polygon tag (currently just an optional RGBA color),
    carried unchanged through splitting.

``Polygon(vertices, shared, plane)``
    three or more coplanar vertices in counter-clockwise order when
    viewed from the front of ``plane``.  The plane is derived from the
    vertices when not supplied; split fragments pass their parent's
    plane along so that numerical drift does not accumulate.

All four are frozen dataclasses (or named tuples, via ``Vector3``), so
they compare and hash by value.  Structural equality of whole solids is
just tuple equality of their polygons.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from yapcsg.geom import Vector3, ZERO, epsilon, vect3
from yapcsg.xform import transform_normal


class DegenerateGeometryError(ValueError):
    """Raised when a plane is requested from collinear or coincident points."""


def newell_normal(points: Sequence[Vector3]) -> Vector3:
    """Return the (unnormalized) Newell normal of a closed point loop.

    Its length is twice the area enclosed by the loop, and it points
    towards the viewer for counter-clockwise loops.
    """
    nx = ny = nz = 0.0
    count = len(points)
    for i in range(count):
        cur = points[i]
        nxt = points[(i + 1) % count]
        nx += (cur[1] - nxt[1]) * (cur[2] + nxt[2])
        ny += (cur[2] - nxt[2]) * (cur[0] + nxt[0])
        nz += (cur[0] - nxt[0]) * (cur[1] + nxt[1])
    return Vector3(nx, ny, nz)


@dataclass(frozen=True)
class Plane:
    normal: Vector3
    w: float

    @classmethod
    def from_points(cls, a, b, c) -> "Plane":
        """Plane through three points, counter-clockwise seen from the front.

        Raises ``DegenerateGeometryError`` when the points are collinear.
        """
        a, b, c = vect3(a), vect3(b), vect3(c)
        n = (b - a).cross(c - a)
        length = n.length()
        if length < epsilon * epsilon:
            raise DegenerateGeometryError(
                'cannot derive a plane from collinear points {} {} {}'.format(a, b, c))
        n = n / length
        return cls(n, n.dot(a))

    @classmethod
    def from_normal_and_point(cls, normal, point) -> "Plane":
        n = vect3(normal).unit()
        return cls(n, n.dot(vect3(point)))

    @classmethod
    def from_loop(cls, points: Sequence[Vector3]) -> "Plane":
        """Best-fit plane through a planar loop using Newell's method."""
        n = newell_normal(points)
        length = n.length()
        if length < epsilon * epsilon:
            raise DegenerateGeometryError('cannot derive a plane from a zero-area loop')
        n = n / length
        centroid = Vector3(sum(p[0] for p in points) / len(points),
                           sum(p[1] for p in points) / len(points),
                           sum(p[2] for p in points) / len(points))
        return cls(n, n.dot(centroid))

    def flipped(self) -> "Plane":
        return Plane(-self.normal, -self.w)

    def signed_distance(self, p) -> float:
        return self.normal.dot(p) - self.w

    def point_on_plane(self) -> Vector3:
        return self.normal * self.w

    def transform(self, matrix, normal_matrix=None) -> "Plane":
        """Transform the plane with a ``yapcsg.xform.Matrix``.

        The normal goes through the inverse-transpose of the linear part;
        the offset is recomputed from a transformed point on the plane.
        """
        if normal_matrix is None:
            normal_matrix = matrix.normal_matrix()
        n = transform_normal(normal_matrix, self.normal).unit()
        p = matrix.transform_point(self.point_on_plane())
        return Plane(n, n.dot(p))


@dataclass(frozen=True)
class Vertex:
    pos: Vector3
    normal: Vector3 = ZERO

    def flipped(self) -> "Vertex":
        return Vertex(self.pos, -self.normal)

    def interpolate(self, other: "Vertex", t: float) -> "Vertex":
        return Vertex(self.pos.lerp(other.pos, t), self.normal.lerp(other.normal, t))

    def translated(self, delta) -> "Vertex":
        return Vertex(self.pos + delta, self.normal)

    def transform(self, matrix, normal_matrix=None) -> "Vertex":
        pos = matrix.transform_point(self.pos)
        if self.normal == ZERO:
            return Vertex(pos, ZERO)
        if normal_matrix is None:
            normal_matrix = matrix.normal_matrix()
        n = transform_normal(normal_matrix, self.normal)
        length = n.length()
        if length > 0.0:
            n = n / length
        return Vertex(pos, n)


@dataclass(frozen=True)
class Shared:
    color: Optional[Tuple[float, float, float, float]] = None

    def __post_init__(self):
        if self.color is not None:
            c = tuple(float(x) for x in self.color)
            if len(c) == 3:
                c = c + (1.0,)
            if len(c) != 4:
                raise ValueError('color must have three or four components: {}'.format(self.color))
            object.__setattr__(self, 'color', c)


default_shared = Shared()


def _vertex(v) -> Vertex:
    if isinstance(v, Vertex):
        return v
    return Vertex(vect3(v))


@dataclass(frozen=True)
class Polygon:
    vertices: Tuple[Vertex, ...]
    shared: Shared = default_shared
    plane: Optional[Plane] = field(default=None)

    def __post_init__(self):
        verts = tuple(_vertex(v) for v in self.vertices)
        if len(verts) < 3:
            raise ValueError('polygon needs at least three vertices, got {}'.format(len(verts)))
        object.__setattr__(self, 'vertices', verts)
        if self.shared is None:
            object.__setattr__(self, 'shared', default_shared)
        if self.plane is None:
            object.__setattr__(self, 'plane', Plane.from_loop([v.pos for v in verts]))

    def flipped(self) -> "Polygon":
        verts = tuple(v.flipped() for v in reversed(self.vertices))
        return Polygon(verts, self.shared, self.plane.flipped())

    def with_shared(self, shared: Shared) -> "Polygon":
        return Polygon(self.vertices, shared, self.plane)

    def translated(self, delta) -> "Polygon":
        delta = vect3(delta)
        plane = Plane(self.plane.normal, self.plane.w + self.plane.normal.dot(delta))
        return Polygon(tuple(v.translated(delta) for v in self.vertices), self.shared, plane)

    def transform(self, matrix, normal_matrix=None, mirroring=None) -> "Polygon":
        """Transform with a ``yapcsg.xform.Matrix``; a mirroring matrix
        also reverses the vertex order so the polygon keeps facing out.
        Callers transforming many polygons may pass the precomputed
        ``normal_matrix`` and ``mirroring`` flag."""
        if normal_matrix is None:
            normal_matrix = matrix.normal_matrix()
        if mirroring is None:
            mirroring = matrix.is_mirroring()
        verts = [v.transform(matrix, normal_matrix) for v in self.vertices]
        if mirroring:
            verts.reverse()
        return Polygon(tuple(verts), self.shared, self.plane.transform(matrix, normal_matrix))

    def positions(self):
        return [v.pos for v in self.vertices]

    def area(self) -> float:
        return 0.5 * newell_normal(self.positions()).length()

    def signed_volume(self) -> float:
        """sum of signed tetrahedron volumes from the origin over a fan"""
        total = 0.0
        p0 = self.vertices[0].pos
        for i in range(1, len(self.vertices) - 1):
            p1 = self.vertices[i].pos
            p2 = self.vertices[i + 1].pos
            total += p0.dot(p1.cross(p2))
        return total / 6.0

    def bounding_box(self):
        lo = hi = self.vertices[0].pos
        for v in self.vertices[1:]:
            lo = lo.min(v.pos)
            hi = hi.max(v.pos)
        return lo, hi

    def to_triangles(self):
        """fan triangulation, reusing this polygon's plane"""
        if len(self.vertices) == 3:
            return [self]
        v0 = self.vertices[0]
        return [Polygon((v0, self.vertices[i], self.vertices[i + 1]), self.shared, self.plane)
                for i in range(1, len(self.vertices) - 1)]


__all__ = [
    'DegenerateGeometryError',
    'Plane',
    'Polygon',
    'Shared',
    'Vertex',
    'default_shared',
    'newell_normal',
]
