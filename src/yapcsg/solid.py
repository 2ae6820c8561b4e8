## the Solid container: booleans, transforms and derived operations
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
===============================
solid -- the yapcsg Solid value
===============================

A ``Solid`` is a boundary representation: a tuple of outward facing
planar polygons, plus two flags recording whether the polygon set has
been canonicalized and retesselated.  Solids are immutable.  Every
operation returns a new solid (or ``self`` when there is nothing to
do), and the only cached value, ``bounding_box``, is memoized per
instance and never compared.

The empty solid ``Solid()`` is the identity of union.  Its flags are
both true, so it is equal to any other empty solid, however obtained.

Booleans
========

``union``, ``subtract`` and ``intersect`` take a solid or a list of
solids and fold them in from left to right.  Operands whose bounding
boxes cannot overlap skip the BSP step entirely.  By default results
are neither retesselated nor canonicalized; pass
``retesselate=True`` and/or ``canonicalize=True`` to have that done
once, at the end of the fold.

Derived operations
==================

Plane cuts, stretching, offsetting (``expand``/``contract``), laying
flat and point clouds are compositions of booleans, transforms and the
primitives of ``yapcsg.geom3d_util``.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Dict, List, Optional, Sequence, Tuple

from yapcsg.bsp import intersect_polygons, subtract_polygons, union_polygons
from yapcsg.fuzzy import canonicalize_polygons
from yapcsg.geom import Vector2, Vector3, XAXIS, YAXIS, ZAXIS, ZERO, default_resolution_3d, epsilon, vect3
from yapcsg.polygon import Plane, Polygon, Shared, Vertex
from yapcsg.retesselate import fix_t_junctions, retesselate_polygons
from yapcsg.xform import Matrix, Mirror, Rotation, Scale, Translation

logger = logging.getLogger(__name__)


def _bounds_overlap(a, b) -> bool:
    (alo, ahi), (blo, bhi) = a, b
    return not (ahi.x + epsilon < blo.x or alo.x - epsilon > bhi.x or
                ahi.y + epsilon < blo.y or alo.y - epsilon > bhi.y or
                ahi.z + epsilon < blo.z or alo.z - epsilon > bhi.z)


@dataclass(frozen=True)
class Solid:
    polygons: Tuple[Polygon, ...] = ()
    is_canonicalized: Optional[bool] = None
    is_retesselated: Optional[bool] = None

    def __post_init__(self):
        polygons = tuple(self.polygons)
        for p in polygons:
            if not isinstance(p, Polygon):
                raise TypeError('Solid expects Polygon instances, got {!r}'.format(p))
        object.__setattr__(self, 'polygons', polygons)
        empty = not polygons
        if self.is_canonicalized is None:
            object.__setattr__(self, 'is_canonicalized', empty)
        if self.is_retesselated is None:
            object.__setattr__(self, 'is_retesselated', empty)

    ## construction
    ## ------------

    @classmethod
    def from_polygons(cls, polygons: Sequence[Polygon]) -> "Solid":
        return cls(tuple(polygons))

    @classmethod
    def from_object(cls, obj) -> "Solid":
        from yapcsg.io.compact import from_object
        return from_object(obj)

    @classmethod
    def from_compact_binary(cls, data) -> "Solid":
        from yapcsg.io.compact import from_compact_binary
        return from_compact_binary(data)

    def to_object(self) -> dict:
        from yapcsg.io.compact import to_object
        return to_object(self)

    def to_compact_binary(self) -> dict:
        from yapcsg.io.compact import to_compact_binary
        return to_compact_binary(self)

    ## queries
    ## -------

    def is_empty(self) -> bool:
        return not self.polygons

    @cached_property
    def bounding_box(self) -> Tuple[Vector3, Vector3]:
        """``(min, max)`` corners; both zero for the empty solid"""
        if not self.polygons:
            return ZERO, ZERO
        lo = hi = self.polygons[0].vertices[0].pos
        for polygon in self.polygons:
            for v in polygon.vertices:
                lo = lo.min(v.pos)
                hi = hi.max(v.pos)
        return lo, hi

    def may_overlap(self, other: "Solid") -> bool:
        if not self.polygons or not other.polygons:
            return False
        return _bounds_overlap(self.bounding_box, other.bounding_box)

    def volume(self) -> float:
        return sum(p.signed_volume() for p in self.polygons)

    def area(self) -> float:
        return sum(p.area() for p in self.polygons)

    def to_polygons(self) -> List[Polygon]:
        return list(self.polygons)

    def to_triangles(self) -> List[Polygon]:
        result = []
        for polygon in self.polygons:
            result.extend(polygon.to_triangles())
        return result

    def __str__(self):
        lines = ['Solid with {} polygons:'.format(len(self.polygons))]
        for polygon in self.polygons:
            n = polygon.plane.normal
            lines.append('Polygon plane: [normal: ({:.5f}, {:.5f}, {:.5f}), w: {:.5f}]'.format(
                n.x, n.y, n.z, polygon.plane.w))
            for v in polygon.vertices:
                lines.append('  ({:.5f}, {:.5f}, {:.5f})'.format(*v.pos))
        return '\n'.join(lines) + '\n'

    ## booleans
    ## --------

    @staticmethod
    def _operands(other, opname) -> List["Solid"]:
        if isinstance(other, Solid):
            return [other]
        if isinstance(other, (list, tuple)):
            for o in other:
                if not isinstance(o, Solid):
                    raise TypeError('{} expects Solid operands, got {!r}'.format(opname, o))
            return list(other)
        raise TypeError('{} expects a Solid or a list of Solids, got {!r}'.format(opname, other))

    def _finish(self, retesselate: bool, canonicalize: bool) -> "Solid":
        result = self
        if retesselate:
            result = result.retesselated()
        if canonicalize:
            result = result.canonicalized()
        return result

    def _union_one(self, other: "Solid") -> "Solid":
        if not self.may_overlap(other):
            logger.debug('union: bounds do not overlap, concatenating %d + %d polygons',
                         len(self.polygons), len(other.polygons))
            if not other.polygons:
                return self
            if not self.polygons:
                return other
            ## the concatenation is not in canonical order
            return Solid(self.polygons + other.polygons, False,
                         self.is_retesselated and other.is_retesselated)
        return Solid.from_polygons(union_polygons(self.polygons, other.polygons))

    def _subtract_one(self, other: "Solid") -> "Solid":
        if not self.may_overlap(other):
            logger.debug('subtract: bounds do not overlap, keeping %d polygons', len(self.polygons))
            return self
        return Solid.from_polygons(subtract_polygons(self.polygons, other.polygons))

    def _intersect_one(self, other: "Solid") -> "Solid":
        if not self.may_overlap(other):
            logger.debug('intersect: bounds do not overlap, result is empty')
            return Solid()
        return Solid.from_polygons(intersect_polygons(self.polygons, other.polygons))

    def union(self, other, retesselate: bool = False, canonicalize: bool = False) -> "Solid":
        """
        Return a new solid representing space in this solid or in the
        other solid(s)::

            A.union(B)

            +-------+            +-------+
            |       |            |       |
            |   A   |            |       |
            |    +--+----+   =   |       +----+
            +----+--+    |       +----+       |
                 |   B   |            |       |
                 |       |            |       |
                 +-------+            +-------+
        """
        result = self
        for o in self._operands(other, 'union'):
            result = result._union_one(o)
        return result._finish(retesselate, canonicalize)

    def subtract(self, other, retesselate: bool = False, canonicalize: bool = False) -> "Solid":
        """
        Return a new solid representing space in this solid but not in
        the other solid(s)::

            A.subtract(B)

            +-------+            +-------+
            |       |            |       |
            |   A   |            |       |
            |    +--+----+   =   |    +--+
            +----+--+    |       +----+
                 |   B   |
                 |       |
                 +-------+
        """
        result = self
        for o in self._operands(other, 'subtract'):
            result = result._subtract_one(o)
        return result._finish(retesselate, canonicalize)

    def intersect(self, other, retesselate: bool = False, canonicalize: bool = False) -> "Solid":
        """
        Return a new solid representing space both in this solid and in
        the other solid(s)::

            A.intersect(B)

            +-------+
            |       |
            |   A   |
            |    +--+----+   =   +--+
            +----+--+    |       +--+
                 |   B   |
                 |       |
                 +-------+
        """
        result = self
        for o in self._operands(other, 'intersect'):
            result = result._intersect_one(o)
        return result._finish(retesselate, canonicalize)

    ## post-processing
    ## ---------------

    def canonicalized(self) -> "Solid":
        if self.is_canonicalized:
            return self
        polygons = canonicalize_polygons(self.polygons)
        if not polygons:
            return Solid()
        return Solid(tuple(polygons), True, self.is_retesselated)

    def retesselated(self) -> "Solid":
        if self.is_retesselated:
            return self
        polygons = retesselate_polygons(self.canonicalized().polygons)
        if not polygons:
            return Solid()
        return Solid(tuple(polygons), False, True)

    def fix_t_junctions(self) -> "Solid":
        """Solid whose polygons share every vertex lying on their edges.
        Retesselated solids are already free of T-junctions."""
        if self.is_retesselated:
            return self
        polygons = fix_t_junctions(self.canonicalized().polygons)
        return Solid(tuple(polygons), False, False)

    ## transforms
    ## ----------

    def transform(self, matrix: Matrix) -> "Solid":
        """Apply a 4x4 ``Matrix`` to every polygon.  Mirroring matrices
        keep the polygons facing outwards."""
        if not isinstance(matrix, Matrix):
            raise TypeError('transform expects a Matrix, got {!r}'.format(matrix))
        if not self.polygons or matrix.is_identity():
            return self
        nm = matrix.normal_matrix()
        mirroring = matrix.is_mirroring()
        polygons = tuple(p.transform(matrix, nm, mirroring) for p in self.polygons)
        return Solid(polygons, False, self.is_retesselated)

    def translate(self, delta) -> "Solid":
        return self.transform(Translation(vect3(delta)))

    def scale(self, factor) -> "Solid":
        return self.transform(Scale(factor))

    def rotate(self, center, axis, degrees: float) -> "Solid":
        """rotate by ``degrees`` (right hand rule) about the line through
        ``center`` along ``axis``"""
        c = vect3(center)
        m = Translation(c).mul(Rotation(vect3(axis), degrees)).mul(Translation(c, inverse=True))
        return self.transform(m)

    def rotate_x(self, degrees: float) -> "Solid":
        return self.transform(Rotation(XAXIS, degrees))

    def rotate_y(self, degrees: float) -> "Solid":
        return self.transform(Rotation(YAXIS, degrees))

    def rotate_z(self, degrees: float) -> "Solid":
        return self.transform(Rotation(ZAXIS, degrees))

    def rotate_euler_angles(self, alpha: float, beta: float, gamma: float, position=ZERO) -> "Solid":
        """z-x-z Euler rotation (``gamma`` about z first, then ``beta``
        about x, then ``alpha`` about z), followed by a move to ``position``"""
        m = (Translation(vect3(position))
             .mul(Rotation(ZAXIS, alpha))
             .mul(Rotation(XAXIS, beta))
             .mul(Rotation(ZAXIS, gamma)))
        return self.transform(m)

    def mirrored(self, plane: Plane) -> "Solid":
        return self.transform(Mirror(plane.normal, plane.w))

    def mirrored_x(self) -> "Solid":
        return self.mirrored(Plane(XAXIS, 0.0))

    def mirrored_y(self) -> "Solid":
        return self.mirrored(Plane(YAXIS, 0.0))

    def mirrored_z(self) -> "Solid":
        return self.mirrored(Plane(ZAXIS, 0.0))

    def center(self, axes: Sequence[str] = ('x', 'y', 'z')) -> "Solid":
        """move the bounding box center to the origin along the named axes"""
        if not self.polygons:
            return self
        lo, hi = self.bounding_box
        delta = [-(lo[i] + hi[i]) / 2.0 if name in axes else 0.0
                 for i, name in enumerate('xyz')]
        return self.translate(delta)

    ## tags
    ## ----

    def set_shared(self, shared: Shared) -> "Solid":
        if not isinstance(shared, Shared):
            raise TypeError('set_shared expects a Shared, got {!r}'.format(shared))
        if not self.polygons:
            return self
        polygons = tuple(p.with_shared(shared) for p in self.polygons)
        return Solid(polygons, self.is_canonicalized, False)

    def set_color(self, r, g=None, b=None, a: float = 1.0) -> "Solid":
        """``set_color(r, g, b[, a])`` or ``set_color((r, g, b[, a]))``"""
        if g is None and b is None:
            color = tuple(r)
        else:
            color = (r, g, b, a)
        return self.set_shared(Shared(color))

    ## derived operations
    ## ------------------

    def inverse(self) -> "Solid":
        """the complement: every polygon flipped.  Flipping reverses the
        vertex cycles, so the result is neither canonical nor retesselated."""
        return Solid(tuple(p.flipped() for p in self.polygons))

    invert = inverse

    def cut_by_plane(self, plane: Plane) -> "Solid":
        """Return the part of this solid on the back side of ``plane``."""
        if not self.polygons:
            return Solid()
        from yapcsg.connectors import OrthoNormalBasis
        from yapcsg.geom3d_util import polygon_prism

        ## a square on the plane, big enough that its prism swallows the
        ## whole solid, stands in for the infinite half space
        origin = plane.point_on_plane()
        far = 0.0
        for polygon in self.polygons:
            for v in polygon.vertices:
                far = max(far, v.pos.distance_to(origin))
        far = far * 1.01 + 1.0
        basis = OrthoNormalBasis(plane)
        corners = [basis.to_3d(Vector2(far, -far)), basis.to_3d(Vector2(-far, -far)),
                   basis.to_3d(Vector2(-far, far)), basis.to_3d(Vector2(far, far))]
        face = Polygon(tuple(Vertex(c) for c in corners), plane=plane.flipped())
        halfspace = polygon_prism(face, plane.normal * -far)
        return self.intersect(halfspace)

    def stretch_at_plane(self, normal, point, length: float) -> "Solid":
        """Cut the solid at the plane through ``point`` and move the front
        part ``length`` along ``normal``, filling the gap with the
        cross section swept across it."""
        from yapcsg.geom3d_util import polygon_prism

        plane = Plane.from_normal_and_point(normal, point)
        piece1 = self.cut_by_plane(plane)
        piece2 = self.cut_by_plane(plane.flipped())
        offset = plane.normal * length
        midpiece = Solid()
        for polygon in piece1.polygons:
            if _lies_on(polygon, plane):
                midpiece = midpiece.union(polygon_prism(polygon, offset))
        return piece1.union([midpiece, piece2.translate(offset)])

    def expanded_shell(self, radius: float, resolution: int = default_resolution_3d,
                       union_with_self: bool = False) -> "Solid":
        """Union of the swept primitives making up the offset shell: a
        slab of thickness ``2 * radius`` around every face, a cylinder
        around every edge and a sphere around every vertex."""
        from yapcsg.geom3d_util import cylinder, polygon_prism, sphere

        csg = self.retesselated()
        result = csg if union_with_self else Solid()
        for polygon in csg.polygons:
            sweep = polygon.plane.normal * (2.0 * radius)
            result = result.union(polygon_prism(polygon.translated(sweep * -0.5), sweep))

        edges: Dict[Tuple[Vector3, Vector3], None] = {}
        vertices: Dict[Vector3, None] = {}
        for polygon in csg.polygons:
            count = len(polygon.vertices)
            for i, v in enumerate(polygon.vertices):
                w = polygon.vertices[(i + 1) % count]
                edges.setdefault((min(v.pos, w.pos), max(v.pos, w.pos)))
                vertices.setdefault(v.pos)
        for start, end in edges:
            result = result.union(cylinder(start, end, radius, resolution))
        for pos in vertices:
            result = result.union(sphere(pos, radius, resolution))
        logger.debug('expanded shell: %d faces, %d edges, %d vertices',
                     len(csg.polygons), len(edges), len(vertices))
        return result

    def expand(self, radius: float, resolution: int = default_resolution_3d) -> "Solid":
        return self.expanded_shell(radius, resolution, True).retesselated()

    def contract(self, radius: float, resolution: int = default_resolution_3d) -> "Solid":
        shell = self.expanded_shell(radius, resolution, False)
        return self.subtract(shell).retesselated()

    def get_transformation_and_inverse_transformation_to_flat_lying(self) -> Tuple[Matrix, Matrix]:
        """Find the face plane that, turned to face -z and dropped onto
        z = 0, leaves the solid lowest; ties go to the face already
        pointing most nearly down.  The solid ends up centered on the z
        axis.  Returns the transformation and its inverse."""
        if not self.polygons:
            return Matrix(), Matrix()
        from yapcsg.connectors import Connector

        csg = self.canonicalized()
        planes: Dict[Plane, None] = {}
        for polygon in csg.polygons:
            planes.setdefault(polygon.plane)
        down = Vector3(0.0, 0.0, -1.0)
        z0_x = Connector(ZERO, down, XAXIS)
        z0_y = Connector(ZERO, down, YAXIS)
        positions = [v.pos for p in csg.polygons for v in p.vertices]

        best = None
        for plane in planes:
            ## align with whichever of x and y is more perpendicular to the normal
            if plane.normal.cross(XAXIS).length() > plane.normal.cross(YAXIS).length():
                target, aligned = z0_x, XAXIS
            else:
                target, aligned = z0_y, YAXIS
            connector = Connector(plane.point_on_plane(), plane.normal, aligned)
            m = connector.transformation_to(target)
            m_inv = target.transformation_to(connector)
            moved = [m.transform_point(p) for p in positions]
            lo = Vector3(min(p.x for p in moved), min(p.y for p in moved), min(p.z for p in moved))
            hi = Vector3(max(p.x for p in moved), max(p.y for p in moved), max(p.z for p in moved))
            height = hi.z - lo.z
            dotz = -plane.normal.z
            if best is not None:
                if abs(height - best[0]) < 1e-10:
                    if dotz <= best[1]:
                        continue
                elif height >= best[0]:
                    continue
            shift = Vector3(-0.5 * (hi.x + lo.x), -0.5 * (hi.y + lo.y), -lo.z)
            best = (height, dotz,
                    Translation(shift).mul(m),
                    m_inv.mul(Translation(shift, inverse=True)))
        return best[2], best[3]

    def get_transformation_to_flat_lying(self) -> Matrix:
        return self.get_transformation_and_inverse_transformation_to_flat_lying()[0]

    def lie_flat(self) -> "Solid":
        return self.transform(self.get_transformation_to_flat_lying())

    def to_point_cloud(self, cube_radius: float) -> "Solid":
        """a small cube at every vertex, unioned and retesselated"""
        from yapcsg.geom3d_util import cube

        csg = self.retesselated()
        positions: Dict[Vector3, None] = {}
        for polygon in csg.polygons:
            for v in polygon.vertices:
                positions.setdefault(v.pos)
        result = Solid()
        for pos in positions:
            result = result.union(cube(pos, cube_radius))
        return result.retesselated()


def _lies_on(polygon: Polygon, plane: Plane) -> bool:
    return (polygon.plane.normal.distance_to(plane.normal) < epsilon and
            all(abs(plane.signed_distance(v.pos)) < epsilon for v in polygon.vertices))


__all__ = [
    'Solid',
]
