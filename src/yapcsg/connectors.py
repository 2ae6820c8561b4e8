"""Coordinate frames used to place 2-D geometry in 3-D.

A ``Connector`` is a point with an axis and a normal: a right-handed
frame whose local ``z`` follows the axis and whose local ``y`` follows
the normal.  Sweeps use a pair of connectors per step, the 2-D profile
being carried from the standard ``z = 0`` frame into each of them.

An ``OrthoNormalBasis`` ties a plane to a right vector so that 2-D
coordinates in the plane are well defined.  It converts points between
the plane and 3-D, and supplies the matrices that do the same for whole
solids.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from yapcsg.geom import Vector2, Vector3, XAXIS, YAXIS, ZAXIS, ZERO, epsilon, vect3
from yapcsg.polygon import Plane
from yapcsg.xform import Basis, Matrix


@dataclass(frozen=True)
class Connector:
    point: Vector3
    axis: Vector3
    normal: Vector3

    def __post_init__(self):
        object.__setattr__(self, 'point', vect3(self.point))
        object.__setattr__(self, 'axis', vect3(self.axis).unit())
        object.__setattr__(self, 'normal', vect3(self.normal).unit())

    def normalized(self) -> "Connector":
        """same connector with the normal made perpendicular to the axis"""
        n = self.normal - self.axis * self.normal.dot(self.axis)
        if n.length() < epsilon:
            raise ValueError('connector normal {} is parallel to its axis {}'.format(
                self.normal, self.axis))
        return Connector(self.point, self.axis, n)

    def frame(self) -> Matrix:
        """matrix taking the standard frame (origin, z axis, y normal) to this one"""
        c = self.normalized()
        x = c.normal.cross(c.axis)
        return Basis(x, c.normal, c.axis, c.point)

    def transformation_to(self, other: "Connector") -> Matrix:
        """matrix moving this connector onto ``other``: points, axes and normals"""
        if not isinstance(other, Connector):
            raise TypeError('transformation_to expects a Connector, got {!r}'.format(other))
        return other.frame().mul(self.frame().inverse())

    def transform(self, matrix: Matrix) -> "Connector":
        p = matrix.transform_point(self.point)
        a = matrix.transform_direction(self.axis)
        n = matrix.transform_direction(self.normal)
        return Connector(p, a, n)

    def flipped(self) -> "Connector":
        return Connector(self.point, -self.axis, self.normal)


## the standard frame of 2-D geometry: origin, z axis, y normal
STANDARD_CONNECTOR = Connector(ZERO, ZAXIS, YAXIS)


_CARTESIAN: Dict[str, Vector3] = {
    'X': XAXIS,
    'Y': YAXIS,
    'Z': ZAXIS,
    '-X': -XAXIS,
    '-Y': -YAXIS,
    '-Z': -ZAXIS,
}


class OrthoNormalBasis:
    """A plane together with in-plane ``u`` and ``v`` axes.

    ``u`` is the projection of ``right_vector`` onto the plane, and
    ``v = normal x u``.  Without a right vector, a stable perpendicular
    of the plane normal is used.
    """

    def __init__(self, plane: Plane, right_vector: Optional[Vector3] = None):
        if right_vector is None:
            right_vector = plane.normal.any_perpendicular()
        self.plane = plane
        self.v = plane.normal.cross(vect3(right_vector)).unit()
        self.u = self.v.cross(plane.normal)
        self.plane_origin = plane.normal * plane.w

    def __repr__(self):
        return 'OrthoNormalBasis({}, u={}, v={})'.format(self.plane, self.u, self.v)

    @classmethod
    def from_cartesian(cls, xaxis_id: str, yaxis_id: str) -> "OrthoNormalBasis":
        """Basis through the origin whose 2-D x and y axes follow two
        cartesian axes, each one of ``X``, ``Y``, ``Z``, ``-X``, ``-Y``
        or ``-Z``.  The axes must be different."""
        u = _CARTESIAN.get(str(xaxis_id).strip().upper())
        v = _CARTESIAN.get(str(yaxis_id).strip().upper())
        if u is None or v is None or abs(u.dot(v)) > epsilon:
            raise ValueError('invalid combination of axis identifiers {!r}, {!r}: expected two '
                             'different axes from X, Y, Z, -X, -Y, -Z'.format(xaxis_id, yaxis_id))
        return cls(Plane(u.cross(v), 0.0), u)

    def projection_matrix(self) -> Matrix:
        """matrix taking 3-D points into basis coordinates (plane at z = 0)"""
        u, v, n = self.u, self.v, self.plane.normal
        return Matrix([[u.x, u.y, u.z, 0.0],
                       [v.x, v.y, v.z, 0.0],
                       [n.x, n.y, n.z, -self.plane.w],
                       [0.0, 0.0, 0.0, 1.0]])

    def inverse_projection_matrix(self) -> Matrix:
        """matrix taking basis coordinates back into 3-D"""
        return Basis(self.u, self.v, self.plane.normal, self.plane_origin)

    def to_2d(self, p) -> Vector2:
        p = vect3(p)
        return Vector2(p.dot(self.u), p.dot(self.v))

    def to_3d(self, p) -> Vector3:
        return self.plane_origin + self.u * p[0] + self.v * p[1]


__all__ = [
    'Connector',
    'OrthoNormalBasis',
    'STANDARD_CONNECTOR',
]
