## foundational vector types and constants for yapcsg
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

"""foundational vector types and constants for **yapcsg**

====================
OVERVIEW
====================

Every other module of the kernel is built on the two value types
defined here, ``Vector2`` and ``Vector3``, and on the module level
constants.

constants
=========

``epsilon`` is the one and only tolerance of the kernel.  Plane
classification, polygon splitting, the canonicalization grid and
T-junction detection all compare against it, so that rounding
decisions made in one pass are never contradicted by another pass.
Redefine it at your peril.

``default_resolution_3d`` and ``default_resolution_2d`` are the
default number of slices used when approximating curved primitives
and sweeps.

vectors
=======

Vectors are immutable named tuples of floats.  Unlike yapCAD's
homogeneous ``[x,y,z,w]`` lists there is no ``w`` component: the
kernel only ever deals with points in the w=1 hyperplane, and the
homogeneous coordinate is added and removed inside
``yapcsg.xform.Matrix``.

The arithmetic operators are overloaded so that ``a + b``, ``a - b``,
``a * s``, ``s * a``, ``a / s`` and ``-a`` behave as vector operations
rather than tuple operations.  Because they are tuples, vectors hash
and compare by value, which is what canonicalization and structural
equality rely on.

"""

from math import sqrt, cos, sin, radians, pi
from typing import NamedTuple

## constants
epsilon = 1e-5
pi2 = 2.0*pi
default_resolution_2d = 32
default_resolution_3d = 12


## operations on scalars
## -----------------------

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n,bool)) and isinstance(n,(int,float))


## vector types
## ------------

class Vector2(NamedTuple):
    """two dimensional vector, used for the 2-D side of extrusions"""

    x: float
    y: float

    def __add__(self, o):
        return Vector2(self.x + o[0], self.y + o[1])

    def __sub__(self, o):
        return Vector2(self.x - o[0], self.y - o[1])

    def __mul__(self, s):
        return Vector2(self.x * s, self.y * s)

    __rmul__ = __mul__

    def __neg__(self):
        return Vector2(-self.x, -self.y)

    def dot(self, o):
        return self.x * o[0] + self.y * o[1]

    def cross(self, o):
        """z component of the 3-D cross product"""
        return self.x * o[1] - self.y * o[0]

    def length(self):
        return sqrt(self.x * self.x + self.y * self.y)

    def rotated(self, degrees):
        """ rotate counter-clockwise about the origin"""
        r = radians(degrees)
        c = cos(r)
        s = sin(r)
        return Vector2(self.x * c - self.y * s, self.x * s + self.y * c)

    def to_vector3(self, z=0.0):
        return Vector3(float(self.x), float(self.y), float(z))


class Vector3(NamedTuple):
    """three dimensional vector or point"""

    x: float
    y: float
    z: float

    def __add__(self, o):
        return Vector3(self.x + o[0], self.y + o[1], self.z + o[2])

    def __sub__(self, o):
        return Vector3(self.x - o[0], self.y - o[1], self.z - o[2])

    def __mul__(self, s):
        return Vector3(self.x * s, self.y * s, self.z * s)

    __rmul__ = __mul__

    def __truediv__(self, s):
        return Vector3(self.x / s, self.y / s, self.z / s)

    def __neg__(self):
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, o):
        return self.x * o[0] + self.y * o[1] + self.z * o[2]

    def cross(self, o):
        return Vector3(self.y * o[2] - self.z * o[1],
                       self.z * o[0] - self.x * o[2],
                       self.x * o[1] - self.y * o[0])

    def length(self):
        return sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def length_squared(self):
        return self.x * self.x + self.y * self.y + self.z * self.z

    def distance_to(self, o):
        return (self - o).length()

    def unit(self):
        """ return the normalized vector; raises on a zero-length vector"""
        m = self.length()
        if m < epsilon * epsilon:
            raise ValueError('cannot normalize zero-length vector {}'.format(self))
        return Vector3(self.x / m, self.y / m, self.z / m)

    def lerp(self, o, t):
        return Vector3(self.x + (o[0] - self.x) * t,
                       self.y + (o[1] - self.y) * t,
                       self.z + (o[2] - self.z) * t)

    def min(self, o):
        return Vector3(min(self.x, o[0]), min(self.y, o[1]), min(self.z, o[2]))

    def max(self, o):
        return Vector3(max(self.x, o[0]), max(self.y, o[1]), max(self.z, o[2]))

    def abs(self):
        return Vector3(abs(self.x), abs(self.y), abs(self.z))

    def close_to(self, o, tol=None):
        if tol is None:
            tol = epsilon
        return self.distance_to(o) < tol

    def any_perpendicular(self):
        """return a unit vector perpendicular to this one, choosing the
        cardinal axis least aligned with it so the choice is stable"""
        a = self.abs()
        if a.x <= a.y and a.x <= a.z:
            axis = Vector3(1.0, 0.0, 0.0)
        elif a.y <= a.x and a.y <= a.z:
            axis = Vector3(0.0, 1.0, 0.0)
        else:
            axis = Vector3(0.0, 0.0, 1.0)
        return self.cross(axis).unit()

    def rotated_z(self, degrees):
        r = radians(degrees)
        c = cos(r)
        s = sin(r)
        return Vector3(self.x * c - self.y * s, self.x * s + self.y * c, self.z)


def vect3(a):
    """Convenience function for making a ``Vector3`` out of any
    plausible three-or-more element sequence, or passing one through."""
    if isinstance(a, Vector3):
        return a
    if isinstance(a, (tuple, list)) and len(a) >= 3:
        return Vector3(float(a[0]), float(a[1]), float(a[2]))
    if isinstance(a, (tuple, list)) and len(a) == 2:
        return Vector3(float(a[0]), float(a[1]), 0.0)
    raise ValueError('bad value passed to vect3: {}'.format(a))


def vect2(a):
    if isinstance(a, Vector2):
        return a
    if isinstance(a, (tuple, list)) and len(a) >= 2:
        return Vector2(float(a[0]), float(a[1]))
    raise ValueError('bad value passed to vect2: {}'.format(a))


ZERO = Vector3(0.0, 0.0, 0.0)
XAXIS = Vector3(1.0, 0.0, 0.0)
YAXIS = Vector3(0.0, 1.0, 0.0)
ZAXIS = Vector3(0.0, 0.0, 1.0)
