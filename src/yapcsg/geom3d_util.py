## geom3d_util, primitive solids for yapcsg

from math import cos, sin, pi

from yapcsg.geom import Vector3, ZERO, XAXIS, YAXIS, ZAXIS, default_resolution_3d, isgoodnum, vect3
from yapcsg.polygon import Plane, Polygon, Vertex, default_shared

"""
=====================================
Primitive solids for the yapcsg kernel
=====================================

This module is a small collection of parametric solids: axis aligned
boxes, UV spheres, cylinders between two points, and straight prisms
swept from a single polygon.  The derived operations of
``yapcsg.solid.Solid`` (expansion, plane cuts, point clouds) are built
from these, and they make convenient test fixtures.

Every function returns a ``yapcsg.solid.Solid`` with outward facing,
counter-clockwise polygons.

"""


def _solid(polygons):
    from yapcsg.solid import Solid
    return Solid.from_polygons(polygons)


def _face(points, normal, shared=default_shared):
    """planar polygon whose vertices all carry the face normal"""
    plane = Plane.from_normal_and_point(normal, points[0])
    return Polygon(tuple(Vertex(p, plane.normal) for p in points), shared, plane)


## box corner table: corner i sits at center + radius * (+/-1, +/-1, +/-1)
## with bit 0, 1, 2 of i selecting the sign of x, y, z
_CUBE_FACES = (
    ((0, 4, 6, 2), (-1.0, 0.0, 0.0)),
    ((1, 3, 7, 5), (1.0, 0.0, 0.0)),
    ((0, 1, 5, 4), (0.0, -1.0, 0.0)),
    ((2, 6, 7, 3), (0.0, 1.0, 0.0)),
    ((0, 2, 3, 1), (0.0, 0.0, -1.0)),
    ((4, 5, 7, 6), (0.0, 0.0, 1.0)),
)


def cube(center=ZERO, radius=1.0):
    """
    Axis aligned box.
        ``center`` -- center point of the box
        ``radius`` -- half the edge length, either a scalar or a
        three-element sequence of per-axis half lengths
    """
    c = vect3(center)
    if isgoodnum(radius):
        r = Vector3(float(radius), float(radius), float(radius))
    else:
        r = vect3(radius)
    if r.x <= 0 or r.y <= 0 or r.z <= 0:
        raise ValueError('cube radius must be positive, got {}'.format(radius))

    def corner(i):
        return Vector3(c.x + r.x * (2 * (i & 1) - 1),
                       c.y + r.y * ((i & 2) - 1),
                       c.z + r.z * ((i & 4) // 2 - 1))

    polygons = []
    for indices, normal in _CUBE_FACES:
        polygons.append(_face([corner(i) for i in indices], Vector3(*normal)))
    return _solid(polygons)


def sphere(center=ZERO, radius=1.0, resolution=default_resolution_3d, axes=None):
    """
    UV sphere.
        ``center``, ``radius`` -- placement and size
        ``resolution`` -- number of segments around the equator; at
        least 4 are used.  The number of latitude bands is half of that.
        ``axes`` -- optional ``(x, y, z)`` orthonormal frame used to
        orient the poles and the first meridian

    Faces are quads, except for the triangles touching the poles.
    """
    if resolution < 1:
        raise ValueError('sphere resolution must be positive, got {}'.format(resolution))
    resolution = max(4, int(resolution))
    c = vect3(center)
    if axes is None:
        xv, yv, zv = XAXIS, YAXIS, ZAXIS
    else:
        xv, yv, zv = (vect3(a).unit() for a in axes)
    stacks = 2 * max(1, round(resolution / 4))

    def direction(i, j):
        if j == 0:
            return -zv
        if j == stacks:
            return zv
        lat = pi * j / stacks - pi / 2
        lon = 2.0 * pi * (i % resolution) / resolution
        ring = xv * cos(lon) + yv * sin(lon)
        return ring * cos(lat) + zv * sin(lat)

    def vertex(i, j):
        d = direction(i, j)
        return Vertex(c + d * radius, d)

    polygons = []
    for i in range(resolution):
        for j in range(stacks):
            if j == 0:
                verts = (vertex(i, 0), vertex(i + 1, 1), vertex(i, 1))
            elif j == stacks - 1:
                verts = (vertex(i, j), vertex(i + 1, j), vertex(i, stacks))
            else:
                verts = (vertex(i, j), vertex(i + 1, j), vertex(i + 1, j + 1), vertex(i, j + 1))
            polygons.append(Polygon(verts, default_shared))
    return _solid(polygons)


def cylinder(start=(0.0, -1.0, 0.0), end=(0.0, 1.0, 0.0), radius=1.0,
             resolution=default_resolution_3d):
    """
    Right circular cylinder around the segment from ``start`` to
    ``end``, approximated by a prism with ``resolution`` sides.
    """
    s = vect3(start)
    e = vect3(end)
    if resolution < 3:
        raise ValueError('cylinder resolution must be at least 3, got {}'.format(resolution))
    axis = e - s
    ray = axis.unit()
    xv = ray.any_perpendicular()
    yv = ray.cross(xv)

    rim = []
    for i in range(resolution):
        a = 2.0 * pi * i / resolution
        rim.append(xv * cos(a) + yv * sin(a))

    polygons = [_face([s + d * radius for d in reversed(rim)], -ray),
                _face([e + d * radius for d in rim], ray)]
    for i in range(resolution):
        d0 = rim[i]
        d1 = rim[(i + 1) % resolution]
        verts = (Vertex(s + d0 * radius, d0), Vertex(s + d1 * radius, d1),
                 Vertex(e + d1 * radius, d1), Vertex(e + d0 * radius, d0))
        polygons.append(Polygon(verts, default_shared))
    return _solid(polygons)


def polygon_prism(polygon, offset):
    """
    Sweep ``polygon`` along the vector ``offset`` into a closed prism.

    The polygon is used as the bottom face (flipped first if its normal
    points along ``offset``), a translated copy facing the other way
    closes the top, and one quad per edge forms the sides.  Side faces
    carry the shared tag of the source polygon.
    """
    offset = vect3(offset)
    bottom = polygon
    if bottom.plane.normal.dot(offset) > 0:
        bottom = bottom.flipped()
    top = bottom.translated(offset)
    polygons = [bottom]
    count = len(bottom.vertices)
    for i in range(count):
        j = (i + 1) % count
        points = [bottom.vertices[i].pos, top.vertices[i].pos,
                  top.vertices[j].pos, bottom.vertices[j].pos]
        plane = Plane.from_loop(points)
        polygons.append(Polygon(tuple(Vertex(p, plane.normal) for p in points),
                                polygon.shared, plane))
    polygons.append(top.flipped())
    return _solid(polygons)


__all__ = [
    'cube',
    'cylinder',
    'polygon_prism',
    'sphere',
]
