import pytest

from yapcsg.geom import Vector3, ZAXIS, XAXIS, epsilon
from yapcsg.polygon import Plane, Polygon, Shared
from yapcsg.splitter import (
    BACK,
    COPLANAR,
    FRONT,
    SPANNING,
    classify_point,
    classify_polygon,
    split_polygon,
)


def _square(x0=0.0, x1=2.0, z=0.0, shared=None):
    pts = (Vector3(x0, 0.0, z), Vector3(x1, 0.0, z), Vector3(x1, 1.0, z), Vector3(x0, 1.0, z))
    if shared is None:
        return Polygon(pts)
    return Polygon(pts, shared)


def _split(plane, polygon):
    cf, cb, f, b = [], [], [], []
    split_polygon(plane, polygon, cf, cb, f, b)
    return cf, cb, f, b


def test_classify_point():
    plane = Plane(ZAXIS, 0.0)
    assert classify_point(plane, Vector3(0.0, 0.0, 1.0)) == FRONT
    assert classify_point(plane, Vector3(0.0, 0.0, -1.0)) == BACK
    assert classify_point(plane, Vector3(0.0, 0.0, epsilon / 2)) == COPLANAR
    assert SPANNING == FRONT | BACK


def test_classify_polygon():
    plane = Plane(XAXIS, 1.0)
    kind, types = classify_polygon(plane, _square())
    assert kind == SPANNING
    assert types == [BACK, FRONT, FRONT, BACK]


def test_coplanar_polygons():
    plane = Plane(ZAXIS, 0.0)
    cf, cb, f, b = _split(plane, _square())
    assert len(cf) == 1 and not cb and not f and not b
    cf, cb, f, b = _split(plane.flipped(), _square())
    assert len(cb) == 1 and not cf and not f and not b


def test_front_and_back():
    plane = Plane(ZAXIS, -1.0)
    cf, cb, f, b = _split(plane, _square())
    assert f == [_square()] and not b
    cf, cb, f, b = _split(plane.flipped(), _square())
    assert b == [_square()] and not f


def test_spanning_split():
    red = Shared((1, 0, 0))
    sq = _square(shared=red)
    cf, cb, f, b = _split(Plane(XAXIS, 0.5), sq)
    assert not cf and not cb
    assert len(f) == 1 and len(b) == 1
    front, back = f[0], b[0]
    ## fragments keep the parent's plane and tag
    assert front.plane is sq.plane and back.plane is sq.plane
    assert front.shared == red and back.shared == red
    assert front.area() == pytest.approx(1.5)
    assert back.area() == pytest.approx(0.5)
    assert Vector3(0.5, 0.0, 0.0) in front.positions()
    assert Vector3(0.5, 1.0, 0.0) in back.positions()


def test_near_plane_vertex_goes_to_both_sides():
    ## the triangle touches the plane at one vertex within epsilon
    tri = Polygon((Vector3(-1.0, 0.0, 0.0), Vector3(epsilon / 4, -1.0, 0.0), Vector3(1.0, 0.0, 0.0)))
    cf, cb, f, b = _split(Plane(XAXIS, 0.0), tri)
    assert len(f) == 1 and len(b) == 1
    assert len(f[0].vertices) == 3
    assert len(b[0].vertices) == 3


def test_thin_back_fragment():
    ## the plane sits just inside the polygon, leaving a thin strip behind it
    sq = _square(x0=0.0, x1=1.0)
    cf, cb, f, b = _split(Plane(XAXIS, 2 * epsilon), sq)
    assert len(f) == 1
    assert f[0].area() == pytest.approx(1.0 - 2 * epsilon)
    assert len(b) == 1
    assert b[0].area() == pytest.approx(2 * epsilon)
