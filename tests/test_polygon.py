import math

import pytest

from yapcsg.geom import Vector3, XAXIS, ZAXIS, ZERO, epsilon
from yapcsg.polygon import (
    DegenerateGeometryError,
    Plane,
    Polygon,
    Shared,
    Vertex,
    default_shared,
    newell_normal,
)
from yapcsg.xform import Mirror, Rotation, Scale, Translation


def _square(z=0.0, size=1.0):
    return Polygon((Vector3(0.0, 0.0, z), Vector3(size, 0.0, z),
                    Vector3(size, size, z), Vector3(0.0, size, z)))


class TestPlane:

    def test_from_points(self):
        p = Plane.from_points((0, 0, 1), (1, 0, 1), (0, 1, 1))
        assert p.normal == ZAXIS
        assert math.isclose(p.w, 1.0)
        assert p.signed_distance(Vector3(5.0, 5.0, 3.0)) == pytest.approx(2.0)

    def test_collinear_points_are_rejected(self):
        with pytest.raises(DegenerateGeometryError):
            Plane.from_points((0, 0, 0), (1, 1, 1), (2, 2, 2))
        ## the error is a ValueError for callers that do not care
        with pytest.raises(ValueError):
            Plane.from_points((0, 0, 0), (0, 0, 0), (1, 0, 0))

    def test_flipped(self):
        p = Plane(ZAXIS, 2.0)
        f = p.flipped()
        assert f.normal == -ZAXIS
        assert f.w == -2.0
        assert f.flipped() == p

    def test_transform_keeps_points_on_plane(self):
        p = Plane.from_points((1, 0, 0), (0, 1, 0), (0, 0, 1))
        m = Translation([1, 2, 3]).mul(Scale(2, 1, 0.5)).mul(Rotation([1, 0, 0], 30))
        q = p.transform(m)
        for pt in ((1, 0, 0), (0, 1, 0), (0, 0, 1)):
            moved = m.transform_point(pt)
            assert abs(q.signed_distance(moved)) < epsilon
        assert math.isclose(q.normal.length(), 1.0)


class TestVertex:

    def test_interpolate(self):
        a = Vertex(Vector3(0.0, 0.0, 0.0), ZAXIS)
        b = Vertex(Vector3(2.0, 0.0, 0.0), XAXIS)
        m = a.interpolate(b, 0.25)
        assert m.pos == Vector3(0.5, 0.0, 0.0)
        assert m.normal == Vector3(0.25, 0.0, 0.75)

    def test_flipped(self):
        v = Vertex(Vector3(1.0, 2.0, 3.0), ZAXIS)
        assert v.flipped().normal == -ZAXIS
        assert v.flipped().pos == v.pos

    def test_default_normal(self):
        assert Vertex(Vector3(1.0, 2.0, 3.0)).normal == ZERO


class TestShared:

    def test_color_normalized(self):
        assert Shared((1, 0, 0)).color == (1.0, 0.0, 0.0, 1.0)
        assert Shared([0.1, 0.2, 0.3, 0.4]) == Shared((0.1, 0.2, 0.3, 0.4))
        assert Shared() == default_shared

    def test_bad_color(self):
        with pytest.raises(ValueError):
            Shared((1, 2))


class TestPolygon:

    def test_needs_three_vertices(self):
        with pytest.raises(ValueError):
            Polygon((Vector3(0.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0)))

    def test_plane_from_vertices(self):
        sq = _square(z=2.0)
        assert sq.plane.normal.close_to(ZAXIS)
        assert math.isclose(sq.plane.w, 2.0)
        assert sq.shared is default_shared

    def test_degenerate_plane(self):
        with pytest.raises(DegenerateGeometryError):
            Polygon((Vector3(0.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0), Vector3(2.0, 0.0, 0.0)))

    def test_flip_reverses_winding(self):
        sq = _square()
        f = sq.flipped()
        assert f.plane == sq.plane.flipped()
        assert [v.pos for v in f.vertices] == list(reversed([v.pos for v in sq.vertices]))
        assert f.flipped() == sq

    def test_area_and_volume(self):
        sq = _square(size=2.0)
        assert math.isclose(sq.area(), 4.0)
        ## the square at z=0 spans no volume with the origin
        assert sq.signed_volume() == pytest.approx(0.0)
        assert _square(z=3.0).signed_volume() == pytest.approx(1.0)

    def test_translated(self):
        moved = _square().translated((0, 0, 5))
        assert moved.plane.w == pytest.approx(5.0)
        assert moved.vertices[0].pos == Vector3(0.0, 0.0, 5.0)

    def test_mirror_transform_keeps_orientation(self):
        sq = _square(z=1.0)
        m = sq.transform(Mirror([0, 0, 1]))
        ## the mirrored face at z=-1 faces down, and its winding agrees
        assert m.plane.normal.close_to(-ZAXIS)
        assert newell_normal(m.positions()).unit().close_to(m.plane.normal)

    def test_to_triangles(self):
        tris = _square().to_triangles()
        assert len(tris) == 2
        assert all(t.plane == _square().plane for t in tris)
        assert sum(t.area() for t in tris) == pytest.approx(1.0)

    def test_bounding_box(self):
        lo, hi = _square(z=1.0, size=3.0).bounding_box()
        assert lo == Vector3(0.0, 0.0, 1.0)
        assert hi == Vector3(3.0, 3.0, 1.0)
