import pytest

from yapcsg.geom import Vector3, ZAXIS, epsilon
from yapcsg.geom3d_util import cube
from yapcsg.geometry_checks import solid_watertight
from yapcsg.polygon import Plane
from yapcsg.solid import Solid
from yapcsg.xform import Matrix


def _close_box(box, lo, hi, tol=1e-6):
    return box[0].close_to(Vector3(*lo), tol) and box[1].close_to(Vector3(*hi), tol)


class TestCutAndStretch:

    def test_cut_by_plane(self):
        half = cube().cut_by_plane(Plane(ZAXIS, 0.0))
        assert half.volume() == pytest.approx(4.0)
        assert _close_box(half.bounding_box, (-1, -1, -1), (1, 1, 0))

    def test_cut_by_tilted_plane(self):
        plane = Plane.from_normal_and_point((1, 1, 0), (0, 0, 0))
        half = cube().cut_by_plane(plane)
        assert half.volume() == pytest.approx(4.0)
        assert all(plane.signed_distance(v.pos) < epsilon
                   for p in half.polygons for v in p.vertices)

    def test_cut_misses(self):
        c = cube()
        assert c.cut_by_plane(Plane(ZAXIS, 5.0)).volume() == pytest.approx(8.0)
        assert c.cut_by_plane(Plane(ZAXIS, -5.0)).volume() == pytest.approx(0.0)

    def test_stretch_at_plane(self):
        s = cube().stretch_at_plane((0, 0, 1), (0, 0, 0), 2)
        assert s.volume() == pytest.approx(16.0)
        assert _close_box(s.bounding_box, (-1, -1, -1), (1, 1, 3))


class TestOffsets:

    def test_expand(self):
        e = cube().expand(0.25, 4)
        assert _close_box(e.bounding_box, (-1.25, -1.25, -1.25), (1.25, 1.25, 1.25))
        assert 8.0 < e.volume() < 2.5 ** 3
        assert e.is_retesselated

    def test_contract(self):
        c = cube().contract(0.25, 4)
        assert _close_box(c.bounding_box, (-0.75, -0.75, -0.75), (0.75, 0.75, 0.75))
        assert c.volume() == pytest.approx(1.5 ** 3)
        assert solid_watertight(c)

    def test_expanded_shell(self):
        shell = cube().expanded_shell(0.25, 4)
        whole = cube().expanded_shell(0.25, 4, union_with_self=True)
        assert shell.volume() < whole.volume()
        assert whole.volume() == pytest.approx(cube().expand(0.25, 4).volume())


class TestFlatLying:

    def test_lie_flat_cube(self):
        s = cube(center=(5, 5, 5)).lie_flat()
        assert _close_box(s.bounding_box, (-1, -1, 0), (1, 1, 2))
        assert s.volume() == pytest.approx(8.0)

    def test_lie_flat_picks_lowest_face(self):
        ## a tall box lies down on one of its long sides
        s = cube(radius=(1, 1, 4)).rotate_x(30).lie_flat()
        lo, hi = s.bounding_box
        assert hi.z - lo.z == pytest.approx(2.0)
        assert lo.z == pytest.approx(0.0, abs=1e-9)

    def test_flat_lying_inverse(self):
        s = cube(center=(1, 2, 3)).rotate_y(20)
        m, m_inv = s.get_transformation_and_inverse_transformation_to_flat_lying()
        assert m.mul(m_inv).to_numpy() == pytest.approx(Matrix().to_numpy(), abs=1e-9)
        assert m == s.get_transformation_to_flat_lying()
        p = Vector3(0.3, -0.7, 2.0)
        assert m_inv.transform_point(m.transform_point(p)).close_to(p)


class TestPointCloud:

    def test_point_cloud(self):
        cloud = cube().to_point_cloud(0.1)
        assert cloud.volume() == pytest.approx(8 * 0.2 ** 3)
        assert cloud.is_retesselated
        lo, hi = cloud.bounding_box
        assert lo.close_to(Vector3(-1.1, -1.1, -1.1))
        assert hi.close_to(Vector3(1.1, 1.1, 1.1))


def test_empty_derived():
    e = Solid()
    assert e.cut_by_plane(Plane(ZAXIS, 0.0)) == Solid()
    assert e.stretch_at_plane((0, 0, 1), (0, 0, 0), 1) == Solid()
    assert e.expand(0.5, 4) == Solid()
    assert e.contract(0.5, 4) == Solid()
    assert e.lie_flat() == Solid()
    assert e.to_point_cloud(0.1) == Solid()
    assert e.get_transformation_and_inverse_transformation_to_flat_lying() == (Matrix(), Matrix())
