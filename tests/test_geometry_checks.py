import pytest

from yapcsg.geom import Vector3
from yapcsg.geom3d_util import cube, cylinder, sphere
from yapcsg.geometry_checks import CheckResult, polygons_planar, solid_watertight
from yapcsg.polygon import Plane, Polygon, Vertex
from yapcsg.solid import Solid


def _make_tetra():
    a = Vector3(0.0, 0.0, 0.0)
    b = Vector3(1.0, 0.0, 0.0)
    c = Vector3(0.0, 1.0, 0.0)
    d = Vector3(0.0, 0.0, 1.0)
    faces = [(a, c, b), (a, b, d), (b, c, d), (c, a, d)]
    return Solid(tuple(Polygon(f) for f in faces))


def test_solid_watertight_closed_mesh():
    result = solid_watertight(_make_tetra())
    assert isinstance(result, CheckResult)
    assert result.ok
    assert result.warnings == []
    assert _make_tetra().volume() == pytest.approx(1.0 / 6.0)


def test_solid_watertight_detects_boundary():
    open_tetra = Solid(_make_tetra().polygons[:3])
    result = solid_watertight(open_tetra)
    assert not result
    assert any('unmatched' in msg for msg in result.warnings)


def test_solid_watertight_detects_repeated_edges():
    tetra = _make_tetra()
    doubled = Solid(tetra.polygons + tetra.polygons)
    result = solid_watertight(doubled)
    assert not result
    assert any('more than once' in msg for msg in result.warnings)


def test_primitives_are_watertight():
    assert solid_watertight(cube())
    assert solid_watertight(sphere(resolution=8))
    assert solid_watertight(cylinder(resolution=7))
    assert solid_watertight(Solid())


def test_solid_watertight_rejects_other_types():
    with pytest.raises(TypeError):
        solid_watertight(cube().polygons)


def test_polygons_planar():
    assert polygons_planar(cube().polygons)
    warped = Polygon((Vertex(Vector3(0.0, 0.0, 0.0)), Vertex(Vector3(1.0, 0.0, 0.0)),
                      Vertex(Vector3(1.0, 1.0, 0.1)), Vertex(Vector3(0.0, 1.0, 0.0))),
                     plane=Plane(Vector3(0.0, 0.0, 1.0), 0.0))
    result = polygons_planar([cube().polygons[0], warped])
    assert not result.ok
    assert result.warnings == ['non-planar polygon indices: [1]']
    assert polygons_planar([warped], tol=0.2)
