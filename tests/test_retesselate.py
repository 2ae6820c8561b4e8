import pytest

from yapcsg.fuzzy import canonicalize_polygons
from yapcsg.geom import Vector3
from yapcsg.geom3d_util import cube
from yapcsg.geometry_checks import solid_watertight
from yapcsg.polygon import Polygon, Shared
from yapcsg.retesselate import fix_t_junctions, retesselate_polygons
from yapcsg.solid import Solid
from yapcsg.triangulator import point_in_loop, signed_area, triangulate_loops


def _quad(x0, y0, x1, y1, z=0.0, shared=None):
    pts = (Vector3(x0, y0, z), Vector3(x1, y0, z), Vector3(x1, y1, z), Vector3(x0, y1, z))
    return Polygon(pts) if shared is None else Polygon(pts, shared)


## triangulator
## ------------

def test_signed_area_and_point_in_loop():
    square = [(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)]
    assert signed_area(square) == pytest.approx(4.0)
    assert signed_area(list(reversed(square))) == pytest.approx(-4.0)
    assert point_in_loop((1.0, 1.0), square)
    assert not point_in_loop((3.0, 1.0), square)


def test_triangulate_with_hole():
    outer = [(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0)]
    hole = [(1.0, 1.0), (1.0, 3.0), (3.0, 3.0), (3.0, 1.0)]
    tris = triangulate_loops(outer, [hole])
    assert len(tris) == 8
    loops = [outer, hole]
    total = 0.0
    for tri in tris:
        pts = [loops[k][i] for k, i in tri]
        area = signed_area(pts)
        ## every triangle comes out counter-clockwise
        assert area > 0
        total += area
    assert total == pytest.approx(12.0)


def test_triangulate_degenerate():
    assert triangulate_loops([(0.0, 0.0), (1.0, 0.0)]) == []


## t-junctions
## -----------

def test_fix_t_junctions():
    p1 = _quad(0.0, 0.0, 2.0, 1.0)
    q1 = _quad(0.0, 1.0, 1.0, 2.0)
    q2 = _quad(1.0, 1.0, 2.0, 2.0)
    fixed = fix_t_junctions([p1, q1, q2])
    assert fixed[1] is q1 and fixed[2] is q2
    assert fixed[0].positions() == [Vector3(0.0, 0.0, 0.0), Vector3(2.0, 0.0, 0.0),
                                    Vector3(2.0, 1.0, 0.0), Vector3(1.0, 1.0, 0.0),
                                    Vector3(0.0, 1.0, 0.0)]
    assert fixed[0].plane == p1.plane
    ## a second pass has nothing left to do
    again = fix_t_junctions(fixed)
    assert all(a is b for a, b in zip(again, fixed))


def test_solid_fix_t_junctions():
    s = Solid((_quad(0.0, 0.0, 2.0, 1.0), _quad(0.0, 1.0, 1.0, 2.0), _quad(1.0, 1.0, 2.0, 2.0)))
    fixed = s.fix_t_junctions()
    assert sum(len(p.vertices) for p in fixed.polygons) == 13
    r = cube().retesselated()
    assert r.fix_t_junctions() is r


## retesselation
## -------------

def test_merge_coplanar_grid():
    grid = [_quad(0.0, 0.0, 1.0, 1.0), _quad(1.0, 0.0, 2.0, 1.0),
            _quad(0.0, 1.0, 1.0, 2.0), _quad(1.0, 1.0, 2.0, 2.0)]
    tris = retesselate_polygons(grid)
    assert len(tris) == 2
    assert sum(t.area() for t in tris) == pytest.approx(4.0)
    assert all(t.plane == grid[0].plane for t in tris)


def test_groups_respect_shared():
    red = Shared((1, 0, 0))
    polys = [_quad(0.0, 0.0, 1.0, 1.0), _quad(1.0, 0.0, 2.0, 1.0, shared=red)]
    tris = retesselate_polygons(polys)
    ## the two squares are not merged; the shared edge is kept on both sides
    assert len(tris) == 4
    assert sum(1 for t in tris if t.shared == red) == 2


def test_retesselated_solid_flags():
    s = cube().union(cube(center=(1, 0, 0)))
    r = s.retesselated()
    assert r.is_retesselated
    assert not r.is_canonicalized
    assert r.retesselated() is r
    assert r.volume() == pytest.approx(12.0)


def test_retesselate_face_with_hole():
    block = cube(radius=2.0)
    hole = cube(radius=(0.5, 0.5, 3.0))
    r = block.subtract(hole).retesselated()
    assert r.volume() == pytest.approx(60.0)
    assert solid_watertight(r)
    ## 8 triangles on each holed cap, 2 on each of the 8 side faces
    assert len(r.polygons) == 32


def test_retesselation_keeps_mesh_closed():
    s = cube().union([cube(center=(1, 1, 0)), cube(center=(0, 1, 1))]).retesselated()
    assert solid_watertight(s)
    ## three pairwise overlaps of 2 and a common unit cube
    assert s.volume() == pytest.approx(8.0 * 3 - 2.0 * 3 + 1.0)


def test_retesselation_is_idempotent():
    s = cube().union([cube(center=(1, 1, 0)), cube(center=(0, 1, 1))])
    r = s.retesselated()
    again = Solid.from_polygons(retesselate_polygons(canonicalize_polygons(r.polygons)))
    assert again.canonicalized() == r.canonicalized()
