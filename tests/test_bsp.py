import pytest

from yapcsg.bsp import Node, intersect_polygons, subtract_polygons, union_polygons
from yapcsg.geom import Vector3
from yapcsg.geom3d_util import cube
from yapcsg.polygon import Polygon


def _square(z, size=1.0):
    return Polygon((Vector3(-size, -size, z), Vector3(size, -size, z),
                    Vector3(size, size, z), Vector3(-size, size, z)))


def _volume(polygons):
    return sum(p.signed_volume() for p in polygons)


def test_empty_node():
    node = Node()
    assert node.is_empty()
    assert node.all_polygons() == []
    assert node.stats() == (0, 0)
    ## an empty tree keeps everything
    assert node.clip_polygons([_square(0.0)]) == [_square(0.0)]


def test_build_cube():
    node = Node(cube().polygons)
    assert node.stats() == (6, 6)
    assert len(node.all_polygons()) == 6


def test_invert_twice_is_identity():
    node = Node(cube().polygons)
    before = node.all_polygons()
    node.invert()
    assert all(p.plane.normal.dot(q.plane.normal) < 0
               for p, q in zip(node.all_polygons(), before))
    node.invert()
    assert node.all_polygons() == before


def test_clip_polygons():
    node = Node(cube().polygons)
    ## a strip crossing the cube loses its middle
    strip = Polygon((Vector3(-2.0, -0.5, 0.0), Vector3(2.0, -0.5, 0.0),
                     Vector3(2.0, 0.5, 0.0), Vector3(-2.0, 0.5, 0.0)))
    kept = node.clip_polygons([strip])
    assert sum(p.area() for p in kept) == pytest.approx(2.0)
    ## a polygon strictly inside disappears
    assert node.clip_polygons([_square(0.0, 0.5)]) == []
    ## a polygon strictly outside survives untouched
    assert node.clip_polygons([_square(5.0)]) == [_square(5.0)]


def test_deep_tree_does_not_recurse():
    ## every square is in front of the previous one, so the tree is a
    ## single chain deeper than the default interpreter recursion limit
    squares = [_square(float(i)) for i in range(1200)]
    node = Node(squares)
    assert node.stats() == (1200, 1200)
    node.invert()
    node.invert()
    assert len(node.all_polygons()) == 1200
    ## behind the square at z=601 is inside, beyond the last one is outside
    assert node.clip_polygons([_square(600.5, 0.5)]) == []
    assert len(node.clip_polygons([_square(1300.0, 0.5)])) == 1


def test_boolean_recipes():
    a = cube().polygons
    b = cube(center=(1, 1, 1)).polygons
    assert _volume(union_polygons(a, b)) == pytest.approx(15.0)
    assert _volume(subtract_polygons(a, b)) == pytest.approx(7.0)
    assert _volume(intersect_polygons(a, b)) == pytest.approx(1.0)


def test_boolean_recipes_disjoint():
    a = cube().polygons
    b = cube(center=(5, 0, 0)).polygons
    assert _volume(union_polygons(a, b)) == pytest.approx(16.0)
    assert _volume(subtract_polygons(a, b)) == pytest.approx(8.0)
    assert intersect_polygons(a, b) == []


def test_plane_chooser():
    calls = []

    def last_plane(polygons):
        calls.append(len(polygons))
        return polygons[-1].plane

    result = union_polygons(cube().polygons, cube(center=(1, 1, 1)).polygons, last_plane)
    assert calls
    assert _volume(result) == pytest.approx(15.0)
