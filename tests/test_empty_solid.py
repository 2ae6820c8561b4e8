"""The empty solid: it contains nothing, every operation on it gives
it back, and it converts to and from the serialized forms."""

import numpy as np
import pytest

from yapcsg.geom import Vector3, ZAXIS
from yapcsg.polygon import Plane, Shared
from yapcsg.solid import Solid
from yapcsg.xform import Matrix, Rotation


@pytest.fixture
def empty():
    return Solid()


def test_empty_contains_nothing(empty):
    assert str(empty) == 'Solid with 0 polygons:\n'
    assert empty.to_polygons() == []
    assert empty.to_triangles() == []
    assert empty.volume() == 0
    assert empty.area() == 0
    lo, hi = empty.bounding_box
    assert lo == Vector3(0.0, 0.0, 0.0)
    assert hi == Vector3(0.0, 0.0, 0.0)

    binary = empty.to_compact_binary()
    assert binary['class'] == 'Solid'
    assert binary['numPolygons'] == 0
    for key in ('numVerticesPerPolygon', 'polygonPlaneIndexes',
                'polygonSharedIndexes', 'polygonVertices'):
        assert len(binary[key]) == 0
        assert binary[key].dtype == np.uint32


def test_empty_operations_do_nothing(empty):
    plane = Plane(ZAXIS, 0.0)
    results = [
        empty.set_shared(Shared((0.1, 0.2, 0.3, 0.4))),
        empty.set_color(0.1, 0.2, 0.3, 0.4),
        empty.canonicalized(),
        empty.retesselated(),
        empty.transform(Rotation((1, 0, 0), 45)),
        empty.fix_t_junctions(),
        empty.mirrored(plane),
        empty.mirrored_x(),
        empty.mirrored_y(),
        empty.mirrored_z(),
        empty.translate((10, 10, 10)),
        empty.scale((2.0, 2.0, 2.0)),
        empty.rotate((0, 0, 0), (1, 1, 1), 45),
        empty.rotate_x(90),
        empty.rotate_y(90),
        empty.rotate_z(90),
        empty.rotate_euler_angles(45, 45, 45, (0, 0, 0)),
        empty.center(),
        empty.cut_by_plane(plane),
        empty.expand(2.0, 36),
        empty.contract(2.0, 36),
        empty.inverse(),
        empty.stretch_at_plane((1, 0, 0), (0, 0, 0), 2.0),
        empty.expanded_shell(2.0, 36),
        empty.lie_flat(),
        empty.to_point_cloud(0.1),
    ]
    for result in results:
        assert result == empty
        assert result.is_empty()


def test_empty_returns_identity(empty):
    m, m_inv = empty.get_transformation_and_inverse_transformation_to_flat_lying()
    assert m == Matrix()
    assert m_inv == Matrix()
    assert empty.get_transformation_to_flat_lying() == Matrix()


def test_empty_converts(empty):
    assert Solid.from_compact_binary(empty.to_compact_binary()) == empty
    assert Solid.from_object({'polygons': [], 'isCanonicalized': True,
                              'isRetesselated': True}) == empty
    assert Solid.from_object(empty.to_object()) == empty
    assert Solid.from_polygons(empty.to_triangles()) == empty
