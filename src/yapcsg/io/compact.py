"""Compact and plain-object serialization of solids.

Two forms are supported:

compact form
    a deduplicated, indexed structure built from the canonicalized
    solid.  Vertices, planes and shared tags are stored once, in tables,
    and polygons refer to them by index::

        {
            'class': 'Solid',
            'numPolygons': n,
            'numVerticesPerPolygon': uint32[n],
            'polygonPlaneIndexes': uint32[n],
            'polygonSharedIndexes': uint32[n],
            'polygonVertices': uint32[sum(numVerticesPerPolygon)],
            'vertexData': float64[3 * numVertices],
            'normalData': float64[3 * numVertices],
            'planeData': float64[4 * numPlanes],
            'shared': [color or None, ...],
            'isRetesselated': bool,
        }

    Index and coordinate tables are numpy arrays.  Decoding gives a
    solid marked canonicalized.

object form
    plain dicts and lists mirroring the solid's structure, suitable for
    JSON::

        {'polygons': [...], 'isCanonicalized': bool, 'isRetesselated': bool}

    Points may be given either as ``[x, y, z]`` lists or as
    ``{'x': .., 'y': .., 'z': ..}`` dicts.

An empty polygon list always decodes to the empty solid ``Solid()``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from yapcsg.geom import Vector3
from yapcsg.polygon import Plane, Polygon, Shared, Vertex
from yapcsg.solid import Solid

COMPACT_CLASS = 'Solid'


def _float_vec(vec: Sequence[float]) -> List[float]:
    return [float(c) for c in vec]


def _vec(value: Any) -> Vector3:
    if isinstance(value, Mapping):
        return Vector3(float(value['x']), float(value['y']), float(value['z']))
    if len(value) != 3:
        raise ValueError('expected a three component vector, got {!r}'.format(value))
    return Vector3(float(value[0]), float(value[1]), float(value[2]))


def _color(shared: Shared):
    return None if shared.color is None else _float_vec(shared.color)


## compact form
## ------------

def to_compact_binary(solid: Solid) -> Dict[str, Any]:
    csg = solid.canonicalized()
    vertex_index: Dict[Vertex, int] = {}
    plane_index: Dict[Plane, int] = {}
    shared_index: Dict[Shared, int] = {}
    polygon_vertices: List[int] = []

    num_polygons = len(csg.polygons)
    num_vertices_per_polygon = np.zeros(num_polygons, dtype=np.uint32)
    polygon_plane_indexes = np.zeros(num_polygons, dtype=np.uint32)
    polygon_shared_indexes = np.zeros(num_polygons, dtype=np.uint32)

    for i, polygon in enumerate(csg.polygons):
        num_vertices_per_polygon[i] = len(polygon.vertices)
        for v in polygon.vertices:
            polygon_vertices.append(vertex_index.setdefault(v, len(vertex_index)))
        polygon_plane_indexes[i] = plane_index.setdefault(polygon.plane, len(plane_index))
        polygon_shared_indexes[i] = shared_index.setdefault(polygon.shared, len(shared_index))

    vertex_data = np.array([c for v in vertex_index for c in v.pos], dtype=np.float64)
    normal_data = np.array([c for v in vertex_index for c in v.normal], dtype=np.float64)
    plane_data = np.array([c for p in plane_index for c in (p.normal.x, p.normal.y, p.normal.z, p.w)],
                          dtype=np.float64)

    return {
        'class': COMPACT_CLASS,
        'numPolygons': num_polygons,
        'numVerticesPerPolygon': num_vertices_per_polygon,
        'polygonPlaneIndexes': polygon_plane_indexes,
        'polygonSharedIndexes': polygon_shared_indexes,
        'polygonVertices': np.array(polygon_vertices, dtype=np.uint32),
        'vertexData': vertex_data,
        'normalData': normal_data,
        'planeData': plane_data,
        'shared': [_color(s) for s in shared_index],
        'isRetesselated': bool(csg.is_retesselated),
    }


def from_compact_binary(data: Mapping[str, Any]) -> Solid:
    if data.get('class') != COMPACT_CLASS:
        raise ValueError('not a compact solid: class is {!r}'.format(data.get('class')))
    try:
        num_polygons = int(data['numPolygons'])
        per_polygon = np.asarray(data['numVerticesPerPolygon'], dtype=np.int64)
        plane_indexes = np.asarray(data['polygonPlaneIndexes'], dtype=np.int64)
        shared_indexes = np.asarray(data['polygonSharedIndexes'], dtype=np.int64)
        polygon_vertices = np.asarray(data['polygonVertices'], dtype=np.int64)
        vertex_data = np.asarray(data['vertexData'], dtype=np.float64).reshape(-1, 3)
        plane_data = np.asarray(data['planeData'], dtype=np.float64).reshape(-1, 4)
        colors = list(data['shared'])
    except KeyError as exc:
        raise ValueError('compact solid is missing field {}'.format(exc)) from exc

    normal_data = data.get('normalData')
    if normal_data is None:
        normal_data = np.zeros_like(vertex_data)
    else:
        normal_data = np.asarray(normal_data, dtype=np.float64).reshape(-1, 3)
    if len(normal_data) != len(vertex_data):
        raise ValueError('compact solid has {} normals for {} vertices'.format(
            len(normal_data), len(vertex_data)))
    if not (len(per_polygon) == len(plane_indexes) == len(shared_indexes) == num_polygons):
        raise ValueError('compact solid polygon tables disagree with numPolygons={}'.format(num_polygons))
    if int(per_polygon.sum()) != len(polygon_vertices):
        raise ValueError('compact solid polygonVertices has {} entries, expected {}'.format(
            len(polygon_vertices), int(per_polygon.sum())))

    vertices = [Vertex(Vector3(*(float(c) for c in p)), Vector3(*(float(c) for c in n)))
                for p, n in zip(vertex_data, normal_data)]
    planes = [Plane(Vector3(float(a), float(b), float(c)), float(w)) for a, b, c, w in plane_data]
    shareds = [Shared(None if c is None else tuple(c)) for c in colors]

    polygons = []
    start = 0
    for i in range(num_polygons):
        count = int(per_polygon[i])
        verts = tuple(vertices[int(j)] for j in polygon_vertices[start:start + count])
        start += count
        polygons.append(Polygon(verts, shareds[int(shared_indexes[i])], planes[int(plane_indexes[i])]))
    if not polygons:
        return Solid()
    return Solid(tuple(polygons), True, bool(data.get('isRetesselated', True)))


## object form
## -----------

def _polygon_to_object(polygon: Polygon) -> Dict[str, Any]:
    return {
        'vertices': [{'pos': _float_vec(v.pos), 'normal': _float_vec(v.normal)}
                     for v in polygon.vertices],
        'shared': {'color': _color(polygon.shared)},
        'plane': {'normal': _float_vec(polygon.plane.normal), 'w': float(polygon.plane.w)},
    }


def _polygon_from_object(obj: Mapping[str, Any]) -> Polygon:
    vertices = []
    for v in obj['vertices']:
        normal = v.get('normal')
        vertices.append(Vertex(_vec(v['pos']), _vec(normal) if normal is not None else Vector3(0.0, 0.0, 0.0)))
    shared = obj.get('shared') or {}
    color = shared.get('color')
    plane = obj.get('plane')
    if plane is not None:
        plane = Plane(_vec(plane['normal']), float(plane['w']))
    return Polygon(tuple(vertices), Shared(None if color is None else tuple(color)), plane)


def to_object(solid: Solid) -> Dict[str, Any]:
    return {
        'polygons': [_polygon_to_object(p) for p in solid.polygons],
        'isCanonicalized': bool(solid.is_canonicalized),
        'isRetesselated': bool(solid.is_retesselated),
    }


def from_object(obj: Mapping[str, Any]) -> Solid:
    try:
        polygons = [_polygon_from_object(p) for p in obj['polygons']]
    except KeyError as exc:
        raise ValueError('solid object is missing field {}'.format(exc)) from exc
    if not polygons:
        return Solid()
    return Solid(tuple(polygons),
                 bool(obj.get('isCanonicalized', False)),
                 bool(obj.get('isRetesselated', False)))


__all__ = [
    'from_compact_binary',
    'from_object',
    'to_compact_binary',
    'to_object',
]
