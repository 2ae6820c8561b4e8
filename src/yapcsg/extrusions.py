"""Sweeps that turn a ``Shape2D`` into a ``Solid``.

The functions here only compose the two polygon generators of
``Shape2D`` (caps and walls) with ``Connector`` frames; the solid module
never needs to know about 2-D regions.

Options are frozen dataclasses rather than keyword bags, so a misspelt
option is an error at the call site::

    solid = extrude(Shape2D.circle(radius=2), ExtrudeOptions(offset=(0, 0, 5), twist_angle=90))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from yapcsg.connectors import Connector, OrthoNormalBasis
from yapcsg.geom import YAXIS, ZAXIS, ZERO, default_resolution_3d, vect3
from yapcsg.shape2d import Shape2D
from yapcsg.solid import Solid
from yapcsg.xform import Translation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtrudeOptions:
    """linear extrusion: the profile at z = 0 is swept along ``offset``,
    turning by ``twist_angle`` degrees in ``twist_steps`` slices"""

    offset: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    twist_angle: float = 0.0
    twist_steps: int = default_resolution_3d


@dataclass(frozen=True)
class RotateExtrudeOptions:
    """revolution about the z axis through ``angle`` degrees in
    ``resolution`` slices per sweep"""

    angle: float = 360.0
    resolution: int = default_resolution_3d


@dataclass(frozen=True)
class OrthoExtrudeOptions:
    """``symmetrical`` centers the slab on the plane instead of growing
    it upwards from the plane"""

    symmetrical: bool = False


def extrude(shape: Shape2D, options: Optional[ExtrudeOptions] = None) -> Solid:
    """Linear extrusion of ``shape`` with optional twist.

    Raises ``ValueError`` when the offset has no z component.  An empty
    shape gives an empty solid.
    """
    if options is None:
        options = ExtrudeOptions()
    if shape.is_empty():
        return Solid()
    offset = vect3(options.offset)
    if offset.z == 0:
        raise ValueError('extrusion offset {} is orthogonal to the z axis'.format(offset))
    twist_angle = float(options.twist_angle)
    twist_steps = int(options.twist_steps)
    if twist_angle == 0 or twist_steps < 1:
        twist_steps = 1

    normal = YAXIS
    polygons = []
    polygons.extend(shape.to_plane_polygons(translation=ZERO, normal=normal,
                                            flipped=not offset.z < 0))
    polygons.extend(shape.to_plane_polygons(translation=offset, normal=normal.rotated_z(twist_angle),
                                            flipped=offset.z < 0))
    for i in range(twist_steps):
        c1 = Connector(offset * (i / twist_steps), ZAXIS,
                       normal.rotated_z(i * twist_angle / twist_steps))
        c2 = Connector(offset * ((i + 1) / twist_steps), ZAXIS,
                       normal.rotated_z((i + 1) * twist_angle / twist_steps))
        ## walls are built upwards along +z so the profile is never mirrored
        if offset.z < 0:
            c1, c2 = c2, c1
        polygons.extend(shape.to_wall_polygons(c1, c2))
    logger.debug('extruded %d sides in %d steps into %d polygons',
                 len(shape.sides), twist_steps, len(polygons))
    return Solid.from_polygons(polygons)


def _sweep_angle(angle: float) -> float:
    ## whole turns beyond the first are the same sweep: 720 means 360
    if angle > 360:
        angle = angle % 360 or 360.0
    return angle


def rotate_extrude(shape: Shape2D, options: Optional[RotateExtrudeOptions] = None) -> Solid:
    """Revolve ``shape`` about the z axis.

    The profile's x axis becomes the radius and its y axis becomes z.
    Partial sweeps get end caps.  The result is retesselated.
    """
    if options is None:
        options = RotateExtrudeOptions()
    alpha = _sweep_angle(float(options.angle))
    resolution = int(options.resolution)
    if resolution < 1:
        raise ValueError('rotate_extrude resolution must be positive, got {}'.format(resolution))
    if shape.is_empty() or alpha <= 0:
        return Solid()

    axis = YAXIS
    normal = ZAXIS
    start = Connector(ZERO, axis, normal)
    polygons = []
    if alpha < 360:
        ## the sweep runs along the connector axis, hence the negative angle
        end = Connector(ZERO, axis.rotated_z(-alpha), normal)
        polygons.extend(shape.to_plane_polygons(connector=start, flipped=True))
        polygons.extend(shape.to_plane_polygons(connector=end))
    c1 = start
    for i in range(1, resolution + 1):
        if alpha == 360 and i == resolution:
            c2 = start
        else:
            c2 = Connector(ZERO, axis.rotated_z(-alpha * i / resolution), normal)
        polygons.extend(shape.to_wall_polygons(c1, c2))
        c1 = c2
    return Solid.from_polygons(polygons).retesselated()


def extrude_in_orthonormal_basis(shape: Shape2D, basis: OrthoNormalBasis, depth: float,
                                 options: Optional[OrthoExtrudeOptions] = None) -> Solid:
    """Extrude ``shape`` by ``depth`` out of the plane of ``basis``.

    The profile is laid out in the basis's ``(u, v)`` coordinates and
    grows along the plane normal.
    """
    if not isinstance(basis, OrthoNormalBasis):
        raise TypeError('extrude_in_orthonormal_basis expects an OrthoNormalBasis, got {!r}'.format(basis))
    if options is None:
        options = OrthoExtrudeOptions()
    extruded = extrude(shape, ExtrudeOptions(offset=(0.0, 0.0, depth)))
    if options.symmetrical:
        extruded = extruded.transform(Translation((0.0, 0.0, -depth / 2.0)))
    return extruded.transform(basis.inverse_projection_matrix())


def extrude_in_plane(shape: Shape2D, axis1: str, axis2: str, depth: float,
                     options: Optional[OrthoExtrudeOptions] = None) -> Solid:
    """Extrude in a cartesian plane named by two axis identifiers
    (``"X"``, ``"-Z"``...), see ``OrthoNormalBasis.from_cartesian``."""
    return extrude_in_orthonormal_basis(shape, OrthoNormalBasis.from_cartesian(axis1, axis2),
                                        depth, options)


__all__ = [
    'ExtrudeOptions',
    'OrthoExtrudeOptions',
    'RotateExtrudeOptions',
    'extrude',
    'extrude_in_orthonormal_basis',
    'extrude_in_plane',
    'rotate_extrude',
]
