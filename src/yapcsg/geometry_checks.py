"""Validation helpers for yapcsg solids."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List

from yapcsg.geom import epsilon
from yapcsg.polygon import Polygon


def solid_watertight(solid) -> "CheckResult":
    """Every directed edge must be matched by exactly one reverse edge.

    This is an exact check on vertex positions, so it is meaningful for
    canonicalized solids without T-junctions (retesselated solids, for
    instance).
    """
    from yapcsg.solid import Solid

    if not isinstance(solid, Solid):
        raise TypeError('solid_watertight expects a Solid, got {!r}'.format(solid))

    edges = Counter()
    for polygon in solid.polygons:
        positions = polygon.positions()
        for i, a in enumerate(positions):
            edges[(a, positions[(i + 1) % len(positions)])] += 1

    unmatched = [edge for edge, count in edges.items() if edges[(edge[1], edge[0])] != count]
    repeated = [edge for edge, count in edges.items() if count > 1]

    warnings: List[str] = []
    ok = True
    if unmatched:
        ok = False
        warnings.append(f'{len(unmatched)} unmatched directed edges detected')
    if repeated:
        ok = False
        warnings.append(f'{len(repeated)} directed edges used more than once')
    return CheckResult(ok, warnings)


def polygons_planar(polygons: Iterable[Polygon], tol: float = epsilon) -> "CheckResult":
    """Every vertex must lie within ``tol`` of its polygon's plane."""

    offplane = []
    for idx, polygon in enumerate(polygons):
        if any(abs(polygon.plane.signed_distance(v.pos)) > tol for v in polygon.vertices):
            offplane.append(idx)
    if offplane:
        return CheckResult(False, [f'non-planar polygon indices: {offplane}'])
    return CheckResult(True, [])


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


__all__ = [
    'CheckResult',
    'polygons_planar',
    'solid_watertight',
]
