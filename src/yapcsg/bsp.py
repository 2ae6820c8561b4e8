## binary space partitioning trees and the boolean recipes built on them
## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
============================================
bsp -- BSP trees for constructive solid geometry
============================================

A ``Node`` holds a partitioning plane, the polygons lying in that
plane, and optional front and back subtrees.  This is not a leafy BSP
tree: there is no distinction between internal and leaf nodes, and a
node without a plane is simply empty.

The tree is built from a polygon list by taking the plane of the first
polygon (or the plane returned by a caller supplied ``choose_plane``)
and splitting everything else against it.  Given the same input order
the same tree comes out, which is what makes boolean results
reproducible.

All traversals are written as explicit work lists rather than Python
recursion, so a badly balanced tree costs memory, never the
interpreter stack.

Boolean operations
==================

``union_polygons``, ``subtract_polygons`` and ``intersect_polygons``
compose ``clip_to`` and ``invert`` in a fixed order.  Trees are mutated
in place along the way, so the order of the steps is the algorithm.

"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from yapcsg.polygon import Plane, Polygon
from yapcsg.splitter import split_polygon

logger = logging.getLogger(__name__)

PlaneChooser = Callable[[Sequence[Polygon]], Plane]


def first_plane(polygons: Sequence[Polygon]) -> Plane:
    """default plane selection: the plane of the first polygon"""
    return polygons[0].plane


class Node:
    """A node of a BSP tree; ``Node(polygons)`` builds a whole tree."""

    __slots__ = ('plane', 'polygons', 'front', 'back')

    def __init__(self, polygons: Optional[Sequence[Polygon]] = None,
                 choose_plane: Optional[PlaneChooser] = None):
        self.plane: Optional[Plane] = None
        self.polygons: List[Polygon] = []
        self.front: Optional[Node] = None
        self.back: Optional[Node] = None
        if polygons:
            self.build(polygons, choose_plane)

    def is_empty(self) -> bool:
        return self.plane is None

    def build(self, polygons: Sequence[Polygon],
              choose_plane: Optional[PlaneChooser] = None) -> None:
        """Add ``polygons`` to the tree, growing subtrees as needed."""
        if choose_plane is None:
            choose_plane = first_plane
        work = [(self, list(polygons))]
        while work:
            node, polys = work.pop()
            if not polys:
                continue
            if node.plane is None:
                node.plane = choose_plane(polys)
            front: List[Polygon] = []
            back: List[Polygon] = []
            for p in polys:
                split_polygon(node.plane, p, node.polygons, node.polygons, front, back)
            if front:
                if node.front is None:
                    node.front = Node()
                work.append((node.front, front))
            if back:
                if node.back is None:
                    node.back = Node()
                work.append((node.back, back))

    def _nodes(self):
        """all non-empty nodes, pre-order: self, front subtree, back subtree"""
        stack = [self]
        while stack:
            node = stack.pop()
            if node.plane is None:
                continue
            yield node
            if node.back is not None:
                stack.append(node.back)
            if node.front is not None:
                stack.append(node.front)

    def invert(self) -> None:
        """Convert solid space to empty space and empty space to solid space."""
        for node in list(self._nodes()):
            node.polygons = [p.flipped() for p in node.polygons]
            node.plane = node.plane.flipped()
            node.front, node.back = node.back, node.front

    def clip_polygons(self, polygons: Sequence[Polygon]) -> List[Polygon]:
        """Return the parts of ``polygons`` that lie outside the solid of this tree.

        Each polygon is split at every plane on its way down; whatever
        reaches a missing back child is inside and is dropped, whatever
        reaches a missing front child is kept.
        """
        if self.plane is None:
            return list(polygons)
        result: List[Polygon] = []
        ## work items are either ('emit', polys) or ('clip', node, polys);
        ## the stack is LIFO so the front branch is pushed last
        work = [('clip', self, list(polygons))]
        while work:
            item = work.pop()
            if item[0] == 'emit':
                result.extend(item[1])
                continue
            _, node, polys = item
            if node.plane is None:
                result.extend(polys)
                continue
            front: List[Polygon] = []
            back: List[Polygon] = []
            for p in polys:
                split_polygon(node.plane, p, front, back, front, back)
            if node.back is not None and back:
                work.append(('clip', node.back, back))
            if front:
                if node.front is not None:
                    work.append(('clip', node.front, front))
                else:
                    work.append(('emit', front))
        return result

    def clip_to(self, other: "Node") -> None:
        """Remove every polygon of this tree that lies inside ``other``."""
        for node in list(self._nodes()):
            node.polygons = other.clip_polygons(node.polygons)

    def all_polygons(self) -> List[Polygon]:
        result: List[Polygon] = []
        for node in self._nodes():
            result.extend(node.polygons)
        return result

    def stats(self):
        """``(node_count, depth)`` of the tree"""
        count = 0
        depth = 0
        stack = [(self, 1)]
        while stack:
            node, d = stack.pop()
            if node.plane is None:
                continue
            count += 1
            depth = max(depth, d)
            if node.front is not None:
                stack.append((node.front, d + 1))
            if node.back is not None:
                stack.append((node.back, d + 1))
        return count, depth


def _trees(a_polygons, b_polygons, choose_plane):
    a = Node(a_polygons, choose_plane)
    b = Node(b_polygons, choose_plane)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug('bsp trees built: a=%s b=%s (nodes, depth)', a.stats(), b.stats())
    return a, b


def union_polygons(a_polygons: Sequence[Polygon], b_polygons: Sequence[Polygon],
                   choose_plane: Optional[PlaneChooser] = None) -> List[Polygon]:
    a, b = _trees(a_polygons, b_polygons, choose_plane)
    a.clip_to(b)
    b.clip_to(a)
    b.invert()
    b.clip_to(a)
    b.invert()
    return a.all_polygons() + b.all_polygons()


def subtract_polygons(a_polygons: Sequence[Polygon], b_polygons: Sequence[Polygon],
                      choose_plane: Optional[PlaneChooser] = None) -> List[Polygon]:
    a, b = _trees(a_polygons, b_polygons, choose_plane)
    a.invert()
    a.clip_to(b)
    b.clip_to(a)
    b.invert()
    b.clip_to(a)
    b.invert()
    a.invert()
    ## the surviving part of b bounds the cavity, so it faces inwards
    b.invert()
    return a.all_polygons() + b.all_polygons()


def intersect_polygons(a_polygons: Sequence[Polygon], b_polygons: Sequence[Polygon],
                       choose_plane: Optional[PlaneChooser] = None) -> List[Polygon]:
    a, b = _trees(a_polygons, b_polygons, choose_plane)
    a.invert()
    b.clip_to(a)
    b.invert()
    a.clip_to(b)
    b.clip_to(a)
    a.invert()
    b.invert()
    return a.all_polygons() + b.all_polygons()


__all__ = [
    'Node',
    'first_plane',
    'intersect_polygons',
    'subtract_polygons',
    'union_polygons',
]
