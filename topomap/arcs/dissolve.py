"""Dissolve: drop unreferenced arcs, merge arcs joined at interior nodes, renumber.

Run on a dataset whose layers were narrowed to a subset of a larger topology
(e.g. one layer after a split). Merge rule:

- Nodes are arc endpoints, identified by exact coordinates.
- A node is interior when exactly two arc ends meet there, they belong to two
  different arcs, and no polyline path starts or ends there. Polygon ring seams
  do not block merging.
- Arcs linked through interior nodes form a chain (a loop if the walk returns to
  its first arc). Each chain becomes one new arc, oriented so that its lowest
  original arc id runs forward. New ids follow the order of each chain's lowest
  original id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from topomap.arcs.arc_collection import ArcCollection
from topomap.arcs.arc_ref import ArcRef, for_each_arc_id
from topomap.dataset.model import PATH_TYPES, Dataset, GeometryType, Layer

logger = logging.getLogger(__name__)

Node = tuple[float, float]
# (arc index, traversed in reverse)
ChainLink = tuple[int, bool]


@dataclass
class _ArcSlot:
    """Where an original arc ended up: chain id, position in chain, flipped."""

    chain: int
    pos: int
    flipped: bool


class _NodeIndex:
    """Arc-end incidence for the arcs still in use."""

    def __init__(self, arcs: ArcCollection, used: list[int], boundary: set[Node]) -> None:
        self.arcs = arcs
        self.boundary = boundary
        self.incident: dict[Node, list[tuple[int, int]]] = {}
        for i in used:
            if arcs.get_arc_point_count(i) == 0:
                continue
            for end in (0, 1):
                self.incident.setdefault(self.node(i, end), []).append((i, end))

    def node(self, arc: int, end: int) -> Node:
        return self.arcs.get_arc_endpoints(arc)[end]

    def is_interior(self, node: Node) -> bool:
        ends = self.incident.get(node, [])
        return len(ends) == 2 and ends[0][0] != ends[1][0] and node not in self.boundary

    def _other(self, node: Node, arc: int) -> tuple[int, int]:
        a, b = self.incident[node]
        return b if a[0] == arc else a

    def step_forward(self, link: ChainLink) -> ChainLink | None:
        arc, rev = link
        if self.arcs.get_arc_point_count(arc) == 0:
            return None
        node = self.node(arc, 0 if rev else 1)
        if not self.is_interior(node):
            return None
        nxt, end = self._other(node, arc)
        return (nxt, end == 1)

    def step_back(self, link: ChainLink) -> ChainLink | None:
        arc, rev = link
        if self.arcs.get_arc_point_count(arc) == 0:
            return None
        node = self.node(arc, 1 if rev else 0)
        if not self.is_interior(node):
            return None
        prev, end = self._other(node, arc)
        return (prev, end == 0)


def _path_endpoints(path: list[ArcRef], arcs: ArcCollection) -> list[Node]:
    out = []
    first, last = path[0], path[-1]
    if arcs.get_arc_point_count(first.index):
        out.append(arcs.get_arc_endpoints(first.index)[1 if first.reversed else 0])
    if arcs.get_arc_point_count(last.index):
        out.append(arcs.get_arc_endpoints(last.index)[0 if last.reversed else 1])
    return out


def _build_chains(index: _NodeIndex, used: list[int]) -> list[tuple[list[ChainLink], bool]]:
    """Group used arcs into chains; returns (links, is_loop) ordered by lowest arc id."""
    visited: set[int] = set()
    chains: list[tuple[list[ChainLink], bool]] = []
    for a in used:
        if a in visited:
            continue
        head: ChainLink = (a, False)
        is_loop = False
        cur = head
        while True:
            prev = index.step_back(cur)
            if prev is None:
                break
            if prev[0] == a:
                is_loop = True
                break
            cur = prev
        if not is_loop:
            head = cur

        links = [head]
        visited.add(head[0])
        cur = head
        while True:
            nxt = index.step_forward(cur)
            if nxt is None or nxt[0] == head[0] or nxt[0] in visited:
                break
            links.append(nxt)
            visited.add(nxt[0])
            cur = nxt

        lowest = min(links)
        if lowest[1]:
            links = [(i, not rev) for i, rev in reversed(links)]
        chains.append((links, is_loop))
    return chains


def _merge_chain(arcs: ArcCollection, links: list[ChainLink]) -> tuple[np.ndarray, np.ndarray | None]:
    coords = []
    thresholds = []
    for n, (i, rev) in enumerate(links):
        pts = arcs.get_arc_coords(ArcRef(i, rev))
        zz = arcs.get_arc_thresholds(i)
        if zz is not None and rev:
            zz = zz[::-1]
        skip = 1 if n > 0 and len(pts) else 0
        coords.append(pts[skip:])
        if zz is not None:
            thresholds.append(zz[skip:])
    merged = np.concatenate(coords) if coords else np.empty((0, 2))
    merged_z = np.concatenate(thresholds) if thresholds else None
    return merged, merged_z


class _PathRewriter:
    def __init__(self, slots: dict[int, _ArcSlot], lengths: list[int], loops: list[bool]) -> None:
        self.slots = slots
        self.lengths = lengths
        self.loops = loops

    def _next_pos(self, group: list[Any]) -> int | None:
        chain, backward, start, count = group
        step = -1 if backward else 1
        nxt = start + step * count
        if self.loops[chain]:
            return nxt % self.lengths[chain]
        if nxt < 0 or nxt >= self.lengths[chain]:
            return None
        return nxt

    def rewrite(self, path: list[ArcRef], closed: bool) -> list[ArcRef]:
        # group: [chain, backward, start_pos, count]
        groups: list[list[Any]] = []
        for ref in path:
            slot = self.slots[ref.index]
            backward = ref.reversed != slot.flipped
            if groups:
                g = groups[-1]
                if (
                    g[0] == slot.chain
                    and g[1] == backward
                    and g[3] < self.lengths[slot.chain]
                    and self._next_pos(g) == slot.pos
                ):
                    g[3] += 1
                    continue
            groups.append([slot.chain, backward, slot.pos, 1])

        if closed and len(groups) > 1:
            first, last = groups[0], groups[-1]
            if (
                first[0] == last[0]
                and first[1] == last[1]
                and first[3] + last[3] <= self.lengths[first[0]]
                and self._next_pos(last) == first[2]
            ):
                last[3] += first[3]
                groups.pop(0)

        for chain, _, _, count in groups:
            if count != self.lengths[chain]:
                raise ValueError(
                    f"Path covers {count} of {self.lengths[chain]} arcs of merged arc {chain}; "
                    "topology is inconsistent"
                )
        return [ArcRef(g[0], g[1]) for g in groups]


def dissolve_arcs(dataset: Dataset) -> None:
    """Replace ``dataset.arcs`` with a compacted collection and rewrite layer shapes.

    Layers get new shape lists; the previous lists and the previous ArcCollection
    are left untouched for any other dataset that still references them.
    """
    arcs = dataset.arcs
    if arcs is None:
        return
    path_layers = [lyr for lyr in dataset.layers if lyr.geometry_type in PATH_TYPES]
    if not any(lyr.has_paths for lyr in path_layers):
        dataset.arcs = None
        logger.debug("No path layers left; dropped %d arcs", arcs.size())
        return

    used_set: set[int] = set()
    for lyr in path_layers:
        for_each_arc_id(lyr.shapes, lambda ref: used_set.add(ref.index))
    used = sorted(used_set)

    boundary: set[Node] = set()
    for lyr in path_layers:
        if lyr.geometry_type != GeometryType.POLYLINE:
            continue
        for shape in lyr.shapes:
            for path in shape or []:
                if path:
                    boundary.update(_path_endpoints(path, arcs))

    index = _NodeIndex(arcs, used, boundary)
    chains = _build_chains(index, used)

    slots: dict[int, _ArcSlot] = {}
    coords = []
    thresholds = []
    for k, (links, _) in enumerate(chains):
        for pos, (i, rev) in enumerate(links):
            slots[i] = _ArcSlot(chain=k, pos=pos, flipped=rev)
        merged, merged_z = _merge_chain(arcs, links)
        coords.append(merged)
        if merged_z is not None:
            thresholds.append(merged_z)

    nn = [len(c) for c in coords]
    xy = np.concatenate(coords) if coords else np.empty((0, 2))
    zz = np.concatenate(thresholds) if arcs.has_thresholds() and thresholds else None
    new_arcs = ArcCollection.from_vertex_data(xy[:, 0], xy[:, 1], nn, zz)
    new_arcs.set_retained_interval(arcs.get_retained_interval())

    rewriter = _PathRewriter(
        slots,
        lengths=[len(links) for links, _ in chains],
        loops=[is_loop for _, is_loop in chains],
    )
    for lyr in path_layers:
        _rewrite_layer(lyr, rewriter)

    dataset.arcs = new_arcs
    logger.debug(
        "Dissolved %d referenced arcs (of %d) into %d",
        len(used),
        arcs.size(),
        new_arcs.size(),
    )


def _rewrite_layer(lyr: Layer, rewriter: _PathRewriter) -> None:
    closed = lyr.geometry_type == GeometryType.POLYGON
    lyr.shapes = [
        [rewriter.rewrite(path, closed) for path in shape if path] if shape else shape
        for shape in lyr.shapes
    ]
