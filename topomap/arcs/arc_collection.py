"""ArcCollection: flat vertex store shared by every layer of a dataset.

Vertices of all arcs live in two float64 arrays (``xx``, ``yy``); ``nn`` holds
the point count of each arc and ``ii`` its start offset. Optional per-vertex
retention thresholds (``zz``) are set by an external simplification step;
``get_filtered_copy()`` applies them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import numpy as np
from numpy.typing import NDArray

from topomap.arcs.arc_ref import ArcRef, as_arc_ref
from topomap.utils.bounds import Bounds

logger = logging.getLogger(__name__)

PointTransform = Callable[[float, float], "tuple[float, float] | None"]


def _offsets(nn: NDArray[np.int64]) -> NDArray[np.int64]:
    ii = np.zeros(len(nn), dtype=np.int64)
    if len(nn) > 1:
        ii[1:] = np.cumsum(nn[:-1])
    return ii


def _calc_arc_bounds(
    xx: NDArray[np.float64], yy: NDArray[np.float64], nn: NDArray[np.int64]
) -> NDArray[np.float64]:
    """Per-arc (xmin, ymin, xmax, ymax); NaN rows for empty arcs."""
    bb = np.full((len(nn), 4), np.nan)
    nonempty = nn > 0
    if not np.any(nonempty):
        return bb
    starts = _offsets(nn)[nonempty]
    bb[nonempty, 0] = np.minimum.reduceat(xx, starts)
    bb[nonempty, 1] = np.minimum.reduceat(yy, starts)
    bb[nonempty, 2] = np.maximum.reduceat(xx, starts)
    bb[nonempty, 3] = np.maximum.reduceat(yy, starts)
    return bb


class ArcCollection:
    """Owns the coordinates of every arc in one dataset."""

    def __init__(self, coords: Sequence[Sequence[Sequence[float]]] | None = None) -> None:
        coords = coords or []
        nn = np.array([len(arc) for arc in coords], dtype=np.int64)
        points = [p for arc in coords for p in arc]
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2) if points else np.empty((0, 2))
        self._init_arrays(pts[:, 0].copy(), pts[:, 1].copy(), nn, None)

    @classmethod
    def from_vertex_data(
        cls,
        xx: NDArray[np.float64] | Sequence[float],
        yy: NDArray[np.float64] | Sequence[float],
        nn: NDArray[np.int64] | Sequence[int],
        zz: NDArray[np.float64] | Sequence[float] | None = None,
    ) -> ArcCollection:
        """Build from flat arrays. The arrays are copied."""
        arcs = cls.__new__(cls)
        xx = np.array(xx, dtype=np.float64)
        yy = np.array(yy, dtype=np.float64)
        nn = np.array(nn, dtype=np.int64)
        if len(xx) != len(yy) or int(nn.sum()) != len(xx):
            raise ValueError(
                f"Vertex arrays do not match arc counts: {len(xx)} x, {len(yy)} y, "
                f"{int(nn.sum())} expected"
            )
        zz = None if zz is None else np.array(zz, dtype=np.float64)
        if zz is not None and len(zz) != len(xx):
            raise ValueError(f"Expected {len(xx)} thresholds, got {len(zz)}")
        arcs._init_arrays(xx, yy, nn, zz)
        return arcs

    def _init_arrays(
        self,
        xx: NDArray[np.float64],
        yy: NDArray[np.float64],
        nn: NDArray[np.int64],
        zz: NDArray[np.float64] | None,
    ) -> None:
        self._xx = xx
        self._yy = yy
        self._nn = nn
        self._ii = _offsets(nn)
        self._zz = zz
        self._zlimit = 0.0
        self._bb = _calc_arc_bounds(xx, yy, nn)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------
    def size(self) -> int:
        return len(self._nn)

    def __len__(self) -> int:
        return self.size()

    def get_point_count(self) -> int:
        return len(self._xx)

    def get_arc_point_count(self, index: int) -> int:
        return int(self._nn[index])

    def get_vertex_data(self) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.int64], NDArray[np.float64] | None]:
        """Live (xx, yy, nn, zz) arrays. Callers must not resize them."""
        return self._xx, self._yy, self._nn, self._zz

    def get_arc_coords(self, ref: ArcRef | int) -> NDArray[np.float64]:
        """(N, 2) copy of an arc's vertices, in traversal order of ``ref``."""
        ref = as_arc_ref(ref)
        self._check_index(ref.index)
        start = self._ii[ref.index]
        end = start + self._nn[ref.index]
        pts = np.column_stack((self._xx[start:end], self._yy[start:end]))
        return pts[::-1].copy() if ref.reversed else pts

    def get_arc_thresholds(self, index: int) -> NDArray[np.float64] | None:
        if self._zz is None:
            return None
        start = self._ii[index]
        return self._zz[start:start + self._nn[index]].copy()

    def get_arc_endpoints(self, index: int) -> tuple[tuple[float, float], tuple[float, float]]:
        """First and last vertex of an arc, in stored order."""
        self._check_index(index)
        n = self._nn[index]
        if n == 0:
            raise ValueError(f"Arc {index} has no vertices")
        start = self._ii[index]
        end = start + n - 1
        return (
            (float(self._xx[start]), float(self._yy[start])),
            (float(self._xx[end]), float(self._yy[end])),
        )

    def arc_is_closed(self, index: int) -> bool:
        if self._nn[index] < 2:
            return False
        first, last = self.get_arc_endpoints(index)
        return first == last

    def get_arc_bounds(self, index: int) -> Bounds:
        self._check_index(index)
        row = self._bb[index]
        if np.isnan(row[0]):
            return Bounds()
        return Bounds(*(float(v) for v in row))

    def merge_arc_bounds(self, ref: ArcRef | int, bounds: Bounds) -> Bounds:
        """Merge the bbox of the referenced arc into ``bounds``. Direction is ignored."""
        index = as_arc_ref(ref).index
        self._check_index(index)
        row = self._bb[index]
        if not np.isnan(row[0]):
            bounds.merge_bounds(row)
        return bounds

    def get_bounds(self) -> Bounds:
        bounds = Bounds()
        valid = self._bb[~np.isnan(self._bb[:, 0])]
        if len(valid):
            bounds.merge_bounds(
                (valid[:, 0].min(), valid[:, 1].min(), valid[:, 2].max(), valid[:, 3].max())
            )
        return bounds

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self.size():
            raise IndexError(f"Arc index {index} out of range (0..{self.size() - 1})")

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------
    def transform_points(self, fn: PointTransform) -> None:
        """Apply ``fn(x, y) -> (x, y)`` to every vertex in place.

        Arcs that collapse or self-intersect afterwards are left alone; repairing
        them is the caller's job.
        """
        xx, yy = self._xx, self._yy
        for i in range(len(xx)):
            p = fn(float(xx[i]), float(yy[i]))
            if p is not None:
                xx[i], yy[i] = p[0], p[1]
        self._bb = _calc_arc_bounds(xx, yy, self._nn)
        logger.debug("Transformed %d vertices in %d arcs", len(xx), self.size())

    # -------------------------------------------------------------------------
    # Retention thresholds
    # -------------------------------------------------------------------------
    def set_thresholds(self, zz: NDArray[np.float64] | Sequence[float]) -> None:
        """Per-vertex retention thresholds. Arc endpoints are always retained."""
        zz = np.array(zz, dtype=np.float64)
        if len(zz) != len(self._xx):
            raise ValueError(f"Expected {len(self._xx)} thresholds, got {len(zz)}")
        nonempty = self._nn > 0
        zz[self._ii[nonempty]] = np.inf
        zz[self._ii[nonempty] + self._nn[nonempty] - 1] = np.inf
        self._zz = zz

    def has_thresholds(self) -> bool:
        return self._zz is not None

    def set_retained_interval(self, z: float) -> None:
        self._zlimit = float(z)

    def get_retained_interval(self) -> float:
        return self._zlimit

    def _retained_mask(self) -> NDArray[np.bool_] | None:
        if self._zz is None or self._zlimit == 0:
            return None
        return self._zz >= self._zlimit

    def get_filtered_copy(self) -> ArcCollection:
        """Independent copy holding only the currently retained vertices.

        Endpoints always survive, so arc count and arc ids are unchanged and any
        shape valid against this collection is valid against the copy.
        """
        mask = self._retained_mask()
        if mask is None:
            copy = ArcCollection.from_vertex_data(self._xx, self._yy, self._nn, self._zz)
        else:
            arc_ids = np.repeat(np.arange(self.size()), self._nn)
            nn = np.bincount(arc_ids[mask], minlength=self.size()).astype(np.int64)
            copy = ArcCollection.from_vertex_data(
                self._xx[mask], self._yy[mask], nn, self._zz[mask]
            )
            logger.debug(
                "Filtered copy kept %d of %d vertices (interval %g)",
                copy.get_point_count(),
                self.get_point_count(),
                self._zlimit,
            )
        copy.set_retained_interval(self._zlimit)
        return copy
