# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_gamut.py — gamut contour of an emitter set.

The contour is built by greedy maximum-area insertion rather than a
textbook convex hull.  Starting from the triangle of the first three
emitters, every further emitter that lies outside the current polygon is
tried in each insertion slot and kept where the fan-triangulated polygon
area is largest.  Vertex order and tie-breaking feed into boundary
projection downstream, so the procedure is reproduced step for step:

  *  the orientation sign comes from the seed triangle (zero counts as +1);
  *  the candidate always enters right after vertex 0 and is rotated
     forward one slot at a time;
  *  the first slot with a strictly larger area wins; when no slot has a
     positive area, slot 0 is kept.
"""

from __future__ import annotations

import logging
import warnings
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from tint_spectral import (
    ChromaticityPoint,
    PointLike,
    _as_point,
    _crossing_number,
    fit_to_boundary,
)

__all__ = ["GamutContour", "build_gamut_contour"]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# 1.  Kernels
# ═══════════════════════════════════════════════════════════════════════════════
@njit(cache=True)
def _fan_area(xs: np.ndarray, ys: np.ndarray, n_vertices: int) -> float:
    """
    Twice the signed area of the fan anchored at vertex 0.

    Sums cross(v0, v[j+1], v[j+2]) over j = 0 .. n_vertices-2, i.e. the
    closing row at index ``n_vertices`` is part of the last triangle.
    """
    total = 0.0
    x0 = xs[0]
    y0 = ys[0]
    for j in range(n_vertices - 1):
        x1 = xs[j + 1] - x0
        y1 = ys[j + 1] - y0
        x2 = xs[j + 2] - x0
        y2 = ys[j + 2] - y0
        total += x1 * y2 - x2 * y1
    return total


def _cross(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray) -> float:
    return float((p1[0] - p0[0]) * (p2[1] - p0[1]) - (p2[0] - p0[0]) * (p1[1] - p0[1]))


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  GamutContour
# ═══════════════════════════════════════════════════════════════════════════════
class GamutContour:
    """
    Closed, ordered polygon of emitter chromaticities (first row == last row).

    Iteration and indexing run over the closed point sequence; ``vertices``
    drops the closing repeat.  ``source_indices[i]`` is the position of
    vertex ``i`` in the list the contour was built from.
    """
    __slots__ = ("_table", "_source", "_orientation")

    def __init__(self, table: np.ndarray, source_indices: Sequence[int], orientation: int) -> None:
        table = np.ascontiguousarray(table, dtype=np.float64)
        if table.ndim != 2 or table.shape[1] != 3 or table.shape[0] < 4:
            raise ValueError(
                f"GamutContour: expected a closed (M>=4, 3) table, got {table.shape}"
            )
        if not np.array_equal(table[0], table[-1]):
            raise ValueError("GamutContour: first and last row must coincide.")
        table.setflags(write=False)
        self._table = table
        self._source: Tuple[int, ...] = tuple(int(i) for i in source_indices)
        self._orientation = 1 if orientation >= 0 else -1

    @property
    def points(self) -> Tuple[ChromaticityPoint, ...]:
        return tuple(ChromaticityPoint(*map(float, row)) for row in self._table)

    @property
    def vertices(self) -> Tuple[ChromaticityPoint, ...]:
        return self.points[:-1]

    @property
    def source_indices(self) -> Tuple[int, ...]:
        return self._source

    @property
    def orientation(self) -> int:
        return self._orientation

    @property
    def area(self) -> float:
        """Polygon area under the contour's orientation convention (>= 0 when well formed)."""
        n = self._table.shape[0] - 1
        return 0.5 * self._orientation * _fan_area(self._table[:, 0], self._table[:, 1], n)

    def as_array(self) -> np.ndarray:
        """Read-only (M, 3) table of (x, y, q) rows, closing row included."""
        return self._table

    def contains(self, p: PointLike) -> bool:
        pt = _as_point(p)
        return bool(_crossing_number(pt.x, pt.y, self._table[:, 0], self._table[:, 1]))

    def fit(self, p: PointLike) -> ChromaticityPoint:
        """Project *p* onto the contour; points inside keep their (x, y)."""
        return fit_to_boundary(p, self._table, open_ends=False)

    def __len__(self) -> int:
        return self._table.shape[0]

    def __iter__(self) -> Iterator[ChromaticityPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> ChromaticityPoint:
        return ChromaticityPoint(*map(float, self._table[index]))

    def __repr__(self) -> str:
        return (
            f"GamutContour(vertices={self._table.shape[0] - 1}, "
            f"source={list(self._source)}, area={self.area:.6f})"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 3.  Construction
# ═══════════════════════════════════════════════════════════════════════════════
def build_gamut_contour(points: Sequence[PointLike], names: Optional[Sequence[str]] = None) -> GamutContour:
    """
    Build the gamut contour of *points* in input order.

    Parameters
    ----------
    points : sequence of PointLike
        Emitter chromaticities, at least three.
    names : sequence of str, optional
        Labels used in log messages only.

    Raises
    ------
    ValueError
        Fewer than three points.
    """
    pts = [_as_point(p) for p in points]
    if len(pts) < 3:
        raise ValueError(f"build_gamut_contour: needs at least 3 points, got {len(pts)}")
    label = (lambda i: names[i]) if names is not None else (lambda i: f"#{i}")

    src = np.array([tuple(p) for p in pts], dtype=np.float64)
    g = np.array([src[0], src[1], src[2], src[0]], dtype=np.float64)
    order = [0, 1, 2, 0]

    seed = _cross(src[0], src[1], src[2])
    ccw = 1 if seed >= 0.0 else -1
    if seed == 0.0:
        msg = (
            f"build_gamut_contour: seed triangle {label(0)}, {label(1)}, {label(2)} "
            f"is degenerate (collinear or duplicate chromaticities)."
        )
        logger.warning(msg)
        warnings.warn(msg, stacklevel=2)

    n_vertices = 3
    for m in range(3, len(pts)):
        xc = src[m]
        if _crossing_number(xc[0], xc[1], g[:, 0], g[:, 1]):
            logger.debug("build_gamut_contour: %s inside current contour, skipped", label(m))
            continue

        g = np.insert(g, 1, xc, axis=0)
        order.insert(1, m)

        areas = np.zeros(n_vertices, dtype=np.float64)
        for i in range(n_vertices):
            areas[i] = _fan_area(g[:, 0], g[:, 1], n_vertices + 1) * ccw
            if i < n_vertices - 1:
                g[[i + 1, i + 2]] = g[[i + 2, i + 1]]
                order[i + 1], order[i + 2] = order[i + 2], order[i + 1]

        i_max = 0
        a_max = 0.0
        for i in range(n_vertices):
            if a_max < areas[i]:
                a_max = areas[i]
                i_max = i

        # The candidate now sits at index n_vertices; move it to i_max + 1.
        for i in range(n_vertices, i_max + 1, -1):
            g[i] = g[i - 1]
            order[i] = order[i - 1]
        g[i_max + 1] = xc
        order[i_max + 1] = m
        n_vertices += 1
        logger.debug("build_gamut_contour: %s inserted at slot %d", label(m), i_max + 1)

    return GamutContour(g, order[:-1], ccw)
