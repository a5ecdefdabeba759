# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_solver.py — inverting the mixing of N emitters.

An emitter set is described by its forward matrix ``A`` (3 x N), whose
column ``i`` is the XYZ of emitter ``i`` at full drive.  Any drive vector
``alpha`` mixes to ``XYZ = A @ alpha``.  The inverse problem

    find alpha with A @ alpha = XYZ,  0 <= alpha_i (<= 1)

is solved from the singular value decomposition of ``A``:

    alpha = pinv(A) @ XYZ + sum_j beta_j * n_j

where the ``n_j`` span the null space of ``A`` (N - 3 of them for a rank-3
set).  The free ``beta`` are chosen to minimize the weighted drive
``w · alpha`` (e.g. wattage), which reduces to ``sum_j beta_j (n_j · w)``.

Three fixed algorithms, selected once per emitter set by ``SolveStrategy``:

  UNIQUE          N = 3, no freedom; the pseudo-inverse solution.
  ONE_PARAMETER   N = 4, closed-form choice of a single beta on an interval.
  LINEAR_PROGRAM  N > 4, exact rational LP over beta (sympy simplex) with a
                  fixed sequence of relaxed drive bounds.

Every solve returns a ``SolveResult``.  An unreachable target is not an
exception at that level: the result carries a ``GamutExhaustionError``
with the best-effort drive vector, and ``unwrap()`` raises it.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeAlias, TypeVar, Union

import numpy as np
import scipy.linalg
from sympy import Rational
from sympy.solvers.simplex import InfeasibleLPError, UnboundedLPError, linprog

from tint_config import DEFAULT_SETTINGS, SolverSettings
from tint_simplex import LPBackendError, lp_backend_available, rational_matrix, to_rational

__all__ = [
    "ArrayLike",
    "SolveStrategy",
    "SolverMatrix",
    "SolveResult",
    "GamutExhaustionError",
    "FixtureConstructionError",
    "build_solver_matrix",
    "run_on",
    "snap",
    "normalize",
    "CompositeSolver",
]

logger = logging.getLogger(__name__)

ArrayLike: TypeAlias = Union[np.ndarray, Sequence[float]]
T = TypeVar("T")


# ═══════════════════════════════════════════════════════════════════════════════
# 1.  Errors and result types
# ═══════════════════════════════════════════════════════════════════════════════
class FixtureConstructionError(ValueError):
    """The emitter set cannot be solved (too few emitters, rank < 3, bad weights)."""


class SolveStrategy(Enum):
    UNIQUE = "unique"
    ONE_PARAMETER = "one_parameter"
    LINEAR_PROGRAM = "linear_program"

    @classmethod
    def for_size(cls, n_emitters: int) -> "SolveStrategy":
        if n_emitters < 3:
            raise FixtureConstructionError(
                f"SolveStrategy: at least 3 emitters are required, got {n_emitters}"
            )
        if n_emitters == 3:
            return cls.UNIQUE
        if n_emitters == 4:
            return cls.ONE_PARAMETER
        return cls.LINEAR_PROGRAM


class GamutExhaustionError(ValueError):
    """
    The requested color or luminance is outside what the emitters reach.

    Attributes
    ----------
    alpha : np.ndarray
        Best-effort drive vector the solver produced before giving up.
        Not clamped, so negative entries show how far off the request was.
    stage : SolveStrategy
        Solve path that gave up.
    target : np.ndarray or None
        Requested XYZ.
    """

    def __init__(
        self,
        alpha: ArrayLike,
        stage: SolveStrategy,
        target: Optional[ArrayLike] = None,
        message: Optional[str] = None,
    ) -> None:
        self.alpha = np.array(alpha, dtype=np.float64)
        self.stage = stage
        self.target = None if target is None else np.array(target, dtype=np.float64)
        if message is None:
            message = (
                f"Gamut exhausted ({stage.value}): best-effort alpha "
                f"{np.array2string(self.alpha, precision=4)}"
            )
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class SolveResult:
    """
    Outcome of one inverse solve.

    ``alpha`` is the snapped drive vector when ``feasible``, otherwise the
    best-effort vector also found on ``exhaustion.alpha``.  A feasible
    ``alpha`` is non-negative but may exceed 1 (see ``normalize``).
    """
    alpha: np.ndarray
    feasible: bool
    strategy: SolveStrategy
    exhaustion: Optional[GamutExhaustionError] = None

    def unwrap(self) -> np.ndarray:
        """Return ``alpha`` or raise the carried ``GamutExhaustionError``."""
        if self.exhaustion is not None:
            raise self.exhaustion
        return self.alpha


def run_on(executor: Optional[Executor], fn: Callable[..., T], *args: Any) -> "Future[T]":
    """``executor.submit(fn, *args)``, or a completed future when *executor* is None."""
    if executor is not None:
        return executor.submit(fn, *args)
    future: "Future[T]" = Future()
    try:
        future.set_result(fn(*args))
    except Exception as exc:
        future.set_exception(exc)
    return future


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  SolverMatrix
# ═══════════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class SolverMatrix:
    """
    Linear-algebra state of one emitter set.  All arrays are read-only.

    rank            number of singular values above the rank threshold (0–3)
    forward         (3, N)     column i = XYZ of emitter i at full drive
    pseudo_inverse  (N, 3)     V · diag(1/sigma) · U^T, small sigma dropped
    null_basis      (N-3, N)   rows span the kernel of ``forward``
    singular_values (min(3, N),) descending
    """
    rank: int
    forward: np.ndarray
    pseudo_inverse: np.ndarray
    null_basis: np.ndarray
    singular_values: np.ndarray

    @property
    def n_emitters(self) -> int:
        return self.forward.shape[1]


def _orient(vectors: np.ndarray) -> np.ndarray:
    """Per-row sign so that the largest-magnitude entry of each row is positive."""
    if vectors.size == 0:
        return np.ones(vectors.shape[0])
    idx = np.argmax(np.abs(vectors), axis=1)
    signs = np.sign(vectors[np.arange(vectors.shape[0]), idx])
    signs[signs == 0.0] = 1.0
    return signs


def build_solver_matrix(
    xyz_columns: Union[np.ndarray, Sequence[Sequence[float]]],
    rank_epsilon: float = DEFAULT_SETTINGS.rank_epsilon,
) -> SolverMatrix:
    """
    SVD set-up of an emitter set.

    Parameters
    ----------
    xyz_columns : (N, 3) array-like
        Full-drive XYZ of each emitter, one row per emitter.
    rank_epsilon : float
        Singular values at or below this count as zero.

    Notes
    -----
    Singular vectors are only defined up to sign.  Each right singular
    vector (and its paired left vector) is flipped so that its
    largest-magnitude entry is positive, which makes the null basis and
    hence the optimization direction reproducible.
    """
    xyz = np.asarray(xyz_columns, dtype=np.float64)
    if xyz.ndim != 2 or xyz.shape[1] != 3:
        raise ValueError(f"build_solver_matrix: expected shape (N, 3), got {xyz.shape}")
    forward = np.ascontiguousarray(xyz.T)
    n = forward.shape[1]

    u, sigma, vt = scipy.linalg.svd(forward, full_matrices=True)
    k = sigma.shape[0]

    signs = _orient(vt)
    vt = vt * signs[:, None]
    u = u.copy()
    u[:, :k] *= signs[:k][None, :]

    keep = sigma > rank_epsilon
    rank = int(np.count_nonzero(keep))
    inv_sigma = np.where(keep, 1.0 / np.where(keep, sigma, 1.0), 0.0)
    pinv = vt[:k].T @ np.diag(inv_sigma) @ u[:, :k].T

    null_basis = vt[3:].copy() if n > 3 else np.zeros((0, n), dtype=np.float64)

    for arr in (forward, pinv, null_basis, sigma):
        arr.setflags(write=False)
    logger.debug(
        "build_solver_matrix: N=%d rank=%d sigma=%s", n, rank, np.array2string(sigma, precision=6)
    )
    return SolverMatrix(rank, forward, pinv, null_basis, sigma)


# ═══════════════════════════════════════════════════════════════════════════════
# 3.  Snapping and normalization
# ═══════════════════════════════════════════════════════════════════════════════
def snap(alpha: ArrayLike, epsilon: float = DEFAULT_SETTINGS.epsilon) -> np.ndarray:
    """
    Snap drive levels: anything below ``epsilon`` (negatives included)
    becomes 0, anything within ``epsilon`` of 1 becomes 1.
    """
    a = np.array(alpha, dtype=np.float64)
    a[np.abs(a - 1.0) < epsilon] = 1.0
    a[a < epsilon] = 0.0
    return a


def normalize(alpha: ArrayLike, epsilon: float = DEFAULT_SETTINGS.epsilon) -> np.ndarray:
    """
    Bring a drive vector into [0, 1] without changing its chromaticity.

    Snaps, divides by the maximum when it exceeds 1, and snaps again.
    Idempotent.
    """
    a = snap(alpha, epsilon)
    if a.size and a.max() > 1.0:
        a = snap(a / a.max(), epsilon)
    return a


# ═══════════════════════════════════════════════════════════════════════════════
# 4.  CompositeSolver
# ═══════════════════════════════════════════════════════════════════════════════
class CompositeSolver:
    """
    Forward and inverse mixing for one emitter set.

    Parameters
    ----------
    matrix : SolverMatrix
        Must have rank 3.
    weights : array-like, optional
        Positive per-emitter cost weights (default: all ones).  Used only
        as the optimization objective, never as a constraint.
    settings : SolverSettings, optional

    Raises
    ------
    FixtureConstructionError
        Rank below 3, fewer than 3 emitters, or malformed weights.
    """
    __slots__ = ("_matrix", "_weights", "_settings", "_strategy")

    def __init__(
        self,
        matrix: SolverMatrix,
        weights: Optional[ArrayLike] = None,
        settings: Optional[SolverSettings] = None,
    ) -> None:
        n = matrix.n_emitters
        strategy = SolveStrategy.for_size(n)
        if matrix.rank < 3:
            raise FixtureConstructionError(
                f"CompositeSolver: emitter set has rank {matrix.rank} < 3; "
                f"the chromaticities do not span a plane."
            )
        w = np.ones(n, dtype=np.float64) if weights is None else np.array(weights, dtype=np.float64)
        if w.shape != (n,):
            raise FixtureConstructionError(
                f"CompositeSolver: expected {n} weights, got shape {w.shape}"
            )
        if not np.all(np.isfinite(w)) or np.any(w <= 0.0):
            raise FixtureConstructionError(f"CompositeSolver: weights must be positive, got {w}")
        w.setflags(write=False)

        self._matrix = matrix
        self._weights = w
        self._settings = settings if settings is not None else DEFAULT_SETTINGS
        self._strategy = strategy

    @classmethod
    def from_xyz(
        cls,
        xyz_columns: Union[np.ndarray, Sequence[Sequence[float]]],
        weights: Optional[ArrayLike] = None,
        settings: Optional[SolverSettings] = None,
    ) -> "CompositeSolver":
        s = settings if settings is not None else DEFAULT_SETTINGS
        return cls(build_solver_matrix(xyz_columns, s.rank_epsilon), weights, s)

    # -- read interface ----------------------------------------------------
    @property
    def matrix(self) -> SolverMatrix:
        return self._matrix

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    @property
    def settings(self) -> SolverSettings:
        return self._settings

    @property
    def strategy(self) -> SolveStrategy:
        return self._strategy

    @property
    def n_emitters(self) -> int:
        return self._matrix.n_emitters

    # -- forward -----------------------------------------------------------
    def forward(self, alpha: ArrayLike) -> np.ndarray:
        """XYZ mixed by drive vector *alpha*.  No range check."""
        a = np.asarray(alpha, dtype=np.float64)
        if a.shape != (self.n_emitters,):
            raise ValueError(
                f"CompositeSolver.forward: expected alpha of shape ({self.n_emitters},), got {a.shape}"
            )
        return self._matrix.forward @ a

    # -- inverse -----------------------------------------------------------
    def inverse(self, target_xyz: ArrayLike) -> SolveResult:
        """
        Drive vector reproducing *target_xyz*.

        Never raises ``GamutExhaustionError``; it is carried on the result.

        Raises
        ------
        LPBackendError
            N > 4 and the exact LP backend is unusable.
        """
        xyz = np.asarray(target_xyz, dtype=np.float64).reshape(3)
        eps = self._settings.epsilon

        if xyz[1] < eps:
            return SolveResult(np.zeros(self.n_emitters), True, self._strategy)

        base = self._matrix.pseudo_inverse @ xyz

        if self._strategy is SolveStrategy.UNIQUE:
            return self._checked(base, xyz)
        if self._strategy is SolveStrategy.ONE_PARAMETER:
            return self._checked(self._one_parameter(base), xyz)
        return self._linear_program(base, xyz)

    def solve(self, target_xyz: ArrayLike) -> np.ndarray:
        """``inverse(target_xyz).unwrap()``."""
        return self.inverse(target_xyz).unwrap()

    def submit(
        self, target_xyz: ArrayLike, executor: Optional[Executor] = None
    ) -> "Future[SolveResult]":
        """
        Run ``inverse`` on *executor*.  The future resolves to a ``SolveResult``.

        Without an executor the solve runs on the calling thread and the
        returned future is already done.
        """
        return run_on(executor, self.inverse, np.array(target_xyz, dtype=np.float64))

    def normalize(self, alpha: ArrayLike) -> np.ndarray:
        return normalize(alpha, self._settings.epsilon)

    # -- internals ---------------------------------------------------------
    def _checked(self, alpha: np.ndarray, xyz: np.ndarray) -> SolveResult:
        eps = self._settings.epsilon
        if np.all(alpha > -eps):
            return SolveResult(snap(alpha, eps), True, self._strategy)
        logger.debug("CompositeSolver: %s solution has negative drive %s", self._strategy.value, alpha)
        exc = GamutExhaustionError(alpha, self._strategy, xyz)
        return SolveResult(exc.alpha, False, self._strategy, exc)

    def _one_parameter(self, base: np.ndarray) -> np.ndarray:
        """
        alpha(beta) = base + beta * n with a single null vector n.

        Each component bounds beta to an interval keeping it in [0, 1]; the
        intersection is the feasible range.  A secondary range enforces the
        lower bound only and is used when the strict range is empty.  The
        objective beta * (n · w) is minimized at one end of the range.
        """
        n = self._matrix.null_basis[0]
        beta_min, beta_max = -np.inf, np.inf
        beta0_min, beta0_max = -np.inf, np.inf
        for a_i, n_i in zip(base, n):
            if n_i == 0.0:
                continue
            b_n = -a_i / n_i
            if n_i > 0.0:
                beta_min = max(beta_min, b_n)
                beta0_min = max(beta0_min, b_n)
                beta_max = min(beta_max, 1.0 / n_i + b_n)
            else:
                beta_min = max(beta_min, 1.0 / n_i + b_n)
                beta_max = min(beta_max, b_n)
                beta0_max = min(beta0_max, b_n)
        n_w = float(n @ self._weights)

        if beta_min < beta_max:
            beta = beta_min if n_w > 0.0 else beta_max
        else:
            beta = beta0_min if n_w > 0.0 else beta0_max
        if not np.isfinite(beta):
            beta = beta_min
        if not np.isfinite(beta):
            logger.debug("CompositeSolver: no finite beta, reporting pseudo-inverse solution")
            return base.copy()
        return base + beta * n

    def _linear_program(self, base: np.ndarray, xyz: np.ndarray) -> SolveResult:
        """
        Exact LP over the null-space coefficients, retried with relaxed bounds.

        The first optimum whose drive levels are non-negative within
        ``epsilon`` is returned.  Any other optimum replaces the best-effort
        vector reported by the ``GamutExhaustionError``; with the default
        tiers that is the widest one.
        """
        if not lp_backend_available():
            raise LPBackendError("CompositeSolver: exact LP backend failed its self-test.")

        eps = self._settings.epsilon
        tiers = self._settings.lp_relaxation
        best_effort = base
        for tier, (lower, upper) in enumerate(tiers):
            alpha = self._lp_tier(base, lower, upper)
            logger.debug(
                "CompositeSolver: LP tier %d bounds=(%g, %g) -> %s",
                tier, lower, upper, "infeasible" if alpha is None else "optimal",
            )
            if alpha is None:
                continue
            if np.all(alpha > -eps):
                return SolveResult(snap(alpha, eps), True, self._strategy)
            best_effort = alpha

        exc = GamutExhaustionError(best_effort, self._strategy, xyz)
        return SolveResult(exc.alpha, False, self._strategy, exc)

    def _lp_tier(self, base: np.ndarray, lower: float, upper: float) -> Optional[np.ndarray]:
        """
        minimize  sum_j beta_j (n_j · w)
        s.t.      lower <= base_i + sum_j beta_j n_ji <= upper

        with free ``beta_j = p_j - q_j`` split into non-negative parts.
        """
        null = self._matrix.null_basis
        k = null.shape[0]
        limit = self._settings.lp_denominator_limit

        nw = null @ self._weights
        c = rational_matrix([list(nw) + list(-nw)], limit)

        rows: List[List[float]] = []
        rhs: List[List[Rational]] = []
        for i in range(null.shape[1]):
            col = list(null[:, i])
            if np.isfinite(lower):
                rows.append([-v for v in col] + col)
                rhs.append([to_rational(base[i], limit) - to_rational(lower, limit)])
            if np.isfinite(upper):
                rows.append(col + [-v for v in col])
                rhs.append([to_rational(upper, limit) - to_rational(base[i], limit)])

        try:
            _, x = linprog(c, rational_matrix(rows, limit), rational_matrix(rhs, limit))
        except (InfeasibleLPError, UnboundedLPError) as exc:
            logger.debug("CompositeSolver: LP bounds=(%g, %g) %s", lower, upper, type(exc).__name__)
            return None
        beta = np.array([float(x[j] - x[k + j]) for j in range(k)], dtype=np.float64)
        return base + null.T @ beta

    def __repr__(self) -> str:
        return (
            f"CompositeSolver(N={self.n_emitters}, strategy={self._strategy.value}, "
            f"rank={self._matrix.rank})"
        )
