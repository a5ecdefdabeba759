# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_config.py — shared tolerances and solver settings.

All numerical thresholds used by the solver, the gamut geometry and the
fixture facade live here so that a single ``SolverSettings`` instance can
be handed down through the stack.  ``DEFAULT_SETTINGS`` is used wherever
no explicit settings object is passed.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from typing import Any, Final, Tuple

__all__ = [
    "EPSILON",
    "RANK_EPSILON",
    "LUMINANCE_HEADROOM",
    "LP_DENOMINATOR_LIMIT",
    "LP_RELAXATION",
    "D65_XY",
    "SolverSettings",
    "DEFAULT_SETTINGS",
]


# ═══════════════════════════════════════════════════════════════════════════════
# 1.  Module constants
# ═══════════════════════════════════════════════════════════════════════════════
EPSILON: Final[float] = 1e-6
RANK_EPSILON: Final[float] = 1e-6

# Inflation applied to the luminance request when probing the brightest
# reproducible drive at a chromaticity.
LUMINANCE_HEADROOM: Final[float] = 1.05

LP_DENOMINATOR_LIMIT: Final[int] = 10**9

# (lower, upper) bounds on each drive level, tried in order.
LP_RELAXATION: Final[Tuple[Tuple[float, float], ...]] = (
    (0.0, 1.0),
    (0.0, float("inf")),
    (-EPSILON / 2.0, float("inf")),
    (-1024.0, float("inf")),
)

D65_XY: Final[Tuple[float, float]] = (0.3127, 0.3290)


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  SolverSettings
# ═══════════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class SolverSettings:
    """
    Immutable bundle of solver tolerances.

    Attributes
    ----------
    epsilon : float
        Feasibility and snapping tolerance.  Drive levels above
        ``-epsilon`` count as non-negative; luminance requests below it
        short-circuit to the all-zero drive.
    rank_epsilon : float
        Singular values at or below this threshold do not count towards
        the rank of the emitter matrix.
    lp_relaxation : tuple of (lower, upper)
        Drive bounds of the successive linear-program attempts, each with at
        least one finite bound.  The widest tier mostly serves to report a
        best-effort drive vector.
    luminance_headroom : float
        Factor applied to the fixture maximum when probing the brightest
        drive at a chromaticity.
    lp_denominator_limit : int
        Largest denominator used when floats enter rational arithmetic.
    """
    epsilon: float = EPSILON
    rank_epsilon: float = RANK_EPSILON
    lp_relaxation: Tuple[Tuple[float, float], ...] = LP_RELAXATION
    luminance_headroom: float = LUMINANCE_HEADROOM
    lp_denominator_limit: int = LP_DENOMINATOR_LIMIT

    def __post_init__(self) -> None:
        if self.epsilon <= 0.0 or self.rank_epsilon <= 0.0:
            raise ValueError(
                f"SolverSettings: tolerances must be positive, got "
                f"epsilon={self.epsilon}, rank_epsilon={self.rank_epsilon}"
            )
        if not self.lp_relaxation:
            raise ValueError("SolverSettings: lp_relaxation needs at least one tier.")
        for lower, upper in self.lp_relaxation:
            if lower >= upper:
                raise ValueError(
                    f"SolverSettings: relaxation tier ({lower}, {upper}) is empty."
                )
            if not (math.isfinite(lower) or math.isfinite(upper)):
                raise ValueError(
                    f"SolverSettings: relaxation tier ({lower}, {upper}) has no finite bound."
                )
        if self.luminance_headroom < 1.0:
            raise ValueError(
                f"SolverSettings: luminance_headroom must be >= 1, "
                f"got {self.luminance_headroom}"
            )

    def replace(self, **changes: Any) -> "SolverSettings":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)


DEFAULT_SETTINGS: Final[SolverSettings] = SolverSettings()
