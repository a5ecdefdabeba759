# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_simplex.py — exact rational inputs for sympy's simplex.

The linear programs of the solver are handed to
``sympy.solvers.simplex.linprog``, which minimizes ``c · x`` subject to
``A x <= b`` and ``x >= 0`` in exact ``Rational`` arithmetic.  Floats are
turned into rationals once, via ``Fraction.limit_denominator``, so a
feasible region that only touches the bounds is never lost to rounding.
"""

from __future__ import annotations

import functools
import logging
from fractions import Fraction
from typing import Sequence, Union

from sympy import Matrix, Rational
from sympy.solvers.simplex import InfeasibleLPError, UnboundedLPError, linprog

from tint_config import LP_DENOMINATOR_LIMIT

__all__ = [
    "LPBackendError",
    "to_rational",
    "rational_matrix",
    "lp_backend_available",
]

logger = logging.getLogger(__name__)

Number = Union[int, float, Fraction, Rational]


class LPBackendError(RuntimeError):
    """The exact LP backend is unusable."""


def to_rational(value: Number, denominator_limit: int = LP_DENOMINATOR_LIMIT) -> Rational:
    """Exact ``Rational`` for ints and fractions, bounded-denominator approximation for floats."""
    if isinstance(value, Rational):
        return value
    if isinstance(value, (int, Fraction)):
        f = Fraction(value)
    else:
        f = Fraction(float(value)).limit_denominator(denominator_limit)
    return Rational(f.numerator, f.denominator)


def rational_matrix(
    rows: Sequence[Sequence[Number]], denominator_limit: int = LP_DENOMINATOR_LIMIT
) -> Matrix:
    """sympy ``Matrix`` of ``to_rational`` entries."""
    return Matrix([[to_rational(v, denominator_limit) for v in row] for row in rows])


@functools.lru_cache(maxsize=1)
def lp_backend_available() -> bool:
    """
    Self-test of the exact backend on a problem with a known optimum.

    minimize -x0 - x1  s.t.  x0 + 2 x1 <= 4,  3 x0 + x1 <= 6,  -x0 <= -1
    has the optimum x = (8/5, 6/5).
    """
    c = rational_matrix([[-1, -1]])
    A = rational_matrix([[1, 2], [3, 1], [-1, 0]])
    b = rational_matrix([[4], [6], [-1]])
    try:
        objective, x = linprog(c, A, b)
    except (InfeasibleLPError, UnboundedLPError, ArithmeticError) as exc:
        logger.warning("lp_backend_available: self-test raised %r", exc)
        return False
    ok = tuple(x) == (Rational(8, 5), Rational(6, 5)) and objective == Rational(-14, 5)
    if not ok:
        logger.warning("lp_backend_available: self-test returned %r, %r", objective, x)
    return ok
