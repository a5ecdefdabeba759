# -*- coding: utf-8 -*-
from fractions import Fraction

import numpy as np
import pytest
from sympy import Matrix, Rational
from sympy.solvers.simplex import InfeasibleLPError, linprog

import tint_simplex
from tint_simplex import lp_backend_available, rational_matrix, to_rational


def test_to_rational():
    assert to_rational(0.1) == Rational(1, 10)
    assert to_rational(3) == Rational(3)
    assert to_rational(Fraction(2, 7)) == Rational(2, 7)
    assert to_rational(Rational(5, 11)) == Rational(5, 11)
    assert to_rational(np.float64(0.25)) == Rational(1, 4)
    assert to_rational(0.333333, denominator_limit=3) == Rational(1, 3)


def test_rational_matrix():
    m = rational_matrix([[0.5, -1], [Fraction(1, 3), 2.0]])
    assert m.shape == (2, 2)
    assert m == Matrix([[Rational(1, 2), -1], [Rational(1, 3), 2]])


def test_touching_bound_is_kept_exact():
    # x0 + x1 >= 1/3 written as -x0 - x1 <= -1/3
    c = rational_matrix([[1, 1]])
    objective, x = linprog(c, rational_matrix([[-1, -1]]), rational_matrix([[Fraction(-1, 3)]]))
    assert objective == Rational(1, 3)
    assert sum(x) == Rational(1, 3)


def test_infeasible_system_raises():
    with pytest.raises(InfeasibleLPError):
        linprog(rational_matrix([[1]]), rational_matrix([[1]]), rational_matrix([[-1]]))


def test_backend_self_test():
    assert lp_backend_available() is True


def test_backend_self_test_reports_failure(monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise InfeasibleLPError("no feasible point")

    lp_backend_available.cache_clear()
    monkeypatch.setattr(tint_simplex, "linprog", broken)
    try:
        assert lp_backend_available() is False
        assert "self-test raised" in caplog.text
    finally:
        lp_backend_available.cache_clear()
