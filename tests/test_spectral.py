# -*- coding: utf-8 -*-
import numpy as np
import pytest

from tint_spectral import (
    COLOR_TEMPERATURE_MAX,
    PLANCKIAN_LOCUS,
    SPECTRAL_LOCUS,
    X_MAX,
    ChromaticityPoint,
    check_in_gamut,
    clamp_wavelength,
    fade_in,
    fade_out,
    fit_to_boundary,
    k2x,
    k2xy,
    k2y,
    nm2x,
    nm2xy,
    nm2y,
    point_in_polygon,
    xy2k,
    xy2nm,
)

SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0), (0.0, 0.0)]


# -- tables -------------------------------------------------------------------
def test_tables_are_closed_and_read_only():
    assert SPECTRAL_LOCUS.shape == (61, 3)
    np.testing.assert_array_equal(SPECTRAL_LOCUS[0], SPECTRAL_LOCUS[-1])
    assert PLANCKIAN_LOCUS.shape[1] == 3
    with pytest.raises(ValueError):
        SPECTRAL_LOCUS[0, 0] = 1.0


def test_wavelength_lookup():
    assert nm2x(600) == pytest.approx(0.627, abs=1e-3)
    assert nm2y(600) == pytest.approx(0.372, abs=1e-3)
    assert nm2x(625) == pytest.approx(0.700606061)
    mid = nm2xy(522.5)
    assert mid.x == pytest.approx(0.5 * (nm2x(520) + nm2x(525)))
    assert mid.q == pytest.approx(522.5)


@pytest.mark.parametrize("nm, clamped", [(300, 405), (405, 405), (800, 700), (550, 550)])
def test_wavelength_clamp(nm, clamped):
    assert clamp_wavelength(nm) == clamped
    assert nm2x(nm) == nm2x(clamped)


def test_color_temperature_lookup():
    assert k2x(6500) == pytest.approx(0.3155)
    assert k2y(6500) == pytest.approx(0.3270)
    assert k2xy(3000) == (pytest.approx(0.4388), pytest.approx(0.4095), pytest.approx(3000))
    assert k2x(25000) == k2x(20000)
    assert k2x(500) == k2x(1000) == pytest.approx(0.6499)


# -- polygon predicates ------------------------------------------------------
@pytest.mark.parametrize("p, inside", [((0.5, 0.5), True), ((1.5, 0.5), False), ((0.5, -0.1), False)])
def test_point_in_square(p, inside):
    assert point_in_polygon(p, SQUARE) is inside


def test_locus_membership():
    assert check_in_gamut((0.3127, 0.3290))
    assert not check_in_gamut((0.7, 0.1))
    assert not check_in_gamut((0.05, 0.05))


def test_polygon_needs_three_vertices():
    with pytest.raises(ValueError):
        point_in_polygon((0.1, 0.1), [(0, 0), (1, 0), (0, 0)])


# -- fit_to_boundary ---------------------------------------------------------
def test_fit_outside_square_projects_onto_edge():
    p = fit_to_boundary((1.5, 0.5), SQUARE)
    assert p.x == pytest.approx(1.0)
    assert p.y == pytest.approx(0.5)


def test_fit_inside_square_keeps_point():
    p = fit_to_boundary((0.3, 0.4), SQUARE)
    assert (p.x, p.y) == (0.3, 0.4)


def test_fit_beyond_corner_returns_vertex():
    p = fit_to_boundary((1.5, 1.5), SQUARE)
    assert (p.x, p.y) == (pytest.approx(1.0), pytest.approx(1.0))


def test_fit_inside_locus_keeps_point_and_fills_wavelength():
    p = fit_to_boundary((0.33, 0.33))
    assert (p.x, p.y) == (0.33, 0.33)
    assert 405.0 <= p.q <= 700.0


def test_fit_beyond_red_end_stays_on_open_locus():
    p = fit_to_boundary((0.8, 0.3))
    assert p.x == pytest.approx(X_MAX)
    assert p.q == pytest.approx(700.0)


def test_fit_beyond_green_lands_on_boundary():
    p = fit_to_boundary((0.05, 0.9))
    assert p.y <= 0.834
    assert 505.0 <= p.q <= 530.0


def test_fit_accepts_three_component_point():
    p = fit_to_boundary(ChromaticityPoint(0.3, 0.4, 123.0), SQUARE)
    assert isinstance(p, ChromaticityPoint)


# -- inverse lookups ---------------------------------------------------------
@pytest.mark.parametrize("nm", [550.0, 600.0, 470.0])
def test_xy2nm_on_locus_vertex(nm):
    assert xy2nm(nm2x(nm), nm2y(nm)) == pytest.approx(nm)


def test_xy2nm_between_vertices():
    assert xy2nm(*nm2xy(552.5)[:2]) == pytest.approx(552.5, abs=0.5)


def test_xy2k_on_planckian_locus():
    assert xy2k(0.3155, 0.3270) == pytest.approx(6500, abs=25)
    assert xy2k(0.4388, 0.4095) == pytest.approx(3000, abs=100)


def test_xy2k_below_singularity_returns_upper_clamp():
    assert xy2k(0.2, 0.15) == COLOR_TEMPERATURE_MAX


def test_xy2k_projects_points_outside_locus():
    assert 1000.0 <= xy2k(0.9, 0.3) <= COLOR_TEMPERATURE_MAX


# -- fades -------------------------------------------------------------------
def test_fade_out_ends_on_1000k():
    start = (0.3155, 0.3270)
    pts = fade_out(start, 5)
    assert len(pts) == 5
    assert pts[0].x == pytest.approx(start[0])
    assert pts[0].y == pytest.approx(start[1])
    assert pts[-1] == k2xy(1000)
    temps = [p.q for p in pts]
    assert temps == sorted(temps, reverse=True)


def test_fade_in_is_reversed_fade_out():
    start = (0.3155, 0.3270)
    assert fade_in(start, 7) == fade_out(start, 7)[::-1]


def test_fade_custom_curve_and_single_step():
    pts = fade_out((0.3155, 0.3270), 4, fade=lambda r: r * r)
    assert len(pts) == 4
    assert fade_out((0.3155, 0.3270), 1) == [k2xy(1000)]
    with pytest.raises(ValueError):
        fade_out((0.3155, 0.3270), 0)
