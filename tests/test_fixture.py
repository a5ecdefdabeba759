# -*- coding: utf-8 -*-
import logging
import threading
import warnings
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from conftest import make_emitter, make_emitters
from tint_colorspace import ColorValue, RawColor
from tint_emitter import typical_rgbw
from tint_fixture import Fixture
from tint_solver import (
    CompositeSolver,
    FixtureConstructionError,
    GamutExhaustionError,
    SolveResult,
    SolveStrategy,
)
from tint_spectral import nm2x, nm2y

D65 = (0.3127, 0.3290)
GREEN_520 = (nm2x(520), nm2y(520))
TYPICAL_G = (0.2002, 0.6976)


def xyY(x, y, Y):
    return ColorValue("xyY", (x, y, Y))


@pytest.fixture
def lamp(rgbw):
    return Fixture(rgbw, name="lamp")


# -- construction ------------------------------------------------------------
def test_initial_state(lamp):
    assert lamp.n_emitters == 4
    assert lamp.solver.strategy is SolveStrategy.ONE_PARAMETER
    assert (lamp.color.x, lamp.color.y) == D65
    assert lamp.luminance == 0.0
    assert lamp.brightness == 0.0
    np.testing.assert_array_equal(lamp.alpha, np.zeros(4))
    assert lamp.max_luminance == pytest.approx(186.0)


def test_too_few_emitters(rgb):
    with pytest.raises(FixtureConstructionError):
        Fixture(rgb[:2])


def test_rank_deficient_emitters():
    same = [make_emitter("W") for _ in range(3)]
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        with pytest.raises(FixtureConstructionError):
            Fixture(same)


# -- color -------------------------------------------------------------------
def test_set_color_in_gamut(lamp):
    result = lamp.set_color(xyY(*D65, 50.0))
    assert result.feasible
    c = lamp.color
    assert (c.x, c.y) == D65
    assert c.Y == pytest.approx(50.0)
    assert lamp.color_for_alpha(lamp.alpha).components == pytest.approx((*D65, 50.0), abs=1e-6)
    assert sum(e.brightness for e in lamp.emitters) == pytest.approx(50.0)
    for a, e in zip(lamp.alpha, lamp.emitters):
        assert e.drive == pytest.approx(a)


@pytest.mark.parametrize("color_type, components, keeps_luminance", [
    ("rgb", (0.2, 0.3, 0.4), True),
    ("hsv", (150.0, 0.3, 0.4), True),
    ("xy", (0.2, 0.4, 3.14), True),
    ("XYZ", (0.2, 0.3, 0.4), False),
    ("xyY", (0.2, 0.4, 0.5), False),
])
def test_set_color_any_type(lamp, color_type, components, keeps_luminance):
    lamp.color = xyY(*D65, 40.0)
    value = ColorValue(color_type, components)
    lamp.color = value
    expected = value.to_xyY()
    c = lamp.color
    assert (c.x, c.y) == (pytest.approx(expected.x, abs=1e-6), pytest.approx(expected.y, abs=1e-6))
    if keeps_luminance:
        assert c.Y == pytest.approx(40.0)
    else:
        assert c.Y == pytest.approx(expected.Y)


def test_raw_color_is_xyY(lamp):
    lamp.color = RawColor((0.3127, 0.3290, 20.0))
    assert lamp.luminance == pytest.approx(20.0)


def test_out_of_gamut_color_is_fitted(lamp):
    result = lamp.set_color(xyY(*GREEN_520, 10.0))
    assert result.feasible
    c = lamp.color
    assert (c.x, c.y) == (pytest.approx(TYPICAL_G[0]), pytest.approx(TYPICAL_G[1]))
    assert c.Y == pytest.approx(10.0)


def test_over_bright_request_is_normalized(lamp):
    lamp.color = xyY(*D65, 1000.0)
    assert lamp.alpha.max() == 1.0
    assert 0.0 < lamp.luminance < lamp.max_luminance
    assert (lamp.color.x, lamp.color.y) == D65


def test_failed_update_keeps_state(lamp, monkeypatch, caplog):
    lamp.color = xyY(*D65, 30.0)
    before_color, before_alpha = lamp.color, lamp.alpha

    def refuse(self, target_xyz):
        exc = GamutExhaustionError(-np.ones(4), SolveStrategy.ONE_PARAMETER, target_xyz)
        return SolveResult(exc.alpha, False, SolveStrategy.ONE_PARAMETER, exc)

    monkeypatch.setattr(CompositeSolver, "inverse", refuse)
    with caplog.at_level(logging.WARNING, logger="tint_fixture"):
        result = lamp.set_color(xyY(0.4, 0.4, 10.0))
    assert not result.feasible
    assert lamp.color == before_color
    np.testing.assert_array_equal(lamp.alpha, before_alpha)
    assert "cannot realize" in caplog.text


# -- direct solves -----------------------------------------------------------
def test_solve_does_not_fit_or_update(lamp):
    with pytest.raises(GamutExhaustionError):
        lamp.solve(xyY(*GREEN_520, 10.0))
    alpha = lamp.solve(xyY(*D65, 30.0))
    assert alpha.shape == (4,)
    assert lamp.luminance == 0.0
    assert not lamp.try_solve(xyY(*GREEN_520, 10.0)).feasible


def test_color_for_alpha(lamp):
    assert lamp.color_for_alpha(np.ones(4)).Y == pytest.approx(186.0)
    with pytest.raises(ValueError):
        lamp.color_for_alpha([1.0, 1.0])


# -- brightness --------------------------------------------------------------
def test_brightness(lamp):
    lamp.color = xyY(*D65, 10.0)
    lamp.brightness = 0.2
    assert lamp.brightness == pytest.approx(0.2)
    assert lamp.luminance == pytest.approx(0.2 * 186.0)

    lamp.brightness = 1.5
    assert 0.2 < lamp.brightness <= 1.0
    assert (lamp.color.x, lamp.color.y) == D65

    lamp.brightness = -0.5
    assert lamp.brightness == 0.0
    np.testing.assert_array_equal(lamp.alpha, np.zeros(4))
    assert (lamp.color.x, lamp.color.y) == D65


def test_max_luminance_at(rgb):
    f = Fixture(rgb)
    lum = f.max_luminance_at(xyY(*D65, 1.0))
    assert 0.0 < lum < f.max_luminance
    assert f.solve(xyY(*D65, 0.999 * lum)).max() <= 1.0
    assert f.solve(xyY(*D65, 1.01 * lum)).max() > 1.0
    assert f.max_brightness_at(ColorValue("xy", D65)) == pytest.approx(lum / f.max_luminance)


def test_max_luminance_at_unreachable(lamp):
    assert lamp.max_luminance_at(xyY(*GREEN_520, 1.0)) is None
    assert lamp.max_brightness_at(xyY(*GREEN_520, 1.0)) is None


# -- gamut -------------------------------------------------------------------
def test_in_gamut_and_fit(lamp):
    assert lamp.in_gamut(xyY(*D65, 1.0))
    assert lamp.in_gamut(ColorValue("rgb", (0.5, 0.5, 0.5)))
    assert not lamp.in_gamut(ColorValue("xy", GREEN_520))
    fitted = lamp.fit_to_gamut(xyY(*GREEN_520, 7.0))
    assert fitted.components == (pytest.approx(TYPICAL_G[0]), pytest.approx(TYPICAL_G[1]), 7.0)


def test_add_emitter_resolves_current_color(rgb):
    f = Fixture(rgb)
    f.color = xyY(*D65, 20.0)
    white = typical_rgbw()[3]
    f.add_emitter(white)
    assert f.n_emitters == 4
    assert f.solver.strategy is SolveStrategy.ONE_PARAMETER
    assert f.contour.source_indices == (0, 1, 2)

    fresh = Fixture(typical_rgbw())
    fresh.color = xyY(*D65, 20.0)
    np.testing.assert_allclose(f.alpha, fresh.alpha, atol=1e-9)
    assert f.alpha[3] > 0.0
    assert white.brightness == pytest.approx(f.alpha[3] * white.max_brightness)
    assert f.luminance == pytest.approx(20.0)

    weights = np.array([e.max_wattage for e in f.emitters])
    rgb_only = np.append(Fixture(typical_rgbw()[:3]).solve(xyY(*D65, 20.0)), 0.0)
    assert weights @ f.alpha < weights @ rgb_only


def test_add_emitter_switches_to_linear_program(rgb):
    f = Fixture(rgb)
    f.add_emitter(make_emitter("W"))
    f.add_emitter(make_emitter("A"))
    assert f.solver.strategy is SolveStrategy.LINEAR_PROGRAM
    assert 4 in f.contour.source_indices
    assert f.alpha.shape == (5,)
    assert not f.alpha.any()
    assert f.set_color(xyY(0.38, 0.55, 20.0)).feasible


class _RecordingLock:
    def __init__(self):
        self._lock = threading.RLock()
        self.depth = 0

    def __enter__(self):
        self._lock.acquire()
        self.depth += 1
        return self

    def __exit__(self, *exc_info):
        self.depth -= 1
        self._lock.release()


def test_max_luminance_at_reads_emitters_under_lock(rgb, monkeypatch):
    f = Fixture(rgb)
    lock = _RecordingLock()
    f._lock = lock
    depths = []
    total = Fixture.max_luminance.fget

    def recording(self):
        depths.append(lock.depth)
        return total(self)

    monkeypatch.setattr(Fixture, "max_luminance", property(recording))
    assert f.max_luminance_at(xyY(*D65, 1.0)) is not None
    assert depths and all(d > 0 for d in depths)


# -- offloading --------------------------------------------------------------
def test_submit_color():
    f = Fixture(make_emitters("RGBWA"))
    targets = [xyY(*D65, 20.0), xyY(0.45, 0.41, 20.0), xyY(0.25, 0.30, 20.0), xyY(0.38, 0.50, 20.0)]
    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [f.submit_color(t, pool) for t in targets]
        results = [fut.result() for fut in futures]
    assert all(r.feasible for r in results)
    final = (f.color.x, f.color.y)
    assert final in [(t.x, t.y) for t in targets]
    assert f.color_for_alpha(f.alpha).Y == pytest.approx(f.luminance)


def test_submit_color_inline(lamp):
    future = lamp.submit_color(xyY(*D65, 25.0))
    assert future.done()
    assert future.result().feasible
    assert lamp.luminance == pytest.approx(25.0)
