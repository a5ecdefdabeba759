# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_fixture.py — a light fixture made of N emitters.

``Fixture`` ties the pieces together: it builds the gamut contour and the
composite solver for its emitter set, and keeps the last realized color,
luminance and drive vector.

Threading
---------
Every rebuild (``add_emitter``) and every state-changing solve runs under
one re-entrant lock, so at most one update is in flight per fixture and a
rebuild never races a solve.  ``submit_color`` hands the work to a
caller-owned executor; the lock still serializes it.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from tint_colorspace import ColorType, ColorValue, RawColor, as_color, xyz_to_xyY
from tint_config import D65_XY, SolverSettings, DEFAULT_SETTINGS
from tint_emitter import Emitter
from tint_gamut import GamutContour, build_gamut_contour
from tint_solver import (
    ArrayLike,
    CompositeSolver,
    FixtureConstructionError,
    SolveResult,
    run_on,
)

__all__ = ["Fixture"]

logger = logging.getLogger(__name__)

ColorLike = Union[ColorValue, RawColor]


class Fixture:
    """
    N-emitter light fixture.

    Parameters
    ----------
    emitters : sequence of Emitter
        At least three, spanning a rank-3 XYZ matrix.
    name : str
    settings : SolverSettings, optional

    Raises
    ------
    FixtureConstructionError
        Fewer than three emitters or a rank-deficient set.

    Notes
    -----
    The initial state is the D65 chromaticity at zero luminance with all
    emitters off.
    """
    __slots__ = (
        "name",
        "_emitters",
        "_settings",
        "_contour",
        "_solver",
        "_color",
        "_alpha",
        "_lock",
    )

    def __init__(
        self,
        emitters: Sequence[Emitter],
        name: str = "",
        settings: Optional[SolverSettings] = None,
    ) -> None:
        self.name: str = str(name)
        self._settings = settings if settings is not None else DEFAULT_SETTINGS
        self._lock = threading.RLock()
        self._emitters: List[Emitter] = list(emitters)
        self._contour, self._solver = self._build(self._emitters)
        self._color = ColorValue(ColorType.XYY, (D65_XY[0], D65_XY[1], 0.0))
        self._alpha = np.zeros(len(self._emitters), dtype=np.float64)
        logger.info(
            "Fixture %r: %d emitters, strategy %s",
            self.name, len(self._emitters), self._solver.strategy.value,
        )

    # -- set-up ------------------------------------------------------------
    def _build(self, emitters: Sequence[Emitter]) -> Tuple[GamutContour, CompositeSolver]:
        if len(emitters) < 3:
            raise FixtureConstructionError(
                f"Fixture {self.name!r}: at least 3 emitters are required, got {len(emitters)}"
            )
        contour = build_gamut_contour(
            [e.chromaticity for e in emitters], names=[e.name or f"#{i}" for i, e in enumerate(emitters)]
        )
        solver = CompositeSolver.from_xyz(
            [e.xyz for e in emitters],
            weights=[e.max_wattage for e in emitters],
            settings=self._settings,
        )
        return contour, solver

    def add_emitter(self, emitter: Emitter) -> None:
        """
        Append *emitter*, rebuild contour and solver and re-solve the current color.

        On a construction failure the fixture is left unchanged.
        """
        with self._lock:
            emitters = self._emitters + [emitter]
            contour, solver = self._build(emitters)
            self._emitters = emitters
            self._contour = contour
            self._solver = solver
            self._alpha = np.append(self._alpha, 0.0)
            emitter.brightness = 0.0
            logger.info(
                "Fixture %r: rebuilt with %d emitters, strategy %s",
                self.name, len(emitters), solver.strategy.value,
            )
            self._update(self._color)

    # -- read interface ----------------------------------------------------
    @property
    def emitters(self) -> Tuple[Emitter, ...]:
        return tuple(self._emitters)

    @property
    def n_emitters(self) -> int:
        return len(self._emitters)

    @property
    def contour(self) -> GamutContour:
        return self._contour

    @property
    def solver(self) -> CompositeSolver:
        return self._solver

    @property
    def settings(self) -> SolverSettings:
        return self._settings

    @property
    def alpha(self) -> np.ndarray:
        """Current drive vector (copy)."""
        with self._lock:
            return self._alpha.copy()

    @property
    def max_luminance(self) -> float:
        """Sum of the emitters' full-drive luminance."""
        return float(sum(e.max_brightness for e in self._emitters))

    @property
    def luminance(self) -> float:
        with self._lock:
            return self._color.Y

    # -- color -------------------------------------------------------------
    @property
    def color(self) -> ColorValue:
        """Last realized color as ``xyY`` (copy)."""
        with self._lock:
            return self._color.copy()

    @color.setter
    def color(self, value: ColorLike) -> None:
        self.set_color(value)

    def set_color(self, value: ColorLike) -> SolveResult:
        """
        Drive the fixture toward *value*.

        The chromaticity is fitted onto the gamut contour first.  Types that
        carry no luminance (rgb, hsv, xy) keep the current luminance.  The
        solved drive is normalized, so an over-bright request is realized at
        reduced luminance.  When the solve fails the state is unchanged and
        the failure is logged.
        """
        with self._lock:
            target = self._target_xyY(value, fit=True)
            return self._update(target)

    # -- brightness --------------------------------------------------------
    @property
    def brightness(self) -> float:
        """Current luminance relative to ``max_luminance``."""
        with self._lock:
            return self._color.Y / self.max_luminance

    @brightness.setter
    def brightness(self, value: float) -> None:
        self.set_brightness(value)

    def set_brightness(self, value: float) -> SolveResult:
        """Re-solve the current chromaticity at ``value * max_luminance`` (value clamped to [0, 1])."""
        b = min(max(float(value), 0.0), 1.0)
        with self._lock:
            target = ColorValue(ColorType.XYY, (self._color.x, self._color.y, b * self.max_luminance))
            return self._update(target)

    # -- direct solves -----------------------------------------------------
    def try_solve(self, value: ColorLike) -> SolveResult:
        """Solve *value* without fitting it to the gamut and without touching the state."""
        with self._lock:
            target = self._target_xyY(value, fit=False)
            return self._solver.inverse(target.to_XYZ().as_array())

    def solve(self, value: ColorLike) -> np.ndarray:
        """
        Un-normalized drive vector for *value*.

        Raises
        ------
        GamutExhaustionError
            *value* is outside the gamut of the fixture.
        """
        return self.try_solve(value).unwrap()

    def color_for_alpha(self, alpha: ArrayLike) -> ColorValue:
        """``xyY`` realized by drive vector *alpha*."""
        a = np.asarray(alpha, dtype=np.float64)
        if a.shape != (self.n_emitters,):
            raise ValueError(
                f"Fixture {self.name!r}: expected {self.n_emitters} drive levels, got shape {a.shape}"
            )
        return ColorValue(ColorType.XYY, xyz_to_xyY(self._solver.forward(a)))

    def max_luminance_at(self, value: ColorLike) -> Optional[float]:
        """
        Brightest reproducible luminance at the chromaticity of *value*.

        Solves at ``luminance_headroom * max_luminance`` and normalizes.
        Returns None when the chromaticity is unreachable.
        """
        c = as_color(value)
        xyY = c if c.type is ColorType.XYY else (
            ColorValue(ColorType.XYY, c.components) if c.type is ColorType.XY else c.to_xyY()
        )
        with self._lock:
            request = ColorValue(
                ColorType.XYY, (xyY.x, xyY.y, self.max_luminance * self._settings.luminance_headroom)
            )
            result = self._solver.inverse(request.to_XYZ().as_array())
            if not result.feasible:
                logger.debug("Fixture %r: %r unreachable: %s", self.name, value, result.exhaustion)
                return None
            return self.color_for_alpha(self._solver.normalize(result.alpha)).Y

    def max_brightness_at(self, value: ColorLike) -> Optional[float]:
        """``max_luminance_at`` relative to ``max_luminance``; None when unreachable."""
        lum = self.max_luminance_at(value)
        if lum is None or lum <= 0.0:
            return None
        return lum / self.max_luminance

    # -- gamut -------------------------------------------------------------
    def in_gamut(self, value: ColorLike) -> bool:
        c = self._chromaticity_of(value)
        return self._contour.contains((c.x, c.y))

    def fit_to_gamut(self, value: ColorLike) -> ColorValue:
        """``xyY`` of *value* with its chromaticity projected onto the gamut; Y is kept."""
        c = self._chromaticity_of(value)
        fitted = self._contour.fit((c.x, c.y))
        return ColorValue(ColorType.XYY, (fitted.x, fitted.y, c.Y))

    # -- offloading --------------------------------------------------------
    def submit_color(
        self, value: ColorLike, executor: Optional[Executor] = None
    ) -> "Future[SolveResult]":
        """Run ``set_color`` on *executor* (inline when None)."""
        return run_on(executor, self.set_color, as_color(value))

    # -- internals ---------------------------------------------------------
    @staticmethod
    def _chromaticity_of(value: ColorLike) -> ColorValue:
        c = as_color(value)
        if c.type is ColorType.XYY:
            return c
        if c.type is ColorType.XY:
            return ColorValue(ColorType.XYY, c.components)
        return c.to_xyY()

    def _target_xyY(self, value: ColorLike, fit: bool) -> ColorValue:
        """Caller holds the lock."""
        c = as_color(value)
        xyY = self._chromaticity_of(c)
        if c.type not in (ColorType.XYY, ColorType.XYZ):
            xyY.set("Y", self._color.Y)
        if fit:
            fitted = self._contour.fit((xyY.x, xyY.y))
            xyY = ColorValue(ColorType.XYY, (fitted.x, fitted.y, xyY.Y))
        return xyY

    def _update(self, target: ColorValue) -> SolveResult:
        """Solve *target* (xyY) and write the result back.  Caller holds the lock."""
        result = self._solver.inverse(target.to_XYZ().as_array())
        if not result.feasible:
            logger.warning("Fixture %r: cannot realize %r: %s", self.name, target, result.exhaustion)
            return result

        alpha = self._solver.normalize(result.alpha)
        luminance = 0.0
        for a, e in zip(alpha, self._emitters):
            e.brightness = a * e.max_brightness
            luminance += a * e.max_brightness
        self._alpha = alpha
        self._color = ColorValue(ColorType.XYY, (target.x, target.y, luminance))
        return SolveResult(alpha, True, result.strategy)

    def __repr__(self) -> str:
        return (
            f"Fixture({self.name!r}, emitters={[e.name for e in self._emitters]}, "
            f"color={self._color!r})"
        )
