# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_spectral.py — spectral locus, Planckian locus and polygon geometry.

Two immutable lookup tables are built once at import time:

  1.  ``SPECTRAL_LOCUS``: CIE 1931 (x, y) of monochromatic light from
      405 nm to 700 nm in 5 nm steps (JIS Z8701:1999), closed by repeating
      the first row.  The closure only lets the polygon routines treat the
      locus like any other polygon; the UV and NIR ends are not physically
      connected and boundary projection keeps them apart (``open_ends``).
  2.  ``PLANCKIAN_LOCUS``: (x, y) of a black body from 1000 K to 20100 K
      in 100 K steps.  Open curve.

Every table row and every polygon vertex is a ``ChromaticityPoint``-shaped
triple ``(x, y, q)``, where ``q`` is a free annotation (wavelength in nm,
color temperature in K, or whatever the caller stores there).

References:
    - JIS Z8701:1999 "Color specification — The CIE 1931 standard
      colorimetric system".
    - M. Charity, "Blackbody color datafile" (vendian.org).
    - C. S. McCamy (1992), "Correlated color temperature as an explicit
      function of chromaticity coordinates".
"""

from __future__ import annotations

import math
from typing import Callable, Final, List, NamedTuple, Optional, Sequence, TypeAlias, Union

import numpy as np
from numba import njit

__all__ = [
    "ChromaticityPoint",
    "PointLike",
    "PolygonLike",
    "WAVELENGTH_MIN",
    "WAVELENGTH_MAX",
    "COLOR_TEMPERATURE_MIN",
    "COLOR_TEMPERATURE_MAX",
    "X_MIN",
    "X_MAX",
    "Y_MIN",
    "Y_MAX",
    "SPECTRAL_LOCUS",
    "PLANCKIAN_LOCUS",
    "clamp_x",
    "clamp_y",
    "clamp_wavelength",
    "clamp_color_temperature",
    "nm2x",
    "nm2y",
    "nm2xy",
    "k2x",
    "k2y",
    "k2xy",
    "point_in_polygon",
    "fit_to_boundary",
    "check_in_gamut",
    "xy2nm",
    "xy2k",
    "fade_out",
    "fade_in",
]


# ═══════════════════════════════════════════════════════════════════════════════
# 1.  ChromaticityPoint
# ═══════════════════════════════════════════════════════════════════════════════
class ChromaticityPoint(NamedTuple):
    """CIE 1931 chromaticity with an optional scalar annotation ``q``."""
    x: float
    y: float
    q: float = 0.0


PointLike: TypeAlias = Union[ChromaticityPoint, Sequence[float], np.ndarray]
PolygonLike: TypeAlias = Union[Sequence[PointLike], np.ndarray]


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  Tables
# ═══════════════════════════════════════════════════════════════════════════════
WAVELENGTH_MIN: Final[float] = 405.0
WAVELENGTH_MAX: Final[float] = 700.0
WAVELENGTH_STEP: Final[float] = 5.0

COLOR_TEMPERATURE_MIN: Final[float] = 1000.0
COLOR_TEMPERATURE_MAX: Final[float] = 20000.0
COLOR_TEMPERATURE_STEP: Final[float] = 100.0

# Bounding box of the spectral locus.
X_MIN: Final[float] = 0.003858521
X_MAX: Final[float] = 0.735483871
Y_MIN: Final[float] = 0.004477612
Y_MAX: Final[float] = 0.833822666

# (nm, x, y): JIS Z8701:1999
_WAVELENGTH_ROWS: Final = (
    (405, 0.173134328, 0.004477612),
    (410, 0.172550575, 0.004760016),
    (415, 0.172023941, 0.004876967),
    (420, 0.171428571, 0.005102041),
    (425, 0.170313987, 0.005788138),
    (430, 0.168877521, 0.006900244),
    (435, 0.166895290, 0.008535284),
    (440, 0.164416541, 0.010857251),
    (445, 0.161120111, 0.013793103),
    (450, 0.156641662, 0.017704887),
    (455, 0.150985408, 0.022740193),
    (460, 0.143960396, 0.029702970),
    (465, 0.135502671, 0.039879121),
    (470, 0.124142313, 0.057814485),
    (475, 0.109594324, 0.086842511),
    (480, 0.091256205, 0.132684231),
    (485, 0.068761114, 0.200711322),
    (490, 0.045377198, 0.294951787),
    (495, 0.023459943, 0.412703479),
    (500, 0.008168028, 0.538423071),
    (505, 0.003858521, 0.654823151),
    (510, 0.013870246, 0.750186428),
    (515, 0.038851802, 0.812016021),
    (520, 0.074339401, 0.833822666),
    (525, 0.114154776, 0.826163941),
    (530, 0.154716276, 0.805833411),
    (535, 0.192840055, 0.781698565),
    (540, 0.229619673, 0.754329090),
    (545, 0.265775085, 0.724323925),
    (550, 0.301579570, 0.692366572),
    (555, 0.337396231, 0.658848333),
    (560, 0.373101544, 0.624450860),
    (565, 0.408748569, 0.589624631),
    (570, 0.444062464, 0.554713903),
    (575, 0.478774791, 0.520202307),
    (580, 0.512472036, 0.486577181),
    (585, 0.544786506, 0.454434115),
    (590, 0.575151311, 0.424232235),
    (595, 0.602932786, 0.396496634),
    (600, 0.627036600, 0.372491145),
    (605, 0.648233106, 0.351394916),
    (610, 0.665781260, 0.334019523),
    (615, 0.680098565, 0.319756486),
    (620, 0.691485918, 0.308352218),
    (625, 0.700606061, 0.299300699),
    (630, 0.707956800, 0.292043200),
    (635, 0.714059823, 0.285940177),
    (640, 0.719056028, 0.280943972),
    (645, 0.723046092, 0.276953908),
    (650, 0.725992318, 0.274007682),
    (655, 0.728271728, 0.271728272),
    (660, 0.729969013, 0.270030987),
    (665, 0.731001206, 0.268998794),
    (670, 0.731993300, 0.268006700),
    (675, 0.732718894, 0.267281106),
    (680, 0.733542320, 0.266457680),
    (685, 0.734375000, 0.265625000),
    (690, 0.734627832, 0.265372168),
    (695, 0.734883721, 0.265116279),
    (700, 0.735483871, 0.264516129),
)

# (K, x, y)
_COLOR_TEMPERATURE_ROWS: Final = (
    (1000, 0.6499, 0.3474),
    (1100, 0.6361, 0.3594),
    (1200, 0.6226, 0.3703),
    (1300, 0.6095, 0.3801),
    (1400, 0.5966, 0.3887),
    (1500, 0.5841, 0.3962),
    (1600, 0.5720, 0.4025),
    (1700, 0.5601, 0.4076),
    (1800, 0.5486, 0.4118),
    (1900, 0.5375, 0.4150),
    (2000, 0.5267, 0.4173),
    (2100, 0.5162, 0.4188),
    (2200, 0.5062, 0.4196),
    (2300, 0.4965, 0.4198),
    (2400, 0.4872, 0.4194),
    (2500, 0.4782, 0.4186),
    (2600, 0.4696, 0.4173),
    (2700, 0.4614, 0.4158),
    (2800, 0.4535, 0.4139),
    (2900, 0.4460, 0.4118),
    (3000, 0.4388, 0.4095),
    (3100, 0.4320, 0.4070),
    (3200, 0.4254, 0.4044),
    (3300, 0.4192, 0.4018),
    (3400, 0.4132, 0.3990),
    (3500, 0.4075, 0.3962),
    (3600, 0.4021, 0.3934),
    (3700, 0.3969, 0.3905),
    (3800, 0.3919, 0.3877),
    (3900, 0.3872, 0.3849),
    (4000, 0.3827, 0.3820),
    (4100, 0.3784, 0.3793),
    (4200, 0.3743, 0.3765),
    (4300, 0.3704, 0.3738),
    (4400, 0.3666, 0.3711),
    (4500, 0.3631, 0.3685),
    (4600, 0.3596, 0.3659),
    (4700, 0.3563, 0.3634),
    (4800, 0.3532, 0.3609),
    (4900, 0.3502, 0.3585),
    (5000, 0.3473, 0.3561),
    (5100, 0.3446, 0.3538),
    (5200, 0.3419, 0.3516),
    (5300, 0.3394, 0.3494),
    (5400, 0.3369, 0.3472),
    (5500, 0.3346, 0.3451),
    (5600, 0.3323, 0.3431),
    (5700, 0.3302, 0.3411),
    (5800, 0.3281, 0.3392),
    (5900, 0.3261, 0.3373),
    (6000, 0.3242, 0.3355),
    (6100, 0.3223, 0.3337),
    (6200, 0.3205, 0.3319),
    (6300, 0.3188, 0.3302),
    (6400, 0.3171, 0.3286),
    (6500, 0.3155, 0.3270),
    (6600, 0.3140, 0.3254),
    (6700, 0.3125, 0.3238),
    (6800, 0.3110, 0.3224),
    (6900, 0.3097, 0.3209),
    (7000, 0.3083, 0.3195),
    (7100, 0.3070, 0.3181),
    (7200, 0.3058, 0.3168),
    (7300, 0.3045, 0.3154),
    (7400, 0.3034, 0.3142),
    (7500, 0.3022, 0.3129),
    (7600, 0.3011, 0.3117),
    (7700, 0.3000, 0.3105),
    (7800, 0.2990, 0.3094),
    (7900, 0.2980, 0.3082),
    (8000, 0.2970, 0.3071),
    (8100, 0.2961, 0.3061),
    (8200, 0.2952, 0.3050),
    (8300, 0.2943, 0.3040),
    (8400, 0.2934, 0.3030),
    (8500, 0.2926, 0.3020),
    (8600, 0.2917, 0.3011),
    (8700, 0.2910, 0.3001),
    (8800, 0.2902, 0.2992),
    (8900, 0.2894, 0.2983),
    (9000, 0.2887, 0.2975),
    (9100, 0.2880, 0.2966),
    (9200, 0.2873, 0.2958),
    (9300, 0.2866, 0.2950),
    (9400, 0.2860, 0.2942),
    (9500, 0.2853, 0.2934),
    (9600, 0.2847, 0.2927),
    (9700, 0.2841, 0.2919),
    (9800, 0.2835, 0.2912),
    (9900, 0.2829, 0.2905),
    (10000, 0.2824, 0.2898),
    (10100, 0.2818, 0.2891),
    (10200, 0.2813, 0.2884),
    (10300, 0.2807, 0.2878),
    (10400, 0.2802, 0.2871),
    (10500, 0.2797, 0.2865),
    (10600, 0.2792, 0.2859),
    (10700, 0.2788, 0.2853),
    (10800, 0.2783, 0.2847),
    (10900, 0.2778, 0.2841),
    (11000, 0.2774, 0.2836),
    (11100, 0.2770, 0.2830),
    (11200, 0.2765, 0.2825),
    (11300, 0.2761, 0.2819),
    (11400, 0.2757, 0.2814),
    (11500, 0.2753, 0.2809),
    (11600, 0.2749, 0.2804),
    (11700, 0.2745, 0.2799),
    (11800, 0.2742, 0.2794),
    (11900, 0.2738, 0.2789),
    (12000, 0.2734, 0.2785),
    (12100, 0.2731, 0.2780),
    (12200, 0.2727, 0.2776),
    (12300, 0.2724, 0.2771),
    (12400, 0.2721, 0.2767),
    (12500, 0.2717, 0.2763),
    (12600, 0.2714, 0.2758),
    (12700, 0.2711, 0.2754),
    (12800, 0.2708, 0.2750),
    (12900, 0.2705, 0.2746),
    (13000, 0.2702, 0.2742),
    (13100, 0.2699, 0.2738),
    (13200, 0.2696, 0.2735),
    (13300, 0.2694, 0.2731),
    (13400, 0.2691, 0.2727),
    (13500, 0.2688, 0.2724),
    (13600, 0.2686, 0.2720),
    (13700, 0.2683, 0.2717),
    (13800, 0.2680, 0.2713),
    (13900, 0.2678, 0.2710),
    (14000, 0.2675, 0.2707),
    (14100, 0.2673, 0.2703),
    (14200, 0.2671, 0.2700),
    (14300, 0.2668, 0.2697),
    (14400, 0.2666, 0.2694),
    (14500, 0.2664, 0.2691),
    (14600, 0.2662, 0.2688),
    (14700, 0.2659, 0.2685),
    (14800, 0.2657, 0.2682),
    (14900, 0.2655, 0.2679),
    (15000, 0.2653, 0.2676),
    (15100, 0.2651, 0.2673),
    (15200, 0.2649, 0.2671),
    (15300, 0.2647, 0.2668),
    (15400, 0.2645, 0.2665),
    (15500, 0.2643, 0.2663),
    (15600, 0.2641, 0.2660),
    (15700, 0.2639, 0.2657),
    (15800, 0.2638, 0.2655),
    (15900, 0.2636, 0.2652),
    (16000, 0.2634, 0.2650),
    (16100, 0.2632, 0.2648),
    (16200, 0.2631, 0.2645),
    (16300, 0.2629, 0.2643),
    (16400, 0.2627, 0.2641),
    (16500, 0.2626, 0.2638),
    (16600, 0.2624, 0.2636),
    (16700, 0.2622, 0.2634),
    (16800, 0.2621, 0.2632),
    (16900, 0.2619, 0.2629),
    (17000, 0.2618, 0.2627),
    (17100, 0.2616, 0.2625),
    (17200, 0.2615, 0.2623),
    (17300, 0.2613, 0.2621),
    (17400, 0.2612, 0.2619),
    (17500, 0.2610, 0.2617),
    (17600, 0.2609, 0.2615),
    (17700, 0.2608, 0.2613),
    (17800, 0.2606, 0.2611),
    (17900, 0.2605, 0.2609),
    (18000, 0.2604, 0.2607),
    (18100, 0.2602, 0.2606),
    (18200, 0.2601, 0.2604),
    (18300, 0.2600, 0.2602),
    (18400, 0.2598, 0.2600),
    (18500, 0.2597, 0.2598),
    (18600, 0.2596, 0.2597),
    (18700, 0.2595, 0.2595),
    (18800, 0.2593, 0.2593),
    (18900, 0.2592, 0.2592),
    (19000, 0.2591, 0.2590),
    (19100, 0.2590, 0.2588),
    (19200, 0.2589, 0.2587),
    (19300, 0.2588, 0.2585),
    (19400, 0.2587, 0.2584),
    (19500, 0.2586, 0.2582),
    (19600, 0.2584, 0.2580),
    (19700, 0.2583, 0.2579),
    (19800, 0.2582, 0.2577),
    (19900, 0.2581, 0.2576),
    (20000, 0.2580, 0.2574),
    (20100, 0.2579, 0.2573),
)


def _make_spectral_locus() -> np.ndarray:
    rows = [(x, y, nm) for nm, x, y in _WAVELENGTH_ROWS]
    rows.append(rows[0])
    table = np.array(rows, dtype=np.float64)
    table.setflags(write=False)
    return table


def _make_planckian_locus() -> np.ndarray:
    table = np.array([(x, y, k) for k, x, y in _COLOR_TEMPERATURE_ROWS], dtype=np.float64)
    table.setflags(write=False)
    return table


# Columns: x, y, q.  SPECTRAL_LOCUS[-1] == SPECTRAL_LOCUS[0].
SPECTRAL_LOCUS: Final[np.ndarray] = _make_spectral_locus()
PLANCKIAN_LOCUS: Final[np.ndarray] = _make_planckian_locus()


# ═══════════════════════════════════════════════════════════════════════════════
# 3.  Clamping and table interpolation
# ═══════════════════════════════════════════════════════════════════════════════
def clamp_x(x: float) -> float:
    return min(max(float(x), X_MIN), X_MAX)


def clamp_y(y: float) -> float:
    return min(max(float(y), Y_MIN), Y_MAX)


def clamp_wavelength(nm: float) -> float:
    return min(max(float(nm), WAVELENGTH_MIN), WAVELENGTH_MAX)


def clamp_color_temperature(k: float) -> float:
    return min(max(float(k), COLOR_TEMPERATURE_MIN), COLOR_TEMPERATURE_MAX)


def _interpolate(table: np.ndarray, column: int, value: float, start: float, step: float) -> float:
    """Linear interpolation in a regularly stepped table.  *value* is pre-clamped."""
    i = int(math.floor((value - start) / step))
    i = min(max(i, 0), table.shape[0] - 2)
    v1 = start + i * step
    if value == v1:
        return float(table[i, column])
    r = (value - v1) / step
    return float(table[i, column] * (1.0 - r) + table[i + 1, column] * r)


def nm2x(nm: float) -> float:
    """CIE x of monochromatic light at wavelength *nm* (clamped to 405–700)."""
    return _interpolate(SPECTRAL_LOCUS, 0, clamp_wavelength(nm), WAVELENGTH_MIN, WAVELENGTH_STEP)


def nm2y(nm: float) -> float:
    """CIE y of monochromatic light at wavelength *nm* (clamped to 405–700)."""
    return _interpolate(SPECTRAL_LOCUS, 1, clamp_wavelength(nm), WAVELENGTH_MIN, WAVELENGTH_STEP)


def nm2xy(nm: float) -> ChromaticityPoint:
    nm = clamp_wavelength(nm)
    return ChromaticityPoint(nm2x(nm), nm2y(nm), nm)


def k2x(k: float) -> float:
    """CIE x of a black body at *k* Kelvin (clamped to 1000–20000)."""
    return _interpolate(
        PLANCKIAN_LOCUS, 0, clamp_color_temperature(k),
        COLOR_TEMPERATURE_MIN, COLOR_TEMPERATURE_STEP,
    )


def k2y(k: float) -> float:
    """CIE y of a black body at *k* Kelvin (clamped to 1000–20000)."""
    return _interpolate(
        PLANCKIAN_LOCUS, 1, clamp_color_temperature(k),
        COLOR_TEMPERATURE_MIN, COLOR_TEMPERATURE_STEP,
    )


def k2xy(k: float) -> ChromaticityPoint:
    k = clamp_color_temperature(k)
    return ChromaticityPoint(k2x(k), k2y(k), k)


# ═══════════════════════════════════════════════════════════════════════════════
# 4.  Polygon geometry
# ═══════════════════════════════════════════════════════════════════════════════
@njit(cache=True)
def _crossing_number(px: float, py: float, xs: np.ndarray, ys: np.ndarray) -> bool:
    """
    Crossing-number point-in-polygon test over a closed vertex list.

    An edge counts when it straddles the horizontal through the point under
    the half-open rule (upward edges include their start, downward edges
    include their end), and the crossing lies strictly right of the point.
    """
    crossings = 0
    for i in range(xs.shape[0] - 1):
        y0 = ys[i]
        y1 = ys[i + 1]
        if (y0 <= py and y1 > py) or (y0 > py and y1 <= py):
            vt = (py - y0) / (y1 - y0)
            if px < xs[i] + vt * (xs[i + 1] - xs[i]):
                crossings += 1
    return (crossings % 2) == 1


def _as_point(p: PointLike) -> ChromaticityPoint:
    if isinstance(p, ChromaticityPoint):
        return p
    values = [float(v) for v in p]
    if len(values) == 2:
        return ChromaticityPoint(values[0], values[1])
    if len(values) == 3:
        return ChromaticityPoint(values[0], values[1], values[2])
    raise ValueError(f"Expected a chromaticity of 2 or 3 components, got {len(values)}")


def _as_polygon(polygon: PolygonLike) -> np.ndarray:
    """Return a contiguous (M, 3) float64 array; a missing q column is zero."""
    if isinstance(polygon, np.ndarray):
        arr = np.asarray(polygon, dtype=np.float64)
    else:
        arr = np.array([tuple(_as_point(p)) for p in polygon], dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise ValueError(f"Expected polygon of shape (M, 2) or (M, 3), got {arr.shape}")
    if arr.shape[1] == 2:
        arr = np.column_stack((arr, np.zeros(arr.shape[0])))
    if arr.shape[0] < 4:
        raise ValueError(
            f"A closed polygon needs at least 4 rows (3 vertices + closing repeat), got {arr.shape[0]}"
        )
    return np.ascontiguousarray(arr)


def point_in_polygon(p: PointLike, polygon: PolygonLike) -> bool:
    """
    True when *p* lies inside the closed *polygon* (first row == last row).

    Points close to an edge may be classified either way.
    """
    pt = _as_point(p)
    poly = _as_polygon(polygon)
    return bool(_crossing_number(pt.x, pt.y, poly[:, 0], poly[:, 1]))


def fit_to_boundary(
    p: PointLike,
    polygon: Optional[PolygonLike] = None,
    open_ends: Optional[bool] = None,
) -> ChromaticityPoint:
    """
    Project *p* onto the nearest edge of a closed polygon.

    The vertex nearest to *p* is located (the closing repeat excluded) and
    *p* is projected onto the supporting lines of the two adjacent edges.
    A projection falling inside its edge (``0 <= t <= 1``) beats one that
    falls outside; between two inside projections the one with the smaller
    perpendicular offset wins.  When both fall outside, the nearest vertex
    is returned.  The annotation ``q`` is blended with the same ``t``.

    Points already inside the polygon keep their (x, y); only ``q`` is
    filled from the boundary.

    Parameters
    ----------
    p : PointLike
        (x, y) or (x, y, q).
    polygon : PolygonLike, optional
        Closed polygon.  Defaults to the spectral locus.
    open_ends : bool, optional
        When True the first and last vertex are not joined, so the edge
        next to an end vertex is redirected to its other neighbour.
        Defaults to True for the spectral locus and False otherwise.

    Returns
    -------
    ChromaticityPoint
    """
    pt = _as_point(p)
    if polygon is None:
        poly = SPECTRAL_LOCUS
        if open_ends is None:
            open_ends = True
    else:
        poly = _as_polygon(polygon)
        if open_ends is None:
            open_ends = False

    n = poly.shape[0]
    inside = bool(_crossing_number(pt.x, pt.y, poly[:, 0], poly[:, 1]))

    d2 = (poly[: n - 1, 0] - pt.x) ** 2 + (poly[: n - 1, 1] - pt.y) ** 2
    i_min = int(np.argmin(d2))

    prev_i = i_min - 1
    next_i = i_min + 1
    if open_ends:
        if prev_i == -1:
            prev_i = 1
        if next_i == n - 1:
            next_i = n - 3
    else:
        if prev_i == -1:
            prev_i = n - 2
        if next_i == n - 1:
            next_i = 0

    candidates = []
    for j in (prev_i, next_i):
        x0, y0 = poly[i_min, 0], poly[i_min, 1]
        ax = poly[j, 0] - x0
        ay = poly[j, 1] - y0
        a2 = ax * ax + ay * ay
        if a2 == 0.0:
            # Coincident vertices span no edge.
            candidates.append((math.inf, math.inf, j))
            continue
        t = ((pt.x - x0) * ax + (pt.y - y0) * ay) / a2
        s = abs((pt.x - x0) * ay - (pt.y - y0) * ax) / a2
        candidates.append((t, s, j))

    (t0, s0, j0), (t1, s1, j1) = candidates
    in0 = 0.0 <= t0 <= 1.0
    in1 = 0.0 <= t1 <= 1.0
    if in0 and in1:
        t, j = (t1, j1) if s1 < s0 else (t0, j0)
    elif in0:
        t, j = t0, j0
    elif in1:
        t, j = t1, j1
    else:
        vertex = poly[i_min]
        if inside:
            return ChromaticityPoint(pt.x, pt.y, float(vertex[2]))
        return ChromaticityPoint(float(vertex[0]), float(vertex[1]), float(vertex[2]))

    blended = poly[i_min] * (1.0 - t) + poly[j] * t
    if inside:
        return ChromaticityPoint(pt.x, pt.y, float(blended[2]))
    return ChromaticityPoint(float(blended[0]), float(blended[1]), float(blended[2]))


def check_in_gamut(p: PointLike, polygon: Optional[PolygonLike] = None) -> bool:
    """Point-in-polygon against *polygon*, or the spectral locus when omitted."""
    if polygon is None:
        pt = _as_point(p)
        return bool(_crossing_number(pt.x, pt.y, SPECTRAL_LOCUS[:, 0], SPECTRAL_LOCUS[:, 1]))
    return point_in_polygon(p, polygon)


# ═══════════════════════════════════════════════════════════════════════════════
# 5.  Inverse lookups
# ═══════════════════════════════════════════════════════════════════════════════
# Optimized McCamy cubic, fitted separately in three temperature ranges.
# (x_c, y_c, (n3, n2, n1, n0))
_MCCAMY_LOW: Final = (0.3333, 0.2017, (549.0, 3011.0, 5920.0, 5281.0))    # < 2000 K
_MCCAMY_MID: Final = (0.3342, 0.1882, (498.0, 3586.0, 6846.0, 5502.0))    # 2000–10000 K
_MCCAMY_HIGH: Final = (0.3115, 0.2119, (498.0, 3158.0, 6561.0, 7120.0))   # > 10000 K


def _mccamy(x: float, y: float, fit: tuple) -> float:
    xc, yc, (n3, n2, n1, n0) = fit
    n = (x - xc) / (yc - y)
    return n3 * n * n * n + n2 * n * n + n1 * n + n0


def xy2nm(x: float, y: float) -> float:
    """Wavelength annotation of the spectral-locus point nearest to (x, y)."""
    return fit_to_boundary((x, y)).q


def xy2k(x: float, y: float) -> float:
    """
    Correlated color temperature of (x, y) in Kelvin.

    Points outside the spectral locus are projected onto it first.  The
    region at or below y = 0.2119 holds the singularities of all three
    fits and returns the upper clamp.
    """
    if not check_in_gamut((x, y)):
        fitted = fit_to_boundary((x, y))
        x, y = fitted.x, fitted.y

    if y <= _MCCAMY_HIGH[1]:
        return COLOR_TEMPERATURE_MAX

    k_mid = _mccamy(x, y, _MCCAMY_MID)
    k_low = _mccamy(x, y, _MCCAMY_LOW)
    k_high = _mccamy(x, y, _MCCAMY_HIGH)

    if k_high > 10000.0:
        return clamp_color_temperature(k_high)
    if k_low < 2000.0:
        return clamp_color_temperature(k_low)
    return clamp_color_temperature(k_mid)


# ═══════════════════════════════════════════════════════════════════════════════
# 6.  Fades along the Planckian locus
# ═══════════════════════════════════════════════════════════════════════════════
FADE_END_TEMPERATURE: Final[float] = COLOR_TEMPERATURE_MIN


def fade_out(
    p: PointLike,
    steps: int,
    fade: Optional[Callable[[float], float]] = None,
) -> List[ChromaticityPoint]:
    """
    Chromaticities fading from *p* toward a 1000 K glow, like a setting sun.

    Step ``i`` blends *p* with the black-body point at the interpolated
    temperature using ratio ``fade(i / steps)``.  The annotation of every
    returned point is that temperature; the last point sits exactly on
    the 1000 K locus.

    Parameters
    ----------
    p : PointLike
        Start chromaticity.
    steps : int
        Number of returned points, at least 1.
    fade : callable, optional
        Maps a ratio in [0, 1) to a blend ratio in [0, 1].  Linear if omitted.
    """
    if steps < 1:
        raise ValueError(f"fade_out: steps must be >= 1, got {steps}")
    if fade is None:
        fade = _linear_fade

    pt = _as_point(p)
    k_start = xy2k(pt.x, pt.y)
    k_end = FADE_END_TEMPERATURE

    points: List[ChromaticityPoint] = []
    for i in range(steps - 1):
        r1 = fade(i / steps)
        r0 = 1.0 - r1
        k = k_start * r0 + k_end * r1
        points.append(ChromaticityPoint(pt.x * r0 + k2x(k) * r1, pt.y * r0 + k2y(k) * r1, k))
    points.append(k2xy(k_end))
    return points


def fade_in(
    p: PointLike,
    steps: int,
    fade: Optional[Callable[[float], float]] = None,
) -> List[ChromaticityPoint]:
    """``fade_out`` in reverse: from the 1000 K glow toward *p*."""
    return fade_out(p, steps, fade)[::-1]


def _linear_fade(r: float) -> float:
    return r
