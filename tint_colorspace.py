# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_colorspace.py — typed color values and the conversion graph.

Two value types live here:

  1.  ``RawColor``: an unchecked pair/triple.  It accepts anything and is
      used to seed a value before its color space is decided.
  2.  ``ColorValue``: a color in one of the ``ColorType`` spaces.  Its
      components are clamped to the space's legal range on construction
      and on every mutation.

The only way from the first to the second is ``RawColor.typed()``.

Conversions always pass through CIE XYZ:

    rgb ──┐
    hsv ──┤
    xyY ──┼── XYZ
    xy  ──┘

``xy`` is ``xyY`` whose third slot is a free annotation (wavelength, color
temperature, ...).  Converting *from* ``xy`` reads that slot as Y.

References:
    - IEC 61966-2-1:1999 (sRGB Standard)
    - CIE 15:2004 "Colorimetry"
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Final, Iterable, Iterator, Sequence, Tuple, TypeAlias, Union

import numpy as np
from numba import njit

from tint_spectral import check_in_gamut, clamp_x, clamp_y, fit_to_boundary

ArrayFloat: TypeAlias = np.ndarray

__all__ = [
    "ColorType",
    "ColorTypeLike",
    "ColorConstructionError",
    "RawColor",
    "ColorValue",
    "CHANNELS",
    "M_SRGB_TO_XYZ",
    "M_XYZ_TO_SRGB",
    "rgb_to_xyz",
    "xyz_to_rgb",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "xyY_to_xyz",
    "xyz_to_xyY",
    "as_color",
]


# =============================================================================
# 1. TYPES AND CONSTANTS
# =============================================================================

class ColorType(Enum):
    RGB = "rgb"
    HSV = "hsv"
    XYZ = "XYZ"
    XYY = "xyY"
    XY = "xy"


ColorTypeLike: TypeAlias = Union[ColorType, str]

CHANNELS: Final[Dict[ColorType, Tuple[str, str, str]]] = {
    ColorType.RGB: ("r", "g", "b"),
    ColorType.HSV: ("h", "s", "v"),
    ColorType.XYZ: ("X", "Y", "Z"),
    ColorType.XYY: ("x", "y", "Y"),
    ColorType.XY: ("x", "y", "q"),
}

# sRGB primaries, D65 white, linear RGB -> XYZ.
M_SRGB_TO_XYZ: Final[ArrayFloat] = np.array([
    [0.41239080, 0.35758434, 0.18048079],
    [0.21263901, 0.71516868, 0.07219232],
    [0.01933082, 0.11919478, 0.95053215],
], dtype=np.float64)
M_XYZ_TO_SRGB: Final[ArrayFloat] = np.linalg.inv(M_SRGB_TO_XYZ)


class ColorConstructionError(ValueError):
    """Wrong component count or unknown color type."""


def _as_color_type(color_type: ColorTypeLike) -> ColorType:
    if isinstance(color_type, ColorType):
        return color_type
    try:
        return ColorType(color_type)
    except ValueError:
        raise ColorConstructionError(f"Unknown color type: {color_type!r}") from None


# =============================================================================
# 2. LOW-LEVEL TRANSFER KERNELS (Numba Optimized)
# =============================================================================

@njit(cache=True, fastmath=True)
def _fast_gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB OETF (Gamma Correction).

    Standard: IEC 61966-2-1
    """
    out = np.empty_like(linear)
    for i in range(linear.size):
        v = linear[i]
        if v <= 0.0031308:
            out[i] = 12.92 * v
        else:
            out[i] = 1.055 * (v ** (5.0 / 12.0)) - 0.055
    return out


@njit(cache=True, fastmath=True)
def _fast_inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB EOTF (Inverse Gamma).

    Standard: IEC 61966-2-1
    """
    out = np.empty_like(srgb)
    for i in range(srgb.size):
        v = srgb[i]
        if v <= 0.04045:
            out[i] = v / 12.92
        else:
            out[i] = ((v + 0.055) / 1.055) ** 2.4
    return out


# =============================================================================
# 3. CONVERSIONS (single color, shape (3,))
# =============================================================================

def rgb_to_xyz(rgb: ArrayFloat) -> ArrayFloat:
    linear = _fast_inverse_gamma_srgb(np.ascontiguousarray(rgb, dtype=np.float64))
    return M_SRGB_TO_XYZ @ linear


def xyz_to_rgb(xyz: ArrayFloat) -> ArrayFloat:
    linear = np.clip(M_XYZ_TO_SRGB @ np.asarray(xyz, dtype=np.float64), 0.0, 1.0)
    return _fast_gamma_srgb(np.ascontiguousarray(linear))


def rgb_to_hsv(rgb: ArrayFloat) -> ArrayFloat:
    r, g, b = (float(c) for c in rgb)
    mx = max(r, g, b)
    mn = min(r, g, b)
    chroma = mx - mn

    if chroma == 0.0:
        h = 0.0
    elif mx == r:
        h = 60.0 * (((g - b) / chroma) % 6.0)
    elif mx == g:
        h = 60.0 * ((b - r) / chroma + 2.0)
    else:
        h = 60.0 * ((r - g) / chroma + 4.0)

    s = 0.0 if mx == 0.0 else chroma / mx
    return np.array([h % 360.0, s, mx], dtype=np.float64)


def hsv_to_rgb(hsv: ArrayFloat) -> ArrayFloat:
    h, s, v = (float(c) for c in hsv)
    chroma = v * s
    hp = (h % 360.0) / 60.0
    x = chroma * (1.0 - abs(hp % 2.0 - 1.0))
    sector = int(hp)
    if sector == 0:
        rgb = (chroma, x, 0.0)
    elif sector == 1:
        rgb = (x, chroma, 0.0)
    elif sector == 2:
        rgb = (0.0, chroma, x)
    elif sector == 3:
        rgb = (0.0, x, chroma)
    elif sector == 4:
        rgb = (x, 0.0, chroma)
    else:
        rgb = (chroma, 0.0, x)
    m = v - chroma
    return np.array(rgb, dtype=np.float64) + m


def xyY_to_xyz(xyY: ArrayFloat) -> ArrayFloat:
    """
    xyY -> XYZ.

    A chromaticity outside the spectral locus is projected onto it first,
    so the result is always a physically meaningful XYZ.  ``y == 0`` gives
    ``X = Z = 0``.
    """
    x, y, Y = (float(c) for c in xyY)
    if not check_in_gamut((x, y)):
        fitted = fit_to_boundary((x, y))
        x, y = fitted.x, fitted.y
    if y == 0.0:
        return np.array([0.0, Y, 0.0], dtype=np.float64)
    return np.array([Y / y * x, Y, Y / y * (1.0 - x - y)], dtype=np.float64)


def xyz_to_xyY(xyz: ArrayFloat) -> ArrayFloat:
    """XYZ -> xyY.  A zero sum gives (0, 0, 0)."""
    X, Y, Z = (float(c) for c in xyz)
    total = X + Y + Z
    if total == 0.0:
        return np.zeros(3, dtype=np.float64)
    return np.array([X / total, Y / total, Y], dtype=np.float64)


def _to_xyz(color_type: ColorType, c: ArrayFloat) -> ArrayFloat:
    if color_type is ColorType.XYZ:
        return c.copy()
    if color_type is ColorType.RGB:
        return rgb_to_xyz(c)
    if color_type is ColorType.HSV:
        return rgb_to_xyz(hsv_to_rgb(c))
    return xyY_to_xyz(c)


def _from_xyz(color_type: ColorType, xyz: ArrayFloat) -> ArrayFloat:
    if color_type is ColorType.XYZ:
        return xyz.copy()
    if color_type is ColorType.RGB:
        return xyz_to_rgb(xyz)
    if color_type is ColorType.HSV:
        return rgb_to_hsv(xyz_to_rgb(xyz))
    return xyz_to_xyY(xyz)


# =============================================================================
# 4. CLAMPING
# =============================================================================

def _clamp(color_type: ColorType, c: ArrayFloat) -> ArrayFloat:
    """Clamp *c* in place to the legal range of *color_type* and return it."""
    if color_type is ColorType.RGB:
        np.clip(c, 0.0, 1.0, out=c)
    elif color_type is ColorType.HSV:
        c[0] = c[0] % 360.0
        c[1] = min(max(c[1], 0.0), 1.0)
        c[2] = min(max(c[2], 0.0), 1.0)
    elif color_type is ColorType.XYZ:
        np.maximum(c, 0.0, out=c)
    else:
        c[0] = clamp_x(c[0])
        c[1] = clamp_y(c[1])
        if color_type is ColorType.XYY:
            c[2] = max(c[2], 0.0)
    return c


def _components(color_type: ColorType, values: Iterable[float]) -> ArrayFloat:
    vals = [float(v) for v in values]
    if len(vals) == 2 and color_type is ColorType.XY:
        vals.append(0.0)
    if len(vals) != 3:
        raise ColorConstructionError(
            f"ColorValue: type '{color_type.value}' takes "
            f"{'2 or 3' if color_type is ColorType.XY else '3'} components, got {len(vals)}"
        )
    return np.array(vals, dtype=np.float64)


# =============================================================================
# 5. VALUE TYPES
# =============================================================================

class RawColor:
    """
    Unchecked pair or triple of numbers with no color space attached.

    Nothing is validated until ``typed()`` turns it into a ``ColorValue``.
    """
    __slots__ = ("components",)

    def __init__(self, components: Sequence[float] = (0.0, 0.0, 0.0)) -> None:
        self.components: Tuple[float, ...] = tuple(components)

    def set_components(self, components: Sequence[float]) -> None:
        self.components = tuple(components)

    def typed(self, color_type: ColorTypeLike) -> "ColorValue":
        """Validate and clamp into a ``ColorValue`` of *color_type*."""
        return ColorValue(color_type, self.components)

    def __iter__(self) -> Iterator[float]:
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        return f"RawColor({self.components!r})"


class ColorValue:
    """
    Color in one of the ``ColorType`` spaces.

    Clamping per type, applied on every write:

    ========  ==========================================================
    rgb       each channel in [0, 1]
    hsv       h wrapped into [0, 360), s and v in [0, 1]
    XYZ       each channel >= 0
    xyY       x, y within the spectral-locus bounding box, Y >= 0
    xy        x, y as xyY; the third slot ``q`` is never checked
    ========  ==========================================================

    Channels are readable as attributes (``c.x``, ``c.Y``, ``c.h``) and
    writable through ``set()``.  Values compare and copy by value.
    """
    __slots__ = ("_type", "_c")

    def __init__(self, color_type: ColorTypeLike, components: Iterable[float]) -> None:
        ct = _as_color_type(color_type)
        self._type: ColorType = ct
        self._c: ArrayFloat = _clamp(ct, _components(ct, components))

    # -- read interface ----------------------------------------------------
    @property
    def type(self) -> ColorType:
        return self._type

    @property
    def channels(self) -> Tuple[str, str, str]:
        return CHANNELS[self._type]

    @property
    def components(self) -> Tuple[float, float, float]:
        return (float(self._c[0]), float(self._c[1]), float(self._c[2]))

    def as_array(self) -> ArrayFloat:
        """Copy of the components as a float64 array of shape (3,)."""
        return self._c.copy()

    def get(self, channel: str) -> float:
        return float(self._c[self._index(channel)])

    def __getattr__(self, name: str) -> float:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.get(name)
        except KeyError:
            raise AttributeError(
                f"ColorValue({self._type.value}) has no channel or attribute '{name}'"
            ) from None

    def __getitem__(self, index: int) -> float:
        return float(self._c[index])

    def __iter__(self) -> Iterator[float]:
        return iter(self.components)

    def __len__(self) -> int:
        return 3

    # -- write interface ---------------------------------------------------
    def set(self, channel: str, value: float) -> None:
        self._c[self._index(channel)] = float(value)
        _clamp(self._type, self._c)

    def set_components(self, components: Iterable[float]) -> None:
        self._c = _clamp(self._type, _components(self._type, components))

    # -- conversion --------------------------------------------------------
    def convert(self, color_type: ColorTypeLike) -> "ColorValue":
        """Return this color expressed in *color_type* (via XYZ)."""
        target = _as_color_type(color_type)
        if target is self._type:
            return self.copy()
        if {target, self._type} == {ColorType.XY, ColorType.XYY}:
            # Same coordinates, the third slot is reinterpreted.
            return ColorValue(target, self._c)
        return ColorValue(target, _from_xyz(target, _to_xyz(self._type, self._c)))

    to = convert

    def to_rgb(self) -> "ColorValue":
        return self.convert(ColorType.RGB)

    def to_hsv(self) -> "ColorValue":
        return self.convert(ColorType.HSV)

    def to_XYZ(self) -> "ColorValue":
        return self.convert(ColorType.XYZ)

    def to_xyY(self) -> "ColorValue":
        return self.convert(ColorType.XYY)

    def to_xy(self) -> "ColorValue":
        return self.convert(ColorType.XY)

    def retype(self, color_type: ColorTypeLike) -> None:
        """Convert in place."""
        converted = self.convert(color_type)
        self._type = converted._type
        self._c = converted._c

    def copy(self) -> "ColorValue":
        return ColorValue(self._type, self._c)

    def __copy__(self) -> "ColorValue":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "ColorValue":
        return self.copy()

    # -- identity / display ------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColorValue):
            return NotImplemented
        return self._type is other._type and bool(np.array_equal(self._c, other._c))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{n}={v:.6g}" for n, v in zip(self.channels, self._c))
        return f"ColorValue({self._type.value}: {body})"

    # -- internals ---------------------------------------------------------
    def _index(self, channel: str) -> int:
        try:
            return CHANNELS[self._type].index(channel)
        except ValueError:
            raise KeyError(
                f"ColorValue({self._type.value}): unknown channel '{channel}', "
                f"expected one of {CHANNELS[self._type]}"
            ) from None


def as_color(value: Union[ColorValue, RawColor], default_type: ColorTypeLike = ColorType.XYY) -> ColorValue:
    """Coerce a ``RawColor`` into a typed value; typed values pass through as copies."""
    if isinstance(value, ColorValue):
        return value.copy()
    if isinstance(value, RawColor):
        return value.typed(default_type)
    raise TypeError(f"Expected ColorValue or RawColor, got {type(value).__name__}")


