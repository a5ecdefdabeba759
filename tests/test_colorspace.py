# -*- coding: utf-8 -*-
import copy

import numpy as np
import pytest

from tint_colorspace import (
    ColorConstructionError,
    ColorType,
    ColorValue,
    RawColor,
    as_color,
    xyY_to_xyz,
    xyz_to_xyY,
)
from tint_spectral import X_MAX, X_MIN, fit_to_boundary

ROUND_TRIPS = [
    ("rgb", (0.2, 0.3, 0.4), "hsv"),
    ("rgb", (0.2, 0.3, 0.4), "XYZ"),
    ("rgb", (0.2, 0.3, 0.4), "xyY"),
    ("rgb", (0.2, 0.3, 0.4), "xy"),
    ("hsv", (150.0, 0.3, 0.4), "rgb"),
    ("hsv", (150.0, 0.3, 0.4), "XYZ"),
    ("hsv", (150.0, 0.3, 0.4), "xyY"),
    ("XYZ", (0.2, 0.3, 0.4), "xyY"),
    ("XYZ", (0.2, 0.3, 0.4), "xy"),
    ("xyY", (0.3127, 0.329, 0.5), "rgb"),
    ("xyY", (0.3127, 0.329, 0.5), "XYZ"),
    ("xy", (0.3127, 0.329, 0.5), "XYZ"),
]


@pytest.mark.parametrize("source, components, via", ROUND_TRIPS)
def test_round_trip(source, components, via):
    c = ColorValue(source, components)
    back = c.convert(via).convert(source)
    assert back.type is c.type
    assert back.components == pytest.approx(c.components, abs=1e-3)


# -- construction and clamping ----------------------------------------------
def test_rgb_is_clamped():
    assert ColorValue("rgb", (1.2, -0.1, 0.5)).components == (1.0, 0.0, 0.5)


def test_hsv_hue_wraps():
    c = ColorValue(ColorType.HSV, (370.0, 1.5, 0.5))
    assert c.h == pytest.approx(10.0)
    assert c.s == 1.0


def test_xyz_negative_is_zeroed():
    assert ColorValue("XYZ", (-1.0, 0.5, 0.2)).X == 0.0


def test_xyY_chromaticity_is_boxed():
    c = ColorValue("xyY", (0.9, 0.3, -2.0))
    assert c.x == X_MAX
    assert c.Y == 0.0


def test_xy_takes_two_or_three_components():
    assert ColorValue("xy", (0.3, 0.3)).q == 0.0
    assert ColorValue("xy", (0.3, 0.3, -550.0)).q == -550.0


@pytest.mark.parametrize("color_type, components", [
    ("rgb", (0.1, 0.2)),
    ("xyY", (0.1, 0.2)),
    ("hsv", (0.1, 0.2, 0.3, 0.4)),
    ("lab", (0.1, 0.2, 0.3)),
])
def test_construction_errors(color_type, components):
    with pytest.raises(ColorConstructionError):
        ColorValue(color_type, components)


def test_channel_access():
    c = ColorValue("xyY", (0.3, 0.4, 10.0))
    assert (c.x, c.y, c.Y) == (0.3, 0.4, 10.0)
    assert c.get("Y") == 10.0
    assert c[1] == 0.4
    assert list(c) == [0.3, 0.4, 10.0]
    assert len(c) == 3
    with pytest.raises(AttributeError):
        _ = c.r


def test_set_clamps_and_rejects_unknown_channel():
    c = ColorValue("rgb", (0.1, 0.2, 0.3))
    c.set("g", 2.0)
    assert c.g == 1.0
    with pytest.raises(KeyError):
        c.set("x", 0.5)
    c.set_components((-1.0, 0.5, 0.5))
    assert c.components == (0.0, 0.5, 0.5)


# -- conversion --------------------------------------------------------------
def test_white_rgb_is_d65():
    c = ColorValue("rgb", (1.0, 1.0, 1.0))
    c.retype("xyY")
    assert c.type is ColorType.XYY
    assert c.x == pytest.approx(0.3127, abs=1e-3)
    assert c.y == pytest.approx(0.3290, abs=1e-3)
    assert c.Y == pytest.approx(1.0, abs=1e-6)


def test_xy_and_xyY_share_coordinates():
    xy = ColorValue("xy", (0.3, 0.4, 7.0))
    xyY = xy.to_xyY()
    assert xyY.components == (0.3, 0.4, 7.0)
    assert xyY.to_xy() == xy


def test_black_xyz_to_xyY():
    c = ColorValue("XYZ", (0.0, 0.0, 0.0)).to_xyY()
    assert c.Y == 0.0
    assert c.x == X_MIN
    np.testing.assert_array_equal(xyz_to_xyY((0.0, 0.0, 0.0)), np.zeros(3))


def test_xyY_outside_locus_is_projected():
    X, Y, Z = xyY_to_xyz((0.7, 0.1, 1.0))
    fitted = fit_to_boundary((0.7, 0.1))
    assert Y == 1.0
    assert X / (X + Y + Z) == pytest.approx(fitted.x)
    assert Y / (X + Y + Z) == pytest.approx(fitted.y)


# -- value semantics ---------------------------------------------------------
def test_copies_are_independent():
    c = ColorValue("rgb", (0.1, 0.2, 0.3))
    for other in (c.copy(), copy.copy(c), copy.deepcopy(c)):
        assert other == c
        other.set("r", 0.9)
        assert c.r == pytest.approx(0.1)


def test_equality_and_hash():
    assert ColorValue("rgb", (0.1, 0.2, 0.3)) != ColorValue("hsv", (0.1, 0.2, 0.3))
    with pytest.raises(TypeError):
        hash(ColorValue("rgb", (0.1, 0.2, 0.3)))


def test_raw_color_is_unchecked_until_typed():
    raw = RawColor((5.0, -3.0, 2.0))
    assert raw.components == (5.0, -3.0, 2.0)
    assert len(raw) == 3
    assert raw.typed("rgb").components == (1.0, 0.0, 1.0)
    raw.set_components((0.3, 0.3))
    assert raw.typed("xy").components == (0.3, 0.3, 0.0)
    with pytest.raises(ColorConstructionError):
        raw.typed("rgb")


def test_as_color():
    c = ColorValue("rgb", (0.1, 0.2, 0.3))
    assert as_color(c) == c and as_color(c) is not c
    assert as_color(RawColor((0.3, 0.3, 1.0))).type is ColorType.XYY
    with pytest.raises(TypeError):
        as_color((0.3, 0.3, 1.0))
