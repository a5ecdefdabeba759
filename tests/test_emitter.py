# -*- coding: utf-8 -*-
import pytest

from tint_emitter import (
    EPISTAR_GREEN,
    TYPICAL_RED,
    ChromaticityDefinition,
    ColorTemperatureDefinition,
    Emitter,
    EmitterDefinitionError,
    EmitterKind,
    WavelengthDefinition,
    epistar_rgbw,
    typical_rgbw,
)
from tint_spectral import k2x, k2y, nm2x, nm2y, xy2k, xy2nm


@pytest.mark.parametrize("tag, kind", [
    ("LED_R", EmitterKind.RED),
    ("LED_Amber", EmitterKind.AMBER),
    ("white", EmitterKind.WHITE),
    ("W", EmitterKind.WHITE),
    (" uv ", EmitterKind.UV),
    (EmitterKind.GREEN, EmitterKind.GREEN),
])
def test_kind_parse(tag, kind):
    assert EmitterKind.parse(tag) is kind


def test_kind_parse_unknown():
    with pytest.raises(EmitterDefinitionError):
        EmitterKind.parse("LED_X")


def test_by_wavelength():
    e = Emitter.by_wavelength(WavelengthDefinition("LED_R", 625.0, 2.5, name="R"))
    assert (e.x, e.y) == (pytest.approx(nm2x(625)), pytest.approx(nm2y(625)))
    assert e.wavelength == 625.0
    assert e.color_temperature is None
    assert e.color.q == 625.0


def test_by_wavelength_clamps():
    e = Emitter.by_wavelength(WavelengthDefinition(EmitterKind.UV, 380.0, 1.0))
    assert e.wavelength == 405.0


def test_white_by_wavelength_is_rejected():
    with pytest.raises(EmitterDefinitionError):
        Emitter.by_wavelength(WavelengthDefinition(EmitterKind.WHITE, 550.0, 1.0))


def test_by_color_temperature():
    e = Emitter.by_color_temperature(ColorTemperatureDefinition("LED_W", 6500.0, 6.5))
    assert (e.x, e.y) == (pytest.approx(k2x(6500)), pytest.approx(k2y(6500)))
    assert e.color_temperature == 6500.0
    assert e.wavelength is None


def test_colored_by_color_temperature_is_rejected():
    with pytest.raises(EmitterDefinitionError):
        Emitter.by_color_temperature(ColorTemperatureDefinition(EmitterKind.GREEN, 3000.0, 1.0))


def test_by_xy_derives_annotation():
    red = Emitter.from_definition(TYPICAL_RED)
    assert red.wavelength == pytest.approx(xy2nm(0.6857, 0.3143))
    white = Emitter.by_xy(ChromaticityDefinition(EmitterKind.WHITE, 0.3155, 0.3270, 10.0))
    assert white.color_temperature == pytest.approx(xy2k(0.3155, 0.3270))
    assert white.color_temperature == pytest.approx(6500, abs=25)


def test_from_definition_rejects_other_records():
    with pytest.raises(EmitterDefinitionError):
        Emitter.from_definition(("red", 625.0, 1.0))


def test_non_positive_ratings_become_one():
    e = Emitter("red", 0.6, 0.3, max_brightness=0.0, max_wattage=-2.0)
    assert e.max_brightness == 1.0
    assert e.max_wattage == 1.0


def test_full_drive_xyz():
    e = Emitter.from_definition(TYPICAL_RED)
    X, Y, Z = e.xyz
    assert Y == pytest.approx(30.6)
    # Sits a hair outside the locus, so it is projected before conversion.
    assert X == pytest.approx(30.6 * 0.6857 / 0.3143, rel=1e-3)
    assert Z == pytest.approx(0.0, abs=0.05)


def test_locus_emitter_xyz():
    e = Emitter.from_definition(EPISTAR_GREEN)
    assert e.xyz[1] == pytest.approx(3.5)


def test_brightness_is_clamped():
    e = Emitter.from_definition(TYPICAL_RED)
    assert e.brightness == 0.0
    e.brightness = 15.3
    assert e.drive == pytest.approx(0.5)
    e.brightness = 100.0
    assert e.brightness == 30.6
    e.brightness = -1.0
    assert e.brightness == 0.0


def test_color_is_a_copy():
    e = Emitter.from_definition(TYPICAL_RED)
    c = e.color
    c.set("x", 0.1)
    assert e.x == pytest.approx(0.6857)


def test_presets_are_fresh():
    a, b = typical_rgbw(), typical_rgbw()
    assert len(a) == 4
    assert all(x is not y for x, y in zip(a, b))
    assert [e.kind for e in a] == [EmitterKind.RED, EmitterKind.GREEN, EmitterKind.BLUE, EmitterKind.WHITE]
    assert epistar_rgbw()[3].color_temperature == 2600.0
    assert epistar_rgbw(cold=True)[3].color_temperature == 6500.0
