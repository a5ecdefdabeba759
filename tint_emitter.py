# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_emitter.py — single light emitters (LED channels).

An ``Emitter`` owns its chromaticity as an ``xy`` ``ColorValue`` whose free
third slot carries the wavelength (colored emitters) or color temperature
(white emitters).  Chromaticity accessors delegate to that value.

Emitters are created from one of three definition records, each with its
own factory:

    WavelengthDefinition        ->  Emitter.by_wavelength
    ColorTemperatureDefinition  ->  Emitter.by_color_temperature
    ChromaticityDefinition      ->  Emitter.by_xy

White emitters are never defined by wavelength and colored emitters never
by color temperature.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Final, Optional, Tuple, Union

import numpy as np

from tint_colorspace import ColorType, ColorValue
from tint_spectral import (
    ChromaticityPoint,
    clamp_color_temperature,
    clamp_wavelength,
    k2x,
    k2y,
    nm2x,
    nm2y,
    xy2k,
    xy2nm,
)

__all__ = [
    "EmitterKind",
    "EmitterDefinitionError",
    "WavelengthDefinition",
    "ColorTemperatureDefinition",
    "ChromaticityDefinition",
    "EmitterDefinition",
    "Emitter",
    "TYPICAL_RED",
    "TYPICAL_GREEN",
    "TYPICAL_BLUE",
    "TYPICAL_WHITE",
    "EPISTAR_RED",
    "EPISTAR_GREEN",
    "EPISTAR_BLUE",
    "EPISTAR_WARM_WHITE",
    "EPISTAR_COLD_WHITE",
    "typical_rgbw",
    "epistar_rgbw",
]

logger = logging.getLogger(__name__)


class EmitterDefinitionError(ValueError):
    """Unknown kind, wrong combination of definition fields, or unresolved reference."""


# ═══════════════════════════════════════════════════════════════════════════════
# 1.  EmitterKind
# ═══════════════════════════════════════════════════════════════════════════════
class EmitterKind(Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    WHITE = "white"
    UV = "uv"
    AMBER = "amber"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Union["EmitterKind", str]) -> "EmitterKind":
        """Accept an enum member, its value, or a legacy tag such as ``LED_R``."""
        if isinstance(value, EmitterKind):
            return value
        key = str(value).strip()
        kind = _KIND_ALIASES.get(key) or _KIND_ALIASES.get(key.lower())
        if kind is None:
            raise EmitterDefinitionError(f"EmitterKind: unknown emitter type {value!r}")
        return kind


_KIND_ALIASES: Final[Dict[str, EmitterKind]] = {
    **{k.value: k for k in EmitterKind},
    "LED_R": EmitterKind.RED,
    "LED_G": EmitterKind.GREEN,
    "LED_B": EmitterKind.BLUE,
    "LED_W": EmitterKind.WHITE,
    "LED_UV": EmitterKind.UV,
    "LED_Amber": EmitterKind.AMBER,
    "LED_Other": EmitterKind.OTHER,
    "r": EmitterKind.RED,
    "g": EmitterKind.GREEN,
    "b": EmitterKind.BLUE,
    "w": EmitterKind.WHITE,
}


# ═══════════════════════════════════════════════════════════════════════════════
# 2.  Definition records
# ═══════════════════════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class WavelengthDefinition:
    kind: Union[EmitterKind, str]
    wavelength: float
    max_brightness: float
    max_wattage: float = 1.0
    name: str = ""


@dataclass(frozen=True, slots=True)
class ColorTemperatureDefinition:
    kind: Union[EmitterKind, str]
    color_temperature: float
    max_brightness: float
    max_wattage: float = 1.0
    name: str = ""


@dataclass(frozen=True, slots=True)
class ChromaticityDefinition:
    kind: Union[EmitterKind, str]
    x: float
    y: float
    max_brightness: float
    max_wattage: float = 1.0
    name: str = ""


EmitterDefinition = Union[WavelengthDefinition, ColorTemperatureDefinition, ChromaticityDefinition]


def _positive_or_one(value: float, what: str, name: str) -> float:
    value = float(value)
    if value > 0.0:
        return value
    logger.debug("Emitter %r: non-positive %s %r replaced by 1.0", name, what, value)
    return 1.0


# ═══════════════════════════════════════════════════════════════════════════════
# 3.  Emitter
# ═══════════════════════════════════════════════════════════════════════════════
class Emitter:
    """
    One emitter channel: chromaticity, full-drive luminance and cost weight.

    Prefer the ``by_*`` factories; the constructor takes already resolved
    values.

    Parameters
    ----------
    kind : EmitterKind or str
    x, y : float
        CIE 1931 chromaticity (clamped to the spectral-locus bounding box).
    max_brightness : float
        Luminance Y at full drive.  Non-positive values become 1.0.
    max_wattage : float
        Cost weight used by the solver objective.  Non-positive values become 1.0.
    name : str
    wavelength, color_temperature : float, optional
        Annotation; at most one is kept, depending on ``kind``.
    """
    __slots__ = (
        "name",
        "_kind",
        "_color",
        "_max_brightness",
        "_max_wattage",
        "_wavelength",
        "_color_temperature",
        "_brightness",
    )

    def __init__(
        self,
        kind: Union[EmitterKind, str],
        x: float,
        y: float,
        max_brightness: float,
        max_wattage: float = 1.0,
        name: str = "",
        wavelength: Optional[float] = None,
        color_temperature: Optional[float] = None,
    ) -> None:
        self.name: str = str(name)
        self._kind = EmitterKind.parse(kind)
        if self._kind is EmitterKind.WHITE:
            self._wavelength = None
            self._color_temperature = (
                None if color_temperature is None else clamp_color_temperature(color_temperature)
            )
            annotation = self._color_temperature
        else:
            self._wavelength = None if wavelength is None else clamp_wavelength(wavelength)
            self._color_temperature = None
            annotation = self._wavelength
        self._color = ColorValue(ColorType.XY, (x, y, 0.0 if annotation is None else annotation))
        self._max_brightness = _positive_or_one(max_brightness, "max_brightness", self.name)
        self._max_wattage = _positive_or_one(max_wattage, "max_wattage", self.name)
        self._brightness = 0.0

    # -- factories ---------------------------------------------------------
    @classmethod
    def by_wavelength(cls, definition: WavelengthDefinition) -> "Emitter":
        kind = EmitterKind.parse(definition.kind)
        if kind is EmitterKind.WHITE:
            raise EmitterDefinitionError(
                f"Emitter {definition.name!r}: white emitters are defined by "
                f"color temperature or x/y, not wavelength."
            )
        nm = clamp_wavelength(definition.wavelength)
        return cls(
            kind, nm2x(nm), nm2y(nm), definition.max_brightness,
            definition.max_wattage, definition.name, wavelength=nm,
        )

    @classmethod
    def by_color_temperature(cls, definition: ColorTemperatureDefinition) -> "Emitter":
        kind = EmitterKind.parse(definition.kind)
        if kind is not EmitterKind.WHITE:
            raise EmitterDefinitionError(
                f"Emitter {definition.name!r}: only white emitters are defined by "
                f"color temperature, got kind '{kind.value}'."
            )
        k = clamp_color_temperature(definition.color_temperature)
        return cls(
            kind, k2x(k), k2y(k), definition.max_brightness,
            definition.max_wattage, definition.name, color_temperature=k,
        )

    @classmethod
    def by_xy(cls, definition: ChromaticityDefinition) -> "Emitter":
        """The annotation is derived: color temperature for white, dominant wavelength otherwise."""
        kind = EmitterKind.parse(definition.kind)
        x, y = float(definition.x), float(definition.y)
        if kind is EmitterKind.WHITE:
            return cls(
                kind, x, y, definition.max_brightness, definition.max_wattage,
                definition.name, color_temperature=xy2k(x, y),
            )
        return cls(
            kind, x, y, definition.max_brightness, definition.max_wattage,
            definition.name, wavelength=xy2nm(x, y),
        )

    @classmethod
    def from_definition(cls, definition: EmitterDefinition) -> "Emitter":
        if isinstance(definition, WavelengthDefinition):
            return cls.by_wavelength(definition)
        if isinstance(definition, ColorTemperatureDefinition):
            return cls.by_color_temperature(definition)
        if isinstance(definition, ChromaticityDefinition):
            return cls.by_xy(definition)
        raise EmitterDefinitionError(
            f"Emitter.from_definition: unsupported definition {type(definition).__name__}"
        )

    # -- read interface ----------------------------------------------------
    @property
    def kind(self) -> EmitterKind:
        return self._kind

    @property
    def color(self) -> ColorValue:
        """Chromaticity as an ``xy`` value (copy); ``q`` holds the annotation."""
        return self._color.copy()

    @property
    def x(self) -> float:
        return self._color.x

    @property
    def y(self) -> float:
        return self._color.y

    @property
    def chromaticity(self) -> ChromaticityPoint:
        return ChromaticityPoint(*self._color.components)

    @property
    def wavelength(self) -> Optional[float]:
        return self._wavelength

    @property
    def color_temperature(self) -> Optional[float]:
        return self._color_temperature

    @property
    def max_brightness(self) -> float:
        return self._max_brightness

    @property
    def max_wattage(self) -> float:
        return self._max_wattage

    @property
    def xyz(self) -> np.ndarray:
        """XYZ at full drive."""
        full = ColorValue(ColorType.XYY, (self._color.x, self._color.y, self._max_brightness))
        return full.to_XYZ().as_array()

    # -- current state -----------------------------------------------------
    @property
    def brightness(self) -> float:
        """Current luminance, within [0, max_brightness]."""
        return self._brightness

    @brightness.setter
    def brightness(self, value: float) -> None:
        self._brightness = min(max(float(value), 0.0), self._max_brightness)

    @property
    def drive(self) -> float:
        """Current drive level, ``brightness / max_brightness``."""
        return self._brightness / self._max_brightness

    def __repr__(self) -> str:
        if self._wavelength is not None:
            tag = f"{self._wavelength:.1f} nm"
        elif self._color_temperature is not None:
            tag = f"{self._color_temperature:.0f} K"
        else:
            tag = "-"
        return (
            f"Emitter({self.name!r}, {self._kind.value}, x={self.x:.4f}, y={self.y:.4f}, "
            f"{tag}, Ymax={self._max_brightness:g}, W={self._max_wattage:g})"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 4.  Presets
# ═══════════════════════════════════════════════════════════════════════════════
# CREE MCE4CT, chromaticities measured in Microchip AN1857.
TYPICAL_RED: Final = ChromaticityDefinition(EmitterKind.RED, 0.6857, 0.3143, 30.6, name="Typical R")
TYPICAL_GREEN: Final = ChromaticityDefinition(EmitterKind.GREEN, 0.2002, 0.6976, 67.2, name="Typical G")
TYPICAL_BLUE: Final = ChromaticityDefinition(EmitterKind.BLUE, 0.1417, 0.0618, 8.2, name="Typical B")
TYPICAL_WHITE: Final = ChromaticityDefinition(EmitterKind.WHITE, 0.3816, 0.3678, 80.0, name="Typical W")

# Epistar LC-S5050-04004-RGBW
EPISTAR_RED: Final = WavelengthDefinition(EmitterKind.RED, 625.0, 2.5, name="Epistar R")
EPISTAR_GREEN: Final = WavelengthDefinition(EmitterKind.GREEN, 520.0, 3.5, name="Epistar G")
EPISTAR_BLUE: Final = WavelengthDefinition(EmitterKind.BLUE, 470.0, 1.5, name="Epistar B")
EPISTAR_WARM_WHITE: Final = ColorTemperatureDefinition(EmitterKind.WHITE, 2600.0, 6.5, name="Epistar WW")
EPISTAR_COLD_WHITE: Final = ColorTemperatureDefinition(EmitterKind.WHITE, 6500.0, 6.5, name="Epistar CW")


def typical_rgbw() -> Tuple[Emitter, Emitter, Emitter, Emitter]:
    """Fresh R, G, B, W emitters with the typical CREE chromaticities."""
    return tuple(  # type: ignore[return-value]
        Emitter.from_definition(d) for d in (TYPICAL_RED, TYPICAL_GREEN, TYPICAL_BLUE, TYPICAL_WHITE)
    )


def epistar_rgbw(cold: bool = False) -> Tuple[Emitter, Emitter, Emitter, Emitter]:
    """Fresh Epistar R, G, B and warm (or cold) white emitters."""
    white = EPISTAR_COLD_WHITE if cold else EPISTAR_WARM_WHITE
    return tuple(  # type: ignore[return-value]
        Emitter.from_definition(d) for d in (EPISTAR_RED, EPISTAR_GREEN, EPISTAR_BLUE, white)
    )
