# -*- coding: utf-8 -*-
"""Shared emitter sets for the Tint test-suite."""

import pytest

from tint_emitter import ChromaticityDefinition, Emitter, EmitterKind, typical_rgbw

# id -> (kind, x, y, max_brightness)
LED_TABLE = {
    "R": (EmitterKind.RED, 0.6857, 0.3143, 30.6),
    "G": (EmitterKind.GREEN, 0.2002, 0.6976, 67.2),
    "B": (EmitterKind.BLUE, 0.1417, 0.0618, 8.2),
    "W": (EmitterKind.WHITE, 0.3816, 0.3678, 80.0),
    "A": (EmitterKind.AMBER, 0.38, 0.58, 50.0),
    "T": (EmitterKind.OTHER, 0.15, 0.40, 70.0),
    "V": (EmitterKind.UV, 0.25, 0.05, 5.0),
}


def make_emitter(led_id: str) -> Emitter:
    kind, x, y, lum = LED_TABLE[led_id]
    return Emitter.by_xy(ChromaticityDefinition(kind, x, y, lum, name=led_id))


def make_emitters(ids: str):
    return [make_emitter(i) for i in ids]


@pytest.fixture
def rgb():
    return list(typical_rgbw()[:3])


@pytest.fixture
def rgbw():
    return list(typical_rgbw())


@pytest.fixture
def rgbwa():
    return make_emitters("RGBWA")


@pytest.fixture
def rgbwat():
    return make_emitters("RGBWAT")
