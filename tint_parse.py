# -*- coding: utf-8 -*-
"""
Tint: Blending the light of discrete emitters into a requested color
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_parse.py — emitters and fixtures from persisted definitions.

Document layout (JSON or an equivalent mapping)::

    {
      "LEDChip": [
        {"type": "LED_R", "name": "R",  "waveLength": 625, "maxBrightness": 2.5},
        {"type": "LED_W", "name": "WW", "colorTemperature": 2600, "maxBrightness": 6.5},
        {"type": "LED_G", "name": "G",  "x": 0.2002, "y": 0.6976, "maxBrightness": 67.2,
         "maxW": 0.8}
      ],
      "RGBWLED": {"name": "Lamp", "LED": ["R", "G", "WW"]}
    }

Per emitter exactly one of ``{x, y}``, ``colorTemperature`` (white only) or
``waveLength`` (non-white only) selects the definition record; ``x``/``y``
wins when several are present.  ``maxW`` (or ``maxWattage``) and ``name``
are optional.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from tint_config import SolverSettings
from tint_emitter import (
    ChromaticityDefinition,
    ColorTemperatureDefinition,
    Emitter,
    EmitterDefinition,
    EmitterDefinitionError,
    EmitterKind,
    WavelengthDefinition,
)
from tint_fixture import Fixture

__all__ = [
    "parse_emitter_definition",
    "parse_emitter",
    "parse_emitters",
    "parse_fixture",
    "load_document",
    "load_fixture",
]

EMITTER_LIST_KEY = "LEDChip"
FIXTURE_KEY = "RGBWLED"


def _number(obj: Mapping[str, Any], key: str) -> float:
    try:
        return float(obj[key])
    except (TypeError, ValueError):
        raise EmitterDefinitionError(
            f"Emitter definition: field {key!r} must be a number, got {obj[key]!r}"
        ) from None


def parse_emitter_definition(obj: Mapping[str, Any]) -> EmitterDefinition:
    """
    Select and fill the definition record for one emitter mapping.

    Raises
    ------
    EmitterDefinitionError
        Missing ``type`` or ``maxBrightness``, unknown type, or no valid
        field combination for the type.
    """
    if not isinstance(obj, Mapping):
        raise EmitterDefinitionError(f"Emitter definition must be a mapping, got {type(obj).__name__}")
    if "type" not in obj:
        raise EmitterDefinitionError("Emitter definition: missing 'type'.")
    if "maxBrightness" not in obj:
        raise EmitterDefinitionError("Emitter definition: missing 'maxBrightness'.")

    kind = EmitterKind.parse(obj["type"])
    name = str(obj.get("name", ""))
    max_brightness = _number(obj, "maxBrightness")
    wattage_key = "maxW" if "maxW" in obj else "maxWattage"
    max_wattage = _number(obj, wattage_key) if wattage_key in obj else 1.0

    if "x" in obj and "y" in obj:
        return ChromaticityDefinition(
            kind, _number(obj, "x"), _number(obj, "y"), max_brightness, max_wattage, name
        )
    if "colorTemperature" in obj and kind is EmitterKind.WHITE:
        return ColorTemperatureDefinition(
            kind, _number(obj, "colorTemperature"), max_brightness, max_wattage, name
        )
    if "waveLength" in obj and kind is not EmitterKind.WHITE:
        return WavelengthDefinition(kind, _number(obj, "waveLength"), max_brightness, max_wattage, name)

    expected = "colorTemperature or x/y" if kind is EmitterKind.WHITE else "waveLength or x/y"
    raise EmitterDefinitionError(
        f"Emitter definition {name!r}: type '{kind.value}' requires {expected}."
    )


def parse_emitter(obj: Mapping[str, Any]) -> Emitter:
    return Emitter.from_definition(parse_emitter_definition(obj))


def parse_emitters(obj: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> List[Emitter]:
    """Emitters from a document (``LEDChip`` list) or a bare list of definitions."""
    if isinstance(obj, Mapping):
        if EMITTER_LIST_KEY not in obj:
            raise EmitterDefinitionError(f"Document has no {EMITTER_LIST_KEY!r} list.")
        obj = obj[EMITTER_LIST_KEY]
    if isinstance(obj, (str, bytes)) or not isinstance(obj, Sequence):
        raise EmitterDefinitionError(
            f"Expected a list of emitter definitions, got {type(obj).__name__}"
        )
    return [parse_emitter(item) for item in obj]


def parse_fixture(
    obj: Mapping[str, Any],
    pool: Sequence[Emitter],
    settings: Optional[SolverSettings] = None,
) -> Fixture:
    """
    Fixture from ``{"name": ..., "LED": [names]}`` (optionally wrapped under
    ``RGBWLED``) with emitter names resolved against *pool*.

    Raises
    ------
    EmitterDefinitionError
        Fewer than three references, or a name missing from *pool*.
    FixtureConstructionError
        The resolved emitters do not span rank 3.
    """
    spec = obj[FIXTURE_KEY] if FIXTURE_KEY in obj else obj
    names = spec.get("LED")
    if not isinstance(names, Sequence) or isinstance(names, (str, bytes)):
        raise EmitterDefinitionError("Fixture definition: 'LED' must be a list of emitter names.")
    if len(names) < 3:
        raise EmitterDefinitionError(
            f"Fixture definition: needs at least 3 emitters, got {len(names)}."
        )

    by_name = {}
    for e in pool:
        by_name.setdefault(e.name, e)
    emitters = []
    for n in names:
        if n not in by_name:
            raise EmitterDefinitionError(f"Fixture definition: emitter {n!r} not found.")
        emitters.append(by_name[n])
    return Fixture(emitters, name=str(spec.get("name", "")), settings=settings)


def load_document(source: Union[str, bytes, os.PathLike, Mapping[str, Any]]) -> Mapping[str, Any]:
    """A mapping as is, a path to a JSON file, or a JSON string."""
    if isinstance(source, Mapping):
        return source
    if isinstance(source, os.PathLike):
        return json.loads(Path(source).read_text(encoding="utf-8"))
    text = source.decode("utf-8") if isinstance(source, bytes) else source
    if text.lstrip().startswith("{"):
        return json.loads(text)
    return json.loads(Path(text).read_text(encoding="utf-8"))


def load_fixture(
    source: Union[str, bytes, os.PathLike, Mapping[str, Any]],
    settings: Optional[SolverSettings] = None,
) -> Fixture:
    """Parse emitters and the fixture from one document."""
    doc = load_document(source)
    return parse_fixture(doc, parse_emitters(doc), settings=settings)
