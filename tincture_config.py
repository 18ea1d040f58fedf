# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Engine Settings
===============
Resolves the key/value pairs an external settings store provides into the
enum values and template strings the engine consumes.  This module performs
no file I/O; loading and saving the mapping is the caller's concern.

Recognised keys::

    rgb_working_space            e.g. "sRGB", "Adobe", "WideGamut"
    illuminant                   e.g. "D65"; defaults to the working space's white
    chromatic_adaptation_method  e.g. "Bradford", "VonKries", "XYZScaling"
    color_display_format         "hex", "hex-uppercase", "css-rgb", "css-hsl", "custom"
    custom_display_fmt_str       template used when the display format is "custom"
    saved_color_formats          list of template strings

``EngineSettings`` is a frozen pydantic model whose aliases are the keys
above.  Enum values are matched case-insensitively, ignoring ``_``, ``-``
and spaces.  A failed validation is re-raised as ``SettingsError``; unknown
keys are ignored with a ``UserWarning``.
"""

from __future__ import annotations

import enum
import logging
import warnings
from typing import Any, Dict, Final, List, Mapping, Tuple, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from tincture_colors import Color
from tincture_errors import SettingsError
from tincture_format import ColorFormat
from tincture_reference import ChromaticAdaptationMethod, Illuminant, RgbWorkingSpace
from tincture_render import ColorDisplayFormat, display_color, render

__all__ = [
    "SETTINGS_KEYS",
    "EngineSettings",
]

logger = logging.getLogger(__name__)

SETTINGS_KEYS: Final[Tuple[str, ...]] = (
    "rgb_working_space",
    "illuminant",
    "chromatic_adaptation_method",
    "color_display_format",
    "custom_display_fmt_str",
    "saved_color_formats",
)

_E = TypeVar("_E", bound=enum.Enum)

_ENUM_FIELDS: Final[Dict[str, Type[enum.Enum]]] = {
    "working_space": RgbWorkingSpace,
    "illuminant": Illuminant,
    "adaptation_method": ChromaticAdaptationMethod,
    "display_format": ColorDisplayFormat,
}


def _normalise(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch not in "_- ")


def _resolve_enum(raw: Any, enum_type: Type[_E]) -> _E:
    """Matches *raw* against member names, string values and labels."""
    if isinstance(raw, enum_type):
        return raw
    if isinstance(raw, str):
        wanted = _normalise(raw)
        for member in enum_type:
            aliases = {_normalise(member.name)}
            if isinstance(member.value, str):
                aliases.add(_normalise(member.value))
            label = getattr(member, "label", None)
            if isinstance(label, str):
                aliases.add(_normalise(label))
            if wanted in aliases:
                return member
    raise ValueError(f"unknown {enum_type.__name__} {raw!r}")


class EngineSettings(BaseModel):
    """Resolved engine configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    working_space: RgbWorkingSpace = Field(
        default=RgbWorkingSpace.SRGB, alias="rgb_working_space",
    )
    illuminant: Illuminant = Field(default=Illuminant.D65, alias="illuminant")
    adaptation_method: ChromaticAdaptationMethod = Field(
        default=ChromaticAdaptationMethod.BRADFORD, alias="chromatic_adaptation_method",
    )
    display_format: ColorDisplayFormat = Field(
        default=ColorDisplayFormat.HEX, alias="color_display_format",
    )
    custom_display_template: str = Field(default="", alias="custom_display_fmt_str")
    saved_formats: Tuple[str, ...] = Field(default=(), alias="saved_color_formats")

    @model_validator(mode="before")
    @classmethod
    def default_illuminant(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "illuminant" in data:
            return data
        raw = data.get("rgb_working_space", data.get("working_space", RgbWorkingSpace.SRGB))
        try:
            working_space = _resolve_enum(raw, RgbWorkingSpace)
        except ValueError:
            # Reported against its own key by the field validator.
            return data
        illuminant = working_space.reference_illuminant
        logger.debug("no illuminant set, using %s from %s",
                     illuminant.name, working_space.label)
        return {**data, "illuminant": illuminant}

    @field_validator(*_ENUM_FIELDS, mode="before")
    @classmethod
    def match_enum_alias(cls, raw: Any, info: ValidationInfo) -> enum.Enum:
        """Case-insensitive match ignoring ``_``, ``-`` and spaces."""
        return _resolve_enum(raw, _ENUM_FIELDS[info.field_name])

    @field_serializer("working_space", "illuminant", "adaptation_method")
    def serialize_name(self, member: enum.Enum) -> str:
        return member.name

    @field_serializer("display_format")
    def serialize_display_format(self, display_format: ColorDisplayFormat) -> str:
        return display_format.value

    @field_serializer("saved_formats")
    def serialize_saved_formats(self, saved: Tuple[str, ...]) -> List[str]:
        return list(saved)

    @classmethod
    def _build(cls, data: Dict[str, Any]) -> "EngineSettings":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            error = exc.errors()[0]
            name = str(error["loc"][0]) if error["loc"] else ""
            field = cls.model_fields.get(name)
            key = field.alias if field is not None and field.alias else name
            enum_type = next((t for f, t in _ENUM_FIELDS.items()
                              if cls.model_fields[f].alias == key), None)
            choices = [m.name for m in enum_type] if enum_type is not None else None
            value = data.get(key, data.get(name, error.get("input")))
            raise SettingsError(key, value, choices) from exc

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "EngineSettings":
        """
        Builds settings from a loaded key/value mapping.

        Missing keys take their defaults.  A missing ``illuminant`` follows
        the selected working space.

        Raises:
            SettingsError: If a known key holds an unrecognised value.  The
                underlying ``ValidationError`` is chained as its cause.
        """
        unknown = sorted(set(mapping) - set(SETTINGS_KEYS))
        if unknown:
            warnings.warn(
                f"Ignoring unknown settings keys: {', '.join(unknown)}",
                UserWarning,
                stacklevel=2,
            )
        return cls._build({k: v for k, v in mapping.items() if k in SETTINGS_KEYS})

    def to_mapping(self) -> Dict[str, Any]:
        """Inverse of ``from_mapping``; empty optional entries are omitted."""
        out = self.model_dump(by_alias=True)
        if not self.custom_display_template:
            del out["custom_display_fmt_str"]
        if not self.saved_formats:
            del out["saved_color_formats"]
        return out

    def replace(self, **changes: Any) -> "EngineSettings":
        """Copy with *changes* (field names) applied and validated."""
        unknown = sorted(set(changes) - set(type(self).model_fields))
        if unknown:
            raise TypeError(f"EngineSettings has no fields {', '.join(unknown)}")
        return self._build({**self.model_dump(), **changes})

    def render(self, color: Color, template: Union[ColorFormat, str, int]) -> str:
        """
        Renders *color* with this context.

        *template* is a compiled format, template text, or an index into
        ``saved_formats``.
        """
        if isinstance(template, int):
            try:
                template = self.saved_formats[template]
            except IndexError:
                raise SettingsError("saved_color_formats", template) from None
        return render(template, color, self.working_space, self.illuminant, self.adaptation_method)

    def display(self, color: Color, degree_symbol: bool = True) -> str:
        """Formats *color* per ``display_format``."""
        return display_color(
            color,
            self.display_format,
            self.working_space,
            self.illuminant,
            self.adaptation_method,
            custom_template=self.custom_display_template,
            degree_symbol=degree_symbol,
        )
