# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color harmonies, shades, tints and hue ramps.

Harmonies rotate the HSV hue by fixed fractions of a turn (twelfths of the
color wheel).  Shades and tints step 8-bit sRGB channels towards black or
white.
"""

from __future__ import annotations

import enum
import math
from typing import Final, List, Tuple

from tincture_colors import U8_MAX, Color, Rgb

__all__ = [
    "ColorHarmony",
    "complementary",
    "triadic",
    "tetradic",
    "analogous",
    "split_complementary",
    "square",
    "monochromatic",
    "harmony",
    "shades",
    "tints",
    "hues",
]

_TWELFTH: Final[float] = 1.0 / 12.0


class ColorHarmony(enum.Enum):
    COMPLEMENTARY = "complementary"
    TRIADIC = "triadic"
    TETRADIC = "tetradic"
    ANALOGOUS = "analogous"
    SPLIT_COMPLEMENTARY = "split-complementary"
    SQUARE = "square"
    MONOCHROMATIC = "monochromatic"


# =============================================================================
# 1. HARMONIES
# =============================================================================

def complementary(color: Color) -> Color:
    """Opposite hue.  Pure black and pure white map onto each other."""
    rgb = color.rgb().as_tuple()
    if rgb == (0.0, 0.0, 0.0):
        return Color.white()
    if rgb == (1.0, 1.0, 1.0):
        return Color.black()
    return color.with_hue_offset(6 * _TWELFTH)


def triadic(color: Color) -> Tuple[Color, Color]:
    return (color.with_hue_offset(4 * _TWELFTH), color.with_hue_offset(8 * _TWELFTH))


def tetradic(color: Color) -> Tuple[Color, Color, Color]:
    return (
        color.with_hue_offset(2 * _TWELFTH),
        complementary(color),
        color.with_hue_offset(8 * _TWELFTH),
    )


def analogous(color: Color) -> Tuple[Color, Color]:
    return (color.with_hue_offset(-_TWELFTH), color.with_hue_offset(_TWELFTH))


def split_complementary(color: Color) -> Tuple[Color, Color]:
    return (color.with_hue_offset(5 * _TWELFTH), color.with_hue_offset(7 * _TWELFTH))


def square(color: Color) -> Tuple[Color, Color, Color]:
    return (
        color.with_hue_offset(3 * _TWELFTH),
        complementary(color),
        color.with_hue_offset(9 * _TWELFTH),
    )


def monochromatic(color: Color) -> Tuple[Color, Color, Color]:
    """Same hue at saturation -3/12, -6/12 and -9/12 (clamped at 0)."""
    return (
        color.with_saturation_offset(-3 * _TWELFTH),
        color.with_saturation_offset(-6 * _TWELFTH),
        color.with_saturation_offset(-9 * _TWELFTH),
    )


_HARMONIES: Final = {
    ColorHarmony.COMPLEMENTARY: lambda c: (complementary(c),),
    ColorHarmony.TRIADIC: triadic,
    ColorHarmony.TETRADIC: tetradic,
    ColorHarmony.ANALOGOUS: analogous,
    ColorHarmony.SPLIT_COMPLEMENTARY: split_complementary,
    ColorHarmony.SQUARE: square,
    ColorHarmony.MONOCHROMATIC: monochromatic,
}


def harmony(color: Color, kind: ColorHarmony) -> Tuple[Color, ...]:
    """The base color followed by the colors of the *kind* harmony."""
    return (color, *_HARMONIES[kind](color))


# =============================================================================
# 2. RAMPS
# =============================================================================

def _base_channels(color: Color) -> List[int]:
    rgb = color.rgb()
    return [min(255, max(0, int(v))) for v in (rgb.r_scaled, rgb.g_scaled, rgb.b_scaled)]


def _ramp(color: Color, total: int, towards_white: bool) -> List[Color]:
    if total <= 0:
        return [color]
    step_total = max(total - 1, 1)
    channels = _base_channels(color)
    if towards_white:
        steps = [math.ceil((U8_MAX - c) / step_total) for c in channels]
    else:
        steps = [math.ceil(c / step_total) for c in channels]

    ramp = []
    for _ in range(total):
        ramp.append(Color(Rgb.from_scaled(*channels)))
        if towards_white:
            channels = [min(255, c + s) for c, s in zip(channels, steps)]
        else:
            channels = [max(0, c - s) for c, s in zip(channels, steps)]
    return ramp


def shades(color: Color, total: int) -> List[Color]:
    """*total* colors stepping from *color* down to black."""
    return _ramp(color, total, towards_white=False)


def tints(color: Color, total: int) -> List[Color]:
    """*total* colors stepping from *color* up to white."""
    return _ramp(color, total, towards_white=True)


def hues(color: Color, total: int, step: float) -> List[Color]:
    """
    ``2 * total + 1`` colors centred on *color*, with hues ``step`` turns apart.

    The first ``total`` entries rotate backwards, the centre entry is the
    original hue, and the last ``total`` rotate forwards.
    """
    backwards = [color.with_hue_offset(-step * i) for i in range(total, -1, -1)]
    forwards = [color.with_hue_offset(step * i) for i in range(1, total + 1)]
    return backwards + forwards
