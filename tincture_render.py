# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Template Renderer & Digit Formatter
===================================
Evaluates a compiled ``ColorFormat`` against one color and its working-space
context.

Every derived representation is computed once per call by
``ColorChannels.compute``, whichever fields the template references.  Each
field then goes through one of two formatters:

``format_unsigned``
    Digit-stack extraction in radix 8, 10 or 16: push ``value % radix``,
    divide, repeat until zero, then pop most-significant first.  Zero pushes
    a single ``0``.

``format_float``
    Optional ``-``, the truncated integer part through the decimal digit
    stack, then fractional digits peeled by repeated multiplication by 10.
    Without a precision, peeling stops once the remainder is exactly zero or
    after ``MAX_NATURAL_DIGITS`` digits, and trailing zeros are trimmed (at
    least one digit is kept).  With a precision of N, exactly N digits are
    produced from the exact binary value of the float, and the remainder
    rounds half away from zero against exactly one half, carrying into the
    integer part.  ``0.15`` is stored just below a half and renders ``0.1``
    at one digit.  NaN, infinite and subnormal values render as ``""``.

Field rules:
    integer channels (``r255``, ``g255``, ``b255``)
        truncated to an unsigned integer; decimal unless a radix is given;
        a float precision on an integer channel still renders decimal.
    float channels with ``:d``/``:x``/``:X``/``:o``
        ``|value|`` truncated to an unsigned integer, then the digit stack.
    float channels with ``:.N``
        fixed precision.
    float channels without a suffix
        natural precision.
"""

from __future__ import annotations

import enum
import fractions
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Final, Iterable, List, Optional, Union

from tincture_colorengine import FLOAT_MIN_NORMAL
from tincture_colors import (
    Cmyk,
    Color,
    Hsl,
    Hsv,
    LchAB,
    LchUV,
    Lab,
    Luv,
    Rgb,
    XyY,
    Xyz,
)
from tincture_errors import FormatParseError
from tincture_format import (
    ColorFormat,
    ColorSymbol,
    DigitFormat,
    FieldToken,
    FloatFormat,
    compile_template,
)
from tincture_reference import ChromaticAdaptationMethod, Illuminant, RgbWorkingSpace

__all__ = [
    "MAX_NATURAL_DIGITS",
    "format_unsigned",
    "format_float",
    "ColorChannels",
    "render",
    "ColorDisplayFormat",
    "display_color",
    "CustomPaletteFormat",
]

logger = logging.getLogger(__name__)

# Upper bound on fractional digits when no precision is requested.
MAX_NATURAL_DIGITS: Final[int] = 15

_DIGITS: Final[str] = "0123456789abcdef"

_HALF: Final[fractions.Fraction] = fractions.Fraction(1, 2)


# =============================================================================
# 1. DIGIT FORMATTER
# =============================================================================

def format_unsigned(value: int, digit_format: DigitFormat = DigitFormat.DECIMAL) -> str:
    """
    Renders a non-negative integer in the radix of *digit_format*.

    Raises:
        ValueError: If *value* is negative.
    """
    if value < 0:
        raise ValueError(f"format_unsigned expects a non-negative value, got {value}")
    radix = digit_format.radix
    stack: List[int] = []
    if value == 0:
        stack.append(0)
    while value > 0:
        stack.append(value % radix)
        value //= radix

    digits = _DIGITS.upper() if digit_format.uppercase else _DIGITS
    out = []
    while stack:
        out.append(digits[stack.pop()])
    return "".join(out)


def _is_renderable(value: float) -> bool:
    if math.isnan(value) or math.isinf(value):
        return False
    return value == 0.0 or abs(value) >= FLOAT_MIN_NORMAL


def _peel_exact(fraction: fractions.Fraction, count: int) -> tuple[List[int], fractions.Fraction]:
    digits: List[int] = []
    for _ in range(count):
        fraction *= 10
        digit = int(fraction)
        digits.append(digit)
        fraction -= digit
    return digits, fraction


def format_float(value: float, precision: Optional[int] = None) -> str:
    """
    Renders *value* in decimal with natural (``None``) or fixed precision.

    >>> format_float(0.5)
    '0.5'
    >>> format_float(55.681797, 4)
    '55.6818'
    >>> format_float(-17.127, 0)
    '-17'
    """
    if not _is_renderable(value):
        return ""

    sign = "-" if value < 0.0 else ""
    magnitude = abs(value)
    integer = math.trunc(magnitude)
    fraction = magnitude - integer

    if precision is None:
        digits: List[int] = []
        while fraction != 0.0 and len(digits) < MAX_NATURAL_DIGITS:
            fraction *= 10.0
            digit = int(fraction)
            digits.append(digit)
            fraction -= digit
        while len(digits) > 1 and digits[-1] == 0:
            digits.pop()
        if not digits:
            digits.append(0)
    else:
        # Exact binary value: 0.15 is stored as 0.1499... and rounds down.
        digits, rest = _peel_exact(fractions.Fraction(magnitude) - integer, precision)
        if rest >= _HALF:
            i = len(digits) - 1
            while i >= 0 and digits[i] == 9:
                digits[i] = 0
                i -= 1
            if i >= 0:
                digits[i] += 1
            else:
                integer += 1

    head = sign + format_unsigned(integer)
    if not digits:
        return head
    return head + "." + "".join(_DIGITS[d] for d in digits)


# =============================================================================
# 2. CHANNEL TABLE
# =============================================================================

@dataclass(slots=True, frozen=True)
class ColorChannels:
    """Every representation of one color under one working-space context."""
    rgb: Rgb
    cmyk: Cmyk
    hsv: Hsv
    hsl: Hsl
    xyz: Xyz
    xyy: XyY
    lab: Lab
    lch_ab: LchAB
    luv: Luv
    lch_uv: LchUV

    @classmethod
    def compute(cls,
                color: Color,
                working_space: RgbWorkingSpace,
                illuminant: Optional[Illuminant] = None,
                adaptation_method: Optional[ChromaticAdaptationMethod] = None,
                ) -> "ColorChannels":
        ctx = (working_space, illuminant, adaptation_method)
        return cls(
            rgb=color.rgb(*ctx),
            cmyk=color.cmyk(*ctx),
            hsv=color.hsv(*ctx),
            hsl=color.hsl(*ctx),
            xyz=color.xyz(*ctx),
            xyy=color.xyy(*ctx),
            lab=color.lab(*ctx),
            lch_ab=color.lch_ab(*ctx),
            luv=color.luv(*ctx),
            lch_uv=color.lch_uv(*ctx),
        )

    def value(self, symbol: ColorSymbol) -> float:
        return _CHANNEL_GETTERS[symbol](self)


S = ColorSymbol
_CHANNEL_GETTERS: Final[Dict[ColorSymbol, Callable[[ColorChannels], float]]] = {
    S.RED: lambda ch: ch.rgb.r,
    S.GREEN: lambda ch: ch.rgb.g,
    S.BLUE: lambda ch: ch.rgb.b,
    S.RED_255: lambda ch: ch.rgb.r_scaled,
    S.GREEN_255: lambda ch: ch.rgb.g_scaled,
    S.BLUE_255: lambda ch: ch.rgb.b_scaled,

    S.CYAN: lambda ch: ch.cmyk.c,
    S.MAGENTA: lambda ch: ch.cmyk.m,
    S.YELLOW: lambda ch: ch.cmyk.y,
    S.KEY: lambda ch: ch.cmyk.k,
    S.CYAN_100: lambda ch: ch.cmyk.c_scaled,
    S.MAGENTA_100: lambda ch: ch.cmyk.m_scaled,
    S.YELLOW_100: lambda ch: ch.cmyk.y_scaled,
    S.KEY_100: lambda ch: ch.cmyk.k_scaled,

    S.HSL_HUE: lambda ch: ch.hsl.h,
    S.HSL_SATURATION: lambda ch: ch.hsl.s,
    S.HSL_LIGHT: lambda ch: ch.hsl.l,
    S.HSL_HUE_360: lambda ch: ch.hsl.h_scaled,
    S.HSL_SATURATION_100: lambda ch: ch.hsl.s_scaled,
    S.HSL_LIGHT_100: lambda ch: ch.hsl.l_scaled,

    S.HSV_HUE: lambda ch: ch.hsv.h,
    S.HSV_SATURATION: lambda ch: ch.hsv.s,
    S.HSV_VALUE: lambda ch: ch.hsv.v,
    S.HSV_HUE_360: lambda ch: ch.hsv.h_scaled,
    S.HSV_SATURATION_100: lambda ch: ch.hsv.s_scaled,
    S.HSV_VALUE_100: lambda ch: ch.hsv.v_scaled,

    S.LAB_L: lambda ch: ch.lab.l,
    S.LAB_A: lambda ch: ch.lab.a,
    S.LAB_B: lambda ch: ch.lab.b,

    S.LCH_AB_L: lambda ch: ch.lch_ab.l,
    S.LCH_AB_C: lambda ch: ch.lch_ab.c,
    S.LCH_AB_H: lambda ch: ch.lch_ab.h,

    S.LUV_L: lambda ch: ch.luv.l,
    S.LUV_U: lambda ch: ch.luv.u,
    S.LUV_V: lambda ch: ch.luv.v,

    S.LCH_UV_L: lambda ch: ch.lch_uv.l,
    S.LCH_UV_C: lambda ch: ch.lch_uv.c,
    S.LCH_UV_H: lambda ch: ch.lch_uv.h,

    S.XYY_X: lambda ch: ch.xyy.x,
    S.XYY_Y: lambda ch: ch.xyy.y,
    S.XYY_LUMINANCE: lambda ch: ch.xyy.luminance,

    S.XYZ_X: lambda ch: ch.xyz.x,
    S.XYZ_Y: lambda ch: ch.xyz.y,
    S.XYZ_Z: lambda ch: ch.xyz.z,
}
del S


# =============================================================================
# 3. RENDERER
# =============================================================================

def _to_unsigned(value: float) -> int:
    """Truncates toward zero; NaN, infinities and negatives become 0."""
    if not math.isfinite(value) or value <= 0.0:
        return 0
    return int(value)


def _render_field(symbol: ColorSymbol,
                  digit_format: Union[DigitFormat, FloatFormat, None],
                  value: float) -> str:
    if symbol.is_integer:
        radix = digit_format if isinstance(digit_format, DigitFormat) else DigitFormat.DECIMAL
        return format_unsigned(_to_unsigned(value), radix)
    if isinstance(digit_format, DigitFormat):
        return format_unsigned(_to_unsigned(abs(value)), digit_format)
    if isinstance(digit_format, FloatFormat):
        return format_float(value, digit_format.precision)
    return format_float(value)


def render(template: Union[ColorFormat, str],
           color: Color,
           working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
           illuminant: Optional[Illuminant] = None,
           adaptation_method: Optional[ChromaticAdaptationMethod] = None) -> str:
    """
    Renders *template* for *color*.

    Args:
        template: A compiled ``ColorFormat`` or template text.  Text is
            compiled through the ``compile_template`` cache.
        color: The color to render.
        working_space: RGB working space of the color.
        illuminant: Reference white for Lab/Luv; defaults to the working
            space's own.
        adaptation_method: Optional chromatic adaptation to *illuminant*.

    Raises:
        FormatParseError: If *template* is text that does not compile.
    """
    if isinstance(template, str):
        template = compile_template(template)

    channels = ColorChannels.compute(color, working_space, illuminant, adaptation_method)
    parts: List[str] = []
    for token in template:
        if isinstance(token, FieldToken):
            field = token.field
            parts.append(_render_field(field.symbol, field.digit_format, channels.value(field.symbol)))
        else:
            parts.append(token.text)
    return "".join(parts)


# =============================================================================
# 4. DISPLAY FORMATS & PALETTES
# =============================================================================

class ColorDisplayFormat(enum.Enum):
    """How a single color is shown; values are the persisted setting tokens."""

    HEX = "hex"
    HEX_UPPERCASE = "hex-uppercase"
    CSS_RGB = "css-rgb"
    CSS_HSL = "css-hsl"
    CUSTOM = "custom"


def display_color(color: Color,
                  display_format: ColorDisplayFormat = ColorDisplayFormat.HEX,
                  working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
                  illuminant: Optional[Illuminant] = None,
                  adaptation_method: Optional[ChromaticAdaptationMethod] = None,
                  *,
                  custom_template: str = "",
                  degree_symbol: bool = True) -> str:
    """
    Renders *color* for display.

    A ``CUSTOM`` format whose template does not compile falls back to hex;
    the parse failure is logged as a warning rather than raised.
    """
    if display_format is ColorDisplayFormat.HEX:
        return color.as_hex()
    if display_format is ColorDisplayFormat.HEX_UPPERCASE:
        return color.as_hex().upper()
    if display_format is ColorDisplayFormat.CSS_RGB:
        return color.as_css_rgb()
    if display_format is ColorDisplayFormat.CSS_HSL:
        return color.as_css_hsl(degree_symbol)

    try:
        fmt = compile_template(custom_template)
    except FormatParseError as exc:
        logger.warning("custom display format %r is invalid, using hex: %s",
                       custom_template, exc)
        return color.as_hex()
    return render(fmt, color, working_space, illuminant, adaptation_method)


@dataclass(slots=True, frozen=True)
class CustomPaletteFormat:
    """Exports a palette as ``prefix`` + one rendered entry per color + ``suffix``."""
    prefix: str
    entry_format: str
    suffix: str

    def format_palette(self,
                       colors: Iterable[Color],
                       working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
                       illuminant: Optional[Illuminant] = None,
                       adaptation_method: Optional[ChromaticAdaptationMethod] = None) -> str:
        """
        Raises:
            FormatParseError: If ``entry_format`` does not compile.
        """
        entry = compile_template(self.entry_format)
        body = "".join(
            render(entry, color, working_space, illuminant, adaptation_method)
            for color in colors
        )
        return f"{self.prefix}{body}{self.suffix}"
