# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Format Templates
======================
Compiles a user-authored template such as ``"rgb({r255}, {g255}, {b255})"``
into an immutable ``ColorFormat``: an ordered tuple of literal text and
color-field tokens.

Grammar::

    template      := token*
    token         := color_field | literal_brace | text
    literal_brace := "{{"                      -> "{"
    text          := one or more characters other than "{"
    color_field   := "{" ws? symbol digit_fmt? ws? "}"
    digit_fmt     := ":" ("x" | "X" | "o" | "d" | "." digit+)
    ws            := zero or more spaces or tabs

Symbols are matched longest first.  ``hsl_h360`` must be tried before
``hsl_h`` and ``c100`` before ``c``, otherwise a shorter prefix would win and
the leftover characters would be rejected.

Adjacent literal text (including escaped braces) is merged into a single
``TextToken``.  The empty template is valid and compiles to zero tokens.
"""

from __future__ import annotations

import enum
import functools
import logging
from dataclasses import dataclass
from typing import Final, Iterator, List, Optional, Tuple, Union

from tincture_errors import FormatParseError

__all__ = [
    "MAX_PRECISION",
    "ColorSymbol",
    "DigitFormat",
    "FloatFormat",
    "ColorField",
    "TextToken",
    "FieldToken",
    "FormatToken",
    "ColorFormat",
    "parse_template",
    "compile_template",
]

logger = logging.getLogger(__name__)

MAX_PRECISION: Final[int] = 255

_WHITESPACE: Final[str] = " \t"


# =============================================================================
# 1. SYMBOLS AND DIGIT FORMATS
# =============================================================================

class ColorSymbol(enum.Enum):
    """Channel identifiers usable inside ``{...}``."""

    RED = "r"
    GREEN = "g"
    BLUE = "b"
    RED_255 = "r255"
    GREEN_255 = "g255"
    BLUE_255 = "b255"

    CYAN = "c"
    MAGENTA = "m"
    YELLOW = "y"
    KEY = "k"
    CYAN_100 = "c100"
    MAGENTA_100 = "m100"
    YELLOW_100 = "y100"
    KEY_100 = "k100"

    HSL_HUE = "hsl_h"
    HSL_SATURATION = "hsl_s"
    HSL_LIGHT = "hsl_l"
    HSL_HUE_360 = "hsl_h360"
    HSL_SATURATION_100 = "hsl_s100"
    HSL_LIGHT_100 = "hsl_l100"

    HSV_HUE = "hsv_h"
    HSV_SATURATION = "hsv_s"
    HSV_VALUE = "hsv_v"
    HSV_HUE_360 = "hsv_h360"
    HSV_SATURATION_100 = "hsv_s100"
    HSV_VALUE_100 = "hsv_v100"

    LAB_L = "lab_l"
    LAB_A = "lab_a"
    LAB_B = "lab_b"

    LCH_AB_L = "lch_ab_l"
    LCH_AB_C = "lch_ab_c"
    LCH_AB_H = "lch_ab_h"

    LUV_L = "luv_l"
    LUV_U = "luv_u"
    LUV_V = "luv_v"

    LCH_UV_L = "lch_uv_l"
    LCH_UV_C = "lch_uv_c"
    LCH_UV_H = "lch_uv_h"

    XYY_X = "xyy_x"
    XYY_Y = "xyy_y"
    XYY_LUMINANCE = "xyy_Y"

    XYZ_X = "xyz_x"
    XYZ_Y = "xyz_y"
    XYZ_Z = "xyz_z"

    @property
    def is_integer(self) -> bool:
        """Channels rendered as unsigned integers by default."""
        return self in _INTEGER_SYMBOLS


_INTEGER_SYMBOLS: Final = frozenset(
    {ColorSymbol.RED_255, ColorSymbol.GREEN_255, ColorSymbol.BLUE_255}
)

# Longest first; ties cannot prefix each other.
_SYMBOLS_BY_LENGTH: Final[Tuple[ColorSymbol, ...]] = tuple(
    sorted(ColorSymbol, key=lambda s: len(s.value), reverse=True)
)


class DigitFormat(enum.Enum):
    """Integer radix selected by a ``:x``, ``:X``, ``:o`` or ``:d`` suffix."""

    HEX = ("x", 16, False)
    UPPERCASE_HEX = ("X", 16, True)
    OCTAL = ("o", 8, False)
    DECIMAL = ("d", 10, False)

    def __init__(self, suffix: str, radix: int, uppercase: bool) -> None:
        self.suffix = suffix
        self.radix = radix
        self.uppercase = uppercase

    @classmethod
    def from_suffix(cls, suffix: str) -> Optional["DigitFormat"]:
        return _DIGIT_FORMATS.get(suffix)


_DIGIT_FORMATS: Final = {fmt.suffix: fmt for fmt in DigitFormat}


@dataclass(slots=True, frozen=True)
class FloatFormat:
    """Fixed number of fractional digits, from a ``:.N`` suffix."""
    precision: int

    def __post_init__(self) -> None:
        if not 0 <= self.precision <= MAX_PRECISION:
            raise ValueError(
                f"Precision must be between 0 and {MAX_PRECISION}, got {self.precision}"
            )

    @property
    def suffix(self) -> str:
        return f".{self.precision}"


# =============================================================================
# 2. TOKENS
# =============================================================================

@dataclass(slots=True, frozen=True)
class ColorField:
    symbol: ColorSymbol
    digit_format: Union[DigitFormat, FloatFormat, None] = None

    def to_template(self) -> str:
        suffix = f":{self.digit_format.suffix}" if self.digit_format is not None else ""
        return f"{{{self.symbol.value}{suffix}}}"


@dataclass(slots=True, frozen=True)
class TextToken:
    text: str

    def to_template(self) -> str:
        return self.text.replace("{", "{{")


@dataclass(slots=True, frozen=True)
class FieldToken:
    field: ColorField

    def to_template(self) -> str:
        return self.field.to_template()


FormatToken = Union[TextToken, FieldToken]


@dataclass(slots=True, frozen=True)
class ColorFormat:
    """
    A compiled template.

    Immutable and hashable, so one instance can be shared between threads
    and used as a cache key.
    """
    tokens: Tuple[FormatToken, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "ColorFormat":
        """Alias for ``parse_template``."""
        return parse_template(text)

    def __iter__(self) -> Iterator[FormatToken]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def fields(self) -> Tuple[ColorField, ...]:
        return tuple(t.field for t in self.tokens if isinstance(t, FieldToken))

    def to_template(self) -> str:
        """Source text that parses back to an equal ``ColorFormat``."""
        return "".join(t.to_template() for t in self.tokens)


# =============================================================================
# 3. PARSER
# =============================================================================

class _Parser:
    """Single-use recursive-descent parser over one template string."""

    __slots__ = ("text", "pos", "tokens", "_pending")

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.tokens: List[FormatToken] = []
        self._pending: List[str] = []

    def fail(self, position: int, reason: str) -> FormatParseError:
        return FormatParseError(self.text, position, reason)

    def parse(self) -> ColorFormat:
        text = self.text
        while self.pos < len(text):
            if text.startswith("{{", self.pos):
                self._pending.append("{")
                self.pos += 2
            elif text[self.pos] == "{":
                self._flush_text()
                self.tokens.append(FieldToken(self._color_field()))
            else:
                end = text.find("{", self.pos)
                if end == -1:
                    end = len(text)
                self._pending.append(text[self.pos:end])
                self.pos = end
        self._flush_text()
        return ColorFormat(tuple(self.tokens))

    def _flush_text(self) -> None:
        if self._pending:
            self.tokens.append(TextToken("".join(self._pending)))
            self._pending.clear()

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _color_field(self) -> ColorField:
        start = self.pos
        self.pos += 1
        self._skip_ws()
        symbol = self._symbol(start)
        digit_format = self._digit_format(start)
        self._skip_ws()
        if self.pos >= len(self.text):
            raise self.fail(start, "unterminated color field, expected '}'")
        if self.text[self.pos] != "}":
            raise self.fail(self.pos, f"unexpected character {self.text[self.pos]!r}, expected '}}'")
        self.pos += 1
        return ColorField(symbol, digit_format)

    def _symbol(self, field_start: int) -> ColorSymbol:
        text = self.text
        if self.pos >= len(text):
            raise self.fail(field_start, "unterminated color field, expected a symbol")
        for symbol in _SYMBOLS_BY_LENGTH:
            if text.startswith(symbol.value, self.pos):
                end = self.pos + len(symbol.value)
                # A longer identifier sharing this prefix is not this symbol.
                if end < len(text) and (text[end].isalnum() or text[end] == "_"):
                    continue
                self.pos = end
                return symbol

        end = self.pos
        while end < len(text) and (text[end].isalnum() or text[end] == "_"):
            end += 1
        if end == self.pos:
            if text[self.pos] == "}":
                raise self.fail(self.pos, "empty color field, expected a symbol")
            raise self.fail(self.pos, f"unexpected character {text[self.pos]!r}, expected a symbol")
        raise self.fail(self.pos, f"unknown color symbol {text[self.pos:end]!r}")

    def _digit_format(self, field_start: int) -> Union[DigitFormat, FloatFormat, None]:
        text = self.text
        if self.pos >= len(text) or text[self.pos] != ":":
            return None
        self.pos += 1
        if self.pos >= len(text):
            raise self.fail(field_start, "unterminated color field, expected a digit format")

        ch = text[self.pos]
        if ch == ".":
            return self._precision()
        fmt = DigitFormat.from_suffix(ch)
        if fmt is None:
            raise self.fail(
                self.pos,
                f"invalid digit format {ch!r}, expected one of 'x', 'X', 'o', 'd' or '.N'",
            )
        self.pos += 1
        return fmt

    def _precision(self) -> FloatFormat:
        dot = self.pos
        self.pos += 1
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos].isdigit() and self.text[self.pos].isascii():
            self.pos += 1
        if self.pos == start:
            raise self.fail(start, "missing precision digits after '.'")
        precision = int(self.text[start:self.pos])
        if precision > MAX_PRECISION:
            raise self.fail(dot, f"precision {precision} out of range (0-{MAX_PRECISION})")
        return FloatFormat(precision)


def parse_template(text: str) -> ColorFormat:
    """
    Compiles *text* into a ``ColorFormat``.

    Raises:
        FormatParseError: With the zero-based position of the offending input.
    """
    try:
        return _Parser(text).parse()
    except FormatParseError as exc:
        logger.debug("color format rejected: %s", exc.technical_message)
        raise


@functools.lru_cache(maxsize=256)
def compile_template(text: str) -> ColorFormat:
    """``parse_template`` memoised per template string.  Failures are not cached."""
    return parse_template(text)
