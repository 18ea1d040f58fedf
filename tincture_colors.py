# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Color Values
============
Immutable per-space value types and the ``Color`` tagged union.

A ``Color`` stores exactly one authoritative representation: ``Rgb``,
``Cmyk``, ``Hsv``, ``Hsl``, ``Xyz``, ``Luv`` or ``LchUV``.  Every other
representation is computed on demand by ``Color``'s accessor methods, which
take the working-space context (``RgbWorkingSpace``, ``Illuminant`` and an
optional ``ChromaticAdaptationMethod``) as explicit arguments.  Lab, LCh(ab)
and xyY depend on that context and are therefore never stored.

Channel ranges:
    Rgb, Cmyk, Hsv, Hsl     0..1 (hue measured in turns)
    Xyz, XyY                Y = 1 for the reference white
    Lab, Luv                L in 0..100
    LchAB, LchUV            H in degrees, [0, 360)
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from typing import Final, Optional, Tuple, Type, TypeVar, Union

import numpy as np

from tincture_colorengine import ColorSpaceEngine as E
from tincture_colorengine import flush_invalid
from tincture_matrix import ArrayFloat
from tincture_reference import ChromaticAdaptationMethod, Illuminant, RgbWorkingSpace

__all__ = [
    "U8_MAX",
    "Rgb",
    "Cmyk",
    "Hsv",
    "Hsl",
    "Xyz",
    "XyY",
    "Lab",
    "Luv",
    "LchAB",
    "LchUV",
    "ColorValue",
    "Color",
    "Representation",
    "convert",
]

U8_MAX: Final[float] = 255.0

_HEX_RE: Final = re.compile(r"#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})")

_T = TypeVar("_T", bound="_Triplet")


# =============================================================================
# 1. VALUE TYPES
# =============================================================================

class _Triplet:
    """Array round-tripping shared by the three-channel value types."""

    __slots__ = ()

    def as_array(self) -> ArrayFloat:
        return np.array(self.as_tuple(), dtype=np.float64)

    def as_tuple(self) -> Tuple[float, ...]:
        raise NotImplementedError

    @classmethod
    def from_array(cls: Type[_T], arr: ArrayFloat) -> _T:
        """Builds a value from an engine output, flushing NaN/inf/subnormal to 0."""
        return cls(*(float(v) for v in flush_invalid(arr)))


@dataclass(slots=True, frozen=True)
class Rgb(_Triplet):
    """Companded RGB in the 0..1 range."""
    r: float
    g: float
    b: float

    @classmethod
    def from_scaled(cls, r: float, g: float, b: float) -> "Rgb":
        """From 0..255 channel values."""
        return cls(r / U8_MAX, g / U8_MAX, b / U8_MAX)

    @property
    def r_scaled(self) -> float:
        return self.r * U8_MAX

    @property
    def g_scaled(self) -> float:
        return self.g * U8_MAX

    @property
    def b_scaled(self) -> float:
        return self.b * U8_MAX

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(slots=True, frozen=True)
class Cmyk:
    """Subtractive CMYK in the 0..1 range."""
    c: float
    m: float
    y: float
    k: float

    @property
    def c_scaled(self) -> float:
        return self.c * 100.0

    @property
    def m_scaled(self) -> float:
        return self.m * 100.0

    @property
    def y_scaled(self) -> float:
        return self.y * 100.0

    @property
    def k_scaled(self) -> float:
        return self.k * 100.0

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.c, self.m, self.y, self.k)

    def as_array(self) -> ArrayFloat:
        return np.array(self.as_tuple(), dtype=np.float64)

    @classmethod
    def from_array(cls, arr: ArrayFloat) -> "Cmyk":
        return cls(*(float(v) for v in flush_invalid(arr)))


@dataclass(slots=True, frozen=True)
class Hsv(_Triplet):
    """Hue (turns), saturation and value, all 0..1."""
    h: float
    s: float
    v: float

    @property
    def h_scaled(self) -> float:
        return self.h * 360.0

    @property
    def s_scaled(self) -> float:
        return self.s * 100.0

    @property
    def v_scaled(self) -> float:
        return self.v * 100.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.h, self.s, self.v)


@dataclass(slots=True, frozen=True)
class Hsl(_Triplet):
    """Hue (turns), saturation and lightness, all 0..1."""
    h: float
    s: float
    l: float  # noqa: E741

    @property
    def h_scaled(self) -> float:
        return self.h * 360.0

    @property
    def s_scaled(self) -> float:
        return self.s * 100.0

    @property
    def l_scaled(self) -> float:
        return self.l * 100.0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.h, self.s, self.l)


@dataclass(slots=True, frozen=True)
class Xyz(_Triplet):
    x: float
    y: float
    z: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(slots=True, frozen=True)
class XyY(_Triplet):
    """Chromaticity (x, y) plus luminance Y."""
    x: float
    y: float
    luminance: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.luminance)


@dataclass(slots=True, frozen=True)
class Lab(_Triplet):
    l: float  # noqa: E741
    a: float
    b: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.l, self.a, self.b)


@dataclass(slots=True, frozen=True)
class Luv(_Triplet):
    l: float  # noqa: E741
    u: float
    v: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.l, self.u, self.v)


@dataclass(slots=True, frozen=True)
class LchAB(_Triplet):
    """Polar Lab."""
    l: float  # noqa: E741
    c: float
    h: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.l, self.c, self.h)


@dataclass(slots=True, frozen=True)
class LchUV(_Triplet):
    """Polar Luv."""
    l: float  # noqa: E741
    c: float
    h: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.l, self.c, self.h)


ColorValue = Union[Rgb, Cmyk, Hsv, Hsl, Xyz, Luv, LchUV]
_STORABLE: Final = (Rgb, Cmyk, Hsv, Hsl, Xyz, Luv, LchUV)


# =============================================================================
# 2. COLOR UNION
# =============================================================================

@dataclass(slots=True, frozen=True)
class Color:
    """
    A color held in exactly one authoritative representation.

    Accessors convert on demand.  Asking for the stored representation
    returns it unchanged.  ``illuminant`` defaults to the working space's
    reference white; ``method=None`` skips chromatic adaptation.
    """
    value: ColorValue

    def __post_init__(self) -> None:
        if not isinstance(self.value, _STORABLE):
            names = ", ".join(t.__name__ for t in _STORABLE)
            raise TypeError(
                f"Color stores one of {names}; got {type(self.value).__name__}"
            )

    # --- Constructors ---

    @classmethod
    def black(cls) -> "Color":
        return cls(Rgb(0.0, 0.0, 0.0))

    @classmethod
    def white(cls) -> "Color":
        return cls(Rgb(1.0, 1.0, 1.0))

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """
        Parses ``rrggbb`` or ``#rrggbb``.

        Raises:
            ValueError: If *text* is not six hex digits.
        """
        match = _HEX_RE.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"Invalid hex color {text!r}; expected 'rrggbb' or '#rrggbb'")
        r, g, b = (int(part, 16) for part in match.groups())
        return cls(Rgb.from_scaled(r, g, b))

    # --- Device-dependent accessors ---

    def rgb(self,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            method: Optional[ChromaticAdaptationMethod] = None) -> Rgb:
        v = self.value
        if isinstance(v, Rgb):
            return v
        if isinstance(v, Cmyk):
            return Rgb.from_array(E.cmyk_to_rgb(v.as_array()))
        if isinstance(v, Hsv):
            return Rgb.from_array(E.hsv_to_rgb(v.as_array()))
        if isinstance(v, Hsl):
            return Rgb.from_array(E.hsl_to_rgb(v.as_array()))
        if isinstance(v, Xyz):
            return Rgb.from_array(E.xyz_to_rgb(v.as_array(), working_space))

        ill = illuminant or working_space.reference_illuminant
        luv = v if isinstance(v, Luv) else Luv.from_array(E.lch_uv_to_luv(v.as_array()))
        return Rgb.from_array(E.luv_to_rgb(luv.as_array(), working_space, ill, method))

    def cmyk(self,
             working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
             illuminant: Optional[Illuminant] = None,
             method: Optional[ChromaticAdaptationMethod] = None) -> Cmyk:
        if isinstance(self.value, Cmyk):
            return self.value
        rgb = self.rgb(working_space, illuminant, method)
        return Cmyk.from_array(E.rgb_to_cmyk(rgb.as_array()))

    def hsv(self,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            method: Optional[ChromaticAdaptationMethod] = None) -> Hsv:
        v = self.value
        if isinstance(v, Hsv):
            return v
        # Direct path keeps the hue of achromatic HSL colors.
        if isinstance(v, Hsl):
            return Hsv.from_array(E.hsl_to_hsv(v.as_array()))
        rgb = self.rgb(working_space, illuminant, method)
        return Hsv.from_array(E.rgb_to_hsv(rgb.as_array()))

    def hsl(self,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            method: Optional[ChromaticAdaptationMethod] = None) -> Hsl:
        v = self.value
        if isinstance(v, Hsl):
            return v
        hsv = self.hsv(working_space, illuminant, method)
        return Hsl.from_array(E.hsv_to_hsl(hsv.as_array()))

    # --- CIE accessors ---

    def xyz(self,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            method: Optional[ChromaticAdaptationMethod] = None) -> Xyz:
        """XYZ relative to the working space's reference white."""
        v = self.value
        if isinstance(v, Xyz):
            return v
        if isinstance(v, (Luv, LchUV)):
            ill = illuminant or working_space.reference_illuminant
            luv = v if isinstance(v, Luv) else Luv.from_array(E.lch_uv_to_luv(v.as_array()))
            xyz = E.luv_to_xyz(luv.as_array(), ill)
            if method is not None:
                xyz = E.adapt(xyz, method, ill, working_space.reference_illuminant)
            return Xyz.from_array(xyz)
        rgb = self.rgb(working_space, illuminant, method)
        return Xyz.from_array(E.rgb_to_xyz(rgb.as_array(), working_space))

    def xyy(self,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            method: Optional[ChromaticAdaptationMethod] = None) -> XyY:
        xyz = self.xyz(working_space, illuminant, method)
        return XyY.from_array(E.xyz_to_xyY(xyz.as_array()))

    def _xyz_under(self,
                   working_space: RgbWorkingSpace,
                   illuminant: Illuminant,
                   method: Optional[ChromaticAdaptationMethod]) -> ArrayFloat:
        """XYZ adapted from the working-space white to *illuminant* (if a method is set)."""
        xyz = self.xyz(working_space, illuminant, method).as_array()
        if method is None:
            return xyz
        return E.adapt(xyz, method, working_space.reference_illuminant, illuminant)

    def lab(self,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            method: Optional[ChromaticAdaptationMethod] = None) -> Lab:
        ill = illuminant or working_space.reference_illuminant
        xyz = self._xyz_under(working_space, ill, method)
        return Lab.from_array(E.xyz_to_lab(xyz, ill))

    def lch_ab(self,
               working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
               illuminant: Optional[Illuminant] = None,
               method: Optional[ChromaticAdaptationMethod] = None) -> LchAB:
        lab = self.lab(working_space, illuminant, method)
        return LchAB.from_array(E.lab_to_lch_ab(lab.as_array()))

    def luv(self,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            method: Optional[ChromaticAdaptationMethod] = None) -> Luv:
        v = self.value
        if isinstance(v, Luv):
            return v
        if isinstance(v, LchUV):
            return Luv.from_array(E.lch_uv_to_luv(v.as_array()))
        ill = illuminant or working_space.reference_illuminant
        xyz = self._xyz_under(working_space, ill, method)
        return Luv.from_array(E.xyz_to_luv(xyz, ill))

    def lch_uv(self,
               working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
               illuminant: Optional[Illuminant] = None,
               method: Optional[ChromaticAdaptationMethod] = None) -> LchUV:
        if isinstance(self.value, LchUV):
            return self.value
        luv = self.luv(working_space, illuminant, method)
        return LchUV.from_array(E.luv_to_lch_uv(luv.as_array()))

    # --- Display helpers ---

    def as_rgb_triplet_scaled(self) -> Tuple[int, int, int]:
        """sRGB channels floored and clamped to 0..255."""
        rgb = self.rgb()
        return tuple(  # type: ignore[return-value]
            min(255, max(0, math.floor(v))) for v in (rgb.r_scaled, rgb.g_scaled, rgb.b_scaled)
        )

    def as_hex(self) -> str:
        r, g, b = self.as_rgb_triplet_scaled()
        return f"#{r:02x}{g:02x}{b:02x}"

    def as_css_rgb(self) -> str:
        r, g, b = self.as_rgb_triplet_scaled()
        return f"rgb({r},{g},{b})"

    def as_css_hsl(self, degree_symbol: bool = True) -> str:
        hsl = self.hsl()
        h, s, l = (max(0, int(v)) for v in (hsl.h_scaled, hsl.s_scaled, hsl.l_scaled))
        degree = "°" if degree_symbol else ""
        return f"hsl({h}{degree},{s}%,{l}%)"

    def intensity(self) -> float:
        """Perceived brightness, weighted towards green."""
        rgb = self.rgb()
        return 0.215 * rgb.r + 0.7 * rgb.g + 0.085 * rgb.b

    def contrast(self) -> "Color":
        """Black or white, whichever reads better on top of this color."""
        return Color.black() if self.intensity() > 0.5 else Color.white()

    # --- HSV offsets (used by harmonies) ---

    def with_hue_offset(self, offset: float) -> "Color":
        """Rotates the HSV hue by *offset* turns, wrapping into [0, 1)."""
        hsv = self.hsv()
        return Color(Hsv((hsv.h + offset) % 1.0, hsv.s, hsv.v))

    def with_saturation_offset(self, offset: float) -> "Color":
        """Shifts HSV saturation by *offset*, clamped to [0, 1]."""
        hsv = self.hsv()
        return Color(Hsv(hsv.h, min(1.0, max(0.0, hsv.s + offset)), hsv.v))


# =============================================================================
# 3. CONVERT
# =============================================================================

class Representation(enum.Enum):
    """Targets accepted by ``convert``."""

    RGB = "rgb"
    CMYK = "cmyk"
    HSV = "hsv"
    HSL = "hsl"
    XYZ = "xyz"
    XYY = "xyy"
    LAB = "lab"
    LCH_AB = "lch_ab"
    LUV = "luv"
    LCH_UV = "lch_uv"


def convert(color: Union[Color, ColorValue],
            target: Representation,
            working_space: RgbWorkingSpace = RgbWorkingSpace.SRGB,
            illuminant: Optional[Illuminant] = None,
            adaptation_method: Optional[ChromaticAdaptationMethod] = None,
            ) -> Union[ColorValue, XyY, Lab, LchAB]:
    """
    Converts *color* into the *target* representation.

    Total over its domain: degenerate inputs produce zero channels, never
    NaN and never an exception.

    Args:
        color: A ``Color`` or a bare storable value (``Rgb``, ``Hsl``, ...).
        target: Representation to produce.
        working_space: RGB working space; XYZ is relative to its white.
        illuminant: Reference white for Lab/Luv; defaults to the working
            space's own.
        adaptation_method: If given, XYZ is adapted from the working-space
            white to *illuminant* before Lab/Luv.
    """
    if not isinstance(color, Color):
        color = Color(color)
    accessor = getattr(color, target.value)
    return accessor(working_space, illuminant, adaptation_method)
