# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Reference Data
==============
Standard illuminants, RGB working spaces and chromatic adaptation methods.

Everything here is an immutable lookup table.  Derived quantities (the
RGB <-> XYZ matrices of a working space, composite adaptation matrices) are
computed on first use and memoised with ``functools.lru_cache``; the cached
``Matrix3`` objects are read-only, so sharing them between threads is safe.

Working-space matrix derivation (Lindbloom):

    Xi = xi / yi,   Yi = 1,   Zi = (1 - xi - yi) / yi      for i in r, g, b

    [Sr Sg Sb]^T = [Xr Xg Xb; Yr Yg Yb; Zr Zg Zb]^-1 . [Xw Yw Zw]^T

    M = [Sr Xr  Sg Xg  Sb Xb;  Sr Yr  Sg Yg  Sb Yb;  Sr Zr  Sg Zg  Sb Zb]

References:
    - CIE 15:2004 "Colorimetry"
    - IEC 61966-2-1:1999 (sRGB Standard)
    - B. Lindbloom, "RGB/XYZ Matrices" and "Chromatic Adaptation"
"""

from __future__ import annotations

import enum
import functools
import logging
from typing import Final, Tuple

from tincture_matrix import Matrix1x3, Matrix3

__all__ = [
    "CIE_E",
    "CIE_K",
    "Illuminant",
    "Companding",
    "RgbWorkingSpace",
    "ChromaticAdaptationMethod",
    "adaptation_matrix",
]

logger = logging.getLogger(__name__)

# --- Exact Rational CIE Constants ---
# Threshold between the cube-root and linear segments of the Lab/Luv
# lightness function, and the slope of the linear segment.
CIE_E: Final[float] = 216.0 / 24389.0   # ~0.008856
CIE_K: Final[float] = 24389.0 / 27.0    # ~903.296


# =============================================================================
# 1. ILLUMINANTS
# =============================================================================

class Illuminant(enum.Enum):
    """CIE standard illuminants, 2 degree observer, normalised to Y = 1."""

    A   = (1.09850, 1.0, 0.35585)
    B   = (0.99072, 1.0, 0.85223)
    C   = (0.98074, 1.0, 1.18232)
    D50 = (0.96422, 1.0, 0.82521)
    D55 = (0.95682, 1.0, 0.92149)
    D65 = (0.95047, 1.0, 1.08883)
    D75 = (0.94972, 1.0, 1.22638)
    E   = (1.00000, 1.0, 1.00000)
    F2  = (0.99186, 1.0, 0.67393)
    F7  = (0.95041, 1.0, 1.08747)
    F11 = (1.00962, 1.0, 0.64350)

    @property
    def xyz(self) -> Matrix1x3:
        """Tristimulus values of the white point."""
        return _illuminant_xyz(self)

    @property
    def reference_u(self) -> float:
        """CIE 1976 u' chromaticity of the white point."""
        x, y, z = self.value
        return 4.0 * x / (x + 15.0 * y + 3.0 * z)

    @property
    def reference_v(self) -> float:
        """CIE 1976 v' chromaticity of the white point."""
        x, y, z = self.value
        return 9.0 * y / (x + 15.0 * y + 3.0 * z)

    @property
    def label(self) -> str:
        return self.name


@functools.lru_cache(maxsize=None)
def _illuminant_xyz(illuminant: Illuminant) -> Matrix1x3:
    return Matrix1x3(illuminant.value)


# =============================================================================
# 2. RGB WORKING SPACES
# =============================================================================

class Companding(enum.Enum):
    """Transfer function between linear light and stored RGB values."""

    GAMMA = "gamma"
    SRGB = "srgb"
    LSTAR = "lstar"


Primaries = Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float]]


class RgbWorkingSpace(enum.Enum):
    """
    Named RGB working spaces.

    Each member carries ``(label, illuminant, companding, gamma, primaries)``
    where *primaries* are the (x, y) chromaticities of red, green and blue.
    """

    SRGB       = ("sRGB",            Illuminant.D65, Companding.SRGB,  2.2,
                  ((0.6400, 0.3300), (0.3000, 0.6000), (0.1500, 0.0600)))
    ADOBE      = ("Adobe RGB",       Illuminant.D65, Companding.GAMMA, 2.2,
                  ((0.6400, 0.3300), (0.2100, 0.7100), (0.1500, 0.0600)))
    APPLE      = ("Apple RGB",       Illuminant.D65, Companding.GAMMA, 1.8,
                  ((0.6250, 0.3400), (0.2800, 0.5950), (0.1550, 0.0700)))
    CIE        = ("CIE RGB",         Illuminant.E,   Companding.GAMMA, 2.2,
                  ((0.7350, 0.2650), (0.2740, 0.7170), (0.1670, 0.0090)))
    ECI        = ("ECI RGB v2",      Illuminant.D50, Companding.LSTAR, 3.0,
                  ((0.6700, 0.3300), (0.2100, 0.7100), (0.1400, 0.0800)))
    NTSC       = ("NTSC RGB",        Illuminant.C,   Companding.GAMMA, 2.2,
                  ((0.6700, 0.3300), (0.2100, 0.7100), (0.1400, 0.0800)))
    PAL        = ("PAL/SECAM RGB",   Illuminant.D65, Companding.GAMMA, 2.2,
                  ((0.6400, 0.3300), (0.2900, 0.6000), (0.1500, 0.0600)))
    PROPHOTO   = ("ProPhoto RGB",    Illuminant.D50, Companding.GAMMA, 1.8,
                  ((0.7347, 0.2653), (0.1596, 0.8404), (0.0366, 0.0001)))
    WIDE_GAMUT = ("Wide Gamut RGB",  Illuminant.D50, Companding.GAMMA, 2.2,
                  ((0.7350, 0.2650), (0.1150, 0.8260), (0.1570, 0.0180)))

    def __init__(self, label: str, illuminant: Illuminant, companding: Companding,
                 gamma: float, primaries: Primaries) -> None:
        self.label = label
        self.reference_illuminant = illuminant
        self.companding = companding
        self.gamma = gamma
        self.primaries = primaries

    @property
    def primaries_xyY(self) -> Tuple[Tuple[float, float, float], ...]:
        """Reference primaries as xyY triples (Y = 1)."""
        return tuple((x, y, 1.0) for x, y in self.primaries)

    @property
    def rgb_matrix(self) -> Matrix3:
        """Linear RGB -> XYZ matrix, relative to ``reference_illuminant``."""
        return _rgb_to_xyz_matrix(self)

    @property
    def inverse_rgb_matrix(self) -> Matrix3:
        """XYZ -> linear RGB matrix."""
        return _xyz_to_rgb_matrix(self)


@functools.lru_cache(maxsize=None)
def _rgb_to_xyz_matrix(space: RgbWorkingSpace) -> Matrix3:
    columns = [
        (x / y, 1.0, (1.0 - x - y) / y)
        for x, y in space.primaries
    ]
    primaries = Matrix3.from_columns(columns)
    # inverse() raises SingularMatrixError for degenerate primaries.
    scales = primaries.inverse() @ space.reference_illuminant.xyz
    matrix = primaries.scale_columns(scales)
    logger.debug("derived RGB->XYZ matrix for %s: %r", space.label, matrix)
    return matrix


@functools.lru_cache(maxsize=None)
def _xyz_to_rgb_matrix(space: RgbWorkingSpace) -> Matrix3:
    return _rgb_to_xyz_matrix(space).inverse()


# =============================================================================
# 3. CHROMATIC ADAPTATION
# =============================================================================

class ChromaticAdaptationMethod(enum.Enum):
    """Cone-response domains for von Kries style white point adaptation."""

    BRADFORD = ("Bradford", (
        ( 0.8951000,  0.2664000, -0.1614000),
        (-0.7502000,  1.7135000,  0.0367000),
        ( 0.0389000, -0.0685000,  1.0296000),
    ))
    VON_KRIES = ("Von Kries", (
        ( 0.4002400,  0.7076000, -0.0808100),
        (-0.2263000,  1.1653200,  0.0457000),
        ( 0.0000000,  0.0000000,  0.9182200),
    ))
    XYZ_SCALING = ("XYZ Scaling", (
        (1.0, 0.0, 0.0),
        (0.0, 1.0, 0.0),
        (0.0, 0.0, 1.0),
    ))

    def __init__(self, label: str, rows: Tuple[Tuple[float, float, float], ...]) -> None:
        self.label = label
        self.rows = rows

    @property
    def matrix(self) -> Matrix3:
        """Cone response matrix A (XYZ -> rho gamma beta)."""
        return _cone_matrix(self)


@functools.lru_cache(maxsize=None)
def _cone_matrix(method: ChromaticAdaptationMethod) -> Matrix3:
    return Matrix3(method.rows)


@functools.lru_cache(maxsize=64)
def adaptation_matrix(method: ChromaticAdaptationMethod,
                      source: Illuminant,
                      destination: Illuminant) -> Matrix3:
    """
    Composite adaptation matrix ``A^-1 . diag(rho_dst / rho_src) . A``.

    Operates on XYZ column vectors.  Identity when *source* equals
    *destination*.
    """
    if source is destination:
        return Matrix3.identity()
    cone = method.matrix
    src_rho = cone @ source.xyz
    dst_rho = cone @ destination.xyz
    gains = Matrix3.diagonal(dst_rho / src_rho)
    return cone.inverse() @ gains @ cone
