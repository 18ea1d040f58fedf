# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Unified Color Engine
====================
JIT-compiled conversions between RGB, CMYK, HSV, HSL, CIE XYZ, xyY, CIE Lab,
CIE Luv and their polar LCh forms, with CIE XYZ as the hub space.

Every public transform accepts a single sample of shape ``(C,)`` or a batch of
shape ``(N, C)`` and returns the same rank.  ``C`` is 3 for every space except
CMYK, which carries 4 channels.

Failure semantics:
    Conversions are total.  Degenerate inputs (black in CMYK, zero saturation
    in HSV/HSL, zero luminance in xyY/Luv) are handled by explicit branches in
    the kernels, and any NaN, infinite or subnormal value still left in an
    output is flushed to 0.0 before it is returned.  Callers never see a
    non-finite channel.

Working-space context:
    RGB <-> XYZ uses the matrix and companding of an ``RgbWorkingSpace``; XYZ
    is relative to that space's reference illuminant.  Lab and Luv are
    computed relative to an explicit ``Illuminant``.  When an adaptation
    method is supplied, XYZ is first adapted from the working-space white to
    that illuminant.

References:
    - CIE 15:2004 "Colorimetry"
    - IEC 61966-2-1:1999 (sRGB Standard)
    - B. Lindbloom, "Useful Color Equations"
"""

from __future__ import annotations

import functools
import math
from typing import Any, Callable, Final, Optional

import numpy as np
from numba import njit

from tincture_matrix import ArrayFloat
from tincture_reference import (
    CIE_E,
    CIE_K,
    ChromaticAdaptationMethod,
    Companding,
    Illuminant,
    RgbWorkingSpace,
    adaptation_matrix,
)

__all__ = [
    "ArrayFloat",
    "CIE_E",
    "CIE_K",
    "FLOAT_MIN_NORMAL",
    "handle_shapes",
    "flush_invalid",
    "ColorSpaceEngine",
]

# Smallest positive normal float64; anything closer to zero is subnormal.
FLOAT_MIN_NORMAL: Final[float] = float(np.finfo(np.float64).tiny)

# k = 1 - max(r, g, b) is treated as pure black within this distance of 1.
_BLACK_EPSILON: Final[float] = 1e-9

# L* companding: threshold of the inverse, in companded units.
_LSTAR_INVERSE_THRESHOLD: Final[float] = 0.08

# L > K * E selects the cube branch of the inverse lightness function.
_KE: Final[float] = CIE_K * CIE_E


# =============================================================================
# 1. ROBUST DECORATORS
# =============================================================================

def handle_shapes(func: Optional[Callable[..., ArrayFloat]] = None, *,
                  channels: int = 3) -> Any:
    """
    Decorator to normalize inputs to (N, channels) float64 and restore rank.

    Usable bare (``@handle_shapes``) or with a channel count
    (``@handle_shapes(channels=4)``).

    Returns:
        The wrapped function with shape handling.
        - If input is (C,), returns the first row of the result
        - If input is (N, C), returns (N, K)
    """
    def decorate(inner: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
        @functools.wraps(inner)
        def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> ArrayFloat:
            arr = np.asarray(arr, dtype=np.float64)
            # Always a fresh writable C-contiguous copy; inputs may be read-only views.
            arr_in = np.array(np.atleast_2d(arr), dtype=np.float64, order="C")

            if arr_in.ndim != 2 or arr_in.shape[-1] != channels:
                raise ValueError(
                    f"Expected shape ({channels},) or (N, {channels}), got {arr.shape}"
                )

            res = inner(arr_in, *args, **kwargs)

            if arr.ndim == 1:
                return res[0]
            return res
        return wrapper

    if func is not None:
        return decorate(func)
    return decorate


# =============================================================================
# 2. LOW-LEVEL MATH KERNELS (Numba Optimized)
# =============================================================================
# NOTE: fastmath is deliberately off.  The flush kernel relies on NaN and
# infinity comparisons, which fastmath is allowed to fold away.

@njit(cache=True)
def _flush_invalid(arr: ArrayFloat) -> ArrayFloat:
    """Replaces NaN, +/-inf and subnormal values with 0.0."""
    out = np.empty_like(arr)
    src = arr.ravel()
    dst = out.ravel()
    for i in range(arr.size):
        v = src[i]
        if math.isnan(v) or math.isinf(v) or (v != 0.0 and abs(v) < FLOAT_MIN_NORMAL):
            dst[i] = 0.0
        else:
            dst[i] = v
    return out


@njit(cache=True)
def _gamma_compand(linear: ArrayFloat, gamma: float) -> ArrayFloat:
    """Sign-preserving ``v ** (1 / gamma)``."""
    out = np.empty_like(linear)
    src = linear.ravel()
    dst = out.ravel()
    inv = 1.0 / gamma
    for i in range(linear.size):
        v = src[i]
        if v < 0.0:
            dst[i] = -((-v) ** inv)
        else:
            dst[i] = v ** inv
    return out


@njit(cache=True)
def _gamma_expand(companded: ArrayFloat, gamma: float) -> ArrayFloat:
    """Sign-preserving ``v ** gamma``."""
    out = np.empty_like(companded)
    src = companded.ravel()
    dst = out.ravel()
    for i in range(companded.size):
        v = src[i]
        if v < 0.0:
            dst[i] = -((-v) ** gamma)
        else:
            dst[i] = v ** gamma
    return out


@njit(cache=True)
def _srgb_compand(linear: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB OETF (Gamma Correction).

    Standard: IEC 61966-2-1
    """
    out = np.empty_like(linear)
    src = linear.ravel()
    dst = out.ravel()
    for i in range(linear.size):
        v = src[i]
        if v <= 0.0031308:
            dst[i] = 12.92 * v
        else:
            dst[i] = 1.055 * (v ** (1.0 / 2.4)) - 0.055
    return out


@njit(cache=True)
def _srgb_expand(companded: ArrayFloat) -> ArrayFloat:
    """
    Applies sRGB EOTF (Inverse Gamma).

    Standard: IEC 61966-2-1
    """
    out = np.empty_like(companded)
    src = companded.ravel()
    dst = out.ravel()
    for i in range(companded.size):
        v = src[i]
        if v <= 0.04045:
            dst[i] = v / 12.92
        else:
            dst[i] = ((v + 0.055) / 1.055) ** 2.4
    return out


@njit(cache=True)
def _lstar_compand(linear: ArrayFloat) -> ArrayFloat:
    """L* companding (ECI RGB v2)."""
    out = np.empty_like(linear)
    src = linear.ravel()
    dst = out.ravel()
    for i in range(linear.size):
        v = src[i]
        if v <= CIE_E:
            dst[i] = v * CIE_K / 100.0
        else:
            dst[i] = 1.16 * v ** (1.0 / 3.0) - 0.16
    return out


@njit(cache=True)
def _lstar_expand(companded: ArrayFloat) -> ArrayFloat:
    out = np.empty_like(companded)
    src = companded.ravel()
    dst = out.ravel()
    for i in range(companded.size):
        v = src[i]
        if v <= _LSTAR_INVERSE_THRESHOLD:
            dst[i] = 100.0 * v / CIE_K
        else:
            dst[i] = ((v + 0.16) / 1.16) ** 3.0
    return out


@njit(cache=True)
def _lab_f(t: ArrayFloat) -> ArrayFloat:
    """
    Non-linear transfer function f(t) for CIELAB.

    Cube root above CIE_E, linear slope below it to avoid the infinite slope
    at black.
    """
    out = np.empty_like(t)
    src = t.ravel()
    dst = out.ravel()
    for i in range(t.size):
        v = src[i]
        if v > CIE_E:
            dst[i] = v ** (1.0 / 3.0)
        else:
            dst[i] = (CIE_K * v + 16.0) / 116.0
    return out


@njit(cache=True)
def _xyz_to_lab_kernel(xyz: ArrayFloat, xn: float, yn: float, zn: float) -> ArrayFloat:
    n = xyz.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    ref = np.array([xn, yn, zn])
    for i in range(n):
        f = _lab_f(xyz[i] / ref)
        out[i, 0] = 116.0 * f[1] - 16.0
        out[i, 1] = 500.0 * (f[0] - f[1])
        out[i, 2] = 200.0 * (f[1] - f[2])
    return out


@njit(cache=True)
def _lab_to_xyz_kernel(lab: ArrayFloat, xn: float, yn: float, zn: float) -> ArrayFloat:
    n = lab.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        L = lab[i, 0]
        fy = (L + 16.0) / 116.0
        fx = lab[i, 1] / 500.0 + fy
        fz = fy - lab[i, 2] / 200.0

        fx3 = fx * fx * fx
        fz3 = fz * fz * fz
        xr = fx3 if fx3 > CIE_E else (116.0 * fx - 16.0) / CIE_K
        yr = fy * fy * fy if L > _KE else L / CIE_K
        zr = fz3 if fz3 > CIE_E else (116.0 * fz - 16.0) / CIE_K

        out[i, 0] = xr * xn
        out[i, 1] = yr * yn
        out[i, 2] = zr * zn
    return out


@njit(cache=True)
def _xyz_to_luv_kernel(xyz: ArrayFloat, yn: float, un: float, vn: float) -> ArrayFloat:
    n = xyz.shape[0]
    out = np.zeros((n, 3), dtype=np.float64)
    for i in range(n):
        x = xyz[i, 0]
        y = xyz[i, 1]
        z = xyz[i, 2]
        yr = y / yn
        if yr > CIE_E:
            L = 116.0 * yr ** (1.0 / 3.0) - 16.0
        else:
            L = CIE_K * yr
        out[i, 0] = L

        denom = x + 15.0 * y + 3.0 * z
        if denom == 0.0:
            continue
        u_prime = 4.0 * x / denom
        v_prime = 9.0 * y / denom
        out[i, 1] = 13.0 * L * (u_prime - un)
        out[i, 2] = 13.0 * L * (v_prime - vn)
    return out


@njit(cache=True)
def _luv_to_xyz_kernel(luv: ArrayFloat, yn: float, un: float, vn: float) -> ArrayFloat:
    n = luv.shape[0]
    out = np.zeros((n, 3), dtype=np.float64)
    for i in range(n):
        L = luv[i, 0]
        if L == 0.0:
            continue
        if L > _KE:
            fy = (L + 16.0) / 116.0
            y = fy * fy * fy * yn
        else:
            y = L / CIE_K * yn

        u_prime = luv[i, 1] / (13.0 * L) + un
        v_prime = luv[i, 2] / (13.0 * L) + vn
        if v_prime == 0.0:
            continue
        out[i, 0] = y * 9.0 * u_prime / (4.0 * v_prime)
        out[i, 1] = y
        out[i, 2] = y * (12.0 - 3.0 * u_prime - 20.0 * v_prime) / (4.0 * v_prime)
    return out


@njit(cache=True)
def _xyz_to_xyY_kernel(xyz: ArrayFloat) -> ArrayFloat:
    n = xyz.shape[0]
    out = np.zeros((n, 3), dtype=np.float64)
    for i in range(n):
        total = xyz[i, 0] + xyz[i, 1] + xyz[i, 2]
        out[i, 2] = xyz[i, 1]
        # Black has no chromaticity; it stays (0, 0, Y).
        if total != 0.0:
            out[i, 0] = xyz[i, 0] / total
            out[i, 1] = xyz[i, 1] / total
    return out


@njit(cache=True)
def _xyY_to_xyz_kernel(xyY: ArrayFloat) -> ArrayFloat:
    n = xyY.shape[0]
    out = np.zeros((n, 3), dtype=np.float64)
    for i in range(n):
        x = xyY[i, 0]
        y = xyY[i, 1]
        Y = xyY[i, 2]
        if y == 0.0:
            continue
        out[i, 0] = x * Y / y
        out[i, 1] = Y
        out[i, 2] = (1.0 - x - y) * Y / y
    return out


@njit(cache=True)
def _to_polar_kernel(cart: ArrayFloat) -> ArrayFloat:
    """(L, a, b) -> (L, C, H) with H in degrees, [0, 360)."""
    n = cart.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        a = cart[i, 1]
        b = cart[i, 2]
        h = math.degrees(math.atan2(b, a))
        if h < 0.0:
            h += 360.0
            # -tiny + 360 rounds to 360.0
            if h >= 360.0:
                h -= 360.0
        out[i, 0] = cart[i, 0]
        out[i, 1] = math.hypot(a, b)
        out[i, 2] = h
    return out


@njit(cache=True)
def _from_polar_kernel(polar: ArrayFloat) -> ArrayFloat:
    n = polar.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        c = polar[i, 1]
        h = math.radians(polar[i, 2])
        out[i, 0] = polar[i, 0]
        out[i, 1] = c * math.cos(h)
        out[i, 2] = c * math.sin(h)
    return out


@njit(cache=True)
def _rgb_to_hsv_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """Hue in turns [0, 1), saturation and value in [0, 1]."""
    n = rgb.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        r = rgb[i, 0]
        g = rgb[i, 1]
        b = rgb[i, 2]
        hi = max(r, max(g, b))
        lo = min(r, min(g, b))
        delta = hi - lo

        if delta == 0.0:
            h = 0.0
        elif hi == r:
            h = (g - b) / (delta * 6.0)
        elif hi == g:
            h = (b - r) / (delta * 6.0) + 1.0 / 3.0
        else:
            h = (r - g) / (delta * 6.0) + 2.0 / 3.0
        h = h + 1.0
        h = h - math.floor(h)

        out[i, 0] = h
        out[i, 1] = 0.0 if hi == 0.0 else 1.0 - lo / hi
        out[i, 2] = hi
    return out


@njit(cache=True)
def _hsv_to_rgb_kernel(hsv: ArrayFloat) -> ArrayFloat:
    """Sector method; hue is wrapped into [0, 1) first."""
    n = hsv.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        h = hsv[i, 0]
        h = (h - math.floor(h)) * 6.0
        s = hsv[i, 1]
        v = hsv[i, 2]
        sector = math.floor(h)
        f = h - sector
        p = v * (1.0 - s)
        q = v * (1.0 - f * s)
        t = v * (1.0 - (1.0 - f) * s)

        k = int(sector) % 6
        if k == 0:
            r, g, b = v, t, p
        elif k == 1:
            r, g, b = q, v, p
        elif k == 2:
            r, g, b = p, v, t
        elif k == 3:
            r, g, b = p, q, v
        elif k == 4:
            r, g, b = t, p, v
        else:
            r, g, b = v, p, q
        out[i, 0] = r
        out[i, 1] = g
        out[i, 2] = b
    return out


@njit(cache=True)
def _hsv_to_hsl_kernel(hsv: ArrayFloat) -> ArrayFloat:
    n = hsv.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        s = hsv[i, 1]
        v = hsv[i, 2]
        l2 = (2.0 - s) * v
        ss = s * v
        divisor = l2 if l2 <= 1.0 else 2.0 - l2
        ss = ss / divisor if divisor != 0.0 else 0.0
        out[i, 0] = hsv[i, 0]
        out[i, 1] = ss
        out[i, 2] = l2 / 2.0
    return out


@njit(cache=True)
def _hsl_to_hsv_kernel(hsl: ArrayFloat) -> ArrayFloat:
    n = hsl.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        ss = hsl[i, 1]
        l2 = hsl[i, 2] * 2.0
        if l2 <= 1.0:
            ss *= l2
        else:
            ss *= 2.0 - l2
        total = l2 + ss
        out[i, 0] = hsl[i, 0]
        out[i, 1] = 2.0 * ss / total if total != 0.0 else 0.0
        out[i, 2] = total / 2.0
    return out


@njit(cache=True)
def _rgb_to_cmyk_kernel(rgb: ArrayFloat) -> ArrayFloat:
    n = rgb.shape[0]
    out = np.zeros((n, 4), dtype=np.float64)
    for i in range(n):
        r = rgb[i, 0]
        g = rgb[i, 1]
        b = rgb[i, 2]
        k = 1.0 - max(r, max(g, b))
        out[i, 3] = k
        if abs(k - 1.0) < _BLACK_EPSILON:
            continue
        scale = 1.0 - k
        out[i, 0] = (1.0 - r - k) / scale
        out[i, 1] = (1.0 - g - k) / scale
        out[i, 2] = (1.0 - b - k) / scale
    return out


@njit(cache=True)
def _cmyk_to_rgb_kernel(cmyk: ArrayFloat) -> ArrayFloat:
    n = cmyk.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        white = 1.0 - cmyk[i, 3]
        out[i, 0] = (1.0 - cmyk[i, 0]) * white
        out[i, 1] = (1.0 - cmyk[i, 1]) * white
        out[i, 2] = (1.0 - cmyk[i, 2]) * white
    return out


def flush_invalid(arr: ArrayFloat) -> ArrayFloat:
    """Public wrapper around the flush kernel for arrays of any shape."""
    return _flush_invalid(np.array(arr, dtype=np.float64, order="C"))


# =============================================================================
# 3. COLOR SPACE ENGINE
# =============================================================================

class ColorSpaceEngine:
    """Static utility class for unified color space transformations.

    Architecture Note:
        Core transforms provide both a public ``@handle_shapes`` decorated API
        and an internal ``_raw`` fast-path that assumes pre-validated (N, C)
        float64 input.  Pipelines (``rgb_to_lab`` and friends) chain the
        ``_raw`` variants and flush invalid values once, at the end.
    """

    # =====================================================================
    #  Internal _raw fast-path methods  (assume validated (N, C) float64)
    # =====================================================================

    @staticmethod
    def _compand_raw(linear: ArrayFloat, space: RgbWorkingSpace) -> ArrayFloat:
        if space.companding is Companding.SRGB:
            return _srgb_compand(linear)
        if space.companding is Companding.LSTAR:
            return _lstar_compand(linear)
        return _gamma_compand(linear, space.gamma)

    @staticmethod
    def _expand_raw(companded: ArrayFloat, space: RgbWorkingSpace) -> ArrayFloat:
        if space.companding is Companding.SRGB:
            return _srgb_expand(companded)
        if space.companding is Companding.LSTAR:
            return _lstar_expand(companded)
        return _gamma_expand(companded, space.gamma)

    @staticmethod
    def _rgb_to_xyz_raw(rgb: ArrayFloat, space: RgbWorkingSpace) -> ArrayFloat:
        linear = ColorSpaceEngine._expand_raw(rgb, space)
        return np.ascontiguousarray(linear @ space.rgb_matrix.array.T)

    @staticmethod
    def _xyz_to_rgb_raw(xyz: ArrayFloat, space: RgbWorkingSpace, clip: bool = False) -> ArrayFloat:
        linear = np.ascontiguousarray(xyz @ space.inverse_rgb_matrix.array.T)
        if clip:
            linear = np.clip(linear, 0.0, 1.0)
        return ColorSpaceEngine._compand_raw(linear, space)

    @staticmethod
    def _adapt_raw(xyz: ArrayFloat,
                   method: Optional[ChromaticAdaptationMethod],
                   source: Illuminant,
                   destination: Illuminant) -> ArrayFloat:
        if method is None or source is destination:
            return xyz
        matrix = adaptation_matrix(method, source, destination)
        return np.ascontiguousarray(xyz @ matrix.array.T)

    @staticmethod
    def _xyz_to_lab_raw(xyz: ArrayFloat, illuminant: Illuminant) -> ArrayFloat:
        xn, yn, zn = illuminant.value
        return _xyz_to_lab_kernel(xyz, xn, yn, zn)

    @staticmethod
    def _lab_to_xyz_raw(lab: ArrayFloat, illuminant: Illuminant) -> ArrayFloat:
        xn, yn, zn = illuminant.value
        return _lab_to_xyz_kernel(lab, xn, yn, zn)

    @staticmethod
    def _xyz_to_luv_raw(xyz: ArrayFloat, illuminant: Illuminant) -> ArrayFloat:
        return _xyz_to_luv_kernel(xyz, illuminant.value[1],
                                  illuminant.reference_u, illuminant.reference_v)

    @staticmethod
    def _luv_to_xyz_raw(luv: ArrayFloat, illuminant: Illuminant) -> ArrayFloat:
        return _luv_to_xyz_kernel(luv, illuminant.value[1],
                                  illuminant.reference_u, illuminant.reference_v)

    # =====================================================================
    #  Public API  (shape-safe wrappers)
    # =====================================================================

    # --- RGB <-> XYZ ---

    @staticmethod
    @handle_shapes
    def compand(linear: ArrayFloat, space: RgbWorkingSpace) -> ArrayFloat:
        """Applies the working space's transfer function to linear RGB."""
        return _flush_invalid(ColorSpaceEngine._compand_raw(linear, space))

    @staticmethod
    @handle_shapes
    def inverse_compand(companded: ArrayFloat, space: RgbWorkingSpace) -> ArrayFloat:
        """Removes the working space's transfer function."""
        return _flush_invalid(ColorSpaceEngine._expand_raw(companded, space))

    @staticmethod
    @handle_shapes
    def rgb_to_xyz(rgb: ArrayFloat, space: RgbWorkingSpace) -> ArrayFloat:
        """
        Converts companded RGB [0..1] to XYZ.

        Args:
            rgb: RGB data, shape (N, 3) or (3,).
            space: Working space providing companding and matrix.

        Returns:
            XYZ relative to ``space.reference_illuminant``.
        """
        return _flush_invalid(ColorSpaceEngine._rgb_to_xyz_raw(rgb, space))

    @staticmethod
    @handle_shapes
    def xyz_to_rgb(xyz: ArrayFloat, space: RgbWorkingSpace, clip: bool = False) -> ArrayFloat:
        """
        Converts XYZ to companded RGB.

        Args:
            xyz: XYZ relative to ``space.reference_illuminant``.
            space: Working space providing matrix and companding.
            clip: If True, clamps linear RGB to [0, 1] before companding.
                  Off by default so out-of-gamut values survive round-trips.
        """
        return _flush_invalid(ColorSpaceEngine._xyz_to_rgb_raw(xyz, space, clip=clip))

    # --- Chromatic adaptation ---

    @staticmethod
    @handle_shapes
    def adapt(xyz: ArrayFloat,
              method: ChromaticAdaptationMethod,
              source: Illuminant,
              destination: Illuminant) -> ArrayFloat:
        """
        Adapts XYZ from the *source* white to the *destination* white.

        ``XYZ' = A^-1 . diag(rho_dst / rho_src) . A . XYZ``
        """
        return _flush_invalid(
            ColorSpaceEngine._adapt_raw(xyz, method, source, destination)
        )

    # --- XYZ <-> xyY ---

    @staticmethod
    @handle_shapes
    def xyz_to_xyY(xyz: ArrayFloat) -> ArrayFloat:
        """
        Converts XYZ to xyY (chromaticity + luminance).

            x = X / (X+Y+Z)
            y = Y / (X+Y+Z)
            Y = Y

        Black (X+Y+Z = 0) maps to (0, 0, 0).
        """
        return _flush_invalid(_xyz_to_xyY_kernel(xyz))

    @staticmethod
    @handle_shapes
    def xyY_to_xyz(xyY: ArrayFloat) -> ArrayFloat:
        """Inverse of ``xyz_to_xyY``; y = 0 yields (0, 0, 0)."""
        return _flush_invalid(_xyY_to_xyz_kernel(xyY))

    # --- XYZ <-> Lab / Luv ---

    @staticmethod
    @handle_shapes
    def xyz_to_lab(xyz: ArrayFloat, illuminant: Illuminant = Illuminant.D65) -> ArrayFloat:
        """
        Converts XYZ to CIE 1976 L*a*b*.

            L = 116 f(Y/Yn) - 16
            a = 500 (f(X/Xn) - f(Y/Yn))
            b = 200 (f(Y/Yn) - f(Z/Zn))
        """
        return _flush_invalid(ColorSpaceEngine._xyz_to_lab_raw(xyz, illuminant))

    @staticmethod
    @handle_shapes
    def lab_to_xyz(lab: ArrayFloat, illuminant: Illuminant = Illuminant.D65) -> ArrayFloat:
        return _flush_invalid(ColorSpaceEngine._lab_to_xyz_raw(lab, illuminant))

    @staticmethod
    @handle_shapes
    def xyz_to_luv(xyz: ArrayFloat, illuminant: Illuminant = Illuminant.D65) -> ArrayFloat:
        """
        Converts XYZ to CIE 1976 L*u*v*.

            u = 13 L (u' - u'n),   v = 13 L (v' - v'n)

        with ``u'n, v'n`` taken from *illuminant*.
        """
        return _flush_invalid(ColorSpaceEngine._xyz_to_luv_raw(xyz, illuminant))

    @staticmethod
    @handle_shapes
    def luv_to_xyz(luv: ArrayFloat, illuminant: Illuminant = Illuminant.D65) -> ArrayFloat:
        return _flush_invalid(ColorSpaceEngine._luv_to_xyz_raw(luv, illuminant))

    # --- Cartesian <-> polar ---

    @staticmethod
    @handle_shapes
    def lab_to_lch_ab(lab: ArrayFloat) -> ArrayFloat:
        """(L, a, b) -> (L, C, H); H in degrees, normalised into [0, 360)."""
        return _flush_invalid(_to_polar_kernel(lab))

    @staticmethod
    @handle_shapes
    def lch_ab_to_lab(lch: ArrayFloat) -> ArrayFloat:
        return _flush_invalid(_from_polar_kernel(lch))

    @staticmethod
    @handle_shapes
    def luv_to_lch_uv(luv: ArrayFloat) -> ArrayFloat:
        """(L, u, v) -> (L, C, H); H in degrees, normalised into [0, 360)."""
        return _flush_invalid(_to_polar_kernel(luv))

    @staticmethod
    @handle_shapes
    def lch_uv_to_luv(lch: ArrayFloat) -> ArrayFloat:
        return _flush_invalid(_from_polar_kernel(lch))

    # --- Device-dependent spaces ---

    @staticmethod
    @handle_shapes
    def rgb_to_hsv(rgb: ArrayFloat) -> ArrayFloat:
        """RGB -> HSV, every channel in [0, 1]; hue is measured in turns."""
        return _flush_invalid(_rgb_to_hsv_kernel(rgb))

    @staticmethod
    @handle_shapes
    def hsv_to_rgb(hsv: ArrayFloat) -> ArrayFloat:
        return _flush_invalid(_hsv_to_rgb_kernel(hsv))

    @staticmethod
    @handle_shapes
    def hsv_to_hsl(hsv: ArrayFloat) -> ArrayFloat:
        return _flush_invalid(_hsv_to_hsl_kernel(hsv))

    @staticmethod
    @handle_shapes
    def hsl_to_hsv(hsl: ArrayFloat) -> ArrayFloat:
        return _flush_invalid(_hsl_to_hsv_kernel(hsl))

    @staticmethod
    @handle_shapes
    def rgb_to_hsl(rgb: ArrayFloat) -> ArrayFloat:
        return _flush_invalid(_hsv_to_hsl_kernel(_flush_invalid(_rgb_to_hsv_kernel(rgb))))

    @staticmethod
    @handle_shapes
    def hsl_to_rgb(hsl: ArrayFloat) -> ArrayFloat:
        return _flush_invalid(_hsv_to_rgb_kernel(_flush_invalid(_hsl_to_hsv_kernel(hsl))))

    @staticmethod
    @handle_shapes
    def rgb_to_cmyk(rgb: ArrayFloat) -> ArrayFloat:
        """
        RGB (N, 3) -> CMYK (N, 4).

        ``k = 1 - max(r, g, b)``; pure black yields ``c = m = y = 0, k = 1``.
        """
        return _flush_invalid(_rgb_to_cmyk_kernel(rgb))

    @staticmethod
    @handle_shapes(channels=4)
    def cmyk_to_rgb(cmyk: ArrayFloat) -> ArrayFloat:
        """CMYK (N, 4) -> RGB (N, 3): ``r = (1 - c)(1 - k)``."""
        return _flush_invalid(_cmyk_to_rgb_kernel(cmyk))

    # =====================================================================
    #  Convenience pipelines
    # =====================================================================

    @staticmethod
    @handle_shapes
    def rgb_to_lab(rgb: ArrayFloat,
                   space: RgbWorkingSpace,
                   illuminant: Illuminant,
                   method: Optional[ChromaticAdaptationMethod] = None) -> ArrayFloat:
        """Working-space RGB -> (optionally adapted) XYZ -> Lab."""
        E = ColorSpaceEngine
        xyz = E._rgb_to_xyz_raw(rgb, space)
        xyz = E._adapt_raw(xyz, method, space.reference_illuminant, illuminant)
        return _flush_invalid(E._xyz_to_lab_raw(xyz, illuminant))

    @staticmethod
    @handle_shapes
    def lab_to_rgb(lab: ArrayFloat,
                   space: RgbWorkingSpace,
                   illuminant: Illuminant,
                   method: Optional[ChromaticAdaptationMethod] = None) -> ArrayFloat:
        E = ColorSpaceEngine
        xyz = E._lab_to_xyz_raw(lab, illuminant)
        xyz = E._adapt_raw(xyz, method, illuminant, space.reference_illuminant)
        return _flush_invalid(E._xyz_to_rgb_raw(xyz, space))

    @staticmethod
    @handle_shapes
    def rgb_to_luv(rgb: ArrayFloat,
                   space: RgbWorkingSpace,
                   illuminant: Illuminant,
                   method: Optional[ChromaticAdaptationMethod] = None) -> ArrayFloat:
        """Working-space RGB -> (optionally adapted) XYZ -> Luv."""
        E = ColorSpaceEngine
        xyz = E._rgb_to_xyz_raw(rgb, space)
        xyz = E._adapt_raw(xyz, method, space.reference_illuminant, illuminant)
        return _flush_invalid(E._xyz_to_luv_raw(xyz, illuminant))

    @staticmethod
    @handle_shapes
    def luv_to_rgb(luv: ArrayFloat,
                   space: RgbWorkingSpace,
                   illuminant: Illuminant,
                   method: Optional[ChromaticAdaptationMethod] = None) -> ArrayFloat:
        E = ColorSpaceEngine
        xyz = E._luv_to_xyz_raw(luv, illuminant)
        xyz = E._adapt_raw(xyz, method, illuminant, space.reference_illuminant)
        return _flush_invalid(E._xyz_to_rgb_raw(xyz, space))
