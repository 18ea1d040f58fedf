# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Exception hierarchy.

All engine exceptions inherit from ``TinctureError`` so callers can catch
every engine-specific failure in one place. Each concrete error also inherits
the builtin it refines (``ValueError``, ``ArithmeticError``) so generic
handlers keep working.

Conversion degeneracies (black in CMYK, zero saturation, NaN results) are
*not* errors; they are flushed to zero inside the engine.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "TinctureError",
    "FormatParseError",
    "SingularMatrixError",
    "SettingsError",
]


class TinctureError(Exception):
    """
    Base exception for all Tincture errors.

    Attributes:
        user_message: Human-friendly message for display.
        technical_message: Detailed message for logs.
    """

    def __init__(self, user_message: str, technical_message: Optional[str] = None) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message

    def __str__(self) -> str:
        return self.user_message


class FormatParseError(TinctureError, ValueError):
    """
    A color format template failed to compile.

    Attributes:
        template: The full template text.
        position: Zero-based offset of the offending character.
        reason: Short description without position information.
    """

    def __init__(self, template: str, position: int, reason: str) -> None:
        self.template = template
        self.position = position
        self.reason = reason
        pointer = " " * position + "^"
        super().__init__(
            f"failed to parse color format at position {position}: {reason}",
            technical_message=(
                f"failed to parse color format at position {position}: {reason}\n"
                f"  {template}\n  {pointer}"
            ),
        )


class SingularMatrixError(TinctureError, ArithmeticError):
    """A 3x3 matrix has no inverse (malformed reference constants)."""


class SettingsError(TinctureError, ValueError):
    """A settings value does not name a known option."""

    def __init__(self, key: str, value: object, choices: Optional[list[str]] = None) -> None:
        self.key = key
        self.value = value
        self.choices = choices or []
        hint = f" (expected one of: {', '.join(self.choices)})" if self.choices else ""
        super().__init__(f"invalid value {value!r} for setting '{key}'{hint}")
