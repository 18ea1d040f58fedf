# -*- coding: utf-8 -*-
"""
Tincture: Colorimetric conversion and template formatting for color pickers
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: Fixed-Size Linear Algebra

Two immutable value types back every matrix in the colour engine:

  Matrix3     3x3 float64 matrix (working-space and adaptation matrices)
  Matrix1x3   3-vector (white points, cone responses, single XYZ samples)

Determinant and inverse use the closed-form cofactor expansion rather than a
general LU solver, so results are bit-for-bit reproducible across platforms
and the "singular" condition is an explicit, testable branch:

    det(M) = m00 (m11 m22 - m12 m21)
           - m01 (m10 m22 - m12 m20)
           + m02 (m10 m21 - m11 m20)

    M^-1   = adj(M) / det(M)

A singular matrix means a reference table is malformed. ``inverse`` raises
``SingularMatrixError`` instead of returning a default.
"""

from __future__ import annotations

from typing import Final, Iterable, Iterator, Sequence, TypeAlias, Union

import numpy as np
import numpy.typing as npt
from numba import njit

from tincture_errors import SingularMatrixError

__all__ = [
    "ArrayFloat",
    "SINGULAR_EPSILON",
    "Matrix3",
    "Matrix1x3",
]

ArrayFloat: TypeAlias = npt.NDArray[np.floating]

# Determinants below this magnitude are treated as singular.
SINGULAR_EPSILON: Final[float] = 1e-12


# =============================================================================
# 1. KERNELS
# =============================================================================

@njit(cache=True)
def _det3(m: ArrayFloat) -> float:
    """Cofactor expansion along the first row."""
    return (
        m[0, 0] * (m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1])
        - m[0, 1] * (m[1, 0] * m[2, 2] - m[1, 2] * m[2, 0])
        + m[0, 2] * (m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0])
    )

@njit(cache=True)
def _adjugate3(m: ArrayFloat) -> ArrayFloat:
    """Transpose of the cofactor matrix."""
    adj = np.empty((3, 3), dtype=np.float64)
    adj[0, 0] = m[1, 1] * m[2, 2] - m[1, 2] * m[2, 1]
    adj[0, 1] = -(m[0, 1] * m[2, 2] - m[0, 2] * m[2, 1])
    adj[0, 2] = m[0, 1] * m[1, 2] - m[0, 2] * m[1, 1]
    adj[1, 0] = -(m[1, 0] * m[2, 2] - m[1, 2] * m[2, 0])
    adj[1, 1] = m[0, 0] * m[2, 2] - m[0, 2] * m[2, 0]
    adj[1, 2] = -(m[0, 0] * m[1, 2] - m[0, 2] * m[1, 0])
    adj[2, 0] = m[1, 0] * m[2, 1] - m[1, 1] * m[2, 0]
    adj[2, 1] = -(m[0, 0] * m[2, 1] - m[0, 1] * m[2, 0])
    adj[2, 2] = m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]
    return adj


def _frozen(values: Union[ArrayFloat, Sequence[float], Sequence[Sequence[float]]],
            shape: tuple[int, ...]) -> ArrayFloat:
    arr = np.array(values, dtype=np.float64)
    if arr.shape != shape:
        raise ValueError(f"Expected shape {shape}, got {arr.shape}")
    arr.setflags(write=False)
    return arr


# =============================================================================
# 2. VALUE TYPES
# =============================================================================

class Matrix1x3:
    """Immutable 3-vector."""

    __slots__ = ("_data",)

    def __init__(self, values: Union[ArrayFloat, Sequence[float]]) -> None:
        self._data = _frozen(values, (3,))

    @property
    def array(self) -> ArrayFloat:
        """Read-only float64 view, shape (3,)."""
        return self._data

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return (float(v) for v in self._data)

    def __len__(self) -> int:
        return 3

    def __mul__(self, other: Union["Matrix1x3", float]) -> "Matrix1x3":
        # Element-wise for vectors, scalar otherwise.
        if isinstance(other, Matrix1x3):
            return Matrix1x3(self._data * other._data)
        return Matrix1x3(self._data * float(other))

    __rmul__ = __mul__

    def __truediv__(self, other: "Matrix1x3") -> "Matrix1x3":
        return Matrix1x3(self._data / other._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix1x3):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash(self._data.tobytes())

    def isclose(self, other: "Matrix1x3", rtol: float = 1e-7, atol: float = 1e-9) -> bool:
        return bool(np.allclose(self._data, other._data, rtol=rtol, atol=atol))

    def __repr__(self) -> str:
        x, y, z = self
        return f"Matrix1x3([{x:.7g}, {y:.7g}, {z:.7g}])"


class Matrix3:
    """
    Immutable 3x3 matrix.

    Supports ``@`` against another ``Matrix3`` (matrix product) or a
    ``Matrix1x3`` (column-vector product), scalar ``*``, ``determinant``
    and ``inverse``.
    """

    __slots__ = ("_data",)

    def __init__(self, rows: Union[ArrayFloat, Sequence[Sequence[float]]]) -> None:
        self._data = _frozen(rows, (3, 3))

    @classmethod
    def identity(cls) -> "Matrix3":
        return cls(np.eye(3))

    @classmethod
    def diagonal(cls, values: Union[Matrix1x3, Iterable[float]]) -> "Matrix3":
        """Diagonal matrix with *values* on the main diagonal."""
        return cls(np.diag(list(values)))

    @classmethod
    def from_columns(cls, columns: Iterable[Union[Matrix1x3, Sequence[float]]]) -> "Matrix3":
        cols = [list(c) for c in columns]
        return cls(np.array(cols, dtype=np.float64).T)

    @property
    def array(self) -> ArrayFloat:
        """Read-only float64 view, shape (3, 3)."""
        return self._data

    def rows(self) -> tuple[Matrix1x3, Matrix1x3, Matrix1x3]:
        return (Matrix1x3(self._data[0]), Matrix1x3(self._data[1]), Matrix1x3(self._data[2]))

    def transpose(self) -> "Matrix3":
        return Matrix3(self._data.T)

    def determinant(self) -> float:
        return float(_det3(self._data))

    def inverse(self) -> "Matrix3":
        """
        Inverse via the adjugate.

        Raises:
            SingularMatrixError: If |det| < SINGULAR_EPSILON.
        """
        det = _det3(self._data)
        if not np.isfinite(det) or abs(det) < SINGULAR_EPSILON:
            raise SingularMatrixError(
                "matrix is singular and cannot be inverted",
                technical_message=f"det={det!r} for matrix {self!r}",
            )
        return Matrix3(_adjugate3(self._data) * (1.0 / det))

    def scale_columns(self, factors: Union[Matrix1x3, Sequence[float]]) -> "Matrix3":
        """Multiplies column j by ``factors[j]``."""
        return Matrix3(self._data * np.asarray(list(factors), dtype=np.float64)[np.newaxis, :])

    def __matmul__(self, other: Union["Matrix3", Matrix1x3]) -> Union["Matrix3", Matrix1x3]:
        if isinstance(other, Matrix3):
            return Matrix3(self._data @ other._data)
        if isinstance(other, Matrix1x3):
            return Matrix1x3(self._data @ other.array)
        return NotImplemented

    def __mul__(self, scalar: float) -> "Matrix3":
        return Matrix3(self._data * float(scalar))

    __rmul__ = __mul__

    def __getitem__(self, index: tuple[int, int]) -> float:
        return float(self._data[index])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix3):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash(self._data.tobytes())

    def isclose(self, other: "Matrix3", rtol: float = 1e-7, atol: float = 1e-9) -> bool:
        return bool(np.allclose(self._data, other._data, rtol=rtol, atol=atol))

    def __repr__(self) -> str:
        body = ", ".join(
            "[" + ", ".join(f"{v:.7g}" for v in row) + "]" for row in self._data
        )
        return f"Matrix3([{body}])"
