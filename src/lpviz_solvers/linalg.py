"""
Dense linear-algebra helpers shared by the engines.

numpy arrays are the matrix and vector type throughout; this module only adds
the pieces numpy does not express directly: an LU solve that reports
numerically singular systems as ``SingularSystemError`` instead of returning
garbage, the non-negative projection used by PDHG, and the fraction-to-boundary
ratio test used by the interior point method.
"""

from __future__ import annotations

import numpy as np
from scipy.linalg import lu_factor, lu_solve

from .errors import DimensionMismatchError, SingularSystemError

# Relative pivot threshold: |U_ii| <= PIVOT_TOLERANCE * max|U_jj| counts as zero.
PIVOT_TOLERANCE = 8.0 * np.finfo(float).eps


class LUFactorization:
    """LU factors of a square matrix, reusable for ``K x = r`` and ``K^T x = r``."""

    def __init__(self, lu: np.ndarray, piv: np.ndarray) -> None:
        self._lu = lu
        self._piv = piv
        self.size = lu.shape[0]

    def _check_rhs(self, rhs: np.ndarray) -> np.ndarray:
        rhs = np.asarray(rhs, dtype=float)
        if rhs.shape[0] != self.size:
            raise DimensionMismatchError(
                f"Right-hand side has {rhs.shape[0]} rows, system has {self.size}."
            )
        return rhs

    def solve(self, rhs: np.ndarray) -> np.ndarray:
        return lu_solve((self._lu, self._piv), self._check_rhs(rhs), check_finite=False)

    def solve_transpose(self, rhs: np.ndarray) -> np.ndarray:
        return lu_solve((self._lu, self._piv), self._check_rhs(rhs), trans=1, check_finite=False)


def factorize(matrix: np.ndarray) -> LUFactorization:
    """Factor ``matrix`` with partial pivoting, rejecting singular systems."""

    K = np.asarray(matrix, dtype=float)
    if K.ndim != 2 or K.shape[0] != K.shape[1]:
        raise DimensionMismatchError(f"Expected a square matrix, got shape {K.shape}.")
    if K.shape[0] == 0:
        raise DimensionMismatchError("Cannot factor an empty matrix.")
    if not np.all(np.isfinite(K)):
        raise SingularSystemError("Matrix contains non-finite entries.")

    lu, piv = lu_factor(K, check_finite=False)
    pivots = np.abs(np.diag(lu))
    largest = float(pivots.max())
    if largest == 0.0 or float(pivots.min()) <= PIVOT_TOLERANCE * largest:
        raise SingularSystemError(
            f"Matrix is numerically singular (smallest pivot {pivots.min():.3e}, "
            f"largest {largest:.3e})."
        )
    return LUFactorization(lu, piv)


def solve(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    return factorize(matrix).solve(rhs)


def project_nonnegative(vec: np.ndarray) -> np.ndarray:
    return np.maximum(vec, 0.0)


def max_step(vec: np.ndarray, direction: np.ndarray) -> float:
    """Largest ``alpha`` in [0, 1] keeping ``vec + alpha * direction >= 0``."""

    decreasing = direction < 0
    if not np.any(decreasing):
        return 1.0
    ratios = -vec[decreasing] / direction[decreasing]
    return float(min(1.0, ratios.min()))
