from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

import numpy as np
from scipy.optimize import linprog

from .errors import DimensionMismatchError, InfeasibleError

Lines = Union[Sequence[Sequence[float]], Tuple[np.ndarray, np.ndarray]]


def lines_to_ab(lines: Lines) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split an inequality system into ``A`` and ``b`` for ``A x <= b``.

    ``lines`` is either a sequence of rows ``(a_1, ..., a_n, b_i)`` (the 2-D
    triple ``(A, B, C)`` reads ``A x + B y <= C``) or a pre-split pair
    ``(A_matrix, b_vector)``.
    """

    if _is_matrix_pair(lines):
        A = np.array(lines[0], dtype=float)
        b = np.array(lines[1], dtype=float).reshape(-1)
        if A.ndim != 2:
            raise DimensionMismatchError(f"Constraint matrix must be 2-D, got shape {A.shape}.")
        if A.shape[0] != b.shape[0]:
            raise DimensionMismatchError(
                f"Constraint matrix has {A.shape[0]} rows but b has {b.shape[0]} entries."
            )
        return A, b

    rows = [list(row) for row in lines]
    if not rows:
        return np.zeros((0, 0)), np.zeros(0)

    width = len(rows[0])
    for idx, row in enumerate(rows):
        if len(row) != width:
            raise DimensionMismatchError(
                f"Inequality {idx} has {len(row)} entries, expected {width}."
            )
    if width < 2:
        raise DimensionMismatchError("Each inequality needs at least one coefficient and a bound.")

    data = np.array(rows, dtype=float)
    return data[:, :-1].copy(), data[:, -1].copy()


def _is_matrix_pair(lines: Lines) -> bool:
    if not isinstance(lines, tuple) or len(lines) != 2:
        return False
    return np.ndim(lines[0]) == 2 and np.ndim(lines[1]) == 1


def objective_vector(objective: Sequence[float], n: int) -> np.ndarray:
    c = np.array(objective, dtype=float).reshape(-1)
    if c.shape[0] != n:
        raise DimensionMismatchError(
            f"Objective has {c.shape[0]} entries but the constraints have {n} variables."
        )
    return c


def load_problem(lines: Lines, objective: Sequence[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Validated ``(A, b, c)`` for ``max c^T x s.t. A x <= b``."""

    A, b = lines_to_ab(lines)
    if A.shape[0] == 0:
        raise DimensionMismatchError("At least one inequality is required.")
    c = objective_vector(objective, A.shape[1])
    return A, b, c


def split_standard_form(
    A: np.ndarray, b: np.ndarray, c: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Rewrite ``max c^T x s.t. A x <= b`` (x free) as
    ``min c_hat^T chi s.t. A_hat chi = b, chi >= 0`` with
    ``chi = [x_plus; x_minus; slack]`` so that ``x = x_plus - x_minus``.
    """

    m = A.shape[0]
    A_hat = np.hstack([A, -A, np.eye(m)])
    c_hat = np.concatenate([-c, c, np.zeros(m)])
    return A_hat, b.copy(), c_hat


def unsplit(chi: np.ndarray, n: int) -> np.ndarray:
    return chi[:n] - chi[n : 2 * n]


def centroid(vertices: Sequence[Sequence[float]], n: Optional[int] = None) -> np.ndarray:
    points = np.array(vertices, dtype=float)
    if points.size == 0:
        raise DimensionMismatchError("Cannot compute the centroid of an empty vertex list.")
    if points.ndim != 2:
        raise DimensionMismatchError(f"Vertices must form a 2-D array, got shape {points.shape}.")
    if n is not None and points.shape[1] != n:
        raise DimensionMismatchError(
            f"Vertices have dimension {points.shape[1]} but the problem has {n} variables."
        )
    return points.mean(axis=0)


def chebyshev_center(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Centre of the largest ball inside ``A x <= b``.

    Solves ``max r s.t. a_i x + r ||a_i|| <= b_i`` with HiGHS; the result is
    strictly interior whenever the region has non-empty interior.
    """

    m, n = A.shape
    norms = np.linalg.norm(A, axis=1).reshape(-1, 1)
    A_ub = np.hstack([A, norms])
    cost = np.zeros(n + 1)
    cost[-1] = -1.0
    bounds = [(None, None)] * n + [(0.0, None)]
    res = linprog(cost, A_ub=A_ub, b_ub=b, bounds=bounds, method="highs")

    if res.status == 3:
        # Unbounded radius: the region contains arbitrarily large balls.
        # Cap the radius so an interior point is still returned.
        capped = linprog(
            cost,
            A_ub=A_ub,
            b_ub=b,
            bounds=[(None, None)] * n + [(0.0, 1.0)],
            method="highs",
        )
        res = capped
    if not res.success or res.x is None:
        raise InfeasibleError(f"Could not find an interior point: {res.message}")
    radius = float(res.x[-1])
    if radius <= 1e-12:
        raise InfeasibleError("Feasible region has an empty interior.")
    return np.asarray(res.x[:n], dtype=float)


def filter_weighted(
    A: np.ndarray, b: np.ndarray, weights: Optional[Sequence[float]]
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Drop zero-weight rows; ``None`` weights every row with one."""

    m = A.shape[0]
    if weights is None:
        return A, b, np.ones(m)
    w = np.array(weights, dtype=float).reshape(-1)
    if w.shape[0] != m:
        raise DimensionMismatchError(
            f"Got {w.shape[0]} weights for {m} inequalities."
        )
    keep = w != 0.0
    return A[keep], b[keep], w[keep]


def check_dimensions(A, b, c) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Array copies of ``(A, b, c)``, rejecting inconsistent shapes."""

    A = np.array(A, dtype=float)
    b = np.array(b, dtype=float)
    c = np.array(c, dtype=float)
    if A.ndim != 2:
        raise DimensionMismatchError(f"Constraint matrix must be 2-D, got shape {A.shape}.")
    m, n = A.shape
    if b.shape != (m,):
        raise DimensionMismatchError(f"Expected b of shape ({m},), got {b.shape}.")
    if c.shape != (n,):
        raise DimensionMismatchError(f"Expected c of shape ({n},), got {c.shape}.")
    return A, b, c
