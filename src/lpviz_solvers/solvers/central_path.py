"""
Log-barrier continuation along the central path.

For each barrier level ``mu`` of a fixed decreasing schedule the engine
maximises ``c^T x + mu * sum_i w_i log(b_i - a_i x)`` by damped Newton,
warm-started from the previous level's point. A level whose inner solve fails
is skipped; the next level restarts from the last good point.
"""

from __future__ import annotations

import time
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import LineSearchStuckError, SingularSystemError
from ..formatting import COORD_X, COORD_Y, ITER, MU, OBJECTIVE, Column, LogTable, leading_coordinates
from ..linalg import factorize
from ..logging import get_logger
from ..problem import Lines, centroid, chebyshev_center, filter_weighted, load_problem
from ..schemas import CentralPathOptions, CentralPathResult, resolve_options

logger = get_logger(__name__)

MU_START_EXPONENT = 3.0
MU_END_EXPONENT = -5.0
MIN_SLACK = 1e-12
MAX_DOMAIN_HALVINGS = 100
MIN_STEP = 1e-10
ARMIJO_BETA = 0.01
STEP_SHRINK = 0.5

_TABLE = LogTable([Column("Iter", 4, "d"), COORD_X, COORD_Y, OBJECTIVE, MU])


def barrier_schedule(niter: int) -> List[float]:
    """``niter`` barrier levels spaced geometrically from ``1e3`` down to ``1e-5``."""

    if niter <= 0:
        return []
    if niter == 1:
        return [10.0**MU_START_EXPONENT]
    return [float(mu) for mu in np.logspace(MU_START_EXPONENT, MU_END_EXPONENT, niter)]


def barrier_objective(
    A: np.ndarray, b: np.ndarray, c: np.ndarray, w: np.ndarray, mu: float, x: np.ndarray
) -> float:
    r = b - A @ x
    if np.any(r <= 0.0):
        return -np.inf
    return float(c @ x + mu * (w @ np.log(r)))


def central_path(
    lines: Lines,
    objective: Sequence[float],
    options: Union[CentralPathOptions, Mapping[str, Any], None] = None,
    vertices: Optional[Sequence[Sequence[float]]] = None,
) -> CentralPathResult:
    """
    Trace the weighted central path of ``max c^T x s.t. A x <= b``.

    The first level starts at the centroid of ``vertices`` when they are given,
    otherwise at the Chebyshev centre of the region. Kept points are strictly
    interior.
    """

    opts = resolve_options(CentralPathOptions, options)
    emit = logger.info if opts.verbose else logger.debug
    start = time.perf_counter()
    A, b, c = load_problem(lines, objective)
    A, b, w = filter_weighted(A, b, opts.weights)

    result = CentralPathResult()

    def finish(status: str, message: str) -> CentralPathResult:
        result.elapsed = time.perf_counter() - start
        result.status = status
        result.message = message
        result.logs.append(message)
        emit(message)
        return result

    if A.shape[0] == 0:
        result.logs.append("No lines to process after filtering.")
        emit(result.logs[-1])
        return finish("converged", "Nothing to solve: every inequality has zero weight.")

    schedule = barrier_schedule(opts.niter)
    if not schedule:
        result.logs.append("Barrier schedule is empty (niter = 0); no central path points computed.")
        emit(result.logs[-1])
        return finish("converged", "Nothing to solve: niter is 0.")

    x = centroid(vertices, A.shape[1]) if vertices is not None else chebyshev_center(A, b)

    result.logs.append(_TABLE.header())
    emit(result.logs[-1])

    for mu in schedule:
        try:
            x_mu, converged = _newton(A, b, c, w, mu, x, opts)
        except (LineSearchStuckError, SingularSystemError) as exc:
            logger.warning("Skipping barrier level mu=%.3e: %s", mu, exc)
            result.skipped.append(mu)
            continue
        if not converged:
            logger.warning("Skipping barrier level mu=%.3e: no convergence in %d Newton steps", mu, opts.maxit)
            result.skipped.append(mu)
            continue

        x = x_mu
        result.iterates.append(x.tolist())
        result.mu.append(mu)
        result.objectives.append(barrier_objective(A, b, c, w, mu, x))
        result.logs.append(_TABLE.row(len(result.iterates), *leading_coordinates(x), float(c @ x), mu))
        emit(result.logs[-1])

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    summary = (
        f"Computed {len(result.iterates)} central path points "
        f"({len(result.skipped)} barrier levels skipped) in {elapsed_ms:.1f} ms"
    )
    # the path is complete only if its last barrier level was solved
    status = "converged" if result.mu and result.mu[-1] == schedule[-1] else "max_iterations"
    return finish(status, summary)


def _newton(
    A: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    w: np.ndarray,
    mu: float,
    x: np.ndarray,
    opts: CentralPathOptions,
) -> Tuple[np.ndarray, bool]:
    """Damped Newton ascent on the barrier objective for one level of ``mu``."""

    x = x.copy()
    for _ in range(opts.maxit):
        r = b - A @ x
        g = c - mu * (A.T @ (w / r))
        if np.abs(g).max() < opts.epsilon:
            return x, True

        H = mu * (A.T @ ((w / r**2)[:, None] * A))
        dx = factorize(H).solve(g)

        alpha = _domain_step(A, b, x, dx)
        x = x + _armijo_step(A, b, c, w, mu, x, dx, g, alpha) * dx

    r = b - A @ x
    g = c - mu * (A.T @ (w / r))
    return x, bool(np.abs(g).max() < opts.epsilon)


def _domain_step(A: np.ndarray, b: np.ndarray, x: np.ndarray, dx: np.ndarray) -> float:
    alpha = 1.0
    for _ in range(MAX_DOMAIN_HALVINGS):
        if np.min(b - A @ (x + alpha * dx)) > MIN_SLACK:
            return alpha
        alpha *= STEP_SHRINK
    raise LineSearchStuckError(
        f"Newton step left the interior after {MAX_DOMAIN_HALVINGS} halvings."
    )


def _armijo_step(
    A: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    w: np.ndarray,
    mu: float,
    x: np.ndarray,
    dx: np.ndarray,
    g: np.ndarray,
    alpha_domain: float,
) -> float:
    """Sufficient-increase backtracking; falls back to the domain-feasible step."""

    f_x = barrier_objective(A, b, c, w, mu, x)
    slope = float(g @ dx)
    alpha = alpha_domain
    while alpha >= MIN_STEP:
        if barrier_objective(A, b, c, w, mu, x + alpha * dx) >= f_x + ARMIJO_BETA * alpha * slope:
            return alpha
        alpha *= STEP_SHRINK
    return alpha_domain
