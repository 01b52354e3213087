"""
Mehrotra-style predictor-corrector primal-dual interior point method.

The user's problem ``max c^T x s.t. A x <= b`` is negated into
``min c^T x s.t. A x >= b`` (with ``A, b, c`` replaced by their negatives) so
that the core works with the slack convention ``A x - s = b, s >= 0``. The
dual multipliers ``y >= 0`` pair with ``s`` through complementarity.
"""

from __future__ import annotations

import time
from typing import Any, Mapping, Sequence, Union

import numpy as np

from ..errors import SolverError
from ..formatting import COORD_X, COORD_Y, INFEASIBILITY, ITER, MU, OBJECTIVE, LogTable, leading_coordinates
from ..linalg import factorize, max_step
from ..logging import get_logger
from ..problem import Lines, load_problem
from ..schemas import IPMOptions, IPMResult, resolve_options

logger = get_logger(__name__)

CORRECTOR_THRESHOLD = 0.9
SIGMA_MIN = 1e-8
SIGMA_MAX = 1.0 - 1e-8
SIGMA_POWER = 3

_TABLE = LogTable([ITER, COORD_X, COORD_Y, OBJECTIVE, INFEASIBILITY, MU])


def ipm(
    lines: Lines,
    objective: Sequence[float],
    options: Union[IPMOptions, Mapping[str, Any], None] = None,
) -> IPMResult:
    opts = resolve_options(IPMOptions, options)
    A, b, c = load_problem(lines, objective)
    return _ipm_core(-A, -b, -c, opts)


def _ipm_core(A: np.ndarray, b: np.ndarray, c: np.ndarray, opts: IPMOptions) -> IPMResult:
    """Solve ``min c^T x s.t. A x - s = b, s >= 0`` from ``x = 0, s = y = 1``."""

    emit = logger.info if opts.verbose else logger.debug
    start = time.perf_counter()
    m, n = A.shape

    x = np.zeros(n)
    s = np.ones(m)
    y = np.ones(m)

    result = IPMResult()
    result.logs.append(_TABLE.header())
    emit(result.logs[-1])

    niter = 0
    converged = False
    try:
        while niter <= opts.maxit:
            r_p = b - (A @ x - s)
            r_d = c - A.T @ y
            mu = float(s @ y) / m
            p_obj = float(c @ x)
            gap = abs(p_obj - float(b @ y)) / (1.0 + abs(p_obj))

            result.iterates.append(x.tolist())
            result.slacks.append(s.tolist())
            result.duals.append(y.tolist())
            result.mu.append(mu)
            line = _TABLE.row(len(result.iterates) - 1, *leading_coordinates(x), -p_obj, float(np.abs(r_p).max()), mu)
            result.logs.append(line)
            emit(line)

            if (
                np.abs(r_p).max() <= opts.eps_p
                and np.abs(r_d).max() <= opts.eps_d
                and gap <= opts.eps_opt
            ):
                converged = True
                break

            niter += 1
            if niter > opts.maxit:
                break

            dx, ds, dy = _search_direction(A, s, y, r_p, r_d, mu, n, m)

            step_p = opts.alpha_max * max_step(s, ds)
            step_d = opts.alpha_max * max_step(y, dy)
            x = x + step_p * dx
            s = s + step_p * ds
            y = y + step_d * dy
    except SolverError as exc:
        result.logs.append(f"Aborted at iteration {niter}: {exc}")
        emit(result.logs[-1])
        result.status = exc.status
        result.message = str(exc)
        result.elapsed = time.perf_counter() - start
        exc.partial = result
        raise

    result.elapsed = time.perf_counter() - start
    elapsed_ms = result.elapsed * 1000.0
    if converged:
        result.status = "converged"
        result.message = f"Converged to primal-dual optimal solution in {elapsed_ms:.1f} ms"
    else:
        result.status = "max_iterations"
        result.message = f"Did not converge after {len(result.iterates) - 1} iterations in {elapsed_ms:.1f} ms"
    result.logs.append(result.message)
    emit(result.message)
    return result


def _search_direction(
    A: np.ndarray,
    s: np.ndarray,
    y: np.ndarray,
    r_p: np.ndarray,
    r_d: np.ndarray,
    mu: float,
    n: int,
    m: int,
):
    """Predictor step, plus a centring corrector when the affine step is short."""

    # Unknowns (dx, ds, dy):
    #   [ A  -I   0  ]
    #   [ 0   0   A^T]
    #   [ 0   Y   S  ]
    K = np.block(
        [
            [A, -np.eye(m), np.zeros((m, m))],
            [np.zeros((n, n)), np.zeros((n, m)), A.T],
            [np.zeros((m, n)), np.diag(y), np.diag(s)],
        ]
    )
    lu = factorize(K)

    rhs_aff = np.concatenate([r_p, r_d, -s * y])
    delta_aff = lu.solve(rhs_aff)
    dx_aff, ds_aff, dy_aff = np.split(delta_aff, [n, n + m])

    alpha_p = max_step(s, ds_aff)
    alpha_d = max_step(y, dy_aff)
    if alpha_p >= CORRECTOR_THRESHOLD and alpha_d >= CORRECTOR_THRESHOLD:
        return dx_aff, ds_aff, dy_aff

    mu_aff = float((s + alpha_p * ds_aff) @ (y + alpha_d * dy_aff)) / m
    ratio = mu_aff / mu if mu > 0 else 0.0
    sigma = float(np.clip(ratio**SIGMA_POWER, SIGMA_MIN, SIGMA_MAX))
    rhs_cor = np.concatenate([np.zeros(m), np.zeros(n), sigma * mu - ds_aff * dy_aff])
    dx_cor, ds_cor, dy_cor = np.split(lu.solve(rhs_cor), [n, n + m])
    return dx_aff + dx_cor, ds_aff + ds_cor, dy_aff + dy_cor
