"""
Primal-dual hybrid gradient (Chambolle-Pock) for linear programs.

Two variants share the same loop shape:

* ``pdhg_standard_form`` solves ``min c^T x s.t. A x = b, x >= 0`` and
  projects the primal iterate onto the non-negative orthant;
* ``pdhg_inequality_form`` solves ``min c^T x s.t. A x <= b`` and projects the
  dual iterate instead.

``pdhg`` takes the user's ``max c^T x s.t. A x <= b`` and either runs the
inequality form directly or rewrites it in standard form with
``x = x_plus - x_minus`` plus slacks. Step sizes are fixed; a poor choice of
``eta``/``tau`` shows up as ``max_iterations``, never as an error.
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable, Mapping, Optional, Sequence, Set, Tuple, Union

import numpy as np

from ..formatting import COORD_X, COORD_Y, EPS, INFEASIBILITY, ITER, Column, LogTable, leading_coordinates
from ..linalg import project_nonnegative
from ..logging import get_logger
from ..problem import Lines, check_dimensions, load_problem, split_standard_form, unsplit
from ..schemas import PDHGOptions, PDHGResult, resolve_options

logger = get_logger(__name__)

ACTIVE_DUAL_THRESHOLD = 1e-10
NUM_PHASE_COLORS = 10

OBJ = Column(" Obj", 10, "+.1e")

Step = Callable[[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]


def pdhg(
    lines: Lines,
    objective: Sequence[float],
    options: Union[PDHGOptions, Mapping[str, Any], None] = None,
) -> PDHGResult:
    opts = resolve_options(PDHGOptions, options)
    A, b, c = load_problem(lines, objective)
    if opts.ineq:
        return pdhg_inequality_form(A, b, -c, opts)

    A_hat, b_hat, c_hat = split_standard_form(A, b, c)
    return pdhg_standard_form(A_hat, b_hat, c_hat, opts, n_original=A.shape[1])


def standard_form_epsilon(
    A: np.ndarray, b: np.ndarray, c: np.ndarray, x: np.ndarray, y: np.ndarray
) -> float:
    primal = np.linalg.norm(A @ x - b) / (1.0 + np.linalg.norm(b))
    dual = np.linalg.norm(project_nonnegative(-(A.T @ y) - c)) / (1.0 + np.linalg.norm(c))
    cTx = float(c @ x)
    bTy = float(b @ y)
    gap = abs(cTx + bTy) / (1.0 + abs(cTx) + abs(bTy))
    return float(primal + dual + gap)


def inequality_form_epsilon(
    A: np.ndarray, b: np.ndarray, c: np.ndarray, x: np.ndarray, y: np.ndarray
) -> float:
    primal = np.linalg.norm(project_nonnegative(A @ x - b)) / (1.0 + np.linalg.norm(b))
    dual = np.linalg.norm(project_nonnegative(-y)) / (1.0 + np.linalg.norm(c))
    cTx = float(c @ x)
    bTy = float(b @ y)
    gap = abs(bTy + cTx) / (1.0 + abs(cTx) + abs(bTy))
    return float(primal + dual + gap)


def pdhg_standard_form(
    A: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    options: Union[PDHGOptions, Mapping[str, Any], None] = None,
    n_original: Optional[int] = None,
) -> PDHGResult:
    """
    PDHG on ``min c^T x s.t. A x = b, x >= 0`` from ``x = 0, y = 0``.

    With ``n_original`` set, ``x`` is read as ``[x_plus; x_minus; slack]`` and
    iterates and log lines are reported as ``x_plus - x_minus``.
    """

    opts = resolve_options(PDHGOptions, options)
    A, b, c = check_dimensions(A, b, c)
    m, n = A.shape
    table = LogTable([ITER, COORD_X, COORD_Y, OBJ, INFEASIBILITY, EPS])

    def report(x: np.ndarray) -> np.ndarray:
        return x if n_original is None else unsplit(x, n_original)

    def log_row(k: int, x: np.ndarray, y: np.ndarray, eps: float) -> str:
        residual = float(np.abs(A @ x - b).max()) if m else 0.0
        return table.row(k, *leading_coordinates(report(x)), -float(c @ x), residual, eps)

    def step(x: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        x_next = project_nonnegative(x - opts.eta * (c + A.T @ y))
        x_bar = 2.0 * x_next - x
        y_next = y + opts.tau * (A @ x_bar - b)
        return x_next, y_next

    return _run(
        np.zeros(n),
        np.zeros(m),
        opts,
        table,
        step,
        lambda x, y: standard_form_epsilon(A, b, c, x, y),
        log_row,
        report,
    )


def pdhg_inequality_form(
    A: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    options: Union[PDHGOptions, Mapping[str, Any], None] = None,
) -> PDHGResult:
    """PDHG on ``min c^T x s.t. A x <= b`` from ``x = 0, y = 1``."""

    opts = resolve_options(PDHGOptions, options)
    A, b, c = check_dimensions(A, b, c)
    m, n = A.shape
    columns = [ITER, COORD_X, COORD_Y, OBJ, INFEASIBILITY, EPS]
    if opts.show_basis:
        columns.append(Column("basis", m, "s"))
    table = LogTable(columns)

    def log_row(k: int, x: np.ndarray, y: np.ndarray, eps: float) -> str:
        violation = float(project_nonnegative(A @ x - b).max())
        values = [k, *leading_coordinates(x), -float(c @ x), violation, eps]
        if opts.show_basis:
            active = _active_set(y)
            values.append("".join("1" if i in active else "0" for i in range(m)))
        return table.row(*values)

    def step(x: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        y_next = project_nonnegative(y + opts.tau * (A @ x - b))
        y_bar = 2.0 * y_next - y
        x_next = x - opts.eta * (c + A.T @ y_bar)
        return x_next, y_next

    return _run(
        np.zeros(n),
        np.ones(m),
        opts,
        table,
        step,
        lambda x, y: inequality_form_epsilon(A, b, c, x, y),
        log_row,
        lambda x: x,
        phase_of=(lambda y: _phase_color(_active_set(y))) if opts.show_basis else None,
    )


def _active_set(y: np.ndarray) -> Set[int]:
    return {int(i) for i in np.flatnonzero(y > ACTIVE_DUAL_THRESHOLD)}


def _phase_color(active: Set[int]) -> int:
    value = 0
    for i in active:
        value |= 1 << i
    return value % NUM_PHASE_COLORS


def _run(
    x: np.ndarray,
    y: np.ndarray,
    opts: PDHGOptions,
    table: LogTable,
    step: Step,
    epsilon: Callable[[np.ndarray, np.ndarray], float],
    log_row: Callable[[int, np.ndarray, np.ndarray, float], str],
    report: Callable[[np.ndarray], np.ndarray],
    phase_of: Optional[Callable[[np.ndarray], int]] = None,
) -> PDHGResult:
    emit = logger.info if opts.verbose else logger.debug
    start = time.perf_counter()
    result = PDHGResult()

    def record(k: int, x: np.ndarray, y: np.ndarray, eps: float) -> None:
        result.iterates.append(report(x).tolist())
        result.eps.append(eps)
        if phase_of is not None:
            result.phases.append(phase_of(y))
        result.logs.append(log_row(k, x, y, eps))
        emit(result.logs[-1])

    result.logs.append(table.header())
    emit(result.logs[-1])

    k = 1
    eps_k = epsilon(x, y)
    while k <= opts.maxit and eps_k > opts.tol:
        record(k, x, y, eps_k)
        x, y = step(x, y)
        k += 1
        eps_k = epsilon(x, y)
        if not math.isfinite(eps_k):
            break

    result.elapsed = time.perf_counter() - start
    elapsed_ms = result.elapsed * 1000.0
    if eps_k <= opts.tol:
        # the converged point closes the trace
        record(k, x, y, eps_k)
        result.status = "converged"
        result.message = f"Converged to primal-dual optimal solution in {elapsed_ms:.2f}ms"
    elif not math.isfinite(eps_k):
        result.status = "max_iterations"
        result.message = (
            f"Diverged after {len(result.iterates)} iterations in {elapsed_ms:.2f}ms; "
            "try smaller eta/tau"
        )
    else:
        result.status = "max_iterations"
        result.message = f"Did not converge after {len(result.iterates)} iterations in {elapsed_ms:.2f}ms"
    result.logs.append(result.message)
    emit(result.message)
    return result
