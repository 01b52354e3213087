import time
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np

from ..errors import InfeasibleError, SimplexInvariantError, SolverError, StallError, UnboundedError
from ..formatting import COORD_X, COORD_Y, ITER, OBJECTIVE, Column, LogTable, basis_string, leading_coordinates
from ..linalg import factorize
from ..logging import get_logger
from ..problem import Lines, load_problem, unsplit
from ..schemas import MAX_ITERATIONS, SimplexOptions, SimplexResult, resolve_options

logger = get_logger(__name__)


def simplex(
    lines: Lines,
    objective,
    options: Union[SimplexOptions, Mapping[str, Any], None] = None,
) -> SimplexResult:
    """
    Two-phase primal simplex for ``max c^T x s.t. A x <= b`` with free ``x``.

    Phase I drives the artificials of ``[G A, -G A, G, I] t = G b`` to zero
    (``G = diag(sign(b))``) to find a vertex; Phase II optimises ``c^T x`` over
    ``[A, -A, I] t = b`` from that basis. Iterates are reported in the original
    variables, ``x = x_plus - x_minus``.
    """

    opts = resolve_options(SimplexOptions, options)
    start = time.perf_counter()
    A, b, c = load_problem(lines, objective)
    m, n = A.shape

    gamma = np.where(b < 0, -1.0, 1.0)
    GA = gamma[:, None] * A
    A1 = np.hstack([GA, -GA, np.diag(gamma), np.eye(m)])
    b1 = gamma * b
    c1 = np.concatenate([np.zeros(2 * n + m), -np.ones(m)])
    basis1 = np.zeros(2 * n + 2 * m, dtype=bool)
    basis1[2 * n + m :] = True

    A2 = np.hstack([A, -A, np.eye(m)])
    c2 = np.concatenate([c, -c, np.zeros(m)])

    result = SimplexResult()
    phase_iterates: List[List[List[float]]] = [[], []]
    phase_logs: List[List[str]] = [[], []]
    phase = 1
    try:
        phase1 = _run_simplex(A1, b1, c1, basis1, n, opts, phase_iterates[0], phase_logs[0], result.bases)
        basis2 = _phase_one_cleanup(phase1, n, m, opts.tol, phase_logs[0], opts.verbose)
        phase = 2
        phase2 = _run_simplex(A2, b, c2, basis2, n, opts, phase_iterates[1], phase_logs[1], result.bases)
        _log(phase_logs[1], f"Phase 2 finished - basis {basis_string(phase2['basis'])}", opts.verbose)
    except SolverError as exc:
        _log(phase_logs[phase - 1], str(exc), opts.verbose)
        _assemble(result, phase_iterates, phase_logs, start)
        result.status = exc.status
        result.message = str(exc)
        exc.partial = result
        raise

    _assemble(result, phase_iterates, phase_logs, start)
    result.status = "converged"
    result.message = f"Optimal objective {phase2['objective']:.6g}"
    return result


def _log(logs: List[str], line: str, verbose: bool) -> None:
    logs.append(line)
    if verbose:
        logger.info(line)
    else:
        logger.debug(line)


def _run_simplex(
    A: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    basis: np.ndarray,
    n_orig: int,
    opts: SimplexOptions,
    iterates: List[List[float]],
    logs: List[str],
    bases: List[str],
) -> Dict[str, Any]:
    """Pivot ``max c^T t s.t. A t = b, t >= 0`` to optimality from ``basis``."""

    m, ncols = A.shape
    basis = basis.copy()
    table = LogTable([ITER, COORD_X, COORD_Y, OBJECTIVE, Column("basis", ncols, "s")])
    _log(logs, table.header(), opts.verbose)
    _check_basis(basis, m)

    iteration = 0
    while True:
        iteration += 1
        if iteration > MAX_ITERATIONS:
            raise StallError(f"Simplex stalled after {MAX_ITERATIONS} iterations.")

        basic = np.flatnonzero(basis)
        lu = factorize(A[:, basic])
        xB = lu.solve(b)
        x = np.zeros(ncols)
        x[basic] = xB
        y = lu.solve_transpose(c[basic])
        reduced = c - A.T @ y
        objective = float(c @ x)

        primal = unsplit(x, n_orig)
        iterates.append(primal.tolist())
        bases.append(basis_string(basis))
        _log(logs, table.row(iteration, *leading_coordinates(primal), objective, basis_string(basis)), opts.verbose)

        entering = _choose_entering(reduced, basis, opts)
        if entering is None:
            return {
                "basis": basis,
                "basic": basic,
                "x": x,
                "objective": objective,
                "iterations": iteration,
            }

        direction = lu.solve(A[:, entering])
        pivot_row = _choose_leaving(xB, direction, basic, opts.tol)
        if pivot_row is None:
            raise UnboundedError("LP is unbounded: no leaving variable found.")

        basis[entering] = True
        basis[basic[pivot_row]] = False
        _check_basis(basis, m)


def _choose_entering(reduced: np.ndarray, basis: np.ndarray, opts: SimplexOptions) -> Optional[int]:
    candidates = np.flatnonzero(~basis & (reduced > opts.tol))
    if candidates.size == 0:
        return None
    if opts.pivot_rule == "bland":
        return int(candidates[0])
    # argmax keeps the first index on ties
    return int(candidates[np.argmax(reduced[candidates])])


def _choose_leaving(
    xB: np.ndarray, direction: np.ndarray, basic: np.ndarray, tol: float
) -> Optional[int]:
    """Ratio test; near-equal ratios go to the smallest basic column index."""

    best_row: Optional[int] = None
    best_ratio = np.inf
    for row in np.flatnonzero(direction > tol):
        ratio = xB[row] / direction[row]
        if ratio < best_ratio - tol:
            best_row, best_ratio = int(row), ratio
        elif abs(ratio - best_ratio) <= tol and best_row is not None and basic[row] < basic[best_row]:
            best_row, best_ratio = int(row), ratio
    return best_row


def _check_basis(basis: np.ndarray, m: int) -> None:
    size = int(np.count_nonzero(basis))
    if size != m:
        raise SimplexInvariantError(
            f"Basis has {size} members, expected {m}: {basis_string(basis)}"
        )


def _phase_one_cleanup(
    phase1: Dict[str, Any], n: int, m: int, tol: float, logs: List[str], verbose: bool
) -> np.ndarray:
    """Turn the Phase I basis into a Phase II basis over ``[A, -A, I]``."""

    art_start = 2 * n + m
    basis = phase1["basis"]
    x = phase1["x"]

    artificial = np.arange(art_start, art_start + m)
    stuck = artificial[basis[artificial] & (x[artificial] > tol)]
    if stuck.size:
        raise InfeasibleError(
            "Problem infeasible: Phase I optimum is "
            f"{-phase1['objective']:.3e} > 0 with artificial variables basic."
        )

    repaired = basis[:art_start].copy()
    # A degenerate artificial left in the basis sits on row i; the slack of
    # row i spans the same column direction, so swapping it in keeps B invertible.
    for idx in artificial[basis[artificial]]:
        slack = 2 * n + (idx - art_start)
        if not repaired[slack]:
            repaired[slack] = True
            logger.warning("Degenerate Phase I basis: replacing artificial %d with slack %d", idx, slack)

    for slack in range(2 * n, art_start):
        if np.count_nonzero(repaired) >= m:
            break
        if not repaired[slack]:
            repaired[slack] = True
            logger.warning("Phase I basis short of %d members: padding with slack %d", m, slack)

    _check_basis(repaired, m)
    _log(logs, f"Phase 1 finished - basis {basis_string(repaired)}", verbose)
    return repaired


def _assemble(
    result: SimplexResult,
    phase_iterates: List[List[List[float]]],
    phase_logs: List[List[str]],
    start: float,
) -> None:
    first, second = phase_iterates
    if first and second and np.allclose(first[-1], second[0]):
        second = second[1:]
    result.iterates = first + second
    result.phase_boundary = len(first)
    result.phase_logs = [list(logs) for logs in phase_logs if logs]
    result.logs = [line for logs in phase_logs for line in logs]
    result.elapsed = time.perf_counter() - start
