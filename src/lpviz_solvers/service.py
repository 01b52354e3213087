"""
Name-based dispatch over the engines.

Engines raise ``SolverError`` subclasses on fatal failures; ``solve`` turns
those into a result tagged with the failure status so that callers such as the
MCP server always get a serialisable trace back.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, NamedTuple, Type

from .errors import SolverError
from .logging import get_logger
from .schemas import (
    CentralPathOptions,
    CentralPathResult,
    IPMOptions,
    IPMResult,
    PDHGOptions,
    PDHGResult,
    SimplexOptions,
    SimplexResult,
    SolveRequest,
    SolverOptions,
    SolverResult,
)
from .solvers import central_path, ipm, pdhg, simplex

logger = get_logger(__name__)


class SolverEntry(NamedTuple):
    run: Callable[..., SolverResult]
    options: Type[SolverOptions]
    result: Type[SolverResult]
    label: str


SOLVERS: Dict[str, SolverEntry] = {
    "simplex": SolverEntry(simplex, SimplexOptions, SimplexResult, "Simplex"),
    "ipm": SolverEntry(ipm, IPMOptions, IPMResult, "Interior Point Method"),
    "pdhg": SolverEntry(pdhg, PDHGOptions, PDHGResult, "PDHG"),
    "central": SolverEntry(central_path, CentralPathOptions, CentralPathResult, "Central Path"),
}


def solve(request: SolveRequest) -> SolverResult:
    entry = SOLVERS.get(request.solver)
    if entry is None:
        raise ValueError(f"Unknown solver {request.solver!r}; expected one of {sorted(SOLVERS)}.")

    kwargs: Dict[str, Any] = {}
    if request.solver == "central" and request.vertices is not None:
        kwargs["vertices"] = request.vertices

    try:
        return entry.run(request.lines, request.objective, request.options, **kwargs)
    except SolverError as exc:
        logger.warning("%s failed (%s): %s", entry.label, exc.status, exc)
        result = exc.partial if exc.partial is not None else entry.result()
        result.status = exc.status
        result.message = str(exc)
        if not result.logs or result.logs[-1] != result.message:
            result.logs.append(result.message)
        return result
