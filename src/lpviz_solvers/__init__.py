"""Solver engines behind the 2-D LP visualizer."""

from .errors import (
    DimensionMismatchError,
    InfeasibleError,
    InputError,
    InvalidOptionsError,
    LineSearchStuckError,
    SingularSystemError,
    SolverError,
    UnboundedError,
)
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
    SolverResult,
)
from .service import SOLVERS, solve
from .solvers import central_path, ipm, pdhg, simplex

__all__ = [
    "simplex",
    "ipm",
    "pdhg",
    "central_path",
    "solve",
    "SOLVERS",
    "SolveRequest",
    "SolverResult",
    "SimplexOptions",
    "SimplexResult",
    "IPMOptions",
    "IPMResult",
    "PDHGOptions",
    "PDHGResult",
    "CentralPathOptions",
    "CentralPathResult",
    "SolverError",
    "InputError",
    "DimensionMismatchError",
    "InvalidOptionsError",
    "SingularSystemError",
    "UnboundedError",
    "InfeasibleError",
    "LineSearchStuckError",
]
