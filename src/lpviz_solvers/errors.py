from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .schemas import SolverResult


class SolverError(Exception):
    """Fatal engine failure. ``partial`` holds the trace collected before it."""

    status = "error"

    def __init__(self, message: str, partial: Optional["SolverResult"] = None) -> None:
        super().__init__(message)
        self.partial = partial


class SingularSystemError(SolverError):
    status = "singular"


class UnboundedError(SolverError):
    status = "unbounded"


class InfeasibleError(SolverError):
    status = "infeasible"


class StallError(SolverError):
    status = "stalled"


class LineSearchStuckError(SolverError):
    status = "line_search_stuck"


class InputError(SolverError, ValueError):
    status = "invalid_input"


class DimensionMismatchError(InputError):
    pass


class InvalidOptionsError(InputError):
    pass


class SimplexInvariantError(SolverError, AssertionError):
    """Basis bookkeeping went wrong; a bug, not a property of the LP."""

    status = "stalled"
