from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field

from .errors import InvalidOptionsError

SolverName = Literal["simplex", "ipm", "pdhg", "central"]
PivotRule = Literal["dantzig", "bland"]
Status = Literal[
    "converged",
    "max_iterations",
    "error",
    "infeasible",
    "unbounded",
    "singular",
    "stalled",
    "line_search_stuck",
    "invalid_input",
]

MAX_ITERATIONS = 2**16
MAX_BARRIER_LEVELS = 2**10


class SolverOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    verbose: bool = False


class SimplexOptions(SolverOptions):
    tol: float = Field(1e-5, gt=0.0)
    pivot_rule: PivotRule = Field("dantzig", alias="pivotRule")


class IPMOptions(SolverOptions):
    eps_p: float = Field(1e-6, gt=0.0)
    eps_d: float = Field(1e-6, gt=0.0)
    eps_opt: float = Field(1e-6, gt=0.0)
    maxit: int = Field(30, ge=1, le=MAX_ITERATIONS)
    alpha_max: float = Field(0.999, gt=0.0, le=1.0, alias="alphaMax")


class PDHGOptions(SolverOptions):
    ineq: bool = False
    maxit: int = Field(1000, ge=1, le=MAX_ITERATIONS)
    eta: float = Field(0.25, gt=0.0)
    tau: float = Field(0.25, gt=0.0)
    tol: float = Field(1e-4, gt=0.0)
    show_basis: bool = Field(False, alias="showBasis")


class CentralPathOptions(SolverOptions):
    niter: int = Field(100, ge=0, le=MAX_BARRIER_LEVELS)
    weights: Optional[List[float]] = None
    maxit: int = Field(2000, ge=1, le=MAX_ITERATIONS)
    epsilon: float = Field(1e-4, gt=0.0)


OptionsT = TypeVar("OptionsT", bound=SolverOptions)


def resolve_options(
    cls: Type[OptionsT], options: Union[OptionsT, Mapping[str, Any], None]
) -> OptionsT:
    """Validate ``options`` once at call entry; omitted fields take defaults."""

    if options is None:
        return cls()
    if isinstance(options, cls):
        return options
    if isinstance(options, BaseModel):
        options = options.model_dump()
    try:
        return cls.model_validate(options)
    except ValidationError as exc:
        raise InvalidOptionsError(f"Invalid {cls.__name__}: {exc}") from exc


class SolverResult(BaseModel):
    solver: SolverName
    iterates: List[List[float]] = Field(default_factory=list)
    logs: List[str] = Field(default_factory=list)
    status: Status = "max_iterations"
    elapsed: float = 0.0
    message: str = ""

    @computed_field  # type: ignore[misc]
    @property
    def converged(self) -> bool:
        return self.status == "converged"


class SimplexResult(SolverResult):
    solver: Literal["simplex"] = "simplex"
    phase_logs: List[List[str]] = Field(default_factory=list)
    bases: List[str] = Field(default_factory=list)
    phase_boundary: int = 0


class IPMResult(SolverResult):
    solver: Literal["ipm"] = "ipm"
    slacks: List[List[float]] = Field(default_factory=list)
    duals: List[List[float]] = Field(default_factory=list)
    mu: List[float] = Field(default_factory=list)


class PDHGResult(SolverResult):
    solver: Literal["pdhg"] = "pdhg"
    eps: List[float] = Field(default_factory=list)
    phases: List[int] = Field(default_factory=list)


class CentralPathResult(SolverResult):
    solver: Literal["central"] = "central"
    mu: List[float] = Field(default_factory=list)
    objectives: List[float] = Field(default_factory=list)
    skipped: List[float] = Field(default_factory=list)


class SolveRequest(BaseModel):
    solver: SolverName
    lines: List[List[float]]
    objective: List[float]
    options: Dict[str, Any] = Field(default_factory=dict)
    vertices: Optional[List[List[float]]] = None
