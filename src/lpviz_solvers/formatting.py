"""Fixed-width tables for the per-iteration diagnostic log lines."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Sequence


@dataclass(frozen=True)
class Column:
    title: str
    width: int
    spec: str = ""

    def header(self) -> str:
        if self.spec == "s":
            return f"{self.title:<{self.width}}"
        return f"{self.title:>{self.width}}"

    def cell(self, value: Any) -> str:
        if isinstance(value, float) and not math.isfinite(value):
            return f"{str(value):>{self.width}}"
        if isinstance(value, str):
            return f"{value:<{self.width}}"
        return format(value, self.spec).rjust(self.width)


class LogTable:
    """A row layout: ``header()`` once, then ``row(...)`` per iterate."""

    def __init__(self, columns: Sequence[Column]) -> None:
        self.columns: List[Column] = list(columns)

    def header(self) -> str:
        return " ".join(column.header() for column in self.columns)

    def row(self, *values: Any) -> str:
        if len(values) != len(self.columns):
            raise ValueError(f"Expected {len(self.columns)} values, got {len(values)}.")
        return " ".join(column.cell(value) for column, value in zip(self.columns, values))


ITER = Column("Iter", 5, "d")
COORD_X = Column("x", 8, "+.2f")
COORD_Y = Column("y", 8, "+.2f")
OBJECTIVE = Column("Obj", 10, "+.1e")
INFEASIBILITY = Column("Infeas", 10, "+.1e")
MU = Column("mu", 10, ".1e")
EPS = Column("eps", 10, ".1e")


def basis_string(members: Sequence[bool]) -> str:
    return "".join("1" if member else "0" for member in members)


def leading_coordinates(x: Sequence[float]) -> tuple[float, float]:
    """First two coordinates of ``x`` for the 2-D log columns, zero-padded."""
    first = float(x[0]) if len(x) > 0 else 0.0
    second = float(x[1]) if len(x) > 1 else 0.0
    return first, second
