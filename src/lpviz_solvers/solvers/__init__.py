"""Iterative LP engines."""

from .central_path import barrier_schedule, central_path
from .ipm import ipm
from .pdhg import pdhg, pdhg_inequality_form, pdhg_standard_form
from .simplex import simplex

__all__ = [
    "simplex",
    "ipm",
    "pdhg",
    "pdhg_standard_form",
    "pdhg_inequality_form",
    "central_path",
    "barrier_schedule",
]
