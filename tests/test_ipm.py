import numpy as np
import pytest

from lpviz_solvers.errors import InputError, InvalidOptionsError, SingularSystemError
from lpviz_solvers.solvers.ipm import ipm


def make_square():
    return [[1.0, 0.0, 1.0], [-1.0, 0.0, 0.0], [0.0, 1.0, 1.0], [0.0, -1.0, 0.0]]


def test_ipm_solves_unit_square():
    result = ipm(make_square(), [1.0, 1.0])

    assert result.status == "converged"
    assert result.iterates[-1] == pytest.approx([1.0, 1.0], abs=1e-4)
    assert result.message.startswith("Converged to primal-dual optimal solution")


def test_ipm_pentagon():
    lines = [[1.0, 0.0, 3.0], [0.0, 1.0, 2.0], [1.0, 1.0, 4.0], [-1.0, 0.0, 0.0], [0.0, -1.0, 0.0]]
    result = ipm(lines, [2.0, 1.0])

    assert result.converged
    assert result.iterates[-1] == pytest.approx([3.0, 1.0], abs=1e-4)
    A = np.array(lines)[:, :2]
    b = np.array(lines)[:, 2]
    assert np.all(A @ np.array(result.iterates[-1]) <= b + 1e-5)


def test_ipm_traces_line_up():
    result = ipm(make_square(), [1.0, 1.0])

    n = len(result.iterates)
    assert len(result.slacks) == len(result.duals) == len(result.mu) == n
    assert result.logs[0].split() == ["Iter", "x", "y", "Obj", "Infeas", "mu"]
    assert len(result.logs) == n + 2
    # slacks and duals stay strictly positive
    assert min(min(s) for s in result.slacks) > 0
    assert min(min(y) for y in result.duals) > 0


def test_ipm_iteration_cap():
    result = ipm(make_square(), [1.0, 1.0], {"maxit": 1})

    assert result.status == "max_iterations"
    assert not result.converged
    assert len(result.iterates) == 2
    assert result.message.startswith("Did not converge after 1 iterations")


def test_ipm_rejects_zero_maxit():
    with pytest.raises(InvalidOptionsError):
        ipm(make_square(), [1.0, 1.0], {"maxit": 0})
    with pytest.raises(InputError):
        ipm(make_square(), [1.0, 1.0], {"alphaMax": 1.5})


def test_ipm_singular_kkt_keeps_partial_trace():
    # a single half-plane leaves y with no constraint, so the KKT matrix is singular
    with pytest.raises(SingularSystemError) as excinfo:
        ipm([[1.0, 0.0, 1.0]], [1.0, 0.0])

    partial = excinfo.value.partial
    assert partial.status == "singular"
    assert len(partial.iterates) == 1
    assert partial.logs[-1].startswith("Aborted at iteration 1")


def test_ipm_duality_gap_at_convergence():
    lines = np.array(make_square())
    A, b = lines[:, :2], lines[:, 2]
    c = np.array([1.0, 1.0])
    result = ipm(make_square(), c.tolist())

    x = np.array(result.iterates[-1])
    y = np.array(result.duals[-1])
    assert abs(b @ y - c @ x) <= 1e-6 * (1.0 + abs(c @ x))
    assert A.T @ y == pytest.approx(c, abs=1e-6)
