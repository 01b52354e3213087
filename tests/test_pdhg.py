import numpy as np
import pytest

from lpviz_solvers.problem import lines_to_ab, split_standard_form
from lpviz_solvers.solvers.pdhg import (
    inequality_form_epsilon,
    pdhg,
    pdhg_inequality_form,
    pdhg_standard_form,
    standard_form_epsilon,
)


def make_square():
    return [[1.0, 0.0, 1.0], [-1.0, 0.0, 0.0], [0.0, 1.0, 1.0], [0.0, -1.0, 0.0]]


def test_inequality_form_converges_on_square():
    result = pdhg(make_square(), [1.0, 1.0], {"ineq": True, "maxit": 5000})

    assert result.status == "converged"
    assert result.eps[-1] <= 1e-4
    assert result.iterates[-1] == pytest.approx([1.0, 1.0], abs=1e-2)


@pytest.mark.parametrize("ineq", [False, True])
def test_unit_square_converges_with_default_steps(ineq):
    options = {"ineq": ineq, "eta": 0.25, "tau": 0.25, "maxit": 1000}
    result = pdhg(make_square(), [1.0, 1.0], options)

    assert result.status == "converged"
    assert result.eps[-1] <= 1e-4
    assert result.iterates[-1] == pytest.approx([1.0, 1.0], abs=1e-2)


def test_standard_form_reports_original_variables():
    result = pdhg(make_square(), [1.0, 1.0], {"maxit": 200})

    assert all(len(x) == 2 for x in result.iterates)
    assert len(result.eps) == len(result.iterates)
    assert result.logs[0].split() == ["Iter", "x", "y", "Obj", "Infeas", "eps"]
    assert result.eps[-1] < result.eps[0]


def test_iteration_cap_is_a_normal_outcome():
    result = pdhg(make_square(), [1.0, 1.0], {"ineq": True, "maxit": 1})

    assert result.status == "max_iterations"
    assert len(result.iterates) == 1
    assert result.message.startswith("Did not converge after 1 iterations")


def test_large_steps_do_not_raise():
    result = pdhg(make_square(), [1.0, 1.0], {"ineq": True, "eta": 10.0, "tau": 10.0, "maxit": 50})

    assert result.status == "max_iterations"
    assert not result.converged


def test_show_basis_colours_every_iterate():
    result = pdhg(make_square(), [1.0, 1.0], {"ineq": True, "showBasis": True, "maxit": 50})

    assert len(result.phases) == len(result.iterates)
    assert all(0 <= phase < 10 for phase in result.phases)
    assert result.logs[0].rstrip().endswith("basis")
    # y starts at one, so every constraint is active on the first row
    assert result.logs[1].rstrip().endswith("1111")


def test_epsilon_is_zero_at_optimum():
    A, b = lines_to_ab(make_square())
    c = np.array([-1.0, -1.0])
    x = np.array([1.0, 1.0])
    y = np.array([1.0, 0.0, 1.0, 0.0])

    assert inequality_form_epsilon(A, b, c, x, y) == pytest.approx(0.0, abs=1e-12)

    A_hat, b_hat, c_hat = split_standard_form(A, b, -c)
    chi = np.array([1.0, 1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 1.0])
    assert standard_form_epsilon(A_hat, b_hat, c_hat, chi, y) == pytest.approx(0.0, abs=1e-12)


def test_forms_accept_raw_matrices():
    A, b = lines_to_ab(make_square())

    ineq = pdhg_inequality_form(A, b, np.array([-1.0, -1.0]), {"maxit": 3})
    std = pdhg_standard_form(*split_standard_form(A, b, np.array([1.0, 1.0])), {"maxit": 3})

    assert len(ineq.iterates) == 3
    assert len(std.iterates[0]) == 8
