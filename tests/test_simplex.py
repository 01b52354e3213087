import numpy as np
import pytest

from lpviz_solvers.errors import InfeasibleError, InvalidOptionsError, UnboundedError
from lpviz_solvers.solvers.simplex import simplex


def make_square():
    return [[1.0, 0.0, 1.0], [-1.0, 0.0, 0.0], [0.0, 1.0, 1.0], [0.0, -1.0, 0.0]]


def make_pentagon():
    # x <= 3, y <= 2, x + y <= 4, x >= 0, y >= 0
    return [[1.0, 0.0, 3.0], [0.0, 1.0, 2.0], [1.0, 1.0, 4.0], [-1.0, 0.0, 0.0], [0.0, -1.0, 0.0]]


def test_simplex_solves_unit_square():
    result = simplex(make_square(), [1.0, 1.0])

    assert result.status == "converged"
    assert result.converged
    assert result.iterates[-1] == pytest.approx([1.0, 1.0], abs=1e-9)
    assert "Optimal objective 2" in result.message


def test_simplex_pentagon_vertex():
    result = simplex(make_pentagon(), [2.0, 1.0])

    assert result.iterates[-1] == pytest.approx([3.0, 1.0], abs=1e-9)


@pytest.mark.parametrize("rule", ["dantzig", "bland"])
def test_pivot_rules_agree(rule):
    result = simplex(make_pentagon(), [1.0, 2.0], {"pivot_rule": rule})

    assert result.iterates[-1] == pytest.approx([2.0, 2.0], abs=1e-9)


def test_pivot_rule_alias():
    result = simplex(make_square(), [1.0, 1.0], {"pivotRule": "bland"})

    assert result.converged


def test_phase_traces():
    result = simplex(make_pentagon(), [2.0, 1.0])

    assert len(result.phase_logs) == 2
    assert result.phase_logs[0][-1].startswith("Phase 1 finished - basis ")
    assert result.phase_logs[1][-1].startswith("Phase 2 finished - basis ")
    assert result.logs == result.phase_logs[0] + result.phase_logs[1]
    assert 0 < result.phase_boundary <= len(result.iterates)
    # 2n + 2m columns in Phase I, 2n + m in Phase II
    assert {len(basis) for basis in result.bases} == {14, 9}
    for basis in result.bases:
        assert basis.count("1") == 5


def test_duplicate_phase_boundary_iterate_is_dropped():
    result = simplex(make_pentagon(), [2.0, 1.0])

    # one basis string per pivot iteration; Phase I has 2n + 2m columns
    phase1 = sum(1 for basis in result.bases if len(basis) == 14)
    phase2 = len(result.bases) - phase1

    assert result.phase_boundary == phase1
    # Phase II starts on the vertex Phase I ended on, so that copy is dropped once
    assert len(result.iterates) == phase1 + phase2 - 1


def test_iterates_are_feasible_vertices_in_phase_two():
    lines = np.array(make_pentagon())
    A, b = lines[:, :-1], lines[:, -1]
    result = simplex(make_pentagon(), [2.0, 1.0])

    for x in result.iterates[result.phase_boundary - 1 :]:
        assert np.all(A @ np.array(x) <= b + 1e-9)


def test_negative_rhs_needs_phase_one():
    # x >= 1, y >= 1, x + y <= 3
    lines = [[-1.0, 0.0, -1.0], [0.0, -1.0, -1.0], [1.0, 1.0, 3.0]]
    result = simplex(lines, [-1.0, -1.0])

    assert result.converged
    assert result.iterates[-1] == pytest.approx([1.0, 1.0], abs=1e-9)


def test_infeasible_problem_raises_with_partial_trace():
    with pytest.raises(InfeasibleError) as excinfo:
        simplex([[1.0, -1.0], [-1.0, 0.0]], [1.0])

    partial = excinfo.value.partial
    assert partial is not None
    assert partial.status == "infeasible"
    assert partial.iterates
    assert partial.logs[-1] == str(excinfo.value)


def test_unbounded_problem_raises():
    with pytest.raises(UnboundedError) as excinfo:
        simplex([[-1.0, 0.0, 0.0], [0.0, -1.0, 0.0]], [1.0, 1.0])

    assert excinfo.value.partial.status == "unbounded"


def test_invalid_options():
    with pytest.raises(InvalidOptionsError):
        simplex(make_square(), [1.0, 1.0], {"tol": -1.0})


def test_simplex_triangle():
    lines = [[-1.0, 0.0, 0.0], [0.0, -1.0, 0.0], [1.0, 1.0, 1.0]]
    result = simplex(lines, [1.0, 2.0])

    assert result.iterates[-1] == pytest.approx([0.0, 1.0], abs=1e-9)


def test_simplex_triangle_with_tied_optimum():
    lines = [[-1.0, 0.0, 0.0], [0.0, -1.0, 0.0], [1.0, 1.0, 1.0]]
    result = simplex(lines, [1.0, 1.0])

    x = result.iterates[-1]
    # any point of the edge x + y = 1 is optimal
    assert sum(x) == pytest.approx(1.0, abs=1e-9)
    assert min(x) >= -1e-9
    assert "Optimal objective 1" in result.message


def test_repeated_solves_are_identical():
    first = simplex(make_pentagon(), [2.0, 1.0])
    second = simplex(make_pentagon(), [2.0, 1.0])

    assert first.iterates == second.iterates
    assert first.bases == second.bases
