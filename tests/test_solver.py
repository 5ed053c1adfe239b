import autograd.numpy as np
import pytest

import pnsbb
from pnsbb.builder import build_model
from pnsbb.constants import Solver
from pnsbb.solvers import (
    HighsBackend,
    ScipyBackend,
    get_solver_backend,
    register_solver_backend,
)
from pnsbb.solvers import _SOLVER_BACKENDS
from pnsbb.solvers.base import SolverStatus


def test_registry():
    assert isinstance(get_solver_backend(Solver.HIGHS), HighsBackend)
    assert isinstance(get_solver_backend("HiGHS-MILP"), HighsBackend)
    assert isinstance(get_solver_backend(pnsbb.SLSQP), ScipyBackend)

    with pytest.raises(ValueError, match="No solver backend registered"):
        get_solver_backend("CPLEX")


def test_register_backend(scripted, scenario_a):
    backend = scripted([({}, ({"X1": 4, "Y1": 1}, 9.0))])
    register_solver_backend("scripted", backend)
    try:
        result = scenario_a.solve(solver="scripted")
    finally:
        _SOLVER_BACKENDS.pop("scripted")

    assert result.objective == 9.0
    assert backend.calls == [frozenset()]


def test_highs_lp_relaxation(scenario_a):
    model = build_model(scenario_a.units)
    result = HighsBackend().solve(model, Solver.HIGHS, {})

    assert result.status == SolverStatus.OPTIMAL
    assert result.objective == pytest.approx(6.0)
    assert np.allclose(result.x, [4.0, 0.4])
    assert result.stats.solver_name == "HiGHS"


def test_highs_milp(scenario_a):
    model = build_model(scenario_a.units)
    result = HighsBackend().solve(model, Solver.HIGHS_MILP, {})

    assert result.status == SolverStatus.OPTIMAL
    assert result.objective == pytest.approx(9.0)
    assert np.allclose(result.x, [4.0, 1.0])


def test_highs_infeasible(scenario_a):
    model = build_model(scenario_a.units, (None, 0))
    result = HighsBackend().solve(model, Solver.HIGHS, {})

    assert result.status == SolverStatus.INFEASIBLE
    assert not result.has_solution
    assert result.objective == float("inf")


def test_highs_rejects_other_methods(scenario_a):
    model = build_model(scenario_a.units)
    with pytest.raises(ValueError, match="not supported by the HiGHS backend"):
        HighsBackend().solve(model, Solver.SLSQP, {})


def test_slsqp_relaxation(scenario_a):
    model = build_model(scenario_a.units)
    result = ScipyBackend().solve(model, Solver.SLSQP, {})

    assert result.status in (SolverStatus.OPTIMAL, SolverStatus.SUBOPTIMAL)
    assert result.objective == pytest.approx(6.0, abs=1e-4)
    assert result.x[0] == pytest.approx(4.0, abs=1e-4)
    assert result.x[1] == pytest.approx(0.4, abs=1e-4)


def test_slsqp_snaps_integral_values(scenario_a):
    model = build_model(scenario_a.units, (None, 1))
    result = ScipyBackend().solve(model, Solver.SLSQP, {})

    assert result.has_solution
    assert result.x[0] == 4.0
    assert result.x[1] == 1.0
    assert result.objective == 9.0


def test_slsqp_reports_infeasible(scenario_a):
    model = build_model(scenario_a.units, (None, 0))
    result = ScipyBackend().solve(model, Solver.SLSQP, {})

    assert result.status == SolverStatus.INFEASIBLE
    assert result.x is None


def test_slsqp_rejects_other_methods(scenario_a):
    model = build_model(scenario_a.units)
    with pytest.raises(ValueError, match="not supported by the SciPy backend"):
        ScipyBackend().solve(model, Solver.HIGHS, {})


def test_slsqp_iteration_limit_is_not_infeasible(scenario_a, scenario_c, alternatives):
    for problem in (scenario_a, scenario_c, alternatives):
        model = build_model(problem.units)
        result = ScipyBackend().solve(model, Solver.SLSQP, {"maxiter": 0})

        assert result.raw_result.status == 9
        assert result.status == SolverStatus.MAX_ITERATIONS
        assert result.x is None


def test_slsqp_iteration_limit_gives_error_node(scenario_a):
    result = scenario_a.solve(solver=Solver.SLSQP, solver_options={"maxiter": 0})
    root = result.root

    assert root.state == pnsbb.NodeState.ERROR
    assert root.status.solver_status == SolverStatus.MAX_ITERATIONS
    assert root.is_leaf
    assert result.best is None
