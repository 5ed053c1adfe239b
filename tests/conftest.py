import threading

import autograd.numpy as np
import pytest

from pnsbb.material import Material
from pnsbb.operating_unit import OperatingUnit
from pnsbb.problem import Problem
from pnsbb.solvers.base import SolverResult, SolverStats, SolverStatus


SCENARIO_A = """\
materials:
R: raw_material
P: product, flow_rate_lower_bound=4


operating_units:
U1: capacity_upper_bound=10, fixed_cost=5, proportional_cost=1


material_to_operating_unit_flow_rates:
U1: R => P
"""


def make_problem(materials, units, flows):
    """
    materials: [(name, type, lower_bound)]
    units: [(name, capacity, fixed_cost, proportional_cost)]
    flows: [(unit, input, output)]
    """
    problem = Problem(
        [Material(name, kind, lb) for name, kind, lb in materials],
        [OperatingUnit(*unit) for unit in units],
    )
    for unit, input_name, output_name in flows:
        problem.connect(unit, input_name, output_name)
    return problem


@pytest.fixture
def scenario_a():
    """One unit R -> P, P needs 4 units of flow."""
    return make_problem(
        [("R", "raw_material", 0), ("P", "product", 4)],
        [("U1", 10, 5, 1)],
        [("U1", "R", "P")],
    )


@pytest.fixture
def scenario_c():
    """Chain R -> I -> P; both activations are fractional at the root."""
    return make_problem(
        [("R", "raw_material", 0), ("I", "intermediate", 0), ("P", "product", 5)],
        [("U1", 10, 10, 1), ("U2", 10, 20, 2)],
        [("U1", "R", "I"), ("U2", "I", "P")],
    )


@pytest.fixture
def alternatives():
    """Two units competing for the same product."""
    return make_problem(
        [("R1", "raw_material", 0), ("R2", "raw_material", 0), ("P", "product", 4)],
        [("U1", 10, 5, 1), ("U2", 10, 1, 3)],
        [("U1", "R1", "P"), ("U2", "R2", "P")],
    )


@pytest.fixture
def undersized():
    """The only unit is too small for the demand, so even the root is infeasible."""
    return make_problem(
        [("R", "raw_material", 0), ("P", "product", 10)],
        [("U1", 5, 5, 1)],
        [("U1", "R", "P")],
    )


def pinned(model):
    """The variables a model pins, as a frozenset of (name, value)."""
    return frozenset(
        (name, float(lo))
        for name, lo, hi in zip(model.var_names, model.lb, model.ub)
        if lo == hi
    )


class ScriptedBackend:
    """
    A solver backend that answers from a script instead of solving.

    The script maps the set of pinned variables to one of:
    - ``(values, objective)``: an optimal solution, unset variables are 0
    - ``None``: infeasible
    - an exception instance: raised
    - a ``SolverResult``: returned as is
    """

    def __init__(self, script):
        self.script = {frozenset(key.items()): value for key, value in script}
        self.calls = []
        self._lock = threading.Lock()

    def solve(self, model, solver, solver_options):
        pins = pinned(model)
        with self._lock:
            self.calls.append(pins)
        response = self.script[pins]

        stats = SolverStats(solver_name="scripted")
        if isinstance(response, Exception):
            raise response
        if isinstance(response, SolverResult):
            return response
        if response is None:
            return SolverResult(
                x=None,
                objective=float("inf"),
                status=SolverStatus.INFEASIBLE,
                stats=stats,
            )

        values, objective = response
        x = np.array([float(values.get(name, 0.0)) for name in model.var_names])
        return SolverResult(x=x, objective=objective, status=SolverStatus.OPTIMAL, stats=stats)


@pytest.fixture
def scripted():
    return ScriptedBackend
