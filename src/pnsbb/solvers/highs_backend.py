"""
HiGHS relaxation backend.

Both the LP relaxation and the mixed-integer model are handed to
``scipy.optimize.milp``. The LP relaxation is the same call with every
integrality flag cleared, so the two solvers only differ in what they
promise about the ``Y`` variables.
"""

from __future__ import annotations

import time
from typing import Dict

import autograd.numpy as np
from scipy.optimize import Bounds, LinearConstraint, milp  # type: ignore

from ..constants import Solver
from .base import ModelData, SolverResult, SolverStats, SolverStatus


class HighsBackend:
    SUPPORTED_METHODS = {Solver.HIGHS.value, Solver.HIGHS_MILP.value}

    # scipy.optimize.milp status codes
    _STATUS = {
        0: SolverStatus.OPTIMAL,
        1: SolverStatus.MAX_ITERATIONS,
        2: SolverStatus.INFEASIBLE,
        3: SolverStatus.UNBOUNDED,
        4: SolverStatus.NUMERICAL_ERROR,
    }

    def solve(
        self,
        model: ModelData,
        solver: str,
        solver_options: Dict[str, object],
    ) -> SolverResult:
        method = str(solver)
        if method not in self.SUPPORTED_METHODS:
            raise ValueError(f"Solver '{method}' is not supported by the HiGHS backend")

        if method == Solver.HIGHS_MILP.value:
            integrality = np.asarray(model.integrality, dtype=int)
        else:
            integrality = np.zeros(model.n_vars, dtype=int)

        constraints = None
        if model.n_constraints:
            constraints = LinearConstraint(model.A, model.b_lower, model.b_upper)

        start_time = time.time()
        result = milp(
            c=model.c,
            integrality=integrality,
            bounds=Bounds(model.lb, model.ub),
            constraints=constraints,
            options=dict(solver_options),
        )
        solve_time = time.time() - start_time

        status = self._STATUS.get(result.status, SolverStatus.UNKNOWN)
        x = None if result.x is None else np.asarray(result.x, dtype=float)
        if status == SolverStatus.MAX_ITERATIONS and x is not None:
            status = SolverStatus.SUBOPTIMAL

        objective = float(result.fun) if x is not None and result.fun is not None else float("inf")

        stats = SolverStats(
            solver_name=method,
            solve_time=solve_time,
            num_iters=getattr(result, "mip_node_count", None),
        )

        return SolverResult(
            x=x,
            objective=objective,
            status=status,
            stats=stats,
            message=str(getattr(result, "message", "")),
            raw_result=result,
        )
