from __future__ import annotations

import time
from typing import Dict, List, Tuple

import autograd.numpy as np  # type: ignore
from autograd import grad, jacobian  # type: ignore
from scipy.optimize import minimize  # type: ignore

from ..constants import (
    DEFAULT_FEAS_TOL,
    DEFAULT_SLSQP_FTOL,
    DEFAULT_SLSQP_MAXITER,
    DEFAULT_SNAP_TOL,
    Solver,
)
from .base import (
    ConstraintData,
    ModelData,
    SolverResult,
    SolverStats,
    SolverStatus,
)


class ScipyBackend:
    """
    Relaxation through ``scipy.optimize.minimize(method="SLSQP")``.

    SLSQP only ever sees the continuous relaxation. Its answers are accurate
    to the requested tolerance, so values that land within ``snap_tol`` of an
    integer are snapped before the result is handed back. A point that still
    violates a row or a bound by more than ``feas_tol`` has no solution: it
    is infeasible when SLSQP found the constraints incompatible or claimed
    success, otherwise the exit status (iteration limit, numerical failure)
    is kept so the node is not mistaken for an infeasible one.
    """

    SUPPORTED_METHODS = {Solver.SLSQP.value}

    def solve(
        self,
        model: ModelData,
        solver: str,
        solver_options: Dict[str, object],
    ) -> SolverResult:
        method = str(solver)
        if method not in self.SUPPORTED_METHODS:
            raise ValueError(f"Solver '{method}' is not supported by the SciPy backend")

        options = dict(solver_options)
        snap_tol = float(options.pop("snap_tol", DEFAULT_SNAP_TOL))
        feas_tol = float(options.pop("feas_tol", DEFAULT_FEAS_TOL))
        options.setdefault("maxiter", DEFAULT_SLSQP_MAXITER)
        options.setdefault("ftol", DEFAULT_SLSQP_FTOL)

        obj_func = self._build_objective(model)
        gradient = grad(obj_func)
        cons = [self._to_scipy_constraint(c) for c in self._build_constraint_data(model)]
        bounds = self._get_scipy_bounds(model)
        x0 = self._get_start_point(model)

        start_time = time.time()
        result = minimize(
            obj_func,
            x0,
            jac=gradient,
            bounds=bounds,
            constraints=cons,
            method=method,
            options=options,
        )
        solve_time = time.time() - start_time

        x_sol = self._snap(np.asarray(result.x, dtype=float), snap_tol)
        violation = model.max_violation(x_sol)

        if violation <= feas_tol:
            status = self._interpret_status(result)
            x_out = x_sol
            objective = model.objective(x_sol)
        else:
            x_out = None
            objective = float("inf")
            status = self._violated_status(result)

        stats = SolverStats(
            solver_name=method,
            solve_time=solve_time,
            num_iters=getattr(result, "nit", None),
        )

        return SolverResult(
            x=x_out,
            objective=objective,
            status=status,
            stats=stats,
            message=str(getattr(result, "message", "")),
            raw_result=result,
        )

    @staticmethod
    def _build_objective(model: ModelData):
        c = np.asarray(model.c, dtype=float)

        def obj(x):
            return np.dot(c, x)

        return obj

    @staticmethod
    def _build_constraint_data(model: ModelData) -> List[ConstraintData]:
        constraints: List[ConstraintData] = []
        A = np.asarray(model.A, dtype=float)

        lower_rows = [i for i in range(model.n_constraints) if np.isfinite(model.b_lower[i])]
        upper_rows = [i for i in range(model.n_constraints) if np.isfinite(model.b_upper[i])]

        # SLSQP wants every inequality as fun(x) >= 0
        if lower_rows:
            A_low = A[lower_rows]
            b_low = np.asarray(model.b_lower, dtype=float)[lower_rows]

            def lower_fun(x):
                return np.dot(A_low, x) - b_low

            constraints.append(
                ConstraintData(type="ineq", fun=lower_fun, jac=jacobian(lower_fun))
            )

        if upper_rows:
            A_up = A[upper_rows]
            b_up = np.asarray(model.b_upper, dtype=float)[upper_rows]

            def upper_fun(x):
                return b_up - np.dot(A_up, x)

            constraints.append(
                ConstraintData(type="ineq", fun=upper_fun, jac=jacobian(upper_fun))
            )

        return constraints

    @staticmethod
    def _to_scipy_constraint(constraint: ConstraintData) -> Dict[str, object]:
        return {"type": constraint.type, "fun": constraint.fun, "jac": constraint.jac}

    @staticmethod
    def _get_scipy_bounds(model: ModelData) -> List[Tuple[float | None, float | None]]:
        return [
            (
                float(lb) if np.isfinite(lb) else None,
                float(ub) if np.isfinite(ub) else None,
            )
            for lb, ub in zip(model.lb, model.ub)
        ]

    @staticmethod
    def _get_start_point(model: ModelData):
        x0 = np.zeros(model.n_vars)
        lb = np.where(np.isfinite(model.lb), model.lb, -1e8)
        ub = np.where(np.isfinite(model.ub), model.ub, 1e8)
        return np.clip(x0, lb, ub)

    @staticmethod
    def _snap(x, tol: float):
        rounded = np.round(x)
        return np.where(np.abs(x - rounded) <= tol, rounded, x)

    @classmethod
    def _violated_status(cls, result) -> SolverStatus:
        """Status for a final point that still violates the model."""
        # Mode 4: inequality constraints incompatible
        if bool(getattr(result, "success", False)) or getattr(result, "status", None) == 4:
            return SolverStatus.INFEASIBLE

        status = cls._interpret_status(result)
        if status in (SolverStatus.OPTIMAL, SolverStatus.SUBOPTIMAL):
            return SolverStatus.NUMERICAL_ERROR
        return status

    @staticmethod
    def _interpret_status(result) -> SolverStatus:
        if bool(getattr(result, "success", False)):
            return SolverStatus.OPTIMAL

        # SLSQP exit modes
        status_map = {
            0: SolverStatus.OPTIMAL,
            4: SolverStatus.SUBOPTIMAL,
            8: SolverStatus.SUBOPTIMAL,
            9: SolverStatus.MAX_ITERATIONS,
        }
        status_code = getattr(result, "status", None)
        if status_code is None:
            return SolverStatus.UNKNOWN
        return status_map.get(status_code, SolverStatus.NUMERICAL_ERROR)
