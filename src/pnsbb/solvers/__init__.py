from __future__ import annotations

from typing import Dict

from ..constants import Solver
from .base import (
    ConstraintData,
    ModelData,
    SolverBackend,
    SolverResult,
    SolverStats,
    SolverStatus,
)
from .highs_backend import HighsBackend
from .scipy_backend import ScipyBackend


_HIGHS_BACKEND = HighsBackend()
_SCIPY_BACKEND = ScipyBackend()


_SOLVER_BACKENDS: Dict[str, SolverBackend] = {
    Solver.HIGHS.value: _HIGHS_BACKEND,
    Solver.HIGHS_MILP.value: _HIGHS_BACKEND,
    Solver.SLSQP.value: _SCIPY_BACKEND,
}


def register_solver_backend(solver_name: str, backend: SolverBackend) -> None:
    _SOLVER_BACKENDS[solver_name] = backend


def get_solver_backend(solver: Solver | str) -> SolverBackend:
    solver_name = solver.value if isinstance(solver, Solver) else str(solver)
    if solver_name not in _SOLVER_BACKENDS:
        raise ValueError(f"No solver backend registered for solver '{solver_name}'")
    return _SOLVER_BACKENDS[solver_name]


__all__ = [
    "ConstraintData",
    "ModelData",
    "SolverBackend",
    "SolverResult",
    "SolverStats",
    "SolverStatus",
    "HighsBackend",
    "ScipyBackend",
    "get_solver_backend",
    "register_solver_backend",
]
