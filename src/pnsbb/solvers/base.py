from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Dict, List, Optional, Protocol

import autograd.numpy as anp  # type: ignore


ArrayLike = anp.ndarray


class SolverStatus(StrEnum):
    OPTIMAL = "optimal"
    SUBOPTIMAL = "suboptimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    MAX_ITERATIONS = "max_iterations"
    NUMERICAL_ERROR = "numerical_error"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass
class ConstraintData:
    type: str
    fun: Callable[[ArrayLike], ArrayLike]
    jac: Callable[[ArrayLike], ArrayLike]


@dataclass
class ModelData:
    """
    A linear model in the row form ``b_lower <= A x <= b_upper``.

    Variables keep their declaration order everywhere: in ``var_names``, in
    the bound and integrality vectors, in the columns of ``A`` and in the
    solution vector a backend returns.
    """

    var_names: List[str]
    c: ArrayLike
    lb: ArrayLike
    ub: ArrayLike
    integrality: ArrayLike
    A: ArrayLike
    b_lower: ArrayLike
    b_upper: ArrayLike
    constraint_names: List[str] = field(default_factory=list)

    @property
    def n_vars(self) -> int:
        return len(self.var_names)

    @property
    def n_constraints(self) -> int:
        return len(self.constraint_names)

    def objective(self, x: ArrayLike) -> float:
        return float(anp.dot(self.c, x))

    def max_violation(self, x: ArrayLike) -> float:
        """Largest bound or row violation of ``x`` (0 when feasible)."""
        x = anp.asarray(x, dtype=float)
        violation = 0.0
        if self.n_vars:
            violation = max(
                violation,
                float(anp.max(anp.maximum(self.lb - x, 0.0))),
                float(anp.max(anp.maximum(x - self.ub, 0.0))),
            )
        if self.n_constraints:
            rows = anp.dot(self.A, x)
            violation = max(
                violation,
                float(anp.max(anp.maximum(self.b_lower - rows, 0.0))),
                float(anp.max(anp.maximum(rows - self.b_upper, 0.0))),
            )
        return violation

    def unpack(self, x) -> Dict[str, float]:
        return {name: float(val) for name, val in zip(self.var_names, x)}


@dataclass
class SolverStats:
    solver_name: str
    solve_time: Optional[float] = None
    num_iters: Optional[int] = None


@dataclass
class SolverResult:
    x: Optional[ArrayLike]
    objective: float
    status: SolverStatus
    stats: SolverStats
    message: str = ""
    raw_result: Optional[object] = None

    @property
    def has_solution(self) -> bool:
        return self.x is not None


class SolverBackend(Protocol):
    def solve(
        self,
        model: ModelData,
        solver: str,
        solver_options: Dict[str, object],
    ) -> SolverResult:
        ...
