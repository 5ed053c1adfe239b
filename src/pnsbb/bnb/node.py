"""
Branch-and-Bound Tree Data Structures

This module contains the nodes of the materialized search tree together
with the per-node solution snapshot and the run statistics.

Node lifecycle:
- A node is created once, solved once and either branched (two children)
  or closed as a leaf (integral, infeasible, solver error or pruned).
- After construction only ``status.best`` may change: it is set when the
  node becomes the incumbent and cleared when a later leaf beats it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from ..solvers.base import SolverStatus


class NodeState(Enum):
    """How a node was closed."""

    BRANCHED = "branched"
    INTEGRAL = "integral"
    INFEASIBLE = "infeasible"
    ERROR = "error"  # The relaxation solver raised or returned no solution
    PRUNED = "pruned"  # Relaxation value could not beat the incumbent


@dataclass(frozen=True)
class VariableState:
    """Value of one decision variable at a node, and the value it had before."""

    name: str
    value: float
    previous_value: float


@dataclass
class SolutionStatus:
    value: float = float("inf")
    feasible: bool = True
    best: bool = False
    variables: Optional[Tuple[VariableState, ...]] = None
    changed: Optional[VariableState] = None
    solver_status: Optional[SolverStatus] = None
    message: str = ""

    def values(self) -> Dict[str, float]:
        if self.variables is None:
            return {}
        return {v.name: v.value for v in self.variables}

    def variable(self, name: str) -> Optional[VariableState]:
        for v in self.variables or ():
            if v.name == name:
                return v
        return None


@dataclass(eq=False)
class Node:
    """
    A vertex of the branch-and-bound tree.

    ``path`` lists the branching steps from the root (0 = left, 1 = right);
    sorting nodes by path gives the pre-order in which a sequential build
    visits them. ``overrides`` are the variable pins the node was solved with.
    """

    level: int
    path: Tuple[int, ...] = ()
    overrides: Tuple[Optional[float], ...] = ()
    status: SolutionStatus = field(default_factory=SolutionStatus)
    state: Optional[NodeState] = None
    left: Optional["Node"] = None
    right: Optional["Node"] = None

    @property
    def children(self) -> Tuple["Node", ...]:
        return tuple(child for child in (self.left, self.right) if child is not None)

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def value(self) -> float:
        return self.status.value

    @property
    def feasible(self) -> bool:
        return self.status.feasible

    @property
    def best(self) -> bool:
        return self.status.best

    @property
    def changed(self) -> Optional[VariableState]:
        return self.status.changed

    def iter_nodes(self) -> Iterator["Node"]:
        """Walk this subtree in pre-order (node, left subtree, right subtree)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def __repr__(self):
        state = self.state.value if self.state else "unsolved"
        return f"Node(level={self.level}, path={self.path}, value={self.value}, state={state})"


@dataclass
class BBStats:
    """Statistics from one tree build."""

    nodes_created: int = 0
    relaxations_solved: int = 0
    nodes_branched: int = 0
    nodes_integral: int = 0
    nodes_infeasible: int = 0
    nodes_error: int = 0
    nodes_pruned: int = 0
    incumbent_updates: int = 0
    max_level: int = 0
    solve_time: float = 0.0
