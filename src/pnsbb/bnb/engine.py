"""
Branch-and-Bound Engine for Process Network Synthesis

Builds the complete branch-and-bound tree of a PNS problem. Every node
rebuilds the relaxation with its own variable pins, solves it through a
registered solver backend and either closes the node or branches on a
fractional variable.

Features:
- Depth-first construction on an explicit stack, or plain recursion
- First-fractional (default) or most-fractional branching
- Optional pruning against the incumbent
- Optional concurrent construction of sibling subtrees
- Solver faults become explicit error leaves instead of stale data
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..builder import build_model, empty_overrides, variable_names
from ..constants import DEFAULT_INT_TOL, Solver
from ..operating_unit import OperatingUnit
from ..solvers import (
    ModelData,
    SolverBackend,
    SolverResult,
    SolverStatus,
    get_solver_backend,
)
from .branching import (
    BranchingStrategy,
    branch_values,
    child_overrides,
    get_fractional_variables,
    select_branching_variable,
)
from .incumbent import Incumbent
from .node import BBStats, Node, NodeState, VariableState

logger = logging.getLogger(__name__)


TRAVERSALS = ("depth_first", "recursive")


@dataclass
class BnBOptions:
    traversal: str = "depth_first"
    branching: BranchingStrategy = BranchingStrategy.FIRST_FRACTIONAL
    int_tol: float = DEFAULT_INT_TOL
    prune: bool = False
    parallel: bool = False
    max_workers: Optional[int] = None
    verbose: bool = False

    @classmethod
    def from_options(cls, solver_options: Dict[str, object]) -> Tuple["BnBOptions", Dict[str, object]]:
        """Pop the ``bb_*`` keys; everything left over belongs to the backend."""
        options = dict(solver_options)
        traversal = str(options.pop("bb_traversal", "depth_first"))
        branching = BranchingStrategy(str(options.pop("bb_branching", "first_fractional")))
        int_tol = float(options.pop("bb_int_tol", DEFAULT_INT_TOL))
        prune = bool(options.pop("bb_prune", False))
        parallel = bool(options.pop("bb_parallel", False))
        max_workers = options.pop("bb_max_workers", None)
        verbose = bool(options.pop("bb_verbose", False))

        if traversal not in TRAVERSALS:
            raise ValueError(f"bb_traversal must be one of {TRAVERSALS}, got '{traversal}'")
        if int_tol < 0:
            raise ValueError(f"bb_int_tol must be non-negative, got {int_tol}")
        if max_workers is not None:
            max_workers = int(max_workers)
            if max_workers <= 0:
                raise ValueError(f"bb_max_workers must be positive, got {max_workers}")

        bnb_options = cls(
            traversal=traversal,
            branching=branching,
            int_tol=int_tol,
            prune=prune,
            parallel=parallel,
            max_workers=max_workers,
            verbose=verbose,
        )
        return bnb_options, options


@dataclass
class BnBResult:
    root: Node
    best: Optional[Node]
    stats: BBStats
    var_names: List[str] = field(default_factory=list)

    def iter_nodes(self) -> Iterator[Node]:
        return self.root.iter_nodes()

    def leaves(self) -> List[Node]:
        return [node for node in self.iter_nodes() if node.is_leaf]

    @property
    def objective(self) -> float:
        return self.best.value if self.best is not None else float("inf")

    @property
    def solution(self) -> Dict[str, float]:
        return self.best.status.values() if self.best is not None else {}


@dataclass
class _Task:
    """A node waiting to be solved."""

    overrides: Tuple[Optional[float], ...]
    parent: Optional[Node]
    side: int  # 0 = left child, 1 = right child
    changed: Optional[VariableState]


@dataclass
class _Outcome:
    """What solving a task produced: a model and result, or the raised error."""

    model: Optional[ModelData]
    result: Optional[SolverResult]
    error: Optional[Exception] = None


class BranchAndBoundEngine:
    """
    Exhaustive branch-and-bound over the PNS relaxation.

    The engine keeps no state between calls to :meth:`build` other than
    the problem definition; every build gets its own incumbent and stats.
    """

    def __init__(
        self,
        units: Sequence[OperatingUnit],
        solver: Solver | str = Solver.HIGHS,
        solver_options: Optional[Dict[str, object]] = None,
        backend: Optional[SolverBackend] = None,
    ):
        if not units:
            raise ValueError("At least one operating unit is required")
        for unit in units:
            if not unit.is_connected:
                raise ValueError(
                    f"Operating unit '{unit.name}' needs both an input and an output material"
                )

        self.units = list(units)
        self.solver_name = solver.value if isinstance(solver, Solver) else str(solver)
        self.backend = backend if backend is not None else get_solver_backend(solver)
        self.options, self.backend_options = BnBOptions.from_options(solver_options or {})

    def build(self) -> BnBResult:
        """Build the whole tree and return it with the best integral leaf."""
        start_time = time.time()
        stats = BBStats()
        incumbent = Incumbent()
        root_task = _Task(
            overrides=empty_overrides(len(self.units)),
            parent=None,
            side=0,
            changed=None,
        )

        if self.options.verbose:
            print(
                f"Branch-and-Bound: {len(self.units)} operating units, "
                f"{2 * len(self.units)} variables"
            )
            print(f"{'Nodes':>8} {'Level':>6} {'Incumbent':>14} {'Time':>8}")
            print("-" * 40)

        if self.options.parallel:
            if self.options.traversal != "depth_first":
                logger.debug(
                    f"bb_traversal='{self.options.traversal}' is ignored, "
                    f"bb_parallel builds the tree level by level"
                )
            logger.debug("Building tree in parallel waves")
        else:
            logger.debug(f"Building tree with {self.options.traversal} traversal")

        if self.options.parallel:
            root = self._build_parallel(root_task, incumbent, stats, start_time)
        elif self.options.traversal == "recursive":
            root = self._build_recursive(root_task, incumbent, stats, start_time)
        else:
            root = self._build_depth_first(root_task, incumbent, stats, start_time)

        stats.solve_time = time.time() - start_time
        best = incumbent.node

        logger.info(
            f"Built tree with {stats.nodes_created} nodes "
            f"({stats.nodes_branched} branched, {stats.nodes_integral} integral, "
            f"{stats.nodes_infeasible} infeasible, {stats.nodes_error} errors, "
            f"{stats.nodes_pruned} pruned) in {stats.solve_time:.3f}s; "
            f"best value {best.value if best is not None else 'none'}"
        )
        if self.options.verbose:
            print(
                f"Done: {stats.nodes_created} nodes, best "
                f"{best.value if best is not None else 'none'}, {stats.solve_time:.2f}s"
            )

        return BnBResult(
            root=root,
            best=best,
            stats=stats,
            var_names=variable_names(len(self.units)),
        )

    def _build_depth_first(
        self, root_task: _Task, incumbent: Incumbent, stats: BBStats, start_time: float
    ) -> Node:
        root: Optional[Node] = None
        stack: List[_Task] = [root_task]
        while stack:
            task = stack.pop()
            node, children = self._process(task, self._solve(task), incumbent, stats, start_time)
            if root is None:
                root = node
            # Right pushed first so the left subtree is finished first
            stack.extend(reversed(children))
        return root

    def _build_recursive(
        self, task: _Task, incumbent: Incumbent, stats: BBStats, start_time: float
    ) -> Node:
        node, children = self._process(task, self._solve(task), incumbent, stats, start_time)
        for child in children:
            self._build_recursive(child, incumbent, stats, start_time)
        return node

    def _build_parallel(
        self, root_task: _Task, incumbent: Incumbent, stats: BBStats, start_time: float
    ) -> Node:
        """
        Solve the tree one level at a time on a thread pool.

        Workers only build and solve relaxations; nodes are attached, counted
        and offered to the incumbent on this thread, in wave order.
        """
        root: Optional[Node] = None
        wave: List[_Task] = [root_task]
        with ThreadPoolExecutor(max_workers=self.options.max_workers) as pool:
            while wave:
                solved = list(pool.map(self._solve, wave))
                next_wave: List[_Task] = []
                for task, outcome in zip(wave, solved):
                    node, children = self._process(task, outcome, incumbent, stats, start_time)
                    if root is None:
                        root = node
                    next_wave.extend(children)
                wave = next_wave
        return root

    def _solve(self, task: _Task) -> _Outcome:
        try:
            model = build_model(self.units, task.overrides)
            result = self.backend.solve(model, self.solver_name, self.backend_options)
        except Exception as e:
            return _Outcome(model=None, result=None, error=e)
        return _Outcome(model=model, result=result)

    def _process(
        self,
        task: _Task,
        outcome: _Outcome,
        incumbent: Incumbent,
        stats: BBStats,
        start_time: float,
    ) -> Tuple[Node, List[_Task]]:
        """Create the node for a solved task, close it or return its child tasks."""
        parent = task.parent
        if parent is None:
            level, path = 1, ()
        else:
            level, path = parent.level + 1, parent.path + (task.side,)
        where = path or "root"

        node = Node(level=level, path=path, overrides=task.overrides)
        node.status.changed = task.changed
        if parent is not None:
            if task.side == 0:
                parent.left = node
            else:
                parent.right = node

        stats.nodes_created += 1
        stats.max_level = max(stats.max_level, level)

        if outcome.error is not None:
            error = outcome.error
            logger.warning(f"Relaxation solve failed at node {where}: {error}")
            self._close_error(node, str(error) or type(error).__name__, SolverStatus.ERROR, stats)
            return node, []

        model, result = outcome.model, outcome.result
        stats.relaxations_solved += 1
        node.status.solver_status = result.status

        if result.status == SolverStatus.INFEASIBLE:
            node.status.feasible = False
            node.state = NodeState.INFEASIBLE
            stats.nodes_infeasible += 1
            logger.debug(f"Node {where} (level {level}): infeasible")
            return node, []

        if not result.has_solution:
            logger.warning(
                f"Relaxation at node {where} returned status "
                f"'{result.status}' without a solution: {result.message}"
            )
            self._close_error(node, result.message or str(result.status), result.status, stats)
            return node, []

        node.status.value = result.objective
        node.status.variables = tuple(
            VariableState(name, float(val), float(val))
            for name, val in zip(model.var_names, result.x)
        )

        violations = get_fractional_variables(result.x, self.options.int_tol)
        choice = select_branching_variable(violations, self.options.branching)

        if choice is None:
            node.state = NodeState.INTEGRAL
            stats.nodes_integral += 1
            if incumbent.offer(node):
                stats.incumbent_updates += 1
                logger.debug(f"New incumbent {node.value} at node {where}")
                if self.options.verbose:
                    print(
                        f"{stats.nodes_created:>8} {level:>6} {node.value:>14.6g} "
                        f"{time.time() - start_time:>7.2f}s *"
                    )
            else:
                logger.debug(f"Node {where} (level {level}): integral, value {node.value}")
            return node, []

        if self.options.prune and node.value >= incumbent.value:
            node.state = NodeState.PRUNED
            stats.nodes_pruned += 1
            logger.debug(f"Node {where} pruned: {node.value} >= incumbent {incumbent.value}")
            return node, []

        branch_idx, branch_val = choice
        left_value, right_value = branch_values(branch_val)
        left_overrides, right_overrides = child_overrides(
            task.overrides, branch_idx, left_value, right_value
        )
        name = model.var_names[branch_idx]

        node.state = NodeState.BRANCHED
        stats.nodes_branched += 1
        logger.debug(
            f"Node {where} (level {level}): value {node.value}, "
            f"branch on {name}={branch_val:.6g} -> {left_value} | {right_value}"
        )

        children = [
            _Task(
                overrides=left_overrides,
                parent=node,
                side=0,
                changed=VariableState(name, left_value, branch_val),
            ),
            _Task(
                overrides=right_overrides,
                parent=node,
                side=1,
                changed=VariableState(name, right_value, branch_val),
            ),
        ]
        return node, children

    @staticmethod
    def _close_error(node: Node, message: str, status: SolverStatus, stats: BBStats) -> None:
        node.status.feasible = False
        node.status.solver_status = status
        node.status.message = message
        node.status.variables = None
        node.state = NodeState.ERROR
        stats.nodes_error += 1
