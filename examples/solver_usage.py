"""Examples building PNS branch-and-bound trees with each relaxation solver.

Each helper solves the bundled ``two_producers.txt`` definition (or a problem
built in code) with a specific solver and prints the best node. Execute this
module directly to run every example in sequence.
"""

from __future__ import annotations

from pathlib import Path

from pnsbb import (  # type: ignore
    Material,
    NodeState,
    OperatingUnit,
    Problem,
    Solver,
    describe_node,
    load_problem,
    node_label,
    objective_formula,
)


DATA = Path(__file__).with_name("two_producers.txt")


def _chain_problem() -> Problem:
    problem = Problem(
        [
            Material("R", "raw_material"),
            Material("I", "intermediate"),
            Material("P", "product", 5),
        ],
        [
            OperatingUnit("U1", 10, 10, 1),
            OperatingUnit("U2", 10, 20, 2),
        ],
    )
    problem.connect("U1", "R", "I")
    problem.connect("U2", "I", "P")
    return problem


def _print_tree(node, indent: str = "") -> None:
    change = ""
    if node.changed is not None:
        change = f"  ({node.changed.name}={node.changed.value:.0f})"
    marker = " *" if node.best else ""
    print(f"{indent}{node_label(node)}{change}{marker}")
    for child in node.children:
        _print_tree(child, indent + "  ")


def _solve(problem: Problem, solver: Solver, *, solver_options=None, label: str = ""):
    result = problem.solve(solver=solver, solver_options=solver_options or {})

    print(f"{label or solver.value}: {result.stats.nodes_created} nodes")
    _print_tree(result.root, "  ")
    if result.best is None:
        print("  No integral solution")
        return
    print(f"  {objective_formula(problem.units, result.best)}")
    for line in describe_node(result.best).splitlines():
        print(f"  {line}")


def solve_with_highs_lp():
    _solve(load_problem(DATA), Solver.HIGHS, label="HiGHS (LP relaxation)")


def solve_with_highs_milp():
    _solve(load_problem(DATA), Solver.HIGHS_MILP, label="HiGHS (MILP)")


def solve_with_slsqp():
    _solve(load_problem(DATA), Solver.SLSQP, label="SLSQP")


def solve_chain_in_parallel():
    _solve(
        _chain_problem(),
        Solver.HIGHS,
        solver_options={"bb_parallel": True, "bb_max_workers": 4},
        label="HiGHS, parallel",
    )


def solve_chain_with_pruning():
    problem = _chain_problem()
    result = problem.solve(solver_options={"bb_prune": True})
    pruned = [node for node in result.iter_nodes() if node.state == NodeState.PRUNED]
    print(f"Pruning: {result.stats.nodes_created} nodes, {len(pruned)} pruned")


EXAMPLES = [
    solve_with_highs_lp,
    solve_with_highs_milp,
    solve_with_slsqp,
    solve_chain_in_parallel,
    solve_chain_with_pruning,
]


def run_all_examples():
    for example in EXAMPLES:
        example()
        print()


if __name__ == "__main__":  # pragma: no cover
    run_all_examples()
