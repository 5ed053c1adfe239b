from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .constants import Solver
from .parser import load_problem
from .problem import ProblemDefinitionError
from .report import describe_node, objective_formula, tree_to_dict

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s | %(message)s"


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    logger = logging.getLogger("pnsbb")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pnsbb",
        description="Solve a Process Network Synthesis problem by branch-and-bound.",
    )
    parser.add_argument("path", help="problem definition file")
    parser.add_argument(
        "--solver",
        choices=[s.value for s in Solver],
        default=Solver.HIGHS.value,
        help="relaxation solver (default: %(default)s)",
    )
    parser.add_argument(
        "--traversal",
        choices=["depth_first", "recursive"],
        default="depth_first",
    )
    parser.add_argument(
        "--branching",
        choices=["first_fractional", "most_fractional"],
        default="first_fractional",
    )
    parser.add_argument("--prune", action="store_true", help="skip subtrees that cannot improve")
    parser.add_argument("--parallel", action="store_true", help="solve sibling nodes concurrently")
    parser.add_argument("--workers", type=int, default=None, help="thread pool size")
    parser.add_argument("--json", action="store_true", help="print the whole tree as JSON")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        problem = load_problem(args.path)
    except (OSError, ProblemDefinitionError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    solver_options = {
        "bb_traversal": args.traversal,
        "bb_branching": args.branching,
        "bb_prune": args.prune,
        "bb_parallel": args.parallel,
    }
    if args.workers is not None:
        solver_options["bb_max_workers"] = args.workers

    try:
        result = problem.solve(solver=args.solver, solver_options=solver_options)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(tree_to_dict(result.root), indent=2))
    else:
        stats = result.stats
        print(
            f"Nodes: {stats.nodes_created} (branched {stats.nodes_branched}, "
            f"integral {stats.nodes_integral}, infeasible {stats.nodes_infeasible}, "
            f"errors {stats.nodes_error}, pruned {stats.nodes_pruned})"
        )
        if result.best is None:
            print(describe_node(result.root))
        else:
            print(objective_formula(problem.units, result.best))
            print(describe_node(result.best))

    return 0 if result.best is not None else 1


if __name__ == "__main__":
    sys.exit(main())
