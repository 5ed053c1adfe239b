__all__ = [
    "Material",
    "MaterialType",
    "OperatingUnit",
    "Problem",
    "ProblemDefinitionError",
    "parse_problem",
    "load_problem",
    "format_problem",
    "save_problem",
    "build_model",
    "BranchAndBoundEngine",
    "BnBResult",
    "BranchingStrategy",
    "Node",
    "NodeState",
    "SolutionStatus",
    "VariableState",
    "Solver",
    "SolverStatus",
    "HIGHS",
    "HIGHS_MILP",
    "SLSQP",
    "node_label",
    "describe_node",
    "objective_formula",
    "tree_to_dict",
]

from .constants import MaterialType, Solver
from .material import Material
from .operating_unit import OperatingUnit
from .solvers import SolverStatus
from .builder import build_model
from .bnb import (
    BnBResult,
    BranchAndBoundEngine,
    BranchingStrategy,
    Node,
    NodeState,
    SolutionStatus,
    VariableState,
)
from .problem import Problem, ProblemDefinitionError
from .parser import format_problem, load_problem, parse_problem, save_problem
from .report import describe_node, node_label, objective_formula, tree_to_dict

HIGHS = Solver.HIGHS
HIGHS_MILP = Solver.HIGHS_MILP
SLSQP = Solver.SLSQP
