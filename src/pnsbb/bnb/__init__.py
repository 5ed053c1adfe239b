"""
Branch-and-Bound for Process Network Synthesis

Modules:
- engine: BranchAndBoundEngine, its options and result
- node: Node, SolutionStatus, VariableState and statistics dataclasses
- branching: fractional detection and branching variable selection
- incumbent: the best-node slot shared by the whole build
"""

from .engine import BnBOptions, BnBResult, BranchAndBoundEngine
from .incumbent import Incumbent
from .node import BBStats, Node, NodeState, SolutionStatus, VariableState
from .branching import BranchingStrategy

__all__ = [
    "BranchAndBoundEngine",
    "BnBOptions",
    "BnBResult",
    "BBStats",
    "BranchingStrategy",
    "Incumbent",
    "Node",
    "NodeState",
    "SolutionStatus",
    "VariableState",
]
