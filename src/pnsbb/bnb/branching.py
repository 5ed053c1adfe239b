"""
Branching Variable Selection

Strategies:
- FIRST_FRACTIONAL: the first fractional variable in declaration order
- MOST_FRACTIONAL: the variable whose fractional part is closest to 0.5,
  lowest index on ties
"""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import autograd.numpy as np


class BranchingStrategy(Enum):
    """Variable branching strategy."""

    FIRST_FRACTIONAL = "first_fractional"
    MOST_FRACTIONAL = "most_fractional"


def get_fractional_variables(
    x: np.ndarray,
    tol: float,
) -> List[Tuple[int, float]]:
    """Get (index, value) for every variable farther than ``tol`` from an integer."""
    violations = []
    for idx, val in enumerate(x):
        val = float(val)
        if abs(val - round(val)) > tol:
            violations.append((idx, val))
    return violations


def select_branching_variable(
    violations: List[Tuple[int, float]],
    strategy: BranchingStrategy,
) -> Optional[Tuple[int, float]]:
    if not violations:
        return None
    if strategy == BranchingStrategy.MOST_FRACTIONAL:
        return most_fractional_branching(violations)
    return violations[0]


def most_fractional_branching(
    violations: List[Tuple[int, float]],
) -> Tuple[int, float]:
    """Select the most fractional variable for branching."""
    best_idx, best_val = violations[0]
    best_score = _fractionality_score(best_val)

    for idx, val in violations[1:]:
        score = _fractionality_score(val)
        if score < best_score:
            best_idx = idx
            best_val = val
            best_score = score

    return best_idx, best_val


def _fractionality_score(val: float) -> float:
    """Lower is more fractional: 0 at x.5, 0.5 at an integer."""
    return abs(0.5 - abs(val - math.floor(val)))


def branch_values(val: float) -> Tuple[int, int]:
    """Pins for the two children: floor(|val|) to the left, one more to the right."""
    left = int(math.floor(abs(val)))
    return left, left + 1


def child_overrides(
    overrides: Sequence[Optional[float]],
    branch_idx: int,
    left_value: int,
    right_value: int,
) -> Tuple[Tuple[Optional[float], ...], Tuple[Optional[float], ...]]:
    """Copy the parent's pins, once per child, with ``branch_idx`` pinned."""
    left = list(overrides)
    left[branch_idx] = left_value

    right = list(overrides)
    right[branch_idx] = right_value

    return tuple(left), tuple(right)
