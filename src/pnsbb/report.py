"""Text views of the branch-and-bound tree for reporting front ends."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from .bnb.node import Node, NodeState, VariableState
from .operating_unit import OperatingUnit


def format_number(value: float) -> str:
    """Integral values without a decimal part, everything else as is."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return str(value)


def node_label(node: Node) -> str:
    if node.state == NodeState.ERROR:
        return "!"
    if not node.feasible:
        return "X"
    return format_number(node.value)


def describe_change(changed: Optional[VariableState]) -> str:
    if changed is None:
        return "no branching applied (root node)"
    return (
        f"[{changed.name}={changed.previous_value:.4f}] to "
        f"[{changed.name}={changed.value:.0f}]"
    )


def describe_node(node: Node) -> str:
    """Multi-line description of one node, safe for the root and for leaves."""
    status = node.status
    changed = status.changed

    if node.state == NodeState.ERROR:
        lines = [f"Solver error at level {node.level}: {status.message}"]
        if changed is not None:
            lines.append(f"Changed variable {describe_change(changed)}")
        return "\n".join(lines)

    if not status.feasible:
        if changed is None:
            return "Infeasible relaxation at the root node; no branching applied"
        return (
            "Infeasible solution when solving the model with changed variable "
            f"{describe_change(changed)}"
        )

    lines = [f"Objective: {format_number(status.value)}"]
    if changed is not None:
        lines.append(f"Changed variable {describe_change(changed)}")
    if node.state == NodeState.PRUNED:
        lines.append("Pruned: the relaxation cannot beat the best solution")
    if status.best:
        lines.append("Best solution")
    for variable in sorted(status.variables or (), key=lambda v: v.name):
        lines.append(f"  {variable.name} = {format_number(variable.value)}")
    return "\n".join(lines)


def objective_formula(units: Sequence[OperatingUnit], node: Node, latex: bool = False) -> str:
    """
    The objective of ``node`` written out term by term, e.g.
    ``Minimize: (1×4) + (5×1) = 9``.
    """
    values = node.status.values()
    terms: List[str] = []
    for i, unit in enumerate(units):
        for cost, name in (
            (unit.proportional_cost, f"X{i + 1}"),
            (unit.fixed_cost, f"Y{i + 1}"),
        ):
            if name not in values:
                continue
            value = format_number(values[name])
            if latex:
                terms.append(f"\\left({cost}\\times {value}\\right)")
            else:
                terms.append(f"({cost}×{value})")

    total = format_number(node.value)
    if latex:
        return f"Minimize: ${' + '.join(terms)} = {total}$"
    return f"Minimize: {' + '.join(terms)} = {total}"


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def _variable_to_dict(variable: VariableState) -> Dict[str, Any]:
    return {
        "name": variable.name,
        "value": variable.value,
        "previous_value": variable.previous_value,
    }


def tree_to_dict(node: Optional[Node]) -> Optional[Dict[str, Any]]:
    """Nested plain-data view of a subtree (JSON serializable)."""
    if node is None:
        return None
    status = node.status
    return {
        "level": node.level,
        "path": list(node.path),
        "state": node.state.value if node.state else None,
        "value": _finite_or_none(status.value),
        "feasible": status.feasible,
        "best": status.best,
        "solver_status": str(status.solver_status) if status.solver_status else None,
        "message": status.message,
        "changed": _variable_to_dict(status.changed) if status.changed else None,
        "variables": (
            [_variable_to_dict(v) for v in status.variables]
            if status.variables is not None
            else None
        ),
        "left": tree_to_dict(node.left),
        "right": tree_to_dict(node.right),
    }
