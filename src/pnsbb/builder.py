"""
Model construction for the PNS relaxation.

Every operating unit ``i`` contributes two variables, declared in this
order: the flow ``X{i+1}`` and the activation ``Y{i+1}``. Slot ``2i`` of an
override sequence therefore addresses ``X{i+1}`` and slot ``2i + 1``
addresses ``Y{i+1}``.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

import autograd.numpy as np

from .operating_unit import OperatingUnit
from .material import Material
from .solvers.base import ModelData


Overrides = Sequence[Optional[float]]


def flow_var_name(index: int) -> str:
    return f"X{index + 1}"


def activation_var_name(index: int) -> str:
    return f"Y{index + 1}"


def variable_names(n_units: int) -> List[str]:
    names: List[str] = []
    for i in range(n_units):
        names.append(flow_var_name(i))
        names.append(activation_var_name(i))
    return names


def empty_overrides(n_units: int) -> Tuple[Optional[float], ...]:
    return (None,) * (2 * n_units)


def material_flows(
    units: Sequence[OperatingUnit],
) -> "OrderedDict[str, Tuple[Material, List[int], List[int]]]":
    """
    Map each material name to ``(material, producers, consumers)``.

    Producers and consumers are unit indices. Materials appear in the order
    in which the unit list first mentions them, input before output.
    """
    flows: "OrderedDict[str, Tuple[Material, List[int], List[int]]]" = OrderedDict()
    for i, unit in enumerate(units):
        if not unit.is_connected:
            raise ValueError(
                f"Operating unit '{unit.name}' needs both an input and an output material"
            )
        for material in (unit.input_material, unit.output_material):
            if material.name not in flows:
                flows[material.name] = (material, [], [])
        flows[unit.input_material.name][2].append(i)
        flows[unit.output_material.name][1].append(i)
    return flows


def build_model(
    units: Sequence[OperatingUnit],
    overrides: Overrides | None = None,
) -> ModelData:
    """
    Build the relaxation for ``units`` with the given variable pins.

    ``overrides`` holds one slot per variable; ``None`` leaves the variable
    free, a number pins both of its bounds to that number.
    """
    n_units = len(units)
    n_vars = 2 * n_units

    if overrides is not None and len(overrides) != n_vars:
        raise ValueError(
            f"Expected {n_vars} override slots for {n_units} units, got {len(overrides)}"
        )

    flows = material_flows(units)

    c = np.zeros(n_vars)
    lb = np.zeros(n_vars)
    ub = np.full(n_vars, np.inf)
    integrality = np.zeros(n_vars, dtype=int)

    rows: List[Dict[int, float]] = []
    b_lower: List[float] = []
    b_upper: List[float] = []
    constraint_names: List[str] = []

    def add_row(name: str, coefficients: Dict[int, float], lower: float, upper: float) -> None:
        rows.append(coefficients)
        b_lower.append(lower)
        b_upper.append(upper)
        constraint_names.append(name)

    for i, unit in enumerate(units):
        x_idx, y_idx = 2 * i, 2 * i + 1
        x_name, y_name = flow_var_name(i), activation_var_name(i)

        ub[y_idx] = 1.0
        integrality[y_idx] = 1

        c[x_idx] = unit.proportional_cost
        c[y_idx] = unit.fixed_cost

        add_row(f"Non-negative for {x_name}", {x_idx: 1.0}, 0.0, np.inf)
        add_row(f"Non-negative for {y_name}", {y_idx: 1.0}, 0.0, 1.0)
        # X - capacity * Y <= 0
        add_row(
            f"Upperbound for {x_name}",
            {x_idx: 1.0, y_idx: -float(unit.capacity_upper_bound)},
            -np.inf,
            0.0,
        )

    for name, (material, producers, consumers) in flows.items():
        if not producers:
            continue
        coefficients: Dict[int, float] = {}
        for i in producers:
            coefficients[2 * i] = coefficients.get(2 * i, 0.0) + 1.0
        for i in consumers:
            coefficients[2 * i] = coefficients.get(2 * i, 0.0) - 1.0
        add_row(
            f"Origin-Destination for {name}",
            coefficients,
            float(material.lower_bound),
            np.inf,
        )

    if overrides is not None:
        for idx, value in enumerate(overrides):
            if value is not None:
                lb[idx] = value
                ub[idx] = value

    A = np.zeros((len(rows), n_vars))
    for r, coefficients in enumerate(rows):
        for idx, coef in coefficients.items():
            A[r, idx] = coef

    return ModelData(
        var_names=variable_names(n_units),
        c=c,
        lb=lb,
        ub=ub,
        integrality=integrality,
        A=A,
        b_lower=np.array(b_lower, dtype=float),
        b_upper=np.array(b_upper, dtype=float),
        constraint_names=constraint_names,
    )
