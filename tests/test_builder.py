import autograd.numpy as np
import pytest

from pnsbb.builder import (
    build_model,
    empty_overrides,
    material_flows,
    variable_names,
)
from pnsbb.material import Material
from pnsbb.operating_unit import OperatingUnit


def _row(model, name):
    idx = model.constraint_names.index(name)
    return model.A[idx], model.b_lower[idx], model.b_upper[idx]


def test_variable_order():
    assert variable_names(2) == ["X1", "Y1", "X2", "Y2"]
    assert empty_overrides(2) == (None, None, None, None)


def test_scenario_a_model(scenario_a):
    model = build_model(scenario_a.units)

    assert model.var_names == ["X1", "Y1"]
    assert np.allclose(model.c, [1, 5])
    assert np.allclose(model.lb, [0, 0])
    assert model.ub[0] == np.inf
    assert model.ub[1] == 1
    assert list(model.integrality) == [0, 1]

    assert model.constraint_names == [
        "Non-negative for X1",
        "Non-negative for Y1",
        "Upperbound for X1",
        "Origin-Destination for P",
    ]

    coeffs, lo, hi = _row(model, "Upperbound for X1")
    assert np.allclose(coeffs, [1, -10])
    assert lo == -np.inf and hi == 0

    coeffs, lo, hi = _row(model, "Origin-Destination for P")
    assert np.allclose(coeffs, [1, 0])
    assert lo == 4 and hi == np.inf


def test_mass_balance_only_for_produced_materials(scenario_c):
    model = build_model(scenario_c.units)
    balance_rows = [n for n in model.constraint_names if n.startswith("Origin-Destination")]
    assert balance_rows == ["Origin-Destination for I", "Origin-Destination for P"]

    coeffs, lo, _ = _row(model, "Origin-Destination for I")
    # U1 produces I, U2 consumes it
    assert np.allclose(coeffs, [1, 0, -1, 0])
    assert lo == 0


def test_self_loop_unit_cancels():
    m = Material("M", "intermediate", 2)
    unit = OperatingUnit("U1", 10, 1, 1)
    unit.connect(m, m)

    model = build_model([unit])
    coeffs, lo, _ = _row(model, "Origin-Destination for M")
    assert np.allclose(coeffs, [0, 0])
    assert lo == 2


def test_material_flows_order(alternatives):
    flows = material_flows(alternatives.units)
    assert list(flows) == ["R1", "P", "R2"]
    _, producers, consumers = flows["P"]
    assert producers == [0, 1]
    assert consumers == []


def test_overrides_pin_bounds(scenario_c):
    overrides = list(empty_overrides(2))
    overrides[1] = 1
    overrides[3] = 0
    model = build_model(scenario_c.units, overrides)

    assert model.lb[1] == model.ub[1] == 1
    assert model.lb[3] == model.ub[3] == 0
    assert model.lb[0] == 0 and model.ub[0] == np.inf
    assert model.lb[2] == 0 and model.ub[2] == np.inf


def test_overrides_length_mismatch(scenario_a):
    with pytest.raises(ValueError, match="override slots"):
        build_model(scenario_a.units, (None,))


def test_unconnected_unit_rejected():
    with pytest.raises(ValueError, match="needs both an input and an output"):
        build_model([OperatingUnit("U1", 10, 5, 1)])


def test_model_helpers(scenario_a):
    model = build_model(scenario_a.units)
    x = np.array([4.0, 0.4])
    assert model.objective(x) == pytest.approx(6.0)
    assert model.max_violation(x) == pytest.approx(0.0)
    assert model.max_violation(np.array([3.0, 1.0])) == pytest.approx(1.0)
    assert model.unpack(x) == {"X1": 4.0, "Y1": 0.4}
