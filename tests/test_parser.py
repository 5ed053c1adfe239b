import pytest

from pnsbb.constants import MaterialType
from pnsbb.parser import format_problem, load_problem, parse_problem, save_problem
from pnsbb.problem import ProblemDefinitionError

from conftest import SCENARIO_A


def test_parse_scenario():
    problem = parse_problem(SCENARIO_A)

    assert [m.name for m in problem.materials] == ["R", "P"]
    assert problem.material("R").type == MaterialType.RAW_MATERIAL
    assert problem.material("P").lower_bound == 4

    (unit,) = problem.units
    assert unit.name == "U1"
    assert (unit.capacity_upper_bound, unit.fixed_cost, unit.proportional_cost) == (10, 5, 1)
    assert unit.input_material is problem.material("R")
    assert unit.output_material is problem.material("P")


def test_parse_ignores_preamble_and_blank_lines():
    text = "PNS problem written by hand\n\n" + SCENARIO_A.replace("\n\n", "\n\n\n")
    problem = parse_problem(text)
    assert len(problem.materials) == 2
    assert len(problem.units) == 1


def test_unit_fields_are_positional():
    text = SCENARIO_A.replace(
        "capacity_upper_bound=10, fixed_cost=5, proportional_cost=1",
        "capacity_upper_bound=10, fix_cost=5, proportional_cost=1",
    )
    unit = parse_problem(text).unit("U1")
    assert unit.fixed_cost == 5


def test_material_type_spellings():
    text = SCENARIO_A.replace("R: raw_material", "R: Raw Material")
    assert parse_problem(text).material("R").type == MaterialType.RAW_MATERIAL


@pytest.mark.parametrize(
    "old, new, message",
    [
        ("R: raw_material", "R: waste", "Invalid material type"),
        ("R: raw_material", "R raw_material", "Invalid material line"),
        ("flow_rate_lower_bound=4", "flow_rate_lower_bound=four", "Invalid integer"),
        ("flow_rate_lower_bound=4", "flow_rate_lower_bound=-4", "Negative value"),
        ("fixed_cost=5, ", "", "Expected 3 operating unit fields"),
        ("U1: R => P", "U1: R -> P", "Invalid flow rate data"),
        ("U1: R => P", "U1: R => Q", "Unknown material 'Q'"),
        ("U1: R => P", "U2: R => P", "Unknown operating unit 'U2'"),
    ],
)
def test_parse_errors(old, new, message):
    with pytest.raises(ProblemDefinitionError, match=message):
        parse_problem(SCENARIO_A.replace(old, new))


def test_parse_error_names_line():
    text = SCENARIO_A.replace("U1: R => P", "U1: R => Q")
    with pytest.raises(ProblemDefinitionError, match=r"^line 11: "):
        parse_problem(text)


def test_duplicate_names_rejected():
    text = SCENARIO_A.replace("P: product", "R: intermediate\nP: product")
    with pytest.raises(ProblemDefinitionError, match="Duplicate material 'R'"):
        parse_problem(text)


def test_format_then_parse(alternatives):
    text = format_problem(alternatives)
    assert text.startswith("materials:\n")
    assert "U2: capacity_upper_bound=10, fixed_cost=1, proportional_cost=3" in text
    assert "U2: R2 => P" in text

    again = parse_problem(text)
    assert [m.name for m in again.materials] == [m.name for m in alternatives.materials]
    assert [str(u) for u in again.units] == [str(u) for u in alternatives.units]
    assert [u.flow_line() for u in again.units] == [u.flow_line() for u in alternatives.units]
    assert format_problem(again) == text


def test_save_and_load(tmp_path, scenario_c):
    path = tmp_path / "chain.txt"
    save_problem(scenario_c, path)
    loaded = load_problem(path)
    assert format_problem(loaded) == format_problem(scenario_c)
    assert loaded.material("P").lower_bound == 5
