"""
Reader and writer for the text problem definition.

A definition has three sections, each introduced by its header line::

    materials:
    A: raw_material
    C: product, flow_rate_lower_bound=4

    operating_units:
    U1: capacity_upper_bound=10, fixed_cost=5, proportional_cost=1

    material_to_operating_unit_flow_rates:
    U1: A => C

Lines before the first header and blank lines are ignored. Unit fields are
read by position; their keys are informational.
"""

from __future__ import annotations

import os
from typing import List

from .material import Material
from .operating_unit import OperatingUnit
from .problem import Problem, ProblemDefinitionError


MATERIALS_HEADER = "materials:"
UNITS_HEADER = "operating_units:"
FLOWS_HEADER = "material_to_operating_unit_flow_rates:"

_SECTIONS = {MATERIALS_HEADER: 0, UNITS_HEADER: 1, FLOWS_HEADER: 2}


def _fail(lineno: int, message: str, line: str) -> ProblemDefinitionError:
    return ProblemDefinitionError(f"line {lineno}: {message} [{line}]")


def _split_named(line: str, lineno: int, what: str):
    parts = line.split(":")
    if len(parts) != 2:
        raise _fail(lineno, f"Invalid {what} line", line)
    name, data = parts[0].strip(), parts[1].strip()
    if not name:
        raise _fail(lineno, f"Missing {what} name", line)
    return name, data


def _parse_int_field(field: str, lineno: int, line: str) -> int:
    pieces = field.split("=")
    if len(pieces) != 2:
        raise _fail(lineno, f"Invalid field '{field.strip()}'", line)
    text = pieces[1].strip()
    try:
        value = int(text)
    except ValueError:
        raise _fail(lineno, f"Invalid integer '{text}'", line) from None
    if value < 0:
        raise _fail(lineno, f"Negative value '{text}'", line)
    return value


def _parse_material(line: str, lineno: int) -> Material:
    name, data = _split_named(line, lineno, "material")
    fields = data.split(",")
    if len(fields) > 2 or not fields[0].strip():
        raise _fail(lineno, "Invalid material data", line)

    try:
        material = Material(name, fields[0].strip())
    except ValueError as e:
        raise _fail(lineno, str(e), line) from None

    if len(fields) == 2:
        material.set_lower_bound(_parse_int_field(fields[1], lineno, line))
    return material


def _parse_unit(line: str, lineno: int) -> OperatingUnit:
    name, data = _split_named(line, lineno, "operating unit")
    fields = data.split(",")
    if len(fields) != 3:
        raise _fail(lineno, f"Expected 3 operating unit fields, got {len(fields)}", line)

    capacity, fixed_cost, proportional_cost = (
        _parse_int_field(field, lineno, line) for field in fields
    )
    return OperatingUnit(name, capacity, fixed_cost, proportional_cost)


def _parse_flow(problem: Problem, line: str, lineno: int) -> None:
    unit_name, data = _split_named(line, lineno, "flow rate")
    ends = data.split("=>")
    if len(ends) != 2:
        raise _fail(lineno, "Invalid flow rate data", line)
    input_name, output_name = ends[0].strip(), ends[1].strip()

    try:
        problem.connect(unit_name, input_name, output_name)
    except ProblemDefinitionError as e:
        raise _fail(lineno, str(e), line) from None


def parse_problem(text: str) -> Problem:
    """Parse a problem definition; raises ProblemDefinitionError on any defect."""
    problem = Problem()
    section = -1

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()

        if line in _SECTIONS:
            section = _SECTIONS[line]
            continue
        if section < 0 or not line:
            continue

        try:
            if section == 0:
                problem.add_material(_parse_material(line, lineno))
            elif section == 1:
                problem.add_unit(_parse_unit(line, lineno))
            else:
                _parse_flow(problem, line, lineno)
        except ProblemDefinitionError as e:
            if str(e).startswith("line "):
                raise
            raise _fail(lineno, str(e), line) from None
        except ValueError as e:
            raise _fail(lineno, str(e), line) from None

    return problem


def load_problem(path: str | os.PathLike) -> Problem:
    with open(path, "r", encoding="utf-8") as f:
        return parse_problem(f.read())


def format_problem(problem: Problem) -> str:
    lines: List[str] = [MATERIALS_HEADER]
    lines.extend(str(material) for material in problem.materials)

    lines += ["", "", UNITS_HEADER]
    lines.extend(str(unit) for unit in problem.units)

    lines += ["", "", FLOWS_HEADER]
    lines.extend(unit.flow_line() for unit in problem.units if unit.is_connected)

    return "\n".join(lines) + "\n"


def save_problem(problem: Problem, path: str | os.PathLike) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(format_problem(problem))
