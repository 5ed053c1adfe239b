from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .bnb import BnBResult, BranchAndBoundEngine
from .builder import material_flows
from .constants import Solver
from .material import Material
from .operating_unit import OperatingUnit

logger = logging.getLogger(__name__)


class ProblemDefinitionError(ValueError):
    """The materials and operating units do not form a usable problem."""


class Problem:
    """A PNS problem: the materials and the operating units connecting them."""

    def __init__(
        self,
        materials: Optional[Iterable[Material]] = None,
        units: Optional[Iterable[OperatingUnit]] = None,
    ):
        self.materials: List[Material] = []
        self.units: List[OperatingUnit] = []
        self._materials_by_name: Dict[str, Material] = {}
        self._units_by_name: Dict[str, OperatingUnit] = {}

        for material in materials or []:
            self.add_material(material)
        for unit in units or []:
            self.add_unit(unit)

    def add_material(self, material: Material) -> Material:
        if material.name in self._materials_by_name:
            raise ProblemDefinitionError(f"Duplicate material '{material.name}'")
        self.materials.append(material)
        self._materials_by_name[material.name] = material
        return material

    def add_unit(self, unit: OperatingUnit) -> OperatingUnit:
        if unit.name in self._units_by_name:
            raise ProblemDefinitionError(f"Duplicate operating unit '{unit.name}'")
        self.units.append(unit)
        self._units_by_name[unit.name] = unit
        return unit

    def material(self, name: str) -> Material:
        try:
            return self._materials_by_name[name]
        except KeyError:
            raise ProblemDefinitionError(f"Unknown material '{name}'") from None

    def unit(self, name: str) -> OperatingUnit:
        try:
            return self._units_by_name[name]
        except KeyError:
            raise ProblemDefinitionError(f"Unknown operating unit '{name}'") from None

    def connect(
        self,
        unit: OperatingUnit | str,
        input_material: Material | str,
        output_material: Material | str,
    ) -> OperatingUnit:
        if isinstance(unit, str):
            unit = self.unit(unit)
        if isinstance(input_material, str):
            input_material = self.material(input_material)
        if isinstance(output_material, str):
            output_material = self.material(output_material)
        unit.connect(input_material, output_material)
        return unit

    def validate(self) -> None:
        if not self.units:
            raise ProblemDefinitionError("The problem has no operating units")

        for unit in self.units:
            if not unit.is_connected:
                raise ProblemDefinitionError(
                    f"Operating unit '{unit.name}' has no input or output material"
                )
            for material in (unit.input_material, unit.output_material):
                if self._materials_by_name.get(material.name) is not material:
                    raise ProblemDefinitionError(
                        f"Operating unit '{unit.name}' references material "
                        f"'{material.name}' which is not part of the problem"
                    )

        flows = material_flows(self.units)
        for material in self.materials:
            produced = material.name in flows and flows[material.name][1]
            if material.lower_bound > 0 and not produced:
                logger.warning(
                    f"Material '{material.name}' requires a flow of {material.lower_bound} "
                    f"but no operating unit produces it; the requirement is not enforced"
                )

    def solve(
        self,
        solver: Solver | str | None = None,
        solver_options: Optional[Dict[str, object]] = None,
        verbose: bool = False,
    ) -> BnBResult:
        """
        Build the branch-and-bound tree of this problem.

        Args:
            solver: Relaxation solver, ``Solver.HIGHS`` by default
            solver_options: ``bb_*`` engine options plus backend options
            verbose: Print incumbent progress (same as ``bb_verbose``)

        Returns:
            BnBResult with the root of the tree and the best node
        """
        self.validate()

        options = dict(solver_options or {})
        if verbose and "bb_verbose" not in options:
            options["bb_verbose"] = True

        engine = BranchAndBoundEngine(
            self.units,
            solver=solver if solver is not None else Solver.HIGHS,
            solver_options=options,
        )
        return engine.build()
