from __future__ import annotations

from .material import Material


def _check_non_negative_int(unit_name: str, field: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} of operating unit '{unit_name}' must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{field} of operating unit '{unit_name}' must be non-negative, got {value}")
    return value


class OperatingUnit:
    """An operating unit turning its input material into its output material."""

    def __init__(
        self,
        name: str,
        capacity_upper_bound: int,
        fixed_cost: int,
        proportional_cost: int,
    ):
        name = str(name).strip()
        if not name:
            raise ValueError("Operating unit name must be non-empty")

        self.name = name
        self.capacity_upper_bound = _check_non_negative_int(
            name, "capacity_upper_bound", capacity_upper_bound
        )
        self.fixed_cost = _check_non_negative_int(name, "fixed_cost", fixed_cost)
        self.proportional_cost = _check_non_negative_int(
            name, "proportional_cost", proportional_cost
        )

        self.input_material: Material | None = None
        self.output_material: Material | None = None

    def connect(self, input_material: Material, output_material: Material) -> None:
        if not isinstance(input_material, Material) or not isinstance(output_material, Material):
            raise TypeError("Operating units can only be connected to Material instances")
        self.input_material = input_material
        self.output_material = output_material

    @property
    def is_connected(self) -> bool:
        return self.input_material is not None and self.output_material is not None

    def flow_line(self) -> str:
        input_name = self.input_material.name if self.input_material else ""
        output_name = self.output_material.name if self.output_material else ""
        return f"{self.name}: {input_name} => {output_name}"

    def __str__(self):
        return (
            f"{self.name}: capacity_upper_bound={self.capacity_upper_bound}, "
            f"fixed_cost={self.fixed_cost}, proportional_cost={self.proportional_cost}"
        )

    def __repr__(self):
        return (
            f"OperatingUnit({self.name}, cap={self.capacity_upper_bound}, "
            f"fixed={self.fixed_cost}, prop={self.proportional_cost})"
        )
