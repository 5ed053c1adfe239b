from __future__ import annotations

from .constants import MaterialType


class Material:
    """
    A material node of the process graph.

    The lower bound is the minimum net flow that has to reach the material.
    It can be given at construction time or assigned exactly once afterwards,
    which is how the text definitions fill it in.
    """

    def __init__(self, name: str, type: MaterialType | str, lower_bound: int | None = None):
        name = str(name).strip()
        if not name:
            raise ValueError("Material name must be non-empty")
        if not isinstance(type, MaterialType):
            type = MaterialType.from_string(type)

        self._name = name
        self._type = type
        self._lower_bound = 0
        self._bound_assigned = False

        if lower_bound is not None:
            self.set_lower_bound(lower_bound)

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> MaterialType:
        return self._type

    @property
    def lower_bound(self) -> int:
        return self._lower_bound

    def set_lower_bound(self, lower_bound: int) -> None:
        if self._bound_assigned:
            raise ValueError(f"Lower bound of material '{self._name}' is already set")
        if isinstance(lower_bound, bool) or not isinstance(lower_bound, int):
            raise ValueError(
                f"Lower bound of material '{self._name}' must be an integer, got {lower_bound!r}"
            )
        if lower_bound < 0:
            raise ValueError(
                f"Lower bound of material '{self._name}' must be non-negative, got {lower_bound}"
            )
        self._lower_bound = lower_bound
        self._bound_assigned = True

    def __eq__(self, other):
        if not isinstance(other, Material):
            return NotImplemented
        return self._name == other._name

    def __hash__(self):
        return hash(self._name)

    def __str__(self):
        line = f"{self._name}: {self._type.keyword}"
        if self._lower_bound > 0:
            line += f", flow_rate_lower_bound={self._lower_bound}"
        return line

    def __repr__(self):
        return f"Material({self._name}, {self._type.label}, lower_bound={self._lower_bound})"
