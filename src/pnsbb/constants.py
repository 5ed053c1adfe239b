from enum import StrEnum, Enum


class Solver(StrEnum):
    HIGHS = "HiGHS"  # LP relaxation through scipy.optimize.milp
    HIGHS_MILP = "HiGHS-MILP"  # Honors the binary activation variables
    SLSQP = "SLSQP"


class MaterialType(Enum):
    RAW_MATERIAL = "raw_material"
    INTERMEDIATE = "intermediate"
    PRODUCT = "product"

    @property
    def keyword(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    def matches(self, text: str) -> bool:
        return _normalize_keyword(text) == self.value

    @classmethod
    def from_string(cls, text: str) -> "MaterialType":
        for material_type in cls:
            if material_type.matches(text):
                return material_type
        raise ValueError(f"Invalid material type '{text}'")


def _normalize_keyword(text: str) -> str:
    return "_".join(str(text).strip().lower().replace("_", " ").split())


DEFAULT_INT_TOL = 1e-9
DEFAULT_SNAP_TOL = 1e-6
DEFAULT_FEAS_TOL = 1e-6
DEFAULT_SLSQP_MAXITER = 500
DEFAULT_SLSQP_FTOL = 1e-10
