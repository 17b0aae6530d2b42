from dataclasses import dataclass
from typing import Tuple, Union


@dataclass
class IsotropicMaterial:
    """
    Class representing an isotropic material with uniform properties in all directions.

    Parameters
    ----------
    name : str
        The name of the material.
    E : float
        Young's Modulus of the material.
    nu : float
        Poisson's ratio of the material.
    """

    name: str
    E: float
    nu: float

    def __post_init__(self):
        if self.E <= 0:
            raise ValueError(f"Young's modulus must be positive: {self.E}")
        if not -1 < self.nu < 0.5:
            raise ValueError(f"Poisson's ratio must be in (-1, 0.5): {self.nu}")

    @property
    def G(self) -> float:
        """Shear modulus."""
        return self.E / (2 * (1 + self.nu))


@dataclass
class OrthotropicMaterial:
    """
    Class representing an orthotropic material with different properties in three orthogonal directions.

    Only the in-plane values (E1, E2, G12, nu12) enter the plane-stress shell laws.

    Parameters
    ----------
    name : str
        The name of the material.
    E : Tuple[float, float, float]
        Young's Modulus in three directions (E1, E2, E3).
    G : Tuple[float, float, float]
        Shear Modulus in three planes (G12, G23, G31).
    nu : Tuple[float, float, float]
        Poisson's ratio in three planes (nu12, nu23, nu31).
    """

    name: str
    E: Tuple[float, float, float]
    G: Tuple[float, float, float]
    nu: Tuple[float, float, float]

    def __post_init__(self):
        if len(self.E) != 3:
            raise ValueError("E must have 3 components")
        if len(self.G) != 3:
            raise ValueError("G must have 3 components")
        if len(self.nu) != 3:
            raise ValueError("nu must have 3 components")
        if min(self.E) <= 0 or min(self.G) <= 0:
            raise ValueError(f"Moduli must be positive: E={self.E}, G={self.G}")


Material = Union[IsotropicMaterial, OrthotropicMaterial]
