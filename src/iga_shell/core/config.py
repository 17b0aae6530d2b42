"""
Shell Element Configuration Module.

This module provides a YAML-based configuration for the isogeometric shell
kernel: element options (integration, tangent, sequencing checks, load
policies) and the material law bound to every thickness point.

Example YAML configuration:
    element:
      thickness: 0.01
      thickness_integration_degree: 2
      tangent: "material"
      loaded_dof_policy: "skip"

    material:
      type: "isotropic"
      law: "von_mises"
      E: 2.1e11
      nu: 0.3
      yield_stress: 2.5e8
      hardening_modulus: 1.0e9
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from iga_shell.core.material import IsotropicMaterial, OrthotropicMaterial

logger = logging.getLogger(__name__)


class TangentMode(str, Enum):
    """
    Tangent stiffness returned by the element.

    Attributes
    ----------
    MATERIAL : str
        Material part only (modified-Newton tangent).
    FULL : str
        Consistent linearization of the internal force, including the
        geometric stiffness of the current stress resultants.
    """

    MATERIAL = "material"
    FULL = "full"


class LoadedDofPolicy(str, Enum):
    """
    Handling of loaded degrees of freedom unknown to the free-DOF ordering.

    Attributes
    ----------
    SKIP : str
        Report them as excluded and continue.
    RAISE : str
        Raise ``KeyError``.
    """

    SKIP = "skip"
    RAISE = "raise"


class MaterialType(str, Enum):
    """Type of elastic material."""

    ISOTROPIC = "isotropic"
    ORTHOTROPIC = "orthotropic"


class MaterialLaw(str, Enum):
    """Constitutive law integrated at the thickness points."""

    ELASTIC = "elastic"
    VON_MISES = "von_mises"


def _to_float(value, name: str):
    """Convert a scalar or list option to float(s); ``None`` passes through."""
    if value is None:
        return None
    try:
        if isinstance(value, (list, tuple)):
            return [float(v) for v in value]
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be numeric: {value!r}") from None


def _to_int(value, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer: {value!r}") from None


# =============================================================================
# Configuration Data Classes
# =============================================================================


@dataclass
class ElementConfig:
    """Element configuration."""

    thickness: Optional[float] = None
    thickness_integration_degree: int = 2
    tangent: TangentMode = TangentMode.MATERIAL
    degenerate_tolerance: float = 1e-12
    check_update_sequence: bool = True
    loaded_dof_policy: LoadedDofPolicy = LoadedDofPolicy.SKIP

    def __post_init__(self):
        try:
            self.tangent = TangentMode(self.tangent)
        except ValueError:
            valid = [m.value for m in TangentMode]
            raise ValueError(f"Invalid tangent mode: {self.tangent}. Valid: {valid}") from None
        try:
            self.loaded_dof_policy = LoadedDofPolicy(self.loaded_dof_policy)
        except ValueError:
            valid = [m.value for m in LoadedDofPolicy]
            raise ValueError(
                f"Invalid loaded dof policy: {self.loaded_dof_policy}. Valid: {valid}"
            ) from None
        # YAML 1.1 reads numbers such as 2.1e11 or 1e-3 as strings
        self.thickness = _to_float(self.thickness, "thickness")
        self.degenerate_tolerance = _to_float(self.degenerate_tolerance, "degenerate_tolerance")
        self.thickness_integration_degree = _to_int(
            self.thickness_integration_degree, "thickness_integration_degree"
        )
        if self.thickness is not None and self.thickness <= 0:
            raise ValueError(f"thickness must be positive: {self.thickness}")
        if self.thickness_integration_degree < 0:
            raise ValueError(
                f"thickness_integration_degree must be >= 0: {self.thickness_integration_degree}"
            )
        if self.degenerate_tolerance < 0:
            raise ValueError(f"degenerate_tolerance must be non-negative: {self.degenerate_tolerance}")
        self._log_convergence_notes()

    def _log_convergence_notes(self):
        if self.tangent is TangentMode.MATERIAL:
            logger.info(
                "Material-only tangent selected. The geometric stiffness is omitted, "
                "Newton iterations converge linearly under large rotations. "
                "Set tangent='full' for the consistent tangent."
            )
        if self.thickness_integration_degree == 0:
            logger.warning(
                "A single thickness point integrates no bending stiffness. "
                "Use thickness_integration_degree >= 1 for bending."
            )


@dataclass
class MaterialConfig:
    """Complete material configuration."""

    type: str = MaterialType.ISOTROPIC.value
    law: str = MaterialLaw.ELASTIC.value
    name: str = "Material"
    # Isotropic properties
    E: Optional[Union[float, List[float]]] = None
    nu: Optional[Union[float, List[float]]] = None
    # Orthotropic additional properties
    G: Optional[List[float]] = None
    angle: float = 0.0
    # von Mises plasticity
    yield_stress: Optional[float] = None
    hardening_modulus: float = 0.0
    max_iterations: int = 50
    tolerance: float = 1e-10

    def __post_init__(self):
        if self.type not in (MaterialType.ISOTROPIC.value, MaterialType.ORTHOTROPIC.value):
            raise ValueError(f"Invalid material type: {self.type}")
        if self.law not in (MaterialLaw.ELASTIC.value, MaterialLaw.VON_MISES.value):
            raise ValueError(f"Invalid material law: {self.law}")
        self.E = _to_float(self.E, "E")
        self.nu = _to_float(self.nu, "nu")
        self.G = _to_float(self.G, "G")
        self.angle = _to_float(self.angle, "angle")
        self.yield_stress = _to_float(self.yield_stress, "yield_stress")
        self.hardening_modulus = _to_float(self.hardening_modulus, "hardening_modulus")
        self.tolerance = _to_float(self.tolerance, "tolerance")
        self.max_iterations = _to_int(self.max_iterations, "max_iterations")
        if self.law == MaterialLaw.VON_MISES.value:
            if self.type != MaterialType.ISOTROPIC.value:
                raise ValueError("von Mises plasticity requires an isotropic material")
            if self.yield_stress is None or self.yield_stress <= 0:
                raise ValueError(f"yield_stress must be positive: {self.yield_stress}")

    def get_material(self) -> Union[IsotropicMaterial, OrthotropicMaterial]:
        """Get the elastic material properties."""
        if self.type == MaterialType.ISOTROPIC.value:
            if self.E is None or self.nu is None:
                raise ValueError("Isotropic material requires E and nu")
            return IsotropicMaterial(
                name=self.name,
                E=float(self.E) if not isinstance(self.E, list) else float(self.E[0]),
                nu=float(self.nu) if not isinstance(self.nu, list) else float(self.nu[0]),
            )
        if self.E is None or self.G is None or self.nu is None:
            raise ValueError("Orthotropic material requires E, G and nu")
        return OrthotropicMaterial(
            name=self.name,
            E=tuple(self.E) if isinstance(self.E, list) else (self.E, self.E, self.E),
            G=tuple(self.G) if isinstance(self.G, list) else (self.G, self.G, self.G),
            nu=tuple(self.nu) if isinstance(self.nu, list) else (self.nu, self.nu, self.nu),
        )

    def build_material(self):
        """
        Build the material template cloned at every thickness point.

        Returns
        -------
        ShellMaterial
            ``ShellElasticMaterial2D`` or ``ShellVonMisesMaterial2D``.
        """
        from iga_shell.constitutive import ShellElasticMaterial2D, ShellVonMisesMaterial2D

        material = self.get_material()
        if self.law == MaterialLaw.VON_MISES.value:
            return ShellVonMisesMaterial2D(
                material,
                yield_stress=float(self.yield_stress),
                hardening_modulus=float(self.hardening_modulus),
                max_iterations=int(self.max_iterations),
                tolerance=float(self.tolerance),
            )
        return ShellElasticMaterial2D(material, angle=float(self.angle))


@dataclass
class ShellConfig:
    """Root configuration: element options and material."""

    element: ElementConfig = field(default_factory=ElementConfig)
    material: Optional[MaterialConfig] = None

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ShellConfig":
        """Load configuration from YAML file.

        Parameters
        ----------
        yaml_path : str or Path
            Path to the YAML configuration file.

        Returns
        -------
        ShellConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError
            If the YAML file does not exist.
        ValueError
            If the configuration is invalid.
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShellConfig":
        """Create configuration from dictionary.

        Unknown keys inside ``element`` or ``material`` raise ``ValueError``.
        """
        elem_data = dict(data.get("element") or {})
        try:
            element_config = ElementConfig(**elem_data)
        except TypeError as exc:
            raise ValueError(f"Invalid element configuration: {exc}") from exc

        material_config = None
        mat_data = data.get("material")
        if mat_data is not None:
            try:
                material_config = MaterialConfig(**dict(mat_data))
            except TypeError as exc:
                raise ValueError(f"Invalid material configuration: {exc}") from exc

        return cls(element=element_config, material=material_config)
