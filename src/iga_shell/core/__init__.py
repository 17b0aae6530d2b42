"""
Core module for iga-shell.

Provides isogeometric entities, NURBS basis evaluation, quadrature,
degree-of-freedom numbering, materials, configuration and error types.
"""

from .config import ElementConfig, LoadedDofPolicy, MaterialConfig, ShellConfig, TangentMode
from .dofs import FreeDofOrdering, StructuralDof
from .entities import ControlPoint, Knot, Patch
from .exceptions import (
    DegenerateGeometryError,
    ElementStateError,
    MaterialUpdateError,
    ShellElementError,
    UnsupportedOperationError,
)
from .material import IsotropicMaterial, OrthotropicMaterial
from .nurbs import BasisTables, Nurbs2D
from .quadrature import GaussLegendrePoint, GaussQuadrature, ThicknessPoint

__all__ = [
    "ElementConfig",
    "LoadedDofPolicy",
    "MaterialConfig",
    "ShellConfig",
    "TangentMode",
    "FreeDofOrdering",
    "StructuralDof",
    "ControlPoint",
    "Knot",
    "Patch",
    "DegenerateGeometryError",
    "ElementStateError",
    "MaterialUpdateError",
    "ShellElementError",
    "UnsupportedOperationError",
    "IsotropicMaterial",
    "OrthotropicMaterial",
    "BasisTables",
    "Nurbs2D",
    "GaussLegendrePoint",
    "GaussQuadrature",
    "ThicknessPoint",
]
