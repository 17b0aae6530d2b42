from .configuration import ElementState, ReferenceConfiguration, current_control_points
from .elements import ElementFamily, IsogeometricElement, ShellElement
from .loads import (
    ExcludedDof,
    LoadStatus,
    SurfaceDistributedLoad,
    SurfaceLoadResult,
    SurfacePressureLoad,
)
from .NURBS_KL import NurbsKirchhoffLoveShellNL, StressUpdate

__all__ = [
    "ElementState",
    "ReferenceConfiguration",
    "current_control_points",
    "ElementFamily",
    "IsogeometricElement",
    "ShellElement",
    "ExcludedDof",
    "LoadStatus",
    "SurfaceDistributedLoad",
    "SurfaceLoadResult",
    "SurfacePressureLoad",
    "NurbsKirchhoffLoveShellNL",
    "StressUpdate",
]
