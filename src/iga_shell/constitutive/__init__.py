"""
Constitutive models package for iga_shell.

This package contains the plane-stress material laws evaluated at the
through-thickness integration points of the shell elements.
"""

from iga_shell.constitutive.base import ShellMaterial, curvilinear_transformation
from iga_shell.constitutive.elastic import (
    ShellElasticMaterial2D,
    compute_Q,
    compute_Qbar,
    isotropic_plane_stress,
)
from iga_shell.constitutive.plasticity import PlasticState, ShellVonMisesMaterial2D

__all__ = [
    "ShellMaterial",
    "curvilinear_transformation",
    "ShellElasticMaterial2D",
    "compute_Q",
    "compute_Qbar",
    "isotropic_plane_stress",
    "PlasticState",
    "ShellVonMisesMaterial2D",
]
