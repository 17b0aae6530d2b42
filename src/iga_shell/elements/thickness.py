"""
Through-thickness integration of the material response.

The materials and thickness points passed to these functions belong to one
mid-surface quadrature point and are index-aligned.
"""

from typing import Sequence, Tuple

import numpy as np

from iga_shell.constitutive.base import ShellMaterial
from iga_shell.core.quadrature import ThicknessPoint


def _check_aligned(materials: Sequence[ShellMaterial], thickness_points: Sequence[ThicknessPoint]):
    if len(materials) != len(thickness_points):
        raise ValueError(
            f"Got {len(materials)} materials for {len(thickness_points)} thickness points"
        )


def integrated_constitutive_over_thickness(
    materials: Sequence[ShellMaterial], thickness_points: Sequence[ThicknessPoint]
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Membrane, bending and coupling constitutive matrices.

    ``Cm = sum C w``, ``Cb = sum C w zeta^2``, ``Cc = sum C w zeta``.

    Returns
    -------
    tuple of np.ndarray
        ``(membrane, bending, coupling)``, each 3x3.
    """
    _check_aligned(materials, thickness_points)
    membrane = np.zeros((3, 3))
    bending = np.zeros((3, 3))
    coupling = np.zeros((3, 3))
    for material, tp in zip(materials, thickness_points):
        C = material.constitutive_matrix
        membrane += C * tp.weight
        coupling += C * tp.weight * tp.zeta
        bending += C * tp.weight * tp.zeta**2
    return membrane, bending, coupling


def integrated_stresses_over_thickness(
    materials: Sequence[ShellMaterial], thickness_points: Sequence[ThicknessPoint]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stress resultants ``N = sum sigma w`` and ``M = -sum sigma w zeta``.

    Returns
    -------
    tuple of np.ndarray
        ``(membrane_forces, bending_moments)``.
    """
    _check_aligned(materials, thickness_points)
    membrane_forces = np.zeros(3)
    bending_moments = np.zeros(3)
    for material, tp in zip(materials, thickness_points):
        sigma = material.stresses
        membrane_forces += sigma * tp.weight
        bending_moments -= sigma * tp.weight * tp.zeta
    return membrane_forces, bending_moments
