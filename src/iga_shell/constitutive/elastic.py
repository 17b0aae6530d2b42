"""
Linear elastic plane-stress shell material.

References
----------
- Jones, R.M. (1999). Mechanics of Composite Materials, 2nd ed.
"""

import numpy as np

from iga_shell.constitutive.base import ShellMaterial
from iga_shell.core.material import IsotropicMaterial, Material, OrthotropicMaterial


def compute_Q(material: OrthotropicMaterial) -> np.ndarray:
    """
    Compute reduced stiffness matrix Q in principal material coordinates.

    Parameters
    ----------
    material : OrthotropicMaterial
        Material with E1, E2, G12, nu12 properties

    Returns
    -------
    np.ndarray
        3x3 reduced stiffness matrix Q

    Notes
    -----
    [σ1, σ2, τ12]^T = Q @ [ε1, ε2, γ12]^T

    Q11 = E1 / (1 - ν12·ν21)
    Q22 = E2 / (1 - ν12·ν21)
    Q12 = ν12·E2 / (1 - ν12·ν21)
    Q66 = G12
    """
    E1, E2, _ = material.E
    nu12, _, _ = material.nu
    G12, _, _ = material.G

    nu21 = nu12 * E2 / E1
    denom = 1 - nu12 * nu21
    if denom <= 0:
        raise ValueError(f"Inadmissible Poisson's ratios for {material.name}: 1 - nu12*nu21 = {denom}")

    return np.array([
        [E1 / denom, nu12 * E2 / denom, 0],
        [nu12 * E2 / denom, E2 / denom, 0],
        [0, 0, G12]
    ])


def compute_Qbar(material: OrthotropicMaterial, theta_deg: float) -> np.ndarray:
    """
    Compute transformed reduced stiffness matrix Qbar for a rotated lamina.

    Parameters
    ----------
    material : OrthotropicMaterial
        Orthotropic material properties
    theta_deg : float
        Fiber orientation angle in degrees, measured from the local e1 axis

    Returns
    -------
    np.ndarray
        3x3 transformed reduced stiffness matrix Qbar
    """
    Q = compute_Q(material)
    Q11, Q12, Q22, Q66 = Q[0, 0], Q[0, 1], Q[1, 1], Q[2, 2]

    theta = np.radians(theta_deg)
    c = np.cos(theta)
    s = np.sin(theta)
    c2, s2 = c**2, s**2
    c3, s3 = c**3, s**3
    c4, s4 = c**4, s**4

    Qbar = np.zeros((3, 3))

    Qbar[0, 0] = Q11 * c4 + 2 * (Q12 + 2 * Q66) * s2 * c2 + Q22 * s4
    Qbar[1, 1] = Q11 * s4 + 2 * (Q12 + 2 * Q66) * s2 * c2 + Q22 * c4
    Qbar[0, 1] = (Q11 + Q22 - 4 * Q66) * s2 * c2 + Q12 * (s4 + c4)
    Qbar[1, 0] = Qbar[0, 1]
    Qbar[0, 2] = (Q11 - Q12 - 2 * Q66) * s * c3 + (Q12 - Q22 + 2 * Q66) * s3 * c
    Qbar[2, 0] = Qbar[0, 2]
    Qbar[1, 2] = (Q11 - Q12 - 2 * Q66) * s3 * c + (Q12 - Q22 + 2 * Q66) * s * c3
    Qbar[2, 1] = Qbar[1, 2]
    Qbar[2, 2] = (Q11 + Q22 - 2 * Q12 - 2 * Q66) * s2 * c2 + Q66 * (s4 + c4)

    return Qbar


def isotropic_plane_stress(material: IsotropicMaterial) -> np.ndarray:
    """Plane-stress stiffness of an isotropic material (engineering shear)."""
    E, nu = material.E, material.nu
    return E / (1 - nu**2) * np.array([
        [1, nu, 0],
        [nu, 1, 0],
        [0, 0, (1 - nu) / 2]
    ])


class ShellElasticMaterial2D(ShellMaterial):
    """
    Linear elastic plane-stress material.

    Parameters
    ----------
    material : IsotropicMaterial or OrthotropicMaterial
        Elastic properties.
    angle : float, optional
        Fibre angle in degrees from the local e1 axis (orthotropic only).
    """

    def __init__(self, material: Material, angle: float = 0.0):
        self.material = material
        self.angle = angle
        if isinstance(material, OrthotropicMaterial):
            elastic = compute_Qbar(material, angle)
        else:
            elastic = isotropic_plane_stress(material)
        super().__init__(elastic)

    def _integrate(self, strain):
        return self._elastic @ strain, self._elastic

    def save_state(self) -> None:
        """Linear elasticity carries no history."""

    def __repr__(self):
        return f"<ShellElasticMaterial2D {self.material.name} angle={self.angle:g}>"
