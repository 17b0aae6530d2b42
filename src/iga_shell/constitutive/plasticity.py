"""
Plane-stress J2 plasticity for shell thickness points.

Return mapping of Simo & Taylor (1986) for von Mises plasticity with linear
isotropic hardening, solved in closed form in the eigenbasis of the
projection matrix ``P`` with a scalar Newton iteration on the plastic
multiplier, and the algorithmically consistent tangent.

References
----------
- Simo, J.C. and Taylor, R.L. (1986). "A return mapping algorithm for plane
  stress elastoplasticity." Int. J. Numer. Meth. Engng., 22, 649-670.
- Simo, J.C. and Hughes, T.J.R. (1998). Computational Inelasticity, ch. 3.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from iga_shell.constitutive.base import ShellMaterial
from iga_shell.constitutive.elastic import isotropic_plane_stress
from iga_shell.core.exceptions import MaterialUpdateError
from iga_shell.core.material import IsotropicMaterial

logger = logging.getLogger(__name__)

# sigma^T P sigma = 2/3 sigma_vm^2 for sigma = [s11, s22, s12]
P = np.array([
    [2.0, -1.0, 0.0],
    [-1.0, 2.0, 0.0],
    [0.0, 0.0, 6.0]
]) / 3.0

SQRT_2_3 = np.sqrt(2.0 / 3.0)


@dataclass
class PlasticState:
    """
    History variables of a thickness point.

    Attributes
    ----------
    plastic_strain : np.ndarray
        Plastic strain [ep11, ep22, gp12] in the local frame.
    alpha : float
        Equivalent plastic strain (isotropic hardening variable).
    """

    plastic_strain: np.ndarray = field(default_factory=lambda: np.zeros(3))
    alpha: float = 0.0

    def copy(self) -> "PlasticState":
        return PlasticState(plastic_strain=self.plastic_strain.copy(), alpha=self.alpha)


class ShellVonMisesMaterial2D(ShellMaterial):
    """
    Plane-stress von Mises plasticity with linear isotropic hardening.

    Parameters
    ----------
    material : IsotropicMaterial
        Elastic properties.
    yield_stress : float
        Initial uniaxial yield stress.
    hardening_modulus : float, optional
        Linear isotropic hardening modulus H, by default 0 (perfect plasticity).
    max_iterations : int, optional
        Local Newton iterations allowed for the plastic multiplier.
    tolerance : float, optional
        Relative tolerance on the yield function.
    """

    def __init__(
        self,
        material: IsotropicMaterial,
        yield_stress: float,
        hardening_modulus: float = 0.0,
        max_iterations: int = 50,
        tolerance: float = 1e-10,
    ):
        if not isinstance(material, IsotropicMaterial):
            raise ValueError("von Mises plasticity requires an isotropic material")
        if yield_stress <= 0:
            raise ValueError(f"Yield stress must be positive: {yield_stress}")
        if hardening_modulus < 0:
            raise ValueError(f"Hardening modulus must be non-negative: {hardening_modulus}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1: {max_iterations}")

        self.material = material
        self.yield_stress = yield_stress
        self.hardening_modulus = hardening_modulus
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        super().__init__(isotropic_plane_stress(material))
        self._compliance = np.linalg.inv(self._elastic)
        self._committed = PlasticState()
        self._trial = PlasticState()

    @property
    def plastic_strain(self) -> np.ndarray:
        """Trial plastic strain of the last update."""
        return self._trial.plastic_strain.copy()

    @property
    def equivalent_plastic_strain(self) -> float:
        return self._trial.alpha

    @property
    def committed_state(self) -> PlasticState:
        return self._committed.copy()

    def _yield_radius(self, alpha: float) -> float:
        return self.yield_stress + self.hardening_modulus * alpha

    def _integrate(self, strain):
        state = self._committed
        H = self.hardening_modulus
        sigma_trial = self._elastic @ (strain - state.plastic_strain)

        kappa_n = self._yield_radius(state.alpha)
        phi_trial = 0.5 * sigma_trial @ P @ sigma_trial - kappa_n**2 / 3.0
        if phi_trial <= self.tolerance * kappa_n**2:
            self._trial = state.copy()
            return sigma_trial, self._elastic.copy()

        # Spectral decomposition of the trial stress in the eigenbasis of P and C
        E, nu, G = self.material.E, self.material.nu, self.material.G
        a = E / (3.0 * (1.0 - nu))
        b = 2.0 * G
        s = sigma_trial[0] + sigma_trial[1]
        d = sigma_trial[1] - sigma_trial[0]
        A = s**2 / 6.0
        B = d**2 / 2.0 + 2.0 * sigma_trial[2] ** 2

        dgamma = 0.0
        for _ in range(self.max_iterations):
            fa = 1.0 + a * dgamma
            fb = 1.0 + b * dgamma
            f2 = A / fa**2 + B / fb**2
            f = np.sqrt(f2)
            alpha = state.alpha + SQRT_2_3 * dgamma * f
            kappa = self._yield_radius(alpha)
            phi = 0.5 * f2 - kappa**2 / 3.0
            if not np.isfinite(phi):
                break
            if abs(phi) <= self.tolerance * kappa**2:
                break
            df2 = -2.0 * a * A / fa**3 - 2.0 * b * B / fb**3
            dkappa = H * SQRT_2_3 * (f + dgamma * df2 / (2.0 * f))
            dphi = 0.5 * df2 - 2.0 / 3.0 * kappa * dkappa
            dgamma -= phi / dphi
        else:
            raise MaterialUpdateError(
                f"von Mises return mapping did not converge in {self.max_iterations} iterations "
                f"(phi={phi:.3e}, dgamma={dgamma:.3e})"
            )
        if not np.isfinite(phi) or dgamma < 0:
            raise MaterialUpdateError(f"von Mises return mapping diverged (dgamma={dgamma!r})")

        xi = np.linalg.inv(self._compliance + dgamma * P)
        sigma = xi @ (strain - state.plastic_strain)
        f2 = sigma @ P @ sigma

        self._trial = PlasticState(
            plastic_strain=state.plastic_strain + dgamma * P @ sigma,
            alpha=state.alpha + SQRT_2_3 * dgamma * np.sqrt(f2),
        )

        logger.debug("Plastic correction: dgamma=%.3e alpha=%.3e", dgamma, self._trial.alpha)

        theta = 1.0 - 2.0 / 3.0 * H * dgamma
        beta = 2.0 / 3.0 * H * f2 / theta
        n = xi @ P @ sigma
        tangent = xi - np.outer(n, n) / (sigma @ P @ n + beta)
        return sigma, tangent

    def save_state(self) -> None:
        self._committed = self._trial.copy()

    def __repr__(self):
        return (
            f"<ShellVonMisesMaterial2D {self.material.name} sy={self.yield_stress:g} "
            f"H={self.hardening_modulus:g}>"
        )
