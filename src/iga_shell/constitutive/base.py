"""
Material interface consumed by the shell element.

A :class:`ShellMaterial` lives at one through-thickness integration point.
The element hands it covariant strain components ``[e11, e22, g12]``
(engineering shear) and reads back the conjugate contravariant stresses and
the tangent in the same curvilinear basis. Materials work internally in a
local Cartesian frame ``e1 = v1/|v1|``, ``e2 = v3 x e1`` fixed by
:meth:`ShellMaterial.set_reference_frame`; until a frame is set the
transformation is the identity.
"""

import copy
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from iga_shell.core.exceptions import MaterialUpdateError


def curvilinear_transformation(v1: np.ndarray, v2: np.ndarray, v3: np.ndarray) -> np.ndarray:
    """
    Map covariant strain components to local Cartesian components.

    Parameters
    ----------
    v1, v2 : np.ndarray
        Covariant tangent base vectors of the reference surface.
    v3 : np.ndarray
        Unit normal of the reference surface.

    Returns
    -------
    np.ndarray
        3x3 matrix ``T`` with ``eps_local = T @ eps_covariant`` in Voigt
        notation with engineering shear. Stresses transform as
        ``sigma_contravariant = T.T @ sigma_local``.
    """
    v1 = np.asarray(v1, dtype=float)
    v2 = np.asarray(v2, dtype=float)
    v3 = np.asarray(v3, dtype=float)

    e1 = v1 / np.linalg.norm(v1)
    e2 = np.cross(v3, e1)
    e2 /= np.linalg.norm(e2)

    metric = np.array([[v1 @ v1, v1 @ v2], [v1 @ v2, v2 @ v2]])
    metric_inv = np.linalg.inv(metric)
    # Contravariant base vectors G^alpha
    contra = metric_inv @ np.vstack([v1, v2])

    # t[a, alpha] = e_a . G^alpha
    t = np.vstack([e1, e2]) @ contra.T

    return np.array(
        [
            [t[0, 0] ** 2, t[0, 1] ** 2, t[0, 0] * t[0, 1]],
            [t[1, 0] ** 2, t[1, 1] ** 2, t[1, 0] * t[1, 1]],
            [
                2 * t[0, 0] * t[1, 0],
                2 * t[0, 1] * t[1, 1],
                t[0, 0] * t[1, 1] + t[0, 1] * t[1, 0],
            ],
        ]
    )


class ShellMaterial(ABC):
    """
    Abstract plane-stress material bound to a thickness point.

    Subclasses implement :meth:`_integrate`, which maps a local Cartesian
    strain to ``(stress, tangent)`` without touching the committed state,
    and :meth:`save_state`, which commits the last update.

    Parameters
    ----------
    elastic_matrix : np.ndarray
        3x3 local elastic stiffness, returned as tangent before any update.
    """

    def __init__(self, elastic_matrix: np.ndarray):
        self._elastic = np.asarray(elastic_matrix, dtype=float)
        self._transformation = np.eye(3)
        self._strain = np.zeros(3)
        self._local_stress = np.zeros(3)
        self._local_tangent = self._elastic.copy()

    def clone(self) -> "ShellMaterial":
        """Independent copy, sharing no mutable state with ``self``."""
        return copy.deepcopy(self)

    def set_reference_frame(self, v1, v2, v3) -> None:
        """Fix the local frame from the reference tangent vectors and unit normal."""
        self._transformation = curvilinear_transformation(v1, v2, v3)

    def update_material(self, strain) -> None:
        """
        Trial update for a covariant strain.

        Raises
        ------
        ValueError
            If ``strain`` does not have three components.
        MaterialUpdateError
            If the strain is not finite or the local integration fails.
        """
        strain = np.asarray(strain, dtype=float)
        if strain.shape != (3,):
            raise ValueError(f"Shell strain must have 3 components, got shape {strain.shape}")
        if not np.all(np.isfinite(strain)):
            raise MaterialUpdateError(f"Non-finite strain submitted to material: {strain}")

        stress, tangent = self._integrate(self._transformation @ strain)
        self._strain = strain
        self._local_stress = stress
        self._local_tangent = tangent

    @property
    def strains(self) -> np.ndarray:
        """Last submitted covariant strain."""
        return self._strain.copy()

    @property
    def stresses(self) -> np.ndarray:
        """Contravariant stress conjugate to the last submitted strain."""
        return self._transformation.T @ self._local_stress

    @property
    def constitutive_matrix(self) -> np.ndarray:
        """Tangent in the covariant basis."""
        T = self._transformation
        return T.T @ self._local_tangent @ T

    @abstractmethod
    def _integrate(self, strain: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Local stress and tangent for a local Cartesian strain."""

    @abstractmethod
    def save_state(self) -> None:
        """Commit the state reached by the last :meth:`update_material`."""
