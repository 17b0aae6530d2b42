"""
Differential geometry of a NURBS surface at the quadrature points.

Tangent vectors, curvature vectors, unit normal and area scale are evaluated
from the basis derivative tables and a set of control point coordinates.
The same functions serve the reference and the current configuration.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from iga_shell.core.exceptions import DegenerateGeometryError
from iga_shell.core.nurbs import BasisTables


@dataclass(frozen=True)
class SurfaceGeometry:
    """
    Surface geometry at one quadrature point.

    Attributes
    ----------
    g1, g2 : np.ndarray
        Covariant tangent vectors (rows of the Jacobian).
    g11, g22, g12 : np.ndarray
        Second derivatives of the position (rows of the Hessian).
    normal : np.ndarray
        Unnormalized normal ``g1 x g2``.
    area_scale : float
        ``J1 = |g1 x g2|``.
    g3 : np.ndarray
        Unit normal.
    """

    g1: np.ndarray
    g2: np.ndarray
    g11: np.ndarray
    g22: np.ndarray
    g12: np.ndarray
    normal: np.ndarray
    area_scale: float
    g3: np.ndarray

    @property
    def metric(self) -> np.ndarray:
        """Covariant metric components ``[a11, a22, a12]``."""
        return np.array([self.g1 @ self.g1, self.g2 @ self.g2, self.g1 @ self.g2])

    @property
    def curvature(self) -> np.ndarray:
        """Curvature components ``[b11, b22, b12]``."""
        return np.array([self.g11 @ self.g3, self.g22 @ self.g3, self.g12 @ self.g3])


def jacobian(coords: np.ndarray, tables: BasisTables, point: int) -> np.ndarray:
    """2x3 Jacobian: rows ``g1 = sum N,1 x`` and ``g2 = sum N,2 x``."""
    return np.vstack([tables.d_ksi[:, point] @ coords, tables.d_heta[:, point] @ coords])


def hessian(coords: np.ndarray, tables: BasisTables, point: int) -> np.ndarray:
    """3x3 Hessian: rows ``g11``, ``g22``, ``g12``."""
    return np.vstack(
        [
            tables.d2_ksi[:, point] @ coords,
            tables.d2_heta[:, point] @ coords,
            tables.d2_ksi_heta[:, point] @ coords,
        ]
    )


def surface_geometry(
    coords: np.ndarray,
    tables: BasisTables,
    point: int,
    tolerance: float = 1e-12,
    element_id: Optional[int] = None,
) -> SurfaceGeometry:
    """
    Evaluate the surface geometry at a quadrature point.

    Parameters
    ----------
    coords : np.ndarray
        Control point coordinates, ``(n, 3)``.
    tables : BasisTables
        Basis derivative tables of the element.
    point : int
        Quadrature point index (column of the tables).
    tolerance : float, optional
        Relative threshold on ``J1 / (|g1| |g2|)``.
    element_id : int, optional
        Reported in the error message.

    Raises
    ------
    DegenerateGeometryError
        If the area scale is non-finite or below the tolerance.
    """
    g1, g2 = jacobian(coords, tables, point)
    g11, g22, g12 = hessian(coords, tables, point)

    normal = np.cross(g1, g2)
    area_scale = float(np.linalg.norm(normal))
    if not np.isfinite(area_scale) or area_scale <= tolerance * np.linalg.norm(g1) * np.linalg.norm(g2):
        raise DegenerateGeometryError(point, area_scale, element_id)

    return SurfaceGeometry(
        g1=g1,
        g2=g2,
        g11=g11,
        g22=g22,
        g12=g12,
        normal=normal,
        area_scale=area_scale,
        g3=normal / area_scale,
    )
