"""
Strain-displacement operators of the Kirchhoff-Love shell.

Membrane strains are ``eps = [(a11-A11)/2, (a22-A22)/2, a12-A12]`` and
bending strains ``kappa = [b11-B11, b22-B22, 2(b12-B12)]`` with
``b_ab = g_ab . g3``. The operators below are their first variations with
respect to the control point displacements (three translations per control
point, ``3n`` columns); the bending operator carries the sign of ``-db/du``,
consistent with the moment resultant ``M = -int(sigma zeta)``. The geometric
stiffness functions are the second variations contracted with the current
stress resultants.
"""

import numpy as np

from iga_shell.core.nurbs import BasisTables
from iga_shell.elements.geometry import SurfaceGeometry

# Weights of the second-variation contraction (twist counted twice)
TWIST_FACTORS = np.array([1.0, 1.0, 2.0])


def membrane_operator(tables: BasisTables, point: int, geometry: SurfaceGeometry) -> np.ndarray:
    """
    Membrane strain-displacement operator Bm.

    Returns
    -------
    np.ndarray
        ``(3, 3n)``; the block of control point I is
        ``[N,1 g1; N,2 g2; N,2 g1 + N,1 g2]``.
    """
    dK = tables.d_ksi[:, point]
    dH = tables.d_heta[:, point]
    g1, g2 = geometry.g1, geometry.g2

    Bm = np.zeros((3, 3 * len(dK)))
    Bm[0] = np.kron(dK, g1)
    Bm[1] = np.kron(dH, g2)
    Bm[2] = np.kron(dH, g1) + np.kron(dK, g2)
    return Bm


def bending_operator(tables: BasisTables, point: int, geometry: SurfaceGeometry) -> np.ndarray:
    """
    Bending strain-displacement operator Bb.

    Returns
    -------
    np.ndarray
        ``(3, 3n)``; rows for (11), (22) and twice (12).
    """
    dK = tables.d_ksi[:, point]
    dH = tables.d_heta[:, point]
    second = (
        tables.d2_ksi[:, point],
        tables.d2_heta[:, point],
        tables.d2_ksi_heta[:, point],
    )
    g1, g2, g3 = geometry.g1, geometry.g2, geometry.g3
    J1 = geometry.area_scale
    curvature_vectors = (geometry.g11, geometry.g22, geometry.g12)

    # Variation of the unit normal is common to the three rows
    normal_part = np.kron(dK, np.cross(g2, g3)) + np.kron(dH, np.cross(g3, g1))

    Bb = np.zeros((3, 3 * len(dK)))
    for row, (g_ab, N_ab) in enumerate(zip(curvature_vectors, second)):
        Bb[row] = (
            np.kron(dK, np.cross(g_ab, g2))
            + np.kron(dH, np.cross(g1, g_ab))
            + (g3 @ g_ab) * normal_part
        ) / J1 - np.kron(N_ab, g3)
    Bb[2] *= 2.0
    return Bb


def membrane_geometric_stiffness(tables: BasisTables, point: int, membrane_forces: np.ndarray) -> np.ndarray:
    """Second variation of the membrane strains contracted with ``N``, ``(3n, 3n)``."""
    dK = tables.d_ksi[:, point]
    dH = tables.d_heta[:, point]
    N11, N22, N12 = membrane_forces

    S = N11 * np.outer(dK, dK) + N22 * np.outer(dH, dH) + N12 * (np.outer(dK, dH) + np.outer(dH, dK))
    return np.kron(S, np.eye(3))


def normal_variations(tables: BasisTables, point: int, geometry: SurfaceGeometry):
    """
    First and second derivatives of the unit normal.

    Returns
    -------
    tuple of np.ndarray
        ``a3_r`` with shape ``(3n, 3)`` and ``a3_rs`` with shape ``(3n, 3n, 3)``.
    """
    dK = tables.d_ksi[:, point]
    dH = tables.d_heta[:, point]
    g1, g2, a3 = geometry.g1, geometry.g2, geometry.g3
    J = geometry.area_scale

    eye3 = np.eye(3)
    A1r = np.kron(dK[:, None], eye3)
    A2r = np.kron(dH[:, None], eye3)

    # Unnormalized normal g1 x g2 and its derivatives
    n_r = np.cross(A1r, g2) + np.cross(g1, A2r)
    n_rs = np.cross(A1r[:, None], A2r[None]) + np.cross(A1r[None], A2r[:, None])

    j_r = n_r @ a3
    a3_r = (n_r - np.outer(j_r, a3)) / J
    j_rs = n_rs @ a3 + n_r @ n_r.T / J - np.outer(j_r, j_r) / J

    a3_rs = (
        n_rs / J
        - (n_r[:, None, :] * j_r[None, :, None] + n_r[None, :, :] * j_r[:, None, None]) / J**2
        - j_rs[:, :, None] * a3 / J
        + 2.0 * np.outer(j_r, j_r)[:, :, None] * a3 / J**2
    )
    return a3_r, a3_rs


def bending_geometric_stiffness(
    tables: BasisTables, point: int, geometry: SurfaceGeometry, bending_moments: np.ndarray
) -> np.ndarray:
    """
    Second variation of the curvatures contracted with ``M``, ``(3n, 3n)``.

    Sign follows the moment convention: the result is
    ``-sum c_ab M_ab d2(b_ab)`` with ``c = (1, 1, 2)``.
    """
    a3_r, a3_rs = normal_variations(tables, point, geometry)
    second = (
        tables.d2_ksi[:, point],
        tables.d2_heta[:, point],
        tables.d2_ksi_heta[:, point],
    )
    curvature_vectors = (geometry.g11, geometry.g22, geometry.g12)

    eye3 = np.eye(3)
    K = np.zeros((a3_r.shape[0], a3_r.shape[0]))
    for c, M_ab, g_ab, N_ab in zip(TWIST_FACTORS, bending_moments, curvature_vectors, second):
        P_ab = np.kron(N_ab[:, None], eye3)
        cross_term = P_ab @ a3_r.T
        b_rs = cross_term + cross_term.T + a3_rs @ g_ab
        K -= c * M_ab * b_rs
    return K
