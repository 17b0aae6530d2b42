"""
NURBS basis evaluation for surface elements.

Provides the B-spline kernels of Piegl & Tiller (The NURBS Book, algorithms
A2.1 and A2.3) and :class:`Nurbs2D`, which evaluates the rational bivariate
basis of one element together with its first and second parametric
derivatives at a list of parametric points.

Tables are indexed ``[control point, point]`` and control points are ordered
with the ksi index outermost: ``k = a * (degree_heta + 1) + b``.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from iga_shell.core.entities import ControlPoint, Patch


def find_span(n: int, p: int, u: float, U: Sequence[float]) -> int:
    """Find knot span index for parameter u (B-spline).

    Parameters
    ----------
    n : int
        Index of the last basis function (number of basis functions - 1).
    p : int
        Polynomial degree.
    u : float
        Parametric coordinate.
    U : Sequence[float]
        Knot value vector.
    """
    if u >= U[n + 1]:
        return n
    if u <= U[p]:
        return p
    low = p
    high = n + 1
    mid = (low + high) // 2
    while u < U[mid] or u >= U[mid + 1]:
        if u < U[mid]:
            high = mid
        else:
            low = mid
        mid = (low + high) // 2
    return mid


def ders_basis_funs(i: int, u: float, p: int, n: int, U: Sequence[float]) -> np.ndarray:
    """
    Derivatives of B-spline basis up to order n.

    Returns
    -------
    np.ndarray
        ``ders[k, j] = d^k N_{i-p+j}(u) / du^k`` with shape ``(n + 1, p + 1)``.
        Derivatives of order higher than ``p`` are zero.
    """
    ndu = np.zeros((p + 1, p + 1))
    ndu[0, 0] = 1.0
    left = np.zeros(p + 1)
    right = np.zeros(p + 1)

    for j in range(1, p + 1):
        left[j] = u - U[i + 1 - j]
        right[j] = U[i + j] - u
        saved = 0.0
        for r in range(j):
            ndu[j, r] = right[r + 1] + left[j - r]
            temp = ndu[r, j - 1] / ndu[j, r]
            ndu[r, j] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        ndu[j, j] = saved

    ders = np.zeros((n + 1, p + 1))
    ders[0, :] = ndu[:, p]

    n_eff = min(n, p)
    a = np.zeros((2, p + 1))
    for r in range(p + 1):
        s1, s2 = 0, 1
        a[0, 0] = 1.0
        for k in range(1, n_eff + 1):
            d = 0.0
            rk = r - k
            pk = p - k
            if r >= k:
                a[s2, 0] = a[s1, 0] / ndu[pk + 1, rk]
                d = a[s2, 0] * ndu[rk, pk]
            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if (r - 1) <= pk else p - r
            for j in range(j1, j2 + 1):
                a[s2, j] = (a[s1, j] - a[s1, j - 1]) / ndu[pk + 1, rk + j]
                d += a[s2, j] * ndu[rk + j, pk]
            if r <= pk:
                a[s2, k] = -a[s1, k - 1] / ndu[pk + 1, r]
                d += a[s2, k] * ndu[r, pk]
            ders[k, r] = d
            s1, s2 = s2, s1

    factor = p
    for k in range(1, n_eff + 1):
        ders[k, :] *= factor
        factor *= p - k
    return ders


@dataclass(frozen=True)
class BasisTables:
    """
    Rational basis values and derivatives of one element.

    Every array has shape ``(n_control_points, n_points)``.

    Attributes
    ----------
    values : np.ndarray
        R
    d_ksi, d_heta : np.ndarray
        dR/dksi, dR/dheta
    d2_ksi, d2_heta, d2_ksi_heta : np.ndarray
        d2R/dksi2, d2R/dheta2, d2R/dksi dheta
    """

    values: np.ndarray
    d_ksi: np.ndarray
    d_heta: np.ndarray
    d2_ksi: np.ndarray
    d2_heta: np.ndarray
    d2_ksi_heta: np.ndarray

    @property
    def control_points_count(self) -> int:
        return self.values.shape[0]

    @property
    def points_count(self) -> int:
        return self.values.shape[1]


class Nurbs2D:
    """Evaluator of the rational bivariate NURBS basis of a surface element."""

    @staticmethod
    def evaluate(
        patch: Patch,
        control_points: Sequence[ControlPoint],
        points: Sequence[Tuple[float, float]],
        span_point: Optional[Tuple[float, float]] = None,
    ) -> BasisTables:
        """
        Evaluate the element basis at parametric points.

        Parameters
        ----------
        patch : Patch
            Degrees and knot value vectors.
        control_points : Sequence[ControlPoint]
            The ``(p+1)(q+1)`` control points supporting the element, ksi index outermost.
        points : Sequence[Tuple[float, float]]
            Parametric ``(ksi, heta)`` locations, all inside the same knot span.
        span_point : Tuple[float, float], optional
            Location selecting the knot span, for points lying on the span
            boundary. Defaults to each point itself.

        Returns
        -------
        BasisTables
            Rational basis values and derivatives.

        Raises
        ------
        ValueError
            If the number of control points does not match the patch degrees.
        """
        p, q = patch.degree_ksi, patch.degree_heta
        U = patch.knot_value_vector_ksi
        V = patch.knot_value_vector_heta
        n_ksi, n_heta = patch.control_points_count
        n_cp = (p + 1) * (q + 1)
        if len(control_points) != n_cp:
            raise ValueError(
                f"Element of degrees ({p}, {q}) needs {n_cp} control points, got {len(control_points)}"
            )

        weights = np.array([cp.weight for cp in control_points], dtype=float)
        n_points = len(points)
        tables = {
            name: np.zeros((n_cp, n_points))
            for name in ("values", "d_ksi", "d_heta", "d2_ksi", "d2_heta", "d2_ksi_heta")
        }

        for j, (ksi, heta) in enumerate(points):
            span_ksi = find_span(n_ksi - 1, p, span_point[0] if span_point else ksi, U)
            span_heta = find_span(n_heta - 1, q, span_point[1] if span_point else heta, V)
            dk = ders_basis_funs(span_ksi, ksi, p, 2, U)
            dh = ders_basis_funs(span_heta, heta, q, 2, V)

            # Tensor-product B-spline values, ksi outermost
            N = np.outer(dk[0], dh[0]).ravel()
            N_k = np.outer(dk[1], dh[0]).ravel()
            N_h = np.outer(dk[0], dh[1]).ravel()
            N_kk = np.outer(dk[2], dh[0]).ravel()
            N_hh = np.outer(dk[0], dh[2]).ravel()
            N_kh = np.outer(dk[1], dh[1]).ravel()

            W = N @ weights
            W_k = N_k @ weights
            W_h = N_h @ weights
            W_kk = N_kk @ weights
            W_hh = N_hh @ weights
            W_kh = N_kh @ weights

            tables["values"][:, j] = weights * N / W
            tables["d_ksi"][:, j] = weights * (N_k * W - N * W_k) / W**2
            tables["d_heta"][:, j] = weights * (N_h * W - N * W_h) / W**2
            tables["d2_ksi"][:, j] = weights * (
                N_kk / W - 2 * N_k * W_k / W**2 - N * W_kk / W**2 + 2 * N * W_k**2 / W**3
            )
            tables["d2_heta"][:, j] = weights * (
                N_hh / W - 2 * N_h * W_h / W**2 - N * W_hh / W**2 + 2 * N * W_h**2 / W**3
            )
            tables["d2_ksi_heta"][:, j] = weights * (
                N_kh / W
                - (N_k * W_h + N_h * W_k) / W**2
                - N * W_kh / W**2
                + 2 * N * W_k * W_h / W**3
            )

        return BasisTables(**tables)
