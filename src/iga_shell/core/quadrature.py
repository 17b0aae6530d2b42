"""
Gauss-Legendre quadrature for isogeometric shell elements.

Mid-surface points are tensor products over the element knot span; thickness
points are one-dimensional rules over ``[-t/2, t/2]`` nested under a
mid-surface point.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple

import numpy as np
from scipy.special import roots_legendre

from iga_shell.core.entities import Knot, knot_span_bounds


@dataclass(frozen=True)
class GaussLegendrePoint:
    """
    Mid-surface integration point.

    Attributes
    ----------
    ksi, heta : float
        Parametric location.
    weight : float
        Quadrature weight, already multiplied by the parametric span Jacobian.
    """

    ksi: float
    heta: float
    weight: float

    @property
    def location(self) -> Tuple[float, float]:
        return self.ksi, self.heta


@dataclass(frozen=True)
class ThicknessPoint:
    """
    Through-thickness integration point.

    Attributes
    ----------
    point_index : int
        Index of the owning mid-surface point.
    zeta : float
        Thickness coordinate in ``[-t/2, t/2]``.
    weight : float
        One-dimensional weight; the weights of a point sum to the thickness.
    """

    point_index: int
    zeta: float
    weight: float


class GaussQuadrature:
    """Factory of Gauss-Legendre integration points."""

    @staticmethod
    def rule(n_points: int) -> Tuple[np.ndarray, np.ndarray]:
        """Abscissas and weights of the ``n_points`` rule on ``[-1, 1]``."""
        if n_points < 1:
            raise ValueError(f"A Gauss rule needs at least one point, got {n_points}")
        x, w = roots_legendre(n_points)
        return np.asarray(x, dtype=float), np.asarray(w, dtype=float)

    @classmethod
    def element_points(
        cls, degree_ksi: int, degree_heta: int, knots: Iterable[Knot]
    ) -> List[GaussLegendrePoint]:
        """
        ``(p+1) x (q+1)`` points over the knot span of an element.

        Points are ordered with the ksi index outermost.
        """
        (k0, k1), (h0, h1) = knot_span_bounds(knots)
        x_k, w_k = cls.rule(degree_ksi + 1)
        x_h, w_h = cls.rule(degree_heta + 1)
        jac_k = 0.5 * (k1 - k0)
        jac_h = 0.5 * (h1 - h0)

        points = []
        for xi, wi in zip(x_k, w_k):
            ksi = 0.5 * (k0 + k1) + jac_k * xi
            for xj, wj in zip(x_h, w_h):
                heta = 0.5 * (h0 + h1) + jac_h * xj
                points.append(GaussLegendrePoint(float(ksi), float(heta), float(wi * wj * jac_k * jac_h)))
        return points

    @classmethod
    def thickness_points(cls, degree: int, thickness: float, point_index: int) -> List[ThicknessPoint]:
        """``degree + 1`` points over ``[-thickness/2, thickness/2]``."""
        if thickness <= 0:
            raise ValueError(f"Thickness must be positive: {thickness}")
        x, w = cls.rule(degree + 1)
        half = 0.5 * thickness
        return [ThicknessPoint(point_index, float(half * xi), float(half * wi)) for xi, wi in zip(x, w)]
