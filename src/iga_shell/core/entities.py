"""
Isogeometric entities module.

This module contains the building blocks that describe the support of an
isogeometric shell element:
- ControlPoint: A weighted point of the NURBS control net
- Knot: A corner of an element in the parametric domain
- Patch: Degrees and knot value vectors shared by the elements of a surface
"""

from dataclasses import dataclass, replace
from typing import Iterable, List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class ControlPoint:
    """
    Weighted control point of a NURBS surface.

    Control points are immutable: deformed copies are built with
    :meth:`translated`, so the reference net of an element is never aliased
    by a current configuration.

    Parameters
    ----------
    id : int
        Unique identifier of the control point inside the model.
    x, y, z : float
        Cartesian coordinates.
    ksi, heta, zeta : float, optional
        Parametric coordinates (informative, the basis is defined by the knots).
    weight : float, optional
        NURBS weight, by default 1.0
    """

    id: int
    x: float
    y: float
    z: float
    ksi: float = 0.0
    heta: float = 0.0
    zeta: float = 0.0
    weight: float = 1.0

    @property
    def coords(self) -> np.ndarray:
        """Cartesian coordinates as a ``(3,)`` array."""
        return np.array([self.x, self.y, self.z], dtype=float)

    def translated(self, displacement: Sequence[float]) -> "ControlPoint":
        """Return a copy moved by ``displacement``; parametric data and weight pass through."""
        ux, uy, uz = displacement
        return replace(self, x=self.x + ux, y=self.y + uy, z=self.z + uz)

    def __repr__(self):
        return f"<ControlPoint id={self.id} xyz=({self.x:g}, {self.y:g}, {self.z:g}) w={self.weight:g}>"


@dataclass(frozen=True)
class Knot:
    """
    Element corner in the parametric domain.

    Parameters
    ----------
    id : int
        Knot identifier.
    ksi, heta : float
        Parametric coordinates.
    zeta : float, optional
        Third parametric coordinate, unused by surface elements.
    """

    id: int
    ksi: float
    heta: float
    zeta: float = 0.0


@dataclass(frozen=True)
class Patch:
    """
    NURBS patch data consumed by the elements of a surface.

    Parameters
    ----------
    degree_ksi : int
        Polynomial degree in the first parametric direction.
    degree_heta : int
        Polynomial degree in the second parametric direction.
    knot_value_vector_ksi : Sequence[float]
        Knot value vector in the first direction.
    knot_value_vector_heta : Sequence[float]
        Knot value vector in the second direction.
    """

    degree_ksi: int
    degree_heta: int
    knot_value_vector_ksi: Tuple[float, ...]
    knot_value_vector_heta: Tuple[float, ...]

    def __post_init__(self):
        if self.degree_ksi < 1 or self.degree_heta < 1:
            raise ValueError(
                f"Patch degrees must be >= 1, got ({self.degree_ksi}, {self.degree_heta})"
            )
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "knot_value_vector_ksi", tuple(float(k) for k in self.knot_value_vector_ksi))
        object.__setattr__(self, "knot_value_vector_heta", tuple(float(k) for k in self.knot_value_vector_heta))
        for name, vector in (
            ("knot_value_vector_ksi", self.knot_value_vector_ksi),
            ("knot_value_vector_heta", self.knot_value_vector_heta),
        ):
            if any(b < a for a, b in zip(vector, vector[1:])):
                raise ValueError(f"{name} must be non-decreasing: {vector}")

    @property
    def control_points_count(self) -> Tuple[int, int]:
        """Number of basis functions (control points) in each direction."""
        n_ksi = len(self.knot_value_vector_ksi) - self.degree_ksi - 1
        n_heta = len(self.knot_value_vector_heta) - self.degree_heta - 1
        return n_ksi, n_heta


def knot_span_bounds(knots: Iterable[Knot]) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """
    Parametric bounds of the region spanned by a set of element knots.

    Returns
    -------
    Tuple[Tuple[float, float], Tuple[float, float]]
        ``((ksi_min, ksi_max), (heta_min, heta_max))``

    Raises
    ------
    ValueError
        If the knots do not span a region of non-zero measure.
    """
    knots: List[Knot] = list(knots)
    if not knots:
        raise ValueError("An element needs at least one knot")
    ksi = [k.ksi for k in knots]
    heta = [k.heta for k in knots]
    bounds = ((min(ksi), max(ksi)), (min(heta), max(heta)))
    if bounds[0][1] <= bounds[0][0] or bounds[1][1] <= bounds[1][0]:
        raise ValueError(f"Element knots span an empty parametric region: {bounds}")
    return bounds
