"""
Reference and current configurations of an isogeometric shell element.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from iga_shell.core.entities import ControlPoint
from iga_shell.core.nurbs import BasisTables
from iga_shell.elements.geometry import surface_geometry

logger = logging.getLogger(__name__)


class ElementState(Enum):
    """
    Lifecycle of an element.

    ``UNINITIALIZED -> INITIALIZED`` happens once; afterwards every increment
    moves between ``STRAINS_UPDATED`` and ``STATE_COMMITTED``.
    """

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    STRAINS_UPDATED = "strains_updated"
    STATE_COMMITTED = "state_committed"


def current_control_points(
    control_points: Sequence[ControlPoint], displacements: Sequence[float]
) -> List[ControlPoint]:
    """
    Control points moved by a total displacement vector.

    Parameters
    ----------
    control_points : Sequence[ControlPoint]
        Reference control points.
    displacements : Sequence[float]
        ``3n`` translations ordered by control point.

    Raises
    ------
    ValueError
        If the vector length is not three times the number of control points.
    """
    displacements = np.asarray(displacements, dtype=float).ravel()
    if displacements.size != 3 * len(control_points):
        raise ValueError(
            f"Displacement vector has {displacements.size} entries, "
            f"expected {3 * len(control_points)}"
        )
    return [cp.translated(displacements[3 * i:3 * i + 3]) for i, cp in enumerate(control_points)]


def _frozen(array) -> np.ndarray:
    array = np.array(array, dtype=float)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class ReferenceConfiguration:
    """
    Reference geometry cached at the mid-surface quadrature points.

    Every array is indexed by quadrature point first and is read-only.
    """

    g1: np.ndarray
    g2: np.ndarray
    g3: np.ndarray
    g11: np.ndarray
    g22: np.ndarray
    g12: np.ndarray
    area_scale: np.ndarray
    metric: np.ndarray
    curvature: np.ndarray

    @classmethod
    def compute(
        cls,
        coords: np.ndarray,
        tables: BasisTables,
        tolerance: float = 1e-12,
        element_id: Optional[int] = None,
    ) -> "ReferenceConfiguration":
        """Evaluate the reference geometry at every quadrature point."""
        geometries = [
            surface_geometry(coords, tables, j, tolerance, element_id)
            for j in range(tables.points_count)
        ]
        logger.debug("Cached reference geometry of element %s at %d points", element_id, len(geometries))
        return cls(
            g1=_frozen([g.g1 for g in geometries]),
            g2=_frozen([g.g2 for g in geometries]),
            g3=_frozen([g.g3 for g in geometries]),
            g11=_frozen([g.g11 for g in geometries]),
            g22=_frozen([g.g22 for g in geometries]),
            g12=_frozen([g.g12 for g in geometries]),
            area_scale=_frozen([g.area_scale for g in geometries]),
            metric=_frozen([g.metric for g in geometries]),
            curvature=_frozen([g.curvature for g in geometries]),
        )

    @property
    def points_count(self) -> int:
        return len(self.area_scale)
