"""
Surface loads on isogeometric shell elements.

Elemental load vectors are returned as a mapping from global free-DOF id to
value. Loaded dofs that the :class:`FreeDofOrdering` does not number are
reported explicitly instead of being dropped silently.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence

import numpy as np

from iga_shell.core.config import LoadedDofPolicy
from iga_shell.core.dofs import FreeDofOrdering, StructuralDof
from iga_shell.core.entities import ControlPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfacePressureLoad:
    """
    Pressure acting along the surface normal.

    Parameters
    ----------
    pressure : float
        Intensity, positive along ``g3 = g1 x g2 / |g1 x g2|``.
    follower : bool, optional
        Integrate over the current instead of the reference geometry.
    """

    pressure: float
    follower: bool = False


@dataclass(frozen=True)
class SurfaceDistributedLoad:
    """
    Load per unit area along a fixed translational dof.

    Parameters
    ----------
    magnitude : float
        Intensity.
    dof : StructuralDof
        Loaded direction.
    """

    magnitude: float
    dof: StructuralDof

    def __post_init__(self):
        object.__setattr__(self, "dof", StructuralDof(self.dof))


class LoadStatus(str, Enum):
    """Reason a loaded dof is missing from the load mapping."""

    CONSTRAINED = "constrained"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ExcludedDof:
    control_point_id: int
    dof: StructuralDof
    status: LoadStatus


@dataclass
class SurfaceLoadResult:
    """
    Elemental load vector.

    Attributes
    ----------
    loads : Dict[int, float]
        Global free-DOF id -> load value.
    excluded : List[ExcludedDof]
        Loaded dofs left out, each reported once.
    """

    loads: Dict[int, float] = field(default_factory=dict)
    excluded: List[ExcludedDof] = field(default_factory=list)

    def total(self) -> float:
        return float(sum(self.loads.values()))


def scatter_nodal_loads(
    control_points: Sequence[ControlPoint],
    nodal_loads: np.ndarray,
    dofs: Sequence[StructuralDof],
    dof_ordering: FreeDofOrdering,
    policy: LoadedDofPolicy = LoadedDofPolicy.SKIP,
) -> SurfaceLoadResult:
    """
    Key per-control-point loads by global free-DOF id.

    Parameters
    ----------
    control_points : Sequence[ControlPoint]
        Element control points.
    nodal_loads : np.ndarray
        ``(n, 3)`` loads per control point and translation.
    dofs : Sequence[StructuralDof]
        Translations that carry load.
    dof_ordering : FreeDofOrdering
        Global numbering of the free dofs.
    policy : LoadedDofPolicy
        ``RAISE`` turns an unknown dof into ``KeyError``.
    """
    result = SurfaceLoadResult()
    seen = set()
    for cp, values in zip(control_points, nodal_loads):
        for dof in dofs:
            dof_id = dof_ordering.global_id(cp.id, dof)
            if dof_id is not None:
                result.loads[dof_id] = result.loads.get(dof_id, 0.0) + float(values[dof.component])
                continue

            if dof_ordering.is_constrained(cp.id, dof):
                status = LoadStatus.CONSTRAINED
            elif policy is LoadedDofPolicy.RAISE:
                raise KeyError(f"Loaded dof {dof.value} of control point {cp.id} is not numbered")
            else:
                status = LoadStatus.UNKNOWN
            if (cp.id, dof) not in seen:
                seen.add((cp.id, dof))
                result.excluded.append(ExcludedDof(cp.id, dof, status))

    if result.excluded:
        logger.info("%d loaded dofs excluded from the load vector", len(result.excluded))
    return result
