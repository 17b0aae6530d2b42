"""
Degree-of-freedom bookkeeping.

The shell element carries three translations per control point. A
:class:`FreeDofOrdering` numbers the free ``(control point, dof)`` pairs of a
model and remembers the constrained ones, so elemental load vectors can be
keyed by global free-DOF id.
"""

from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Set, Tuple

from iga_shell.core.entities import ControlPoint


class StructuralDof(str, Enum):
    """Translational degree-of-freedom types of a control point."""

    TRANSLATION_X = "TranslationX"
    TRANSLATION_Y = "TranslationY"
    TRANSLATION_Z = "TranslationZ"

    @property
    def component(self) -> int:
        """Position of the dof inside the three translations of a node."""
        return _COMPONENTS[self]


_COMPONENTS = {
    StructuralDof.TRANSLATION_X: 0,
    StructuralDof.TRANSLATION_Y: 1,
    StructuralDof.TRANSLATION_Z: 2,
}

TRANSLATIONS: Tuple[StructuralDof, ...] = (
    StructuralDof.TRANSLATION_X,
    StructuralDof.TRANSLATION_Y,
    StructuralDof.TRANSLATION_Z,
)

DofKey = Tuple[int, StructuralDof]


class FreeDofOrdering:
    """
    Numbering of free degrees of freedom.

    Free dofs receive consecutive ids in insertion order. A dof is either
    free, constrained or unknown to the ordering.
    """

    def __init__(self):
        self._free: Dict[DofKey, int] = {}
        self._constrained: Set[DofKey] = set()

    @classmethod
    def from_control_points(
        cls,
        control_points: Iterable[ControlPoint],
        constrained: Iterable[DofKey] = (),
    ) -> "FreeDofOrdering":
        """
        Number the translations of every control point, skipping ``constrained``.

        Parameters
        ----------
        control_points : Iterable[ControlPoint]
            Control points of the model, in numbering order.
        constrained : Iterable[Tuple[int, StructuralDof]]
            ``(control point id, dof)`` pairs fixed by boundary conditions.
        """
        ordering = cls()
        fixed = {(int(cp_id), StructuralDof(dof)) for cp_id, dof in constrained}
        for key in fixed:
            ordering.constrain(*key)
        for cp in control_points:
            for dof in TRANSLATIONS:
                if (cp.id, dof) not in fixed:
                    ordering.add_free(cp.id, dof)
        return ordering

    def add_free(self, control_point_id: int, dof: StructuralDof) -> int:
        """Register a free dof and return its global id."""
        key = (control_point_id, StructuralDof(dof))
        if key in self._constrained:
            raise ValueError(f"Dof {key} is already constrained")
        if key not in self._free:
            self._free[key] = len(self._free)
        return self._free[key]

    def constrain(self, control_point_id: int, dof: StructuralDof) -> None:
        key = (control_point_id, StructuralDof(dof))
        if key in self._free:
            raise ValueError(f"Dof {key} is already numbered as free")
        self._constrained.add(key)

    def global_id(self, control_point_id: int, dof: StructuralDof) -> Optional[int]:
        """Global id of a free dof, ``None`` when constrained or unknown."""
        return self._free.get((control_point_id, dof))

    def is_constrained(self, control_point_id: int, dof: StructuralDof) -> bool:
        return (control_point_id, dof) in self._constrained

    def __len__(self) -> int:
        return len(self._free)

    def __iter__(self) -> Iterator[Tuple[DofKey, int]]:
        return iter(self._free.items())

    def __repr__(self):
        return f"<FreeDofOrdering free={len(self._free)} constrained={len(self._constrained)}>"
