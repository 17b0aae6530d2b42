from enum import IntEnum
from typing import Dict, List, Sequence, Tuple

import numpy as np

from iga_shell.constitutive.base import ShellMaterial
from iga_shell.core.dofs import TRANSLATIONS, StructuralDof
from iga_shell.core.entities import ControlPoint


class ElementFamily(IntEnum):
    SHELL = 2


class IsogeometricElement:
    _id_counter: int = 0

    def __init__(
        self,
        name: str,
        control_points: Sequence[ControlPoint],
        material: ShellMaterial,
        dofs_per_node: int,
    ):
        self.name = name
        self.control_points: Tuple[ControlPoint, ...] = tuple(control_points)
        self.material = material
        self.dofs_per_node = dofs_per_node
        self.node_count = len(self.control_points)
        self.dofs_count = self.node_count * self.dofs_per_node
        self.element_family: ElementFamily = None
        self.id = IsogeometricElement._id_counter
        IsogeometricElement._id_counter += 1

    @property
    def node_ids(self) -> List[int]:
        return [cp.id for cp in self.control_points]

    @property
    def node_coords(self) -> np.ndarray:
        """Reference control point coordinates, ``(n, 3)``."""
        return np.array([cp.coords for cp in self.control_points])

    @property
    def global_dof_indices(self) -> Dict[int, Tuple[int, ...]]:
        """
        Global dof indices of the element control points for a dense numbering
        ``control point id * dofs_per_node + component``.

        Returns:
            Dict[int, Tuple[int, ...]]: dof indices per control point id.
        """
        global_dof_indices = {}
        for node_id in self.node_ids:
            start_dof = node_id * self.dofs_per_node
            end_dof = start_dof + self.dofs_per_node
            global_dof_indices[node_id] = tuple(range(start_dof, end_dof))

        return global_dof_indices

    def __repr__(self):
        return f"<Element id={self.id} name={self.name}>"


class ShellElement(IsogeometricElement):
    def __init__(
        self,
        name: str,
        control_points: Sequence[ControlPoint],
        material: ShellMaterial,
        thickness: float,
    ):
        if thickness <= 0:
            raise ValueError(f"Thickness must be positive: {thickness}")
        super().__init__(name, control_points, material, dofs_per_node=len(TRANSLATIONS))
        self.thickness = thickness
        self.element_family = ElementFamily.SHELL

    def get_element_dof_types(self) -> List[Tuple[StructuralDof, ...]]:
        """Three translational dof types per control point."""
        return [TRANSLATIONS for _ in self.control_points]

    def __repr__(self):
        return f"<ShellElement id={self.id} name={self.name} thickness={self.thickness}>"
