"""
Nonlinear isogeometric Kirchhoff-Love shell element.

The element interpolates a thin shell mid-surface with a NURBS patch and
carries three translations per control point. Strains are measured on a
total-Lagrangian basis against a reference configuration cached once:

    eps   = [(a11 - A11)/2, (a22 - A22)/2, a12 - A12]
    kappa = [b11 - B11, b22 - B22, 2 (b12 - B12)]

The material response is integrated through the thickness at every
mid-surface Gauss point with one material instance per thickness point.

References
----------
- Kiendl, J., Bletzinger, K.-U., Linhard, J. and Wüchner, R. (2009).
  "Isogeometric shell analysis with Kirchhoff-Love elements."
  Comput. Methods Appl. Mech. Engrg., 198, 3902-3914.
- Kiendl, J., Hsu, M.-C., Wu, M.C.H. and Reali, A. (2015). "Isogeometric
  Kirchhoff-Love shell formulations for general hyperelastic materials."
  Comput. Methods Appl. Mech. Engrg., 291, 280-303.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from iga_shell.constitutive.base import ShellMaterial
from iga_shell.core.config import ElementConfig, TangentMode
from iga_shell.core.dofs import TRANSLATIONS, FreeDofOrdering, StructuralDof
from iga_shell.core.entities import ControlPoint, Knot, Patch, knot_span_bounds
from iga_shell.core.exceptions import ElementStateError, MaterialUpdateError, UnsupportedOperationError
from iga_shell.core.nurbs import Nurbs2D
from iga_shell.core.quadrature import GaussLegendrePoint, GaussQuadrature, ThicknessPoint
from iga_shell.elements import thickness as through_thickness
from iga_shell.elements.configuration import (
    ElementState,
    ReferenceConfiguration,
    current_control_points,
)
from iga_shell.elements.elements import ShellElement
from iga_shell.elements.geometry import surface_geometry
from iga_shell.elements.loads import (
    SurfaceDistributedLoad,
    SurfaceLoadResult,
    SurfacePressureLoad,
    scatter_nodal_loads,
)
from iga_shell.elements.strain_operators import (
    bending_geometric_stiffness,
    bending_operator,
    membrane_geometric_stiffness,
    membrane_operator,
)

logger = logging.getLogger(__name__)

MEMBRANE_STRAIN_FACTORS = np.array([0.5, 0.5, 1.0])
BENDING_STRAIN_FACTORS = np.array([1.0, 1.0, 2.0])


@dataclass(frozen=True)
class StressUpdate:
    """
    Result of a strain/stress update, indexed by mid-surface point.

    Attributes
    ----------
    membrane_strains, bending_strains : np.ndarray
        ``(n_points, 3)`` covariant strains.
    membrane_forces, bending_moments : np.ndarray
        ``(n_points, 3)`` stress resultants.
    """

    membrane_strains: np.ndarray
    bending_strains: np.ndarray
    membrane_forces: np.ndarray
    bending_moments: np.ndarray


class NurbsKirchhoffLoveShellNL(ShellElement):
    """
    Geometrically nonlinear NURBS Kirchhoff-Love shell element.

    Parameters
    ----------
    material : ShellMaterial
        Template cloned once per thickness integration point.
    knots : Sequence[Knot]
        Element corners; their bounds define the element knot span.
    control_points : Sequence[ControlPoint]
        The ``(p+1)(q+1)`` supporting control points, ksi index outermost.
    patch : Patch
        Degrees and knot value vectors.
    thickness : float, optional
        Shell thickness, by default ``config.thickness``. Both may be given
        only when they agree.
    config : ElementConfig, optional
        Element options, by default ``ElementConfig()``.

    Attributes
    ----------
    gauss_points : List[GaussLegendrePoint]
        Mid-surface integration points.
    thickness_points : List[ThicknessPoint]
        Flat arena; the points of mid-surface point ``j`` occupy
        ``[j*nt, (j+1)*nt)``.
    materials : List[ShellMaterial]
        Flat arena aligned with ``thickness_points``.
    state : ElementState
        Lifecycle tag.

    Notes
    -----
    Call sequence per increment: :meth:`calculate_stresses`, then
    :meth:`calculate_forces` and :meth:`stiffness_matrix` at the same
    displacement, and :meth:`save_material_state` once converged.
    """

    def __init__(
        self,
        material: ShellMaterial,
        knots: Sequence[Knot],
        control_points: Sequence[ControlPoint],
        patch: Patch,
        thickness: Optional[float] = None,
        config: Optional[ElementConfig] = None,
    ):
        config = config if config is not None else ElementConfig()
        if thickness is None:
            if config.thickness is None:
                raise ValueError("Thickness must be given as argument or in ElementConfig")
            thickness = config.thickness
        elif config.thickness is not None and not np.isclose(thickness, config.thickness):
            raise ValueError(
                f"Thickness argument {thickness} differs from ElementConfig.thickness {config.thickness}"
            )
        super().__init__("NurbsKLShellNL", control_points, material, thickness)
        self.config = config
        self.knots = tuple(knots)
        self.patch = patch

        (k0, k1), (h0, h1) = knot_span_bounds(self.knots)
        self._span_point = (0.5 * (k0 + k1), 0.5 * (h0 + h1))

        self.gauss_points: List[GaussLegendrePoint] = GaussQuadrature.element_points(
            patch.degree_ksi, patch.degree_heta, self.knots
        )
        self._basis = Nurbs2D.evaluate(
            patch,
            self.control_points,
            [gp.location for gp in self.gauss_points],
            span_point=self._span_point,
        )

        degree = self.config.thickness_integration_degree
        self.thickness_points: List[ThicknessPoint] = [
            tp
            for j in range(len(self.gauss_points))
            for tp in GaussQuadrature.thickness_points(degree, thickness, j)
        ]
        self.materials: List[ShellMaterial] = [material.clone() for _ in self.thickness_points]

        self.state = ElementState.UNINITIALIZED
        self._reference: Optional[ReferenceConfiguration] = None
        self._displacements = np.zeros(self.dofs_count)
        self._stressed_displacements: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Arena access
    # ------------------------------------------------------------------

    @property
    def thickness_points_count(self) -> int:
        """Thickness points per mid-surface point."""
        return self.config.thickness_integration_degree + 1

    def _arena_slice(self, point: int) -> slice:
        nt = self.thickness_points_count
        return slice(point * nt, (point + 1) * nt)

    def thickness_points_at(self, point: int) -> List[ThicknessPoint]:
        return self.thickness_points[self._arena_slice(point)]

    def materials_at(self, point: int) -> List[ShellMaterial]:
        return self.materials[self._arena_slice(point)]

    def integrated_constitutive_over_thickness(self, point: int):
        """Membrane, bending and coupling matrices at mid-surface point ``point``."""
        return through_thickness.integrated_constitutive_over_thickness(
            self.materials_at(point), self.thickness_points_at(point)
        )

    def integrated_stresses_over_thickness(self, point: int):
        """Membrane forces and bending moments at mid-surface point ``point``."""
        return through_thickness.integrated_stresses_over_thickness(
            self.materials_at(point), self.thickness_points_at(point)
        )

    # ------------------------------------------------------------------
    # Configurations
    # ------------------------------------------------------------------

    @property
    def reference_configuration(self) -> Optional[ReferenceConfiguration]:
        return self._reference

    @property
    def displacements(self) -> np.ndarray:
        """Last assigned total displacement vector."""
        return self._displacements.copy()

    def initialize_reference_configuration(self) -> ReferenceConfiguration:
        """
        Cache the reference geometry and fix the material frames.

        Runs once; later calls return the cached configuration.
        """
        if self._reference is not None:
            return self._reference

        reference = ReferenceConfiguration.compute(
            self.node_coords, self._basis, self.config.degenerate_tolerance, self.id
        )
        for j in range(reference.points_count):
            for material in self.materials_at(j):
                material.set_reference_frame(reference.g1[j], reference.g2[j], reference.g3[j])

        self._reference = reference
        self.state = ElementState.INITIALIZED
        return reference

    def _require_reference(self, operation: str) -> ReferenceConfiguration:
        if self._reference is None:
            raise ElementStateError(
                f"{operation} on element {self.id} needs the reference configuration; "
                "call initialize_reference_configuration() or stiffness_matrix() first"
            )
        return self._reference

    def _checked_displacements(self, total_displacements) -> np.ndarray:
        total = np.asarray(total_displacements, dtype=float).ravel()
        if total.size != self.dofs_count:
            raise ValueError(
                f"Displacement vector has {total.size} entries, expected {self.dofs_count}"
            )
        return total.copy()

    def current_control_points(self) -> List[ControlPoint]:
        """Control points of the current configuration."""
        return current_control_points(self.control_points, self._displacements)

    def _current_coords(self) -> np.ndarray:
        return np.array([cp.coords for cp in self.current_control_points()])

    def _stresses_match_displacements(self) -> bool:
        if self._stressed_displacements is None:
            return False
        return np.array_equal(self._stressed_displacements, self._displacements)

    # ------------------------------------------------------------------
    # Element operations
    # ------------------------------------------------------------------

    def stiffness_matrix(self) -> np.ndarray:
        """
        Tangent stiffness matrix at the current displacement.

        The first call caches the reference configuration.

        Returns
        -------
        np.ndarray
            Dense ``(3n, 3n)`` matrix.

        Raises
        ------
        ElementStateError
            With ``TangentMode.FULL``, if the stresses were not updated at the
            current displacement.
        """
        reference = self.initialize_reference_configuration()
        full = self.config.tangent is TangentMode.FULL
        if full and self.config.check_update_sequence:
            at_rest = self._stressed_displacements is None and not np.any(self._displacements)
            if not (at_rest or self._stresses_match_displacements()):
                raise ElementStateError(
                    f"Full tangent of element {self.id} requested before the stress update "
                    "at the current displacement"
                )

        coords = self._current_coords()
        K = np.zeros((self.dofs_count, self.dofs_count))
        for j, gp in enumerate(self.gauss_points):
            geometry = surface_geometry(
                coords, self._basis, j, self.config.degenerate_tolerance, self.id
            )
            Bm = membrane_operator(self._basis, j, geometry)
            Bb = bending_operator(self._basis, j, geometry)
            Cm, Cb, Cc = self.integrated_constitutive_over_thickness(j)

            if full:
                Kj = Bm.T @ Cm @ Bm + Bb.T @ Cb @ Bb - Bm.T @ Cc @ Bb - Bb.T @ Cc.T @ Bm
                membrane_forces, bending_moments = self.integrated_stresses_over_thickness(j)
                Kj += membrane_geometric_stiffness(self._basis, j, membrane_forces)
                Kj += bending_geometric_stiffness(self._basis, j, geometry, bending_moments)
            else:
                Kj = Bm.T @ Cm @ Bm + Bb.T @ Cb @ Bb + Bm.T @ Cc @ Bb + Bb.T @ Cc.T @ Bm

            K += Kj * reference.area_scale[j] * gp.weight

        logger.debug(
            "Element %d: %s stiffness assembled, |K|=%.6e",
            self.id,
            self.config.tangent.value,
            np.linalg.norm(K),
        )
        return K

    def calculate_stresses(self, total_displacements, incremental_displacements=None) -> StressUpdate:
        """
        Update strains and stresses for a total displacement vector.

        Parameters
        ----------
        total_displacements : array_like
            ``3n`` total displacements from the reference configuration.
        incremental_displacements : array_like, optional
            Unused; strains are measured from the reference configuration.

        Returns
        -------
        StressUpdate
            Strains and stress resultants per mid-surface point.

        Raises
        ------
        ElementStateError
            If the reference configuration is not initialized.
        MaterialUpdateError
            If a material cannot update; the error names the element,
            mid-surface point and thickness point.
        """
        reference = self._require_reference("calculate_stresses")
        self._displacements = self._checked_displacements(total_displacements)
        coords = self._current_coords()

        n_points = len(self.gauss_points)
        membrane_strains = np.zeros((n_points, 3))
        bending_strains = np.zeros((n_points, 3))
        membrane_forces = np.zeros((n_points, 3))
        bending_moments = np.zeros((n_points, 3))

        for j in range(n_points):
            geometry = surface_geometry(
                coords, self._basis, j, self.config.degenerate_tolerance, self.id
            )
            eps = MEMBRANE_STRAIN_FACTORS * (geometry.metric - reference.metric[j])
            kappa = BENDING_STRAIN_FACTORS * (geometry.curvature - reference.curvature[j])

            for k, (material, tp) in enumerate(zip(self.materials_at(j), self.thickness_points_at(j))):
                try:
                    material.update_material(eps + kappa * tp.zeta)
                except MaterialUpdateError as exc:
                    raise MaterialUpdateError(
                        f"Element {self.id}, point {j}, thickness point {k}: {exc}",
                        element_id=self.id,
                        point_index=j,
                        thickness_index=k,
                    ) from exc

            membrane_strains[j] = eps
            bending_strains[j] = kappa
            membrane_forces[j], bending_moments[j] = self.integrated_stresses_over_thickness(j)

        self._stressed_displacements = self._displacements.copy()
        self.state = ElementState.STRAINS_UPDATED
        logger.debug("Element %d: stresses updated at %d points", self.id, n_points)
        return StressUpdate(membrane_strains, bending_strains, membrane_forces, bending_moments)

    def calculate_forces(self, total_displacements, incremental_displacements=None) -> np.ndarray:
        """
        Internal force vector from the already updated material stresses.

        Parameters
        ----------
        total_displacements : array_like
            ``3n`` total displacements; must equal those of the last
            :meth:`calculate_stresses` call.
        incremental_displacements : array_like, optional
            Unused.

        Returns
        -------
        np.ndarray
            Length ``3n`` vector ``sum (Bm^T N + Bb^T M) J1_ref w``.

        Raises
        ------
        ElementStateError
            If the reference configuration is not initialized or, with
            ``check_update_sequence``, no stress update ran at this displacement.
            A rejected call leaves the element state unchanged.
        """
        reference = self._require_reference("calculate_forces")
        total = self._checked_displacements(total_displacements)
        stressed = self._stressed_displacements
        if self.config.check_update_sequence and (stressed is None or not np.array_equal(stressed, total)):
            raise ElementStateError(
                f"calculate_forces on element {self.id} requires calculate_stresses "
                "at the same displacement"
            )
        self._displacements = total

        coords = self._current_coords()
        forces = np.zeros(self.dofs_count)
        for j, gp in enumerate(self.gauss_points):
            geometry = surface_geometry(
                coords, self._basis, j, self.config.degenerate_tolerance, self.id
            )
            Bm = membrane_operator(self._basis, j, geometry)
            Bb = bending_operator(self._basis, j, geometry)
            membrane_forces, bending_moments = self.integrated_stresses_over_thickness(j)
            forces += (Bm.T @ membrane_forces + Bb.T @ bending_moments) * reference.area_scale[j] * gp.weight
        return forces

    def save_material_state(self) -> None:
        """Commit the state of every bound material."""
        for material in self.materials:
            material.save_state()
        if self.state is ElementState.STRAINS_UPDATED:
            self.state = ElementState.STATE_COMMITTED

    # ------------------------------------------------------------------
    # Loads and post-processing
    # ------------------------------------------------------------------

    def calculate_surface_pressure(
        self, pressure: float, dof_ordering: FreeDofOrdering, follower: bool = False
    ) -> SurfaceLoadResult:
        """
        Consistent nodal loads of a pressure along the unit normal.

        Parameters
        ----------
        pressure : float
            Intensity, positive along ``g3``.
        dof_ordering : FreeDofOrdering
            Global free-DOF numbering.
        follower : bool, optional
            Integrate over the current geometry, by default the reference one.
        """
        coords = self._current_coords() if follower else self.node_coords
        nodal = np.zeros((self.node_count, 3))
        for j, gp in enumerate(self.gauss_points):
            geometry = surface_geometry(
                coords, self._basis, j, self.config.degenerate_tolerance, self.id
            )
            nodal += (
                pressure
                * np.outer(self._basis.values[:, j], geometry.g3)
                * geometry.area_scale
                * gp.weight
            )
        return scatter_nodal_loads(
            self.control_points, nodal, TRANSLATIONS, dof_ordering, self.config.loaded_dof_policy
        )

    def calculate_surface_distributed_load(
        self, loaded_dof: StructuralDof, magnitude: float, dof_ordering: FreeDofOrdering
    ) -> SurfaceLoadResult:
        """Consistent nodal loads of a load per unit reference area along ``loaded_dof``."""
        loaded_dof = StructuralDof(loaded_dof)
        coords = self.node_coords
        nodal = np.zeros((self.node_count, 3))
        for j, gp in enumerate(self.gauss_points):
            geometry = surface_geometry(
                coords, self._basis, j, self.config.degenerate_tolerance, self.id
            )
            nodal[:, loaded_dof.component] += (
                magnitude * self._basis.values[:, j] * geometry.area_scale * gp.weight
            )
        return scatter_nodal_loads(
            self.control_points, nodal, (loaded_dof,), dof_ordering, self.config.loaded_dof_policy
        )

    def calculate_surface_load(
        self,
        load: Union[SurfacePressureLoad, SurfaceDistributedLoad],
        dof_ordering: FreeDofOrdering,
    ) -> SurfaceLoadResult:
        if isinstance(load, SurfacePressureLoad):
            return self.calculate_surface_pressure(load.pressure, dof_ordering, load.follower)
        if isinstance(load, SurfaceDistributedLoad):
            return self.calculate_surface_distributed_load(load.dof, load.magnitude, dof_ordering)
        raise TypeError(f"Unsupported surface load: {type(load).__name__}")

    def calculate_displacements_for_post_processing(self, local_displacements) -> np.ndarray:
        """
        Interpolate control point displacements at the element knots.

        Parameters
        ----------
        local_displacements : array_like
            ``(n, 3)`` or ``3n`` control point displacements.

        Returns
        -------
        np.ndarray
            ``(n_knots, 3)`` displacements in the order of ``self.knots``.
        """
        u = np.asarray(local_displacements, dtype=float).reshape(self.node_count, 3)
        tables = Nurbs2D.evaluate(
            self.patch,
            self.control_points,
            [(knot.ksi, knot.heta) for knot in self.knots],
            span_point=self._span_point,
        )
        return tables.values.T @ u

    # ------------------------------------------------------------------
    # Unsupported operations
    # ------------------------------------------------------------------

    def mass_matrix(self):
        raise UnsupportedOperationError(f"{self.name} does not provide a mass matrix")

    def damping_matrix(self):
        raise UnsupportedOperationError(f"{self.name} does not provide a damping matrix")

    def calculate_acceleration_forces(self, loads=None):
        raise UnsupportedOperationError(f"{self.name} does not provide acceleration forces")

    def calculate_forces_for_logging(self, local_displacements=None):
        raise UnsupportedOperationError(f"{self.name} does not provide forces for logging")

    def calculate_loading_condition(self, condition=None):
        raise UnsupportedOperationError(f"{self.name} does not support edge or face loading conditions")

    def clear_material_stresses(self):
        raise UnsupportedOperationError(f"{self.name} does not clear material stresses")

    def reset_material_modified(self):
        raise UnsupportedOperationError(f"{self.name} does not track modified materials")

    def clear_material_state(self):
        """Materials keep their committed state; nothing to clear."""

    def __repr__(self):
        return (
            f"<NurbsKirchhoffLoveShellNL id={self.id} degrees=({self.patch.degree_ksi}, "
            f"{self.patch.degree_heta}) thickness={self.thickness} state={self.state.value}>"
        )
