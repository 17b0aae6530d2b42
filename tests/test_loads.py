"""
Tests for surface loads and the free-DOF ordering.

The tests validate:
- Resultants of distributed and pressure loads
- Reference and follower pressure
- Reporting of constrained and unknown loaded dofs
"""

import logging

import numpy as np
import pytest

from conftest import build_element, flat_plate_control_points
from iga_shell.core.config import ElementConfig
from iga_shell.core.dofs import TRANSLATIONS, FreeDofOrdering, StructuralDof
from iga_shell.elements.loads import (
    ExcludedDof,
    LoadStatus,
    SurfaceDistributedLoad,
    SurfacePressureLoad,
)


def component_total(result, ordering, dof):
    ids = {dof_id for (cp_id, d), dof_id in ordering if d is dof}
    return sum(value for dof_id, value in result.loads.items() if dof_id in ids)


@pytest.fixture
def ordering(flat_plate):
    return FreeDofOrdering.from_control_points(flat_plate.control_points)


class TestFreeDofOrdering:
    def test_numbering(self):
        cps = flat_plate_control_points()
        ordering = FreeDofOrdering.from_control_points(cps, constrained=[(0, "TranslationZ")])
        assert len(ordering) == 26
        assert ordering.global_id(0, StructuralDof.TRANSLATION_X) == 0
        assert ordering.global_id(0, StructuralDof.TRANSLATION_Z) is None
        assert ordering.is_constrained(0, StructuralDof.TRANSLATION_Z)
        assert ordering.global_id(1, StructuralDof.TRANSLATION_X) == 2
        assert ordering.global_id(99, StructuralDof.TRANSLATION_X) is None
        assert not ordering.is_constrained(99, StructuralDof.TRANSLATION_X)

    def test_conflicting_registration(self):
        ordering = FreeDofOrdering()
        ordering.add_free(1, StructuralDof.TRANSLATION_X)
        assert ordering.add_free(1, StructuralDof.TRANSLATION_X) == 0
        with pytest.raises(ValueError):
            ordering.constrain(1, StructuralDof.TRANSLATION_X)
        ordering.constrain(2, StructuralDof.TRANSLATION_Y)
        with pytest.raises(ValueError):
            ordering.add_free(2, StructuralDof.TRANSLATION_Y)

    def test_dof_components(self):
        assert [dof.component for dof in TRANSLATIONS] == [0, 1, 2]
        assert StructuralDof("TranslationY") is StructuralDof.TRANSLATION_Y


class TestDistributedLoad:
    @pytest.mark.parametrize("dof", TRANSLATIONS)
    def test_total_equals_magnitude_times_area(self, flat_plate, ordering, dof):
        result = flat_plate.calculate_surface_distributed_load(dof, 3.0, ordering)
        assert np.isclose(result.total(), 3.0 * 2.0)
        assert np.isclose(component_total(result, ordering, dof), 6.0)
        assert len(result.loads) == 9
        assert result.excluded == []

    def test_corner_loads_are_positive(self, flat_plate, ordering):
        result = flat_plate.calculate_surface_distributed_load(StructuralDof.TRANSLATION_Z, 1.0, ordering)
        assert all(value > 0 for value in result.loads.values())


class TestPressure:
    def test_flat_plate(self, flat_plate, ordering):
        result = flat_plate.calculate_surface_pressure(5.0, ordering)
        assert np.isclose(component_total(result, ordering, StructuralDof.TRANSLATION_Z), 5.0 * 2.0)
        assert np.isclose(component_total(result, ordering, StructuralDof.TRANSLATION_X), 0.0, atol=1e-12)
        assert np.isclose(component_total(result, ordering, StructuralDof.TRANSLATION_Y), 0.0, atol=1e-12)

    def test_quarter_cylinder(self, cylinder):
        ordering = FreeDofOrdering.from_control_points(cylinder.control_points)
        result = cylinder.calculate_surface_pressure(2.0, ordering)
        totals = [component_total(result, ordering, dof) for dof in TRANSLATIONS]
        # integral of p (cos t, sin t, 0) R L over a quarter circle
        np.testing.assert_allclose(totals, [2.0, 2.0, 0.0], rtol=1e-3, atol=1e-10)

    def test_follower_pressure_uses_current_area(self, flat_plate, ordering):
        flat_plate.initialize_reference_configuration()
        e = 0.1
        u = np.zeros((flat_plate.node_count, 3))
        u[:, 0] = e * flat_plate.node_coords[:, 0]
        flat_plate.calculate_stresses(u.ravel())

        reference = flat_plate.calculate_surface_pressure(1.0, ordering)
        follower = flat_plate.calculate_surface_pressure(1.0, ordering, follower=True)
        assert np.isclose(reference.total(), 2.0)
        assert np.isclose(follower.total(), 2.0 * (1 + e))

    def test_dispatch(self, flat_plate, ordering):
        pressure = flat_plate.calculate_surface_load(SurfacePressureLoad(4.0), ordering)
        assert np.isclose(pressure.total(), 8.0)
        distributed = flat_plate.calculate_surface_load(SurfaceDistributedLoad(1.5, "TranslationY"), ordering)
        assert np.isclose(component_total(distributed, ordering, StructuralDof.TRANSLATION_Y), 3.0)
        with pytest.raises(TypeError):
            flat_plate.calculate_surface_load(object(), ordering)


class TestExcludedDofs:
    def test_constrained_dofs_are_reported(self, flat_plate):
        constrained = [(0, dof) for dof in TRANSLATIONS]
        ordering = FreeDofOrdering.from_control_points(flat_plate.control_points, constrained)
        result = flat_plate.calculate_surface_pressure(1.0, ordering)
        assert len(result.excluded) == 3
        assert all(item.status is LoadStatus.CONSTRAINED for item in result.excluded)
        assert result.excluded[2] == ExcludedDof(0, StructuralDof.TRANSLATION_Z, LoadStatus.CONSTRAINED)
        assert len(result.loads) == 24

    def test_unknown_dofs_are_reported(self, flat_plate, caplog):
        ordering = FreeDofOrdering.from_control_points(flat_plate.control_points[:6])
        with caplog.at_level(logging.INFO, logger="iga_shell.elements.loads"):
            result = flat_plate.calculate_surface_distributed_load("TranslationZ", 1.0, ordering)
        assert {item.control_point_id for item in result.excluded} == {6, 7, 8}
        assert all(item.status is LoadStatus.UNKNOWN for item in result.excluded)
        assert "excluded" in caplog.text

    def test_unknown_dofs_raise(self, elastic_material):
        element = build_element(
            flat_plate_control_points(), elastic_material, config=ElementConfig(loaded_dof_policy="raise")
        )
        ordering = FreeDofOrdering.from_control_points(element.control_points[:6])
        with pytest.raises(KeyError):
            element.calculate_surface_pressure(1.0, ordering)

    def test_constrained_dofs_never_raise(self, elastic_material):
        element = build_element(
            flat_plate_control_points(), elastic_material, config=ElementConfig(loaded_dof_policy="raise")
        )
        ordering = FreeDofOrdering.from_control_points(element.control_points, [(4, "TranslationZ")])
        result = element.calculate_surface_pressure(1.0, ordering)
        assert result.excluded == [ExcludedDof(4, StructuralDof.TRANSLATION_Z, LoadStatus.CONSTRAINED)]
