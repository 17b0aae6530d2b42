"""
Tests for the NURBS basis evaluation.

The tests validate:
- Knot span search
- B-spline derivative kernels
- Rational basis partition of unity and derivatives
- Exact representation of a circular arc
"""

import numpy as np
import pytest

from conftest import cylinder_control_points, flat_plate_control_points, quadratic_patch
from iga_shell.core.entities import Patch
from iga_shell.core.nurbs import Nurbs2D, ders_basis_funs, find_span


class TestFindSpan:
    U = (0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0)

    @pytest.mark.parametrize("u, expected", [(0.0, 2), (0.25, 2), (0.5, 3), (0.75, 3), (1.0, 3)])
    def test_span(self, u, expected):
        assert find_span(3, 2, u, self.U) == expected


class TestDersBasisFuns:
    U = (0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0)

    @pytest.mark.parametrize("u", [0.1, 0.3, 0.6, 0.9])
    def test_partition_of_unity(self, u):
        span = find_span(3, 2, u, self.U)
        ders = ders_basis_funs(span, u, 2, 2, self.U)
        assert ders.shape == (3, 3)
        assert np.isclose(ders[0].sum(), 1.0)
        assert np.isclose(ders[1].sum(), 0.0, atol=1e-12)
        assert np.isclose(ders[2].sum(), 0.0, atol=1e-12)

    def test_bernstein_quadratic(self):
        U = (0.0, 0.0, 0.0, 1.0, 1.0, 1.0)
        u = 0.3
        ders = ders_basis_funs(2, u, 2, 2, U)
        np.testing.assert_allclose(ders[0], [(1 - u) ** 2, 2 * u * (1 - u), u**2])
        np.testing.assert_allclose(ders[1], [-2 * (1 - u), 2 - 4 * u, 2 * u])
        np.testing.assert_allclose(ders[2], [2.0, -4.0, 2.0])

    def test_linear_has_no_second_derivative(self):
        U = (0.0, 0.0, 1.0, 1.0)
        ders = ders_basis_funs(1, 0.4, 1, 2, U)
        np.testing.assert_allclose(ders[0], [0.6, 0.4])
        np.testing.assert_allclose(ders[1], [-1.0, 1.0])
        np.testing.assert_allclose(ders[2], [0.0, 0.0])


class TestNurbs2D:
    points = [(0.2, 0.3), (0.5, 0.5), (0.9, 0.1)]

    def test_table_shapes(self):
        tables = Nurbs2D.evaluate(quadratic_patch(), flat_plate_control_points(), self.points)
        assert tables.values.shape == (9, 3)
        assert tables.control_points_count == 9
        assert tables.points_count == 3

    def test_rational_partition_of_unity(self):
        tables = Nurbs2D.evaluate(quadratic_patch(), cylinder_control_points(), self.points)
        np.testing.assert_allclose(tables.values.sum(axis=0), 1.0)
        for table in (tables.d_ksi, tables.d_heta, tables.d2_ksi, tables.d2_heta, tables.d2_ksi_heta):
            np.testing.assert_allclose(table.sum(axis=0), 0.0, atol=1e-12)

    def test_rational_derivatives_match_finite_differences(self):
        patch = quadratic_patch()
        cps = cylinder_control_points()
        u, v, h = 0.37, 0.61, 1e-6
        base = Nurbs2D.evaluate(patch, cps, [(u, v)])
        du = Nurbs2D.evaluate(patch, cps, [(u + h, v), (u - h, v)])
        dv = Nurbs2D.evaluate(patch, cps, [(u, v + h), (u, v - h)])

        np.testing.assert_allclose(base.d_ksi[:, 0], (du.values[:, 0] - du.values[:, 1]) / (2 * h), atol=1e-8)
        np.testing.assert_allclose(base.d_heta[:, 0], (dv.values[:, 0] - dv.values[:, 1]) / (2 * h), atol=1e-8)
        np.testing.assert_allclose(base.d2_ksi[:, 0], (du.d_ksi[:, 0] - du.d_ksi[:, 1]) / (2 * h), atol=1e-6)
        np.testing.assert_allclose(base.d2_heta[:, 0], (dv.d_heta[:, 0] - dv.d_heta[:, 1]) / (2 * h), atol=1e-6)
        np.testing.assert_allclose(
            base.d2_ksi_heta[:, 0], (dv.d_ksi[:, 0] - dv.d_ksi[:, 1]) / (2 * h), atol=1e-6
        )

    def test_circular_arc_is_exact(self):
        radius = 2.5
        cps = cylinder_control_points(radius=radius)
        coords = np.array([cp.coords for cp in cps])
        locations = [(u, 0.5) for u in np.linspace(0.0, 1.0, 11)]
        tables = Nurbs2D.evaluate(quadratic_patch(), cps, locations, span_point=(0.5, 0.5))
        positions = tables.values.T @ coords
        np.testing.assert_allclose(np.linalg.norm(positions[:, :2], axis=1), radius)

    def test_control_point_count_mismatch(self):
        with pytest.raises(ValueError, match="control points"):
            Nurbs2D.evaluate(quadratic_patch(), flat_plate_control_points()[:8], self.points)

    def test_interior_element_uses_local_control_points(self):
        patch = Patch(2, 2, (0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0), (0.0, 0.0, 0.0, 1.0, 1.0, 1.0))
        # Second element in ksi is supported by the last three rows of basis functions
        tables = Nurbs2D.evaluate(patch, flat_plate_control_points(), [(0.75, 0.5)])
        np.testing.assert_allclose(tables.values.sum(), 1.0)


class TestPatch:
    def test_knot_vector_must_not_decrease(self):
        with pytest.raises(ValueError, match="non-decreasing"):
            Patch(1, 1, (0.0, 1.0, 0.5, 1.0), (0.0, 0.0, 1.0, 1.0))

    def test_degree_must_be_positive(self):
        with pytest.raises(ValueError):
            Patch(0, 1, (0.0, 1.0), (0.0, 0.0, 1.0, 1.0))

    def test_control_points_count(self):
        patch = Patch(2, 1, (0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0), (0.0, 0.0, 1.0, 1.0))
        assert patch.control_points_count == (4, 2)
