import numpy as np
import pytest

from iga_shell.core.entities import Knot
from iga_shell.core.quadrature import GaussQuadrature


def span_knots(k0, k1, h0, h1):
    return [Knot(0, k0, h0), Knot(1, k1, h0), Knot(2, k0, h1), Knot(3, k1, h1)]


class TestElementPoints:
    def test_count_and_order(self):
        points = GaussQuadrature.element_points(2, 1, span_knots(0.0, 1.0, 0.0, 1.0))
        assert len(points) == 3 * 2
        # ksi index outermost
        assert points[0].ksi == points[1].ksi
        assert points[0].heta < points[1].heta

    def test_points_inside_span(self):
        points = GaussQuadrature.element_points(2, 2, span_knots(0.25, 0.5, 0.5, 1.0))
        for gp in points:
            assert 0.25 < gp.ksi < 0.5
            assert 0.5 < gp.heta < 1.0

    def test_weights_sum_to_span_area(self):
        points = GaussQuadrature.element_points(2, 3, span_knots(0.25, 0.5, 0.5, 1.0))
        assert np.isclose(sum(gp.weight for gp in points), 0.25 * 0.5)

    def test_polynomial_exactness(self):
        # (p+1) points integrate degree 2p+1 exactly
        points = GaussQuadrature.element_points(2, 2, span_knots(0.0, 2.0, 1.0, 3.0))
        integral = sum(gp.weight * gp.ksi**5 * gp.heta**4 for gp in points)
        expected = (2.0**6 / 6) * ((3.0**5 - 1.0) / 5)
        assert np.isclose(integral, expected)

    def test_empty_span_raises(self):
        with pytest.raises(ValueError, match="empty"):
            GaussQuadrature.element_points(2, 2, span_knots(0.5, 0.5, 0.0, 1.0))


class TestThicknessPoints:
    @pytest.mark.parametrize("degree", [0, 1, 2, 4])
    def test_weights_sum_to_thickness(self, degree):
        points = GaussQuadrature.thickness_points(degree, 0.2, point_index=7)
        assert len(points) == degree + 1
        assert np.isclose(sum(tp.weight for tp in points), 0.2)
        assert all(tp.point_index == 7 for tp in points)

    def test_symmetric_about_mid_surface(self):
        points = GaussQuadrature.thickness_points(2, 0.2, 0)
        zetas = np.array([tp.zeta for tp in points])
        np.testing.assert_allclose(np.sort(zetas), -np.sort(zetas)[::-1], atol=1e-15)
        assert np.all(np.abs(zetas) <= 0.1)

    @pytest.mark.parametrize("degree", [1, 2, 3])
    def test_second_moment(self, degree):
        t = 0.3
        points = GaussQuadrature.thickness_points(degree, t, 0)
        assert np.isclose(sum(tp.weight * tp.zeta**2 for tp in points), t**3 / 12)

    def test_non_positive_thickness(self):
        with pytest.raises(ValueError, match="positive"):
            GaussQuadrature.thickness_points(2, 0.0, 0)
