"""Shared builders for single-element shell tests."""

import numpy as np
import pytest

from iga_shell.constitutive import ShellElasticMaterial2D, ShellVonMisesMaterial2D
from iga_shell.core.config import ElementConfig
from iga_shell.core.entities import ControlPoint, Knot, Patch
from iga_shell.core.material import IsotropicMaterial
from iga_shell.elements.NURBS_KL import NurbsKirchhoffLoveShellNL

OPEN_QUADRATIC = (0.0, 0.0, 0.0, 1.0, 1.0, 1.0)


def unit_square_knots():
    return [Knot(0, 0.0, 0.0), Knot(1, 1.0, 0.0), Knot(2, 0.0, 1.0), Knot(3, 1.0, 1.0)]


def quadratic_patch():
    return Patch(2, 2, OPEN_QUADRATIC, OPEN_QUADRATIC)


def flat_plate_control_points(lx=2.0, ly=1.0):
    """Biquadratic control net of an ``lx`` x ``ly`` plate in the xy plane."""
    control_points = []
    for a in range(3):
        for b in range(3):
            control_points.append(
                ControlPoint(id=3 * a + b, x=lx * a / 2, y=ly * b / 2, z=0.0, ksi=a / 2, heta=b / 2)
            )
    return control_points


def cylinder_control_points(radius=1.0, length=1.0, angle=np.pi / 2):
    """Exact circular arc in ksi (rational quadratic), straight generator along z in heta."""
    half = angle / 2
    arc = [
        (radius, 0.0, 1.0),
        (radius, radius * np.tan(half), np.cos(half)),
        (radius * np.cos(angle), radius * np.sin(angle), 1.0),
    ]
    control_points = []
    for a, (x, y, w) in enumerate(arc):
        for b in range(3):
            control_points.append(
                ControlPoint(id=3 * a + b, x=x, y=y, z=length * b / 2, ksi=a / 2, heta=b / 2, weight=w)
            )
    return control_points


def build_element(control_points, material, thickness=0.1, config=None):
    return NurbsKirchhoffLoveShellNL(
        material,
        unit_square_knots(),
        control_points,
        quadratic_patch(),
        thickness,
        config=config,
    )


def control_point_coords(control_points):
    return np.array([cp.coords for cp in control_points])


@pytest.fixture
def steel():
    return IsotropicMaterial(name="Steel", E=200e3, nu=0.3)


@pytest.fixture
def elastic_material(steel):
    return ShellElasticMaterial2D(steel)


@pytest.fixture
def plastic_material(steel):
    return ShellVonMisesMaterial2D(steel, yield_stress=250.0, hardening_modulus=1000.0)


@pytest.fixture
def flat_plate(elastic_material):
    return build_element(flat_plate_control_points(), elastic_material)


@pytest.fixture
def cylinder(elastic_material):
    return build_element(cylinder_control_points(), elastic_material, thickness=0.05)


@pytest.fixture
def full_tangent_config():
    return ElementConfig(tangent="full")
