"""
Tests for the YAML configuration layer.
"""

import logging
from pathlib import Path

import pytest

from iga_shell.constitutive import ShellElasticMaterial2D, ShellVonMisesMaterial2D
from iga_shell.core.config import (
    ElementConfig,
    LoadedDofPolicy,
    MaterialConfig,
    ShellConfig,
    TangentMode,
)
from iga_shell.core.material import IsotropicMaterial, OrthotropicMaterial

YAML_CONFIG = """
element:
  thickness: 0.01
  thickness_integration_degree: 3
  tangent: full
  loaded_dof_policy: raise

material:
  type: isotropic
  law: von_mises
  name: Steel
  E: 2.1e11
  nu: 0.3
  yield_stress: 2.5e8
  hardening_modulus: 1.0e9
"""


class TestElementConfig:
    def test_defaults(self):
        config = ElementConfig()
        assert config.thickness is None
        assert config.thickness_integration_degree == 2
        assert config.tangent is TangentMode.MATERIAL
        assert config.loaded_dof_policy is LoadedDofPolicy.SKIP
        assert config.check_update_sequence

    def test_string_enums(self):
        config = ElementConfig(tangent="full", loaded_dof_policy="raise")
        assert config.tangent is TangentMode.FULL
        assert config.loaded_dof_policy is LoadedDofPolicy.RAISE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tangent": "secant"},
            {"loaded_dof_policy": "ignore"},
            {"thickness": 0.0},
            {"thickness_integration_degree": -1},
            {"degenerate_tolerance": -1e-3},
            {"thickness": "thin"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ElementConfig(**kwargs)

    def test_material_tangent_note(self, caplog):
        with caplog.at_level(logging.INFO, logger="iga_shell.core.config"):
            ElementConfig()
        assert "Material-only tangent" in caplog.text

    def test_single_thickness_point_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="iga_shell.core.config"):
            ElementConfig(tangent="full", thickness_integration_degree=0)
        assert "no bending stiffness" in caplog.text


class TestMaterialConfig:
    def test_isotropic_elastic(self):
        config = MaterialConfig(E=70e9, nu=0.33, name="Aluminium")
        material = config.get_material()
        assert isinstance(material, IsotropicMaterial)
        assert material.E == 70e9
        assert isinstance(config.build_material(), ShellElasticMaterial2D)

    def test_orthotropic(self):
        config = MaterialConfig(
            type="orthotropic",
            E=[181e9, 10.3e9, 10.3e9],
            G=[7.17e9, 3.78e9, 7.17e9],
            nu=[0.28, 0.28, 0.28],
            angle=45.0,
        )
        assert isinstance(config.get_material(), OrthotropicMaterial)
        material = config.build_material()
        assert isinstance(material, ShellElasticMaterial2D)

    def test_von_mises(self):
        config = MaterialConfig(law="von_mises", E=200e3, nu=0.3, yield_stress=250.0, hardening_modulus=10.0)
        material = config.build_material()
        assert isinstance(material, ShellVonMisesMaterial2D)
        assert material.yield_stress == 250.0
        assert material.hardening_modulus == 10.0

    def test_von_mises_requires_yield_stress(self):
        with pytest.raises(ValueError, match="yield_stress"):
            MaterialConfig(law="von_mises", E=200e3, nu=0.3)

    def test_von_mises_requires_isotropy(self):
        with pytest.raises(ValueError, match="isotropic"):
            MaterialConfig(type="orthotropic", law="von_mises", yield_stress=1.0)

    def test_missing_properties(self):
        with pytest.raises(ValueError, match="E and nu"):
            MaterialConfig(E=1.0).get_material()

    def test_numeric_strings(self):
        config = MaterialConfig(law="von_mises", E="2.1e11", nu="0.3", yield_stress="2.5e8", hardening_modulus="1.0e9")
        assert config.E == 2.1e11
        assert isinstance(config.yield_stress, float)
        assert config.build_material().hardening_modulus == 1.0e9
        orthotropic = MaterialConfig(type="orthotropic", E=["1e9", "2e9", "2e9"], G=["1e8"] * 3, nu=[0.3] * 3)
        assert orthotropic.get_material().E == (1e9, 2e9, 2e9)

    @pytest.mark.parametrize("kwargs", [{"E": "steel"}, {"max_iterations": "many"}, {"G": ["1e8", None]}])
    def test_non_numeric_values(self, kwargs):
        with pytest.raises(ValueError, match="must be"):
            MaterialConfig(**kwargs)

    @pytest.mark.parametrize("kwargs", [{"type": "anisotropic"}, {"law": "hyperelastic"}])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            MaterialConfig(**kwargs)


class TestShellConfig:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "shell.yaml"
        path.write_text(YAML_CONFIG)
        config = ShellConfig.from_yaml(path)
        assert config.element.thickness == 0.01
        assert config.element.thickness_integration_degree == 3
        assert config.element.tangent is TangentMode.FULL
        assert config.element.loaded_dof_policy is LoadedDofPolicy.RAISE
        material = config.material.build_material()
        assert isinstance(material, ShellVonMisesMaterial2D)
        assert material.material.name == "Steel"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = ShellConfig.from_yaml(str(path))
        assert config.element == ElementConfig()
        assert config.material is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ShellConfig.from_yaml(tmp_path / "missing.yaml")

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="element"):
            ShellConfig.from_dict({"element": {"thickness": 0.1, "shear_locking": True}})
        with pytest.raises(ValueError, match="material"):
            ShellConfig.from_dict({"material": {"E": 1.0, "nu": 0.3, "density": 7850}})

    def test_invalid_value_in_dict(self):
        with pytest.raises(ValueError, match="tangent"):
            ShellConfig.from_dict({"element": {"tangent": "secant"}})

    def test_exponent_without_dot(self):
        config = ShellConfig.from_dict(
            {"element": {"thickness": "1e-3", "degenerate_tolerance": "1e-10"}, "material": {"E": "7e10", "nu": 0.33}}
        )
        assert config.element.thickness == 1e-3
        assert config.element.degenerate_tolerance == 1e-10
        assert config.material.get_material().E == 7e10

    def test_bundled_example(self):
        path = Path(__file__).parent.parent / "examples" / "shell.yaml"
        config = ShellConfig.from_yaml(path)
        assert config.element.thickness == 0.01
        assert config.element.tangent is TangentMode.FULL
        material = config.material.build_material()
        assert isinstance(material, ShellVonMisesMaterial2D)
        assert material.material.E == 2.1e11
        assert material.yield_stress == 2.5e8
        assert material.hardening_modulus == 1.0e9
