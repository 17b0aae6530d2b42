import logging
import sys
from pathlib import Path

import numpy as np

from iga_shell.core.config import ShellConfig
from iga_shell.core.dofs import TRANSLATIONS, FreeDofOrdering
from iga_shell.core.entities import ControlPoint, Knot, Patch
from iga_shell.core.exceptions import MaterialUpdateError
from iga_shell.elements import NurbsKirchhoffLoveShellNL

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("single_element_increment")

# Configuration (YAML next to this script, or the path given as argument)
config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).with_name("shell.yaml")
config = ShellConfig.from_yaml(config_path)
material = config.material.build_material()
THICKNESS = config.element.thickness or 0.01

# Quarter cylinder panel: exact rational arc in ksi, straight generator in heta
RADIUS, LENGTH = 1.0, 1.0  # (m)
arc = [(RADIUS, 0.0, 1.0), (RADIUS, RADIUS, np.sqrt(0.5)), (0.0, RADIUS, 1.0)]
control_points = [
    ControlPoint(id=3 * a + b, x=x, y=y, z=LENGTH * b / 2, ksi=a / 2, heta=b / 2, weight=w)
    for a, (x, y, w) in enumerate(arc)
    for b in range(3)
]
knots = [Knot(0, 0.0, 0.0), Knot(1, 1.0, 0.0), Knot(2, 0.0, 1.0), Knot(3, 1.0, 1.0)]
patch = Patch(2, 2, (0, 0, 0, 1, 1, 1), (0, 0, 0, 1, 1, 1))

element = NurbsKirchhoffLoveShellNL(material, knots, control_points, patch, THICKNESS, config=config.element)

# ------------------------------------------------------------------
# Clamped edge: the two rows of control points closest to z = 0
clamped = [(cp.id, dof) for cp in control_points if cp.heta < 1.0 for dof in TRANSLATIONS]
ordering = FreeDofOrdering.from_control_points(control_points, clamped)

# Local element dof index of every global free dof
local_index = {}
for i, cp in enumerate(control_points):
    for dof in TRANSLATIONS:
        global_id = ordering.global_id(cp.id, dof)
        if global_id is not None:
            local_index[global_id] = 3 * i + dof.component
free = np.array([local_index[k] for k in range(len(ordering))])

# ------------------------------------------------------------------
# Load increments with Newton iterations
PRESSURE = -2.0e3  # (Pa), towards the cylinder axis
STEPS = 5
TOLERANCE = 1e-8
MAX_ITERATIONS = 20

reference_load = np.zeros(element.dofs_count)
for global_id, value in element.calculate_surface_pressure(PRESSURE, ordering).loads.items():
    reference_load[local_index[global_id]] = value

u = np.zeros(element.dofs_count)
element.initialize_reference_configuration()

for step in range(1, STEPS + 1):
    external = reference_load * step / STEPS
    for iteration in range(MAX_ITERATIONS):
        try:
            element.calculate_stresses(u)
        except MaterialUpdateError as exc:
            logger.error("Step %d: %s", step, exc)
            raise
        residual = external - element.calculate_forces(u)
        norm = np.linalg.norm(residual[free]) / max(np.linalg.norm(external[free]), 1.0)
        logger.info("Step %d, iteration %d: |r| = %.3e", step, iteration, norm)
        if norm < TOLERANCE:
            break
        K = element.stiffness_matrix()
        u[free] += np.linalg.solve(K[np.ix_(free, free)], residual[free])
    else:
        raise RuntimeError(f"Step {step} did not converge in {MAX_ITERATIONS} iterations")
    element.save_material_state()

    tip = element.calculate_displacements_for_post_processing(u)
    logger.info("Step %d converged, free edge displacement: %s", step, tip[2:].round(6).tolist())
