"""
Error kinds raised by the shell kernel.

Every class derives from a built-in exception so callers that only expect
``ValueError``, ``RuntimeError`` or ``NotImplementedError`` keep working, and
from :class:`ShellElementError` so a nonlinear solver can tell kernel
failures apart from its own.
"""

from typing import Optional


class ShellElementError(Exception):
    """Base class of all errors raised by the shell kernel."""


class DegenerateGeometryError(ShellElementError, ValueError):
    """
    The area-scale factor J1 = |g1 x g2| vanished at a quadrature point.

    Parameters
    ----------
    point_index : int
        Mid-surface quadrature point index.
    area_scale : float
        Offending value of J1.
    element_id : int, optional
        Identifier of the element, when known.
    """

    def __init__(self, point_index: int, area_scale: float, element_id: Optional[int] = None):
        self.point_index = point_index
        self.area_scale = area_scale
        self.element_id = element_id
        where = f"element {element_id}, " if element_id is not None else ""
        super().__init__(
            f"Degenerate surface geometry ({where}quadrature point {point_index}): J1={area_scale!r}"
        )


class MaterialUpdateError(ShellElementError, RuntimeError):
    """
    A material could not update its state for the submitted strain.

    The nonlinear solver is expected to catch this error and cut the step.
    """

    def __init__(
        self,
        message: str,
        element_id: Optional[int] = None,
        point_index: Optional[int] = None,
        thickness_index: Optional[int] = None,
    ):
        self.element_id = element_id
        self.point_index = point_index
        self.thickness_index = thickness_index
        super().__init__(message)


class UnsupportedOperationError(ShellElementError, NotImplementedError):
    """The requested operation is not provided by this element."""


class ElementStateError(ShellElementError, RuntimeError):
    """An element operation was called in a state that violates its precondition."""
