"""
Duct cross-section types and the geometry helpers shared by the fitting
library and the flow calculations.

A duct is either round or rectangular. Both variants are immutable values
in millimetres; the solver builds a new one every time it sizes a segment.
"""

import math
from dataclasses import dataclass
from typing import Union

from ductengine.errors import InvalidDimension


def require_positive(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise InvalidDimension(f"{name} must be a positive finite number, got {value!r}")


def require_non_negative(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
        raise InvalidDimension(f"{name} must be a non-negative finite number, got {value!r}")


def _fmt_mm(value: float) -> str:
    return f"{value:g}"


@dataclass(frozen=True)
class RoundDuct:
    """Round duct, inside diameter in mm."""
    diameter: float

    def __post_init__(self):
        require_positive("diameter", self.diameter)

    @property
    def shape(self) -> str:
        return 'round'

    @property
    def label(self) -> str:
        return f"Round {_fmt_mm(self.diameter)}mm"


@dataclass(frozen=True)
class RectangularDuct:
    """Rectangular duct, inside width and height in mm."""
    width: float
    height: float

    def __post_init__(self):
        require_positive("width", self.width)
        require_positive("height", self.height)

    @property
    def shape(self) -> str:
        return 'rectangular'

    @property
    def label(self) -> str:
        return f"Rect {_fmt_mm(self.width)}x{_fmt_mm(self.height)}mm"


DuctDimensions = Union[RoundDuct, RectangularDuct]

DUCT_SHAPES = ('round', 'rectangular')


def equivalent_diameter(width: float, height: float) -> float:
    """
    Circular equivalent of a rectangular duct (Huebscher).

        De = 1.3 · (a·b)^0.625 / (a+b)^0.25

    Units in = units out, so mm in gives mm out.
    """
    return 1.3 * (width * height) ** 0.625 / (width + height) ** 0.25


def fitting_size_mm(duct: DuctDimensions) -> float:
    """Size used to pick a fitting's equivalent length: D for round, De for rectangular."""
    if isinstance(duct, RoundDuct):
        return duct.diameter
    return equivalent_diameter(duct.width, duct.height)


def make_duct(shape: str, diameter: float = None, width: float = None, height: float = None) -> DuctDimensions:
    """Build a duct from loose fields, e.g. request payloads or table rows."""
    if shape == 'round':
        return RoundDuct(diameter=diameter)
    if shape == 'rectangular':
        return RectangularDuct(width=width, height=height)
    raise InvalidDimension(f"Unknown duct shape '{shape}'. Must be one of: {list(DUCT_SHAPES)}")
