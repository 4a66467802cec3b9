"""
Standard duct sizes for the equal-friction method (0.10 in.wg per 100 ft).

Each row gives the largest airflow (CFM) a size handles, the rectangular
options for that bracket (most common first) and the round diameter.
Table dimensions are inches; selections are reported in whole millimetres.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ductengine.dimensions import DuctDimensions, RectangularDuct, RoundDuct, DUCT_SHAPES
from ductengine.errors import InvalidDimension

MM_PER_INCH = 25.4


@dataclass(frozen=True)
class StandardDuctSize:
    """One flow bracket of the sizing table (inches)."""
    cfm: float
    rectangular: Tuple[Tuple[int, int], ...]   # (width, height) options
    round_diameter: int


@dataclass(frozen=True)
class SizeSelection:
    """Result of a table lookup."""
    cfm: float                      # threshold of the selected bracket
    shape: str
    nominal: Tuple[int, ...]        # inches: (diameter,) or (width, height)
    dimensions: DuctDimensions      # mm
    options: Tuple[Tuple[int, int], ...] = ()


def _row(cfm, rect, diameter):
    return StandardDuctSize(cfm=cfm, rectangular=tuple(rect), round_diameter=diameter)


# ASHRAE/SMACNA guideline sizes
STANDARD_DUCT_SIZES: List[StandardDuctSize] = [
    _row(50, [(6, 4)], 5),
    _row(75, [(6, 4)], 6),
    _row(100, [(8, 4), (6, 6)], 6),
    _row(125, [(10, 4), (6, 6)], 7),
    _row(150, [(10, 4), (8, 6)], 7),
    _row(175, [(12, 4), (8, 6)], 8),
    _row(200, [(14, 4), (8, 6)], 8),
    _row(225, [(16, 4), (10, 6)], 8),
    _row(250, [(16, 4), (10, 6)], 9),
    _row(275, [(12, 6), (8, 8)], 9),
    _row(300, [(12, 6), (8, 8)], 9),
    _row(400, [(14, 6), (10, 8)], 10),
    _row(500, [(18, 6), (12, 8), (10, 10)], 11),
    _row(600, [(20, 6), (14, 8), (12, 10)], 12),
    _row(700, [(24, 6), (16, 8), (12, 10)], 12),
    _row(800, [(26, 6), (18, 8), (14, 10), (12, 12)], 13),
    _row(900, [(30, 6), (20, 8), (16, 10), (12, 12)], 14),
    _row(1000, [(22, 8), (16, 10), (14, 12)], 14),
    _row(1100, [(24, 8), (18, 10), (16, 12)], 15),
    _row(1200, [(26, 8), (20, 10), (16, 12)], 15),
    _row(1300, [(28, 8), (20, 10), (18, 12)], 16),
    _row(1400, [(30, 8), (22, 10), (18, 12)], 16),
    _row(1500, [(24, 10), (20, 12)], 16),
    _row(1600, [(24, 10), (20, 12)], 17),
    _row(1700, [(26, 10), (22, 12)], 17),
    _row(1800, [(28, 10), (22, 12)], 18),
    _row(1900, [(30, 10), (22, 12)], 18),
    _row(2000, [(24, 12)], 18),
    _row(2500, [(30, 12), (24, 14)], 20),
    _row(3000, [(28, 14), (24, 16)], 22),
    _row(3500, [(32, 14), (28, 16)], 24),
    _row(4000, [(36, 14), (30, 16), (24, 20)], 25),
    _row(5000, [(36, 16), (30, 20)], 28),
    _row(6000, [(42, 16), (36, 20)], 30),
    _row(7000, [(48, 16), (40, 20)], 32),
    _row(8000, [(48, 18), (42, 20)], 34),
    _row(10000, [(48, 22), (44, 24)], 38),
    _row(12000, [(54, 22), (48, 26)], 42),
    _row(15000, [(60, 24), (52, 28)], 46),
    _row(20000, [(72, 24), (60, 30)], 52),
    _row(25000, [(72, 30), (60, 36)], 58),
    _row(30000, [(84, 30), (72, 36)], 64),
]


def inches_to_mm(inches: float) -> int:
    """Inches to the nearest whole millimetre."""
    return int(round(inches * MM_PER_INCH))


def mm_to_inches(mm: float) -> float:
    return mm / MM_PER_INCH


class StandardSizeTable:
    """
    Sorted airflow → nominal size lookup.

    Lookups round up to the next larger standard size. Airflow beyond the
    last bracket saturates to the largest size rather than failing.
    """

    def __init__(self, sizes: Optional[List[StandardDuctSize]] = None):
        rows = STANDARD_DUCT_SIZES if sizes is None else sizes
        if not rows:
            raise ValueError("Standard size table must have at least one row")
        self.sizes: Tuple[StandardDuctSize, ...] = tuple(sorted(rows, key=lambda r: r.cfm))

    def bracket_for(self, cfm: float) -> StandardDuctSize:
        """First row whose threshold is ≥ cfm, or the largest row."""
        for size in self.sizes:
            if size.cfm >= cfm:
                return size
        return self.sizes[-1]

    def all_options(self, cfm: float) -> StandardDuctSize:
        """Full row (every rectangular option plus the round size) for the airflow."""
        return self.bracket_for(cfm)

    def size_for_cfm(self, cfm: float, shape: str = 'rectangular') -> SizeSelection:
        """
        Select the standard size for an airflow.

        Args:
            cfm: Required airflow (CFM).
            shape: 'round' or 'rectangular'. Rectangular always takes the
                first listed option so the result is deterministic.

        Returns:
            SizeSelection with nominal inches and dimensions in mm.
        """
        if shape not in DUCT_SHAPES:
            raise InvalidDimension(f"Unknown duct shape '{shape}'. Must be one of: {list(DUCT_SHAPES)}")

        row = self.bracket_for(cfm)

        if shape == 'round':
            return SizeSelection(
                cfm=row.cfm,
                shape=shape,
                nominal=(row.round_diameter,),
                dimensions=RoundDuct(diameter=inches_to_mm(row.round_diameter)),
            )

        width, height = row.rectangular[0]
        return SizeSelection(
            cfm=row.cfm,
            shape=shape,
            nominal=(width, height),
            dimensions=RectangularDuct(width=inches_to_mm(width), height=inches_to_mm(height)),
            options=row.rectangular,
        )

    def __len__(self) -> int:
        return len(self.sizes)
