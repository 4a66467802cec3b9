"""
Duct fitting library.

Equivalent lengths (metres of straight duct with the same friction loss)
follow ASHRAE and SMACNA tables. A fitting's equivalent length is either a
constant or a step function of the duct size it is installed on, where
rectangular ducts are sized by their circular equivalent diameter.

Diffusers and grilles are terminal devices. They are kept in a separate
list and never contribute equivalent length to a duct segment.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ductengine.dimensions import DuctDimensions, fitting_size_mm
from ductengine.errors import UnknownFitting

logger = logging.getLogger(__name__)


class FittingCategory(str, Enum):
    ELBOW = "elbow"
    TRANSITION = "transition"
    TAKEOFF = "takeoff"
    BOOT = "boot"
    COLLAR = "collar"
    DAMPER = "damper"
    DIFFUSER = "diffuser"


@dataclass(frozen=True)
class SizeSteps:
    """
    Equivalent length as a step function of duct size.

    ``steps`` are (upper_bound_mm, el_m) pairs in ascending order; the first
    bound the duct size fits under wins, otherwise ``above`` applies.
    """
    steps: Tuple[Tuple[float, float], ...]
    above: float

    def __call__(self, duct: DuctDimensions) -> float:
        d = fitting_size_mm(duct)
        for bound, el in self.steps:
            if d <= bound:
                return el
        return self.above


@dataclass(frozen=True)
class FittingType:
    id: str
    name: str
    category: FittingCategory
    equivalent_length: Union[float, SizeSteps]   # m
    k_factor: Optional[float] = None
    description: str = ''

    def equivalent_length_for(self, duct: DuctDimensions) -> float:
        """Equivalent length (m) when installed on the given duct."""
        if callable(self.equivalent_length):
            return self.equivalent_length(duct)
        return self.equivalent_length

    @property
    def size_dependent(self) -> bool:
        return callable(self.equivalent_length)


def _steps(*pairs, above):
    return SizeSteps(steps=tuple(pairs), above=above)


ELBOW_FITTINGS = [
    FittingType('elbow-90-round-smooth', '90° Round Elbow (Smooth)', FittingCategory.ELBOW,
                _steps((280, 3.0), (533, 4.6), (686, 6.1), above=7.6),
                description='90° smooth radius elbow for round duct'),
    FittingType('elbow-90-round-3pc', '90° Round Elbow (3-piece)', FittingCategory.ELBOW,
                _steps((280, 4.6), (533, 6.1), above=9.1),
                description='90° 3-piece round elbow'),
    FittingType('elbow-90-round-5pc', '90° Round Elbow (5-piece)', FittingCategory.ELBOW,
                _steps((280, 3.0), (533, 4.6), above=6.1),
                description='90° 5-piece round elbow'),
    FittingType('elbow-45-round', '45° Round Elbow', FittingCategory.ELBOW,
                _steps((280, 1.5), (533, 2.4), above=3.0),
                description='45° round elbow'),
    FittingType('elbow-90-rect-radius', '90° Rect Elbow (Radius Throat)', FittingCategory.ELBOW,
                _steps((280, 3.0), (533, 4.6), (686, 6.1), (838, 7.6), above=9.1),
                k_factor=0.22, description='90° rectangular elbow with radius throat'),
    # Square (mitered) throat: 40 to 125 EL ft
    FittingType('elbow-90-rect-square', '90° Rect Elbow (Square Throat)', FittingCategory.ELBOW,
                _steps((280, 12.2), (381, 16.8), (533, 22.9), (686, 30.5), above=38.1),
                k_factor=1.3, description='90° rectangular elbow with square (mitered) throat'),
    FittingType('elbow-45-rect', '45° Rect Elbow', FittingCategory.ELBOW, 3.0,
                description='45° rectangular elbow'),
]

TRANSITION_FITTINGS = [
    FittingType('transition-rect-rect', 'Rectangular Transition', FittingCategory.TRANSITION, 0.0,
                k_factor=0.05, description='Gradual rectangular to rectangular transition'),
    FittingType('transition-round-rect', 'Round to Rectangular', FittingCategory.TRANSITION, 4.6,
                description='Round to rectangular transition'),
    FittingType('transition-rect-round', 'Rectangular to Round', FittingCategory.TRANSITION, 4.6,
                description='Rectangular to round transition'),
    FittingType('reducer-concentric', 'Concentric Reducer', FittingCategory.TRANSITION, 0.0,
                k_factor=0.04, description='Gradual concentric reducer'),
    FittingType('reducer-eccentric', 'Eccentric Reducer', FittingCategory.TRANSITION, 1.5,
                description='Eccentric reducer (one side flat)'),
]

TAKEOFF_FITTINGS = [
    FittingType('takeoff-90-round', '90° Round Takeoff', FittingCategory.TAKEOFF, 10.7,
                description='90° round branch takeoff from main'),
    FittingType('takeoff-45-round', '45° Round Takeoff', FittingCategory.TAKEOFF, 6.1,
                description='45° round branch takeoff'),
    FittingType('takeoff-conical', 'Conical Takeoff', FittingCategory.TAKEOFF, 4.6,
                description='Conical (spin-in) takeoff - lower pressure loss'),
    FittingType('takeoff-rect', 'Rectangular Takeoff', FittingCategory.TAKEOFF, 10.7,
                description='Rectangular branch takeoff'),
    FittingType('wye-branch', 'Wye Branch', FittingCategory.TAKEOFF, 3.0,
                description='Wye (Y) branch fitting'),
]

BOOT_FITTINGS = [
    FittingType('boot-90', '90° Register Boot', FittingCategory.BOOT, 9.1,
                description='90° register boot for floor/ceiling registers'),
    FittingType('boot-straight', 'Straight Register Boot', FittingCategory.BOOT, 1.5,
                description='Straight-through register boot'),
    FittingType('boot-end', 'End Boot', FittingCategory.BOOT, 15.2,
                description='End-of-run register boot'),
    FittingType('boot-stackhead', 'Stackhead Boot', FittingCategory.BOOT, 12.2,
                description='Stackhead boot for wall registers'),
]

COLLAR_FITTINGS = [
    FittingType('collar-starting-offset', 'Offset Starting Collar', FittingCategory.COLLAR, 3.0,
                description='Offset starting collar from plenum'),
    FittingType('collar-starting-straight', 'Straight Starting Collar', FittingCategory.COLLAR, 10.7,
                description='Straight starting collar from plenum'),
    FittingType('collar-snap-round', 'Snap Collar (Round)', FittingCategory.COLLAR, 10.7,
                description='Round snap collar connection'),
]

DAMPER_FITTINGS = [
    FittingType('damper-balancing', 'Balancing Damper', FittingCategory.DAMPER, 3.0,
                k_factor=0.2, description='Manual balancing damper (open position)'),
    FittingType('damper-fire', 'Fire Damper', FittingCategory.DAMPER, 6.1,
                description='Fire/smoke damper (open position)'),
    FittingType('damper-backdraft', 'Backdraft Damper', FittingCategory.DAMPER, 9.1,
                description='Backdraft/gravity damper'),
]

# Terminal devices: pressure drop via k-factor only, no equivalent length
TERMINAL_FITTINGS = [
    FittingType('diffuser-ceiling-square', 'Ceiling Diffuser (Square)', FittingCategory.DIFFUSER, 0.0,
                k_factor=0.5, description='Square ceiling diffuser'),
    FittingType('diffuser-ceiling-round', 'Ceiling Diffuser (Round)', FittingCategory.DIFFUSER, 0.0,
                k_factor=0.4, description='Round ceiling diffuser'),
    FittingType('diffuser-linear', 'Linear Diffuser', FittingCategory.DIFFUSER, 0.0,
                k_factor=0.6, description='Linear slot diffuser'),
    FittingType('grille-supply', 'Supply Grille', FittingCategory.DIFFUSER, 0.0,
                k_factor=0.5, description='Wall/floor supply grille'),
    FittingType('grille-return', 'Return Grille', FittingCategory.DIFFUSER, 0.0,
                k_factor=0.3, description='Return air grille'),
]

SEGMENT_FITTINGS: List[FittingType] = (
    ELBOW_FITTINGS + TRANSITION_FITTINGS + TAKEOFF_FITTINGS
    + BOOT_FITTINGS + COLLAR_FITTINGS + DAMPER_FITTINGS
)


class FittingLibrary:
    """
    Fitting catalogue keyed by id.

    ``get`` only searches segment fittings, so a terminal device id placed on
    a segment resolves to None like any other unknown id.
    """

    def __init__(self, segment_fittings: Optional[Iterable[FittingType]] = None,
                 terminal_fittings: Optional[Iterable[FittingType]] = None):
        seg = SEGMENT_FITTINGS if segment_fittings is None else segment_fittings
        term = TERMINAL_FITTINGS if terminal_fittings is None else terminal_fittings
        self._segment: Dict[str, FittingType] = {f.id: f for f in seg}
        self._terminal: Dict[str, FittingType] = {f.id: f for f in term}

    def get(self, fitting_id: str) -> Optional[FittingType]:
        return self._segment.get(fitting_id)

    def require(self, fitting_id: str) -> FittingType:
        fitting = self._segment.get(fitting_id)
        if fitting is None:
            raise UnknownFitting(fitting_id)
        return fitting

    def get_terminal(self, fitting_id: str) -> Optional[FittingType]:
        return self._terminal.get(fitting_id)

    def by_category(self, category: Union[str, FittingCategory]) -> List[FittingType]:
        category = FittingCategory(category)
        source = self._terminal if category == FittingCategory.DIFFUSER else self._segment
        return [f for f in source.values() if f.category == category]

    @property
    def segment_fittings(self) -> List[FittingType]:
        return list(self._segment.values())

    @property
    def terminal_fittings(self) -> List[FittingType]:
        return list(self._terminal.values())

    def __contains__(self, fitting_id: str) -> bool:
        return fitting_id in self._segment

    def __len__(self) -> int:
        return len(self._segment)


def segment_equivalent_length(fittings, duct: DuctDimensions, library: FittingLibrary,
                              strict: bool = False) -> float:
    """
    Total equivalent length (m) of a segment's fittings on the given duct.

    Args:
        fittings: Iterable of SegmentFitting (fitting_id, quantity, custom_el).
        duct: Resolved duct size of the segment.
        library: Catalogue to resolve fitting ids against.
        strict: Raise UnknownFitting for unresolved ids instead of skipping them.

    Returns:
        Σ quantity × (custom_el or the fitting's rule at this duct size).
    """
    total = 0.0
    for item in fittings:
        fitting = library.require(item.fitting_id) if strict else library.get(item.fitting_id)
        if fitting is None:
            logger.debug("Skipping unknown fitting '%s'", item.fitting_id)
            continue
        el = item.custom_el if item.custom_el is not None else fitting.equivalent_length_for(duct)
        total += el * item.quantity
    return total
