"""
Duct network model.

A DuctSystem is a directed tree: segments carry air from ``from_node_id``
(upstream, towards the AHU) to ``to_node_id`` (downstream, towards the
diffusers). Only diffusers carry an airflow requirement; every other node
derives its flow from the nodes below it.

The model holds inputs only. Sizes, velocities and pressure drops are
recomputed by the solver into a separate SystemResults on every solve.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ductengine.air_properties import DEFAULT_AIR_CONDITION_ID
from ductengine.dimensions import DuctDimensions, require_non_negative, require_positive
from ductengine.errors import InvalidDimension

logger = logging.getLogger(__name__)


class NodeType(str, Enum):
    AHU = "ahu"
    JUNCTION = "junction"
    DIFFUSER = "diffuser"
    END = "end"
    RETURN = "return"


class DesignMethod(str, Enum):
    EQUAL_FRICTION = "equal-friction"
    STATIC_REGAIN = "static-regain"
    VELOCITY_REDUCTION = "velocity-reduction"


class UnitSystem(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


# Thermal conductivity k in W/(m·K)
INSULATION_MATERIALS = [
    {'id': 'fiberglass', 'name': 'Fiberglass', 'k_value': 0.04},
    {'id': 'mineral-wool', 'name': 'Mineral Wool', 'k_value': 0.038},
    {'id': 'foam-rubber', 'name': 'Foam Rubber', 'k_value': 0.036},
    {'id': 'polyurethane', 'name': 'Polyurethane Foam', 'k_value': 0.025},
    {'id': 'phenolic', 'name': 'Phenolic Foam', 'k_value': 0.022},
    {'id': 'elastomeric', 'name': 'Elastomeric', 'k_value': 0.037},
    {'id': 'custom', 'name': 'Custom', 'k_value': 0.04},
]


@dataclass
class DuctNode:
    id: str
    type: NodeType
    name: str = ''
    position: Tuple[float, float] = (0.0, 0.0)   # layout only
    cfm: Optional[float] = None                  # diffusers only
    zone: Optional[str] = None
    component_id: Optional[str] = None

    def __post_init__(self):
        self.type = NodeType(self.type)
        if self.cfm is not None:
            require_non_negative("cfm", self.cfm)


@dataclass
class SegmentFitting:
    fitting_id: str
    quantity: int = 1
    custom_el: Optional[float] = None   # m, overrides the catalogue rule

    def __post_init__(self):
        require_non_negative("quantity", self.quantity)
        if self.custom_el is not None:
            require_non_negative("custom_el", self.custom_el)


@dataclass
class InsulationProperties:
    material: str
    thickness: float    # mm
    k_value: float      # W/(m·K)

    def __post_init__(self):
        require_non_negative("thickness", self.thickness)
        require_positive("k_value", self.k_value)

    @property
    def r_value(self) -> float:
        """Thermal resistance in m²·K/W."""
        return (self.thickness / 1000.0) / self.k_value

    @classmethod
    def from_material(cls, material_id: str, thickness: float) -> 'InsulationProperties':
        for m in INSULATION_MATERIALS:
            if m['id'] == material_id:
                return cls(material=material_id, thickness=thickness, k_value=m['k_value'])
        raise InvalidDimension(f"Unknown insulation material '{material_id}'")


@dataclass
class DuctSegment:
    id: str
    from_node_id: str
    to_node_id: str
    length: float                                   # m
    fittings: List[SegmentFitting] = field(default_factory=list)
    insulated: bool = False
    insulation: Optional[InsulationProperties] = None
    manual_size: Optional[DuctDimensions] = None

    def __post_init__(self):
        require_positive("length", self.length)

    @property
    def insulation_thickness(self) -> float:
        if self.insulated and self.insulation is not None:
            return self.insulation.thickness
        return 0.0


@dataclass
class DuctSystem:
    id: str = 'system-1'
    name: str = 'New Duct System'
    design_method: DesignMethod = DesignMethod.EQUAL_FRICTION
    target_velocity: Optional[float] = None     # m/s
    target_friction: Optional[float] = 1.0      # Pa/m
    max_velocity: float = 8.0                   # m/s
    supply_air_temp: float = 13.0               # °C
    ambient_temp: float = 25.0                  # °C
    air_condition: str = DEFAULT_AIR_CONDITION_ID
    units: UnitSystem = UnitSystem.METRIC
    duct_shape: str = 'rectangular'             # shape used for auto-sizing
    nodes: List[DuctNode] = field(default_factory=list)
    segments: List[DuctSegment] = field(default_factory=list)

    def __post_init__(self):
        self.design_method = DesignMethod(self.design_method)
        self.units = UnitSystem(self.units)
        require_positive("max_velocity", self.max_velocity)

    def get_node(self, node_id: str) -> Optional[DuctNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_segment(self, segment_id: str) -> Optional[DuctSegment]:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        return None

    def ahu_node(self) -> Optional[DuctNode]:
        """The flow source: the first node of type AHU."""
        for node in self.nodes:
            if node.type == NodeType.AHU:
                return node
        return None

    def diffusers(self) -> List[DuctNode]:
        return [n for n in self.nodes if n.type == NodeType.DIFFUSER]


def create_default_system() -> DuctSystem:
    """New system with a single AHU and no ducts."""
    return DuctSystem(
        nodes=[DuctNode(id='ahu-1', type=NodeType.AHU, name='AHU', position=(50.0, 200.0))],
    )


def _segment_is_valid(system: DuctSystem, segment: DuctSegment) -> bool:
    from_node = system.get_node(segment.from_node_id)
    to_node = system.get_node(segment.to_node_id)

    # A terminal cannot supply air
    if from_node is not None and from_node.type == NodeType.DIFFUSER:
        return False
    # The source cannot receive air
    if to_node is not None and to_node.type == NodeType.AHU:
        return False
    if segment.from_node_id == segment.to_node_id:
        return False
    if from_node is None or to_node is None:
        return False
    return True


def cleanup_invalid_segments(system: DuctSystem) -> int:
    """
    Remove segments that break the flow direction rules.

    Drops segments leaving a diffuser, entering the AHU, looping on one node,
    or referencing a node that does not exist. Mutates ``system`` in place.

    Returns:
        Number of segments removed.
    """
    kept, dropped = [], []
    for segment in system.segments:
        (kept if _segment_is_valid(system, segment) else dropped).append(segment)

    if dropped:
        logger.debug("Removed %d invalid segment(s): %s", len(dropped), [s.id for s in dropped])
    system.segments = kept
    return len(dropped)
