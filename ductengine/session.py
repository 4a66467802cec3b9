"""
Design session: one DuctSystem plus its latest results.

Every edit triggers a full recompute, so ``results`` always matches the
current inputs. A session is owned by one caller at a time; concurrent
edits must be serialized by whoever embeds it.
"""

import copy
import dataclasses
import logging
import uuid
from contextlib import contextmanager
from typing import Iterable, Optional, Tuple

from ductengine.air_properties import AirCondition
from ductengine.catalog import EngineCatalog, default_catalog
from ductengine.dimensions import DuctDimensions, require_non_negative
from ductengine.errors import DuctSizingError, NodeNotFound
from ductengine.network import (
    DuctNode,
    DuctSegment,
    DuctSystem,
    NodeType,
    SegmentFitting,
    cleanup_invalid_segments,
    create_default_system,
)
from ductengine.solver import SystemResults, calculate_system

logger = logging.getLogger(__name__)


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:9]}"


class DuctDesignSession:
    """Editable duct system that keeps its solve up to date."""

    def __init__(self, system: Optional[DuctSystem] = None, catalog: Optional[EngineCatalog] = None):
        self.catalog = catalog or default_catalog()
        self.system = system if system is not None else create_default_system()
        self.results: Optional[SystemResults] = None
        self.recalculate()

    # --- Derived values ---

    @property
    def total_cfm(self) -> float:
        return self.results.total_cfm if self.results else 0.0

    @property
    def critical_path_pressure(self) -> float:
        return self.results.critical_path_pressure if self.results else 0.0

    @property
    def air_condition(self) -> AirCondition:
        return self.catalog.air_conditions.resolve(self.system.air_condition)

    # --- Nodes ---

    def add_node(self, node_type: NodeType, name: str, position: Tuple[float, float] = (0.0, 0.0),
                 cfm: Optional[float] = None, component_id: Optional[str] = None,
                 node_id: Optional[str] = None) -> DuctNode:
        node_type = NodeType(node_type)
        node = DuctNode(
            id=node_id or generate_id(node_type.value),
            type=node_type,
            name=name,
            position=position,
            cfm=cfm,
            component_id=component_id,
        )
        with self._edit():
            self.system.nodes.append(node)
        return node

    def update_node(self, node_id: str, **updates) -> Optional[DuctNode]:
        """Apply field updates to a node. Unknown ids are ignored."""
        for i, node in enumerate(self.system.nodes):
            if node.id == node_id:
                updated = dataclasses.replace(node, **updates)
                with self._edit():
                    self.system.nodes[i] = updated
                return updated
        return None

    def remove_node(self, node_id: str) -> None:
        """Remove a node and every segment attached to it."""
        with self._edit():
            self.system.segments = [
                s for s in self.system.segments
                if s.from_node_id != node_id and s.to_node_id != node_id
            ]
            self.system.nodes = [n for n in self.system.nodes if n.id != node_id]

    def add_junction(self, name: str, position: Tuple[float, float] = (0.0, 0.0)) -> DuctNode:
        return self.add_node(NodeType.JUNCTION, name, position)

    # --- Segments ---

    def add_segment(self, from_node_id: str, to_node_id: str, length: float,
                    fittings: Iterable[SegmentFitting] = (), insulated: bool = False,
                    segment_id: Optional[str] = None, **extra) -> DuctSegment:
        segment = DuctSegment(
            id=segment_id or generate_id('seg'),
            from_node_id=from_node_id,
            to_node_id=to_node_id,
            length=length,
            fittings=list(fittings),
            insulated=insulated,
            **extra,
        )
        with self._edit():
            self.system.segments.append(segment)
        return segment

    def update_segment(self, segment_id: str, **updates) -> Optional[DuctSegment]:
        """Apply field updates to a segment. Unknown ids are ignored."""
        for i, segment in enumerate(self.system.segments):
            if segment.id == segment_id:
                updated = dataclasses.replace(segment, **updates)
                with self._edit():
                    self.system.segments[i] = updated
                return updated
        return None

    def remove_segment(self, segment_id: str) -> None:
        with self._edit():
            self.system.segments = [s for s in self.system.segments if s.id != segment_id]

    def set_segment_size(self, segment_id: str, size: Optional[DuctDimensions]) -> None:
        """Pin a segment to a manual size, or pass None to return it to auto-sizing."""
        self.update_segment(segment_id, manual_size=size)

    def add_branch(self, from_node_id: str, diffuser_name: str, cfm: float, length: float,
                   fittings: Iterable[SegmentFitting] = ()) -> Tuple[DuctNode, DuctSegment]:
        """
        Add a diffuser fed by a new segment from an existing node.

        Both objects are built before either joins the system, and the
        system is solved once.

        Raises:
            NodeNotFound: if ``from_node_id`` is not in the system.
            InvalidDimension: for a negative ``cfm`` or a non-positive ``length``.
        """
        source = self.system.get_node(from_node_id)
        if source is None:
            raise NodeNotFound(from_node_id)

        position = (source.position[0] + 150, source.position[1] + 100)
        node = DuctNode(
            id=generate_id(NodeType.DIFFUSER.value),
            type=NodeType.DIFFUSER,
            name=diffuser_name,
            position=position,
            cfm=cfm,
        )
        segment = DuctSegment(
            id=generate_id('seg'),
            from_node_id=from_node_id,
            to_node_id=node.id,
            length=length,
            fittings=list(fittings),
        )
        with self._edit():
            self.system.nodes.append(node)
            self.system.segments.append(segment)
        return node, segment

    # --- Fittings ---

    def add_fitting(self, segment_id: str, fitting_id: str, quantity: int = 1) -> None:
        """Add fittings to a segment, merging with an existing entry of the same id.

        Raises:
            InvalidDimension: if ``quantity`` is negative.
        """
        require_non_negative("quantity", quantity)
        segment = self.system.get_segment(segment_id)
        if segment is None:
            return
        with self._edit():
            for i, item in enumerate(segment.fittings):
                if item.fitting_id == fitting_id:
                    segment.fittings[i] = dataclasses.replace(item, quantity=item.quantity + quantity)
                    break
            else:
                segment.fittings.append(SegmentFitting(fitting_id=fitting_id, quantity=quantity))

    def remove_fitting(self, segment_id: str, fitting_id: str) -> None:
        segment = self.system.get_segment(segment_id)
        if segment is None:
            return
        with self._edit():
            segment.fittings = [f for f in segment.fittings if f.fitting_id != fitting_id]

    def update_fitting_quantity(self, segment_id: str, fitting_id: str, quantity: int) -> None:
        """Set a fitting's quantity; zero or less removes it from the segment."""
        segment = self.system.get_segment(segment_id)
        if segment is None:
            return
        for i, item in enumerate(segment.fittings):
            if item.fitting_id == fitting_id:
                if quantity <= 0:
                    self.remove_fitting(segment_id, fitting_id)
                else:
                    updated = dataclasses.replace(item, quantity=quantity)
                    with self._edit():
                        segment.fittings[i] = updated
                return

    # --- System ---

    def update_system_settings(self, **updates) -> None:
        updated = dataclasses.replace(self.system, **updates)
        with self._edit():
            self.system = updated

    @contextmanager
    def _edit(self):
        """Apply an edit and re-solve; a rejected solve puts the system back."""
        snapshot = copy.deepcopy(self.system)
        try:
            yield
            self.recalculate()
        except DuctSizingError:
            self.system = snapshot
            raise

    def recalculate(self) -> Optional[SystemResults]:
        """Full solve. Results stay empty until there is at least one node and one segment."""
        if self.system.nodes and self.system.segments:
            self.results = calculate_system(self.system, self.catalog)
        else:
            self.results = None
        return self.results

    def reset_system(self) -> None:
        self.system = create_default_system()
        self.results = None

    def cleanup_invalid_segments(self) -> int:
        """Strip segments that break flow direction; recompute if any were removed."""
        removed = cleanup_invalid_segments(self.system)
        if removed > 0:
            logger.debug("Session cleanup removed %d segment(s)", removed)
            self.recalculate()
        return removed
