"""
Duct system solver.

Every solve is total: it recomputes the whole network from the inputs and
returns a new SystemResults. The pipeline always runs in this order:

1. Airflow propagation: post-order DFS from the AHU, each node carries the
   sum of its downstream nodes (diffusers add their own requirement).
2. Segment resolution: size each duct, then velocity, Reynolds number,
   friction factor, friction rate, fitting equivalent length, pressure drop
   and NTU temperature drop.
3. Critical path: the terminal-to-AHU path with the largest accumulated
   pressure drop, which sets the fan static pressure.
4. Bill of materials.
5. Velocity warnings (advisory only, never raised).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ductengine.air_properties import air_density, dynamic_viscosity
from ductengine.bom import BOMItem, generate_bom
from ductengine.calculations import (
    TABLE_LOOKUP_ONLY,
    calculate_temp_drop,
    calculate_velocity,
    friction_factor,
    friction_loss,
    hydraulic_diameter,
    reynolds_number,
    size_duct_equal_friction,
    size_duct_velocity,
    velocity_pressure,
)
from ductengine.catalog import EngineCatalog, default_catalog
from ductengine.dimensions import DuctDimensions
from ductengine.errors import CyclicTopology
from ductengine.fittings import segment_equivalent_length
from ductengine.network import DesignMethod, DuctSystem, NodeType

logger = logging.getLogger(__name__)

SIZING_MANUAL = 'manual'
SIZING_EQUAL_FRICTION = DesignMethod.EQUAL_FRICTION.value


@dataclass(frozen=True)
class SegmentResult:
    """Derived values for one segment. Never fed back into the inputs."""
    segment_id: str
    cfm: float
    duct_size: DuctDimensions
    sizing_basis: str               # 'manual', 'equal-friction' or 'TableLookupOnly'
    velocity: float                 # m/s
    reynolds: float
    friction_factor: float
    velocity_pressure: float        # Pa
    friction_loss: float            # Pa/m
    equivalent_length: float        # m, fittings only
    effective_length: float         # m, duct + fittings
    total_pressure_drop: float      # Pa
    temp_drop: float                # °C


@dataclass(frozen=True)
class SystemResults:
    total_cfm: float
    total_pressure_drop: float          # Pa
    critical_path: List[str]            # segment ids, AHU → terminal
    critical_path_pressure: float       # Pa
    bom: List[BOMItem]
    warnings: List[str]
    node_cfm: Dict[str, float] = field(default_factory=dict)
    segments: Dict[str, SegmentResult] = field(default_factory=dict)


def calculate_node_cfm(system: DuctSystem) -> Dict[str, float]:
    """
    Airflow (CFM) at every node.

    Walks from the AHU first, then from any node not yet reached so
    disconnected islands still get a value.

    Raises:
        CyclicTopology: if a node is reached again while its own subtree is
            still being summed.
    """
    children: Dict[str, List[str]] = {}
    for segment in system.segments:
        children.setdefault(segment.from_node_id, []).append(segment.to_node_id)

    nodes = {n.id: n for n in system.nodes}
    node_cfm: Dict[str, float] = {}
    in_progress = set()

    def visit(root: str) -> None:
        # Explicit-stack post-order walk
        stack = [(root, False)]
        while stack:
            node_id, expanded = stack.pop()
            if node_id in node_cfm:
                continue
            if not expanded:
                if node_id in in_progress:
                    raise CyclicTopology(node_id)
                in_progress.add(node_id)
                stack.append((node_id, True))
                for child in reversed(children.get(node_id, [])):
                    if child not in node_cfm:
                        stack.append((child, False))
                continue

            downstream = sum(node_cfm[child] for child in children.get(node_id, []))

            node = nodes.get(node_id)
            if node is not None and node.type == NodeType.DIFFUSER and node.cfm:
                # A diffuser with children (unusual) keeps their flow too
                total = node.cfm + downstream
            else:
                total = downstream

            in_progress.discard(node_id)
            node_cfm[node_id] = total

    ahu = system.ahu_node()
    if ahu is not None:
        visit(ahu.id)

    for node in system.nodes:
        if node.id not in node_cfm:
            visit(node.id)

    return node_cfm


def _resolve_duct_size(system: DuctSystem, segment, cfm: float,
                       catalog: EngineCatalog) -> Tuple[DuctDimensions, str]:
    if segment.manual_size is not None:
        return segment.manual_size, SIZING_MANUAL
    if system.design_method == DesignMethod.EQUAL_FRICTION:
        return size_duct_equal_friction(cfm, catalog.sizes, system.duct_shape), SIZING_EQUAL_FRICTION
    return size_duct_velocity(cfm, catalog.sizes, system.duct_shape), TABLE_LOOKUP_ONLY


def calculate_segments(system: DuctSystem, node_cfm: Dict[str, float],
                       catalog: Optional[EngineCatalog] = None,
                       strict_fittings: bool = False) -> Dict[str, SegmentResult]:
    """
    Size every segment and compute its flow properties.

    A segment carries the airflow of its downstream node. Air properties are
    evaluated at the supply air temperature.

    Args:
        system: The network to solve.
        node_cfm: Output of calculate_node_cfm.
        catalog: Reference tables; the bundled ones by default.
        strict_fittings: Raise UnknownFitting instead of skipping unknown ids.

    Returns:
        Dict of segment id → SegmentResult.
    """
    catalog = catalog or default_catalog()
    temp_c = system.supply_air_temp
    density = air_density(temp_c)
    viscosity = dynamic_viscosity(temp_c)

    results: Dict[str, SegmentResult] = {}
    for segment in system.segments:
        cfm = node_cfm.get(segment.to_node_id, 0.0)
        duct, basis = _resolve_duct_size(system, segment, cfm, catalog)

        velocity = calculate_velocity(cfm, duct)
        dh = hydraulic_diameter(duct)
        re = reynolds_number(velocity, dh, density, viscosity)
        f = friction_factor(re, dh)
        friction = friction_loss(velocity, dh, density, f)
        pv = velocity_pressure(velocity, density)

        total_el = segment_equivalent_length(segment.fittings, duct, catalog.fittings, strict=strict_fittings)
        effective_length = segment.length + total_el

        k_insulation = segment.insulation.k_value if segment.insulation is not None else 0.04
        temp_drop = calculate_temp_drop(
            segment.length, duct, cfm,
            system.supply_air_temp, system.ambient_temp,
            insulation_thickness_mm=segment.insulation_thickness,
            k_insulation=k_insulation,
        )

        results[segment.id] = SegmentResult(
            segment_id=segment.id,
            cfm=cfm,
            duct_size=duct,
            sizing_basis=basis,
            velocity=velocity,
            reynolds=re,
            friction_factor=f,
            velocity_pressure=pv,
            friction_loss=friction,
            equivalent_length=total_el,
            effective_length=effective_length,
            total_pressure_drop=friction * effective_length,
            temp_drop=temp_drop,
        )

    return results


def find_critical_path(system: DuctSystem,
                       segment_results: Dict[str, SegmentResult]) -> Tuple[List[str], float]:
    """
    Terminal-to-source path with the highest accumulated pressure drop.

    Diffusers are scanned in node-list order and the first strict maximum
    wins, so equal paths resolve to the earliest diffuser.

    Returns:
        (segment ids ordered AHU → terminal, accumulated pressure in Pa)
    """
    parent_segment = {}
    for segment in system.segments:
        parent_segment[segment.to_node_id] = segment

    best_path: List[str] = []
    best_pressure = 0.0

    for leaf in system.diffusers():
        path: List[str] = []
        pressure = 0.0
        seen = {leaf.id}
        current = leaf.id

        while current in parent_segment:
            segment = parent_segment[current]
            path.insert(0, segment.id)
            result = segment_results.get(segment.id)
            pressure += result.total_pressure_drop if result is not None else 0.0
            current = segment.from_node_id
            if current in seen:
                raise CyclicTopology(current)
            seen.add(current)

        if pressure > best_pressure:
            best_path, best_pressure = path, pressure

    return best_path, best_pressure


def collect_warnings(system: DuctSystem, segment_results: Dict[str, SegmentResult]) -> List[str]:
    """Advisory messages for segments running faster than the velocity limit."""
    warnings = []
    for segment in system.segments:
        result = segment_results.get(segment.id)
        if result is not None and result.velocity > system.max_velocity:
            warnings.append(
                f"Segment to {segment.to_node_id}: velocity {result.velocity:.1f} m/s "
                f"exceeds max {system.max_velocity:g} m/s"
            )
    return warnings


def calculate_system(system: DuctSystem, catalog: Optional[EngineCatalog] = None,
                     strict_fittings: bool = False) -> SystemResults:
    """
    Solve the whole duct system.

    Never fails on incomplete networks: no AHU gives zero total airflow and
    no diffusers give an empty critical path. Only a cyclic network raises.

    Args:
        system: Network and design parameters.
        catalog: Reference tables; the bundled ones by default.
        strict_fittings: Raise UnknownFitting instead of skipping unknown ids.

    Returns:
        SystemResults with per-segment values, critical path, BOM and warnings.
    """
    catalog = catalog or default_catalog()

    node_cfm = calculate_node_cfm(system)
    segment_results = calculate_segments(system, node_cfm, catalog, strict_fittings)
    path, pressure = find_critical_path(system, segment_results)
    bom = generate_bom(system, segment_results, catalog.fittings)
    warnings = collect_warnings(system, segment_results)

    ahu = system.ahu_node()
    total_cfm = node_cfm.get(ahu.id, 0.0) if ahu is not None else 0.0

    logger.debug(
        "Solved '%s': %d nodes, %d segments, %.0f CFM, critical %.1f Pa, %d warning(s)",
        system.name, len(system.nodes), len(system.segments), total_cfm, pressure, len(warnings),
    )

    return SystemResults(
        total_cfm=total_cfm,
        total_pressure_drop=pressure,
        critical_path=path,
        critical_path_pressure=pressure,
        bom=bom,
        warnings=warnings,
        node_cfm=node_cfm,
        segments=segment_results,
    )
