"""
DuctForge Compute Engine

HVAC duct network sizing and pressure-loss library: airflow propagation
over a duct tree, standard duct sizing, friction and fitting losses,
critical path, duct heat loss and bill of materials.

All math is deterministic and in-memory; one call solves the whole network.
"""

from ductengine.errors import DuctSizingError, InvalidDimension, CyclicTopology, UnknownFitting, NodeNotFound
from ductengine.dimensions import RoundDuct, RectangularDuct, DuctDimensions, equivalent_diameter
from ductengine.air_properties import air_density, dynamic_viscosity, kinematic_viscosity, specific_heat, get_air_properties
from ductengine.standard_sizes import StandardSizeTable, STANDARD_DUCT_SIZES
from ductengine.fittings import FittingLibrary, FittingType, FittingCategory
from ductengine.catalog import EngineCatalog, default_catalog
from ductengine.network import (
    DuctNode, DuctSegment, DuctSystem, SegmentFitting, InsulationProperties,
    NodeType, DesignMethod, UnitSystem, create_default_system, cleanup_invalid_segments,
)
from ductengine.solver import SystemResults, SegmentResult, calculate_system
from ductengine.bom import BOMItem, export_csv, export_json
from ductengine.session import DuctDesignSession

__version__ = "0.1.0"
