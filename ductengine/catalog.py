"""
Reference data bundle passed into the solver.

Groups the standard size table, the fitting library and the air condition
presets so a solve can run against alternate tables (e.g. a metric-only
size list in tests) without touching module state.
"""

from dataclasses import dataclass, field

from ductengine.air_properties import AirConditionRegistry
from ductengine.fittings import FittingLibrary
from ductengine.standard_sizes import StandardSizeTable


@dataclass(frozen=True)
class EngineCatalog:
    sizes: StandardSizeTable = field(default_factory=StandardSizeTable)
    fittings: FittingLibrary = field(default_factory=FittingLibrary)
    air_conditions: AirConditionRegistry = field(default_factory=AirConditionRegistry)


_default_catalog = None


def default_catalog() -> EngineCatalog:
    """Shared catalog built from the bundled tables."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = EngineCatalog()
    return _default_catalog
