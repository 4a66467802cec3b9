"""
Air properties for duct sizing.

Density from the ideal gas law, dynamic viscosity from Sutherland's formula,
and a linear fit for specific heat over HVAC temperatures. No input
validation: out-of-range temperatures propagate NaN/inf downstream.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional

R_AIR = 287.05          # J/(kg·K), dry air
STANDARD_PRESSURE_KPA = 101.325

# Sutherland constants for air
SUTHERLAND_MU0 = 1.716e-5   # Pa·s at T0
SUTHERLAND_T0 = 273.15      # K
SUTHERLAND_S = 110.4        # K


@dataclass(frozen=True)
class AirCondition:
    """Named reference air state."""
    id: str
    name: str
    temperature: float          # °C
    relative_humidity: float    # %
    pressure: float             # kPa
    density: float              # kg/m³
    viscosity: float            # kg/(m·h)
    specific_heat: float        # kJ/(kg·°C)


AIR_CONDITIONS: List[AirCondition] = [
    AirCondition('air-20c-stp', '20°C Air STP', 20, 50, 101.325, 1.2014, 0.0643, 1.0048),
    AirCondition('air-13c-97rh', '13°C Air at 97% RH and 1 atm', 13, 97, 101.325, 1.235, 0.0625, 1.006),
    AirCondition('air-25c-50rh', '25°C Air at 50% RH and 1 atm', 25, 50, 101.325, 1.184, 0.0660, 1.007),
    AirCondition('air-37c-23rh', '37°C Air at 23% RH and 1 atm', 37, 23, 101.325, 1.128, 0.0695, 1.008),
    AirCondition('air-52c-11rh', '52°C Air at 11% RH and 1 atm', 52, 11, 101.325, 1.066, 0.0734, 1.009),
]

DEFAULT_AIR_CONDITION_ID = 'air-20c-stp'


def air_density(temp_c: float, pressure_kpa: float = STANDARD_PRESSURE_KPA) -> float:
    """ρ = P / (R·T), kg/m³."""
    T = temp_c + 273.15
    return float(np.divide(pressure_kpa * 1000.0, R_AIR * T))


def dynamic_viscosity(temp_c: float) -> float:
    """
    Dynamic viscosity of air via Sutherland's formula (Pa·s).

        μ = μ0 · (T/T0)^1.5 · (T0 + S) / (T + S)
    """
    T = temp_c + 273.15
    ratio = np.power(np.float64(T / SUTHERLAND_T0), 1.5)
    return float(SUTHERLAND_MU0 * ratio * np.divide(SUTHERLAND_T0 + SUTHERLAND_S, T + SUTHERLAND_S))


def kinematic_viscosity(temp_c: float, pressure_kpa: float = STANDARD_PRESSURE_KPA) -> float:
    """ν = μ / ρ, m²/s."""
    return dynamic_viscosity(temp_c) / air_density(temp_c, pressure_kpa)


def specific_heat(temp_c: float) -> float:
    """cp in kJ/(kg·°C): 1.005 at 0°C rising to 1.009 at 100°C."""
    return 1.005 + (temp_c / 100.0) * 0.004


def get_air_properties(temp_c: float, pressure_kpa: float = STANDARD_PRESSURE_KPA) -> Dict[str, float]:
    """All air properties at the given state."""
    return {
        'density': air_density(temp_c, pressure_kpa),
        'dynamic_viscosity': dynamic_viscosity(temp_c),
        'kinematic_viscosity': kinematic_viscosity(temp_c, pressure_kpa),
        'specific_heat': specific_heat(temp_c),
    }


class AirConditionRegistry:
    """Read-only lookup of air condition presets by id."""

    def __init__(self, conditions: Optional[List[AirCondition]] = None,
                 default_id: str = DEFAULT_AIR_CONDITION_ID):
        self._conditions: Dict[str, AirCondition] = {
            c.id: c for c in (AIR_CONDITIONS if conditions is None else conditions)
        }
        self.default_id = default_id

    def get(self, condition_id: str) -> Optional[AirCondition]:
        return self._conditions.get(condition_id)

    @property
    def default(self) -> AirCondition:
        return self._conditions[self.default_id]

    def resolve(self, condition_id: str) -> AirCondition:
        """Preset for the id, or the default preset when the id is unknown."""
        return self._conditions.get(condition_id, self.default)

    def all(self) -> List[AirCondition]:
        return list(self._conditions.values())

    def __contains__(self, condition_id: str) -> bool:
        return condition_id in self._conditions

    def __len__(self) -> int:
        return len(self._conditions)
