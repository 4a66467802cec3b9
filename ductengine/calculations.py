"""
Duct flow calculations (ASHRAE Fundamentals / SMACNA).

All functions are pure and work in SI internally: metres, Pa, m³/s, kg/m³,
Pa·s. Duct dimensions come in as millimetres and airflow as CFM at the
boundary.

Friction:
    ΔP/L = f · ρ·v² / (2·Dh)
    f    = 64/Re                                       (Re < 2300)
    f    = [-1.8·log10((ε/Dh/3.7)^1.11 + 6.9/Re)]^-2   (Haaland)
"""

import numpy as np

from ductengine.air_properties import air_density, specific_heat
from ductengine.dimensions import DuctDimensions, RoundDuct, equivalent_diameter
from ductengine.standard_sizes import StandardSizeTable

CFM_TO_M3S = 0.000471947
PA_TO_IN_WG = 0.00401865
MM_PER_INCH = 25.4

GALVANIZED_ROUGHNESS_M = 0.00015
LAMINAR_RE_LIMIT = 2300

H_INSIDE = 25.0     # W/(m²·K), forced convection in duct
H_OUTSIDE = 10.0    # W/(m²·K), moving air around duct

# Label for sizing strategies that only look up the standard table
TABLE_LOOKUP_ONLY = 'TableLookupOnly'


# --- Unit conversions ---

def cfm_to_m3s(cfm: float) -> float:
    return cfm * CFM_TO_M3S


def m3s_to_cfm(m3s: float) -> float:
    return m3s / CFM_TO_M3S


def pa_to_in_wg(pa: float) -> float:
    return pa * PA_TO_IN_WG


def in_wg_to_pa(in_wg: float) -> float:
    return in_wg / PA_TO_IN_WG


def mm_to_inch(mm: float) -> float:
    return mm / MM_PER_INCH


def inch_to_mm(inch: float) -> float:
    return inch * MM_PER_INCH


# --- Geometry ---

def duct_area(duct: DuctDimensions) -> float:
    """Cross-sectional area in m²."""
    if isinstance(duct, RoundDuct):
        return float(np.pi * (duct.diameter / 1000.0 / 2.0) ** 2)
    return (duct.width / 1000.0) * (duct.height / 1000.0)


def hydraulic_diameter(duct: DuctDimensions) -> float:
    """Dh = 4·A / P in m."""
    if isinstance(duct, RoundDuct):
        return duct.diameter / 1000.0
    a = duct.width / 1000.0
    b = duct.height / 1000.0
    return (4 * a * b) / (2 * (a + b))


def duct_perimeter(duct: DuctDimensions) -> float:
    """Wetted perimeter in m."""
    if isinstance(duct, RoundDuct):
        return float(np.pi * duct.diameter / 1000.0)
    return 2 * (duct.width / 1000.0 + duct.height / 1000.0)


# --- Flow ---

def calculate_velocity(cfm: float, duct: DuctDimensions) -> float:
    """Mean velocity (m/s) for an airflow in CFM."""
    return cfm_to_m3s(cfm) / duct_area(duct)


def calculate_velocity_metric(flow_m3s: float, duct: DuctDimensions) -> float:
    """Mean velocity (m/s) for an airflow in m³/s."""
    return flow_m3s / duct_area(duct)


def reynolds_number(velocity: float, dh: float, density: float, viscosity: float) -> float:
    """Re = ρ·v·Dh / μ."""
    return (density * velocity * dh) / viscosity


def friction_factor(re: float, dh: float, roughness: float = GALVANIZED_ROUGHNESS_M) -> float:
    """
    Darcy friction factor.

    Laminar below Re 2300, Haaland's explicit fit of Colebrook-White above.
    A stagnant duct (Re <= 0) has no friction.

    Args:
        re: Reynolds number
        dh: Hydraulic diameter (m)
        roughness: Absolute roughness ε (m), galvanized steel by default
    """
    if re <= 0:
        return 0.0
    if re < LAMINAR_RE_LIMIT:
        return 64.0 / re

    rel_roughness = roughness / dh
    inner = (rel_roughness / 3.7) ** 1.11 + 6.9 / re
    return float((-1.8 * np.log10(inner)) ** -2)


def friction_loss(velocity: float, dh: float, density: float, f: float) -> float:
    """Pressure drop per unit length (Pa/m)."""
    return f * (density * velocity * velocity) / (2 * dh)


def velocity_pressure(velocity: float, density: float) -> float:
    """Pv = ½·ρ·v² (Pa)."""
    return 0.5 * density * velocity * velocity


# --- Sizing ---

def size_duct_equal_friction(cfm: float, table: StandardSizeTable,
                             shape: str = 'rectangular') -> DuctDimensions:
    """
    Size a duct from the standard table (equal friction, 0.10 in.wg/100 ft).

    The table already encodes the friction target, so no target friction or
    velocity limit is applied here.
    """
    return table.size_for_cfm(cfm, shape).dimensions


def size_duct_velocity(cfm: float, table: StandardSizeTable,
                       shape: str = 'rectangular') -> DuctDimensions:
    """
    Velocity-method sizing.

    TableLookupOnly: resolves to the same standard table as the
    equal-friction method, not an iterative velocity solve.
    """
    return size_duct_equal_friction(cfm, table, shape)


# --- Heat transfer ---

def overall_u_value(insulation_thickness_mm: float = 0.0, k_insulation: float = 0.04,
                    h_inside: float = H_INSIDE, h_outside: float = H_OUTSIDE) -> float:
    """U = 1 / (1/h_i + t/k + 1/h_o) in W/(m²·K); bare duct has no insulation term."""
    r_insulation = (insulation_thickness_mm / 1000.0) / k_insulation if insulation_thickness_mm > 0 else 0.0
    return 1.0 / (1.0 / h_inside + r_insulation + 1.0 / h_outside)


def calculate_temp_drop(length: float, duct: DuctDimensions, cfm: float,
                        supply_temp: float, ambient_temp: float,
                        insulation_thickness_mm: float = 0.0, k_insulation: float = 0.04,
                        h_inside: float = H_INSIDE, h_outside: float = H_OUTSIDE) -> float:
    """
    Air temperature change along a segment (°C) by the NTU method.

        NTU = U·A / (ṁ·cp),  ε = 1 - e^-NTU,  ΔT = ε·(T_supply - T_ambient)

    Positive when supply air is warmer than ambient. With no airflow the
    air fully reaches ambient (ε = 1).
    """
    density = air_density(supply_temp)
    cp = specific_heat(supply_temp) * 1000.0   # J/(kg·K)
    mass_flow = cfm_to_m3s(cfm) * density      # kg/s

    surface_area = duct_perimeter(duct) * length
    u = overall_u_value(insulation_thickness_mm, k_insulation, h_inside, h_outside)

    if mass_flow <= 0:
        effectiveness = 1.0
    else:
        ntu = (u * surface_area) / (mass_flow * cp)
        effectiveness = float(1.0 - np.exp(-ntu))

    return effectiveness * (supply_temp - ambient_temp)
