"""
Tests for duct geometry and flow calculations.

Validates:
1. Area, hydraulic diameter and perimeter for both shapes
2. CFM ↔ m³/s and Pa ↔ in.wg round trips
3. Friction factor regimes and continuity at the laminar limit
4. Friction loss and velocity pressure formulas
5. NTU temperature drop
"""

import math
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from ductengine.air_properties import air_density, dynamic_viscosity
from ductengine.calculations import (
    CFM_TO_M3S,
    LAMINAR_RE_LIMIT,
    calculate_temp_drop,
    calculate_velocity,
    calculate_velocity_metric,
    cfm_to_m3s,
    duct_area,
    duct_perimeter,
    friction_factor,
    friction_loss,
    hydraulic_diameter,
    in_wg_to_pa,
    m3s_to_cfm,
    overall_u_value,
    pa_to_in_wg,
    reynolds_number,
    size_duct_equal_friction,
    size_duct_velocity,
    velocity_pressure,
)
from ductengine.dimensions import RectangularDuct, RoundDuct
from ductengine.errors import InvalidDimension
from ductengine.standard_sizes import StandardSizeTable


class TestGeometry:

    def test_round_area(self):
        assert duct_area(RoundDuct(diameter=200)) == pytest.approx(math.pi * 0.1 ** 2)

    def test_rect_area(self):
        assert duct_area(RectangularDuct(width=400, height=200)) == pytest.approx(0.08)

    def test_round_hydraulic_diameter(self):
        assert hydraulic_diameter(RoundDuct(diameter=250)) == pytest.approx(0.25)

    def test_rect_hydraulic_diameter(self):
        """4ab/(2(a+b)) for 0.4×0.2 m is 0.2667 m."""
        assert hydraulic_diameter(RectangularDuct(width=400, height=200)) == pytest.approx(0.26667, rel=1e-4)

    def test_square_hydraulic_diameter_is_side(self):
        assert hydraulic_diameter(RectangularDuct(width=300, height=300)) == pytest.approx(0.3)

    def test_perimeter(self):
        assert duct_perimeter(RectangularDuct(width=400, height=200)) == pytest.approx(1.2)
        assert duct_perimeter(RoundDuct(diameter=100)) == pytest.approx(math.pi * 0.1)

    def test_non_positive_dimensions_rejected(self):
        with pytest.raises(InvalidDimension):
            RoundDuct(diameter=0)
        with pytest.raises(InvalidDimension):
            RectangularDuct(width=300, height=-1)
        with pytest.raises(InvalidDimension):
            RoundDuct(diameter=float('nan'))


class TestUnitConversions:

    @pytest.mark.parametrize("value", [0.0, 0.05, 1.0, 12.345, 1e4])
    def test_cfm_round_trip(self, value):
        assert cfm_to_m3s(m3s_to_cfm(value)) == pytest.approx(value, rel=1e-12, abs=1e-15)

    def test_cfm_factor(self):
        assert cfm_to_m3s(1000) == pytest.approx(0.471947)

    def test_in_wg_round_trip(self):
        assert pa_to_in_wg(in_wg_to_pa(0.1)) == pytest.approx(0.1)
        assert in_wg_to_pa(1.0) == pytest.approx(248.84, abs=0.01)


class TestVelocity:

    def test_velocity_from_cfm(self):
        """500 CFM through 457×152 mm is about 3.4 m/s."""
        duct = RectangularDuct(width=457, height=152)
        v = calculate_velocity(500, duct)
        assert v == pytest.approx(500 * CFM_TO_M3S / (0.457 * 0.152))
        assert v == pytest.approx(3.40, abs=0.01)

    def test_velocity_metric(self):
        assert calculate_velocity_metric(0.08, RectangularDuct(width=400, height=200)) == pytest.approx(1.0)

    def test_zero_flow(self):
        assert calculate_velocity(0, RoundDuct(diameter=200)) == 0.0


class TestFrictionFactor:

    def test_laminar(self):
        assert friction_factor(1000, 0.3) == pytest.approx(0.064)

    def test_zero_reynolds_has_no_friction(self):
        assert friction_factor(0, 0.3) == 0.0

    def test_turbulent_haaland(self):
        re, dh = 1e5, 0.3
        inner = (0.00015 / dh / 3.7) ** 1.11 + 6.9 / re
        expected = (-1.8 * math.log10(inner)) ** -2
        assert friction_factor(re, dh) == pytest.approx(expected)
        assert 0.015 < friction_factor(re, dh) < 0.03

    def test_smoother_duct_lower_friction(self):
        assert friction_factor(1e5, 0.3, roughness=0.00001) < friction_factor(1e5, 0.3)

    def test_continuity_at_laminar_limit(self):
        """Laminar and Haaland differ at Re 2300 but stay within the same order."""
        laminar = 64.0 / LAMINAR_RE_LIMIT
        turbulent = friction_factor(LAMINAR_RE_LIMIT, 0.3)
        assert laminar == pytest.approx(0.0278, abs=1e-4)
        assert 0.5 < turbulent / laminar < 2.5


class TestPressure:

    def test_friction_loss_formula(self):
        assert friction_loss(5.0, 0.25, 1.2, 0.02) == pytest.approx(0.02 * 1.2 * 25 / 0.5)

    def test_velocity_pressure(self):
        assert velocity_pressure(4.0, 1.2) == pytest.approx(9.6)

    def test_typical_friction_rate(self):
        """A table-sized duct lands on a realistic friction rate."""
        temp = 13.0
        rho, mu = air_density(temp), dynamic_viscosity(temp)
        duct = RoundDuct(diameter=279)   # 11 in, 500 CFM bracket
        v = calculate_velocity(500, duct)
        dh = hydraulic_diameter(duct)
        f = friction_factor(reynolds_number(v, dh, rho, mu), dh)
        rate = friction_loss(v, dh, rho, f)
        assert 0.3 < rate < 2.0


class TestSizing:

    def test_equal_friction_uses_table(self):
        table = StandardSizeTable()
        assert size_duct_equal_friction(500, table) == RectangularDuct(width=457, height=152)
        assert size_duct_equal_friction(500, table, 'round') == RoundDuct(diameter=279)

    def test_velocity_is_table_alias(self):
        table = StandardSizeTable()
        for cfm in (75, 650, 4200):
            assert size_duct_velocity(cfm, table) == size_duct_equal_friction(cfm, table)


class TestTemperatureDrop:

    def test_u_value_bare(self):
        assert overall_u_value() == pytest.approx(1 / (1 / 25 + 1 / 10))

    def test_u_value_insulated(self):
        """25 mm at k=0.04 adds 0.625 m²K/W."""
        assert overall_u_value(25, 0.04) == pytest.approx(1 / (0.04 + 0.625 + 0.1))

    def test_no_gradient_no_drop(self):
        duct = RoundDuct(diameter=250)
        assert calculate_temp_drop(10, duct, 400, 20.0, 20.0) == pytest.approx(0.0)

    def test_cold_supply_warms(self):
        """Supply colder than ambient gives a negative change of limited size."""
        duct = RoundDuct(diameter=250)
        dt = calculate_temp_drop(10, duct, 400, 13.0, 25.0)
        assert -12.0 < dt < 0.0

    def test_insulation_reduces_drop(self):
        duct = RectangularDuct(width=457, height=152)
        bare = calculate_temp_drop(20, duct, 500, 40.0, 20.0)
        insulated = calculate_temp_drop(20, duct, 500, 40.0, 20.0, insulation_thickness_mm=50)
        assert 0 < insulated < bare

    def test_ntu_formula(self):
        duct = RoundDuct(diameter=200)
        length, cfm, ts, ta = 15.0, 300.0, 35.0, 20.0
        rho = air_density(ts)
        cp = (1.005 + ts / 100 * 0.004) * 1000
        m_dot = cfm * CFM_TO_M3S * rho
        area = math.pi * 0.2 * length
        ntu = overall_u_value() * area / (m_dot * cp)
        expected = (1 - math.exp(-ntu)) * (ts - ta)
        assert calculate_temp_drop(length, duct, cfm, ts, ta) == pytest.approx(expected)

    def test_zero_flow_reaches_ambient(self):
        duct = RoundDuct(diameter=200)
        assert calculate_temp_drop(5, duct, 0, 13.0, 25.0) == pytest.approx(-12.0)
