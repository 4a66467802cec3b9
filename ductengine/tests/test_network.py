"""
Tests for the duct network model.

Validates:
1. Construction rejects non-physical inputs with InvalidDimension
2. Enum coercion from plain strings
3. Insulation catalogue lookup
"""

import math
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from ductengine.errors import DuctSizingError, InvalidDimension
from ductengine.network import (
    DesignMethod,
    DuctNode,
    DuctSegment,
    DuctSystem,
    InsulationProperties,
    NodeType,
    SegmentFitting,
)


class TestValidation:

    @pytest.mark.parametrize("length", [0, -2.5, math.inf, math.nan])
    def test_segment_length_must_be_positive(self, length):
        with pytest.raises(InvalidDimension):
            DuctSegment('s1', 'ahu-1', 'd1', length)

    def test_node_cfm_must_be_non_negative(self):
        with pytest.raises(InvalidDimension):
            DuctNode(id='d1', type=NodeType.DIFFUSER, cfm=-10)

    def test_node_zero_and_missing_cfm_allowed(self):
        assert DuctNode(id='d1', type=NodeType.DIFFUSER, cfm=0).cfm == 0
        assert DuctNode(id='j1', type=NodeType.JUNCTION).cfm is None

    def test_fitting_quantity_must_be_non_negative(self):
        with pytest.raises(InvalidDimension):
            SegmentFitting('elbow-90-rect', quantity=-1)

    def test_fitting_custom_el_must_be_non_negative(self):
        with pytest.raises(InvalidDimension):
            SegmentFitting('elbow-90-rect', custom_el=-0.5)

    @pytest.mark.parametrize("k_value", [0, -0.04])
    def test_insulation_k_value_must_be_positive(self, k_value):
        with pytest.raises(InvalidDimension):
            InsulationProperties(material='custom', thickness=25, k_value=k_value)

    def test_insulation_thickness_must_be_non_negative(self):
        with pytest.raises(InvalidDimension):
            InsulationProperties(material='custom', thickness=-1, k_value=0.04)

    @pytest.mark.parametrize("max_velocity", [0, -8.0])
    def test_system_max_velocity_must_be_positive(self, max_velocity):
        with pytest.raises(InvalidDimension):
            DuctSystem(max_velocity=max_velocity)

    def test_invalid_dimension_is_value_error(self):
        with pytest.raises(ValueError):
            DuctSegment('s1', 'ahu-1', 'd1', 0)
        assert issubclass(InvalidDimension, DuctSizingError)


class TestModel:

    def test_enum_coercion(self):
        system = DuctSystem(design_method='static-regain', units='imperial')
        assert system.design_method == DesignMethod.STATIC_REGAIN
        assert DuctNode(id='a', type='ahu').type == NodeType.AHU

    def test_insulation_from_material(self):
        insulation = InsulationProperties.from_material('polyurethane', 50)
        assert insulation.k_value == 0.025
        assert insulation.r_value == pytest.approx(0.05 / 0.025)

    def test_insulation_unknown_material(self):
        with pytest.raises(InvalidDimension):
            InsulationProperties.from_material('asbestos', 25)

    def test_insulation_thickness_needs_flag(self):
        insulation = InsulationProperties.from_material('fiberglass', 25)
        assert DuctSegment('s1', 'a', 'b', 2.0, insulation=insulation).insulation_thickness == 0.0
        assert DuctSegment('s1', 'a', 'b', 2.0, insulated=True, insulation=insulation).insulation_thickness == 25
