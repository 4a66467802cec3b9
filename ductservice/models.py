"""Pydantic models for DuctForge API requests and responses."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from ductengine.bom import BOMItem
from ductengine.dimensions import RectangularDuct, RoundDuct
from ductengine.network import (
    DesignMethod,
    DuctNode,
    DuctSegment,
    DuctSystem,
    InsulationProperties,
    NodeType,
    SegmentFitting,
    UnitSystem,
)
from ductengine.solver import SegmentResult, SystemResults


# --- Duct sizes ---

class RoundDuctModel(BaseModel):
    shape: Literal["round"] = "round"
    diameter: float = Field(..., gt=0, description="Inside diameter (mm)")

    def to_engine(self) -> RoundDuct:
        return RoundDuct(diameter=self.diameter)


class RectangularDuctModel(BaseModel):
    shape: Literal["rectangular"] = "rectangular"
    width: float = Field(..., gt=0, description="Inside width (mm)")
    height: float = Field(..., gt=0, description="Inside height (mm)")

    def to_engine(self) -> RectangularDuct:
        return RectangularDuct(width=self.width, height=self.height)


DuctSizeModel = Annotated[Union[RoundDuctModel, RectangularDuctModel], Field(discriminator="shape")]


def duct_size_model(duct) -> Union[RoundDuctModel, RectangularDuctModel]:
    if isinstance(duct, RoundDuct):
        return RoundDuctModel(diameter=duct.diameter)
    return RectangularDuctModel(width=duct.width, height=duct.height)


# --- Network ---

class SegmentFittingModel(BaseModel):
    fitting_id: str
    quantity: int = Field(1, ge=0)
    custom_el: Optional[float] = Field(None, ge=0, description="Equivalent length override (m)")


class InsulationModel(BaseModel):
    material: str = "fiberglass"
    thickness: float = Field(..., ge=0, description="Thickness (mm)")
    k_value: float = Field(0.04, gt=0, description="Thermal conductivity (W/(m·K))")


class DuctNodeModel(BaseModel):
    id: str
    type: NodeType
    name: str = ""
    position: tuple[float, float] = (0.0, 0.0)
    cfm: Optional[float] = Field(None, ge=0, description="Required airflow, diffusers only (CFM)")
    zone: Optional[str] = None
    component_id: Optional[str] = None


class DuctSegmentModel(BaseModel):
    id: str
    from_node_id: str
    to_node_id: str
    length: float = Field(..., gt=0, description="Physical length (m)")
    fittings: list[SegmentFittingModel] = []
    insulated: bool = False
    insulation: Optional[InsulationModel] = None
    manual_size: Optional[DuctSizeModel] = None


class DuctSystemModel(BaseModel):
    """A full duct network plus its design parameters."""
    id: str = "system-1"
    name: str = "New Duct System"
    design_method: DesignMethod = DesignMethod.EQUAL_FRICTION
    target_velocity: Optional[float] = Field(None, gt=0, description="m/s")
    target_friction: Optional[float] = Field(1.0, gt=0, description="Pa/m")
    max_velocity: float = Field(8.0, gt=0, description="m/s")
    supply_air_temp: float = Field(13.0, description="°C")
    ambient_temp: float = Field(25.0, description="°C")
    air_condition: str = "air-20c-stp"
    units: UnitSystem = UnitSystem.METRIC
    duct_shape: Literal["round", "rectangular"] = "rectangular"
    nodes: list[DuctNodeModel] = []
    segments: list[DuctSegmentModel] = []

    def to_engine(self) -> DuctSystem:
        """Build a fresh engine DuctSystem; raises DuctSizingError on invalid values."""
        nodes = [DuctNode(**n.model_dump()) for n in self.nodes]
        segments = []
        for s in self.segments:
            insulation = None
            if s.insulation is not None:
                insulation = InsulationProperties(**s.insulation.model_dump())
            segments.append(DuctSegment(
                id=s.id,
                from_node_id=s.from_node_id,
                to_node_id=s.to_node_id,
                length=s.length,
                fittings=[SegmentFitting(**f.model_dump()) for f in s.fittings],
                insulated=s.insulated,
                insulation=insulation,
                manual_size=s.manual_size.to_engine() if s.manual_size is not None else None,
            ))

        return DuctSystem(
            **self.model_dump(exclude={"nodes", "segments"}),
            nodes=nodes,
            segments=segments,
        )

    @classmethod
    def from_engine(cls, system: DuctSystem) -> DuctSystemModel:
        return cls(
            id=system.id,
            name=system.name,
            design_method=system.design_method,
            target_velocity=system.target_velocity,
            target_friction=system.target_friction,
            max_velocity=system.max_velocity,
            supply_air_temp=system.supply_air_temp,
            ambient_temp=system.ambient_temp,
            air_condition=system.air_condition,
            units=system.units,
            duct_shape=system.duct_shape,
            nodes=[
                DuctNodeModel(
                    id=n.id, type=n.type, name=n.name, position=n.position,
                    cfm=n.cfm, zone=n.zone, component_id=n.component_id,
                )
                for n in system.nodes
            ],
            segments=[
                DuctSegmentModel(
                    id=s.id,
                    from_node_id=s.from_node_id,
                    to_node_id=s.to_node_id,
                    length=s.length,
                    fittings=[
                        SegmentFittingModel(fitting_id=f.fitting_id, quantity=f.quantity, custom_el=f.custom_el)
                        for f in s.fittings
                    ],
                    insulated=s.insulated,
                    insulation=InsulationModel(
                        material=s.insulation.material,
                        thickness=s.insulation.thickness,
                        k_value=s.insulation.k_value,
                    ) if s.insulation is not None else None,
                    manual_size=duct_size_model(s.manual_size) if s.manual_size is not None else None,
                )
                for s in system.segments
            ],
        )


# --- Results ---

class SegmentResultModel(BaseModel):
    segment_id: str
    cfm: float
    duct_size: DuctSizeModel
    sizing_basis: str
    velocity: float
    reynolds: float
    friction_factor: float
    velocity_pressure: float
    friction_loss: float
    equivalent_length: float
    effective_length: float
    total_pressure_drop: float
    temp_drop: float

    @classmethod
    def from_engine(cls, result: SegmentResult) -> SegmentResultModel:
        return cls(
            segment_id=result.segment_id,
            cfm=result.cfm,
            duct_size=duct_size_model(result.duct_size),
            sizing_basis=result.sizing_basis,
            velocity=result.velocity,
            reynolds=result.reynolds,
            friction_factor=result.friction_factor,
            velocity_pressure=result.velocity_pressure,
            friction_loss=result.friction_loss,
            equivalent_length=result.equivalent_length,
            effective_length=result.effective_length,
            total_pressure_drop=result.total_pressure_drop,
            temp_drop=result.temp_drop,
        )


class BOMItemModel(BaseModel):
    description: str
    size: str
    quantity: int
    unit: str
    length: Optional[float] = None
    material: Optional[str] = None

    @classmethod
    def from_engine(cls, item: BOMItem) -> BOMItemModel:
        return cls(
            description=item.description,
            size=item.size,
            quantity=item.quantity,
            unit=item.unit,
            length=item.length,
            material=item.material,
        )


class SystemResultsModel(BaseModel):
    total_cfm: float
    total_pressure_drop: float
    critical_path: list[str]
    critical_path_pressure: float
    bom: list[BOMItemModel]
    warnings: list[str]
    node_cfm: dict[str, float]
    segments: dict[str, SegmentResultModel]

    @classmethod
    def from_engine(cls, results: SystemResults) -> SystemResultsModel:
        return cls(
            total_cfm=results.total_cfm,
            total_pressure_drop=results.total_pressure_drop,
            critical_path=list(results.critical_path),
            critical_path_pressure=results.critical_path_pressure,
            bom=[BOMItemModel.from_engine(item) for item in results.bom],
            warnings=list(results.warnings),
            node_cfm=dict(results.node_cfm),
            segments={k: SegmentResultModel.from_engine(v) for k, v in results.segments.items()},
        )


class CleanupResponse(BaseModel):
    system: DuctSystemModel
    removed: int
    results: SystemResultsModel


# --- Sizing lookup ---

class DuctSizeRequest(BaseModel):
    cfm: float = Field(..., ge=0, description="Required airflow (CFM)")
    shape: Literal["round", "rectangular"] = "rectangular"


class DuctSizeResponse(BaseModel):
    bracket_cfm: float
    shape: str
    nominal_inches: list[int]
    size: DuctSizeModel
    options: list[list[int]] = []


# --- Library ---

class FittingInfo(BaseModel):
    id: str
    name: str
    category: str
    equivalent_length: Optional[float] = Field(None, description="Constant EL (m), None when size dependent")
    size_dependent: bool
    k_factor: Optional[float] = None
    description: str = ""


class FittingListResponse(BaseModel):
    fittings: list[FittingInfo]
    total: int


class AirPropertiesResponse(BaseModel):
    temp_c: float
    pressure_kpa: float
    density: float
    dynamic_viscosity: float
    kinematic_viscosity: float
    specific_heat: float
