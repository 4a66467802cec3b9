"""Library routes: fittings, standard sizes, air conditions, insulation."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from ductengine.air_properties import STANDARD_PRESSURE_KPA, get_air_properties
from ductengine.fittings import FittingCategory, FittingType
from ductengine.network import INSULATION_MATERIALS
from ductservice.models import AirPropertiesResponse, FittingInfo, FittingListResponse

router = APIRouter()


def _fitting_info(fitting: FittingType) -> FittingInfo:
    return FittingInfo(
        id=fitting.id,
        name=fitting.name,
        category=fitting.category.value,
        equivalent_length=None if fitting.size_dependent else fitting.equivalent_length,
        size_dependent=fitting.size_dependent,
        k_factor=fitting.k_factor,
        description=fitting.description,
    )


@router.get("/library/fittings", response_model=FittingListResponse)
async def list_fittings(
    request: Request,
    category: Optional[FittingCategory] = Query(None),
    include_terminals: bool = Query(False, description="Also list diffusers and grilles"),
):
    """List duct fittings, optionally filtered by category."""
    library = request.app.state.catalog.fittings
    if category is not None:
        fittings = library.by_category(category)
    else:
        fittings = library.segment_fittings
        if include_terminals:
            fittings = fittings + library.terminal_fittings

    infos = [_fitting_info(f) for f in fittings]
    return FittingListResponse(fittings=infos, total=len(infos))


@router.get("/library/fittings/{fitting_id}", response_model=FittingInfo)
async def get_fitting(request: Request, fitting_id: str):
    """Get a fitting or terminal device by id."""
    library = request.app.state.catalog.fittings
    fitting = library.get(fitting_id) or library.get_terminal(fitting_id)
    if fitting is None:
        raise HTTPException(status_code=404, detail="Fitting not found")
    return _fitting_info(fitting)


@router.get("/library/standard-sizes")
async def list_standard_sizes(request: Request):
    """The standard duct size table (inches), smallest bracket first."""
    sizes = request.app.state.catalog.sizes.sizes
    return {
        "sizes": [
            {
                "cfm": row.cfm,
                "rectangular": [list(option) for option in row.rectangular],
                "round_diameter": row.round_diameter,
            }
            for row in sizes
        ]
    }


@router.get("/library/air-conditions")
async def list_air_conditions(request: Request):
    registry = request.app.state.catalog.air_conditions
    return {
        "default": registry.default_id,
        "air_conditions": [
            {
                "id": c.id,
                "name": c.name,
                "temperature": c.temperature,
                "relative_humidity": c.relative_humidity,
                "pressure": c.pressure,
                "density": c.density,
                "viscosity": c.viscosity,
                "specific_heat": c.specific_heat,
            }
            for c in registry.all()
        ],
    }


@router.get("/library/insulation-materials")
async def list_insulation_materials():
    return {"materials": INSULATION_MATERIALS}


@router.get("/library/air-properties", response_model=AirPropertiesResponse)
async def air_properties(
    temp_c: float = Query(20.0, ge=-50, le=150, description="Air temperature (°C)"),
    pressure_kpa: float = Query(STANDARD_PRESSURE_KPA, gt=0, le=200, description="Absolute pressure (kPa)"),
):
    """Density, viscosity and specific heat of air at a given state."""
    props = get_air_properties(temp_c, pressure_kpa)
    return AirPropertiesResponse(temp_c=temp_c, pressure_kpa=pressure_kpa, **props)
