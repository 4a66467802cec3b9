"""Design routes: solve, repair and size duct networks using the engine."""

import logging

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response

from ductengine.bom import export_csv, export_json
from ductengine.errors import DuctSizingError
from ductengine.network import cleanup_invalid_segments
from ductengine.solver import calculate_system
from ductservice.models import (
    CleanupResponse,
    DuctSizeRequest,
    DuctSizeResponse,
    DuctSystemModel,
    SystemResultsModel,
    duct_size_model,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _solve(request: Request, body: DuctSystemModel, strict_fittings: bool = False):
    """Build the engine system from the request body and solve it once."""
    try:
        system = body.to_engine()
        return system, calculate_system(system, request.app.state.catalog, strict_fittings)
    except DuctSizingError as e:
        logger.warning("Rejected duct system '%s': %s", body.id, e)
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/duct-systems/calculate", response_model=SystemResultsModel)
async def calculate_duct_system(
    request: Request,
    body: DuctSystemModel,
    strict_fittings: bool = Query(False, description="Reject unknown fitting ids instead of skipping them"),
):
    """Size every segment and return airflow, pressure drops, critical path, BOM and warnings."""
    _, results = _solve(request, body, strict_fittings)
    return SystemResultsModel.from_engine(results)


@router.post("/duct-systems/cleanup", response_model=CleanupResponse)
async def cleanup_duct_system(request: Request, body: DuctSystemModel):
    """Strip segments that break flow direction, then solve the repaired system."""
    try:
        system = body.to_engine()
        removed = cleanup_invalid_segments(system)
        results = calculate_system(system, request.app.state.catalog)
    except DuctSizingError as e:
        logger.warning("Rejected duct system '%s': %s", body.id, e)
        raise HTTPException(status_code=400, detail=str(e))

    return CleanupResponse(
        system=DuctSystemModel.from_engine(system),
        removed=removed,
        results=SystemResultsModel.from_engine(results),
    )


@router.post("/duct-systems/export")
async def export_duct_system(
    request: Request,
    body: DuctSystemModel,
    fmt: str = Query("csv", alias="format", pattern="^(csv|json)$"),
):
    """Solve and download the bill of materials (CSV) or the full results (JSON)."""
    _, results = _solve(request, body)

    if fmt == "json":
        return Response(
            content=export_json(results),
            media_type="application/json",
            headers={"Content-Disposition": f"attachment; filename={body.id}_results.json"},
        )
    return Response(
        content=export_csv(results.bom),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={body.id}_bom.csv"},
    )


@router.post("/duct-size", response_model=DuctSizeResponse)
async def lookup_duct_size(request: Request, body: DuctSizeRequest):
    """Standard duct size for an airflow (equal friction, 0.10 in.wg/100 ft)."""
    selection = request.app.state.catalog.sizes.size_for_cfm(body.cfm, body.shape)
    return DuctSizeResponse(
        bracket_cfm=selection.cfm,
        shape=selection.shape,
        nominal_inches=list(selection.nominal),
        size=duct_size_model(selection.dimensions),
        options=[list(option) for option in selection.options],
    )
