"""
Compliance API router.

Scores placed modules against the parcel's zoning limits.
"""

import logging

from fastapi import APIRouter

from api.config import settings
from api.routers.regulations import get_engine
from api.schemas.compliance import (
    ComplianceCheckRequest,
    ComplianceStatusResponse,
    PlacementCheckRequest,
    PlacementCheckResponse,
)
from siteplan.builder.placement import (
    ModuleCatalog,
    ModuleDefinition,
    ModulePlacement,
    find_collisions,
    summarize_placements,
)
from siteplan.config import settings as core_settings
from siteplan.geometry.polygon import LocalPoint
from siteplan.regulations.compliance import PlacementSummary, check_compliance

router = APIRouter(prefix="/api/compliance", tags=["Compliance"])

logger = logging.getLogger(__name__)


# ---- endpoints -------------------------------------------------------------

@router.post("/check", response_model=ComplianceStatusResponse)
async def check_placement_summary(request: ComplianceCheckRequest):
    """Check a builder-supplied placement summary."""
    regulation = get_engine().calculate(request.to_parcel_input())
    s = request.summary
    summary = PlacementSummary(
        total_footprint_area=s.total_footprint_area,
        total_floor_area=s.total_floor_area,
        max_height=s.max_height,
        max_floor=s.max_floor,
        all_within_boundary=s.all_within_boundary,
        parcel_area=s.parcel_area,
    )
    return check_compliance(summary, regulation).to_dict()


@router.post("/placements", response_model=PlacementCheckResponse)
async def check_placements(request: PlacementCheckRequest):
    """Aggregate a placement list, then check it and report overlaps."""
    regulation = get_engine().calculate(request.parcel.to_parcel_input())

    catalog = ModuleCatalog(
        ModuleDefinition(
            id=m.id,
            name=m.name or m.id,
            width=m.width,
            depth=m.depth,
            height=m.height,
            grid_width=m.grid_width,
            grid_depth=m.grid_depth,
            base_price=m.base_price,
        )
        for m in request.modules
    )
    placements = [
        ModulePlacement(
            module_id=p.module_id,
            grid_x=p.grid_x,
            grid_z=p.grid_z,
            rotation=p.rotation,
            floor=p.floor,
        )
        for p in request.placements
    ]
    polygon = [LocalPoint(p.x, p.z) for p in request.polygon] if request.polygon is not None else None

    summary = summarize_placements(
        placements,
        catalog,
        parcel_area=request.parcel.area,
        buildable_polygon=polygon,
        grid_size=core_settings.grid_size_m,
        offset_x=request.grid_offset.x,
        offset_z=request.grid_offset.z,
        floor_height=core_settings.floor_height_m,
    )
    status = check_compliance(summary, regulation)
    collisions = find_collisions(placements, catalog, max_cells=settings.max_grid_cells)

    if collisions:
        logger.info(f"{len(collisions)} overlapping placement pair(s)")

    return {
        "summary": summary.to_dict(),
        "status": status.to_dict(),
        "collisions": [list(pair) for pair in collisions],
    }
