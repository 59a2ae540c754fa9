"""
Buildable geometry API router.

Turns a parcel ring into the per-floor buildable envelope on the
construction grid.
"""

from fastapi import APIRouter

from api.config import settings
from api.routers.regulations import get_engine
from api.schemas.geometry import BuildableRequest, BuildableResponse
from siteplan.builder.envelope import compute_buildable_envelope
from siteplan.config import settings as core_settings
from siteplan.geometry.coords import geojson_ring_to_local
from siteplan.geometry.polygon import polygon_area
from siteplan.regulations.engine import ParcelInput

router = APIRouter(prefix="/api/geometry", tags=["Geometry"])


# ---- helpers ---------------------------------------------------------------

def _points(polygon):
    return [{"x": p.x, "z": p.z} for p in polygon]


# ---- endpoints -------------------------------------------------------------

@router.post("/buildable", response_model=BuildableResponse)
async def buildable_envelope(request: BuildableRequest):
    """
    Compute the buildable envelope of a parcel.

    The ring is converted to local meters around its vertex centroid,
    inset by the setback and rasterized. Floors above 9 m in residential
    zones are stepped back from the north edge.
    """
    regulation = get_engine().calculate(ParcelInput(area=request.area, zone_type=request.zone_type))
    parcel_polygon = geojson_ring_to_local(request.ring)

    setback = request.setback if request.setback is not None else core_settings.default_setback_m
    envelope = compute_buildable_envelope(
        parcel_polygon,
        regulation,
        setback=setback,
        grid_size=core_settings.grid_size_m,
        offset_x=request.grid_offset.x,
        offset_z=request.grid_offset.z,
        floor_height=core_settings.floor_height_m,
        max_cells=settings.max_grid_cells,
    )
    rect = envelope.largest_rect(request.rect_steps, max_steps=settings.max_rect_steps)

    floors = []
    for f in envelope.floors:
        spans = envelope.row_spans(f.floor)
        floors.append({
            "floor": f.floor,
            "cellCount": len(f.cells),
            "area": f.area,
            "maxZ": f.max_z,
            "rowSpans": [
                {
                    "gz": s.gz,
                    "minGx": s.min_gx,
                    "maxGx": s.max_gx,
                    "z": s.z,
                    "minX": s.min_x,
                    "maxX": s.max_x,
                }
                for s in spans
            ],
        })

    return {
        "parcelPolygon": _points(parcel_polygon),
        "regulationPolygon": _points(envelope.regulation_polygon),
        "footprintPolygon": _points(envelope.footprint_polygon),
        "parcelArea": polygon_area(parcel_polygon),
        "regulationArea": polygon_area(envelope.regulation_polygon),
        "footprintArea": envelope.footprint_area,
        "cellCount": len(envelope.cells),
        "floorCount": envelope.floor_count,
        "volumeHeight": envelope.volume_height,
        "solarNorthZ": envelope.solar_north_z,
        "floors": floors,
        "largestRect": {
            "minX": rect.min_x,
            "maxX": rect.max_x,
            "minZ": rect.min_z,
            "maxZ": rect.max_z,
            "area": rect.area,
        },
    }
