"""
Parcel geometry: coordinate conversion, polygon algorithms and the
construction grid.
"""

from .coords import geojson_ring_to_local, local_to_wgs84, ring_centroid, wgs84_to_local
from .grid import (
    CellSet,
    GridBounds,
    GridLine,
    RowSpan,
    cells_boundary_edges,
    cells_bounds,
    cells_outside,
    cells_to_row_spans,
    clip_cells_north,
    floor_to_world_y,
    grid_cells_in_polygon,
    grid_lines_in_polygon,
    grid_to_world,
    occupied_cells,
    pack_cell,
    rotated_dimensions,
    snap_to_grid,
    unpack_cell,
    world_to_grid,
)
from .polygon import (
    InsetCache,
    LocalPoint,
    Polygon,
    Rect,
    clip_horizontal_line,
    clip_vertical_line,
    compute_buildable_polygon,
    is_rect_in_polygon,
    max_inscribed_rect,
    point_in_polygon,
    polygon_area,
    polygon_bounds,
    polygon_centroid,
    polygon_inset,
    polygon_signed_area,
    scale_polygon,
)

__all__ = [
    "CellSet",
    "GridBounds",
    "GridLine",
    "InsetCache",
    "LocalPoint",
    "Polygon",
    "Rect",
    "RowSpan",
    "cells_boundary_edges",
    "cells_bounds",
    "cells_outside",
    "cells_to_row_spans",
    "clip_cells_north",
    "clip_horizontal_line",
    "clip_vertical_line",
    "compute_buildable_polygon",
    "floor_to_world_y",
    "geojson_ring_to_local",
    "grid_cells_in_polygon",
    "grid_lines_in_polygon",
    "grid_to_world",
    "is_rect_in_polygon",
    "local_to_wgs84",
    "max_inscribed_rect",
    "occupied_cells",
    "pack_cell",
    "point_in_polygon",
    "polygon_area",
    "polygon_bounds",
    "polygon_centroid",
    "polygon_inset",
    "polygon_signed_area",
    "ring_centroid",
    "rotated_dimensions",
    "scale_polygon",
    "snap_to_grid",
    "unpack_cell",
    "wgs84_to_local",
]
