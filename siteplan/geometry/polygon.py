"""
2D polygon algorithms in parcel-local meters.

Coordinates are (x, z) with x pointing east and z pointing north, relative
to the parcel centroid. Polygons are simple rings without a closing
duplicate vertex; winding may be either direction.

Every function here is total: degenerate input (fewer than 3 points,
non-finite coordinates, empty bounding box) yields an empty or zero result
instead of an exception, so interactive rendering never breaks on noisy
cadastral geometry.
"""

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Cross-product magnitude below which two offset edges count as parallel
PARALLEL_EPSILON = 1e-10

DEFAULT_RECT_STEPS = 60
MAX_RECT_STEPS = 400


@dataclass(frozen=True)
class LocalPoint:
    """Point in meters relative to the parcel centroid."""
    x: float
    z: float


Polygon = List[LocalPoint]


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in local meters."""
    min_x: float
    max_x: float
    min_z: float
    max_z: float

    @property
    def width(self) -> float:
        return max(0.0, self.max_x - self.min_x)

    @property
    def depth(self) -> float:
        return max(0.0, self.max_z - self.min_z)

    @property
    def area(self) -> float:
        return self.width * self.depth

    @classmethod
    def empty(cls) -> "Rect":
        return cls(0.0, 0.0, 0.0, 0.0)


def _is_usable(polygon: Sequence[LocalPoint]) -> bool:
    """At least a triangle with finite coordinates."""
    if len(polygon) < 3:
        return False
    return all(math.isfinite(p.x) and math.isfinite(p.z) for p in polygon)


def polygon_signed_area(polygon: Sequence[LocalPoint]) -> float:
    """
    Shoelace area; positive for counter-clockwise winding in the x/z plane.

    Returns 0.0 for degenerate polygons.
    """
    if not _is_usable(polygon):
        return 0.0

    area = 0.0
    n = len(polygon)
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i].x * polygon[j].z - polygon[j].x * polygon[i].z
    return area / 2


def polygon_area(polygon: Sequence[LocalPoint]) -> float:
    """Absolute polygon area in m²."""
    return abs(polygon_signed_area(polygon))


def polygon_bounds(polygon: Sequence[LocalPoint]) -> Optional[Rect]:
    """Axis-aligned bounding box, or None for an empty or non-finite polygon."""
    if not polygon:
        return None
    if not all(math.isfinite(p.x) and math.isfinite(p.z) for p in polygon):
        return None
    return Rect(
        min_x=min(p.x for p in polygon),
        max_x=max(p.x for p in polygon),
        min_z=min(p.z for p in polygon),
        max_z=max(p.z for p in polygon),
    )


def polygon_inset(polygon: Sequence[LocalPoint], distance: float) -> Polygon:
    """
    Shrink a polygon inward by a uniform distance (setback).

    Each edge is translated along its inward normal, then consecutive
    offset edges are intersected to form the new vertices. The normal sign
    follows the winding, so the result shrinks for either orientation.

    Parallel consecutive offset edges fall back to the midpoint of their
    two offset points. This approximates a true polygon erosion and can
    distort very acute or strongly concave shapes; it is adequate for
    near-rectangular parcels.

    Args:
        polygon: Simple polygon
        distance: Inset distance in meters

    Returns:
        Inset polygon; the input unchanged (as a new list) when
        distance <= 0 or the polygon has fewer than 3 points, and an empty
        list for non-finite input
    """
    if len(polygon) < 3 or not distance > 0:
        return list(polygon)
    if not _is_usable(polygon) or not math.isfinite(distance):
        logger.warning("Cannot inset polygon with non-finite coordinates")
        return []

    sign = 1.0 if polygon_signed_area(polygon) > 0 else -1.0

    # Offset line per edge: (point on line, direction)
    offset_edges: List[Tuple[float, float, float, float]] = []
    n = len(polygon)
    for i in range(n):
        j = (i + 1) % n
        ex = polygon[j].x - polygon[i].x
        ez = polygon[j].z - polygon[i].z
        length = math.hypot(ex, ez)
        if length == 0:
            continue

        # Inward normal (left of direction for CCW)
        nx = sign * (-ez / length)
        nz = sign * (ex / length)

        offset_edges.append((
            polygon[i].x + nx * distance,
            polygon[i].z + nz * distance,
            ex,
            ez,
        ))

    m = len(offset_edges)
    if m < 3:
        return []

    result: Polygon = []
    for i in range(m):
        p1x, p1z, d1x, d1z = offset_edges[i]
        p2x, p2z, d2x, d2z = offset_edges[(i + 1) % m]

        denom = d1x * d2z - d1z * d2x
        if abs(denom) < PARALLEL_EPSILON:
            result.append(LocalPoint((p1x + p2x) / 2, (p1z + p2z) / 2))
        else:
            t = ((p2x - p1x) * d2z - (p2z - p1z) * d2x) / denom
            result.append(LocalPoint(p1x + t * d1x, p1z + t * d1z))

    return result


def point_in_polygon(point: LocalPoint, polygon: Sequence[LocalPoint]) -> bool:
    """
    Check if point is inside polygon using ray casting.

    Edges are half-open in z so a ray through a shared vertex is counted
    once.

    Args:
        point: Point to test
        polygon: Polygon vertices

    Returns:
        True if point is inside polygon
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    j = n - 1
    for i in range(n):
        pi = polygon[i]
        pj = polygon[j]

        if ((pi.z > point.z) != (pj.z > point.z)) and \
           (point.x < (pj.x - pi.x) * (point.z - pi.z) / (pj.z - pi.z) + pi.x):
            inside = not inside

        j = i

    return inside


def is_rect_in_polygon(
    x: float,
    z: float,
    width: float,
    depth: float,
    polygon: Sequence[LocalPoint],
) -> bool:
    """
    Check that all four corners of an axis-aligned rectangle are inside.

    Edge crossings through concave notches are not detected; rectangles
    come from the rasterized grid, whose cells already respect the
    polygon boundary.

    Args:
        x, z: Minimum corner (south-west) of the rectangle
        width, depth: Extent along x and z
        polygon: Buildable polygon
    """
    corners = (
        LocalPoint(x, z),
        LocalPoint(x + width, z),
        LocalPoint(x + width, z + depth),
        LocalPoint(x, z + depth),
    )
    return all(point_in_polygon(c, polygon) for c in corners)


def _pair_crossings(crossings: List[float], lo: float, hi: float) -> List[Tuple[float, float]]:
    """Pair sorted crossings [0,1], [2,3], ... into clamped interior segments."""
    crossings.sort()
    segments = []
    for i in range(0, len(crossings) - 1, 2):
        start = max(crossings[i], lo)
        end = min(crossings[i + 1], hi)
        if start < end:
            segments.append((start, end))
    return segments


def clip_horizontal_line(
    z: float,
    x_min: float,
    x_max: float,
    polygon: Sequence[LocalPoint],
) -> List[Tuple[float, float]]:
    """
    Clip the horizontal line at z to the polygon interior.

    Requires a simple polygon (even crossing count); the result on a
    self-intersecting ring is undefined.

    Returns:
        Ascending (start_x, end_x) segments clamped to [x_min, x_max]
    """
    crossings: List[float] = []
    n = len(polygon)
    if n < 3:
        return []

    j = n - 1
    for i in range(n):
        pi = polygon[i]
        pj = polygon[j]
        if (pi.z <= z < pj.z) or (pj.z <= z < pi.z):
            crossings.append(pi.x + (z - pi.z) / (pj.z - pi.z) * (pj.x - pi.x))
        j = i

    return _pair_crossings(crossings, x_min, x_max)


def clip_vertical_line(
    x: float,
    z_min: float,
    z_max: float,
    polygon: Sequence[LocalPoint],
) -> List[Tuple[float, float]]:
    """
    Clip the vertical line at x to the polygon interior.

    Returns:
        Ascending (start_z, end_z) segments clamped to [z_min, z_max]
    """
    crossings: List[float] = []
    n = len(polygon)
    if n < 3:
        return []

    j = n - 1
    for i in range(n):
        pi = polygon[i]
        pj = polygon[j]
        if (pi.x <= x < pj.x) or (pj.x <= x < pi.x):
            crossings.append(pi.z + (x - pi.x) / (pj.x - pi.x) * (pj.z - pi.z))
        j = i

    return _pair_crossings(crossings, z_min, z_max)


def max_inscribed_rect(
    polygon: Sequence[LocalPoint],
    steps: int = DEFAULT_RECT_STEPS,
    max_steps: int = MAX_RECT_STEPS,
) -> Rect:
    """
    Approximate the largest axis-aligned rectangle inside a polygon.

    Samples steps + 1 horizontal rows over the z range and clips each row
    to the polygon, keeping every interior segment so concave shapes with
    several segments per row are handled. For each segment of each start
    row the rectangle is grown row by row to the south-north, narrowing to
    every overlapping segment of the next row as a separate branch, and
    the largest candidate wins. This is a sampled heuristic whose
    accuracy grows with steps at quadratic cost.

    Args:
        polygon: Simple polygon
        steps: Number of row intervals to sample
        max_steps: Upper bound applied to steps

    Returns:
        Best rectangle, or Rect.empty() for degenerate input
    """
    if not _is_usable(polygon):
        return Rect.empty()

    bounds = polygon_bounds(polygon)
    if bounds is None or bounds.width <= 0 or bounds.depth <= 0:
        return Rect.empty()

    if steps > max_steps:
        logger.warning(f"Inscribed-rectangle steps {steps} clamped to {max_steps}")
        steps = max_steps
    steps = max(1, int(steps))

    dz = (bounds.max_z - bounds.min_z) / steps
    rows: List[Tuple[float, List[Tuple[float, float]]]] = []
    for i in range(steps + 1):
        z = bounds.min_z + i * dz
        segments = clip_horizontal_line(z, bounds.min_x, bounds.max_x, polygon)
        rows.append((z, segments))

    best = Rect.empty()
    best_area = 0.0

    for i, (z_start, start_segments) in enumerate(rows):
        for segment in start_segments:
            # Every interval still open from this start segment
            frontier = [segment]
            for j in range(i + 1, len(rows)):
                z_end, segments = rows[j]
                frontier = _overlaps(frontier, segments)
                if not frontier:
                    break
                for left, right in frontier:
                    area = (right - left) * (z_end - z_start)
                    if area > best_area:
                        best_area = area
                        best = Rect(min_x=left, max_x=right, min_z=z_start, max_z=z_end)

    return best


def _overlaps(
    intervals: List[Tuple[float, float]],
    segments: List[Tuple[float, float]],
) -> List[Tuple[float, float]]:
    """Non-empty intersections of each interval with each of the row's segments."""
    result = []
    for left, right in intervals:
        for seg_left, seg_right in segments:
            lo = max(left, seg_left)
            hi = min(right, seg_right)
            if hi > lo:
                result.append((lo, hi))
    return result


def compute_buildable_polygon(
    parcel: Sequence[LocalPoint],
    setback_front: float,
    setback_rear: float,
    setback_left: float,
    setback_right: float,
) -> Polygon:
    """
    Apply per-side setbacks to an axis-aligned rectangular parcel.

    Front is the south side (min z), rear the north side (max z), left the
    west side (min x) and right the east side (max x). The parcel's
    bounding box stands in for the parcel, so this is only exact for
    rectangles aligned with the axes.

    Returns:
        Counter-clockwise rectangle, or [] if the setbacks consume the parcel
    """
    if not _is_usable(parcel):
        return []

    bounds = polygon_bounds(parcel)
    inner_min_x = bounds.min_x + setback_left
    inner_max_x = bounds.max_x - setback_right
    inner_min_z = bounds.min_z + setback_front
    inner_max_z = bounds.max_z - setback_rear

    if inner_min_x >= inner_max_x or inner_min_z >= inner_max_z:
        return []

    return [
        LocalPoint(inner_min_x, inner_min_z),
        LocalPoint(inner_max_x, inner_min_z),
        LocalPoint(inner_max_x, inner_max_z),
        LocalPoint(inner_min_x, inner_max_z),
    ]


def polygon_centroid(polygon: Sequence[LocalPoint]) -> Optional[LocalPoint]:
    """Vertex average of the polygon."""
    if not polygon:
        return None
    n = len(polygon)
    return LocalPoint(sum(p.x for p in polygon) / n, sum(p.z for p in polygon) / n)


def scale_polygon(polygon: Sequence[LocalPoint], factor: float) -> Polygon:
    """Scale vertices toward the vertex centroid by a linear factor."""
    center = polygon_centroid(polygon)
    if center is None:
        return []
    return [
        LocalPoint(center.x + (p.x - center.x) * factor, center.z + (p.z - center.z) * factor)
        for p in polygon
    ]


class InsetCache:
    """
    Caller-owned memo of polygon_inset results.

    Keyed by (polygon vertices, distance) with LRU eviction. Not shared
    between callers; create one per editing session.

    Usage:
        cache = InsetCache(max_size=64)
        regulation_polygon = cache.inset(parcel_polygon, 1.0)
    """

    def __init__(self, max_size: int = 128):
        self.max_size = max_size
        self._entries: "OrderedDict[Tuple[Tuple[LocalPoint, ...], float], Tuple[LocalPoint, ...]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def inset(self, polygon: Sequence[LocalPoint], distance: float) -> Polygon:
        key = (tuple(polygon), distance)
        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            self.hits += 1
            return list(cached)

        self.misses += 1
        result = polygon_inset(polygon, distance)
        self._entries[key] = tuple(result)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)
        return result

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
