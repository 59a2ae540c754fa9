"""
Solar access (일조권) height limit for residential zones.

Buildings in residential zones may rise vertically to 9 m at the north
setback line. Above that the allowed height grows 2 m for every meter of
distance south of the line (a 2:1 slope), so upper floors step back from
the north side.

Reference: Building Act Enforcement Decree Article 86.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Union

from siteplan.geometry.polygon import LocalPoint, clip_horizontal_line, polygon_bounds

from .zones import RESIDENTIAL_ZONES, ZoneType

logger = logging.getLogger(__name__)

# Height allowed directly at the north line (m)
BASE_HEIGHT_M = 9.0

# Height gained per meter of southward distance
SLOPE = 2.0

DEFAULT_SECTION_STEP_M = 0.3


@dataclass(frozen=True)
class EnvelopeSection:
    """East-west cross-section of the daylight plane at one z."""
    z: float
    height: float
    x_min: float
    x_max: float


def applies_to_zone(zone: Union[str, ZoneType]) -> bool:
    """True for the five residential zones subject to the north-line limit."""
    return ZoneType.parse(zone) in RESIDENTIAL_ZONES


def solar_max_height(distance: float) -> float:
    """
    Maximum legal height at a distance south of the north line.

    Args:
        distance: Meters measured south from the north setback line

    Returns:
        9 m at or north of the line, else 9 + 2 * distance
    """
    if distance <= 0:
        return BASE_HEIGHT_M
    return BASE_HEIGHT_M + SLOPE * distance


def solar_setback_distance(height: float) -> float:
    """Distance south of the north line needed to reach a given height."""
    return max(0.0, (height - BASE_HEIGHT_M) / SLOPE)


def solar_max_z(north_z: float, height: float) -> float:
    """Northernmost z a building part reaching `height` may occupy."""
    return north_z - solar_setback_distance(height)


def solar_envelope_sections(
    polygon: Sequence[LocalPoint],
    max_height: float,
    step: float = DEFAULT_SECTION_STEP_M,
) -> List[EnvelopeSection]:
    """
    Sample the sloped daylight plane over a buildable polygon.

    Sections run from the polygon's north edge southward until the plane
    reaches max_height (or the polygon's south edge). Rows that miss the
    polygon are skipped.

    Args:
        polygon: Buildable (setback) polygon
        max_height: Height of the building envelope (m)
        step: North-south sampling interval (m)

    Returns:
        Sections ordered north to south; empty when max_height <= 9 m or
        the polygon is degenerate
    """
    if max_height <= BASE_HEIGHT_M or not step > 0 or len(polygon) < 3:
        return []
    bounds = polygon_bounds(polygon)
    if bounds is None:
        return []

    north_z = bounds.max_z
    south_limit = max(north_z - solar_setback_distance(max_height), bounds.min_z)

    sections = []
    i = 0
    while True:
        z = north_z - i * step
        if z < south_limit - step:
            break
        i += 1

        height = min(solar_max_height(north_z - z), max_height)
        segments = clip_horizontal_line(z, bounds.min_x, bounds.max_x, polygon)
        if segments:
            sections.append(EnvelopeSection(z, height, segments[0][0], segments[-1][1]))

    logger.debug(f"Solar envelope: {len(sections)} sections below {max_height:.1f}m")
    return sections
