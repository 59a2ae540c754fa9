"""
Zone Regulation Table for SITEPLAN.

Static lookup of Korean land-use zones (용도지역) and the building bulk
limits each zone imposes:
- Coverage ratio (건폐율) and floor area ratio (용적률), in percent
- Height cap (m) and floor cap, where 0 means the zone sets no cap
- Setbacks from each parcel side (m)

Reference: National Land Planning and Utilization Act, Enforcement Decree
Articles 84-85 (upper limits), with municipal setback defaults.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Union

from .errors import InvalidZoneType


class ZoneType(Enum):
    """Korean land-use zone classification."""
    ZONE_R1_EXCLUSIVE = "ZONE_R1_EXCLUSIVE"
    ZONE_R2_EXCLUSIVE = "ZONE_R2_EXCLUSIVE"
    ZONE_R1_GENERAL = "ZONE_R1_GENERAL"
    ZONE_R2_GENERAL = "ZONE_R2_GENERAL"
    ZONE_R3_GENERAL = "ZONE_R3_GENERAL"
    ZONE_R_SEMI = "ZONE_R_SEMI"
    ZONE_C_CENTRAL = "ZONE_C_CENTRAL"
    ZONE_C_GENERAL = "ZONE_C_GENERAL"
    ZONE_C_NEIGHBORHOOD = "ZONE_C_NEIGHBORHOOD"
    ZONE_C_DISTRIBUTION = "ZONE_C_DISTRIBUTION"
    ZONE_I_EXCLUSIVE = "ZONE_I_EXCLUSIVE"
    ZONE_I_GENERAL = "ZONE_I_GENERAL"
    ZONE_I_SEMI = "ZONE_I_SEMI"
    ZONE_G_CONSERVATION = "ZONE_G_CONSERVATION"
    ZONE_G_PRODUCTION = "ZONE_G_PRODUCTION"
    ZONE_G_NATURAL = "ZONE_G_NATURAL"
    ZONE_M_CONSERVATION = "ZONE_M_CONSERVATION"
    ZONE_M_PRODUCTION = "ZONE_M_PRODUCTION"
    ZONE_M_PLANNED = "ZONE_M_PLANNED"
    ZONE_AGRICULTURE = "ZONE_AGRICULTURE"

    @classmethod
    def parse(cls, value: Union[str, "ZoneType"]) -> "ZoneType":
        """Resolve a zone type string (or enum) to ZoneType."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidZoneType(value) from None


@dataclass(frozen=True)
class ZoneRegulation:
    """Bulk limits for one zone type."""
    name_ko: str
    max_coverage_ratio: float  # %
    max_floor_area_ratio: float  # %
    max_height: float  # m, 0 = unlimited
    max_floors: int  # 0 = unlimited
    setback_front: float  # m
    setback_rear: float
    setback_left: float
    setback_right: float


def _reg(name_ko, coverage, far, height, floors, front, rear, left, right) -> ZoneRegulation:
    return ZoneRegulation(
        name_ko=name_ko,
        max_coverage_ratio=coverage,
        max_floor_area_ratio=far,
        max_height=height,
        max_floors=floors,
        setback_front=front,
        setback_rear=rear,
        setback_left=left,
        setback_right=right,
    )


ZONE_REGULATIONS: Dict[ZoneType, ZoneRegulation] = {
    # Residential
    ZoneType.ZONE_R1_EXCLUSIVE: _reg("제1종전용주거지역", 50, 100, 10, 2, 3, 2, 1, 1),
    ZoneType.ZONE_R2_EXCLUSIVE: _reg("제2종전용주거지역", 50, 150, 12, 3, 3, 2, 1, 1),
    ZoneType.ZONE_R1_GENERAL: _reg("제1종일반주거지역", 60, 200, 15, 4, 2, 1.5, 0.5, 0.5),
    ZoneType.ZONE_R2_GENERAL: _reg("제2종일반주거지역", 60, 250, 21, 7, 2, 1.5, 0.5, 0.5),
    ZoneType.ZONE_R3_GENERAL: _reg("제3종일반주거지역", 50, 300, 30, 10, 2, 1.5, 0.5, 0.5),
    ZoneType.ZONE_R_SEMI: _reg("준주거지역", 70, 500, 45, 15, 2, 1, 0.5, 0.5),
    # Commercial (no height cap, floor cap only)
    ZoneType.ZONE_C_CENTRAL: _reg("중심상업지역", 90, 1500, 0, 50, 0, 0, 0, 0),
    ZoneType.ZONE_C_GENERAL: _reg("일반상업지역", 80, 1300, 0, 40, 1, 0, 0, 0),
    ZoneType.ZONE_C_NEIGHBORHOOD: _reg("근린상업지역", 70, 900, 0, 25, 1, 0, 0, 0),
    ZoneType.ZONE_C_DISTRIBUTION: _reg("유통상업지역", 80, 1100, 0, 30, 1, 0, 0, 0),
    # Industrial (no height or floor cap)
    ZoneType.ZONE_I_EXCLUSIVE: _reg("전용공업지역", 70, 300, 0, 0, 3, 2, 1, 1),
    ZoneType.ZONE_I_GENERAL: _reg("일반공업지역", 70, 350, 0, 0, 2, 1.5, 1, 1),
    ZoneType.ZONE_I_SEMI: _reg("준공업지역", 70, 400, 0, 0, 2, 1, 0.5, 0.5),
    # Green
    ZoneType.ZONE_G_CONSERVATION: _reg("보전녹지지역", 20, 80, 10, 2, 5, 3, 2, 2),
    ZoneType.ZONE_G_PRODUCTION: _reg("생산녹지지역", 20, 100, 10, 2, 5, 3, 2, 2),
    ZoneType.ZONE_G_NATURAL: _reg("자연녹지지역", 20, 100, 10, 3, 5, 3, 2, 2),
    # Management
    ZoneType.ZONE_M_CONSERVATION: _reg("보전관리지역", 20, 80, 10, 2, 5, 3, 2, 2),
    ZoneType.ZONE_M_PRODUCTION: _reg("생산관리지역", 20, 100, 10, 2, 5, 3, 2, 2),
    ZoneType.ZONE_M_PLANNED: _reg("계획관리지역", 40, 100, 15, 3, 3, 2, 1, 1),
    # Agriculture
    ZoneType.ZONE_AGRICULTURE: _reg("농림지역", 20, 80, 10, 2, 5, 3, 2, 2),
}

# Zones subject to the north-boundary daylight (일조권) height limit
RESIDENTIAL_ZONES: FrozenSet[ZoneType] = frozenset({
    ZoneType.ZONE_R1_EXCLUSIVE,
    ZoneType.ZONE_R2_EXCLUSIVE,
    ZoneType.ZONE_R1_GENERAL,
    ZoneType.ZONE_R2_GENERAL,
    ZoneType.ZONE_R3_GENERAL,
})


def get_zone_regulation(zone: Union[str, ZoneType]) -> ZoneRegulation:
    """
    Look up the regulation constants for a zone.

    Args:
        zone: ZoneType or its string value (e.g. "ZONE_R2_GENERAL")

    Returns:
        ZoneRegulation for the zone

    Raises:
        InvalidZoneType: if the zone is not in the table
    """
    return ZONE_REGULATIONS[ZoneType.parse(zone)]


def is_known_zone(value: str) -> bool:
    """Check a zone type string without raising."""
    try:
        ZoneType.parse(value)
    except InvalidZoneType:
        return False
    return True
