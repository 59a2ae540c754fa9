"""
Regulation Engine.

Derives the legal building limits of a parcel from its zone type and size:
- Buildable area after per-side setbacks
- Maximum building footprint (coverage ratio)
- Maximum total floor area (floor area ratio)
- Effective floor cap (floor limit vs. height limit / floor height)

Parcel dimensions default to a square of equal area when the caller does
not know the real width and depth.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Union

from siteplan.config import DEFAULT_FLOOR_HEIGHT_M

from .errors import InvalidParcelArea
from .zones import ZONE_REGULATIONS, ZoneRegulation, ZoneType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParcelInput:
    """
    A parcel entering the engine.

    Construction validates the caller-side preconditions: the area must be
    positive and finite and the zone type must exist in the table. A zone
    type string is normalized to ZoneType.
    """
    area: float  # m²
    zone_type: ZoneType
    width: Optional[float] = None  # m
    depth: Optional[float] = None  # m

    def __post_init__(self):
        if isinstance(self.area, bool) or not isinstance(self.area, (int, float)):
            raise InvalidParcelArea(self.area)
        if not math.isfinite(self.area) or self.area <= 0:
            raise InvalidParcelArea(self.area)
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "zone_type", ZoneType.parse(self.zone_type))


@dataclass(frozen=True)
class RegulationResult:
    """Resolved zone constants plus limits derived for one parcel."""
    zone_type: ZoneType
    zone_regulation: ZoneRegulation
    buildable_area: float  # m² inside setbacks
    max_building_footprint: float  # m²
    max_total_floor_area: float  # m²
    effective_max_floors: int  # 0 = no cap from either height or floor limit

    @property
    def floors_unlimited(self) -> bool:
        """True when neither the height cap nor the floor cap applies."""
        reg = self.zone_regulation
        return reg.max_height <= 0 and reg.max_floors <= 0

    def to_dict(self) -> Dict[str, Union[str, float, int]]:
        """Flat record with the keys consumed by the map and builder clients."""
        reg = self.zone_regulation
        return {
            "zoneType": self.zone_type.value,
            "zoneNameKo": reg.name_ko,
            "maxCoverageRatio": reg.max_coverage_ratio,
            "maxFloorAreaRatio": reg.max_floor_area_ratio,
            "maxHeight": reg.max_height,
            "maxFloors": reg.max_floors,
            "setbackFront": reg.setback_front,
            "setbackRear": reg.setback_rear,
            "setbackLeft": reg.setback_left,
            "setbackRight": reg.setback_right,
            "buildableArea": self.buildable_area,
            "maxBuildingFootprint": self.max_building_footprint,
            "maxTotalFloorArea": self.max_total_floor_area,
            "effectiveMaxFloors": self.effective_max_floors,
        }


class RegulationEngine:
    """
    Calculator for zoning limits of a single parcel.

    Example usage:
        engine = RegulationEngine()
        result = engine.calculate(ParcelInput(area=200, zone_type="ZONE_R1_GENERAL"))
        print(result.max_building_footprint)  # 120.0
    """

    def __init__(self, floor_height_m: float = DEFAULT_FLOOR_HEIGHT_M):
        """
        Initialize regulation engine.

        Args:
            floor_height_m: Floor-to-floor height used to turn a height cap
                            into a floor count
        """
        if floor_height_m <= 0:
            raise ValueError(f"Floor height must be positive, got {floor_height_m}")
        self.floor_height_m = floor_height_m

    def calculate(self, parcel: ParcelInput) -> RegulationResult:
        """
        Calculate legal limits for a validated parcel.

        Args:
            parcel: ParcelInput (already validated on construction)

        Returns:
            RegulationResult with buildable area, footprint, floor area
            and floor limits
        """
        reg = ZONE_REGULATIONS[parcel.zone_type]

        side = math.sqrt(parcel.area)
        width = parcel.width if parcel.width is not None else side
        depth = parcel.depth if parcel.depth is not None else side

        inner_width = max(0.0, width - reg.setback_left - reg.setback_right)
        inner_depth = max(0.0, depth - reg.setback_front - reg.setback_rear)
        buildable_area = inner_width * inner_depth

        max_building_footprint = parcel.area * reg.max_coverage_ratio / 100
        max_total_floor_area = parcel.area * reg.max_floor_area_ratio / 100

        effective_max_floors = self._effective_max_floors(reg)

        logger.debug(
            f"{parcel.zone_type.value}: area={parcel.area:.1f}m² "
            f"buildable={buildable_area:.1f}m² floors={effective_max_floors}"
        )

        return RegulationResult(
            zone_type=parcel.zone_type,
            zone_regulation=reg,
            buildable_area=buildable_area,
            max_building_footprint=max_building_footprint,
            max_total_floor_area=max_total_floor_area,
            effective_max_floors=effective_max_floors,
        )

    def _effective_max_floors(self, reg: ZoneRegulation) -> int:
        """Smaller of the floor cap and the height cap in floors; 0 if neither applies."""
        floors_by_height = (
            math.floor(reg.max_height / self.floor_height_m) if reg.max_height > 0 else math.inf
        )
        floors_by_limit = reg.max_floors if reg.max_floors > 0 else math.inf

        if floors_by_height == math.inf and floors_by_limit == math.inf:
            return 0
        return int(min(floors_by_height, floors_by_limit))


_default_engine = RegulationEngine()


def calculate_regulations(parcel: ParcelInput) -> RegulationResult:
    """Calculate regulations with the default 3.0 m floor height."""
    return _default_engine.calculate(parcel)
