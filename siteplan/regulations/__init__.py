"""Zoning regulations: zone table, limit engine, solar access and compliance."""

from .compliance import (
    ComplianceChecker,
    ComplianceLevel,
    ComplianceStatus,
    PlacementSummary,
    check_compliance,
)
from .engine import ParcelInput, RegulationEngine, RegulationResult, calculate_regulations
from .errors import InvalidParcelArea, InvalidZoneType, RegulationInputError
from .solar import applies_to_zone, solar_max_height, solar_max_z
from .zones import RESIDENTIAL_ZONES, ZONE_REGULATIONS, ZoneRegulation, ZoneType, get_zone_regulation

__all__ = [
    "ComplianceChecker",
    "ComplianceLevel",
    "ComplianceStatus",
    "InvalidParcelArea",
    "InvalidZoneType",
    "ParcelInput",
    "PlacementSummary",
    "RESIDENTIAL_ZONES",
    "RegulationEngine",
    "RegulationInputError",
    "RegulationResult",
    "ZONE_REGULATIONS",
    "ZoneRegulation",
    "ZoneType",
    "applies_to_zone",
    "calculate_regulations",
    "check_compliance",
    "get_zone_regulation",
    "solar_max_height",
    "solar_max_z",
]
