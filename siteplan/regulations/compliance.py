"""
Compliance Checker.

Scores the current module placement of a parcel against its regulation
result on every edit:
- Coverage ratio (건폐율) and floor area ratio (용적률) as percentages
- Building height (m) and floor count
- Whether every module sits inside the buildable boundary

Each metric is OK, WARNING (at or above 90% of the cap) or VIOLATION
(over the cap). A cap of 0 means the zone imposes none and always passes.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .engine import RegulationResult

logger = logging.getLogger(__name__)


class ComplianceLevel(Enum):
    """Verdict for one metric; later members are worse."""
    OK = "OK"
    WARNING = "WARNING"
    VIOLATION = "VIOLATION"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    ComplianceLevel.OK: 0,
    ComplianceLevel.WARNING: 1,
    ComplianceLevel.VIOLATION: 2,
}


@dataclass(frozen=True)
class PlacementSummary:
    """Aggregated state of all placed modules on a parcel."""
    total_footprint_area: float  # m², largest single-floor footprint
    total_floor_area: float  # m², all floors
    max_height: float  # m
    max_floor: int
    all_within_boundary: bool
    parcel_area: float  # m²

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFootprintArea": self.total_footprint_area,
            "totalFloorArea": self.total_floor_area,
            "maxHeight": self.max_height,
            "maxFloor": self.max_floor,
            "allWithinBoundary": self.all_within_boundary,
            "parcelArea": self.parcel_area,
        }


@dataclass(frozen=True)
class ComplianceMetric:
    """Current value against its cap."""
    current: float
    max: float
    level: ComplianceLevel

    @property
    def usage(self) -> float:
        """Fraction of the cap in use; 0 when there is no cap."""
        if self.max <= 0:
            return 0.0
        return self.current / self.max

    def to_dict(self) -> Dict[str, Any]:
        return {"current": self.current, "max": self.max, "level": self.level.value}


@dataclass(frozen=True)
class BoundaryMetric:
    all_within: bool
    level: ComplianceLevel

    def to_dict(self) -> Dict[str, Any]:
        return {"allWithin": self.all_within, "level": self.level.value}


@dataclass(frozen=True)
class ComplianceStatus:
    """Overall verdict, per-metric results and user-facing messages."""
    overall: ComplianceLevel
    coverage_ratio: ComplianceMetric
    floor_area_ratio: ComplianceMetric
    height: ComplianceMetric
    floors: ComplianceMetric
    boundary: BoundaryMetric
    messages: List[str] = field(default_factory=list)

    @property
    def is_compliant(self) -> bool:
        return self.overall is not ComplianceLevel.VIOLATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": self.overall.value,
            "coverageRatio": self.coverage_ratio.to_dict(),
            "floorAreaRatio": self.floor_area_ratio.to_dict(),
            "height": self.height.to_dict(),
            "floors": self.floors.to_dict(),
            "boundary": self.boundary.to_dict(),
            "messages": list(self.messages),
        }


def _format_number(value: float) -> str:
    """Integral values without a decimal point, others as-is."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def worst_level(levels) -> ComplianceLevel:
    """Most severe level; OK for an empty sequence."""
    return max(levels, key=lambda level: level.severity, default=ComplianceLevel.OK)


class ComplianceChecker:
    """
    Stateless checker of placements against zoning limits.

    Messages are Korean since they are shown directly in the builder's
    status bar.

    Example usage:
        checker = ComplianceChecker()
        status = checker.check(summary, regulation_result)
        if status.overall is ComplianceLevel.VIOLATION:
            print("\\n".join(status.messages))
    """

    # Usage fraction at which a metric turns WARNING
    WARNING_THRESHOLD = 0.9

    BOUNDARY_MESSAGE = "건축한계선 위반: 일부 모듈이 건축 가능 영역을 벗어났습니다"

    def check(self, summary: PlacementSummary, regulation: RegulationResult) -> ComplianceStatus:
        """
        Evaluate all five metrics.

        Args:
            summary: Current placement summary
            regulation: Limits for the parcel

        Returns:
            ComplianceStatus with the worst metric level as overall
        """
        reg = regulation.zone_regulation
        messages: List[str] = []

        if summary.parcel_area > 0:
            current_coverage = summary.total_footprint_area / summary.parcel_area * 100
            current_far = summary.total_floor_area / summary.parcel_area * 100
        else:
            current_coverage = 0.0
            current_far = 0.0

        coverage_level = self.check_ratio(current_coverage, reg.max_coverage_ratio, "건폐율", messages)
        far_level = self.check_ratio(current_far, reg.max_floor_area_ratio, "용적률", messages)
        height_level = self.check_value(summary.max_height, reg.max_height, "높이", "m", messages)
        floor_level = self.check_value(
            summary.max_floor, regulation.effective_max_floors, "층수", "층", messages
        )

        if summary.all_within_boundary:
            boundary_level = ComplianceLevel.OK
        else:
            boundary_level = ComplianceLevel.VIOLATION
            messages.append(self.BOUNDARY_MESSAGE)

        overall = worst_level([coverage_level, far_level, height_level, floor_level, boundary_level])

        if overall is not ComplianceLevel.OK:
            logger.debug(f"Compliance {overall.value}: {len(messages)} message(s)")

        return ComplianceStatus(
            overall=overall,
            coverage_ratio=ComplianceMetric(current_coverage, reg.max_coverage_ratio, coverage_level),
            floor_area_ratio=ComplianceMetric(current_far, reg.max_floor_area_ratio, far_level),
            height=ComplianceMetric(summary.max_height, reg.max_height, height_level),
            floors=ComplianceMetric(summary.max_floor, regulation.effective_max_floors, floor_level),
            boundary=BoundaryMetric(summary.all_within_boundary, boundary_level),
            messages=messages,
        )

    def check_ratio(self, current: float, maximum: float, label: str, messages: List[str]) -> ComplianceLevel:
        """Classify a percentage metric, appending a message unless OK."""
        if maximum <= 0:
            return ComplianceLevel.OK

        ratio = current / maximum
        limit = _format_number(maximum)
        if ratio > 1:
            messages.append(f"{label} 초과: 현재 {current:.1f}% / 허용 {limit}%")
            return ComplianceLevel.VIOLATION
        if ratio >= self.WARNING_THRESHOLD:
            messages.append(
                f"{label} 주의: 현재 {current:.1f}% / 허용 {limit}% ({ratio * 100:.0f}% 사용)"
            )
            return ComplianceLevel.WARNING
        return ComplianceLevel.OK

    def check_value(
        self,
        current: float,
        maximum: float,
        label: str,
        unit: str,
        messages: List[str],
    ) -> ComplianceLevel:
        """Classify an absolute metric, appending a message unless OK."""
        if maximum <= 0:
            return ComplianceLevel.OK

        now = _format_number(current)
        limit = _format_number(maximum)
        if current > maximum:
            messages.append(f"{label} 초과: 현재 {now}{unit} / 허용 {limit}{unit}")
            return ComplianceLevel.VIOLATION
        if current >= maximum * self.WARNING_THRESHOLD:
            messages.append(f"{label} 주의: 현재 {now}{unit} / 허용 {limit}{unit}")
            return ComplianceLevel.WARNING
        return ComplianceLevel.OK


_default_checker = ComplianceChecker()


def check_compliance(summary: PlacementSummary, regulation: RegulationResult) -> ComplianceStatus:
    """Check compliance with the default checker."""
    return _default_checker.check(summary, regulation)
