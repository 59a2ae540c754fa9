"""Tests for placement compliance scoring."""

import pytest

from siteplan.regulations.compliance import (
    ComplianceChecker,
    ComplianceLevel,
    PlacementSummary,
    check_compliance,
    worst_level,
)
from siteplan.regulations.engine import ParcelInput, calculate_regulations


def summary(footprint=0.0, floor_area=0.0, height=0.0, floors=0, within=True, parcel_area=200.0):
    return PlacementSummary(
        total_footprint_area=footprint,
        total_floor_area=floor_area,
        max_height=height,
        max_floor=floors,
        all_within_boundary=within,
        parcel_area=parcel_area,
    )


@pytest.fixture
def r1_general():
    """200 m² first-class general residential: 60%, 200%, 15 m, 4 floors."""
    return calculate_regulations(ParcelInput(area=200, zone_type="ZONE_R1_GENERAL"))


class TestLevels:
    def test_worst_level(self):
        assert worst_level([]) is ComplianceLevel.OK
        assert worst_level([ComplianceLevel.OK, ComplianceLevel.WARNING]) is ComplianceLevel.WARNING
        assert worst_level([ComplianceLevel.VIOLATION, ComplianceLevel.WARNING]) is ComplianceLevel.VIOLATION

    def test_severity_order(self):
        assert ComplianceLevel.OK.severity < ComplianceLevel.WARNING.severity < ComplianceLevel.VIOLATION.severity


class TestCheck:
    def test_all_ok(self, r1_general):
        status = check_compliance(summary(60, 120, 6, 2), r1_general)
        assert status.overall is ComplianceLevel.OK
        assert status.messages == []
        assert status.is_compliant
        assert status.coverage_ratio.current == pytest.approx(30.0)
        assert status.floor_area_ratio.current == pytest.approx(60.0)

    def test_empty_placement_is_ok(self, r1_general):
        status = check_compliance(summary(), r1_general)
        assert status.overall is ComplianceLevel.OK

    def test_coverage_warning(self, r1_general):
        status = check_compliance(summary(110, 110, 3, 1), r1_general)
        assert status.coverage_ratio.level is ComplianceLevel.WARNING
        assert status.overall is ComplianceLevel.WARNING
        assert status.messages == ["건폐율 주의: 현재 55.0% / 허용 60% (92% 사용)"]

    def test_coverage_at_cap_is_warning(self, r1_general):
        status = check_compliance(summary(120, 120, 3, 1), r1_general)
        assert status.coverage_ratio.level is ComplianceLevel.WARNING
        assert status.coverage_ratio.usage == pytest.approx(1.0)

    def test_coverage_violation(self, r1_general):
        status = check_compliance(summary(130, 130, 3, 1), r1_general)
        assert status.coverage_ratio.level is ComplianceLevel.VIOLATION
        assert not status.is_compliant
        assert "건폐율 초과: 현재 65.0% / 허용 60%" in status.messages

    def test_floor_area_violation(self, r1_general):
        status = check_compliance(summary(100, 420, 12, 4), r1_general)
        assert status.floor_area_ratio.level is ComplianceLevel.VIOLATION
        assert "용적률 초과: 현재 210.0% / 허용 200%" in status.messages

    def test_height_violation(self, r1_general):
        status = check_compliance(summary(60, 120, 16, 2), r1_general)
        assert status.height.level is ComplianceLevel.VIOLATION
        assert "높이 초과: 현재 16m / 허용 15m" in status.messages

    def test_floor_warning(self, r1_general):
        status = check_compliance(summary(30, 120, 12, 4), r1_general)
        assert status.floors.level is ComplianceLevel.WARNING
        assert "층수 주의: 현재 4층 / 허용 4층" in status.messages

    def test_boundary_violation(self, r1_general):
        status = check_compliance(summary(10, 10, 3, 1, within=False), r1_general)
        assert status.boundary.level is ComplianceLevel.VIOLATION
        assert status.overall is ComplianceLevel.VIOLATION
        assert status.messages == [ComplianceChecker.BOUNDARY_MESSAGE]

    def test_messages_follow_metric_order(self, r1_general):
        status = check_compliance(summary(130, 500, 20, 6, within=False), r1_general)
        prefixes = [m.split()[0] for m in status.messages]
        assert prefixes == ["건폐율", "용적률", "높이", "층수", "건축한계선"]

    def test_zero_cap_always_ok(self):
        """Semi-industrial zones have no height or floor cap."""
        regulation = calculate_regulations(ParcelInput(area=500, zone_type="ZONE_I_SEMI"))
        status = check_compliance(summary(100, 500, 120, 40, parcel_area=500), regulation)
        assert status.height.level is ComplianceLevel.OK
        assert status.floors.level is ComplianceLevel.OK
        assert status.height.usage == 0.0

    def test_zero_parcel_area(self, r1_general):
        status = check_compliance(summary(50, 50, 3, 1, parcel_area=0), r1_general)
        assert status.coverage_ratio.current == 0.0
        assert status.floor_area_ratio.current == 0.0


class TestSerialization:
    def test_status_to_dict(self, r1_general):
        data = check_compliance(summary(110, 110, 3, 1), r1_general).to_dict()
        assert list(data) == [
            "overall", "coverageRatio", "floorAreaRatio", "height", "floors", "boundary", "messages",
        ]
        assert data["overall"] == "WARNING"
        assert data["coverageRatio"]["level"] == "WARNING"
        assert data["coverageRatio"]["max"] == 60
        assert data["boundary"] == {"allWithin": True, "level": "OK"}

    def test_summary_to_dict(self):
        data = summary(1, 2, 3, 4).to_dict()
        assert data == {
            "totalFootprintArea": 1,
            "totalFloorArea": 2,
            "maxHeight": 3,
            "maxFloor": 4,
            "allWithinBoundary": True,
            "parcelArea": 200.0,
        }
