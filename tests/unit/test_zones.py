"""Tests for the zone regulation table."""

import dataclasses

import pytest

from siteplan.regulations.errors import InvalidZoneType
from siteplan.regulations.zones import (
    RESIDENTIAL_ZONES,
    ZONE_REGULATIONS,
    ZoneType,
    get_zone_regulation,
    is_known_zone,
)


class TestZoneTable:
    def test_every_zone_has_a_row(self):
        assert len(ZoneType) == 20
        assert set(ZONE_REGULATIONS) == set(ZoneType)

    @pytest.mark.parametrize("zone", list(ZoneType))
    def test_ratios_positive_and_setbacks_non_negative(self, zone):
        reg = ZONE_REGULATIONS[zone]
        assert reg.max_coverage_ratio > 0
        assert reg.max_floor_area_ratio > 0
        assert reg.max_height >= 0
        assert reg.max_floors >= 0
        assert reg.setback_front >= 0
        assert reg.setback_rear >= 0
        assert reg.setback_left >= 0
        assert reg.setback_right >= 0
        assert reg.name_ko

    def test_second_general_residential(self):
        reg = get_zone_regulation("ZONE_R2_GENERAL")
        assert reg.name_ko == "제2종일반주거지역"
        assert reg.max_coverage_ratio == 60
        assert reg.max_floor_area_ratio == 250
        assert reg.max_height == 21
        assert reg.max_floors == 7

    def test_industrial_zone_has_no_caps(self):
        reg = get_zone_regulation(ZoneType.ZONE_I_GENERAL)
        assert reg.max_height == 0
        assert reg.max_floors == 0

    def test_regulation_is_immutable(self):
        reg = get_zone_regulation(ZoneType.ZONE_R1_GENERAL)
        with pytest.raises(dataclasses.FrozenInstanceError):
            reg.max_coverage_ratio = 100


class TestZoneTypeParsing:
    def test_parse_string(self):
        assert ZoneType.parse("ZONE_C_CENTRAL") is ZoneType.ZONE_C_CENTRAL

    def test_parse_enum_passthrough(self):
        assert ZoneType.parse(ZoneType.ZONE_AGRICULTURE) is ZoneType.ZONE_AGRICULTURE

    def test_unknown_zone_raises(self):
        with pytest.raises(InvalidZoneType) as exc_info:
            ZoneType.parse("ZONE_MOON_BASE")
        assert exc_info.value.value == "ZONE_MOON_BASE"

    def test_unknown_zone_is_value_error(self):
        with pytest.raises(ValueError):
            get_zone_regulation("zone_r1_general")

    def test_is_known_zone(self):
        assert is_known_zone("ZONE_M_PLANNED")
        assert not is_known_zone("")
        assert not is_known_zone("ZONE_R4_GENERAL")


class TestResidentialZones:
    def test_five_residential_zones(self):
        assert RESIDENTIAL_ZONES == {
            ZoneType.ZONE_R1_EXCLUSIVE,
            ZoneType.ZONE_R2_EXCLUSIVE,
            ZoneType.ZONE_R1_GENERAL,
            ZoneType.ZONE_R2_GENERAL,
            ZoneType.ZONE_R3_GENERAL,
        }

    def test_semi_residential_excluded(self):
        assert ZoneType.ZONE_R_SEMI not in RESIDENTIAL_ZONES
