"""Tests for engine and API settings."""

import pytest
from pydantic import ValidationError

from api.config import Settings as ApiSettings
from siteplan.config import (
    DEFAULT_FLOOR_HEIGHT_M,
    DEFAULT_GRID_SIZE_M,
    DEFAULT_MAX_GRID_CELLS,
    Settings,
    get_float,
    get_int,
)


class TestEnvHelpers:
    def test_get_float_invalid_falls_back(self, monkeypatch):
        monkeypatch.setenv("SITEPLAN_TEST_FLOAT", "abc")
        assert get_float("SITEPLAN_TEST_FLOAT", 1.5) == 1.5

    def test_blank_uses_default(self, monkeypatch):
        monkeypatch.setenv("SITEPLAN_TEST_FLOAT", "  ")
        assert get_float("SITEPLAN_TEST_FLOAT", 2.5) == 2.5

    def test_get_int(self, monkeypatch):
        monkeypatch.setenv("SITEPLAN_TEST_INT", "42")
        assert get_int("SITEPLAN_TEST_INT", 0) == 42
        monkeypatch.setenv("SITEPLAN_TEST_INT", "4.2")
        assert get_int("SITEPLAN_TEST_INT", 7) == 7


class TestEngineSettings:
    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SITEPLAN_GRID_SIZE_M", "1.2")
        monkeypatch.setenv("SITEPLAN_FLOOR_HEIGHT_M", "3.5")
        s = Settings()
        assert s.grid_size_m == 1.2
        assert s.floor_height_m == 3.5

    @pytest.mark.parametrize("var,attr,default", [
        ("SITEPLAN_GRID_SIZE_M", "grid_size_m", DEFAULT_GRID_SIZE_M),
        ("SITEPLAN_FLOOR_HEIGHT_M", "floor_height_m", DEFAULT_FLOOR_HEIGHT_M),
        ("SITEPLAN_MAX_GRID_CELLS", "max_grid_cells", DEFAULT_MAX_GRID_CELLS),
    ])
    def test_non_positive_values_replaced(self, monkeypatch, var, attr, default):
        monkeypatch.setenv(var, "0")
        assert getattr(Settings(), attr) == default

    def test_negative_setback_replaced(self, monkeypatch):
        monkeypatch.setenv("SITEPLAN_DEFAULT_SETBACK_M", "-2")
        assert Settings().default_setback_m == 1.0


class TestApiSettings:
    def test_cors_origins_list(self):
        s = ApiSettings(cors_origins="https://a.example, https://b.example,")
        assert s.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_is_production(self):
        assert ApiSettings(environment="Production", cors_origins="https://siteplan.example").is_production
        assert not ApiSettings(environment="development").is_production

    def test_production_rejects_localhost_origins(self):
        with pytest.raises(ValidationError):
            ApiSettings(environment="production", cors_origins="http://localhost:3000")

    def test_limits_must_be_positive(self):
        with pytest.raises(ValidationError):
            ApiSettings(max_rect_steps=0)

    def test_limits_from_environment(self, monkeypatch):
        monkeypatch.setenv("MAX_GRID_CELLS", "1000")
        assert ApiSettings().max_grid_cells == 1000
