"""
Integration tests for the SITEPLAN API.

Exercises every router through the full middleware stack.
Fixtures (client) provided by tests/conftest.py.
"""

import json
import math

import pytest

# About 17.7 m east-west by 29.8 m north-south in Seoul
PARCEL_RING = [
    [127.02700, 37.49800],
    [127.02720, 37.49800],
    [127.02720, 37.49827],
    [127.02700, 37.49827],
    [127.02700, 37.49800],
]

STUDIO = {
    "id": "unit-3x6",
    "name": "Studio",
    "width": 3.0,
    "depth": 6.0,
    "height": 3.0,
    "gridWidth": 5,
    "gridDepth": 10,
}


# ============================================================================
# System Endpoint Tests
# ============================================================================

def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "SITEPLAN API"
    assert data["version"] == "0.1.0"
    assert data["status"] == "operational"


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["zones_loaded"] == 20
    assert "timestamp" in data


def test_request_id_echoed(client):
    response = client.get("/api/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"
    assert response.json()["request_id"] == "trace-123"


def test_request_id_generated(client):
    response = client.get("/")
    assert len(response.headers["X-Request-ID"]) == 36


def test_openapi_schema(client):
    response = client.get("/api/openapi.json")
    assert response.status_code == 200
    assert "/api/geometry/buildable" in response.json()["paths"]


# ============================================================================
# Regulation Endpoint Tests
# ============================================================================

def test_calculate_regulations(client):
    response = client.post(
        "/api/regulations/calculate",
        json={"area": 200, "zoneType": "ZONE_R1_GENERAL"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["zoneType"] == "ZONE_R1_GENERAL"
    assert data["zoneNameKo"] == "제1종일반주거지역"
    assert data["maxBuildingFootprint"] == pytest.approx(120.0)
    assert data["maxTotalFloorArea"] == pytest.approx(400.0)
    assert data["effectiveMaxFloors"] == 4


def test_calculate_with_dimensions(client):
    response = client.post(
        "/api/regulations/calculate",
        json={"area": 200, "zoneType": "ZONE_R1_EXCLUSIVE", "width": 10, "depth": 20},
    )
    assert response.status_code == 200
    assert response.json()["buildableArea"] == pytest.approx(120.0)


def test_calculate_accepts_snake_case(client):
    response = client.post(
        "/api/regulations/calculate",
        json={"area": 200, "zone_type": "ZONE_C_CENTRAL"},
    )
    assert response.status_code == 200
    assert response.json()["effectiveMaxFloors"] == 50


@pytest.mark.parametrize("area", [0, -10])
def test_calculate_rejects_non_positive_area(client, area):
    response = client.post(
        "/api/regulations/calculate",
        json={"area": area, "zoneType": "ZONE_R1_GENERAL"},
        headers={"X-Request-ID": "bad-area"},
    )
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "면적(area)은 0보다 큰 숫자여야 합니다."
    assert data["request_id"] == "bad-area"


def test_calculate_rejects_unknown_zone(client):
    response = client.post(
        "/api/regulations/calculate",
        json={"area": 200, "zoneType": "ZONE_MOON_BASE"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "유효하지 않은 용도지역(zoneType)입니다."


def test_calculate_missing_field(client):
    response = client.post("/api/regulations/calculate", json={"area": 200})
    assert response.status_code == 422
    assert response.json()["detail"]


def test_list_zones(client):
    response = client.get("/api/regulations/zones")
    assert response.status_code == 200
    zones = {z["zoneType"]: z for z in response.json()["zones"]}
    assert len(zones) == 20
    assert zones["ZONE_R1_EXCLUSIVE"]["solarAccess"] is True
    assert zones["ZONE_C_CENTRAL"]["solarAccess"] is False
    assert zones["ZONE_C_CENTRAL"]["maxHeight"] == 0


# ============================================================================
# Compliance Endpoint Tests
# ============================================================================

def test_compliance_check_ok(client):
    response = client.post("/api/compliance/check", json={
        "area": 200,
        "zoneType": "ZONE_R1_GENERAL",
        "summary": {
            "totalFootprintArea": 60,
            "totalFloorArea": 120,
            "maxHeight": 6,
            "maxFloor": 2,
            "allWithinBoundary": True,
            "parcelArea": 200,
        },
    })
    assert response.status_code == 200
    data = response.json()
    assert data["overall"] == "OK"
    assert data["messages"] == []


def test_compliance_check_violation(client):
    response = client.post("/api/compliance/check", json={
        "area": 200,
        "zoneType": "ZONE_R1_GENERAL",
        "summary": {
            "totalFootprintArea": 130,
            "totalFloorArea": 130,
            "maxHeight": 3,
            "maxFloor": 1,
            "allWithinBoundary": False,
            "parcelArea": 200,
        },
    })
    assert response.status_code == 200
    data = response.json()
    assert data["overall"] == "VIOLATION"
    assert data["coverageRatio"]["level"] == "VIOLATION"
    assert data["boundary"] == {"allWithin": False, "level": "VIOLATION"}
    assert len(data["messages"]) == 2


def test_compliance_check_negative_summary_rejected(client):
    response = client.post("/api/compliance/check", json={
        "area": 200,
        "zoneType": "ZONE_R1_GENERAL",
        "summary": {
            "totalFootprintArea": -1,
            "totalFloorArea": 0,
            "maxHeight": 0,
            "maxFloor": 0,
            "parcelArea": 200,
        },
    })
    assert response.status_code == 422


def test_placements_endpoint(client):
    response = client.post("/api/compliance/placements", json={
        "parcel": {"area": 200, "zoneType": "ZONE_R1_EXCLUSIVE", "width": 10, "depth": 20},
        "modules": [STUDIO],
        "placements": [
            {"moduleId": "unit-3x6", "gridX": 3, "gridZ": 6},
            {"moduleId": "unit-3x6", "gridX": 4, "gridZ": 9},
        ],
        "polygon": [
            {"x": 1, "z": 3}, {"x": 9, "z": 3}, {"x": 9, "z": 18}, {"x": 1, "z": 18},
        ],
    })
    assert response.status_code == 200
    data = response.json()
    assert data["summary"]["totalFloorArea"] == pytest.approx(36.0)
    assert data["summary"]["allWithinBoundary"] is True
    assert data["status"]["overall"] == "OK"
    assert data["collisions"] == [[0, 1]]


def test_placements_outside_boundary(client):
    response = client.post("/api/compliance/placements", json={
        "parcel": {"area": 200, "zoneType": "ZONE_R1_EXCLUSIVE", "width": 10, "depth": 20},
        "modules": [STUDIO],
        "placements": [{"moduleId": "unit-3x6", "gridX": 12, "gridZ": 6}],
        "polygon": [
            {"x": 1, "z": 3}, {"x": 9, "z": 3}, {"x": 9, "z": 18}, {"x": 1, "z": 18},
        ],
    })
    assert response.status_code == 200
    assert response.json()["status"]["boundary"]["level"] == "VIOLATION"


def test_placements_invalid_rotation(client):
    response = client.post("/api/compliance/placements", json={
        "parcel": {"area": 200, "zoneType": "ZONE_R1_EXCLUSIVE"},
        "modules": [STUDIO],
        "placements": [{"moduleId": "unit-3x6", "gridX": 0, "gridZ": 0, "rotation": 45}],
    })
    assert response.status_code == 422


def test_placements_grid_position_out_of_range(client):
    response = client.post("/api/compliance/placements", json={
        "parcel": {"area": 200, "zoneType": "ZONE_R1_EXCLUSIVE"},
        "modules": [STUDIO],
        "placements": [
            {"moduleId": "unit-3x6", "gridX": 0, "gridZ": 0},
            {"moduleId": "unit-3x6", "gridX": 2 ** 32, "gridZ": 0},
        ],
    })
    assert response.status_code == 422


def test_placements_module_too_large(client):
    response = client.post("/api/compliance/placements", json={
        "parcel": {"area": 200, "zoneType": "ZONE_R1_EXCLUSIVE"},
        "modules": [{**STUDIO, "gridWidth": 100_000, "gridDepth": 100_000}],
        "placements": [{"moduleId": "unit-3x6", "gridX": 0, "gridZ": 0}],
    })
    assert response.status_code == 422


# ============================================================================
# Geometry Endpoint Tests
# ============================================================================

def test_buildable_envelope(client):
    response = client.post("/api/geometry/buildable", json={
        "ring": PARCEL_RING,
        "zoneType": "ZONE_R1_GENERAL",
        "area": 500,
    })
    assert response.status_code == 200
    data = response.json()
    assert len(data["parcelPolygon"]) == 4
    assert data["parcelArea"] == pytest.approx(17.66 * 29.85, rel=0.01)
    assert data["regulationArea"] < data["parcelArea"]
    assert data["footprintArea"] == pytest.approx(300.0)
    assert data["floorCount"] == 3
    assert data["solarNorthZ"] is None
    assert data["cellCount"] > 0
    assert data["floors"][0]["cellCount"] == data["cellCount"]
    assert data["floors"][0]["rowSpans"]
    assert 0 < data["largestRect"]["area"] <= data["regulationArea"]


def test_buildable_envelope_setback_consumes_parcel(client):
    response = client.post("/api/geometry/buildable", json={
        "ring": PARCEL_RING,
        "zoneType": "ZONE_R1_GENERAL",
        "area": 500,
        "setback": 50,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["cellCount"] == 0
    assert data["floors"] == []
    assert data["largestRect"]["area"] == 0


def test_buildable_envelope_bad_ring(client):
    response = client.post("/api/geometry/buildable", json={
        "ring": [[127.0], [127.1, 37.5]],
        "zoneType": "ZONE_R1_GENERAL",
        "area": 500,
    })
    assert response.status_code == 422


def test_buildable_envelope_unknown_zone(client):
    response = client.post("/api/geometry/buildable", json={
        "ring": PARCEL_RING,
        "zoneType": "nope",
        "area": 500,
    })
    assert response.status_code == 400


@pytest.mark.parametrize("offset", [math.nan, math.inf])
def test_buildable_envelope_non_finite_offset(client, offset):
    body = json.dumps({
        "ring": PARCEL_RING,
        "zoneType": "ZONE_R1_GENERAL",
        "area": 500,
        "gridOffset": {"x": offset, "z": 0.0},
    })
    response = client.post(
        "/api/geometry/buildable",
        content=body,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 422
