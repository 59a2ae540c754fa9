"""
SITEPLAN API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import RegulationCalculateRequest, BuildableRequest, ...
"""

# Common
from .common import CamelModel, LocalPointModel, ParcelRequest  # noqa: F401

# Regulations
from .regulations import (  # noqa: F401
    RegulationCalculateRequest,
    RegulationResponse,
    ZoneInfo,
    ZoneListResponse,
)

# Compliance
from .compliance import (  # noqa: F401
    BoundaryMetricModel,
    ComplianceCheckRequest,
    ComplianceStatusResponse,
    GridOffsetModel,
    MetricModel,
    ModuleModel,
    PlacementCheckRequest,
    PlacementCheckResponse,
    PlacementModel,
    PlacementSummaryModel,
)

# Geometry
from .geometry import (  # noqa: F401
    BuildableRequest,
    BuildableResponse,
    FloorModel,
    RectModel,
    RowSpanModel,
)
