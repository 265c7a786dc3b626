"""
Shared Pydantic response models for API endpoints.

These give FastAPI the type information for accurate OpenAPI schemas.
Routers build plain dicts (via the domain objects' to_dict()) and let the
response_model validate them.

Usage:
    from api.response_models import HeatmapResponse

    @router.get("/heatmap/{entity_id}", response_model=HeatmapResponse)
    async def heatmap(...): ...
"""

from typing import Any

from pydantic import BaseModel, Field

# ==== Envelopes ====


class ListResponse(BaseModel):
    """Standard list endpoint response."""

    items: list[Any] = Field(default_factory=list, description="Result items")
    total: int = Field(description="Total count")


class MutationResponse(BaseModel):
    """Standard mutation result."""

    success: bool = Field(description="Whether the operation succeeded")

    model_config = {"extra": "allow"}


class ErrorResponse(BaseModel):
    error: str = Field(description="Human-readable message")
    error_code: str = Field(description="not_found | validation_failed | conflict | store_unavailable | ...")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    schema_version: int | None = None
    alerts_enabled: bool
    timestamp: str = Field(description="ISO timestamp")


# ==== Entities ====


class EntityOut(BaseModel):
    id: str
    title: str
    type: str = Field(description="person or group")
    employee_id: str | None = None
    default_capacity: float
    created_at: str | None = None


# ==== Heatmap ====


class HeatmapDayOut(BaseModel):
    date: str
    load: float
    capacity: float
    color: str = Field(description="Severity bucket name")
    color_hex: str


class MonthBlockDayOut(HeatmapDayOut):
    day: int
    is_today: bool


class MonthBlockOut(BaseModel):
    year: int
    month: int
    month_name: str
    days: list[MonthBlockDayOut]


class HeatmapResponse(BaseModel):
    entity: EntityOut
    start: str
    end: str
    days: list[HeatmapDayOut]
    months: list[MonthBlockOut] | None = None


# ==== Loads ====


class LoadOut(BaseModel):
    id: int
    external_id: str | None = None
    title: str
    source: str | None = None
    url: str | None = None
    date: str


class AssignmentOut(BaseModel):
    load_id: int | None = None
    person_email: str
    weight: float


class LoadWithAssignmentsOut(BaseModel):
    load: LoadOut
    assignments: list[AssignmentOut]


class DayDetailResponse(BaseModel):
    entity_id: str
    date: str
    loads: list[LoadWithAssignmentsOut]
    total_load: float
    capacity: float
    color: str
    color_hex: str


class UpsertLoadResponse(BaseModel):
    success: bool = True
    load_id: int


# ==== Capacity ====


class CapacityOverrideOut(BaseModel):
    entity_id: str
    date: str
    capacity: float


class CapacityInfoResponse(BaseModel):
    entity: EntityOut
    overrides: list[CapacityOverrideOut]
