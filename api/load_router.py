"""
Load ingestion and assignee endpoints.

The upsert endpoints are what upstream integrations call; they are keyed by
external_id so replays are idempotent.
"""

import logging

from fastapi import APIRouter, Depends, Query

from api.auth import require_api_key
from api.context import get_request_context, get_services
from api.request_models import AddAssigneesRequest, UpsertLoadByEmployeeIdRequest, UpsertLoadRequest
from api.response_models import ListResponse, LoadWithAssignmentsOut, MutationResponse, UpsertLoadResponse
from loadcal.app_services import Services
from loadcal.context import RequestContext
from loadcal.dates import parse_date
from loadcal.services import AssigneeInput, UpsertLoadCommand

logger = logging.getLogger(__name__)

load_router = APIRouter(tags=["Loads"])


@load_router.post("/loads/upsert", response_model=UpsertLoadResponse, dependencies=[Depends(require_api_key)])
def upsert_load(body: UpsertLoadRequest, services: Services = Depends(get_services)):
    """POST /api/loads/upsert - assignees by email."""
    cmd = UpsertLoadCommand(
        external_id=body.external_id,
        title=body.title,
        date=body.date,
        source=body.source,
        url=body.url,
        assignees=[AssigneeInput(key=a.email, weight=a.weight) for a in body.assignees],
    )
    return {"success": True, "load_id": services.load_service.upsert_load(cmd)}


@load_router.post(
    "/loads/upsert-by-employee-id", response_model=UpsertLoadResponse, dependencies=[Depends(require_api_key)]
)
def upsert_load_by_employee_id(body: UpsertLoadByEmployeeIdRequest, services: Services = Depends(get_services)):
    """POST /api/loads/upsert-by-employee-id - assignees must already exist."""
    cmd = UpsertLoadCommand(
        external_id=body.external_id,
        title=body.title,
        date=body.date,
        source=body.source,
        url=body.url,
        assignees=[AssigneeInput(key=a.employee_id, weight=a.weight) for a in body.assignees],
    )
    return {"success": True, "load_id": services.load_service.upsert_load_by_employee_id(cmd)}


@load_router.get("/loads", response_model=ListResponse)
def list_loads(
    start: str = Query(..., description="YYYY-MM-DD"),
    end: str = Query(..., description="YYYY-MM-DD"),
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(get_request_context),
):
    loads = services.load_service.loads_in_range(parse_date(start), parse_date(end), ctx=ctx)
    return {"items": [lw.to_dict() for lw in loads], "total": len(loads)}


@load_router.get("/loads/{load_id}", response_model=LoadWithAssignmentsOut)
def get_load(
    load_id: int,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(get_request_context),
):
    return services.load_service.get_load(load_id, ctx=ctx).to_dict()


@load_router.delete("/loads/{load_id}", response_model=MutationResponse, dependencies=[Depends(require_api_key)])
def delete_load(load_id: int, services: Services = Depends(get_services)):
    services.load_service.delete_load(load_id)
    return {"success": True, "id": load_id}


@load_router.post(
    "/loads/{load_id}/assignees", response_model=LoadWithAssignmentsOut, dependencies=[Depends(require_api_key)]
)
def add_assignees(load_id: int, body: AddAssigneesRequest, services: Services = Depends(get_services)):
    assignees = [AssigneeInput(key=a.email, weight=a.weight) for a in body.assignees]
    return services.load_service.add_assignees(load_id, assignees).to_dict()


@load_router.delete(
    "/loads/{load_id}/assignees/{person_email}",
    response_model=MutationResponse,
    dependencies=[Depends(require_api_key)],
)
def remove_assignee(load_id: int, person_email: str, services: Services = Depends(get_services)):
    services.load_service.remove_assignee(load_id, person_email)
    return {"success": True}
