"""
Entity and group membership endpoints.

Usage in server.py:
    from api.entity_router import entity_router
    app.include_router(entity_router, prefix="/api")
"""

import logging

from fastapi import APIRouter, Depends, Query

from api.auth import require_api_key
from api.context import get_request_context, get_services
from api.request_models import AddGroupMemberRequest, CreateEntityRequest, UpdateEntityRequest
from api.response_models import EntityOut, ListResponse, MutationResponse
from loadcal.app_services import Services
from loadcal.context import RequestContext

logger = logging.getLogger(__name__)

entity_router = APIRouter(tags=["Entities"])


@entity_router.get("/entities", response_model=ListResponse)
def list_entities(
    type: str | None = Query(None, description="person or group"),
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(get_request_context),
):
    """GET /api/entities - persons and groups, optionally filtered by type."""
    entities = services.entity_service.list_entities(type, ctx=ctx)
    return {"items": [e.to_dict() for e in entities], "total": len(entities)}


@entity_router.get("/entities/{entity_id}", response_model=EntityOut)
def get_entity(
    entity_id: str,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(get_request_context),
):
    return services.entity_service.get_entity(entity_id, ctx=ctx).to_dict()


@entity_router.post(
    "/entities", response_model=EntityOut, status_code=201, dependencies=[Depends(require_api_key)]
)
def create_entity(body: CreateEntityRequest, services: Services = Depends(get_services)):
    entity = services.entity_service.create_entity(
        body.id, body.title, body.type, employee_id=body.employee_id, default_capacity=body.default_capacity
    )
    return entity.to_dict()


@entity_router.put("/entities/{entity_id}", response_model=EntityOut, dependencies=[Depends(require_api_key)])
def update_entity(entity_id: str, body: UpdateEntityRequest, services: Services = Depends(get_services)):
    entity = services.entity_service.update_entity(
        entity_id, title=body.title, employee_id=body.employee_id, default_capacity=body.default_capacity
    )
    return entity.to_dict()


@entity_router.delete(
    "/entities/{entity_id}", response_model=MutationResponse, dependencies=[Depends(require_api_key)]
)
def delete_entity(entity_id: str, services: Services = Depends(get_services)):
    """Delete an entity. Memberships, overrides and assignments go with it."""
    services.entity_service.delete_entity(entity_id)
    return {"success": True, "id": entity_id}


# ==== Group members ====


@entity_router.get("/entities/{entity_id}/groups", response_model=ListResponse)
def list_person_groups(entity_id: str, services: Services = Depends(get_services)):
    """Group ids a person belongs to."""
    memberships = services.entity_service.person_groups(entity_id)
    return {"items": [m.group_id for m in memberships], "total": len(memberships)}


@entity_router.get("/groups/{group_id}/members", response_model=ListResponse)
def list_group_members(group_id: str, services: Services = Depends(get_services)):
    members = services.entity_service.group_members(group_id)
    return {"items": [m.to_dict() for m in members], "total": len(members)}


@entity_router.post(
    "/groups/{group_id}/members", response_model=MutationResponse, dependencies=[Depends(require_api_key)]
)
def add_group_member(group_id: str, body: AddGroupMemberRequest, services: Services = Depends(get_services)):
    added = services.entity_service.add_group_member(group_id, body.person_email)
    return {"success": True, "added": added}


@entity_router.delete(
    "/groups/{group_id}/members/{person_email}",
    response_model=MutationResponse,
    dependencies=[Depends(require_api_key)],
)
def remove_group_member(group_id: str, person_email: str, services: Services = Depends(get_services)):
    services.entity_service.remove_group_member(group_id, person_email)
    return {"success": True}
